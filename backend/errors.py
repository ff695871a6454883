# backend/errors.py
from flask import jsonify, request

ERROR_MESSAGES = {
    "NOT_FOUND": "The requested resource could not be found.",
    "INVALID_CREDENTIALS": "Invalid email or password",
    "INVALID_INPUT": "The request contains invalid data.",
    "MISSING_REQUIRED_FIELDS": "Required fields are missing.",
    "EMAIL_EXISTS": "Email already exists",
    "TOKEN_NOT_FOUND": "Token not found.",
    "INVALID_TOKEN": "Invalid token.",
    "EXPIRED_TOKEN": "Token expired.",
}


def error_response(message, code, error=None, **extra):
    """JSON error envelope: {message, error?} plus any extra keys, with HTTP status `code`."""
    body = {"message": message}
    if error is not None:
        body["error"] = str(error)
    body.update(extra)
    return jsonify(body), code


def json_body():
    """The request's JSON object, {} when there is no body, None when it is not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def text_fields(data, *keys):
    """String values for keys. Missing or null become ''. Returns None if any is not a string."""
    values = []
    for key in keys:
        value = data.get(key)
        if value is None:
            value = ''
        if not isinstance(value, str):
            return None
        values.append(value)
    return values
