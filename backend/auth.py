# backend/auth.py
import logging
import sqlite3

from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, get_jwt_identity
from werkzeug.security import generate_password_hash, check_password_hash

from . import db
from .errors import ERROR_MESSAGES, error_response, json_body, text_fields
from .models import User

logger = logging.getLogger("expense-backend")

auth_bp = Blueprint("auth", __name__)


def current_user_id():
    """Id of the user owning the bearer token of the current request."""
    return int(get_jwt_identity())


def issue_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"userId": str(user.id), "email": user.email},
    )


@auth_bp.route('/signup', methods=['POST'])
def signup():
    data = json_body()
    fields = text_fields(data, 'name', 'email', 'password') if data is not None else None
    if fields is None:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, status=False)
    name, email, password = fields
    name = name.strip()
    email = email.strip().lower()

    if not name or not email or not password:
        return error_response(ERROR_MESSAGES["MISSING_REQUIRED_FIELDS"], 400, status=False)

    try:
        existing = db.query_db("SELECT id FROM users WHERE email=?", (email,), one=True)
        if existing:
            return error_response(ERROR_MESSAGES["EMAIL_EXISTS"], 400, status=False)

        user_id = db.execute_db(
            "INSERT INTO users (name, email, password_hash) VALUES (?,?,?)",
            (name, email, generate_password_hash(password))
        )
    except sqlite3.IntegrityError:
        # lost a race against a concurrent signup for the same email
        return error_response(ERROR_MESSAGES["EMAIL_EXISTS"], 400, status=False)
    except Exception as e:
        logger.exception("Signup failed")
        return error_response("Signup failed", 500, error=e, status=False)

    user = User(id=user_id, name=name, email=email)
    logger.info(f"New user registered: {email}")
    return jsonify({"status": True, "message": "User created successfully", "user": user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    fields = text_fields(data, 'email', 'password') if data is not None else None
    if fields is None:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, status=False)
    email, password = fields
    email = email.strip().lower()

    try:
        row = db.query_db(
            "SELECT id, name, email, password_hash FROM users WHERE email=?", (email,), one=True
        ) if email else None
    except Exception as e:
        logger.exception("Login lookup failed")
        return error_response("Login failed", 500, error=e, status=False)

    # same answer for unknown email and wrong password
    if not row or not password or not check_password_hash(row['password_hash'], password):
        logger.warning(f"Failed login attempt for {email or '<empty>'}")
        return error_response(ERROR_MESSAGES["INVALID_CREDENTIALS"], 400, status=False)

    user = User.from_row(row)
    token = issue_token(user)
    logger.info(f"User logged in: {user.email}")
    return jsonify({
        "status": True,
        "message": "Logged in successfully",
        "token": token,
        "user": user.to_dict(),
    }), 200
