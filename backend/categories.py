# backend/categories.py
import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from . import db
from .auth import current_user_id
from .errors import ERROR_MESSAGES, error_response, json_body, text_fields
from .models import Category

logger = logging.getLogger("expense-backend")

category_bp = Blueprint("categories", __name__)


def visible_category(category_id, user_id):
    """Return the category if it is global or owned by user_id, else None."""
    row = db.query_db(
        "SELECT id, name, created_by FROM categories WHERE id=? AND (created_by IS NULL OR created_by=?)",
        (category_id, user_id), one=True
    )
    return Category.from_row(row) if row else None


@category_bp.route('', methods=['GET'])
@jwt_required()
def list_categories():
    user_id = current_user_id()
    try:
        rows = db.query_db(
            "SELECT id, name, created_by FROM categories WHERE created_by IS NULL OR created_by=? ORDER BY id",
            (user_id,)
        )
    except Exception as e:
        logger.exception("Fetching categories failed")
        return error_response("Failed to fetch categories", 500, error=e)
    return jsonify([Category.from_row(r).to_dict() for r in rows])


@category_bp.route('', methods=['POST'])
@jwt_required()
def create_category():
    user_id = current_user_id()
    data = json_body()
    fields = text_fields(data, 'name') if data is not None else None
    if fields is None:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400)
    name = fields[0].strip()
    if not name:
        return error_response(ERROR_MESSAGES["MISSING_REQUIRED_FIELDS"], 400)

    try:
        category_id = db.execute_db(
            "INSERT INTO categories (name, created_by) VALUES (?,?)", (name, user_id)
        )
    except Exception as e:
        logger.exception("Creating category failed")
        return error_response("Failed to create category", 500, error=e)

    return jsonify(Category(id=category_id, name=name, created_by=user_id).to_dict()), 201
