# backend/expenses.py
import calendar
import logging
import sqlite3
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from flask import Blueprint, Response, request, jsonify
from flask_jwt_extended import jwt_required

from . import db
from .auth import current_user_id
from .categories import visible_category
from .csv_export import export_csv
from .errors import ERROR_MESSAGES, error_response, json_body
from .models import Expense

logger = logging.getLogger("expense-backend")

expense_bp = Blueprint("expenses", __name__)

DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y"]

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000000")

# request body key -> column
UPDATABLE_FIELDS = {
    "title": "title",
    "amount": "amount",
    "categoryId": "category_id",
    "date": "date",
}

EXPENSE_SELECT = """
    SELECT e.id, e.title, e.amount, e.category_id, e.created_by, e.date,
           c.name AS category_name
    FROM expenses e
    LEFT JOIN categories c ON e.category_id = c.id
"""


class InvalidField(ValueError):
    pass


# ---------------- Helpers ----------------
def parse_date(s):
    """Try multiple date formats, then ISO date-times. Returns a date or None."""
    if s is None or s == '':
        return None
    if isinstance(s, date):
        return s
    s = str(s).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_amount(value):
    """Positive finite amount rounded to cents, as a float for storage."""
    if isinstance(value, bool):
        raise InvalidField("amount")
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite() or amount > MAX_AMOUNT:
            raise InvalidField("amount")
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise InvalidField("amount")
    # after rounding, so 0.004 is rejected as 0.00
    if amount <= 0:
        raise InvalidField("amount")
    return float(amount)


def month_bounds(month, year):
    """First and last calendar day of the given month, inclusive."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_filter(args):
    """Read ?month=&year=. Returns (start, end), None for no filter, or raises InvalidField."""
    month = (args.get('month') or '').strip()
    year = (args.get('year') or '').strip()
    if not month and not year:
        return None
    if not month or not year:
        raise InvalidField("month and year must be given together")
    try:
        month, year = int(month), int(year)
    except ValueError:
        raise InvalidField("month and year must be integers")
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise InvalidField("month or year out of range")
    return month_bounds(month, year)


def clean_category_id(value, user_id):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise InvalidField("categoryId")
    try:
        category_id = int(value)
    except (TypeError, ValueError):
        raise InvalidField("categoryId")
    if visible_category(category_id, user_id) is None:
        raise InvalidField("categoryId")
    return category_id


def clean_field(key, value, user_id):
    if key == "title":
        if not isinstance(value, str):
            raise InvalidField("title")
        title = value.strip()
        if not title:
            raise InvalidField("title")
        return title
    if key == "amount":
        return parse_amount(value)
    if key == "categoryId":
        return clean_category_id(value, user_id)
    if key == "date":
        parsed = parse_date(value)
        if parsed is None:
            raise InvalidField("date")
        return parsed.isoformat()
    raise InvalidField(key)


def fetch_expense(expense_id, user_id):
    row = db.query_db(
        EXPENSE_SELECT + " WHERE e.id=? AND e.created_by=?", (expense_id, user_id), one=True
    )
    return Expense.from_row(row) if row else None


def fetch_expenses(user_id, bounds=None):
    sql = EXPENSE_SELECT + " WHERE e.created_by=?"
    params = [user_id]
    if bounds:
        sql += " AND e.date BETWEEN ? AND ?"
        params.extend(d.isoformat() for d in bounds)
    sql += " ORDER BY e.date DESC, e.id DESC"
    return [Expense.from_row(r) for r in db.query_db(sql, params)]


def update_expense(expense_id, user_id, changes):
    """Apply column changes to an owned expense. Returns the updated Expense or None if not found."""
    assignments = ", ".join(f"{col}=?" for col in changes)
    count = db.modify_db(
        f"UPDATE expenses SET {assignments} WHERE id=? AND created_by=?",
        (*changes.values(), expense_id, user_id)
    )
    if count == 0:
        return None
    return fetch_expense(expense_id, user_id)


def delete_expense(expense_id, user_id):
    """Delete an owned expense. Returns True if a row was removed."""
    return db.modify_db(
        "DELETE FROM expenses WHERE id=? AND created_by=?", (expense_id, user_id)
    ) > 0


# ---------------- Endpoints ----------------
@expense_bp.route('', methods=['GET'])
@jwt_required()
def list_expenses():
    user_id = current_user_id()
    try:
        bounds = month_filter(request.args)
    except InvalidField as e:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, error=e)

    try:
        expenses = fetch_expenses(user_id, bounds)
    except Exception as e:
        logger.exception("Fetching expenses failed")
        return error_response("Failed to fetch expenses", 500, error=e)
    return jsonify([e.to_dict() for e in expenses])


@expense_bp.route('', methods=['POST'])
@jwt_required()
def create_expense():
    user_id = current_user_id()
    data = json_body()
    if data is None:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400)

    if any(data.get(k) in (None, '') for k in ('title', 'amount', 'date')):
        return error_response(ERROR_MESSAGES["MISSING_REQUIRED_FIELDS"], 400)

    try:
        values = {key: clean_field(key, data.get(key), user_id) for key in UPDATABLE_FIELDS}
    except InvalidField as e:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, error=f"invalid {e}")

    try:
        expense_id = db.execute_db(
            "INSERT INTO expenses (title, amount, category_id, created_by, date) VALUES (?,?,?,?,?)",
            (values['title'], values['amount'], values['categoryId'], user_id, values['date'])
        )
        expense = fetch_expense(expense_id, user_id)
    except sqlite3.IntegrityError as e:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, error=e)
    except Exception as e:
        logger.exception("Creating expense failed")
        return error_response("Failed to create expense", 500, error=e)

    return jsonify(expense.to_dict()), 201


@expense_bp.route('/<int:expense_id>', methods=['PUT'])
@jwt_required()
def update_expense_route(expense_id):
    user_id = current_user_id()
    data = json_body()
    if data is None:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400)

    present = [key for key in UPDATABLE_FIELDS if key in data]
    if not present:
        return error_response(ERROR_MESSAGES["MISSING_REQUIRED_FIELDS"], 400)

    try:
        changes = {UPDATABLE_FIELDS[key]: clean_field(key, data[key], user_id) for key in present}
    except InvalidField as e:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, error=f"invalid {e}")

    try:
        expense = update_expense(expense_id, user_id, changes)
    except sqlite3.IntegrityError as e:
        return error_response(ERROR_MESSAGES["INVALID_INPUT"], 400, error=e)
    except Exception as e:
        logger.exception("Updating expense failed")
        return error_response("Failed to update expense", 500, error=e)

    if expense is None:
        return error_response(ERROR_MESSAGES["NOT_FOUND"], 404)
    return jsonify(expense.to_dict())


@expense_bp.route('/<int:expense_id>', methods=['DELETE'])
@jwt_required()
def delete_expense_route(expense_id):
    user_id = current_user_id()
    try:
        deleted = delete_expense(expense_id, user_id)
    except Exception as e:
        logger.exception("Deleting expense failed")
        return error_response("Failed to delete expense", 500, error=e)

    if not deleted:
        return error_response(ERROR_MESSAGES["NOT_FOUND"], 404)
    return jsonify({"message": "Deleted"})


@expense_bp.route('/export', methods=['GET'])
@jwt_required()
def export_expenses():
    user_id = current_user_id()
    try:
        csv_text = export_csv(fetch_expenses(user_id))
    except Exception as e:
        logger.exception("Exporting expenses failed")
        return error_response("Failed to export expenses", 500, error=e)

    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=expenses.csv"},
    )
