# frontend/validation.py
import re

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_expense_form(title, amount, date, category_id):
    errors = {}
    title = (title or "").strip()
    if not title:
        errors["title"] = "Title is required."
    elif len(title) < 3:
        errors["title"] = "Title must be at least 3 characters."

    if amount is None or amount == "":
        errors["amount"] = "Amount is required."
    else:
        try:
            if float(amount) <= 0:
                errors["amount"] = "Amount must be a positive number."
        except (TypeError, ValueError):
            errors["amount"] = "Amount must be a positive number."

    if not date:
        errors["date"] = "Date is required."
    if category_id is None:
        errors["category"] = "Category is required."
    return errors


def validate_signup_form(name, email, password):
    errors = {}
    name = (name or "").strip()
    if not name:
        errors["name"] = "Name is required."
    elif len(name) < 3:
        errors["name"] = "Name must be at least 3 characters."

    email = (email or "").strip()
    if not email:
        errors["email"] = "Email is required."
    elif not EMAIL_RE.match(email):
        errors["email"] = "Please enter a valid email address."

    if not (password or "").strip():
        errors["password"] = "Password is required."
    elif len(password) < 8:
        errors["password"] = "Password must be at least 8 characters."
    return errors
