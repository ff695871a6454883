# backend/models.py
# lightweight model classes (not DB-bound ORM)
from decimal import Decimal, ROUND_HALF_UP


def to_money(value):
    """Round a stored amount to two decimals and return it as a float for JSON."""
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class User:
    def __init__(self, id, name, email, password_hash=None, created_at=None):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        keys = row.keys()
        return cls(
            id=row['id'],
            name=row['name'],
            email=row['email'],
            password_hash=row['password_hash'] if 'password_hash' in keys else None,
        )

    def to_dict(self):
        # never expose the hash
        return {"id": self.id, "name": self.name, "email": self.email}


class Category:
    def __init__(self, id, name, created_by=None, created_at=None):
        self.id = id
        self.name = name
        self.created_by = created_by
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        return cls(id=row['id'], name=row['name'], created_by=row['created_by'])

    def to_dict(self):
        return {"id": self.id, "name": self.name, "created_by": self.created_by}


class Expense:
    def __init__(self, id, title, amount, created_by, date, category_id=None,
                 category_name=None, created_at=None):
        self.id = id
        self.title = title
        self.amount = amount
        self.category_id = category_id
        self.created_by = created_by
        self.date = date
        self.category_name = category_name
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        keys = row.keys()
        return cls(
            id=row['id'],
            title=row['title'],
            amount=row['amount'],
            category_id=row['category_id'],
            created_by=row['created_by'],
            date=row['date'],
            category_name=row['category_name'] if 'category_name' in keys else None,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "amount": to_money(self.amount),
            "category_id": self.category_id,
            "created_by": self.created_by,
            "date": self.date,
            "category_name": self.category_name,
        }
