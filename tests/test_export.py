import csv
import io

from backend.csv_export import CSV_HEADER, export_csv
from backend.models import Expense
from conftest import add_expense


def test_export_download(client, alice):
    food = client.post("/api/category", headers=alice, json={"name": "Food"}).get_json()
    add_expense(client, alice, title="Lunch", amount=12.5, date="2024-03-15", category_id=food["id"])
    add_expense(client, alice, title="Bus", amount=2, date="2024-03-16")

    resp = client.get("/api/expenses/export", headers=alice)
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert resp.headers["Content-Disposition"] == "attachment; filename=expenses.csv"

    lines = resp.get_data(as_text=True).splitlines()
    assert lines == [
        "title,amount,category,date",
        "Bus,2.00,,2024-03-16",
        "Lunch,12.50,Food,2024-03-15",
    ]


def test_export_one_line_per_expense_plus_header(client, alice):
    for day in range(1, 6):
        add_expense(client, alice, title=f"item {day}", date=f"2024-04-0{day}")
    text = client.get("/api/expenses/export", headers=alice).get_data(as_text=True)
    assert len(text.strip().split("\n")) == 6


def test_export_only_includes_own_expenses(client, alice, bob):
    add_expense(client, alice, title="alice")
    add_expense(client, bob, title="bob")
    text = client.get("/api/expenses/export", headers=bob).get_data(as_text=True)
    assert "alice" not in text
    assert "bob" in text


def test_fields_with_commas_quotes_and_newlines_survive():
    expenses = [
        Expense(id=1, title="Dinner, drinks", amount=40, created_by=1, date="2024-03-01",
                category_name="Food, out"),
        Expense(id=2, title='The "big" shop', amount=99.9, created_by=1, date="2024-03-02"),
        Expense(id=3, title="two\nlines", amount=1, created_by=1, date="2024-03-03"),
    ]
    text = export_csv(expenses)

    # a naive split no longer lines up, a real reader does
    assert len(text.split("\n")[1].split(",")) != 4
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == CSV_HEADER
    assert rows[1] == ["Dinner, drinks", "40.00", "Food, out", "2024-03-01"]
    assert rows[2] == ['The "big" shop', "99.90", "", "2024-03-02"]
    assert rows[3] == ["two\nlines", "1.00", "", "2024-03-03"]
    assert all(len(r) == 4 for r in rows)


def test_empty_export_is_header_only():
    assert export_csv([]) == "title,amount,category,date\n"
