import pytest

from backend import create_app

PASSWORD = "password123"


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DB_PATH": str(tmp_path / "expense.db"),
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-32",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def signup(client, email, name="Test User", password=PASSWORD):
    return client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})


def login(client, email, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def auth_headers(client, email, name="Test User"):
    signup(client, email, name)
    token = login(client, email).get_json()["token"]
    return {"Authorization": f"Bearer {token}"}


def add_expense(client, headers, title="Lunch", amount=12.5, date="2024-03-15", category_id=None):
    resp = client.post("/api/expenses", headers=headers, json={
        "title": title, "amount": amount, "categoryId": category_id, "date": date,
    })
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


@pytest.fixture
def alice(client):
    return auth_headers(client, "alice@example.com", "Alice")


@pytest.fixture
def bob(client):
    return auth_headers(client, "bob@example.com", "Bob")
