import pytest
import requests

from frontend.api_client import ApiClient, ApiError
from frontend.session import Session


class FlaskResponse:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self.text = resp.get_data(as_text=True)
        self._json = resp.get_json(silent=True)

    def json(self):
        if self._json is None:
            raise ValueError("no JSON body")
        return self._json


class FlaskHttp:
    """Stands in for requests.Session, routing calls to the Flask test client."""

    def __init__(self, client):
        self.client = client

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        path = url.replace("http://testserver", "", 1)
        resp = self.client.open(path, method=method, headers=headers or {}, json=json,
                                query_string=params)
        return FlaskResponse(resp)


class DownHttp:
    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


@pytest.fixture
def session():
    return Session()


@pytest.fixture
def api(client, session):
    return ApiClient("http://testserver/", session, http=FlaskHttp(client))


def test_login_starts_session(api, session):
    api.signup("Alice", "alice@example.com", "password123")
    payload = api.login("alice@example.com", "password123")
    assert session.is_authenticated
    assert session.token == payload["token"]
    assert session.email == "alice@example.com"

    api.logout()
    assert not session.is_authenticated
    assert session.user is None


def test_errors_carry_server_message(api, session):
    api.signup("Alice", "alice@example.com", "password123")
    with pytest.raises(ApiError) as exc:
        api.signup("Alice", "alice@example.com", "password123")
    assert exc.value.status == 400
    assert exc.value.message == "Email already exists"

    with pytest.raises(ApiError) as exc:
        api.login("alice@example.com", "nope-nope")
    assert exc.value.message == "Invalid email or password"
    assert not session.is_authenticated


def test_full_expense_flow(api):
    api.signup("Alice", "alice@example.com", "password123")
    api.login("alice@example.com", "password123")

    food = api.create_category("Food")
    assert food["name"] == "Food"
    assert any(c["id"] == food["id"] for c in api.list_categories())

    created = api.create_expense("Lunch", 12.5, "2024-03-15", food["id"])
    assert api.list_expenses(3, 2024)[0]["category_name"] == "Food"
    assert api.list_expenses(4, 2024) == []

    updated = api.update_expense(created["id"], amount=20)
    assert updated["amount"] == 20.0
    assert updated["category_id"] == food["id"]

    cleared = api.update_expense(created["id"], category_id=None)
    assert cleared["category_id"] is None

    csv_text = api.export_csv()
    assert csv_text.splitlines() == ["title,amount,category,date", "Lunch,20.00,,2024-03-15"]

    api.delete_expense(created["id"])
    assert api.list_expenses() == []
    with pytest.raises(ApiError) as exc:
        api.delete_expense(created["id"])
    assert exc.value.status == 404


def test_unauthorized_clears_session(api, session):
    session.start("expired-or-garbage", {"email": "alice@example.com"})
    with pytest.raises(ApiError) as exc:
        api.list_expenses()
    assert exc.value.unauthorized
    assert not session.is_authenticated


def test_connection_failure(session):
    api = ApiClient("http://localhost:1", session, http=DownHttp())
    with pytest.raises(ApiError) as exc:
        api.list_categories()
    assert exc.value.status is None
    assert "Connection failed" in exc.value.message


def test_session_headers():
    session = Session()
    assert session.auth_headers() == {}
    session.start("abc", {"email": "a@b.co"})
    assert session.auth_headers() == {"Authorization": "Bearer abc"}
