# frontend/api_client.py
import logging

import requests

logger = logging.getLogger("expense-frontend")

UNSET = object()


class ApiError(Exception):
    """Non-2xx answer from the API, or no answer at all (status is None)."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def unauthorized(self):
        return self.status == 401


def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return None


class ApiClient:
    """Typed access to the expense API for one session."""

    def __init__(self, base_url, session, http=None, timeout=10):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, fallback, json=None, params=None, auth=True):
        headers = self.session.auth_headers() if auth else {}
        url = self.base_url + path
        try:
            resp = self.http.request(method, url, headers=headers, json=json,
                                     params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(f"Connection failed: {e}")

        if 200 <= resp.status_code < 300:
            return resp

        if resp.status_code == 401 and auth:
            # stale or expired token, force a fresh login
            self.session.clear()
        payload = safe_json(resp) or {}
        message = payload.get("message") if isinstance(payload, dict) else None
        raise ApiError(message or fallback, resp.status_code)

    # ---------------- Auth ----------------
    def signup(self, name, email, password):
        resp = self._request("POST", "/api/auth/signup", "Signup failed", auth=False,
                             json={"name": name, "email": email, "password": password})
        return safe_json(resp)

    def login(self, email, password):
        resp = self._request("POST", "/api/auth/login", "Login failed", auth=False,
                             json={"email": email, "password": password})
        payload = safe_json(resp) or {}
        if payload.get("token"):
            self.session.start(payload["token"], payload.get("user"))
        return payload

    def logout(self):
        self.session.clear()

    # ---------------- Categories ----------------
    def list_categories(self):
        return safe_json(self._request("GET", "/api/category", "Failed to fetch categories")) or []

    def create_category(self, name):
        resp = self._request("POST", "/api/category", "Failed to create category", json={"name": name})
        return safe_json(resp)

    # ---------------- Expenses ----------------
    def list_expenses(self, month=None, year=None):
        params = {}
        if month:
            params["month"] = month
        if year:
            params["year"] = year
        resp = self._request("GET", "/api/expenses", "Failed to fetch expenses", params=params or None)
        return safe_json(resp) or []

    def create_expense(self, title, amount, date, category_id=None):
        payload = {"title": title, "amount": amount, "categoryId": category_id, "date": date}
        return safe_json(self._request("POST", "/api/expenses", "Failed to create expense", json=payload))

    def update_expense(self, expense_id, title=None, amount=None, date=None, category_id=UNSET):
        """Send only the fields given. Pass category_id=None to uncategorize."""
        payload = {k: v for k, v in (("title", title), ("amount", amount), ("date", date)) if v is not None}
        if category_id is not UNSET:
            payload["categoryId"] = category_id
        return safe_json(self._request("PUT", f"/api/expenses/{expense_id}",
                                       "Failed to update expense", json=payload))

    def delete_expense(self, expense_id):
        self._request("DELETE", f"/api/expenses/{expense_id}", "Failed to delete expense")

    def export_csv(self):
        return self._request("GET", "/api/expenses/export", "Failed to export expenses").text
