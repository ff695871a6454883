# frontend/session.py


class Session:
    """Authentication state of one browser session: the bearer token and the cached user."""

    def __init__(self, token=None, user=None):
        self.token = token
        self.user = user

    @property
    def is_authenticated(self):
        return bool(self.token)

    @property
    def email(self):
        return (self.user or {}).get("email")

    def start(self, token, user):
        self.token = token
        self.user = user

    def clear(self):
        self.token = None
        self.user = None

    def auth_headers(self):
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
