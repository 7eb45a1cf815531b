"""Login record kept in Flask's signed cookie session."""
from flask import session

SESSION_KEY = "userSession"
PENDING_MARKER = "google_auth_pending"


def save_session(user_session) -> None:
    session[SESSION_KEY] = user_session.to_dict()


def load_session() -> dict | None:
    return session.get(SESSION_KEY)


def clear_session() -> None:
    session.pop(SESSION_KEY, None)
