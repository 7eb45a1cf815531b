import pytest

from api.app import create_app
from api.extensions import db
from api.store import DataStore

ADMIN_TOKEN = "test-admin-token"


class FakeProvider:
    """Stands in for the hosted auth service."""

    def __init__(self):
        self.users = {}
        self.signed_out = []
        self.listeners = []

    def on_session_change(self, callback):
        self.listeners.append(callback)

    def begin_external_sign_in(self, return_target):
        return f"https://auth.example.test/authorize?redirect_to={return_target}"

    def get_current_session(self, access_token):
        return self.users.get(access_token)

    def sign_out(self, access_token=None):
        self.signed_out.append(access_token)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def app(provider):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "ADMIN_TOKEN": ADMIN_TOKEN,
            "SECRET_KEY": "test",
            "ALLOW_ADMIN_SHORTCUT": True,
        },
        identity_provider=provider,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return DataStore(db.session)


@pytest.fixture
def staff_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
