import pytest

from health_records.access import Actor
from health_records.app import create_app
from health_records.config import TestConfig
from health_records.extensions import db


@pytest.fixture
def app(tmp_path):
    """App on in-memory SQLite with uploads in a per-test folder"""
    class Cfg(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(Cfg)
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
    return app.extensions["record_store"]


@pytest.fixture
def engine(app):
    return app.extensions["sharing_engine"]


@pytest.fixture
def make_actor(store):
    """Create a user directly in the store and return it as an Actor"""
    def _make(username, role="owner"):
        user = store.create_user(username, "not-a-real-hash", role=role)
        return Actor(user.id, user.username)
    return _make


@pytest.fixture
def auth_headers(app):
    """Register ``username`` over HTTP and return bearer headers for it.

    Uses a throwaway client so the login cookie does not stick to ``client``.
    """
    def _auth(username, password="s3cret-pass"):
        res = app.test_client().post(
            "/api/register", json={"username": username, "password": password}
        )
        assert res.status_code == 201, res.get_json()
        return {"Authorization": f"Bearer {res.get_json()['access_token']}"}
    return _auth
