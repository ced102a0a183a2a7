# conftest.py

import os

import pytest

# Set testing environment BEFORE importing app so app.py picks TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from campaign_app.models import Organization, User, UserOrganization, db  # noqa: E402

SHARED_SECRET = "test-shared-secret"


class FakeResponse:
    def __init__(self, *, status_code=200, json_data=None, text: str = "", headers=None):
        self.status_code = status_code
        self._json_data = json_data or {}
        self.text = text
        self.headers = headers or {}
        self.ok = status_code < 400

    def json(self):
        return self._json_data


class FakeSession:
    """Records outbound calls and replays queued responses in order."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.post_calls = []
        self.put_calls = []

    def _next(self):
        if not self.responses:
            raise AssertionError("FakeSession ran out of queued responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, headers=None, json=None, timeout=None):
        self.post_calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return self._next()

    def put(self, url, data=None, timeout=None):
        self.put_calls.append({"url": url, "data": data, "timeout": timeout})
        return self._next()


@pytest.fixture(scope="function")
def app():
    """Configure the Flask application with a clean schema for each test"""
    flask_app.config.update(
        {
            "TESTING": True,
            "EMPOWER_SHARED_SECRET": SHARED_SECRET,
            "AUTH0_DOMAIN": "auth0.test",
            "MONITORING_ENABLED": False,
            "HTTP_TIMEOUT_SECONDS": None,
        }
    )
    empower_state = flask_app.extensions.setdefault("empower", {})
    shared_session = empower_state.get("http_session")
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()
    empower_state["http_session"] = shared_session


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def fake_session_factory():
    """Build FakeSession objects with queued responses"""

    def _factory(*responses):
        return FakeSession(responses)

    return _factory


@pytest.fixture
def auth0_session(app, fake_session_factory):
    """Install a FakeSession as the Empower integration's outbound HTTP session"""

    def _install(*responses):
        session = fake_session_factory(*responses)
        app.extensions["empower"]["http_session"] = session
        return session

    return _install


@pytest.fixture
def test_organization(app):
    """Create a test organization fixture"""
    org = Organization(name="Test Organization")
    db.session.add(org)
    db.session.commit()
    return org


@pytest.fixture
def existing_user(app, test_organization):
    """Create a provisioned user already linked to the test organization"""
    user = User(
        auth0_id="email|existing",
        first_name="Existing",
        last_name="User",
        cell="+12015550100",
        email="existing@example.com",
        is_superadmin=False,
    )
    db.session.add(user)
    db.session.flush()
    db.session.add(UserOrganization(user_id=user.id, organization_id=test_organization.id, role="TEXTER"))
    db.session.commit()
    return user


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
