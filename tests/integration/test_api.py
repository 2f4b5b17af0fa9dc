"""End-to-end tests through the HTTP API with the in-memory user store."""

from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from tracepoint.app import App
from tracepoint.core.modules.user.store import InMemoryUserStore
from tracepoint.errors import StoreError
from tracepoint.web.server import create_fastapi_app

EMAIL = "user@example.com"
PASSWORD = "password123"
SEOUL = {"latitude": 37.5665, "longitude": 126.978}


@pytest.fixture
def make_client(make_config, clock):
    """Factory for started TestClients sharing the test clock."""
    with ExitStack() as stack:

        def factory(user_store=None, **overrides):
            config = make_config(**overrides)
            app = App(config, user_store=user_store or InMemoryUserStore(), clock=clock)
            return stack.enter_context(TestClient(create_fastapi_app(app, config)))

        yield factory


@pytest.fixture
def client(make_client):
    return make_client()


def signup(client, email=EMAIL, password=PASSWORD):
    return client.post("/api/auth/signup", json={"email": email, "password": password})


def login(client, email=EMAIL, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestSignup:
    def test_signup_succeeds(self, client):
        response = signup(client)
        assert response.status_code == 200
        assert response.json()["user"] == {"email": EMAIL}

    def test_duplicate_email_conflicts(self, client):
        signup(client)
        response = signup(client)
        assert response.status_code == 409
        assert response.json()["error"] == "auth/email-exists"

    def test_invalid_email(self, client):
        response = signup(client, email="not-an-email")
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_short_password(self, client):
        response = signup(client, password="short")
        assert response.status_code == 400
        assert "8 characters" in response.json()["message"]

    def test_missing_field(self, client):
        response = client.post("/api/auth/signup", json={"email": EMAIL})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestLogin:
    def test_wrong_password(self, client):
        signup(client)
        response = login(client, password="wrong-password")
        assert response.status_code == 401
        assert response.json()["error"] == "auth/wrong-password"
        assert "auth_token" not in response.cookies

    def test_unknown_user(self, client):
        response = login(client)
        assert response.status_code == 401
        assert response.json()["error"] == "auth/user-not-found"

    def test_sets_session_cookie(self, client):
        signup(client)
        response = login(client)
        assert response.status_code == 200
        assert response.json()["user"]["email"] == EMAIL

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("auth_token=")
        assert "HttpOnly" in set_cookie
        assert "SameSite=lax" in set_cookie
        assert "Max-Age=86400" in set_cookie
        assert "Secure" not in set_cookie

    def test_cookie_secure_in_production(self, make_client):
        client = make_client(environment="production")
        signup(client)
        response = login(client)
        assert "Secure" in response.headers["set-cookie"]

    def test_login_rate_limited(self, client):
        signup(client)
        for _ in range(5):
            assert login(client, password="wrong-password").status_code == 401
        response = login(client)
        assert response.status_code == 429
        assert response.json()["error"] == "rate_limit_exceeded"

    def test_rate_limit_keyed_by_forwarded_address(self, client):
        signup(client)
        for _ in range(5):
            client.post(
                "/api/auth/login",
                json={"email": EMAIL, "password": "wrong-password"},
                headers={"X-Forwarded-For": "198.51.100.1"},
            )
        response = client.post(
            "/api/auth/login",
            json={"email": EMAIL, "password": PASSWORD},
            headers={"X-Forwarded-For": "198.51.100.2, 10.0.0.1"},
        )
        assert response.status_code == 200

    def test_rate_limit_window_expires(self, client, clock):
        signup(client)
        for _ in range(5):
            login(client, password="wrong-password")
        clock.advance(seconds=61)
        assert login(client).status_code == 200


class TestCheckLogin:
    def test_anonymous(self, client):
        response = client.get("/api/auth/check-login")
        assert response.status_code == 200
        assert response.json() == {"loggedIn": False}

    def test_invalid_cookie_is_anonymous(self, client):
        response = client.get("/api/auth/check-login", headers={"Cookie": "auth_token=garbage"})
        assert response.status_code == 200
        assert response.json() == {"loggedIn": False}

    def test_logged_in_after_login(self, client):
        signup(client)
        user = login(client).json()["user"]
        response = client.get("/api/auth/check-login")
        assert response.json() == {"loggedIn": True, "user": {"email": EMAIL, "uuid": user["uuid"]}}

    def test_bearer_header_accepted(self, client):
        signup(client)
        token = login(client).cookies["auth_token"]
        client.cookies.clear()
        response = client.get("/api/auth/check-login", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["loggedIn"] is True

    def test_expired_session(self, client, clock):
        signup(client)
        login(client)
        clock.advance(hours=24, seconds=1)
        assert client.get("/api/auth/check-login").json() == {"loggedIn": False}


class TestLogout:
    def test_clears_cookie(self, client):
        signup(client)
        login(client)
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("auth_token=")
        assert "Max-Age=0" in set_cookie


class TestUpdateLocation:
    def test_requires_session(self, client):
        response = client.post("/api/location/update", json=SEOUL)
        assert response.status_code == 401
        assert response.json()["error"] == "auth/unauthenticated"

    def test_invalid_token_rejected_and_cookie_cleared(self, client):
        response = client.post("/api/location/update", json=SEOUL, headers={"Cookie": "auth_token=garbage"})
        assert response.status_code == 401
        assert response.json()["error"] == "auth/invalid-token"
        assert "Max-Age=0" in response.headers["set-cookie"]

    def test_auth_checked_before_body(self, client):
        """A missing body is not reported before the missing session."""
        response = client.post("/api/location/update")
        assert response.status_code == 401

    def test_too_frequent(self, client, clock):
        signup(client)
        login(client)
        clock.advance(seconds=5)
        response = client.post("/api/location/update", json=SEOUL)
        assert response.status_code == 429
        assert response.json()["error"] == "location/too-frequent"

    def test_update_after_interval(self, client, clock):
        signup(client)
        login(client)
        clock.advance(seconds=11)
        response = client.post("/api/location/update", json=SEOUL)
        assert response.status_code == 200
        assert response.json()["location"] == SEOUL

    def test_malformed_payload(self, client, clock):
        signup(client)
        login(client)
        clock.advance(seconds=11)
        response = client.post("/api/location/update", json={"latitude": "abc", "longitude": 126.978})
        assert response.status_code == 400
        assert response.json()["error"] == "location/malformed-payload"

    @pytest.mark.parametrize(
        "body",
        [
            b'{"latitude": NaN, "longitude": 126.978}',
            b'{"latitude": 1e400, "longitude": 126.978}',
            b'{"latitude": -Infinity, "longitude": 126.978}',
            b'{"latitude": 1' + b"0" * 400 + b', "longitude": 126.978}',
        ],
    )
    def test_non_finite_coordinates_rejected(self, client, clock, body):
        signup(client)
        login(client)
        clock.advance(seconds=11)
        response = client.post("/api/location/update", content=body, headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"] == "location/malformed-payload"

    def test_invalid_json_body(self, client, clock):
        signup(client)
        login(client)
        clock.advance(seconds=11)
        response = client.post("/api/location/update", content=b"{", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_store_failure_is_generic_500(self, make_client, clock):
        class FailingUserStore(InMemoryUserStore):
            async def update_location(self, uuid, location, updated_at):
                raise StoreError("connection reset by mongo-0.internal:27017")

        client = make_client(user_store=FailingUserStore())
        signup(client)
        login(client)
        clock.advance(seconds=11)
        response = client.post("/api/location/update", json=SEOUL)
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "mongo" not in body["message"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
