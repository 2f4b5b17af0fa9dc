"""Tests for issuing and resolving session tokens."""

import pytest

from tracepoint.core.modules.token.codec import TokenCodec
from tracepoint.core.modules.user.models import User
from tracepoint.errors import AuthenticationError, InvalidTokenError
from tracepoint.utils import to_iso


@pytest.fixture
def user():
    return User(uuid="0b6f4c3e-58f4-4f4e-a9e5-1c2d3e4f5a6b", email="user@example.com", password="$2b$12$hash")


@pytest.fixture
def session(core):
    return core.services.session


class TestIssueToken:
    def test_claims_carry_identity_and_login_time(self, session, user, clock):
        token = session.issue_token(user)
        claims = session.codec.verify(token)
        assert claims.uuid == user.uuid
        assert claims.user_id == user.uuid
        assert claims.email == user.email
        assert claims.last_updated == to_iso(clock())


class TestAuthenticate:
    """Tests for the optional (page-level) check."""

    def test_missing_token_is_anonymous(self, session):
        assert session.authenticate(None) is None
        assert session.authenticate("") is None

    def test_invalid_token_is_anonymous(self, session):
        assert session.authenticate("garbage") is None

    def test_expired_token_is_anonymous(self, session, user, clock):
        token = session.issue_token(user)
        clock.advance(hours=25)
        assert session.authenticate(token) is None

    def test_valid_token_resolves_identity(self, session, user):
        auth = session.authenticate(session.issue_token(user))
        assert auth is not None
        assert auth.identity == user.uuid
        assert auth.claims.email == user.email


class TestRequire:
    """Tests for the hard check used by protected mutations."""

    def test_missing_token_raises_authentication_error(self, session):
        with pytest.raises(AuthenticationError) as exc_info:
            session.require(None)
        assert not isinstance(exc_info.value, InvalidTokenError)

    def test_invalid_token_raises_invalid_token(self, session):
        with pytest.raises(InvalidTokenError):
            session.require("garbage")

    def test_token_from_other_secret_rejected(self, session, user, clock):
        foreign = TokenCodec("a-completely-different-secret-of-sufficient-length", clock=clock)
        token = foreign.mint(session.codec.verify(session.issue_token(user)))
        with pytest.raises(InvalidTokenError):
            session.require(token)

    def test_valid_token(self, session, user):
        assert session.require(session.issue_token(user)).identity == user.uuid
