from datetime import timedelta
from functools import cached_property

import structlog

from tracepoint.core.core import Service
from tracepoint.core.modules.session.models import Authentication
from tracepoint.core.modules.token.codec import TokenCodec
from tracepoint.core.modules.token.models import AuthToken, SessionClaims
from tracepoint.core.modules.user.models import User
from tracepoint.errors import AuthenticationError, InvalidTokenError
from tracepoint.utils import to_iso

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues session tokens and resolves them back into an authenticated identity."""

    @cached_property
    def codec(self) -> TokenCodec:
        config = self.core.config
        return TokenCodec(
            config.jwt_secret_key,
            ttl=timedelta(hours=config.jwt_expires_hours),
            clock=lambda: self.core.clock(),
        )

    def issue_token(self, user: User) -> AuthToken:
        """Mint a token for a freshly logged-in user; `lastUpdated` is the login time."""
        claims = SessionClaims(
            user_id=user.uuid,
            email=user.email,
            uuid=user.uuid,
            last_updated=to_iso(self.core.clock()),
        )
        return self.codec.mint(claims)

    def authenticate(self, auth_token: str | None) -> Authentication | None:
        """Resolve a token for optional checks; missing or invalid tokens yield None."""
        if not auth_token:
            return None
        try:
            claims = self.codec.verify(auth_token)
        except InvalidTokenError:
            return None
        return Authentication.from_claims(claims)

    def require(self, auth_token: str | None) -> Authentication:
        """Resolve a token for protected endpoints.

        Raises:
            AuthenticationError: no token was sent
            InvalidTokenError: the token is malformed, tampered with or expired
        """
        if not auth_token:
            raise AuthenticationError
        claims = self.codec.verify(auth_token)
        if not claims.uuid:
            raise InvalidTokenError
        return Authentication.from_claims(claims)
