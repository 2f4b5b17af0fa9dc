from datetime import timedelta

import jwt
import structlog
from pydantic import ValidationError as PydanticValidationError

from tracepoint.core.modules.token.models import AuthToken, SessionClaims
from tracepoint.errors import InvalidTokenError
from tracepoint.utils import Clock, now

logger = structlog.get_logger(__name__)

DEFAULT_ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(hours=24)


class TokenCodec:
    """Creates and validates signed, time-bounded session tokens.

    The signing secret is fixed for the lifetime of the codec; rotating it
    (constructing a codec with another secret) invalidates every outstanding
    token. Expiry is checked against the injected clock.
    """

    def __init__(
        self,
        secret_key: str,
        ttl: timedelta = DEFAULT_TTL,
        algorithm: str = DEFAULT_ALGORITHM,
        clock: Clock = now,
    ) -> None:
        if not secret_key:
            raise ValueError("Token secret key must not be empty")
        self._secret_key = secret_key
        self._ttl = ttl
        self._algorithm = algorithm
        self._clock = clock

    def mint(self, claims: SessionClaims) -> AuthToken:
        """Sign claims into a token, stamping `iat` and `exp` from the clock."""
        issued_at = self._clock()
        payload = claims.identity().to_payload()
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + self._ttl).timestamp())
        return AuthToken(jwt.encode(payload, self._secret_key, algorithm=self._algorithm))

    def verify(self, token: str) -> SessionClaims:
        """Decode and validate a token.

        Raises:
            InvalidTokenError: bad signature, foreign algorithm, malformed
                structure, missing claims or expired token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as e:
            logger.debug("token_rejected", reason=type(e).__name__)
            raise InvalidTokenError from e

        try:
            claims = SessionClaims.model_validate(payload)
        except PydanticValidationError as e:
            logger.debug("token_rejected", reason="invalid_claims")
            raise InvalidTokenError from e

        if claims.exp is None or claims.exp <= self._clock().timestamp():
            logger.debug("token_rejected", reason="expired")
            raise InvalidTokenError
        return claims
