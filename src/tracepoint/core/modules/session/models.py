"""Session management models."""

from pydantic import BaseModel, Field

from tracepoint.core.modules.token.models import SessionClaims

AUTH_COOKIE_NAME = "auth_token"


class Authentication(BaseModel):
    """Authenticated identity resolved from a valid session token."""

    identity: str = Field(..., description="User uuid the token was issued for")
    claims: SessionClaims

    @classmethod
    def from_claims(cls, claims: SessionClaims) -> "Authentication":
        return cls(identity=claims.uuid, claims=claims)
