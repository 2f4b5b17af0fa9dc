"""Session token claim models."""

from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

AuthToken = NewType("AuthToken", str)


class SessionClaims(BaseModel):
    """Identity claims carried inside a signed session token.

    `iat` and `exp` are filled in by the codec when the token is minted.
    """

    user_id: str = Field(alias="userId")
    email: str
    uuid: str
    last_updated: str = Field(alias="lastUpdated")  # ISO-8601, login time
    iat: int | None = None
    exp: int | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_payload(self) -> dict[str, str | int]:
        """Serialize to the JWT payload shape, omitting unset timing fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def identity(self) -> "SessionClaims":
        """Return the claims without the codec-managed timing fields."""
        return self.model_copy(update={"iat": None, "exp": None})
