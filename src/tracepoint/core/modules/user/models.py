from pydantic import BaseModel, Field

from tracepoint.core.db import MongoModel
from tracepoint.core.modules.location.models import Location
from tracepoint.utils import now, to_iso


class User(MongoModel):
    """User record with credentials and last known location."""

    email: str
    password: str  # bcrypt hash
    created_at: str = Field(alias="createdAt", default_factory=lambda: to_iso(now()))
    last_location: Location | None = Field(default=None, alias="lastLocation")
    last_updated: str | None = Field(default=None, alias="lastUpdated")


class UserView(BaseModel):
    """User account summary (API representation)."""

    email: str = Field(..., description="User email")
    uuid: str = Field(..., description="User ID")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(email=user.email, uuid=user.uuid)
