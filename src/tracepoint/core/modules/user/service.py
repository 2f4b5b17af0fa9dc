import bcrypt
import structlog

from tracepoint.core.core import Service
from tracepoint.core.modules.location.models import Location
from tracepoint.core.modules.user.models import User
from tracepoint.core.modules.user.validators import MAX_PASSWORD_BYTES, validate_email, validate_password
from tracepoint.errors import ConflictError, NotFoundError, UserNotFoundError, WrongPasswordError
from tracepoint.utils import to_iso

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Manages user accounts on top of the configured user store."""

    async def get_user(self, uuid: str) -> User:
        """Get user by uuid."""
        user = await self.store.get(uuid)
        if user is None:
            raise NotFoundError(f"User '{uuid}' not found")
        return user

    async def create_user(self, email: str, password: str) -> User:
        """Create user with hashed password."""
        validate_email(email)
        validate_password(password)

        if await self.store.find_by_email(email) is not None:
            raise ConflictError(f"Email '{email}' is already registered")

        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user = User(email=email, password=password_hash, created_at=to_iso(self.core.clock()))
        await self.store.insert(user)
        logger.info("user_created", uuid=user.uuid)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Verify credentials and return the matching user."""
        user = await self.store.find_by_email(email)
        if user is None:
            raise UserNotFoundError
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES or not bcrypt.checkpw(encoded, user.password.encode("utf-8")):
            raise WrongPasswordError
        return user

    async def update_location(self, uuid: str, location: Location, updated_at: str) -> User:
        """Store the new location and update time in one write."""
        user = await self.store.update_location(uuid, location, updated_at)
        if user is None:
            raise NotFoundError(f"User '{uuid}' not found")
        return user

    async def on_start(self) -> None:
        await self.store.on_start()
        logger.debug("user_service_started", store=type(self.store).__name__)

    async def on_stop(self) -> None:
        await self.store.on_stop()
