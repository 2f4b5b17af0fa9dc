from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog

from tracepoint.config import Config
from tracepoint.core.core import Core
from tracepoint.core.modules.location.models import Location
from tracepoint.core.modules.ratelimit.store import RateLimitStore
from tracepoint.core.modules.session.models import Authentication
from tracepoint.core.modules.token.models import AuthToken
from tracepoint.core.modules.user.models import UserView
from tracepoint.core.modules.user.store import UserStore
from tracepoint.errors import AuthenticationError
from tracepoint.utils import Clock, now

logger = structlog.get_logger(__name__)


class App:
    """Facade for all application operations, checks the session before delegating to Core."""

    def __init__(
        self,
        config: Config,
        user_store: UserStore | None = None,
        rate_limit_store: RateLimitStore | None = None,
        clock: Clock = now,
    ) -> None:
        self._core = Core(config, user_store=user_store, rate_limit_store=rate_limit_store, clock=clock)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    def check_session(self, auth_token: str | None) -> Authentication | None:
        """Resolve the session for read-only checks; never raises."""
        return self._core.services.session.authenticate(auth_token)

    async def login(self, email: str, password: str, client_address: str | None) -> tuple[AuthToken, UserView]:
        """Authenticate user and mint a session token."""
        await self._core.services.ratelimit.check_login(client_address)
        try:
            user = await self._core.services.user.authenticate(email, password)
        except AuthenticationError as e:
            logger.info("login_failed", reason=e.kind.value)
            raise
        logger.info("login_succeeded", uuid=user.uuid)
        return self._core.services.session.issue_token(user), UserView.from_domain(user)

    async def signup(self, email: str, password: str) -> UserView:
        """Register a new user."""
        user = await self._core.services.user.create_user(email, password)
        return UserView.from_domain(user)

    def require_session(self, auth_token: str | None) -> Authentication:
        """Resolve the session for protected endpoints; raises on a missing or invalid token."""
        return self._core.services.session.require(auth_token)

    async def update_location(self, auth: Authentication, payload: Any) -> Location:
        """Store a new location for the session's user (throttled)."""
        return await self._core.services.location.update_location(auth, payload)
