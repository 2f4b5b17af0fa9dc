from functools import cached_property

from tracepoint.core.core import Service
from tracepoint.core.modules.ratelimit.limiter import SlidingWindowRateLimiter, rate_limit_key

LOGIN_SCOPE = "login"


class RateLimitService(Service):
    """Rate limits for unauthenticated mutation endpoints."""

    @cached_property
    def login_limiter(self) -> SlidingWindowRateLimiter:
        config = self.core.config
        return SlidingWindowRateLimiter(
            interval_ms=config.login_rate_limit_window_ms,
            unique_token_per_interval=config.rate_limit_max_keys,
            store=self.core.rate_limit_store,
            clock=lambda: self.core.clock(),
        )

    async def check_login(self, client_address: str | None) -> None:
        """Admit a login attempt from `client_address` or raise RateLimitExceededError."""
        await self.login_limiter.check(rate_limit_key(client_address, LOGIN_SCOPE), self.core.config.login_rate_limit)
