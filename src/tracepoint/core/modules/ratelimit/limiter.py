import structlog

from tracepoint.core.modules.ratelimit.store import InMemoryRateLimitStore, RateLimitStore
from tracepoint.errors import RateLimitExceededError
from tracepoint.utils import Clock, now

logger = structlog.get_logger(__name__)


def rate_limit_key(client_address: str | None, scope: str) -> str:
    """Build the composite limiter key from a client address and an action scope."""
    return f"{client_address or 'unknown'}:{scope}"


class SlidingWindowRateLimiter:
    """Admission gate bounding how many actions a key may perform per trailing window.

    Stale timestamps are pruned lazily, only when their key is checked again.
    The number of distinct keys is capped; past the cap the oldest-inserted key
    is evicted, so callers must not rely on which key goes.
    """

    def __init__(
        self,
        interval_ms: int,
        unique_token_per_interval: int,
        store: RateLimitStore | None = None,
        clock: Clock = now,
    ) -> None:
        self._interval_ms = interval_ms
        self._max_keys = unique_token_per_interval
        self._store: RateLimitStore = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock

    async def check(self, key: str, limit: int, window_ms: int | None = None) -> None:
        """Record an action for `key` or raise if the window is already full.

        A rejected attempt is not recorded.

        Raises:
            RateLimitExceededError: `limit` actions already happened within the window
        """
        window = self._interval_ms if window_ms is None else window_ms
        async with self._store.lock(key):
            current = round(self._clock().timestamp() * 1000)
            window_start = current - window
            timestamps = [ts for ts in await self._store.get(key) if ts >= window_start]

            if len(timestamps) >= limit:
                await self._store.set(key, timestamps)
                logger.info("rate_limit_exceeded", key=key, limit=limit, window_ms=window)
                raise RateLimitExceededError

            timestamps.append(current)
            await self._store.set(key, timestamps)

        evicted = await self._store.prune(self._max_keys)
        if evicted:
            logger.debug("rate_limit_keys_evicted", count=len(evicted))
