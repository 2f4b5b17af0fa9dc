from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, cast

from tracepoint.config import Config
from tracepoint.core.modules.ratelimit.store import InMemoryRateLimitStore, RateLimitStore
from tracepoint.core.modules.user.store import InMemoryUserStore, MongoUserStore, UserStore
from tracepoint.utils import Clock, now

if TYPE_CHECKING:
    from tracepoint.core.modules.location.service import LocationService
    from tracepoint.core.modules.ratelimit.service import RateLimitService
    from tracepoint.core.modules.session.service import SessionService
    from tracepoint.core.modules.user.service import UserService


class Service:
    """Base class for services with direct user store access."""

    def __init__(self, store: UserStore) -> None:
        self.store = store
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    user: UserService
    session: SessionService
    ratelimit: RateLimitService
    location: LocationService

    def __init__(self, store: UserStore) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - user owns the store lifecycle
        service_configs = [
            ("user", "tracepoint.core.modules.user.service", "UserService"),
            ("session", "tracepoint.core.modules.session.service", "SessionService"),
            ("ratelimit", "tracepoint.core.modules.ratelimit.service", "RateLimitService"),
            ("location", "tracepoint.core.modules.location.service", "LocationService"),
        ]

        # Dynamically import and instantiate services
        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(store)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services that have cleanup logic."""
        for service in reversed(self._services):
            await service.on_stop()


def create_user_store(config: Config) -> UserStore:
    if config.database_url:
        return MongoUserStore(config.database_url, retry_attempts=config.store_retry_attempts)
    return InMemoryUserStore()


class Core:
    """Container providing config, stores, clock, and all service instances."""

    config: Config
    user_store: UserStore
    rate_limit_store: RateLimitStore
    clock: Clock
    services: Services

    def __init__(
        self,
        config: Config,
        user_store: UserStore | None = None,
        rate_limit_store: RateLimitStore | None = None,
        clock: Clock = now,
    ) -> None:
        """Initialize core with config, stores, and auto-register services."""
        self.config = config
        self.user_store = user_store if user_store is not None else create_user_store(config)
        self.rate_limit_store = rate_limit_store if rate_limit_store is not None else InMemoryRateLimitStore()
        self.clock = clock
        self.services = Services(self.user_store)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services; the user service closes the store connection."""
        await self.services.stop_all()
