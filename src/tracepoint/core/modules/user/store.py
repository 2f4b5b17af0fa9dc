"""User record storage backends.

`MongoUserStore` is used when a database URL is configured; `InMemoryUserStore`
keeps records in process memory for local runs and tests.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import AutoReconnect, DuplicateKeyError, PyMongoError

from tracepoint.core.modules.location.models import Location
from tracepoint.core.modules.user.models import User
from tracepoint.errors import ConflictError, StoreError

logger = structlog.get_logger(__name__)


class UserStore(Protocol):
    """User records keyed by uuid with a unique secondary lookup by email."""

    async def on_start(self) -> None: ...

    async def on_stop(self) -> None: ...

    async def get(self, uuid: str) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...

    async def insert(self, user: User) -> None: ...

    async def update_location(self, uuid: str, location: Location, updated_at: str) -> User | None: ...


class InMemoryUserStore:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._email_index: dict[str, str] = {}

    async def on_start(self) -> None:
        pass

    async def on_stop(self) -> None:
        pass

    async def get(self, uuid: str) -> User | None:
        user = self._users.get(uuid)
        return user.model_copy(deep=True) if user else None

    async def find_by_email(self, email: str) -> User | None:
        uuid = self._email_index.get(email)
        return await self.get(uuid) if uuid else None

    async def insert(self, user: User) -> None:
        if user.email in self._email_index or user.uuid in self._users:
            raise ConflictError(f"Email '{user.email}' is already registered")
        self._users[user.uuid] = user.model_copy(deep=True)
        self._email_index[user.email] = user.uuid

    async def update_location(self, uuid: str, location: Location, updated_at: str) -> User | None:
        user = self._users.get(uuid)
        if user is None:
            return None
        self._users[uuid] = user.model_copy(update={"last_location": location, "last_updated": updated_at})
        return await self.get(uuid)


class MongoUserStore:
    """MongoDB-backed user store with a unique index on email.

    Reads and the location update are retried on transient connection errors;
    inserts are not, since a retried insert could report a spurious conflict.
    """

    def __init__(self, database_url: str, retry_attempts: int = 3, retry_delay: float = 0.1) -> None:
        self._client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(database_url, uuidRepresentation="standard")
        database = self._client.get_database(urlparse(database_url).path[1:])
        self._collection = database.get_collection("users")
        self._retry_attempts = max(1, retry_attempts)
        self._retry_delay = retry_delay

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("email", 1)], unique=True)

    async def on_stop(self) -> None:
        await self._client.aclose()

    async def get(self, uuid: str) -> User | None:
        document = await self._with_retry("get", lambda: self._collection.find_one({"_id": uuid}))
        return User.from_mongo(document) if document else None

    async def find_by_email(self, email: str) -> User | None:
        document = await self._with_retry("find_by_email", lambda: self._collection.find_one({"email": email}))
        return User.from_mongo(document) if document else None

    async def insert(self, user: User) -> None:
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError(f"Email '{user.email}' is already registered") from e
        except PyMongoError as e:
            raise StoreError("Failed to insert user") from e

    async def update_location(self, uuid: str, location: Location, updated_at: str) -> User | None:
        document = await self._with_retry(
            "update_location",
            lambda: self._collection.find_one_and_update(
                {"_id": uuid},
                {"$set": {"lastLocation": location.model_dump(), "lastUpdated": updated_at}},
                return_document=ReturnDocument.AFTER,
            ),
        )
        return User.from_mongo(document) if document else None

    async def _with_retry(
        self, operation: str, call: Callable[[], Awaitable[dict[str, Any] | None]]
    ) -> dict[str, Any] | None:
        for attempt in range(1, self._retry_attempts + 1):
            try:
                return await call()
            except AutoReconnect as e:
                if attempt == self._retry_attempts:
                    raise StoreError(f"User store {operation} failed") from e
                logger.warning("user_store_retry", operation=operation, attempt=attempt, error=str(e))
                await asyncio.sleep(self._retry_delay * attempt)
            except PyMongoError as e:
                raise StoreError(f"User store {operation} failed") from e
        raise StoreError(f"User store {operation} failed")
