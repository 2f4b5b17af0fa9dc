from datetime import datetime, timedelta
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from tracepoint.config import FreshnessSource
from tracepoint.core.core import Service
from tracepoint.core.modules.location.models import Location, LocationPayload
from tracepoint.core.modules.session.models import Authentication
from tracepoint.errors import MalformedPayloadError, TooManyRequestsError
from tracepoint.utils import parse_iso, to_iso

logger = structlog.get_logger(__name__)


def parse_location_payload(payload: Any) -> Location:
    """Validate that latitude and longitude are both present and numeric."""
    try:
        return LocationPayload.model_validate(payload).to_location()
    except PydanticValidationError as e:
        raise MalformedPayloadError("Invalid location format") from e


class LocationService(Service):
    """Applies the minimum-interval policy to location updates."""

    @property
    def min_interval(self) -> timedelta:
        return timedelta(seconds=self.core.config.location_min_interval_seconds)

    async def last_update_time(self, auth: Authentication) -> datetime:
        """Reference time the interval is measured from.

        With FreshnessSource.TOKEN this is the `lastUpdated` claim minted at
        login, so after one accepted update every later one in the same session
        is measured from login time. FreshnessSource.RECORD also consults the
        stored record and uses whichever is later.
        """
        reference = parse_iso(auth.claims.last_updated)
        if self.core.config.freshness_source == FreshnessSource.RECORD:
            user = await self.core.services.user.get_user(auth.identity)
            if user.last_updated is not None:
                reference = max(reference, parse_iso(user.last_updated))
        return reference

    async def update_location(self, auth: Authentication, payload: Any) -> Location:
        """Validate and store a new location for the authenticated user.

        Raises:
            MalformedPayloadError: coordinates missing or not numbers
            TooManyRequestsError: the minimum interval has not elapsed
        """
        location = parse_location_payload(payload)

        current = self.core.clock()
        elapsed = current - await self.last_update_time(auth)
        if elapsed < self.min_interval:
            logger.info("location_update_too_frequent", uuid=auth.identity, elapsed=elapsed.total_seconds())
            raise TooManyRequestsError(
                f"Location can be updated once every {self.min_interval.total_seconds():g} seconds"
            )

        await self.core.services.user.update_location(auth.identity, location, to_iso(current))
        logger.info("location_updated", uuid=auth.identity)
        return location
