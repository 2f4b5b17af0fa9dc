import math

from pydantic import BaseModel, Field, StrictFloat, StrictInt, field_validator


class Location(BaseModel):
    """Geographic position reported by a client.

    Values are stored as given; there is no range check against
    [-90, 90] / [-180, 180].
    """

    latitude: float
    longitude: float


class LocationPayload(BaseModel):
    """Raw location update body; both coordinates must be finite JSON numbers."""

    latitude: StrictInt | StrictFloat = Field(..., description="Latitude in degrees")
    longitude: StrictInt | StrictFloat = Field(..., description="Longitude in degrees")

    @field_validator("latitude", "longitude")
    @classmethod
    def check_finite(cls, value: int | float) -> int | float:
        # NaN, Infinity and integers beyond float range are not usable coordinates
        try:
            finite = math.isfinite(float(value))
        except OverflowError:
            finite = False
        if not finite:
            raise ValueError("coordinate must be a finite number")
        return value

    def to_location(self) -> Location:
        return Location(latitude=float(self.latitude), longitude=float(self.longitude))
