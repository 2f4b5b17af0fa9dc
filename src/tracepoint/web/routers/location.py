from typing import Annotated, Any

from fastapi import APIRouter, Body
from pydantic import BaseModel

from tracepoint.core.modules.location.models import Location
from tracepoint.web.deps import AppDep, AuthenticationDep
from tracepoint.web.openapi import ErrorResponse

router = APIRouter(tags=["location"])


class LocationUpdateResponse(BaseModel):
    message: str
    location: Location


@router.post(
    "/location/update",
    summary="Update location",
    description=(
        "Store the current location of the authenticated user. "
        "Updates closer together than the configured minimum interval are rejected."
    ),
    operation_id="updateLocation",
    responses={
        200: {"description": "Location stored"},
        400: {"model": ErrorResponse, "description": "Latitude/longitude missing or not numbers"},
        401: {"model": ErrorResponse, "description": "Missing or invalid session"},
        429: {"model": ErrorResponse, "description": "Minimum interval between updates not elapsed"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
)
async def update_location(
    app: AppDep,
    auth: AuthenticationDep,
    payload: Annotated[Any, Body(examples=[{"latitude": 37.5665, "longitude": 126.978}])],
) -> LocationUpdateResponse:
    location = await app.update_location(auth, payload)
    return LocationUpdateResponse(message="Location updated", location=location)
