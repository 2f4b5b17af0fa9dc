from tracepoint.web.routers.auth import router as auth_router
from tracepoint.web.routers.location import router as location_router

__all__ = [
    "auth_router",
    "location_router",
]
