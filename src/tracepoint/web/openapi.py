from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from tracepoint.core.modules.session.models import AUTH_COOKIE_NAME
from tracepoint.errors import ErrorKind


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Tracepoint API",
            version="0.1.0",
            summary="Session-authenticated location tracking",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token as a bearer token",
            },
            "AuthTokenCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": AUTH_COOKIE_NAME,
                "description": "Session token stored in cookie (set by login)",
            },
        }

        # Only the location update requires a session
        protected_endpoints = {
            ("POST", "/api/location/update"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in protected_endpoints:
                    operation["security"] = [{"BearerAuth": []}, {"AuthTokenCookie": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorKind = Field(..., description="Machine-readable error kind")
    message: str = Field(..., description="Human-readable error message")
