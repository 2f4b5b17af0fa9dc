from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from tracepoint.app import App
from tracepoint.core.modules.session.models import AUTH_COOKIE_NAME, Authentication

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name=AUTH_COOKIE_NAME, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> str | None:
    """Get the raw session token from the Authorization Bearer header or cookie.

    The token is not validated here; the session service decides whether a
    missing or invalid token is an error for the endpoint at hand.
    """
    if credentials and credentials.scheme == "Bearer":
        return credentials.credentials
    return token_cookie or None


async def get_authentication(
    app: Annotated[App, Depends(get_app)], auth_token: Annotated[str | None, Depends(get_auth_token)]
) -> Authentication:
    """Require a valid session; runs before the request body is validated."""
    return app.require_session(auth_token)


async def get_client_address(request: Request) -> str | None:
    """Client address, preferring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or None
    return request.client.host if request.client else None


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[str | None, Depends(get_auth_token)]
ClientAddressDep = Annotated[str | None, Depends(get_client_address)]
AuthenticationDep = Annotated[Authentication, Depends(get_authentication)]
