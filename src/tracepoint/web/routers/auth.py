from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, Field

from tracepoint.core.modules.session.models import AUTH_COOKIE_NAME
from tracepoint.core.modules.user.models import UserView
from tracepoint.web.deps import AppDep, AuthTokenDep, ClientAddressDep
from tracepoint.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class CredentialsRequest(BaseModel):
    """Email and password sent to login and signup."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class SessionUser(BaseModel):
    email: str
    uuid: str


class CheckLoginResponse(BaseModel):
    """Session status."""

    logged_in: bool = Field(..., serialization_alias="loggedIn", description="Whether the session token is valid")
    user: SessionUser | None = Field(None, description="Session identity when logged in")


class LoginResponse(BaseModel):
    user: UserView


class SignupUser(BaseModel):
    email: str


class SignupResponse(BaseModel):
    message: str
    user: SignupUser


class MessageResponse(BaseModel):
    message: str


@router.get(
    "/auth/check-login",
    summary="Check session",
    description="Report whether the request carries a valid session token. Never fails.",
    operation_id="checkLogin",
    response_model_exclude_none=True,
)
async def check_login(app: AppDep, auth_token: AuthTokenDep) -> CheckLoginResponse:
    auth = app.check_session(auth_token)
    if auth is None:
        return CheckLoginResponse(logged_in=False)
    return CheckLoginResponse(logged_in=True, user=SessionUser(email=auth.claims.email, uuid=auth.claims.uuid))


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password; the session token is set as an httpOnly cookie.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Unknown email or wrong password"},
        429: {"model": ErrorResponse, "description": "Too many login attempts"},
    },
)
async def login(
    login_data: CredentialsRequest, app: AppDep, client_address: ClientAddressDep, request: Request, response: Response
) -> LoginResponse:
    """Authenticate user and set the session cookie."""
    token, user = await app.login(login_data.email, login_data.password, client_address)
    config = request.app.state.config

    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=config.is_production,
        max_age=config.jwt_expires_hours * 60 * 60,
    )

    return LoginResponse(user=user)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Clear the session cookie. The token itself stays valid until it expires.",
    operation_id="logout",
)
async def logout(response: Response) -> MessageResponse:
    response.delete_cookie(AUTH_COOKIE_NAME)
    return MessageResponse(message="Logged out")


@router.post(
    "/auth/signup",
    summary="Create account",
    description="Register a new user with email and password (at least 8 characters).",
    operation_id="signup",
    responses={
        200: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid email or password too short"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def signup(signup_data: CredentialsRequest, app: AppDep) -> SignupResponse:
    user = await app.signup(signup_data.email, signup_data.password)
    return SignupResponse(message="Sign up completed", user=SignupUser(email=user.email))
