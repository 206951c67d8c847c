"""Authentication endpoints: sign-up, login, token check and logout."""

from fastapi import APIRouter, Request, status

from storerate.core.config import settings
from storerate.core.deps import CurrentUser, DBSession
from storerate.core.rate_limit import limiter
from storerate.core.validation import validate_login, validate_registration
from storerate.schemas.common import ApiResponse, ok
from storerate.schemas.user import (
    AuthData,
    CurrentUserData,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from storerate.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a normal-user account and return a session token.",
)
@limiter.limit(settings.register_rate_limit)
async def register(
    request: Request,  # noqa: ARG001 (slowapi reads it)
    data: RegisterRequest,
    db: DBSession,
) -> ApiResponse[AuthData]:
    validate_registration(data.name, data.email, data.password, data.address)

    user, token = await AuthService(db).register(
        data.name, data.email, data.password, data.address
    )
    return ok(
        "User registered successfully",
        AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthData],
    summary="Log in",
    description="Exchange email and password for a session token.",
)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,  # noqa: ARG001 (slowapi reads it)
    data: LoginRequest,
    db: DBSession,
) -> ApiResponse[AuthData]:
    validate_login(data.email, data.password)

    user, token = await AuthService(db).authenticate(data.email, data.password)
    return ok(
        "Login successful",
        AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.get(
    "/verify",
    response_model=ApiResponse[CurrentUserData],
    summary="Verify token",
    description="Confirm the bearer token is valid and return the current user.",
)
async def verify(user: CurrentUser) -> ApiResponse[CurrentUserData]:
    return ok("Token is valid", CurrentUserData(user=UserResponse.model_validate(user)))


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Log out",
    description="Tokens are stateless; the client discards its token.",
)
async def logout(_user: CurrentUser) -> ApiResponse[None]:
    return ok("Logged out successfully")
