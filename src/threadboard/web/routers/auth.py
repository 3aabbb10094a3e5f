from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from threadboard.web.deps import AppDep, AuthTokenDep
from threadboard.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])

SESSION_MAX_AGE = 30 * 24 * 60 * 60  # Matches session TTL


class CredentialsRequest(BaseModel):
    """Email and password, used for both signup and login."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class LoginResponse(BaseModel):
    """Authentication response."""

    token: str = Field(..., description="Authentication token for subsequent requests")


def _set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key="auth_token",
        value=token,
        httponly=True,
        samesite="lax",
        secure=False,  # Set to True in production with HTTPS
        max_age=SESSION_MAX_AGE,
    )


@router.post(
    "/auth/signup",
    summary="Create account",
    description="Register with email and password. The new account is logged in right away.",
    operation_id="signup",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid email, weak password or email already taken"},
    },
)
async def signup(request: CredentialsRequest, app: AppDep, response: Response) -> LoginResponse:
    token = await app.signup(request.email, request.password)
    _set_token_cookie(response, token)
    return LoginResponse(token=token)


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive an authentication token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(request: CredentialsRequest, app: AppDep, response: Response) -> LoginResponse:
    token = await app.login(request.email, request.password)
    _set_token_cookie(response, token)
    return LoginResponse(token=token)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Invalidate the current authentication session.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(app: AppDep, auth_token: AuthTokenDep, response: Response) -> None:
    await app.logout(auth_token)
    response.delete_cookie("auth_token")
