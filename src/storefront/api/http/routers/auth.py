"""Authentication endpoints: registration, login, token refresh and logout."""

from fastapi import APIRouter, Depends, Query, Request

from src.storefront.api.http.deps import (
    get_auth_service,
    get_current_user,
    get_optional_user,
    require_admin,
)
from src.storefront.api.http.envelope import EnvelopeRoute
from src.storefront.api.http.middleware.limiter import auth_rate_limit
from src.storefront.core.models.auth import (
    AuthTokens,
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserProfile,
)
from src.storefront.core.models.common import MessageResponse, PaginatedResult
from src.storefront.core.services import AuthService
from src.storefront.entities.core.user import User

router = APIRouter(prefix="/auth", tags=["auth"], route_class=EnvelopeRoute)


@router.post("/register", status_code=201, dependencies=[Depends(auth_rate_limit())])
def register(
    data: RegisterRequest,
    requesting_user: User | None = Depends(get_optional_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthTokens:
    """Create an account. Only an authenticated admin may create admin accounts."""
    return auth_service.register(data, requesting_user)


@router.post("/login", dependencies=[Depends(auth_rate_limit())])
def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthTokens:
    return auth_service.login(data.email, data.password)


@router.post("/refresh")
def refresh(
    data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthTokens:
    """Exchange a valid refresh token for a new token pair."""
    return auth_service.refresh_token(data.refresh_token)


@router.get("/profile")
def profile(
    user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserProfile:
    return UserProfile.from_user(auth_service.get_profile(user.id))


@router.post("/logout")
def logout(
    request: Request,
    data: LogoutRequest | None = None,
    user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the presented access token and, optionally, a refresh token."""
    auth_service.logout(
        user,
        request.state.claims,
        refresh_token=data.refresh_token if data else None,
    )
    return MessageResponse(message="Logged out successfully")


@router.post("/change-password")
def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth_service.change_password(user.id, data)
    return MessageResponse(message="Password changed successfully")


@router.get("/users")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: User = Depends(require_admin),
    auth_service: AuthService = Depends(get_auth_service),
) -> PaginatedResult[UserProfile]:
    return auth_service.list_users(page, limit)
