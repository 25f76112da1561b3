"""FastAPI dependency implementations."""

from collections.abc import Iterator

from fastapi import BackgroundTasks, Depends, Request
from sqlmodel import Session

from src.storefront.api.http.app_data import ApplicationDependencies
from src.storefront.core.errors import ForbiddenError, UnauthorizedError
from src.storefront.core.services import (
    AnalyticsService,
    AuthService,
    CategoryService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    ProductService,
    ViewCountRecorder,
)
from src.storefront.entities.core.user import User, UserRole


def _app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return _app_dependencies(request).database_service


def get_db_session(
    db_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """One session per request, closed once the response is sent."""
    session = db_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    return _app_dependencies(request).jwt_verify_service


def get_jwt_generation_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    return _app_dependencies(request).jwt_generation_service


def get_auth_service(
    db: Session = Depends(get_db_session),
    jwt_generator: JwtGeneratorService = Depends(get_jwt_generation_service),
    jwt_verifier: JwtVerificationService = Depends(get_jwt_verify_service),
) -> AuthService:
    return AuthService(db, jwt_generator=jwt_generator, jwt_verifier=jwt_verifier)


def get_category_service(db: Session = Depends(get_db_session)) -> CategoryService:
    return CategoryService(db)


def get_view_recorder(
    background_tasks: BackgroundTasks,
    db_service: DbSessionService = Depends(get_database_service),
) -> ViewCountRecorder:
    return ViewCountRecorder(db_service, background_tasks)


def get_product_service(
    db: Session = Depends(get_db_session),
    category_service: CategoryService = Depends(get_category_service),
    view_recorder: ViewCountRecorder = Depends(get_view_recorder),
) -> ProductService:
    return ProductService(db, category_service, view_recorder)


def get_analytics_service(
    product_service: ProductService = Depends(get_product_service),
) -> AnalyticsService:
    return AnalyticsService(product_service)


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _authenticate(request: Request, token: str, auth_service: AuthService) -> User:
    user, claims = auth_service.authenticate(token)
    request.state.claims = claims
    request.state.roles = {user.role.value}
    request.state.uid = user.id
    return user


def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Authenticate the request using a Bearer access token."""
    token = _bearer_token(request)
    if token is None:
        raise UnauthorizedError("Missing Bearer token")
    return _authenticate(request, token, auth_service)


def get_optional_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> User | None:
    """Like ``get_current_user`` but anonymous requests yield ``None``.

    A token that is present but invalid is still rejected.
    """
    token = _bearer_token(request)
    if token is None:
        return None
    return _authenticate(request, token, auth_service)


def require_role(required_role: str):
    """Create a dependency that requires a specific role for the authenticated user."""

    def dep(user: User = Depends(get_current_user)) -> User:
        if user.role.value != required_role:
            raise ForbiddenError(f"Missing required role: {required_role}")
        return user

    return dep


require_admin = require_role(UserRole.ADMIN.value)
