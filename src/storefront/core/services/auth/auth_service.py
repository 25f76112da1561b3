"""Account registration, credential checks and JWT session management."""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.storefront.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from src.storefront.core.models.auth import (
    AuthTokens,
    ChangePasswordRequest,
    RegisterRequest,
    UserProfile,
)
from src.storefront.core.models.common import PaginatedResult
from src.storefront.core.security import (
    hash_password,
    parse_expiration_to_seconds,
    verify_password,
)
from src.storefront.core.services.auth.token_blacklist import TokenBlacklistService
from src.storefront.core.services.jwt import JwtGeneratorService, JwtVerificationService
from src.storefront.entities.core.blacklisted_token import TokenType
from src.storefront.entities.core.user import User, UserRepository, UserRole
from src.storefront.runtime.context import get_config

EMAIL_TAKEN = "User with this email already exists"
USER_NOT_FOUND = "User not found"
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


class AuthService:
    """Authentication use cases bound to one request-scoped session."""

    def __init__(
        self,
        session: Session,
        jwt_generator: JwtGeneratorService | None = None,
        jwt_verifier: JwtVerificationService | None = None,
        blacklist: TokenBlacklistService | None = None,
    ) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._jwt_generator = jwt_generator or JwtGeneratorService()
        self._jwt_verifier = jwt_verifier or JwtVerificationService()
        self._blacklist = blacklist or TokenBlacklistService(session)

    # -- accounts ---------------------------------------------------------

    def _create_user(self, data: RegisterRequest, role: UserRole) -> User:
        if self._users.get_by_email(data.email) is not None:
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            role=role,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
        )
        try:
            created = self._users.create(user)
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConflictError(EMAIL_TAKEN) from e

        logger.bind(user_id=created.id, role=created.role.value).info("User registered")
        return created

    def register(
        self, data: RegisterRequest, requesting_user: User | None = None
    ) -> AuthTokens:
        """Create an account and sign it in.

        Creating an ``admin`` account requires an authenticated admin
        requester.

        Raises:
            ConflictError: If the email is already registered
            ForbiddenError: If an admin account is requested by a non-admin
        """
        if data.role == UserRole.ADMIN and (
            requesting_user is None or not requesting_user.is_admin
        ):
            raise ForbiddenError("Only admin users can create admin accounts")

        user = self._create_user(data, data.role)
        return self._issue_tokens(user)

    def create_admin(self, data: RegisterRequest) -> User:
        """Create an admin account without a requester, for bootstrapping."""
        return self._create_user(data, UserRole.ADMIN)

    def count_users(self, role: UserRole | None = None) -> int:
        return self._users.count(role=role.value if role else None)

    def validate_user(self, email: str, password: str) -> User | None:
        user = self._users.get_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def login(self, email: str, password: str) -> AuthTokens:
        user = self.validate_user(email, password)
        if user is None:
            logger.bind(email=email.strip().lower()).warning("Failed login attempt")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        self._users.touch_last_login(user.id)
        self._session.commit()
        logger.bind(user_id=user.id).info("User logged in")
        return self._issue_tokens(self._users.get(user.id) or user)

    def get_profile(self, user_id: str) -> User:
        user = self._users.get_active(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def change_password(self, user_id: str, data: ChangePasswordRequest) -> None:
        user = self.get_profile(user_id)
        if not verify_password(data.current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")

        self._users.update_fields(
            user_id, {"password_hash": hash_password(data.new_password)}
        )
        self._session.commit()
        logger.bind(user_id=user_id).info("Password changed")

    def deactivate_user(self, user_id: str) -> None:
        if self._users.get(user_id) is None:
            raise NotFoundError(USER_NOT_FOUND)
        self._users.update_fields(user_id, {"is_active": False})
        self._session.commit()
        logger.bind(user_id=user_id).info("User deactivated")

    def list_users(self, page: int = 1, limit: int = 20) -> PaginatedResult[UserProfile]:
        page = max(page, 1)
        limit = min(max(limit, 1), get_config().search.max_limit)
        users = self._users.list_page((page - 1) * limit, limit)
        return PaginatedResult[UserProfile].build(
            data=[UserProfile.from_user(user) for user in users],
            total=self._users.count(),
            page=page,
            limit=limit,
        )

    # -- tokens -----------------------------------------------------------

    def _issue_tokens(self, user: User) -> AuthTokens:
        jwt_config = get_config().jwt
        claims = {"email": user.email, "role": user.role.value}
        access_seconds = parse_expiration_to_seconds(jwt_config.access_expiration)

        access = self._jwt_generator.generate_jwt(
            subject=user.id,
            secret=jwt_config.access_secret,
            claims={**claims, "type": TokenType.ACCESS.value},
            expires_in_seconds=access_seconds,
        )
        refresh = self._jwt_generator.generate_jwt(
            subject=user.id,
            secret=jwt_config.refresh_secret,
            claims={**claims, "type": TokenType.REFRESH.value},
            expires_in_seconds=parse_expiration_to_seconds(jwt_config.refresh_expiration),
        )
        return AuthTokens(
            access_token=access.token,
            refresh_token=refresh.token,
            expires_in=access_seconds,
            user=UserProfile.from_user(user),
        )

    def authenticate(self, access_token: str) -> tuple[User, dict]:
        """Resolve a bearer access token to its active user and claims.

        Raises:
            UnauthorizedError: If the token is invalid, revoked or its user
                is gone
        """
        claims = self._jwt_verifier.verify_jwt(
            access_token,
            get_config().jwt.access_secret,
            expected_type=TokenType.ACCESS.value,
        )
        if self._blacklist.is_blacklisted(claims["jti"]):
            raise UnauthorizedError("Token has been revoked")

        user = self._users.get_active(claims["sub"])
        if user is None:
            raise UnauthorizedError("User not found or inactive")
        return user, claims

    def refresh_token(self, refresh_token: str) -> AuthTokens:
        try:
            claims = self._jwt_verifier.verify_jwt(
                refresh_token,
                get_config().jwt.refresh_secret,
                expected_type=TokenType.REFRESH.value,
            )
            if self._blacklist.is_blacklisted(claims["jti"]):
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)
            user = self._users.get_active(claims["sub"])
            if user is None:
                raise UnauthorizedError(INVALID_REFRESH_TOKEN)
        except ServiceError as e:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN) from e
        return self._issue_tokens(user)

    def logout(
        self, user: User, access_claims: dict, refresh_token: str | None = None
    ) -> None:
        """Revoke the presented access token and, if given, the refresh token."""
        self._blacklist.add(
            access_claims["jti"],
            user.id,
            access_claims["exp"],
            TokenType.ACCESS,
        )

        if refresh_token:
            try:
                claims = self._jwt_verifier.verify_jwt(
                    refresh_token,
                    get_config().jwt.refresh_secret,
                    expected_type=TokenType.REFRESH.value,
                )
            except UnauthorizedError:
                logger.bind(user_id=user.id).debug("Ignoring invalid refresh token on logout")
            else:
                if claims["sub"] == user.id:
                    self._blacklist.add(
                        claims["jti"], user.id, claims["exp"], TokenType.REFRESH
                    )
        logger.bind(user_id=user.id).info("User logged out")
