import time
from dataclasses import dataclass
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.storefront.core.errors import ServiceFailureError
from src.storefront.runtime.context import get_config

_RESERVED_CLAIMS = {"iss", "sub", "exp", "iat", "nbf", "jti"}


@dataclass(frozen=True)
class IssuedToken:
    """A signed token together with the identifiers needed to revoke it."""

    token: str
    jti: str
    expires_at: int


class JwtGeneratorService:
    """Service for generating locally signed JWTs."""

    def generate_jwt(
        self,
        subject: str,
        secret: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int = 900,
        issuer: str | None = None,
        algorithm: str | None = None,
    ) -> IssuedToken:
        """Generate a signed JWT using authlib.

        Args:
            subject: Subject (sub) claim, the user id
            secret: Signing secret
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime in seconds
            issuer: Issuer (iss) claim (defaults to config issuer)
            algorithm: Signing algorithm (defaults to config algorithm)

        Returns:
            The signed token with its ``jti`` and expiry timestamp

        Raises:
            ServiceFailureError: If the secret is missing or signing fails
        """
        config = get_config()
        if not secret:
            raise ServiceFailureError("JWT signing secret not configured")

        algorithm = algorithm or config.jwt.algorithm
        now = int(time.time())
        jti = generate_token(32)

        payload: dict[str, Any] = {
            "iss": issuer or config.jwt.issuer,
            "sub": subject,
            "iat": now,
            "nbf": now,
            "exp": now + expires_in_seconds,
            "jti": jti,
        }
        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in _RESERVED_CLAIMS}
            )

        try:
            token = JsonWebToken([algorithm]).encode(
                {"alg": algorithm, "typ": "JWT"}, payload, secret
            )
        except JoseError as e:
            logger.error("JWT encoding failed: {}", e)
            raise ServiceFailureError("JWT encoding failed") from e

        return IssuedToken(
            token=token.decode() if isinstance(token, bytes) else token,
            jti=jti,
            expires_at=payload["exp"],
        )
