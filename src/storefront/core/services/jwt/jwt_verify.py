"""JWT verification service."""

from typing import Any

from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.storefront.core.errors import UnauthorizedError
from src.storefront.runtime.context import get_config


class JwtVerificationService:
    def verify_jwt(
        self,
        token: str,
        secret: str,
        *,
        expected_type: str | None = None,
    ) -> dict[str, Any]:
        """Verify signature, issuer and lifetime of a locally issued token.

        Raises:
            UnauthorizedError: On any verification failure
        """
        cfg = get_config()
        decoder = JsonWebToken([cfg.jwt.algorithm])
        claims_options = {
            "iss": {"essential": True, "value": cfg.jwt.issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
            "jti": {"essential": True},
        }

        try:
            claims = decoder.decode(token, secret, claims_options=claims_options)
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as e:
            logger.debug("JWT verification failed: {}", e)
            raise UnauthorizedError("Invalid token") from e

        if expected_type is not None and claims.get("type") != expected_type:
            raise UnauthorizedError("Invalid token")

        return dict(claims)
