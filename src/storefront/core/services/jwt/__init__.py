from .jwt_gen import IssuedToken, JwtGeneratorService
from .jwt_verify import JwtVerificationService

__all__ = ["IssuedToken", "JwtGeneratorService", "JwtVerificationService"]
