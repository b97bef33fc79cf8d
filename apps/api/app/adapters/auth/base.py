"""Identity verifier interfaces."""

from abc import ABC, abstractmethod

from app.schemas.auth import AuthPrincipal


class AuthVerificationError(Exception):
    """Raised when a bearer credential cannot be verified."""


class TokenVerifier(ABC):
    """Black-box "verify token, return principal or fail" boundary."""

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return normalized principal."""


__all__ = ["AuthVerificationError", "TokenVerifier"]
