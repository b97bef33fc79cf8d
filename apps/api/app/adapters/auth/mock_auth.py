"""Mock auth verifier for local development and tests."""

from app.adapters.auth.base import AuthVerificationError, TokenVerifier
from app.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic ``test:<user_id>`` tokens only."""

    def verify_token(self, token: str) -> AuthPrincipal:
        parts = token.split(":")
        if len(parts) != 2 or parts[0] != "test":
            raise AuthVerificationError("Invalid bearer token")

        user_id = parts[1].strip()
        if not user_id:
            raise AuthVerificationError("Bearer token missing user identity")

        return AuthPrincipal(user_id=user_id)


__all__ = ["MockTokenVerifier"]
