"""
Abstract identity provider interface.

Token issuance lives with an external identity provider. This service only
needs to turn a bearer token into the signed-in user's opaque ID, so the
contract is limited to verification.

Example:
    from common.auth import AuthProvider, JWTAuth, FirebaseAuth

    def get_auth_provider(settings) -> AuthProvider:
        if settings.AUTH_PROVIDER == "firebase":
            return FirebaseAuth(settings.FIREBASE_CREDENTIALS_PATH)
        return JWTAuth(secret=settings.JWT_SECRET)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class AuthProvider(ABC):
    """
    Abstract authentication provider.

    Implement this interface for different identity providers.
    """

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify an authentication token.

        Args:
            token: The token to verify

        Returns:
            Dictionary containing decoded token claims (at minimum: sub)

        Raises:
            ValueError: If token is invalid, expired, or revoked
        """
        pass
