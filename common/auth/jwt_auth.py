"""
JWT authentication provider.

Verifies HS256 (or other symmetric) tokens signed by an identity provider
that shares its secret with this service. Useful for local development and
for deployments that front the API with their own token issuer.

Example:
    auth = JWTAuth(secret="your-secret-key")

    token = auth.create_token("user-123")
    claims = await auth.verify_token(token)
    print(claims["sub"])  # user-123
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any

from jose import jwt, JWTError

from common.auth.base import AuthProvider


class JWTAuth(AuthProvider):
    """JWT verification provider."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 30,
    ):
        """
        Initialize JWT auth provider.

        Args:
            secret: Secret key shared with the token issuer
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Lifetime of tokens minted by create_token
        """
        self.secret = secret
        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)

    def create_token(self, user_id: str, **claims: Any) -> str:
        """Mint a signed token for user_id (development and tests)."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + self.access_token_expire,
            **claims,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify and decode a JWT token."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
            )
            return payload
        except JWTError as e:
            raise ValueError(f"Invalid token: {e}")
