"""
FastAPI authentication dependencies.

Provides a factory that builds a dependency resolving the signed-in user's
ID from a bearer token. Works with any AuthProvider implementation.

Example:
    from common.auth import JWTAuth, create_auth_dependency

    auth = JWTAuth(secret="your-secret")
    get_current_user_id = create_auth_dependency(lambda: auth)

    @app.post("/study-groups/{group_id}/join")
    async def join(group_id: str, user_id: str = Depends(get_current_user_id)):
        ...
"""

import logging
from typing import Callable, Optional

from fastapi import Header

from common.auth.base import AuthProvider
from common.utils.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)


def create_auth_dependency(
    get_auth_provider: Callable[[], AuthProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create FastAPI auth dependencies.

    Args:
        get_auth_provider: Callable that returns the AuthProvider instance
        header_name: Header to extract token from (default: Authorization)
        scheme: Auth scheme prefix (default: Bearer)

    Returns:
        A FastAPI dependency function that extracts and verifies the user ID
    """

    async def get_current_user_id(
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> str:
        """
        Extract and verify user ID from the authorization header.

        Raises:
            UnauthorizedException: If token is missing, invalid, or expired
        """
        if not authorization:
            raise UnauthorizedException("Missing authorization header")

        prefix = f"{scheme} "
        if not authorization.startswith(prefix):
            raise UnauthorizedException(
                f"Invalid authorization scheme. Expected: {scheme}",
                code="INVALID_AUTH_SCHEME",
            )

        token = authorization[len(prefix) :]

        if not token:
            raise UnauthorizedException("Token is empty", code="EMPTY_TOKEN")

        auth = get_auth_provider()
        try:
            payload = await auth.verify_token(token)
        except ValueError as e:
            logger.debug(f"Token rejected: {e}")
            raise UnauthorizedException(str(e), code="INVALID_TOKEN")

        user_id = payload.get("sub") or payload.get("uid")
        if not user_id:
            raise UnauthorizedException("Token missing user ID", code="INVALID_TOKEN")

        return str(user_id)

    return get_current_user_id
