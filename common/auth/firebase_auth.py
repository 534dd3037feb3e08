"""
Firebase Admin SDK authentication provider.

Verifies Firebase ID tokens issued to the mobile client. Requires the
firebase-admin package and either a service account credentials file or
application default credentials.

Example:
    auth = FirebaseAuth(credentials_path="path/to/serviceAccount.json")

    claims = await auth.verify_token(id_token)
    print(claims["uid"])  # Firebase user ID
"""

from typing import Dict, Any, Optional

import firebase_admin
from firebase_admin import auth, credentials

from common.auth.base import AuthProvider


class FirebaseAuth(AuthProvider):
    """Firebase ID token verification provider."""

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        check_revoked: bool = False,
    ):
        """
        Initialize Firebase auth provider.

        Args:
            credentials_path: Path to service account JSON file
            project_id: Firebase project ID (optional, can be inferred from credentials)
            check_revoked: Also reject tokens revoked on the Firebase side
        """
        # Initialize Firebase app if not already done
        if not firebase_admin._apps:
            if credentials_path:
                cred = credentials.Certificate(credentials_path)
            else:
                # Use default credentials (for GCP environments)
                cred = credentials.ApplicationDefault()

            options = {}
            if project_id:
                options["projectId"] = project_id

            firebase_admin.initialize_app(cred, options)

        self._auth = auth
        self._check_revoked = check_revoked

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify a Firebase ID token."""
        try:
            decoded = self._auth.verify_id_token(token, check_revoked=self._check_revoked)
            # Add 'sub' field for compatibility with JWT provider
            decoded["sub"] = decoded.get("uid")
            return decoded
        except self._auth.RevokedIdTokenError:
            raise ValueError("Token has been revoked")
        except self._auth.ExpiredIdTokenError:
            raise ValueError("Token has expired")
        except self._auth.InvalidIdTokenError as e:
            raise ValueError(f"Invalid token: {e}")
