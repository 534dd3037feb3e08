"""
FastAPI dependencies for the study group system.

Services are built once at application startup around a single gateway and
handed to route handlers through Depends.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import AuthProvider, FirebaseAuth, JWTAuth, create_auth_dependency
from studygroups.config import Settings
from studygroups.services.gateway import GroupGateway, MongoGroupGateway
from studygroups.services.membership_ledger import MembershipLedger
from studygroups.services.session_service import SessionService


_gateway: Optional[GroupGateway] = None
_membership_ledger: Optional[MembershipLedger] = None
_session_service: Optional[SessionService] = None
_auth_provider: Optional[AuthProvider] = None


def init_study_group_services(
    db: AsyncIOMotorDatabase,
    settings: Settings,
) -> MongoGroupGateway:
    """
    Initialize study group services with database connection.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        settings: Application settings

    Returns:
        The gateway, so the caller can create indexes
    """
    global _gateway, _membership_ledger, _session_service

    gateway = MongoGroupGateway(db=db, timeout_seconds=settings.GATEWAY_TIMEOUT_SECONDS)
    _gateway = gateway
    _membership_ledger = MembershipLedger(
        gateway=gateway,
        write_attempts=settings.MEMBERSHIP_WRITE_ATTEMPTS,
        academic_years=settings.get_academic_years(),
    )
    _session_service = SessionService(gateway=gateway)
    return gateway


def init_auth_provider(settings: Settings) -> None:
    """
    Initialize the identity provider selected by AUTH_PROVIDER.

    Called once at application startup.
    """
    global _auth_provider

    if settings.AUTH_PROVIDER == "firebase":
        _auth_provider = FirebaseAuth(
            credentials_path=settings.FIREBASE_CREDENTIALS_PATH,
            project_id=settings.FIREBASE_PROJECT_ID,
        )
    else:
        _auth_provider = JWTAuth(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )


def get_gateway() -> GroupGateway:
    """Get gateway instance."""
    if _gateway is None:
        raise RuntimeError("Study group services not initialized.")
    return _gateway


def get_membership_ledger() -> MembershipLedger:
    """Get membership ledger instance."""
    if _membership_ledger is None:
        raise RuntimeError("Study group services not initialized.")
    return _membership_ledger


def get_session_service() -> SessionService:
    """Get session service instance."""
    if _session_service is None:
        raise RuntimeError("Study group services not initialized.")
    return _session_service


def get_auth_provider() -> AuthProvider:
    """Get identity provider instance."""
    if _auth_provider is None:
        raise RuntimeError("Auth provider not initialized.")
    return _auth_provider


require_auth = create_auth_dependency(get_auth_provider)
