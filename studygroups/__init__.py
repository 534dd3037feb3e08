"""
Study Groups System

Lets members create study groups, join and leave them, and schedule
sessions inside each group's active date range.
"""

from studygroups.services.membership_ledger import MembershipLedger
from studygroups.services.session_service import SessionService
from studygroups.services.session_validator import SessionValidator
from studygroups.services.gateway import GroupGateway, MongoGroupGateway

__all__ = [
    "MembershipLedger",
    "SessionService",
    "SessionValidator",
    "GroupGateway",
    "MongoGroupGateway",
]
