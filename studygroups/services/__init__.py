"""Study group services."""

from studygroups.services.gateway import GroupGateway, MongoGroupGateway
from studygroups.services.membership_ledger import MembershipLedger
from studygroups.services.session_service import SessionService
from studygroups.services.session_validator import SessionValidator
from studygroups.services.catalog import filter_by_year, partition_by_membership
from studygroups.services.schedule import parse_schedule_window

__all__ = [
    "GroupGateway",
    "MongoGroupGateway",
    "MembershipLedger",
    "SessionService",
    "SessionValidator",
    "filter_by_year",
    "partition_by_membership",
    "parse_schedule_window",
]
