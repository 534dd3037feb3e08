"""
Study group error kinds.

Every failure the membership and scheduling core can report has its own
class and machine-readable code, so callers can tell GROUP_FULL from
ALREADY_MEMBER without parsing messages. Only TransportFailure (and its
WriteConflict subclass) is worth retrying.
"""

from typing import Optional

from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)


# ─────────────────────────────────────────────────────────────────
# Schedule / session validation
# ─────────────────────────────────────────────────────────────────


class MalformedScheduleError(ValidationException):
    """Group schedule is not two ISO dates joined by " - ", or runs backwards."""

    def __init__(self, schedule: Optional[str], reason: str):
        super().__init__(
            message=f"Malformed group schedule {schedule!r}: {reason}",
            code="MALFORMED_SCHEDULE",
            details={"schedule": schedule, "reason": reason},
        )
        self.schedule = schedule
        self.reason = reason


class OutOfScheduleWindow(ValidationException):
    """Session date-time falls outside the group's schedule window."""

    def __init__(self, session_date_time, window):
        super().__init__(
            message=(
                f"Session time {session_date_time:%Y-%m-%d %H:%M} is outside the group schedule "
                f"{window.start:%Y-%m-%d} to {window.end:%Y-%m-%d}"
            ),
            code="OUT_OF_SCHEDULE_WINDOW",
            details={
                "sessionDateTime": session_date_time.isoformat(),
                "scheduleStart": window.start.isoformat(),
                "scheduleEnd": window.end.isoformat(),
            },
        )


class SessionGroupMismatch(ValidationException):
    """Session is validated against a group it does not belong to."""

    def __init__(self, session_group_id: str, group_id: str):
        super().__init__(
            message="Session does not belong to this study group",
            code="SESSION_GROUP_MISMATCH",
            details={"sessionGroupId": session_group_id, "groupId": group_id},
        )


class MissingRequiredField(ValidationException):
    """A required text field is empty."""

    def __init__(self, field: str):
        super().__init__(
            message=f"Missing required field: {field}",
            code="MISSING_REQUIRED_FIELD",
            details={"field": field},
        )
        self.field = field


# ─────────────────────────────────────────────────────────────────
# Membership
# ─────────────────────────────────────────────────────────────────


class GroupNotFound(NotFoundException):
    """No group exists with the given ID."""

    def __init__(self, group_id: str):
        super().__init__(
            message="Study group not found",
            code="GROUP_NOT_FOUND",
            details={"groupId": group_id},
        )
        self.group_id = group_id


class GroupAlreadyExists(ConflictException):
    def __init__(self, group_id: str):
        super().__init__(
            message="A study group with this ID already exists",
            code="GROUP_ALREADY_EXISTS",
            details={"groupId": group_id},
        )
        self.group_id = group_id


class AlreadyMember(ConflictException):
    def __init__(self, group_id: str, user_id: str):
        super().__init__(
            message="You are already a member of this study group",
            code="ALREADY_MEMBER",
            details={"groupId": group_id, "userId": user_id},
        )


class NotAMember(ConflictException):
    def __init__(self, group_id: str, user_id: str):
        super().__init__(
            message="You are not a member of this study group",
            code="NOT_A_MEMBER",
            details={"groupId": group_id, "userId": user_id},
        )


class GroupFull(ConflictException):
    def __init__(self, group_id: str, max_members: int):
        super().__init__(
            message=f"This study group is full ({max_members} members maximum)",
            code="GROUP_FULL",
            details={"groupId": group_id, "maxMembers": max_members},
        )


class CreatorCannotLeave(ConflictException):
    """The creator must delete the group instead of leaving it."""

    def __init__(self, group_id: str):
        super().__init__(
            message="The group creator cannot leave the group; delete it instead",
            code="CREATOR_CANNOT_LEAVE",
            details={"groupId": group_id},
        )


class NotGroupCreator(ForbiddenException):
    def __init__(self, group_id: str, action: str):
        super().__init__(
            message=f"Only the group creator can {action}",
            code="NOT_GROUP_CREATOR",
            details={"groupId": group_id},
        )


class SessionNotFound(NotFoundException):
    def __init__(self, session_id: str):
        super().__init__(
            message="Study session not found",
            code="SESSION_NOT_FOUND",
            details={"sessionId": session_id},
        )


# ─────────────────────────────────────────────────────────────────
# Store access
# ─────────────────────────────────────────────────────────────────


class TransportFailure(ServiceUnavailableException):
    """
    The store could not be reached or the call did not finish in time.

    Wraps the underlying driver error; safe for the caller to retry.
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        code: str = "TRANSPORT_FAILURE",
        message: str = "The study group store is temporarily unavailable, please retry",
    ):
        super().__init__(
            message=message,
            code=code,
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class WriteConflict(TransportFailure):
    """The group changed between read and conditional write."""

    def __init__(self, group_id: str, expected_version: int):
        super().__init__(
            operation="update_group_fields",
            reason=f"group {group_id} is no longer at version {expected_version}",
            code="WRITE_CONFLICT",
            message="The study group was changed by another request, please retry",
        )
        self.group_id = group_id
        self.expected_version = expected_version
