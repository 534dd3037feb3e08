"""
Study session validation.

Checks a candidate session against its group's schedule before anything is
written to the store.
"""

from typing import Optional, Tuple

from common.utils.exceptions import APIException
from studygroups.exceptions import (
    MissingRequiredField,
    OutOfScheduleWindow,
    SessionGroupMismatch,
)
from studygroups.models import StudyGroup, StudySession
from studygroups.services.schedule import parse_schedule_window, to_wall_clock


class SessionValidator:
    """
    Validates a candidate session against its owning group.
    """

    REQUIRED_TEXT_FIELDS = (
        ("title", "sessionTitle"),
        ("description", "sessionDescription"),
    )

    @classmethod
    def validate(
        cls,
        session: StudySession,
        group: StudyGroup,
    ) -> Tuple[bool, Optional[APIException]]:
        """
        Validate required fields and the schedule window.

        Args:
            session: Candidate session (not yet persisted)
            group: Group the session belongs to

        Returns:
            tuple of (is_valid, failure) where failure is a
            SessionGroupMismatch, MissingRequiredField or OutOfScheduleWindow
            instance

        Raises:
            MalformedScheduleError: If the group's schedule cannot be parsed
        """
        if session.group_id != group.group_id:
            return False, SessionGroupMismatch(session.group_id, group.group_id)

        for attribute, field_name in cls.REQUIRED_TEXT_FIELDS:
            value = getattr(session, attribute)
            if not value or not value.strip():
                return False, MissingRequiredField(field_name)

        if not session.is_online and not (session.location and session.location.strip()):
            return False, MissingRequiredField("location")

        window = parse_schedule_window(group.schedule)
        moment = to_wall_clock(session.session_date_time)
        if not window.contains(moment):
            return False, OutOfScheduleWindow(moment, window)

        return True, None
