"""
Study session scheduling service.

Creates, lists and deletes the sessions of a group. Creating a session is
reserved to the group creator and always passes through SessionValidator
before the gateway is asked to store anything.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from studygroups.exceptions import GroupNotFound, NotGroupCreator, SessionNotFound
from studygroups.models import ONLINE_LOCATION, StudySession
from studygroups.services.gateway import GroupGateway
from studygroups.services.schedule import to_wall_clock
from studygroups.services.session_validator import SessionValidator

logger = logging.getLogger(__name__)


class SessionService:
    """
    Schedules sessions inside a group's schedule window.
    """

    def __init__(self, gateway: GroupGateway, validator: type = SessionValidator):
        """
        Initialize SessionService.

        Args:
            gateway: Store access for groups and sessions
            validator: Validator class exposing validate(session, group)
        """
        self._gateway = gateway
        self._validator = validator

    async def create_session(
        self,
        group_id: str,
        user_id: str,
        session: StudySession,
    ) -> StudySession:
        """
        Validate and store a new session for a group.

        Aware date-times are stored and returned as naive UTC.

        Args:
            group_id: Group the session belongs to
            user_id: User scheduling the session (must be the creator)
            session: Candidate session

        Returns:
            The stored session with its ID assigned

        Raises:
            GroupNotFound: If the group does not exist
            NotGroupCreator: If user_id did not create the group
            MissingRequiredField: If a required field is empty
            OutOfScheduleWindow: If the date-time is outside the group schedule
            MalformedScheduleError: If the group's schedule cannot be parsed
        """
        group = await self._gateway.get_group(group_id)
        if group.created_by != user_id:
            raise NotGroupCreator(group_id, "schedule sessions")

        session.group_id = group_id
        session.created_by = user_id
        session.session_date_time = to_wall_clock(session.session_date_time)
        if session.is_online:
            session.location = ONLINE_LOCATION
            session.meeting_link = session.meeting_link or None
        else:
            session.meeting_link = None

        is_valid, failure = self._validator.validate(session, group)
        if not is_valid:
            logger.info(f"Session rejected for group {group_id}: {failure}")
            raise failure

        session.session_id = str(uuid.uuid4())
        session.created_at = datetime.now(timezone.utc)

        await self._gateway.add_session(session)

        # The group may have been deleted since it was read
        try:
            await self._gateway.get_group(group_id)
        except GroupNotFound:
            logger.info(f"Group {group_id} deleted while scheduling {session.session_id}; removing it")
            try:
                await self._gateway.delete_session(session.session_id)
            except SessionNotFound:
                # Already swept by the group delete
                pass
            raise

        logger.info(f"Session scheduled: {session.session_id} for group {group_id} at {session.session_date_time:%Y-%m-%d %H:%M}")
        return session

    async def list_sessions(self, group_id: str) -> List[StudySession]:
        """Sessions of an existing group ordered by date-time."""
        await self._gateway.get_group(group_id)
        return await self._gateway.list_sessions(group_id)

    async def delete_session(self, group_id: str, session_id: str, user_id: str) -> None:
        """
        Delete a session (creator only).

        Raises:
            GroupNotFound: If the group does not exist
            SessionNotFound: If the session does not belong to the group
            NotGroupCreator: If user_id did not create the group
        """
        group = await self._gateway.get_group(group_id)
        if group.created_by != user_id:
            raise NotGroupCreator(group_id, "delete sessions")

        session = await self._gateway.get_session(session_id)
        if session.group_id != group_id:
            raise SessionNotFound(session_id)

        await self._gateway.delete_session(session_id)
        logger.info(f"Session {session_id} deleted from group {group_id}")
