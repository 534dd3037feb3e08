"""
Study group membership ledger.

Owns the member roster of every group: creation, join, leave and delete.
Each mutation re-reads the group through the gateway and writes the
roster and count back in one version-guarded update, so concurrent joins
and leaves never lose each other's changes.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from common.utils.exceptions import ValidationException
from studygroups.exceptions import (
    AlreadyMember,
    CreatorCannotLeave,
    GroupFull,
    MissingRequiredField,
    NotAMember,
    NotGroupCreator,
    WriteConflict,
)
from studygroups.models import StudyGroup
from studygroups.services.gateway import GroupGateway
from studygroups.services.schedule import parse_schedule_window

logger = logging.getLogger(__name__)


class MembershipLedger:
    """
    Enforces the roster invariants of a study group.

    - member_count == len(members)
    - member_count <= max_members
    - the creator is always a member
    - no user appears twice
    """

    DEFAULT_WRITE_ATTEMPTS = 5

    REQUIRED_GROUP_FIELDS = (
        ("name", "groupName"),
        ("description", "description"),
        ("year", "year"),
        ("category", "category"),
    )

    def __init__(
        self,
        gateway: GroupGateway,
        write_attempts: int = DEFAULT_WRITE_ATTEMPTS,
        academic_years: Optional[Iterable[str]] = None,
    ):
        """
        Initialize MembershipLedger.

        Args:
            gateway: Store access for groups and sessions
            write_attempts: Fresh reads allowed when a concurrent writer wins the
                conditional update
            academic_years: Year tags a new group may use; None accepts any tag
        """
        self._gateway = gateway
        self._write_attempts = max(1, write_attempts)
        self._academic_years = set(academic_years) if academic_years is not None else None

    async def create(self, group: StudyGroup) -> StudyGroup:
        """
        Create a group owned and joined by its creator.

        Whatever ID and roster the caller supplied are discarded: the group
        gets a fresh ID, the creator is the only member and the count starts
        at 1.

        Raises:
            MissingRequiredField: If name, description, year or category is blank
            ValidationException: If the year tag is unknown or max_members is below 1
            MalformedScheduleError: If the schedule cannot be parsed
            GroupAlreadyExists: If the generated ID is already taken
        """
        for attribute, field_name in self.REQUIRED_GROUP_FIELDS:
            value = getattr(group, attribute)
            if not value or not value.strip():
                raise MissingRequiredField(field_name)

        if not group.created_by:
            raise MissingRequiredField("createdBy")

        if self._academic_years is not None and group.year not in self._academic_years:
            raise ValidationException(
                message=f"Unknown academic year: {group.year}",
                code="INVALID_YEAR",
                details={"year": group.year, "allowed": sorted(self._academic_years)},
            )

        if group.max_members < 1:
            raise ValidationException(
                message="A study group must allow at least one member",
                code="INVALID_MAX_MEMBERS",
                details={"maxMembers": group.max_members},
            )

        parse_schedule_window(group.schedule)

        now = datetime.now(timezone.utc)
        group.group_id = str(uuid.uuid4())
        group.members = [group.created_by]
        group.member_count = 1
        group.version = 0
        group.created_at = now
        group.updated_at = now

        await self._gateway.put_group(group)

        logger.info(f"Study group created: {group.group_id} by {group.created_by}")
        return group

    async def join(self, group_id: str, user_id: str) -> int:
        """
        Add user_id to the group's roster.

        Returns:
            The member count after joining

        Raises:
            GroupNotFound: If the group does not exist
            AlreadyMember: If the user is already on the roster
            GroupFull: If the group is at capacity
            WriteConflict: If every attempt lost a race to another writer
        """
        for attempt in range(1, self._write_attempts + 1):
            group = await self._gateway.get_group(group_id)

            if group.is_member(user_id):
                raise AlreadyMember(group_id, user_id)
            if group.is_full():
                raise GroupFull(group_id, group.max_members)

            try:
                updated = await self._gateway.update_group_fields(
                    group_id,
                    {
                        "members": group.members + [user_id],
                        "member_count": group.member_count + 1,
                    },
                    expected_version=group.version,
                )
            except WriteConflict:
                logger.debug(f"Join of {user_id} to {group_id} lost a race (attempt {attempt})")
                continue

            logger.info(f"User {user_id} joined study group {group_id} ({updated.member_count}/{updated.max_members})")
            return updated.member_count

        logger.warning(f"Join of {user_id} to {group_id} gave up after {self._write_attempts} conflicting writes")
        raise WriteConflict(group_id, group.version)

    async def leave(self, group_id: str, user_id: str) -> int:
        """
        Remove user_id from the group's roster.

        Returns:
            The member count after leaving

        Raises:
            GroupNotFound: If the group does not exist
            NotAMember: If the user is not on the roster
            CreatorCannotLeave: If the user created the group
            WriteConflict: If every attempt lost a race to another writer
        """
        for attempt in range(1, self._write_attempts + 1):
            group = await self._gateway.get_group(group_id)

            if not group.is_member(user_id):
                raise NotAMember(group_id, user_id)
            if user_id == group.created_by:
                raise CreatorCannotLeave(group_id)

            try:
                updated = await self._gateway.update_group_fields(
                    group_id,
                    {
                        "members": [m for m in group.members if m != user_id],
                        "member_count": group.member_count - 1,
                    },
                    expected_version=group.version,
                )
            except WriteConflict:
                logger.debug(f"Leave of {user_id} from {group_id} lost a race (attempt {attempt})")
                continue

            logger.info(f"User {user_id} left study group {group_id} ({updated.member_count}/{updated.max_members})")
            return updated.member_count

        logger.warning(f"Leave of {user_id} from {group_id} gave up after {self._write_attempts} conflicting writes")
        raise WriteConflict(group_id, group.version)

    async def delete(self, group_id: str, user_id: str) -> None:
        """
        Delete a group and its sessions (creator only).

        Sessions go first so a failed call leaves the group in place and can
        be retried. A second sweep after the group is gone removes any
        session added while the delete was running.

        Raises:
            GroupNotFound: If the group does not exist
            NotGroupCreator: If user_id did not create the group
        """
        group = await self._gateway.get_group(group_id)
        if group.created_by != user_id:
            raise NotGroupCreator(group_id, "delete this study group")

        removed = await self._gateway.delete_sessions_for_group(group_id)
        await self._gateway.delete_group(group_id)
        removed += await self._gateway.delete_sessions_for_group(group_id)

        logger.info(f"Study group {group_id} deleted by {user_id} ({removed} sessions removed)")
