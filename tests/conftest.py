"""Shared test fixtures for study group tests."""

import asyncio
import copy
import uuid
from typing import Any, Dict, List

import pytest
from unittest.mock import AsyncMock, MagicMock

from studygroups.exceptions import GroupAlreadyExists, GroupNotFound, SessionNotFound, WriteConflict
from studygroups.models import MeetingMode, StudyGroup, StudySession
from studygroups.services.gateway import GroupGateway
from studygroups.services.membership_ledger import MembershipLedger


class InMemoryGroupGateway(GroupGateway):
    """
    GroupGateway over dicts with the same version semantics as Mongo.

    Reads take their snapshot and then yield to the event loop, so two
    coroutines started together really do read the same version.
    """

    def __init__(self):
        self.groups: Dict[str, StudyGroup] = {}
        self.sessions: Dict[str, StudySession] = {}
        self.update_calls = 0
        self.conflicts = 0

    async def get_group(self, group_id: str) -> StudyGroup:
        if group_id not in self.groups:
            raise GroupNotFound(group_id)
        snapshot = copy.deepcopy(self.groups[group_id])
        await asyncio.sleep(0)
        return snapshot

    async def put_group(self, group: StudyGroup) -> StudyGroup:
        if group.group_id in self.groups:
            raise GroupAlreadyExists(group.group_id)
        self.groups[group.group_id] = copy.deepcopy(group)
        return group

    async def update_group_fields(self, group_id: str, fields: Dict[str, Any], expected_version: int) -> StudyGroup:
        self.update_calls += 1
        stored = self.groups.get(group_id)
        if stored is None:
            raise GroupNotFound(group_id)
        if stored.version != expected_version:
            self.conflicts += 1
            raise WriteConflict(group_id, expected_version)
        for name, value in fields.items():
            setattr(stored, name, copy.deepcopy(value))
        stored.version += 1
        return copy.deepcopy(stored)

    async def list_groups(self) -> List[StudyGroup]:
        return [copy.deepcopy(g) for g in self.groups.values()]

    async def list_groups_for_member(self, user_id: str) -> List[StudyGroup]:
        return [copy.deepcopy(g) for g in self.groups.values() if user_id in g.members]

    async def delete_group(self, group_id: str) -> None:
        if self.groups.pop(group_id, None) is None:
            raise GroupNotFound(group_id)

    async def list_sessions(self, group_id: str) -> List[StudySession]:
        sessions = [s for s in self.sessions.values() if s.group_id == group_id]
        return sorted(sessions, key=lambda s: s.session_date_time)

    async def get_session(self, session_id: str) -> StudySession:
        if session_id not in self.sessions:
            raise SessionNotFound(session_id)
        return self.sessions[session_id]

    async def add_session(self, session: StudySession) -> StudySession:
        self.sessions[session.session_id] = session
        return session

    async def delete_session(self, session_id: str) -> None:
        if self.sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)

    async def delete_sessions_for_group(self, group_id: str) -> int:
        doomed = [sid for sid, s in self.sessions.items() if s.group_id == group_id]
        for sid in doomed:
            del self.sessions[sid]
        return len(doomed)


@pytest.fixture
def creator_id():
    return "user-creator"


@pytest.fixture
def gateway():
    return InMemoryGroupGateway()


@pytest.fixture
def ledger(gateway):
    return MembershipLedger(gateway)


@pytest.fixture
def make_group(creator_id):
    """Factory for a stored-shape group with a consistent roster."""

    def _make(members=None, max_members=10, schedule="2025-01-01 - 2025-01-31", **overrides):
        members = list(members) if members is not None else [creator_id]
        fields = dict(
            group_id=str(uuid.uuid4()),
            name="Algorithms Revision",
            description="Weekly revision for the algorithms exam",
            meeting_mode=MeetingMode.ONLINE,
            year="SD2",
            schedule=schedule,
            category="Exam Prep",
            created_by=creator_id,
            max_members=max_members,
            icon_name="Calendar",
            members=members,
            member_count=len(members),
        )
        fields.update(overrides)
        return StudyGroup(**fields)

    return _make


@pytest.fixture
def stored_group(gateway, make_group):
    """Put a group in the in-memory store and return it."""

    def _store(**kwargs):
        group = make_group(**kwargs)
        gateway.groups[group.group_id] = copy.deepcopy(group)
        return group

    return _store


@pytest.fixture
def mock_db():
    db = MagicMock()
    groups_col = AsyncMock()
    sessions_col = AsyncMock()
    groups_col.find = MagicMock()
    sessions_col.find = MagicMock()
    db.__getitem__ = MagicMock(side_effect=lambda key: {
        "studygroups": groups_col,
        "studysessions": sessions_col,
    }[key])
    return db, groups_col, sessions_col
