"""
Group/session repository gateway.

The membership and scheduling services only talk to the GroupGateway
interface. MongoGroupGateway is the production implementation over Motor;
it keeps every store-specific detail (collection names, document keys,
query operators) on this side of the boundary.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from studygroups.exceptions import (
    GroupAlreadyExists,
    GroupNotFound,
    SessionNotFound,
    TransportFailure,
    WriteConflict,
)
from studygroups.models import MeetingMode, StudyGroup, StudySession
from studygroups.services.schedule import to_wall_clock

logger = logging.getLogger(__name__)


class GroupGateway(ABC):
    """
    Read and conditionally write study groups and their sessions.

    Implementations must apply update_group_fields as one atomic
    document-level write: either every field lands or none does.
    """

    @abstractmethod
    async def get_group(self, group_id: str) -> StudyGroup:
        """Fetch a group. Raises GroupNotFound."""

    @abstractmethod
    async def put_group(self, group: StudyGroup) -> StudyGroup:
        """Store a newly created group. Raises GroupAlreadyExists if the ID is taken."""

    @abstractmethod
    async def update_group_fields(
        self,
        group_id: str,
        fields: Dict[str, Any],
        expected_version: int,
    ) -> StudyGroup:
        """
        Apply a partial update if the group is still at expected_version.

        Args:
            group_id: Group to update
            fields: Domain field names (e.g. members, member_count) to new values
            expected_version: Version of the snapshot the update was computed from

        Returns:
            The group after the update

        Raises:
            GroupNotFound: If the group no longer exists
            WriteConflict: If another write moved the version first
        """

    @abstractmethod
    async def list_groups(self) -> List[StudyGroup]:
        """All groups in the catalog."""

    @abstractmethod
    async def list_groups_for_member(self, user_id: str) -> List[StudyGroup]:
        """Groups whose roster contains user_id."""

    @abstractmethod
    async def delete_group(self, group_id: str) -> None:
        """Delete a group. Raises GroupNotFound."""

    @abstractmethod
    async def list_sessions(self, group_id: str) -> List[StudySession]:
        """Sessions of a group ordered by date-time."""

    @abstractmethod
    async def get_session(self, session_id: str) -> StudySession:
        """Fetch a session. Raises SessionNotFound."""

    @abstractmethod
    async def add_session(self, session: StudySession) -> StudySession:
        """Insert a new session."""

    @abstractmethod
    async def delete_session(self, session_id: str) -> None:
        """Delete a session. Raises SessionNotFound."""

    @abstractmethod
    async def delete_sessions_for_group(self, group_id: str) -> int:
        """Delete every session of a group, returning how many were removed."""


# ─────────────────────────────────────────────────────────────────
# MongoDB implementation
# ─────────────────────────────────────────────────────────────────

# Domain field name -> document key, for fields update_group_fields may touch
GROUP_FIELD_KEYS: Dict[str, str] = {
    "name": "groupName",
    "description": "description",
    "meeting_mode": "meetingType",
    "year": "year",
    "schedule": "schedule",
    "category": "category",
    "icon_name": "iconName",
    "members": "members",
    "member_count": "memberCount",
    "max_members": "maxMembers",
}


def group_to_document(group: StudyGroup) -> Dict[str, Any]:
    return {
        "_id": group.group_id,
        "groupName": group.name,
        "description": group.description,
        "meetingType": MeetingMode(group.meeting_mode).value,
        "year": group.year,
        "schedule": group.schedule,
        "category": group.category,
        "iconName": group.icon_name,
        "members": list(group.members),
        "memberCount": group.member_count,
        "maxMembers": group.max_members,
        "createdBy": group.created_by,
        "version": group.version,
        "createdAt": group.created_at,
        "updatedAt": group.updated_at,
    }


def document_to_group(doc: Dict[str, Any]) -> StudyGroup:
    return StudyGroup(
        group_id=str(doc["_id"]),
        name=doc.get("groupName", ""),
        description=doc.get("description", ""),
        meeting_mode=MeetingMode(doc.get("meetingType") or MeetingMode.IN_PERSON.value),
        year=doc.get("year", ""),
        schedule=doc.get("schedule", ""),
        category=doc.get("category", ""),
        icon_name=doc.get("iconName", ""),
        members=list(doc.get("members", [])),
        member_count=doc.get("memberCount", 0),
        max_members=doc.get("maxMembers", 0),
        created_by=doc.get("createdBy", ""),
        version=doc.get("version") or 0,
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


def session_to_document(session: StudySession) -> Dict[str, Any]:
    return {
        "_id": session.session_id,
        "groupId": session.group_id,
        "sessionTitle": session.title,
        "sessionDescription": session.description,
        "sessionDateTime": to_wall_clock(session.session_date_time),
        "location": session.location,
        "isOnline": session.is_online,
        "meetingLink": session.meeting_link,
        "createdBy": session.created_by,
        "createdAt": session.created_at,
    }


def document_to_session(doc: Dict[str, Any]) -> StudySession:
    return StudySession(
        session_id=str(doc["_id"]),
        group_id=doc["groupId"],
        title=doc.get("sessionTitle", ""),
        description=doc.get("sessionDescription", ""),
        session_date_time=to_wall_clock(doc["sessionDateTime"]),
        location=doc.get("location", ""),
        is_online=doc.get("isOnline", False),
        meeting_link=doc.get("meetingLink"),
        created_by=doc.get("createdBy"),
        created_at=doc.get("createdAt"),
    )


class MongoGroupGateway(GroupGateway):
    """
    GroupGateway over two MongoDB collections.

    Every driver call is bounded by a timeout; timeouts and driver errors
    surface as TransportFailure.
    """

    GROUPS_COLLECTION = "studygroups"
    SESSIONS_COLLECTION = "studysessions"

    def __init__(self, db: AsyncIOMotorDatabase, timeout_seconds: float = 10.0):
        """
        Initialize MongoGroupGateway.

        Args:
            db: MongoDB database connection
            timeout_seconds: Upper bound for each store call
        """
        self._db = db
        self._timeout = timeout_seconds
        self._groups_collection = db[self.GROUPS_COLLECTION]
        self._sessions_collection = db[self.SESSIONS_COLLECTION]

    async def _run(self, operation: str, awaitable: Awaitable):
        """Await a driver call under the gateway timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except DuplicateKeyError:
            # An insert collided with an existing ID; the caller maps it
            raise
        except asyncio.TimeoutError as e:
            logger.warning(f"Store call {operation} timed out after {self._timeout}s")
            raise TransportFailure(operation, f"timed out after {self._timeout}s") from e
        except PyMongoError as e:
            logger.warning(f"Store call {operation} failed: {e}")
            raise TransportFailure(operation, str(e)) from e

    async def ensure_indexes(self) -> None:
        """Create the indexes the membership and catalog queries rely on."""
        await self._run("ensure_indexes", self._groups_collection.create_index("members"))
        await self._run("ensure_indexes", self._groups_collection.create_index("year"))
        await self._run(
            "ensure_indexes",
            self._sessions_collection.create_index(
                [("groupId", ASCENDING), ("sessionDateTime", ASCENDING)]
            ),
        )

    # ── groups ──────────────────────────────────────────────────

    async def get_group(self, group_id: str) -> StudyGroup:
        doc = await self._run("get_group", self._groups_collection.find_one({"_id": group_id}))
        if not doc:
            raise GroupNotFound(group_id)
        return document_to_group(doc)

    async def put_group(self, group: StudyGroup) -> StudyGroup:
        doc = group_to_document(group)
        try:
            await self._run("put_group", self._groups_collection.insert_one(doc))
        except DuplicateKeyError as e:
            raise GroupAlreadyExists(group.group_id) from e
        logger.debug(f"Stored group {group.group_id}")
        return group

    async def update_group_fields(
        self,
        group_id: str,
        fields: Dict[str, Any],
        expected_version: int,
    ) -> StudyGroup:
        unknown = set(fields) - set(GROUP_FIELD_KEYS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        updates = {GROUP_FIELD_KEYS[name]: value for name, value in fields.items()}
        if "meetingType" in updates:
            updates["meetingType"] = MeetingMode(updates["meetingType"]).value
        updates["updatedAt"] = datetime.now(timezone.utc)

        # Documents written before versioning have no version field
        version_filter: Any = expected_version if expected_version else {"$in": [0, None]}

        doc = await self._run(
            "update_group_fields",
            self._groups_collection.find_one_and_update(
                {"_id": group_id, "version": version_filter},
                {"$set": updates, "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            ),
        )
        if doc is None:
            exists = await self._run(
                "update_group_fields",
                self._groups_collection.count_documents({"_id": group_id}, limit=1),
            )
            if not exists:
                raise GroupNotFound(group_id)
            raise WriteConflict(group_id, expected_version)

        return document_to_group(doc)

    async def list_groups(self) -> List[StudyGroup]:
        docs = await self._run(
            "list_groups",
            self._groups_collection.find({}).to_list(length=None),
        )
        return [document_to_group(doc) for doc in docs]

    async def list_groups_for_member(self, user_id: str) -> List[StudyGroup]:
        docs = await self._run(
            "list_groups_for_member",
            self._groups_collection.find({"members": user_id}).to_list(length=None),
        )
        return [document_to_group(doc) for doc in docs]

    async def delete_group(self, group_id: str) -> None:
        result = await self._run(
            "delete_group", self._groups_collection.delete_one({"_id": group_id})
        )
        if result.deleted_count == 0:
            raise GroupNotFound(group_id)

    # ── sessions ────────────────────────────────────────────────

    async def list_sessions(self, group_id: str) -> List[StudySession]:
        cursor = self._sessions_collection.find({"groupId": group_id})
        cursor = cursor.sort("sessionDateTime", ASCENDING)
        docs = await self._run("list_sessions", cursor.to_list(length=None))
        return [document_to_session(doc) for doc in docs]

    async def get_session(self, session_id: str) -> StudySession:
        doc = await self._run(
            "get_session", self._sessions_collection.find_one({"_id": session_id})
        )
        if not doc:
            raise SessionNotFound(session_id)
        return document_to_session(doc)

    async def add_session(self, session: StudySession) -> StudySession:
        await self._run(
            "add_session",
            self._sessions_collection.insert_one(session_to_document(session)),
        )
        return session

    async def delete_session(self, session_id: str) -> None:
        result = await self._run(
            "delete_session", self._sessions_collection.delete_one({"_id": session_id})
        )
        if result.deleted_count == 0:
            raise SessionNotFound(session_id)

    async def delete_sessions_for_group(self, group_id: str) -> int:
        result = await self._run(
            "delete_sessions_for_group",
            self._sessions_collection.delete_many({"groupId": group_id}),
        )
        return result.deleted_count
