"""
FastAPI router for study group endpoints.

Provides endpoints for the group catalog, membership and sessions.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import list_response, success_response
from studygroups.config import settings
from studygroups.dependencies import (
    get_gateway,
    get_membership_ledger,
    get_session_service,
    require_auth,
)
from studygroups.models import StudyGroup, StudySession
from studygroups.schemas import (
    CreateSessionRequest,
    CreateStudyGroupRequest,
    MembershipResponse,
    StudyGroupResponse,
    StudySessionResponse,
)
from studygroups.services.catalog import ALL_YEARS, filter_by_year, partition_by_membership
from studygroups.services.gateway import GroupGateway
from studygroups.services.membership_ledger import MembershipLedger
from studygroups.services.schedule import SESSION_DATETIME_FORMAT, format_schedule_window
from studygroups.services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/study-groups", tags=["study-groups"])


def _format_group(group: StudyGroup, user_id: str) -> dict:
    """Format group for response."""
    return StudyGroupResponse(
        id=group.group_id,
        groupName=group.name,
        description=group.description,
        meetingType=group.meeting_mode,
        year=group.year,
        schedule=group.schedule,
        category=group.category,
        iconName=group.icon_name,
        members=group.members,
        memberCount=group.member_count,
        maxMembers=group.max_members,
        createdBy=group.created_by,
        isMember=group.is_member(user_id),
        isCreator=group.created_by == user_id,
        createdAt=group.created_at,
    ).model_dump(mode="json")


def _format_session(session: StudySession) -> dict:
    """Format session for response."""
    return StudySessionResponse(
        id=session.session_id,
        groupId=session.group_id,
        sessionTitle=session.title,
        sessionDescription=session.description,
        sessionDateTime=session.session_date_time.strftime(SESSION_DATETIME_FORMAT),
        location=session.location,
        isOnline=session.is_online,
        meetingLink=session.meeting_link,
    ).model_dump(mode="json")


@router.get("")
async def discover_groups(
    user_id: Annotated[str, Depends(require_auth)],
    gateway: Annotated[GroupGateway, Depends(get_gateway)],
    year: Optional[str] = Query(ALL_YEARS, description="Academic year tag or All"),
):
    """List the catalog split into joined and discoverable groups."""
    groups = filter_by_year(await gateway.list_groups(), year)
    joined, not_joined = partition_by_membership(groups, user_id)

    return success_response({
        "joined": [_format_group(g, user_id) for g in joined],
        "discoverable": [_format_group(g, user_id) for g in not_joined],
    })


@router.get("/mine")
async def get_my_groups(
    user_id: Annotated[str, Depends(require_auth)],
    gateway: Annotated[GroupGateway, Depends(get_gateway)],
    year: Optional[str] = Query(ALL_YEARS, description="Academic year tag or All"),
):
    """List the groups the current user belongs to."""
    groups = filter_by_year(await gateway.list_groups_for_member(user_id), year)
    return list_response([_format_group(g, user_id) for g in groups])


@router.post("")
async def create_group(
    body: CreateStudyGroupRequest,
    user_id: Annotated[str, Depends(require_auth)],
    ledger: Annotated[MembershipLedger, Depends(get_membership_ledger)],
):
    """Create a study group owned by the current user."""
    if body.scheduleStart and body.scheduleEnd:
        schedule = format_schedule_window(body.scheduleStart, body.scheduleEnd)
    else:
        schedule = body.schedule or ""

    group = StudyGroup(
        group_id="",
        name=body.groupName,
        description=body.description,
        meeting_mode=body.meetingType,
        year=body.year,
        schedule=schedule,
        category=body.category,
        icon_name=body.iconName,
        created_by=user_id,
        max_members=body.maxMembers if body.maxMembers is not None else settings.DEFAULT_MAX_MEMBERS,
    )
    group = await ledger.create(group)

    return success_response(_format_group(group, user_id), message="Study group created")


@router.get("/{group_id}")
async def get_group(
    group_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    gateway: Annotated[GroupGateway, Depends(get_gateway)],
):
    """Get study group by ID."""
    group = await gateway.get_group(group_id)
    return success_response(_format_group(group, user_id))


@router.delete("/{group_id}")
async def delete_group(
    group_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    ledger: Annotated[MembershipLedger, Depends(get_membership_ledger)],
):
    """Delete a study group (creator only)."""
    await ledger.delete(group_id, user_id)
    return success_response(message="Study group deleted")


@router.post("/{group_id}/join")
async def join_group(
    group_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    ledger: Annotated[MembershipLedger, Depends(get_membership_ledger)],
):
    """Join a study group."""
    member_count = await ledger.join(group_id, user_id)
    return success_response(
        MembershipResponse(groupId=group_id, memberCount=member_count, isMember=True).model_dump(),
        message="Joined study group",
    )


@router.post("/{group_id}/leave")
async def leave_group(
    group_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    ledger: Annotated[MembershipLedger, Depends(get_membership_ledger)],
):
    """Leave a study group."""
    member_count = await ledger.leave(group_id, user_id)
    return success_response(
        MembershipResponse(groupId=group_id, memberCount=member_count, isMember=False).model_dump(),
        message="Left study group",
    )


@router.get("/{group_id}/sessions")
async def list_sessions(
    group_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    session_service: Annotated[SessionService, Depends(get_session_service)],
):
    """List a group's sessions in date order."""
    sessions = await session_service.list_sessions(group_id)
    return list_response([_format_session(s) for s in sessions])


@router.post("/{group_id}/sessions")
async def create_session(
    group_id: str,
    body: CreateSessionRequest,
    user_id: Annotated[str, Depends(require_auth)],
    session_service: Annotated[SessionService, Depends(get_session_service)],
):
    """Schedule a session inside the group's schedule window."""
    session = StudySession(
        session_id="",
        group_id=group_id,
        title=body.sessionTitle,
        description=body.sessionDescription,
        session_date_time=body.sessionDateTime,
        location=body.location,
        is_online=body.isOnline,
        meeting_link=body.meetingLink,
    )
    session = await session_service.create_session(group_id, user_id, session)

    return success_response(_format_session(session), message="Session added successfully")


@router.delete("/{group_id}/sessions/{session_id}")
async def delete_session(
    group_id: str,
    session_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    session_service: Annotated[SessionService, Depends(get_session_service)],
):
    """Delete a session (creator only)."""
    await session_service.delete_session(group_id, session_id, user_id)
    return success_response(message="Session deleted")
