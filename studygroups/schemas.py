"""
Pydantic models for study group request/response validation.

Text fields default to empty strings so that blank input reaches the
services and is reported as MISSING_REQUIRED_FIELD.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from studygroups.models import MeetingMode
from studygroups.services.schedule import parse_session_datetime


class CreateStudyGroupRequest(BaseModel):
    """Request body for creating a study group."""
    groupName: str = Field(default="", max_length=100)
    description: str = Field(default="", max_length=1000)
    meetingType: MeetingMode = MeetingMode.IN_PERSON
    year: str = Field(default="", max_length=20)
    category: str = Field(default="", max_length=100)
    iconName: str = Field(default="", max_length=50)
    maxMembers: Optional[int] = None
    schedule: Optional[str] = Field(None, description="YYYY-MM-DD - YYYY-MM-DD")
    scheduleStart: Optional[date] = None
    scheduleEnd: Optional[date] = None


class CreateSessionRequest(BaseModel):
    """Request body for scheduling a study session."""
    sessionTitle: str = Field(default="", max_length=200)
    sessionDescription: str = Field(default="", max_length=1000)
    sessionDateTime: datetime
    location: str = Field(default="", max_length=200)
    isOnline: bool = False
    meetingLink: Optional[str] = Field(None, max_length=500)

    @field_validator("sessionDateTime", mode="before")
    @classmethod
    def parse_date_time(cls, value):
        if isinstance(value, str):
            return parse_session_datetime(value)
        return value


class StudyGroupResponse(BaseModel):
    """Study group in API responses."""
    id: str
    groupName: str
    description: str
    meetingType: MeetingMode
    year: str
    schedule: str
    category: str
    iconName: str
    members: List[str]
    memberCount: int
    maxMembers: int
    createdBy: str
    isMember: bool
    isCreator: bool
    createdAt: Optional[datetime] = None


class StudySessionResponse(BaseModel):
    """Study session in API responses."""
    id: str
    groupId: str
    sessionTitle: str
    sessionDescription: str
    sessionDateTime: str
    location: str
    isOnline: bool
    meetingLink: Optional[str] = None


class MembershipResponse(BaseModel):
    """Result of a join or leave."""
    groupId: str
    memberCount: int
    isMember: bool
