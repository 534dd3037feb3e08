"""
Study group domain records.

Plain dataclasses shared by the services and the gateway. Store documents
and API payloads are converted at the edges (gateway and router).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


ONLINE_LOCATION = "Online"


class MeetingMode(str, Enum):
    """How a group usually meets."""
    ONLINE = "Online"
    IN_PERSON = "In-Person"


@dataclass(frozen=True)
class ScheduleWindow:
    """Inclusive range a group's sessions must fall in."""
    start: datetime  # start-of-day of the first date
    end: datetime  # end-of-day of the last date

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass
class StudyGroup:
    """A study group and its member roster."""
    group_id: str
    name: str
    description: str
    meeting_mode: MeetingMode
    year: str
    schedule: str
    category: str
    created_by: str
    max_members: int
    icon_name: str = ""
    members: List[str] = field(default_factory=list)
    member_count: int = 0
    # Bumped by every write; guards conditional updates
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_member(self, user_id: str) -> bool:
        return user_id in self.members

    def is_full(self) -> bool:
        return self.member_count >= self.max_members


@dataclass
class StudySession:
    """A single scheduled meeting of a group."""
    session_id: str
    group_id: str
    title: str
    description: str
    session_date_time: datetime
    location: str
    is_online: bool
    meeting_link: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
