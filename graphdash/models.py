from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class DirectoryUser:
    id: str
    display_name: str
    mail: Optional[str]
    account_enabled: Optional[bool]


@dataclass(frozen=True)
class UserPage:
    users: List[DirectoryUser] = field(default_factory=list)
    more_available: bool = False


@dataclass(frozen=True)
class Room:
    id: str
    display_name: str
    capacity: Optional[int]
    email_address: str


@dataclass(frozen=True)
class RoomList:
    id: str
    display_name: str
    email_address: str


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    subject: str
    start_utc: Optional[datetime]
    end_utc: Optional[datetime]
    organizer: str
    is_online_meeting: bool
    is_organizer: bool
    is_cancelled: bool


@dataclass(frozen=True)
class Subscription:
    id: str
    change_type: str
    resource: str
    expiration_utc: Optional[datetime]
    notification_url: str
    creator_id: Optional[str]
    application_id: Optional[str]
