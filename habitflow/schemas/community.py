# habitflow/schemas/community.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from habitflow.core.config import settings
from habitflow.core.constants import EventType, MessageType, RoomType


# Events
class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    event_type: EventType = EventType.MEETUP
    start_time: datetime
    end_time: datetime
    max_participants: Optional[int] = Field(None, ge=1)
    is_online: bool = True
    location: Optional[str] = None
    cover_image_url: Optional[str] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    price_points: int = Field(0, ge=0)


class EventCreate(EventBase):
    meeting_url: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class Event(EventBase):
    id: int
    host_id: Optional[int] = None
    is_active: bool
    created_at: datetime
    participant_count: int = 0
    is_joined: bool = False

    class Config:
        from_attributes = True


class MeetingDetails(BaseModel):
    event_id: int
    title: str
    meeting_url: Optional[str] = None
    start_time: datetime
    end_time: datetime
    is_host: bool


# Chat rooms
class ChatRoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    room_type: RoomType = RoomType.PUBLIC
    event_id: Optional[int] = None
    max_members: Optional[int] = Field(None, ge=1)


class ChatMessage(BaseModel):
    id: int
    room_id: int
    user_id: Optional[int] = None
    content: str
    message_type: MessageType
    attachment_url: Optional[str] = None
    replied_to_id: Optional[int] = None
    is_edited: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ChatRoom(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    room_type: RoomType
    event_id: Optional[int] = None
    max_members: Optional[int] = None
    is_active: bool
    created_by: Optional[int] = None
    created_at: datetime
    member_count: int = 0
    is_member: bool = False
    last_message: Optional[ChatMessage] = None

    class Config:
        from_attributes = True


class ChatMessageCreate(BaseModel):
    content: str = Field(..., max_length=settings.MAX_MESSAGE_LENGTH)
    message_type: MessageType = MessageType.TEXT
    attachment_url: Optional[str] = None
    replied_to_id: Optional[int] = None
