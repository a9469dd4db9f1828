# habitflow/api/routes/community.py
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, Query, status

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.constants import EventType
from habitflow.core.logging import log_context
from habitflow.services.community_service import CommunityService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/events", response_model=List[schemas.Event])
def read_events(
    event_type: Optional[EventType] = Query(None),
    upcoming_only: bool = Query(True),
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    """
    Retrieve active events with participant counts.
    """
    with log_context(user_id=current_user.id, action="list_events", event_type=event_type):
        return community_service.list_events(current_user.id, event_type, upcoming_only)


@router.post("/events", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
def create_event(
    *,
    event_in: schemas.EventCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="create_event", title=event_in.title):
        logger.info(f"User {current_user.id} creating event: {event_in.title}")
        return community_service.create_event(current_user.id, event_in)


@router.post("/events/{event_id}/participants", response_model=schemas.Event)
def join_event(
    *,
    event_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    """
    Register for an event; paid events charge points.
    """
    with log_context(user_id=current_user.id, action="join_event", event_id=event_id):
        logger.info(f"User {current_user.id} joining event {event_id}")
        return community_service.join_event(current_user.id, event_id)


@router.delete("/events/{event_id}/participants", status_code=status.HTTP_204_NO_CONTENT)
def leave_event(
    *,
    event_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> None:
    with log_context(user_id=current_user.id, action="leave_event", event_id=event_id):
        logger.info(f"User {current_user.id} leaving event {event_id}")
        community_service.leave_event(current_user.id, event_id)


@router.get("/events/{event_id}/meeting", response_model=schemas.MeetingDetails)
def read_meeting_details(
    *,
    event_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    """
    Meeting link of an online event, for its participants and host.
    """
    with log_context(user_id=current_user.id, action="meeting_details", event_id=event_id):
        return community_service.get_meeting_details(current_user.id, event_id)


@router.get("/rooms", response_model=List[schemas.ChatRoom])
def read_rooms(
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="list_rooms"):
        return community_service.list_rooms(current_user.id)


@router.post("/rooms", response_model=schemas.ChatRoom, status_code=status.HTTP_201_CREATED)
def create_room(
    *,
    room_in: schemas.ChatRoomCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="create_room", name=room_in.name):
        logger.info(f"User {current_user.id} creating room: {room_in.name}")
        return community_service.create_room(current_user.id, room_in)


@router.post("/rooms/{room_id}/members", response_model=schemas.ChatRoom)
def join_room(
    *,
    room_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="join_room", room_id=room_id):
        return community_service.join_room(current_user.id, room_id)


@router.get("/rooms/{room_id}/messages", response_model=List[schemas.ChatMessage])
def read_messages(
    *,
    room_id: int,
    after_id: Optional[int] = Query(None, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    """
    Messages of a room; pass the last seen id as ``after_id`` to poll for new ones.
    """
    with log_context(user_id=current_user.id, action="list_messages", room_id=room_id):
        return community_service.list_messages(
            current_user.id, room_id, after_id=after_id, limit=limit
        )


@router.post(
    "/rooms/{room_id}/messages",
    response_model=schemas.ChatMessage,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    *,
    room_id: int,
    message_in: schemas.ChatMessageCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
    community_service: CommunityService = Depends(deps.get_community_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="send_message", room_id=room_id):
        return community_service.send_message(current_user.id, room_id, message_in)
