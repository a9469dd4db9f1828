# habitflow/services/community_service.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habitflow import models, schemas
from habitflow.core.constants import EventType, RoomType
from habitflow.core.exceptions import (
    AuthorizationException,
    BusinessException,
    DuplicateResourceException,
    InsufficientFundsException,
    ResourceNotFoundException,
    ValidationException,
)
from habitflow.repositories.community_repository import CommunityRepository
from habitflow.repositories.user_level_repository import UserLevelRepository
from habitflow.utils.cache import TTLCache, invalidate_user_cache
from habitflow.utils.retry import retry_on_transient, translate_store_errors

logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id",
    "title",
    "description",
    "event_type",
    "host_id",
    "start_time",
    "end_time",
    "max_participants",
    "is_online",
    "location",
    "cover_image_url",
    "is_recurring",
    "recurrence_pattern",
    "price_points",
    "is_active",
    "created_at",
)


class CommunityService:
    """Events, chat rooms and messages."""

    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache
        self.repository = CommunityRepository(db)
        self.level_repository = UserLevelRepository(db)

    # Events
    @retry_on_transient()
    def list_events(
        self,
        user_id: int,
        event_type: Optional[EventType] = None,
        upcoming_only: bool = True,
    ) -> List[Dict[str, Any]]:
        events = self.repository.upcoming_events(
            event_type, datetime.utcnow() if upcoming_only else None
        )
        counts = self.repository.participant_counts(event.id for event in events)
        joined = self.repository.joined_event_ids(user_id)
        return [self._event_view(event, counts.get(event.id, 0), event.id in joined) for event in events]

    @staticmethod
    def _event_view(event: models.CommunityEvent, count: int, is_joined: bool) -> Dict[str, Any]:
        view = {column: getattr(event, column) for column in EVENT_COLUMNS}
        view.update(participant_count=count, is_joined=is_joined)
        return view

    def create_event(self, user_id: int, event_in: schemas.EventCreate) -> Dict[str, Any]:
        with translate_store_errors(self.db, "Could not create event"):
            event = self.repository.create({**event_in.model_dump(), "host_id": user_id})
        logger.info(f"User {user_id} created event {event.id}")
        return self._event_view(event, 0, False)

    def _get_event(self, event_id: int) -> models.CommunityEvent:
        event = self.repository.get_active_event(event_id)
        if not event:
            raise ResourceNotFoundException("Event not found", details={"event_id": event_id})
        return event

    def join_event(self, user_id: int, event_id: int) -> Dict[str, Any]:
        """
        Register the user for an event.

        Paid events charge ``price_points`` in the same transaction as the
        registration.
        """
        event = self._get_event(event_id)
        if self.repository.get_participant(event_id, user_id):
            raise DuplicateResourceException("You are already registered for this event")

        with translate_store_errors(self.db, "Could not join event, reload and try again"):
            try:
                count = self.repository.participant_counts([event_id]).get(event_id, 0)
                if event.max_participants and count >= event.max_participants:
                    raise ValidationException(
                        "Event is full", details={"max_participants": event.max_participants}
                    )

                if event.price_points:
                    level = self.level_repository.get_for_update(user_id)
                    balance = level.points if level else 0
                    if balance < event.price_points:
                        raise InsufficientFundsException(
                            "Insufficient points",
                            details={"balance": balance, "price": event.price_points},
                        )
                    level.points = balance - event.price_points
                    self.db.add(level)

                self.db.add(models.EventParticipant(event_id=event_id, user_id=user_id))
                self.db.commit()
            except BusinessException:
                self.db.rollback()
                raise
            except IntegrityError:
                self.db.rollback()
                raise DuplicateResourceException("You are already registered for this event")

        if self.cache is not None:
            invalidate_user_cache(self.cache, user_id)
        logger.info(f"User {user_id} joined event {event_id}")
        return self._event_view(event, count + 1, True)

    def leave_event(self, user_id: int, event_id: int) -> None:
        """Unregister from an event. Points paid for it are not refunded."""
        participant = self.repository.get_participant(event_id, user_id)
        if not participant:
            raise ResourceNotFoundException(
                "You are not registered for this event", details={"event_id": event_id}
            )
        with translate_store_errors(self.db, "Could not leave event"):
            self.db.delete(participant)
            self.db.commit()

    @retry_on_transient()
    def get_meeting_details(self, user_id: int, event_id: int) -> Dict[str, Any]:
        event = self._get_event(event_id)
        if not event.is_online:
            raise ValidationException("Event has no online meeting")

        is_host = event.host_id == user_id
        if not is_host and not self.repository.get_participant(event_id, user_id):
            raise AuthorizationException("Join the event to get the meeting link")

        return {
            "event_id": event.id,
            "title": event.title,
            "meeting_url": event.meeting_url,
            "start_time": event.start_time,
            "end_time": event.end_time,
            "is_host": is_host,
        }

    # Rooms
    @retry_on_transient()
    def list_rooms(self, user_id: int) -> List[Dict[str, Any]]:
        """Public and event rooms, plus private rooms the user belongs to."""
        member_of = self.repository.member_room_ids(user_id)
        rooms = [
            room
            for room in self.repository.active_rooms()
            if room.room_type != RoomType.PRIVATE or room.id in member_of
        ]
        counts = self.repository.member_counts(room.id for room in rooms)
        return [
            self._room_view(room, counts.get(room.id, 0), room.id in member_of)
            for room in rooms
        ]

    def _room_view(self, room: models.ChatRoom, count: int, is_member: bool) -> Dict[str, Any]:
        return {
            **schemas.ChatRoom.model_validate(room).model_dump(
                exclude={"member_count", "is_member", "last_message"}
            ),
            "member_count": count,
            "is_member": is_member,
            "last_message": self.repository.last_message(room.id),
        }

    def create_room(self, user_id: int, room_in: schemas.ChatRoomCreate) -> Dict[str, Any]:
        if room_in.event_id is not None:
            self._get_event(room_in.event_id)

        with translate_store_errors(self.db, "Could not create room"):
            room = models.ChatRoom(**room_in.model_dump(), created_by=user_id)
            room.members.append(models.RoomMember(user_id=user_id))
            self.db.add(room)
            self.db.commit()
            self.db.refresh(room)

        logger.info(f"User {user_id} created room {room.id}")
        return self._room_view(room, 1, True)

    def _get_room(self, room_id: int) -> models.ChatRoom:
        room = self.repository.get_room(room_id)
        if not room or not room.is_active:
            raise ResourceNotFoundException("Room not found", details={"room_id": room_id})
        return room

    def join_room(self, user_id: int, room_id: int) -> Dict[str, Any]:
        """Join a room; joining a room twice is not an error."""
        room = self._get_room(room_id)
        counts = self.repository.member_counts([room_id])

        if self.repository.get_member(room_id, user_id):
            return self._room_view(room, counts.get(room_id, 0), True)

        if room.room_type == RoomType.PRIVATE:
            raise AuthorizationException("This room is invite only")
        if room.max_members and counts.get(room_id, 0) >= room.max_members:
            raise ValidationException("Room is full", details={"max_members": room.max_members})

        with translate_store_errors(self.db, "Could not join room"):
            try:
                self.db.add(models.RoomMember(room_id=room_id, user_id=user_id))
                self.db.commit()
            except IntegrityError:
                # joined concurrently, same result
                self.db.rollback()

        return self._room_view(room, self.repository.member_counts([room_id]).get(room_id, 0), True)

    def _check_can_read(self, user_id: int, room: models.ChatRoom) -> None:
        if room.room_type == RoomType.PRIVATE and not self.repository.get_member(room.id, user_id):
            raise AuthorizationException("Only members can read this room")

    # Messages
    @retry_on_transient()
    def list_messages(
        self, user_id: int, room_id: int, after_id: Optional[int] = None, limit: int = 50
    ) -> List[models.ChatMessage]:
        room = self._get_room(room_id)
        self._check_can_read(user_id, room)
        return self.repository.messages(room_id, after_id=after_id, limit=limit)

    def send_message(
        self, user_id: int, room_id: int, message_in: schemas.ChatMessageCreate
    ) -> models.ChatMessage:
        content = message_in.content.strip()
        if not content:
            raise ValidationException("Message cannot be empty")

        room = self._get_room(room_id)
        if not self.repository.get_member(room_id, user_id):
            raise AuthorizationException("Join the room before posting")

        if message_in.replied_to_id is not None:
            replied_to = self.repository.get_message(message_in.replied_to_id)
            if not replied_to or replied_to.room_id != room.id:
                raise ResourceNotFoundException(
                    "Replied-to message not found",
                    details={"message_id": message_in.replied_to_id},
                )

        with translate_store_errors(self.db, "Message not sent, try again"):
            message = models.ChatMessage(
                room_id=room.id,
                user_id=user_id,
                content=content,
                message_type=message_in.message_type,
                attachment_url=message_in.attachment_url,
                replied_to_id=message_in.replied_to_id,
            )
            self.db.add(message)
            self.db.commit()
            self.db.refresh(message)
        return message
