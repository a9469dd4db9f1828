# habitflow/repositories/community_repository.py
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from habitflow import models
from habitflow.core.constants import EventType
from habitflow.repositories.base_repository import BaseRepository


class CommunityRepository(BaseRepository[models.CommunityEvent]):
    """Events, chat rooms and messages."""

    def __init__(self, db: Session):
        super().__init__(models.CommunityEvent, db)

    # Events
    def upcoming_events(
        self, event_type: Optional[EventType] = None, since: Optional[datetime] = None
    ) -> List[models.CommunityEvent]:
        query = self.db.query(models.CommunityEvent).filter(
            models.CommunityEvent.is_active.is_(True)
        )
        if event_type:
            query = query.filter(models.CommunityEvent.event_type == event_type)
        if since:
            query = query.filter(models.CommunityEvent.end_time >= since)
        return query.order_by(models.CommunityEvent.start_time).all()

    def get_active_event(self, event_id: int) -> Optional[models.CommunityEvent]:
        return (
            self.db.query(models.CommunityEvent)
            .filter(
                models.CommunityEvent.id == event_id,
                models.CommunityEvent.is_active.is_(True),
            )
            .first()
        )

    def participant_counts(self, event_ids: Iterable[int]) -> Dict[int, int]:
        rows = (
            self.db.query(
                models.EventParticipant.event_id, func.count(models.EventParticipant.id)
            )
            .filter(models.EventParticipant.event_id.in_(list(event_ids)))
            .group_by(models.EventParticipant.event_id)
            .all()
        )
        return {event_id: count for event_id, count in rows}

    def joined_event_ids(self, user_id: int) -> set:
        rows = (
            self.db.query(models.EventParticipant.event_id)
            .filter(models.EventParticipant.user_id == user_id)
            .all()
        )
        return {row.event_id for row in rows}

    def get_participant(
        self, event_id: int, user_id: int
    ) -> Optional[models.EventParticipant]:
        return (
            self.db.query(models.EventParticipant)
            .filter(
                models.EventParticipant.event_id == event_id,
                models.EventParticipant.user_id == user_id,
            )
            .first()
        )

    # Rooms
    def active_rooms(self) -> List[models.ChatRoom]:
        return (
            self.db.query(models.ChatRoom)
            .filter(models.ChatRoom.is_active.is_(True))
            .order_by(models.ChatRoom.created_at, models.ChatRoom.id)
            .all()
        )

    def get_room(self, room_id: int) -> Optional[models.ChatRoom]:
        return self.db.get(models.ChatRoom, room_id)

    def member_counts(self, room_ids: Iterable[int]) -> Dict[int, int]:
        rows = (
            self.db.query(models.RoomMember.room_id, func.count(models.RoomMember.id))
            .filter(models.RoomMember.room_id.in_(list(room_ids)))
            .group_by(models.RoomMember.room_id)
            .all()
        )
        return {room_id: count for room_id, count in rows}

    def member_room_ids(self, user_id: int) -> set:
        rows = (
            self.db.query(models.RoomMember.room_id)
            .filter(models.RoomMember.user_id == user_id)
            .all()
        )
        return {row.room_id for row in rows}

    def get_member(self, room_id: int, user_id: int) -> Optional[models.RoomMember]:
        return (
            self.db.query(models.RoomMember)
            .filter(models.RoomMember.room_id == room_id, models.RoomMember.user_id == user_id)
            .first()
        )

    # Messages
    def last_message(self, room_id: int) -> Optional[models.ChatMessage]:
        return (
            self.db.query(models.ChatMessage)
            .filter(models.ChatMessage.room_id == room_id)
            .order_by(models.ChatMessage.id.desc())
            .first()
        )

    def messages(
        self, room_id: int, after_id: Optional[int] = None, limit: int = 50
    ) -> List[models.ChatMessage]:
        """
        Messages of a room in posting order.

        With ``after_id`` only newer messages are returned (polling); without
        it the most recent ``limit`` messages are.
        """
        query = self.db.query(models.ChatMessage).filter(
            models.ChatMessage.room_id == room_id
        )
        if after_id is not None:
            return (
                query.filter(models.ChatMessage.id > after_id)
                .order_by(models.ChatMessage.id)
                .limit(limit)
                .all()
            )
        latest = query.order_by(models.ChatMessage.id.desc()).limit(limit).all()
        return list(reversed(latest))

    def get_message(self, message_id: int) -> Optional[models.ChatMessage]:
        return self.db.get(models.ChatMessage, message_id)
