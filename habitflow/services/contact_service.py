# habitflow/services/contact_service.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from habitflow import models, schemas
from habitflow.core.config import settings
from habitflow.core.exceptions import ValidationException
from habitflow.repositories.contact_repository import ContactRepository
from habitflow.utils.cache import TTLCache
from habitflow.utils.retry import translate_store_errors

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.repository = ContactRepository(db)

    def submit(
        self, message_in: schemas.ContactMessageCreate, user_id: Optional[int] = None
    ) -> models.ContactMessage:
        """Store a message for the support team."""
        if len(message_in.message.strip()) < settings.CONTACT_MESSAGE_MIN_LENGTH:
            raise ValidationException(
                f"Message must be at least {settings.CONTACT_MESSAGE_MIN_LENGTH} characters"
            )

        with translate_store_errors(self.db, "Message not sent, try again"):
            message = self.repository.create({**message_in.model_dump(), "user_id": user_id})
        logger.info(f"Contact message {message.id} received ({message.category.value})")
        return message
