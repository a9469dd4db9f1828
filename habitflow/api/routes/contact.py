# habitflow/api/routes/contact.py
from typing import Any
import logging

from fastapi import APIRouter, Depends, status

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.logging import log_context
from habitflow.services.contact_service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=schemas.ContactMessage, status_code=status.HTTP_201_CREATED)
def submit_contact_message(
    *,
    message_in: schemas.ContactMessageCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
    contact_service: ContactService = Depends(deps.get_contact_service()),
) -> Any:
    """
    Send a message to the support team.
    """
    with log_context(
        user_id=current_user.id, action="contact", category=message_in.category.value
    ):
        return contact_service.submit(message_in, user_id=current_user.id)
