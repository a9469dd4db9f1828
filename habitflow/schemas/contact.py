# habitflow/schemas/contact.py
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from habitflow.core.config import settings
from habitflow.core.constants import ContactCategory


class ContactMessageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    category: ContactCategory = ContactCategory.GENERAL
    message: str = Field(..., min_length=settings.CONTACT_MESSAGE_MIN_LENGTH)


class ContactMessage(BaseModel):
    id: int
    name: str
    email: str
    subject: str
    category: ContactCategory
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
