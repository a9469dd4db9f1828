from datetime import datetime
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text

from habitflow.db.base import Base
from habitflow.core.constants import ContactCategory


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    category = Column(Enum(ContactCategory), default=ContactCategory.GENERAL)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
