# habitflow/repositories/contact_repository.py
from sqlalchemy.orm import Session

from habitflow import models
from habitflow.repositories.base_repository import BaseRepository


class ContactRepository(BaseRepository[models.ContactMessage]):
    def __init__(self, db: Session):
        super().__init__(models.ContactMessage, db)
