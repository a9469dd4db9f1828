# habitflow/repositories/user_repository.py
from typing import Optional
from sqlalchemy.orm import Session

from habitflow import models, schemas
from habitflow.core.security import IdentityClaims
from habitflow.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[models.User]):
    def __init__(self, db: Session):
        super().__init__(models.User, db)

    def get_by_id(self, user_id: int) -> Optional[models.User]:
        """Get user by ID."""
        return self.get(user_id)

    def get_by_external_id(self, external_id: str) -> Optional[models.User]:
        """Get user by the identity provider's subject."""
        return (
            self.db.query(models.User)
            .filter(models.User.external_id == external_id)
            .first()
        )

    def create_from_claims(self, claims: IdentityClaims) -> models.User:
        user = models.User(
            external_id=claims.sub,
            email=claims.email,
            first_name=claims.first_name,
            last_name=claims.last_name,
        )
        user.user_level = models.UserLevel()
        return self.save(user)

    def update_me(
        self, user: models.User, update_data: schemas.UserUpdate
    ) -> models.User:
        """Update user and persist changes."""
        return self.update(user, update_data)
