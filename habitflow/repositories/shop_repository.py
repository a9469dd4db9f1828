# habitflow/repositories/shop_repository.py
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session, joinedload

from habitflow import models
from habitflow.repositories.base_repository import BaseRepository


class ShopRepository(BaseRepository[models.ShopItem]):
    def __init__(self, db: Session):
        super().__init__(models.ShopItem, db)

    def available_items(self) -> List[models.ShopItem]:
        return (
            self.db.query(models.ShopItem)
            .filter(models.ShopItem.is_available.is_(True))
            .order_by(models.ShopItem.price_points, models.ShopItem.id)
            .all()
        )

    def get_available(self, item_id: int) -> Optional[models.ShopItem]:
        return (
            self.db.query(models.ShopItem)
            .filter(models.ShopItem.id == item_id, models.ShopItem.is_available.is_(True))
            .first()
        )

    def get_many_available(self, item_ids: Iterable[int]) -> List[models.ShopItem]:
        return (
            self.db.query(models.ShopItem)
            .filter(
                models.ShopItem.id.in_(list(item_ids)),
                models.ShopItem.is_available.is_(True),
            )
            .all()
        )

    def user_purchases(
        self, user_id: int, active_only: bool = False
    ) -> List[models.UserPurchase]:
        query = (
            self.db.query(models.UserPurchase)
            .options(joinedload(models.UserPurchase.shop_item))
            .filter(models.UserPurchase.user_id == user_id)
        )
        if active_only:
            query = query.filter(models.UserPurchase.is_active.is_(True))
        return query.order_by(models.UserPurchase.purchase_date.desc()).all()

    def deactivate_expired(self, now: datetime) -> int:
        """Flag every active purchase whose expiry has passed; returns the count."""
        count = (
            self.db.query(models.UserPurchase)
            .filter(
                models.UserPurchase.is_active.is_(True),
                models.UserPurchase.expires_at.isnot(None),
                models.UserPurchase.expires_at <= now,
            )
            .update({models.UserPurchase.is_active: False}, synchronize_session=False)
        )
        self.db.commit()
        return count
