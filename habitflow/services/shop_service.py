# habitflow/services/shop_service.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from habitflow import models, schemas
from habitflow.core.exceptions import BusinessException, ResourceNotFoundException
from habitflow.repositories.shop_repository import ShopRepository
from habitflow.repositories.user_level_repository import UserLevelRepository
from habitflow.services.gamification_service import attempt_purchase, price_cart
from habitflow.utils.cache import CacheKeys, TTLCache, invalidate_user_cache
from habitflow.utils.retry import retry_on_transient, translate_store_errors

logger = logging.getLogger(__name__)


class ShopService:
    """Catalog, balance and purchases paid with points."""

    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache
        self.repository = ShopRepository(db)
        self.level_repository = UserLevelRepository(db)

    @retry_on_transient()
    def get_items(self) -> List[schemas.ShopItem]:
        """Available items, cheapest first."""

        def build() -> List[schemas.ShopItem]:
            return [
                schemas.ShopItem.model_validate(item)
                for item in self.repository.available_items()
            ]

        if self.cache is None:
            return build()
        return self.cache.get_or_set(CacheKeys.SHOP_CATALOG, build)

    @retry_on_transient()
    def get_purchases(self, user_id: int, active_only: bool = False) -> List[models.UserPurchase]:
        return self.repository.user_purchases(user_id, active_only=active_only)

    @retry_on_transient()
    def get_balance(self, user_id: int) -> int:
        level = self.level_repository.get_by_user(user_id)
        return level.points if level else 0

    def _locked_level(self, user_id: int) -> models.UserLevel:
        level = self.level_repository.get_for_update(user_id)
        if level is None:
            level = models.UserLevel(user_id=user_id)
            self.db.add(level)
            self.db.flush()
        return level

    def purchase_item(self, user_id: int, item_id: int) -> Tuple[models.UserPurchase, int]:
        """
        Buy one item.

        The balance change and the purchase record are committed together;
        on any failure neither is written.
        """
        item = self.repository.get_available(item_id)
        if not item:
            raise ResourceNotFoundException(
                "Shop item not found", details={"item_id": item_id}
            )

        with translate_store_errors(self.db, "Purchase failed, reload your balance"):
            try:
                level = self._locked_level(user_id)
                outcome = attempt_purchase(
                    level.points,
                    item,
                    self.repository.user_purchases(user_id, active_only=True),
                )
            except BusinessException:
                self.db.rollback()
                raise

            level.points = outcome.new_balance
            purchase = models.UserPurchase(
                user_id=user_id,
                shop_item_id=item.id,
                purchase_date=datetime.utcnow(),
                is_active=True,
                expires_at=outcome.expires_at,
            )
            self.db.add(level)
            self.db.add(purchase)
            self.db.commit()

        self.db.refresh(purchase)
        self._invalidate(user_id)
        logger.info(
            f"User {user_id} bought '{item.name}' for {outcome.price} points "
            f"(balance {outcome.new_balance})"
        )
        return purchase, outcome.new_balance

    def _cart_lines(self, cart: schemas.Cart) -> List[Tuple[models.ShopItem, int]]:
        quantities: Dict[int, int] = {}
        for line in cart.items:
            quantities[line.item_id] = quantities.get(line.item_id, 0) + line.quantity

        items = {item.id: item for item in self.repository.get_many_available(quantities)}
        missing = sorted(set(quantities) - set(items))
        if missing:
            raise ResourceNotFoundException(
                "Shop items not found", details={"item_ids": missing}
            )
        return [(items[item_id], quantity) for item_id, quantity in quantities.items()]

    @retry_on_transient()
    def get_cart_total(self, user_id: int, cart: schemas.Cart) -> Dict[str, Any]:
        total = sum(item.price_points * quantity for item, quantity in self._cart_lines(cart))
        balance = self.get_balance(user_id)
        return {"total": total, "balance": balance, "affordable": balance >= total}

    def checkout(self, user_id: int, cart: schemas.Cart) -> Dict[str, Any]:
        """Buy every line of the cart or nothing at all."""
        lines = self._cart_lines(cart)

        with translate_store_errors(self.db, "Checkout failed, reload your balance"):
            try:
                level = self._locked_level(user_id)
                outcome = price_cart(
                    level.points,
                    lines,
                    self.repository.user_purchases(user_id, active_only=True),
                )
            except BusinessException:
                self.db.rollback()
                raise

            now = datetime.utcnow()
            purchases = [
                models.UserPurchase(
                    user_id=user_id,
                    shop_item_id=item.id,
                    purchase_date=now,
                    is_active=True,
                    expires_at=expires_at,
                )
                for item, expires_at in outcome.purchases
            ]
            level.points = outcome.new_balance
            self.db.add(level)
            self.db.add_all(purchases)
            self.db.commit()

        for purchase in purchases:
            self.db.refresh(purchase)
        self._invalidate(user_id)
        logger.info(
            f"User {user_id} checked out {len(purchases)} items for {outcome.total} points"
        )
        return {
            "purchases": purchases,
            "total": outcome.total,
            "new_balance": outcome.new_balance,
        }

    def expire_purchases(self, now: Optional[datetime] = None) -> int:
        """Deactivate purchases past their expiry; returns how many changed."""
        with translate_store_errors(self.db, "Could not expire purchases"):
            count = self.repository.deactivate_expired(now or datetime.utcnow())
        if count:
            logger.info(f"Expired {count} purchases")
            if self.cache is not None:
                self.cache.clear()
        return count

    def _invalidate(self, user_id: int) -> None:
        if self.cache is not None:
            invalidate_user_cache(self.cache, user_id)
