from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from habitflow.db.base import Base
from habitflow.core.constants import Rarity, ShopCategory


class ShopItem(Base):
    __tablename__ = "shop_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(ShopCategory), default=ShopCategory.REWARD)
    price_points = Column(Integer, nullable=False)
    image_url = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    rarity = Column(Enum(Rarity), default=Rarity.COMMON)
    is_available = Column(Boolean, default=True)
    effect_type = Column(String, nullable=True)  # e.g. "points_multiplier"
    effect_value = Column(Float, nullable=True)
    duration_days = Column(Integer, nullable=True)  # None for permanent items
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def is_permanent(self) -> bool:
        return not self.duration_days


class UserPurchase(Base):
    __tablename__ = "user_purchases"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shop_item_id = Column(
        Integer, ForeignKey("shop_items.id", ondelete="CASCADE"), nullable=False
    )
    purchase_date = Column(DateTime, default=datetime.utcnow)
    is_active = Column(Boolean, default=True)
    expires_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="purchases")
    shop_item = relationship("ShopItem")
