# habitflow/schemas/shop.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from habitflow.core.constants import Rarity, ShopCategory


class ShopItem(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: ShopCategory
    price_points: int
    image_url: Optional[str] = None
    icon: Optional[str] = None
    rarity: Rarity
    is_available: bool
    effect_type: Optional[str] = None
    effect_value: Optional[float] = None
    duration_days: Optional[int] = None
    is_permanent: bool

    class Config:
        from_attributes = True


class UserPurchase(BaseModel):
    id: int
    shop_item_id: int
    purchase_date: datetime
    is_active: bool
    expires_at: Optional[datetime] = None
    shop_item: ShopItem

    class Config:
        from_attributes = True


class PurchaseResult(BaseModel):
    purchase: UserPurchase
    new_balance: int


class CartLine(BaseModel):
    item_id: int
    quantity: int = Field(1, ge=1)


class Cart(BaseModel):
    items: List[CartLine] = Field(..., min_length=1)


class CartTotal(BaseModel):
    total: int
    balance: int
    affordable: bool


class CheckoutResult(BaseModel):
    purchases: List[UserPurchase]
    total: int
    new_balance: int


class Balance(BaseModel):
    points: int
