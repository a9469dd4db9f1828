# habitflow/api/routes/shop.py
from typing import Any, List
import logging

from fastapi import APIRouter, Depends, Query

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.logging import log_context
from habitflow.services.shop_service import ShopService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/items", response_model=List[schemas.ShopItem])
def read_items(
    current_user: models.User = Depends(deps.get_current_active_user),
    shop_service: ShopService = Depends(deps.get_shop_service()),
) -> Any:
    """
    Retrieve available shop items, cheapest first.
    """
    with log_context(user_id=current_user.id, action="list_shop_items"):
        return shop_service.get_items()


@router.get("/purchases", response_model=List[schemas.UserPurchase])
def read_purchases(
    active_only: bool = Query(False),
    current_user: models.User = Depends(deps.get_current_active_user),
    shop_service: ShopService = Depends(deps.get_shop_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="list_purchases"):
        return shop_service.get_purchases(current_user.id, active_only=active_only)


@router.get("/balance", response_model=schemas.Balance)
def read_balance(
    current_user: models.User = Depends(deps.get_current_active_user),
    shop_service: ShopService = Depends(deps.get_shop_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="get_balance"):
        return {"points": shop_service.get_balance(current_user.id)}


@router.post("/items/{item_id}/purchase", response_model=schemas.PurchaseResult)
def purchase_item(
    *,
    item_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    shop_service: ShopService = Depends(deps.get_shop_service()),
) -> Any:
    """
    Buy one item with points.
    """
    with log_context(user_id=current_user.id, action="purchase_item", item_id=item_id):
        logger.info(f"User {current_user.id} purchasing item {item_id}")
        purchase, new_balance = shop_service.purchase_item(current_user.id, item_id)
        return {"purchase": purchase, "new_balance": new_balance}


@router.post("/checkout", response_model=schemas.CheckoutResult)
def checkout(
    *,
    cart: schemas.Cart,
    current_user: models.User = Depends(deps.get_current_active_user),
    shop_service: ShopService = Depends(deps.get_shop_service()),
) -> Any:
    """
    Buy the whole cart; nothing is bought if any line fails.
    """
    with log_context(
        user_id=current_user.id, action="checkout", lines=len(cart.items)
    ):
        logger.info(f"User {current_user.id} checking out {len(cart.items)} lines")
        return shop_service.checkout(current_user.id, cart)


@router.post("/cart/total", response_model=schemas.CartTotal)
def cart_total(
    *,
    cart: schemas.Cart,
    current_user: models.User = Depends(deps.get_current_active_user),
    shop_service: ShopService = Depends(deps.get_shop_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="cart_total"):
        return shop_service.get_cart_total(current_user.id, cart)
