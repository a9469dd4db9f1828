# habitflow/api/api.py
from fastapi import APIRouter

from habitflow.api.routes import (
    achievements,
    community,
    contact,
    habits,
    levels,
    shop,
    users,
)

api_router = APIRouter()
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(habits.router, prefix="/habits", tags=["habits"])
api_router.include_router(levels.router, prefix="/levels", tags=["levels"])
api_router.include_router(
    achievements.router, prefix="/achievements", tags=["achievements"]
)
api_router.include_router(shop.router, prefix="/shop", tags=["shop"])
api_router.include_router(community.router, prefix="/community", tags=["community"])
api_router.include_router(contact.router, prefix="/contact", tags=["contact"])
