"""
Service registry module.

This module registers all services with the dependency injection system.
"""
# Import all service classes
from habitflow.services.achievement_service import AchievementService
from habitflow.services.community_service import CommunityService
from habitflow.services.contact_service import ContactService
from habitflow.services.habit_service import HabitService
from habitflow.services.progression_service import ProgressionService
from habitflow.services.shop_service import ShopService
from habitflow.services.user_service import UserService


def register_services():
    """Register all services with the dependency injection system."""
    # Import register_service inside the function to avoid circular imports
    from habitflow.utils.dependencies import register_service

    # Register each service with its factory function
    register_service(HabitService, lambda db, cache: HabitService(db, cache))
    register_service(ProgressionService, lambda db, cache: ProgressionService(db, cache))
    register_service(AchievementService, lambda db, cache: AchievementService(db, cache))
    register_service(ShopService, lambda db, cache: ShopService(db, cache))
    register_service(CommunityService, lambda db, cache: CommunityService(db, cache))
    register_service(ContactService, lambda db, cache: ContactService(db, cache))
    register_service(UserService, lambda db, cache: UserService(db, cache))
