"""
Shared fixtures and configuration for all tests.
"""
import pytest
import os
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Override environment settings for testing
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "testsecretkey"
os.environ["BACKEND_CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"

from habitflow.main import app
from habitflow import models
from habitflow.db.base import Base
from habitflow.db.session import get_db
from habitflow.api.deps import get_current_user
from habitflow.core.constants import (
    EffectType,
    Rarity,
    RequirementType,
    ShopCategory,
)
from habitflow.core.security import IdentityClaims
from habitflow.repositories.user_repository import UserRepository


# In-memory SQLite shared by every connection of a test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Test fixtures for the database
@pytest.fixture
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop tables after the test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_cache():
    """The app cache outlives requests; start every test empty."""
    app.state.cache.clear()
    yield
    app.state.cache.clear()


# Test users
@pytest.fixture
def test_user():
    """Identity claims of the test user."""
    return IdentityClaims(
        sub="idp|test-user",
        email="test@example.com",
        first_name="Test",
        last_name="User",
    )


@pytest.fixture
def create_test_user(db, test_user):
    """Create the test user's profile (and level row) in the database."""
    return UserRepository(db).create_from_claims(test_user)


@pytest.fixture
def other_user(db):
    return UserRepository(db).create_from_claims(
        IdentityClaims(sub="idp|other-user", email="other@example.com", first_name="Other")
    )


@pytest.fixture
def set_points(db):
    """Set a user's spendable balance directly."""

    def _set_points(user, points):
        user.user_level.points = points
        db.add(user.user_level)
        db.commit()

    return _set_points


# Test clients
@pytest.fixture
def client(db):
    """TestClient bound to the test database, without authentication bypass."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    # Reset overrides after test
    app.dependency_overrides = {}


@pytest.fixture
def authorized_client(client, create_test_user):
    """Return a TestClient that skips the authentication."""
    app.dependency_overrides[get_current_user] = lambda: create_test_user
    return client


# Catalog fixtures
@pytest.fixture
def achievements(db):
    rows = [
        models.Achievement(
            name="First Step",
            description="Create your first habit",
            points_reward=10,
            requirement_type=RequirementType.HABITS_CREATED,
            requirement_value=1,
            rarity=Rarity.COMMON,
        ),
        models.Achievement(
            name="Getting Started",
            description="Complete habits 2 times",
            points_reward=20,
            requirement_type=RequirementType.COMPLETIONS,
            requirement_value=2,
            rarity=Rarity.COMMON,
        ),
        models.Achievement(
            name="On Fire",
            description="Keep a 7 day streak",
            points_reward=70,
            requirement_type=RequirementType.STREAK,
            requirement_value=7,
            rarity=Rarity.RARE,
        ),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def shop_items(db):
    """Two permanent items, one points boost and one unavailable item."""
    items = {
        "theme": models.ShopItem(
            name="Ocean Theme",
            category=ShopCategory.CUSTOMIZATION,
            price_points=150,
        ),
        "icons": models.ShopItem(
            name="Custom Icons",
            category=ShopCategory.FEATURE,
            price_points=300,
            rarity=Rarity.RARE,
        ),
        "boost": models.ShopItem(
            name="Double Points",
            category=ShopCategory.BOOST,
            price_points=250,
            effect_type=EffectType.POINTS_MULTIPLIER,
            effect_value=2.0,
            duration_days=7,
        ),
        "retired": models.ShopItem(
            name="Retired Badge",
            category=ShopCategory.REWARD,
            price_points=10,
            is_available=False,
        ),
    }
    db.add_all(items.values())
    db.commit()
    return items


@pytest.fixture
def make_purchase(db):
    def _make_purchase(user, item, expires_at=None, is_active=True):
        purchase = models.UserPurchase(
            user_id=user.id,
            shop_item_id=item.id,
            purchase_date=datetime.utcnow(),
            expires_at=expires_at,
            is_active=is_active,
        )
        db.add(purchase)
        db.commit()
        return purchase

    return _make_purchase
