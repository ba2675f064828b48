"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Point the app at an in-memory database before settings are first read
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from shared.infrastructure.db import get_db
from shared.security.auth import sign_jwt
from rest_api.models import (
    Base, Restaurant, MenuCategory, Dish, DishOption,
    Combo, ComboGroup, ComboGroupItem,
)


ADMIN_ID = 1
OWNER_ID = 10
OTHER_OWNER_ID = 20
CUSTOMER_ID = 30


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class CatalogFactory:
    """Creates committed catalog and combo rows for tests."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def restaurant(self, owner_id: int = OWNER_ID, name: str = "Test Restaurant") -> Restaurant:
        return self._commit(Restaurant(owner_id=owner_id, name=name))

    def category(self, restaurant: Restaurant, name: str = "Mains") -> MenuCategory:
        return self._commit(MenuCategory(restaurant_id=restaurant.id, name=name))

    def dish(
        self,
        restaurant: Restaurant,
        name: str,
        price: int,
        options: list[tuple[str, int]] | None = None,
        available: bool = True,
    ) -> Dish:
        dish = Dish(restaurant_id=restaurant.id, name=name, price=price, available=available)
        self.db.add(dish)
        self.db.flush()
        for option_name, extra_cost in options or []:
            self.db.add(DishOption(dish_id=dish.id, name=option_name, extra_cost=extra_cost))
        self.db.commit()
        self.db.refresh(dish)
        return dish

    def combo(
        self,
        restaurant: Restaurant,
        pricing_mode: str = "FIXED",
        base_price: int = 0,
        name: str = "Lunch Combo",
    ) -> Combo:
        return self._commit(Combo(
            restaurant_id=restaurant.id,
            name=name,
            pricing_mode=pricing_mode,
            base_price=base_price,
        ))

    def group(
        self,
        combo: Combo,
        name: str = "Mains",
        allowed_min: int = 1,
        allowed_max: int = 1,
        position: int = 0,
    ) -> ComboGroup:
        return self._commit(ComboGroup(
            combo_id=combo.id,
            name=name,
            allowed_min=allowed_min,
            allowed_max=allowed_max,
            position=position,
        ))

    def item(
        self,
        group: ComboGroup,
        dish: Dish,
        extra_price: int = 0,
        position: int = 0,
    ) -> ComboGroupItem:
        return self._commit(ComboGroupItem(
            combo_group_id=group.id,
            dish_id=dish.id,
            extra_price=extra_price,
            position=position,
        ))


@pytest.fixture
def factory(db_session):
    """Factory for catalog and combo rows."""
    return CatalogFactory(db_session)


@pytest.fixture
def restaurant(factory):
    """A restaurant owned by OWNER_ID."""
    return factory.restaurant()


@pytest.fixture
def dish_a(factory, restaurant):
    """Dish A: price 8000 with an 'Extra Sauce' option costing 1000."""
    return factory.dish(restaurant, "Dish A", 8000, options=[("Extra Sauce", 1000)])


@pytest.fixture
def dish_b(factory, restaurant):
    """Dish B: price 10000, no options."""
    return factory.dish(restaurant, "Dish B", 10000)


@pytest.fixture
def dish_c(factory, restaurant):
    """Dish C: in the catalog but never added to a combo group."""
    return factory.dish(restaurant, "Dish C", 5000)


@pytest.fixture
def token_for():
    """Build Authorization headers for a user id and role."""
    def _headers(user_id: int, role: str) -> dict[str, str]:
        token = sign_jwt({"sub": str(user_id), "role": role})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def owner_headers(token_for):
    return token_for(OWNER_ID, "restaurant")


@pytest.fixture
def admin_headers(token_for):
    return token_for(ADMIN_ID, "admin")
