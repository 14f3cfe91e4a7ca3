"""Fixtures partagées : base SQLite en mémoire, client API et fabriques d'objets."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.category import Category
from app.models.coupon import Coupon
from app.models.product import Product

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def auth_headers(*scopes, subject="admin-1"):
    token = create_access_token(subject, scopes=list(scopes))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def db_session():
    """Session sur une base vierge pour chaque test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Client de test utilisant la session de test."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return auth_headers("admin")


@pytest.fixture
def category(db_session):
    category = Category(
        name="Safety Helmets",
        slug="safety-helmets",
        protection_type="Head",
        industry="Construction",
        is_active=True,
        is_featured=True,
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def other_category(db_session):
    category = Category(
        name="Safety Gloves",
        slug="safety-gloves",
        protection_type="Hand",
        industry="All",
        is_active=True,
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def product(db_session, category):
    product = Product(
        sku="HLM-001",
        name="Hard Hat Pro",
        description="Industrial hard hat with ratchet suspension",
        brand="SafeCo",
        price=Decimal("2500.00"),
        protection_type="Head",
        industry="Construction",
        category_id=category.id,
        stock=25,
        is_active=True,
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def coupon_factory(db_session):
    """Créer des coupons persistés valides aujourd'hui, surchargeables."""
    def make(**overrides):
        now = datetime.now(timezone.utc)
        data = {
            "code": "SAVE20",
            "discount_type": "percentage",
            "value": Decimal("20"),
            "minimum_order_amount": Decimal("0"),
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=30),
            "is_active": True,
            "used_count": 0,
        }
        data.update(overrides)
        coupon = Coupon(**data)
        db_session.add(coupon)
        db_session.commit()
        db_session.refresh(coupon)
        return coupon

    return make
