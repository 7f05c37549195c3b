"""Shared fixtures: in-memory database, catalog seed, API client and tokens"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from campus_orders.db import database
from campus_orders.models.order import Order, OrderStatus, PaymentMethod
from campus_orders.models.product import Product
from campus_orders.config import settings
from campus_orders.services.auth import CurrentUser, UserRole

CLIENT_ID = 1
OTHER_CLIENT_ID = 2
ADMIN_ID = 99


@pytest.fixture
def db():
    engine = database.init_database("sqlite://")
    database.create_tables()
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        database.Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def products(db):
    """Catalog: ids 1-4"""
    rows = [
        Product(id=1, name="Americano", price=Decimal("3.50"), is_available=True),
        Product(id=2, name="Cookie", price=Decimal("1.00"), is_available=True),
        Product(id=3, name="Empanada", price=Decimal("4.25"), is_available=False),
        Product(id=4, name="Candy", price=Decimal("0.10"), is_available=True),
    ]
    db.add_all(rows)
    db.commit()
    return {p.id: p for p in rows}


@pytest.fixture
def client_user():
    return CurrentUser(user_id=CLIENT_ID, role=UserRole.CLIENT)


@pytest.fixture
def other_user():
    return CurrentUser(user_id=OTHER_CLIENT_ID, role=UserRole.CLIENT)


@pytest.fixture
def admin_user():
    return CurrentUser(user_id=ADMIN_ID, role=UserRole.ADMIN)


@pytest.fixture
def make_order(db):
    """Insert an order directly in a given status"""
    def _make(status=OrderStatus.PENDING, user_id=CLIENT_ID):
        order = Order(
            user_id=user_id,
            status=status,
            delivery_location="Library, 2nd floor",
            payment_method=PaymentMethod.CASH,
            subtotal=Decimal("7.00"),
            delivery_fee=Decimal("1.00"),
            total=Decimal("8.00"),
        )
        db.add(order)
        db.commit()
        db.refresh(order)
        return order
    return _make


@pytest.fixture
def api(db):
    from campus_orders.main import app
    return TestClient(app)


def make_token(user_id, role=UserRole.CLIENT, expires_delta=timedelta(minutes=15)):
    """Sign a token the way the auth service does"""
    claims = {
        "sub": str(user_id),
        "user_id": user_id,
        "role": UserRole(role).value,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def auth_header(user_id, role=UserRole.CLIENT):
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def client_headers():
    return auth_header(CLIENT_ID)


@pytest.fixture
def other_headers():
    return auth_header(OTHER_CLIENT_ID)


@pytest.fixture
def admin_headers():
    return auth_header(ADMIN_ID, UserRole.ADMIN)
