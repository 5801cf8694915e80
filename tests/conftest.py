"""
Pytest configuration and fixtures for tests.

The app is pointed at a shared in-memory SQLite database before any app
module is imported; tables are created and dropped around every test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, select

from app.core.auth import issue_token
from app.core.security import hash_password
from app.database import engine
from app.main import app
from app.models.cart import Cart
from app.models.order import Order
from app.models.product import Product
from app.models.user import User
from app.services.notification_service import get_notification_service


class FakeNotifier:
    """Records notifications instead of sending them."""

    def __init__(self):
        self.confirmations = []
        self.status_updates = []

    def send_order_confirmation(self, email, username, order_number, total, items):
        self.confirmations.append(
            {
                "email": email,
                "username": username,
                "order_number": order_number,
                "total": total,
                "items": items,
            }
        )
        return True

    def send_order_status_update(self, email, order_number, new_status):
        self.status_updates.append(
            {"email": email, "order_number": order_number, "status": new_status}
        )
        return True


# ============================================================================
# Database
# ============================================================================


@pytest.fixture(autouse=True)
def tables():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(notifier):
    app.dependency_overrides[get_notification_service] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register a customer through the API; returns (user dict, headers)."""

    def _register(username="alice", email=None, password="secret123"):
        email = email or f"{username}@example.com"
        resp = client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"], auth_headers(body["token"])

    return _register


@pytest.fixture
def customer(register):
    return register("alice")


@pytest.fixture
def admin_headers():
    with Session(engine) as s:
        admin = User(
            username="admin",
            email="admin@shopease.com",
            password_hash=hash_password("admin123"),
            role="admin",
        )
        s.add(admin)
        s.commit()
        s.refresh(admin)
        return auth_headers(issue_token(admin))


# ============================================================================
# Data helpers
# ============================================================================


@pytest.fixture
def make_product():
    def _make(
        name="Widget",
        price=100.0,
        stock_quantity=5,
        category="Gadgets",
        description="A useful widget",
    ) -> int:
        with Session(engine) as s:
            product = Product(
                name=name,
                price=price,
                stock_quantity=stock_quantity,
                category=category,
                description=description,
            )
            s.add(product)
            s.commit()
            return product.id

    return _make


def get_stock(product_id: int) -> int:
    with Session(engine) as s:
        return s.get(Product, product_id).stock_quantity


def set_order_status(order_id: int, status: str) -> None:
    with Session(engine) as s:
        order = s.get(Order, order_id)
        order.status = status
        s.add(order)
        s.commit()


def carts_for(user_id: int) -> list[Cart]:
    with Session(engine) as s:
        return list(s.exec(select(Cart).where(Cart.user_id == user_id)).all())


@pytest.fixture
def place_order(client):
    """Add (product_id, quantity) lines to the cart and check out."""

    def _place(headers, lines, payment_method="credit_card"):
        for product_id, quantity in lines:
            resp = client.post(
                "/api/cart/items",
                json={"product_id": product_id, "quantity": quantity},
                headers=headers,
            )
            assert resp.status_code == 200, resp.text
        resp = client.post(
            "/api/orders",
            json={"shipping_address": "1 Main St", "payment_method": payment_method},
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["order"]

    return _place
