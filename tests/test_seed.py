from sqlmodel import Session, select

from app.database import engine
from app.models.product import Product
from app.models.user import User
from app.seed import SEED_PRODUCTS, seed_database
from conftest import carts_for


def test_seed_is_idempotent():
    with Session(engine) as s:
        first = seed_database(s)
    with Session(engine) as s:
        second = seed_database(s)

    assert first == {"users": 2, "products": len(SEED_PRODUCTS)}
    assert second == {"users": 0, "products": 0}


def test_seeded_accounts(client):
    with Session(engine) as s:
        seed_database(s)
        admin = s.exec(select(User).where(User.email == "admin@shopease.com")).one()
        assert admin.role == "admin"
        assert len(s.exec(select(Product)).all()) == len(SEED_PRODUCTS)
        user_ids = [u.id for u in s.exec(select(User)).all()]

    for user_id in user_ids:
        assert [c.status for c in carts_for(user_id)] == ["active"]

    resp = client.post(
        "/api/auth/login", json={"email": "john@example.com", "password": "customer123"}
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "customer"

    categories = client.get("/api/products/categories").json()["categories"]
    assert categories[0] == {"category": "Electronics", "count": 4}
