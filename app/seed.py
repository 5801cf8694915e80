# app/seed.py
"""
Populate the database with an admin, a sample customer and a small catalog.

Run with:

    python -m app.seed

Existing rows (matched by email / product name) are left untouched, so the
script can be run repeatedly.
"""

import logging

from sqlmodel import Session, select

from app.core.security import hash_password
from app.database import create_db_and_tables, engine
from app.models import order as _order_models  # noqa: F401
from app.models import review as _review_models  # noqa: F401
from app.models.product import Product
from app.models.user import User
from app.repositories.cart_repo import CartRepository

logger = logging.getLogger(__name__)

SEED_USERS = [
    {"username": "admin", "email": "admin@shopease.com", "password": "admin123", "role": "admin"},
    {"username": "johndoe", "email": "john@example.com", "password": "customer123", "role": "customer"},
]

SEED_PRODUCTS = [
    {
        "name": 'MacBook Pro 16"',
        "description": "Apple MacBook Pro 16-inch with M3 Pro chip, 18GB RAM, 512GB SSD",
        "price": 2499.99,
        "stock_quantity": 25,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1517336714731-489689fd1ca4?w=400",
    },
    {
        "name": "iPhone 15 Pro",
        "description": "Latest iPhone with A17 Pro chip, 256GB storage, Titanium design",
        "price": 1199.99,
        "stock_quantity": 50,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1591337676887-a217a6970a8a?w=400",
    },
    {
        "name": "Sony WH-1000XM5",
        "description": "Premium noise-canceling wireless headphones with 30-hour battery",
        "price": 399.99,
        "stock_quantity": 100,
        "category": "Audio",
        "image_url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=400",
    },
    {
        "name": "Nike Air Max 270",
        "description": "Comfortable running shoes with Air Max cushioning",
        "price": 150.00,
        "stock_quantity": 75,
        "category": "Footwear",
        "image_url": "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=400",
    },
    {
        "name": "Patagonia Down Jacket",
        "description": "Warm and sustainable down jacket for cold weather",
        "price": 299.99,
        "stock_quantity": 40,
        "category": "Clothing",
        "image_url": "https://images.unsplash.com/photo-1566479179817-0ddb5fa87cd9?w=400",
    },
    {
        "name": "Canon EOS R6",
        "description": "Full-frame mirrorless camera with 20MP sensor and 4K video",
        "price": 2499.00,
        "stock_quantity": 15,
        "category": "Cameras",
        "image_url": "https://images.unsplash.com/photo-1516035069371-29a1b244cc32?w=400",
    },
    {
        "name": 'Samsung 65" OLED TV',
        "description": "4K Smart TV with HDR and built-in streaming apps",
        "price": 1799.99,
        "stock_quantity": 20,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1593359677879-a4bb92f829d1?w=400",
    },
    {
        "name": "Herman Miller Aeron Chair",
        "description": "Ergonomic office chair with lumbar support",
        "price": 1395.00,
        "stock_quantity": 10,
        "category": "Furniture",
        "image_url": "https://images.unsplash.com/photo-1592078615290-033ee584e267?w=400",
    },
    {
        "name": "Kindle Paperwhite",
        "description": 'E-reader with 6.8" display and adjustable warm light',
        "price": 139.99,
        "stock_quantity": 150,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1428908728789-d2de25dbd4e2?w=400",
    },
    {
        "name": "Yeti Rambler Tumbler",
        "description": "Insulated stainless steel tumbler, 30oz",
        "price": 35.00,
        "stock_quantity": 200,
        "category": "Home",
        "image_url": "https://images.unsplash.com/photo-1602143407151-7111542de6e8?w=400",
    },
]


def seed_database(session: Session) -> dict[str, int]:
    """
    Insert the seed users (each with an active cart) and products.

    Returns how many users and products were actually created.
    """
    cart_repo = CartRepository()
    created = {"users": 0, "products": 0}

    for data in SEED_USERS:
        exists = session.exec(select(User).where(User.email == data["email"])).first()
        if exists is not None:
            continue
        user = User(
            username=data["username"],
            email=data["email"],
            password_hash=hash_password(data["password"]),
            role=data["role"],
        )
        session.add(user)
        session.flush()
        cart_repo.create_active(session, user.id)
        created["users"] += 1
        logger.info("Seeded %s user %s", data["role"], data["email"])

    for data in SEED_PRODUCTS:
        exists = session.exec(select(Product).where(Product.name == data["name"])).first()
        if exists is not None:
            continue
        session.add(Product(**data))
        created["products"] += 1

    session.commit()
    logger.info("Seed complete: %(users)s users, %(products)s products", created)
    return created


def main():
    logging.basicConfig(level=logging.INFO)
    create_db_and_tables()
    with Session(engine) as session:
        seed_database(session)


if __name__ == "__main__":
    main()
