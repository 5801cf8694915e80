from datetime import datetime, timezone

from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    stock_quantity is guarded twice: by the CHECK constraint below and by
    the conditional decrement used at checkout.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price"),
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock"),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(
        default=None,
        max_length=1000,
        description="Optional long description",
    )

    price: float = Field(
        index=True,
        description="Current unit price",
    )

    stock_quantity: int = Field(
        default=0,
        description="How many units currently in stock",
    )

    category: str | None = Field(
        default=None,
        max_length=100,
        index=True,
        description="Free-form category label",
    )

    image_url: str | None = Field(
        default=None,
        description="Main image URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
