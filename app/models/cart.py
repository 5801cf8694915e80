from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    A user's shopping cart.

    status:
      - active    : the single cart the user is currently filling
      - completed : converted into an order (kept, the order joins on it)
      - abandoned : reserved for carts dropped by housekeeping

    The partial unique index allows any number of completed carts but
    only one active cart per user.
    """

    __tablename__ = "carts"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'completed', 'abandoned')",
            name="ck_carts_status",
        ),
        Index(
            "uq_carts_one_active_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    status: str = Field(
        default="active",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartItem(SQLModel, table=True):
    """
    Line inside a cart.
    One cart cannot have 2 rows for the same product.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
        CheckConstraint("quantity > 0", name="ck_cart_items_quantity"),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    cart_id: int = Field(
        foreign_key="carts.id",
        index=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        description="Must be >= 1",
    )

    price_at_time: float = Field(
        description="Product price when this line was last written",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
