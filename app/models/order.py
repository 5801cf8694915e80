from datetime import datetime, timezone

from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order.

    There is no order_items table: the lines are the cart_items of the
    (completed) cart referenced by cart_id, so that cart is never deleted.
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'processing', 'shipped', 'delivered', 'cancelled')",
            name="ck_orders_status",
        ),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    order_number: str = Field(
        unique=True,
        index=True,
        description="Customer-facing reference, e.g. ORD-1700000000000-42",
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    cart_id: int = Field(
        foreign_key="carts.id",
        index=True,
        description="Completed cart holding the order lines",
    )

    subtotal: float = Field(
        description="Sum of price_at_time * quantity",
    )

    tax: float = Field(
        description="8% of subtotal, rounded to cents",
    )

    # subtotal + tax
    total_amount: float = Field(
        description="Final amount for this order (including tax)",
    )

    # pending | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    shipping_address: str = Field(
        max_length=500,
        description="Delivery address",
    )

    # credit_card | debit_card | paypal | stripe
    payment_method: str = Field(
        description="Payment method identifier",
    )

    notes: str | None = Field(
        default=None,
        description="Optional note / special instructions",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last status change (UTC)",
    )
