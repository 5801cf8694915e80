from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination, clean_text

PaymentMethod = Literal["credit_card", "debit_card", "paypal", "stripe"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]

# Statuses from which the owner may still cancel
CANCELLABLE_STATUSES = ("pending", "processing")


class OrderCreate(SQLModel):
    """
    Payload for creating an order from the current cart.

    User provides:
      - shipping_address
      - payment_method
      - notes (optional)

    Backend derives:
      - user_id from token
      - status = 'pending'
      - subtotal / tax / total_amount from the cart snapshot
      - items from cart (via cart_id)
    """

    model_config = ConfigDict(extra="forbid")

    shipping_address: str = Field(max_length=500)
    payment_method: PaymentMethod
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("shipping_address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Shipping address is required")
        return v

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        return clean_text(v)


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class OrderCreatedRead(SQLModel):
    id: int
    order_number: str
    status: OrderStatus
    subtotal: str
    tax: str
    total_amount: str
    shipping_address: str
    payment_method: PaymentMethod
    notes: str | None
    item_count: int
    created_at: datetime


class OrderCreatedResponse(SQLModel):
    message: str
    order: OrderCreatedRead


class OrderRead(SQLModel):
    """
    Order row without items (list views).
    """

    id: int
    order_number: str
    user_id: int
    cart_id: int
    status: OrderStatus
    subtotal: str
    tax: str
    total_amount: str
    shipping_address: str
    payment_method: PaymentMethod
    notes: str | None
    created_at: datetime
    updated_at: datetime


class OrderSummaryRead(OrderRead):
    item_count: int
    total_quantity: int


class OrderListResponse(SQLModel):
    orders: list[OrderSummaryRead]
    pagination: Pagination


class OrderItemRead(SQLModel):
    """
    Representation of a single order line (a cart_item of the order's cart).
    """

    id: int
    product_id: int
    name: str
    image_url: str | None
    quantity: int
    price_at_time: str
    subtotal: str


class OrderWithItemsRead(OrderRead):
    items: list[OrderItemRead]


class OrderDetailResponse(SQLModel):
    order: OrderWithItemsRead


class OrderStatusResponse(SQLModel):
    message: str
    order: OrderRead
