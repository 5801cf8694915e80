from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: int = Field(ge=1)
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=1)


class CartItemRead(SQLModel):
    """
    One cart line joined with the live product row.

    price_at_time is the snapshot used for totals, current_price the
    live catalog price.
    """

    id: int
    product_id: int
    name: str
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    stock_quantity: int
    quantity: int
    price_at_time: str
    current_price: str
    subtotal: str
    created_at: datetime


class CartRead(SQLModel):
    """
    Full cart with derived totals.
    """

    id: int
    status: str
    items: list[CartItemRead]
    subtotal: str
    tax: str
    total: str
    item_count: int
    total_quantity: int


class CartResponse(SQLModel):
    cart: CartRead


class CartItemMutationResponse(SQLModel):
    message: str
    cart_item_id: int
    quantity: int
