# app/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemMutationResponse,
    CartItemUpdate,
    CartResponse,
)
from app.schemas.common import MessageResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartResponse)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get current user's active cart with totals.

    An empty active cart is created on first access.
    """
    return CartResponse(cart=service.get_cart(session, current_user))


@router.post("/items", response_model=CartItemMutationResponse)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Add product to the current user's cart.

    Adding a product already in the cart increases its quantity.
    """
    return service.add_item(session, current_user, payload)


@router.put("/items/{item_id}", response_model=MessageResponse)
def update_cart_item(
    item_id: int,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set the quantity of a cart line.
    """
    service.update_item(session, current_user, item_id, payload)
    return MessageResponse(message="Cart item updated successfully")


@router.delete("/items/{item_id}", response_model=MessageResponse)
def remove_cart_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    service.remove_item(session, current_user, item_id)
    return MessageResponse(message="Item removed from cart")


@router.delete("/clear", response_model=MessageResponse)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Clear the entire cart.
    """
    service.clear_cart(session, current_user)
    return MessageResponse(message="Cart cleared successfully")
