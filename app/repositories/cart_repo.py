# app/repositories/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import InternalError
from app.models.cart import Cart, CartItem
from app.models.product import Product


class CartRepository:
    """
    Data access layer for carts and cart_items.

    NOTE:
      - Writes flush but do not commit; cart mutations and checkout
        decide where the transaction ends.
    """

    # ---- Carts ----

    def get_active(self, session: Session, user_id: int) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id, Cart.status == "active")
        return session.exec(stmt).first()

    def create_active(self, session: Session, user_id: int) -> Cart:
        cart = Cart(user_id=user_id, status="active")
        session.add(cart)
        session.flush()
        session.refresh(cart)
        return cart

    def get_or_create_active(self, session: Session, user_id: int) -> Cart:
        """
        Return the user's active cart, creating and committing one if absent.

        If a concurrent request inserted the active cart first, the partial
        unique index rejects our insert and the existing row is re-read.
        """
        cart = self.get_active(session, user_id)
        if cart is not None:
            return cart

        try:
            cart = self.create_active(session, user_id)
            session.commit()
            session.refresh(cart)
            return cart
        except IntegrityError:
            session.rollback()

        cart = self.get_active(session, user_id)
        if cart is None:
            raise InternalError("Could not open an active cart")
        return cart

    def mark_completed(self, session: Session, cart: Cart) -> Cart:
        cart.status = "completed"
        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)
        session.flush()
        return cart

    # ---- Cart items ----

    def list_items_with_products(
        self,
        session: Session,
        cart_id: int,
    ) -> list[tuple[CartItem, Product]]:
        """Cart lines joined with their live product rows, newest first."""
        stmt = (
            select(CartItem, Product)
            .join(Product, Product.id == CartItem.product_id)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        )
        return list(session.exec(stmt).all())

    def get_item(
        self,
        session: Session,
        cart_id: int,
        product_id: int,
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def get_item_with_owner(
        self,
        session: Session,
        item_id: int,
    ) -> tuple[CartItem, int] | None:
        """
        Return (item, owner user_id) for a line of an active cart, else None.

        Lines of completed carts are order records and stay read-only.
        """
        stmt = (
            select(CartItem, Cart.user_id)
            .join(Cart, Cart.id == CartItem.cart_id)
            .where(CartItem.id == item_id, Cart.status == "active")
        )
        return session.exec(stmt).first()

    def save_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.flush()
        session.refresh(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.flush()

    def clear_items(self, session: Session, cart_id: int) -> None:
        session.exec(delete(CartItem).where(CartItem.cart_id == cart_id))  # type: ignore[call-overload]

    def item_counts(
        self,
        session: Session,
        cart_ids: list[int],
    ) -> dict[int, tuple[int, int]]:
        """cart_id -> (number of lines, total quantity)."""
        if not cart_ids:
            return {}
        stmt = (
            select(
                CartItem.cart_id,
                func.count(CartItem.id),
                func.coalesce(func.sum(CartItem.quantity), 0),
            )
            .where(CartItem.cart_id.in_(cart_ids))
            .group_by(CartItem.cart_id)
        )
        return {
            cart_id: (int(count), int(qty))
            for cart_id, count, qty in session.exec(stmt).all()
        }
