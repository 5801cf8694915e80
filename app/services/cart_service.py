# app/services/cart_service.py
from sqlmodel import Session

from app.core.exceptions import AuthorizationError, NotFoundError, StockError
from app.models.cart import CartItem
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemMutationResponse,
    CartItemRead,
    CartItemUpdate,
    CartRead,
)
from app.services.pricing import calculate_totals, format_price, line_subtotal


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - keep exactly one active cart per user (created lazily)
      - validate product existence and stock (stock is checked, never reserved)
      - re-stamp price_at_time with the live price on every write
      - compute line subtotals and cart totals
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_owned_item(self, session: Session, user: User, item_id: int) -> CartItem:
        row = self.cart_repo.get_item_with_owner(session, item_id)
        if row is None:
            raise NotFoundError("Cart item not found")
        item, owner_id = row
        if owner_id != user.id:
            raise AuthorizationError("Unauthorized")
        return item

    # ---- public operations ----

    def get_cart(self, session: Session, user: User) -> CartRead:
        """
        Return the active cart with its lines and derived totals.
        """
        cart = self.cart_repo.get_or_create_active(session, user.id)
        rows = self.cart_repo.list_items_with_products(session, cart.id)

        items: list[CartItemRead] = []
        for item, product in rows:
            items.append(
                CartItemRead(
                    id=item.id,
                    product_id=product.id,
                    name=product.name,
                    description=product.description,
                    category=product.category,
                    image_url=product.image_url,
                    stock_quantity=product.stock_quantity,
                    quantity=item.quantity,
                    price_at_time=format_price(item.price_at_time),
                    current_price=format_price(product.price),
                    subtotal=format_price(line_subtotal(item.price_at_time, item.quantity)),
                    created_at=item.created_at,
                )
            )

        subtotal, tax, total = calculate_totals(
            (item.price_at_time, item.quantity) for item, _ in rows
        )

        return CartRead(
            id=cart.id,
            status=cart.status,
            items=items,
            subtotal=format_price(subtotal),
            tax=format_price(tax),
            total=format_price(total),
            item_count=len(rows),
            total_quantity=sum(item.quantity for item, _ in rows),
        )

    def add_item(
        self,
        session: Session,
        user: User,
        payload: CartItemCreate,
    ) -> CartItemMutationResponse:
        """
        Add a product to the user's active cart.

        Rules:
          - product must exist
          - quantity (plus what is already in the cart) <= stock_quantity
          - an existing line is merged and re-priced at the current price
        """
        product = self.product_repo.get_by_id(session, payload.product_id)
        if not product:
            raise NotFoundError("Product not found")

        if payload.quantity > product.stock_quantity:
            raise StockError("Insufficient stock", available=product.stock_quantity)

        cart = self.cart_repo.get_or_create_active(session, user.id)
        existing = self.cart_repo.get_item(session, cart.id, product.id)

        if existing:
            new_qty = existing.quantity + payload.quantity
            if new_qty > product.stock_quantity:
                raise StockError(
                    "Insufficient stock for updated quantity",
                    available=product.stock_quantity,
                    in_cart=existing.quantity,
                )
            existing.quantity = new_qty
            existing.price_at_time = product.price
            item = self.cart_repo.save_item(session, existing)
            message = "Cart updated successfully"
        else:
            item = self.cart_repo.save_item(
                session,
                CartItem(
                    cart_id=cart.id,
                    product_id=product.id,
                    quantity=payload.quantity,
                    price_at_time=product.price,
                ),
            )
            message = "Item added to cart successfully"

        session.commit()
        return CartItemMutationResponse(
            message=message, cart_item_id=item.id, quantity=item.quantity
        )

    def update_item(
        self,
        session: Session,
        user: User,
        item_id: int,
        payload: CartItemUpdate,
    ) -> None:
        """
        Set the quantity of one of the caller's cart lines.
        """
        item = self._get_owned_item(session, user, item_id)

        product = self.product_repo.get_by_id(session, item.product_id)
        if payload.quantity > product.stock_quantity:
            raise StockError("Insufficient stock", available=product.stock_quantity)

        item.quantity = payload.quantity
        item.price_at_time = product.price
        self.cart_repo.save_item(session, item)
        session.commit()

    def remove_item(self, session: Session, user: User, item_id: int) -> None:
        item = self._get_owned_item(session, user, item_id)
        self.cart_repo.delete_item(session, item)
        session.commit()

    def clear_cart(self, session: Session, user: User) -> None:
        """
        Remove every line of the active cart.

        Raises:
            NotFoundError: the user has no active cart.
        """
        cart = self.cart_repo.get_active(session, user.id)
        if cart is None:
            raise NotFoundError("No active cart found")
        self.cart_repo.clear_items(session, cart.id)
        session.commit()
