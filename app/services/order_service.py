# app/services/order_service.py
import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.exceptions import ConflictError, EmptyCartError, NotFoundError, StockError
from app.models.order import Order
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import Pagination
from app.schemas.order import (
    CANCELLABLE_STATUSES,
    OrderCreate,
    OrderCreatedRead,
    OrderItemRead,
    OrderListResponse,
    OrderRead,
    OrderSummaryRead,
    OrderWithItemsRead,
)
from app.services.notification_service import OrderLine
from app.services.pricing import (
    calculate_totals,
    format_price,
    generate_order_number,
    line_subtotal,
    paginate,
    total_pages,
)

logger = logging.getLogger(__name__)


def to_order_read(order: Order) -> OrderRead:
    return OrderRead(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        cart_id=order.cart_id,
        status=order.status,
        subtotal=format_price(order.subtotal),
        tax=format_price(order.tax),
        total_amount=format_price(order.total_amount),
        shipping_address=order.shipping_address,
        payment_method=order.payment_method,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from the active cart in one transaction
      - Validate cart lines against live stock
      - Compute subtotal / tax / total from price_at_time snapshots
      - Deduct stock (conditional UPDATE) and complete the cart
      - Cancellation and admin status changes, restoring stock once
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # -------- User-facing operations --------

    def create_order_from_cart(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> tuple[OrderCreatedRead, list[OrderLine]]:
        """
        Convert the user's active cart into an Order.

        Steps:
          1. Load the active cart and its lines; error if missing or empty.
          2. Check every line against current stock.
          3. Compute totals from price_at_time.
          4. Create Order row (status='pending').
          5. Deduct stock with a guarded UPDATE per line.
          6. Mark the cart completed and open a fresh active cart.
          7. Commit; on any failure roll everything back and re-raise.

        Returns the created order and plain line snapshots for the
        confirmation message.
        """
        try:
            # 1) Load cart
            cart = self.cart_repo.get_active(session, user.id)
            if cart is None:
                raise EmptyCartError("No active cart found")

            rows = self.cart_repo.list_items_with_products(session, cart.id)
            if not rows:
                raise EmptyCartError("Cart is empty")

            # 2) Validate stock (first failing line wins)
            for item, product in rows:
                if product.stock_quantity < item.quantity:
                    raise StockError(
                        f"Insufficient stock for {product.name}",
                        available=product.stock_quantity,
                        requested=item.quantity,
                    )

            # 3) Totals
            subtotal, tax, total = calculate_totals(
                (item.price_at_time, item.quantity) for item, _ in rows
            )

            # 4) Order row
            order = self.order_repo.create_order(
                session,
                Order(
                    order_number=generate_order_number(),
                    user_id=user.id,
                    cart_id=cart.id,
                    subtotal=subtotal,
                    tax=tax,
                    total_amount=total,
                    status="pending",
                    shipping_address=payload.shipping_address,
                    payment_method=payload.payment_method,
                    notes=payload.notes,
                ),
            )

            # 5) Deduct stock; a concurrent order may have taken it meanwhile
            for item, product in rows:
                if not self.product_repo.decrement_stock(session, product.id, item.quantity):
                    session.refresh(product)
                    raise StockError(
                        f"Insufficient stock for {product.name}",
                        available=product.stock_quantity,
                        requested=item.quantity,
                    )

            lines = [
                OrderLine(
                    name=product.name,
                    quantity=item.quantity,
                    price_at_time=item.price_at_time,
                )
                for item, product in rows
            ]

            # 6) Complete the cart before the new active one exists
            self.cart_repo.mark_completed(session, cart)
            self.cart_repo.create_active(session, user.id)

            # 7) Commit
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(order)
        logger.info(
            "Order %s created for user %s (total %s)",
            order.order_number,
            user.id,
            format_price(order.total_amount),
        )

        created = OrderCreatedRead(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            subtotal=format_price(order.subtotal),
            tax=format_price(order.tax),
            total_amount=format_price(order.total_amount),
            shipping_address=order.shipping_address,
            payment_method=order.payment_method,
            notes=order.notes,
            item_count=len(lines),
            created_at=order.created_at,
        )
        return created, lines

    def list_user_orders(
        self,
        session: Session,
        user: User,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderListResponse:
        """
        List the user's orders, newest first, with per-order line counts.
        """
        skip, limit = paginate(page, limit)
        orders, total = self.order_repo.list_for_user(session, user.id, status, skip, limit)
        counts = self.cart_repo.item_counts(session, [o.cart_id for o in orders])

        summaries: list[OrderSummaryRead] = []
        for order in orders:
            item_count, total_quantity = counts.get(order.cart_id, (0, 0))
            summaries.append(
                OrderSummaryRead(
                    **to_order_read(order).model_dump(),
                    item_count=item_count,
                    total_quantity=total_quantity,
                )
            )

        return OrderListResponse(
            orders=summaries,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=total_pages(total, limit),
            ),
        )

    def get_user_order(
        self,
        session: Session,
        user: User,
        order_id: int,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_for_user(session, order_id, user.id)
        if not order:
            raise NotFoundError("Order not found")

        items = [
            OrderItemRead(
                id=item.id,
                product_id=product.id,
                name=product.name,
                image_url=product.image_url,
                quantity=item.quantity,
                price_at_time=format_price(item.price_at_time),
                subtotal=format_price(line_subtotal(item.price_at_time, item.quantity)),
            )
            for item, product in self.order_repo.items_for_order(session, order.cart_id)
        ]
        return OrderWithItemsRead(**to_order_read(order).model_dump(), items=items)

    def cancel_order(self, session: Session, user: User, order_id: int) -> OrderRead:
        """
        Owner cancellation, allowed while pending or processing.
        """
        order = self.order_repo.get_for_user(session, order_id, user.id)
        if not order:
            raise NotFoundError("Order not found")

        if order.status not in CANCELLABLE_STATUSES:
            raise ConflictError("Order cannot be cancelled in current status")

        return to_order_read(self._apply_status(session, order, "cancelled"))

    # -------- Admin operations --------

    def update_status(
        self,
        session: Session,
        order_id: int,
        new_status: str,
    ) -> tuple[OrderRead, User]:
        """
        Admin-only status update.

        Any of the five statuses is accepted from any state. Moving into
        'cancelled' from another state puts the ordered quantities back
        into stock.

        Returns the updated order and its owner.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")

        order = self._apply_status(session, order, new_status)
        owner = session.get(User, order.user_id)
        return to_order_read(order), owner

    # -------- Helpers --------

    def _apply_status(self, session: Session, order: Order, new_status: str) -> Order:
        """
        Persist a status change; restores stock on the first transition
        into 'cancelled'.
        """
        try:
            restore = new_status == "cancelled" and order.status != "cancelled"
            if restore:
                for item, product in self.order_repo.items_for_order(session, order.cart_id):
                    self.product_repo.restore_stock(session, product.id, item.quantity)

            previous = order.status
            order.status = new_status
            order.updated_at = datetime.now(timezone.utc)
            order = self.order_repo.update_order(session, order)
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(order)
        logger.info("Order %s: %s -> %s", order.order_number, previous, new_status)
        if restore:
            logger.info("Restored stock for cancelled order %s", order.order_number)
        return order
