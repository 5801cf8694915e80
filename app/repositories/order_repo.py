# app/repositories/order_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from app.models.cart import CartItem
from app.models.order import Order
from app.models.product import Product


class OrderRepository:
    """
    Data access layer for orders.

    Order lines live in cart_items of the order's (completed) cart and
    are read through a cart_id join.

    NOTE:
      - No commits here; order creation and cancellation are multi-step
        transactions. The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def get_for_user(
        self,
        session: Session,
        order_id: int,
        user_id: int,
    ) -> Order | None:
        stmt = select(Order).where(Order.id == order_id, Order.user_id == user_id)
        return session.exec(stmt).first()

    def list_for_user(
        self,
        session: Session,
        user_id: int,
        status: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        conditions = [Order.user_id == user_id]
        if status:
            conditions.append(Order.status == status)

        stmt = (
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(Order).where(*conditions)

        orders = list(session.exec(stmt).all())
        total = int(session.exec(count_stmt).one() or 0)
        return orders, total

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    # ---- Order lines ----

    def items_for_order(
        self,
        session: Session,
        cart_id: int,
    ) -> list[tuple[CartItem, Product]]:
        stmt = (
            select(CartItem, Product)
            .join(Product, Product.id == CartItem.product_id)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.id)
        )
        return list(session.exec(stmt).all())
