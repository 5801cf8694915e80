# app/repositories/stats_repo.py
from sqlalchemy import distinct, func
from sqlmodel import Session, select

from app.models.cart import CartItem
from app.models.order import Order
from app.models.product import Product


class StatsRepository:
    """
    Read-only aggregated queries for the admin order analytics.

    Cancelled orders are excluded everywhere except the status breakdown.
    """

    def sales_summary(self, session: Session) -> tuple[float, int, float]:
        """(total revenue, order count, average order value)."""
        stmt = select(
            func.coalesce(func.sum(Order.total_amount), 0.0),
            func.count(Order.id),
            func.coalesce(func.avg(Order.total_amount), 0.0),
        ).where(Order.status != "cancelled")
        revenue, count, average = session.exec(stmt).one()
        return float(revenue or 0.0), int(count or 0), float(average or 0.0)

    def orders_by_status(self, session: Session) -> list[tuple]:
        stmt = (
            select(
                Order.status,
                func.count(Order.id),
                func.coalesce(func.sum(Order.total_amount), 0.0),
            )
            .group_by(Order.status)
            .order_by(Order.status)
        )
        return list(session.exec(stmt).all())

    def top_products(self, session: Session, limit: int = 10) -> list[tuple]:
        """
        Top products by quantity sold across all non-cancelled orders.
        """
        qty_sum = func.coalesce(func.sum(CartItem.quantity), 0)
        revenue_sum = func.coalesce(
            func.sum(CartItem.quantity * CartItem.price_at_time),
            0.0,
        )

        stmt = (
            select(
                Product.id,
                Product.name,
                Product.category,
                qty_sum.label("total_sold"),
                revenue_sum.label("revenue"),
            )
            .join(CartItem, CartItem.product_id == Product.id)
            .join(Order, Order.cart_id == CartItem.cart_id)
            .where(Order.status != "cancelled")
            .group_by(Product.id, Product.name, Product.category)
            .order_by(qty_sum.desc(), Product.id)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def _month_expr(session: Session):
        # YYYY-MM bucket; SQLite has no to_char
        if session.get_bind().dialect.name == "sqlite":
            return func.strftime("%Y-%m", Order.created_at)
        return func.to_char(Order.created_at, "YYYY-MM")

    def revenue_by_month(self, session: Session, months: int = 12) -> list[tuple]:
        """
        Revenue per month for the most recent `months` months with orders.
        """
        month_expr = self._month_expr(session).label("month")

        stmt = (
            select(
                month_expr,
                func.coalesce(func.sum(Order.total_amount), 0.0),
                func.count(Order.id),
            )
            .where(Order.status != "cancelled")
            .group_by(month_expr)
            .order_by(month_expr.desc())
            .limit(months)
        )
        return list(session.exec(stmt).all())

    def category_performance(self, session: Session) -> list[tuple]:
        revenue_sum = func.coalesce(
            func.sum(CartItem.quantity * CartItem.price_at_time),
            0.0,
        )
        stmt = (
            select(
                Product.category,
                func.count(distinct(Order.id)),
                func.coalesce(func.sum(CartItem.quantity), 0),
                revenue_sum,
            )
            .join(CartItem, CartItem.product_id == Product.id)
            .join(Order, Order.cart_id == CartItem.cart_id)
            .where(Order.status != "cancelled", Product.category.is_not(None))
            .group_by(Product.category)
            .order_by(revenue_sum.desc())
        )
        return list(session.exec(stmt).all())
