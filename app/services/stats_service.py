# app/services/stats_service.py
from sqlmodel import Session

from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import (
    CategoryPerformance,
    MonthlyRevenue,
    OrderAnalytics,
    SalesSummary,
    StatusBreakdown,
    TopProduct,
)
from app.services.pricing import format_price

TOP_PRODUCTS_LIMIT = 10
REVENUE_MONTHS = 12


class StatsService:
    """
    Orchestrates aggregated order analytics for admins.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_order_analytics(self, session: Session) -> OrderAnalytics:
        revenue, order_count, average = self.repo.sales_summary(session)

        orders_by_status = [
            StatusBreakdown(status=status, count=int(count), total=format_price(total))
            for status, count, total in self.repo.orders_by_status(session)
        ]

        top_products = [
            TopProduct(
                id=pid,
                name=name,
                category=category,
                total_sold=int(sold or 0),
                revenue=format_price(rev),
            )
            for pid, name, category, sold, rev in self.repo.top_products(
                session, limit=TOP_PRODUCTS_LIMIT
            )
        ]

        revenue_by_month = [
            MonthlyRevenue(month=month, revenue=format_price(rev), order_count=int(count))
            for month, rev, count in self.repo.revenue_by_month(
                session, months=REVENUE_MONTHS
            )
        ]

        category_performance = [
            CategoryPerformance(
                category=category,
                order_count=int(orders),
                items_sold=int(items or 0),
                revenue=format_price(rev),
            )
            for category, orders, items, rev in self.repo.category_performance(session)
        ]

        return OrderAnalytics(
            summary=SalesSummary(
                total_revenue=format_price(revenue),
                total_orders=order_count,
                average_order_value=format_price(average),
            ),
            orders_by_status=orders_by_status,
            top_products=top_products,
            revenue_by_month=revenue_by_month,
            category_performance=category_performance,
        )
