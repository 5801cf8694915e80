from sqlmodel import SQLModel

from app.schemas.order import OrderStatus


class SalesSummary(SQLModel):
    """
    Headline numbers over non-cancelled orders.
    """

    total_revenue: str
    total_orders: int
    average_order_value: str


class StatusBreakdown(SQLModel):
    status: OrderStatus
    count: int
    total: str


class TopProduct(SQLModel):
    """
    Aggregated stats for top-selling products.
    """

    id: int
    name: str
    category: str | None
    total_sold: int
    revenue: str


class MonthlyRevenue(SQLModel):
    """
    Revenue per calendar month, month formatted as YYYY-MM.
    """

    month: str
    revenue: str
    order_count: int


class CategoryPerformance(SQLModel):
    category: str
    order_count: int
    items_sold: int
    revenue: str


class OrderAnalytics(SQLModel):
    """
    Full payload for the admin analytics summary.
    """

    summary: SalesSummary
    orders_by_status: list[StatusBreakdown]
    top_products: list[TopProduct]
    revenue_by_month: list[MonthlyRevenue]
    category_performance: list[CategoryPerformance]


class OrderAnalyticsResponse(SQLModel):
    analytics: OrderAnalytics
