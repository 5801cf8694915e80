# app/routers/orders.py
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin, require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.stats_repo import StatsRepository
from app.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderStatus,
    OrderStatusResponse,
    OrderStatusUpdate,
)
from app.schemas.stats import OrderAnalyticsResponse
from app.services.notification_service import NotificationService, get_notification_service
from app.services.order_service import OrderService
from app.services.stats_service import StatsService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
service = OrderService(order_repo, cart_repo, product_repo)
stats_service = StatsService(StatsRepository())


# -------- User endpoints --------


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    notifier: NotificationService = Depends(get_notification_service),
):
    """
    Create an order from the current user's active cart.

    Flow:
      - Stock is checked and deducted, the cart is completed and a new
        empty active cart is opened, all in one transaction.
      - A confirmation email is sent after the response.
    """
    order, lines = service.create_order_from_cart(session, current_user, payload)

    background_tasks.add_task(
        notifier.send_order_confirmation,
        current_user.email,
        current_user.username,
        order.order_number,
        order.total_amount,
        lines,
    )
    return OrderCreatedResponse(message="Order created successfully", order=order)


@router.get("", response_model=OrderListResponse)
def list_my_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    List orders of the current user, newest first.
    """
    return service.list_user_orders(
        session, current_user, status=status_filter, page=page, limit=limit
    )


# -------- Admin endpoints --------


@router.get(
    "/analytics/summary",
    response_model=OrderAnalyticsResponse,
    dependencies=[Depends(require_admin)],
)
def get_order_analytics(session: Session = Depends(get_session)):
    """
    Sales analytics over all orders (admin only).

    Cancelled orders only show up in the status breakdown.
    """
    return OrderAnalyticsResponse(analytics=stats_service.get_order_analytics(session))


@router.put(
    "/{order_id}/status",
    response_model=OrderStatusResponse,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    notifier: NotificationService = Depends(get_notification_service),
):
    """
    Change an order's status (admin only).

    Any status may be set; moving into 'cancelled' restores stock.
    """
    order, owner = service.update_status(session, order_id, payload.status)

    if owner is not None:
        background_tasks.add_task(
            notifier.send_order_status_update,
            owner.email,
            order.order_number,
            order.status,
        )
    return OrderStatusResponse(message="Order status updated successfully", order=order)


# -------- Single order --------


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get one of the current user's orders, including its items.
    """
    return OrderDetailResponse(order=service.get_user_order(session, current_user, order_id))


@router.post("/{order_id}/cancel", response_model=OrderStatusResponse)
def cancel_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Cancel one of the current user's orders while pending or processing.

    Ordered quantities go back into stock.
    """
    order = service.cancel_order(session, current_user, order_id)
    return OrderStatusResponse(message="Order cancelled successfully", order=order)
