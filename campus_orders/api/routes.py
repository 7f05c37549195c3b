"""
FastAPI routes for Order Service
"""
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from campus_orders.api.dependencies import get_current_user, get_order_service, require_admin
from campus_orders.db.database import get_db
from campus_orders.models.order import OrderStatus
from campus_orders.models.schemas import (
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse,
    OrderListResponse
)
from campus_orders.services.auth import CurrentUser
from campus_orders.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["orders"])


@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(20, ge=1, le=100, description="Max items to return"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    created_on: Optional[date] = Query(None, alias="date", description="Filter by creation date (admin)"),
    user_id: Optional[int] = Query(None, description="Filter by user ID (admin)"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """
    List orders with pagination and filters

    Clients get their own orders. Administrators get every order and may
    filter by user and creation date.
    """
    logger.info(f"Listing orders for user {user.user_id}: skip={skip}, limit={limit}, status={status}")

    orders, total = OrderService.get_orders(
        db=db,
        user=user,
        skip=skip,
        limit=limit,
        status=status,
        created_on=created_on,
        user_id=user_id
    )

    return OrderListResponse(
        total=total,
        orders=orders,
        page=skip // limit + 1,
        page_size=limit
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Get a specific order by ID"""
    logger.info(f"Getting order {order_id}")
    return OrderService.get_order(db, user, order_id)


@router.post(
    "/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED
)
def create_order(
    order: OrderCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service)
):
    """
    Create a new order

    This endpoint:
    1. Validates every product exists and is available
    2. Prices lines from the catalog
    3. Enforces the minimum order amount and adds the delivery fee
    4. Creates order, items and confirmation notification atomically
    """
    new_order = order_service.create_order(db, user, order)
    logger.info(f"Order {new_order.id} created for user {user.user_id}")
    return new_order


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    """
    Update order status (admin)

    Workflow: PENDING -> PREPARING -> READY -> DELIVERED, and any
    non-terminal status -> CANCELLED.
    """
    logger.info(f"Updating order {order_id} status to {status_update.status.value}")
    return OrderService.transition_status(db, admin, order_id, status_update.status)


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """
    Cancel an order

    Only the owner may cancel, and only pending orders can be cancelled.
    """
    logger.info(f"Cancelling order {order_id}")
    return OrderService.cancel_own_order(db, user, order_id)
