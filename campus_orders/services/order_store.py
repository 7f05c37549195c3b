"""
Order persistence

Writers stage rows in the caller's session and are meant to run inside
run_in_transaction; they never commit themselves.
"""
from datetime import date, datetime, time, timedelta
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from typing import List, Optional, Tuple
import logging

from campus_orders.models.notification import NotificationType
from campus_orders.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from campus_orders.services import order_state
from campus_orders.services.errors import InvalidStatusTransition
from campus_orders.services.notification_service import NotificationService
from campus_orders.services.pricing import PricedOrder

logger = logging.getLogger(__name__)


class OrderStore:
    """Orders, their line items and the notifications written with them"""

    @staticmethod
    def create_order(
        db: Session,
        user_id: int,
        delivery_location: str,
        payment_method: PaymentMethod,
        notes: Optional[str],
        priced: PricedOrder
    ) -> Order:
        """Stage a PENDING order, one item per priced line and the confirmation"""
        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING,
            delivery_location=delivery_location,
            payment_method=payment_method,
            subtotal=priced.subtotal,
            delivery_fee=priced.delivery_fee,
            total=priced.total,
            notes=notes
        )

        db.add(order)
        db.flush()  # Get order ID

        for line in priced.lines:
            db.add(OrderItem(
                order_id=order.id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
                customizations=line.customizations,
                special_notes=line.special_notes
            ))

        NotificationService.create(
            db,
            user_id=user_id,
            title=order_state.ORDER_CONFIRMED_TITLE,
            message=order_state.confirmation_message(order.id),
            type=NotificationType.ORDER,
            order_id=order.id
        )
        db.flush()

        return order

    @staticmethod
    def update_status(
        db: Session,
        order: Order,
        expected_status: OrderStatus,
        new_status: OrderStatus
    ) -> Order:
        """
        Stage a status change conditioned on the previously read status

        If another request changed the status first no row matches and the
        change fails with InvalidStatusTransition.
        """
        updated = (
            db.query(Order)
            .filter(Order.id == order.id, Order.status == expected_status)
            .update(
                {Order.status: new_status, Order.updated_at: func.now()},
                synchronize_session=False
            )
        )

        if updated != 1:
            logger.warning(
                f"Order {order.id} status changed concurrently, expected {expected_status.value}"
            )
            raise InvalidStatusTransition(expected_status, new_status)

        NotificationService.create(
            db,
            user_id=order.user_id,
            title=order_state.STATUS_UPDATED_TITLE,
            message=order_state.status_message(order.id, new_status),
            type=NotificationType.ORDER,
            order_id=order.id
        )
        db.flush()

        return order

    @staticmethod
    def get_order(db: Session, order_id: int, user_id: Optional[int] = None) -> Optional[Order]:
        """Get order by ID, optionally restricted to one owner"""
        query = db.query(Order).filter(Order.id == order_id)
        if user_id is not None:
            query = query.filter(Order.user_id == user_id)
        return query.first()

    @staticmethod
    def list_orders(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        user_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        created_on: Optional[date] = None
    ) -> Tuple[List[Order], int]:
        """Get list of orders with filters, newest first"""
        query = db.query(Order)

        if user_id is not None:
            query = query.filter(Order.user_id == user_id)

        if status:
            query = query.filter(Order.status == status)

        if created_on:
            start = datetime.combine(created_on, time.min)
            query = query.filter(
                Order.created_at >= start,
                Order.created_at < start + timedelta(days=1)
            )

        total = query.count()
        orders = (
            query.order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

        return orders, total
