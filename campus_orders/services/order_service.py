"""
Order business logic: placement, visibility and lifecycle
"""
from datetime import date
from sqlalchemy.orm import Session
from pydantic import ValidationError
from typing import Any, List, Mapping, Optional, Tuple, Union
from opentelemetry import trace
import logging

from campus_orders.models.order import Order, OrderStatus
from campus_orders.models.schemas import OrderCreate
from campus_orders.db.database import run_in_transaction
from campus_orders.services import order_state
from campus_orders.services.auth import CurrentUser
from campus_orders.services.catalog import DatabaseCatalog
from campus_orders.services.errors import (
    OrderAccessDenied,
    OrderCannotBeCancelled,
    OrderNotFound,
    OrderServiceError,
    OrderValidationError,
)
from campus_orders.services.order_store import OrderStore
from campus_orders.services.pricing import PricingEngine, PricingRules

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class OrderService:
    """Order service for business logic"""

    def __init__(self, pricing_rules: PricingRules = PricingRules()):
        self.pricing_rules = pricing_rules

    def create_order(
        self,
        db: Session,
        user: CurrentUser,
        order_data: Union[OrderCreate, Mapping[str, Any]]
    ) -> Order:
        """
        Create new order

        Process:
        1. Validate request shape
        2. Price every line against the catalog
        3. Persist order, items and confirmation in one transaction
        """
        with tracer.start_as_current_span("order_service.create_order") as span:
            span.set_attribute("user.id", user.user_id)

            if not isinstance(order_data, OrderCreate):
                try:
                    order_data = OrderCreate.model_validate(order_data)
                except ValidationError as e:
                    raise OrderValidationError(
                        "Invalid order request",
                        {"errors": e.errors(include_url=False, include_context=False, include_input=False)}
                    ) from e

            span.set_attribute("items.count", len(order_data.items))
            logger.info(f"Creating order for user {user.user_id} with {len(order_data.items)} items")

            engine = PricingEngine(DatabaseCatalog(db), self.pricing_rules)
            try:
                priced = engine.price(order_data.items)
            except OrderServiceError:
                # Only reads happened; end the read transaction
                db.rollback()
                raise

            span.set_attribute("order.total_amount", str(priced.total))

            order = run_in_transaction(
                db,
                lambda tx: OrderStore.create_order(
                    tx,
                    user_id=user.user_id,
                    delivery_location=order_data.delivery_location,
                    payment_method=order_data.payment_method,
                    notes=order_data.notes,
                    priced=priced
                )
            )
            db.refresh(order)

            span.set_attribute("order.id", order.id)
            logger.info(f"Order {order.id} created successfully, total {order.total}")

            return order

    @staticmethod
    def get_order(db: Session, user: CurrentUser, order_id: int) -> Order:
        """Get order by ID; clients only see their own orders"""
        with tracer.start_as_current_span("order_service.get_order") as span:
            span.set_attribute("order.id", order_id)

            owner_id = None if user.is_admin else user.user_id
            order = OrderStore.get_order(db, order_id, user_id=owner_id)
            if not order:
                raise OrderNotFound(order_id)
            return order

    @staticmethod
    def get_orders(
        db: Session,
        user: CurrentUser,
        skip: int = 0,
        limit: int = 100,
        status: Optional[OrderStatus] = None,
        created_on: Optional[date] = None,
        user_id: Optional[int] = None
    ) -> Tuple[List[Order], int]:
        """Get list of orders; administrators may see and filter every user's orders"""
        with tracer.start_as_current_span("order_service.get_orders") as span:
            owner_id = user_id if user.is_admin else user.user_id
            if owner_id is not None:
                span.set_attribute("filter.user_id", owner_id)
            if status:
                span.set_attribute("filter.status", status.value)

            orders, total = OrderStore.list_orders(
                db,
                skip=skip,
                limit=limit,
                user_id=owner_id,
                status=status,
                created_on=created_on
            )

            span.set_attribute("orders.total", total)
            span.set_attribute("orders.returned", len(orders))

            return orders, total

    @staticmethod
    def transition_status(
        db: Session,
        admin: CurrentUser,
        order_id: int,
        new_status: OrderStatus
    ) -> Order:
        """Move an order along the status workflow (administrators only)"""
        with tracer.start_as_current_span("order_service.transition_status") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("status.new", new_status.value)

            if not admin.is_admin:
                raise OrderAccessDenied("Administrator privileges required")

            order = OrderStore.get_order(db, order_id)
            if not order:
                raise OrderNotFound(order_id)

            old_status = order.status
            span.set_attribute("status.old", old_status.value)

            return OrderService._apply_transition(db, order, new_status)

    @staticmethod
    def cancel_own_order(db: Session, user: CurrentUser, order_id: int) -> Order:
        """Cancel an order; only its owner may, and only while PENDING"""
        with tracer.start_as_current_span("order_service.cancel_order") as span:
            span.set_attribute("order.id", order_id)

            order = OrderStore.get_order(db, order_id)
            if not order:
                raise OrderNotFound(order_id)

            if order.user_id != user.user_id:
                logger.warning(f"User {user.user_id} tried to cancel order {order_id}")
                raise OrderAccessDenied("You do not have permission to cancel this order")

            if order.status != OrderStatus.PENDING:
                logger.warning(f"Cannot cancel order {order_id} with status {order.status.value}")
                raise OrderCannotBeCancelled(order_id, order.status)

            return OrderService._apply_transition(db, order, OrderStatus.CANCELLED)

    @staticmethod
    def _apply_transition(db: Session, order: Order, new_status: OrderStatus) -> Order:
        old_status = order.status
        order_state.validate_transition(old_status, new_status)

        run_in_transaction(
            db,
            lambda tx: OrderStore.update_status(tx, order, old_status, new_status)
        )
        db.refresh(order)

        logger.info(f"Order {order.id} status updated: {old_status.value} -> {new_status.value}")
        return order
