"""
Order database models
"""
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, JSON, Enum as SQLEnum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from campus_orders.db.database import Base
import enum


class OrderStatus(str, enum.Enum):
    """Order status enum"""
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, enum.Enum):
    """Accepted payment methods (recorded, not charged)"""
    YAPE = "YAPE"
    PLIN = "PLIN"
    TUNKI = "TUNKI"
    CASH = "CASH"


class Order(Base):
    """Order model"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(
        SQLEnum(OrderStatus, name="order_status"),
        default=OrderStatus.PENDING,
        nullable=False
    )
    delivery_location = Column(Text, nullable=False)
    payment_method = Column(SQLEnum(PaymentMethod, name="payment_method"), nullable=False)

    # Money is fixed point, total is frozen at creation
    subtotal = Column(Numeric(8, 2), nullable=False)
    delivery_fee = Column(Numeric(8, 2), nullable=False)
    total = Column(Numeric(8, 2), nullable=False)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id"
    )

    def __repr__(self):
        return f"<Order(id={self.id}, status={self.status}, total={self.total})>"


class OrderItem(Base):
    """Order line item with its price snapshot"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(8, 2), nullable=False)
    subtotal = Column(Numeric(8, 2), nullable=False)
    customizations = Column(JSON, nullable=True)
    special_notes = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")
    # Live product data, read at response time
    product = relationship("Product", viewonly=True)

    def __repr__(self):
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, qty={self.quantity})>"
