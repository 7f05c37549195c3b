"""
Pydantic schemas for Order Service
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from campus_orders.models.order import OrderStatus, PaymentMethod
from campus_orders.models.notification import NotificationType


MAX_LINE_QUANTITY = 100


class OrderItemCreate(BaseModel):
    """Schema for one requested line"""
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(1, gt=0, le=MAX_LINE_QUANTITY, description="Quantity (defaults to 1)")
    customizations: Optional[Dict[str, Any]] = Field(
        None, description="Free-form options such as size, sugar, milk or temperature"
    )
    special_notes: Optional[str] = Field(None, max_length=500)


class OrderCreate(BaseModel):
    """Schema for creating an order"""
    # An empty list is a business error (EmptyOrder), not a shape error
    items: List[OrderItemCreate] = Field(default_factory=list)
    delivery_location: str = Field(..., min_length=1, max_length=500)
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("delivery_location")
    @classmethod
    def delivery_location_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("delivery_location must not be blank")
        return value


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus


class ProductSummary(BaseModel):
    """Current catalog data for a line's product"""
    id: int
    name: str
    image_url: Optional[str] = None
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderItemResponse(BaseModel):
    """Schema for order item response"""
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    customizations: Optional[Dict[str, Any]] = None
    special_notes: Optional[str] = None
    product: Optional[ProductSummary] = None

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: int
    user_id: int
    status: OrderStatus
    delivery_location: str
    payment_method: PaymentMethod
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    notes: Optional[str] = None
    items: List[OrderItemResponse]
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    """Schema for list of orders"""
    total: int
    orders: List[OrderResponse]
    page: int
    page_size: int


class NotificationResponse(BaseModel):
    """Schema for notification response"""
    id: int
    user_id: int
    order_id: Optional[int] = None
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    """Schema for list of notifications"""
    total: int
    unread_count: int
    notifications: List[NotificationResponse]
    page: int
    page_size: int


class MarkAllReadResponse(BaseModel):
    updated: int


class NotificationCreate(BaseModel):
    """Schema for an administrator's manual notification"""
    user_ids: List[int] = Field(..., min_length=1, description="Recipients")
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.SYSTEM


class NotificationCreateResponse(BaseModel):
    count: int
    notifications: List[NotificationResponse]


class NotificationStatsResponse(BaseModel):
    """Notification counts for a reporting period"""
    period: str
    total: int
    unread: int
    read: int
    by_type: Dict[str, int]
    recent: List[NotificationResponse]
