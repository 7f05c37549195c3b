# Import every model so relationships resolve and create_all sees all tables
from campus_orders.models.product import Product  # noqa: F401
from campus_orders.models.order import Order, OrderItem, OrderStatus, PaymentMethod  # noqa: F401
from campus_orders.models.notification import Notification, NotificationType  # noqa: F401
