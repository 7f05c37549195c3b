"""
Read-only catalog lookup used while pricing an order
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol
from sqlalchemy.orm import Session
from opentelemetry import trace
import logging

from campus_orders.models.product import Product

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class CatalogProduct:
    """Point-in-time view of a catalog product"""
    id: int
    name: str
    price: Decimal
    is_available: bool


class Catalog(Protocol):
    def get_product(self, product_id: int) -> Optional[CatalogProduct]:
        ...


class DatabaseCatalog:
    """Catalog backed by the shared products table (no row locks taken)"""

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> Optional[CatalogProduct]:
        """
        Get product by ID

        Returns:
            CatalogProduct or None if not found
        """
        with tracer.start_as_current_span("catalog.get_product") as span:
            span.set_attribute("product.id", product_id)

            product = self.db.query(Product).filter(Product.id == product_id).first()
            if product is None:
                logger.warning(f"Product {product_id} not found")
                return None

            return CatalogProduct(
                id=product.id,
                name=product.name,
                price=Decimal(product.price),
                is_available=bool(product.is_available),
            )
