"""
Catalog product model

The catalog is owned by the product service; orders only read it.
"""
from sqlalchemy import Boolean, Column, Integer, String, Text, Numeric, DateTime
from sqlalchemy.sql import func
from campus_orders.db.database import Base


class Product(Base):
    """Product model"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(8, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, price={self.price})>"
