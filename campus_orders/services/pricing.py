"""
Pricing engine: validates requested lines and computes order totals

Prices always come from the catalog, never from the client. All money is
Decimal with two fractional digits.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence
from opentelemetry import trace
import logging

from campus_orders.models.schemas import OrderItemCreate
from campus_orders.services.catalog import Catalog
from campus_orders.services.errors import (
    EmptyOrder,
    MinimumOrderNotMet,
    OrderAmountTooLarge,
    ProductNotFound,
    ProductUnavailable,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

CENTS = Decimal("0.01")

# Largest value a NUMERIC(8,2) money column holds
MAX_AMOUNT = Decimal("999999.99")


def to_money(value) -> Decimal:
    """Quantize a value to two decimal places"""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingRules:
    """Fee schedule applied to every order"""
    minimum_order_amount: Decimal = Decimal("2.00")
    delivery_fee: Decimal = Decimal("1.00")

    @classmethod
    def from_settings(cls, settings) -> "PricingRules":
        return cls(
            minimum_order_amount=to_money(settings.minimum_order_amount),
            delivery_fee=to_money(settings.delivery_fee),
        )


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    customizations: Optional[Dict[str, Any]] = None
    special_notes: Optional[str] = None


@dataclass(frozen=True)
class PricedOrder:
    lines: List[PricedLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    delivery_fee: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")


class PricingEngine:
    """Prices a list of requested lines against the catalog"""

    def __init__(self, catalog: Catalog, rules: PricingRules = PricingRules()):
        self.catalog = catalog
        self.rules = rules

    def price(self, items: Sequence[OrderItemCreate]) -> PricedOrder:
        """
        Price an order

        Process:
        1. Reject an empty order
        2. Look up every product (missing or unavailable aborts the order)
        3. Compute line subtotals from the current catalog price
        4. Enforce the minimum order amount and add the delivery fee
        5. Reject totals the money columns cannot store
        """
        with tracer.start_as_current_span("pricing_engine.price") as span:
            span.set_attribute("items.count", len(items))

            if not items:
                raise EmptyOrder()

            lines = []
            subtotal = Decimal("0.00")

            for item in items:
                product = self.catalog.get_product(item.product_id)
                if product is None:
                    raise ProductNotFound(item.product_id)

                if not product.is_available:
                    raise ProductUnavailable(product.id, product.name)

                quantity = item.quantity or 1
                unit_price = to_money(product.price)
                line_subtotal = unit_price * quantity
                subtotal += line_subtotal

                lines.append(PricedLine(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=line_subtotal,
                    customizations=item.customizations or None,
                    special_notes=item.special_notes or None,
                ))

            if subtotal < self.rules.minimum_order_amount:
                logger.info(
                    f"Order subtotal {subtotal} below minimum {self.rules.minimum_order_amount}"
                )
                raise MinimumOrderNotMet(subtotal, self.rules.minimum_order_amount)

            delivery_fee = self.rules.delivery_fee
            total = subtotal + delivery_fee

            if total > MAX_AMOUNT:
                logger.warning(f"Order total {total} exceeds {MAX_AMOUNT}")
                raise OrderAmountTooLarge(total, MAX_AMOUNT)

            span.set_attribute("order.subtotal", str(subtotal))
            span.set_attribute("order.total", str(total))

            return PricedOrder(
                lines=lines,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=total,
            )
