"""
Order Totals

Tax-inclusive order total computed from the referenced products' prices.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

import structlog

from marketplace.database.models import Product

logger = structlog.get_logger(__name__)

VAT_RATE = Decimal("1.20")
CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce a numeric column value into a Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Decimal, exponent: Decimal = CENT) -> Decimal:
    """Round to ``exponent`` with ties going away from zero."""
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def calculate_total_with_vat(product_ids: Sequence[int], products: Iterable[Product]) -> Decimal:
    """
    Sum the prices of the referenced products and add 20% VAT.

    Every occurrence of an id counts, so a product listed twice is charged
    twice. An id with no matching product contributes nothing.

    Args:
        product_ids: Product ids as stored on the order
        products: Product rows fetched for those ids

    Returns:
        Total rounded half-up to the cent
    """
    prices = {product.id: to_decimal(product.price) for product in products}
    missing = sorted(set(product_ids) - set(prices))
    if missing:
        logger.warning("Order references unknown products, priced at 0", product_ids=missing)

    subtotal = sum((prices.get(product_id, Decimal("0")) for product_id in product_ids), Decimal("0"))
    return round_half_up(subtotal * VAT_RATE)
