"""
Unit Tests - Order Totals and Passwords
"""
import hashlib
from decimal import Decimal

from marketplace.database.models import Product
from marketplace.services.passwords import hash_password
from marketplace.services.totals import calculate_total_with_vat, round_half_up


def make_products(*prices):
    return [Product(id=i, price=Decimal(price)) for i, price in enumerate(prices, start=1)]


class TestCalculateTotalWithVat:
    """Tests for calculate_total_with_vat"""

    def test_adds_twenty_percent(self):
        products = make_products("10.00", "20.00")

        assert calculate_total_with_vat([1, 2], products) == Decimal("36.00")

    def test_duplicate_ids_are_charged_per_occurrence(self):
        products = make_products("10.00", "20.00")

        assert calculate_total_with_vat([1, 1, 2], products) == Decimal("48.00")

    def test_missing_product_contributes_nothing(self):
        products = make_products("10.00")

        assert calculate_total_with_vat([1, 99], products) == Decimal("12.00")

    def test_rounds_half_up_to_cents(self):
        # 0.05 * 1.2 = 0.06 exactly, 0.0125 * 1.2 = 0.015 -> 0.02
        assert calculate_total_with_vat([1], make_products("0.05")) == Decimal("0.06")
        assert round_half_up(Decimal("0.015")) == Decimal("0.02")

    def test_float_prices(self):
        products = [Product(id=1, price=19.99)]

        assert calculate_total_with_vat([1], products) == Decimal("23.99")


class TestHashPassword:
    """Tests for hash_password"""

    def test_sha512_hex(self):
        digest = hash_password("secret123")

        assert digest == hashlib.sha512(b"secret123").hexdigest()
        assert len(digest) == 128

    def test_deterministic(self):
        assert hash_password("a") == hash_password("a")
        assert hash_password("a") != hash_password("b")
