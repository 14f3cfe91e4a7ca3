"""Tests de la validité et du calcul de remise des coupons (sans base de données)."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models.category import Category
from app.models.coupon import Coupon, CouponStatus
from app.models.product import Product

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_coupon(**overrides):
    data = {
        "code": "TEST10",
        "discount_type": "percentage",
        "value": Decimal("10"),
        "minimum_order_amount": Decimal("0"),
        "maximum_discount_amount": None,
        "usage_limit": None,
        "used_count": 0,
        "start_date": NOW - timedelta(days=10),
        "end_date": NOW + timedelta(days=10),
        "is_active": True,
        "currency": "KES",
    }
    data.update(overrides)
    return Coupon(**data)


def line(product_id, amount, category_id=None):
    return SimpleNamespace(product_id=product_id, category_id=category_id, amount=Decimal(amount))


class TestValidity:
    def test_active_coupon_inside_window_is_valid(self):
        assert make_coupon().is_valid(NOW)

    def test_inactive_coupon_is_invalid(self):
        coupon = make_coupon(is_active=False)
        assert not coupon.is_valid(NOW)
        assert coupon.status(NOW) == CouponStatus.INACTIVE

    def test_window_bounds_are_inclusive(self):
        coupon = make_coupon(start_date=NOW, end_date=NOW)
        assert coupon.is_valid(NOW)
        assert not coupon.is_valid(NOW + timedelta(microseconds=1))
        assert not coupon.is_valid(NOW - timedelta(microseconds=1))

    def test_not_started(self):
        coupon = make_coupon(start_date=NOW + timedelta(hours=1))
        assert coupon.status(NOW) == CouponStatus.NOT_STARTED

    def test_expired(self):
        coupon = make_coupon(end_date=NOW - timedelta(seconds=1))
        assert coupon.status(NOW) == CouponStatus.EXPIRED
        assert coupon.is_expired(NOW)

    def test_usage_limit_reached(self):
        coupon = make_coupon(usage_limit=3, used_count=3)
        assert coupon.status(NOW) == CouponStatus.USAGE_EXHAUSTED

    def test_usage_below_limit(self):
        assert make_coupon(usage_limit=3, used_count=2).is_valid(NOW)

    def test_naive_dates_are_read_as_utc(self):
        coupon = make_coupon(
            start_date=datetime(2025, 6, 1),
            end_date=datetime(2025, 6, 30),
        )
        assert coupon.is_valid(NOW)


class TestScenarios:
    def test_percentage_capped_by_maximum(self):
        coupon = make_coupon(
            value=Decimal("20"),
            maximum_discount_amount=Decimal("500"),
            minimum_order_amount=Decimal("1000"),
        )
        assert coupon.calculate_discount(Decimal("5000"), now=NOW) == Decimal("500.00")

    def test_fixed_never_exceeds_order(self):
        coupon = make_coupon(discount_type="fixed", value=Decimal("300"))
        assert coupon.calculate_discount(Decimal("200"), now=NOW) == Decimal("200.00")

    def test_below_minimum_gives_nothing(self):
        coupon = make_coupon(value=Decimal("10"), minimum_order_amount=Decimal("2000"))
        assert coupon.calculate_discount(Decimal("1500"), now=NOW) == Decimal("0")

    def test_expired_coupon_gives_nothing(self):
        coupon = make_coupon(end_date=NOW - timedelta(days=1))
        assert coupon.calculate_discount(Decimal("100000"), now=NOW) == Decimal("0")

    def test_exhausted_coupon_gives_nothing(self):
        coupon = make_coupon(usage_limit=1, used_count=1)
        assert coupon.calculate_discount(Decimal("5000"), now=NOW) == Decimal("0")


class TestDiscountProperties:
    @pytest.mark.parametrize("value,amount", [
        ("50", "1000"), ("1000", "1000"), ("1500", "999.99"), ("0.01", "10"),
    ])
    def test_fixed_is_min_of_value_and_amount(self, value, amount):
        coupon = make_coupon(discount_type="fixed", value=Decimal(value))
        discount = coupon.calculate_discount(Decimal(amount), now=NOW)
        assert discount == min(Decimal(value), Decimal(amount))
        assert discount <= Decimal(amount)

    @pytest.mark.parametrize("percent,amount,cap,expected", [
        ("10", "1234.50", None, "123.45"),
        ("15", "2000", "250", "250.00"),
        ("15", "1000", "250", "150.00"),
        ("100", "800", None, "800.00"),
    ])
    def test_percentage_with_optional_cap(self, percent, amount, cap, expected):
        coupon = make_coupon(
            value=Decimal(percent),
            maximum_discount_amount=Decimal(cap) if cap else None,
        )
        assert coupon.calculate_discount(Decimal(amount), now=NOW) == Decimal(expected)

    def test_rounding_is_half_up(self):
        # 12.5% de 0.20 = 0.025 -> 0.03
        coupon = make_coupon(value=Decimal("12.5"))
        assert coupon.calculate_discount(Decimal("0.20"), now=NOW) == Decimal("0.03")

    def test_same_inputs_same_output(self):
        coupon = make_coupon(value=Decimal("17"), maximum_discount_amount=Decimal("90"))
        first = coupon.calculate_discount(Decimal("480"), now=NOW)
        assert coupon.calculate_discount(Decimal("480"), now=NOW) == first
        assert coupon.used_count == 0

    def test_zero_order_gives_nothing(self):
        assert make_coupon(discount_type="fixed", value=Decimal("10")).calculate_discount(0, now=NOW) == 0

    def test_accepts_plain_numbers(self):
        coupon = make_coupon(discount_type="fixed", value=Decimal("100"))
        assert coupon.calculate_discount(250.5, now=NOW) == Decimal("100.00")

    def test_unknown_type_degrades_to_zero(self):
        coupon = make_coupon(discount_type="free_shipping")
        assert coupon.calculate_discount(Decimal("500"), now=NOW) == Decimal("0")

    def test_invalid_amount_degrades_to_zero(self):
        assert make_coupon().calculate_discount("not a number", now=NOW) == Decimal("0")


class TestRestrictions:
    def test_product_restriction_sums_matching_lines(self):
        coupon = make_coupon(value=Decimal("10"))
        coupon.applicable_products = [Product(id=1), Product(id=2)]
        items = [line(1, "1000"), line(2, "500"), line(3, "4000")]

        assert coupon.applicable_amount(Decimal("5500"), items) == Decimal("1500")
        assert coupon.calculate_discount(Decimal("5500"), items, now=NOW) == Decimal("150.00")

    def test_category_restriction_matches_line_category(self):
        coupon = make_coupon(discount_type="fixed", value=Decimal("800"))
        coupon.applicable_categories = [Category(id=7)]
        items = [line(1, "600", category_id=7), line(2, "900", category_id=8)]

        assert coupon.calculate_discount(Decimal("1500"), items, now=NOW) == Decimal("600.00")

    def test_line_counted_once_when_product_and_category_match(self):
        coupon = make_coupon(value=Decimal("50"))
        coupon.applicable_products = [Product(id=1)]
        coupon.applicable_categories = [Category(id=7)]

        assert coupon.applicable_amount(Decimal("200"), [line(1, "200", category_id=7)]) == Decimal("200")

    def test_restricted_coupon_without_items_gives_nothing(self):
        coupon = make_coupon(value=Decimal("10"))
        coupon.applicable_products = [Product(id=1)]

        assert coupon.applicable_amount(Decimal("5000")) == Decimal("0")
        assert coupon.calculate_discount(Decimal("5000"), now=NOW) == Decimal("0")

    def test_minimum_checked_against_whole_order(self):
        coupon = make_coupon(value=Decimal("10"), minimum_order_amount=Decimal("1000"))
        coupon.applicable_products = [Product(id=1)]
        items = [line(1, "100"), line(2, "1000")]

        assert coupon.calculate_discount(Decimal("1100"), items, now=NOW) == Decimal("10.00")

    @pytest.mark.parametrize("discount_type,value,expected", [
        ("fixed", "500", "100.00"),
        ("percentage", "50", "50.00"),
    ])
    def test_items_above_order_are_capped_at_order(self, discount_type, value, expected):
        coupon = make_coupon(discount_type=discount_type, value=Decimal(value))
        coupon.applicable_products = [Product(id=1)]
        items = [line(1, "1000")]

        assert coupon.applicable_amount(Decimal("100"), items) == Decimal("100")
        discount = coupon.calculate_discount(Decimal("100"), items, now=NOW)
        assert discount == Decimal(expected)
        assert discount <= Decimal("100")


class TestEvaluate:
    def test_reason_and_amounts(self):
        coupon = make_coupon(value=Decimal("20"), maximum_discount_amount=Decimal("500"))
        assert coupon.evaluate(Decimal("5000"), now=NOW) == (
            CouponStatus.APPLIED, Decimal("5000"), Decimal("500.00")
        )

    def test_zero_order_without_restrictions_is_applied(self):
        status, applicable, discount = make_coupon().evaluate(Decimal("0"), now=NOW)
        assert status == CouponStatus.APPLIED
        assert discount == Decimal("0")

    def test_restricted_coupon_without_matching_items(self):
        coupon = make_coupon()
        coupon.applicable_categories = [Category(id=7)]
        status, _, discount = coupon.evaluate(Decimal("500"), [line(1, "500", category_id=8)], now=NOW)
        assert status == CouponStatus.NO_APPLICABLE_ITEMS
        assert discount == Decimal("0")

    def test_invalid_coupon_reports_its_status(self):
        coupon = make_coupon(usage_limit=1, used_count=1)
        assert coupon.evaluate(Decimal("500"), now=NOW)[0] == CouponStatus.USAGE_EXHAUSTED
        assert make_coupon(minimum_order_amount=Decimal("1000")).evaluate(500, now=NOW)[0] == CouponStatus.BELOW_MINIMUM


class TestUsageAndDisplay:
    def test_increment_usage_is_not_idempotent(self):
        coupon = make_coupon(used_count=0)
        coupon.increment_usage()
        coupon.increment_usage()
        assert coupon.used_count == 2

    def test_formatted_value(self):
        assert make_coupon(value=Decimal("20.00")).formatted_value == "20%"
        assert make_coupon(value=Decimal("12.50")).formatted_value == "12.5%"
        assert make_coupon(discount_type="fixed", value=Decimal("1500")).formatted_value == "KES 1,500.00"
