"""
Unit Tests for the Offer model's derived values
"""
from datetime import datetime, timedelta

from mosqueconnect.models import Offer, OfferStatus, DiscountType

NOW = datetime(2025, 4, 10, 12, 0, 0)


def build_offer(**overrides) -> Offer:
    fields = dict(
        business_id='0f6c9a52-7d1e-4b9e-8a7e-3c2b1d0e9f11',
        title='Eid Sale',
        discount_type=DiscountType.PERCENTAGE,
        discount_value=20,
        valid_from=NOW - timedelta(days=1),
        valid_to=NOW + timedelta(days=6),
        status=OfferStatus.ACTIVE,
        used_count=0,
        minimum_purchase=0,
    )
    fields.update(overrides)
    return Offer(**fields)


class TestOfferValidity:
    """Test is_valid / in_window / limit_reached"""

    def test_active_offer_inside_window_is_valid(self):
        assert build_offer().is_valid(NOW) is True

    def test_draft_offer_is_never_valid(self):
        assert build_offer(status=OfferStatus.DRAFT).is_valid(NOW) is False

    def test_window_bounds_are_inclusive(self):
        offer = build_offer(valid_from=NOW, valid_to=NOW + timedelta(hours=1))
        assert offer.in_window(NOW) is True
        assert offer.in_window(NOW + timedelta(hours=1)) is True
        assert offer.in_window(NOW + timedelta(hours=1, seconds=1)) is False

    def test_limit_reached_invalidates_offer(self):
        offer = build_offer(usage_limit=3, used_count=3)
        assert offer.limit_reached() is True
        assert offer.is_valid(NOW) is False

    def test_no_usage_limit_is_never_reached(self):
        assert build_offer(usage_limit=None, used_count=10_000).limit_reached() is False


class TestOfferStatusRefresh:
    """Test the window rule applied by refresh_status"""

    def test_draft_inside_window_becomes_active(self):
        offer = build_offer(status=OfferStatus.DRAFT)
        assert offer.refresh_status(NOW) is True
        assert offer.status == OfferStatus.ACTIVE

    def test_draft_before_window_stays_draft(self):
        offer = build_offer(status=OfferStatus.DRAFT, valid_from=NOW + timedelta(days=2),
                            valid_to=NOW + timedelta(days=9))
        assert offer.refresh_status(NOW) is False
        assert offer.status == OfferStatus.DRAFT

    def test_active_past_window_expires(self):
        offer = build_offer(valid_from=NOW - timedelta(days=10), valid_to=NOW - timedelta(seconds=1))
        assert offer.refresh_status(NOW) is True
        assert offer.status == OfferStatus.EXPIRED

    def test_inactive_offer_is_left_alone(self):
        offer = build_offer(status=OfferStatus.INACTIVE, valid_to=NOW - timedelta(days=1),
                            valid_from=NOW - timedelta(days=5))
        assert offer.refresh_status(NOW) is False
        assert offer.status == OfferStatus.INACTIVE


class TestOfferDiscounts:

    def test_percentage_discount(self):
        assert build_offer(discount_value=20).calculate_discount(50, NOW) == 10

    def test_fixed_discount_never_exceeds_amount(self):
        offer = build_offer(discount_type=DiscountType.FIXED_AMOUNT, discount_value=15)
        assert offer.calculate_discount(10, NOW) == 10

    def test_below_minimum_purchase_gets_nothing(self):
        assert build_offer(minimum_purchase=30).calculate_discount(20, NOW) == 0

    def test_invalid_offer_gets_nothing(self):
        assert build_offer(status=OfferStatus.EXPIRED).calculate_discount(100, NOW) == 0

    def test_free_shipping_has_no_amount_discount(self):
        offer = build_offer(discount_type=DiscountType.FREE_SHIPPING, discount_value=1)
        assert offer.calculate_discount(100, NOW) == 0


class TestOfferHelpers:

    def test_days_remaining_rounds_up(self):
        offer = build_offer(valid_to=NOW + timedelta(days=2, hours=1))
        assert offer.days_remaining(NOW) == 3

    def test_days_remaining_zero_after_end(self):
        offer = build_offer(valid_to=NOW - timedelta(hours=1), valid_from=NOW - timedelta(days=2))
        assert offer.days_remaining(NOW) == 0

    def test_usage_percentage(self):
        assert build_offer(usage_limit=8, used_count=2).usage_percentage == 25
        assert build_offer(usage_limit=None).usage_percentage == 0

    def test_applicability_without_restrictions(self):
        assert build_offer().is_applicable_to_product('any-product') is True

    def test_product_list_takes_precedence_over_categories(self):
        offer = build_offer(applicable_product_ids=['p-1'], applicable_categories=['dates'])
        assert offer.is_applicable_to_product('p-1') is True
        assert offer.is_applicable_to_product('p-2', 'dates') is False

    def test_applicability_by_category(self):
        offer = build_offer(applicable_categories=['dates'])
        assert offer.is_applicable_to_product('p-2', 'dates') is True
        assert offer.is_applicable_to_product('p-2', 'rice') is False
        assert offer.is_applicable_to_product('p-2') is False

    def test_normalize_clamps_percentage_and_generates_code(self):
        offer = build_offer(discount_value=150, code=None)
        offer.normalize()
        assert offer.discount_value == 100
        assert offer.code is not None
        assert offer.code.startswith('F11')
        assert len(offer.code) == 9

    def test_normalize_uppercases_given_code(self):
        offer = build_offer(code=' eid20 ')
        offer.normalize()
        assert offer.code == 'EID20'

    def test_free_shipping_gets_no_generated_code(self):
        offer = build_offer(discount_type=DiscountType.FREE_SHIPPING, code=None)
        offer.normalize()
        assert offer.code is None
