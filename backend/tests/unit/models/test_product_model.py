"""
Unit Tests for the Product model's derived values
"""
from mosqueconnect.models import Product


def build_product(**overrides) -> Product:
    fields = dict(
        business_id='0f6c9a52-7d1e-4b9e-8a7e-3c2b1d0e9f11',
        name='Medjool Dates',
        price=12.5,
        category='food',
        stock=25,
        unlimited_stock=False,
        track_inventory=True,
        low_stock_threshold=10,
    )
    fields.update(overrides)
    return Product(**fields)


class TestAvailabilityStatus:

    def test_plenty_in_stock(self):
        assert build_product().availability_status == 'in_stock'

    def test_at_threshold_is_low(self):
        assert build_product(stock=10).availability_status == 'low_stock'

    def test_empty_is_out_of_stock(self):
        assert build_product(stock=0).availability_status == 'out_of_stock'

    def test_untracked_or_unlimited_is_always_in_stock(self):
        assert build_product(stock=0, track_inventory=False).availability_status == 'in_stock'
        assert build_product(stock=0, unlimited_stock=True).availability_status == 'in_stock'


class TestProductHelpers:

    def test_discount_percentage(self):
        assert build_product(price=30, compare_at_price=40).discount_percentage == 25
        assert build_product(compare_at_price=None).discount_percentage == 0

    def test_first_image_becomes_primary(self):
        images = Product.normalize_images([{'url': 'a.jpg'}, {'url': 'b.jpg'}])

        assert images[0]['is_primary'] is True
        assert build_product(images=images).primary_image['url'] == 'a.jpg'

    def test_slug_uses_business_id_suffix(self):
        assert Product.build_slug('Medjool Dates!', '0f6c9a52-7d1e-4b9e-8a7e-3c2b1d0e9f11') == 'medjool-dates-0e9f11'
