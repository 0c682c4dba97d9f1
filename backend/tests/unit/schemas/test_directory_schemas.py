"""
Unit Tests for mosque, business and product schemas
"""
import pytest
from pydantic import ValidationError

from mosqueconnect.models import MosqueService
from mosqueconnect.schemas.mosque import MosqueCreate, MosqueUpdate
from mosqueconnect.schemas.business import BusinessCreate
from mosqueconnect.schemas.product import ProductCreate, ProductUpdate


class TestMosqueCreate:

    def test_minimal_mosque(self):
        data = MosqueCreate(name="Masjid Al-Huda", street="5 Main St")

        assert data.country == "United States"
        assert data.services == []

    def test_services_are_enum_values(self):
        data = MosqueCreate(name="Masjid Al-Huda", street="5 Main St", services=["Friday Prayers"])
        assert data.services == [MosqueService.FRIDAY_PRAYERS]

    def test_unknown_service_rejected(self):
        with pytest.raises(ValidationError):
            MosqueCreate(name="Masjid Al-Huda", street="5 Main St", services=["Parking"])

    def test_coordinates_must_come_in_pairs(self):
        with pytest.raises(ValidationError):
            MosqueCreate(name="Masjid Al-Huda", street="5 Main St", latitude=41.8)


class TestBusinessCreate:

    def base(self, **overrides):
        data = dict(name="Crescent Grocery", category="grocery", street="12 Devon Ave", city="Chicago", state="IL")
        data.update(overrides)
        return data

    def test_half_coordinates_are_dropped(self):
        data = BusinessCreate(**self.base(longitude=-87.6))

        assert data.longitude is None
        assert data.latitude is None

    def test_out_of_range_coordinates_are_dropped(self):
        data = BusinessCreate(**self.base(longitude=-87.6, latitude=120))
        assert data.latitude is None

    def test_tags_are_cleaned(self):
        assert BusinessCreate(**self.base(tags=[" Halal ", "", "Dates"])).tags == ["halal", "dates"]

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            BusinessCreate(**self.base(category="casino"))


class TestProductCreate:

    def test_compare_price_below_price_is_dropped(self):
        data = ProductCreate(name="Medjool Dates", price=12.5, category="food", compare_at_price=10)
        assert data.compare_at_price is None

    def test_compare_price_above_price_is_kept(self):
        data = ProductCreate(name="Medjool Dates", price=12.5, category="food", compare_at_price=15)
        assert data.compare_at_price == 15

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            ProductCreate(name="Medjool Dates", price=0, category="food")


class TestPartialUpdates:

    def test_omitted_fields_are_not_set(self):
        data = MosqueUpdate(capacity=200)
        assert data.model_dump(exclude_unset=True) == {"capacity": 200}

    def test_clearable_field_accepts_null(self):
        data = MosqueUpdate(description=None, capacity=None)
        assert data.model_dump(exclude_unset=True) == {"description": None, "capacity": None}

    def test_required_field_rejects_null(self):
        with pytest.raises(ValidationError, match="Fields cannot be null: name"):
            MosqueUpdate(name=None, description=None)

    def test_every_null_required_field_is_named(self):
        with pytest.raises(ValidationError, match="Fields cannot be null: category, price"):
            ProductUpdate(price=None, category=None, subcategory=None)
