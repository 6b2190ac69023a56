"""Tests de los modelos de dominio."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from propmatch.exceptions import InvalidListingError, InvalidProfileError
from propmatch.models import (
    BuyerProfile,
    Criterion,
    DEFAULT_WEIGHTS,
    FeedbackRecord,
    FeedbackType,
    Listing,
    ListingPreference,
    WeightVector,
)


class TestBuyerProfile:

    def test_defaults_express_no_preferences(self):
        profile = BuyerProfile(id="p1")

        assert profile.listing_type == ListingPreference.BOTH
        assert profile.property_types == []
        assert profile.budget_min is None
        assert profile.is_active

    def test_check_rejects_inverted_budget(self):
        profile = BuyerProfile(id="p1", budget_min=300_000, budget_max=200_000)

        with pytest.raises(InvalidProfileError) as exc:
            profile.check()

        assert exc.value.profile_id == "p1"

    def test_check_rejects_blank_tokens(self):
        profile = BuyerProfile(id="p1", locations=["Lisboa", "  "])

        with pytest.raises(InvalidProfileError):
            profile.check()

    def test_check_accepts_equal_bounds(self):
        BuyerProfile(id="p1", budget_min=200_000, budget_max=200_000).check()

    def test_accepts_listing_type(self):
        rent = BuyerProfile(id="p1", listing_type="rent")

        assert rent.accepts_listing_type("rent")
        assert not rent.accepts_listing_type("sale")
        assert BuyerProfile(id="p2").accepts_listing_type("sale")

    def test_from_db_dict_maps_legacy_fields(self):
        profile = BuyerProfile.from_db_dict({
            "id": 7,
            "buyer_name": "Ana",
            "desired_amenities": ["piscina"],
            "budget_max": 250000,
        })

        assert profile.id == "7"
        assert profile.name == "Ana"
        assert profile.amenities == ["piscina"]
        assert profile.listing_type == ListingPreference.BOTH


class TestListing:

    def test_check_rejects_negative_price(self, make_listing):
        with pytest.raises(InvalidListingError):
            make_listing(price=-1).check()

    def test_check_rejects_missing_status(self, make_listing):
        with pytest.raises(InvalidListingError):
            make_listing(status=None).check()

    def test_from_db_dict_without_status(self):
        listing = Listing.from_db_dict({
            "id": "l9",
            "listing_type": "rent",
            "property_type": "house",
            "price": "1200",
            "state": "Setúbal",
            "useful_area": 120,
        })

        assert listing.status is None
        assert listing.region == "Setúbal"
        assert listing.area == 120
        assert not listing.is_active


class TestWeightVector:

    def test_default_weights_sum_to_100(self):
        assert DEFAULT_WEIGHTS.total() == pytest.approx(100)
        assert all(DEFAULT_WEIGHTS.get(c) > 0 for c in Criterion)

    def test_missing_criteria_default_to_zero(self):
        weights = WeightVector(price=40)

        assert weights.price == 40
        assert weights.location == 0

    def test_rejects_unknown_criterion(self):
        with pytest.raises(ValidationError):
            WeightVector(view=10)

    @pytest.mark.parametrize("value", [-1, 101])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValidationError):
            WeightVector(price=value)

    def test_normalized_preserves_proportions(self):
        weights = WeightVector(price=10, location=30).normalized()

        assert weights.price == pytest.approx(25)
        assert weights.location == pytest.approx(75)

    def test_with_weight_returns_copy(self):
        changed = DEFAULT_WEIGHTS.with_weight(Criterion.PRICE, 50)

        assert changed.price == 50
        assert DEFAULT_WEIGHTS.price == 25


class TestFeedbackRecord:

    def test_is_immutable(self, make_feedback):
        record = make_feedback()

        with pytest.raises(ValidationError):
            record.note = "cambio"

    def test_from_db_dict_ignores_unknown_weight_keys(self):
        record = FeedbackRecord.from_db_dict({
            "profile_id": "p1",
            "property_id": "l1",
            "match_score": 80,
            "feedback_type": "excellent",
            "criteria_weights": {"price": 25, "legacy": 3},
            "feedback_note": "perfecto",
        })

        assert record.listing_id == "l1"
        assert record.feedback_type == FeedbackType.EXCELLENT
        assert record.criteria_weights.price == 25
        assert record.note == "perfecto"

    def test_timestamps_are_timezone_aware(self, make_feedback):
        restored = FeedbackRecord.from_db_dict({
            "profile_id": "p1",
            "listing_id": "l1",
            "feedback_type": "good",
        })

        assert datetime.fromisoformat(make_feedback().created_at).tzinfo is not None
        assert datetime.fromisoformat(restored.created_at).tzinfo is not None
