"""Tests del motor de scoring."""

import pytest

from propmatch.matching import score
from propmatch.models import Criterion, DEFAULT_WEIGHTS, WeightVector


@pytest.fixture
def perfect_listing(make_listing):
    """Propiedad que cumple todos los criterios de full_profile."""
    return make_listing(
        id="perfect",
        listing_type="sale",
        property_type="apartment",
        price=200_000,
        city="Lisboa",
        bedrooms=2,
        bathrooms=1,
        area=90,
        amenities=["pool", "garage"],
    )


class TestScore:

    def test_perfect_match_scores_100(self, full_profile, perfect_listing):
        result = score(full_profile, perfect_listing, DEFAULT_WEIGHTS)

        assert result.score == 100
        assert result.max_possible == pytest.approx(100)
        assert result.concerns == []
        assert len(result.strengths) == len(Criterion)

    def test_is_deterministic(self, full_profile, make_listing):
        listing = make_listing(price=310_000, bedrooms=1, amenities=["pool"])

        first = score(full_profile, listing, DEFAULT_WEIGHTS)
        second = score(full_profile, listing, DEFAULT_WEIGHTS)

        assert first == second

    def test_amenities_difference_equals_weight(self, full_profile, perfect_listing):
        without = perfect_listing.model_copy(update={"id": "bare", "amenities": []})

        high = score(full_profile, perfect_listing, DEFAULT_WEIGHTS)
        low = score(full_profile, without, DEFAULT_WEIGHTS)

        assert high.score - low.score == DEFAULT_WEIGHTS.amenities

    def test_unset_criterion_is_excluded(self, make_profile, make_listing):
        profile = make_profile(listing_type="sale", locations=["Lisboa"])

        result = score(profile, make_listing(bedrooms=0), DEFAULT_WEIGHTS)

        bedrooms = result.breakdown[Criterion.BEDROOMS]
        assert not bedrooms.applied
        assert bedrooms.earned == 0
        assert bedrooms.max == 0
        assert result.max_possible == pytest.approx(
            DEFAULT_WEIGHTS.listing_type + DEFAULT_WEIGHTS.location
        )
        assert result.score == 100

    def test_few_preferences_are_not_penalized(self, make_profile, make_listing):
        profile = make_profile(budget_max=250_000)

        result = score(profile, make_listing(price=240_000), DEFAULT_WEIGHTS)

        assert result.score == 100

    def test_zero_max_possible_scores_zero(self, make_profile, make_listing):
        result = score(make_profile(), make_listing(), WeightVector())

        assert result.max_possible == 0
        assert result.score == 0

    def test_concerns_and_strengths_are_split(self, full_profile, perfect_listing):
        listing = perfect_listing.model_copy(update={"city": "Porto", "region": "Porto"})

        result = score(full_profile, listing, DEFAULT_WEIGHTS)

        assert result.score == 80
        assert any("ubicaciones" in c for c in result.concerns)
        assert len(result.strengths) == len(Criterion) - 1

    def test_breakdown_covers_every_criterion(self, full_profile, perfect_listing):
        result = score(full_profile, perfect_listing, DEFAULT_WEIGHTS)

        assert set(result.breakdown) == set(Criterion)
        assert result.weights == DEFAULT_WEIGHTS


class TestTypeVeto:

    def test_strict_type_mismatch_vetoes(self, full_profile, perfect_listing):
        house = perfect_listing.model_copy(update={"property_type": "house"})

        result = score(full_profile, house, DEFAULT_WEIGHTS, strict_type_match=True)

        assert result.score == 0
        assert result.vetoed

    def test_soft_type_mismatch_loses_only_its_weight(self, full_profile, perfect_listing):
        house = perfect_listing.model_copy(update={"property_type": "house"})

        result = score(full_profile, house, DEFAULT_WEIGHTS)

        assert result.score == 100 - DEFAULT_WEIGHTS.property_type
        assert not result.vetoed

    def test_strict_without_type_preference_does_not_veto(self, make_profile, make_listing):
        result = score(make_profile(), make_listing(property_type="land"), DEFAULT_WEIGHTS, strict_type_match=True)

        assert not result.vetoed
        assert result.score == 100


class TestProperties:

    @pytest.mark.parametrize("price", [0, 90_000, 200_000, 260_000, 1_000_000])
    @pytest.mark.parametrize("bedrooms", [0, 1, 5])
    def test_score_is_bounded(self, full_profile, make_listing, price, bedrooms):
        listing = make_listing(price=price, bedrooms=bedrooms, area=10, city="Faro")

        result = score(full_profile, listing, DEFAULT_WEIGHTS)

        assert 0 <= result.score <= 100

    def test_raising_full_credit_weight_never_decreases(self, full_profile, make_listing):
        # ubicación con crédito completo, el resto parcial
        listing = make_listing(price=280_000, bedrooms=1, area=60, amenities=[])
        base = score(full_profile, listing, DEFAULT_WEIGHTS)

        for weight in (30, 50, 100):
            heavier = DEFAULT_WEIGHTS.with_weight(Criterion.LOCATION, weight)
            assert score(full_profile, listing, heavier).score >= base.score

    def test_raising_unapplied_weight_changes_nothing(self, make_profile, make_listing):
        profile = make_profile(locations=["Lisboa"], budget_max=150_000)
        listing = make_listing(price=180_000)
        base = score(profile, listing, DEFAULT_WEIGHTS)

        heavier = DEFAULT_WEIGHTS.with_weight(Criterion.BEDROOMS, 100)

        assert score(profile, listing, heavier).score == base.score
