"""Configuración de tests y fixtures compartidas."""

from datetime import datetime
from typing import Optional, Sequence

import pytest

from propmatch.exceptions import WeightStoreUnavailableError
from propmatch.interfaces import (
    FeedbackSink,
    NotificationDispatcher,
    ProfileListingStore,
    RerankedMatch,
    Reranker,
)
from propmatch.matching import InMemoryWeightStore, WeightStore
from propmatch.models import (
    BuyerProfile,
    DEFAULT_WEIGHTS,
    FeedbackRecord,
    Listing,
    WeightVector,
)


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_profile():
    """Factory de perfiles: sin argumentos no expresa preferencias."""

    def _make(id: str = "p1", **overrides) -> BuyerProfile:
        return BuyerProfile(id=id, **overrides)

    return _make


@pytest.fixture
def make_listing():
    """Factory de propiedades activas en venta."""

    def _make(id: str = "l1", **overrides) -> Listing:
        data = {
            "listing_type": "sale",
            "property_type": "apartment",
            "price": 200_000,
            "city": "Lisboa",
            "region": "Lisboa",
            "bedrooms": 2,
            "bathrooms": 1,
            "area": 90,
            "amenities": [],
        }
        data.update(overrides)
        return Listing(id=id, **data)

    return _make


@pytest.fixture
def full_profile(make_profile) -> BuyerProfile:
    """Perfil con los 8 criterios expresados."""
    return make_profile(
        id="buyer-full",
        listing_type="sale",
        property_types=["apartment"],
        locations=["Lisboa"],
        budget_min=150_000,
        budget_max=250_000,
        bedrooms_min=2,
        bathrooms_min=1,
        area_min=80,
        amenities=["pool", "garage"],
    )


@pytest.fixture
def make_feedback():
    def _make(
        feedback_type: str = "good",
        weights: WeightVector = DEFAULT_WEIGHTS,
        profile_id: str = "p1",
        listing_id: str = "l1",
        context_id: Optional[str] = "default",
    ) -> FeedbackRecord:
        return FeedbackRecord(
            profile_id=profile_id,
            listing_id=listing_id,
            match_score=75,
            feedback_type=feedback_type,
            criteria_weights=weights,
            context_id=context_id,
        )

    return _make


# ============================================================================
# Fake collaborators
# ============================================================================

class FakeStore(ProfileListingStore):
    def __init__(self, profiles=None, listings=None):
        self.profiles = list(profiles or [])
        self.listings = list(listings or [])
        self.touched: dict[str, datetime] = {}

    def list_active_profiles(self):
        return [p for p in self.profiles if p.is_active]

    def list_active_listings(self):
        return [l for l in self.listings if l.is_active]

    def get_listing(self, listing_id):
        return next((l for l in self.listings if l.id == listing_id), None)

    def touch_last_matched(self, profile_id, timestamp):
        self.touched[profile_id] = timestamp


class FakeFeedbackSink(FeedbackSink):
    def __init__(self, records=None):
        self.records = list(records or [])

    def record_feedback(self, record):
        self.records.append(record)

    def list_feedback(self, context_id):
        return [r for r in self.records if r.context_id == context_id]


class FakeDispatcher(NotificationDispatcher):
    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.calls = []

    async def dispatch(self, target, matches: Sequence):
        if self.should_fail:
            raise ConnectionError("SMTP caído")
        self.calls.append((target, list(matches)))
        return True


class FakeReranker(Reranker):
    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail

    async def rerank(self, candidates):
        if self.should_fail:
            raise TimeoutError("LLM timeout")
        # Orden inverso, para distinguirlo del baseline
        return [
            RerankedMatch(
                profile_id=c.profile.id,
                listing_id=c.listing.id,
                score=c.score,
                rationale="alternativo",
            )
            for c in reversed(list(candidates))
        ]


class CountingWeightStore(InMemoryWeightStore):
    """Store en memoria que cuenta lecturas."""

    def __init__(self):
        super().__init__()
        self.reads = []

    def get(self, context_id):
        self.reads.append(context_id)
        return super().get(context_id)


class UnavailableWeightStore(WeightStore):
    def get(self, context_id):
        raise WeightStoreUnavailableError("backend caído")

    def set(self, context_id, vector):
        raise WeightStoreUnavailableError("backend caído")

    def reset(self, context_id):
        raise WeightStoreUnavailableError("backend caído")


@pytest.fixture
def counting_store() -> CountingWeightStore:
    return CountingWeightStore()


@pytest.fixture
def unavailable_store() -> UnavailableWeightStore:
    return UnavailableWeightStore()
