"""
Módulo de base de datos.

Provee acceso a Supabase e implementaciones de los colaboradores externos.
"""

from propmatch.database.supabase_client import get_supabase_client, SupabaseClient
from propmatch.database.repositories import (
    ProfileRepository,
    ListingRepository,
    SupabaseProfileListingStore,
    FeedbackRepository,
    InteractionRepository,
    WeightRepository,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "ProfileRepository",
    "ListingRepository",
    "SupabaseProfileListingStore",
    "FeedbackRepository",
    "InteractionRepository",
    "WeightRepository",
]
