"""
Modelos de datos del sistema.

- BuyerProfile: criterios de búsqueda del comprador
- Listing: propiedad en venta o alquiler
- WeightVector: importancia de cada criterio
- FeedbackRecord / InteractionRecord: señales para aprendizaje
"""

from propmatch.models.profile import BuyerProfile, ListingPreference, ProfileStatus
from propmatch.models.listing import Listing, ListingStatus, ListingType
from propmatch.models.weights import Criterion, WeightVector, DEFAULT_WEIGHTS
from propmatch.models.feedback import (
    FeedbackRecord,
    FeedbackType,
    InteractionRecord,
    InteractionType,
)

__all__ = [
    # Perfil
    "BuyerProfile",
    "ListingPreference",
    "ProfileStatus",
    # Propiedad
    "Listing",
    "ListingStatus",
    "ListingType",
    # Pesos
    "Criterion",
    "WeightVector",
    "DEFAULT_WEIGHTS",
    # Feedback
    "FeedbackRecord",
    "FeedbackType",
    "InteractionRecord",
    "InteractionType",
]
