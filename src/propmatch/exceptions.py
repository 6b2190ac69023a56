"""
Errores del motor de matching.

Los errores por par (perfil o propiedad inválidos) se convierten en
diagnósticos dentro del batch; los sistémicos abortan la llamada.
"""

from typing import Optional


class MatchingError(Exception):
    """Error base del motor de matching."""


class InvalidProfileError(MatchingError):
    """Perfil de comprador con criterios inconsistentes."""

    def __init__(self, profile_id: Optional[str], reason: str):
        self.profile_id = profile_id
        self.reason = reason
        super().__init__(f"Perfil inválido {profile_id}: {reason}")


class InvalidListingError(MatchingError):
    """Propiedad que no puede participar del matching."""

    def __init__(self, listing_id: Optional[str], reason: str):
        self.listing_id = listing_id
        self.reason = reason
        super().__init__(f"Propiedad inválida {listing_id}: {reason}")


class InvalidWeightsError(MatchingError):
    """Vector de pesos ausente o con forma inválida."""


class WeightStoreUnavailableError(MatchingError):
    """No se pudo leer o escribir el weight store."""


class MatchCancelledError(MatchingError):
    """El batch fue cancelado antes de terminar."""
