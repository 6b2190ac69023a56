"""
Batch matcher.

Evalúa el producto cruzado perfiles × propiedades (o uno contra todos),
filtra por score mínimo y devuelve resultados ordenados.

Flujo:
1. Snapshot de pesos (una sola lectura al inicio)
2. Pre-filtros: validación, solo activos, tipo de negocio compatible
3. Scoring de cada par (en paralelo si el batch es grande)
4. Post-filtro por min_score y orden estable por score
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError

from propmatch.config import get_settings
from propmatch.exceptions import (
    InvalidListingError,
    InvalidProfileError,
    InvalidWeightsError,
    MatchCancelledError,
)
from propmatch.matching.scoring import MatchResult, listing_type_compatible, score
from propmatch.matching.weight_store import WeightStore
from propmatch.models import BuyerProfile, Listing, WeightVector

logger = structlog.get_logger()


class CancellationToken:
    """Cancelación cooperativa, se chequea entre pares."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise MatchCancelledError("Batch de matching cancelado")


@dataclass
class PairMatch:
    """Un par perfil/propiedad con su resultado."""

    profile: BuyerProfile
    listing: Listing
    result: MatchResult

    @property
    def score(self) -> int:
        return self.result.score


@dataclass
class MatchDiagnostic:
    """Par o entidad excluida por error, no por score bajo."""

    profile_id: Optional[str]
    listing_id: Optional[str]
    reason: str


@dataclass
class BatchMatchResult:
    """Resultado de una llamada al batch matcher."""

    matches: list[PairMatch]
    weights: WeightVector
    min_score: int
    pairs_evaluated: int = 0
    diagnostics: list[MatchDiagnostic] = field(default_factory=list)

    @property
    def results(self) -> list[MatchResult]:
        return [m.result for m in self.matches]

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)


WeightsInput = Union[WeightVector, Mapping[str, float]]


class BatchMatcher:
    """
    Orquesta el scoring sobre colecciones.

    El weight store se inyecta; si la llamada no trae pesos explícitos se
    lee una sola vez por batch, y cualquier error del store se propaga.
    """

    def __init__(
        self,
        weight_store: Optional[WeightStore] = None,
        max_workers: Optional[int] = None,
        strict_type_match: Optional[bool] = None,
        parallel_threshold: Optional[int] = None,
    ):
        settings = get_settings()
        self.weight_store = weight_store
        self.max_workers = max_workers or settings.batch_max_workers or os.cpu_count() or 1
        self.strict_type_match = (
            settings.strict_type_match if strict_type_match is None else strict_type_match
        )
        self.parallel_threshold = (
            settings.batch_parallel_threshold if parallel_threshold is None else parallel_threshold
        )

    def match_profile_against_listings(
        self,
        profile: BuyerProfile,
        listings: Sequence[Listing],
        weights: Optional[WeightsInput] = None,
        min_score: int = 0,
        context_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchMatchResult:
        """Propiedades que matchean con un perfil, de mayor a menor score."""
        return self._run([profile], listings, weights, min_score, context_id, cancel_token)

    def match_listing_against_profiles(
        self,
        listing: Listing,
        profiles: Sequence[BuyerProfile],
        weights: Optional[WeightsInput] = None,
        min_score: int = 0,
        context_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchMatchResult:
        """Perfiles interesados en una propiedad (matching inverso)."""
        return self._run(profiles, [listing], weights, min_score, context_id, cancel_token)

    def match_all(
        self,
        profiles: Sequence[BuyerProfile],
        listings: Sequence[Listing],
        weights: Optional[WeightsInput] = None,
        min_score: int = 0,
        context_id: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchMatchResult:
        """Todos los pares perfil × propiedad sobre el umbral."""
        return self._run(profiles, listings, weights, min_score, context_id, cancel_token)

    def _resolve_weights(
        self,
        weights: Optional[WeightsInput],
        context_id: Optional[str],
    ) -> WeightVector:
        if weights is None:
            if self.weight_store is None:
                raise InvalidWeightsError(
                    "No hay pesos explícitos ni weight store configurado"
                )
            # WeightStoreUnavailableError se propaga: nunca caer a defaults
            return self.weight_store.get(context_id or "default")

        if isinstance(weights, WeightVector):
            return weights
        try:
            return WeightVector.model_validate(dict(weights))
        except (ValidationError, TypeError, ValueError) as e:
            raise InvalidWeightsError(f"Vector de pesos inválido: {e}") from e

    def _eligible_profiles(
        self,
        profiles: Sequence[BuyerProfile],
        diagnostics: list[MatchDiagnostic],
    ) -> list[BuyerProfile]:
        eligible = []
        for profile in profiles:
            try:
                profile.check()
            except InvalidProfileError as e:
                diagnostics.append(MatchDiagnostic(profile.id, None, e.reason))
                continue
            if profile.is_active:
                eligible.append(profile)
        return eligible

    def _eligible_listings(
        self,
        listings: Sequence[Listing],
        diagnostics: list[MatchDiagnostic],
    ) -> list[Listing]:
        eligible = []
        for listing in listings:
            try:
                listing.check()
            except InvalidListingError as e:
                logger.warning(
                    "Propiedad inválida excluida del matching",
                    listing_id=listing.id,
                    reason=e.reason,
                )
                diagnostics.append(MatchDiagnostic(None, listing.id, e.reason))
                continue
            if listing.is_active:
                eligible.append(listing)
        return eligible

    def _score_pair(
        self,
        profile: BuyerProfile,
        listing: Listing,
        weights: WeightVector,
        cancel_token: Optional[CancellationToken],
    ) -> tuple[Optional[MatchResult], Optional[str]]:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            return score(profile, listing, weights, self.strict_type_match), None
        except Exception as e:
            logger.warning(
                "Error evaluando par",
                profile_id=profile.id,
                listing_id=listing.id,
                error=str(e),
            )
            return None, str(e)

    def _evaluate(
        self,
        pairs: list[tuple[BuyerProfile, Listing]],
        weights: WeightVector,
        cancel_token: Optional[CancellationToken],
    ) -> list[tuple[Optional[MatchResult], Optional[str]]]:
        if self.max_workers <= 1 or len(pairs) < self.parallel_threshold:
            return [
                self._score_pair(profile, listing, weights, cancel_token)
                for profile, listing in pairs
            ]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._score_pair, profile, listing, weights, cancel_token)
                for profile, listing in pairs
            ]
            try:
                # Se junta todo antes de ordenar
                return [future.result() for future in futures]
            except MatchCancelledError:
                for future in futures:
                    future.cancel()
                raise

    def _run(
        self,
        profiles: Sequence[BuyerProfile],
        listings: Sequence[Listing],
        weights: Optional[WeightsInput],
        min_score: int,
        context_id: Optional[str],
        cancel_token: Optional[CancellationToken],
    ) -> BatchMatchResult:
        if not 0 <= min_score <= 100:
            raise ValueError(f"min_score fuera de rango: {min_score}")

        snapshot = self._resolve_weights(weights, context_id)
        diagnostics: list[MatchDiagnostic] = []

        active_profiles = self._eligible_profiles(profiles, diagnostics)
        active_listings = self._eligible_listings(listings, diagnostics)

        pairs = [
            (profile, listing)
            for profile in active_profiles
            for listing in active_listings
            if listing_type_compatible(profile, listing)
        ]

        outcomes = self._evaluate(pairs, snapshot, cancel_token)

        matches = []
        for (profile, listing), (result, error) in zip(pairs, outcomes):
            if error is not None:
                diagnostics.append(MatchDiagnostic(profile.id, listing.id, error))
                continue
            if result.score >= min_score:
                matches.append(PairMatch(profile=profile, listing=listing, result=result))

        # sort estable: empates conservan el orden de entrada
        matches.sort(key=lambda m: m.score, reverse=True)

        logger.info(
            "Batch de matching completado",
            profiles=len(active_profiles),
            listings=len(active_listings),
            pairs=len(pairs),
            above_threshold=len(matches),
            min_score=min_score,
            diagnostics=len(diagnostics),
        )

        return BatchMatchResult(
            matches=matches,
            weights=snapshot,
            min_score=min_score,
            pairs_evaluated=len(pairs),
            diagnostics=diagnostics,
        )
