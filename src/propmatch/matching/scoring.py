"""
Motor de scoring.

Combina los evaluadores de criterios con un vector de pesos en un score
normalizado de 0 a 100. El denominador es la suma de los pesos de los
criterios que aplican al par, así un perfil con pocas preferencias
declaradas igual obtiene un score significativo.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from propmatch.matching.criteria import EVALUATORS
from propmatch.models import BuyerProfile, Criterion, Listing, WeightVector


@dataclass(frozen=True)
class CriterionScore:
    """Aporte de un criterio al score final."""

    applied: bool
    earned: float
    max: float


@dataclass
class MatchResult:
    """Resultado de matching para un par perfil/propiedad."""

    profile_id: str
    listing_id: str
    score: int  # 0 a 100
    breakdown: dict[Criterion, CriterionScore]
    strengths: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    raw_score: float = 0.0
    max_possible: float = 0.0
    vetoed: bool = False
    weights: Optional[WeightVector] = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def listing_type_compatible(profile: BuyerProfile, listing: Listing) -> bool:
    """Veto barato previo al scoring completo."""
    return profile.accepts_listing_type(listing.listing_type)


def score(
    profile: BuyerProfile,
    listing: Listing,
    weights: WeightVector,
    strict_type_match: bool = False,
) -> MatchResult:
    """
    Calcula el match entre un perfil y una propiedad.

    Args:
        profile: Perfil del comprador
        listing: Propiedad a evaluar
        weights: Pesos por criterio
        strict_type_match: Si True, un tipo de inmueble que no coincide
            fuerza el score a 0 en lugar de solo perder sus puntos

    Returns:
        MatchResult con score, breakdown y notas
    """
    breakdown: dict[Criterion, CriterionScore] = {}
    strengths: list[str] = []
    concerns: list[str] = []
    raw_score = 0.0
    max_possible = 0.0
    vetoed = False

    for criterion, evaluate in EVALUATORS.items():
        outcome = evaluate(profile, listing, weights.get(criterion))
        breakdown[criterion] = CriterionScore(
            applied=outcome.applies,
            earned=outcome.earned,
            max=outcome.max,
        )
        if not outcome.applies:
            continue

        raw_score += outcome.earned
        max_possible += outcome.max
        if outcome.note:
            (strengths if outcome.satisfied else concerns).append(outcome.note)

        if (
            strict_type_match
            and criterion == Criterion.PROPERTY_TYPE
            and not outcome.satisfied
        ):
            vetoed = True

    if vetoed or max_possible <= 0:
        final = 0
    else:
        final = _round_half_up(100 * raw_score / max_possible)
        final = max(0, min(100, final))

    return MatchResult(
        profile_id=profile.id,
        listing_id=listing.id,
        score=final,
        breakdown=breakdown,
        strengths=strengths,
        concerns=concerns,
        raw_score=raw_score,
        max_possible=max_possible,
        vetoed=vetoed,
        weights=weights,
    )
