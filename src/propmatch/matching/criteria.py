"""
Evaluadores de criterios.

Una función pura por dimensión del matching. Cada una devuelve un
CriterionOutcome acotado a [0, weight] con una nota legible. Si el perfil
no expresa preferencia para la dimensión, el criterio no aplica y queda
fuera del numerador y del denominador del score.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from propmatch.models import BuyerProfile, Criterion, Listing

# Penalización lineal por cada ambiente faltante
BEDROOM_SHORTFALL_PENALTY = 0.3
BATHROOM_SHORTFALL_PENALTY = 0.4

# Fuera de presupuesto nunca supera la mitad del peso
OUT_OF_BUDGET_CAP = 0.5


@dataclass(frozen=True)
class CriterionOutcome:
    """Resultado de evaluar un criterio sobre un par perfil/propiedad."""

    applies: bool
    earned: float = 0.0
    max: float = 0.0
    note: Optional[str] = None
    satisfied: bool = False


NOT_APPLICABLE = CriterionOutcome(applies=False)


def _full(weight: float, note: str) -> CriterionOutcome:
    return CriterionOutcome(
        applies=True, earned=weight, max=weight, note=note, satisfied=True
    )


def _partial(weight: float, fraction: float, note: str) -> CriterionOutcome:
    fraction = max(0.0, min(1.0, fraction))
    return CriterionOutcome(
        applies=True, earned=weight * fraction, max=weight, note=note, satisfied=False
    )


def _contains_either_way(a: str, b: str) -> bool:
    """Substring case-insensitive en cualquier dirección (tolera abreviaturas)."""
    a = (a or "").strip().lower()
    b = (b or "").strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def _fmt_money(value: float) -> str:
    return f"{value:,.0f}"


def evaluate_price(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    """
    Crédito completo dentro de [budget_min, budget_max].

    Fuera del rango, el crédito decae con la distancia al límite violado,
    normalizada por el rango del presupuesto (o por el precio si el rango
    no está definido), y queda por debajo de la mitad del peso.
    """
    low, high = profile.budget_min, profile.budget_max
    if low is None and high is None:
        return NOT_APPLICABLE

    price = listing.price
    above = high is not None and price > high
    below = low is not None and price < low
    if not above and not below:
        if high:
            pct = price / high * 100
            return _full(weight, f"Dentro del presupuesto ({pct:.0f}% del máximo)")
        return _full(weight, "Dentro del presupuesto")

    bound = high if above else low
    distance = abs(price - bound)
    span = (high - low) if (low is not None and high is not None) else 0.0
    if span > 0:
        scale = span
    elif price > 0:
        scale = price
    else:
        scale = bound
    normalized = distance / scale if scale > 0 else 1.0

    fraction = OUT_OF_BUDGET_CAP * max(0.0, 1.0 - normalized)
    direction = "por encima" if above else "por debajo"
    return _partial(
        weight,
        fraction,
        f"Fuera del presupuesto: {_fmt_money(distance)} {direction}",
    )


def evaluate_location(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    """Crédito completo si alguna zona deseada coincide con ciudad o región."""
    tokens = [t for t in profile.locations if (t or "").strip()]
    if not tokens:
        return NOT_APPLICABLE

    for token in tokens:
        for place in (listing.city, listing.region):
            if _contains_either_way(token, place):
                return _full(weight, f"Ubicación deseada: {listing.city or listing.region}")

    return _partial(weight, 0.0, "Fuera de las ubicaciones preferidas")


def _evaluate_rooms(
    wanted: Optional[int],
    actual: int,
    weight: float,
    penalty: float,
    label: str,
) -> CriterionOutcome:
    if not wanted:
        return NOT_APPLICABLE
    if actual >= wanted:
        return _full(weight, f"{actual} {label} (mínimo {wanted})")
    shortfall = wanted - actual
    return _partial(
        weight,
        1.0 - shortfall * penalty,
        f"Solo {actual} {label} (pedía {wanted})",
    )


def evaluate_bedrooms(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    return _evaluate_rooms(
        profile.bedrooms_min,
        listing.bedrooms,
        weight,
        BEDROOM_SHORTFALL_PENALTY,
        "dormitorios",
    )


def evaluate_bathrooms(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    return _evaluate_rooms(
        profile.bathrooms_min,
        listing.bathrooms,
        weight,
        BATHROOM_SHORTFALL_PENALTY,
        "baños",
    )


def evaluate_area(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    """Crédito proporcional a area / area_min cuando no llega al mínimo."""
    if not profile.area_min:
        return NOT_APPLICABLE

    area = listing.area or 0.0
    if area >= profile.area_min:
        return _full(weight, f"{area:.0f} m² (mínimo {profile.area_min:.0f} m²)")
    return _partial(
        weight,
        area / profile.area_min,
        f"Superficie menor a la deseada ({area:.0f} m²)",
    )


def evaluate_property_type(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    wanted = {t.strip().lower() for t in profile.property_types if (t or "").strip()}
    if not wanted:
        return NOT_APPLICABLE
    if listing.property_type.strip().lower() in wanted:
        return _full(weight, f"Tipo de inmueble preferido ({listing.property_type})")
    return _partial(weight, 0.0, f"Tipo de inmueble distinto ({listing.property_type})")


def evaluate_listing_type(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    """Siempre aplica: el perfil siempre declara sale, rent o both."""
    if profile.accepts_listing_type(listing.listing_type):
        return _full(weight, "Tipo de negocio compatible")
    return _partial(weight, 0.0, "Tipo de negocio distinto")


def evaluate_amenities(profile: BuyerProfile, listing: Listing, weight: float) -> CriterionOutcome:
    desired = [a for a in profile.amenities if (a or "").strip()]
    if not desired:
        return NOT_APPLICABLE

    matched = [
        wanted
        for wanted in desired
        if any(_contains_either_way(wanted, offered) for offered in listing.amenities)
    ]
    note = f"Tiene {len(matched)}/{len(desired)} comodidades deseadas"
    if len(matched) == len(desired):
        return _full(weight, note)
    return _partial(weight, len(matched) / len(desired), note)


Evaluator = Callable[[BuyerProfile, Listing, float], CriterionOutcome]

# Orden estable: define el orden de strengths/concerns en el MatchResult
EVALUATORS: dict[Criterion, Evaluator] = {
    Criterion.LISTING_TYPE: evaluate_listing_type,
    Criterion.PROPERTY_TYPE: evaluate_property_type,
    Criterion.LOCATION: evaluate_location,
    Criterion.PRICE: evaluate_price,
    Criterion.BEDROOMS: evaluate_bedrooms,
    Criterion.BATHROOMS: evaluate_bathrooms,
    Criterion.AREA: evaluate_area,
    Criterion.AMENITIES: evaluate_amenities,
}
