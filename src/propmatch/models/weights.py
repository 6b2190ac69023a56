"""
Vector de pesos del matching.

Un campo fijo por criterio: un criterio faltante es un error de validación,
no un None silencioso.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Criterion(str, Enum):
    """Dimensiones evaluables de un par perfil/propiedad."""

    LISTING_TYPE = "listing_type"
    PROPERTY_TYPE = "property_type"
    LOCATION = "location"
    PRICE = "price"
    BEDROOMS = "bedrooms"
    BATHROOMS = "bathrooms"
    AREA = "area"
    AMENITIES = "amenities"


class WeightVector(BaseModel):
    """
    Importancia relativa de cada criterio (0 a 100).

    No necesita sumar 100: el score se normaliza contra la suma de los
    pesos de los criterios que aplican a cada par.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    listing_type: float = Field(default=0.0, ge=0, le=100)
    property_type: float = Field(default=0.0, ge=0, le=100)
    location: float = Field(default=0.0, ge=0, le=100)
    price: float = Field(default=0.0, ge=0, le=100)
    bedrooms: float = Field(default=0.0, ge=0, le=100)
    bathrooms: float = Field(default=0.0, ge=0, le=100)
    area: float = Field(default=0.0, ge=0, le=100)
    amenities: float = Field(default=0.0, ge=0, le=100)

    def get(self, criterion: Criterion) -> float:
        return getattr(self, Criterion(criterion).value)

    def as_dict(self) -> dict[str, float]:
        return {c.value: self.get(c) for c in Criterion}

    def total(self) -> float:
        return sum(self.as_dict().values())

    def with_weight(self, criterion: Criterion, value: float) -> "WeightVector":
        """Copia con un único peso modificado (revalidado)."""
        data = self.as_dict()
        data[Criterion(criterion).value] = value
        return WeightVector(**data)

    def normalized(self, total: float = 100.0) -> "WeightVector":
        """
        Reescala los pesos para que sumen `total`, preservando proporciones.

        Si todos los pesos son 0 se reparte `total` en partes iguales.
        """
        current = self.total()
        if current <= 0:
            even = total / len(Criterion)
            return WeightVector(**{c.value: even for c in Criterion})
        return WeightVector(
            **{name: value * total / current for name, value in self.as_dict().items()}
        )


# Suma 100 y cubre los 8 criterios
DEFAULT_WEIGHTS = WeightVector(
    location=20,
    price=25,
    bedrooms=10,
    bathrooms=5,
    area=10,
    property_type=10,
    listing_type=10,
    amenities=10,
)
