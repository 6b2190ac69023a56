"""
Modelo de Perfil de Comprador

Criterios de búsqueda de un comprador o partner. El motor de matching
solo los lee; nunca los modifica.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from propmatch.exceptions import InvalidProfileError


class ListingPreference(str, Enum):
    """Tipo de negocio que busca el comprador."""

    SALE = "sale"
    RENT = "rent"
    BOTH = "both"


class ProfileStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class BuyerProfile(BaseModel):
    """
    Preferencias de un comprador.

    Listas vacías y mínimos ausentes (o en 0) significan "cualquiera":
    el criterio correspondiente no participa del score.
    """

    model_config = ConfigDict(from_attributes=True)

    # Identificadores
    id: str = Field(..., description="ID del perfil")
    name: Optional[str] = Field(None, description="Nombre para mostrar")

    # Tipo de negocio e inmueble
    listing_type: ListingPreference = Field(
        default=ListingPreference.BOTH, description="sale, rent o both"
    )
    property_types: list[str] = Field(
        default_factory=list, description="Tipos aceptables (vacío = cualquiera)"
    )

    # Ubicación (orden de preferencia)
    locations: list[str] = Field(
        default_factory=list, description="Ciudades/zonas deseadas"
    )

    # Presupuesto
    budget_min: Optional[float] = Field(None, ge=0, description="Presupuesto mínimo")
    budget_max: Optional[float] = Field(None, ge=0, description="Presupuesto máximo")

    # Características físicas
    bedrooms_min: Optional[int] = Field(None, ge=0, description="Mínimo de dormitorios")
    bathrooms_min: Optional[int] = Field(None, ge=0, description="Mínimo de baños")
    area_min: Optional[float] = Field(None, ge=0, description="Superficie mínima m²")

    amenities: list[str] = Field(
        default_factory=list, description="Comodidades deseadas"
    )

    # Estado
    status: ProfileStatus = Field(default=ProfileStatus.ACTIVE)
    last_matched_at: Optional[str] = Field(
        None, description="Último matching (lo escribe el store externo)"
    )

    @property
    def is_active(self) -> bool:
        return self.status == ProfileStatus.ACTIVE

    def accepts_listing_type(self, listing_type: str) -> bool:
        """True si el perfil acepta el tipo de negocio de la propiedad."""
        if self.listing_type == ListingPreference.BOTH:
            return True
        value = getattr(listing_type, "value", listing_type)
        return self.listing_type.value == str(value).lower()

    def check(self) -> None:
        """
        Valida invariantes entre campos.

        Raises:
            InvalidProfileError: Si el presupuesto es inconsistente o
                hay criterios en blanco
        """
        if (
            self.budget_min is not None
            and self.budget_max is not None
            and self.budget_min > self.budget_max
        ):
            raise InvalidProfileError(
                self.id,
                f"budget_min ({self.budget_min}) > budget_max ({self.budget_max})",
            )
        for field in ("locations", "property_types", "amenities"):
            if any(not (token or "").strip() for token in getattr(self, field)):
                raise InvalidProfileError(self.id, f"{field} contiene valores vacíos")

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        data = self.model_dump(mode="json")
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        return data

    @classmethod
    def from_db_dict(cls, data: dict) -> "BuyerProfile":
        """Reconstruye el perfil desde una fila de la DB."""
        return cls(
            id=str(data["id"]),
            name=data.get("name") or data.get("buyer_name"),
            listing_type=data.get("listing_type") or ListingPreference.BOTH,
            property_types=data.get("property_types") or [],
            locations=data.get("locations") or [],
            budget_min=data.get("budget_min"),
            budget_max=data.get("budget_max"),
            bedrooms_min=data.get("bedrooms_min"),
            bathrooms_min=data.get("bathrooms_min"),
            area_min=data.get("area_min"),
            amenities=data.get("amenities") or data.get("desired_amenities") or [],
            status=data.get("status") or ProfileStatus.ACTIVE,
            last_matched_at=data.get("last_matched_at"),
        )
