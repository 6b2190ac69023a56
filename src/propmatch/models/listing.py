"""
Modelo de Propiedad

Propiedad en venta o alquiler tal como la consume el motor de matching.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from propmatch.exceptions import InvalidListingError


class ListingType(str, Enum):
    SALE = "sale"
    RENT = "rent"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Listing(BaseModel):
    """
    Propiedad publicada.

    El precio y el estado no se validan al construir el modelo para poder
    cargar filas defectuosas del store y reportarlas como diagnóstico
    en vez de tirar abajo el batch completo.
    """

    model_config = ConfigDict(from_attributes=True)

    # Identificación
    id: str = Field(..., description="ID de la propiedad")
    title: Optional[str] = Field(None, description="Título del anuncio")

    # Negocio
    listing_type: ListingType = Field(..., description="sale o rent")
    property_type: str = Field(..., description="apartment, house, land, ...")
    price: float = Field(..., description="Precio publicado")

    # Ubicación
    city: str = Field(default="", description="Ciudad")
    region: str = Field(default="", description="Región/Distrito")

    # Características físicas
    bedrooms: int = Field(default=0, ge=0, description="Dormitorios")
    bathrooms: int = Field(default=0, ge=0, description="Baños")
    area: Optional[float] = Field(None, ge=0, description="Superficie útil m²")

    amenities: list[str] = Field(default_factory=list, description="Comodidades")

    status: Optional[ListingStatus] = Field(
        default=ListingStatus.ACTIVE, description="Solo 'active' participa"
    )

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.ACTIVE

    def check(self) -> None:
        """
        Valida que la propiedad pueda evaluarse.

        Raises:
            InvalidListingError: Precio negativo o estado ausente
        """
        if self.price < 0:
            raise InvalidListingError(self.id, f"precio negativo ({self.price})")
        if self.status is None:
            raise InvalidListingError(self.id, "sin estado")

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump(mode="json")

    @classmethod
    def from_db_dict(cls, data: dict) -> "Listing":
        """Reconstruye la propiedad desde una fila de la DB."""
        return cls(
            id=str(data["id"]),
            title=data.get("title"),
            listing_type=data["listing_type"],
            property_type=data.get("property_type") or "",
            price=float(data.get("price") or 0),
            city=data.get("city") or "",
            region=data.get("region") or data.get("state") or "",
            bedrooms=int(data.get("bedrooms") or 0),
            bathrooms=int(data.get("bathrooms") or 0),
            area=data.get("area") or data.get("useful_area"),
            amenities=data.get("amenities") or [],
            status=data.get("status"),
        )
