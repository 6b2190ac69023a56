"""
Modelos de feedback e interacciones.

FeedbackRecord es la entrada del aprendizaje de pesos; InteractionRecord
solo se registra (vistas, shortlist, descartes) para análisis externo.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from propmatch.models.weights import WeightVector


class FeedbackType(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    BAD = "bad"

    @property
    def is_positive(self) -> bool:
        return self in (FeedbackType.EXCELLENT, FeedbackType.GOOD)


class InteractionType(str, Enum):
    VIEWED = "viewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    CONTACTED = "contacted"


class FeedbackRecord(BaseModel):
    """Resultado explícito de un match. Inmutable una vez registrado."""

    model_config = ConfigDict(frozen=True)

    profile_id: str = Field(..., description="FK al BuyerProfile")
    listing_id: str = Field(..., description="FK a la Listing")
    match_score: int = Field(..., ge=0, le=100, description="Score al momento del feedback")
    feedback_type: FeedbackType = Field(..., description="excellent, good o bad")
    criteria_weights: WeightVector = Field(
        ..., description="Pesos vigentes cuando se calculó el match"
    )
    note: Optional[str] = Field(None, max_length=1000, description="Comentario libre")
    context_id: Optional[str] = Field(None, description="Contexto/tenant de los pesos")
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump(mode="json")

    @classmethod
    def from_db_dict(cls, data: dict) -> "FeedbackRecord":
        # Filas viejas pueden traer pesos sin todos los criterios
        weights = {
            key: value
            for key, value in (data.get("criteria_weights") or {}).items()
            if key in WeightVector.model_fields
        }
        return cls(
            profile_id=str(data["profile_id"]),
            listing_id=str(data.get("listing_id") or data.get("property_id")),
            match_score=int(data.get("match_score") or 0),
            feedback_type=data["feedback_type"],
            criteria_weights=WeightVector(**weights),
            note=data.get("note") or data.get("feedback_note"),
            context_id=data.get("context_id"),
            created_at=data.get("created_at") or datetime.now(timezone.utc).isoformat(),
        )


class InteractionRecord(BaseModel):
    """Señal implícita de un comprador sobre una propiedad."""

    model_config = ConfigDict(frozen=True)

    profile_id: str
    listing_id: str
    interaction_type: InteractionType
    match_score: Optional[int] = Field(None, ge=0, le=100)
    time_spent_seconds: Optional[int] = Field(None, ge=0)
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_db_dict(self) -> dict:
        return self.model_dump(mode="json")
