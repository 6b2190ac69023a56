"""
Colaboradores externos del motor de matching.

El motor consume y produce datos planos; storage, entrega de mensajes y
re-ranking por LLM viven detrás de estas interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence, Union

from propmatch.models import (
    BuyerProfile,
    FeedbackRecord,
    InteractionRecord,
    Listing,
)

if TYPE_CHECKING:
    from propmatch.matching.batch import PairMatch


class ProfileListingStore(ABC):
    """Fuente de perfiles y propiedades."""

    @abstractmethod
    def list_active_profiles(self) -> list[BuyerProfile]:
        pass

    @abstractmethod
    def list_active_listings(self) -> list[Listing]:
        pass

    @abstractmethod
    def get_listing(self, listing_id: str) -> Optional[Listing]:
        pass

    @abstractmethod
    def touch_last_matched(self, profile_id: str, timestamp: datetime) -> None:
        pass


class FeedbackSink(ABC):
    """Persistencia del feedback explícito."""

    @abstractmethod
    def record_feedback(self, record: FeedbackRecord) -> None:
        pass

    @abstractmethod
    def list_feedback(self, context_id: Optional[str]) -> list[FeedbackRecord]:
        pass


class InteractionRecorder(ABC):
    """Señales implícitas: vistas, shortlist, descartes."""

    @abstractmethod
    def record_interaction(self, record: InteractionRecord) -> None:
        pass


class NotificationDispatcher(ABC):
    """
    Formatea y envía un mensaje (email/chat) con matches rankeados.

    El motor solo entrega resultados y notas; nunca arma mensajes.
    """

    @abstractmethod
    async def dispatch(
        self,
        target: Union[BuyerProfile, Listing],
        matches: Sequence["PairMatch"],
    ) -> bool:
        """
        Returns:
            True si el mensaje se envió
        """
        pass


@dataclass
class RerankedMatch:
    """Match reordenado por un re-ranker externo."""

    profile_id: str
    listing_id: str
    score: int
    rationale: str = ""


class Reranker(ABC):
    """Re-ranker opcional (ej: LLM) sobre el mismo set de candidatos."""

    @abstractmethod
    async def rerank(self, candidates: Sequence["PairMatch"]) -> list[RerankedMatch]:
        pass
