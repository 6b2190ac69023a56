"""
Repositorios para operaciones CRUD en Supabase.

Cada repositorio maneja una tabla/entidad específica e implementa la
interfaz de colaborador externo que corresponde.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from tenacity import Retrying, stop_after_attempt, wait_exponential

from propmatch.config import get_settings
from propmatch.database.supabase_client import get_supabase_client, SupabaseClient
from propmatch.exceptions import WeightStoreUnavailableError
from propmatch.interfaces import FeedbackSink, InteractionRecorder, ProfileListingStore
from propmatch.matching.weight_store import WeightStore
from propmatch.models import (
    BuyerProfile,
    DEFAULT_WEIGHTS,
    FeedbackRecord,
    InteractionRecord,
    Listing,
    WeightVector,
)

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client


class ProfileRepository(BaseRepository):
    """Repositorio para perfiles de compradores."""

    TABLE = "buyer_profiles"

    def get_active(self) -> list[BuyerProfile]:
        """Obtiene los perfiles activos."""
        rows = self.client.select_active(self.TABLE)
        return [BuyerProfile.from_db_dict(row) for row in rows]

    def get_by_id(self, profile_id: str) -> Optional[BuyerProfile]:
        row = self.client.select_by_id(self.TABLE, profile_id)
        return BuyerProfile.from_db_dict(row) if row else None

    def update_last_matched(self, profile_id: str, timestamp: datetime) -> dict:
        """Registra el último matching del perfil."""
        response = (
            self.client.table(self.TABLE)
            .update({"last_matched_at": timestamp.isoformat()})
            .eq("id", profile_id)
            .execute()
        )
        return response.data[0] if response.data else {}


class ListingRepository(BaseRepository):
    """Repositorio para propiedades."""

    TABLE = "properties"

    def get_active(self) -> list[Listing]:
        """Obtiene las propiedades activas, más recientes primero."""
        rows = self.client.select_active(self.TABLE, order_by="created_at")
        return [Listing.from_db_dict(row) for row in rows]

    def get_by_id(self, listing_id: str) -> Optional[Listing]:
        row = self.client.select_by_id(self.TABLE, listing_id)
        return Listing.from_db_dict(row) if row else None


class SupabaseProfileListingStore(ProfileListingStore):
    """ProfileListingStore sobre las tablas de perfiles y propiedades."""

    def __init__(
        self,
        profiles: Optional[ProfileRepository] = None,
        listings: Optional[ListingRepository] = None,
    ):
        self.profiles = profiles or ProfileRepository()
        self.listings = listings or ListingRepository()

    def list_active_profiles(self) -> list[BuyerProfile]:
        return self.profiles.get_active()

    def list_active_listings(self) -> list[Listing]:
        return self.listings.get_active()

    def get_listing(self, listing_id: str) -> Optional[Listing]:
        return self.listings.get_by_id(listing_id)

    def touch_last_matched(self, profile_id: str, timestamp: datetime) -> None:
        self.profiles.update_last_matched(profile_id, timestamp)


class FeedbackRepository(BaseRepository, FeedbackSink):
    """Repositorio para feedback explícito de matches."""

    TABLE = "match_feedback"

    def record_feedback(self, record: FeedbackRecord) -> None:
        """Registra feedback de un match."""
        self.client.table(self.TABLE).insert(record.to_db_dict()).execute()
        logger.info(
            "Feedback registrado",
            profile_id=record.profile_id,
            listing_id=record.listing_id,
            type=record.feedback_type.value,
        )

    def list_feedback(self, context_id: Optional[str]) -> list[FeedbackRecord]:
        """Obtiene el feedback de un contexto (o todo si context_id es None)."""
        query = self.client.table(self.TABLE).select("*")
        if context_id is not None:
            query = query.eq("context_id", context_id)
        response = query.order("created_at", desc=True).execute()
        return [FeedbackRecord.from_db_dict(row) for row in response.data]


class InteractionRepository(BaseRepository, InteractionRecorder):
    """Repositorio para interacciones de compradores con propiedades."""

    TABLE = "property_interactions"

    def record_interaction(self, record: InteractionRecord) -> None:
        self.client.table(self.TABLE).insert(record.to_db_dict()).execute()
        logger.info(
            "Interacción registrada",
            profile_id=record.profile_id,
            listing_id=record.listing_id,
            type=record.interaction_type.value,
        )


class WeightRepository(BaseRepository, WeightStore):
    """
    Weight store persistido en la tabla matching_weights.

    Cada operación se reintenta con backoff exponencial; si el backend sigue
    fallando se levanta WeightStoreUnavailableError para que el batch falle
    cerrado en vez de usar pesos por defecto sin saberlo.
    """

    TABLE = "matching_weights"

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        retry_attempts: Optional[int] = None,
        wait=None,
    ):
        super().__init__(client)
        settings = get_settings()
        self._retrying = Retrying(
            stop=stop_after_attempt(retry_attempts or settings.weight_store_retry_attempts),
            wait=wait or wait_exponential(multiplier=0.5, min=0.5, max=4),
            reraise=True,
        )

    def _call(self, operation: str, context_id: str, fn):
        try:
            return self._retrying(fn)
        except Exception as e:
            logger.error(
                "Weight store no disponible",
                operation=operation,
                context_id=context_id,
                error=str(e),
            )
            raise WeightStoreUnavailableError(
                f"No se pudo {operation} pesos de '{context_id}': {e}"
            ) from e

    def get(self, context_id: str) -> WeightVector:
        def fetch():
            return (
                self.client.table(self.TABLE)
                .select("weights")
                .eq("context_id", context_id)
                .limit(1)
                .execute()
            )

        response = self._call("leer", context_id, fetch)
        if not response.data:
            return DEFAULT_WEIGHTS
        try:
            return WeightVector(**response.data[0]["weights"])
        except (KeyError, TypeError, ValueError) as e:
            raise WeightStoreUnavailableError(
                f"Pesos corruptos para '{context_id}': {e}"
            ) from e

    def set(self, context_id: str, vector: WeightVector) -> None:
        data = {
            "context_id": context_id,
            "weights": vector.as_dict(),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        def upsert():
            return (
                self.client.table(self.TABLE)
                .upsert(data, on_conflict="context_id")
                .execute()
            )

        self._call("guardar", context_id, upsert)
        logger.info("Pesos guardados", context_id=context_id, total=vector.total())

    def reset(self, context_id: str) -> None:
        def delete():
            return (
                self.client.table(self.TABLE)
                .delete()
                .eq("context_id", context_id)
                .execute()
            )

        self._call("resetear", context_id, delete)
        logger.info("Pesos reseteados a default", context_id=context_id)
