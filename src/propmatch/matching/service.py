"""
Servicio de matching: orquesta los flujos automáticos.

Toda la I/O (leer perfiles/propiedades, notificar, persistir feedback)
ocurre antes o después de la fase de scoring, nunca intercalada con ella.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog

from propmatch.config import get_settings
from propmatch.interfaces import (
    FeedbackSink,
    NotificationDispatcher,
    ProfileListingStore,
    RerankedMatch,
    Reranker,
)
from propmatch.matching.batch import BatchMatcher, BatchMatchResult, PairMatch
from propmatch.matching.learning import FeedbackLearner
from propmatch.matching.weight_store import WeightStore
from propmatch.models import FeedbackRecord, WeightVector

logger = structlog.get_logger()

DEFAULT_CONTEXT = "default"
BASE_SUFFIX = ":base"


def base_context(context_id: str) -> str:
    """Clave del store donde vive el vector base (no aprendido) del contexto."""
    return f"{context_id}{BASE_SUFFIX}"


@dataclass
class RerankOutcome:
    """Ranking determinístico y, si se pudo, el alternativo del re-ranker."""

    baseline: BatchMatchResult
    reranked: Optional[list[RerankedMatch]] = None


class MatchingService:
    """
    Motor de matching con dependencias inyectadas.

    Flujo del ciclo:
    1. Leer perfiles y propiedades activas
    2. Snapshot de pesos del contexto y batch matching
    3. Marcar last_matched de los perfiles con resultados
    4. Notificar un mensaje por perfil con sus matches rankeados
    """

    def __init__(
        self,
        store: ProfileListingStore,
        weight_store: WeightStore,
        feedback_sink: Optional[FeedbackSink] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        reranker: Optional[Reranker] = None,
        matcher: Optional[BatchMatcher] = None,
        learner: Optional[FeedbackLearner] = None,
    ):
        self.settings = get_settings()
        self.store = store
        self.weight_store = weight_store
        self.feedback_sink = feedback_sink
        self.dispatcher = dispatcher
        self.reranker = reranker
        self.matcher = matcher or BatchMatcher(weight_store=weight_store)
        self.learner = learner or FeedbackLearner()

    async def run_matching_cycle(
        self,
        context_id: Optional[str] = None,
        min_score: Optional[int] = None,
    ) -> dict:
        """
        Ejecuta un ciclo completo de matching.

        Diseñado para ser llamado por cron.

        Returns:
            Estadísticas del procesamiento
        """
        context_id = context_id or DEFAULT_CONTEXT
        min_score = self.settings.default_min_score if min_score is None else min_score

        stats = {
            "profiles_processed": 0,
            "listings_processed": 0,
            "matches_found": 0,
            "notifications_sent": 0,
            "diagnostics": 0,
            "errors": 0,
        }

        logger.info("Iniciando ciclo de matching", context_id=context_id, min_score=min_score)

        profiles = self.store.list_active_profiles()
        listings = self.store.list_active_listings()
        stats["profiles_processed"] = len(profiles)
        stats["listings_processed"] = len(listings)

        if not profiles or not listings:
            logger.info("No hay perfiles o propiedades activas")
            return stats

        # El scoring es CPU puro: fuera del event loop
        batch = await asyncio.to_thread(
            self.matcher.match_all,
            profiles,
            listings,
            None,
            min_score,
            context_id,
        )
        stats["matches_found"] = len(batch.matches)
        stats["diagnostics"] = len(batch.diagnostics)

        by_profile: dict[str, list[PairMatch]] = {}
        for match in batch.matches:
            by_profile.setdefault(match.profile.id, []).append(match)

        now = datetime.now(timezone.utc)
        for profile_id, matches in by_profile.items():
            try:
                self.store.touch_last_matched(profile_id, now)
            except Exception as e:
                logger.error("Error actualizando last_matched", profile_id=profile_id, error=str(e))
                stats["errors"] += 1

            if self.dispatcher is None:
                continue
            try:
                if await self.dispatcher.dispatch(matches[0].profile, matches):
                    stats["notifications_sent"] += 1
            except Exception as e:
                logger.error("Error enviando notificación", profile_id=profile_id, error=str(e))
                stats["errors"] += 1

        logger.info("Ciclo de matching completado", **stats)
        return stats

    async def match_new_listing(
        self,
        listing_id: str,
        context_id: Optional[str] = None,
        min_score: Optional[int] = None,
    ) -> Optional[BatchMatchResult]:
        """
        Busca compradores interesados en una propiedad recién cargada.

        Returns:
            BatchMatchResult, o None si la propiedad no existe o no está activa
        """
        context_id = context_id or DEFAULT_CONTEXT
        min_score = self.settings.new_listing_min_score if min_score is None else min_score

        listing = self.store.get_listing(listing_id)
        if listing is None or not listing.is_active:
            logger.info("Propiedad no disponible para matching", listing_id=listing_id)
            return None

        profiles = self.store.list_active_profiles()
        batch = await asyncio.to_thread(
            self.matcher.match_listing_against_profiles,
            listing,
            profiles,
            None,
            min_score,
            context_id,
        )

        if self.dispatcher is not None and batch.matches:
            try:
                await self.dispatcher.dispatch(listing, batch.matches)
            except Exception as e:
                logger.error("Error enviando notificación", listing_id=listing_id, error=str(e))

        logger.info(
            "Matching de propiedad nueva",
            listing_id=listing_id,
            matches=len(batch.matches),
        )
        return batch

    def record_feedback(self, record: FeedbackRecord) -> None:
        """Persiste el feedback; sin contexto se asigna al contexto por defecto."""
        if self.feedback_sink is None:
            raise RuntimeError("No hay feedback sink configurado")
        if record.context_id is None:
            record = record.model_copy(update={"context_id": DEFAULT_CONTEXT})
        self.feedback_sink.record_feedback(record)

    def set_base_weights(self, context_id: Optional[str], vector: WeightVector) -> None:
        """
        Fija los pesos configurados del contexto.

        El vector base se guarda aparte del aprendido y también pasa a ser
        el vigente hasta el próximo refresco.
        """
        context_id = context_id or DEFAULT_CONTEXT
        self.weight_store.set(base_context(context_id), vector)
        self.weight_store.set(context_id, vector)

    def refresh_learned_weights(self, context_id: Optional[str] = None) -> WeightVector:
        """
        Recalcula los pesos del contexto a partir del feedback registrado.

        Siempre aprende desde el vector base, nunca desde el aprendido
        anterior: con el mismo feedback el resultado es el mismo. Solo
        escribe en el store si el vector vigente cambia.

        Returns:
            El vector vigente tras el refresco
        """
        if self.feedback_sink is None:
            raise RuntimeError("No hay feedback sink configurado")

        context_id = context_id or DEFAULT_CONTEXT
        base = self.weight_store.get(base_context(context_id))
        records = self.feedback_sink.list_feedback(context_id)

        learned = self.learner.learn(base, records)
        if learned != self.weight_store.get(context_id):
            self.weight_store.set(context_id, learned)
        return learned

    async def rerank(self, batch: BatchMatchResult) -> RerankOutcome:
        """
        Pide un ranking alternativo al re-ranker externo.

        El ranking determinístico se conserva siempre como baseline.
        """
        outcome = RerankOutcome(baseline=batch)
        if self.reranker is None or not batch.matches:
            return outcome

        try:
            outcome.reranked = await self.reranker.rerank(batch.matches)
        except Exception as e:
            logger.warning("Error en re-ranking, se usa el baseline", error=str(e))
        return outcome
