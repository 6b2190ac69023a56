"""
Script para ejecutar el ciclo de matching.

Cruza perfiles activos contra propiedades activas con los pesos del
contexto y, opcionalmente, recalcula antes los pesos aprendidos.

Uso:
    python -m propmatch.scripts.run_matching
    python -m propmatch.scripts.run_matching --context agencia-1 --min-score 70
    python -m propmatch.scripts.run_matching --learn
"""

import argparse
import asyncio
import logging
import sys
from typing import Sequence, Union

import structlog

from propmatch.config import get_settings
from propmatch.database import (
    FeedbackRepository,
    SupabaseProfileListingStore,
    WeightRepository,
)
from propmatch.interfaces import NotificationDispatcher
from propmatch.matching import MatchingService, PairMatch
from propmatch.models import BuyerProfile, Listing

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


class LogDispatcher(NotificationDispatcher):
    """Dispatcher que solo loguea los matches (sin canal de envío)."""

    async def dispatch(
        self,
        target: Union[BuyerProfile, Listing],
        matches: Sequence[PairMatch],
    ) -> bool:
        for match in matches:
            logger.info(
                "Match",
                profile_id=match.profile.id,
                listing_id=match.listing.id,
                score=match.score,
                strengths=match.result.strengths,
                concerns=match.result.concerns,
            )
        return True


async def run_matching(context_id: str, min_score: int, learn: bool) -> dict:
    """Ejecuta el ciclo de matching."""
    service = MatchingService(
        store=SupabaseProfileListingStore(),
        weight_store=WeightRepository(),
        feedback_sink=FeedbackRepository(),
        dispatcher=LogDispatcher(),
    )
    if learn:
        service.refresh_learned_weights(context_id)
    return await service.run_matching_cycle(context_id=context_id, min_score=min_score)


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Ejecuta el ciclo de matching")
    parser.add_argument(
        "--context",
        default="default",
        help="Contexto/tenant cuyos pesos se usan",
    )
    parser.add_argument(
        "--min-score",
        type=int,
        default=settings.default_min_score,
        help="Score mínimo (0-100)",
    )
    parser.add_argument(
        "--learn",
        action="store_true",
        help="Recalcula los pesos aprendidos antes de matchear",
    )
    args = parser.parse_args()

    logger.info("Iniciando ciclo de matching...")

    try:
        stats = asyncio.run(
            run_matching(context_id=args.context, min_score=args.min_score, learn=args.learn)
        )

        logger.info(
            "Matching completado",
            profiles=stats.get("profiles_processed", 0),
            matches=stats.get("matches_found", 0),
            notifications=stats.get("notifications_sent", 0),
        )

        sys.exit(0 if stats.get("errors", 0) == 0 else 1)

    except KeyboardInterrupt:
        logger.info("Matching interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en matching", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
