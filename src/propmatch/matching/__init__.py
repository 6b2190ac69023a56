"""
Motor de matching.

Score multi-criterio ponderado entre perfiles de compradores y
propiedades, con pesos configurables y aprendidos por feedback.
"""

from propmatch.matching.criteria import CriterionOutcome, EVALUATORS
from propmatch.matching.scoring import (
    CriterionScore,
    MatchResult,
    listing_type_compatible,
    score,
)
from propmatch.matching.weight_store import WeightStore, InMemoryWeightStore
from propmatch.matching.learning import FeedbackLearner, FeedbackSummary
from propmatch.matching.batch import (
    BatchMatcher,
    BatchMatchResult,
    CancellationToken,
    MatchDiagnostic,
    PairMatch,
)
from propmatch.matching.service import MatchingService, RerankOutcome, base_context

__all__ = [
    # Criterios
    "CriterionOutcome",
    "EVALUATORS",
    # Scoring
    "CriterionScore",
    "MatchResult",
    "listing_type_compatible",
    "score",
    # Pesos
    "WeightStore",
    "InMemoryWeightStore",
    "FeedbackLearner",
    "FeedbackSummary",
    # Batch
    "BatchMatcher",
    "BatchMatchResult",
    "CancellationToken",
    "MatchDiagnostic",
    "PairMatch",
    # Orquestación
    "MatchingService",
    "RerankOutcome",
    "base_context",
]
