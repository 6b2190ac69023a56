"""
Aprendizaje de pesos a partir del feedback.

Heurística aditiva acotada, no un modelo entrenado: cada feedback positivo
sube los criterios que estaban en uso, cada negativo los baja a la mitad
de ritmo con un piso, y al final se renormaliza a 100.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from propmatch.config import get_settings
from propmatch.models import Criterion, FeedbackRecord, FeedbackType, WeightVector

logger = structlog.get_logger()


@dataclass
class FeedbackSummary:
    """Conteo de feedback para mostrar el progreso hacia pesos aprendidos."""

    total: int
    excellent: int
    good: int
    bad: int
    required: int

    @property
    def learning_active(self) -> bool:
        return self.total >= self.required


class FeedbackLearner:
    """Ajusta un WeightVector con feedback good/excellent/bad."""

    def __init__(
        self,
        learning_rate: Optional[float] = None,
        min_feedback: Optional[int] = None,
        weight_floor: Optional[float] = None,
    ):
        settings = get_settings()
        self.learning_rate = (
            settings.feedback_learning_rate if learning_rate is None else learning_rate
        )
        self.min_feedback = (
            settings.min_feedback_for_learning if min_feedback is None else min_feedback
        )
        self.weight_floor = (
            settings.learned_weight_floor if weight_floor is None else weight_floor
        )

    def summarize(self, records: Sequence[FeedbackRecord]) -> FeedbackSummary:
        counts = {kind: 0 for kind in FeedbackType}
        for record in records:
            counts[record.feedback_type] += 1
        return FeedbackSummary(
            total=len(records),
            excellent=counts[FeedbackType.EXCELLENT],
            good=counts[FeedbackType.GOOD],
            bad=counts[FeedbackType.BAD],
            required=self.min_feedback,
        )

    def learn(
        self,
        current: WeightVector,
        records: Sequence[FeedbackRecord],
    ) -> WeightVector:
        """
        Calcula pesos aprendidos.

        Args:
            current: Pesos vigentes (default o personalizados)
            records: Feedback acumulado

        Returns:
            `current` sin cambios si no hay feedback suficiente; si no,
            un vector nuevo que suma 100
        """
        if len(records) < self.min_feedback:
            logger.info(
                "Feedback insuficiente para aprender pesos",
                feedback=len(records),
                required=self.min_feedback,
            )
            return current

        # Valores intermedios pueden pasar de 100: se trabaja sobre un dict
        adjusted = current.as_dict()
        step_down = self.learning_rate * 0.5

        for record in records:
            in_effect = [
                c.value for c in Criterion if record.criteria_weights.get(c) > 0
            ]
            if record.feedback_type.is_positive:
                for name in in_effect:
                    adjusted[name] += self.learning_rate
            else:
                for name in in_effect:
                    adjusted[name] = max(self.weight_floor, adjusted[name] - step_down)

        total = sum(adjusted.values())
        if total <= 0:
            learned = WeightVector().normalized()
        else:
            learned = WeightVector(
                **{
                    name: min(100.0, value * 100.0 / total)
                    for name, value in adjusted.items()
                }
            )

        logger.info(
            "Pesos aprendidos",
            feedback=len(records),
            weights=learned.as_dict(),
        )
        return learned
