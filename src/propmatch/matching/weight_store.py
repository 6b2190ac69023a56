"""
Weight store: vector de pesos activo por contexto (tenant, agente, flujo).

Un solo vector vigente por contexto; la última escritura gana. Un contexto
sin pesos propios devuelve DEFAULT_WEIGHTS.
"""

import threading
from abc import ABC, abstractmethod

import structlog

from propmatch.models import DEFAULT_WEIGHTS, WeightVector

logger = structlog.get_logger()


class WeightStore(ABC):
    """Interfaz común para stores de pesos."""

    @abstractmethod
    def get(self, context_id: str) -> WeightVector:
        """
        Obtiene el vector activo del contexto.

        Raises:
            WeightStoreUnavailableError: Si el backend no responde
        """

    @abstractmethod
    def set(self, context_id: str, vector: WeightVector) -> None:
        """Reemplaza el vector activo del contexto."""

    @abstractmethod
    def reset(self, context_id: str) -> None:
        """Vuelve el contexto a los pesos por defecto."""


class InMemoryWeightStore(WeightStore):
    """Store en memoria, seguro entre threads."""

    def __init__(self, default: WeightVector = DEFAULT_WEIGHTS):
        self._default = default
        self._vectors: dict[str, WeightVector] = {}
        self._lock = threading.Lock()

    def get(self, context_id: str) -> WeightVector:
        with self._lock:
            return self._vectors.get(context_id, self._default)

    def set(self, context_id: str, vector: WeightVector) -> None:
        with self._lock:
            self._vectors[context_id] = vector
        logger.info("Pesos actualizados", context_id=context_id, total=vector.total())

    def reset(self, context_id: str) -> None:
        with self._lock:
            self._vectors.pop(context_id, None)
        logger.info("Pesos reseteados a default", context_id=context_id)
