"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> propmatch/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase (solo lo usan los adapters de database/)
    supabase_url: Optional[str] = Field(None, description="URL del proyecto Supabase")
    supabase_key: Optional[str] = Field(None, description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )

    # Matching
    default_min_score: int = Field(
        60, ge=0, le=100, description="Score mínimo para el ciclo de matching"
    )
    new_listing_min_score: int = Field(
        60, ge=0, le=100, description="Score mínimo al matchear una propiedad nueva"
    )
    strict_type_match: bool = Field(
        False, description="Si True, un tipo de inmueble distinto anula el match"
    )

    # Batch
    batch_max_workers: Optional[int] = Field(
        None, ge=1, description="Workers del pool (None = cantidad de CPUs)"
    )
    batch_parallel_threshold: int = Field(
        64, ge=0, description="Pares mínimos para evaluar en paralelo"
    )

    # Feedback learning
    feedback_learning_rate: float = Field(
        0.1, ge=0.0, le=100.0, description="Incremento por feedback positivo"
    )
    min_feedback_for_learning: int = Field(
        5, ge=1, description="Feedbacks necesarios para activar pesos aprendidos"
    )
    learned_weight_floor: float = Field(
        5.0, ge=0.0, le=100.0, description="Peso mínimo tras feedback negativo"
    )

    # Weight store
    weight_store_retry_attempts: int = Field(
        3, ge=1, description="Reintentos contra el weight store remoto"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
LISTING_TYPES = ["sale", "rent"]

PROFILE_STATUSES = ["active", "paused", "closed"]
