"""
Cliente de Supabase.

Singleton para conexión a la base de datos, con las consultas que
comparten los repositorios de perfiles y propiedades.
"""

from functools import lru_cache
from typing import Optional

import structlog
from supabase import create_client, Client

from propmatch.config import get_settings, Settings

logger = structlog.get_logger()


class SupabaseClient:
    """Wrapper del cliente de Supabase con consultas comunes."""

    def __init__(self, client: Client):
        self._client = client

    @property
    def client(self) -> Client:
        return self._client

    def table(self, name: str):
        return self._client.table(name)

    def select_active(self, table: str, order_by: Optional[str] = None) -> list[dict]:
        """Filas con status 'active', opcionalmente ordenadas desc."""
        query = self.table(table).select("*").eq("status", "active")
        if order_by:
            query = query.order(order_by, desc=True)
        return query.execute().data or []

    def select_by_id(self, table: str, row_id: str) -> Optional[dict]:
        response = self.table(table).select("*").eq("id", row_id).limit(1).execute()
        return response.data[0] if response.data else None


def resolve_credentials(settings: Settings) -> tuple[str, str]:
    """
    URL y key a usar; la service key tiene prioridad.

    Raises:
        ValueError: Si las credenciales no están configuradas
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos. "
            "Configura las variables de entorno."
        )
    return settings.supabase_url, settings.supabase_service_key or settings.supabase_key


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Obtiene el cliente de Supabase (singleton cacheado)."""
    url, key = resolve_credentials(get_settings())
    client = create_client(url, key)
    logger.info("Cliente de Supabase inicializado", url=url)
    return SupabaseClient(client)
