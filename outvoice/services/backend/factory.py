"""Backend factory for configuration-based selection.

This factory creates the backend implementation once at startup:
- SupabaseBackend when SUPABASE_URL / SUPABASE_KEY are set and
  USE_PREVIEW_DATA is not
- InMemoryBackend otherwise (fabricated users, sample invoices)
"""

from typing import Optional, Union

import structlog

from outvoice.config import Settings, get_settings
from outvoice.services.backend.memory import InMemoryBackend
from outvoice.services.backend.supabase_backend import SupabaseBackend


logger = structlog.get_logger(__name__)

Backend = Union[SupabaseBackend, InMemoryBackend]


def create_backend(settings: Optional[Settings] = None) -> Backend:
    """Create the backend selected by configuration.

    Returns:
        The live Supabase backend, or the in-memory preview backend
    """
    settings = settings or get_settings()

    if settings.use_live_backend:
        logger.info("backend_selected", backend="supabase")
        return SupabaseBackend(settings=settings.supabase)

    reason = "forced" if settings.app.use_preview_data else "supabase_not_configured"
    logger.warning("backend_selected", backend="in_memory", reason=reason)
    return InMemoryBackend()
