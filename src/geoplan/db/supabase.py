"""Shared Supabase connection backing the ``supabase`` distance cache backend."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Process-wide Supabase client, or ``None`` when it cannot be built.

    Creating the client does not contact the server, so a wrong URL or key
    only shows up as failing cache reads and writes later on.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase cache backend selected but GEOPLAN_SUPABASE_URL/GEOPLAN_SUPABASE_KEY are not set")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Could not create Supabase client for {settings.supabase_url}: {e}")
        return None
    logger.info(f"Distance cache connected to Supabase at {settings.supabase_url}")
    return client
