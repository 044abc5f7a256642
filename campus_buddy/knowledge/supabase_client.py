import logging
from functools import lru_cache

from supabase import Client, create_client

from campus_buddy.config import (
    SUPABASE_ANON_KEY,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=2)
def get_supabase_client(service_role: bool = False) -> Client:
    """
    Shared Supabase client.

    The anon client is enough for reads that row-level security exposes
    to everyone; writes, storage and the auth admin API need the service
    role.
    """

    key = SUPABASE_SERVICE_ROLE_KEY if service_role else SUPABASE_ANON_KEY

    if not SUPABASE_URL or not key:
        raise RuntimeError(
            "SUPABASE_URL and "
            + ("SUPABASE_SERVICE_ROLE_KEY" if service_role else "SUPABASE_ANON_KEY")
            + " must be set"
        )

    client = create_client(SUPABASE_URL, key)

    logger.info(
        "Supabase client initialized",
        extra={"service_role": service_role},
    )

    return client
