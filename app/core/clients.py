from functools import lru_cache
from supabase import create_client

from app import config
from app.utils.log_utils import log_debug


@lru_cache(maxsize=1)
def get_supabase_client():
    """Create the shared Supabase client on first use."""
    if not config.SUPABASE_URL or not config.SUPABASE_KEY:
        raise ValueError("Missing required Supabase environment variables")

    log_debug("=== SUPABASE CLIENT INITIALIZATION ===", {
        "url": config.SUPABASE_URL,
        "key_present": bool(config.SUPABASE_KEY),
    }, service="database")
    client = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    log_debug("✅ Supabase client initialized successfully", service="database")
    return client
