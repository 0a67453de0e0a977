"""Environment variable resolution utilities.

Canonical env names first, legacy dashboard names (``NEXT_PUBLIC_*``) as
fallback. Required values fail fast with ``ConfigurationError``.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from rcm_api.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8000",
]


def _first_env(*names: str) -> tuple[Optional[str], Optional[str]]:
    """Return (name, value) of the first non-empty variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return name, value
    return None, None


def get_supabase_url() -> str:
    """Get Supabase project URL.

    Canonical: SUPABASE_URL
    Fallback (legacy dashboard): NEXT_PUBLIC_SUPABASE_URL

    Raises:
        ConfigurationError: If neither is set
    """
    name, url = _first_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
    if not url:
        raise ConfigurationError(
            "Missing Supabase URL. Set SUPABASE_URL (or legacy NEXT_PUBLIC_SUPABASE_URL) to continue."
        )
    if name != "SUPABASE_URL":
        logger.info("Using legacy %s (consider migrating to SUPABASE_URL)", name)
    return url


def get_supabase_anon_key() -> str:
    """Get Supabase public (anon / publishable) key.

    Priority:
    1. SUPABASE_ANON_KEY
    2. SB_PUBLISHABLE_KEY
    3. NEXT_PUBLIC_SUPABASE_ANON_KEY (legacy dashboard)

    Raises:
        ConfigurationError: If none is set
    """
    name, key = _first_env("SUPABASE_ANON_KEY", "SB_PUBLISHABLE_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")
    if not key:
        raise ConfigurationError(
            "Missing Supabase anon key. Set SUPABASE_ANON_KEY to continue."
        )
    if name == "NEXT_PUBLIC_SUPABASE_ANON_KEY":
        logger.info("Using legacy NEXT_PUBLIC_SUPABASE_ANON_KEY (consider migrating to SUPABASE_ANON_KEY)")
    return key


def get_supabase_service_role_key() -> str:
    """Get Supabase service role (secret) key. Bypasses RLS; server-only.

    Priority:
    1. SUPABASE_SERVICE_ROLE_KEY
    2. SB_SECRET_KEY

    Raises:
        ConfigurationError: If neither is set
    """
    _, key = _first_env("SUPABASE_SERVICE_ROLE_KEY", "SB_SECRET_KEY")
    if not key:
        raise ConfigurationError(
            "Missing Supabase service role key. Set SUPABASE_SERVICE_ROLE_KEY to continue."
        )
    return key


def get_database_url() -> Optional[str]:
    """Get the direct Postgres URL used for transactional cascades.

    Optional: when unset, multi-table deletes run as a compensating saga over
    the Supabase REST API instead of a single transaction.
    """
    return os.getenv("DATABASE_URL") or None


def get_seed_config_path() -> Optional[Path]:
    """Get an override path for the seed configuration document (RCM_SEED_CONFIG)."""
    path = os.getenv("RCM_SEED_CONFIG")
    return Path(path) if path else None


def json_logs_enabled() -> bool:
    """JSON logging is on unless RCM_JSON_LOGS=false."""
    return os.getenv("RCM_JSON_LOGS", "true").lower() != "false"


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins() -> list[str]:
    """Get CORS allow-list.

    Production: explicit comma-separated CORS_ALLOWED_ORIGINS.
    Dev fallback: localhost variants.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return list(DEFAULT_CORS_ORIGINS)
