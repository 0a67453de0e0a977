"""Supabase client construction.

SECURITY NOTICE:
- The service role key bypasses RLS and is server-only (NEVER exposed to pages)
- The session-scoped client uses the anon key and the caller's own access token

Clients are built per request rather than cached: ``Client.schema()`` rebinds
the PostgREST client in place, so a process-wide instance would leak the schema
selected by one request into another.
"""

import logging
from typing import Optional

from supabase import Client, ClientOptions, create_client

from rcm_api.config.env import (
    get_supabase_anon_key,
    get_supabase_service_role_key,
    get_supabase_url,
)

logger = logging.getLogger(__name__)


def get_supabase_admin_client() -> Client:
    """Get Supabase admin client for privileged table and identity operations.

    Uses the service role key, with token refresh and session persistence
    disabled (no user session exists on the server side).

    Raises:
        ConfigurationError: If SUPABASE_URL or the service role key is missing
    """
    url = get_supabase_url()
    service_role_key = get_supabase_service_role_key()

    logger.debug(
        "Initializing Supabase admin client",
        extra={"supabase_url": url, "key_type": "service_role"},
    )

    return create_client(
        url,
        service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def get_supabase_session_client(access_token: Optional[str] = None) -> Client:
    """Get Supabase client scoped to the caller's own access rights.

    Uses the anon key; when ``access_token`` is given, PostgREST requests run
    as that user so RLS policies apply.

    Raises:
        ConfigurationError: If SUPABASE_URL or the anon key is missing
    """
    url = get_supabase_url()
    anon_key = get_supabase_anon_key()

    logger.debug(
        "Initializing Supabase session client",
        extra={"supabase_url": url, "key_type": "anon", "forwarded_session": bool(access_token)},
    )

    client = create_client(
        url,
        anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    if access_token:
        client.postgrest.auth(access_token)
    return client
