"""FastAPI dependencies shared by the admin routers.

Tests replace these through ``app.dependency_overrides``.
"""

import logging
from typing import NamedTuple

from fastapi import Depends, status
from supabase import Client

from rcm_api.admin.cascade import CascadeDeleter, SagaCascadeDeleter, SqlCascadeDeleter
from rcm_api.context import tenant_var
from rcm_api.db.session import get_session_factory
from rcm_api.errors import AdminAPIError, ConfigurationError
from rcm_api.seed import SeedConfig, TenantConfig, load_seed_config
from rcm_api.supabase_client import get_supabase_admin_client

logger = logging.getLogger(__name__)


class ResolvedTenant(NamedTuple):
    """Tenant key from the URL and its configuration."""

    key: str
    config: TenantConfig


def get_admin_client() -> Client:
    """Build a privileged Supabase client for this request.

    Raises:
        AdminAPIError 500: Supabase URL or service role key not configured
    """
    try:
        return get_supabase_admin_client()
    except ConfigurationError as e:
        logger.error("supabase.admin_client.unavailable", extra={"error": str(e)})
        raise AdminAPIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Server configuration error",
            str(e),
        ) from e


def get_seed_config() -> SeedConfig:
    """Process-wide seed configuration.

    Raises:
        AdminAPIError 500: Configuration document missing or invalid
    """
    try:
        return load_seed_config()
    except ConfigurationError as e:
        logger.error("seed_config.unavailable", extra={"error": str(e)})
        raise AdminAPIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Server configuration error",
            str(e),
        ) from e


async def resolve_tenant(tenant: str, config: SeedConfig = Depends(get_seed_config)) -> ResolvedTenant:
    """Resolve the ``{tenant}`` path segment and bind it to the logging context.

    Async so the context variable is set in the request task itself.

    Raises:
        AdminAPIError 404: Unknown tenant key
    """
    tenant_config = config.tenants.get(tenant)
    if tenant_config is None:
        raise AdminAPIError(status.HTTP_404_NOT_FOUND, f"Unknown tenant: {tenant}")
    tenant_var.set(tenant)
    return ResolvedTenant(key=tenant, config=tenant_config)


def get_cascade_deleter(client: Client = Depends(get_admin_client)) -> CascadeDeleter:
    """Transactional deleter when DATABASE_URL is set, compensating saga otherwise."""
    session_factory = get_session_factory()
    if session_factory is not None:
        return SqlCascadeDeleter(session_factory)
    return SagaCascadeDeleter(client)
