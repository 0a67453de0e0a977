"""Tenant profile endpoints: list, seed, bulk password-hash update, domain-exclusion delete."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from supabase import Client

from rcm_api.admin.cascade import CascadeDeleter, select_deletion_candidates
from rcm_api.admin.naming import display_name
from rcm_api.admin.seeding import seed_profiles
from rcm_api.db.repo_identities import IdentityRepository
from rcm_api.db.repo_profiles import ProfileRepository
from rcm_api.deps import (
    ResolvedTenant,
    get_admin_client,
    get_cascade_deleter,
    get_seed_config,
    resolve_tenant,
)
from rcm_api.errors import AdminAPIError, CascadeDeleteError, StoreError
from rcm_api.schemas import (
    DeleteProfilesResponse,
    ListResponse,
    ProfileScopeRequest,
    SeedResponse,
    UpdateProfilesResponse,
)
from rcm_api.seed import SeedConfig

router = APIRouter(prefix="/api/rcm/{tenant}/profiles", tags=["profiles"])
logger = logging.getLogger(__name__)

MSG_SCOPE_REQUIRED = 'Request must set either "affect_all": true or a non-empty "ids" list'
MSG_SCOPE_AMBIGUOUS = 'Request must not set both "affect_all" and "ids"'


@router.get("", response_model=ListResponse)
def list_profiles(
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
) -> ListResponse:
    """List every profile of the tenant, newest first, with a display name."""
    repo = ProfileRepository(client, tenant.config.db_schema)
    try:
        rows = repo.list_profiles()
    except StoreError as e:
        logger.error("profiles.list.failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch profiles", e.message)

    items = [
        {**row, "full_name": display_name(row.get("first_name"), row.get("last_name"))}
        for row in rows
    ]
    return ListResponse(items=items, total=len(items))


@router.post("", response_model=SeedResponse)
def seed_profile_rows(
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
    config: SeedConfig = Depends(get_seed_config),
) -> SeedResponse:
    """Insert one profile per configured demo user.

    Per-record failures (missing identity, duplicate key) are reported in
    ``errors``; the batch itself still returns 200.
    """
    try:
        identities = IdentityRepository(client).list_all_users()
    except StoreError as e:
        logger.error("profiles.seed.identities_failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch auth users", e.message)

    report = seed_profiles(
        ProfileRepository(client, tenant.config.db_schema),
        identities,
        config,
        tenant.config,
    )
    return SeedResponse(**report.to_response("profiles"))


@router.put("", response_model=UpdateProfilesResponse)
def update_profile_passwords(
    body: Optional[ProfileScopeRequest] = None,
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
) -> UpdateProfilesResponse:
    """Reset ``password`` to the tenant's configured hash.

    The scope is explicit: ``{"affect_all": true}`` or ``{"ids": [...]}``.

    Raises:
        AdminAPIError 400: No scope, or both scopes
        AdminAPIError 500: Store rejected the update
    """
    if body is None or not (body.affect_all or body.ids):
        raise AdminAPIError(status.HTTP_400_BAD_REQUEST, MSG_SCOPE_REQUIRED)
    if body.affect_all and body.ids:
        raise AdminAPIError(status.HTTP_400_BAD_REQUEST, MSG_SCOPE_AMBIGUOUS)

    repo = ProfileRepository(client, tenant.config.db_schema)
    try:
        profiles = repo.set_password_hash(
            tenant.config.password_hash,
            ids=None if body.affect_all else body.ids,
        )
    except StoreError as e:
        logger.error("profiles.password_update.failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update profiles", e.message)

    logger.info(
        "profiles.password_update.completed",
        extra={"updated": len(profiles), "affect_all": body.affect_all},
    )
    return UpdateProfilesResponse(
        updated=len(profiles),
        message=f"Successfully updated {len(profiles)} profiles with new password hash",
        profiles=profiles,
    )


@router.delete("", response_model=DeleteProfilesResponse)
def delete_foreign_domain_profiles(
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
    config: SeedConfig = Depends(get_seed_config),
    deleter: CascadeDeleter = Depends(get_cascade_deleter),
) -> DeleteProfilesResponse:
    """Delete every profile outside the allowed email domains, with its dependent rows.

    Raises:
        AdminAPIError 500: Listing failed, or the cascade failed (nothing removed)
    """
    repo = ProfileRepository(client, tenant.config.db_schema)
    try:
        profiles = repo.list_ids_and_emails()
    except StoreError as e:
        logger.error("profiles.cascade.list_failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch profiles", e.message)

    candidates = select_deletion_candidates(profiles, config.allowed_domains)
    if not candidates:
        return DeleteProfilesResponse(
            deleted=0,
            message="No profiles found to delete",
            deleted_profiles=[],
        )

    ids = [c["id"] for c in candidates]
    try:
        deleted = deleter.delete_profiles(tenant.config, ids)
    except CascadeDeleteError as e:
        logger.error("profiles.cascade.failed", extra={**e.to_details(), "attempted": len(ids)})
        raise AdminAPIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to delete profiles",
            e.to_details(),
            extra={"attempted": len(ids)},
        )

    logger.info("profiles.cascade.completed", extra={"deleted": len(deleted), "attempted": len(ids)})
    return DeleteProfilesResponse(
        deleted=len(deleted),
        message=f"Successfully deleted {len(deleted)} profiles with non-matching domains",
        deleted_profiles=deleted,
    )
