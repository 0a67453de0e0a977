"""Profile-to-project mapping endpoints.

Served under ``/userprofilemapping`` and the ``/profiles-projects-mapping`` alias.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from supabase import Client

from rcm_api.admin.naming import display_name
from rcm_api.admin.seeding import seed_mappings
from rcm_api.db.repo_identities import IdentityRepository
from rcm_api.db.repo_mappings import MappingRepository
from rcm_api.deps import ResolvedTenant, get_admin_client, get_seed_config, resolve_tenant
from rcm_api.errors import AdminAPIError, StoreError
from rcm_api.schemas import DeleteMappingsResponse, ListResponse, SeedResponse
from rcm_api.seed import SeedConfig

router = APIRouter(tags=["mappings"])
logger = logging.getLogger(__name__)

MAPPING_PATH = "/api/rcm/{tenant}/userprofilemapping"
MAPPING_ALIAS_PATH = "/api/rcm/{tenant}/profiles-projects-mapping"

MAPPING_FIELDS = ("id", "profile_id", "project_id", "created_at", "updated_at", "created_by", "updated_by")
PROFILE_FIELDS = ("id", "email", "first_name", "last_name", "ehs_id", "role")
PROJECT_FIELDS = (
    "id", "name", "client_id", "client_sub_id", "project_id",
    "created_at", "updated_at", "created_by", "updated_by",
)


def _serialize_profile(profile: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not profile:
        return None
    out = {field: profile.get(field) for field in PROFILE_FIELDS}
    out["full_name"] = display_name(profile.get("first_name"), profile.get("last_name"))
    return out


def serialize_mapping(row: dict[str, Any]) -> dict[str, Any]:
    """Flatten the embedded ``profiles``/``projects`` objects into ``profile``/``project``."""
    out = {field: row.get(field) for field in MAPPING_FIELDS}
    out["profile"] = _serialize_profile(row.get("profiles"))
    project = row.get("projects")
    out["project"] = {field: project.get(field) for field in PROJECT_FIELDS} if project else None
    return out


def list_mappings(
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
) -> ListResponse:
    """List mappings with their profile and project, newest first."""
    repo = MappingRepository(client, tenant.config.db_schema)
    try:
        rows = repo.list_mappings()
    except StoreError as e:
        logger.error("mappings.list.failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch mappings", e.message)

    items = [serialize_mapping(row) for row in rows]
    return ListResponse(items=items, total=len(items))


def seed_mapping_rows(
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
    config: SeedConfig = Depends(get_seed_config),
) -> SeedResponse:
    """Map each configured demo user to its domain's project."""
    try:
        identities = IdentityRepository(client).list_all_users()
    except StoreError as e:
        logger.error("mappings.seed.identities_failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch auth users", e.message)

    report = seed_mappings(MappingRepository(client, tenant.config.db_schema), identities, config)
    return SeedResponse(**report.to_response("mappings"))


def delete_all_mappings(
    tenant: ResolvedTenant = Depends(resolve_tenant),
    client: Client = Depends(get_admin_client),
) -> DeleteMappingsResponse:
    """Delete every mapping row one at a time.

    Raises:
        AdminAPIError 500: Listing failed, or at least one row could not be deleted
            (``details`` lists ``{id, error}``; the other rows stay deleted)
    """
    repo = MappingRepository(client, tenant.config.db_schema)
    try:
        mapping_ids = repo.list_ids()
    except StoreError as e:
        logger.error("mappings.delete.list_failed", extra={"error": e.message})
        raise AdminAPIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch existing mappings", e.message
        )

    deleted = 0
    failures: list[dict[str, Any]] = []
    for mapping_id in mapping_ids:
        try:
            if repo.delete_by_id(mapping_id):
                deleted += 1
        except StoreError as e:
            failures.append({"id": mapping_id, "error": e.message})

    if failures:
        logger.error("mappings.delete.partial_failure", extra={"deleted": deleted, "failed": len(failures)})
        raise AdminAPIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Some deletions failed",
            failures,
            extra={"deleted": deleted, "failed": len(failures)},
        )

    logger.info("mappings.delete.completed", extra={"deleted": deleted})
    return DeleteMappingsResponse(deleted=deleted, message=f"Successfully deleted {deleted} mappings")


for _path, _in_schema in ((MAPPING_PATH, True), (MAPPING_ALIAS_PATH, False)):
    router.add_api_route(
        _path, list_mappings, methods=["GET"], response_model=ListResponse, include_in_schema=_in_schema
    )
    router.add_api_route(
        _path, seed_mapping_rows, methods=["POST"], response_model=SeedResponse, include_in_schema=_in_schema
    )
    router.add_api_route(
        _path,
        delete_all_mappings,
        methods=["DELETE"],
        response_model=DeleteMappingsResponse,
        include_in_schema=_in_schema,
    )
