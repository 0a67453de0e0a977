"""Identity endpoints: list, create one, bulk create."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from supabase import Client

from rcm_api.admin.validators import validate_credentials, validate_user_batch
from rcm_api.db.repo_identities import IdentityRepository, serialize_auth_user
from rcm_api.deps import get_admin_client
from rcm_api.errors import AdminAPIError, StoreError
from rcm_api.schemas import (
    BulkCreateUsersRequest,
    BulkCreateUsersResponse,
    CreateUserRequest,
    CreateUserResponse,
    ListResponse,
)

router = APIRouter(prefix="/api/rcm/users", tags=["users"])
logger = logging.getLogger(__name__)

MSG_USERS_REQUIRED = "Users array is required and must not be empty"


@router.get("", response_model=ListResponse)
def list_users(client: Client = Depends(get_admin_client)) -> ListResponse:
    """List every identity (all pages)."""
    try:
        users = IdentityRepository(client).list_all_users()
    except StoreError as e:
        logger.error("users.list.failed", extra={"error": e.message})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch users", e.message)

    items = [serialize_auth_user(u) for u in users]
    return ListResponse(items=items, total=len(items))


@router.post("", response_model=CreateUserResponse)
def create_user(
    body: Optional[CreateUserRequest] = None,
    client: Client = Depends(get_admin_client),
) -> CreateUserResponse:
    """Create one identity.

    Raises:
        AdminAPIError 400: Missing field, malformed email or short password
        AdminAPIError 500: Provider rejected the user
    """
    body = body or CreateUserRequest()
    errors = validate_credentials(body.email, body.password)
    if errors:
        raise AdminAPIError(status.HTTP_400_BAD_REQUEST, errors[0])

    try:
        user = IdentityRepository(client).create_user(
            body.email, body.password, email_confirm=body.email_confirmed
        )
    except StoreError as e:
        logger.error("users.create.failed", extra={"error": e.message, "error_code": e.code})
        raise AdminAPIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create user", e.message)

    logger.info("users.create.completed", extra={"user_id": user["id"]})
    return CreateUserResponse(user=user)


@router.put("", response_model=BulkCreateUsersResponse)
def bulk_create_users(
    body: Optional[BulkCreateUsersRequest] = None,
    client: Client = Depends(get_admin_client),
) -> BulkCreateUsersResponse:
    """Create several identities, one provider call each.

    Every entry is validated before the first call; one invalid entry rejects
    the whole request. Provider failures are reported per entry.
    """
    users = body.users if body else None
    if not users:
        raise AdminAPIError(status.HTTP_400_BAD_REQUEST, MSG_USERS_REQUIRED)

    validation_errors = validate_user_batch(users)
    if validation_errors:
        raise AdminAPIError(status.HTTP_400_BAD_REQUEST, "Validation errors", validation_errors)

    repo = IdentityRepository(client)
    results: list[dict[str, Any]] = []
    errors: list[dict[str, Any]] = []
    for index, entry in enumerate(users, start=1):
        try:
            created = repo.create_user(
                entry["email"],
                entry["password"],
                email_confirm=entry.get("email_confirmed") is not False,
            )
        except StoreError as e:
            errors.append({"index": index, "email": entry["email"], "error": e.message})
            continue
        results.append({"index": index, "email": entry["email"], "id": created["id"], "success": True})

    logger.info(
        "users.bulk_create.completed",
        extra={"created": len(results), "failed": len(errors), "total": len(users)},
    )
    return BulkCreateUsersResponse(
        created=len(results),
        failed=len(errors),
        total=len(users),
        results=results,
        errors=errors,
        message=f"Successfully created {len(results)} out of {len(users)} users",
    )
