"""Pydantic schemas for API requests/responses."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Shared
# ============================================================================


class ListResponse(BaseModel):
    """Rows ready for a CRUD table page."""

    items: list[dict[str, Any]]
    total: int


class SeedResponse(BaseModel):
    """Outcome of a seed-insert batch (profiles or mappings)."""

    success: bool = True
    created: int
    failed: int
    total: int
    results: list[dict[str, Any]]
    errors: list[dict[str, Any]]
    message: str


# ============================================================================
# /api/rcm/{tenant}/profiles
# ============================================================================


class ProfileScopeRequest(BaseModel):
    """Request body for PUT /profiles. Exactly one scope must be named."""

    affect_all: bool = Field(default=False, description="Update every profile in the tenant")
    ids: Optional[list[str]] = Field(default=None, description="Profile ids to update")


class UpdatedProfile(BaseModel):
    id: str
    email: Optional[str] = None
    ehs_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None


class UpdateProfilesResponse(BaseModel):
    success: bool = True
    updated: int
    message: str
    profiles: list[UpdatedProfile]


class DeletedProfile(BaseModel):
    id: str
    email: Optional[str] = None


class DeleteProfilesResponse(BaseModel):
    success: bool = True
    deleted: int
    message: str
    deleted_profiles: list[DeletedProfile]


# ============================================================================
# /api/rcm/{tenant}/userprofilemapping
# ============================================================================


class DeleteMappingsResponse(BaseModel):
    success: bool = True
    deleted: int
    message: str


# ============================================================================
# /api/rcm/users
# ============================================================================


class CreateUserRequest(BaseModel):
    """Request body for POST /api/rcm/users.

    email/password are optional here so a missing field is reported with the
    same message as a malformed one.
    """

    email: Optional[str] = None
    password: Optional[str] = None
    email_confirmed: bool = True


class CreatedUser(BaseModel):
    id: str
    email: Optional[str] = None
    created_at: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    is_anonymous: Optional[bool] = None


class CreateUserResponse(BaseModel):
    success: bool = True
    user: CreatedUser
    message: str = "User created successfully"


class BulkCreateUsersRequest(BaseModel):
    """Request body for PUT /api/rcm/users.

    Entries are kept raw and validated per position so every bad entry is reported.
    """

    users: Optional[list[Any]] = None


class BulkCreateUsersResponse(BaseModel):
    success: bool = True
    created: int
    failed: int
    total: int
    results: list[dict[str, Any]]
    errors: list[dict[str, Any]]
    message: str


# ============================================================================
# Health
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    services: dict[str, str]
