"""Demo-record seeding for profiles and profile-project mappings.

Both routines walk the configured demo users in order, match each one to an
identity by email and insert one row. A failed record is reported and the
batch continues; nothing is rolled back or deduplicated.
"""

import logging
from typing import Any

from rcm_api.admin.naming import EhsIdAllocator, split_full_name
from rcm_api.db.repo_identities import index_by_email
from rcm_api.db.repo_mappings import MappingRepository
from rcm_api.db.repo_profiles import ProfileRepository
from rcm_api.errors import StoreError
from rcm_api.seed.models import SeedConfig, TenantConfig

logger = logging.getLogger(__name__)


class SeedReport:
    """Per-record outcomes of one seeding batch."""

    def __init__(self, total: int):
        self.total = total
        self.results: list[dict[str, Any]] = []
        self.errors: list[dict[str, Any]] = []

    def succeeded(self, **fields: Any) -> None:
        self.results.append({**fields, "success": True})

    def failed(self, email: str, error: str) -> None:
        self.errors.append({"email": email, "error": error})

    def to_response(self, noun: str) -> dict[str, Any]:
        created = len(self.results)
        return {
            "success": True,
            "created": created,
            "failed": len(self.errors),
            "total": self.total,
            "results": self.results,
            "errors": self.errors,
            "message": f"Successfully created {created} out of {self.total} {noun}",
        }


def _identity_not_found(email: str) -> str:
    return f"Auth user not found for email: {email}"


def seed_profiles(
    repo: ProfileRepository,
    identities: list[dict[str, Any]],
    config: SeedConfig,
    tenant: TenantConfig,
) -> SeedReport:
    """Insert one profile per demo user whose identity exists.

    Tenant-local ids are numbered per domain and only for records that found
    an identity; a number stays consumed when the insert itself fails.
    """
    by_email = index_by_email(identities)
    allocator = EhsIdAllocator({d: cfg.ehs_id_prefix for d, cfg in config.domains.items()})
    report = SeedReport(total=len(config.demo_users))

    for user in config.demo_users:
        identity = by_email.get(user.email)
        if identity is None:
            report.failed(user.email, _identity_not_found(user.email))
            continue

        ehs_id = allocator.next_id(user.domain)
        first_name, last_name = split_full_name(user.name)
        try:
            repo.insert(
                {
                    "id": identity["id"],
                    "email": user.email,
                    "ehs_id": ehs_id,
                    "first_name": first_name,
                    "last_name": last_name,
                    "role": user.role,
                    "password": tenant.password_hash,
                    "capacity": config.default_capacity,
                    "created_by": config.default_actor_id,
                    "updated_by": config.default_actor_id,
                }
            )
        except StoreError as e:
            report.failed(user.email, f"Profile creation failed: {e.message}")
            continue

        report.succeeded(
            email=user.email,
            name=user.name,
            ehs_id=ehs_id,
            role=user.role,
            auth_id=identity["id"],
        )

    logger.info(
        "profiles.seed.completed",
        extra={"created": len(report.results), "failed": len(report.errors), "total": report.total},
    )
    return report


def seed_mappings(
    repo: MappingRepository,
    identities: list[dict[str, Any]],
    config: SeedConfig,
) -> SeedReport:
    """Map every demo user to the project numbered for its domain (or its own override)."""
    by_email = index_by_email(identities)
    report = SeedReport(total=len(config.demo_users))

    for user in config.demo_users:
        identity = by_email.get(user.email)
        if identity is None:
            report.failed(user.email, _identity_not_found(user.email))
            continue

        project_number = config.project_number_for(user)
        try:
            project = repo.find_project_by_number(project_number)
        except StoreError as e:
            logger.warning(
                "mappings.seed.project_lookup_failed",
                extra={"project_number": project_number, "error": e.message},
            )
            project = None
        if project is None:
            report.failed(user.email, f"Project with ID {project_number} not found")
            continue

        try:
            repo.insert(
                {
                    "profile_id": identity["id"],
                    "project_id": project["id"],
                    "created_by": config.default_actor_id,
                    "updated_by": config.default_actor_id,
                }
            )
        except StoreError as e:
            report.failed(user.email, f"Mapping creation failed: {e.message}")
            continue

        report.succeeded(
            email=user.email,
            name=user.name,
            project_id=project_number,
            domain=user.domain,
        )

    logger.info(
        "mappings.seed.completed",
        extra={"created": len(report.results), "failed": len(report.errors), "total": report.total},
    )
    return report
