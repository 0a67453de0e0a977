"""Repository for <schema>.profiles_projects_mapping and the read-only projects table."""

from typing import Any, Optional

from supabase import Client

from rcm_api.db.store import execute

PROFILE_EMBED_COLUMNS = "id, email, first_name, last_name, ehs_id, role"
PROJECT_COLUMNS = (
    "id, name, client_id, client_sub_id, project_id, "
    "created_at, updated_at, created_by, updated_by"
)
MAPPING_LIST_COLUMNS = (
    "id, profile_id, project_id, created_at, updated_at, created_by, updated_by, "
    f"profiles!profiles_projects_mapping_profile_id_fkey({PROFILE_EMBED_COLUMNS}), "
    f"projects!profiles_projects_mapping_project_id_fkey({PROJECT_COLUMNS})"
)


class MappingRepository:
    """Profile-to-project mapping access for one tenant schema."""

    def __init__(self, client: Client, schema: str):
        self.client = client
        self.schema = schema

    def _table(self, name: str = "profiles_projects_mapping"):
        return self.client.schema(self.schema).table(name)

    def list_mappings(self) -> list[dict[str, Any]]:
        """All mappings with the embedded profile and project, newest first."""
        return execute(
            self._table().select(MAPPING_LIST_COLUMNS).order("created_at", desc=True)
        )

    def list_ids(self) -> list[Any]:
        return [row["id"] for row in execute(self._table().select("id"))]

    def find_project_by_number(self, project_number: int) -> Optional[dict[str, Any]]:
        """Resolve a project by its tenant-local ``project_id`` (not the row id)."""
        rows = execute(
            self._table("projects")
            .select("id, name, project_id")
            .eq("project_id", project_number)
            .limit(1)
        )
        return rows[0] if rows else None

    def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        rows = execute(self._table().insert(row))
        return rows[0] if rows else row

    def delete_by_id(self, mapping_id: Any) -> int:
        """Delete one mapping; returns the number of rows actually removed."""
        return len(execute(self._table().delete().eq("id", mapping_id)))
