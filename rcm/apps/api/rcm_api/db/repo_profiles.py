"""Repository for <schema>.profiles rows."""

from datetime import datetime, timezone
from typing import Any, Optional

from supabase import Client

from rcm_api.db.store import execute

PROFILE_LIST_COLUMNS = (
    "id, email, ehs_id, first_name, last_name, role, updated_at, created_at, "
    "created_by, updated_by, password, capacity"
)
UPDATED_PROFILE_FIELDS = ("id", "email", "ehs_id", "first_name", "last_name", "role")

# PostgREST refuses an unfiltered UPDATE; no profile id can equal the nil UUID
NIL_UUID = "00000000-0000-0000-0000-000000000000"


class ProfileRepository:
    """Profile table access for one tenant schema."""

    def __init__(self, client: Client, schema: str):
        self.client = client
        self.schema = schema

    def _table(self):
        return self.client.schema(self.schema).table("profiles")

    def list_profiles(self) -> list[dict[str, Any]]:
        """All profiles, newest first."""
        return execute(
            self._table().select(PROFILE_LIST_COLUMNS).order("created_at", desc=True)
        )

    def list_ids_and_emails(self) -> list[dict[str, Any]]:
        return execute(self._table().select("id, email"))

    def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert one profile row and return the stored representation."""
        rows = execute(self._table().insert(row))
        return rows[0] if rows else row

    def set_password_hash(
        self, password_hash: str, ids: Optional[list[str]] = None
    ) -> list[dict[str, Any]]:
        """Overwrite ``password`` for the given ids, or for every profile when ids is None.

        Returns:
            Updated profiles projected to id, email, ehs_id, first/last name and role
        """
        query = self._table().update(
            {
                "password": password_hash,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        if ids is None:
            query = query.neq("id", NIL_UUID)
        else:
            query = query.in_("id", ids)

        rows = execute(query)
        return [{field: row.get(field) for field in UPDATED_PROFILE_FIELDS} for row in rows]
