"""Multi-table profile deletion.

Profiles are referenced from several tables (mappings, refresh tokens, some in
other tenant schemas). Removing them is all-or-nothing:

- ``SqlCascadeDeleter``: one Postgres transaction (DATABASE_URL set)
- ``SagaCascadeDeleter``: PostgREST only; snapshot, delete, and re-insert the
  snapshots in reverse order if a later step fails

Schema/table/column names come from the validated seed configuration
(``^[a-z_][a-z0-9_]*$``) and are the only values interpolated into SQL.
"""

import logging
from typing import Any, Iterable, Protocol, runtime_checkable

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from supabase import Client

from rcm_api.db.store import execute
from rcm_api.errors import CascadeDeleteError, StoreError
from rcm_api.seed.models import DependentTable, TenantConfig

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


def select_deletion_candidates(
    profiles: Iterable[dict[str, Any]], allowed_domains: Iterable[str]
) -> list[dict[str, Any]]:
    """Profiles whose email contains none of ``@<domain>`` for the allowed domains."""
    markers = [f"@{domain}" for domain in allowed_domains]
    return [
        {"id": p["id"], "email": p.get("email")}
        for p in profiles
        if not any(marker in (p.get("email") or "") for marker in markers)
    ]


# ── Protocol ──────────────────────────────────────────────────────────────────

@runtime_checkable
class CascadeDeleter(Protocol):
    """Deletes profiles together with every configured dependent row."""

    def delete_profiles(self, tenant: TenantConfig, ids: list[str]) -> list[dict[str, Any]]:
        """Remove dependents, then the profiles.

        Returns:
            Deleted profiles as ``{id, email}``

        Raises:
            CascadeDeleteError: Nothing was removed (rolled back or compensated)
        """
        ...


# ── Transactional (direct Postgres) ───────────────────────────────────────────

class SqlCascadeDeleter:
    """Run the whole cascade in one SQLAlchemy transaction."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def delete_profiles(self, tenant: TenantConfig, ids: list[str]) -> list[dict[str, Any]]:
        if not ids:
            return []

        parent = f"{tenant.db_schema}.{PROFILES_TABLE}"
        step = parent
        try:
            with self._session_factory() as session, session.begin():
                for dep in tenant.cascade:
                    step = dep.qualified_name
                    session.execute(
                        text(f"DELETE FROM {dep.qualified_name} WHERE {dep.column} IN :ids")
                        .bindparams(bindparam("ids", expanding=True)),
                        {"ids": ids},
                    )

                step = parent
                rows = session.execute(
                    text(f"SELECT id, email FROM {parent} WHERE id IN :ids")
                    .bindparams(bindparam("ids", expanding=True)),
                    {"ids": ids},
                ).mappings().all()
                session.execute(
                    text(f"DELETE FROM {parent} WHERE id IN :ids")
                    .bindparams(bindparam("ids", expanding=True)),
                    {"ids": ids},
                )
        except SQLAlchemyError as e:
            message = str(getattr(e, "orig", None) or e)
            logger.error(
                "profiles.cascade.rolled_back",
                extra={"step": step, "error": message, "attempted": len(ids)},
            )
            raise CascadeDeleteError(step, message, compensated=True) from e

        return [{"id": row["id"], "email": row["email"]} for row in rows]


# ── Saga (PostgREST) ──────────────────────────────────────────────────────────

class SagaCascadeDeleter:
    """Compensating cascade over the Supabase REST API.

    The parent delete gets exactly one retry. Compensation failures are
    logged and reported through ``compensated=False``; they never mask the
    original error.
    """

    def __init__(self, client: Client):
        self.client = client

    def _table(self, schema: str, table: str):
        return self.client.schema(schema).table(table)

    def _compensate(self, completed: list[tuple[DependentTable, list[dict[str, Any]]]]) -> bool:
        ok = True
        for dep, rows in reversed(completed):
            if not rows:
                continue
            try:
                execute(self._table(dep.db_schema, dep.table).insert(rows))
            except StoreError as e:
                ok = False
                logger.error(
                    "profiles.cascade.compensation_failed",
                    extra={"step": dep.qualified_name, "rows": len(rows), "error": e.message},
                )
        return ok

    def delete_profiles(self, tenant: TenantConfig, ids: list[str]) -> list[dict[str, Any]]:
        if not ids:
            return []

        completed: list[tuple[DependentTable, list[dict[str, Any]]]] = []
        for dep in tenant.cascade:
            try:
                snapshot = execute(self._table(dep.db_schema, dep.table).select("*").in_(dep.column, ids))
                execute(self._table(dep.db_schema, dep.table).delete().in_(dep.column, ids))
            except StoreError as e:
                compensated = self._compensate(completed)
                raise CascadeDeleteError(dep.qualified_name, e.message, compensated=compensated) from e
            completed.append((dep, snapshot))

        parent = f"{tenant.db_schema}.{PROFILES_TABLE}"
        try:
            deleted = self._delete_parents(tenant.db_schema, ids)
        except StoreError as first:
            logger.warning("profiles.cascade.retrying", extra={"step": parent, "error": first.message})
            try:
                deleted = self._delete_parents(tenant.db_schema, ids)
            except StoreError as second:
                compensated = self._compensate(completed)
                raise CascadeDeleteError(
                    parent, first.message, retry_error=second.message, compensated=compensated
                ) from second

        return [{"id": row["id"], "email": row.get("email")} for row in deleted]

    def _delete_parents(self, schema: str, ids: list[str]) -> list[dict[str, Any]]:
        return execute(self._table(schema, PROFILES_TABLE).delete().in_("id", ids))
