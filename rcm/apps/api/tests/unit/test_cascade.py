"""Deletion candidates and the transactional (SQL) cascade.

SQLite with attached in-memory databases stands in for the tenant schemas.
"""

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rcm_api.admin.cascade import CascadeDeleter, SagaCascadeDeleter, SqlCascadeDeleter, select_deletion_candidates
from rcm_api.errors import CascadeDeleteError
from rcm_api.seed.models import DependentTable, TenantConfig

PA_TENANT = TenantConfig(
    schema="ehs_pa",
    label="Prior Authorization",
    password_hash="x",
    cascade=[
        DependentTable(schema="ehs_pa", table="profiles_projects_mapping", column="profile_id"),
        DependentTable(schema="ehs_pa", table="refresh_tokens", column="user_id"),
        DependentTable(schema="ehs_ar", table="refresh_tokens", column="user_id"),
    ],
)


def test_candidates_exclude_allowed_domains():
    profiles = [
        {"id": "1", "email": "aarav.sharma@acme.com"},
        {"id": "2", "email": "x@gmail.com"},
        {"id": "3", "email": "dia@dollar.care"},
        {"id": "4", "email": None},
        {"id": "5", "email": "acme.com@evil.io"},
    ]

    candidates = select_deletion_candidates(profiles, ["acme.com", "dollar.care"])

    assert [c["id"] for c in candidates] == ["2", "4", "5"]


def test_deleters_satisfy_protocol(fake_supabase):
    assert isinstance(SagaCascadeDeleter(fake_supabase), CascadeDeleter)
    assert isinstance(SqlCascadeDeleter(sessionmaker()), CascadeDeleter)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _attach_schemas(dbapi_connection, connection_record):
        for schema in ("ehs_pa", "ehs_ar"):
            dbapi_connection.execute(f"ATTACH DATABASE ':memory:' AS {schema}")

    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE ehs_pa.profiles (id TEXT PRIMARY KEY, email TEXT)"))
        conn.execute(text(
            "CREATE TABLE ehs_pa.profiles_projects_mapping (id INTEGER PRIMARY KEY, profile_id TEXT)"
        ))
        conn.execute(text("CREATE TABLE ehs_pa.refresh_tokens (id INTEGER PRIMARY KEY, user_id TEXT)"))
        conn.execute(text("CREATE TABLE ehs_ar.refresh_tokens (id INTEGER PRIMARY KEY, user_id TEXT)"))
        for pid, email in (("keep", "a@acme.com"), ("drop-1", "x@gmail.com"), ("drop-2", "y@gmail.com")):
            conn.execute(text("INSERT INTO ehs_pa.profiles (id, email) VALUES (:id, :email)"),
                         {"id": pid, "email": email})
            conn.execute(text("INSERT INTO ehs_pa.profiles_projects_mapping (profile_id) VALUES (:id)"),
                         {"id": pid})
            conn.execute(text("INSERT INTO ehs_pa.refresh_tokens (user_id) VALUES (:id)"), {"id": pid})
            conn.execute(text("INSERT INTO ehs_ar.refresh_tokens (user_id) VALUES (:id)"), {"id": pid})
    return engine


def _count(engine, table):
    with engine.connect() as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()


class TestSqlCascadeDeleter:
    def test_deletes_dependents_and_profiles(self, engine):
        deleter = SqlCascadeDeleter(sessionmaker(bind=engine))

        deleted = deleter.delete_profiles(PA_TENANT, ["drop-1", "drop-2"])

        assert sorted(d["id"] for d in deleted) == ["drop-1", "drop-2"]
        assert {d["email"] for d in deleted} == {"x@gmail.com", "y@gmail.com"}
        assert _count(engine, "ehs_pa.profiles") == 1
        assert _count(engine, "ehs_pa.profiles_projects_mapping") == 1
        assert _count(engine, "ehs_pa.refresh_tokens") == 1
        assert _count(engine, "ehs_ar.refresh_tokens") == 1

    def test_failure_rolls_back_every_step(self, engine):
        tenant = PA_TENANT.model_copy(
            update={
                "cascade": PA_TENANT.cascade[:2]
                + [DependentTable(schema="ehs_ar", table="missing_table", column="user_id")]
            }
        )
        deleter = SqlCascadeDeleter(sessionmaker(bind=engine))

        with pytest.raises(CascadeDeleteError) as exc_info:
            deleter.delete_profiles(tenant, ["drop-1", "drop-2"])

        assert exc_info.value.step == "ehs_ar.missing_table"
        assert exc_info.value.compensated is True
        assert "no such table" in exc_info.value.error
        assert _count(engine, "ehs_pa.profiles") == 3
        assert _count(engine, "ehs_pa.profiles_projects_mapping") == 3
        assert _count(engine, "ehs_pa.refresh_tokens") == 3

    def test_empty_ids_is_noop(self, engine):
        assert SqlCascadeDeleter(sessionmaker(bind=engine)).delete_profiles(PA_TENANT, []) == []
        assert _count(engine, "ehs_pa.profiles") == 3
