"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
# Inject sys.path for reliable pytest imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # => .../apps/api

import pytest
from fastapi.testclient import TestClient

from rcm_api.db.session import reset_session_factory
from rcm_api.deps import get_admin_client, get_seed_config
from rcm_api.main import app
from rcm_api.seed.loader import DEFAULT_CONFIG_PATH, SeedConfigLoader
from tests.fakes import ACME_PROJECT_ROW_ID, DOLLAR_PROJECT_ROW_ID, FakeSupabase


@pytest.fixture(scope="session")
def seed_config():
    """Bundled seed configuration, loaded once."""
    return SeedConfigLoader(DEFAULT_CONFIG_PATH).load()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    """Empty fake with the two demo projects present in every tenant schema."""
    fake = FakeSupabase()
    for schema in ("ehs_ar", "ehs_pa", "ehs_ebv"):
        fake.add_row(schema, "projects", id=ACME_PROJECT_ROW_ID, name="Acme HealthCare", project_id=1,
                     client_id="acme", client_sub_id="acme-01")
        fake.add_row(schema, "projects", id=DOLLAR_PROJECT_ROW_ID, name="Dollar HealthCare", project_id=2,
                     client_id="dollar", client_sub_id="dollar-01")
    return fake


@pytest.fixture
def demo_identities(fake_supabase, seed_config) -> FakeSupabase:
    """Fake with one identity per configured demo user."""
    for user in seed_config.demo_users:
        fake_supabase.add_user(user.email)
    return fake_supabase


@pytest.fixture
def client(fake_supabase, seed_config, monkeypatch):
    """TestClient wired to the fake; DATABASE_URL unset so deletes run as a saga."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    reset_session_factory()

    app.dependency_overrides[get_admin_client] = lambda: fake_supabase
    app.dependency_overrides[get_seed_config] = lambda: seed_config
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
        reset_session_factory()
