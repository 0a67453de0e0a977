"""Lazily built session factory for the optional direct Postgres connection.

Unlike the Supabase clients, the engine is process-wide: it holds no
per-request state and NullPool opens one connection per unit of work.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from rcm_api.config.env import get_database_url
from rcm_api.db.engine import build_engine, build_sessionmaker

logger = logging.getLogger(__name__)

_session_factory: Optional[sessionmaker[Session]] = None


def get_session_factory() -> Optional[sessionmaker[Session]]:
    """Return the session factory, or None when DATABASE_URL is unset."""
    global _session_factory
    if _session_factory is None:
        url = get_database_url()
        if not url:
            return None
        _session_factory = build_sessionmaker(build_engine(url))
    return _session_factory


def reset_session_factory() -> None:
    """Drop the cached factory (tests and env changes)."""
    global _session_factory
    _session_factory = None


def check_database() -> str:
    """Check direct database connectivity.

    Returns:
        "not_configured" without DATABASE_URL, "up" if healthy, error message otherwise
    """
    if not get_database_url():
        return "not_configured"
    try:
        factory = get_session_factory()
        with factory() as session:
            session.execute(text("SELECT 1"))
        return "up"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return f"down: {str(e)[:50]}"
