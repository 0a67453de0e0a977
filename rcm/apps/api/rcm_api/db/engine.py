"""Database engine builder for transactional cascades.

Only used when DATABASE_URL is set. Policy:
- Default pool: NullPool (Supabase pooler does the pooling)
- ENV: RCM_DB_POOL=nullpool|queuepool (default: nullpool)
- Supabase hosts: sslmode=require unless the URL already carries sslmode
"""

import logging
import os
import re
from typing import Any, Optional

from sqlalchemy import Engine, NullPool, QueuePool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from rcm_api.config.env import get_database_url

logger = logging.getLogger(__name__)

DEFAULT_APPLICATION_NAME = "rcm-admin-api"


def is_supabase_host(url: str) -> bool:
    """Return True for *.supabase.co and *.pooler.supabase.com endpoints."""
    return ".supabase.co" in url or ".pooler.supabase.com" in url


def mask_password(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r"://([^:/@]+):([^@]+)@", r"://\1:***@", url)


def _connect_args(url: str) -> dict[str, Any]:
    connect_args: dict[str, Any] = {}
    if not url.startswith("postgres"):
        return connect_args

    if is_supabase_host(url) and "sslmode=" not in url:
        connect_args["sslmode"] = "require"

    app_name = os.getenv("RCM_DB_APPLICATION_NAME", DEFAULT_APPLICATION_NAME)
    if app_name:
        connect_args["application_name"] = app_name
    return connect_args


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Build SQLAlchemy engine.

    Args:
        database_url: Database URL. If None, reads from env DATABASE_URL.

    Raises:
        ValueError: If no URL is available or RCM_DB_POOL is invalid.

    Environment Variables:
        RCM_DB_POOL: "nullpool" (default) | "queuepool"
        RCM_DB_POOL_SIZE: QueuePool size (default: 5)
        RCM_DB_MAX_OVERFLOW: QueuePool overflow (default: 10)
    """
    url = database_url or get_database_url()
    if not url:
        raise ValueError(
            "DATABASE_URL is required. "
            "Pass as argument or set DATABASE_URL environment variable."
        )

    connect_args = _connect_args(url)
    pool_mode = (os.getenv("RCM_DB_POOL") or "nullpool").lower()

    if pool_mode == "nullpool":
        engine = create_engine(
            url,
            poolclass=NullPool,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
    elif pool_mode == "queuepool":
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_pre_ping=True,
            pool_size=int(os.getenv("RCM_DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("RCM_DB_MAX_OVERFLOW", "10")),
            connect_args=connect_args,
        )
    else:
        raise ValueError(
            f"Invalid RCM_DB_POOL value: {pool_mode}. "
            "Must be 'nullpool' or 'queuepool'."
        )

    logger.debug(
        "Database engine created: pool=%s, url=%s",
        engine.pool.__class__.__name__,
        mask_password(url),
    )
    return engine


def build_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """Build sessionmaker configured with autoflush=False."""
    return sessionmaker(autoflush=False, bind=engine)
