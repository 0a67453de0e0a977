"""Health check endpoints.

Reports whether each Supabase client can be constructed from the environment
and whether the optional direct database is reachable.
"""

import logging

from fastapi import APIRouter, Response, status

from rcm_api import __version__
from rcm_api.db.session import check_database
from rcm_api.errors import ConfigurationError
from rcm_api.schemas import HealthResponse
from rcm_api.supabase_client import get_supabase_admin_client, get_supabase_session_client

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


def check_session_client() -> str:
    """Check the anon-key client can be built.

    Returns:
        str: "up" if it can, error message otherwise
    """
    try:
        get_supabase_session_client()
        return "up"
    except ConfigurationError as e:
        logger.warning(f"Session client unavailable: {e}")
        return f"down: config error - {str(e)[:40]}"
    except Exception as e:
        logger.error(f"Session client check failed: {e}")
        return f"down: {str(e)[:50]}"


def check_admin_client() -> str:
    """Check the service-role client can be built.

    Returns:
        str: "up" if it can, error message otherwise
    """
    try:
        get_supabase_admin_client()
        return "up"
    except ConfigurationError as e:
        logger.warning(f"Admin client unavailable: {e}")
        return f"down: config error - {str(e)[:40]}"
    except Exception as e:
        logger.error(f"Admin client check failed: {e}")
        return f"down: {str(e)[:50]}"


def _services() -> dict[str, str]:
    return {
        "api": "up",
        "session_client": check_session_client(),
        "admin_client": check_admin_client(),
        "database": check_database(),
    }


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Always returns 200 OK (use /readyz for dependency checks).
    """
    return HealthResponse(status="healthy", version=__version__, services=_services())


@router.get("/readyz", response_model=HealthResponse)
def readiness_check(response: Response) -> HealthResponse:
    """
    Readiness check endpoint.

    Returns 503 when the privileged client cannot be built; the session
    client and the optional database do not gate readiness.
    """
    services = _services()

    if services["admin_client"] != "up":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not_ready", version=__version__, services=services)

    return HealthResponse(status="ready", version=__version__, services=services)
