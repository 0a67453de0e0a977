"""PostgREST execution helper.

Every table call goes through :func:`execute` so route handlers only ever see
``StoreError`` for upstream failures, including transport errors.
"""

import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError

from rcm_api.errors import StoreError

logger = logging.getLogger(__name__)


def execute(query: Any) -> list[dict[str, Any]]:
    """Run a PostgREST request builder and return its rows.

    Raises:
        StoreError: The store rejected the request (message and code preserved)
            or could not be reached (timeout, connection reset)
    """
    try:
        response = query.execute()
    except APIError as e:
        message = e.message or str(e)
        logger.debug("store.request.failed", extra={"error_code": e.code, "error": message})
        raise StoreError(message, code=e.code) from e
    except httpx.HTTPError as e:
        message = str(e) or type(e).__name__
        logger.warning("store.request.unreachable", extra={"error": message})
        raise StoreError(message) from e
    return response.data or []
