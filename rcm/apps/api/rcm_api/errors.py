"""Exception types shared by routers, repositories and the app factory."""

from typing import Any, Optional


class ConfigurationError(RuntimeError):
    """A required environment variable or configuration document is missing or invalid."""


class StoreError(Exception):
    """An upstream store or identity-provider call failed.

    Attributes:
        message: Upstream error text, surfaced verbatim in ``details``
        code: Upstream error code when the store provides one (e.g. ``23505``)
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class AdminAPIError(Exception):
    """Error raised by route handlers and rendered as ``{error, details}``.

    Args:
        status_code: HTTP status (400 validation, 404 unknown tenant, 500 upstream)
        error: Human-readable summary
        details: Upstream message or structured detail (optional)
        extra: Additional top-level response fields (e.g. ``deleted``, ``failed``)
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        details: Any = None,
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details
        self.extra = extra or {}


class CascadeDeleteError(Exception):
    """A multi-table profile delete failed and was rolled back or compensated.

    Attributes:
        step: Table (``schema.table``) whose delete failed
        error: Upstream error message of the failing attempt
        retry_error: Message of the second parent-delete attempt, if one was made
        compensated: True when every completed step was restored
    """

    def __init__(
        self,
        step: str,
        error: str,
        retry_error: Optional[str] = None,
        compensated: bool = True,
    ):
        super().__init__(f"{step}: {error}")
        self.step = step
        self.error = error
        self.retry_error = retry_error
        self.compensated = compensated

    def to_details(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "step": self.step,
            "error": self.error,
            "compensated": self.compensated,
        }
        if self.retry_error is not None:
            details["retry_error"] = self.retry_error
        return details
