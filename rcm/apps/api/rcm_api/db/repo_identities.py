"""Identity-provider (Supabase Auth admin) access."""

import logging
from typing import Any

import httpx
from supabase import AuthError, Client

from rcm_api.errors import StoreError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000

AUTH_USER_FIELDS = (
    "id",
    "email",
    "created_at",
    "updated_at",
    "last_sign_in_at",
    "email_confirmed_at",
    "phone",
    "phone_confirmed_at",
    "is_anonymous",
    "app_metadata",
    "user_metadata",
)
IDENTITY_FIELDS = ("provider", "created_at", "updated_at")


def _as_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    return obj.model_dump(mode="json")


def serialize_auth_user(user: Any) -> dict[str, Any]:
    """Project a provider user record onto the fields the admin pages render."""
    data = _as_dict(user)
    out = {field: data.get(field) for field in AUTH_USER_FIELDS}
    out["identities"] = [
        {field: identity.get(field) for field in IDENTITY_FIELDS}
        for identity in (_as_dict(i) for i in (data.get("identities") or []))
    ]
    return out


class IdentityRepository:
    """Wraps ``client.auth.admin`` and converts provider and transport errors to ``StoreError``."""

    def __init__(self, client: Client, page_size: int = DEFAULT_PAGE_SIZE):
        self.client = client
        self.page_size = page_size

    def list_all_users(self) -> list[dict[str, Any]]:
        """Fetch every identity, paging until a short page is returned.

        Raises:
            StoreError: Listing failed on any page
        """
        users: list[dict[str, Any]] = []
        page = 1
        while True:
            try:
                batch = self.client.auth.admin.list_users(page=page, per_page=self.page_size)
            except AuthError as e:
                raise StoreError(e.message, code=getattr(e, "code", None)) from e
            except httpx.HTTPError as e:
                raise StoreError(str(e) or type(e).__name__) from e
            users.extend(_as_dict(u) for u in batch)
            if len(batch) < self.page_size:
                break
            page += 1

        logger.debug("identities.list.completed", extra={"pages": page, "count": len(users)})
        return users

    def create_user(self, email: str, password: str, email_confirm: bool = True) -> dict[str, Any]:
        """Create one identity and return its serialized record.

        Raises:
            StoreError: Provider rejected the user (duplicate email, weak password, ...)
        """
        try:
            response = self.client.auth.admin.create_user(
                {"email": email, "password": password, "email_confirm": email_confirm}
            )
        except AuthError as e:
            raise StoreError(e.message, code=getattr(e, "code", None)) from e
        except httpx.HTTPError as e:
            raise StoreError(str(e) or type(e).__name__) from e
        return serialize_auth_user(response.user)


def index_by_email(users: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Map email to identity; the first identity wins on duplicate emails."""
    index: dict[str, dict[str, Any]] = {}
    for user in users:
        email = user.get("email")
        if email and email not in index:
            index[email] = user
    return index
