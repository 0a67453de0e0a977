"""Input validation for identity creation.

Runs entirely in-process: callers report failures as 400 before any
identity-provider or store call is made.
"""

import re
from typing import Any, Optional

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
MIN_PASSWORD_LENGTH = 6

MSG_REQUIRED = "Email and password are required"
MSG_EMAIL = "Invalid email format"
MSG_PASSWORD = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_credentials(email: Optional[Any], password: Optional[Any]) -> list[str]:
    """Return the validation messages for one email/password pair (empty when valid).

    A missing field short-circuits the format checks, as there is nothing to check.
    """
    if not email or not password:
        return [MSG_REQUIRED]
    if not isinstance(email, str) or not isinstance(password, str):
        return [MSG_REQUIRED]

    errors = []
    if not is_valid_email(email):
        errors.append(MSG_EMAIL)
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(MSG_PASSWORD)
    return errors


def validate_user_batch(users: list[dict[str, Any]]) -> list[str]:
    """Validate every entry of a bulk create request.

    Messages are prefixed with the 1-based position: ``"User 2: Invalid email format"``.
    """
    messages: list[str] = []
    for index, user in enumerate(users, start=1):
        if not isinstance(user, dict):
            messages.append(f"User {index}: {MSG_REQUIRED}")
            continue
        for message in validate_credentials(user.get("email"), user.get("password")):
            messages.append(f"User {index}: {message}")
    return messages
