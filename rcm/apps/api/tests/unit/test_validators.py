"""Credential validation for identity creation."""

import pytest

from rcm_api.admin.validators import is_valid_email, validate_credentials, validate_user_batch


@pytest.mark.parametrize(
    "email, valid",
    [
        ("aarav.sharma@acme.com", True),
        ("a@b.co", True),
        ("no-at-sign.com", False),
        ("two@@acme.com", False),
        ("space in@acme.com", False),
        ("nodot@acme", False),
        ("@acme.com", False),
        ("a@acme.com\n", False),
    ],
)
def test_is_valid_email(email, valid):
    assert is_valid_email(email) is valid


def test_valid_credentials_have_no_errors():
    assert validate_credentials("a@acme.com", "secret") == []


def test_missing_field_short_circuits():
    assert validate_credentials(None, "x") == ["Email and password are required"]
    assert validate_credentials("bad", "") == ["Email and password are required"]


def test_non_string_fields_are_treated_as_missing():
    assert validate_credentials(123, "secret1") == ["Email and password are required"]


def test_both_format_errors_are_reported_in_order():
    assert validate_credentials("bad", "123") == [
        "Invalid email format",
        "Password must be at least 6 characters long",
    ]


def test_batch_prefixes_one_based_position():
    messages = validate_user_batch(
        [
            {"email": "a@acme.com", "password": "secret1"},
            "not-an-object",
            {"email": "a@acme.com", "password": "short"},
        ]
    )

    assert messages == [
        "User 2: Email and password are required",
        "User 3: Password must be at least 6 characters long",
    ]
