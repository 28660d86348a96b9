from uuid import uuid4

import pytest

from app.domain.errors import InvalidUserId
from app.domain.identity import policy


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("user@example.com", "user@example.com"),
        ("  User@Example.EDU ", "user@example.edu"),
    ],
)
def test_normalise_email(raw, expected):
    email = policy.normalise_email(raw)
    assert email == expected
    policy.guard_email(email)


@pytest.mark.parametrize("email", ["plain", "a@b", "two words@example.com"])
def test_guard_email_invalid(email):
    with pytest.raises(policy.EmailInvalid):
        policy.guard_email(email)


def test_guard_password_minimum_length():
    policy.guard_password("x" * 6)
    with pytest.raises(policy.PasswordTooWeak) as exc_info:
        policy.guard_password("short")
    assert exc_info.value.reason == "password_too_short"


def test_guard_name_trims_and_bounds():
    assert policy.guard_name("  Grace  ") == "Grace"
    with pytest.raises(policy.NameInvalid):
        policy.guard_name("x" * (policy.NAME_MAX_LEN + 1))


def test_normalise_bio_limit():
    assert policy.normalise_bio(None) == ""
    with pytest.raises(policy.IdentityPolicyError) as exc_info:
        policy.normalise_bio("x" * (policy.BIO_MAX_LEN + 1))
    assert exc_info.value.reason == "bio_too_long"


def test_normalise_skills_dedupes_case_insensitively():
    assert policy.normalise_skills([" Go ", "go", "", "Rust"]) == ["Go", "Rust"]


def test_parse_user_id_canonicalises():
    value = uuid4()
    assert policy.parse_user_id(str(value).upper()) == str(value)
    with pytest.raises(InvalidUserId):
        policy.parse_user_id("12345")
