"""Validation helpers for identity registration and id handling."""

from __future__ import annotations

import re
from typing import Iterable, List
from uuid import UUID

from app.domain.errors import Conflict, InvalidUserId, ValidationError
from app.domain.identity.models import is_valid_user_id
from app.infra.password import MIN_PASSWORD_LENGTH

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
NAME_MAX_LEN = 80
BIO_MAX_LEN = 500
SKILL_MAX_LEN = 40
SKILLS_MAX = 30


class IdentityPolicyError(ValidationError):
	reason = "identity_invalid"
	message = "Invalid profile data"


class PasswordTooWeak(IdentityPolicyError):
	reason = "password_too_short"
	message = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


class EmailInvalid(IdentityPolicyError):
	reason = "email_invalid"
	message = "Please enter a valid email"


class NameInvalid(IdentityPolicyError):
	reason = "name_invalid"
	message = "Name is required"


class EmailTaken(Conflict):
	reason = "email_taken"
	message = "User already exists"


def normalise_email(email: str) -> str:
	return email.strip().lower()


def guard_email(email: str) -> None:
	if not EMAIL_REGEX.match(email):
		raise EmailInvalid()


def guard_password(password: str) -> None:
	if len(password) < MIN_PASSWORD_LENGTH:
		raise PasswordTooWeak()


def guard_name(name: str) -> str:
	cleaned = name.strip()
	if not cleaned or len(cleaned) > NAME_MAX_LEN:
		raise NameInvalid()
	return cleaned


def normalise_bio(bio: str | None) -> str:
	cleaned = (bio or "").strip()
	if len(cleaned) > BIO_MAX_LEN:
		raise IdentityPolicyError("bio_too_long", f"Bio cannot exceed {BIO_MAX_LEN} characters")
	return cleaned


def normalise_skills(skills: Iterable[str] | None) -> List[str]:
	"""Trim tags, drop blanks and repeats; original casing is kept for display."""
	seen: set[str] = set()
	cleaned: List[str] = []
	for raw in skills or []:
		tag = str(raw).strip()
		if not tag:
			continue
		if len(tag) > SKILL_MAX_LEN:
			raise IdentityPolicyError("skill_too_long", f"Skills cannot exceed {SKILL_MAX_LEN} characters")
		key = tag.lower()
		if key in seen:
			continue
		seen.add(key)
		cleaned.append(tag)
	if len(cleaned) > SKILLS_MAX:
		raise IdentityPolicyError("skills_too_many", f"At most {SKILLS_MAX} skills are allowed")
	return cleaned


def parse_user_id(value: object) -> str:
	if not is_valid_user_id(value):
		raise InvalidUserId()
	return str(UUID(str(value)))
