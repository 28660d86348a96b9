"""Shared error taxonomy for domain services.

Every failure a caller can observe carries a stable `kind` (one of the five
classes below) and a finer `reason` that feature modules refine by
subclassing. The API layer maps `kind` to an HTTP status.
"""

from __future__ import annotations

from typing import Optional


class DomainError(Exception):
	"""Base class for caller-visible domain failures."""

	kind: str = "error"
	reason: str = "unknown"
	message: str = "Something went wrong"

	def __init__(self, reason: Optional[str] = None, message: Optional[str] = None) -> None:
		if reason:
			self.reason = reason
		if message:
			self.message = message
		super().__init__(self.reason)


class ValidationError(DomainError):
	kind = "validation_error"
	reason = "invalid"
	message = "Invalid input"


class NotFound(DomainError):
	kind = "not_found"
	reason = "not_found"
	message = "Not found"


class Forbidden(DomainError):
	kind = "forbidden"
	reason = "forbidden"
	message = "Access denied"


class Conflict(DomainError):
	kind = "conflict"
	reason = "conflict"
	message = "Conflicting state"


class Unavailable(DomainError):
	kind = "unavailable"
	reason = "store_unavailable"
	message = "Service temporarily unavailable"


class InvalidUserId(ValidationError):
	reason = "invalid_user_id"
	message = "Invalid user ID format"


class UserNotFound(NotFound):
	reason = "user_not_found"
	message = "User not found"
