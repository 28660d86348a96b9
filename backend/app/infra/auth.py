"""Authentication helpers for FastAPI endpoints.

Access tokens are HS256 JWTs signed with settings.secret_key. Dev headers are
only honoured when the service runs in the development environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.identity.models import is_valid_user_id
from app.infra import jwt as jwt_helper
from app.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	display_name: Optional[str] = None
	session_id: Optional[str] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def canonical_user_id(value: object) -> Optional[str]:
	"""Lower-case hyphenated UUID form of `value`, or None when it is not a UUID."""
	if value is None:
		return None
	raw = str(value).strip()
	if not is_valid_user_id(raw):
		return None
	return str(UUID(raw))


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")

	sub = canonical_user_id(payload.get("sub"))
	if not sub:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	display_name = payload.get("name")
	session_id = payload.get("sid")
	return AuthenticatedUser(
		id=sub,
		display_name=str(display_name) if display_name is not None else None,
		session_id=str(session_id).strip() if session_id is not None else None,
	)


def resolve_user_id(token: Optional[str], dev_user_id: Optional[str] = None) -> Optional[str]:
	"""Resolve a user id from a raw token, falling back to a dev header in development.

	Used by the Socket.IO handshake where FastAPI dependencies are unavailable.
	"""
	if token:
		try:
			payload = jwt_helper.decode_access(token)
		except Exception:
			return None
		return canonical_user_id(payload.get("sub"))
	if dev_user_id and settings.is_dev():
		return canonical_user_id(dev_user_id)
	return None


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow a simple X-User-Id header. In all other environments
	headers are ignored and a valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id:
		user_id = canonical_user_id(x_user_id)
		if user_id:
			return AuthenticatedUser(id=user_id)

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
