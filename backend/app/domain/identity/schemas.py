"""Pydantic schemas for registration and profile reads."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.domain.common.schemas import CamelModel
from app.domain.identity.models import UserIdentity


class RegisterRequest(CamelModel):
	name: str = Field(min_length=1, max_length=80)
	email: str = Field(min_length=3, max_length=254)
	password: str
	bio: Optional[str] = None
	skills: List[str] = Field(default_factory=list)
	profile_picture: Optional[str] = None
	github: Optional[str] = None
	linkedin: Optional[str] = None


class UserSummary(CamelModel):
	"""Minimal identity reference embedded in notifications and request lists."""

	id: str
	name: str
	profile_picture: str = ""

	@classmethod
	def of(cls, identity: UserIdentity) -> "UserSummary":
		return cls(id=identity.id, name=identity.name, profile_picture=identity.profile_picture)


class PresenceSummary(UserSummary):
	is_online: bool = False
	last_seen: Optional[datetime] = None

	@classmethod
	def of(cls, identity: UserIdentity) -> "PresenceSummary":
		return cls(
			id=identity.id,
			name=identity.name,
			profile_picture=identity.profile_picture,
			is_online=identity.is_online,
			last_seen=identity.last_seen,
		)


class UserProfile(PresenceSummary):
	email: str
	bio: str = ""
	skills: List[str] = Field(default_factory=list)
	github: str = ""
	linkedin: str = ""
	connections_count: int = 0
	created_at: Optional[datetime] = None

	@classmethod
	def of(cls, identity: UserIdentity) -> "UserProfile":
		return cls(
			id=identity.id,
			name=identity.name,
			email=identity.email,
			bio=identity.bio,
			skills=list(identity.skills),
			profile_picture=identity.profile_picture,
			github=identity.github,
			linkedin=identity.linkedin,
			is_online=identity.is_online,
			last_seen=identity.last_seen,
			connections_count=len(identity.connections),
			created_at=identity.created_at,
		)

