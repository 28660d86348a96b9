"""Service layer for account registration and profile lookup."""

from __future__ import annotations

import logging
from uuid import uuid4

from app.domain.identity import policy, schemas
from app.domain.identity.models import UserIdentity, utcnow
from app.domain.identity.store import IdentityStore, load_identity
from app.infra.password import hash_password
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class IdentityService:
	def __init__(self, store: IdentityStore) -> None:
		self._store = store

	async def register(self, payload: schemas.RegisterRequest) -> UserIdentity:
		email = policy.normalise_email(payload.email)
		policy.guard_email(email)
		policy.guard_password(payload.password)
		name = policy.guard_name(payload.name)
		bio = policy.normalise_bio(payload.bio)
		skills = policy.normalise_skills(payload.skills)

		if await self._store.find_by_email(email) is not None:
			raise policy.EmailTaken()

		now = utcnow()
		identity = UserIdentity(
			id=str(uuid4()),
			name=name,
			email=email,
			password_hash=hash_password(payload.password),
			bio=bio,
			skills=skills,
			profile_picture=(payload.profile_picture or "").strip(),
			github=(payload.github or "").strip(),
			linkedin=(payload.linkedin or "").strip(),
			last_seen=now,
			created_at=now,
			updated_at=now,
		)
		await self._store.save(identity)
		obs_metrics.inc_identity_register()
		logger.info("identity registered", extra={"user_id": identity.id})
		return identity

	async def get_profile(self, user_id: str) -> UserIdentity:
		return await load_identity(self._store, policy.parse_user_id(user_id))
