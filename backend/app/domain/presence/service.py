"""Online status bookkeeping and read receipts for live clients."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from app.domain.chat.models import conversation_id
from app.domain.chat.schemas import ReadUpdate, UserStatus
from app.domain.chat.store import MessageStore
from app.domain.errors import UserNotFound
from app.domain.identity.models import UserIdentity, is_valid_user_id, utcnow
from app.domain.identity.policy import parse_user_id
from app.domain.identity.store import IdentityStore
from app.domain.presence.registry import PresenceRegistry
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

USER_STATUS_EVENT = "user:status"
READ_UPDATE_EVENT = "message:read:update"


class PresenceService:
	def __init__(self, identities: IdentityStore, messages: MessageStore, registry: PresenceRegistry) -> None:
		self._identities = identities
		self._messages = messages
		self._registry = registry

	@property
	def registry(self) -> PresenceRegistry:
		return self._registry

	async def _broadcast_status(self, identity: UserIdentity, status: UserStatus) -> None:
		payload = status.wire()
		for connection_id in identity.connections:
			await self._registry.emit_to_user(connection_id, USER_STATUS_EVENT, payload)

	async def connect(self, user_id: str, sid: str) -> UserIdentity:
		identity = await self._identities.find_by_id(user_id)
		if identity is None:
			raise UserNotFound()
		identity.is_online = True
		identity.last_seen = utcnow()
		await self._identities.save(identity)
		self._registry.register(identity.id, sid)
		logger.info("presence online", extra={"user_id": identity.id})
		await self._broadcast_status(identity, UserStatus(user_id=identity.id, is_online=True))
		return identity

	async def disconnect(self, user_id: str, sid: str) -> bool:
		"""Mark offline only when `sid` was still the live handle."""
		if not self._registry.unregister(user_id, sid):
			return False
		identity = await self._identities.find_by_id(user_id)
		if identity is None:
			return True
		identity.is_online = False
		identity.last_seen = utcnow()
		await self._identities.save(identity)
		logger.info("presence offline", extra={"user_id": identity.id})
		await self._broadcast_status(
			identity,
			UserStatus(user_id=identity.id, is_online=False, last_seen=identity.last_seen),
		)
		return True

	async def mark_read(self, reader_id: str, message_ids: Iterable[object], sender_id: Optional[str]) -> int:
		"""Flip the listed messages addressed to the reader.

		With a valid `sender_id` only that sender's messages are flipped, and
		the ids that actually changed are reported back to them.
		"""
		ids: List[str] = list(dict.fromkeys(str(item) for item in message_ids if item))
		if not ids:
			return 0
		sender_key = parse_user_id(sender_id) if sender_id and is_valid_user_id(sender_id) else None
		scope = conversation_id(reader_id, sender_key) if sender_key else None
		flipped = set(
			await self._messages.bulk_mark_read(receiver_id=reader_id, conversation_id=scope, message_ids=ids)
		)
		if not flipped:
			return 0
		obs_metrics.inc_chat_read(len(flipped))
		if sender_key:
			update = ReadUpdate(message_ids=[mid for mid in ids if mid in flipped], read_by=reader_id)
			await self._registry.emit_to_user(sender_key, READ_UPDATE_EVENT, update.wire())
		return len(flipped)
