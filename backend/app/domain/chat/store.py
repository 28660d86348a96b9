"""Message log protocol and the in-memory implementation."""

from __future__ import annotations

import copy
from typing import Dict, List, Optional, Protocol, Sequence

from app.domain.chat.models import Message
from app.domain.identity.models import utcnow


class MessageStore(Protocol):
	async def insert(self, message: Message) -> Message:
		...

	async def find_by_conversation_id(self, conversation_id: str) -> List[Message]:
		"""Messages of one conversation in creation order."""
		...

	async def find_by_sender_or_receiver(self, user_id: str) -> List[Message]:
		"""Every message the user takes part in, in creation order."""
		...

	async def bulk_mark_read(
		self,
		*,
		receiver_id: str,
		conversation_id: Optional[str] = None,
		message_ids: Optional[Sequence[str]] = None,
	) -> List[str]:
		"""Flip unread messages addressed to `receiver_id`; returns the ids that changed."""
		...


class InMemoryMessageStore(MessageStore):
	"""Append-only list for development and tests; insertion order is creation order."""

	def __init__(self) -> None:
		self._messages: List[Message] = []
		self._by_id: Dict[str, Message] = {}

	async def insert(self, message: Message) -> Message:
		stored = copy.copy(message)
		self._messages.append(stored)
		self._by_id[stored.id] = stored
		return message

	async def find_by_conversation_id(self, conversation_id: str) -> List[Message]:
		return [copy.copy(item) for item in self._messages if item.conversation_id == conversation_id]

	async def find_by_sender_or_receiver(self, user_id: str) -> List[Message]:
		return [copy.copy(item) for item in self._messages if item.is_participant(user_id)]

	async def bulk_mark_read(
		self,
		*,
		receiver_id: str,
		conversation_id: Optional[str] = None,
		message_ids: Optional[Sequence[str]] = None,
	) -> List[str]:
		if message_ids is not None:
			candidates = [self._by_id[mid] for mid in dict.fromkeys(message_ids) if mid in self._by_id]
		else:
			candidates = list(self._messages)
		now = utcnow()
		changed: List[str] = []
		for item in candidates:
			if conversation_id is not None and item.conversation_id != conversation_id:
				continue
			if not item.is_unread_for(receiver_id):
				continue
			item.is_read = True
			item.updated_at = now
			changed.append(item.id)
		return changed
