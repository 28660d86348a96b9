"""Conversation derivation and direct messaging between connections."""

from __future__ import annotations

import logging
from typing import Dict, List

import ulid

from app.domain.chat.exceptions import ConversationNotFound, EmptyContent, NotConnected, NotParticipant
from app.domain.chat.models import ConversationSummary, Message, conversation_id
from app.domain.chat.schemas import ConversationResponse, MessageResponse
from app.domain.chat.store import MessageStore
from app.domain.identity.models import UserIdentity, dedupe_ids, utcnow
from app.domain.identity.policy import parse_user_id
from app.domain.identity.store import IdentityStore, load_connections, load_identity
from app.domain.presence.registry import PresenceRegistry
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

MESSAGE_NEW_EVENT = "message:new"


class ChatService:
	def __init__(self, messages: MessageStore, identities: IdentityStore, presence: PresenceRegistry) -> None:
		self._messages = messages
		self._identities = identities
		self._presence = presence

	async def _profiles(self, user_ids: List[str]) -> Dict[str, UserIdentity]:
		found = await self._identities.find_by_ids(dedupe_ids(user_ids))
		return {identity.id: identity for identity in found}

	async def list_conversations(self, user_id: str) -> List[ConversationResponse]:
		messages = await self._messages.find_by_sender_or_receiver(user_id)
		latest: Dict[str, Message] = {}
		unread: Dict[str, int] = {}
		for message in messages:
			key = message.conversation_id
			current = latest.get(key)
			# equal timestamps: the later insertion wins
			if current is None or message.created_at >= current.created_at:
				latest[key] = message
			unread[key] = unread.get(key, 0) + (1 if message.is_unread_for(user_id) else 0)

		profiles = await self._profiles([message.other_participant(user_id) for message in latest.values()])
		summaries = [
			ConversationSummary(
				conversation_id=key,
				last_message=message,
				unread_count=unread.get(key, 0),
				other_user_id=message.other_participant(user_id),
				other_user=profiles.get(message.other_participant(user_id)),
			)
			for key, message in latest.items()
		]
		summaries.sort(key=lambda item: item.last_message.created_at, reverse=True)
		return [ConversationResponse.from_summary(summary) for summary in summaries]

	async def list_messages(self, conversation: str, requester_id: str) -> List[MessageResponse]:
		messages = await self._messages.find_by_conversation_id(conversation)
		if not messages:
			raise ConversationNotFound()
		if not any(message.is_participant(requester_id) for message in messages):
			raise NotParticipant()

		flipped = await self._messages.bulk_mark_read(receiver_id=requester_id, conversation_id=conversation)
		if flipped:
			obs_metrics.inc_chat_read(len(flipped))
			messages = await self._messages.find_by_conversation_id(conversation)

		participants = [uid for message in messages for uid in (message.sender_id, message.receiver_id)]
		profiles = await self._profiles(participants)
		return [MessageResponse.from_model(message, profiles) for message in messages]

	async def send_message(self, sender_id: str, receiver_id: str, content: str) -> MessageResponse:
		text = (content or "").strip()
		if not text:
			raise EmptyContent()
		receiver_key = parse_user_id(receiver_id)
		sender = await load_identity(self._identities, sender_id)
		if not sender.is_connected_to(receiver_key):
			raise NotConnected()
		receiver = await load_identity(self._identities, receiver_key)

		now = utcnow()
		message = Message(
			id=str(ulid.new()),
			sender_id=sender.id,
			receiver_id=receiver.id,
			content=text,
			conversation_id=conversation_id(sender.id, receiver.id),
			created_at=now,
			updated_at=now,
		)
		await self._messages.insert(message)
		obs_metrics.inc_chat_send()

		response = MessageResponse.from_model(message, {sender.id: sender, receiver.id: receiver})
		payload = response.wire()
		await self._presence.emit_to_user(sender.id, MESSAGE_NEW_EVENT, payload)
		await self._presence.emit_to_user(receiver.id, MESSAGE_NEW_EVENT, payload)
		return response

	async def list_messaging_connections(self, user_id: str) -> List[UserIdentity]:
		user = await load_identity(self._identities, user_id)
		return await load_connections(self._identities, user)
