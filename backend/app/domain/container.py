"""Lightweight service container shared by the API and socket layers."""

from __future__ import annotations

from typing import Optional

from app.domain.chat.service import ChatService
from app.domain.chat.store import InMemoryMessageStore, MessageStore
from app.domain.identity.service import IdentityService
from app.domain.identity.store import IdentityStore, InMemoryIdentityStore
from app.domain.presence.registry import PresenceRegistry
from app.domain.presence.service import PresenceService
from app.domain.social.service import ConnectionService

_identity_store: IdentityStore = InMemoryIdentityStore()
_message_store: MessageStore = InMemoryMessageStore()
_presence: PresenceRegistry = PresenceRegistry()
_identity_service = IdentityService(_identity_store)
_connection_service = ConnectionService(_identity_store, _presence)
_chat_service = ChatService(_message_store, _identity_store, _presence)
_presence_service = PresenceService(_identity_store, _message_store, _presence)


def configure(
	*,
	identity_store: Optional[IdentityStore] = None,
	message_store: Optional[MessageStore] = None,
	presence: Optional[PresenceRegistry] = None,
) -> None:
	"""Swap stores or the presence registry and rebuild the services on top."""
	global _identity_store, _message_store, _presence
	global _identity_service, _connection_service, _chat_service, _presence_service

	if identity_store is not None:
		_identity_store = identity_store
	if message_store is not None:
		_message_store = message_store
	if presence is not None:
		_presence = presence

	_identity_service = IdentityService(_identity_store)
	_connection_service = ConnectionService(_identity_store, _presence)
	_chat_service = ChatService(_message_store, _identity_store, _presence)
	_presence_service = PresenceService(_identity_store, _message_store, _presence)


def reset() -> None:
	"""Fresh in-memory stores; the bound namespace carries over to the new registry."""
	previous = _presence
	registry = PresenceRegistry()
	registry.bind(previous.emitter)
	configure(identity_store=InMemoryIdentityStore(), message_store=InMemoryMessageStore(), presence=registry)


def get_identity_store() -> IdentityStore:
	return _identity_store


def get_message_store() -> MessageStore:
	return _message_store


def get_presence() -> PresenceRegistry:
	return _presence


def get_identity_service() -> IdentityService:
	return _identity_service


def get_connection_service() -> ConnectionService:
	return _connection_service


def get_chat_service() -> ChatService:
	return _chat_service


def get_presence_service() -> PresenceService:
	return _presence_service
