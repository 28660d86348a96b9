from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.domain.chat.exceptions import ConversationNotFound, EmptyContent, NotConnected, NotParticipant
from app.domain.chat.models import ConversationKey, Message, conversation_id
from app.domain.chat.service import ChatService
from app.domain.chat.store import InMemoryMessageStore
from app.domain.errors import InvalidUserId, UserNotFound
from app.domain.identity.models import UserIdentity
from app.domain.identity.store import InMemoryIdentityStore
from app.domain.presence.registry import PresenceRegistry


class FakeEmitter:
	namespace = "/"

	def __init__(self) -> None:
		self.emit = AsyncMock()


def _identity(name: str, **overrides) -> UserIdentity:
	payload = {
		"id": str(uuid4()),
		"name": name,
		"email": f"{name.lower()}@example.com",
		"password_hash": "hash",
	}
	payload.update(overrides)
	return UserIdentity(**payload)


@pytest.fixture
def identities():
	return InMemoryIdentityStore()


@pytest.fixture
def messages():
	return InMemoryMessageStore()


@pytest.fixture
def emitter():
	return FakeEmitter()


@pytest.fixture
def registry(emitter):
	registry = PresenceRegistry()
	registry.bind(emitter)
	return registry


@pytest.fixture
def svc(messages, identities, registry):
	return ChatService(messages, identities, registry)


async def _connected_pair(identities):
	alice = _identity("Alice")
	bob = _identity("Bob")
	alice.connections.append(bob.id)
	bob.connections.append(alice.id)
	await identities.save(alice)
	await identities.save(bob)
	return alice, bob


def test_conversation_id_is_symmetric():
	a, b = str(uuid4()), str(uuid4())
	assert conversation_id(a, b) == conversation_id(b, a)
	assert conversation_id(a, b) == "_".join(sorted([a, b]))
	key = ConversationKey.from_participants(b, a)
	assert (key.user_a, key.user_b) == tuple(sorted([a, b]))


@pytest.mark.asyncio
async def test_send_message_validations(identities, svc):
	alice, bob = await _connected_pair(identities)
	stranger = _identity("Stranger")
	await identities.save(stranger)

	with pytest.raises(EmptyContent):
		await svc.send_message(alice.id, bob.id, "   ")
	with pytest.raises(EmptyContent):
		await svc.send_message(alice.id, "not-a-uuid", "")
	with pytest.raises(InvalidUserId):
		await svc.send_message(alice.id, "not-a-uuid", "hi")
	with pytest.raises(NotConnected):
		await svc.send_message(alice.id, stranger.id, "hi")


@pytest.mark.asyncio
async def test_send_message_to_missing_connection(identities, svc):
	ghost_id = str(uuid4())
	alice = _identity("Alice", connections=[ghost_id])
	await identities.save(alice)
	with pytest.raises(UserNotFound):
		await svc.send_message(alice.id, ghost_id, "hi")


@pytest.mark.asyncio
async def test_send_message_persists_and_fans_out(identities, messages, registry, emitter, svc):
	alice, bob = await _connected_pair(identities)
	registry.register(alice.id, "sid-alice")
	registry.register(bob.id, "sid-bob")

	result = await svc.send_message(alice.id, bob.id, "  hi  ")

	assert result.content == "hi"
	assert result.conversation_id == conversation_id(alice.id, bob.id)
	assert result.is_read is False
	stored = await messages.find_by_conversation_id(result.conversation_id)
	assert [item.id for item in stored] == [result.id]
	rooms = [call.kwargs["room"] for call in emitter.emit.await_args_list]
	assert rooms == ["sid-alice", "sid-bob"]
	event, payload = emitter.emit.await_args_list[0].args
	assert event == "message:new"
	assert payload["senderId"] == alice.id
	assert payload["sender"]["name"] == "Alice"


@pytest.mark.asyncio
async def test_list_messages_marks_inbound_read(identities, svc):
	alice, bob = await _connected_pair(identities)
	sent = await svc.send_message(alice.id, bob.id, "hi")
	await svc.send_message(bob.id, alice.id, "hey")

	listed = await svc.list_messages(sent.conversation_id, bob.id)

	assert [item.content for item in listed] == ["hi", "hey"]
	assert [item.is_read for item in listed] == [True, False]

	conversations = await svc.list_conversations(bob.id)
	assert conversations[0].unread_count == 0
	alice_view = await svc.list_conversations(alice.id)
	assert alice_view[0].unread_count == 1


@pytest.mark.asyncio
async def test_list_messages_errors(identities, svc):
	alice, bob = await _connected_pair(identities)
	outsider = _identity("Outsider")
	await identities.save(outsider)
	sent = await svc.send_message(alice.id, bob.id, "hi")

	with pytest.raises(ConversationNotFound):
		await svc.list_messages(conversation_id(alice.id, outsider.id), alice.id)
	with pytest.raises(NotParticipant):
		await svc.list_messages(sent.conversation_id, outsider.id)


@pytest.mark.asyncio
async def test_list_conversations_groups_and_sorts(identities, messages, svc):
	alice, bob = await _connected_pair(identities)
	carol = _identity("Carol")
	await identities.save(carol)
	base = datetime(2024, 1, 1, tzinfo=timezone.utc)

	def _message(sender, receiver, content, minutes):
		stamp = base + timedelta(minutes=minutes)
		return Message(
			id=str(uuid4()),
			sender_id=sender.id,
			receiver_id=receiver.id,
			content=content,
			conversation_id=conversation_id(sender.id, receiver.id),
			created_at=stamp,
			updated_at=stamp,
		)

	await messages.insert(_message(bob, alice, "old", 0))
	await messages.insert(_message(carol, alice, "first", 5))
	await messages.insert(_message(alice, carol, "second", 5))
	await messages.insert(_message(bob, alice, "newer", 2))

	summaries = await svc.list_conversations(alice.id)

	assert [item.other_user.name for item in summaries] == ["Carol", "Bob"]
	# equal timestamps: the later insertion wins
	assert summaries[0].last_message.content == "second"
	assert summaries[0].unread_count == 1
	assert summaries[1].last_message.content == "newer"
	assert summaries[1].unread_count == 2


@pytest.mark.asyncio
async def test_messaging_connections_use_reverse_lookup(identities, svc):
	alice = _identity("Alice")
	bob = _identity("Bob")
	bob.connections.append(alice.id)
	await identities.save(alice)
	await identities.save(bob)

	contacts = await svc.list_messaging_connections(alice.id)

	assert [item.id for item in contacts] == [bob.id]
