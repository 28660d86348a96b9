from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.domain.chat.models import Message, conversation_id
from app.domain.chat.store import InMemoryMessageStore
from app.domain.errors import Unavailable, UserNotFound
from app.domain.identity.models import UserIdentity
from app.domain.identity.store import InMemoryIdentityStore
from app.domain.presence.registry import PresenceRegistry
from app.domain.presence.service import PresenceService


class FakeEmitter:
	namespace = "/"

	def __init__(self) -> None:
		self.emit = AsyncMock()

	def payloads_for(self, sid: str, event: str):
		return [
			call.args[1]
			for call in self.emit.await_args_list
			if call.kwargs.get("room") == sid and call.args[0] == event
		]


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
def emitter():
	return FakeEmitter()


@pytest.fixture
def registry(emitter):
	registry = PresenceRegistry()
	registry.bind(emitter)
	return registry


@pytest.fixture
def identities():
	return InMemoryIdentityStore()


@pytest.fixture
def messages():
	return InMemoryMessageStore()


@pytest.fixture
def svc(identities, messages, registry):
	return PresenceService(identities, messages, registry)


def test_registry_last_connect_wins_and_stale_unregister_is_ignored(registry):
	assert registry.register("u1", "sid-1") is None
	assert registry.register("u1", "sid-2") == "sid-1"

	assert registry.unregister("u1", "sid-1") is False
	assert registry.handle_for("u1") == "sid-2"
	assert registry.unregister("u1", "sid-2") is True
	assert registry.handle_for("u1") is None


@pytest.mark.asyncio
async def test_emit_to_user_is_noop_without_handle_or_emitter(emitter):
	registry = PresenceRegistry()
	registry.register("u1", "sid-1")
	assert await registry.emit_to_user("u1", "evt", {}) is False

	registry.bind(emitter)
	assert await registry.emit_to_user("nobody", "evt", {}) is False
	assert await registry.emit_to_user("u1", "evt", {"a": 1}) is True
	emitter.emit.assert_awaited_once_with("evt", {"a": 1}, room="sid-1")


@pytest.mark.asyncio
async def test_emit_failures_are_swallowed(registry, emitter):
	emitter.emit.side_effect = RuntimeError("socket gone")
	registry.register("u1", "sid-1")
	assert await registry.emit_to_user("u1", "evt", {}) is False


@pytest.mark.asyncio
async def test_connect_marks_online_and_notifies_connections(identities, registry, emitter, svc):
	alice = _identity("Alice")
	bob = _identity("Bob", connections=[alice.id])
	alice.connections.append(bob.id)
	await identities.save(alice)
	await identities.save(bob)
	registry.register(bob.id, "sid-bob")

	await svc.connect(alice.id, "sid-alice")

	stored = await identities.find_by_id(alice.id)
	assert stored.is_online is True
	assert registry.handle_for(alice.id) == "sid-alice"
	assert emitter.payloads_for("sid-bob", "user:status") == [{"userId": alice.id, "isOnline": True}]


@pytest.mark.asyncio
async def test_connect_unknown_identity_is_refused(registry, svc):
	missing_id = str(uuid4())
	with pytest.raises(UserNotFound):
		await svc.connect(missing_id, "sid-x")
	assert registry.handle_for(missing_id) is None


@pytest.mark.asyncio
async def test_disconnect_only_for_live_handle(identities, registry, emitter, svc):
	alice = _identity("Alice")
	bob = _identity("Bob", connections=[alice.id])
	alice.connections.append(bob.id)
	await identities.save(alice)
	await identities.save(bob)
	registry.register(bob.id, "sid-bob")
	await svc.connect(alice.id, "sid-old")
	await svc.connect(alice.id, "sid-new")

	assert await svc.disconnect(alice.id, "sid-old") is False
	assert (await identities.find_by_id(alice.id)).is_online is True

	assert await svc.disconnect(alice.id, "sid-new") is True
	stored = await identities.find_by_id(alice.id)
	assert stored.is_online is False
	offline = emitter.payloads_for("sid-bob", "user:status")[-1]
	assert offline["isOnline"] is False
	assert "lastSeen" in offline


@pytest.mark.asyncio
async def test_mark_read_flips_only_inbound_and_notifies_sender(identities, messages, registry, emitter, svc):
	alice = _identity("Alice")
	bob = _identity("Bob")
	conv = conversation_id(alice.id, bob.id)
	inbound = Message(id="m1", sender_id=alice.id, receiver_id=bob.id, content="hi", conversation_id=conv)
	outbound = Message(id="m2", sender_id=bob.id, receiver_id=alice.id, content="yo", conversation_id=conv)
	await messages.insert(inbound)
	await messages.insert(outbound)
	registry.register(alice.id, "sid-alice")

	changed = await svc.mark_read(bob.id, ["m1", "m2"], alice.id)

	assert changed == 1
	stored = {item.id: item.is_read for item in await messages.find_by_conversation_id(conv)}
	assert stored == {"m1": True, "m2": False}
	assert emitter.payloads_for("sid-alice", "message:read:update") == [{"messageIds": ["m1"], "readBy": bob.id}]


@pytest.mark.asyncio
async def test_mark_read_ignores_ids_from_other_senders(identities, messages, registry, emitter, svc):
	alice = _identity("Alice")
	bob = _identity("Bob")
	carol = _identity("Carol")
	from_carol = Message(
		id="m3",
		sender_id=carol.id,
		receiver_id=bob.id,
		content="psst",
		conversation_id=conversation_id(carol.id, bob.id),
	)
	await messages.insert(from_carol)
	registry.register(alice.id, "sid-alice")

	changed = await svc.mark_read(bob.id, ["m3", "missing"], alice.id)

	assert changed == 0
	assert (await messages.find_by_conversation_id(from_carol.conversation_id))[0].is_read is False
	emitter.emit.assert_not_awaited()


@pytest.mark.asyncio
async def test_mark_read_without_sender_marks_but_does_not_notify(messages, registry, emitter, svc):
	alice = _identity("Alice")
	bob = _identity("Bob")
	conv = conversation_id(alice.id, bob.id)
	await messages.insert(Message(id="m1", sender_id=alice.id, receiver_id=bob.id, content="hi", conversation_id=conv))
	registry.register(alice.id, "sid-alice")

	assert await svc.mark_read(bob.id, ["m1"], None) == 1
	assert (await messages.find_by_conversation_id(conv))[0].is_read is True
	emitter.emit.assert_not_awaited()


class FailingSaveStore(InMemoryIdentityStore):
	def __init__(self) -> None:
		super().__init__()
		self.armed = False

	async def save(self, identity):
		if self.armed:
			raise Unavailable()
		return await super().save(identity)


@pytest.mark.asyncio
async def test_connect_failure_leaves_no_live_handle(messages, registry):
	store = FailingSaveStore()
	alice = _identity("Alice")
	await store.save(alice)
	store.armed = True
	svc = PresenceService(store, messages, registry)

	with pytest.raises(Unavailable):
		await svc.connect(alice.id, "sid-dead")

	assert registry.handle_for(alice.id) is None
