from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import socketio

from app.domain import container
from app.domain.identity.models import UserIdentity
from app.domain.presence.sockets import RealtimeNamespace
from app.infra import jwt as jwt_helper
from app.settings import settings


def _scope_with_authorization(token: str) -> dict:
	return {
		"headers": [(b"authorization", f"Bearer {token}".encode())],
	}


def _namespace() -> RealtimeNamespace:
	server = socketio.AsyncServer(async_mode="asgi")
	namespace = RealtimeNamespace()
	server.register_namespace(namespace)
	namespace.emit = AsyncMock()
	container.get_presence().bind(namespace)
	return namespace


async def _seed(*names: str):
	store = container.get_identity_store()
	created = []
	for name in names:
		identity = UserIdentity(id=str(uuid4()), name=name, email=f"{name.lower()}@example.com", password_hash="h")
		await store.save(identity)
		created.append(identity)
	return created


@pytest.mark.asyncio
async def test_connect_requires_identity():
	namespace = _namespace()

	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-1", {"asgi.scope": {"headers": []}})


@pytest.mark.asyncio
async def test_connect_refuses_unknown_user():
	namespace = _namespace()

	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-1", {"asgi.scope": {"headers": []}}, {"userId": str(uuid4())})
	assert namespace.users == {}


@pytest.mark.asyncio
async def test_dev_user_id_ignored_outside_dev():
	(alice,) = await _seed("Alice")
	namespace = _namespace()
	settings.environment = "production"

	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-1", {"asgi.scope": {"headers": []}}, {"userId": alice.id})


@pytest.mark.asyncio
async def test_connect_with_bearer_token_registers_presence():
	alice, bob = await _seed("Alice", "Bob")
	namespace = _namespace()
	token = jwt_helper.encode_access({"sub": alice.id})

	await namespace.trigger_event("connect", "sid-alice", {"asgi.scope": _scope_with_authorization(token)})

	assert namespace.users["sid-alice"] == alice.id
	assert container.get_presence().handle_for(alice.id) == "sid-alice"
	stored = await container.get_identity_store().find_by_id(alice.id)
	assert stored.is_online is True


@pytest.mark.asyncio
async def test_connect_query_param_and_status_broadcast():
	alice, bob = await _seed("Alice", "Bob")
	store = container.get_identity_store()
	alice.connections.append(bob.id)
	bob.connections.append(alice.id)
	await store.save(alice)
	await store.save(bob)
	namespace = _namespace()

	await namespace.trigger_event("connect", "sid-bob", {"QUERY_STRING": f"userId={bob.id}", "asgi.scope": {"headers": []}})
	await namespace.trigger_event("connect", "sid-alice", {"asgi.scope": {"headers": [(b"x-user-id", alice.id.encode())]}})

	namespace.emit.assert_any_await("user:status", {"userId": alice.id, "isOnline": True}, room="sid-bob")

	await namespace.trigger_event("disconnect", "sid-alice")

	assert container.get_presence().handle_for(alice.id) is None
	last = namespace.emit.await_args_list[-1]
	assert last.args[0] == "user:status"
	assert last.args[1]["isOnline"] is False
	assert last.kwargs["room"] == "sid-bob"


@pytest.mark.asyncio
async def test_message_read_event_notifies_sender():
	alice, bob = await _seed("Alice", "Bob")
	store = container.get_identity_store()
	alice.connections.append(bob.id)
	bob.connections.append(alice.id)
	await store.save(alice)
	await store.save(bob)
	namespace = _namespace()
	await namespace.trigger_event("connect", "sid-alice", {"asgi.scope": {"headers": []}}, {"userId": alice.id})
	await namespace.trigger_event("connect", "sid-bob", {"asgi.scope": {"headers": []}}, {"userId": bob.id})
	sent = await container.get_chat_service().send_message(alice.id, bob.id, "hi")

	await namespace.trigger_event("message:read", "sid-bob", {"messageIds": [sent.id], "senderId": alice.id})

	namespace.emit.assert_any_await(
		"message:read:update",
		{"messageIds": [sent.id], "readBy": bob.id},
		room="sid-alice",
	)
	stored = await container.get_message_store().find_by_conversation_id(sent.conversation_id)
	assert stored[0].is_read is True


@pytest.mark.asyncio
async def test_malformed_read_receipt_is_ignored():
	(alice,) = await _seed("Alice")
	namespace = _namespace()
	await namespace.trigger_event("connect", "sid-alice", {"asgi.scope": {"headers": []}}, {"userId": alice.id})
	namespace.emit.reset_mock()

	await namespace.trigger_event("message:read", "sid-alice", {"messageIds": "oops"})

	namespace.emit.assert_not_awaited()


@pytest.mark.asyncio
async def test_connect_canonicalises_user_id():
	(alice,) = await _seed("Alice")
	namespace = _namespace()

	await namespace.trigger_event("connect", "sid-alice", {"asgi.scope": {"headers": []}}, {"userId": alice.id.upper()})

	assert namespace.users["sid-alice"] == alice.id
	assert container.get_presence().handle_for(alice.id) == "sid-alice"
