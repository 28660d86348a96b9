from uuid import uuid4

import pytest

from app.domain.errors import InvalidUserId, UserNotFound
from app.domain.identity import policy
from app.domain.identity.models import ConnectionRequest, RequestStatus, UserIdentity
from app.domain.identity.schemas import RegisterRequest
from app.domain.identity.service import IdentityService
from app.domain.identity.store import InMemoryIdentityStore
from app.infra.password import verify_password


def _payload(**overrides) -> RegisterRequest:
	data = {
		"name": "Ada Lovelace",
		"email": "  Ada@Example.COM ",
		"password": "analytical",
		"bio": " Engines ",
		"skills": ["Python", "python", " Math "],
	}
	data.update(overrides)
	return RegisterRequest(**data)


@pytest.fixture
def store():
	return InMemoryIdentityStore()


@pytest.fixture
def svc(store):
	return IdentityService(store)


@pytest.mark.asyncio
async def test_register_normalises_and_hashes(store, svc):
	identity = await svc.register(_payload())

	assert identity.email == "ada@example.com"
	assert identity.bio == "Engines"
	assert identity.skills == ["Python", "Math"]
	assert identity.password_hash != "analytical"
	assert verify_password(identity.password_hash, "analytical")
	assert (await store.find_by_email("ADA@example.com")).id == identity.id


@pytest.mark.asyncio
async def test_register_rejects_duplicates_and_weak_input(svc):
	await svc.register(_payload())
	with pytest.raises(policy.EmailTaken):
		await svc.register(_payload(email="ada@example.com"))
	with pytest.raises(policy.PasswordTooWeak):
		await svc.register(_payload(email="b@example.com", password="123"))
	with pytest.raises(policy.EmailInvalid):
		await svc.register(_payload(email="nope"))
	with pytest.raises(policy.NameInvalid):
		await svc.register(_payload(email="c@example.com", name="   "))


@pytest.mark.asyncio
async def test_get_profile_validates_id(svc):
	with pytest.raises(InvalidUserId):
		await svc.get_profile("abc")
	with pytest.raises(UserNotFound):
		await svc.get_profile(str(uuid4()))


def test_normalise_skills_limits():
	with pytest.raises(policy.IdentityPolicyError) as exc:
		policy.normalise_skills(["x" * (policy.SKILL_MAX_LEN + 1)])
	assert exc.value.reason == "skill_too_long"


@pytest.mark.asyncio
async def test_store_copies_documents(store):
	identity = UserIdentity(id=str(uuid4()), name="A", email="a@example.com", password_hash="h")
	await store.save(identity)

	loaded = await store.find_by_id(identity.id)
	loaded.connections.append("someone")

	assert (await store.find_by_id(identity.id)).connections == []


def test_request_document_round_trip_keeps_status():
	request = ConnectionRequest(from_user_id=str(uuid4()), status=RequestStatus.REJECTED)
	restored = ConnectionRequest.from_document(request.to_document())
	assert restored.status == RequestStatus.REJECTED
	assert restored.created_at == request.created_at


def test_identity_from_record_parses_json_requests():
	sender = str(uuid4())
	record = {
		"id": uuid4(),
		"name": "Rec",
		"email": "rec@example.com",
		"password_hash": "h",
		"skills": ["go"],
		"connections": [sender],
		"connection_requests": '[{"from": "%s", "status": "accepted", "created_at": "2024-01-01T00:00:00+00:00"}]' % sender,
	}
	identity = UserIdentity.from_record(record)
	assert identity.connection_requests[0].from_user_id == sender
	assert identity.connection_requests[0].status == RequestStatus.ACCEPTED
	assert identity.is_connected_to(sender)
