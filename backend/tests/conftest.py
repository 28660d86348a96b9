import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Settings require a secret; provide one before the app is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("ENVIRONMENT", "dev")

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from app.domain import container
from app.infra import postgres
from app.main import app
from app.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from app.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests authenticate via the X-User-Id header, which is only accepted in
	dev mode; stores stay in memory.
	"""
	original_env = settings.environment
	original_backend = settings.store_backend
	original_audit = settings.audit_enabled
	settings.environment = "dev"
	settings.store_backend = "memory"
	settings.audit_enabled = True
	try:
		yield
	finally:
		settings.environment = original_env
		settings.store_backend = original_backend
		settings.audit_enabled = original_audit


@pytest.fixture(autouse=True)
def fresh_container():
	container.reset()
	yield
	container.reset()


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
