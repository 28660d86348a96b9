import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.domain.social import audit
from app.infra.redis import redis_client, set_redis_client
from app.settings import settings


@pytest.mark.asyncio
async def test_connection_events_append_to_stream():
    await audit.log_connection_event("request.sent", {"from": "a", "to": "b"})
    await audit.log_connection_event("request.accepted", {"from": "a", "to": "b"})

    entries = await redis_client.xrange(audit.CONNECTIONS_STREAM, count=10)
    assert [fields["event"] for _, fields in entries] == ["request.sent", "request.accepted"]
    assert entries[0][1]["to"] == "b"


@pytest.mark.asyncio
async def test_audit_disabled_skips_stream(monkeypatch):
    monkeypatch.setattr(settings, "audit_enabled", False)
    await audit.log_connection_event("request.sent", {"from": "a", "to": "b"})
    assert await redis_client.xlen(audit.CONNECTIONS_STREAM) == 0


class _BrokenRedis:
    async def xadd(self, *args, **kwargs):
        raise RedisConnectionError("down")


@pytest.mark.asyncio
async def test_audit_failure_is_not_raised(fake_redis):
    set_redis_client(_BrokenRedis())
    try:
        await audit.log_connection_event("request.sent", {"from": "a", "to": "b"})
    finally:
        set_redis_client(fake_redis)
