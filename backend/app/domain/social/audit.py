"""Audit helpers for connection lifecycle events."""

from __future__ import annotations

import logging
from typing import Dict

from redis.exceptions import RedisError

from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

CONNECTIONS_STREAM = "x:connections.events"
STREAM_MAXLEN = 10_000


async def log_connection_event(event: str, fields: Dict[str, str]) -> None:
	"""Append to the audit stream; a failed append is logged and dropped."""
	if not settings.audit_enabled:
		return
	payload = {"event": event, **{key: str(value) for key, value in fields.items()}}
	try:
		await redis_client.xadd(CONNECTIONS_STREAM, payload, maxlen=STREAM_MAXLEN, approximate=True)
	except (RedisError, OSError):
		obs_metrics.inc_audit_failure()
		logger.warning("audit append failed", extra={"event": event}, exc_info=True)


def inc_request(result: str) -> None:
	obs_metrics.inc_connection_request(result)


def inc_accept() -> None:
	obs_metrics.inc_connection_accept()


def inc_reject() -> None:
	obs_metrics.inc_connection_reject()


def inc_remove() -> None:
	obs_metrics.inc_connection_remove()
