"""Socket.IO namespace carrying presence, notifications and read receipts."""

from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import parse_qs

import socketio
from pydantic import ValidationError as PayloadError

from app.domain import container
from app.domain.chat.schemas import ReadReceipt
from app.domain.errors import DomainError
from app.infra.auth import resolve_user_id
from app.obs import logging as obs_logging
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def _header(scope: dict, name: str) -> Optional[str]:
	target = name.encode().lower()
	for key, value in scope.get("headers", []):
		if key.lower() == target:
			return value.decode()
	return None


def _query_param(environ: dict, scope: dict, name: str) -> Optional[str]:
	raw = environ.get("QUERY_STRING")
	if raw is None:
		query = scope.get("query_string", b"")
		raw = query.decode() if isinstance(query, (bytes, bytearray)) else str(query or "")
	values = parse_qs(raw).get(name)
	return values[0] if values else None


class RealtimeNamespace(socketio.AsyncNamespace):
	"""Default namespace; each connection is addressed by its user id."""

	def __init__(self, namespace: str = "/") -> None:
		super().__init__(namespace)
		self.users: Dict[str, str] = {}

	async def trigger_event(self, event: str, *args):
		# "message:read" dispatches to on_message_read
		return await super().trigger_event(event.replace(":", "_") if event else event, *args)

	def _authenticate(self, environ: dict, auth: Optional[dict]) -> Optional[str]:
		scope = environ.get("asgi.scope", environ)
		auth_payload = auth or environ.get("auth") or scope.get("auth") or {}
		token = auth_payload.get("token")
		if not token:
			auth_header = _header(scope, "authorization")
			if auth_header and auth_header.lower().startswith("bearer "):
				token = auth_header.split(" ", 1)[1]
		dev_user_id = (
			auth_payload.get("userId")
			or _query_param(environ, scope, "userId")
			or _header(scope, "x-user-id")
		)
		return resolve_user_id(token, str(dev_user_id) if dev_user_id else None)

	async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
		user_id = self._authenticate(environ, auth)
		if not user_id:
			raise ConnectionRefusedError("unauthorized")
		tokens = obs_logging.bind_context(user_id=user_id, sid=sid)
		try:
			await container.get_presence_service().connect(user_id, sid)
		except DomainError as exc:
			logger.info("socket connect refused", extra={"reason": exc.reason})
			raise ConnectionRefusedError(exc.reason) from None
		finally:
			obs_logging.reset_context(tokens)
		self.users[sid] = user_id
		obs_metrics.socket_connected(self.namespace)

	async def on_disconnect(self, sid: str, reason: Optional[str] = None) -> None:
		user_id = self.users.pop(sid, None)
		if user_id is None:
			return
		obs_metrics.socket_disconnected(self.namespace)
		try:
			await container.get_presence_service().disconnect(user_id, sid)
		except DomainError:
			logger.warning("presence disconnect failed", extra={"user_id": user_id}, exc_info=True)

	async def on_message_read(self, sid: str, data: Optional[dict] = None) -> None:
		obs_metrics.socket_event(self.namespace, "message:read")
		user_id = self.users.get(sid)
		if user_id is None:
			return
		try:
			receipt = ReadReceipt.model_validate(data or {})
		except PayloadError:
			logger.info("malformed read receipt", extra={"user_id": user_id})
			return
		try:
			await container.get_presence_service().mark_read(user_id, receipt.message_ids, receipt.sender_id)
		except DomainError:
			logger.warning("read receipt failed", extra={"user_id": user_id}, exc_info=True)
