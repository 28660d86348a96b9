"""Process-local map of live Socket.IO handles per user."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class Emitter(Protocol):
	namespace: str

	async def emit(self, event: str, data: Any = None, to: Optional[str] = None, room: Optional[str] = None, **kwargs: Any) -> None:
		...


class PresenceRegistry:
	"""Holds one sid per user; the most recent connect wins.

	Delivery through `emit_to_user` is best-effort: a user without a live
	handle simply misses the event, and emit failures are logged.
	"""

	def __init__(self) -> None:
		self._handles: Dict[str, str] = {}
		self._emitter: Optional[Emitter] = None

	def bind(self, emitter: Optional[Emitter]) -> None:
		self._emitter = emitter

	@property
	def emitter(self) -> Optional[Emitter]:
		return self._emitter

	def register(self, user_id: str, sid: str) -> Optional[str]:
		"""Record `sid` as the live handle and return the one it replaced."""
		previous = self._handles.get(user_id)
		self._handles[user_id] = sid
		obs_metrics.presence_online(len(self._handles))
		return previous

	def unregister(self, user_id: str, sid: str) -> bool:
		"""Drop the mapping only if `sid` is still current; True when removed."""
		if self._handles.get(user_id) != sid:
			return False
		del self._handles[user_id]
		obs_metrics.presence_online(len(self._handles))
		return True

	def handle_for(self, user_id: str) -> Optional[str]:
		return self._handles.get(user_id)

	def clear(self) -> None:
		self._handles.clear()
		obs_metrics.presence_online(0)

	async def emit_to_user(self, user_id: str, event: str, payload: dict) -> bool:
		sid = self._handles.get(user_id)
		if sid is None or self._emitter is None:
			return False
		try:
			await self._emitter.emit(event, payload, room=sid)
		except Exception:
			obs_metrics.socket_emit_failure(event)
			logger.warning("socket emit failed", extra={"event": event, "target_user": user_id}, exc_info=True)
			return False
		obs_metrics.socket_event(self._emitter.namespace, event)
		return True
