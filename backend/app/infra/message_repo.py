"""PostgreSQL persistence for direct messages."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Sequence

import asyncpg

from app.domain.chat.models import Message
from app.domain.chat.store import MessageStore
from app.domain.errors import Unavailable
from app.domain.identity.models import is_valid_user_id, utcnow
from app.obs import metrics as obs_metrics

_COLUMNS = "id, sender_id, receiver_id, content, is_read, conversation_id, created_at, updated_at"


@asynccontextmanager
async def _guard() -> AsyncIterator[None]:
	try:
		yield
	except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
		obs_metrics.inc_store_error("messages")
		raise Unavailable() from exc


class PostgresMessageStore(MessageStore):
	"""Messages table; ULID ids keep `ORDER BY created_at, id` stable."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def insert(self, message: Message) -> Message:
		async with _guard():
			await self._pool.execute(
				"""
				INSERT INTO messages (id, sender_id, receiver_id, content, is_read, conversation_id, created_at, updated_at)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
				""",
				message.id,
				message.sender_id,
				message.receiver_id,
				message.content,
				message.is_read,
				message.conversation_id,
				message.created_at,
				message.updated_at,
			)
		return message

	async def find_by_conversation_id(self, conversation_id: str) -> List[Message]:
		async with _guard():
			rows = await self._pool.fetch(
				f"SELECT {_COLUMNS} FROM messages WHERE conversation_id = $1 ORDER BY created_at, id",
				conversation_id,
			)
		return [Message.from_record(row) for row in rows]

	async def find_by_sender_or_receiver(self, user_id: str) -> List[Message]:
		if not is_valid_user_id(user_id):
			return []
		async with _guard():
			rows = await self._pool.fetch(
				f"""
				SELECT {_COLUMNS} FROM messages
				WHERE sender_id = $1 OR receiver_id = $1
				ORDER BY created_at, id
				""",
				str(user_id),
			)
		return [Message.from_record(row) for row in rows]

	async def bulk_mark_read(
		self,
		*,
		receiver_id: str,
		conversation_id: Optional[str] = None,
		message_ids: Optional[Sequence[str]] = None,
	) -> List[str]:
		if not is_valid_user_id(receiver_id):
			return []
		clauses = ["receiver_id = $1", "NOT is_read"]
		params: list[object] = [str(receiver_id), utcnow()]
		if conversation_id is not None:
			params.append(conversation_id)
			clauses.append(f"conversation_id = ${len(params)}")
		if message_ids is not None:
			ids = [str(item) for item in message_ids]
			if not ids:
				return []
			params.append(ids)
			clauses.append(f"id = ANY(${len(params)}::text[])")
		sql = (
			f"UPDATE messages SET is_read = TRUE, updated_at = $2 WHERE {' AND '.join(clauses)} "
			"RETURNING id"
		)
		async with _guard():
			rows = await self._pool.fetch(sql, *params)
		return [str(row["id"]) for row in rows]
