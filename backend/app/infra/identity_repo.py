"""PostgreSQL persistence for identities and their embedded requests."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Sequence

import asyncpg

from app.domain.errors import Unavailable
from app.domain.identity.models import UserIdentity, is_valid_user_id, utcnow
from app.domain.identity.policy import EmailTaken
from app.domain.identity.store import IdentityStore
from app.obs import metrics as obs_metrics

_COLUMNS = (
	"id, name, email, password_hash, bio, skills, profile_picture, github, linkedin, "
	"connections, connection_requests, is_online, last_seen, created_at, updated_at"
)


def _like_pattern(value: str) -> str:
	escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
	return f"%{escaped}%"


def _valid_ids(user_ids: Sequence[str]) -> List[str]:
	return [str(item) for item in user_ids if is_valid_user_id(item)]


@asynccontextmanager
async def _guard() -> AsyncIterator[None]:
	try:
		yield
	except asyncpg.UniqueViolationError as exc:
		raise EmailTaken() from exc
	except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
		obs_metrics.inc_store_error("identities")
		raise Unavailable() from exc


class PostgresIdentityStore(IdentityStore):
	"""Stores identities in `users`; requests live in a JSONB column."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def find_by_id(self, user_id: str) -> Optional[UserIdentity]:
		if not is_valid_user_id(user_id):
			return None
		async with _guard():
			row = await self._pool.fetchrow(f"SELECT {_COLUMNS} FROM users WHERE id = $1", str(user_id))
		return UserIdentity.from_record(row) if row else None

	async def find_by_ids(self, user_ids: Sequence[str]) -> List[UserIdentity]:
		ids = _valid_ids(user_ids)
		if not ids:
			return []
		async with _guard():
			rows = await self._pool.fetch(f"SELECT {_COLUMNS} FROM users WHERE id = ANY($1::uuid[])", ids)
		by_id = {str(row["id"]): UserIdentity.from_record(row) for row in rows}
		# keep the caller's order
		return [by_id[item] for item in dict.fromkeys(ids) if item in by_id]

	async def find_by_email(self, email: str) -> Optional[UserIdentity]:
		async with _guard():
			row = await self._pool.fetchrow(
				f"SELECT {_COLUMNS} FROM users WHERE lower(email) = lower($1)",
				email.strip(),
			)
		return UserIdentity.from_record(row) if row else None

	async def find_all(self, *, exclude_id: Optional[str] = None) -> List[UserIdentity]:
		async with _guard():
			if exclude_id and is_valid_user_id(exclude_id):
				rows = await self._pool.fetch(
					f"SELECT {_COLUMNS} FROM users WHERE id <> $1 ORDER BY created_at, id",
					str(exclude_id),
				)
			else:
				rows = await self._pool.fetch(f"SELECT {_COLUMNS} FROM users ORDER BY created_at, id")
		return [UserIdentity.from_record(row) for row in rows]

	async def find_where_connections_contains(self, user_id: str) -> List[UserIdentity]:
		async with _guard():
			rows = await self._pool.fetch(
				f"SELECT {_COLUMNS} FROM users WHERE connections @> ARRAY[$1]::text[] ORDER BY created_at, id",
				str(user_id),
			)
		return [UserIdentity.from_record(row) for row in rows]

	async def search(
		self,
		*,
		exclude_id: str,
		query: Optional[str] = None,
		skills: Sequence[str] = (),
		location: Optional[str] = None,
		limit: int = 20,
	) -> List[UserIdentity]:
		clauses = ["id::text <> $1"]
		params: list[object] = [str(exclude_id)]
		if query:
			params.append(_like_pattern(query))
			idx = len(params)
			clauses.append(f"(name ILIKE ${idx} OR bio ILIKE ${idx} OR email ILIKE ${idx})")
		if skills:
			params.append(list(skills))
			clauses.append(f"skills && ${len(params)}::text[]")
		if location:
			params.append(_like_pattern(location))
			clauses.append(f"bio ILIKE ${len(params)}")
		params.append(int(limit))
		sql = (
			f"SELECT {_COLUMNS} FROM users WHERE {' AND '.join(clauses)} "
			f"ORDER BY created_at, id LIMIT ${len(params)}"
		)
		async with _guard():
			rows = await self._pool.fetch(sql, *params)
		return [UserIdentity.from_record(row) for row in rows]

	async def save(self, identity: UserIdentity) -> UserIdentity:
		identity.updated_at = utcnow()
		requests = json.dumps([request.to_document() for request in identity.connection_requests])
		async with _guard():
			await self._pool.execute(
				"""
				INSERT INTO users (
					id, name, email, password_hash, bio, skills, profile_picture, github, linkedin,
					connections, connection_requests, is_online, last_seen, created_at, updated_at
				)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11::jsonb, $12, $13, $14, $15)
				ON CONFLICT (id) DO UPDATE SET
					name = EXCLUDED.name,
					email = EXCLUDED.email,
					password_hash = EXCLUDED.password_hash,
					bio = EXCLUDED.bio,
					skills = EXCLUDED.skills,
					profile_picture = EXCLUDED.profile_picture,
					github = EXCLUDED.github,
					linkedin = EXCLUDED.linkedin,
					connections = EXCLUDED.connections,
					connection_requests = EXCLUDED.connection_requests,
					is_online = EXCLUDED.is_online,
					last_seen = EXCLUDED.last_seen,
					updated_at = EXCLUDED.updated_at
				""",
				identity.id,
				identity.name,
				identity.email,
				identity.password_hash,
				identity.bio,
				list(identity.skills),
				identity.profile_picture,
				identity.github,
				identity.linkedin,
				list(identity.connections),
				requests,
				identity.is_online,
				identity.last_seen,
				identity.created_at,
				identity.updated_at,
			)
		return identity
