"""Idempotent DDL for the PostgreSQL store backend, applied at startup."""

from __future__ import annotations

import logging

import asyncpg

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
	"""
	CREATE TABLE IF NOT EXISTS users (
		id UUID PRIMARY KEY,
		name TEXT NOT NULL,
		email TEXT NOT NULL,
		password_hash TEXT NOT NULL,
		bio TEXT NOT NULL DEFAULT '',
		skills TEXT[] NOT NULL DEFAULT '{}',
		profile_picture TEXT NOT NULL DEFAULT '',
		github TEXT NOT NULL DEFAULT '',
		linkedin TEXT NOT NULL DEFAULT '',
		connections TEXT[] NOT NULL DEFAULT '{}',
		connection_requests JSONB NOT NULL DEFAULT '[]'::jsonb,
		is_online BOOLEAN NOT NULL DEFAULT FALSE,
		last_seen TIMESTAMPTZ NOT NULL DEFAULT now(),
		created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
		updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
	)
	""",
	"CREATE UNIQUE INDEX IF NOT EXISTS users_email_key ON users (lower(email))",
	"CREATE INDEX IF NOT EXISTS users_connections_gin ON users USING GIN (connections)",
	"""
	CREATE TABLE IF NOT EXISTS messages (
		id TEXT PRIMARY KEY,
		sender_id UUID NOT NULL,
		receiver_id UUID NOT NULL,
		content TEXT NOT NULL,
		is_read BOOLEAN NOT NULL DEFAULT FALSE,
		conversation_id TEXT NOT NULL,
		created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
		updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
	)
	""",
	"CREATE INDEX IF NOT EXISTS messages_conversation_created ON messages (conversation_id, created_at)",
	"CREATE INDEX IF NOT EXISTS messages_sender_receiver ON messages (sender_id, receiver_id)",
	"CREATE INDEX IF NOT EXISTS messages_receiver_unread ON messages (receiver_id) WHERE NOT is_read",
)


async def ensure_schema(pool: asyncpg.Pool) -> None:
	async with pool.acquire() as conn:
		async with conn.transaction():
			for statement in SCHEMA_STATEMENTS:
				await conn.execute(statement)
	logger.info("schema ensured", extra={"statements": len(SCHEMA_STATEMENTS)})
