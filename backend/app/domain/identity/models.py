"""Domain models for identities and their embedded connection requests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence
from uuid import UUID

RecordLike = Mapping[str, Any]


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


def is_valid_user_id(value: Any) -> bool:
	try:
		UUID(str(value))
	except (TypeError, ValueError):
		return False
	return True


def _coerce_json_to_list(value: Any) -> list[Any]:
	if not value:
		return []
	raw: Any = value
	if isinstance(raw, (bytes, bytearray, memoryview)):
		# Postgres JSONB columns can arrive as text, bytes, or memoryview objects.
		raw = bytes(raw).decode("utf-8")
	if isinstance(raw, str):
		try:
			raw = json.loads(raw)
		except json.JSONDecodeError:
			return []
	if isinstance(raw, (list, tuple)):
		return list(raw)
	return []


def _as_datetime(value: Any) -> datetime:
	if isinstance(value, datetime):
		return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
	if isinstance(value, str) and value:
		parsed = datetime.fromisoformat(value)
		return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
	return utcnow()


class RequestStatus(str, Enum):
	"""Lifecycle of a connection request; never returns to PENDING."""

	PENDING = "pending"
	ACCEPTED = "accepted"
	REJECTED = "rejected"


@dataclass(slots=True)
class ConnectionRequest:
	"""A directional proposal embedded on the receiving identity."""

	from_user_id: str
	status: RequestStatus = RequestStatus.PENDING
	created_at: datetime = field(default_factory=utcnow)

	@property
	def is_pending(self) -> bool:
		return self.status == RequestStatus.PENDING

	def to_document(self) -> dict:
		return {
			"from": self.from_user_id,
			"status": self.status.value,
			"created_at": self.created_at.isoformat(),
		}

	@classmethod
	def from_document(cls, doc: RecordLike) -> "ConnectionRequest":
		return cls(
			from_user_id=str(doc["from"]),
			status=RequestStatus(doc.get("status", "pending")),
			created_at=_as_datetime(doc.get("created_at")),
		)


@dataclass(slots=True)
class UserIdentity:
	id: str
	name: str
	email: str
	password_hash: str
	bio: str = ""
	skills: List[str] = field(default_factory=list)
	profile_picture: str = ""
	github: str = ""
	linkedin: str = ""
	connections: List[str] = field(default_factory=list)
	connection_requests: List[ConnectionRequest] = field(default_factory=list)
	is_online: bool = False
	last_seen: datetime = field(default_factory=utcnow)
	created_at: datetime = field(default_factory=utcnow)
	updated_at: datetime = field(default_factory=utcnow)

	def is_connected_to(self, other_id: str) -> bool:
		return str(other_id) in self.connections

	def pending_request_from(self, sender_id: str) -> Optional[ConnectionRequest]:
		for request in self.connection_requests:
			if request.from_user_id == str(sender_id) and request.is_pending:
				return request
		return None

	def add_connection(self, other_id: str) -> bool:
		if str(other_id) in self.connections:
			return False
		self.connections.append(str(other_id))
		return True

	def drop_connection(self, other_id: str) -> bool:
		before = len(self.connections)
		self.connections = [conn for conn in self.connections if conn != str(other_id)]
		return len(self.connections) != before

	def requests_with_status(self, status: RequestStatus) -> List[ConnectionRequest]:
		return [request for request in self.connection_requests if request.status == status]

	@classmethod
	def from_record(cls, record: RecordLike) -> "UserIdentity":
		requests_raw = _coerce_json_to_list(record.get("connection_requests"))
		return cls(
			id=str(record["id"]),
			name=record["name"],
			email=record["email"],
			password_hash=record.get("password_hash") or "",
			bio=record.get("bio") or "",
			skills=list(record.get("skills") or []),
			profile_picture=record.get("profile_picture") or "",
			github=record.get("github") or "",
			linkedin=record.get("linkedin") or "",
			connections=[str(item) for item in record.get("connections") or []],
			connection_requests=[ConnectionRequest.from_document(item) for item in requests_raw],
			is_online=bool(record.get("is_online")),
			last_seen=_as_datetime(record.get("last_seen")),
			created_at=_as_datetime(record.get("created_at")),
			updated_at=_as_datetime(record.get("updated_at")),
		)


def dedupe_ids(ids: Sequence[str]) -> List[str]:
	seen: set[str] = set()
	ordered: List[str] = []
	for item in ids:
		key = str(item)
		if key in seen:
			continue
		seen.add(key)
		ordered.append(key)
	return ordered
