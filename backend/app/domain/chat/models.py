"""Domain models for direct messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from app.domain.identity.models import UserIdentity, utcnow

CONVERSATION_SEPARATOR = "_"


@dataclass(slots=True)
class ConversationKey:
	"""Canonical representation of a 1:1 conversation; symmetric in its inputs."""

	user_a: str
	user_b: str

	@classmethod
	def from_participants(cls, user_one: str, user_two: str) -> "ConversationKey":
		ordered = tuple(sorted((str(user_one), str(user_two))))
		return cls(user_a=ordered[0], user_b=ordered[1])

	@property
	def conversation_id(self) -> str:
		return f"{self.user_a}{CONVERSATION_SEPARATOR}{self.user_b}"


def conversation_id(user_one: str, user_two: str) -> str:
	return ConversationKey.from_participants(user_one, user_two).conversation_id


@dataclass(slots=True)
class Message:
	id: str
	sender_id: str
	receiver_id: str
	content: str
	conversation_id: str
	is_read: bool = False
	created_at: datetime = field(default_factory=utcnow)
	updated_at: datetime = field(default_factory=utcnow)

	def is_participant(self, user_id: str) -> bool:
		return user_id in (self.sender_id, self.receiver_id)

	def other_participant(self, user_id: str) -> str:
		return self.receiver_id if self.sender_id == user_id else self.sender_id

	def is_unread_for(self, user_id: str) -> bool:
		return self.receiver_id == user_id and not self.is_read

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Message":
		return cls(
			id=str(record["id"]),
			sender_id=str(record["sender_id"]),
			receiver_id=str(record["receiver_id"]),
			content=record["content"],
			conversation_id=record["conversation_id"],
			is_read=bool(record["is_read"]),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)


@dataclass(slots=True)
class ConversationSummary:
	conversation_id: str
	last_message: Message
	unread_count: int
	other_user_id: str
	other_user: Optional[UserIdentity] = None
