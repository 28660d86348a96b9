"""Pydantic schemas for the messaging API and realtime payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from app.domain.chat.models import ConversationSummary, Message
from app.domain.common.schemas import CamelModel
from app.domain.identity.models import UserIdentity
from app.domain.identity.schemas import PresenceSummary, UserSummary

CONTENT_MAX_LEN = 4000


class SendMessageRequest(CamelModel):
	receiver_id: str = Field(..., description="Target user identifier")
	content: str = Field(default="", max_length=CONTENT_MAX_LEN)


class MessageResponse(CamelModel):
	id: str
	conversation_id: str
	sender_id: str
	receiver_id: str
	sender: Optional[UserSummary] = None
	receiver: Optional[UserSummary] = None
	content: str
	is_read: bool
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_model(
		cls,
		message: Message,
		profiles: Optional[Dict[str, UserIdentity]] = None,
	) -> "MessageResponse":
		profiles = profiles or {}
		sender = profiles.get(message.sender_id)
		receiver = profiles.get(message.receiver_id)
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			sender_id=message.sender_id,
			receiver_id=message.receiver_id,
			sender=UserSummary.of(sender) if sender else None,
			receiver=UserSummary.of(receiver) if receiver else None,
			content=message.content,
			is_read=message.is_read,
			created_at=message.created_at,
			updated_at=message.updated_at,
		)


class ConversationResponse(CamelModel):
	id: str
	last_message: MessageResponse
	unread_count: int
	other_user: Optional[PresenceSummary] = None

	@classmethod
	def from_summary(cls, summary: ConversationSummary) -> "ConversationResponse":
		other = summary.other_user
		return cls(
			id=summary.conversation_id,
			last_message=MessageResponse.from_model(summary.last_message),
			unread_count=summary.unread_count,
			other_user=PresenceSummary.of(other) if other else None,
		)


class MessagingContact(UserSummary):
	email: str = ""

	@classmethod
	def of(cls, identity: UserIdentity) -> "MessagingContact":
		return cls(
			id=identity.id,
			name=identity.name,
			profile_picture=identity.profile_picture,
			email=identity.email,
		)


class ReadReceipt(CamelModel):
	"""Inbound `message:read` payload."""

	message_ids: List[str] = Field(default_factory=list)
	sender_id: Optional[str] = None


class ReadUpdate(CamelModel):
	"""Outbound `message:read:update` payload."""

	message_ids: List[str]
	read_by: str


class UserStatus(CamelModel):
	"""`user:status` payload; lastSeen only accompanies offline transitions."""

	user_id: str
	is_online: bool
	last_seen: Optional[datetime] = None

	def wire(self) -> dict:
		return self.model_dump(mode="json", by_alias=True, exclude_none=True)
