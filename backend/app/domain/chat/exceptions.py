"""Domain-level exceptions for direct messaging."""

from __future__ import annotations

from app.domain.errors import Forbidden, NotFound, ValidationError


class EmptyContent(ValidationError):
	reason = "empty_content"
	message = "Message content is required"


class NotConnected(Forbidden):
	reason = "not_connected"
	message = "You can only message your connections"


class ConversationNotFound(NotFound):
	reason = "conversation_not_found"
	message = "Conversation not found"


class NotParticipant(Forbidden):
	reason = "not_participant"
	message = "Access denied"
