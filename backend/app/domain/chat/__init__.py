"""Chat domain exports."""

from .models import ConversationKey, Message, conversation_id

__all__ = [
	"ConversationKey",
	"Message",
	"conversation_id",
]
