"""FastAPI endpoints for direct messages between connections."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from app.domain import container
from app.domain.chat.schemas import ConversationResponse, MessageResponse, MessagingContact, SendMessageRequest
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/conversations", response_model=List[ConversationResponse])
async def list_conversations(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[ConversationResponse]:
	return await container.get_chat_service().list_conversations(auth_user.id)


@router.get("/connections", response_model=List[MessagingContact])
async def list_messaging_connections(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[MessagingContact]:
	contacts = await container.get_chat_service().list_messaging_connections(auth_user.id)
	return [MessagingContact.of(item) for item in contacts]


@router.get("/{conversation_id}", response_model=List[MessageResponse])
async def list_messages(
	conversation_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[MessageResponse]:
	return await container.get_chat_service().list_messages(conversation_id, auth_user.id)


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
	payload: SendMessageRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MessageResponse:
	return await container.get_chat_service().send_message(auth_user.id, payload.receiver_id, payload.content)
