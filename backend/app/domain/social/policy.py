"""Guard checks for connection requests."""

from __future__ import annotations

from typing import Optional, Sequence

from app.domain.identity.models import ConnectionRequest, UserIdentity
from app.domain.identity.policy import parse_user_id
from app.domain.social.exceptions import (
	AlreadyConnected,
	BulkLimitExceeded,
	RequestAlreadyReceived,
	RequestAlreadySent,
	RequestNotFound,
	SelfRequest,
)
from app.domain.social.models import BULK_REQUEST_MAX


def guard_not_self(user_id: str, target_id: str) -> None:
	if str(user_id) == str(target_id):
		raise SelfRequest()


def guard_can_request(requester: UserIdentity, target: UserIdentity) -> None:
	"""Both directions are checked so a pair never holds two pending requests."""
	if requester.is_connected_to(target.id):
		raise AlreadyConnected()
	if target.pending_request_from(requester.id) is not None:
		raise RequestAlreadySent()
	if requester.pending_request_from(target.id) is not None:
		raise RequestAlreadyReceived()


def require_pending(receiver: UserIdentity, sender_id: str) -> ConnectionRequest:
	request: Optional[ConnectionRequest] = receiver.pending_request_from(sender_id)
	if request is None:
		raise RequestNotFound()
	return request


def guard_bulk_size(user_ids: Sequence[object]) -> None:
	if not user_ids or len(user_ids) > BULK_REQUEST_MAX:
		raise BulkLimitExceeded()


def parse_skill_filter(raw: Optional[str]) -> list[str]:
	if not raw:
		return []
	return [part.strip() for part in raw.split(",") if part.strip()]


__all__ = [
	"guard_bulk_size",
	"guard_can_request",
	"guard_not_self",
	"parse_skill_filter",
	"parse_user_id",
	"require_pending",
]
