"""Domain-level exceptions for connection requests and connections."""

from __future__ import annotations

from app.domain.errors import Conflict, NotFound, ValidationError


class SelfRequest(Conflict):
	reason = "self_request"
	message = "Cannot send connection request to yourself"


class AlreadyConnected(Conflict):
	reason = "already_connected"
	message = "Already connected"


class RequestAlreadySent(Conflict):
	reason = "request_already_sent"
	message = "Connection request already sent"


class RequestAlreadyReceived(Conflict):
	reason = "request_already_received"
	message = "This user has already sent you a connection request"


class RequestNotFound(NotFound):
	reason = "request_not_found"
	message = "Connection request not found"


class BulkLimitExceeded(ValidationError):
	reason = "bulk_limit"
	message = "Provide between 1 and 10 user IDs"
