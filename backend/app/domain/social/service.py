"""Service layer for connection requests, suggestions and network analytics."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from app.domain.errors import DomainError
from app.domain.identity.models import ConnectionRequest, RequestStatus, UserIdentity, dedupe_ids, utcnow
from app.domain.identity.schemas import UserSummary
from app.domain.identity.store import IdentityStore, load_connections, load_identity
from app.domain.presence.registry import PresenceRegistry
from app.domain.social import audit, policy, scoring
from app.domain.social.models import SEARCH_LIMIT, BulkResult, NetworkAnalytics, Recommendation, SearchHit
from app.domain.social.schemas import (
	ConnectionRequestNotice,
	ExportConnection,
	ExportConnections,
	ExportNetworkStats,
	ExportOut,
	ExportRequestDetail,
	ExportRequests,
	ExportSender,
	ExportUser,
	NetworkGrowthOut,
)
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

CONNECTION_REQUEST_EVENT = "connectionRequest"


class ConnectionService:
	"""Relationship engine over the identity store.

	Every mutation re-reads the documents it touches. Accept and remove write
	two identities independently; readers reconcile any asymmetry through
	`list_connections`.
	"""

	def __init__(self, store: IdentityStore, presence: PresenceRegistry) -> None:
		self._store = store
		self._presence = presence

	async def _notify(self, user_id: str, kind: str, actor: UserIdentity, message: str) -> None:
		notice = ConnectionRequestNotice(type=kind, sender=UserSummary.of(actor), message=message)
		await self._presence.emit_to_user(user_id, CONNECTION_REQUEST_EVENT, notice.wire())

	async def send_request(self, requester_id: str, target_id: str) -> UserIdentity:
		target_key = policy.parse_user_id(target_id)
		try:
			policy.guard_not_self(requester_id, target_key)
			requester = await load_identity(self._store, requester_id)
			policy.guard_not_self(requester.id, target_key)
			target = await load_identity(self._store, target_key)
			policy.guard_can_request(requester, target)
		except DomainError as exc:
			audit.inc_request(exc.reason)
			raise

		target.connection_requests.append(ConnectionRequest(from_user_id=requester.id))
		await self._store.save(target)
		audit.inc_request("sent")
		await audit.log_connection_event("request.sent", {"from": requester.id, "to": target.id})
		logger.info("connection request sent", extra={"target_user": target.id})
		await self._notify(
			target.id,
			"new_request",
			requester,
			f"{requester.name} sent you a connection request",
		)
		return target

	async def accept_request(self, accepter_id: str, requester_id: str) -> UserIdentity:
		requester_key = policy.parse_user_id(requester_id)
		accepter = await load_identity(self._store, accepter_id)
		request = policy.require_pending(accepter, requester_key)
		requester = await load_identity(self._store, requester_key)

		request.status = RequestStatus.ACCEPTED
		accepter.add_connection(requester.id)
		await self._store.save(accepter)

		requester.add_connection(accepter.id)
		crossing = requester.pending_request_from(accepter.id)
		if crossing is not None:
			crossing.status = RequestStatus.ACCEPTED
		try:
			await self._store.save(requester)
		except DomainError:
			obs_metrics.inc_partial_write("accept")
			logger.warning("second half of accept failed", extra={"target_user": requester.id}, exc_info=True)
			raise

		audit.inc_accept()
		await audit.log_connection_event("request.accepted", {"from": requester.id, "to": accepter.id})
		await self._notify(
			requester.id,
			"request_accepted",
			accepter,
			f"{accepter.name} accepted your connection request",
		)
		return accepter

	async def reject_request(self, rejecter_id: str, requester_id: str) -> UserIdentity:
		requester_key = policy.parse_user_id(requester_id)
		rejecter = await load_identity(self._store, rejecter_id)
		request = policy.require_pending(rejecter, requester_key)
		request.status = RequestStatus.REJECTED
		await self._store.save(rejecter)
		audit.inc_reject()
		await audit.log_connection_event("request.rejected", {"from": requester_key, "to": rejecter.id})
		return rejecter

	async def remove_connection(self, user_id: str, other_id: str) -> None:
		other_key = policy.parse_user_id(other_id)
		user = await load_identity(self._store, user_id)
		user.drop_connection(other_key)
		await self._store.save(user)

		try:
			other = await self._store.find_by_id(other_key)
			if other is not None and other.drop_connection(user.id):
				await self._store.save(other)
		except DomainError:
			obs_metrics.inc_partial_write("remove")
			logger.warning("second half of remove failed", extra={"target_user": other_key}, exc_info=True)

		audit.inc_remove()
		await audit.log_connection_event("connection.removed", {"from": user.id, "to": other_key})

	async def compute_suggestions(self, viewer_id: str) -> List[Recommendation]:
		viewer = await load_identity(self._store, viewer_id)
		candidates = await self._store.find_all(exclude_id=viewer.id)
		obs_metrics.inc_suggestions()
		return scoring.rank_suggestions(viewer, candidates)

	async def search(
		self,
		viewer_id: str,
		*,
		query: Optional[str] = None,
		skills: Optional[str] = None,
		location: Optional[str] = None,
	) -> List[SearchHit]:
		viewer = await load_identity(self._store, viewer_id)
		candidates = await self._store.search(
			exclude_id=viewer.id,
			query=(query or "").strip() or None,
			skills=policy.parse_skill_filter(skills),
			location=(location or "").strip() or None,
			limit=SEARCH_LIMIT,
		)
		obs_metrics.inc_search_query()
		return scoring.classify_search(viewer, candidates)

	async def analytics(self, viewer_id: str) -> NetworkAnalytics:
		viewer = await load_identity(self._store, viewer_id)
		connections = await self._store.find_by_ids(viewer.connections)
		return scoring.analyse(viewer, connections)

	async def list_connections(self, user_id: str) -> List[UserIdentity]:
		user = await load_identity(self._store, user_id)
		return await load_connections(self._store, user)

	async def list_pending(self, user_id: str) -> List[UserIdentity]:
		user = await load_identity(self._store, user_id)
		sender_ids = dedupe_ids([req.from_user_id for req in user.requests_with_status(RequestStatus.PENDING)])
		return await self._store.find_by_ids(sender_ids)

	async def bulk_request(self, requester_id: str, user_ids: Sequence[object]) -> List[BulkResult]:
		policy.guard_bulk_size(user_ids)
		results: List[BulkResult] = []
		for raw in user_ids:
			try:
				await self.send_request(requester_id, str(raw))
			except DomainError as exc:
				results.append(BulkResult(user_id=str(raw), success=False, reason=exc.reason, message=exc.message))
				continue
			results.append(BulkResult(user_id=str(raw), success=True, message="Connection request sent successfully"))
		return results

	async def export(self, user_id: str) -> ExportOut:
		user = await load_identity(self._store, user_id)
		connections = await self._store.find_by_ids(user.connections)
		senders = {
			item.id: item
			for item in await self._store.find_by_ids(dedupe_ids([req.from_user_id for req in user.connection_requests]))
		}

		details: List[ExportRequestDetail] = []
		for req in user.connection_requests:
			sender = senders.get(req.from_user_id)
			details.append(
				ExportRequestDetail(
					sender=ExportSender(
						name=sender.name,
						email=sender.email,
						bio=sender.bio,
						skills=list(sender.skills),
						profile_picture=sender.profile_picture,
					)
					if sender
					else None,
					status=req.status.value,
					created_at=req.created_at,
				)
			)

		pending = len(user.requests_with_status(RequestStatus.PENDING))
		growth = NetworkGrowthOut(this_month=scoring.network_growth(connections))
		return ExportOut(
			export_date=utcnow(),
			user=ExportUser(name=user.name, email=user.email, bio=user.bio, skills=list(user.skills)),
			connections=ExportConnections(
				total=len(user.connections),
				items=[
					ExportConnection(
						name=conn.name,
						email=conn.email,
						bio=conn.bio,
						skills=list(conn.skills),
						profile_picture=conn.profile_picture,
						github=conn.github,
						linkedin=conn.linkedin,
						connected_at=conn.created_at,
					)
					for conn in connections
				],
			),
			connection_requests=ExportRequests(
				pending=pending,
				accepted=len(user.requests_with_status(RequestStatus.ACCEPTED)),
				rejected=len(user.requests_with_status(RequestStatus.REJECTED)),
				details=details,
			),
			network_stats=ExportNetworkStats(
				total_connections=len(user.connections),
				pending_requests=pending,
				network_growth=growth,
			),
		)
