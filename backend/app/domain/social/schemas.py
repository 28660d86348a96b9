"""Pydantic schemas for the connections API and realtime payloads."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from app.domain.common.schemas import CamelModel
from app.domain.identity.models import UserIdentity
from app.domain.identity.schemas import UserSummary
from app.domain.social.models import (
	BulkResult,
	ConnectionStatus,
	NetworkAnalytics,
	Recommendation,
	SearchHit,
	StrengthLevel,
)


class ConnectionProfile(CamelModel):
	id: str
	name: str
	email: str
	bio: str = ""
	skills: List[str] = Field(default_factory=list)
	profile_picture: str = ""
	github: str = ""
	linkedin: str = ""
	is_online: bool = False
	last_seen: Optional[datetime] = None

	@classmethod
	def of(cls, identity: UserIdentity) -> "ConnectionProfile":
		return cls(
			id=identity.id,
			name=identity.name,
			email=identity.email,
			bio=identity.bio,
			skills=list(identity.skills),
			profile_picture=identity.profile_picture,
			github=identity.github,
			linkedin=identity.linkedin,
			is_online=identity.is_online,
			last_seen=identity.last_seen,
		)


class MutualConnectionOut(CamelModel):
	id: str
	name: str


class SuggestionOut(ConnectionProfile):
	priority: int
	status: ConnectionStatus
	mutual_connections: List[MutualConnectionOut] = Field(default_factory=list)
	mutual_connections_count: int = 0
	skill_score: float = 0.0
	connection_strength_score: float = 0.0
	total_score: float = 0.0
	recommendation_reason: str = ""

	@classmethod
	def from_recommendation(cls, item: Recommendation) -> "SuggestionOut":
		base = ConnectionProfile.of(item.candidate).model_dump()
		return cls(
			**base,
			priority=item.priority,
			status=item.status,
			mutual_connections=[MutualConnectionOut(id=m.id, name=m.name) for m in item.mutual_connections],
			mutual_connections_count=item.mutual_connections_count,
			skill_score=item.skill_score,
			connection_strength_score=item.connection_strength_score,
			total_score=item.total_score,
			recommendation_reason=item.recommendation_reason,
		)


class SearchResultOut(ConnectionProfile):
	priority: int
	status: ConnectionStatus

	@classmethod
	def from_hit(cls, hit: SearchHit) -> "SearchResultOut":
		base = ConnectionProfile.of(hit.candidate).model_dump()
		return cls(**base, priority=hit.priority, status=hit.status)


class ConnectionStrengthOut(CamelModel):
	user_id: str
	name: str
	mutual_connections: int
	strength: StrengthLevel


class SkillCountOut(CamelModel):
	skill: str
	count: int


class NetworkGrowthOut(CamelModel):
	this_month: int


class AnalyticsOut(CamelModel):
	total_connections: int
	pending_requests: int
	accepted_requests: int
	rejected_requests: int
	connection_strengths: List[ConnectionStrengthOut]
	top_skills: List[SkillCountOut]
	network_growth: NetworkGrowthOut

	@classmethod
	def of(cls, analytics: NetworkAnalytics) -> "AnalyticsOut":
		return cls(
			total_connections=analytics.total_connections,
			pending_requests=analytics.pending_requests,
			accepted_requests=analytics.accepted_requests,
			rejected_requests=analytics.rejected_requests,
			connection_strengths=[
				ConnectionStrengthOut(
					user_id=item.user_id,
					name=item.name,
					mutual_connections=item.mutual_count,
					strength=item.strength,
				)
				for item in analytics.connection_strength
			],
			top_skills=[SkillCountOut(skill=item.skill, count=item.count) for item in analytics.top_skills],
			network_growth=NetworkGrowthOut(this_month=analytics.network_growth),
		)


class BulkRequestIn(CamelModel):
	user_ids: List[str] = Field(default_factory=list)


class BulkResultOut(CamelModel):
	user_id: str
	success: bool
	reason: Optional[str] = None
	message: str = ""

	@classmethod
	def of(cls, result: BulkResult) -> "BulkResultOut":
		return cls(user_id=result.user_id, success=result.success, reason=result.reason, message=result.message)


class BulkResponse(CamelModel):
	results: List[BulkResultOut]


class ActionResponse(CamelModel):
	message: str


class ConnectionRequestNotice(CamelModel):
	"""`connectionRequest` socket payload."""

	type: Literal["new_request", "request_accepted"]
	sender: UserSummary = Field(alias="from")
	message: str


class ExportUser(CamelModel):
	name: str
	email: str
	bio: str = ""
	skills: List[str] = Field(default_factory=list)


class ExportConnection(ExportUser):
	profile_picture: str = ""
	github: str = ""
	linkedin: str = ""
	connected_at: datetime


class ExportConnections(CamelModel):
	total: int
	items: List[ExportConnection] = Field(alias="list")


class ExportSender(ExportUser):
	profile_picture: str = ""


class ExportRequestDetail(CamelModel):
	sender: Optional[ExportSender] = Field(default=None, alias="from")
	status: str
	created_at: datetime


class ExportRequests(CamelModel):
	pending: int
	accepted: int
	rejected: int
	details: List[ExportRequestDetail]


class ExportNetworkStats(CamelModel):
	total_connections: int
	pending_requests: int
	network_growth: NetworkGrowthOut


class ExportOut(CamelModel):
	export_date: datetime
	user: ExportUser
	connections: ExportConnections
	connection_requests: ExportRequests
	network_stats: ExportNetworkStats
