"""Domain models and constants for connections and recommendations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from app.domain.identity.models import UserIdentity

BULK_REQUEST_MAX = 10
SEARCH_LIMIT = 20
TOP_SKILLS_LIMIT = 5
GROWTH_WINDOW_DAYS = 30

HIGH_SKILL_SCORE = 5
GOOD_SKILL_SCORE = 2


class ConnectionStatus(str, Enum):
	"""Relationship of a candidate as seen by the viewer."""

	CONNECTED = "connected"
	PENDING_SENT = "pending_sent"
	PENDING_RECEIVED = "pending_received"
	MUTUAL = "mutual"
	CONNECT = "connect"


class StrengthLevel(str, Enum):
	STRONG = "strong"
	WEAK = "weak"


@dataclass(slots=True)
class MutualConnection:
	id: str
	name: str


@dataclass(slots=True)
class Recommendation:
	"""A scored suggestion for the viewer; derived on every request."""

	candidate: UserIdentity
	status: ConnectionStatus
	priority: int
	mutual_connections: List[MutualConnection] = field(default_factory=list)
	skill_score: float = 0.0
	connection_strength_score: float = 0.0
	total_score: float = 0.0
	recommendation_reason: str = ""

	@property
	def mutual_connections_count(self) -> int:
		return len(self.mutual_connections)


@dataclass(slots=True)
class SearchHit:
	candidate: UserIdentity
	status: ConnectionStatus
	priority: int


@dataclass(slots=True)
class ConnectionStrength:
	user_id: str
	name: str
	strength: StrengthLevel
	mutual_count: int


@dataclass(slots=True)
class SkillCount:
	skill: str
	count: int


@dataclass(slots=True)
class NetworkAnalytics:
	total_connections: int
	pending_requests: int
	accepted_requests: int
	rejected_requests: int
	connection_strength: List[ConnectionStrength]
	top_skills: List[SkillCount]
	network_growth: int


@dataclass(slots=True)
class BulkResult:
	user_id: str
	success: bool
	reason: Optional[str] = None
	message: str = ""
