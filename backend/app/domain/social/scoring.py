"""Pure scoring, classification and analytics over identity snapshots.

Nothing here touches a store; the service loads the documents and hands them in.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Sequence

from app.domain.identity.models import RequestStatus, UserIdentity, utcnow
from app.domain.social.models import (
	GOOD_SKILL_SCORE,
	GROWTH_WINDOW_DAYS,
	HIGH_SKILL_SCORE,
	TOP_SKILLS_LIMIT,
	ConnectionStatus,
	ConnectionStrength,
	MutualConnection,
	NetworkAnalytics,
	Recommendation,
	SearchHit,
	SkillCount,
	StrengthLevel,
)


def round1(value: float) -> float:
	"""Round half away from zero to one decimal (4.45 -> 4.5)."""
	return math.floor(value * 10 + 0.5) / 10


def skill_overlap_score(viewer_skills: Iterable[str], candidate_skills: Iterable[str]) -> float:
	"""10 x shared tags over the larger set size, case-insensitive; unrounded."""
	mine = {skill.lower() for skill in viewer_skills}
	theirs = {skill.lower() for skill in candidate_skills}
	if not mine or not theirs:
		return 0.0
	return 10 * len(mine & theirs) / max(len(mine), len(theirs))


def mutual_connection_ids(viewer: UserIdentity, candidate: UserIdentity) -> List[str]:
	mine = set(viewer.connections)
	return [conn for conn in candidate.connections if conn in mine and conn != viewer.id]


def classify(viewer: UserIdentity, candidate: UserIdentity, *, has_mutuals: bool = False) -> ConnectionStatus:
	if viewer.is_connected_to(candidate.id):
		return ConnectionStatus.CONNECTED
	if candidate.pending_request_from(viewer.id) is not None:
		return ConnectionStatus.PENDING_SENT
	if viewer.pending_request_from(candidate.id) is not None:
		return ConnectionStatus.PENDING_RECEIVED
	if has_mutuals:
		return ConnectionStatus.MUTUAL
	return ConnectionStatus.CONNECT


def _plural(count: int, noun: str) -> str:
	return f"{count} {noun}{'' if count == 1 else 's'}"


def _reason(status: ConnectionStatus, mutual_count: int, skill: float) -> str:
	if status == ConnectionStatus.CONNECTED:
		return "Already connected"
	if status == ConnectionStatus.PENDING_SENT:
		return "Request already sent"
	if status == ConnectionStatus.PENDING_RECEIVED:
		return "Has sent you a request"
	if mutual_count > 0:
		return _plural(mutual_count, "mutual connection")
	if skill > HIGH_SKILL_SCORE:
		return "High skill compatibility"
	if skill > GOOD_SKILL_SCORE:
		return "Good skill match"
	return "Suggested for you"


def recommend(
	viewer: UserIdentity,
	candidate: UserIdentity,
	names: Mapping[str, str],
) -> Recommendation:
	"""Score a single candidate; `names` resolves mutual connection ids to names."""
	mutual_ids = mutual_connection_ids(viewer, candidate)
	mutuals = [MutualConnection(id=conn, name=names.get(conn, "")) for conn in mutual_ids]
	skill = skill_overlap_score(viewer.skills, candidate.skills)
	strength = 2.0 * len(mutuals)
	status = classify(viewer, candidate, has_mutuals=bool(mutuals))

	if status == ConnectionStatus.CONNECTED:
		priority = 1
	elif mutuals or skill > GOOD_SKILL_SCORE:
		priority = 2
	else:
		priority = 3

	return Recommendation(
		candidate=candidate,
		status=status,
		priority=priority,
		mutual_connections=mutuals,
		skill_score=round1(skill),
		connection_strength_score=strength,
		total_score=round1(skill + strength),
		recommendation_reason=_reason(status, len(mutuals), skill),
	)


def _suggestion_key(item: Recommendation) -> tuple:
	mutual_rank = -item.mutual_connections_count if item.priority == 2 else 0
	return (item.priority, -item.total_score, mutual_rank)


def rank_suggestions(viewer: UserIdentity, candidates: Sequence[UserIdentity]) -> List[Recommendation]:
	names: Dict[str, str] = {candidate.id: candidate.name for candidate in candidates}
	scored = [recommend(viewer, candidate, names) for candidate in candidates if candidate.id != viewer.id]
	return sorted(scored, key=_suggestion_key)


def classify_search(viewer: UserIdentity, candidates: Sequence[UserIdentity]) -> List[SearchHit]:
	hits: List[SearchHit] = []
	for candidate in candidates:
		if candidate.id == viewer.id:
			continue
		status = classify(viewer, candidate)
		priority = 1 if status == ConnectionStatus.CONNECTED else 3
		hits.append(SearchHit(candidate=candidate, status=status, priority=priority))
	return sorted(hits, key=lambda hit: hit.priority)


def top_skills(connections: Sequence[UserIdentity], limit: int = TOP_SKILLS_LIMIT) -> List[SkillCount]:
	counter: Counter[str] = Counter()
	for connection in connections:
		counter.update(connection.skills)
	return [SkillCount(skill=skill, count=count) for skill, count in counter.most_common(limit)]


def network_growth(connections: Sequence[UserIdentity], *, now: datetime | None = None) -> int:
	cutoff = (now or utcnow()) - timedelta(days=GROWTH_WINDOW_DAYS)
	return sum(1 for connection in connections if connection.created_at > cutoff)


def analyse(
	viewer: UserIdentity,
	connections: Sequence[UserIdentity],
	*,
	now: datetime | None = None,
) -> NetworkAnalytics:
	strengths: List[ConnectionStrength] = []
	for connection in connections:
		mutual_count = len(mutual_connection_ids(viewer, connection))
		strengths.append(
			ConnectionStrength(
				user_id=connection.id,
				name=connection.name,
				strength=StrengthLevel.STRONG if mutual_count > 0 else StrengthLevel.WEAK,
				mutual_count=mutual_count,
			)
		)
	return NetworkAnalytics(
		total_connections=len(viewer.connections),
		pending_requests=len(viewer.requests_with_status(RequestStatus.PENDING)),
		accepted_requests=len(viewer.requests_with_status(RequestStatus.ACCEPTED)),
		rejected_requests=len(viewer.requests_with_status(RequestStatus.REJECTED)),
		connection_strength=strengths,
		top_skills=top_skills(connections),
		network_growth=network_growth(connections, now=now),
	)
