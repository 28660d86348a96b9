"""REST API surface for connection requests, suggestions and analytics."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.domain import container
from app.domain.social.schemas import (
	ActionResponse,
	AnalyticsOut,
	BulkRequestIn,
	BulkResponse,
	BulkResultOut,
	ConnectionProfile,
	SearchResultOut,
	SuggestionOut,
)
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/connections", tags=["connections"])

EXPORT_FILENAME = "devconnect-connections-{date}.json"


@router.post("/request/{user_id}", response_model=ActionResponse)
async def send_request(user_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> ActionResponse:
	await container.get_connection_service().send_request(auth_user.id, user_id)
	return ActionResponse(message="Connection request sent successfully")


@router.post("/accept/{user_id}", response_model=ActionResponse)
async def accept_request(user_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> ActionResponse:
	await container.get_connection_service().accept_request(auth_user.id, user_id)
	return ActionResponse(message="Connection request accepted")


@router.post("/reject/{user_id}", response_model=ActionResponse)
async def reject_request(user_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> ActionResponse:
	await container.get_connection_service().reject_request(auth_user.id, user_id)
	return ActionResponse(message="Connection request rejected")


@router.get("/suggestions", response_model=List[SuggestionOut])
async def suggestions(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[SuggestionOut]:
	ranked = await container.get_connection_service().compute_suggestions(auth_user.id)
	return [SuggestionOut.from_recommendation(item) for item in ranked]


@router.get("/my-connections", response_model=List[ConnectionProfile])
async def my_connections(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[ConnectionProfile]:
	connections = await container.get_connection_service().list_connections(auth_user.id)
	return [ConnectionProfile.of(item) for item in connections]


@router.get("/pending", response_model=List[ConnectionProfile])
async def pending(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[ConnectionProfile]:
	senders = await container.get_connection_service().list_pending(auth_user.id)
	return [ConnectionProfile.of(item) for item in senders]


@router.get("/analytics", response_model=AnalyticsOut)
async def analytics(auth_user: AuthenticatedUser = Depends(get_current_user)) -> AnalyticsOut:
	report = await container.get_connection_service().analytics(auth_user.id)
	return AnalyticsOut.of(report)


@router.get("/search", response_model=List[SearchResultOut])
async def search(
	q: Optional[str] = Query(default=None, max_length=200),
	skills: Optional[str] = Query(default=None, max_length=500),
	location: Optional[str] = Query(default=None, max_length=200),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[SearchResultOut]:
	hits = await container.get_connection_service().search(auth_user.id, query=q, skills=skills, location=location)
	return [SearchResultOut.from_hit(hit) for hit in hits]


@router.post("/bulk-request", response_model=BulkResponse)
async def bulk_request(payload: BulkRequestIn, auth_user: AuthenticatedUser = Depends(get_current_user)) -> BulkResponse:
	results = await container.get_connection_service().bulk_request(auth_user.id, payload.user_ids)
	return BulkResponse(results=[BulkResultOut.of(item) for item in results])


@router.get("/export")
async def export(auth_user: AuthenticatedUser = Depends(get_current_user)) -> JSONResponse:
	snapshot = await container.get_connection_service().export(auth_user.id)
	filename = EXPORT_FILENAME.format(date=snapshot.export_date.date().isoformat())
	return JSONResponse(
		content=snapshot.wire(),
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)


# registered last so the static paths above take precedence
@router.delete("/{user_id}", response_model=ActionResponse)
async def remove_connection(user_id: str, auth_user: AuthenticatedUser = Depends(get_current_user)) -> ActionResponse:
	await container.get_connection_service().remove_connection(auth_user.id, user_id)
	return ActionResponse(message="Connection removed successfully")
