"""Registration endpoint.

Token issuance lives outside this service; clients present a bearer JWT
signed with the shared secret (or `X-User-Id` in development).
"""

from __future__ import annotations

from fastapi import APIRouter, status

from app.domain import container
from app.domain.identity import schemas

router = APIRouter(tags=["auth"])


@router.post("/auth/register", response_model=schemas.UserProfile, status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.RegisterRequest) -> schemas.UserProfile:
	identity = await container.get_identity_service().register(payload)
	return schemas.UserProfile.of(identity)
