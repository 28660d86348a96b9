"""Profile read endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.domain import container
from app.domain.identity import schemas
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=schemas.UserProfile)
async def get_user(user_id: str, _: AuthenticatedUser = Depends(get_current_user)) -> schemas.UserProfile:
	identity = await container.get_identity_service().get_profile(user_id)
	return schemas.UserProfile.of(identity)
