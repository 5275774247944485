"""Consumer profile endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status

from label_score.api.auth import current_user_id, require_api_token
from label_score.api.models import ProfileBody, ProfileCreate, ProfileUpdate

if TYPE_CHECKING:
    from label_score.containers import AppContainer

router = APIRouter(
    prefix="/profiles", tags=["profiles"], dependencies=[Depends(require_api_token)]
)


@router.get("", response_model=list[ProfileBody])
async def list_profiles(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> list[ProfileBody]:
    """Return the caller's profiles."""
    container: AppContainer = request.app.state.container
    profiles = container.profile_service.list_for_user(user_id)
    return [ProfileBody.from_domain(profile) for profile in profiles]


@router.post("", response_model=ProfileBody, status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: ProfileCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> ProfileBody:
    """Create a profile for the caller."""
    container: AppContainer = request.app.state.container
    payload = body.model_dump(exclude={"set_active"})
    profile = container.profile_service.create(
        user_id, payload, set_active=body.set_active
    )
    return ProfileBody.from_domain(profile)


@router.get("/{profile_id}", response_model=ProfileBody)
async def get_profile(
    profile_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> ProfileBody:
    """Return one of the caller's profiles."""
    container: AppContainer = request.app.state.container
    return ProfileBody.from_domain(container.profile_service.get(user_id, profile_id))


@router.patch("/{profile_id}", response_model=ProfileBody)
async def update_profile(
    profile_id: UUID,
    body: ProfileUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> ProfileBody:
    """Partially update a profile."""
    container: AppContainer = request.app.state.container
    payload = body.model_dump(exclude={"set_active"}, exclude_unset=True)
    profile = container.profile_service.update(
        user_id, profile_id, payload, set_active=body.set_active
    )
    return ProfileBody.from_domain(profile)


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(
    profile_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> Response:
    """Delete a profile."""
    container: AppContainer = request.app.state.container
    container.profile_service.delete(user_id, profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
