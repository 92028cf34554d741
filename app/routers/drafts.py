"""
Draft listing endpoints: autosave, list, publish and cleanup.
Mounted ahead of the property routes so "/properties/drafts" is not read as a property id.
"""

from fastapi import APIRouter, Depends, status, Path
from uuid import UUID

from app.models.user import User
from app.services.draft import DraftService
from app.schemas.property import (
    DraftSaveRequest,
    DraftListResponse,
    DraftSummary,
    DraftCleanupResponse,
    PropertyResponse
)
from app.schemas.error import get_error_responses
from app.utils.dependencies import get_current_active_user, get_draft_service


router = APIRouter(prefix="/properties/drafts", tags=["Drafts"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a new draft",
    description="Autosave a partially completed listing. Every field is optional.",
    responses=get_error_responses(400, 401, 422)
)
async def save_draft(
    draft_data: DraftSaveRequest,
    current_user: User = Depends(get_current_active_user),
    draft_service: DraftService = Depends(get_draft_service)
) -> PropertyResponse:
    draft = await draft_service.save_draft(draft_data, current_user)
    return PropertyResponse.model_validate(draft.to_dict())


@router.get(
    "",
    response_model=DraftListResponse,
    status_code=status.HTTP_200_OK,
    summary="List my drafts",
    responses=get_error_responses(401)
)
async def list_drafts(
    current_user: User = Depends(get_current_active_user),
    draft_service: DraftService = Depends(get_draft_service)
) -> DraftListResponse:
    drafts = await draft_service.list_drafts(current_user)
    return DraftListResponse(
        drafts=[DraftSummary.model_validate(draft) for draft in drafts],
        total=len(drafts)
    )


@router.post(
    "/cleanup",
    response_model=DraftCleanupResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete expired drafts",
    description="Removes the caller's expired drafts; super admins remove every user's.",
    responses=get_error_responses(401)
)
async def cleanup_drafts(
    current_user: User = Depends(get_current_active_user),
    draft_service: DraftService = Depends(get_draft_service)
) -> DraftCleanupResponse:
    deleted = await draft_service.cleanup_expired(current_user)
    return DraftCleanupResponse(success=True, deleted_count=deleted)


@router.put(
    "/{draft_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a draft",
    responses=get_error_responses(401, 404, 410, 422)
)
async def update_draft(
    draft_data: DraftSaveRequest,
    draft_id: UUID = Path(..., description="Draft ID"),
    current_user: User = Depends(get_current_active_user),
    draft_service: DraftService = Depends(get_draft_service)
) -> PropertyResponse:
    draft = await draft_service.update_draft(draft_id, draft_data, current_user)
    return PropertyResponse.model_validate(draft.to_dict())


@router.post(
    "/{draft_id}/publish",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Publish a draft",
    description="Submit a complete draft for review (admins publish directly).",
    responses=get_error_responses(401, 403, 404, 410, 422)
)
async def publish_draft(
    draft_id: UUID = Path(..., description="Draft ID"),
    current_user: User = Depends(get_current_active_user),
    draft_service: DraftService = Depends(get_draft_service)
) -> PropertyResponse:
    """
    Raises:
        ForbiddenError: If the account may not list yet
        GoneError: If the draft expired
        ValidationError: If required listing fields are missing
    """
    published = await draft_service.publish_draft(draft_id, current_user)
    return PropertyResponse.model_validate(published.to_dict())
