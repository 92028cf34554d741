"""
Property management API endpoints for CRUD operations, search and status changes.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from uuid import UUID
import math

from app.models.user import User
from app.models.property import PropertyStatus, ListingType
from app.repositories.property import PropertySearchFilters
from app.services.property import PropertyService
from app.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyStatusChangeRequest,
    PropertyStatusChangeResponse
)
from app.utils.dependencies import (
    get_current_active_user,
    get_optional_current_user,
    get_property_service,
    get_request_country
)
from app.schemas.error import get_crud_error_responses, get_common_error_responses, get_error_responses


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description=(
        "Create a listing. Agents, landlords and FSBO owners submit for review; "
        "admin listings go live immediately."
    ),
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new property listing.

    Raises:
        ForbiddenError: If the account may not list yet
        ValidationError: If property data is invalid
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search public listings",
    description="Paginated search over active and under-contract listings in one country",
    responses=get_error_responses(400, 422)
)
async def list_properties(
    listing_type: Optional[ListingType] = Query(None, description="sale or rent"),
    region: Optional[str] = Query(None, description="Region filter"),
    city: Optional[str] = Query(None, description="City filter"),
    property_type: Optional[str] = Query(None, description="Property type, e.g. house"),
    query: Optional[str] = Query(None, description="Search in title and description"),
    min_price: Optional[int] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[int] = Query(None, ge=0, description="Maximum price"),
    bedrooms: Optional[int] = Query(None, ge=0, le=50, description="Minimum number of bedrooms"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(20, ge=1, le=100, description="Number of properties per page"),
    country_id: str = Depends(get_request_country),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Public listing search.

    The country comes from the `country` query parameter, then the country cookie,
    then the hostname.
    """
    filters = PropertySearchFilters(
        country_id=country_id,
        listing_type=listing_type,
        region=region,
        city=city,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        property_type=property_type,
        query=query
    )
    properties, total_count = await property_service.search_properties(filters, page, page_size)

    total_pages = math.ceil(total_count / page_size) if total_count > 0 else 1
    return PropertyListResponse(
        properties=[PropertyResponse.model_validate(prop.to_dict()) for prop in properties],
        total=total_count,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
        country_id=country_id
    )


@router.get(
    "/mine",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="List my properties",
    description="The caller's listings in every status, drafts included, optionally filtered by status",
    responses=get_error_responses(401, 403)
)
async def list_my_properties(
    status_filter: Optional[PropertyStatus] = Query(None, alias="status", description="Status filter"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_my_properties(current_user, status_filter)
    return [PropertyResponse.model_validate(prop.to_dict()) for prop in properties]


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    description="Public listings are visible to everyone; others to the owner and country admins",
    responses=get_common_error_responses()
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Optional[User] = Depends(get_optional_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Edit listing fields. Only the owner or an admin of the listing's country can update.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Update property details.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        ForbiddenError: If user doesn't have permission to update property
        ValidationError: If update data is invalid
    """
    updated_property = await property_service.update_property(property_id, property_data, current_user)
    return PropertyResponse.model_validate(updated_property.to_dict())


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete a listing. Only the owner or an admin of the listing's country can delete.",
    responses=get_common_error_responses()
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, current_user)


@router.put(
    "/{property_id}/status",
    response_model=PropertyStatusChangeResponse,
    status_code=status.HTTP_200_OK,
    summary="Change property status",
    description=(
        "Move a listing through its lifecycle. Approving and rejecting pending listings "
        "is reserved for admins; a reason is required when rejecting."
    ),
    responses=get_common_error_responses()
)
async def change_property_status(
    request: PropertyStatusChangeRequest,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyStatusChangeResponse:
    """
    Apply a status transition.

    Raises:
        InvalidStatusTransitionError: If the transition is not allowed
        PropertyOwnershipError: If a non-owner attempts an owner-only change
        CountryAccessError: If an admin acts outside their country
    """
    result = await property_service.change_status(
        property_id,
        request.status,
        current_user,
        rejection_reason=request.rejection_reason
    )
    return PropertyStatusChangeResponse(
        success=result["success"],
        message=result["message"],
        property=PropertyResponse.model_validate(result["property"].to_dict())
    )
