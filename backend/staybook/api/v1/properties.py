"""Properties API routes — public catalog reads, admin-only writes."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_db, require_admin
from staybook.models.user import User
from staybook.schemas.common import ApiResponse, ErrorResponse
from staybook.schemas.property import (
    AvailabilityParams,
    AvailablePropertyListData,
    AvailablePropertyResponse,
    DateRangeResponse,
    OccupiedRange,
    OverallAvailability,
    PropertyAvailabilityData,
    PropertyCreate,
    PropertyData,
    PropertyListData,
    PropertyListParams,
    PropertyResponse,
    PropertyUpdate,
)
from staybook.services import property_service, query_service
from staybook.services.repository import PropertyFilter

router = APIRouter(
    prefix="/api/v1/properties",
    tags=["properties"],
    responses={404: {"model": ErrorResponse}},
)


def _filters(params: PropertyListParams) -> PropertyFilter:
    return PropertyFilter(
        available_from=params.available_from,
        available_to=params.available_to,
        min_price=params.min_price,
        max_price=params.max_price,
    )


# ---------------------------------------------------------------------------
# Public reads
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=ApiResponse[PropertyListData],
    summary="List properties",
)
async def list_properties(
    params: Annotated[PropertyListParams, Query()],
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PropertyListData]:
    """Return a page of properties matching the date and price filters."""
    page = await query_service.list_properties(db, _filters(params), params.page, params.limit)
    return ApiResponse(
        message="Properties retrieved successfully",
        data=PropertyListData(
            properties=[PropertyResponse.model_validate(p) for p in page.items],
            pagination=page.pagination(),
        ),
    )


@router.get(
    "/available",
    response_model=ApiResponse[AvailablePropertyListData],
    summary="List properties with at least one free date range",
)
async def list_available_properties(
    params: Annotated[PropertyListParams, Query()],
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AvailablePropertyListData]:
    """Return matching properties that can still be booked, with their free periods."""
    page = await query_service.list_available_properties(db, _filters(params), params.page, params.limit)
    properties = [
        AvailablePropertyResponse(
            **PropertyResponse.model_validate(view.property).model_dump(),
            is_fully_available=view.availability.is_fully_available,
            available_periods=view.availability.periods(),
            total_available_days=view.availability.total_available_days,
        )
        for view in page.items
    ]
    return ApiResponse(
        message="Available properties retrieved successfully",
        data=AvailablePropertyListData(properties=properties, pagination=page.pagination()),
    )


@router.get(
    "/{property_id}",
    response_model=ApiResponse[PropertyData],
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PropertyData]:
    prop = await property_service.get_property(db, property_id)
    return ApiResponse(
        message="Property retrieved successfully",
        data=PropertyData(property=PropertyResponse.model_validate(prop)),
    )


@router.get(
    "/{property_id}/availability",
    response_model=ApiResponse[PropertyAvailabilityData],
    summary="Get available date ranges for a property",
)
async def get_property_availability(
    property_id: uuid.UUID,
    params: Annotated[AvailabilityParams, Query()],
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PropertyAvailabilityData]:
    """Return the property's window, its free ranges, and the confirmed bookings occupying it.

    ``start_date``/``end_date`` restrict ``occupied_dates`` to bookings
    overlapping that window.
    """
    view = await query_service.get_property_availability(db, property_id, params.start_date, params.end_date)
    prop = view.property
    return ApiResponse(
        message="Property availability retrieved successfully",
        data=PropertyAvailabilityData(
            property_id=prop.id,
            property_title=prop.title,
            overall_availability=OverallAvailability(
                available_from=prop.available_from,
                available_to=prop.available_to,
            ),
            available_ranges=[DateRangeResponse(start_date=r.start, end_date=r.end) for r in view.available_ranges],
            occupied_dates=[
                OccupiedRange(start_date=b.start_date, end_date=b.end_date, status=b.status) for b in view.occupied
            ],
        ),
    )


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ApiResponse[PropertyData],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ApiResponse[PropertyData]:
    prop = await property_service.create_property(db, body.model_dump())
    return ApiResponse(
        message="Property created successfully",
        data=PropertyData(property=PropertyResponse.model_validate(prop)),
    )


@router.put(
    "/{property_id}",
    response_model=ApiResponse[PropertyData],
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ApiResponse[PropertyData]:
    """Partially update a property. Only explicitly set fields are changed."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    prop = await property_service.update_property(db, property_id, changes)
    return ApiResponse(
        message="Property updated successfully",
        data=PropertyData(property=PropertyResponse.model_validate(prop)),
    )


@router.delete(
    "/{property_id}",
    response_model=ApiResponse[None],
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ApiResponse[None]:
    """Delete a property and its bookings, unless a confirmed booking is still ahead."""
    await property_service.delete_property(db, property_id)
    return ApiResponse(message="Property deleted successfully")
