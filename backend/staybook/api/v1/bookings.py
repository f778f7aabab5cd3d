"""Bookings API router.

Access rule: a booking is visible to and changeable by its owner; an
administrator may act on any booking and is exempt from the past-date rules.
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db, require_admin
from staybook.models.user import User
from staybook.schemas.booking import (
    AdminBookingResponse,
    BookingCreate,
    BookingCreatedData,
    BookingData,
    BookingDetailData,
    BookingDetailResponse,
    BookingDetails,
    BookingListData,
    BookingListParams,
    BookingResponse,
    BookingUpdate,
    MyBookingResponse,
    MyBookingsData,
)
from staybook.schemas.common import ApiResponse, ErrorResponse
from staybook.services import booking_service, query_service
from staybook.services.repository import BookingFilter

router = APIRouter(
    prefix="/api/v1/bookings",
    tags=["bookings"],
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=ApiResponse[BookingCreatedData],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[BookingCreatedData]:
    """Book a property for the current user.

    The booking is confirmed immediately. Fails with 409 when any of the
    dates is already taken by a confirmed booking.
    """
    created = await booking_service.create_booking(
        db, current_user, body.property_id, body.start_date, body.end_date
    )
    return ApiResponse(
        message="Booking created successfully",
        data=BookingCreatedData(
            booking=BookingResponse.model_validate(created.booking),
            booking_details=BookingDetails(
                nights=created.nights,
                price_per_night=created.price_per_night,
                total_price=created.total_price,
            ),
        ),
    )


@router.get(
    "",
    response_model=ApiResponse[BookingListData],
    summary="List all bookings (admin)",
)
async def list_bookings(
    params: Annotated[BookingListParams, Query()],
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ApiResponse[BookingListData]:
    """Return a page of bookings, newest first, with confirmed/cancelled counts for the page."""
    filters = BookingFilter(status=params.status, property_id=params.property_id)
    page = await query_service.list_all_bookings(db, filters, params.page, params.limit)
    return ApiResponse(
        message="Bookings retrieved successfully",
        data=BookingListData(
            bookings=[AdminBookingResponse.model_validate(b) for b in page.items],
            pagination=page.pagination(),
            summary=page.summary,
        ),
    )


@router.get(
    "/my",
    response_model=ApiResponse[MyBookingsData],
    summary="List the current user's bookings",
)
async def list_my_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[MyBookingsData]:
    bookings = await query_service.list_my_bookings(db, current_user)
    return ApiResponse(
        message="User bookings retrieved successfully",
        data=MyBookingsData(bookings=[MyBookingResponse.model_validate(b) for b in bookings]),
    )


@router.get(
    "/{booking_id}",
    response_model=ApiResponse[BookingDetailData],
    summary="Get booking detail",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[BookingDetailData]:
    booking = await query_service.get_booking(db, booking_id, current_user)
    return ApiResponse(
        message="Booking retrieved successfully",
        data=BookingDetailData(booking=BookingDetailResponse.model_validate(booking)),
    )


@router.put(
    "/{booking_id}",
    response_model=ApiResponse[BookingData],
    responses={409: {"model": ErrorResponse}},
    summary="Update a booking",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[BookingData]:
    """Partially update dates and/or status.

    New dates are re-checked against the property window and the other
    confirmed bookings, and the total price is recomputed.
    """
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    booking = await booking_service.update_booking(db, booking_id, current_user, changes)
    return ApiResponse(
        message="Booking updated successfully",
        data=BookingData(booking=BookingResponse.model_validate(booking)),
    )


@router.post(
    "/{booking_id}/cancel",
    response_model=ApiResponse[BookingData],
    responses={409: {"model": ErrorResponse}},
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[BookingData]:
    """Cancel a booking and release its dates. Cancellation cannot be undone by the owner."""
    booking = await booking_service.cancel_booking(db, booking_id, current_user)
    return ApiResponse(
        message="Booking cancelled successfully",
        data=BookingData(booking=BookingResponse.model_validate(booking)),
    )


@router.delete(
    "/{booking_id}",
    response_model=ApiResponse[None],
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ApiResponse[None]:
    """Permanently remove a booking."""
    await booking_service.delete_booking(db, booking_id, current_user)
    return ApiResponse(message="Booking deleted successfully")
