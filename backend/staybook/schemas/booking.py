"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.config import settings
from staybook.schemas.common import PageParams, Pagination


def _check_stay(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and start_date < date.today():
        raise ValueError("Start date cannot be in the past")
    if start_date is not None and end_date is not None:
        if end_date <= start_date:
            raise ValueError("End date must be after start date")
        if (end_date - start_date).days > settings.max_booking_nights:
            raise ValueError(f"Booking duration cannot exceed {settings.max_booking_nights} days")


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for creating a new booking."""

    property_id: uuid.UUID
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        _check_stay(self.start_date, self.end_date)
        return self


class BookingUpdate(BaseModel):
    """Schema for partially updating a booking. All fields optional."""

    start_date: date | None = None
    end_date: date | None = None
    status: Literal["confirmed", "cancelled"] | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingUpdate":
        _check_stay(self.start_date, self.end_date)
        return self


class BookingListParams(PageParams):
    status: Literal["confirmed", "cancelled"] | None = None
    property_id: uuid.UUID | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertySummary(BaseModel):
    """Minimal property projection embedded in booking responses."""

    id: uuid.UUID
    title: str
    price_per_night: Decimal

    model_config = ConfigDict(from_attributes=True)


class PropertyDetailSummary(PropertySummary):
    description: str


class UserSummary(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Standard booking response returned from write operations."""

    id: uuid.UUID
    property_id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    start_date: date
    end_date: date
    total_price: Decimal
    status: str
    created_at: datetime
    updated_at: datetime
    property: PropertySummary | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Single-booking view with the guest and a fuller property projection."""

    property: PropertyDetailSummary | None = None
    user: UserSummary | None = None


class MyBookingResponse(BaseModel):
    """A booking as listed to its owner; status is exposed as flags."""

    id: uuid.UUID
    property_id: uuid.UUID
    user_name: str
    start_date: date
    end_date: date
    total_price: Decimal
    is_confirmed: bool
    is_cancelled: bool
    created_at: datetime
    property: PropertyDetailSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingDetails(BaseModel):
    """Price breakdown of a new booking."""

    nights: int
    price_per_night: Decimal
    total_price: Decimal


class BookingCreatedData(BaseModel):
    booking: BookingResponse
    booking_details: BookingDetails


class BookingData(BaseModel):
    booking: BookingResponse


class BookingDetailData(BaseModel):
    booking: BookingDetailResponse


class MyBookingsData(BaseModel):
    bookings: list[MyBookingResponse]


class StatusSummary(BaseModel):
    confirmed: int
    cancelled: int


class AdminBookingResponse(BookingResponse):
    user: UserSummary | None = None


class BookingListData(BaseModel):
    """Admin booking list with page-level status counts."""

    bookings: list[AdminBookingResponse]
    pagination: Pagination
    summary: StatusSummary
