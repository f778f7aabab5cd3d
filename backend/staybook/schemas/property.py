"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.schemas.common import PageParams, Pagination

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new property."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    price_per_night: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    available_from: date
    available_to: date

    @model_validator(mode="after")
    def check_window(self) -> "PropertyCreate":
        if self.available_from < date.today():
            raise ValueError("Available from date cannot be in the past")
        if self.available_to <= self.available_from:
            raise ValueError("Available to date must be after available from date")
        return self


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, min_length=10, max_length=2000)
    price_per_night: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    available_from: date | None = None
    available_to: date | None = None

    @model_validator(mode="after")
    def check_window(self) -> "PropertyUpdate":
        """If both bounds are provided, validate available_to > available_from."""
        if (
            self.available_from is not None
            and self.available_to is not None
            and self.available_to <= self.available_from
        ):
            raise ValueError("Available to date must be after available from date")
        return self


class PropertyListParams(PageParams):
    """Query parameters for the property listings."""

    available_from: date | None = None
    available_to: date | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "PropertyListParams":
        if self.min_price is not None and self.max_price is not None and self.max_price < self.min_price:
            raise ValueError("Maximum price must be greater than minimum price")
        if (
            self.available_from is not None
            and self.available_to is not None
            and self.available_to < self.available_from
        ):
            raise ValueError("Available to date must not be before available from date")
        return self


class AvailabilityParams(BaseModel):
    """Optional window narrowing the occupied dates of an availability lookup."""

    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "AvailabilityParams":
        if self.start_date is not None and self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public property information returned from the API."""

    id: uuid.UUID
    title: str
    description: str
    price_per_night: Decimal
    available_from: date
    available_to: date
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyData(BaseModel):
    property: PropertyResponse


class PropertyListData(BaseModel):
    """Paginated list of properties."""

    properties: list[PropertyResponse]
    pagination: Pagination


class DateRangeResponse(BaseModel):
    start_date: date
    end_date: date


class AvailablePeriod(DateRangeResponse):
    days_available: int


class AvailablePropertyResponse(PropertyResponse):
    """A property with its free periods."""

    is_fully_available: bool
    available_periods: list[AvailablePeriod]
    total_available_days: int


class AvailablePropertyListData(BaseModel):
    properties: list[AvailablePropertyResponse]
    pagination: Pagination


class OverallAvailability(BaseModel):
    available_from: date
    available_to: date


class OccupiedRange(DateRangeResponse):
    status: str


class PropertyAvailabilityData(BaseModel):
    """Availability calendar of a single property."""

    property_id: uuid.UUID
    property_title: str
    overall_availability: OverallAvailability
    available_ranges: list[DateRangeResponse]
    occupied_dates: list[OccupiedRange]
