"""Booking model — a user's stay on a property for a closed date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
BOOKING_STATUSES = (STATUS_CONFIRMED, STATUS_CANCELLED)


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of ``[start_date, end_date]`` on one property.

    ``user_name`` is a snapshot of the guest's display name taken when the
    booking was made; it is not kept in sync with later profile edits.
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_name: Mapped[str] = mapped_column(String(101), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=STATUS_CONFIRMED,
        nullable=False,
        index=True,
    )  # confirmed, cancelled

    # Defined before the `property` relationship, which shadows the builtin
    # for the rest of the class body.
    @property
    def is_confirmed(self) -> bool:
        return self.status == STATUS_CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    # Relationships
    property: Mapped["Property"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    user: Mapped["User"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_bookings_date_order"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_bookings_status"),
        Index("ix_bookings_property_dates", "property_id", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, user_id={self.user_id}, "
            f"start_date={self.start_date}, end_date={self.end_date}, status={self.status})>"
        )
