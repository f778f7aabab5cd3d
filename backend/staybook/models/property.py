"""Property model — a bookable stay with a fixed availability window."""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A property guests can book inside ``[available_from, available_to]``."""

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    available_from: Mapped[date] = mapped_column(Date, nullable=False)
    available_to: Mapped[date] = mapped_column(Date, nullable=False)

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("price_per_night > 0", name="ck_properties_price_positive"),
        CheckConstraint("available_to > available_from", name="ck_properties_window_order"),
        Index("ix_properties_window", "available_from", "available_to"),
        Index("ix_properties_price_per_night", "price_per_night"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, price_per_night={self.price_per_night})>"
