"""Reservation model — guest booking requests for a room."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, IntegerPrimaryKeyMixin, TimestampMixin

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

RESERVATION_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED)
TERMINAL_STATUSES = frozenset({STATUS_CANCELLED})


class Reservation(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A stay request for one room over the half-open range [check_in_date, check_out_date).

    Rows are never deleted. Cancellation is a status change, and ``room_name``
    keeps the audit trail readable if the room itself is later removed.
    """

    __tablename__ = "reservations"

    room_id: Mapped[int | None] = mapped_column(
        ForeignKey("rooms.id", ondelete="SET NULL", name="fk_reservations_room_id"),
        nullable=True,
        index=True,
    )
    room_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    guest_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    adults: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    special_requests: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=STATUS_PENDING, index=True)

    room: Mapped["Room | None"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_reservations_dates", "check_in_date", "check_out_date"),)

    def __repr__(self) -> str:
        return f"<Reservation(id={self.id}, room_id={self.room_id}, status={self.status})>"
