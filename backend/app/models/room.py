"""Room models — bookable rooms and the room types they are built from."""

from decimal import Decimal

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, IntegerPrimaryKeyMixin, TimestampMixin


class RoomType(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A template for rooms: name, description, default pricing and capacity."""

    __tablename__ = "room_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    base_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    max_adults: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    max_children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    rooms: Mapped[list["Room"]] = relationship(back_populates="room_type", passive_deletes="all")

    def __repr__(self) -> str:
        return f"<RoomType(id={self.id}, slug={self.slug!r})>"


class Room(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable instance of a room type."""

    __tablename__ = "rooms"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # RESTRICT: a room type in use cannot disappear underneath its rooms.
    room_type_id: Mapped[int] = mapped_column(
        ForeignKey("room_types.id", ondelete="RESTRICT", name="fk_rooms_room_type_id"),
        nullable=False,
        index=True,
    )
    main_image: Mapped[str | None] = mapped_column(String(500), default=None)
    images: Mapped[list] = mapped_column(JSON, default=list)
    max_adults: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    max_children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    size_sqm: Mapped[int | None] = mapped_column(Integer, default=None)
    amenities: Mapped[dict] = mapped_column(JSON, default=dict)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    room_type: Mapped[RoomType] = relationship(back_populates="rooms", lazy="selectin")

    @property
    def room_type_name(self) -> str | None:
        return self.room_type.name if self.room_type is not None else None

    @property
    def room_type_slug(self) -> str | None:
        return self.room_type.slug if self.room_type is not None else None

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, name={self.name!r}, room_type_id={self.room_type_id})>"
