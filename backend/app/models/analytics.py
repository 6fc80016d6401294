"""Analytics models — page-view event log and its daily rollup."""

import datetime as dt

from sqlalchemy import Date, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, IntegerPrimaryKeyMixin, TimestampMixin


class VisitorStat(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """Exactly one row per calendar date, maintained by upsert."""

    __tablename__ = "visitor_stats"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True, index=True)
    visitors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    page_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_visitors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<VisitorStat(date={self.date}, visitors={self.visitors}, page_views={self.page_views})>"


class PageView(IntegerPrimaryKeyMixin, Base):
    """Append-only page-view event."""

    __tablename__ = "page_views"

    ip_address: Mapped[str | None] = mapped_column(String(45), default=None, index=True)
    user_agent: Mapped[str | None] = mapped_column(Text, default=None)
    page_url: Mapped[str | None] = mapped_column(Text, default=None)
    referrer: Mapped[str | None] = mapped_column(Text, default=None)
    session_id: Mapped[str | None] = mapped_column(String(255), default=None, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(server_default=func.now(), index=True)
