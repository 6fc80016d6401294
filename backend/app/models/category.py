"""Category model — groups products in the public catalog."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Category(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A product category addressed by a unique, URL-safe slug."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)

    # Products are detached (category_id set to NULL) by the database, never deleted with the category.
    products: Mapped[list["Product"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="category", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug={self.slug!r})>"
