"""Product model — items sold through the catalog."""

from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Product(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A catalog product, optionally filed under a category."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL", name="fk_products_category_id"),
        nullable=True,
        index=True,
    )
    main_image: Mapped[str | None] = mapped_column(String(500), default=None)
    images: Mapped[list] = mapped_column(JSON, default=list)
    specifications: Mapped[dict] = mapped_column(JSON, default=dict)

    category: Mapped["Category | None"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="products", lazy="selectin"
    )

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name!r}, category_id={self.category_id})>"
