"""Admin model — accounts allowed through the admin mutation gateway."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Admin(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """Administrator account for the control plane."""

    __tablename__ = "admins"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="admin")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Admin id={self.id} email={self.email!r} role={self.role!r}>"
