"""SQLAlchemy models for StayShop.

All models are imported here so that ``Base.metadata`` is complete before the
schema manager (or Alembic) inspects it. If you add a new model, import it in
this file.
"""

from app.models.admin import Admin
from app.models.analytics import PageView, VisitorStat
from app.models.category import Category
from app.models.product import Product
from app.models.reservation import Reservation
from app.models.room import Room, RoomType
from app.models.schema_migration import SchemaMigration

__all__ = [
    "Admin",
    "Category",
    "PageView",
    "Product",
    "Reservation",
    "Room",
    "RoomType",
    "SchemaMigration",
    "VisitorStat",
]
