"""Schema bootstrap: table/index creation, versioned migration steps, and seeding."""

from app.schema.manager import SchemaManager

__all__ = ["SchemaManager"]
