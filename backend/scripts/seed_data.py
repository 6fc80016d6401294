"""Seed the database with sample products and rooms.

Assumes the default categories and room types exist (the schema bootstrap
seeds them). Products and rooms are matched by name, so re-running the
script only adds what is missing.

Run from ``backend/``:
    python -m scripts.seed_data
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from app.config import settings
from app.database import Database
from app.models.product import Product
from app.models.room import Room
from app.schema import SchemaManager
from app.services import booking_service, catalog_service

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

PRODUCTS = [
    {
        "name": "Luxury Glass Shower Cabin",
        "description": "Premium glass shower cabin with rain shower head and body jets",
        "price": Decimal("1299.99"),
        "category": "shower-cabins",
        "main_image": "/images/shower1.jpg",
        "images": ["/images/shower1-1.jpg", "/images/shower1-2.jpg"],
        "specifications": {
            "dimensions": "120x120x215 cm",
            "material": "Tempered Glass, Aluminum",
            "features": {"rain_shower": True, "body_jets": True, "steam": True, "led_lighting": True},
        },
    },
    {
        "name": "Corner Shower Enclosure",
        "description": "Space-saving corner shower enclosure with sliding doors",
        "price": Decimal("899.99"),
        "category": "shower-cabins",
        "main_image": "/images/shower2.jpg",
        "images": ["/images/shower2-1.jpg", "/images/shower2-2.jpg"],
        "specifications": {
            "dimensions": "90x90x215 cm",
            "material": "Tempered Glass, Chrome",
            "features": {"sliding_doors": True, "anti_lime_coating": True},
        },
    },
    {
        "name": "Shower Head Set",
        "description": "High-pressure shower head set with handheld sprayer",
        "price": Decimal("129.99"),
        "category": "accessories",
        "main_image": "/images/accessory1.jpg",
        "images": ["/images/accessory1-1.jpg"],
        "specifications": {"type": "Shower System", "material": "Stainless Steel", "adjustable_spray": True},
    },
    {
        "name": "Shower Drain",
        "description": "Stainless steel shower drain with linear design",
        "price": Decimal("89.99"),
        "category": "accessories",
        "main_image": "/images/accessory2.jpg",
        "images": [],
        "specifications": {"type": "Linear Drain", "material": "Stainless Steel", "anti_odor": True},
    },
    {
        "name": "Shower Door Handle",
        "description": "Replacement handle for shower doors",
        "price": Decimal("29.99"),
        "category": "parts",
        "main_image": "/images/part1.jpg",
        "images": [],
        "specifications": {
            "type": "Replacement Part",
            "material": "Stainless Steel",
            "compatibility": "Standard shower doors",
        },
    },
]

ROOMS = [
    {
        "name": "Superior Deluxe Room",
        "description": "Superior room with king-size bed, modern amenities and views. Suited to couples.",
        "price_per_night": Decimal("150.00"),
        "room_type": "superior",
        "main_image": "/rooms/superior-deluxe.jpg",
        "max_adults": 2,
        "max_children": 1,
        "size_sqm": 35,
        "amenities": {"wifi": True, "tv": True, "minibar": True, "safe": True, "balcony": True},
        "display_order": 1,
    },
    {
        "name": "Premium Double Room",
        "description": "Premium bedding, a workspace and upgraded bathroom fixtures.",
        "price_per_night": Decimal("120.00"),
        "room_type": "premium",
        "main_image": "/rooms/premium-double.jpg",
        "max_adults": 3,
        "max_children": 2,
        "size_sqm": 32,
        "amenities": {"wifi": True, "tv": True, "minibar": True, "workDesk": True, "coffeemaker": True},
        "display_order": 2,
    },
    {
        "name": "Family Suite",
        "description": "Two connected rooms with space for the whole family.",
        "price_per_night": Decimal("140.00"),
        "room_type": "family",
        "main_image": "/rooms/family-suite.jpg",
        "max_adults": 4,
        "max_children": 2,
        "size_sqm": 45,
        "amenities": {"wifi": True, "tv": True, "kitchenette": True},
        "display_order": 3,
    },
    {
        "name": "Standard Twin Room",
        "description": "Comfortable standard room with twin beds.",
        "price_per_night": Decimal("80.00"),
        "room_type": "standard",
        "main_image": "/rooms/standard-twin.jpg",
        "max_adults": 3,
        "max_children": 1,
        "size_sqm": 24,
        "amenities": {"wifi": True, "tv": True},
        "display_order": 4,
    },
]


async def _existing_names(session, model) -> set[str]:  # type: ignore[no-untyped-def]
    result = await session.execute(select(model.name))
    return set(result.scalars().all())


async def seed() -> None:
    """Insert every sample product and room that is not there yet."""
    database = Database.from_settings(settings)
    try:
        await SchemaManager(database.engine, settings).ensure_schema()

        async with database.session() as session:
            existing_products = await _existing_names(session, Product)
            created_products = 0
            for data in PRODUCTS:
                if data["name"] in existing_products:
                    continue
                fields = dict(data)
                category = await catalog_service.get_category_by_slug(session, fields.pop("category"))
                await catalog_service.create_product(session, {**fields, "category_id": category.id})
                created_products += 1

            room_types = {room_type.slug: room_type for room_type in await booking_service.list_room_types(session)}
            existing_rooms = await _existing_names(session, Room)
            created_rooms = 0
            for data in ROOMS:
                if data["name"] in existing_rooms:
                    continue
                fields = dict(data)
                room_type = room_types[fields.pop("room_type")]
                await booking_service.create_room(session, {**fields, "room_type_id": room_type.id})
                created_rooms += 1
    finally:
        await database.dispose()

    print(f"Seeded {created_products} product(s) and {created_rooms} room(s).")


if __name__ == "__main__":
    asyncio.run(seed())
