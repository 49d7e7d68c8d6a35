"""Load demo users and products.

    python -m inventory_api.seed

Existing users (by email) and products (by lot number) are left untouched,
so the loader can be run repeatedly.
"""
import asyncio
from datetime import date
from decimal import Decimal

from inventory_api.core.config import Settings, get_settings
from inventory_api.core.logging_config import configure_logging, get_logger
from inventory_api.db.base import Database
from inventory_api.db.models.users import Role
from inventory_api.db.repositories.products import get_product_by_lot_number
from inventory_api.db.repositories.users import get_user_by_email
from inventory_api.domain.catalog.schemas import ProductCreate
from inventory_api.domain.catalog.service import add_product
from inventory_api.domain.identity.schemas import UserRegister
from inventory_api.domain.identity.service import register_user

logger = get_logger("seed")

SEED_USERS = [
    UserRegister(name="Main Administrator", email="admin@inventory.com", password="123456", role=Role.ADMIN),
    UserRegister(name="Maria Garcia", email="maria@customer.com", password="123456"),
    UserRegister(name="Carlos Lopez", email="carlos@customer.com", password="123456"),
]

SEED_PRODUCTS = [
    ProductCreate(lot_number="LOT-2025-001", name="Dell Inspiron 15 Laptop", unit_price=Decimal("1200.00"),
                  available_quantity=15, received_on=date(2025, 11, 1)),
    ProductCreate(lot_number="LOT-2025-002", name="Logitech MX Master 3 Mouse", unit_price=Decimal("99.99"),
                  available_quantity=50, received_on=date(2025, 11, 5)),
    ProductCreate(lot_number="LOT-2025-003", name="Corsair K70 Mechanical Keyboard", unit_price=Decimal("159.99"),
                  available_quantity=30, received_on=date(2025, 11, 8)),
    ProductCreate(lot_number="LOT-2025-004", name='Samsung 27" 4K Monitor', unit_price=Decimal("450.00"),
                  available_quantity=20, received_on=date(2025, 11, 10)),
    ProductCreate(lot_number="LOT-2025-005", name="Sony WH-1000XM5 Headphones", unit_price=Decimal("350.00"),
                  available_quantity=25, received_on=date(2025, 11, 12)),
    ProductCreate(lot_number="LOT-2025-006", name="Logitech Brio 4K Webcam", unit_price=Decimal("199.99"),
                  available_quantity=40, received_on=date(2025, 11, 15)),
]


async def seed(database: Database, settings: Settings) -> dict[str, int]:
    created = {"users": 0, "products": 0}

    async with database.session_factory() as db:
        for data in SEED_USERS:
            if await get_user_by_email(db, data.email) is None:
                await register_user(db, data, settings)
                created["users"] += 1

        for data in SEED_PRODUCTS:
            if await get_product_by_lot_number(db, data.lot_number) is None:
                await add_product(db, data)
                created["products"] += 1

    logger.info("seed_completed", extra=created)
    return created


async def _run(settings: Settings) -> None:
    database = Database(settings.DB_URL, echo=settings.DB_ECHO)
    try:
        await database.create_all()
        await seed(database, settings)
    finally:
        await database.dispose()


def main() -> None:
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL)
    asyncio.run(_run(settings))


if __name__ == "__main__":
    main()
