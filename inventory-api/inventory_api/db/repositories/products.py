from typing import List, Optional

from sqlalchemy import exists, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from inventory_api.core.errors import InsufficientStockError, ProductNotFoundError
from inventory_api.db.models.products import Product
from inventory_api.db.models.purchase_lines import PurchaseLine


async def get_product_by_id(
    db: AsyncSession,
    product_id: int
) -> Optional[Product]:
    return await db.get(Product, product_id)


async def get_product_for_update(
    db: AsyncSession,
    product_id: int
) -> Optional[Product]:
    # Always hits the database; FOR UPDATE is a no-op on SQLite
    return await db.get(
        Product,
        product_id,
        with_for_update=True,
        populate_existing=True,
    )


async def get_product_by_lot_number(
    db: AsyncSession,
    lot_number: str
) -> Optional[Product]:
    result = await db.execute(
        select(Product).where(Product.lot_number == lot_number)
    )
    return result.scalar_one_or_none()


async def list_products(db: AsyncSession) -> List[Product]:
    result = await db.execute(
        select(Product).order_by(Product.received_on.desc(), Product.id.desc())
    )
    return list(result.scalars().all())


async def decrement_stock(
    db: AsyncSession,
    product_id: int,
    amount: int,
) -> Product:
    """Debit ``amount`` units, re-checking availability in the same statement.

    The WHERE clause carries the stock check, so the row is only touched if
    the quantity committed at this moment still covers the request. A
    concurrent purchase that got there first makes this match zero rows.
    """
    products = Product.__table__
    result = await db.execute(
        update(products)
        .where(
            products.c.id == product_id,
            products.c.available_quantity >= amount,
        )
        .values(available_quantity=products.c.available_quantity - amount)
    )

    product = await db.get(Product, product_id, populate_existing=True)
    if product is None:
        raise ProductNotFoundError(product_id)
    if result.rowcount != 1:
        raise InsufficientStockError(
            product_id=product.id,
            product_name=product.name,
            available=product.available_quantity,
            requested=amount,
        )
    return product


async def product_has_purchase_lines(db: AsyncSession, product_id: int) -> bool:
    result = await db.execute(
        select(exists().where(PurchaseLine.product_id == product_id))
    )
    return bool(result.scalar())


async def create_product(db: AsyncSession, **fields) -> Product:
    product = Product(**fields)
    db.add(product)
    await db.flush()
    return product


async def update_product(db: AsyncSession, product: Product, **fields) -> Product:
    for name, value in fields.items():
        setattr(product, name, value)
    await db.flush()
    return product


async def delete_product(db: AsyncSession, product: Product) -> None:
    await db.delete(product)
    await db.flush()
