# inventory_api/domain/catalog/service.py
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.errors import DuplicateLotNumberError, ProductInUseError, ProductNotFoundError
from inventory_api.core.logging_config import get_logger
from inventory_api.db.models.products import Product
from inventory_api.db.repositories.products import (
    create_product,
    delete_product,
    get_product_by_id,
    get_product_by_lot_number,
    list_products,
    product_has_purchase_lines,
    update_product,
)
from .schemas import ProductCreate, ProductUpdate

logger = get_logger("catalog")


async def list_catalog(db: AsyncSession) -> List[Product]:
    return await list_products(db)


async def get_catalog_product(db: AsyncSession, product_id: int) -> Product:
    product = await get_product_by_id(db, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


async def add_product(db: AsyncSession, data: ProductCreate) -> Product:
    if await get_product_by_lot_number(db, data.lot_number) is not None:
        raise DuplicateLotNumberError(data.lot_number)

    try:
        product = await create_product(db, **data.model_dump(exclude_none=True))
        await db.commit()
    except IntegrityError as exc:
        # lost a race with another insert of the same lot
        await db.rollback()
        raise DuplicateLotNumberError(data.lot_number) from exc

    logger.info(
        "product_created",
        extra={"product_id": product.id, "lot_number": product.lot_number},
    )
    return product


async def edit_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
    product = await get_catalog_product(db, product_id)
    product = await update_product(db, product, **data.model_dump(exclude_unset=True, exclude_none=True))
    await db.commit()
    logger.info("product_updated", extra={"product_id": product.id})
    return product


async def remove_product(db: AsyncSession, product_id: int) -> None:
    product = await get_catalog_product(db, product_id)
    if await product_has_purchase_lines(db, product_id):
        raise ProductInUseError(product_id)

    await delete_product(db, product)
    await db.commit()
    logger.info("product_deleted", extra={"product_id": product_id})
