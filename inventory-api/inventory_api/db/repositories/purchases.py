from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import select

from inventory_api.db.models.products import Product
from inventory_api.db.models.purchase_lines import PurchaseLine
from inventory_api.db.models.purchases import Purchase


def _with_lines(stmt):
    return stmt.options(
        selectinload(Purchase.lines).selectinload(PurchaseLine.product),
        selectinload(Purchase.purchaser),
    )


async def create_purchase(
    db: AsyncSession,
    purchaser_id: int,
    total: Decimal,
    purchased_at: datetime,
) -> Purchase:
    purchase = Purchase(
        purchaser_id=purchaser_id,
        total=total,
        purchased_at=purchased_at,
    )
    db.add(purchase)
    await db.flush()
    return purchase


async def create_line(
    db: AsyncSession,
    purchase: Purchase,
    product: Product,
    quantity: int,
    unit_price: Decimal,
    subtotal: Decimal,
) -> PurchaseLine:
    line = PurchaseLine(
        purchase_id=purchase.id,
        product_id=product.id,
        quantity=quantity,
        unit_price=unit_price,
        subtotal=subtotal,
    )
    db.add(line)
    await db.flush()
    return line


async def find_purchase_by_id(
    db: AsyncSession,
    purchase_id: int
) -> Optional[Purchase]:
    result = await db.execute(
        _with_lines(select(Purchase))
        .where(Purchase.id == purchase_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_purchases_by_purchaser(
    db: AsyncSession,
    purchaser_id: int
) -> List[Purchase]:
    result = await db.execute(
        _with_lines(select(Purchase))
        .where(Purchase.purchaser_id == purchaser_id)
        .order_by(Purchase.purchased_at.desc(), Purchase.id.desc())
    )
    return list(result.scalars().all())


async def find_all_purchases(db: AsyncSession) -> List[Purchase]:
    result = await db.execute(
        _with_lines(select(Purchase))
        .order_by(Purchase.purchased_at.desc(), Purchase.id.desc())
    )
    return list(result.scalars().all())


async def count_purchases(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Purchase))
    return result.scalar_one()


async def count_purchase_lines(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(PurchaseLine))
    return result.scalar_one()
