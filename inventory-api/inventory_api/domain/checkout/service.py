# inventory_api/domain/checkout/service.py
"""Purchase transaction core.

``place_purchase`` validates a basket against the catalog and commits the
purchase, its lines and the stock debits in one atomic scope. Any failure
rolls the whole scope back: no purchase row, no line rows, no stock change.

Stock is checked twice. The first check (while pricing the basket) reads the
row with FOR UPDATE so it can fail fast with a precise error. The second is
the conditional UPDATE in ``decrement_stock``, which is what actually keeps
``available_quantity`` from going negative when two purchases race for the
same product on a substrate without row locks.

Row locks are taken in ascending product id, so two baskets naming the same
products in different orders cannot deadlock. Everything else (the checks,
the lines, the debits) follows the order the client sent; the first failing
entry aborts the attempt and errors are not aggregated.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.errors import (
    InsufficientStockError,
    NotFoundError,
    ProductNotFoundError,
    PurchaseAmountTooLargeError,
    PurchaseTotalMismatchError,
    ValidationError,
)
from inventory_api.core.logging_config import get_logger
from inventory_api.core.schemas import MAX_LEDGER_AMOUNT, quantize_money
from inventory_api.db.base import Database
from inventory_api.db.models.products import Product
from inventory_api.db.models.purchases import Purchase
from inventory_api.db.repositories.products import decrement_stock, get_product_for_update
from inventory_api.db.repositories.purchases import create_line, create_purchase, find_purchase_by_id
from .schemas import BasketItem

logger = get_logger("checkout")


@dataclass(frozen=True)
class PricedItem:
    product: Product
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


def validate_basket(basket: Sequence[BasketItem]) -> None:
    if not basket:
        raise ValidationError(
            "Basket must contain at least one product",
            errors=[{"field": "basket", "message": "must not be empty"}],
        )
    for index, item in enumerate(basket):
        if item.quantity < 1:
            raise ValidationError(
                "Quantity must be a positive integer",
                errors=[{"field": f"basket.{index}.quantity", "message": "must be >= 1"}],
            )


async def lock_products(
    db: AsyncSession,
    basket: Sequence[BasketItem],
) -> Dict[int, Optional[Product]]:
    """Lock every product the basket names, once each, in ascending id order."""
    locked: Dict[int, Optional[Product]] = {}
    for product_id in sorted({item.product_id for item in basket}):
        locked[product_id] = await get_product_for_update(db, product_id)
    return locked


async def price_basket(db: AsyncSession, basket: Sequence[BasketItem]) -> list[PricedItem]:
    """Read every product inside the scope and price each entry.

    Stops at the first unknown product or the first entry whose quantity
    exceeds the stock observed here.
    """
    locked = await lock_products(db, basket)

    priced = []
    for item in basket:
        product = locked[item.product_id]
        if product is None:
            raise ProductNotFoundError(item.product_id)

        if product.available_quantity < item.quantity:
            raise InsufficientStockError(
                product_id=product.id,
                product_name=product.name,
                available=product.available_quantity,
                requested=item.quantity,
            )

        unit_price = quantize_money(product.unit_price)
        subtotal = quantize_money(unit_price * item.quantity)
        if subtotal > MAX_LEDGER_AMOUNT:
            raise PurchaseAmountTooLargeError(subtotal, MAX_LEDGER_AMOUNT)
        priced.append(
            PricedItem(
                product=product,
                quantity=item.quantity,
                unit_price=unit_price,
                subtotal=subtotal,
            )
        )
    return priced


async def place_purchase(
    database: Database,
    purchaser_id: int,
    basket: Sequence[BasketItem],
) -> Purchase:
    validate_basket(basket)

    try:
        async with database.session_scope() as db:
            priced = await price_basket(db, basket)
            total = sum((item.subtotal for item in priced), Decimal("0.00"))
            if total > MAX_LEDGER_AMOUNT:
                raise PurchaseAmountTooLargeError(total, MAX_LEDGER_AMOUNT)

            purchase = await create_purchase(
                db,
                purchaser_id=purchaser_id,
                total=total,
                purchased_at=datetime.now(timezone.utc),
            )

            line_sum = Decimal("0.00")
            for item in priced:
                line = await create_line(
                    db,
                    purchase,
                    item.product,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                await decrement_stock(db, item.product.id, item.quantity)
                line_sum += line.subtotal

            if line_sum != total:
                raise PurchaseTotalMismatchError(total=total, line_sum=line_sum)

            purchase = await find_purchase_by_id(db, purchase.id)
    except (NotFoundError, InsufficientStockError, PurchaseAmountTooLargeError) as exc:
        logger.warning(
            "purchase_rejected",
            extra={
                "purchaser_id": purchaser_id,
                "code": exc.code,
                "reason": exc.message,
            },
        )
        raise

    logger.info(
        "purchase_completed",
        extra={
            "purchase_id": purchase.id,
            "purchaser_id": purchaser_id,
            "total": total,
            "line_count": len(priced),
        },
    )
    return purchase
