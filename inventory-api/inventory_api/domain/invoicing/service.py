# inventory_api/domain/invoicing/service.py
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.errors import ForbiddenError, PurchaseNotFoundError
from inventory_api.core.logging_config import get_logger
from inventory_api.db.models.purchases import Purchase
from inventory_api.db.models.users import Role
from inventory_api.db.repositories.purchases import (
    find_all_purchases,
    find_purchase_by_id,
    find_purchases_by_purchaser,
)
from inventory_api.domain.checkout.schemas import PurchaseOut
from inventory_api.domain.identity.schemas import Identity
from .schemas import CustomerOut, CustomerSummaryOut, InvoiceLineOut, InvoiceOut, PurchaseSummaryOut

logger = get_logger("invoicing")


def project_purchase(purchase: Purchase) -> PurchaseOut:
    return PurchaseOut.model_validate(purchase)


def _invoice_lines(purchase: Purchase) -> List[InvoiceLineOut]:
    return [
        InvoiceLineOut(
            product_name=line.product.name,
            lot_number=line.product.lot_number,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )
        for line in purchase.lines
    ]


async def project_invoice(
    db: AsyncSession,
    purchase_id: int,
    requester: Identity,
) -> InvoiceOut:
    """Format one purchase as an invoice.

    Customers may only read invoices for their own purchases; admins may read any.
    """
    purchase = await find_purchase_by_id(db, purchase_id)
    if purchase is None:
        raise PurchaseNotFoundError(purchase_id)

    if requester.role == Role.CUSTOMER and purchase.purchaser_id != requester.id:
        logger.warning(
            "invoice_access_denied",
            extra={"purchase_id": purchase_id, "requester_id": requester.id},
        )
        raise ForbiddenError("You are not allowed to view this invoice")

    return InvoiceOut(
        id=purchase.id,
        purchased_at=purchase.purchased_at,
        customer=CustomerOut(
            name=purchase.purchaser.name,
            email=purchase.purchaser.email,
        ),
        lines=_invoice_lines(purchase),
        total=purchase.total,
    )


async def project_history(db: AsyncSession, purchaser_id: int) -> List[PurchaseOut]:
    purchases = await find_purchases_by_purchaser(db, purchaser_id)
    return [project_purchase(purchase) for purchase in purchases]


async def project_all_history(db: AsyncSession) -> List[PurchaseSummaryOut]:
    purchases = await find_all_purchases(db)
    return [
        PurchaseSummaryOut(
            id=purchase.id,
            purchased_at=purchase.purchased_at,
            customer=CustomerSummaryOut(
                id=purchase.purchaser.id,
                name=purchase.purchaser.name,
                email=purchase.purchaser.email,
            ),
            lines=_invoice_lines(purchase),
            total=purchase.total,
        )
        for purchase in purchases
    ]
