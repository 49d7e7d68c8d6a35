# inventory_api/api/v1/routes_purchases.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.deps import RowId, get_current_identity, require_admin
from inventory_api.core.schemas import Envelope
from inventory_api.db.base import Database, get_database, get_db
from inventory_api.domain.checkout.schemas import PurchaseCreate, PurchaseOut
from inventory_api.domain.checkout.service import place_purchase
from inventory_api.domain.identity.schemas import Identity
from inventory_api.domain.invoicing.schemas import InvoiceOut, PurchaseSummaryOut
from inventory_api.domain.invoicing.service import (
    project_all_history,
    project_history,
    project_invoice,
    project_purchase,
)

router = APIRouter(prefix="/api/purchases", tags=["purchases"])


@router.post("", response_model=Envelope[PurchaseOut], status_code=201)
async def create_purchase_endpoint(
    payload: PurchaseCreate,
    identity: Identity = Depends(get_current_identity),
    database: Database = Depends(get_database),
):
    purchase = await place_purchase(database, identity.id, payload.basket)
    return Envelope(message="Purchase completed successfully", data=project_purchase(purchase))


@router.get("/my-purchases", response_model=Envelope[List[PurchaseOut]])
async def my_purchases_endpoint(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    purchases = await project_history(db, identity.id)
    return Envelope(data=purchases, count=len(purchases))


@router.get("/invoice/{purchase_id}", response_model=Envelope[InvoiceOut])
async def invoice_endpoint(
    purchase_id: RowId,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    invoice = await project_invoice(db, purchase_id, identity)
    return Envelope(data=invoice)


@router.get("/all", response_model=Envelope[List[PurchaseSummaryOut]])
async def all_purchases_endpoint(
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    purchases = await project_all_history(db)
    return Envelope(data=purchases, count=len(purchases))
