# inventory_api/domain/checkout/schemas.py
from datetime import datetime
from typing import List

from pydantic import Field

from inventory_api.core.schemas import MAX_DB_INT, ApiModel, Money


class BasketItem(ApiModel):
    product_id: int = Field(gt=0, le=MAX_DB_INT)
    quantity: int = Field(ge=1, le=MAX_DB_INT)


class PurchaseCreate(ApiModel):
    basket: List[BasketItem] = Field(min_length=1)


class ProductSnapshotOut(ApiModel):
    id: int
    lot_number: str
    name: str


class PurchaseLineOut(ApiModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Money
    subtotal: Money
    product: ProductSnapshotOut


class PurchaseOut(ApiModel):
    id: int
    purchaser_id: int
    purchased_at: datetime
    total: Money
    lines: List[PurchaseLineOut]
