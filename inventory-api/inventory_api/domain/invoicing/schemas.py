# inventory_api/domain/invoicing/schemas.py
from datetime import datetime
from typing import List

from inventory_api.core.schemas import ApiModel, Money


class CustomerOut(ApiModel):
    name: str
    email: str


class CustomerSummaryOut(CustomerOut):
    id: int


class InvoiceLineOut(ApiModel):
    product_name: str
    lot_number: str
    quantity: int
    unit_price: Money
    subtotal: Money


class InvoiceOut(ApiModel):
    id: int
    purchased_at: datetime
    customer: CustomerOut
    lines: List[InvoiceLineOut]
    total: Money


class PurchaseSummaryOut(ApiModel):
    id: int
    purchased_at: datetime
    customer: CustomerSummaryOut
    lines: List[InvoiceLineOut]
    total: Money
