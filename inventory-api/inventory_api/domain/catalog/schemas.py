# inventory_api/domain/catalog/schemas.py
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from inventory_api.core.schemas import MAX_DB_INT, ApiModel, Money


class ProductCreate(ApiModel):
    lot_number: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=2, max_length=150)
    unit_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    available_quantity: int = Field(ge=0, le=MAX_DB_INT)
    received_on: Optional[date] = None

    @field_validator("lot_number", "name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ProductUpdate(ApiModel):
    """Partial update. The lot number is the product's identity and cannot change."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    unit_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    available_quantity: Optional[int] = Field(default=None, ge=0, le=MAX_DB_INT)
    received_on: Optional[date] = None

    class Config:
        extra = "forbid"


class ProductOut(ApiModel):
    id: int
    lot_number: str
    name: str
    unit_price: Money
    available_quantity: int
    received_on: date
