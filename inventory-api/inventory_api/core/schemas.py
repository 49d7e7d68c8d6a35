from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")

# Largest value a SQL INTEGER column holds
MAX_DB_INT = 2**31 - 1

# Largest value the Numeric(18, 2) ledger columns hold
MAX_LEDGER_AMOUNT = Decimal("9999999999999999.99")


def quantize_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# Rendered as a fixed-point string ("199.98"), never a float
Money = Annotated[Decimal, PlainSerializer(lambda v: str(quantize_money(v)), return_type=str)]


class ApiModel(BaseModel):

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


T = TypeVar("T")


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    count: Optional[int] = None
