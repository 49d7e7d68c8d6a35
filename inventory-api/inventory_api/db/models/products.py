from datetime import date

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from inventory_api.db.base import Base


class Product(Base):
    """A sellable catalog entry together with its on-hand stock.

    ``lot_number`` is the business key and never changes once created.
    ``available_quantity`` is only ever decremented by purchase commits
    (or set by an admin); the CHECK constraint keeps it non-negative even
    if an update slips past the application-level re-check.
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lot_number = Column(String(50), nullable=False, unique=True)
    name = Column(String(150), nullable=False)

    unit_price = Column(Numeric(10, 2), nullable=False)
    available_quantity = Column(Integer, nullable=False, default=0)
    received_on = Column(Date, nullable=False, default=date.today)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_products_unit_price_non_negative"),
        CheckConstraint("available_quantity >= 0", name="ck_products_available_quantity_non_negative"),
    )
