from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from inventory_api.db.base import Base
from inventory_api.db.models.products import Product


class PurchaseLine(Base):
    """A single product line within a purchase.

    The unit price is copied from the catalog when the purchase commits, so
    invoices keep showing what the customer paid after the catalog price
    changes. Lines are written once, together with their purchase header.
    """

    __tablename__ = "purchase_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(18, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    product = relationship(Product, lazy="raise")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_purchase_lines_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_purchase_lines_unit_price_non_negative"),
        Index("ix_purchase_lines_purchase_id", "purchase_id"),
    )
