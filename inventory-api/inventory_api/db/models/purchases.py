from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from inventory_api.db.base import Base
from inventory_api.db.models.purchase_lines import PurchaseLine
from inventory_api.db.models.users import User


class Purchase(Base):
    """The header of a committed purchase (the receipt).

    A purchase aggregates one or more lines and stores their summed total.
    Rows are append-only: the transaction core creates them inside the same
    atomic scope that debits stock, and nothing updates or deletes them.
    """

    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchaser_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    purchased_at = Column(DateTime(timezone=True), nullable=False)
    total = Column(Numeric(18, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    lines = relationship(PurchaseLine, order_by=PurchaseLine.id, lazy="raise")
    purchaser = relationship(User, lazy="raise")

    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_purchases_total_non_negative"),
        Index("ix_purchases_purchaser_purchased_at", "purchaser_id", "purchased_at"),
    )
