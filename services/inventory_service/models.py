from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from shared.config.database import Base
from services.product_service.models import utcnow


class InventoryAudit(Base):
    """One row per stock change. Rows are inserted by the stock ledger and never updated."""
    __tablename__ = "inventory_audit"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    adjustment = Column(Integer, nullable=False) # signed delta
    reason = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Set by the ledger from the row it locked; never lazy-loaded
    product = relationship("Product", lazy="raise")
