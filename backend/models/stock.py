# backend/models/stock.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

class StockAdjustment(Base):
    __tablename__ = "stock_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Always positive, direction is carried by adjustment_type
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    # "in" or "out"
    adjustment_type = Column(String(3), CheckConstraint("adjustment_type IN ('in', 'out')"), nullable=False, index=True)
    reason = Column(String, nullable=False)

    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, CheckConstraint("new_quantity >= 0"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    product = relationship("Product", back_populates="adjustments")
    user = relationship("User")

    @property
    def reference(self) -> str:
        return f"ADJ-{1000 + self.id}"
