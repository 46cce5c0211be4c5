# backend/models/serial.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class SerialStatus(str, enum.Enum):
    AVAILABLE = "available"
    ALLOCATED = "allocated"
    SOLD = "sold"
    RETURNED = "returned"
    DAMAGED = "damaged"


# A single tracked unit of a serialized product
class SerialNumber(Base):
    __tablename__ = "serial_numbers"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    serial_number = Column(String, nullable=False, index=True)
    status = Column(Enum(SerialStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=SerialStatus.AVAILABLE, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    # Order line the serial was sold on
    order_item_id = Column(Integer, ForeignKey("order_items.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="serial_numbers")
    order = relationship("Order", back_populates="serial_numbers")
    history = relationship("SerialNumberHistory", back_populates="serial",
                           cascade="all, delete-orphan", order_by="SerialNumberHistory.id.desc()")

    __table_args__ = (
        UniqueConstraint("product_id", "serial_number", name="uq_serial_product_number"),
    )


# Status trail of a serial number; order_id is kept as plain data so the
# trail survives order deletion
class SerialNumberHistory(Base):
    __tablename__ = "serial_number_history"

    id = Column(Integer, primary_key=True, index=True)
    serial_id = Column(Integer, ForeignKey("serial_numbers.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    order_id = Column(Integer, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    serial = relationship("SerialNumber", back_populates="history")
