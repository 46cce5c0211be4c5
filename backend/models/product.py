# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A catalog item. Stock is kept here and moved only through adjustments,
# orders and (for serialized products) serial numbers.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)

    description = Column(String, nullable=True)
    category = Column(String, nullable=False, default="General")
    location = Column(String, nullable=True)

    # Prices are validated by check constraints as well as by the schemas.
    cost_price = Column(Float, CheckConstraint("cost_price >= 0"), nullable=False, default=0.0)
    selling_price = Column(Float, CheckConstraint("selling_price >= 0"), nullable=False, default=0.0)

    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    reorder_level = Column(Integer, CheckConstraint("reorder_level >= 0"), nullable=False, default=0)

    is_serialized = Column(Boolean, nullable=False, default=False)
    custom_icon = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    adjustments = relationship("StockAdjustment", back_populates="product", cascade="all, delete-orphan")
    serial_numbers = relationship("SerialNumber", back_populates="product", cascade="all, delete-orphan")
