# backend/models/order.py
import enum
from sqlalchemy import (
    Column, Integer, String, Float, ForeignKey, DateTime, Enum, CheckConstraint,
    func, event, select, update,
)
from sqlalchemy.orm import relationship
from database import Base
from models.product import Product


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Allowed next states for every order state; delivered and cancelled are terminal
STATUS_FLOW = {
    OrderStatus.PENDING: [OrderStatus.PROCESSING, OrderStatus.CANCELLED],
    OrderStatus.PROCESSING: [OrderStatus.SHIPPED, OrderStatus.CANCELLED],
    OrderStatus.SHIPPED: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [],
    OrderStatus.CANCELLED: [],
}


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer = Column(String, nullable=False, index=True)
    status = Column(Enum(OrderStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=OrderStatus.PENDING, index=True)
    total_items = Column(Integer, nullable=False, default=0)
    total_amount = Column(Float, nullable=False, default=0.0)
    notes = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")
    # Serials keep their row when the order goes away, only the link is cleared
    serial_numbers = relationship("SerialNumber", back_populates="order")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)

    # Copy of the product as it was when the line was written
    product_name = Column(String, nullable=True)
    product_description = Column(String, nullable=True)
    product_category = Column(String, nullable=True)
    product_location = Column(String, nullable=True)
    product_sku = Column(String, nullable=True)
    product_unit = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.price, 2)


@event.listens_for(OrderItem, "before_insert")
def copy_product_details(mapper, connection, target):
    """Snapshot the referenced product onto a new order line."""
    if target.product_id is not None:
        row = connection.execute(
            select(
                Product.name, Product.description, Product.category,
                Product.location, Product.sku,
            ).where(Product.id == target.product_id)
        ).first()
        if row is not None:
            target.product_name = row.name
            target.product_description = row.description
            target.product_category = row.category
            target.product_location = row.location
            target.product_sku = row.sku
    target.product_unit = "unit"


@event.listens_for(Product, "before_delete")
def handle_product_deletion(mapper, connection, target):
    """Detach order lines from a product that is about to be deleted."""
    connection.execute(
        update(OrderItem.__table__)
        .where(OrderItem.__table__.c.product_id == target.id)
        .values(
            product_name=f"{target.name} (Deleted)",
            product_description=target.description,
            product_category=target.category,
            product_location=target.location,
            product_sku=target.sku,
            product_id=None,
        )
    )
