# backend/utils/inventory.py
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from models.product import Product
from models.stock import StockAdjustment
from models.serial import SerialNumber, SerialNumberHistory, SerialStatus


def lock_product(db: Session, product_id: int) -> Optional[Product]:
    """Fetch a product row for update (no-op locking on SQLite)."""
    return db.query(Product).filter(Product.id == product_id).with_for_update().first()


def move_stock(
    db: Session,
    product: Product,
    quantity: int,
    adjustment_type: str,
    reason: str,
    user_id: Optional[int] = None,
) -> StockAdjustment:
    """
    Changes product stock by quantity in the given direction and records the
    adjustment. Nothing is committed here, the caller owns the transaction.
    """
    if quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be greater than zero")
    if adjustment_type not in ("in", "out"):
        raise HTTPException(status_code=400, detail=f"Unknown adjustment type: {adjustment_type}")

    previous = product.stock or 0
    new_quantity = previous + quantity if adjustment_type == "in" else previous - quantity
    if new_quantity < 0:
        raise HTTPException(
            status_code=400,
            detail=f"Insufficient stock for {product.sku}. Available: {previous}, requested: {quantity}",
        )

    product.stock = new_quantity
    adjustment = StockAdjustment(
        product=product,
        user_id=user_id,
        quantity=quantity,
        adjustment_type=adjustment_type,
        reason=reason,
        previous_quantity=previous,
        new_quantity=new_quantity,
    )
    db.add(adjustment)
    return adjustment


def set_serial_status(
    db: Session,
    serial: SerialNumber,
    status: SerialStatus,
    order_id: Optional[int] = None,
    order_item_id: Optional[int] = None,
) -> None:
    """Moves a serial number to a new status and appends it to its history."""
    serial.status = status
    serial.order_id = order_id
    serial.order_item_id = order_item_id
    db.add(SerialNumberHistory(serial=serial, status=status.value, order_id=order_id))
