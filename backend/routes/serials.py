# backend/routes/serials.py
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from models.order import Order
from models.product import Product
from models.serial import SerialNumber, SerialNumberHistory, SerialStatus
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.inventory import lock_product, move_stock, set_serial_status
import schemas.serial as serial_schemas

router = APIRouter(tags=["Serial numbers"])

_SEPARATORS = re.compile(r"\r?\n|,|;")


def split_serials(text: Optional[str]) -> List[str]:
    """Splits pasted serials on newlines, commas and semicolons; keeps first occurrences."""
    seen = []
    for part in _SEPARATORS.split(text or ""):
        s = part.strip()
        if s and s not in seen:
            seen.append(s)
    return seen


def _serialized_product_or_error(db: Session, product_id: int) -> Product:
    product = lock_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product.is_serialized:
        raise HTTPException(status_code=400, detail=f"Product {product.sku} is not serialized")
    return product


def _available_count(db: Session, product_id: int) -> int:
    return db.query(func.count(SerialNumber.id)).filter(
        SerialNumber.product_id == product_id,
        SerialNumber.status == SerialStatus.AVAILABLE,
    ).scalar() or 0


@router.get("/products/{product_id}/serials", response_model=serial_schemas.SerialNumberList)
def list_serials(
    product_id: int,
    show_all: bool = Query(False, description="Include sold, removed and damaged serials"),
    q: Optional[str] = Query(None, description="Match serial number or status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    query = db.query(SerialNumber).filter(SerialNumber.product_id == product_id)
    if not show_all:
        query = query.filter(SerialNumber.status == SerialStatus.AVAILABLE)
    rows = query.order_by(SerialNumber.created_at.desc(), SerialNumber.id.desc()).all()

    if q:
        needle = q.lower()
        rows = [s for s in rows if needle in s.serial_number.lower() or needle in s.status.value]

    return {
        "items": rows,
        "available_count": _available_count(db, product_id),
        "product_stock": product.stock,
    }


@router.post("/products/{product_id}/serials", response_model=serial_schemas.SerialChangeResult, status_code=201)
def bulk_add_serials(
    product_id: int,
    payload: serial_schemas.SerialBulkAdd,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = _serialized_product_or_error(db, product_id)
    values = split_serials(payload.serials)
    if not values:
        raise HTTPException(status_code=400, detail="No serial numbers given")

    existing = [
        row[0] for row in db.query(SerialNumber.serial_number).filter(
            SerialNumber.product_id == product_id,
            SerialNumber.serial_number.in_(values),
        ).all()
    ]
    if existing:
        raise HTTPException(
            status_code=409,
            detail=f"Serial numbers already registered: {', '.join(sorted(existing))}",
        )

    created = []
    for value in values:
        serial = SerialNumber(product=product, serial_number=value, status=SerialStatus.AVAILABLE)
        db.add(serial)
        db.add(SerialNumberHistory(serial=serial, status=SerialStatus.AVAILABLE.value))
        created.append(serial)

    move_stock(db, product, len(created), "in", "Serial numbers added", user_id=current_user.id)
    db.commit()
    for serial in created:
        db.refresh(serial)

    write_log(
        db, user_id=current_user.id, action="SERIALS_ADD", resource="serials", status="SUCCESS",
        ip=client_ip(request), meta={"product_id": product_id, "count": len(created)},
    )
    return {"count": len(created), "product_stock": product.stock, "serials": created}


@router.post("/products/{product_id}/serials/remove", response_model=serial_schemas.SerialChangeResult)
def remove_serials(
    product_id: int,
    payload: serial_schemas.SerialRemove,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = _serialized_product_or_error(db, product_id)

    available = db.query(SerialNumber).filter(
        SerialNumber.product_id == product_id,
        SerialNumber.status == SerialStatus.AVAILABLE,
    ).all()
    wanted_ids = set(payload.serial_ids)
    wanted_values = set(split_serials(payload.serials))
    selected = [s for s in available if s.id in wanted_ids or s.serial_number in wanted_values]

    if not selected:
        raise HTTPException(status_code=400, detail="Please select serial numbers to remove.")

    for serial in selected:
        set_serial_status(db, serial, SerialStatus.DAMAGED)
    move_stock(db, product, len(selected), "out", "Serial numbers removed", user_id=current_user.id)
    db.commit()
    for serial in selected:
        db.refresh(serial)

    write_log(
        db, user_id=current_user.id, action="SERIALS_REMOVE", resource="serials", status="SUCCESS",
        ip=client_ip(request), meta={"product_id": product_id, "count": len(selected)},
    )
    return {"count": len(selected), "product_stock": product.stock, "serials": selected}


@router.patch("/serials/{serial_id}/status", response_model=serial_schemas.SerialNumberOut)
def update_serial_status(
    serial_id: int,
    payload: serial_schemas.SerialStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    serial = db.query(SerialNumber).filter(SerialNumber.id == serial_id).first()
    if not serial:
        raise HTTPException(status_code=404, detail="Serial number not found")

    old_status = SerialStatus(serial.status)
    new_status = payload.status
    if payload.order_id is not None and not db.query(Order.id).filter(Order.id == payload.order_id).first():
        raise HTTPException(status_code=404, detail="Order not found")

    # Keep product stock equal to the number of available serials
    was_available = old_status == SerialStatus.AVAILABLE
    now_available = new_status == SerialStatus.AVAILABLE
    if was_available != now_available:
        product = lock_product(db, serial.product_id)
        if now_available:
            move_stock(db, product, 1, "in", f"Serial {serial.serial_number} {new_status.value}", user_id=current_user.id)
        else:
            move_stock(db, product, 1, "out", f"Serial {serial.serial_number} {new_status.value}", user_id=current_user.id)

    order_id = payload.order_id if new_status in (SerialStatus.ALLOCATED, SerialStatus.SOLD) else None
    order_item_id = serial.order_item_id if order_id is not None and order_id == serial.order_id else None
    set_serial_status(db, serial, new_status, order_id=order_id, order_item_id=order_item_id)
    db.commit()
    db.refresh(serial)

    write_log(
        db, user_id=current_user.id, action="SERIAL_STATUS_CHANGE", resource="serials", status="SUCCESS",
        ip=client_ip(request), meta={"serial_id": serial.id, "old": old_status.value, "new": new_status.value},
    )
    return serial


@router.get("/serials/{serial_id}/history", response_model=List[serial_schemas.SerialHistoryOut])
def serial_history(
    serial_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not db.query(SerialNumber.id).filter(SerialNumber.id == serial_id).first():
        raise HTTPException(status_code=404, detail="Serial number not found")
    return (db.query(SerialNumberHistory)
            .filter(SerialNumberHistory.serial_id == serial_id)
            .order_by(SerialNumberHistory.timestamp.desc(), SerialNumberHistory.id.desc())
            .all())
