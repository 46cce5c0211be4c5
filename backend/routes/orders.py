# backend/routes/orders.py
import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.orm import Session, selectinload

from database import get_db
from utils.tokenJWT import get_current_user, is_admin
from utils.audit import write_log, client_ip
from utils.dates import parse_date_from, parse_date_to
from utils.inventory import lock_product, move_stock, set_serial_status
from models.users import User
from models.product import Product
from models.order import Order, OrderItem, OrderStatus, STATUS_FLOW
from models.serial import SerialNumber, SerialStatus
from schemas.order import (
    OrderCreate, OrderResponse, OrdersPage, OrderStatusPatch, OrderItemOut,
)

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    # Sold serials are shown on the line they were sold on
    sold: Dict[int, List[str]] = {}
    for sn in order.serial_numbers:
        if sn.status == SerialStatus.SOLD and sn.order_item_id is not None:
            sold.setdefault(sn.order_item_id, []).append(sn.serial_number)

    items: List[OrderItemOut] = []
    for it in order.items:
        items.append(OrderItemOut(
            id=it.id,
            product_id=it.product_id,
            product_name=it.product_name,
            product_sku=it.product_sku,
            product_category=it.product_category,
            product_location=it.product_location,
            product_unit=it.product_unit,
            quantity=it.quantity,
            price=it.price,
            line_total=it.line_total,
            serial_numbers=sorted(sold.get(it.id, [])),
        ))
    return OrderResponse(
        id=order.id,
        customer=order.customer,
        status=order.status,
        total_items=order.total_items,
        total_amount=round(order.total_amount, 2),
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


def _load_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).options(
        selectinload(Order.items), selectinload(Order.serial_numbers)
    ).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _claim_serials(db: Session, product: Product, serial_ids: List[int], quantity: int) -> List[SerialNumber]:
    """Validates the serials picked for one serialized order line."""
    if len(serial_ids) != quantity:
        raise HTTPException(
            status_code=400,
            detail=f"Select exactly {quantity} serial number(s) for {product.sku}",
        )
    serials = db.query(SerialNumber).filter(SerialNumber.id.in_(serial_ids)).all()
    found = {s.id: s for s in serials}
    for sid in serial_ids:
        s = found.get(sid)
        if s is None or s.product_id != product.id:
            raise HTTPException(status_code=400, detail=f"Serial number {sid} does not belong to {product.sku}")
        if s.status != SerialStatus.AVAILABLE:
            raise HTTPException(status_code=400, detail=f"Serial number {s.serial_number} is not available")
    return [found[sid] for sid in serial_ids]


# Create an order, take its stock and mark its serials as sold
@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    payload: OrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.status == OrderStatus.CANCELLED:
        raise HTTPException(status_code=400, detail="An order cannot be created as cancelled")

    all_serial_ids = [sid for item in payload.items for sid in item.serial_numbers]
    if len(all_serial_ids) != len(set(all_serial_ids)):
        raise HTTPException(status_code=400, detail="The same serial number is used more than once")

    # Validate stock against the summed quantity of repeated products
    requested: "OrderedDict[int, int]" = OrderedDict()
    for item in payload.items:
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

    products: Dict[int, Product] = {}
    for product_id, qty in requested.items():
        product = lock_product(db, product_id)
        if not product:
            raise HTTPException(status_code=400, detail=f"Product {product_id} not found")
        if product.stock < qty:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock for product {product.sku}. Available: {product.stock}, Requested: {qty}",
            )
        products[product_id] = product

    # Serials picked per line, keyed by the line position in the payload
    claimed: Dict[int, List[SerialNumber]] = {}
    for index, item in enumerate(payload.items):
        product = products[item.product_id]
        if product.is_serialized:
            claimed[index] = _claim_serials(db, product, item.serial_numbers, item.quantity)
        elif item.serial_numbers:
            raise HTTPException(status_code=400, detail=f"Product {product.sku} is not serialized")

    lines = []
    for item in payload.items:
        price = item.price if item.price is not None else products[item.product_id].selling_price
        lines.append((item, price))

    order = Order(
        customer=payload.customer.strip(),
        notes=payload.notes,
        status=payload.status,
        total_items=sum(item.quantity for item, _ in lines),
        total_amount=round(sum(item.quantity * price for item, price in lines), 2),
        created_by=current_user.id,
    )
    order.items = [
        OrderItem(product_id=item.product_id, quantity=item.quantity, price=price)
        for item, price in lines
    ]
    db.add(order)
    db.flush()

    for product_id, qty in requested.items():
        move_stock(db, products[product_id], qty, "out", f"Order #{order.id}", user_id=current_user.id)
    for index, serials in claimed.items():
        line = order.items[index]
        for serial in serials:
            set_serial_status(db, serial, SerialStatus.SOLD, order_id=order.id, order_item_id=line.id)

    db.commit()

    write_log(
        db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
        ip=client_ip(request),
        meta={"order_id": order.id, "total_items": order.total_items, "total_amount": order.total_amount},
    )
    return _order_to_out(_load_order(db, order.id))


# List orders with optional status, customer and date filters
@router.get("", response_model=OrdersPage)
def list_orders(
    status: Optional[OrderStatus] = Query(None),
    q: Optional[str] = Query(None, description="Search by customer or order number"),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Order).options(
        selectinload(Order.items), selectinload(Order.serial_numbers)
    )
    if status:
        query = query.filter(Order.status == status)
    if q:
        cond = Order.customer.ilike(f"%{q}%")
        if q.strip().lstrip("#").isdigit():
            cond = cond | (Order.id == int(q.strip().lstrip("#")))
        query = query.filter(cond)

    fdt = parse_date_from(date_from)
    tdt = parse_date_to(date_to)
    if fdt:
        query = query.filter(Order.created_at >= fdt)
    if tdt:
        query = query.filter(Order.created_at <= tdt)

    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    total = query.count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_order_to_out(o) for o in rows], "total": total, "page": page, "page_size": page_size}


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_to_out(_load_order(db, order_id))


# Move an order along its status flow; cancelling gives the stock back
@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = _load_order(db, order_id)
    old_status, new_status = OrderStatus(order.status), payload.status

    allowed = STATUS_FLOW[old_status]
    if new_status not in allowed:
        allowed_txt = ", ".join(s.value for s in allowed) or "none"
        raise HTTPException(
            status_code=400,
            detail=(f"Invalid status transition. Order cannot go from {old_status.value} to {new_status.value}. "
                    f"Allowed transitions: {allowed_txt}"),
        )

    if new_status == OrderStatus.CANCELLED:
        returned: "OrderedDict[int, int]" = OrderedDict()
        for item in order.items:
            # Lines of deleted products have nothing to return to
            if item.product_id is not None:
                returned[item.product_id] = returned.get(item.product_id, 0) + item.quantity

        still_sold: Dict[int, List[SerialNumber]] = {}
        for serial in order.serial_numbers:
            if serial.status == SerialStatus.SOLD:
                still_sold.setdefault(serial.product_id, []).append(serial)

        for product_id, qty in returned.items():
            product = lock_product(db, product_id)
            if not product:
                continue
            if product.is_serialized:
                # Serials already moved off "sold" have settled their stock elsewhere
                serials = still_sold.get(product_id, [])
                for serial in serials:
                    set_serial_status(db, serial, SerialStatus.AVAILABLE, order_id=None)
                qty = len(serials)
            if qty:
                move_stock(db, product, qty, "in", f"Order #{order.id} cancelled", user_id=current_user.id)

    order.status = new_status
    db.commit()
    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
        ip=client_ip(request), meta={"order_id": order.id, "old": old_status.value, "new": new_status.value})

    return _order_to_out(_load_order(db, order_id))


# Delete an order (Admin only); stock is not given back
@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Admin access required")
    order = _load_order(db, order_id)
    db.delete(order)
    db.commit()
    write_log(db, user_id=current_user.id, action="ORDER_DELETE", resource="orders", status="SUCCESS",
        ip=client_ip(request), meta={"order_id": order_id})
    return {"detail": f"Order #{order_id} deleted"}
