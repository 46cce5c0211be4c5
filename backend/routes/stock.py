# backend/routes/stock.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session, joinedload
from typing import Optional, List

from database import get_db
from models.stock import StockAdjustment
from models.product import Product
from models.users import User
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.dates import parse_date_from, parse_date_to
from utils.inventory import lock_product, move_stock
import schemas.stock as stock_schemas

router = APIRouter(prefix="/stock-adjustments", tags=["Stock"])


@router.get("", response_model=stock_schemas.StockAdjustmentPage)
def list_adjustments(
    product_id: Optional[int] = Query(None),
    adjustment_type: Optional[stock_schemas.AdjustmentType] = Query(None),
    q: Optional[str] = Query(None, description="Search by product name or SKU"),
    date_from: Optional[str] = Query(None, description="ISO date/datetime from"),
    date_to: Optional[str] = Query(None, description="ISO date/datetime to"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(StockAdjustment).join(Product).options(joinedload(StockAdjustment.product))

    if product_id is not None:
        query = query.filter(StockAdjustment.product_id == product_id)
    if adjustment_type:
        query = query.filter(StockAdjustment.adjustment_type == adjustment_type)
    if q:
        like = f"%{q}%"
        query = query.filter((Product.name.ilike(like)) | (Product.sku.ilike(like)))

    fdt = parse_date_from(date_from)
    tdt = parse_date_to(date_to)
    if fdt:
        query = query.filter(StockAdjustment.created_at >= fdt)
    if tdt:
        query = query.filter(StockAdjustment.created_at <= tdt)

    query = query.order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/product/{product_id}", response_model=List[stock_schemas.StockAdjustmentOut])
def list_product_adjustments(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not db.query(Product.id).filter(Product.id == product_id).first():
        raise HTTPException(status_code=404, detail="Product not found")
    return (db.query(StockAdjustment)
            .options(joinedload(StockAdjustment.product))
            .filter(StockAdjustment.product_id == product_id)
            .order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc())
            .all())


@router.post("", response_model=stock_schemas.StockAdjustmentOut, status_code=201)
def create_adjustment(
    payload: stock_schemas.StockAdjustmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = lock_product(db, payload.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if product.is_serialized:
        raise HTTPException(
            status_code=400,
            detail="Stock of a serialized product follows its serial numbers; add or remove serial numbers instead",
        )

    adjustment = move_stock(
        db, product, payload.quantity, payload.adjustment_type, payload.reason.strip(),
        user_id=current_user.id,
    )
    db.commit()
    db.refresh(adjustment)

    write_log(
        db, user_id=current_user.id, action="STOCK_ADJUSTMENT", resource="stock", status="SUCCESS",
        ip=client_ip(request),
        meta={"id": adjustment.id, "product_id": product.id, "type": adjustment.adjustment_type,
              "quantity": adjustment.quantity},
    )
    return adjustment
