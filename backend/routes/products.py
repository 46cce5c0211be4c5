# backend/routes/products.py
import shutil
import uuid
from pathlib import Path
from typing import Optional, List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query, Request, UploadFile, File
from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement

from config import settings
from database import get_db
from utils.tokenJWT import get_current_user, is_admin
from utils.audit import write_log, client_ip
from utils.app_settings import get_app_settings
from utils.inventory import move_stock
from utils.sku import generate_sku, normalize_sku
from utils.stock_status import get_stock_status, status_filter, low_stock_condition, StockStatusFilter
from models.users import User
from models.product import Product
import schemas.product as product_schemas

router = APIRouter(tags=["Products"])

# Accepted icon content types and the extension they are stored under
ICON_TYPES = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


# ---- HELPERS ----
def product_to_out(p: Product, threshold: int) -> product_schemas.ProductOut:
    fields = [f for f in product_schemas.ProductOut.model_fields if f != "stock_status"]
    data = {f: getattr(p, f) for f in fields if hasattr(p, f)}
    data["stock_status"] = get_stock_status(p.stock or 0, p.reorder_level or 0, threshold)
    return product_schemas.ProductOut.model_validate(data)

def _get_unique_values(db: Session, column: ColumnElement) -> List[str]:
    values = db.query(column).distinct().filter(column != None, column != "").order_by(column).all()
    return [v[0] for v in values]

def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name or SKU"),
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    stock_status: Optional[StockStatusFilter] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=1000),
    sort_by: Literal["id", "name", "sku", "stock", "selling_price", "created_at"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    threshold = get_app_settings(db).low_stock_threshold
    query = db.query(Product)

    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if category: query = query.filter(Product.category.ilike(f"%{category}%"))
    if location: query = query.filter(Product.location.ilike(f"%{location}%"))
    if stock_status: query = query.filter(status_filter(stock_status, threshold))

    sort_map = {
        "id": Product.id, "name": Product.name, "sku": Product.sku,
        "stock": Product.stock, "selling_price": Product.selling_price,
        "created_at": Product.created_at,
    }
    col = sort_map.get(sort_by, Product.created_at)
    query = query.order_by(col.asc() if order == "asc" else col.desc(), Product.id.asc() if order == "asc" else Product.id.desc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": [product_to_out(p, threshold) for p in items],
        "total": total, "page": page, "page_size": page_size,
    }


# =========================
# HELPER ENDPOINTS
# =========================
@router.get("/products/unique/categories", response_model=List[str])
def get_product_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_unique_values(db, Product.category)

@router.get("/products/unique/locations", response_model=List[str])
def get_product_locations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_unique_values(db, Product.location)

@router.get("/products/generate-sku", response_model=product_schemas.GeneratedSku)
def preview_sku(
    name: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"sku": generate_sku(db, name)}

@router.get("/products/search", response_model=List[product_schemas.ProductOut])
def search_products(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    threshold = get_app_settings(db).low_stock_threshold
    like = f"%{q}%"
    rows = (db.query(Product)
            .filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
            .order_by(Product.name.asc())
            .all())
    return [product_to_out(p, threshold) for p in rows]

@router.get("/products/low-stock", response_model=List[product_schemas.ProductOut])
def list_low_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    threshold = get_app_settings(db).low_stock_threshold
    rows = (db.query(Product)
            .filter(low_stock_condition(threshold))
            .order_by(Product.stock.asc(), Product.name.asc())
            .all())
    return [product_to_out(p, threshold) for p in rows]

@router.get("/products/out-of-stock", response_model=List[product_schemas.ProductOut])
def list_out_of_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    threshold = get_app_settings(db).low_stock_threshold
    rows = db.query(Product).filter(Product.stock == 0).order_by(Product.name.asc()).all()
    return [product_to_out(p, threshold) for p in rows]

@router.get("/products/by-sku/{sku}", response_model=product_schemas.ProductOut)
def get_product_by_sku(sku: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = db.query(Product).filter(Product.sku == normalize_sku(sku)).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_to_out(product, get_app_settings(db).low_stock_threshold)


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = _get_product_or_404(db, product_id)
    return product_to_out(product, get_app_settings(db).low_stock_threshold)


# =========================
# CREATE PRODUCT
# =========================
@router.post("/products", response_model=product_schemas.ProductOut, status_code=201)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    app_settings = get_app_settings(db)

    sku = normalize_sku(payload.sku)
    if sku is None:
        if not app_settings.auto_generate_sku:
            raise HTTPException(status_code=400, detail="SKU is required")
        sku = generate_sku(db, payload.name)
    elif db.query(Product).filter(Product.sku == sku).first():
        raise HTTPException(status_code=409, detail="Product SKU already exists")

    data = payload.model_dump(exclude={"sku", "stock"})
    data["category"] = (payload.category or "").strip() or app_settings.default_category
    product = Product(sku=sku, stock=0, **data)
    db.add(product)

    # Serialized products get their stock from serial numbers
    if payload.stock > 0 and not payload.is_serialized:
        move_stock(db, product, payload.stock, "in", "Initial stock", user_id=current_user.id)

    db.commit()
    db.refresh(product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "sku": product.sku}
    )
    return product_to_out(product, app_settings.low_stock_threshold)


# =========================
# PARTIAL UPDATE (PATCH)
# =========================
@router.patch("/products/{product_id}", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    p = _get_product_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    reason = changes.pop("adjustment_reason", None) or "Manual stock update"
    new_stock = changes.pop("stock", None)

    if "sku" in changes:
        sku = normalize_sku(changes["sku"])
        if sku is None:
            raise HTTPException(status_code=400, detail="SKU cannot be empty")
        if sku != p.sku:
            conflict = db.query(Product).filter(Product.sku == sku, Product.id != p.id).first()
            if conflict:
                raise HTTPException(status_code=409, detail="Product SKU already exists")
        changes["sku"] = sku

    if "category" in changes and not (changes["category"] or "").strip():
        changes["category"] = get_app_settings(db).default_category

    for key, value in changes.items():
        setattr(p, key, value)

    if new_stock is not None and new_stock != p.stock:
        if p.is_serialized:
            raise HTTPException(
                status_code=400,
                detail="Stock of a serialized product follows its serial numbers; add or remove serial numbers instead",
            )
        delta = new_stock - p.stock
        move_stock(db, p, abs(delta), "in" if delta > 0 else "out", reason, user_id=current_user.id)

    db.commit()
    db.refresh(p)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": p.id, "fields": sorted(payload.model_fields_set)}
    )
    return product_to_out(p, get_app_settings(db).low_stock_threshold)


# =========================
# ICON UPLOAD
# =========================
@router.post("/products/{product_id}/icon", response_model=product_schemas.ProductOut)
def upload_product_icon(
    product_id: int,
    request: Request,
    icon: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    p = _get_product_or_404(db, product_id)
    if icon is None or not icon.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    ext = ICON_TYPES.get(icon.content_type)
    if ext is None:
        raise HTTPException(status_code=400, detail="Invalid file type")

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    unique_filename = f"{uuid.uuid4()}.{ext}"
    save_path = upload_dir / unique_filename
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(icon.file, buffer)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"File save error: {e}")
    finally:
        icon.file.close()

    p.custom_icon = f"/uploads/{unique_filename}"
    db.commit()
    db.refresh(p)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_ICON_UPLOAD", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": p.id, "file": unique_filename},
    )
    return product_to_out(p, get_app_settings(db).low_stock_threshold)


# =========================
# DELETE
# =========================
@router.delete("/products/{product_id}")
def delete_product(
    product_id: int, request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Admin access required")
    product = _get_product_or_404(db, product_id)
    pid, pname, psku = product.id, product.name, product.sku
    # Order lines are detached by the before_delete listener in models.order
    db.delete(product)
    db.commit()
    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": pid, "sku": psku},
    )
    return {"detail": f"Product '{pname}' deleted"}
