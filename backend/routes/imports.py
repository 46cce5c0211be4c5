# backend/routes/imports.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from models.product import Product
from schemas.imports import ImportResult
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.csv_import import CSVFormatError, read_rows, validate_row, row_to_product_fields
from utils.inventory import move_stock

router = APIRouter(prefix="/import", tags=["Import"])
logger = logging.getLogger(__name__)


@router.post("/products", response_model=ImportResult)
def import_products(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Creates one product per valid CSV row; invalid rows are reported, not fatal."""
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Please upload a valid CSV file")

    try:
        content = file.file.read(settings.IMPORT_MAX_BYTES + 1)
    finally:
        file.file.close()
    if len(content) > settings.IMPORT_MAX_BYTES:
        raise HTTPException(status_code=400, detail=f"File size exceeds {settings.IMPORT_MAX_BYTES // (1024 * 1024)}MB limit")

    try:
        rows = read_rows(content)
    except CSVFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    errors = []
    imported = 0
    seen_skus = set()
    for index, row in enumerate(rows):
        label = f"Row {index + 1}"
        row_errors = validate_row(row)
        if row_errors:
            errors.append(f"{label}: {', '.join(row_errors)}")
            continue

        fields = row_to_product_fields(row)
        sku = fields["sku"]
        if sku in seen_skus or db.query(Product.id).filter(Product.sku == sku).first():
            errors.append(f"{label}: Failed to import - SKU {sku} already exists")
            continue

        stock = fields.pop("stock")
        product = Product(stock=0, **fields)
        db.add(product)
        if stock > 0:
            move_stock(db, product, stock, "in", "CSV import", user_id=current_user.id)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("CSV import row %s failed", index + 1)
            errors.append(f"{label}: Failed to import - {e}")
            continue
        seen_skus.add(sku)
        imported += 1

    write_log(
        db, user_id=current_user.id, action="PRODUCTS_IMPORT", resource="products",
        status="SUCCESS" if not errors else "PARTIAL", ip=client_ip(request),
        meta={"file": file.filename, "rows": len(rows), "imported": imported, "errors": len(errors)},
    )
    return {"total_rows": len(rows), "imported": imported, "errors": errors}
