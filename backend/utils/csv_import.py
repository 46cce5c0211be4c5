# backend/utils/csv_import.py
import io
import math
from typing import Dict, List, Optional

import pandas as pd

REQUIRED_COLUMNS = ["name", "sku", "price", "quantity", "minimum_quantity"]
MAX_PRICE = 1_000_000
MAX_QUANTITY = 1_000_000

IMPORTED_CATEGORY = "Imported"
IMPORTED_LOCATION = "Main Warehouse"
# Cost estimate when the file carries no cost_price column
COST_RATIO = 0.7


class CSVFormatError(ValueError):
    """The upload could not be read as a product CSV at all."""


def read_rows(content: bytes) -> List[Dict[str, str]]:
    """Parses CSV bytes into a list of row dicts with stripped string cells."""
    try:
        df = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise CSVFormatError(f"Failed to parse CSV file: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise CSVFormatError(f"Missing required columns: {', '.join(missing)}")

    # Short rows leave NaN behind even with keep_default_na off
    df = df.fillna("").astype(str)
    df = df.apply(lambda col: col.str.strip())
    return df.to_dict(orient="records")


def _to_float(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except ValueError:
        return None
    # float() accepts "nan" and "inf"
    return value if math.isfinite(value) else None


def _to_int(raw: str) -> Optional[int]:
    value = _to_float(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


def validate_row(row: Dict[str, str]) -> List[str]:
    errors: List[str] = []

    if not row.get("name"):
        errors.append("Product name is required")
    if not row.get("sku"):
        errors.append("SKU is required")

    # Price validation
    raw_price = row.get("price", "")
    if not raw_price:
        errors.append("Price is required")
    else:
        price = _to_float(raw_price)
        if price is None:
            errors.append("Price must be a valid number")
        elif price < 0:
            errors.append("Price cannot be negative")
        elif price > MAX_PRICE:
            errors.append("Price exceeds maximum allowed value")

    # Quantity validation
    raw_qty = row.get("quantity", "")
    quantity = None
    if not raw_qty:
        errors.append("Quantity is required")
    else:
        quantity = _to_int(raw_qty)
        if quantity is None:
            errors.append("Quantity must be a valid number")
        elif quantity < 0:
            errors.append("Quantity cannot be negative")
        elif quantity > MAX_QUANTITY:
            errors.append("Quantity exceeds maximum allowed value")

    # Minimum quantity validation
    raw_min = row.get("minimum_quantity", "")
    if not raw_min:
        errors.append("Minimum quantity is required")
    else:
        min_qty = _to_int(raw_min)
        if min_qty is None:
            errors.append("Minimum quantity must be a valid number")
        elif min_qty < 0:
            errors.append("Minimum quantity cannot be negative")
        elif min_qty > (quantity or 0):
            errors.append("Minimum quantity cannot be greater than current quantity")

    if row.get("cost_price"):
        cost = _to_float(row["cost_price"])
        if cost is None or cost < 0:
            errors.append("Cost price must be a non-negative number")

    return errors


def row_to_product_fields(row: Dict[str, str]) -> dict:
    """Maps a validated row onto Product column values."""
    price = float(row["price"])
    cost = float(row["cost_price"]) if row.get("cost_price") else round(price * COST_RATIO, 2)
    return {
        "name": row["name"],
        "sku": row["sku"].upper(),
        "description": row.get("description") or None,
        "selling_price": price,
        "cost_price": cost,
        "stock": _to_int(row["quantity"]),
        "reorder_level": _to_int(row["minimum_quantity"]),
        "category": row.get("category") or IMPORTED_CATEGORY,
        "location": row.get("location") or IMPORTED_LOCATION,
    }
