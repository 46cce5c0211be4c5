# backend/utils/sku.py
import re
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.product import Product

FALLBACK_BASE = "SKU"


def normalize_sku(sku: Optional[str]) -> Optional[str]:
    if sku is None:
        return None
    s = sku.strip().upper()
    return s if s else None


def sku_base(name: str) -> str:
    """First three letters/digits of the upper-cased product name."""
    base = re.sub(r"[^A-Z0-9]", "", (name or "").upper())[:3]
    return base or FALLBACK_BASE


def _month_bounds(now: datetime):
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return start, end


def generate_sku(db: Session, name: str, now: Optional[datetime] = None) -> str:
    """
    Builds BASE-YYMM-NNNN where NNNN follows the number of products created
    in the current month. Skips forward while the candidate is taken.
    """
    now = now or datetime.utcnow()
    start, end = _month_bounds(now)

    created_this_month = (
        db.query(func.count(Product.id))
        .filter(Product.created_at >= start, Product.created_at < end)
        .scalar()
    ) or 0

    prefix = f"{sku_base(name)}-{now.strftime('%y%m')}"
    sequence = created_this_month + 1
    while True:
        candidate = f"{prefix}-{sequence:04d}"
        taken = db.query(Product.id).filter(Product.sku == candidate).first()
        if not taken:
            return candidate
        sequence += 1
