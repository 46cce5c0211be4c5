# backend/utils/app_settings.py
from sqlalchemy.orm import Session

from config import settings
from models.settings import AppSettings
from schemas.settings import AppSettingsOut

DEFAULT_ITEMS_PER_PAGE = 10


def get_app_settings(db: Session) -> AppSettingsOut:
    """Stored settings row merged over the environment defaults."""
    row = db.query(AppSettings).first()

    def pick(attr, default):
        value = getattr(row, attr, None) if row else None
        return default if value is None else value

    return AppSettingsOut(
        company_name=pick("company_name", None),
        currency=pick("currency", settings.CURRENCY),
        low_stock_threshold=pick("low_stock_threshold", settings.LOW_STOCK_THRESHOLD),
        default_category=pick("default_category", settings.DEFAULT_CATEGORY),
        auto_generate_sku=pick("auto_generate_sku", settings.AUTO_GENERATE_SKU),
        items_per_page=pick("items_per_page", DEFAULT_ITEMS_PER_PAGE),
    )
