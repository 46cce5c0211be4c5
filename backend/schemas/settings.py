from pydantic import BaseModel, Field
from typing import Optional


# Effective application settings (stored values over environment defaults)
class AppSettingsOut(BaseModel):
    company_name: Optional[str] = None
    currency: str
    low_stock_threshold: int
    default_category: str
    auto_generate_sku: bool
    items_per_page: int


# Partial update, only provided fields are stored
class AppSettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    default_category: Optional[str] = Field(None, min_length=1)
    auto_generate_sku: Optional[bool] = None
    items_per_page: Optional[int] = Field(None, ge=1, le=100)
