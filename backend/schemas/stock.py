# backend/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional, Literal

# Direction of a stock adjustment
AdjustmentType = Literal["in", "out"]

# Schema for creating a new stock adjustment
class StockAdjustmentCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    adjustment_type: AdjustmentType
    reason: str = Field(min_length=1)

# Product fields shown next to an adjustment
class AdjustmentProduct(BaseModel):
    name: str
    sku: str
    stock: int
    reorder_level: int

    model_config = ConfigDict(from_attributes=True)

# Schema for returning stock adjustment details
class StockAdjustmentOut(BaseModel):
    id: int
    reference: str
    product_id: int
    quantity: int
    adjustment_type: AdjustmentType
    reason: str
    previous_quantity: int
    new_quantity: int
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    product: Optional[AdjustmentProduct] = None

    model_config = ConfigDict(from_attributes=True)

# Paginated response for adjustment history
class StockAdjustmentPage(BaseModel):
    items: List[StockAdjustmentOut]
    total: int
    page: int
    page_size: int
