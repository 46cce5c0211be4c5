# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    cost_price: float = Field(default=0.0, ge=0)
    selling_price: float = Field(default=0.0, ge=0)
    reorder_level: int = Field(default=0, ge=0)
    is_serialized: bool = False
    custom_icon: Optional[str] = None


# Schema for creating a new product; sku is generated when left empty
class ProductCreate(ProductBase):
    sku: Optional[str] = None
    stock: int = Field(default=0, ge=0)


# Schema for partial product updates
class ProductUpdate(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    cost_price: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    reorder_level: Optional[int] = Field(None, ge=0)
    custom_icon: Optional[str] = None
    # Reason recorded on the stock adjustment when stock changes
    adjustment_reason: Optional[str] = None

    # Omitted means unchanged; an explicit null would clear a required column
    @field_validator("name", "sku", "cost_price", "selling_price", "stock", "reorder_level")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


# Full product representation
class ProductOut(ProductBase):
    id: int
    sku: str
    category: str
    stock: int
    stock_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int


class GeneratedSku(BaseModel):
    sku: str
