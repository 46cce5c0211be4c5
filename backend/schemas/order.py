from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

from models.order import OrderStatus


# Input schema for a single order line
class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    # Defaults to the product's selling price
    price: Optional[float] = Field(default=None, ge=0)
    # Ids of the serial numbers shipped on this line (serialized products only)
    serial_numbers: List[int] = []


# Input schema for creating a new order
class OrderCreate(BaseModel):
    customer: str = Field(min_length=1)
    status: OrderStatus = OrderStatus.PENDING
    notes: Optional[str] = None
    items: List[OrderItemCreate] = Field(min_length=1)


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    product_category: Optional[str] = None
    product_location: Optional[str] = None
    product_unit: Optional[str] = None
    quantity: int
    price: float
    line_total: float
    serial_numbers: List[str] = []

    model_config = ConfigDict(from_attributes=True)


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    customer: str
    status: OrderStatus
    total_items: int
    total_amount: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus
