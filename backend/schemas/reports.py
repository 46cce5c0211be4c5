# schemas/reports.py
from datetime import datetime, date
from typing import List, Optional, Literal
from pydantic import BaseModel

from models.order import OrderStatus

# Date windows offered by the reports screen
DateRange = Literal["today", "yesterday", "3", "7", "30", "all"]

# Schemas for low stock alerting
class LowStockItem(BaseModel):
    product_id: int
    name: str
    sku: str
    stock: int
    reorder_level: int
    location: Optional[str] = None
    stock_status: str

class LowStockPage(BaseModel):
    items: List[LowStockItem]
    total: int
    page: int
    page_size: int

# Dashboard
class OrderStats(BaseModel):
    total: int
    pending: int
    completed: int
    cancelled: int

class RecentOrder(BaseModel):
    id: int
    customer: str
    status: OrderStatus
    total_amount: float
    created_at: Optional[datetime] = None

class InventorySummary(BaseModel):
    total_products: int
    low_stock_items: int
    out_of_stock_items: int
    total_value: float

class DashboardResponse(BaseModel):
    inventory: InventorySummary
    orders: OrderStats
    recent_orders: List[RecentOrder]
    low_stock: List[LowStockItem]
    currency: str

# Sales over a date window
class SalesDay(BaseModel):
    date: date
    orders: int
    revenue: float

class SalesReport(BaseModel):
    range: DateRange
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    order_count: int
    revenue: float
    average_order_value: float
    items_sold: int
    cost_of_goods: float
    profit: float
    daily: List[SalesDay]

class MonthlyRevenue(BaseModel):
    year: int
    month: int
    revenue: float
    orders: int

# Best sellers
class TopProduct(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    product_sku: Optional[str] = None
    quantity_sold: int
    revenue: float

class TopProductsResponse(BaseModel):
    range: DateRange
    items: List[TopProduct]

# Inventory valuation
class CategoryValuation(BaseModel):
    category: str
    products: int
    units: int
    cost_value: float
    retail_value: float

class InventoryValuation(BaseModel):
    total_units: int
    cost_value: float
    retail_value: float
    categories: List[CategoryValuation]

# Downloadable JSON inventory report
class ReportLowStockItem(BaseModel):
    name: str
    sku: str
    current_stock: int
    reorder_level: int
    location: Optional[str] = None

class InventoryReport(BaseModel):
    generated_at: datetime
    inventory_summary: InventorySummary
    recent_orders: List[RecentOrder]
    low_stock_items: List[ReportLowStockItem]
