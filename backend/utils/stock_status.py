# backend/utils/stock_status.py
from typing import Literal

from sqlalchemy import and_, case

from models.product import Product

IN_STOCK = "In Stock"
LOW_STOCK = "Low Stock"
OUT_OF_STOCK = "Out of Stock"

StockStatus = Literal["In Stock", "Low Stock", "Out of Stock"]

# Query parameter values accepted by the product list filter
StockStatusFilter = Literal["in_stock", "low_stock", "out_of_stock"]


def effective_threshold(reorder_level: int, global_threshold: int) -> int:
    # A product's own reorder level wins over the global threshold
    return reorder_level if reorder_level and reorder_level > 0 else global_threshold


def get_stock_status(stock: int, reorder_level: int, global_threshold: int) -> StockStatus:
    if stock == 0:
        return OUT_OF_STOCK
    if stock <= effective_threshold(reorder_level, global_threshold):
        return LOW_STOCK
    return IN_STOCK


def threshold_column(global_threshold: int):
    """SQL expression for the effective threshold of each product row."""
    return case((Product.reorder_level > 0, Product.reorder_level), else_=global_threshold)


def low_stock_condition(global_threshold: int):
    """Products at or below their threshold, out-of-stock ones included."""
    return Product.stock <= threshold_column(global_threshold)


def status_filter(status: StockStatusFilter, global_threshold: int):
    """SQL condition matching products in the given stock status."""
    limit = threshold_column(global_threshold)
    if status == "out_of_stock":
        return Product.stock == 0
    if status == "low_stock":
        return and_(Product.stock > 0, Product.stock <= limit)
    return Product.stock > limit
