# routes/reports.py
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.app_settings import get_app_settings
from utils.dates import range_bounds
from utils.stock_status import get_stock_status, low_stock_condition
from models.users import User
from models.product import Product
from models.order import Order, OrderItem, OrderStatus
from schemas.reports import (
    DateRange, LowStockItem, LowStockPage, OrderStats, RecentOrder, InventorySummary,
    DashboardResponse, SalesDay, SalesReport, MonthlyRevenue, TopProduct,
    TopProductsResponse, CategoryValuation, InventoryValuation, InventoryReport,
    ReportLowStockItem,
)

router = APIRouter(prefix="/reports", tags=["Reports"])

RECENT_ORDERS = 5
DASHBOARD_LOW_STOCK = 5


# -----------------------------
# Shared helpers
# -----------------------------
def _inventory_summary(db: Session, threshold: int) -> InventorySummary:
    total_products = db.query(func.count(Product.id)).scalar() or 0
    low = db.query(func.count(Product.id)).filter(low_stock_condition(threshold)).scalar() or 0
    out = db.query(func.count(Product.id)).filter(Product.stock == 0).scalar() or 0
    value = db.query(func.coalesce(func.sum(Product.stock * Product.selling_price), 0.0)).scalar()
    return InventorySummary(
        total_products=total_products,
        low_stock_items=low,
        out_of_stock_items=out,
        total_value=round(float(value or 0), 2),
    )

def _recent_orders(db: Session, limit: int = RECENT_ORDERS) -> List[RecentOrder]:
    rows = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()
    return [
        RecentOrder(id=o.id, customer=o.customer, status=o.status,
                    total_amount=round(o.total_amount, 2), created_at=o.created_at)
        for o in rows
    ]

def _low_stock_items(db: Session, threshold: int, limit: Optional[int] = None, offset: int = 0) -> List[LowStockItem]:
    q = (db.query(Product)
         .filter(low_stock_condition(threshold))
         .order_by(Product.stock.asc(), Product.name.asc())
         .offset(offset))
    if limit is not None:
        q = q.limit(limit)
    return [
        LowStockItem(
            product_id=p.id, name=p.name, sku=p.sku, stock=p.stock,
            reorder_level=p.reorder_level, location=p.location,
            stock_status=get_stock_status(p.stock, p.reorder_level, threshold),
        )
        for p in q.all()
    ]

def _orders_in_window(db: Session, date_from: Optional[datetime], date_to: Optional[datetime]):
    """Non-cancelled orders created inside [date_from, date_to)."""
    q = db.query(Order).filter(Order.status != OrderStatus.CANCELLED)
    if date_from:
        q = q.filter(Order.created_at >= date_from)
    if date_to:
        q = q.filter(Order.created_at < date_to)
    return q


# -----------------------------
# 1) Dashboard
# -----------------------------
@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    app_settings = get_app_settings(db)
    threshold = app_settings.low_stock_threshold

    counts = dict(db.query(Order.status, func.count(Order.id)).group_by(Order.status).all())
    orders = OrderStats(
        total=sum(counts.values()),
        pending=counts.get(OrderStatus.PENDING, 0),
        completed=counts.get(OrderStatus.DELIVERED, 0),
        cancelled=counts.get(OrderStatus.CANCELLED, 0),
    )

    return DashboardResponse(
        inventory=_inventory_summary(db, threshold),
        orders=orders,
        recent_orders=_recent_orders(db),
        low_stock=_low_stock_items(db, threshold, limit=DASHBOARD_LOW_STOCK),
        currency=app_settings.currency,
    )


# -----------------------------
# 2) Low stock
# -----------------------------
@router.get("/low-stock", response_model=LowStockPage)
def report_low_stock(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    threshold = get_app_settings(db).low_stock_threshold
    total = db.query(func.count(Product.id)).filter(low_stock_condition(threshold)).scalar() or 0
    items = _low_stock_items(db, threshold, limit=page_size, offset=(page - 1) * page_size)
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# -----------------------------
# 3) Sales over a window
# -----------------------------
@router.get("/sales", response_model=SalesReport)
def report_sales(
    range: DateRange = Query("30"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fdt, tdt = range_bounds(range)
    orders_q = _orders_in_window(db, fdt, tdt)

    order_count = orders_q.count()
    revenue = float(orders_q.with_entities(func.coalesce(func.sum(Order.total_amount), 0.0)).scalar() or 0)

    # Cost of goods uses the current cost price; lines of deleted products cost nothing
    items_sold, cost = (
        orders_q.join(OrderItem, OrderItem.order_id == Order.id)
        .outerjoin(Product, Product.id == OrderItem.product_id)
        .with_entities(
            func.coalesce(func.sum(OrderItem.quantity), 0),
            func.coalesce(func.sum(OrderItem.quantity * func.coalesce(Product.cost_price, 0.0)), 0.0),
        )
        .one()
    )

    day = func.date(Order.created_at)
    daily_rows = (
        orders_q.with_entities(
            day.label("d"),
            func.count(Order.id).label("orders"),
            func.coalesce(func.sum(Order.total_amount), 0.0).label("revenue"),
        )
        .group_by(day)
        .order_by(day.asc())
        .all()
    )

    return SalesReport(
        range=range,
        date_from=fdt,
        date_to=tdt,
        order_count=order_count,
        revenue=round(revenue, 2),
        average_order_value=round(revenue / order_count, 2) if order_count else 0.0,
        items_sold=int(items_sold or 0),
        cost_of_goods=round(float(cost or 0), 2),
        profit=round(revenue - float(cost or 0), 2),
        daily=[SalesDay(date=r.d, orders=r.orders, revenue=round(float(r.revenue), 2)) for r in daily_rows],
    )


@router.get("/monthly-revenue", response_model=MonthlyRevenue)
def report_monthly_revenue(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = datetime.utcnow()
    start = datetime(now.year, now.month, 1)
    end = datetime(now.year + 1, 1, 1) if now.month == 12 else datetime(now.year, now.month + 1, 1)

    q = _orders_in_window(db, start, end)
    revenue = q.with_entities(func.coalesce(func.sum(Order.total_amount), 0.0)).scalar()
    return MonthlyRevenue(year=now.year, month=now.month, revenue=round(float(revenue or 0), 2), orders=q.count())


# -----------------------------
# 4) Best sellers
# -----------------------------
@router.get("/top-products", response_model=TopProductsResponse)
def report_top_products(
    range: DateRange = Query("30"),
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    fdt, tdt = range_bounds(range)
    lines = (
        _orders_in_window(db, fdt, tdt)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .with_entities(OrderItem.product_id, OrderItem.product_name, OrderItem.product_sku,
                       OrderItem.quantity, OrderItem.price)
        .all()
    )

    # Live products group by id, deleted ones by their snapshot name
    totals: Dict[Tuple, TopProduct] = {}
    for product_id, name, sku, qty, price in lines:
        key = ("id", product_id) if product_id is not None else ("name", name)
        entry = totals.get(key)
        if entry is None:
            entry = TopProduct(product_id=product_id, product_name=name or "Unknown product",
                               product_sku=sku, quantity_sold=0, revenue=0.0)
            totals[key] = entry
        entry.quantity_sold += qty
        entry.revenue = round(entry.revenue + qty * price, 2)

    ranked = sorted(totals.values(), key=lambda t: (-t.quantity_sold, -t.revenue, t.product_name))
    return TopProductsResponse(range=range, items=ranked[:limit])


# -----------------------------
# 5) Inventory valuation and exports
# -----------------------------
@router.get("/inventory-valuation", response_model=InventoryValuation)
def report_inventory_valuation(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(
            Product.category.label("category"),
            func.count(Product.id).label("products"),
            func.coalesce(func.sum(Product.stock), 0).label("units"),
            func.coalesce(func.sum(Product.stock * Product.cost_price), 0.0).label("cost_value"),
            func.coalesce(func.sum(Product.stock * Product.selling_price), 0.0).label("retail_value"),
        )
        .group_by(Product.category)
        .order_by(Product.category.asc())
        .all()
    )
    categories = [
        CategoryValuation(
            category=r.category, products=r.products, units=int(r.units),
            cost_value=round(float(r.cost_value), 2), retail_value=round(float(r.retail_value), 2),
        )
        for r in rows
    ]
    return InventoryValuation(
        total_units=sum(c.units for c in categories),
        cost_value=round(sum(c.cost_value for c in categories), 2),
        retail_value=round(sum(c.retail_value for c in categories), 2),
        categories=categories,
    )


@router.get("/inventory", response_model=InventoryReport)
def report_inventory(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    threshold = get_app_settings(db).low_stock_threshold
    low = _low_stock_items(db, threshold)
    return InventoryReport(
        generated_at=datetime.utcnow(),
        inventory_summary=_inventory_summary(db, threshold),
        recent_orders=_recent_orders(db),
        low_stock_items=[
            ReportLowStockItem(name=i.name, sku=i.sku, current_stock=i.stock,
                               reorder_level=i.reorder_level, location=i.location)
            for i in low
        ],
    )


EXPORT_COLUMNS = [
    "name", "sku", "category", "stock", "reorder_level",
    "cost_price", "selling_price", "location", "stock_status",
]

@router.get("/inventory.csv")
def export_inventory_csv(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    threshold = get_app_settings(db).low_stock_threshold
    products = db.query(Product).order_by(Product.name.asc()).all()
    df = pd.DataFrame(
        [
            {
                "name": p.name, "sku": p.sku, "category": p.category, "stock": p.stock,
                "reorder_level": p.reorder_level, "cost_price": p.cost_price,
                "selling_price": p.selling_price, "location": p.location or "",
                "stock_status": get_stock_status(p.stock, p.reorder_level, threshold),
            }
            for p in products
        ],
        columns=EXPORT_COLUMNS,
    )
    filename = f"inventory-{datetime.utcnow().date().isoformat()}.csv"
    return Response(
        content=df.to_csv(index=False),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
