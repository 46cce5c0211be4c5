from datetime import datetime

import pytest
from fastapi import HTTPException

from models.product import Product
from utils.csv_import import CSVFormatError, read_rows, validate_row, row_to_product_fields
from utils.dates import parse_date_to, range_bounds
from utils.sku import generate_sku, normalize_sku, sku_base
from utils.stock_status import get_stock_status


@pytest.mark.parametrize("stock, reorder_level, threshold, expected", [
    (0, 0, 5, "Out of Stock"),
    (0, 10, 5, "Out of Stock"),
    (5, 0, 5, "Low Stock"),
    (6, 0, 5, "In Stock"),
    (8, 10, 5, "Low Stock"),
    (11, 10, 50, "In Stock"),
])
def test_get_stock_status(stock, reorder_level, threshold, expected):
    assert get_stock_status(stock, reorder_level, threshold) == expected


def test_sku_helpers():
    assert sku_base("blue mug") == "BLU"
    assert sku_base("3-in-1 Cable") == "3IN"
    assert sku_base("é!") == "SKU"
    assert normalize_sku("  ab-1 ") == "AB-1"
    assert normalize_sku("   ") is None


def test_generate_sku_skips_taken_candidates(db):
    now = datetime.utcnow()
    db.add(Product(name="Mug", sku=f"MUG-{now.strftime('%y%m')}-0002", stock=0))
    db.commit()

    # One product this month, so the sequence starts at 0002 which is taken
    assert generate_sku(db, "Mug", now=now) == f"MUG-{now.strftime('%y%m')}-0003"


def test_range_bounds():
    now = datetime(2026, 3, 10, 15, 30)
    assert range_bounds("all", now) == (None, None)
    assert range_bounds("today", now) == (datetime(2026, 3, 10), None)
    assert range_bounds("yesterday", now) == (datetime(2026, 3, 9), datetime(2026, 3, 10))
    assert range_bounds("7", now) == (datetime(2026, 3, 3, 15, 30), None)
    with pytest.raises(HTTPException):
        range_bounds("fortnight", now)


def test_parse_date_to_covers_whole_day():
    assert parse_date_to("2026-03-10") == datetime(2026, 3, 10, 23, 59, 59)
    assert parse_date_to(None) is None
    with pytest.raises(HTTPException) as exc:
        parse_date_to("10/03/2026")
    assert exc.value.status_code == 400


def test_read_rows_strips_cells_and_fills_short_rows():
    rows = read_rows(b"name,sku,price,quantity,minimum_quantity,category\n Mug , m-1 ,2,3,1\n")
    assert rows == [{
        "name": "Mug", "sku": "m-1", "price": "2", "quantity": "3",
        "minimum_quantity": "1", "category": "",
    }]

    with pytest.raises(CSVFormatError):
        read_rows(b"name,sku\nMug,M-1\n")


def test_validate_row_messages():
    row = {"name": "Mug", "sku": "M-1", "price": "2000000", "quantity": "2.5", "minimum_quantity": "x"}
    assert validate_row(row) == [
        "Price exceeds maximum allowed value",
        "Quantity must be a valid number",
        "Minimum quantity must be a valid number",
    ]

    row = {"name": "Mug", "sku": "M-1", "price": "", "quantity": "", "minimum_quantity": "",
           "cost_price": "-1"}
    assert validate_row(row) == [
        "Price is required",
        "Quantity is required",
        "Minimum quantity is required",
        "Cost price must be a non-negative number",
    ]


@pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
def test_validate_row_rejects_non_finite_prices(raw):
    row = {"name": "Mug", "sku": "M-1", "price": raw, "quantity": "3", "minimum_quantity": "1",
           "cost_price": raw}
    assert validate_row(row) == [
        "Price must be a valid number",
        "Cost price must be a non-negative number",
    ]


def test_row_to_product_fields():
    fields = row_to_product_fields({
        "name": "Mug", "sku": "m-1", "price": "10", "quantity": "4", "minimum_quantity": "1",
        "cost_price": "6.5", "location": "Shelf 2",
    })
    assert fields["sku"] == "M-1"
    assert fields["cost_price"] == 6.5
    assert fields["stock"] == 4
    assert fields["reorder_level"] == 1
    assert fields["category"] == "Imported"
    assert fields["location"] == "Shelf 2"
