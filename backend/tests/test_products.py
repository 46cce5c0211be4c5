import re
from datetime import datetime

import pytest

from config import settings
from factories import create_product, create_order


def test_create_product_records_initial_stock(client, user_headers):
    product = create_product(client, user_headers, sku=" wid-001 ", stock=12)

    assert product["sku"] == "WID-001"
    assert product["stock"] == 12
    assert product["stock_status"] == "In Stock"

    history = client.get(f"/stock-adjustments/product/{product['id']}", headers=user_headers).json()
    assert len(history) == 1
    assert history[0]["adjustment_type"] == "in"
    assert history[0]["reason"] == "Initial stock"
    assert history[0]["previous_quantity"] == 0
    assert history[0]["new_quantity"] == 12


def test_duplicate_sku_conflicts(client, user_headers):
    create_product(client, user_headers, sku="DUP-1")
    resp = client.post("/products", json={"name": "Other", "sku": "dup-1"}, headers=user_headers)
    assert resp.status_code == 409


def test_sku_is_generated_when_missing(client, user_headers):
    yymm = datetime.utcnow().strftime("%y%m")

    first = create_product(client, user_headers, name="Widget", sku=None)
    second = create_product(client, user_headers, name="Widget Pro", sku="")

    assert first["sku"] == f"WID-{yymm}-0001"
    assert second["sku"] == f"WID-{yymm}-0002"


def test_generate_sku_preview_uses_fallback_base(client, user_headers):
    resp = client.get("/products/generate-sku", params={"name": "!!!"}, headers=user_headers)
    assert resp.status_code == 200
    assert re.fullmatch(r"SKU-\d{4}-0001", resp.json()["sku"])


def test_sku_required_when_generation_disabled(client, admin_headers):
    client.patch("/settings", json={"auto_generate_sku": False}, headers=admin_headers)
    resp = client.post("/products", json={"name": "Nameless"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "SKU is required"


def test_empty_category_falls_back_to_default(client, user_headers):
    product = create_product(client, user_headers, category="  ")
    assert product["category"] == "General"


def test_stock_status_uses_reorder_level_before_global_threshold(client, user_headers):
    own_level = create_product(client, user_headers, sku="A-1", stock=8, reorder_level=10)
    global_level = create_product(client, user_headers, sku="A-2", stock=8, reorder_level=0)
    empty = create_product(client, user_headers, sku="A-3", stock=0)

    assert own_level["stock_status"] == "Low Stock"
    assert global_level["stock_status"] == "In Stock"
    assert empty["stock_status"] == "Out of Stock"

    low = client.get("/products", params={"stock_status": "low_stock"}, headers=user_headers).json()
    assert [p["sku"] for p in low["items"]] == ["A-1"]

    out = client.get("/products/out-of-stock", headers=user_headers).json()
    assert [p["sku"] for p in out] == ["A-3"]

    alerts = client.get("/products/low-stock", headers=user_headers).json()
    assert [p["sku"] for p in alerts] == ["A-3", "A-1"]


def test_patch_stock_records_adjustment(client, user_headers):
    product = create_product(client, user_headers, stock=10)

    resp = client.patch(
        f"/products/{product['id']}",
        json={"stock": 4, "adjustment_reason": "Cycle count"},
        headers=user_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["stock"] == 4

    latest = client.get(f"/stock-adjustments/product/{product['id']}", headers=user_headers).json()[0]
    assert latest["adjustment_type"] == "out"
    assert latest["quantity"] == 6
    assert latest["reason"] == "Cycle count"


def test_patch_stock_rejected_for_serialized_product(client, user_headers):
    product = create_product(client, user_headers, is_serialized=True)
    assert product["stock"] == 0

    resp = client.patch(f"/products/{product['id']}", json={"stock": 3}, headers=user_headers)
    assert resp.status_code == 400


def test_lookup_by_sku_and_search(client, user_headers):
    create_product(client, user_headers, name="Blue Mug", sku="MUG-B")
    create_product(client, user_headers, name="Red Plate", sku="PLT-R", category="Kitchen")

    assert client.get("/products/by-sku/mug-b", headers=user_headers).json()["name"] == "Blue Mug"
    assert client.get("/products/by-sku/nope", headers=user_headers).status_code == 404

    found = client.get("/products/search", params={"q": "plt"}, headers=user_headers).json()
    assert [p["name"] for p in found] == ["Red Plate"]

    categories = client.get("/products/unique/categories", headers=user_headers).json()
    assert categories == ["Hardware", "Kitchen"]


def test_delete_requires_admin(client, user_headers):
    product = create_product(client, user_headers)
    resp = client.delete(f"/products/{product['id']}", headers=user_headers)
    assert resp.status_code == 403


def test_delete_keeps_order_line_snapshot(client, admin_headers):
    product = create_product(client, admin_headers, name="Lamp", sku="LMP-1", stock=5)
    order = create_order(client, admin_headers, [{"product_id": product["id"], "quantity": 2}])

    line = order["items"][0]
    assert line["product_name"] == "Lamp"
    assert line["product_unit"] == "unit"

    assert client.delete(f"/products/{product['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/products/{product['id']}", headers=admin_headers).status_code == 404

    line = client.get(f"/orders/{order['id']}", headers=admin_headers).json()["items"][0]
    assert line["product_id"] is None
    assert line["product_name"] == "Lamp (Deleted)"
    assert line["product_sku"] == "LMP-1"
    assert line["quantity"] == 2


def _skus(resp):
    assert resp.status_code == 200, resp.text
    return [p["sku"] for p in resp.json()["items"]]


def test_list_filters_sorting_and_pagination(client, user_headers):
    create_product(client, user_headers, name="Blue Mug", sku="MUG-B", category="Kitchen",
                   location="A1", stock=20, selling_price=12.0)
    create_product(client, user_headers, name="Red Mug", sku="MUG-R", category="Kitchen",
                   location="B2", stock=3, selling_price=8.0)
    create_product(client, user_headers, name="Steel Bolt", sku="BLT-1", category="Hardware",
                   location="A1", stock=0, selling_price=1.0)
    create_product(client, user_headers, name="Drill", sku="DRL-1", category="Hardware",
                   location="C3", stock=50, selling_price=99.0)

    def listing(**params):
        return _skus(client.get("/products", params=params, headers=user_headers))

    assert sorted(listing(q="mug")) == ["MUG-B", "MUG-R"]
    assert listing(q="blt") == ["BLT-1"]
    assert sorted(listing(category="hard")) == ["BLT-1", "DRL-1"]
    assert sorted(listing(location="a1")) == ["BLT-1", "MUG-B"]

    assert sorted(listing(stock_status="in_stock")) == ["DRL-1", "MUG-B"]
    # Zero stock is out of stock, never low stock
    assert listing(stock_status="low_stock") == ["MUG-R"]
    assert listing(stock_status="out_of_stock") == ["BLT-1"]

    assert listing(sort_by="selling_price", order="asc") == ["BLT-1", "MUG-R", "MUG-B", "DRL-1"]
    assert listing(sort_by="selling_price", order="desc") == ["DRL-1", "MUG-B", "MUG-R", "BLT-1"]

    first = client.get("/products", params={"sort_by": "name", "order": "asc", "page_size": 3},
                       headers=user_headers).json()
    assert first["total"] == 4
    assert first["page"] == 1
    assert first["page_size"] == 3
    assert [p["name"] for p in first["items"]] == ["Blue Mug", "Drill", "Red Mug"]

    second = client.get("/products", params={"sort_by": "name", "order": "asc", "page_size": 3, "page": 2},
                        headers=user_headers).json()
    assert second["total"] == 4
    assert [p["name"] for p in second["items"]] == ["Steel Bolt"]


@pytest.mark.parametrize("field", ["name", "sku", "cost_price", "selling_price", "reorder_level"])
def test_patch_rejects_null_for_required_fields(client, user_headers, field):
    product = create_product(client, user_headers)

    resp = client.patch(f"/products/{product['id']}", json={field: None}, headers=user_headers)
    assert resp.status_code == 422

    unchanged = client.get(f"/products/{product['id']}", headers=user_headers).json()
    assert unchanged[field] == product[field]


def test_patch_rejects_blank_sku(client, user_headers):
    product = create_product(client, user_headers, sku="KEEP-1")

    resp = client.patch(f"/products/{product['id']}", json={"sku": "   "}, headers=user_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "SKU cannot be empty"
    assert client.get(f"/products/{product['id']}", headers=user_headers).json()["sku"] == "KEEP-1"


def test_upload_icon_stores_file_and_sets_custom_icon(client, user_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    product = create_product(client, user_headers)
    png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

    resp = client.post(
        f"/products/{product['id']}/icon",
        files={"icon": ("icon.png", png, "image/png")},
        headers=user_headers,
    )
    assert resp.status_code == 200, resp.text
    icon_url = resp.json()["custom_icon"]
    assert icon_url.startswith("/uploads/")
    assert icon_url.endswith(".png")

    stored = tmp_path / icon_url.rsplit("/", 1)[-1]
    assert stored.read_bytes() == png
    assert client.get(f"/products/{product['id']}", headers=user_headers).json()["custom_icon"] == icon_url


def test_upload_icon_validation(client, user_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    product = create_product(client, user_headers)
    url = f"/products/{product['id']}/icon"

    wrong_type = client.post(url, files={"icon": ("notes.txt", b"hello", "text/plain")}, headers=user_headers)
    assert wrong_type.status_code == 400
    assert wrong_type.json()["detail"] == "Invalid file type"

    missing = client.post(url, files={"other": ("a.png", b"x", "image/png")}, headers=user_headers)
    assert missing.status_code == 400
    assert missing.json()["detail"] == "No file uploaded"

    unknown = client.post("/products/9999/icon", files={"icon": ("i.png", b"x", "image/png")},
                          headers=user_headers)
    assert unknown.status_code == 404

    assert list(tmp_path.iterdir()) == []
    assert client.get(url.rsplit("/", 1)[0], headers=user_headers).json()["custom_icon"] is None
