from factories import create_product

HEADER = "name,sku,price,quantity,minimum_quantity"


def _upload(client, headers, text, filename="products.csv"):
    return client.post(
        "/import/products",
        files={"file": (filename, text.encode("utf-8"), "text/csv")},
        headers=headers,
    )


def test_import_valid_rows(client, user_headers):
    csv_text = "\n".join([
        HEADER + ",category,location",
        "Desk Lamp,lmp-01,25.00,10,2,Lighting,B3",
        "Cable,CBL-01,3.5,100,10,,",
    ])
    resp = _upload(client, user_headers, csv_text)
    assert resp.status_code == 200
    assert resp.json() == {"total_rows": 2, "imported": 2, "errors": []}

    lamp = client.get("/products/by-sku/LMP-01", headers=user_headers).json()
    assert lamp["stock"] == 10
    assert lamp["reorder_level"] == 2
    assert lamp["category"] == "Lighting"
    assert lamp["cost_price"] == 17.5

    cable = client.get("/products/by-sku/CBL-01", headers=user_headers).json()
    assert cable["category"] == "Imported"
    assert cable["location"] == "Main Warehouse"

    adjustments = client.get(f"/stock-adjustments/product/{cable['id']}", headers=user_headers).json()
    assert adjustments[0]["reason"] == "CSV import"


def test_import_reports_row_errors(client, user_headers):
    create_product(client, user_headers, sku="TAKEN")
    csv_text = "\n".join([
        HEADER,
        ",X-1,abc,5,1",
        "Thing,X-2,10,-1,0",
        "Thing,X-3,10,5,9",
        "Thing,taken,10,5,1",
        "Good,X-5,10,5,1",
        "Again,X-5,10,5,1",
    ])
    body = _upload(client, user_headers, csv_text).json()

    assert body["total_rows"] == 6
    assert body["imported"] == 1
    assert body["errors"] == [
        "Row 1: Product name is required, Price must be a valid number",
        "Row 2: Quantity cannot be negative, Minimum quantity cannot be greater than current quantity",
        "Row 3: Minimum quantity cannot be greater than current quantity",
        "Row 4: Failed to import - SKU TAKEN already exists",
        "Row 6: Failed to import - SKU X-5 already exists",
    ]


def test_import_rejects_bad_files(client, user_headers):
    resp = _upload(client, user_headers, HEADER, filename="products.txt")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please upload a valid CSV file"

    resp = _upload(client, user_headers, "name,sku,price\nA,B,1")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required columns: quantity, minimum_quantity"

    resp = _upload(client, user_headers, "")
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Failed to parse CSV file")


def test_import_size_limit(client, user_headers, monkeypatch):
    from config import settings

    monkeypatch.setattr(settings, "IMPORT_MAX_BYTES", 1024 * 1024)
    resp = _upload(client, user_headers, HEADER + "\n" + "x" * (1024 * 1024))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "File size exceeds 1MB limit"
