from factories import create_product


def test_defaults_come_from_environment(client, user_headers):
    body = client.get("/settings", headers=user_headers).json()
    assert body == {
        "company_name": None,
        "currency": "USD",
        "low_stock_threshold": 5,
        "default_category": "General",
        "auto_generate_sku": True,
        "items_per_page": 10,
    }


def test_update_requires_admin(client, user_headers):
    resp = client.patch("/settings", json={"currency": "EUR"}, headers=user_headers)
    assert resp.status_code == 403


def test_partial_update(client, admin_headers):
    resp = client.patch("/settings", json={"company_name": "Acme", "currency": "eur"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["company_name"] == "Acme"
    assert resp.json()["currency"] == "EUR"

    resp = client.patch("/settings", json={"default_category": "Misc"}, headers=admin_headers)
    body = resp.json()
    assert body["company_name"] == "Acme"
    assert body["default_category"] == "Misc"

    assert client.patch("/settings", json={"currency": "EURO"}, headers=admin_headers).status_code == 422
    assert client.patch("/settings", json={"low_stock_threshold": -1}, headers=admin_headers).status_code == 422


def test_threshold_drives_stock_status(client, admin_headers):
    product = create_product(client, admin_headers, stock=8)
    assert product["stock_status"] == "In Stock"

    client.patch("/settings", json={"low_stock_threshold": 10}, headers=admin_headers)
    assert client.get(f"/products/{product['id']}", headers=admin_headers).json()["stock_status"] == "Low Stock"


def test_default_category_setting_applies_to_new_products(client, admin_headers):
    client.patch("/settings", json={"default_category": "Misc"}, headers=admin_headers)
    product = create_product(client, admin_headers, category=None)
    assert product["category"] == "Misc"
