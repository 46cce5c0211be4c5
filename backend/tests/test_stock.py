from factories import create_product


def _adjust(client, headers, product_id, quantity, adjustment_type, reason="Recount"):
    return client.post(
        "/stock-adjustments",
        json={"product_id": product_id, "quantity": quantity, "adjustment_type": adjustment_type, "reason": reason},
        headers=headers,
    )


def test_adjustment_in_and_out(client, user, user_headers):
    product = create_product(client, user_headers, stock=10)

    resp = _adjust(client, user_headers, product["id"], 5, "in", "Delivery")
    assert resp.status_code == 201
    body = resp.json()
    assert body["previous_quantity"] == 10
    assert body["new_quantity"] == 15
    assert body["user_id"] == user.id
    assert body["reference"] == f"ADJ-{1000 + body['id']}"
    assert body["product"]["sku"] == "WID-001"

    resp = _adjust(client, user_headers, product["id"], 15, "out", "Breakage")
    assert resp.status_code == 201
    assert resp.json()["new_quantity"] == 0

    assert client.get(f"/products/{product['id']}", headers=user_headers).json()["stock"] == 0


def test_adjustment_cannot_go_negative(client, user_headers):
    product = create_product(client, user_headers, stock=3)

    resp = _adjust(client, user_headers, product["id"], 4, "out")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient stock for WID-001. Available: 3, requested: 4"
    assert client.get(f"/products/{product['id']}", headers=user_headers).json()["stock"] == 3


def test_adjustment_validation(client, user_headers):
    product = create_product(client, user_headers)
    assert _adjust(client, user_headers, product["id"], 0, "in").status_code == 422
    assert _adjust(client, user_headers, product["id"], 1, "sideways").status_code == 422
    assert _adjust(client, user_headers, 999, 1, "in").status_code == 404


def test_adjustment_rejected_for_serialized_product(client, user_headers):
    product = create_product(client, user_headers, is_serialized=True)
    assert _adjust(client, user_headers, product["id"], 1, "in").status_code == 400


def test_list_filters(client, user_headers):
    mug = create_product(client, user_headers, name="Mug", sku="MUG-1", stock=5)
    create_product(client, user_headers, name="Plate", sku="PLT-1", stock=5)
    _adjust(client, user_headers, mug["id"], 2, "out")

    all_rows = client.get("/stock-adjustments", headers=user_headers).json()
    assert all_rows["total"] == 3

    outs = client.get("/stock-adjustments", params={"adjustment_type": "out"}, headers=user_headers).json()
    assert outs["total"] == 1
    assert outs["items"][0]["product_id"] == mug["id"]

    by_product = client.get("/stock-adjustments", params={"product_id": mug["id"]}, headers=user_headers).json()
    assert by_product["total"] == 2
    # Newest first
    assert [r["adjustment_type"] for r in by_product["items"]] == ["out", "in"]

    searched = client.get("/stock-adjustments", params={"q": "plt"}, headers=user_headers).json()
    assert searched["total"] == 1

    bad = client.get("/stock-adjustments", params={"date_from": "yesterday"}, headers=user_headers)
    assert bad.status_code == 400
