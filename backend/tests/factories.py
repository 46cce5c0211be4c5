# backend/tests/factories.py
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

DEFAULT_PASSWORD = "correct-horse"


def make_user(db, email="someone@example.com", role="user", password=DEFAULT_PASSWORD):
    user = User(email=email, password_hash=get_password_hash(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token(data={"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


def create_product(client, headers, **overrides):
    payload = {
        "name": "Widget",
        "sku": "WID-001",
        "category": "Hardware",
        "location": "A1",
        "cost_price": 4.0,
        "selling_price": 10.0,
        "stock": 20,
        "reorder_level": 0,
    }
    payload.update(overrides)
    resp = client.post("/products", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_order(client, headers, items, customer="ACME Ltd", **extra):
    resp = client.post("/orders", json={"customer": customer, "items": items, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_serials(client, headers, product_id, text):
    resp = client.post(f"/products/{product_id}/serials", json={"serials": text}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
