"""Tests des routes /api/v1/products."""

from decimal import Decimal

from app.models.product import Product
from tests.conftest import auth_headers

URL = "/api/v1/products"


def product_payload(category_id, **overrides):
    payload = {
        "sku": "boot-100",
        "name": "Steel Toe Boot",
        "description": "Steel toe cap boot with anti-slip sole",
        "brand": "StepSafe",
        "price": "4500",
        "protection_type": "Foot",
        "industry": "Construction",
        "category_id": category_id,
        "stock": 40,
    }
    payload.update(overrides)
    return payload


def add_product(db_session, category, **overrides):
    data = {
        "sku": "GEN-001",
        "name": "Generic Item",
        "description": "Generic safety item",
        "brand": "SafeCo",
        "price": Decimal("100"),
        "protection_type": "Head",
        "industry": "Construction",
        "category_id": category.id,
        "stock": 10,
        "is_active": True,
    }
    data.update(overrides)
    product = Product(**data)
    db_session.add(product)
    db_session.commit()
    return product


def test_list_public(client, product):
    response = client.get(f"{URL}/")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["data"][0]["sku"] == "HLM-001"
    assert body["data"][0]["category"]["slug"] == "safety-helmets"


def test_list_filters(client, db_session, category, product):
    add_product(db_session, category, sku="GLV-001", name="Nitrile Gloves", brand="HandPro",
                protection_type="Hand", industry="Medical", price=Decimal("300"), stock=0)

    assert client.get(f"{URL}/?protection_type=Hand").json()["total"] == 1
    assert client.get(f"{URL}/?in_stock=true").json()["total"] == 1
    assert client.get(f"{URL}/?search=nitrile").json()["data"][0]["sku"] == "GLV-001"
    assert client.get(f"{URL}/?min_price=1000").json()["data"][0]["sku"] == "HLM-001"

    names = [item["name"] for item in client.get(f"{URL}/?sort=price-low").json()["data"]]
    assert names == ["Nitrile Gloves", "Hard Hat Pro"]


def test_sale_products(client, db_session, category, product):
    add_product(db_session, category, sku="SALE-001", price=Decimal("750"), compare_price=Decimal("1000"))

    body = client.get(f"{URL}/sale").json()

    assert [item["sku"] for item in body["data"]] == ["SALE-001"]
    assert body["data"][0]["discount_percentage"] == 25


def test_inactive_product_is_hidden(client, db_session, product):
    product.is_active = False
    db_session.commit()

    assert client.get(f"{URL}/{product.id}").status_code == 404
    assert client.get(f"{URL}/").json()["total"] == 0


def test_create_updates_category_count(client, admin_headers, category, product):
    response = client.post(f"{URL}/", json=product_payload(category.id), headers=admin_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["sku"] == "BOOT-100"
    assert data["currency"] == "KES"
    assert client.get(f"/api/v1/categories/{category.id}").json()["data"]["product_count"] == 2


def test_create_duplicate_sku(client, admin_headers, category, product):
    response = client.post(f"{URL}/", json=product_payload(category.id, sku="hlm-001"),
                           headers=admin_headers)
    assert response.status_code == 409


def test_create_unknown_category(client, admin_headers):
    response = client.post(f"{URL}/", json=product_payload(999), headers=admin_headers)
    assert response.status_code == 404


def test_create_validation(client, admin_headers, category):
    response = client.post(
        f"{URL}/",
        json=product_payload(category.id, price="0", description="short"),
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert {error["field"] for error in response.json()["errors"]} == {"price", "description"}


def test_create_requires_scope(client, category):
    response = client.post(f"{URL}/", json=product_payload(category.id),
                           headers=auth_headers("coupons:write"))
    assert response.status_code == 403


def test_update_moves_category(client, admin_headers, category, other_category, product):
    response = client.put(f"{URL}/{product.id}", json={"category_id": other_category.id, "stock": 3},
                          headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["category_id"] == other_category.id
    assert client.get(f"/api/v1/categories/{category.id}").json()["data"]["product_count"] == 0
    assert client.get(f"/api/v1/categories/{other_category.id}").json()["data"]["product_count"] == 1


def test_delete_is_soft(client, db_session, admin_headers, product):
    response = client.delete(f"{URL}/{product.id}", headers=admin_headers)

    assert response.status_code == 200
    db_session.refresh(product)
    assert product.is_active is False
    assert client.delete(f"{URL}/999", headers=admin_headers).status_code == 404


def test_low_stock(client, db_session, admin_headers, category, product):
    add_product(db_session, category, sku="LOW-001", stock=2)

    body = client.get(f"{URL}/admin/low-stock?threshold=5", headers=admin_headers).json()

    assert [item["sku"] for item in body["data"]] == ["LOW-001"]


def test_bulk_stock(client, admin_headers, product):
    response = client.put(
        f"{URL}/admin/bulk-stock",
        json={"updates": [{"product_id": product.id, "stock": 7}, {"product_id": 999, "stock": 1}]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    results = response.json()["data"]
    assert results[0] == {"product_id": product.id, "success": True, "name": "Hard Hat Pro",
                          "new_stock": 7, "error": None}
    assert results[1]["success"] is False


def test_stock_helpers():
    product = Product(stock=3, low_stock_threshold=5)
    assert product.is_in_stock()
    assert product.is_low_stock()
    assert not Product(stock=0).is_in_stock()
