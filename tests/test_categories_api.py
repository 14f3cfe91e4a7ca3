"""Tests des routes /api/v1/categories."""

from decimal import Decimal

from app.models.category import Category, slugify
from app.models.product import Product
from tests.conftest import auth_headers

URL = "/api/v1/categories"


def test_slugify():
    assert slugify("Safety Helmets") == "safety-helmets"
    assert slugify("  Eye & Face -- Protection ") == "eye-face-protection"


def test_list_groups_by_protection_type(client, category, other_category):
    response = client.get(f"{URL}/")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert set(body["grouped_by_type"]) == {"Head", "Hand"}
    assert body["grouped_by_type"]["Head"][0]["slug"] == "safety-helmets"


def test_list_filters_and_hides_inactive(client, db_session, category, other_category):
    other_category.is_active = False
    db_session.commit()

    body = client.get(f"{URL}/").json()
    assert [item["name"] for item in body["data"]] == ["Safety Helmets"]

    body = client.get(f"{URL}/?protection_type=Hand").json()
    assert body["count"] == 0


def test_featured(client, category, other_category):
    body = client.get(f"{URL}/featured").json()
    assert [item["id"] for item in body["data"]] == [category.id]


def test_get_by_slug_and_id(client, category):
    by_slug = client.get(f"{URL}/slug/safety-helmets")
    assert by_slug.status_code == 200
    assert by_slug.json()["data"]["url"] == "/categories/safety-helmets"
    assert by_slug.json()["data"]["is_root"] is True

    assert client.get(f"{URL}/{category.id}").json()["data"]["name"] == "Safety Helmets"
    assert client.get(f"{URL}/slug/unknown").status_code == 404


def test_create_generates_unique_slug(client, admin_headers):
    first = client.post(f"{URL}/", json={"name": "Eye Protection", "protection_type": "Eye"},
                        headers=admin_headers)
    second = client.post(f"{URL}/", json={"name": "Eye  Protection!", "protection_type": "Eye"},
                         headers=admin_headers)

    assert first.status_code == 201
    assert first.json()["data"]["slug"] == "eye-protection"
    assert first.json()["data"]["industry"] == "All"
    assert second.json()["data"]["slug"] == "eye-protection-1"


def test_create_duplicate_name(client, admin_headers, category):
    response = client.post(f"{URL}/", json={"name": "safety helmets", "protection_type": "Head"},
                           headers=admin_headers)
    assert response.status_code == 409


def test_create_validation(client, admin_headers):
    response = client.post(
        f"{URL}/",
        json={"name": "X", "protection_type": "Ear", "industry": "Mining"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"name", "protection_type", "industry"}


def test_create_requires_scope(client):
    response = client.post(f"{URL}/", json={"name": "Boots", "protection_type": "Foot"},
                           headers=auth_headers("products:write"))
    assert response.status_code == 403


def test_update_renames_slug(client, admin_headers, category):
    response = client.put(f"{URL}/{category.id}", json={"name": "Hard Hats"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["slug"] == "hard-hats"


def test_update_cannot_be_own_parent(client, admin_headers, category):
    response = client.put(f"{URL}/{category.id}", json={"parent_id": category.id}, headers=admin_headers)
    assert response.status_code == 400


def test_delete_refused_when_products_exist(client, admin_headers, category, product):
    response = client.delete(f"{URL}/{category.id}", headers=admin_headers)
    assert response.status_code == 409


def test_delete_refused_when_children_exist(client, db_session, admin_headers, category):
    db_session.add(Category(name="Bump Caps", slug="bump-caps", protection_type="Head",
                            industry="All", parent_id=category.id))
    db_session.commit()

    assert client.delete(f"{URL}/{category.id}", headers=admin_headers).status_code == 409


def test_delete_empty_category(client, admin_headers, other_category):
    response = client.delete(f"{URL}/{other_category.id}", headers=admin_headers)

    assert response.status_code == 200
    assert client.get(f"{URL}/{other_category.id}").status_code == 404


def test_product_count_only_counts_active(db_session, category, product):
    db_session.add(Product(sku="HLM-002", name="Old Hat", description="Discontinued model",
                           brand="SafeCo", price=Decimal("900"), protection_type="Head",
                           industry="Construction", category_id=category.id, is_active=False))
    db_session.commit()

    category.update_product_count(db_session)
    assert category.product_count == 1
