import uuid

from mesalink.core.config import settings
from mesalink.services import qrcode_service

TABLES_URL = "/api/v1/tables"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_create_table(client, restaurant_id, staff_headers):
    response = client.post(
        TABLES_URL, json={"restaurantId": str(restaurant_id), "tableNumber": 7}, headers=staff_headers
    )
    assert response.status_code == 201
    data = response.json()
    assert data["tableNumber"] == 7
    assert data["isActive"] is True
    assert data["sessionExpiresAt"] is None


def test_create_duplicate_table_number(client, restaurant_id, table, staff_headers):
    response = client.post(
        TABLES_URL, json={"restaurantId": str(restaurant_id), "tableNumber": 1}, headers=staff_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["loc"] == ["body", "tableNumber"]


def test_create_table_requires_staff(client, restaurant_id):
    response = client.post(TABLES_URL, json={"restaurantId": str(restaurant_id), "tableNumber": 3})
    assert response.status_code == 401


def test_create_table_invalid_number(client, restaurant_id, staff_headers):
    response = client.post(
        TABLES_URL, json={"restaurantId": str(restaurant_id), "tableNumber": 0}, headers=staff_headers
    )
    assert response.status_code == 400


def test_qrcode_returns_png_and_ensures_session(client, db, restaurant_id, table, staff_headers):
    response = client.get(
        f"{TABLES_URL}/{table.id}/qrcode", params={"restaurantId": str(restaurant_id)}, headers=staff_headers
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(PNG_MAGIC)

    db.refresh(table)
    assert table.session_token


def test_qrcode_unknown_table(client, restaurant_id, staff_headers):
    response = client.get(
        f"{TABLES_URL}/{uuid.uuid4()}/qrcode", params={"restaurantId": str(restaurant_id)}, headers=staff_headers
    )
    assert response.status_code == 404


def test_build_table_url():
    restaurant_id = uuid.uuid4()
    url = qrcode_service.build_table_url(restaurant_id, 4, "abc_-123", base_url="https://menu.example.com/")
    assert url == f"https://menu.example.com/menu/{restaurant_id}/4?token=abc_-123"


def test_build_table_url_uses_configured_base():
    url = qrcode_service.build_table_url(uuid.uuid4(), 1, "t")
    assert url.startswith(settings.PUBLIC_MENU_BASE_URL.rstrip("/") + "/menu/")
