import uuid
from datetime import timedelta

import pytest
from jose import jwt

from mesalink.core.config import settings
from mesalink.core.exceptions import AuthError
from mesalink.core.security import create_access_token, decode_token


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "operacional"


def test_health(client):
    response = client.get("/health")
    assert response.json()["status"] == "healthy"


def test_api_v1_root(client):
    assert client.get("/api/v1/").json() == {"message": "API V1 Operacional"}


def test_access_token_round_trip():
    restaurant_id = uuid.uuid4()
    claims = decode_token(create_access_token("chef@example.com", restaurant_id, role="owner"))
    assert claims.subject == "chef@example.com"
    assert claims.restaurant_id == restaurant_id
    assert claims.role == "owner"


def test_expired_token_is_rejected():
    token = create_access_token("chef@example.com", uuid.uuid4(), expires_delta=timedelta(seconds=-1))
    with pytest.raises(AuthError):
        decode_token(token)


def test_token_without_access_type_is_rejected():
    token = jwt.encode(
        {"sub": "chef@example.com", "restaurant_id": str(uuid.uuid4())},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(AuthError):
        decode_token(token)


def test_staff_auth_can_be_disabled(client, monkeypatch, restaurant_id):
    monkeypatch.setattr(settings, "STAFF_AUTH_ENABLED", False)
    response = client.get("/api/v1/orders", params={"restaurantId": str(restaurant_id)})
    assert response.status_code == 200
    assert response.json() == {"orders": []}
