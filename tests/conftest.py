import os
import uuid

# Configuração de teste antes de importar a aplicação
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["STAFF_AUTH_ENABLED"] = "True"
os.environ["REDIS_ENABLED"] = "False"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mesalink import crud
from mesalink.api import deps
from mesalink.core.security import create_access_token
from mesalink.db.base_class import Base
from mesalink.db.models import DiningTable
from mesalink.schemas import MenuItemCreate
from mesalink.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


app.dependency_overrides[deps.get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def restaurant_id():
    return uuid.uuid4()


@pytest.fixture
def table(db, restaurant_id):
    obj = DiningTable(restaurant_id=restaurant_id, table_number=1, is_active=True)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def menu_item(db, restaurant_id):
    return crud.menu_item.create(
        db,
        obj_in=MenuItemCreate(
            restaurant_id=restaurant_id,
            name="Tacos al pastor",
            description="Três tacos com abacaxi",
            price=89.5,
            category="platos_fuertes",
            allergens=["gluten"],
        ),
    )


@pytest.fixture
def staff_headers(restaurant_id):
    token = create_access_token("cozinha@example.com", restaurant_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def session_token(client, restaurant_id, table):
    response = client.post(
        "/api/v1/sessions", json={"restaurantId": str(restaurant_id), "tableId": str(table.id)}
    )
    assert response.status_code == 200
    return response.json()["sessionToken"]


def order_payload(restaurant_id, table_id, session_token, menu_item_id=None, **overrides):
    payload = {
        "restaurantId": str(restaurant_id),
        "tableId": str(table_id),
        "sessionToken": session_token,
        "items": [
            {
                "menuItemId": str(menu_item_id or uuid.uuid4()),
                "name": "Tacos al pastor",
                "price": 89.5,
                "quantity": 2,
            }
        ],
        "allergyNotes": None,
        "notes": None,
        "subtotal": 179.0,
        "tax": 0,
        "total": 179.0,
    }
    payload.update(overrides)
    return payload
