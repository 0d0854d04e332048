import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scan2eat.core.database import Base, get_db
from scan2eat.core.errors import register_exception_handlers
from scan2eat.deps import get_access_gate, get_broadcaster
from scan2eat.models.menu_item import MenuItem
from scan2eat.models.order import Order
from scan2eat.routers.menu import router as menu_router
from scan2eat.routers.orders import router as orders_router
from scan2eat.services import menu as menu_service
from scan2eat.services.access import SharedSecretAccessGate
from scan2eat.services.live_updates import LiveUpdateBroadcaster
from tests.fixtures_data import (
    CASHIER_HEADERS,
    CASHIER_SECRET,
    KITCHEN_HEADERS,
    KITCHEN_SECRET,
    MENU_ITEM_PAYLOAD,
)


class RecordingSubscriber:
    def __init__(self):
        self.messages = []

    async def send_json(self, data):
        self.messages.append(data)


def _build_client():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    db.add(MenuItem(id=1, name="Soup", price=4.5, available=True))
    db.add(MenuItem(id=2, name="Seasonal Pie", price=6.0, available=False))
    db.add(MenuItem(id=3, name="Bread", price=1.25, available=True))
    db.commit()

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(menu_router)
    app.include_router(orders_router)

    broadcaster = LiveUpdateBroadcaster()
    subscriber = RecordingSubscriber()
    broadcaster.connect(subscriber)

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    app.dependency_overrides[get_access_gate] = lambda: SharedSecretAccessGate(
        cashier_secret=CASHIER_SECRET,
        kitchen_secret=KITCHEN_SECRET,
    )

    return TestClient(app), db, subscriber


def test_public_menu_lists_only_available_items_in_creation_order():
    client, _db, _subscriber = _build_client()

    response = client.get("/api/menu")

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Soup", "Bread"]
    assert all(item["available"] for item in response.json())


def test_full_menu_requires_cashier():
    client, _db, _subscriber = _build_client()

    anonymous = client.get("/api/menu/all")
    kitchen = client.get("/api/menu/all", headers=KITCHEN_HEADERS)
    cashier = client.get("/api/menu/all", headers=CASHIER_HEADERS)

    assert anonymous.status_code == 401
    assert kitchen.status_code == 401
    assert cashier.status_code == 200
    assert [item["id"] for item in cashier.json()] == [1, 2, 3]


def test_create_menu_item_defaults_to_available_and_broadcasts_refresh():
    client, _db, subscriber = _build_client()

    response = client.post("/api/menu", json=MENU_ITEM_PAYLOAD, headers=CASHIER_HEADERS)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Tomato Soup"
    assert data["price"] == 4.5
    assert data["imageUrl"] == "https://cdn.example.com/soup.jpg"
    assert data["available"] is True
    assert subscriber.messages == [{"event": "menu:update", "data": None}]
    assert "Tomato Soup" in [item["name"] for item in client.get("/api/menu").json()]


def test_create_menu_item_follows_catalog_default(monkeypatch):
    client, _db, _subscriber = _build_client()
    monkeypatch.setattr(menu_service, "MENU_ITEM_DEFAULT_AVAILABLE", False)

    response = client.post("/api/menu", json={"name": "Draft", "price": 3}, headers=CASHIER_HEADERS)

    assert response.status_code == 201
    assert response.json()["available"] is False


def test_create_menu_item_rejects_invalid_payload():
    client, db, subscriber = _build_client()

    missing_name = client.post("/api/menu", json={"price": 3}, headers=CASHIER_HEADERS)
    negative = client.post("/api/menu", json={"name": "Tea", "price": -1}, headers=CASHIER_HEADERS)
    text_price = client.post("/api/menu", json={"name": "Tea", "price": "3"}, headers=CASHIER_HEADERS)
    not_finite = client.post(
        "/api/menu",
        content='{"name": "Tea", "price": Infinity}',
        headers={**CASHIER_HEADERS, "Content-Type": "application/json"},
    )

    assert missing_name.status_code == 400
    assert negative.status_code == 400
    assert text_price.status_code == 400
    assert not_finite.status_code == 400
    assert db.query(MenuItem).count() == 3
    assert subscriber.messages == []


def test_unauthorized_menu_writes_never_mutate_state():
    client, db, subscriber = _build_client()

    created = client.post("/api/menu", json=MENU_ITEM_PAYLOAD, headers={"x-access-token": "guess"})
    toggled = client.patch("/api/menu/1", json={"available": False}, headers=KITCHEN_HEADERS)
    garbage = client.post("/api/menu", json={"anything": "goes"})

    assert created.status_code == 401
    assert toggled.status_code == 401
    assert garbage.status_code == 401
    db.expire_all()
    assert db.query(MenuItem).count() == 3
    assert db.query(MenuItem).filter(MenuItem.id == 1).first().available is True
    assert subscriber.messages == []


def test_toggle_availability_hides_item_from_public_menu_only():
    client, _db, subscriber = _build_client()

    response = client.patch("/api/menu/1", json={"available": False}, headers=CASHIER_HEADERS)

    assert response.status_code == 200
    assert response.json()["available"] is False
    public_ids = [item["id"] for item in client.get("/api/menu").json()]
    all_ids = [item["id"] for item in client.get("/api/menu/all", headers=CASHIER_HEADERS).json()]
    assert 1 not in public_ids
    assert 1 in all_ids
    assert subscriber.messages == [{"event": "menu:update", "data": None}]


@pytest.mark.parametrize("item_id", [999, 2**70])
def test_toggle_availability_unknown_item_returns_404(item_id):
    client, _db, subscriber = _build_client()

    response = client.patch(f"/api/menu/{item_id}", json={"available": True}, headers=CASHIER_HEADERS)

    assert response.status_code == 404
    assert response.json() == {"detail": "Menu item not found"}
    assert subscriber.messages == []


def test_menu_changes_do_not_alter_placed_orders():
    client, db, _subscriber = _build_client()
    order = client.post(
        "/api/orders",
        json={"tableId": 3, "items": [{"name": "Soup", "price": 4.5, "qty": 1}]},
    ).json()

    item = db.query(MenuItem).filter(MenuItem.id == 1).first()
    item.price = 99.0
    item.name = "Renamed Soup"
    db.commit()
    client.patch("/api/menu/1", json={"available": False}, headers=CASHIER_HEADERS)

    db.expire_all()
    stored = db.query(Order).filter(Order.id == order["id"]).first()
    assert stored.items == [{"name": "Soup", "qty": 1, "price": 4.5, "note": None}]
    assert stored.total == 4.5
