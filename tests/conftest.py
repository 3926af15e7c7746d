import os

# без секрета настройки не загрузятся, выставляем до импорта приложения
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from ridehail.db import JsonStore
from ridehail.main import create_app
from ridehail.services.managers import seed_manager

PASSWORD = "secret123"


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "db.json")


@pytest.fixture
def app(store):
    return create_app(store)


@pytest.fixture
def make_client(app):
    """Отдельный клиент = отдельная кука = отдельный пользователь."""
    clients = []

    def _make():
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def anon(make_client):
    return make_client()


def register_customer(client, email="alice@example.com", name="Alice", phone="+375291112233"):
    r = client.post("/auth/register/customer", json={
        "email": email, "password": PASSWORD, "name": name, "phone": phone,
    })
    assert r.status_code == 200, r.text
    return r.json()["user"]


@pytest.fixture
def customer_factory(make_client):
    def _make(email="alice@example.com", name="Alice"):
        client = make_client()
        user = register_customer(client, email=email, name=name)
        return client, user
    return _make


@pytest.fixture
def customer(customer_factory):
    return customer_factory()


@pytest.fixture
def manager_client(store, make_client):
    seed_manager(store, "boss", PASSWORD, "Boss")
    client = make_client()
    r = client.post("/manager/login", json={"login": "boss", "password": PASSWORD})
    assert r.status_code == 200, r.text
    return client


def approval_payload(comfort="economy"):
    return {
        "action": "approve",
        "driverLicenseNumber": "AB123456",
        "carMake": "Skoda",
        "carModel": "Octavia",
        "carColor": "white",
        "carPlate": "1234 AB-7",
        "comfortLevel": comfort,
    }


def submit_application(client, email, name="Bob", phone="+375297778899"):
    r = client.post("/auth/driver-applications", json={
        "email": email, "password": PASSWORD, "name": name, "phone": phone,
    })
    assert r.status_code == 200, r.text


def pending_application_id(manager_client, email):
    apps = manager_client.get("/manager/driver-applications", params={"status": "pending"}).json()
    return next(a["id"] for a in apps if a["email"] == email)


@pytest.fixture
def driver_factory(make_client, manager_client):
    """Заявка -> одобрение менеджером -> вход водителя."""
    def _make(email="bob@example.com", comfort="economy", name="Bob"):
        client = make_client()
        submit_application(client, email, name=name)
        app_id = pending_application_id(manager_client, email)
        r = manager_client.patch(f"/manager/driver-applications/{app_id}", json=approval_payload(comfort))
        assert r.status_code == 200, r.text

        r = client.post("/auth/login", json={"email": email, "password": PASSWORD, "role": "driver"})
        assert r.status_code == 200, r.text
        return client, r.json()["user"]
    return _make


@pytest.fixture
def driver(driver_factory):
    return driver_factory()


def order_payload(comfort="economy", **extra):
    payload = {
        "fromCoords": [53.9006, 27.559],
        "toCoords": [53.9170, 27.5850],
        "comfortType": comfort,
        "distanceMeters": 4200,
        "durationSeconds": 720,
        "priceByN": 6.49,
        "fromAddress": "пр. Независимости, 1",
        "toAddress": "ул. Немига, 5",
    }
    payload.update(extra)
    return payload


def create_order(client, comfort="economy", **extra):
    r = client.post("/orders", json=order_payload(comfort, **extra))
    assert r.status_code == 200, r.text
    return r.json()
