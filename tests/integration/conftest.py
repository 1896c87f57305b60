import importlib
import uuid

import pytest

pytest.importorskip("httpx")
from fastapi.testclient import TestClient

PASSWORD = "StrongPassw0rd!"


@pytest.fixture()
def app_module(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOPARK_DB_DIR", str(tmp_path))
    monkeypatch.setenv("AUTOPARK_QR_SECRET", "integration-secret")
    monkeypatch.delenv("AUTOPARK_AES_KEY", raising=False)
    monkeypatch.delenv("AUTOPARK_RESCAN_MODE", raising=False)

    from AutoPark.api import app as module

    importlib.reload(module)
    yield module

    module.connection.close_connection()
    module.logger.close()

    from AutoPark.api import session_manager

    session_manager.clear()


@pytest.fixture()
def client(app_module):
    return TestClient(app_module.app)


def _register_and_login(client: TestClient, role: str = "DRIVER", headers: dict = None):
    username = f"it_{role.lower()}_{uuid.uuid4().hex[:8]}"
    r = client.post(
        "/api/register",
        json={
            "username": username,
            "password": PASSWORD,
            "name": username,
            "phone": "0612345678",
            "email": f"{username}@example.com",
            "role": role,
        },
        headers=headers or {},
    )
    assert r.status_code == 201, r.text

    r = client.post("/api/login", json={"username": username, "password": PASSWORD})
    assert r.status_code == 200, r.text
    token = r.json()["session_token"]
    return username, {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client):
    def _register(role: str = "DRIVER", headers: dict = None):
        return _register_and_login(client, role=role, headers=headers)

    return _register


@pytest.fixture()
def admin(client):
    return _register_and_login(client, role="ADMIN")[1]


@pytest.fixture()
def driver(client, admin):
    return _register_and_login(client, role="DRIVER")[1]


@pytest.fixture()
def lot(client, admin):
    r = client.post(
        "/api/parkinglots",
        json={
            "name": "Centrum",
            "address": "Coolsingel 1",
            "city": "Rotterdam",
            "coordinates": {"lat": 51.92, "lng": 4.48},
            "total_spots": 2,
        },
        headers=admin,
    )
    assert r.status_code == 201, r.text
    lot = r.json()

    r = client.post(
        f"/api/parkinglots/{lot['id']}/rates",
        json={"rate_type": "NORMAL", "price_per_hour": 2.5, "price_per_day": 20.0, "min_charge_amount": 1.0},
        headers=admin,
    )
    assert r.status_code == 201, r.text
    return lot


@pytest.fixture()
def vehicle(client, driver):
    r = client.post("/api/vehicles", json={"licenseplate": "ab-12-cd", "brand": "Fiat"}, headers=driver)
    assert r.status_code == 201, r.text
    return r.json()
