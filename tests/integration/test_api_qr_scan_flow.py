import pytest
from fastapi.testclient import TestClient


def _qr(client, headers, vehicle, qr_type):
    r = client.post("/api/qr", json={"vehicle_id": vehicle["id"], "qr_type": qr_type}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["qr_data"]


def test_scan_entry_then_exit(client: TestClient, admin, driver, lot, vehicle):
    r = client.post("/api/qr", json={"vehicle_id": vehicle["id"]}, headers=driver)
    assert r.status_code == 201
    body = r.json()
    assert body["qr_type"] == "ENTRY"
    assert body["licenseplate"] == "AB-12-CD"
    assert body["qr_data"].startswith("AUTOPARK|")

    r = client.post("/api/scan", json={"qr_data": body["qr_data"], "parking_lot_id": lot["id"]}, headers=admin)
    assert r.status_code == 200, r.text
    assert r.json()["action"] == "CHECKED_IN"
    assert r.json()["invoice"] is None
    assert client.get(f"/api/parkinglots/{lot['id']}").json()["available_spots"] == 1

    exit_code = _qr(client, driver, vehicle, "exit")
    r = client.post("/api/scan", json={"qr_data": exit_code, "parking_lot_id": lot["id"]}, headers=admin)
    assert r.status_code == 200, r.text
    result = r.json()
    assert result["action"] == "CHECKED_OUT"
    assert result["session"]["status"] == "CHECKED_OUT"
    assert result["invoice"]["session_id"] == result["session"]["id"]
    assert client.get(f"/api/parkinglots/{lot['id']}").json()["available_spots"] == 2


def test_entry_rescan_is_rejected(client: TestClient, admin, driver, lot, vehicle):
    code = _qr(client, driver, vehicle, "ENTRY")
    assert client.post("/api/scan", json={"qr_data": code, "parking_lot_id": lot["id"]}, headers=admin).status_code == 200
    r = client.post("/api/scan", json={"qr_data": code, "parking_lot_id": lot["id"]}, headers=admin)
    assert r.status_code == 409
    assert r.json()["error"] == "VEHICLE_ALREADY_PARKED"


def test_exit_without_session(client: TestClient, admin, driver, lot, vehicle):
    code = _qr(client, driver, vehicle, "EXIT")
    r = client.post("/api/scan", json={"qr_data": code, "parking_lot_id": lot["id"]}, headers=admin)
    assert r.status_code == 404
    assert r.json()["error"] == "SESSION_NOT_FOUND"


def test_tampered_code(client: TestClient, admin, driver, lot, vehicle):
    code = _qr(client, driver, vehicle, "ENTRY")
    tampered = code.replace("AB-12-CD", "XX-99-XX")
    r = client.post("/api/scan", json={"qr_data": tampered, "parking_lot_id": lot["id"]}, headers=admin)
    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_QR_CODE"
    assert r.json()["reason"] == "INVALID_HASH"


def test_garbage_code(client: TestClient, admin, lot):
    r = client.post("/api/scan", json={"qr_data": "hello", "parking_lot_id": lot["id"]}, headers=admin)
    assert r.status_code == 400
    assert r.json()["reason"] == "INVALID_FORMAT"


def test_driver_cannot_scan(client: TestClient, driver, lot, vehicle):
    code = _qr(client, driver, vehicle, "ENTRY")
    r = client.post("/api/scan", json={"qr_data": code, "parking_lot_id": lot["id"]}, headers=driver)
    assert r.status_code == 403


def test_qr_for_foreign_vehicle(client: TestClient, vehicle, register):
    _, other = register()
    r = client.post("/api/qr", json={"vehicle_id": vehicle["id"]}, headers=other)
    assert r.status_code == 403


def test_qr_image(client: TestClient, driver, vehicle):
    pytest.importorskip("PIL")
    r = client.post("/api/qr/image", json={"vehicle_id": vehicle["id"]}, headers=driver)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content.startswith(b"\x89PNG")
