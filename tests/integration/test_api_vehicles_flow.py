from fastapi.testclient import TestClient


def test_vehicle_crud(client: TestClient, driver):
    r = client.post("/api/vehicles", json={"licenseplate": "xx 99 yy", "color": "green"}, headers=driver)
    assert r.status_code == 201, r.text
    vehicle = r.json()
    assert vehicle["licenseplate"] == "XX99YY"
    assert vehicle["rate_type"] == "NORMAL"

    assert [v["id"] for v in client.get("/api/vehicles", headers=driver).json()] == [vehicle["id"]]

    r = client.put(f"/api/vehicles/{vehicle['id']}", json={"rate_type": "hourly"}, headers=driver)
    assert r.status_code == 200, r.text
    assert r.json()["rate_type"] == "HOURLY"

    assert client.delete(f"/api/vehicles/{vehicle['id']}", headers=driver).status_code == 200
    r = client.get(f"/api/vehicles/{vehicle['id']}", headers=driver)
    assert r.status_code == 404
    assert r.json()["error"] == "VEHICLE_NOT_FOUND"


def test_duplicate_plate(client: TestClient, driver, register):
    assert client.post("/api/vehicles", json={"licenseplate": "AA-11-BB"}, headers=driver).status_code == 201
    _, other = register()
    assert client.post("/api/vehicles", json={"licenseplate": "aa-11-bb"}, headers=other).status_code == 409


def test_other_driver_cannot_see_vehicle(client: TestClient, vehicle, register):
    _, other = register()
    assert client.get(f"/api/vehicles/{vehicle['id']}", headers=other).status_code == 403
    assert client.delete(f"/api/vehicles/{vehicle['id']}", headers=other).status_code == 403


def test_only_admin_assigns_vip(client: TestClient, driver, admin, vehicle):
    r = client.post("/api/vehicles", json={"licenseplate": "VIP-1", "rate_type": "VIP"}, headers=driver)
    assert r.status_code == 403

    r = client.put(f"/api/vehicles/{vehicle['id']}", json={"rate_type": "VIP"}, headers=admin)
    assert r.status_code == 200
    assert r.json()["rate_type"] == "VIP"


def test_plate_with_qr_separator_is_rejected(client: TestClient, driver, vehicle):
    r = client.post("/api/vehicles", json={"licenseplate": "AB|12"}, headers=driver)
    assert r.status_code == 422

    r = client.put(f"/api/vehicles/{vehicle['id']}", json={"licenseplate": "AB|12"}, headers=driver)
    assert r.status_code == 422
    assert client.get(f"/api/vehicles/{vehicle['id']}", headers=driver).json()["licenseplate"] == "AB-12-CD"
