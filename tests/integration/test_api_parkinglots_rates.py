from fastapi.testclient import TestClient

LOT = {
    "name": "Station",
    "address": "Stationsplein 1",
    "city": "Utrecht",
    "coordinates": {"lat": 52.09, "lng": 5.11},
    "total_spots": 50,
    "opening_time": "06:00",
    "closing_time": "23:00",
}


def test_driver_cannot_create_parking_lot(client: TestClient, driver):
    r = client.post("/api/parkinglots", json=LOT, headers=driver)
    assert r.status_code == 403


def test_admin_lot_crud(client: TestClient, admin):
    r = client.post("/api/parkinglots", json=LOT, headers=admin)
    assert r.status_code == 201, r.text
    lot = r.json()
    assert lot["available_spots"] == 50

    assert [l["id"] for l in client.get("/api/parkinglots").json()] == [lot["id"]]

    r = client.put(f"/api/parkinglots/{lot['id']}", json={"total_spots": 60, "city": "Utrecht CS"}, headers=admin)
    assert r.status_code == 200, r.text
    assert r.json()["available_spots"] == 60
    assert r.json()["city"] == "Utrecht CS"

    r = client.delete(f"/api/parkinglots/{lot['id']}", headers=admin)
    assert r.status_code == 200
    r = client.get(f"/api/parkinglots/{lot['id']}")
    assert r.status_code == 404
    assert r.json()["error"] == "LOT_NOT_FOUND"


def test_lot_validation(client: TestClient, admin):
    bad = dict(LOT, total_spots=-1)
    assert client.post("/api/parkinglots", json=bad, headers=admin).status_code == 422
    bad = dict(LOT, opening_time="25:00")
    assert client.post("/api/parkinglots", json=bad, headers=admin).status_code == 422


def test_rate_lifecycle(client: TestClient, admin, lot):
    lot_id = lot["id"]

    r = client.get(f"/api/parkinglots/{lot_id}/rates/normal")
    assert r.status_code == 200, r.text
    rate = r.json()
    assert rate["price_per_hour"] == 2.5

    r = client.post(f"/api/parkinglots/{lot_id}/rates", json={"rate_type": "NORMAL", "price_per_hour": 9}, headers=admin)
    assert r.status_code == 409
    assert r.json()["error"] == "RATE_CONFLICT"

    r = client.put(f"/api/rates/{rate['id']}", json={"is_active": False}, headers=admin)
    assert r.status_code == 200, r.text

    r = client.get(f"/api/parkinglots/{lot_id}/rates/NORMAL")
    assert r.status_code == 404
    assert r.json()["error"] == "NO_APPLICABLE_RATE"

    r = client.post(f"/api/parkinglots/{lot_id}/rates", json={"rate_type": "NORMAL", "price_per_hour": 3}, headers=admin)
    assert r.status_code == 201
    assert len(client.get(f"/api/parkinglots/{lot_id}/rates").json()) == 2
    assert len(client.get(f"/api/parkinglots/{lot_id}/rates?active_only=true").json()) == 1

    assert client.delete(f"/api/rates/{rate['id']}", headers=admin).status_code == 200
    assert client.delete(f"/api/rates/{rate['id']}", headers=admin).status_code == 404


def test_rate_validation(client: TestClient, admin, lot):
    url = f"/api/parkinglots/{lot['id']}/rates"
    assert client.post(url, json={"rate_type": "GOLD"}, headers=admin).status_code == 422
    assert client.post(url, json={"rate_type": "VIP", "vip_multiplier": 0.5}, headers=admin).status_code == 422
    r = client.post(url, json={"rate_type": "VIP", "min_charge_amount": 30, "max_charge_per_day": 20}, headers=admin)
    assert r.status_code == 422
    assert client.post(url, json={"rate_type": "HOURLY", "price_per_hour": -1}, headers=admin).status_code == 422


def test_rate_update_keeps_bounds(client: TestClient, admin, lot):
    rate = client.get(f"/api/parkinglots/{lot['id']}/rates/NORMAL").json()
    r = client.put(f"/api/rates/{rate['id']}", json={"max_charge_per_day": 0.5}, headers=admin)
    assert r.status_code == 422


def test_estimate(client: TestClient, lot):
    r = client.get(f"/api/parkinglots/{lot['id']}/rates/NORMAL/estimate", params={"hours": 3.2})
    assert r.status_code == 200, r.text
    assert r.json()["estimated_charge"] == 10.0

    r = client.get(f"/api/parkinglots/{lot['id']}/rates/NORMAL/estimate", params={"hours": 30})
    assert r.json()["estimated_charge"] == 35.0

    r = client.get(f"/api/parkinglots/{lot['id']}/rates/VIP/estimate", params={"hours": 1})
    assert r.status_code == 404
