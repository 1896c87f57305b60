from fastapi.testclient import TestClient

PASSWORD = "StrongPassw0rd!"


def test_root_is_up(client: TestClient):
    r = client.get("/")
    assert r.status_code == 200
    assert "x-response-time" in r.headers


def test_register_login_profile_logout(client: TestClient, register):
    username, headers = register()

    r = client.get("/api/profile", headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["username"] == username
    assert r.json()["role"] == "DRIVER"
    assert "password" not in r.json()

    r = client.post("/api/logout", headers=headers)
    assert r.status_code == 200

    r = client.get("/api/profile", headers=headers)
    assert r.status_code == 401


def test_register_duplicate_username_returns_409(client: TestClient):
    payload = {
        "username": "dupuser",
        "password": PASSWORD,
        "name": "Dup",
        "email": "dup@example.com",
    }
    assert client.post("/api/register", json=payload).status_code == 201
    assert client.post("/api/register", json=payload).status_code == 409


def test_register_validates_input(client: TestClient):
    r = client.post("/api/register", json={"username": "x", "password": "short", "name": "x", "email": "nope"})
    assert r.status_code == 422


def test_login_invalid_credentials_returns_401(client: TestClient, register):
    register()
    r = client.post("/api/login", json={"username": "nope", "password": "nope"})
    assert r.status_code == 401


def test_login_missing_field_returns_422(client: TestClient):
    r = client.post("/api/login", json={"password": "x"})
    assert r.status_code == 422


def test_missing_or_bad_token(client: TestClient):
    assert client.get("/api/profile").status_code == 401
    assert client.get("/api/profile", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/profile", headers={"Authorization": "Bearer unknown"}).status_code == 401


def test_only_first_admin_registers_freely(client: TestClient, admin, register):
    r = client.post(
        "/api/register",
        json={"username": "sneaky", "password": PASSWORD, "name": "S", "email": "s@example.com", "role": "ADMIN"},
    )
    assert r.status_code == 403

    register(role="ADMIN", headers=admin)


def test_update_profile(client: TestClient, register):
    username, headers = register()

    r = client.put("/api/profile", json={"name": "New Name", "password": "AnotherPassw0rd"}, headers=headers)
    assert r.status_code == 200, r.text
    assert client.get("/api/profile", headers=headers).json()["name"] == "New Name"

    assert client.post("/api/login", json={"username": username, "password": PASSWORD}).status_code == 401
    assert client.post("/api/login", json={"username": username, "password": "AnotherPassw0rd"}).status_code == 200


def test_access_log_written(client: TestClient, app_module, register):
    import json
    import os

    register()
    with open(app_module.settings.log_path, encoding="utf-8") as f:
        entries = [json.loads(line) for line in f if line.strip()]
    assert {e["endpoint"] for e in entries} >= {"/register", "/login"}
    assert os.path.exists(os.path.join(app_module.settings.data_dir, "perf.log"))
