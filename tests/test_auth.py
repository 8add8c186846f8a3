from coopledger.core.security import verify_pin, get_pin_hash


def test_login_with_correct_pin(client):
    response = client.post("/api/auth/login", json={"pin": "2025"})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_login_with_wrong_pin(client, audit_dir):
    response = client.post("/api/auth/login", json={"pin": "1111"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect PIN"
    log_text = "".join(p.read_text() for p in audit_dir.glob("audit_*.log"))
    assert "Login failed" in log_text


def test_login_rejects_non_numeric_pin(client):
    assert client.post("/api/auth/login", json={"pin": "20a5"}).status_code == 422


def test_me_requires_token(client, auth_headers):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["authenticated"] is True


def test_verify_pin_plain_and_hashed():
    assert verify_pin("2025", expected="2025")
    assert not verify_pin("2024", expected="2025")

    hashed = get_pin_hash("4321")
    assert verify_pin("4321", expected=hashed)
    assert not verify_pin("1234", expected=hashed)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["services"]["database"] == "connected"
