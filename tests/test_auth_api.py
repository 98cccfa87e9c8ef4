from conftest import ADMIN_PASSWORD
from duell.core.rate_limit import login_guard


def _login(client, username="admin", password=ADMIN_PASSWORD, ip=None):
    headers = {"X-Forwarded-For": ip} if ip else {}
    return client.post("/api/auth/login", json={"username": username, "password": password}, headers=headers)


def test_login_success_returns_token(client):
    response = _login(client)
    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "admin"
    assert body["token_type"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "admin"


def test_wrong_password_is_rejected_with_lockout(client):
    response = _login(client, password="wrong-password")
    assert response.status_code == 401
    error = response.json()["detail"]["error"]
    assert error["code"] == "INVALID_CREDENTIALS"
    assert error["retry_after"] == 5
    assert error["message"].startswith("Ungültige Anmeldedaten.")
    assert response.headers["Retry-After"] == "5"


def test_locked_identifier_gets_429_even_with_correct_password(client):
    _login(client, password="wrong-password")
    response = _login(client)
    assert response.status_code == 429
    error = response.json()["detail"]["error"]
    assert error["code"] == "RATE_LIMITED"
    assert 1 <= error["retry_after"] <= 5
    assert "Retry-After" in response.headers


def test_unknown_user_is_throttled_like_wrong_password(client):
    response = _login(client, username="mallory", password="whatever1")
    assert response.status_code == 401
    assert response.json()["detail"]["error"]["retry_after"] == 5
    assert login_guard.check_attempt("testclient:mallory").allowed is False


def test_lockout_is_scoped_to_address_and_username(client):
    _login(client, password="wrong-password", ip="10.0.0.1")
    assert _login(client, ip="10.0.0.1").status_code == 429
    assert _login(client, ip="10.0.0.2").status_code == 200
    assert _login(client, username="someone", password="wrong-password", ip="10.0.0.1").status_code == 401


def test_successful_login_clears_history(client):
    _login(client, password="wrong-password", ip="10.0.0.3")
    login_guard.store.get("10.0.0.3:admin").locked_until = 0
    assert _login(client, ip="10.0.0.3").status_code == 200
    assert login_guard.store.get("10.0.0.3:admin") is None


def test_short_password_fails_validation(client):
    response = _login(client, password="123")
    assert response.status_code == 422


def test_admin_routes_require_token(client):
    assert client.get("/api/admin/dashboard").status_code == 401
    bad = client.get("/api/admin/dashboard", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401
