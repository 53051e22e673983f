"""HTTP-level tests for the auth API."""
from conftest import MINUTE_MS, START_MS, auth_header, signup


def test_ping(client):
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_signup_returns_unverified_account(client):
    body = signup(client, email="New@Example.com")
    account = body["account"]
    assert body["token_type"] == "bearer"
    assert account["email"] == "new@example.com"
    assert account["name"] == "Ada"
    assert account["otp_enabled"] is True
    assert account["verified_at"] is None
    assert "otp_secret" not in account
    assert "password_hash" not in account


def test_signup_duplicate_email_has_reason_code(client):
    signup(client)
    resp = client.post("/api/auth/signup", json={"email": "A@B.com", "password": "longenough1"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "credential_rejected"
    assert resp.json()["reason"] == "duplicate_email"


def test_signup_validation(client):
    resp = client.post("/api/auth/signup", json={"email": "a@b.com", "password": "short"})
    assert resp.status_code == 400
    assert resp.json()["reason"] == "weak_password"

    resp = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "longenough1"})
    assert resp.status_code == 400
    assert resp.json()["reason"] == "invalid_email"


def test_signin_with_wrong_password(client):
    signup(client)
    resp = client.post("/api/auth/token", data={"username": "a@b.com", "password": "wrong-password"})
    assert resp.status_code == 400
    assert resp.json()["reason"] == "invalid_credentials"


def test_signin_is_case_insensitive(client, clock):
    signup(client)
    clock.advance(minutes=1)
    resp = client.post("/api/auth/token", data={"username": " A@B.COM", "password": "longenough1"})
    assert resp.status_code == 200
    assert resp.json()["account"]["last_login"] == START_MS + MINUTE_MS


def test_protected_routes_need_a_token(client):
    for method, path in [
        ("get", "/api/auth/me"),
        ("post", "/api/auth/otp/issue"),
        ("patch", "/api/auth/account"),
    ]:
        resp = getattr(client, method)(path)
        assert resp.status_code == 401, path
        assert resp.json()["error"] == "unauthenticated"

    resp = client.get("/api/auth/me", headers=auth_header("garbage"))
    assert resp.status_code == 401


def test_issue_and_verify_flow(client, services, mailer, clock):
    token = signup(client)["access_token"]
    account_id = client.get("/api/auth/me", headers=auth_header(token)).json()["id"]

    resp = client.post("/api/auth/otp/issue", headers=auth_header(token))
    assert resp.status_code == 202
    assert resp.json()["sent"] is False
    assert resp.json()["expires_in_minutes"] == 15

    stored = services.store.get(account_id)
    assert mailer.sent == [("a@b.com", stored.otp_secret)]
    assert stored.otp_expires_at == START_MS + 15 * MINUTE_MS

    clock.advance(minutes=3)
    resp = client.post("/api/auth/otp/verify", json={"code": stored.otp_secret}, headers=auth_header(token))
    assert resp.status_code == 200
    assert resp.json()["verified_at"] == START_MS + 3 * MINUTE_MS

    stored = services.store.get(account_id)
    assert stored.otp_secret is None and stored.otp_expires_at is None


def test_verify_wrong_code_keeps_challenge(client, services):
    token = signup(client)["access_token"]
    account_id = client.get("/api/auth/me", headers=auth_header(token)).json()["id"]
    services.store.patch(account_id, {"otp_secret": "123456", "otp_expires_at": START_MS + MINUTE_MS})

    resp = client.post("/api/auth/otp/verify", json={"code": "000000"}, headers=auth_header(token))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_or_expired_code"
    stored = services.store.get(account_id)
    assert stored.otp_secret == "123456"
    assert stored.verified_at is None


def test_verify_rejects_malformed_code(client):
    token = signup(client)["access_token"]
    for code in ["12345", "1234567", "12a456"]:
        resp = client.post("/api/auth/otp/verify", json={"code": code}, headers=auth_header(token))
        assert resp.status_code == 422, code


def test_signout_revokes_token(client):
    token = signup(client)["access_token"]
    resp = client.post("/api/auth/signout", headers=auth_header(token))
    assert resp.json() == {"success": True, "revoked": True}

    assert client.get("/api/auth/me", headers=auth_header(token)).status_code == 401
    # signing out twice is harmless
    resp = client.post("/api/auth/signout", headers=auth_header(token))
    assert resp.json()["revoked"] is False


def test_token_expires_with_session(client, clock):
    token = signup(client)["access_token"]
    clock.advance(minutes=61)
    assert client.get("/api/auth/me", headers=auth_header(token)).status_code == 401


def test_update_account(client):
    token = signup(client)["access_token"]
    resp = client.patch("/api/auth/account", json={"otp_enabled": False}, headers=auth_header(token))
    assert resp.status_code == 200
    assert resp.json()["otp_enabled"] is False
    assert resp.json()["name"] == "Ada"

    resp = client.patch("/api/auth/account", json={"name": "Grace"}, headers=auth_header(token))
    assert resp.json()["name"] == "Grace"
    assert resp.json()["otp_enabled"] is False


def test_deleted_account_is_not_found(client, services):
    token = signup(client)["access_token"]
    account_id = client.get("/api/auth/me", headers=auth_header(token)).json()["id"]
    with services.store._file.lock:
        del services.store._file.data[account_id]

    resp = client.post("/api/auth/otp/issue", headers=auth_header(token))
    assert resp.status_code == 404
    assert resp.json()["error"] == "account_not_found"


def test_email_status(client):
    token = signup(client)["access_token"]
    resp = client.get("/api/auth/email/status", headers=auth_header(token))
    assert resp.json() == {"enabled": False, "connection": "SMTP not fully configured"}
