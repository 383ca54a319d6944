"""API-level tests for the /api/auth endpoints."""

from datetime import timedelta

from strategic_planning.auth.credentials import CredentialService


class TestLogin:
    def test_login_returns_token_and_permissions(self, client, dept_user):
        response = client.post(
            "/api/auth/login", json={"email": "DEPT@example.com", "password": "secret123"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == dept_user.id
        assert data["permissions"]["users"] == []
        assert data["permissions"]["projects"] == ["read", "create", "update", "delete"]

        claims = CredentialService.from_settings().verify(data["token"])
        assert claims["sub"] == dept_user.id
        assert claims["role"] == "department"

    def test_wrong_password(self, client, dept_user):
        response = client.post(
            "/api/auth/login", json={"email": dept_user.email, "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_unknown_email(self, client):
        response = client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
        )
        assert response.status_code == 401

    def test_inactive_account(self, client, make_user):
        user = make_user("department", is_active=False)
        response = client.post(
            "/api/auth/login", json={"email": user.email, "password": "secret123"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated"

    def test_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"email": "a@b.c"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"


class TestSession:
    def test_profile(self, client, admin, auth_headers):
        data = client.get("/api/auth/profile", headers=auth_headers(admin)).json()["data"]
        assert data["user"]["email"] == admin.email
        assert data["permissions"]["users"] == ["read", "create", "update", "delete"]

    def test_verify(self, client, dept_user, auth_headers):
        data = client.get("/api/auth/verify", headers=auth_headers(dept_user)).json()["data"]
        assert data["valid"] is True

    def test_logout(self, client, dept_user, auth_headers):
        assert client.post("/api/auth/logout", headers=auth_headers(dept_user)).status_code == 200

    def test_no_token(self, client):
        response = client.get("/api/auth/profile")
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    def test_expired_token(self, client, dept_user):
        token = CredentialService.from_settings().sign(
            {"sub": dept_user.id}, expires_delta=timedelta(minutes=-1)
        )
        response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "TOKEN_EXPIRED"

    def test_malformed_token(self, client):
        response = client.get("/api/auth/verify", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["error"] == "TOKEN_MALFORMED"

    def test_token_for_unknown_user(self, client):
        token = CredentialService.from_settings().sign({"sub": "ghost"})
        response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
