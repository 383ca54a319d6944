"""API-level tests for the /api/users endpoints."""

import pytest

from strategic_planning.auth.passwords import verify_password
from strategic_planning.db.models import UserModel


def make_valid_user_payload(**overrides) -> dict:
    defaults = {
        "email": "New.Person@Example.com",
        "password": "welcome1",
        "first_name": "New",
        "last_name": "Person",
        "department": "Planning",
    }
    defaults.update(overrides)
    return defaults


class TestCreateUser:
    def test_admin_creates_department_user(self, client, admin, auth_headers):
        response = client.post("/api/users", json=make_valid_user_payload(), headers=auth_headers(admin))
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "new.person@example.com"
        assert data["role"] == "department"
        assert data["is_active"] is True
        assert "password_hash" not in data

    def test_duplicate_email_conflicts(self, client, admin, dept_user, auth_headers):
        response = client.post(
            "/api/users",
            json=make_valid_user_payload(email=dept_user.email.upper()),
            headers=auth_headers(admin),
        )
        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT"

    def test_short_password(self, client, admin, auth_headers):
        response = client.post(
            "/api/users", json=make_valid_user_payload(password="123"), headers=auth_headers(admin)
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("overrides", [{"email": "not-an-email"}, {"role": "root"}, {"first_name": ""}])
    def test_invalid_payload(self, client, admin, auth_headers, overrides):
        response = client.post(
            "/api/users", json=make_valid_user_payload(**overrides), headers=auth_headers(admin)
        )
        assert response.status_code == 400

    def test_department_user_cannot_create(self, client, dept_user, auth_headers):
        response = client.post("/api/users", json=make_valid_user_payload(), headers=auth_headers(dept_user))
        assert response.status_code == 403


class TestReadUsers:
    def test_list_is_admin_only(self, client, admin, dept_user, auth_headers):
        assert client.get("/api/users", headers=auth_headers(dept_user)).status_code == 403
        body = client.get("/api/users", headers=auth_headers(admin)).json()
        assert body["pagination"]["total"] == 2
        assert body["pagination"]["limit"] == 10

    def test_list_filters(self, client, admin, dept_user, make_user, auth_headers):
        make_user("department", email="gone@example.com", is_active=False)
        headers = auth_headers(admin)

        body = client.get("/api/users", params={"is_active": "false"}, headers=headers).json()
        assert [u["email"] for u in body["data"]] == ["gone@example.com"]

        body = client.get("/api/users", params={"role": "admin"}, headers=headers).json()
        assert [u["email"] for u in body["data"]] == [admin.email]

    def test_user_reads_self_only(self, client, dept_user, other_user, auth_headers):
        headers = auth_headers(dept_user)
        assert client.get(f"/api/users/{dept_user.id}", headers=headers).status_code == 200
        response = client.get(f"/api/users/{other_user.id}", headers=headers)
        assert response.status_code == 403
        assert response.json()["reason"] == "not owner"

    def test_non_admin_lookup_of_missing_user_is_forbidden(self, client, dept_user, auth_headers):
        assert client.get("/api/users/missing", headers=auth_headers(dept_user)).status_code == 403

    def test_admin_missing_user(self, client, admin, auth_headers):
        assert client.get("/api/users/missing", headers=auth_headers(admin)).status_code == 404

    def test_stats(self, client, admin, dept_user, other_user, make_user, auth_headers):
        make_user("department", email="off@example.com", department="Finance", is_active=False)
        data = client.get("/api/users/stats", headers=auth_headers(admin)).json()["data"]
        assert data["total"] == 4
        assert data["active"] == 3
        assert data["inactive"] == 1
        assert data["admin"] == 1
        assert data["department"] == 3
        assert data["by_department"][0] == {"department": "Finance", "count": 2}
        assert len(data["recent_users"]) == 4


class TestUpdateUser:
    def test_self_update(self, client, dept_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}", json={"position": "Analyst"}, headers=auth_headers(dept_user)
        )
        assert response.status_code == 200
        assert response.json()["data"]["position"] == "Analyst"

    def test_self_promotion_is_forbidden(self, client, dept_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}", json={"role": "admin"}, headers=auth_headers(dept_user)
        )
        assert response.status_code == 403

    def test_unchanged_role_is_allowed(self, client, dept_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}",
            json={"role": "department", "first_name": "Renamed"},
            headers=auth_headers(dept_user),
        )
        assert response.status_code == 200

    def test_admin_changes_role(self, client, admin, dept_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}", json={"role": "admin"}, headers=auth_headers(admin)
        )
        assert response.json()["data"]["role"] == "admin"

    def test_email_taken(self, client, admin, dept_user, other_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}", json={"email": other_user.email}, headers=auth_headers(admin)
        )
        assert response.status_code == 409

    def test_cannot_update_others(self, client, dept_user, other_user, auth_headers):
        response = client.put(
            f"/api/users/{other_user.id}", json={"position": "X"}, headers=auth_headers(dept_user)
        )
        assert response.status_code == 403


class TestAccountLifecycle:
    def test_admin_cannot_delete_self(self, client, db, admin, auth_headers):
        response = client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))
        assert response.status_code == 403
        assert response.json()["reason"] == "self-protection"
        db.expire_all()
        assert db.get(UserModel, admin.id).is_active is True

    def test_admin_cannot_deactivate_self(self, client, admin, auth_headers):
        response = client.put(f"/api/users/{admin.id}/deactivate", headers=auth_headers(admin))
        assert response.status_code == 403

    def test_delete_is_soft(self, client, db, admin, dept_user, auth_headers):
        response = client.delete(f"/api/users/{dept_user.id}", headers=auth_headers(admin))
        assert response.status_code == 200
        db.expire_all()
        assert db.get(UserModel, dept_user.id).is_active is False

    def test_deactivated_token_stops_working(self, client, admin, dept_user, auth_headers):
        headers = auth_headers(dept_user)
        client.put(f"/api/users/{dept_user.id}/deactivate", headers=auth_headers(admin))
        assert client.get("/api/projects", headers=headers).status_code == 401

    def test_reactivate(self, client, admin, make_user, auth_headers):
        user = make_user("department", is_active=False)
        response = client.put(f"/api/users/{user.id}/activate", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is True

    def test_department_user_cannot_activate(self, client, dept_user, other_user, auth_headers):
        response = client.put(f"/api/users/{other_user.id}/activate", headers=auth_headers(dept_user))
        assert response.status_code == 403


class TestChangePassword:
    def test_self_change_requires_current(self, client, db, dept_user, auth_headers):
        url = f"/api/users/{dept_user.id}/change-password"
        headers = auth_headers(dept_user)

        assert client.put(url, json={"new_password": "brandnew1"}, headers=headers).status_code == 400
        assert (
            client.put(
                url, json={"current_password": "wrong", "new_password": "brandnew1"}, headers=headers
            ).status_code
            == 400
        )
        response = client.put(
            url, json={"current_password": "secret123", "new_password": "brandnew1"}, headers=headers
        )
        assert response.status_code == 200

        db.expire_all()
        assert verify_password("brandnew1", db.get(UserModel, dept_user.id).password_hash)

    def test_admin_resets_without_current(self, client, admin, dept_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}/change-password",
            json={"new_password": "reset123"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    def test_new_password_too_short(self, client, admin, dept_user, auth_headers):
        response = client.put(
            f"/api/users/{dept_user.id}/change-password",
            json={"new_password": "123"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400

    def test_cannot_change_others(self, client, dept_user, other_user, auth_headers):
        response = client.put(
            f"/api/users/{other_user.id}/change-password",
            json={"current_password": "secret123", "new_password": "brandnew1"},
            headers=auth_headers(dept_user),
        )
        assert response.status_code == 403
