"""API-level tests for the /api/strategic-issues endpoints."""

import pytest


def make_valid_issue_payload(**overrides) -> dict:
    defaults = {
        "title": "Sustainable human resource development",
        "description": "Grow staff capability",
        "start_year": 2567,
        "end_year": 2571,
    }
    defaults.update(overrides)
    return defaults


class TestCreateStrategicIssue:
    def test_admin_creates(self, client, admin, auth_headers):
        response = client.post(
            "/api/strategic-issues", json=make_valid_issue_payload(), headers=auth_headers(admin)
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "active"
        assert data["order"] == 1
        assert data["created_by"] == admin.id
        assert data["creator"]["first_name"] == admin.first_name

    def test_order_appends_within_period(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        client.post("/api/strategic-issues", json=make_valid_issue_payload(), headers=headers)
        second = client.post(
            "/api/strategic-issues", json=make_valid_issue_payload(title="Second issue"), headers=headers
        )
        other_period = client.post(
            "/api/strategic-issues",
            json=make_valid_issue_payload(title="Other period", start_year=2570, end_year=2573),
            headers=headers,
        )
        assert second.json()["data"]["order"] == 2
        assert other_period.json()["data"]["order"] == 1

    def test_department_user_cannot_create(self, client, dept_user, auth_headers):
        response = client.post(
            "/api/strategic-issues", json=make_valid_issue_payload(), headers=auth_headers(dept_user)
        )
        assert response.status_code == 403
        assert response.json()["reason"] == "forbidden"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "ab"},
            {"start_year": 2024},
            {"end_year": 2600},
            {"start_year": 2570, "end_year": 2567},
            {"order": 0},
            {"status": "archived"},
        ],
    )
    def test_invalid_payload(self, client, admin, auth_headers, overrides):
        response = client.post(
            "/api/strategic-issues", json=make_valid_issue_payload(**overrides), headers=auth_headers(admin)
        )
        assert response.status_code == 400


class TestReadStrategicIssues:
    def test_department_user_lists_all(self, client, admin, dept_user, make_issue, auth_headers):
        make_issue(admin.id, title="First")
        make_issue(admin.id, title="Second")
        body = client.get("/api/strategic-issues", headers=auth_headers(dept_user)).json()
        assert body["pagination"]["total"] == 2
        assert body["pagination"]["pages"] == 1

    def test_year_and_status_filters(self, client, admin, make_issue, auth_headers):
        make_issue(admin.id, title="Old", start_year=2555, end_year=2560, status="completed")
        make_issue(admin.id, title="Current", start_year=2566, end_year=2570)
        headers = auth_headers(admin)

        body = client.get("/api/strategic-issues", params={"year": "2568"}, headers=headers).json()
        assert [i["title"] for i in body["data"]] == ["Current"]

        body = client.get("/api/strategic-issues", params={"status": "completed"}, headers=headers).json()
        assert [i["title"] for i in body["data"]] == ["Old"]

    def test_oversized_year_is_ignored(self, client, admin, make_issue, auth_headers):
        make_issue(admin.id)
        response = client.get(
            "/api/strategic-issues",
            params={"year": "99999999999999999999", "start_year": "99999999999999999999"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1

    def test_get_and_missing(self, client, admin, dept_user, make_issue, auth_headers):
        issue = make_issue(admin.id)
        headers = auth_headers(dept_user)
        assert client.get(f"/api/strategic-issues/{issue.id}", headers=headers).json()["data"]["id"] == issue.id
        assert client.get("/api/strategic-issues/unknown", headers=headers).status_code == 404

    def test_stats(self, client, admin, make_issue, auth_headers):
        make_issue(admin.id, start_year=2560, end_year=2565, status="completed")
        make_issue(admin.id, start_year=2566, end_year=2573)
        data = client.get("/api/strategic-issues/stats", headers=auth_headers(admin)).json()["data"]
        assert data == {
            "total": 2,
            "active": 1,
            "completed": 1,
            "inactive": 0,
            "earliest_year": 2560,
            "latest_year": 2573,
        }


class TestUpdateDeleteStrategicIssue:
    def test_update(self, client, admin, make_issue, auth_headers):
        issue = make_issue(admin.id, status="completed")
        response = client.put(
            f"/api/strategic-issues/{issue.id}",
            json={"status": "active", "title": "Renamed issue"},
            headers=auth_headers(admin),
        )
        data = response.json()["data"]
        assert data["status"] == "active"
        assert data["title"] == "Renamed issue"

    def test_update_checks_merged_period(self, client, admin, make_issue, auth_headers):
        issue = make_issue(admin.id, start_year=2567, end_year=2571)
        response = client.put(
            f"/api/strategic-issues/{issue.id}", json={"end_year": 2566}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

    def test_null_title_rejected(self, client, admin, make_issue, auth_headers):
        issue = make_issue(admin.id)
        response = client.put(
            f"/api/strategic-issues/{issue.id}", json={"title": None}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

    def test_department_user_cannot_update(self, client, admin, dept_user, make_issue, auth_headers):
        issue = make_issue(admin.id)
        response = client.put(
            f"/api/strategic-issues/{issue.id}", json={"title": "Nope nope"}, headers=auth_headers(dept_user)
        )
        assert response.status_code == 403

    def test_delete_removes_child_strategies(
        self, client, admin, make_issue, make_strategy, make_project, auth_headers
    ):
        issue = make_issue(admin.id)
        strategy = make_strategy(admin.id, issue.id)
        project = make_project(admin.id, strategic_issues=[issue.id], strategies=[strategy.id])
        issue_id, strategy_id, project_id = issue.id, strategy.id, project.id
        headers = auth_headers(admin)

        assert client.delete(f"/api/strategic-issues/{issue_id}", headers=headers).status_code == 200
        assert client.get(f"/api/strategic-issues/{issue_id}", headers=headers).status_code == 404
        assert client.get(f"/api/strategies/{strategy_id}", headers=headers).status_code == 404

        data = client.get(f"/api/projects/{project_id}", headers=headers).json()["data"]
        assert data["strategic_issues"] == [issue_id]
        assert data["strategies"] == [strategy_id]
        assert data["strategic_issues_details"] == []
        assert data["strategies_details"] == []
