"""Dashboard counters and exports."""

import json

import pytest


def test_stats(client, auth_headers, make_plan, make_item):
    paused = make_plan("一")
    make_plan("二")
    item = make_item()
    client.put(f"/api/glow-plans/{paused['id']}", json={"status": "PAUSED"}, headers=auth_headers)
    client.post(f"/api/fitness-items/{item['id']}/complete", json={}, headers=auth_headers)
    client.post(
        "/api/fitness-reminders",
        json={"itemId": item["id"], "frequency": "DAILY", "time": "07:00"},
        headers=auth_headers,
    )

    response = client.get("/api/dashboard/stats", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {
        "glowPlans": {"total": 2, "active": 1},
        "fitnessItems": {"total": 1, "active": 1},
        "notifications": {"unread": 1},
        "reminders": {"total": 1, "glow": 0, "fitness": 1},
    }


def test_stats_are_per_user(client, other_headers, make_plan):
    make_plan()
    data = client.get("/api/dashboard/stats", headers=other_headers).json()["data"]
    assert data["glowPlans"] == {"total": 0, "active": 0}


def test_export_json(client, auth_headers, make_area, make_plan):
    area = make_area()
    make_plan(area_ids=[area["id"]])

    body = client.get("/api/dashboard/export?type=glow-plans", headers=auth_headers).json()

    assert body["success"] is True
    assert body["type"] == "glow-plans"
    assert body["total"] == 1
    assert body["data"][0]["areas"] == ["面部"]
    assert "exportedAt" in body


def test_export_personal(client, auth_headers, make_plan):
    plan = make_plan()
    client.post(f"/api/glow-plans/{plan['id']}/complete", json={"duration": 12}, headers=auth_headers)

    data = client.get("/api/dashboard/export", headers=auth_headers).json()["data"]
    assert data[0]["email"] == "alice@example.com"
    assert data[0]["glowSessions"] == 1
    assert data[0]["glowDuration"] == 12


def test_export_csv(client, auth_headers, make_plan):
    make_plan('带"引号"的计划')

    response = client.get("/api/dashboard/export?type=glow-plans&format=csv", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="glow_plans_')
    assert disposition.endswith('.csv"')

    text = response.content.decode("utf-8")
    assert text.startswith("\ufeff")
    header, row = text.lstrip("\ufeff").splitlines()[:2]
    assert header.startswith('"ID","计划名称"')
    assert '"带""引号""的计划"' in row


@pytest.mark.parametrize("export_type", ["glow-history", "fitness-history", "notifications", "fitness-items"])
def test_export_other_types(client, auth_headers, export_type):
    response = client.get(f"/api/dashboard/export?type={export_type}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 0


def test_unknown_export_type(client, auth_headers):
    response = client.get("/api/dashboard/export?type=users", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "不支持的导出类型"


def test_unknown_format(client, auth_headers):
    response = client.get("/api/dashboard/export?format=xml", headers=auth_headers)
    assert response.status_code == 400


class TestAdminExport:
    def test_users(self, client, admin_headers, auth_headers):
        body = client.get("/api/admin/export?type=users", headers=admin_headers).json()

        assert body["total"] == 2
        assert {row["email"] for row in body["data"]} == {"alice@example.com", "admin@glowfit.com"}

    def test_plans_across_users(self, client, admin_headers, other_headers, make_plan):
        make_plan("A")
        make_plan("B", headers=other_headers)

        response = client.get("/api/admin/export?type=glow-plans&format=csv", headers=admin_headers)
        lines = response.content.decode("utf-8").lstrip("\ufeff").splitlines()

        assert lines[0].startswith('"ID","计划名称","用户邮箱","用户姓名"')
        assert len(lines) == 3

    def test_forbidden_for_users(self, client, auth_headers):
        assert client.get("/api/admin/export", headers=auth_headers).status_code == 403
