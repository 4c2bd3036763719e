"""In-app notifications."""

import pytest


@pytest.fixture
def notify(client, auth_headers):
    def _notify(title="系统通知", type="SYSTEM", headers=None):
        response = client.post(
            "/api/notifications",
            json={"type": type, "title": title, "content": "内容"},
            headers=headers or auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _notify


def test_list_with_unread_count(client, auth_headers, notify):
    first = notify("一")
    notify("二")
    notify("三", type="ACHIEVEMENT")
    client.patch(f"/api/notifications/{first['id']}", headers=auth_headers)

    body = client.get("/api/notifications?limit=2", headers=auth_headers).json()["data"]
    assert body["unreadCount"] == 2
    assert body["pagination"]["total"] == 3
    assert len(body["items"]) == 2

    unread = client.get("/api/notifications?isRead=false", headers=auth_headers).json()["data"]
    assert {n["title"] for n in unread["items"]} == {"二", "三"}

    achievements = client.get("/api/notifications?type=ACHIEVEMENT", headers=auth_headers).json()["data"]
    assert [n["title"] for n in achievements["items"]] == ["三"]


def test_field_bounds(client, auth_headers):
    response = client.post(
        "/api/notifications",
        json={"type": "SYSTEM", "title": "x" * 101, "content": "内容"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "title"


def test_mark_selected_and_all(client, auth_headers, notify):
    ids = [notify(str(i))["id"] for i in range(3)]

    response = client.patch(
        "/api/notifications", json={"notificationIds": ids[:2]}, headers=auth_headers
    )
    assert response.json()["data"] == {"count": 2}

    response = client.patch("/api/notifications", json={"markAllAsRead": True}, headers=auth_headers)
    assert response.json()["data"] == {"count": 1}

    body = client.get("/api/notifications", headers=auth_headers).json()["data"]
    assert body["unreadCount"] == 0


def test_mark_without_scope(client, auth_headers):
    response = client.patch("/api/notifications", json={}, headers=auth_headers)
    assert response.status_code == 400


def test_bulk_delete(client, auth_headers, notify):
    keep = notify("保留")
    read = notify("已读")
    other = notify("其他")
    client.patch(f"/api/notifications/{read['id']}", headers=auth_headers)

    deleted = client.request("DELETE", "/api/notifications", json={"deleteRead": True}, headers=auth_headers)
    assert deleted.json()["data"] == {"count": 1}

    deleted = client.request("DELETE", "/api/notifications", json={"ids": [other["id"]]}, headers=auth_headers)
    assert deleted.json()["data"] == {"count": 1}

    remaining = client.get("/api/notifications", headers=auth_headers).json()["data"]["items"]
    assert [n["id"] for n in remaining] == [keep["id"]]

    deleted = client.request("DELETE", "/api/notifications", json={"deleteAll": True}, headers=auth_headers)
    assert deleted.json()["data"] == {"count": 1}


def test_bulk_delete_only_touches_own_rows(client, auth_headers, other_headers, notify):
    mine = notify("我的")
    client.request("DELETE", "/api/notifications", json={"deleteAll": True}, headers=other_headers)

    assert client.get(f"/api/notifications/{mine['id']}", headers=auth_headers).status_code == 200


def test_non_owner_gets_404(client, other_headers, notify):
    notification = notify()
    url = f"/api/notifications/{notification['id']}"

    assert client.get(url, headers=other_headers).status_code == 404
    assert client.patch(url, headers=other_headers).status_code == 404
    assert client.delete(url, headers=other_headers).status_code == 404
