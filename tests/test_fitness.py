"""Fitness items, their videos and workout history."""

from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError

from glowfit.core.config import settings
from glowfit.crud.fitness import crud_user_video
from glowfit.crud.notification import crud_notification
from glowfit.models import FitnessHistory, Notification, UserVideo


class TestItems:
    def test_create_with_planned_values(self, make_item):
        item = make_item("俯卧撑", plannedSets=3, plannedReps=15, plannedDuration=10)

        assert item["status"] == "ACTIVE"
        assert (item["plannedSets"], item["plannedReps"], item["plannedDuration"]) == (3, 15, 10)
        assert item["videos"] == []

    @pytest.mark.parametrize(
        "field,value",
        [("plannedSets", 0), ("plannedSets", 101), ("plannedReps", 1001), ("plannedDuration", 481)],
    )
    def test_planned_value_bounds(self, client, auth_headers, field, value):
        response = client.post(
            "/api/fitness-items", json={"name": "深蹲", field: value}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == field

    def test_video_links(self, client, auth_headers, make_item, upload_video):
        video = upload_video().json()["data"]
        item = make_item(videoIds=[video["id"]])
        assert [v["id"] for v in item["videos"]] == [video["id"]]

        updated = client.put(
            f"/api/fitness-items/{item['id']}", json={"videoIds": None}, headers=auth_headers
        ).json()["data"]
        assert updated["videos"] == []
        assert updated["videoCount"] == 0

    def test_update_without_video_ids_keeps_links(self, client, auth_headers, make_item, upload_video):
        video = upload_video().json()["data"]
        item = make_item(videoIds=[video["id"]])

        updated = client.put(
            f"/api/fitness-items/{item['id']}", json={"name": "箭步蹲"}, headers=auth_headers
        ).json()["data"]
        assert updated["name"] == "箭步蹲"
        assert len(updated["videos"]) == 1

    def test_foreign_video_rejected(self, client, auth_headers, other_headers, upload_video):
        foreign = upload_video(headers=other_headers).json()["data"]
        response = client.post(
            "/api/fitness-items", json={"name": "深蹲", "videoIds": [foreign["id"]]}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_non_owner_gets_404(self, client, other_headers, make_item):
        item = make_item()
        url = f"/api/fitness-items/{item['id']}"

        assert client.get(url, headers=other_headers).status_code == 404
        assert client.put(url, json={"name": "x"}, headers=other_headers).status_code == 404
        assert client.delete(url, headers=other_headers).status_code == 404


class TestCompletion:
    def test_complete_active_item(self, client, auth_headers, db_session, make_item):
        item = make_item()
        response = client.post(
            f"/api/fitness-items/{item['id']}/complete",
            json={"duration": 30, "sets": 4, "reps": 12},
            headers=auth_headers,
        )

        data = response.json()["data"]
        assert response.status_code == 201
        assert data["itemName"] == "深蹲"
        assert (data["sets"], data["reps"]) == (4, 12)
        assert db_session.query(FitnessHistory).count() == 1
        assert db_session.query(Notification).count() == 1

    def test_paused_item_rejected(self, client, auth_headers, db_session, make_item):
        item = make_item()
        client.put(f"/api/fitness-items/{item['id']}", json={"status": "PAUSED"}, headers=auth_headers)

        response = client.post(f"/api/fitness-items/{item['id']}/complete", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "只能完成活跃状态的运动条目"
        assert db_session.query(FitnessHistory).count() == 0
        assert db_session.query(Notification).count() == 0

    def test_failure_between_writes_leaves_nothing(
        self, client, auth_headers, db_session, make_item, monkeypatch
    ):
        item = make_item()

        def fail(*args, **kwargs):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(crud_notification, "create", fail)
        response = client.post(
            f"/api/fitness-items/{item['id']}/complete", json={"sets": 3}, headers=auth_headers
        )

        assert response.status_code == 500
        assert db_session.query(FitnessHistory).count() == 0
        assert db_session.query(Notification).count() == 0

        detail = client.get(f"/api/fitness-items/{item['id']}", headers=auth_headers).json()["data"]
        assert detail["lastCompletedAt"] is None
        assert detail["historyCount"] == 0

    def test_history_stats(self, client, auth_headers, make_item):
        item = make_item()
        url = f"/api/fitness-items/{item['id']}"
        client.post(f"{url}/complete", json={"duration": 20, "sets": 3, "reps": 10}, headers=auth_headers)
        client.post(f"{url}/complete", json={"duration": 25, "sets": 4}, headers=auth_headers)

        body = client.get(f"{url}/history?limit=1", headers=auth_headers).json()["data"]
        assert len(body["items"]) == 1
        assert body["pagination"]["totalPages"] == 2
        assert body["stats"] == {
            "totalSessions": 2,
            "totalDuration": 45,
            "averageDuration": 23,
            "totalSets": 7,
            "totalReps": 10,
        }

    def test_delete_history_row(self, client, auth_headers, make_item):
        item = make_item()
        history = client.post(
            f"/api/fitness-items/{item['id']}/complete", json={}, headers=auth_headers
        ).json()["data"]

        assert client.delete(f"/api/fitness-history/{history['id']}", headers=auth_headers).status_code == 200


class TestVideos:
    def test_upload_stores_file(self, upload_video, storage):
        response = upload_video("My Squat.MP4")

        data = response.json()["data"]
        assert response.status_code == 201
        assert data["originalName"] == "My Squat.MP4"
        assert data["mimeType"] == "video/mp4"
        assert data["size"] == len(b"fake-mp4-bytes")
        assert data["url"].startswith("/uploads/videos/")
        assert data["url"].endswith(".mp4")
        assert storage.exists(data["url"])

    def test_rejects_other_types(self, upload_video):
        response = upload_video("notes.txt", b"hello", "text/plain")
        assert response.status_code == 400

    def test_rejects_empty_file(self, upload_video):
        assert upload_video(content=b"").status_code == 400

    def test_rejected_before_anything_is_stored(self, upload_video, storage, monkeypatch):
        calls = []
        monkeypatch.setattr(storage, "store", lambda *args, **kwargs: calls.append(args))
        monkeypatch.setattr(settings, "MAX_VIDEO_SIZE", 1024)
        body = b"x" * (1024 * 1024)

        wrong_type = upload_video("setup.exe", body, "application/x-msdownload")
        too_big = upload_video("squat.mp4", body, "video/mp4")

        assert wrong_type.status_code == 400
        assert too_big.status_code == 400
        assert too_big.json()["error"] == "视频文件过大，最大支持 1KB"
        assert calls == []

    def test_failed_insert_removes_file(self, upload_video, storage, db_session, monkeypatch):
        def fail(*args, **kwargs):
            raise SQLAlchemyError("insert failed")

        monkeypatch.setattr(crud_user_video, "create", fail)
        response = upload_video()

        assert response.status_code == 500
        assert response.json()["error"] == "文件保存失败，请重试"
        assert db_session.query(UserVideo).count() == 0
        assert [p for p in Path(storage.root).rglob("*") if p.is_file()] == []

    def test_delete_blocked_while_item_uses_it(self, client, auth_headers, make_item, upload_video, storage):
        video = upload_video().json()["data"]
        item = make_item(videoIds=[video["id"]])
        url = f"/api/videos/{video['id']}"

        detail = client.get(url, headers=auth_headers).json()["data"]
        assert detail["itemCount"] == 1
        assert detail["fitnessItems"][0]["id"] == item["id"]

        assert client.delete(url, headers=auth_headers).status_code == 400

        client.delete(f"/api/fitness-items/{item['id']}", headers=auth_headers)
        assert client.delete(url, headers=auth_headers).status_code == 200
        assert not storage.exists(video["url"])

    def test_list_and_ownership(self, client, auth_headers, other_headers, upload_video):
        video = upload_video().json()["data"]
        upload_video("b.webm", content_type="video/webm")

        body = client.get("/api/videos", headers=auth_headers).json()["data"]
        assert body["pagination"]["total"] == 2
        assert client.get("/api/videos", headers=other_headers).json()["data"]["items"] == []
        assert client.get(f"/api/videos/{video['id']}", headers=other_headers).status_code == 404
