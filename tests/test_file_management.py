"""Admin maintenance of uploaded files."""

import uuid
from datetime import datetime

import pytest

from glowfit.models import UserVideo


@pytest.fixture
def orphan_file(storage):
    path = storage.root / "videos" / "2024" / "01" / str(uuid.uuid4()) / "lost.mp4"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"x" * 2048)
    return path


def _age(db_session, video_id, when=datetime(2020, 1, 1)):
    db_session.query(UserVideo).filter(UserVideo.id == uuid.UUID(video_id)).update(
        {"created_at": when}, synchronize_session=False
    )
    db_session.commit()


def test_report(client, admin_headers, upload_video, orphan_file):
    upload_video(content=b"y" * 1024)

    response = client.get("/api/admin/files", headers=admin_headers)

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["uploadStats"]["totalFiles"] == 2
    assert data["uploadStats"]["totalSize"] == 3072
    assert data["uploadStats"]["totalSizeFormatted"] == "3KB"
    assert data["orphanFiles"] == 1
    assert data["expiredFiles"] == 0
    assert data["totalUsers"] == 2
    assert data["totalVideos"] == 1
    assert data["averageFilesPerUser"] == 0.5


def test_cleanup_orphans(client, admin_headers, upload_video, storage, orphan_file):
    video = upload_video().json()["data"]
    url = "/api/admin/files/cleanup-orphans"

    preview = client.post(url, json={"dryRun": True}, headers=admin_headers).json()["data"]
    assert preview["deletedFiles"] == 1
    assert preview["dryRun"] is True
    assert orphan_file.exists()

    response = client.post(url, headers=admin_headers)
    data = response.json()["data"]
    assert response.status_code == 200
    assert (data["deletedFiles"], data["freedSpace"], data["freedSpaceFormatted"]) == (1, 2048, "2KB")
    assert not orphan_file.exists()
    assert not orphan_file.parent.exists()
    assert storage.exists(video["url"])


def test_cleanup_expired_keeps_videos_in_use(
    client, admin_headers, db_session, upload_video, make_item, storage
):
    unused = upload_video("old.mp4").json()["data"]
    in_use = upload_video("used.mp4").json()["data"]
    recent = upload_video("new.mp4").json()["data"]
    make_item(videoIds=[in_use["id"]])
    _age(db_session, unused["id"])
    _age(db_session, in_use["id"])

    response = client.post(
        "/api/admin/files/cleanup-expired", json={"maxAge": 30}, headers=admin_headers
    )

    assert response.json()["data"]["deletedFiles"] == 1
    remaining = {str(v.id) for v in db_session.query(UserVideo)}
    assert remaining == {in_use["id"], recent["id"]}
    assert not storage.exists(unused["url"])
    assert storage.exists(in_use["url"])


def test_cleanup_expired_dry_run(client, admin_headers, db_session, upload_video, storage):
    video = upload_video().json()["data"]
    _age(db_session, video["id"])

    data = client.post(
        "/api/admin/files/cleanup-expired", json={"dryRun": True}, headers=admin_headers
    ).json()["data"]

    assert data["deletedFiles"] == 1
    assert db_session.query(UserVideo).count() == 1
    assert storage.exists(video["url"])


def test_max_age_bounds(client, admin_headers):
    response = client.post(
        "/api/admin/files/cleanup-expired", json={"maxAge": 0}, headers=admin_headers
    )
    assert response.status_code == 400


@pytest.mark.parametrize(
    "method, url",
    [
        ("GET", "/api/admin/files"),
        ("POST", "/api/admin/files/cleanup-orphans"),
        ("POST", "/api/admin/files/cleanup-expired"),
    ],
)
def test_admin_only(client, auth_headers, method, url):
    assert client.request(method, url, headers=auth_headers).status_code == 403
