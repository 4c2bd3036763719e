"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import glowfit.models  # noqa: F401
from glowfit.core.config import Base, get_db, settings
from glowfit.data.file_storage import LocalFileStorage, get_file_storage
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"


@pytest.fixture
def db_session():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"), "/uploads")


@pytest.fixture
def client(db_session, storage):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, email, password=PASSWORD):
    """Log in and return Bearer headers; drops the session cookie so requests stay explicit."""
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}


def register(client, email, password=PASSWORD, name=None):
    body = {"email": email, "password": password}
    if name:
        body["name"] = name
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def auth_headers(client):
    register(client, "alice@example.com", name="Alice")
    return login(client, "alice@example.com")


@pytest.fixture
def other_headers(client):
    register(client, "bob@example.com", name="Bob")
    return login(client, "bob@example.com")


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/admin/create-admin")
    assert response.status_code == 201, response.text
    return login(client, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)


@pytest.fixture
def make_area(client, auth_headers):
    def _make(name="面部", headers=None):
        response = client.post("/api/glow-areas", json={"name": name}, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def make_device(client, auth_headers):
    def _make(name="射频仪", model=None, headers=None):
        response = client.post(
            "/api/glow-devices", json={"name": name, "model": model}, headers=headers or auth_headers
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def make_plan(client, auth_headers):
    def _make(name="晨间护理", area_ids=None, device_ids=None, headers=None):
        body = {"name": name, "startDate": "2024-01-01T00:00:00"}
        if area_ids is not None:
            body["areaIds"] = area_ids
        if device_ids is not None:
            body["deviceIds"] = device_ids
        response = client.post("/api/glow-plans", json=body, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def make_item(client, auth_headers):
    def _make(name="深蹲", headers=None, **fields):
        response = client.post(
            "/api/fitness-items", json={"name": name, **fields}, headers=headers or auth_headers
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def upload_video(client, auth_headers):
    def _upload(filename="squat.mp4", content=b"fake-mp4-bytes", content_type="video/mp4", headers=None):
        return client.post(
            "/api/upload/video",
            files={"video": (filename, content, content_type)},
            headers=headers or auth_headers,
        )
    return _upload
