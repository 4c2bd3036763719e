"""Glow areas and devices: per-user uniqueness, ownership and delete guards."""

import uuid


class TestAreas:
    def test_create_and_list(self, client, auth_headers, make_area):
        make_area("面部")
        make_area("颈部")

        response = client.get("/api/glow-areas", headers=auth_headers)
        areas = response.json()["data"]
        assert response.status_code == 200
        assert {a["name"] for a in areas} == {"面部", "颈部"}
        assert all(a["planCount"] == 0 and a["historyCount"] == 0 for a in areas)

    def test_duplicate_name_for_same_user(self, client, auth_headers, make_area):
        make_area("面部")
        response = client.post("/api/glow-areas", json={"name": "面部"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "该部位名称已存在"

    def test_same_name_for_another_user(self, client, other_headers, make_area):
        make_area("面部")
        response = client.post("/api/glow-areas", json={"name": "面部"}, headers=other_headers)

        assert response.status_code == 201

    def test_name_length_bounds(self, client, auth_headers):
        assert client.post("/api/glow-areas", json={"name": ""}, headers=auth_headers).status_code == 400
        assert client.post("/api/glow-areas", json={"name": "x" * 51}, headers=auth_headers).status_code == 400

    def test_non_owner_gets_404(self, client, other_headers, make_area):
        area = make_area()
        url = f"/api/glow-areas/{area['id']}"

        assert client.get(url, headers=other_headers).status_code == 404
        assert client.put(url, json={"name": "改名"}, headers=other_headers).status_code == 404
        assert client.delete(url, headers=other_headers).status_code == 404

    def test_missing_area_gets_404(self, client, auth_headers):
        response = client.get(f"/api/glow-areas/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    def test_rename_excludes_self_from_uniqueness(self, client, auth_headers, make_area):
        area = make_area("面部")
        make_area("颈部")
        url = f"/api/glow-areas/{area['id']}"

        assert client.put(url, json={"name": "面部"}, headers=auth_headers).status_code == 200
        clash = client.put(url, json={"name": "颈部"}, headers=auth_headers)
        assert clash.status_code == 400
        assert clash.json()["error"] == "该部位名称已存在"

    def test_delete_blocked_while_plan_uses_it(self, client, auth_headers, make_area, make_plan):
        area = make_area()
        plan = make_plan(area_ids=[area["id"]])
        url = f"/api/glow-areas/{area['id']}"

        detail = client.get(url, headers=auth_headers).json()["data"]
        assert detail["planCount"] == 1
        assert detail["plans"][0]["id"] == plan["id"]

        assert client.delete(url, headers=auth_headers).status_code == 400

        client.delete(f"/api/glow-plans/{plan['id']}", headers=auth_headers)
        assert client.delete(url, headers=auth_headers).status_code == 200
        assert client.get(url, headers=auth_headers).status_code == 404


class TestDevices:
    def test_duplicate_name(self, client, auth_headers, make_device):
        make_device("射频仪")
        response = client.post("/api/glow-devices", json={"name": "射频仪"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "该设备名称已存在"

    def test_blank_model_stored_as_null(self, make_device):
        device = make_device("美容仪", model="   ")
        assert device["model"] is None

    def test_update_model_only(self, client, auth_headers, make_device):
        device = make_device("美容仪", model="A1")
        response = client.put(
            f"/api/glow-devices/{device['id']}", json={"model": "B2"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "美容仪"
        assert response.json()["data"]["model"] == "B2"

    def test_delete_blocked_while_plan_uses_it(self, client, auth_headers, make_device, make_plan):
        device = make_device()
        make_plan(device_ids=[device["id"]])

        response = client.delete(f"/api/glow-devices/{device['id']}", headers=auth_headers)
        assert response.status_code == 400

    def test_non_owner_gets_404(self, client, other_headers, make_device):
        device = make_device()
        response = client.get(f"/api/glow-devices/{device['id']}", headers=other_headers)
        assert response.status_code == 404


class TestHistorySnapshot:
    def test_deleting_area_and_device_keeps_recorded_sessions(
        self, client, auth_headers, make_area, make_device, make_plan
    ):
        area = make_area("面部")
        device = make_device("射频仪", model="RF-1")
        plan = make_plan()
        history = client.post(
            f"/api/glow-plans/{plan['id']}/complete",
            json={"duration": 15, "areaIds": [area["id"]], "deviceIds": [device["id"]]},
            headers=auth_headers,
        ).json()["data"]
        assert history["areas"] == [{"id": area["id"], "name": "面部"}]

        area_detail = client.get(f"/api/glow-areas/{area['id']}", headers=auth_headers).json()["data"]
        assert area_detail["historyCount"] == 1

        assert client.delete(f"/api/glow-areas/{area['id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"/api/glow-devices/{device['id']}", headers=auth_headers).status_code == 200

        rows = client.get(f"/api/glow-plans/{plan['id']}/history", headers=auth_headers).json()["data"]["items"]
        assert len(rows) == 1
        assert rows[0]["areas"] == [{"id": None, "name": "面部"}]
        assert rows[0]["devices"] == [{"id": None, "name": "射频仪", "model": "RF-1"}]
