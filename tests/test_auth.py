"""Accounts, sessions and the auth gate."""

from conftest import PASSWORD, login, register


class TestRegisterAndLogin:
    def test_register_returns_public_user(self, client):
        data = register(client, "Carol@Example.com", name="Carol")

        assert data["email"] == "carol@example.com"
        assert data["role"] == "USER"
        assert data["status"] == "ACTIVE"
        assert "createdAt" in data
        assert "passwordHash" not in data and "password_hash" not in data

    def test_duplicate_email_rejected(self, client):
        register(client, "carol@example.com")
        response = client.post(
            "/api/auth/register", json={"email": "carol@example.com", "password": PASSWORD}
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "该邮箱已被注册"}

    def test_validation_error_has_field_details(self, client):
        response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "123"})

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"] == "数据验证失败"
        fields = {d["field"] for d in body["details"]}
        assert {"email", "password"} <= fields

    def test_wrong_password(self, client):
        register(client, "carol@example.com")
        response = client.post(
            "/api/auth/login", json={"email": "carol@example.com", "password": "wrong-pass"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "邮箱或密码错误"

    def test_me_with_bearer(self, client, auth_headers):
        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "alice@example.com"

    def test_me_with_session_cookie(self, client):
        register(client, "carol@example.com")
        response = client.post(
            "/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD}
        )
        assert "glowfit_session" in response.cookies

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["data"]["email"] == "carol@example.com"

        client.post("/api/auth/logout")
        client.cookies.clear()
        assert client.get("/api/auth/me").status_code == 401

    def test_unauthenticated_request(self, client):
        response = client.get("/api/glow-areas")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "未授权访问"}

    def test_garbage_token(self, client):
        response = client.get("/api/glow-areas", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401


class TestPasswords:
    def test_change_password(self, client, auth_headers):
        response = client.put(
            "/api/user/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "N3w!Passw0rd"},
            headers=auth_headers,
        )
        assert response.status_code == 200

        assert login(client, "alice@example.com", "N3w!Passw0rd")

    def test_weak_new_password(self, client, auth_headers):
        response = client.put(
            "/api/user/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "alllowercase1!"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "newPassword"

    def test_wrong_current_password(self, client, auth_headers):
        response = client.put(
            "/api/user/change-password",
            json={"currentPassword": "not-it", "newPassword": "N3w!Passw0rd"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "当前密码不正确"

    def test_forgot_password_does_not_leak(self, client):
        register(client, "carol@example.com")
        known = client.post("/api/auth/forgot-password", json={"email": "carol@example.com"})
        unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()


class TestAdmin:
    def test_create_admin_only_once(self, client, admin_headers):
        response = client.post("/api/admin/create-admin")
        assert response.status_code == 400

    def test_user_cannot_reach_admin_routes(self, client, auth_headers):
        response = client.get("/api/admin/users", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_list_users(self, client, admin_headers, auth_headers):
        response = client.get("/api/admin/users", headers=admin_headers)

        body = response.json()["data"]
        assert response.status_code == 200
        assert body["pagination"]["total"] == 2
        assert {"glowPlanCount", "fitnessItemCount"} <= set(body["items"][0])

    def test_suspended_user_is_locked_out(self, client, admin_headers, auth_headers):
        me = client.get("/api/auth/me", headers=auth_headers).json()["data"]

        response = client.put(
            f"/api/admin/users/{me['id']}/status",
            json={"status": "SUSPENDED"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "SUSPENDED"

        assert client.get("/api/auth/me", headers=auth_headers).status_code == 403
        relogin = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD}
        )
        assert relogin.status_code == 403
