from datetime import timedelta

from app.core.auth import issue_token
from app.core.security import create_access_token
from app.models.user import User
from conftest import auth_headers, carts_for


class TestRegister:
    def test_register_returns_token_and_creates_active_cart(self, client):
        resp = client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "Alice@Example.com", "password": "secret123"},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "User created successfully"
        assert body["token"]
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["role"] == "customer"

        carts = carts_for(body["user"]["id"])
        assert [c.status for c in carts] == ["active"]

    def test_duplicate_email(self, client, register):
        register("alice", email="alice@example.com")
        resp = client.post(
            "/api/auth/register",
            json={"username": "alice2", "email": "alice@example.com", "password": "secret123"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Email already registered"}

    def test_duplicate_username(self, client, register):
        register("alice")
        resp = client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "other@example.com", "password": "secret123"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Username already taken"}

    def test_short_password_is_rejected(self, client):
        resp = client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "bob@example.com", "password": "123"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Validation failed"
        assert [d["field"] for d in body["details"]] == ["password"]

    def test_username_charset(self, client):
        resp = client.post(
            "/api/auth/register",
            json={"username": "bob smith", "email": "bob@example.com", "password": "secret123"},
        )
        assert resp.status_code == 400


class TestLogin:
    def test_login_success(self, client, register):
        register("alice", password="secret123")
        resp = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "secret123"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Login successful"
        assert body["user"]["username"] == "alice"

        profile = client.get("/api/auth/profile", headers=auth_headers(body["token"]))
        assert profile.status_code == 200

    def test_wrong_password(self, client, register):
        register("alice", password="secret123")
        resp = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "nope-nope"},
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}

    def test_unknown_email(self, client):
        resp = client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "secret123"},
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}


class TestProfile:
    def test_get_profile(self, client, customer):
        user, headers = customer
        resp = client.get("/api/auth/profile", headers=headers)
        assert resp.status_code == 200
        profile = resp.json()["user"]
        assert profile["id"] == user["id"]
        assert "created_at" in profile and "updated_at" in profile
        assert "password_hash" not in profile

    def test_update_username(self, client, customer):
        _, headers = customer
        resp = client.put("/api/auth/profile", json={"username": "alice_b"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Profile updated successfully"
        assert resp.json()["user"]["username"] == "alice_b"

    def test_update_to_taken_username(self, client, register):
        register("bob")
        _, headers = register("alice")
        resp = client.put("/api/auth/profile", json={"username": "bob"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Username already taken"}


class TestTokenChecks:
    def test_missing_token(self, client):
        resp = client.get("/api/auth/profile")
        assert resp.status_code == 401
        assert resp.json() == {"error": "No token, authorization denied"}

    def test_garbage_token(self, client):
        resp = client.get("/api/auth/profile", headers=auth_headers("not-a-jwt"))
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid token"}

    def test_expired_token(self, client, customer):
        user, _ = customer
        token = create_access_token(
            {"id": user["id"], "username": "alice", "email": "alice@example.com", "role": "customer"},
            expires_delta=timedelta(seconds=-10),
        )
        resp = client.get("/api/auth/profile", headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.json() == {"error": "Token has expired"}

    def test_token_for_missing_user(self, client):
        ghost = User(id=9999, username="ghost", email="ghost@example.com", password_hash="x")
        resp = client.get("/api/auth/profile", headers=auth_headers(issue_token(ghost)))
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid token"}

    def test_role_comes_from_database(self, client, customer):
        user, _ = customer
        token = create_access_token(
            {"id": user["id"], "username": "alice", "email": "alice@example.com", "role": "admin"}
        )
        resp = client.post(
            "/api/products",
            json={"name": "X", "price": 1, "stock_quantity": 1},
            headers=auth_headers(token),
        )
        assert resp.status_code == 403
        assert resp.json() == {"error": "Access denied. Admin only."}
