"""Tests for account and profile endpoints."""

from writequest.db import progress_repository, users_repository


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_student(self, client):
        """Students get an account and default progress."""
        response = client.post(
            "/api/auth/register",
            json={"username": "maya", "password": "secret123", "displayName": "Maya", "grade": 6},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "maya"
        assert data["role"] == "student"
        assert "password" not in data
        progress = progress_repository.get_progress_by_user_id(data["id"])
        assert progress.unlocked_locations == ["townHall"]

    def test_register_teacher_has_no_progress(self, client):
        """Guardian accounts don't get progress rows."""
        response = client.post(
            "/api/auth/register",
            json={"username": "mrk", "password": "secret123", "displayName": "Mr K", "role": "teacher"},
        )

        assert response.status_code == 201
        assert progress_repository.get_progress_by_user_id(response.json()["id"]) is None

    def test_register_admin_rejected(self, client):
        """Admin accounts can't be self-registered."""
        response = client.post(
            "/api/auth/register",
            json={"username": "root", "password": "secret123", "displayName": "Root", "role": "admin"},
        )

        assert response.status_code == 400

    def test_duplicate_username(self, client, make_user):
        """Usernames are unique."""
        make_user("maya")

        response = client.post(
            "/api/auth/register",
            json={"username": "maya", "password": "secret123", "displayName": "Other"},
        )

        assert response.status_code == 409

    def test_password_longer_than_bcrypt_limit(self, client):
        """Passwords past bcrypt's 72-byte window are rejected."""
        response = client.post(
            "/api/auth/register",
            json={"username": "maya", "password": "x" * 73, "displayName": "Maya"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"

    def test_stored_password_is_bcrypt(self, client):
        """Registered passwords are stored as bcrypt hashes."""
        data = client.post(
            "/api/auth/register",
            json={"username": "maya", "password": "secret123", "displayName": "Maya"},
        ).json()

        stored = users_repository.get_user_by_id(data["id"]).password
        assert stored.startswith("$2b$")
        assert "secret123" not in stored


class TestLogin:
    """Tests for POST /api/auth/login and GET /api/auth/me."""

    def test_login(self, client, make_user):
        """Good credentials return the user."""
        user = make_user("maya")

        response = client.post("/api/auth/login", json={"username": "maya", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["id"] == user.id

    def test_bad_password(self, client, make_user):
        """Bad credentials are rejected."""
        make_user("maya")

        response = client.post("/api/auth/login", json={"username": "maya", "password": "nope"})

        assert response.status_code == 401

    def test_unknown_user(self, client):
        """Unknown usernames are rejected the same way."""
        response = client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_me(self, client, make_user, auth):
        """The identity header resolves to the user."""
        user = make_user("maya")

        response = client.get("/api/auth/me", headers=auth(user))

        assert response.json()["username"] == "maya"


class TestProfile:
    """Tests for PATCH /api/user/profile and /api/user/password."""

    def test_update_profile(self, client, make_user, auth):
        """Only the given fields change."""
        user = make_user("maya", grade=6)

        response = client.patch(
            "/api/user/profile",
            json={"displayName": "Maya R.", "avatarUrl": "https://example.org/a.png"},
            headers=auth(user),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["displayName"] == "Maya R."
        assert data["avatarUrl"] == "https://example.org/a.png"
        assert data["grade"] == 6

    def test_invalid_grade(self, client, make_user, auth):
        """Grades above 12 are rejected."""
        user = make_user("maya")

        response = client.patch("/api/user/profile", json={"grade": 13}, headers=auth(user))

        assert response.status_code == 400

    def test_change_password(self, client, make_user, auth):
        """The new password works after a change."""
        user = make_user("maya")

        response = client.patch(
            "/api/user/password",
            json={"currentPassword": "secret123", "newPassword": "better-secret"},
            headers=auth(user),
        )

        assert response.status_code == 200
        login = client.post("/api/auth/login", json={"username": "maya", "password": "better-secret"})
        assert login.status_code == 200

    def test_wrong_current_password(self, client, make_user, auth):
        """The current password must match."""
        user = make_user("maya")

        response = client.patch(
            "/api/user/password",
            json={"currentPassword": "guess", "newPassword": "better-secret"},
            headers=auth(user),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"
