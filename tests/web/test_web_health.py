"""Tests for health endpoint and request validation."""


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_ok(self, client):
        """Health endpoint returns status ok."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_returns_version(self, client):
        """Health endpoint returns version."""
        data = client.get("/health").json()

        assert data["version"] == "0.1.0"

    def test_health_reports_llm(self, client, mock_llm_client):
        """Health endpoint reports whether the model is configured."""
        mock_llm_client.is_configured.return_value = False

        data = client.get("/health").json()

        assert data["llm_configured"] is False
        assert "T" in data["timestamp"]


class TestValidationErrors:
    """Tests for the 400 validation envelope."""

    def test_field_errors(self, client):
        """Invalid bodies return one entry per field."""
        response = client.post("/api/auth/register", json={"username": "ab", "password": "123"})

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Validation failed"
        fields = {error["field"] for error in data["errors"]}
        assert {"username", "password", "displayName"} <= fields

    def test_missing_identity(self, client):
        """Requests without the identity header are rejected."""
        response = client.get("/api/progress")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_unknown_identity(self, client):
        """Unknown user IDs are rejected."""
        response = client.get("/api/progress", headers={"X-User-Id": "999"})

        assert response.status_code == 401


class TestResponseSchemas:
    """Tests for the declared response models."""

    def test_models_in_openapi(self, client):
        """Record payloads are documented as named schemas."""
        schemas = client.get("/openapi.json").json()["components"]["schemas"]

        for name in ("UserResponse", "ProgressResponse", "SubmissionResponse", "ChallengeStatusResponse", "StudentDetailResponse"):
            assert name in schemas

    def test_user_payload_keys(self, client, make_user, auth):
        """User payloads carry exactly the public camelCase fields."""
        user = make_user("maya")

        data = client.get("/api/auth/me", headers=auth(user)).json()

        assert set(data) == {
            "id", "username", "displayName", "email", "age", "grade", "avatarUrl", "role", "createdAt",
        }
