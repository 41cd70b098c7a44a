"""
API endpoint tests.
"""


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_returns_ok(self, client):
        """Health endpoint should return ok status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_request_id_header(self, client):
        response = client.get("/health")
        assert response.headers.get("X-Request-Id")


class TestPreviewEndpoint:
    """Tests for POST /pages/preview."""

    def test_preview_writes_nothing(self, client, project):
        response = client.post("/pages/preview", json={"name": "user-profile", "type": "dashboard"})
        assert response.status_code == 200
        data = response.json()
        assert data["dry_run"] is True
        assert data["name"] == "user-profile"
        assert "src/client/user-profile/UserProfile.tsx" in [f["path"] for f in data["files"]]
        assert all(f["content"] for f in data["files"])
        assert [p["path"] for p in data["patches"]] == [
            "vite.config.ts", "src/server/index.ts", "shared/types/schemas.ts",
        ]
        assert "--- a/vite.config.ts" in data["unified_diff"]
        assert not (project / "src" / "client" / "user-profile").exists()

    def test_preview_rejects_parent_paths(self, client):
        response = client.post("/pages/preview", json={"name": "about", "routes": "../x.ts"})
        assert response.status_code == 422


class TestCreateEndpoint:
    """Tests for POST /pages."""

    def test_create_static_page(self, client, project):
        response = client.post("/pages", json={"name": "about"})
        assert response.status_code == 201
        data = response.json()
        assert data["dry_run"] is False
        assert data["type"] == "static"
        assert data["files"][0]["content"] is None
        assert data["patches"][0]["status"] == "patched"
        assert (project / "src" / "client" / "about" / "index.html").exists()

    def test_invalid_name_returns_422(self, client):
        response = client.post("/pages", json={"name": "class"})
        assert response.status_code == 422
        assert "reserved" in response.json()["detail"]

    def test_collision_returns_409(self, client, project):
        (project / "src" / "client" / "about").mkdir()
        response = client.post("/pages", json={"name": "about"})
        assert response.status_code == 409

    def test_missing_collaborator_reported(self, client, project):
        (project / "vite.config.ts").unlink()
        response = client.post("/pages", json={"name": "about"})
        assert response.status_code == 201
        patch = response.json()["patches"][0]
        assert patch["status"] == "skipped"
        assert patch["warnings"] == ["vite.config.ts not found"]
        assert response.json()["manual_steps"]
