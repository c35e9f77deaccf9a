"""Integration tests for the HTTP API."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from intake_sheets.api.app import app, get_pipeline
from intake_sheets.pipeline import IntakeImportPipeline, PipelineConfig


@pytest.fixture
def client(tmp_path):
    """Test client backed by a pipeline on a SQLite file."""
    pipeline = IntakeImportPipeline(config=PipelineConfig(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        export_dir=str(tmp_path / "exports"),
    ))
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
    pipeline.close()


class TestIntakeEndpoints:
    """Tests for import and preview."""

    def test_process(self, client, contact_json):
        response = client.post("/api/intake/process", json={"json_content": contact_json})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "sheet_name": "Intake_Contact",
            "row_count": 3,
            "message": "Successfully created Intake_Contact with 3 questions",
        }

    def test_process_force_new_version(self, client, contact_json):
        response = client.post(
            "/api/intake/process",
            json={"json_content": contact_json, "force_new_version": True},
        )
        assert response.json()["sheet_name"] == "Intake_Contact_v2"

    def test_process_failure(self, client):
        response = client.post(
            "/api/intake/process",
            json={"json_content": json.dumps({"conversation_flow": {"sections": []}})},
        )

        assert response.status_code == 200
        assert response.json() == {"success": False, "error": "Missing template_name in JSON"}

    def test_concurrent_imports_get_distinct_versions(self, client, contact_json):
        """Test that simultaneous imports of one template resolve different names."""
        def submit(_):
            return client.post("/api/intake/process", json={"json_content": contact_json}).json()

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(submit, range(4)))

        assert all(r["success"] for r in results)
        assert sorted(r["sheet_name"] for r in results) == [
            "Intake_Contact", "Intake_Contact_v2", "Intake_Contact_v3", "Intake_Contact_v4",
        ]
        assert len(client.get("/api/schemas").json()["schemas"]) == 4

    def test_missing_body_field(self, client):
        response = client.post("/api/intake/process", json={})
        assert response.status_code == 422

    def test_preview(self, client, contact_json):
        response = client.post("/api/intake/preview", json={"json_content": contact_json})

        body = response.json()
        assert body["success"] is True
        assert body["question_count"] == 3
        assert client.get("/api/schemas").json() == {"schemas": []}


class TestSchemaEndpoints:
    """Tests for listing, viewing, unlocking and exporting schema sheets."""

    @pytest.fixture
    def imported(self, client, contact_json):
        client.post("/api/intake/process", json={"json_content": contact_json})
        return "Intake_Contact"

    def test_list(self, client, imported):
        assert client.get("/api/schemas").json() == {"schemas": [imported]}

    def test_get_schema(self, client, imported):
        body = client.get(f"/api/schemas/{imported}").json()

        assert body["sheet_name"] == imported
        assert body["locked"] is True
        assert body["values"][2][0] == "section_id"
        assert len(body["values"]) == 6

    def test_unknown_schema(self, client):
        assert client.get("/api/schemas/Intake_Missing").status_code == 404
        assert client.post("/api/schemas/Intake_Missing/unlock").status_code == 404
        assert client.get("/api/schemas/Intake_Missing/export").status_code == 404

    def test_unlock(self, client, imported):
        response = client.post(f"/api/schemas/{imported}/unlock")

        assert response.status_code == 200
        assert response.json() == {"sheet_name": imported, "locked": False}
        assert client.get(f"/api/schemas/{imported}").json()["locked"] is False

    def test_export_csv(self, client, imported):
        response = client.get(f"/api/schemas/{imported}/export", params={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.text.splitlines()[0].startswith("METADATA")

    def test_export_docx(self, client, imported):
        response = client.get(f"/api/schemas/{imported}/export")

        assert response.status_code == 200
        assert response.content[:2] == b"PK"

    def test_export_unsupported_format(self, client, imported):
        response = client.get(f"/api/schemas/{imported}/export", params={"format": "pdf"})
        assert response.status_code == 400


class TestAbout:
    def test_about(self, client):
        body = client.get("/api/about").json()
        assert body["name"] == "Intake Sheets"
        assert body["version"] == "0.1.0"
