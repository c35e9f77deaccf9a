"""Integration tests for the end-to-end intake import pipeline."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from intake_sheets.audit.audit_logger import AuditLogger
from intake_sheets.interfaces.audit import AuditEventType
from intake_sheets.interfaces.sheets import ISheetMaterializer, TableHandle
from intake_sheets.models.rows import SHEET_HEADERS
from intake_sheets.parsers.exceptions import SheetNotFoundError
from intake_sheets.pipeline import (
    ImportResult,
    IntakeImportPipeline,
    PipelineConfig,
    PreviewResult,
)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'pipeline.db'}"


@pytest.fixture
def pipeline(database_url, tmp_path):
    """Pipeline wired to a SQLite sheet store."""
    pipeline = IntakeImportPipeline(config=PipelineConfig(
        database_url=database_url,
        export_dir=str(tmp_path / "exports"),
    ))
    yield pipeline
    pipeline.close()


@pytest.fixture
def duplicate_json():
    return json.dumps({
        "template_name": "Dupes",
        "conversation_flow": {"sections": [
            {"section_id": "a", "questions": [{"id": "q1"}]},
            {"section_id": "b", "questions": [{"id": "q1"}, {"id": "q2"}]},
        ]},
    })


@pytest.fixture
def collaborators():
    """Mock sheet collaborators attached to one parent to record call order."""
    parent = Mock()
    parent.materializer.sheet_exists.return_value = False
    parent.materializer.create_or_replace_table.return_value = TableHandle(
        id="1", name="Intake_Contact", row_count=3
    )
    return parent


def mock_pipeline(parent):
    return IntakeImportPipeline(
        config=PipelineConfig(enable_audit_logging=False),
        materializer=parent.materializer,
        protection_service=parent.protection,
        metadata_stamper=parent.stamper,
    )


class TestImport:
    """Tests for process_intake_json against the database store."""

    def test_contact_import(self, pipeline, contact_json):
        """Test the full sheet produced for the contact template."""
        result = pipeline.process_intake_json(contact_json)

        assert result.success
        assert result.sheet_name == "Intake_Contact"
        assert result.row_count == 3
        assert result.message == "Successfully created Intake_Contact with 3 questions"

        schema = pipeline.get_schema("Intake_Contact")
        values = schema["values"]

        assert schema["locked"] is True
        assert schema["row_count"] == 3
        assert values[0][:3] == ["METADATA", "Template: Contact", "Version: 1.0"]
        assert values[0][3].startswith("Imported: ")
        assert values[1] == [
            "🔒 LOCKED SCHEMA",
            "This sheet is protected and serves as an immutable reference",
        ]
        assert values[2] == list(SHEET_HEADERS)
        assert [row[2] for row in values[3:]] == ["q1", "q2", "q2.twitter"]

        child = values[5]
        assert child[7] == "format: url"
        assert child[8] == ".twitter"

    def test_reimport_creates_version(self, pipeline, contact_json):
        first = pipeline.process_intake_json(contact_json)
        second = pipeline.process_intake_json(contact_json)
        third = pipeline.process_intake_json(contact_json)

        assert [first.sheet_name, second.sheet_name, third.sheet_name] == [
            "Intake_Contact", "Intake_Contact_v2", "Intake_Contact_v3",
        ]
        assert pipeline.list_schemas() == ["Intake_Contact", "Intake_Contact_v2", "Intake_Contact_v3"]

    def test_force_new_version(self, pipeline, contact_json):
        result = pipeline.process_intake_json(contact_json, force_new_version=True)
        assert result.sheet_name == "Intake_Contact_v2"

    def test_business_profile(self, pipeline, business_intake):
        result = pipeline.process_intake_json(json.dumps(business_intake))

        assert result.success
        assert result.row_count == 12
        values = pipeline.get_schema(result.sheet_name)["values"]
        assert values[0][2] == "Version: 2.1"

    def test_duplicates_write_nothing(self, pipeline, duplicate_json):
        result = pipeline.process_intake_json(duplicate_json)

        assert not result.success
        assert result.error == "Duplicate question IDs found: q1"
        assert result.duplicates == ["q1"]
        assert pipeline.list_schemas() == []

    def test_numeric_duplicate_ids(self, pipeline):
        """Test that numeric ids are reported in the duplicate error."""
        intake = json.dumps({
            "template_name": "Numbers",
            "conversation_flow": {"sections": [{"questions": [{"id": 7}, {"id": 7}]}]},
        })

        result = pipeline.process_intake_json(intake)

        assert not result.success
        assert result.error == "Duplicate question IDs found: 7"
        assert result.duplicates == [7]
        assert pipeline.list_schemas() == []

    def test_invalid_json(self, pipeline):
        result = pipeline.process_intake_json("{broken")

        assert not result.success
        assert result.error
        assert result.to_dict() == {"success": False, "error": result.error}
        assert pipeline.list_schemas() == []

    def test_missing_template_name(self, pipeline):
        result = pipeline.process_intake_json(json.dumps({"conversation_flow": {"sections": []}}))
        assert result.error == "Missing template_name in JSON"

    def test_missing_sections(self, pipeline):
        result = pipeline.process_intake_json(json.dumps({"template_name": "X"}))
        assert result.error == "Invalid JSON structure - missing conversation_flow.sections"

    def test_success_to_dict(self, pipeline, contact_json):
        assert pipeline.process_intake_json(contact_json).to_dict() == {
            "success": True,
            "sheet_name": "Intake_Contact",
            "row_count": 3,
            "message": "Successfully created Intake_Contact with 3 questions",
        }


class TestAuditTrail:
    """Tests for the events recorded by imports."""

    def test_events_are_recorded(self, pipeline, database_url, contact_json, duplicate_json):
        pipeline.process_intake_json(contact_json)
        pipeline.process_intake_json(duplicate_json)

        audit = AuditLogger(database_url=database_url)
        try:
            imported = audit.get_events(event_type=AuditEventType.SCHEMA_IMPORTED)
            locked = audit.get_events(event_type=AuditEventType.SCHEMA_LOCKED)
            failed = audit.get_events(event_type=AuditEventType.IMPORT_FAILED)
        finally:
            audit.close()

        assert [e.sheet_name for e in imported] == ["Intake_Contact"]
        assert imported[0].details["row_count"] == 3
        assert locked[0].details["protected_columns"] == [
            "section_id", "section_name", "question_id", "maps_to",
        ]
        assert failed[0].template_name == "Dupes"
        assert failed[0].details["error_type"] == "DuplicateIdentifierError"

    def test_audit_can_be_disabled(self, database_url, contact_json):
        pipeline = IntakeImportPipeline(config=PipelineConfig(
            database_url=database_url,
            enable_audit_logging=False,
        ))
        try:
            assert pipeline.process_intake_json(contact_json).success
        finally:
            pipeline.close()

        audit = AuditLogger(database_url=database_url)
        try:
            assert audit.get_events() == []
        finally:
            audit.close()


class TestPreview:
    """Tests for preview_json."""

    def test_preview(self, pipeline, contact_json):
        result = pipeline.preview_json(contact_json)

        assert isinstance(result, PreviewResult)
        assert result.to_dict() == {
            "success": True,
            "template_name": "Contact",
            "question_count": 3,
            "section_count": 1,
            "has_duplicates": False,
            "duplicates": [],
        }
        assert pipeline.list_schemas() == []

    def test_preview_reports_duplicates(self, pipeline, duplicate_json):
        result = pipeline.preview_json(duplicate_json)

        assert result.success
        assert result.has_duplicates
        assert result.duplicates == ["q1"]

    def test_preview_structural_error(self, pipeline):
        result = pipeline.preview_json(json.dumps({"template_name": "X"}))
        assert result.to_dict() == {
            "success": False,
            "error": "Invalid JSON structure - missing conversation_flow.sections",
        }


class TestMaintenance:
    """Tests for unlock, lock state, export and about."""

    def test_unlock(self, pipeline, contact_json):
        pipeline.process_intake_json(contact_json)

        pipeline.unlock_schema("Intake_Contact")

        assert not pipeline.is_schema_locked("Intake_Contact")
        assert pipeline.get_schema("Intake_Contact")["values"][1] == []

    def test_unknown_schema(self, pipeline):
        with pytest.raises(SheetNotFoundError):
            pipeline.unlock_schema("Intake_Missing")

    @pytest.mark.parametrize("export_format", ["csv", "docx"])
    def test_export(self, pipeline, contact_json, export_format):
        pipeline.process_intake_json(contact_json)

        path = Path(pipeline.export_schema("Intake_Contact", format=export_format))

        assert path.exists()
        assert path.suffix == f".{export_format}"

    def test_about(self, pipeline):
        about = pipeline.about()
        assert about["name"] == "Intake Sheets"
        assert about["version"] == "0.1.0"


class TestConfiguration:
    """Tests for importer configuration applied by the pipeline."""

    def test_prefix_and_max_items_from_file(self, tmp_path, database_url):
        config_path = tmp_path / "importer.json"
        config_path.write_text(
            json.dumps({"sheet_prefix": "Schema_", "default_max_items": 4}),
            encoding="utf-8",
        )
        intake = json.dumps({
            "template_name": "Arr",
            "conversation_flow": {"sections": [{"questions": [{"id": "a", "type": "text_array"}]}]},
        })

        pipeline = IntakeImportPipeline(config=PipelineConfig(
            database_url=database_url,
            config_path=str(config_path),
        ))
        try:
            result = pipeline.process_intake_json(intake)
            values = pipeline.get_schema("Schema_Arr")["values"]
            schemas = pipeline.list_schemas()
        finally:
            pipeline.close()

        assert result.sheet_name == "Schema_Arr"
        assert values[3][7] == "max_items: 4, "
        assert schemas == ["Schema_Arr"]

    def test_backup_before_lock(self, tmp_path, database_url, contact_json):
        config_path = tmp_path / "importer.json"
        config_path.write_text(json.dumps({"backup_before_lock": True}), encoding="utf-8")

        pipeline = IntakeImportPipeline(config=PipelineConfig(
            database_url=database_url,
            config_path=str(config_path),
        ))
        try:
            pipeline.process_intake_json(contact_json)
            schemas = pipeline.list_schemas()
        finally:
            pipeline.close()

        assert schemas[0] == "Intake_Contact"
        assert schemas[1].startswith("Intake_Contact_backup_")


class TestCollaboratorContract:
    """Tests for the calls made on injected sheet collaborators."""

    def test_call_order(self, collaborators, contact_json):
        """Test materialize, then lock, then stamp."""
        result = mock_pipeline(collaborators).process_intake_json(contact_json)

        assert result.success
        names = [name for name, _, _ in collaborators.mock_calls]
        assert names == [
            "materializer.sheet_exists",
            "materializer.create_or_replace_table",
            "protection.lock",
            "stamper.stamp_metadata",
        ]

        name, headers, rows = collaborators.materializer.create_or_replace_table.call_args.args
        assert name == "Intake_Contact"
        assert headers == SHEET_HEADERS
        assert [row[2] for row in rows] == ["q1", "q2", "q2.twitter"]
        assert all(len(row) == 12 for row in rows)

        table = collaborators.materializer.create_or_replace_table.return_value
        collaborators.protection.lock.assert_called_once_with(table)
        collaborators.stamper.stamp_metadata.assert_called_once_with(table, "Contact", "1.0")

    def test_nothing_written_on_duplicates(self, collaborators, duplicate_json):
        result = mock_pipeline(collaborators).process_intake_json(duplicate_json)

        assert not result.success
        collaborators.materializer.create_or_replace_table.assert_not_called()
        collaborators.protection.lock.assert_not_called()
        collaborators.stamper.stamp_metadata.assert_not_called()

    def test_nothing_written_on_parse_error(self, collaborators):
        result = mock_pipeline(collaborators).process_intake_json("nope")

        assert not result.success
        assert collaborators.mock_calls == []

    def test_collaborator_failure_is_reported(self, collaborators, contact_json):
        collaborators.protection.lock.side_effect = RuntimeError("grid unavailable")

        result = mock_pipeline(collaborators).process_intake_json(contact_json)

        assert result == ImportResult(success=False, error="grid unavailable")
        collaborators.stamper.stamp_metadata.assert_not_called()

    def test_custom_materializer_needs_protection(self, collaborators):
        with pytest.raises(ValueError):
            IntakeImportPipeline(
                config=PipelineConfig(enable_audit_logging=False),
                materializer=collaborators.materializer,
            )

    def test_maintenance_uses_materializer_lookup(self, collaborators):
        table = TableHandle(id="1", name="Intake_Contact", row_count=0)
        collaborators.materializer.get_table.return_value = table
        collaborators.materializer.get_values.return_value = [["METADATA"]]
        collaborators.protection.is_locked.return_value = True

        schema = mock_pipeline(collaborators).get_schema("Intake_Contact")

        assert schema == {
            "sheet_name": "Intake_Contact",
            "row_count": 0,
            "locked": True,
            "values": [["METADATA"]],
        }
        collaborators.materializer.get_values.assert_called_once_with(table)

    def test_materializer_must_support_lookup(self):
        """Test that a materializer without lookup cannot be built."""

        class WriteOnlyMaterializer(ISheetMaterializer):
            def sheet_exists(self, name):
                return False

            def create_or_replace_table(self, name, headers, rows):
                return TableHandle(id="1", name=name)

            def list_sheet_names(self):
                return []

        with pytest.raises(TypeError):
            WriteOnlyMaterializer()
