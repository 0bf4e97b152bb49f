"""Tests for landscape discovery and loading."""

import pytest

from archiclaw.core.loader import (
    LandscapeLayout,
    LandscapeNotFound,
    LandscapeReader,
    read_landscape,
    registry_ids,
)
from archiclaw.core.models import RecordKind
from archiclaw.core.rules import IssueCode, Severity
from tests.landscape_helpers import make_passport, write_application


class TestLandscapeLayout:
    def test_defaults(self, tmp_path):
        layout = LandscapeLayout()
        assert layout.sequences_path(tmp_path) == tmp_path / ".archiclaw" / "id-sequences.yaml"
        assert layout.kind_dir(tmp_path, layout.data_entities_dir) == (
            tmp_path / "model" / "data-entities"
        )

    def test_from_config_overrides(self):
        layout = LandscapeLayout.from_config({"layout": {"changes_dir": "proposals"}})
        assert layout.changes_dir == "proposals"
        assert layout.passport_file == "passport.yaml"

    def test_from_config_ignores_unknown_keys(self):
        layout = LandscapeLayout.from_config({"layout": {"colour": "blue"}})
        assert layout == LandscapeLayout()


class TestReadSeed:
    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(LandscapeNotFound):
            LandscapeReader(tmp_path / "nope").read()

    def test_landscape_not_found_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_landscape(tmp_path / "nope")

    def test_seed_has_no_issues(self, landscape_root):
        scan = LandscapeReader(landscape_root).read()
        assert scan.issues == []
        assert all(f.ok for f in scan.files)

    def test_traversal_order(self, landscape_root):
        scan = LandscapeReader(landscape_root).read()
        kinds = [f.kind for f in scan.files]
        assert kinds[:3] == [
            RecordKind.ORGANIZATION,
            RecordKind.ID_SEQUENCES,
            RecordKind.DOMAIN_REGISTRY,
        ]
        assert kinds[-1] == RecordKind.INTEGRATION_REGISTRY
        order = list(dict.fromkeys(kinds))
        assert order == [
            RecordKind.ORGANIZATION,
            RecordKind.ID_SEQUENCES,
            RecordKind.DOMAIN_REGISTRY,
            RecordKind.DOMAIN,
            RecordKind.APPLICATION_REGISTRY,
            RecordKind.APPLICATION,
            RecordKind.CAPABILITY_REGISTRY,
            RecordKind.DATA_ENTITY_REGISTRY,
            RecordKind.DATA_ENTITY,
            RecordKind.INTEGRATION_REGISTRY,
        ]

    def test_directory_listing_sorted(self, landscape_root):
        scan = LandscapeReader(landscape_root).read()
        folders = [f.expected_id for f in scan.of_kind(RecordKind.APPLICATION)]
        assert folders == sorted(folders)
        entity_files = [f.path.name for f in scan.of_kind(RecordKind.DATA_ENTITY)]
        assert entity_files == sorted(entity_files)
        assert "_index.yaml" not in entity_files

    def test_relative_posix_paths(self, landscape_root):
        scan = LandscapeReader(landscape_root).read()
        app = scan.of_kind(RecordKind.APPLICATION)[0]
        assert app.rel_path == f"model/applications/{app.expected_id}/passport.yaml"

    def test_registry_ids(self, landscape_root):
        scan = LandscapeReader(landscape_root).read()
        ids = registry_ids(scan.first(RecordKind.APPLICATION_REGISTRY))
        assert "FIN-APP-001" in ids


class TestPartialFailure:
    def test_bad_yaml_does_not_stop_scan(self, landscape_root):
        bad = landscape_root / "model" / "applications" / "FIN-APP-001" / "passport.yaml"
        bad.write_text("id: [broken\n", encoding="utf-8")

        scan = LandscapeReader(landscape_root).read()
        failed = [f for f in scan.files if not f.ok]
        assert [f.rel_path for f in failed] == ["model/applications/FIN-APP-001/passport.yaml"]
        issue = failed[0].issues[0]
        assert issue.code == IssueCode.SCHEMA_VIOLATION
        assert issue.severity == Severity.ERROR
        assert issue.message.startswith("Schema validation failed: invalid YAML")
        # Later kinds were still read
        assert any(f.ok for f in scan.of_kind(RecordKind.INTEGRATION_REGISTRY))

    def test_schema_violation_captured(self, landscape_root):
        write_application(landscape_root, make_passport("FIN-APP-001", status="unknown"))
        scan = LandscapeReader(landscape_root).read()
        issues = scan.issues
        assert len(issues) == 1
        assert "status" in issues[0].message

    def test_non_utf8_file(self, landscape_root):
        path = landscape_root / "model" / "data-entities" / "invoice.yaml"
        path.write_bytes(b"id: \xff\xfe\n")
        scan = LandscapeReader(landscape_root).read()
        assert [i.code for i in scan.issues] == [IssueCode.SCHEMA_VIOLATION]

    def test_missing_config(self, landscape_root):
        (landscape_root / ".archiclaw" / "config.yaml").unlink()
        scan = LandscapeReader(landscape_root).read()
        assert [(i.file, i.message, i.code) for i in scan.issues] == [
            (".archiclaw/config.yaml", "Landscape config not found", IssueCode.FILE_NOT_FOUND)
        ]

    def test_missing_registry(self, landscape_root):
        (landscape_root / "model" / "integrations" / "_index.yaml").unlink()
        scan = LandscapeReader(landscape_root).read()
        assert [(i.file, i.message) for i in scan.issues] == [
            ("model/integrations/_index.yaml", "File not found")
        ]

    def test_empty_config_counts_as_mapping(self, landscape_root):
        (landscape_root / ".archiclaw" / "config.yaml").write_text("", encoding="utf-8")
        assert LandscapeReader(landscape_root).read().issues == []

    def test_folder_without_record_is_skipped(self, landscape_root):
        (landscape_root / "model" / "applications" / "EMPTY").mkdir()
        scan = LandscapeReader(landscape_root).read()
        assert "EMPTY" not in [f.expected_id for f in scan.of_kind(RecordKind.APPLICATION)]
        assert scan.issues == []

    def test_empty_landscape_reports_required_files(self, tmp_path):
        scan = LandscapeReader(tmp_path).read()
        assert {i.code for i in scan.issues} == {IssueCode.FILE_NOT_FOUND}
        assert len(scan.issues) == 7
