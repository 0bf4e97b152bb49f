"""Tests for the validate and bundle commands."""

import json

import pytest

from archiclaw.cli import main
from tests.landscape_helpers import (
    make_change_request,
    make_passport,
    write_application,
    write_change_request,
)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Run from an empty directory so no stray .archiclaw.toml is picked up."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


class TestValidateCommand:
    def test_valid_landscape(self, landscape_root, capsys):
        assert main(["--landscape", str(landscape_root), "validate"]) == 0
        out = capsys.readouterr().out
        assert "Landscape valid" in out
        assert "Applications: 5" in out

    def test_errors_exit_one(self, landscape_root, capsys):
        write_application(landscape_root, make_passport("TST-APP-999"))
        assert main(["--landscape", str(landscape_root), "validate"]) == 1
        out = capsys.readouterr().out
        assert "counter is only at 1" in out
        assert "1 errors" in out

    def test_warnings_do_not_fail(self, landscape_root, capsys):
        write_change_request(landscape_root, make_change_request("TST-ACR-001", "TST-APP-404"))
        assert main(["--landscape", str(landscape_root), "validate"]) == 0
        assert "1 warnings" in capsys.readouterr().out

    def test_json_report(self, landscape_root, capsys):
        write_application(landscape_root, make_passport("TST-APP-999"))
        assert main(["--landscape", str(landscape_root), "validate", "--json"]) == 1
        report = json.loads(capsys.readouterr().out)
        assert report["valid"] is False
        assert report["stats"]["applications"] == 6
        assert report["issues"][0]["code"] == "SequenceExceeded"

    def test_skip_code(self, landscape_root):
        write_application(landscape_root, make_passport("TST-APP-999"))
        argv = ["--landscape", str(landscape_root), "validate", "--skip-code", "SequenceExceeded"]
        assert main(argv) == 0

    def test_skip_code_from_environment_string(self, landscape_root, monkeypatch):
        write_application(landscape_root, make_passport("TST-APP-999"))
        monkeypatch.setenv("ARCHICLAW_RULES_SKIP_CODES", "SequenceExceeded")
        assert main(["-q", "--landscape", str(landscape_root), "validate"]) == 0

    def test_quiet_prints_errors_only(self, landscape_root, capsys):
        write_application(landscape_root, make_passport("TST-APP-999"))
        assert main(["-q", "--landscape", str(landscape_root), "validate"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "SequenceExceeded" in captured.err

    def test_missing_landscape(self, tmp_path, capsys):
        assert main(["--landscape", str(tmp_path / "none"), "validate"]) == 1
        assert "Landscape directory not found" in capsys.readouterr().err

    def test_root_from_config_file(self, landscape_root, tmp_path, monkeypatch, capsys):
        (tmp_path / ".archiclaw.toml").write_text('[landscape]\nroot = "landscape"\n')
        monkeypatch.chdir(tmp_path)
        assert main(["validate"]) == 0
        assert str(landscape_root.resolve()) in capsys.readouterr().out


class TestBundleCommand:
    def test_writes_bundle(self, landscape_root, tmp_path, capsys):
        output = tmp_path / "dist" / "landscape-data.json"
        assert main(["--landscape", str(landscape_root), "bundle", "-o", str(output)]) == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["stats"]["applications"] == 5
        assert "Landscape bundled to" in capsys.readouterr().out

    def test_bundle_written_even_with_errors(self, landscape_root, tmp_path, capsys):
        write_application(landscape_root, make_passport("TST-APP-999"))
        output = tmp_path / "bundle.json"
        assert main(["--landscape", str(landscape_root), "bundle", "-o", str(output)]) == 1
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["validationResult"]["valid"] is False
        assert "TST-APP-999" in data["applications"]
        assert "validation errors" in capsys.readouterr().err

    def test_default_output_from_config(self, landscape_root, tmp_path, monkeypatch):
        (tmp_path / ".archiclaw.toml").write_text(
            '[landscape]\nroot = "landscape"\n\n[bundle]\noutput = "out/data.json"\n'
        )
        monkeypatch.chdir(tmp_path)
        assert main(["-q", "bundle"]) == 0
        assert (tmp_path / "out" / "data.json").is_file()
