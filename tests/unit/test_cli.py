"""Tests for the forms command-line interface.

Tests the command-line interface including:
- validation only (default)
- --check: definition issues
- --submit: dispatch and exit codes
- --set / --values: supplying values, including file attachments
"""

import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest
import yaml

from forms.__main__ import coerce_cli_value, main
from forms.lib.errors import ConfigurationError
from forms.lib.files import FileRef
from forms.models.field import FieldDescriptor, FieldType

PROJECT_ROOT = Path(__file__).resolve().parents[2]

VALID_ARGS = [
    "--set", "name=Ada",
    "--set", "email=ada@example.com",
    "--set", "password=analytical",
    "--set", "confirm=analytical",
    "--set", "terms=yes",
]


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put pytest's handlers back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCLIHelp:
    """Tests for CLI help and basic invocation."""

    def test_help_flag(self):
        """--help should show usage information."""
        result = subprocess.run(
            [sys.executable, "-m", "forms", "--help"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 0
        assert "usage" in result.stdout.lower()
        assert "--submit" in result.stdout

    def test_form_argument_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_bad_assignment(self, signup_yaml):
        with pytest.raises(SystemExit):
            main([str(signup_yaml), "--set", "no-equals-sign"])


class TestCLIValidate:
    """Tests for validation without submission."""

    def test_valid(self, signup_yaml, capsys):
        assert main([str(signup_yaml), *VALID_ARGS]) == 0
        assert "Form is valid." in capsys.readouterr().out

    def test_invalid(self, signup_yaml, capsys):
        assert main([str(signup_yaml), "--set", "email=nope"]) == 1
        err = capsys.readouterr().err
        assert "email: Invalid email format" in err
        assert "name: Name is required" in err

    def test_values_file(self, signup_yaml, tmp_path):
        values = tmp_path / "values.yaml"
        values.write_text(
            yaml.safe_dump(
                {
                    "name": "Ada",
                    "email": "ada@example.com",
                    "password": "analytical",
                    "confirm": "analytical",
                    "terms": True,
                }
            ),
            encoding="utf-8",
        )
        assert main([str(signup_yaml), "--values", str(values)]) == 0

    def test_set_overrides_values_file(self, signup_yaml, tmp_path):
        values = tmp_path / "values.yaml"
        values.write_text("email: ada@example.com\n", encoding="utf-8")
        assert main([str(signup_yaml), "--values", str(values), "--set", "email=broken"]) == 1

    def test_values_file_not_a_mapping(self, signup_yaml, tmp_path, capsys):
        values = tmp_path / "values.yaml"
        values.write_text("- a\n- b\n", encoding="utf-8")
        assert main([str(signup_yaml), "--values", str(values)]) == 2
        assert "must be a mapping" in capsys.readouterr().err

    def test_unknown_field(self, signup_yaml, capsys):
        assert main([str(signup_yaml), "--set", "nickname=ada"]) == 2
        assert "Unknown field 'nickname'" in capsys.readouterr().err

    def test_missing_definition(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.yaml")]) == 2
        assert "Form definition not found" in capsys.readouterr().err

    def test_check(self, signup_yaml, capsys):
        assert main([str(signup_yaml), "--check"]) == 0
        assert "No issues found." in capsys.readouterr().out

    def test_check_reports_warnings(self, tmp_path, capsys):
        path = tmp_path / "form.yaml"
        path.write_text("fields:\n  - name: colour\n    type: select\n", encoding="utf-8")
        assert main([str(path), "--check"]) == 0
        assert "[WARNING] colour: select field has no options" in capsys.readouterr().out

    def test_check_warnings_printed_once(self, tmp_path, capsys):
        path = tmp_path / "form.yaml"
        path.write_text("fields:\n  - name: colour\n    type: select\n", encoding="utf-8")
        main([str(path), "--check"])
        captured = capsys.readouterr()
        assert captured.out.count("select field has no options") == 1
        assert "select field has no options" not in captured.err

    def test_check_reports_errors(self, tmp_path, capsys):
        path = tmp_path / "form.yaml"
        path.write_text(
            "fields:\n"
            "  - name: age\n"
            "    validation: {min: 5, max: 2}\n"
            "  - name: confirm\n"
            "    validation: {matches: password}\n",
            encoding="utf-8",
        )
        assert main([str(path), "--check"]) == 2
        out = capsys.readouterr().out
        assert "[ERROR] age: validation.min is greater than max" in out
        assert "[ERROR] confirm: validation.matches refers to unknown field 'password'" in out

    def test_errors_still_raise_without_check(self, tmp_path, capsys):
        path = tmp_path / "form.yaml"
        path.write_text("fields:\n  - name: age\n    validation: {min: 5, max: 2}\n", encoding="utf-8")
        assert main([str(path)]) == 2
        assert "validation.min is greater than max" in capsys.readouterr().err


class TestCLISubmit:
    """Tests for --submit."""

    def test_submit_without_target(self, signup_yaml, capsys):
        assert main([str(signup_yaml), *VALID_ARGS, "--submit"]) == 0
        assert "Form submitted successfully!" in capsys.readouterr().out

    def test_submit_invalid(self, signup_yaml, capsys):
        assert main([str(signup_yaml), "--submit"]) == 1
        assert "Invalid fields:" in capsys.readouterr().err

    def test_submit_unreachable_endpoint(self, signup_yaml, capsys):
        code = main(
            [str(signup_yaml), *VALID_ARGS, "--submit", "--endpoint", "http://127.0.0.1:9/hook"]
        )
        assert code == 2
        assert "Submission failed: Form submission failed:" in capsys.readouterr().err

    def test_env_file_loaded(self, signup_yaml, tmp_path, monkeypatch):
        monkeypatch.delenv("FORMS_CLI_TEST", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("FORMS_CLI_TEST=1\n", encoding="utf-8")
        try:
            assert main([str(signup_yaml), *VALID_ARGS, "--env-file", str(env_file)]) == 0
            assert os.environ["FORMS_CLI_TEST"] == "1"
        finally:
            monkeypatch.delenv("FORMS_CLI_TEST", raising=False)


class TestCoerceValue:
    """Tests for turning CLI strings into field values."""

    def test_file_reference(self, tmp_path):
        path = tmp_path / "cv.pdf"
        path.write_bytes(b"%PDF")
        value = coerce_cli_value(FieldDescriptor(name="cv", type=FieldType.FILE), f"@{path}")
        assert isinstance(value, FileRef)
        assert value.name == "cv.pdf"
        assert value.media_type == "application/pdf"

    def test_multiple_files(self, tmp_path):
        paths = []
        for name in ("a.png", "b.png"):
            path = tmp_path / name
            path.write_bytes(b"x")
            paths.append(f"@{path}")
        value = coerce_cli_value(
            FieldDescriptor(name="photos", type=FieldType.FILE, multiple=True), paths
        )
        assert [f.name for f in value] == ["a.png", "b.png"]

    @pytest.mark.parametrize("raw,expected", [("true", True), ("YES", True), ("1", True), ("no", False), ("", False)])
    def test_checkbox(self, raw, expected):
        field = FieldDescriptor(name="terms", type=FieldType.CHECKBOX)
        assert coerce_cli_value(field, raw) is expected

    def test_checkbox_bool_passthrough(self):
        field = FieldDescriptor(name="terms", type=FieldType.CHECKBOX)
        assert coerce_cli_value(field, True) is True

    def test_other_values_unchanged(self):
        assert coerce_cli_value(FieldDescriptor(name="age", type=FieldType.NUMBER), "42") == "42"

    def test_file_field_cli(self, tmp_path, capsys):
        cv = tmp_path / "cv.txt"
        cv.write_text("hello", encoding="utf-8")
        form = tmp_path / "apply.yaml"
        form.write_text(
            "fields:\n"
            "  - name: cv\n"
            "    type: file\n"
            "    validation: {required: true}\n",
            encoding="utf-8",
        )
        assert main([str(form)]) == 1
        assert "cv: Please select a file" in capsys.readouterr().err
        assert main([str(form), "--set", f"cv=@{cv}"]) == 0

    def test_missing_attachment(self, tmp_path):
        field = FieldDescriptor(name="cv", type=FieldType.FILE)
        with pytest.raises(ConfigurationError, match="File not found"):
            coerce_cli_value(field, f"@{tmp_path / 'nope.pdf'}")

    def test_empty_file_value(self):
        assert coerce_cli_value(FieldDescriptor(name="cv", type=FieldType.FILE), None) is None
        multi = FieldDescriptor(name="photos", type=FieldType.FILE, multiple=True)
        assert coerce_cli_value(multi, "") == []
