"""Tests for the formguard CLI."""

import json

import pytest
from typer.testing import CliRunner

from formguard.cli import app

runner = CliRunner()

FIELDS = [
    {"field_id": "name", "classification": "PUBLIC", "label": "Name", "retention_days": 30},
    {"field_id": "card", "classification": "FINANCIAL", "label": "Card Number"},
]


@pytest.fixture
def fields_file(tmp_path):
    path = tmp_path / "fields.json"
    path.write_text(json.dumps(FIELDS))
    return path


class TestCli:
    """Test CLI commands."""

    def test_score(self, fields_file):
        result = runner.invoke(app, ["score", str(fields_file), "--role", "auditor"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["role_modifier"] == -10
        assert data["encryption_coverage"] == 20

    def test_violations(self, fields_file):
        result = runner.invoke(app, ["violations", str(fields_file), "-j", "EU"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == []
        assert [v["rule_id"] for v in data["card"]] == ["require-encryption", "gdpr-financial-consent"]

    def test_violations_fail_on_block(self, fields_file):
        result = runner.invoke(app, ["violations", str(fields_file), "--fail-on-block"])
        assert result.exit_code == 1

    def test_remediate(self, fields_file, tmp_path):
        output = tmp_path / "remediated.json"
        result = runner.invoke(app, ["remediate", str(fields_file), "-o", str(output)])

        assert result.exit_code == 0
        remediated = json.loads(output.read_text())
        card = next(f for f in remediated if f["field_id"] == "card")
        assert card["encryption_at_rest"] is True
        assert card["kms_key"] == "kms-financial"

    def test_report_with_yaml_fields(self, tmp_path):
        path = tmp_path / "fields.yaml"
        path.write_text(
            "- field_id: name\n  classification: PUBLIC\n  label: Name\n"
        )
        config = tmp_path / "governance.yaml"
        config.write_text("jurisdiction: GLOBAL\n")

        result = runner.invoke(app, ["report", str(path), "-c", str(config)])

        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert report["jurisdiction"] == "GLOBAL"
        assert report["can_submit"] is True

    def test_report_policy_mode_override(self, fields_file):
        result = runner.invoke(app, ["report", str(fields_file), "--policy-mode", "warn"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["can_submit"] is True

    def test_report_bad_config(self, fields_file, tmp_path):
        config = tmp_path / "governance.yaml"
        config.write_text("jurisdiction: MARS\n")

        result = runner.invoke(app, ["report", str(fields_file), "-c", str(config)])
        assert result.exit_code == 2

    def test_invalid_fields_file(self, tmp_path):
        path = tmp_path / "fields.json"
        path.write_text(json.dumps({"not": "a list"}))

        result = runner.invoke(app, ["score", str(path)])
        assert result.exit_code != 0
