import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests
from typer.testing import CliRunner

from envelope_conformance.cli import app

runner = CliRunner()

DATA_DIR = Path(__file__).parent.parent / "examples" / "data"
USERS = str(DATA_DIR / "users_collection.yaml")
ORDERS = str(DATA_DIR / "orders.postman_collection.json")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ENVELOPE_CONFORMANCE_CONFIG",
        "ENVELOPE_CONFORMANCE_ALLOW_BARE",
        "ENVELOPE_CONFORMANCE_WORKERS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestCheck:
    def test_check_collection_fails_on_errors(self):
        result = runner.invoke(app, ["check", USERS])
        assert result.exit_code == 1
        assert "PASS List users GET /v1/users" in result.output
        assert "FAIL Get user" in result.output
        assert "naming-convention at /data/owner_id" in result.output
        assert "5 checked, 3 passed, 2 failed (2 errors, 2 warnings)" in result.output

    def test_check_with_config_and_workers(self):
        result = runner.invoke(
            app,
            ["check", USERS, "--config", str(DATA_DIR / "settings.yaml"), "--workers", "2"],
        )
        assert result.exit_code == 1
        assert "5 checked, 3 passed, 2 failed" in result.output

    def test_check_json_report_to_file(self, tmp_path):
        out = tmp_path / "reports" / "report.json"
        result = runner.invoke(app, ["check", USERS, "--format", "json", "--output", str(out)])
        assert result.exit_code == 1
        assert f"Report written to {out}" in result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["summary"]["checked"] == 5
        assert data["summary"]["by_rule"] == {
            "missing-field": 1,
            "naming-convention": 1,
            "path-convention": 2,
        }

    def test_check_markdown(self):
        result = runner.invoke(app, ["check", USERS, "--format", "markdown"])
        assert result.exit_code == 1
        assert "### Conformance report" in result.output

    def test_check_findings_jsonl(self, tmp_path):
        jsonl = tmp_path / "findings.jsonl"
        result = runner.invoke(app, ["check", USERS, "--findings-jsonl", str(jsonl)])
        assert result.exit_code == 1
        lines = jsonl.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 4

    def test_postman_bare_envelope_toggle(self):
        strict = runner.invoke(app, ["check", ORDERS])
        assert strict.exit_code == 1
        assert "missing success discriminator" in strict.output

        relaxed = runner.invoke(app, ["check", ORDERS, "--allow-bare"])
        assert relaxed.exit_code == 0
        assert "3 checked, 3 passed, 0 failed" in relaxed.output

    def test_allow_bare_from_env(self, monkeypatch):
        monkeypatch.setenv("ENVELOPE_CONFORMANCE_ALLOW_BARE", "true")
        result = runner.invoke(app, ["check", ORDERS])
        assert result.exit_code == 0

    def test_missing_collection(self):
        result = runner.invoke(app, ["check", "nonexistent.yaml"])
        assert result.exit_code == 2
        assert "Collection file not found" in result.output

    def test_non_utf8_collection(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_bytes(b"\xff\xfe")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == 2
        assert "collection" in result.output

    def test_help_mentions_allow_bare(self):
        result = runner.invoke(app, ["check", "--help"])
        assert result.exit_code == 0
        assert "--allow-bare" in result.output
        assert "envelopes" in result.output

    def test_bad_config(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("workers: 0\n")
        result = runner.invoke(app, ["check", USERS, "--config", str(config)])
        assert result.exit_code == 2
        assert "Error:" in result.output


class TestProbe:
    def test_probe_live_api(self):
        response = MagicMock()
        response.status_code = 200
        response.content = b'{"success": true, "code": 200, "data": {"id": 1}}'
        with patch("envelope_conformance.execution.prober.requests.Session") as session_cls:
            session = session_cls.return_value
            session.request.return_value = response
            result = runner.invoke(
                app,
                [
                    "probe",
                    ORDERS,
                    "--base-url",
                    "https://api.example.com",
                    "--header",
                    "Authorization: Bearer secret",
                ],
            )
        assert result.exit_code == 0
        assert session.request.call_count == 3
        _, kwargs = session.request.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 10.0
        assert "3 checked, 3 passed" in result.output

    def test_probe_connection_failure(self):
        with patch("envelope_conformance.execution.prober.requests.Session") as session_cls:
            session_cls.return_value.request.side_effect = requests.ConnectionError("refused")
            result = runner.invoke(
                app, ["probe", ORDERS, "--base-url", "http://localhost:1", "--timeout", "0.5"]
            )
        assert result.exit_code == 1
        assert "request-failed" in result.output

    def test_probe_invalid_header(self):
        result = runner.invoke(
            app, ["probe", ORDERS, "--base-url", "https://api.example.com", "--header", "nocolon"]
        )
        assert result.exit_code == 2
        assert "Invalid header" in result.output

    def live_json(self):
        response = MagicMock()
        response.status_code = 200
        response.content = b'{"success": true, "code": 200, "data": []}'
        return response

    def test_probe_fills_path_params(self):
        with patch("envelope_conformance.execution.prober.requests.Session") as session_cls:
            session = session_cls.return_value
            session.request.return_value = self.live_json()
            runner.invoke(
                app,
                ["probe", USERS, "--base-url", "https://api.example.com", "--path-param", "id=7"],
            )
        urls = [c.args[1] for c in session.request.call_args_list]
        assert len(urls) == 5
        assert urls[1] == "https://api.example.com/v1/users/7"
        assert not any("{id}" in url for url in urls)

    def test_probe_skips_unfilled_templates(self):
        with patch("envelope_conformance.execution.prober.requests.Session") as session_cls:
            session = session_cls.return_value
            session.request.return_value = self.live_json()
            result = runner.invoke(app, ["probe", USERS, "--base-url", "https://api.example.com"])
        urls = [c.args[1] for c in session.request.call_args_list]
        assert urls == [
            "https://api.example.com/v1/users",
            "https://api.example.com/v1/Users/",
        ]
        assert "[warning] request-failed" in result.output
        assert "Not probed: no value for {id}" in result.output

    def test_probe_invalid_path_param(self):
        result = runner.invoke(
            app,
            ["probe", USERS, "--base-url", "https://api.example.com", "--path-param", "novalue"],
        )
        assert result.exit_code == 2
        assert "Invalid path parameter" in result.output


class TestValidateBody:
    def write(self, tmp_path, body):
        path = tmp_path / "body.json"
        path.write_text(json.dumps(body), encoding="utf-8")
        return str(path)

    def test_conforming_body(self, tmp_path):
        path = self.write(tmp_path, {"success": True, "code": 200, "data": {"ownerId": 3}})
        result = runner.invoke(app, ["validate-body", path, "--status", "200"])
        assert result.exit_code == 0
        assert "Body conforms (success envelope)." in result.output

    def test_naming_violation(self, tmp_path):
        path = self.write(tmp_path, {"success": True, "code": 200, "data": {"owner_id": 3}})
        result = runner.invoke(app, ["validate-body", path, "--status", "200"])
        assert result.exit_code == 1
        assert "naming-convention at /data/owner_id" in result.output

    def test_warnings_only(self, tmp_path):
        path = self.write(
            tmp_path, {"success": False, "code": 200, "message": "Not Found", "errors": {}}
        )
        result = runner.invoke(app, ["validate-body", path, "--status", "404"])
        assert result.exit_code == 0
        assert "[warning] code-mismatch at /code" in result.output

    def test_missing_file(self):
        result = runner.invoke(app, ["validate-body", "nope.json", "--status", "200"])
        assert result.exit_code == 2
        assert "File not found" in result.output

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "body.json"
        path.write_text("{oops")
        result = runner.invoke(app, ["validate-body", str(path), "--status", "200"])
        assert result.exit_code == 2
        assert "Error parsing JSON" in result.output

    def test_non_utf8_body(self, tmp_path):
        path = tmp_path / "body.json"
        path.write_bytes(b"\xff\xfe{}")
        result = runner.invoke(app, ["validate-body", str(path), "--status", "200"])
        assert result.exit_code == 2
        assert "Error reading" in result.output

    def test_directory_body(self, tmp_path):
        result = runner.invoke(app, ["validate-body", str(tmp_path), "--status", "200"])
        assert result.exit_code == 2
        assert "Error reading" in result.output


class TestStatus:
    def test_known_status(self):
        result = runner.invoke(app, ["status", "404"])
        assert result.exit_code == 0
        assert "404 Not Found (client_error)" in result.output

    def test_unknown_status(self):
        result = runner.invoke(app, ["status", "418"])
        assert result.exit_code == 0
        assert "not in the rule table" in result.output

    def test_list_statuses(self):
        result = runner.invoke(app, ["statuses"])
        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line.strip()]
        assert len(lines) == 14
        assert lines[0] == "200 OK (success)"
        assert lines[-1] == "500 Internal Server Error (server_error)"


def test_cli_main_block():
    import runpy
    from typer import Typer

    with patch.object(Typer, "__call__") as mock_call:
        runpy.run_path("src/envelope_conformance/cli.py", run_name="__main__")
        mock_call.assert_called_once()
