"""Tests for the environment report and its serialization."""

import json

from envinspect.environment import VerificationResult, detect_environment
from envinspect.utils import to_json, to_jsonable


class TestDetectEnvironment:
    """Test detect_environment aggregation."""

    def test_report_fields(self, test_config, make_inspector, branch_runner, write_env):
        """The report combines every inspector answer."""
        write_env("API_KEY=1\nDATABASE_URL=postgres://db\n")
        inspector = make_inspector(
            runner=branch_runner("main"),
            settings=test_config.inspector,
            env={"CI": "true", "API_KEY": "1", "DATABASE_URL": "postgres://db"},
        )

        report = detect_environment(test_config, inspector)

        assert report.is_ci is True
        assert report.ci_variables == ["CI"]
        assert report.environment_type == "production"
        assert report.branch == "main"
        assert report.channel_name == "pr-main-20240115"
        assert report.required.valid is True
        assert report.env_file.valid is True
        assert report.issues == []

    def test_missing_variables_become_issues(self, test_config, make_inspector, write_env):
        """Missing required variables are blocking issues."""
        write_env("API_KEY=1\n")
        inspector = make_inspector(settings=test_config.inspector, env={"API_KEY": "1"})

        report = detect_environment(test_config, inspector)

        assert "Missing required environment variables: DATABASE_URL" in report.issues
        assert "Environment file .env is missing: DATABASE_URL" in report.issues

    def test_unknown_branch_and_absent_file_are_notes(self, test_config, make_inspector):
        """Absent branch and env file are informational."""
        test_config.inspector.required_vars = []
        inspector = make_inspector(settings=test_config.inspector)

        report = detect_environment(test_config, inspector)

        assert report.branch is None
        assert report.channel_name == "pr-unknown-20240115"
        assert report.issues == []
        assert len(report.notes) == 2

    def test_unreadable_env_file_is_issue(self, test_config, make_inspector, tmp_path):
        """A read error is surfaced as an issue."""
        (tmp_path / ".env").mkdir()
        inspector = make_inspector(settings=test_config.inspector, env={"API_KEY": "1", "DATABASE_URL": "x"})

        report = detect_environment(test_config, inspector)

        assert any(issue.startswith("Could not read .env") for issue in report.issues)


class TestToJson:
    """Test JSON rendering of reports."""

    def test_report_serializes(self, test_config, make_inspector):
        """Dataclasses, models and paths render as JSON."""
        inspector = make_inspector(settings=test_config.inspector)
        report = detect_environment(test_config, inspector)

        data = json.loads(to_json(report))

        assert data["environment_type"] == "development"
        assert data["env_file"] == {"exists": False, "valid": False, "missing": ["API_KEY", "DATABASE_URL"], "error": None}
        assert data["project_root"] == str(inspector.project_root)

    def test_paths_and_nested_models(self, tmp_path):
        """Paths become strings and models nested in containers are dumped."""
        payload = {"root": tmp_path, "results": [VerificationResult(valid=False, missing=["A"])]}

        assert to_jsonable(payload) == {
            "root": str(tmp_path),
            "results": [{"valid": False, "missing": ["A"]}],
        }

    def test_plain_values_pass_through(self):
        """Scalars and None are returned unchanged."""
        assert json.loads(to_json({"a": 1, "b": None, "c": "x"})) == {"a": 1, "b": None, "c": "x"}
