"""Test suite for the issue-reconciler command line interface."""

import pytest
from click.testing import CliRunner
from unittest.mock import AsyncMock, patch

from issue_reconciler.api_clients.base_client import NetworkError
from issue_reconciler.cli import cli
from issue_reconciler.config import ConfigurationProvider
from issue_reconciler.models import IssueKind, ServerIssue


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def bound_project(tmp_path, runner):
    result = runner.invoke(
        cli,
        [
            "--path",
            str(tmp_path),
            "bind",
            "--server",
            "https://sonar.example.com",
            "--project",
            "my-project",
        ],
    )
    assert result.exit_code == 0, result.output
    return tmp_path


class TestBindCommand:
    def test_bind_writes_configuration(self, bound_project):
        config = ConfigurationProvider(bound_project).get_configuration()

        assert config.project_key == "my-project"
        assert config.server.url == "https://sonar.example.com"

    def test_bind_rejects_invalid_url(self, tmp_path, runner):
        result = runner.invoke(
            cli,
            ["--path", str(tmp_path), "bind", "--server", "nope", "--project", "p"],
        )

        assert result.exit_code == 1


class TestBranchCommand:
    def test_unbound_project_fails(self, tmp_path, runner):
        result = runner.invoke(cli, ["--path", str(tmp_path), "branch"])

        assert result.exit_code == 1
        assert "not bound" in result.output

    def test_prints_matched_branch(self, bound_project, runner):
        with patch(
            "issue_reconciler.cli._resolve_branch", AsyncMock(return_value="dev")
        ):
            result = runner.invoke(cli, ["--path", str(bound_project), "branch"])

        assert result.exit_code == 0
        assert "dev" in result.output

    def test_server_error_exits_with_failure(self, bound_project, runner):
        with patch(
            "issue_reconciler.cli._resolve_branch",
            AsyncMock(side_effect=NetworkError("unreachable")),
        ):
            result = runner.invoke(cli, ["--path", str(bound_project), "branch"])

        assert result.exit_code == 1
        assert "unreachable" in result.output


class TestFindIssueCommand:
    @pytest.fixture
    def source_file(self, bound_project):
        path = bound_project / "src" / "app.py"
        path.parent.mkdir()
        path.write_text("print('hello')\n")
        return path

    def test_prints_found_issue(self, bound_project, source_file, runner):
        issue = ServerIssue(
            key="AX1", rule_id="python:S1", file_path="src/app.py", start_line=1
        )
        with patch(
            "issue_reconciler.cli._find_issue", AsyncMock(return_value=issue)
        ) as find:
            result = runner.invoke(
                cli,
                [
                    "--path",
                    str(bound_project),
                    "find-issue",
                    str(source_file),
                    "--rule",
                    "python:S1",
                    "--line",
                    "1",
                    "--column",
                    "1",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "AX1" in result.output
        local = find.await_args.args[2]
        assert local.kind is IssueKind.AMBIGUOUS_FILE_LEVEL
        assert local.file_path == str(source_file.resolve())

    def test_reports_missing_issue(self, bound_project, source_file, runner):
        with patch(
            "issue_reconciler.cli._find_issue", AsyncMock(return_value=None)
        ) as find:
            result = runner.invoke(
                cli,
                [
                    "--path",
                    str(bound_project),
                    "find-issue",
                    str(source_file),
                    "--rule",
                    "python:S1",
                ],
            )

        assert result.exit_code == 0
        assert "not found" in result.output
        local = find.await_args.args[2]
        assert local.is_file_level
