"""Test suite for ServerIssueFinder.

Collaborators are replaced with mocks; the real IssueMatcher is used so the
final selection behaves as in production.
"""

import asyncio
import threading

import pytest
from unittest.mock import AsyncMock, MagicMock

from issue_reconciler.api_clients.base_client import APIClientError
from issue_reconciler.config import BindingConfiguration, BindingMode
from issue_reconciler.models import LocalIssue, ServerIssue
from issue_reconciler.services.server_issue_finder import ServerIssueFinder
from issue_reconciler.services.thread_guard import ThreadGuard, WrongThreadError

LOCAL_FILE = "/home/user/project/src/app.py"


def create_config_provider(mode=BindingMode.CONNECTED):
    provider = MagicMock()
    provider.get_configuration.return_value = BindingConfiguration(
        mode=mode, project_key="my-project"
    )
    return provider


@pytest.fixture
def root_calculator():
    calculator = MagicMock()
    calculator.calculate_root_on_branch = AsyncMock(return_value="/home/user/project/")
    return calculator


@pytest.fixture
def branch_provider():
    provider = MagicMock()
    provider.get_server_branch_name = AsyncMock(return_value="feature/x")
    return provider


@pytest.fixture
def server_client():
    client = MagicMock()
    client.get_issues = AsyncMock(return_value=[])
    return client


@pytest.fixture
def local_issue():
    return LocalIssue(
        rule_id="python:S1234", file_path=LOCAL_FILE, start_line=10, line_hash="abc"
    )


def create_finder(root_calculator, branch_provider, server_client, **kwargs):
    config_provider = kwargs.pop("config_provider", create_config_provider())
    return ServerIssueFinder(
        config_provider, root_calculator, branch_provider, server_client, **kwargs
    )


class TestServerIssueFinder:
    @pytest.mark.asyncio
    async def test_standalone_returns_none(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        finder = create_finder(
            root_calculator,
            branch_provider,
            server_client,
            config_provider=create_config_provider(BindingMode.STANDALONE),
        )

        assert await finder.find_server_issue(local_issue) is None
        root_calculator.calculate_root_on_branch.assert_not_called()
        server_client.get_issues.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_root_returns_none(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        root_calculator.calculate_root_on_branch.return_value = None
        finder = create_finder(root_calculator, branch_provider, server_client)

        assert await finder.find_server_issue(local_issue) is None
        root_calculator.calculate_root_on_branch.assert_awaited_once_with(
            LOCAL_FILE, "feature/x"
        )
        server_client.get_issues.assert_not_called()

    @pytest.mark.asyncio
    async def test_queries_component_issues_and_returns_first_match(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        expected = ServerIssue(
            key="AX2", rule_id="python:S1234", file_path="src/app.py", start_line=99,
            line_hash="abc",
        )
        server_client.get_issues.return_value = [
            ServerIssue(
                key="AX1", rule_id="python:S1234", file_path="src/app.py",
                start_line=50, line_hash="zzz",
            ),
            expected,
            ServerIssue(
                key="AX3", rule_id="python:S1234", file_path="src/app.py",
                start_line=10, line_hash="abc",
            ),
        ]
        finder = create_finder(root_calculator, branch_provider, server_client)

        result = await finder.find_server_issue(local_issue)

        assert result is expected
        server_client.get_issues.assert_awaited_once_with(
            "my-project", "feature/x", "my-project:src/app.py", "python:S1234"
        )

    @pytest.mark.asyncio
    async def test_no_matching_issue_returns_none(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        server_client.get_issues.return_value = [
            ServerIssue(rule_id="python:S1234", file_path="src/app.py", start_line=1)
        ]
        finder = create_finder(root_calculator, branch_provider, server_client)

        assert await finder.find_server_issue(local_issue) is None

    @pytest.mark.asyncio
    async def test_query_failure_propagates(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        server_client.get_issues.side_effect = APIClientError("boom", 500)
        finder = create_finder(root_calculator, branch_provider, server_client)

        with pytest.raises(APIClientError):
            await finder.find_server_issue(local_issue)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        server_client.get_issues.side_effect = asyncio.CancelledError()
        finder = create_finder(root_calculator, branch_provider, server_client)

        with pytest.raises(asyncio.CancelledError):
            await finder.find_server_issue(local_issue)

    @pytest.mark.asyncio
    async def test_foreground_thread_fails_fast(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        finder = create_finder(
            root_calculator,
            branch_provider,
            server_client,
            thread_guard=ThreadGuard(threading.current_thread()),
        )

        with pytest.raises(WrongThreadError):
            await finder.find_server_issue(local_issue)

        root_calculator.calculate_root_on_branch.assert_not_called()

    @pytest.mark.asyncio
    async def test_branch_is_resolved_once_for_search_and_query(
        self, root_calculator, branch_provider, server_client, local_issue
    ):
        finder = create_finder(root_calculator, branch_provider, server_client)

        await finder.find_server_issue(local_issue)

        branch_provider.get_server_branch_name.assert_awaited_once()
        root_calculator.calculate_root_on_branch.assert_awaited_once_with(
            LOCAL_FILE, "feature/x"
        )
        assert server_client.get_issues.await_args.args[1] == "feature/x"

    @pytest.mark.asyncio
    async def test_module_level_issue_returns_none(
        self, root_calculator, branch_provider, server_client
    ):
        finder = create_finder(root_calculator, branch_provider, server_client)

        result = await finder.find_server_issue(LocalIssue(rule_id="python:S1"))

        assert result is None
        branch_provider.get_server_branch_name.assert_not_called()
