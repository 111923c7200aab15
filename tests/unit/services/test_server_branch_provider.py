"""Test suite for ServerBranchProvider."""

from pathlib import Path

import pytest
from unittest.mock import AsyncMock, MagicMock

from issue_reconciler.config import BindingConfiguration, BindingMode
from issue_reconciler.models import Branch, RepositorySnapshot
from issue_reconciler.services.server_branch_provider import ServerBranchProvider


def create_config_provider(mode=BindingMode.CONNECTED, project_key="my project key"):
    provider = MagicMock()
    provider.project_root = Path("/repo")
    provider.get_configuration.return_value = BindingConfiguration(
        mode=mode, project_key=project_key, max_commits=50
    )
    return provider


def create_git_service(repo_root, snapshot=None):
    git_service = MagicMock()
    git_service.get_repo_root.return_value = repo_root
    git_service.get_snapshot.return_value = snapshot or RepositorySnapshot(head=None)
    return git_service


def create_branch_matcher(branch_to_return):
    matcher = MagicMock()
    matcher.find_matching_branch = AsyncMock(return_value=branch_to_return)
    return matcher


class TestServerBranchProvider:
    @pytest.mark.asyncio
    async def test_standalone_returns_none(self):
        git_factory = MagicMock()
        matcher = create_branch_matcher("any")
        provider = ServerBranchProvider(
            create_config_provider(BindingMode.STANDALONE), matcher, git_factory
        )

        assert await provider.get_server_branch_name() is None
        git_factory.assert_not_called()
        matcher.find_matching_branch.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_git_repo_returns_none(self):
        git_service = create_git_service(repo_root=None)
        matcher = create_branch_matcher("any")
        provider = ServerBranchProvider(
            create_config_provider(), matcher, lambda root: git_service
        )

        assert await provider.get_server_branch_name() is None
        git_service.get_snapshot.assert_not_called()
        matcher.find_matching_branch.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_matched_branch(self):
        head = Branch("feature", ("a",))
        snapshot = RepositorySnapshot(head=head, branches=(head,))
        git_service = create_git_service(Path("/repo"), snapshot)
        git_factory = MagicMock(return_value=git_service)
        matcher = create_branch_matcher("my matching branch")
        provider = ServerBranchProvider(create_config_provider(), matcher, git_factory)

        result = await provider.get_server_branch_name()

        assert result == "my matching branch"
        git_factory.assert_called_once_with(Path("/repo"))
        git_service.get_snapshot.assert_called_once_with(max_commits=50)
        matcher.find_matching_branch.assert_awaited_once_with(
            "my project key", snapshot
        )

    @pytest.mark.asyncio
    async def test_no_matching_branch_returns_none(self):
        git_service = create_git_service(Path("/repo"))
        matcher = create_branch_matcher(None)
        provider = ServerBranchProvider(
            create_config_provider(), matcher, lambda root: git_service
        )

        assert await provider.get_server_branch_name() is None
        matcher.find_matching_branch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resolves_again_on_every_call(self):
        git_service = create_git_service(Path("/repo"))
        matcher = create_branch_matcher("dev")
        provider = ServerBranchProvider(
            create_config_provider(), matcher, lambda root: git_service
        )

        await provider.get_server_branch_name()
        await provider.get_server_branch_name()

        assert matcher.find_matching_branch.await_count == 2
