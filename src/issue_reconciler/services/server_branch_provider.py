"""Resolves the server branch corresponding to the local working copy."""

import logging
from pathlib import Path
from typing import Callable, Optional

from ..config import ConfigurationProvider
from .branch_matcher import BranchMatcher
from .git_snapshot_service import GitSnapshotService

logger = logging.getLogger(__name__)


class ServerBranchProvider:
    """Provides the server branch name for the bound project.

    The branch is resolved from the current git state on every call.
    """

    def __init__(
        self,
        configuration_provider: ConfigurationProvider,
        branch_matcher: BranchMatcher,
        git_service_factory: Callable[[Path], GitSnapshotService] = GitSnapshotService,
    ):
        self.configuration_provider = configuration_provider
        self.branch_matcher = branch_matcher
        self.git_service_factory = git_service_factory

    async def get_server_branch_name(self) -> Optional[str]:
        """Get the server branch matching the local HEAD.

        Returns:
            Branch name, or None in standalone mode, outside a git repository,
            or when no branch could be matched
        """
        config = self.configuration_provider.get_configuration()
        if config.is_standalone:
            return None

        git_service = self.git_service_factory(self.configuration_provider.project_root)
        repo_root = git_service.get_repo_root()
        if repo_root is None:
            logger.debug(
                f"No git repository at {self.configuration_provider.project_root}"
            )
            return None

        snapshot = git_service.get_snapshot(max_commits=config.max_commits)
        branch = await self.branch_matcher.find_matching_branch(
            config.project_key, snapshot
        )

        if branch is None:
            logger.info("Could not match a server branch, using the server default")
        else:
            logger.info(f"Using server branch '{branch}'")
        return branch
