"""Finds the server issue corresponding to a locally detected issue."""

import logging
from typing import Optional

from ..api_clients.issues_client import IssuesAPIClient
from ..config import ConfigurationProvider
from ..models import LocalIssue, ServerIssue
from ..utils.path_helper import generate_component_key
from .issue_matcher import IssueMatcher
from .project_root_calculator import ProjectRootCalculator
from .server_branch_provider import ServerBranchProvider
from .thread_guard import ThreadGuard

logger = logging.getLogger(__name__)


class ServerIssueFinder:
    """Answers whether the server already knows a local issue."""

    def __init__(
        self,
        configuration_provider: ConfigurationProvider,
        root_calculator: ProjectRootCalculator,
        branch_provider: ServerBranchProvider,
        server_client: IssuesAPIClient,
        issue_matcher: Optional[IssueMatcher] = None,
        thread_guard: Optional[ThreadGuard] = None,
    ):
        self.configuration_provider = configuration_provider
        self.root_calculator = root_calculator
        self.branch_provider = branch_provider
        self.server_client = server_client
        self.issue_matcher = issue_matcher or IssueMatcher()
        self.thread_guard = thread_guard or ThreadGuard()

    async def find_server_issue(self, local: LocalIssue) -> Optional[ServerIssue]:
        """Find the server issue matching ``local``.

        Args:
            local: Issue detected by local analysis

        Returns:
            The first matching server issue, or None in standalone mode, when
            the file cannot be correlated with the server project, or when no
            server issue matches

        Raises:
            WrongThreadError: If called on the foreground thread
            APIClientError: If a server query fails
        """
        self.thread_guard.assert_background_thread()

        config = self.configuration_provider.get_configuration()
        if config.is_standalone or not local.file_path:
            return None

        # The file search and the issue query use the same branch
        branch = await self.branch_provider.get_server_branch_name()
        root = await self.root_calculator.calculate_root_on_branch(
            local.file_path, branch
        )
        if root is None:
            logger.debug(f"Cannot correlate '{local.file_path}' with the server project")
            return None

        component_key = generate_component_key(
            local.file_path, root, config.project_key
        )

        server_issues = await self.server_client.get_issues(
            config.project_key, branch, component_key, local.rule_id
        )
        match = self.issue_matcher.find_first_likely_match(local, server_issues)

        if match is None:
            logger.debug(f"No server issue matches {local.rule_id} in {component_key}")
        else:
            logger.debug(f"Matched {local.rule_id} in {component_key} to {match.key}")
        return match
