"""Infers the local directory that corresponds to the server project root."""

import logging
from typing import Optional

from ..api_clients.issues_client import IssuesAPIClient
from ..config import ConfigurationProvider
from ..utils.path_helper import calculate_root, get_file_name
from .server_branch_provider import ServerBranchProvider

logger = logging.getLogger(__name__)


class ProjectRootCalculator:
    """Uses the server's file index to locate the project root of a local file.

    The server is asked for files with the same name as the local file; the
    project-relative path it returns is stripped from the end of the local
    path, leaving the local project root.
    """

    def __init__(
        self,
        configuration_provider: ConfigurationProvider,
        server_client: IssuesAPIClient,
        branch_provider: ServerBranchProvider,
    ):
        self.configuration_provider = configuration_provider
        self.server_client = server_client
        self.branch_provider = branch_provider

    async def calculate_root(self, local_file_path: Optional[str]) -> Optional[str]:
        """Calculate the local project root for a file.

        Args:
            local_file_path: Absolute path of a local file

        Returns:
            Local root directory (with trailing separator), or None in
            standalone mode or when the server does not know the file

        Raises:
            APIClientError: If the server search fails
        """
        config = self.configuration_provider.get_configuration()
        if config.is_standalone or not local_file_path:
            return None

        branch = await self.branch_provider.get_server_branch_name()
        return await self.calculate_root_on_branch(local_file_path, branch)

    async def calculate_root_on_branch(
        self, local_file_path: Optional[str], branch: Optional[str]
    ) -> Optional[str]:
        """Calculate the local project root against an already resolved branch.

        Args:
            local_file_path: Absolute path of a local file
            branch: Server branch to search, None for the main branch
        """
        config = self.configuration_provider.get_configuration()
        if config.is_standalone or not local_file_path:
            return None

        file_name = get_file_name(local_file_path)

        server_paths = await self.server_client.search_files_by_name(
            config.project_key, branch, file_name
        )
        if not server_paths:
            logger.debug(f"Server has no file named '{file_name}'")
            return None

        if len(server_paths) > 1:
            logger.debug(
                f"Server has {len(server_paths)} files named '{file_name}', "
                f"using '{server_paths[0]}'"
            )

        root = calculate_root(local_file_path, server_paths[0])
        if root is None:
            logger.debug(
                f"Server path '{server_paths[0]}' does not match '{local_file_path}'"
            )
        else:
            logger.debug(f"Project root for '{local_file_path}' is '{root}'")
        return root
