"""Issues API client for branch, file and issue queries.

Wraps the server endpoints the reconciliation services depend on and
converts their responses into the shared models.
"""

import logging
from typing import Any, Dict, List, Optional

from .base_client import APIClientError, ServerAPIClient
from ..models import ServerBranchSet, ServerIssue
from ..utils.path_helper import get_file_name

logger = logging.getLogger(__name__)

PAGE_SIZE = 500


class IssuesAPIClient(ServerAPIClient):
    """Client for the project branch, component and issue endpoints."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.is_connected = False

    async def connect(self) -> bool:
        """Validate the configured token against the server.

        Returns:
            True if the server accepted the credentials

        Raises:
            NetworkError: If the server cannot be reached
        """
        data = await self.get_json("/api/authentication/validate")
        self.is_connected = bool(data.get("valid"))
        if self.is_connected:
            logger.info(f"Connected to {self.server_url}")
        else:
            logger.warning(f"Server {self.server_url} rejected the credentials")
        return self.is_connected

    async def disconnect(self) -> None:
        self.is_connected = False
        await self.close()

    async def get_project_branches(self, project_key: str) -> ServerBranchSet:
        """Get the branches the server tracks for a project.

        Args:
            project_key: Server project key

        Returns:
            Main branch name and all branch names

        Raises:
            APIClientError: If the request fails or no main branch is reported
        """
        data = await self.get_json(
            "/api/project_branches/list", params={"project": project_key}
        )
        branches = data.get("branches", [])

        main_branch = next((b["name"] for b in branches if b.get("isMain")), None)
        if main_branch is None:
            raise APIClientError(f"No main branch reported for project '{project_key}'")

        return ServerBranchSet(
            main_branch_name=main_branch,
            branch_names=[b["name"] for b in branches if b.get("name")],
        )

    async def search_files_by_name(
        self, project_key: str, branch: Optional[str], file_name: str
    ) -> List[str]:
        """Find project files with the given file name.

        Args:
            project_key: Server project key
            branch: Server branch to search, None for the main branch
            file_name: File name to look for

        Returns:
            Project-relative paths of matching files, in server order
        """
        params: Dict[str, Any] = {
            "component": project_key,
            "q": file_name,
            "qualifiers": "FIL",
            "ps": PAGE_SIZE,
        }
        if branch:
            params["branch"] = branch

        data = await self.get_json("/api/components/tree", params=params)

        # The server query is a substring match
        paths = [
            component["path"]
            for component in data.get("components", [])
            if component.get("path")
            and get_file_name(component["path"]).lower() == file_name.lower()
        ]
        logger.debug(f"Found {len(paths)} files named '{file_name}' in {project_key}")
        return paths

    async def get_issues(
        self,
        project_key: str,
        branch: Optional[str],
        component_key: str,
        rule_id: Optional[str],
    ) -> List[ServerIssue]:
        """Get the issues raised on one component.

        Args:
            project_key: Server project key
            branch: Server branch, None for the main branch
            component_key: Key of the file component
            rule_id: Restrict to issues of this rule, None for all rules

        Returns:
            Issues in the order returned by the server
        """
        params: Dict[str, Any] = {
            "componentKeys": component_key,
            "ps": PAGE_SIZE,
        }
        if branch:
            params["branch"] = branch
        if rule_id:
            params["rules"] = rule_id

        issues: List[ServerIssue] = []
        page = 1
        while True:
            params["p"] = page
            data = await self.get_json("/api/issues/search", params=params)
            raw_issues = data.get("issues", [])
            component_paths = {
                component["key"]: component.get("path")
                for component in data.get("components", [])
                if component.get("key")
            }
            issues.extend(
                self._to_server_issue(project_key, raw, component_paths)
                for raw in raw_issues
            )

            total = data.get("paging", {}).get("total", len(issues))
            if not raw_issues or len(issues) >= total:
                break
            page += 1

        logger.debug(f"Retrieved {len(issues)} issues for {component_key}")
        return issues

    @staticmethod
    def _to_server_issue(
        project_key: str,
        raw: Dict[str, Any],
        component_paths: Optional[Dict[str, Optional[str]]] = None,
    ) -> ServerIssue:
        component = raw.get("component") or ""
        if component_paths and component in component_paths:
            file_path = component_paths[component]
        else:
            # Fall back to the key layout when the component is not listed
            prefix = f"{project_key}:"
            file_path = (
                component[len(prefix) :] if component.startswith(prefix) else None
            )

        text_range = raw.get("textRange") or {}
        start_line = text_range.get("startLine", raw.get("line"))

        return ServerIssue(
            key=raw.get("key"),
            rule_id=raw.get("rule"),
            file_path=file_path or None,
            line_hash=raw.get("hash"),
            start_line=start_line,
            status=raw.get("status"),
            message=raw.get("message"),
        )
