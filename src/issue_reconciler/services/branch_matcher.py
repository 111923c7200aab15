"""Server branch matching for local git repositories.

Picks the server branch that best corresponds to the local HEAD. A local
branch that the server tracks under the same name wins outright; otherwise
every local branch the server also tracks is scored by how far HEAD and
that branch have diverged, and the closest one is chosen.

Divergence is measured on the first-parent commit logs only: the nearest
shared commit is found by positional intersection of the two logs rather
than by walking the full commit graph.
"""

import logging
from typing import Dict, Optional, Tuple

from ..api_clients.issues_client import IssuesAPIClient
from ..models import Branch, RepositorySnapshot, ServerBranchSet

logger = logging.getLogger(__name__)


def calculate_divergence(head: Branch, candidate: Branch) -> Optional[int]:
    """Score how far ``candidate`` has diverged from ``head``.

    Args:
        head: The branch currently checked out
        candidate: Branch to compare against

    Returns:
        Commits from HEAD's tip plus commits from the candidate's tip to the
        nearest shared commit, or None if the logs share no commit
    """
    head_positions: Dict[str, int] = {}
    for position, commit in enumerate(head.commit_log):
        head_positions.setdefault(commit, position)

    for candidate_index, commit in enumerate(candidate.commit_log):
        head_index = head_positions.get(commit)
        if head_index is not None:
            return head_index + candidate_index

    return None


def select_matching_branch(
    server_branches: ServerBranchSet, snapshot: RepositorySnapshot
) -> Optional[str]:
    """Choose the server branch corresponding to the snapshot's HEAD.

    Args:
        server_branches: Branches tracked by the server
        snapshot: Local repository state

    Returns:
        The local name of the best matching branch, the server's main branch
        if no tracked branch shares history with HEAD, or None if there is
        no HEAD
    """
    head = snapshot.head
    if head is None:
        logger.debug("No local HEAD, cannot match a server branch")
        return None

    tracked = {name.lower() for name in server_branches.branch_names}

    if head.name.lower() in tracked:
        logger.debug(f"Local branch '{head.name}' is tracked by the server")
        return head.name

    best: Optional[Tuple[int, Branch]] = None
    for branch in snapshot.branches:
        if branch.name == head.name or branch.name.lower() not in tracked:
            continue

        divergence = calculate_divergence(head, branch)
        if divergence is None:
            logger.debug(f"Branch '{branch.name}' shares no commits with HEAD")
            continue

        logger.debug(f"Branch '{branch.name}' diverges from HEAD by {divergence}")
        # Strict comparison keeps the first branch enumerated on ties
        if best is None or divergence < best[0]:
            best = (divergence, branch)

    if best is None:
        logger.debug(
            f"No tracked branch shares history with '{head.name}', "
            f"using main branch '{server_branches.main_branch_name}'"
        )
        return server_branches.main_branch_name

    return best[1].name


class BranchMatcher:
    """Matches the local HEAD to a branch of the bound server project."""

    def __init__(self, server_client: IssuesAPIClient):
        self.server_client = server_client

    async def find_matching_branch(
        self, project_key: str, snapshot: RepositorySnapshot
    ) -> Optional[str]:
        """Find the server branch matching the local HEAD.

        Args:
            project_key: Server project key
            snapshot: Local repository state

        Returns:
            Matching branch name, or None if the server is not connected or
            there is no local HEAD

        Raises:
            APIClientError: If the branch list cannot be retrieved
        """
        if not self.server_client.is_connected:
            logger.info("Not connected to the server, cannot match branches")
            return None

        server_branches = await self.server_client.get_project_branches(project_key)
        branch = select_matching_branch(server_branches, snapshot)

        if branch is not None:
            logger.info(f"Matched local HEAD to server branch '{branch}'")
        return branch
