"""
Git snapshot service for server branch matching.

Reads the local branches of a git working copy and their first-parent commit
logs through the git CLI, producing the immutable RepositorySnapshot that
branch matching operates on.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..models import Branch, RepositorySnapshot
from ..utils.git_runner import run_git_command

logger = logging.getLogger(__name__)

_HEADS_PREFIX = "refs/heads/"


class GitSnapshotService:
    """Builds repository snapshots from a local git working copy."""

    def __init__(self, codebase_dir: Path):
        """Initialize the git snapshot service.

        Args:
            codebase_dir: Any directory inside the git working copy
        """
        self.codebase_dir = Path(codebase_dir)
        self._git_available: Optional[bool] = None

    def is_git_available(self) -> bool:
        """Check if git is available and this is a git repository."""
        if self._git_available is not None:
            return self._git_available

        try:
            result = run_git_command(
                ["git", "rev-parse", "--git-dir"],
                cwd=self.codebase_dir,
                check=False,
                timeout=5,
            )
            self._git_available = result.returncode == 0
        except (
            subprocess.TimeoutExpired,
            FileNotFoundError,
            NotADirectoryError,
            subprocess.SubprocessError,
        ):
            self._git_available = False
        return self._git_available

    def get_repo_root(self) -> Optional[Path]:
        """Get the top-level directory of the working copy, None outside git."""
        if not self.is_git_available():
            return None

        result = run_git_command(
            ["git", "rev-parse", "--show-toplevel"], cwd=self.codebase_dir, check=False
        )
        if result.returncode != 0 or not result.stdout.strip():
            return None
        return Path(result.stdout.strip())

    def get_current_branch(self) -> Optional[str]:
        """Get the checked out branch, None in detached HEAD state."""
        result = run_git_command(
            ["git", "branch", "--show-current"], cwd=self.codebase_dir
        )
        branch = result.stdout.strip()
        return branch or None

    def get_local_branches(self) -> List[str]:
        """Get local branch names sorted by ref name."""
        result = run_git_command(
            [
                "git",
                "for-each-ref",
                "--sort=refname",
                "--format=%(refname)",
                "refs/heads",
            ],
            cwd=self.codebase_dir,
        )
        # Full ref names stay unambiguous when a tag shares the branch name
        return [
            line.strip()[len(_HEADS_PREFIX) :]
            for line in result.stdout.splitlines()
            if line.strip().startswith(_HEADS_PREFIX)
        ]

    def get_commit_log(self, branch: str, max_count: int = 1000) -> List[str]:
        """Get the first-parent commit log of a local branch, newest first."""
        result = run_git_command(
            [
                "git",
                "rev-list",
                "--first-parent",
                f"--max-count={max_count}",
                f"{_HEADS_PREFIX}{branch}",
                "--",
            ],
            cwd=self.codebase_dir,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_snapshot(self, max_commits: int = 1000) -> RepositorySnapshot:
        """Capture the local branches and their commit logs.

        Args:
            max_commits: Maximum commits read per branch

        Returns:
            Repository snapshot; its head is None in detached HEAD state, for
            an unborn branch, or if git could not be queried
        """
        if not self.is_git_available():
            return RepositorySnapshot(head=None)

        try:
            current_branch = self.get_current_branch()
            branches = tuple(
                Branch(name=name, commit_log=tuple(self.get_commit_log(name, max_commits)))
                for name in self.get_local_branches()
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Failed to read git branches in {self.codebase_dir}: {e}")
            return RepositorySnapshot(head=None)

        head = next((b for b in branches if b.name == current_branch), None)
        logger.debug(
            f"Captured {len(branches)} branches, HEAD is "
            f"{head.name if head else 'detached'}"
        )
        return RepositorySnapshot(head=head, branches=branches)
