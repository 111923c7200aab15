"""
Git command runner with dubious ownership handling.

Git refuses to operate on repositories owned by another user (sudo, Docker,
CI checkouts) unless the directory is listed in ``safe.directory``. Commands
run through this module mark the working directory as safe for that single
invocation.
"""

import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional


def get_git_environment(project_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands run in ``project_dir``.

    Existing ``GIT_CONFIG_KEY_n``/``GIT_CONFIG_VALUE_n`` pairs from the calling
    environment are shifted up by one to make room for ``safe.directory``.

    Args:
        project_dir: Path to the project directory

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()

    existing_count = int(os.environ.get("GIT_CONFIG_COUNT", "0") or 0)
    for idx in reversed(range(existing_count)):
        key = os.environ.get(f"GIT_CONFIG_KEY_{idx}")
        if key is None:
            continue
        env[f"GIT_CONFIG_KEY_{idx + 1}"] = key
        env[f"GIT_CONFIG_VALUE_{idx + 1}"] = os.environ.get(
            f"GIT_CONFIG_VALUE_{idx}", ""
        )

    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(Path(project_dir).resolve())
    env["GIT_CONFIG_COUNT"] = str(existing_count + 1)

    return env


def run_git_command(
    cmd: List[str],
    cwd: Path,
    check: bool = True,
    timeout: Optional[float] = 10,
) -> subprocess.CompletedProcess:
    """
    Run a git command and capture its text output.

    Args:
        cmd: Git command as a list (e.g., ["git", "status"])
        cwd: Working directory for the command
        check: Whether to raise CalledProcessError on non-zero exit
        timeout: Optional timeout in seconds

    Returns:
        CompletedProcess instance with the command result

    Raises:
        ValueError: If the command is not a git command
        subprocess.CalledProcessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout is exceeded
    """
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")

    return subprocess.run(
        cmd,
        cwd=cwd,
        check=check,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=get_git_environment(cwd),
    )
