"""Reconciliation services for matching local state against the issue server."""

from .branch_matcher import BranchMatcher, calculate_divergence, select_matching_branch
from .issue_matcher import IssueMatcher
from .project_root_calculator import ProjectRootCalculator
from .server_branch_provider import ServerBranchProvider
from .server_issue_finder import ServerIssueFinder
from .thread_guard import ThreadGuard, WrongThreadError

__all__ = [
    "BranchMatcher",
    "calculate_divergence",
    "select_matching_branch",
    "IssueMatcher",
    "ProjectRootCalculator",
    "ServerBranchProvider",
    "ServerIssueFinder",
    "ThreadGuard",
    "WrongThreadError",
]
