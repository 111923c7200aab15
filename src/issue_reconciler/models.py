"""
Data models shared by the reconciliation services.

Local git state and locally detected issues are immutable dataclass snapshots
built by the caller for a single request. Data reported by the server uses
Pydantic models so API responses can be validated on the way in.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Branch:
    """A local branch and its commit log (newest first)."""

    name: str
    commit_log: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RepositorySnapshot:
    """Point-in-time view of a local repository.

    ``branches`` includes ``head`` and is ordered; the order is the
    enumeration order used when breaking ties between candidate branches.
    """

    head: Optional[Branch]
    branches: Tuple[Branch, ...] = field(default_factory=tuple)


class ServerBranchSet(BaseModel):
    """Branches the server tracks for one project."""

    main_branch_name: str = Field(..., description="Name of the main branch")
    branch_names: List[str] = Field(
        default_factory=list, description="All branch names, main included"
    )


class IssueKind(Enum):
    """How a local issue's file-level status is known."""

    STANDARD = "standard"
    # Origin cannot represent an absent line; line 1 / column 1 may mean "whole file"
    AMBIGUOUS_FILE_LEVEL = "ambiguous_file_level"


@dataclass(frozen=True)
class LocalIssue:
    """An issue produced by local analysis.

    A ``file_path`` of None means a module-level issue, which also has no
    ``start_line``. A ``start_line`` of None means a file-level issue.
    """

    rule_id: Optional[str]
    file_path: Optional[str] = None
    start_line: Optional[int] = None
    line_hash: Optional[str] = None
    kind: IssueKind = IssueKind.STANDARD

    @classmethod
    def from_position(
        cls,
        rule_id: Optional[str],
        file_path: Optional[str],
        start_line: int,
        start_column: int,
        line_hash: Optional[str] = None,
    ) -> "LocalIssue":
        """Build an issue from an origin that always reports a position.

        Such origins flag whole-file issues as line 1, column 1, which is
        indistinguishable from a genuine issue at the start of the file.
        """
        kind = (
            IssueKind.AMBIGUOUS_FILE_LEVEL
            if start_line == 1 and start_column == 1
            else IssueKind.STANDARD
        )
        return cls(
            rule_id=rule_id,
            file_path=file_path,
            start_line=start_line,
            line_hash=line_hash,
            kind=kind,
        )

    @property
    def is_file_level(self) -> bool:
        return self.start_line is None

    @property
    def could_be_file_level(self) -> bool:
        return self.kind is IssueKind.AMBIGUOUS_FILE_LEVEL


class ServerIssue(BaseModel):
    """An issue as reported by the server."""

    key: Optional[str] = Field(None, description="Server issue key")
    rule_id: Optional[str] = Field(None, description="Rule identifier")
    file_path: Optional[str] = Field(
        None, description="Project-relative file path, None for module-level issues"
    )
    line_hash: Optional[str] = Field(None, description="Hash of the issue's line")
    start_line: Optional[int] = Field(
        None, description="First line of the issue, None for file-level issues"
    )
    status: Optional[str] = Field(None, description="Issue status")
    message: Optional[str] = Field(None, description="Issue message")

    @property
    def is_file_level(self) -> bool:
        return self.start_line is None
