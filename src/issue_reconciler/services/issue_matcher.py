"""Decides whether a local issue and a server issue are the same finding."""

from typing import Iterable, Optional

from ..models import LocalIssue, ServerIssue
from ..utils.path_helper import is_server_file_match


class IssueMatcher:
    """Heuristic matching of local issues against server issues.

    Rule and file must agree. File-level issues then match each other
    regardless of line and hash; otherwise the start line or the line hash
    must agree. Local issues that may be file-level (line 1, column 1 from
    origins that cannot express "no line") are tried both ways.
    """

    def is_likely_match(self, local: LocalIssue, server: ServerIssue) -> bool:
        if not self._is_same_rule(local.rule_id, server.rule_id):
            return False

        if not is_server_file_match(local.file_path, server.file_path):
            return False

        if local.is_file_level or local.could_be_file_level:
            if server.is_file_level:
                return True
            if local.is_file_level:
                return False
        elif server.is_file_level:
            return False

        return local.start_line == server.start_line or self._is_same_hash(
            local.line_hash, server.line_hash
        )

    def find_first_likely_match(
        self, local: LocalIssue, server_issues: Iterable[ServerIssue]
    ) -> Optional[ServerIssue]:
        """Return the first server issue matching ``local``, in the order given."""
        return next(
            (issue for issue in server_issues if self.is_likely_match(local, issue)),
            None,
        )

    @staticmethod
    def _is_same_rule(local_rule: Optional[str], server_rule: Optional[str]) -> bool:
        # A missing rule id never matches, not even another missing one
        if local_rule is None or server_rule is None:
            return False
        return local_rule.lower() == server_rule.lower()

    @staticmethod
    def _is_same_hash(local_hash: Optional[str], server_hash: Optional[str]) -> bool:
        return bool(local_hash) and local_hash == server_hash
