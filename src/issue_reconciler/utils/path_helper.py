"""Path matching helpers shared by the reconciliation services.

Local paths may use either separator and are compared against server paths
case-insensitively, always on whole path segments so that ``same.txt`` never
matches ``XXXsame.txt``.
"""

import re
from typing import List, Optional

_SEPARATORS = re.compile(r"[\\/]+")
_SEGMENT = re.compile(r"[^\\/]+")


def split_segments(path: str) -> List[str]:
    """Split a path on both separator styles, dropping empty segments."""
    return [segment for segment in _SEPARATORS.split(path) if segment]


def get_file_name(path: str) -> str:
    """Return the last segment of a path, or an empty string if it has none."""
    segments = split_segments(path)
    return segments[-1] if segments else ""


def is_path_suffix_match(candidate_tail: str, full_path: str) -> bool:
    """Check whether ``candidate_tail`` is a segment-aligned suffix of ``full_path``.

    Args:
        candidate_tail: Relative path expected at the end of ``full_path``
        full_path: Path to test

    Returns:
        True if the trailing segments of ``full_path`` equal the segments of
        ``candidate_tail``, ignoring case
    """
    tail = [segment.lower() for segment in split_segments(candidate_tail)]
    full = [segment.lower() for segment in split_segments(full_path)]

    if not tail or len(tail) > len(full):
        return False

    return full[-len(tail) :] == tail


def is_server_file_match(
    local_path: Optional[str], server_path: Optional[str]
) -> bool:
    """Check whether a server file path refers to a local file.

    Empty strings are treated the same as None: two module-level issues
    match each other but never a file-scoped one.
    """
    if not local_path and not server_path:
        return True
    if not local_path or not server_path:
        return False
    return is_path_suffix_match(server_path, local_path)


def _normalize(path: str) -> List[str]:
    normalized: List[str] = []
    for segment in split_segments(path):
        if segment == ".":
            continue
        if segment == "..":
            if normalized:
                normalized.pop()
            continue
        normalized.append(segment.lower())
    return normalized


def is_matching_path(path1: str, path2: str) -> bool:
    """Case-insensitive comparison of two paths after resolving ``.`` and ``..``.

    Raises:
        ValueError: If either path is empty
    """
    if not path1:
        raise ValueError("path1 cannot be empty")
    if not path2:
        raise ValueError("path2 cannot be empty")
    return _normalize(path1) == _normalize(path2)


def calculate_root(local_path: str, server_path: str) -> Optional[str]:
    """Strip ``server_path`` from the end of ``local_path``.

    The returned root keeps its trailing separator, so that joining it with
    ``server_path`` reproduces ``local_path``.

    Returns:
        The local root directory, or None if ``server_path`` is not a
        segment-aligned suffix of ``local_path``
    """
    if not is_path_suffix_match(server_path, local_path):
        return None

    tail_length = len(split_segments(server_path))
    local_segments = list(_SEGMENT.finditer(local_path))
    tail_start = local_segments[-tail_length].start()
    return local_path[:tail_start]


def generate_component_key(local_path: str, root: str, project_key: str) -> str:
    """Build the server component key of a local file.

    Args:
        local_path: Absolute local file path
        root: Local directory corresponding to the server project root
        project_key: Server project key

    Returns:
        ``"{project_key}:{relative/path}"`` with forward slashes

    Raises:
        ValueError: If ``local_path`` is not located under ``root``
    """
    local_segments = split_segments(local_path)
    root_segments = split_segments(root)

    prefix = [segment.lower() for segment in local_segments[: len(root_segments)]]
    if len(local_segments) <= len(root_segments) or prefix != [
        segment.lower() for segment in root_segments
    ]:
        raise ValueError(f"File '{local_path}' is not under root '{root}'")

    relative_path = "/".join(local_segments[len(root_segments) :])
    return f"{project_key}:{relative_path}"
