"""Change summaries between two states.

Used by the Store to describe state writes in debug logs. States are turned
back into plain collections and compared with DeepDiff, so paths are reported
in DeepDiff's ``root['key'][index]`` notation.
"""

from __future__ import annotations

from typing import Any

from deepdiff import DeepDiff

from unistore.util.immutable import to_plain


def diff_states(previous: Any, current: Any) -> DeepDiff:
    """Compare two states.

    Args:
        previous: The state before the write
        current: The state after the write

    Returns:
        The DeepDiff between the plain forms of both states; empty if equal
    """
    if previous is current:
        return DeepDiff({}, {})
    return DeepDiff(to_plain(previous), to_plain(current))


def changed_paths(previous: Any, current: Any) -> list[str]:
    """List the paths that differ between two states, sorted."""
    paths: set[str] = set()
    for changes in diff_states(previous, current).values():
        paths.update(str(path) for path in changes)
    return sorted(paths)
