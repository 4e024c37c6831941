"""Release tag ordering.

Tags are split into alternating digit runs and non-digit runs. Digit runs
compare numerically, non-digit runs compare by code point, and a tag that
is a strict segment prefix of another sorts lower. This gives the usual
dotted-version order: v1.2.10 > v1.2.9 > v1.2 > v1.
"""

import re
from enum import Enum
from functools import cmp_to_key
from typing import Iterable, List, Optional, Union

_SEGMENT_PATTERN = re.compile(r"([0-9]+)|([^0-9]+)")


class Ordering(Enum):
    """Result of comparing two release tags."""
    LESS = -1
    EQUAL = 0
    GREATER = 1


def split_segments(tag: str) -> List[Union[int, str]]:
    """
    Split a tag into digit and non-digit segments.

    Args:
        tag: Release tag (e.g., "v1.2.10")

    Returns:
        Segments with digit runs converted to int, e.g. ["v", 1, ".", 2, ".", 10]
    """
    return [
        int(digits) if digits else text
        for digits, text in _SEGMENT_PATTERN.findall(tag)
    ]


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_versions(a: str, b: str) -> Ordering:
    """
    Compare two release tags.

    Args:
        a: First tag
        b: Second tag

    Returns:
        Ordering of a relative to b
    """
    if a == b:
        return Ordering.EQUAL

    for left, right in zip(split_segments(a), split_segments(b)):
        left_is_num = isinstance(left, int)
        right_is_num = isinstance(right, int)
        if left_is_num != right_is_num:
            # A number sorts before text at the same position
            return Ordering.LESS if left_is_num else Ordering.GREATER
        result = _cmp(left, right)
        if result:
            return Ordering(result)

    result = _cmp(len(split_segments(a)), len(split_segments(b)))
    if result:
        return Ordering(result)

    # Same segments with different spelling, e.g. "v01" vs "v1"
    return Ordering(_cmp(a, b))


def is_newer(candidate: str, current: Optional[str]) -> bool:
    """
    Check whether a candidate tag is newer than the stored one.

    Args:
        candidate: Tag found upstream
        current: Last processed tag, or None if nothing was processed yet

    Returns:
        True if candidate should be processed
    """
    if current is None:
        return True
    return compare_versions(candidate, current) is Ordering.GREATER


version_sort_key = cmp_to_key(lambda a, b: compare_versions(a, b).value)


def select_latest(tags: Iterable[str], prefix: str) -> Optional[str]:
    """
    Pick the highest tag that starts with the given prefix.

    Args:
        tags: Candidate tags
        prefix: Literal prefix an eligible tag must start with

    Returns:
        Highest eligible tag, or None if no tag matches
    """
    eligible = [tag for tag in tags if tag.startswith(prefix)]
    if not eligible:
        return None
    return max(eligible, key=version_sort_key)
