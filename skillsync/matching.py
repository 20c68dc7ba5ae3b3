"""
Fuzzy label matching for spreadsheet imports.

Collapses near-duplicate spellings of a label (typos, casing) onto a label
the organization already knows about.
"""

from typing import Sequence

from rapidfuzz.distance import Levenshtein

# Maximum edit distance relative to the longer of the two strings
MATCH_THRESHOLD = 0.25


def resolve_label(value: str, candidates: Sequence[str], threshold: float = MATCH_THRESHOLD) -> str:
    """
    Resolve a freeform label to the closest known candidate.

    Comparison is case-insensitive. A candidate qualifies when its edit
    distance is within `threshold` of the longer string. Among qualifying
    candidates the smallest distance wins; on equal distance the earliest
    candidate is kept.

    Args:
        value: Raw label from the import
        candidates: Canonical labels already accepted, in priority order
        threshold: Maximum distance / max(len) ratio that still qualifies

    Returns:
        A verbatim candidate, or `value` unchanged when nothing qualifies
    """
    folded = value.lower()
    best = value
    best_distance = None

    for candidate in candidates:
        other = candidate.lower()
        distance = Levenshtein.distance(folded, other)
        longest = max(len(folded), len(other))
        ratio = distance / longest if longest else 0.0
        if ratio > threshold:
            continue
        if best_distance is None or distance < best_distance:
            best = candidate
            best_distance = distance

    return best
