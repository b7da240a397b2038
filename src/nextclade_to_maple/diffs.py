from __future__ import annotations

from typing import List, Sequence

from .models import MapleDiff


def aggregate_diffs(
    substitutions: Sequence[MapleDiff],
    deletions: Sequence[MapleDiff],
    missing: Sequence[MapleDiff],
    non_acgtns: Sequence[MapleDiff],
) -> List[MapleDiff]:
    """Merge the per-column diffs of one sample, ordered by start.

    The sort is stable, so diffs sharing a start keep column order
    (substitutions, deletions, missing, nonACGTNs). Overlapping or adjacent
    diffs are neither merged nor checked.
    """
    all_diffs: List[MapleDiff] = []
    all_diffs.extend(substitutions)
    all_diffs.extend(deletions)
    all_diffs.extend(missing)
    all_diffs.extend(non_acgtns)
    all_diffs.sort(key=lambda d: d.start)
    return all_diffs


def total_bases(diffs: Sequence[MapleDiff]) -> int:
    return sum(d.length for d in diffs)


def exceeds_max_substitutions(substitutions: Sequence[MapleDiff], max_substitutions: int) -> bool:
    # 0 disables the filter
    return max_substitutions > 0 and len(substitutions) > max_substitutions


def count_real_bases(alignment_start: int, alignment_end: int, missing: Sequence[MapleDiff]) -> int:
    """Aligned (1-based inclusive) bases that are not N."""
    return alignment_end - alignment_start + 1 - total_bases(missing)
