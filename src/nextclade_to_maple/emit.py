from __future__ import annotations

import logging
from typing import Iterator, Optional, TextIO

from .mask import MaskIndex
from .models import MapleDiff

logger = logging.getLogger(__name__)


def format_diff(diff: MapleDiff) -> str:
    """One MAPLE line; position is written 1-based, length only for n/- runs."""
    if diff.is_run:
        return f"{diff.symbol}\t{diff.start + 1}\t{diff.length}"
    return f"{diff.symbol}\t{diff.start + 1}"


def split_masked(diff: MapleDiff, mask_index: Optional[MaskIndex]) -> Iterator[MapleDiff]:
    """Yield the maximal parts of ``diff`` not covered by any mask interval.

    Parts come out left to right. A diff without overlapping mask intervals is
    yielded unchanged; one that is fully masked yields nothing.
    """
    if mask_index is None:
        yield diff
        return
    overlaps = mask_index.overlaps(diff.start, diff.length)
    if not overlaps:
        yield diff
        return

    cursor = diff.start
    remaining = diff.length
    for mask_start, mask_end in overlaps:
        if remaining <= 0:
            break
        if mask_end <= cursor:
            # nested in an interval already consumed
            continue
        if cursor < mask_start:
            yield MapleDiff(start=cursor, length=mask_start - cursor, symbol=diff.symbol)
        # mask_end may lie past the diff's end; remaining caps what is consumed
        remaining -= min(mask_end - cursor, remaining)
        cursor = mask_end

    if remaining > 0:
        yield MapleDiff(start=cursor, length=remaining, symbol=diff.symbol)


def write_masked(stream: TextIO, diff: MapleDiff, mask_index: Optional[MaskIndex]) -> int:
    """Write the unmasked parts of ``diff``; returns the number of lines written."""
    n = 0
    for part in split_masked(diff, mask_index):
        stream.write(format_diff(part) + "\n")
        n += 1
    return n
