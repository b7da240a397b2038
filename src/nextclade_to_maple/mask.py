from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

import numpy as np

from .utils import open_textmaybe_gzip
from .validation import ConfigurationError

logger = logging.getLogger(__name__)

_BED_HEADER_PREFIXES = ("track", "browser")


@dataclass(frozen=True, eq=False)
class MaskIndex:
    """Static overlap index over half-open mask intervals on one reference.

    Intervals are kept sorted by (start, end). ``max_ends[i]`` is the largest end
    among intervals ``0..i``, which is non-decreasing and therefore searchable; it
    bounds the scan from the left even when long intervals contain shorter ones.
    """

    chrom: str
    starts: np.ndarray
    ends: np.ndarray
    max_ends: np.ndarray

    def __len__(self) -> int:
        return int(self.starts.size)

    def overlaps(self, query_start: int, query_len: int) -> List[Tuple[int, int]]:
        """All intervals intersecting ``[query_start, query_start + query_len)``.

        Intervals are returned as stored (not clipped to the query), in ascending
        order of start.
        """
        if query_len <= 0 or self.starts.size == 0:
            return []
        query_end = query_start + query_len
        lo = int(np.searchsorted(self.max_ends, query_start, side="right"))
        hi = int(np.searchsorted(self.starts, query_end, side="left"))
        out: List[Tuple[int, int]] = []
        for i in range(lo, hi):
            start, end = int(self.starts[i]), int(self.ends[i])
            if end > query_start and end > start:
                out.append((start, end))
        return out


def build_mask_index(
    records: Iterable[Tuple[str, int, int]], *, source: str = "mask records"
) -> Optional[MaskIndex]:
    """Build a MaskIndex from 0-based half-open ``(chrom, start, end)`` records.

    Returns None when there are no records. MAPLE diffs are relative to a single
    reference, so records naming more than one chromosome are rejected.
    """
    first_chrom: Optional[str] = None
    starts: List[int] = []
    ends: List[int] = []
    for chrom, start, end in records:
        if first_chrom is None:
            first_chrom = chrom
        elif chrom != first_chrom:
            raise ConfigurationError(
                f"MAPLE can have only one reference, but found {first_chrom} and {chrom} in {source}"
            )
        if start < 0 or end < start:
            raise ConfigurationError(f"Invalid mask interval {chrom}:{start}-{end} in {source}")
        starts.append(start)
        ends.append(end)

    if first_chrom is None:
        return None

    start_arr = np.asarray(starts, dtype=np.int64)
    end_arr = np.asarray(ends, dtype=np.int64)
    order = np.lexsort((end_arr, start_arr))
    start_arr = start_arr[order]
    end_arr = end_arr[order]
    max_end_arr = np.maximum.accumulate(end_arr)
    for arr in (start_arr, end_arr, max_end_arr):
        arr.setflags(write=False)
    return MaskIndex(chrom=first_chrom, starts=start_arr, ends=end_arr, max_ends=max_end_arr)


def _parse_bed_coord(value: str, what: str, n: int, source: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise ConfigurationError(f"Line {n} of {source}: expected integer {what}, got {value!r}")
    return int(value)


def iter_bed_records(fh: TextIO, *, source: str = "BED") -> Iterator[Tuple[str, int, int]]:
    """Yield ``(chrom, start, end)`` from BED3+ text; extra columns are ignored.

    Blank lines, ``#`` comments and ``track``/``browser`` header lines are
    skipped. The last line need not end with a newline.
    """
    for n, line in enumerate(fh, start=1):
        line = line.rstrip("\r\n")
        if not line.strip() or line.startswith("#") or line.startswith(_BED_HEADER_PREFIXES):
            continue
        fields = line.split("\t")
        if len(fields) < 3:
            raise ConfigurationError(
                f"Line {n} of {source}: BED requires at least 3 columns, got {len(fields)}"
            )
        start = _parse_bed_coord(fields[1], "start", n, source)
        end = _parse_bed_coord(fields[2], "end", n, source)
        yield fields[0], start, end


def load_mask_bed(path: Optional[str | Path]) -> Optional[MaskIndex]:
    """Load mask regions from a BED file; an empty path means no masking."""
    if not path:
        return None
    with open_textmaybe_gzip(path, "rt") as fh:
        index = build_mask_index(iter_bed_records(fh, source=str(path)), source=str(path))
    if index is None:
        logger.warning("Mask BED %s contains no intervals; nothing will be masked.", path)
    else:
        logger.info("Loaded %d mask intervals on %s from %s", len(index), index.chrom, path)
    return index
