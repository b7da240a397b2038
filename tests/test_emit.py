import io
import random
from typing import List, Tuple

import pytest

from nextclade_to_maple.emit import format_diff, split_masked, write_masked
from nextclade_to_maple.mask import build_mask_index
from nextclade_to_maple.models import MapleDiff


def _mask(*intervals: Tuple[int, int]):
    return build_mask_index([("ref", s, e) for s, e in intervals])


def _ranges(parts: List[MapleDiff]) -> List[Tuple[int, int]]:
    return [(p.start, p.end) for p in parts]


def _unmasked_runs(diff: MapleDiff, intervals: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Brute force: positions of diff not in any interval, grouped into runs."""
    masked = set()
    for s, e in intervals:
        masked.update(range(s, e))
    runs: List[Tuple[int, int]] = []
    for pos in range(diff.start, diff.end):
        if pos in masked:
            continue
        if runs and runs[-1][1] == pos:
            runs[-1] = (runs[-1][0], pos + 1)
        else:
            runs.append((pos, pos + 1))
    return runs


def test_format_diff():
    assert format_diff(MapleDiff(240, 1, "t")) == "t\t241"
    assert format_diff(MapleDiff(4320, 1, "y")) == "y\t4321"
    assert format_diff(MapleDiff(122, 3, "-")) == "-\t123\t3"
    assert format_diff(MapleDiff(0, 54, "n")) == "n\t1\t54"


def test_no_mask_passes_diff_through():
    diff = MapleDiff(122, 3, "-")
    assert list(split_masked(diff, None)) == [diff]
    assert list(split_masked(diff, _mask((0, 100), (125, 200)))) == [diff]


def test_fully_covered_diff_is_dropped():
    assert list(split_masked(MapleDiff(10, 5, "n"), _mask((0, 100)))) == []


def test_exact_mask_drops_diff():
    assert list(split_masked(MapleDiff(10, 5, "n"), _mask((10, 15)))) == []


def test_mask_shifted_left_leaves_tail():
    assert list(split_masked(MapleDiff(10, 5, "n"), _mask((9, 14)))) == [MapleDiff(14, 1, "n")]


def test_mask_shifted_right_leaves_head():
    assert list(split_masked(MapleDiff(10, 5, "n"), _mask((11, 16)))) == [MapleDiff(10, 1, "n")]


def test_masks_inside_diff_split_it():
    parts = list(split_masked(MapleDiff(0, 100, "n"), _mask((10, 20), (30, 40), (95, 150))))
    assert _ranges(parts) == [(0, 10), (20, 30), (40, 95)]
    assert all(p.symbol == "n" for p in parts)


def test_mask_end_past_diff_end_caps_consumption():
    parts = list(split_masked(MapleDiff(0, 10, "-"), _mask((5, 50))))
    assert parts == [MapleDiff(0, 5, "-")]


def test_overlapping_and_nested_masks():
    diff = MapleDiff(0, 50, "n")
    intervals = [(5, 30), (10, 20), (25, 35), (40, 41)]
    parts = list(split_masked(diff, _mask(*intervals)))
    assert _ranges(parts) == [(0, 5), (35, 40), (41, 50)]


def test_masked_substitution():
    assert list(split_masked(MapleDiff(240, 1, "t"), _mask((240, 241)))) == []
    assert list(split_masked(MapleDiff(240, 1, "t"), _mask((239, 240), (241, 242)))) == [MapleDiff(240, 1, "t")]


def test_random_diffs_match_brute_force():
    rng = random.Random(1234)
    for _ in range(500):
        intervals = []
        for _ in range(rng.randint(1, 6)):
            s = rng.randint(0, 120)
            intervals.append((s, s + rng.randint(0, 30)))
        start = rng.randint(0, 100)
        diff = MapleDiff(start, rng.randint(1, 40), "n")
        parts = list(split_masked(diff, _mask(*intervals)))
        assert _ranges(parts) == _unmasked_runs(diff, intervals), (diff, intervals)


def test_write_masked_counts_lines():
    out = io.StringIO()
    n = write_masked(out, MapleDiff(0, 100, "n"), _mask((10, 20)))
    assert n == 2
    assert out.getvalue() == "n\t1\t10\nn\t21\t80\n"


@pytest.mark.parametrize("mask", [None, _mask((500, 600))])
def test_write_masked_unmasked(mask):
    out = io.StringIO()
    assert write_masked(out, MapleDiff(240, 1, "t"), mask) == 1
    assert out.getvalue() == "t\t241\n"
