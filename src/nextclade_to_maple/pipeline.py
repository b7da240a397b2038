from __future__ import annotations

import csv
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, TextIO, Tuple

from tqdm import tqdm

from .diffs import aggregate_diffs, count_real_bases, exceeds_max_substitutions
from .emit import write_masked
from .mask import MaskIndex, load_mask_bed
from .models import UNKNOWN, MapleDiff, SampleRecord
from .names import load_rename_table, resolve_name
from .notation import deletions_to_diffs, missing_to_diffs, non_acgtns_to_diffs, substitutions_to_diffs
from .utils import is_stdio, open_input, open_output, write_json
from .validation import ConfigurationError, check_required_columns, get_column, parse_count

logger = logging.getLogger(__name__)

WRITTEN = "samples_written"
SKIPPED_UNALIGNED = "skipped_unaligned"
SKIPPED_PRUNED = "skipped_pruned"
SKIPPED_MAX_SUBSTITUTIONS = "skipped_max_substitutions"
SKIPPED_MIN_REAL = "skipped_min_real"


@dataclass(frozen=True)
class ConvertConfig:
    """Run configuration; empty paths mean stdin/stdout or "not used"."""

    nextclade_file: str = ""
    maple_file: str = ""
    mask_bed_file: str = ""
    rename_or_prune_file: str = ""
    max_substitutions: int = 0  # 0 = unlimited
    min_real: int = 0  # 0 = unlimited
    ref_len: int = 0  # 0 = unknown, no trailing N run
    progress: bool = False
    summary_json: Optional[str] = None


def sample_from_row(row: Mapping[str, Optional[str]], name: str, *, line: int) -> SampleRecord:
    start = parse_count(get_column(row, "alignmentStart", line=line), "alignmentStart", line=line)
    end = parse_count(get_column(row, "alignmentEnd", line=line), "alignmentEnd", line=line)
    if end < start:
        raise ConfigurationError(f"Line {line}: alignmentEnd {end} precedes alignmentStart {start}")
    return SampleRecord(
        name=name,
        alignment_start=start,
        alignment_end=end,
        substitutions=get_column(row, "substitutions", line=line),
        deletions=get_column(row, "deletions", line=line),
        missing=get_column(row, "missing", line=line),
        non_acgtns=get_column(row, "nonACGTNs", line=line),
    )


def convert_row(
    row: Mapping[str, Optional[str]],
    out: TextIO,
    *,
    rename_table: Optional[Mapping[str, str]] = None,
    mask_index: Optional[MaskIndex] = None,
    max_substitutions: int = 0,
    min_real: int = 0,
    ref_len: int = 0,
    line: int = 0,
) -> Tuple[str, int]:
    """Convert one Nextclade row into a MAPLE block written to ``out``.

    Returns
    -------
    outcome:
        ``samples_written`` or the ``skipped_*`` reason. Skipped samples write
        nothing.
    n_lines:
        Number of diff lines written (the ``>`` header is not counted).
    """
    # Nextclade leaves alignmentStart empty when the sequence could not be aligned.
    if get_column(row, "alignmentStart", line=line) == "":
        logger.debug("Line %d: no alignment; skipping", line)
        return SKIPPED_UNALIGNED, 0

    seq_name = get_column(row, "seqName", line=line)
    name = resolve_name(rename_table, seq_name)
    if name is None:
        logger.debug("Line %d: %s not in rename/prune table; skipping", line, seq_name)
        return SKIPPED_PRUNED, 0

    sample = sample_from_row(row, name, line=line)
    substitutions = substitutions_to_diffs(sample.substitutions)
    if exceeds_max_substitutions(substitutions, max_substitutions):
        logger.debug("Line %d: %s has %d substitutions; skipping", line, seq_name, len(substitutions))
        return SKIPPED_MAX_SUBSTITUTIONS, 0

    deletions = deletions_to_diffs(sample.deletions)
    missing = missing_to_diffs(sample.missing)
    num_real = count_real_bases(sample.alignment_start, sample.alignment_end, missing)
    if num_real < min_real:
        logger.debug("Line %d: %s has %d real bases; skipping", line, seq_name, num_real)
        return SKIPPED_MIN_REAL, 0
    non_acgtns = non_acgtns_to_diffs(sample.non_acgtns)

    all_diffs = aggregate_diffs(substitutions, deletions, missing, non_acgtns)

    out.write(f">{sample.name}\n")
    n_lines = 0
    # Reference bases before the alignment are unknown.
    if sample.alignment_start > 1:
        n_lines += write_masked(out, MapleDiff(0, sample.alignment_start - 1, UNKNOWN), mask_index)
    for diff in all_diffs:
        n_lines += write_masked(out, diff, mask_index)
    # Likewise after it, when the reference length is known.
    if ref_len > 0 and sample.alignment_end < ref_len:
        n_lines += write_masked(
            out, MapleDiff(sample.alignment_end, ref_len - sample.alignment_end, UNKNOWN), mask_index
        )
    return WRITTEN, n_lines


def _source_name(path: str, stdio: str) -> str:
    return stdio if is_stdio(path) else path


def nextclade_to_maple(config: ConvertConfig) -> Dict[str, Any]:
    """Convert a Nextclade TSV into MAPLE according to ``config``.

    The rename/prune table and mask index are loaded once before rows are read.
    Any malformed input aborts the run with :class:`ConfigurationError`.

    Returns a summary dict of run parameters and counts, also written to
    ``config.summary_json`` when set.
    """
    t0 = time.time()
    rename_table = load_rename_table(config.rename_or_prune_file)
    mask_index = load_mask_bed(config.mask_bed_file)

    counts = {
        "rows_total": 0,
        WRITTEN: 0,
        SKIPPED_UNALIGNED: 0,
        SKIPPED_PRUNED: 0,
        SKIPPED_MAX_SUBSTITUTIONS: 0,
        SKIPPED_MIN_REAL: 0,
        "diff_lines_written": 0,
    }

    source = _source_name(config.nextclade_file, "stdin")
    with open_input(config.nextclade_file) as fh_in:
        reader = csv.DictReader(fh_in, delimiter="\t")
        if reader.fieldnames is None:
            logger.warning("Input %s is empty; no samples to convert.", source)
        check_required_columns(reader.fieldnames, source)

        with open_output(config.maple_file) as fh_out:
            rows: Iterable[Dict[str, Optional[str]]] = reader
            if config.progress:
                rows = tqdm(rows, unit="sample", desc="Converting samples")
            for row in rows:
                counts["rows_total"] += 1
                outcome, n_lines = convert_row(
                    row,
                    fh_out,
                    rename_table=rename_table,
                    mask_index=mask_index,
                    max_substitutions=config.max_substitutions,
                    min_real=config.min_real,
                    ref_len=config.ref_len,
                    line=reader.line_num,
                )
                counts[outcome] += 1
                counts["diff_lines_written"] += n_lines

    dt = time.time() - t0
    logger.info(
        "Wrote %d of %d samples (%d unaligned, %d pruned, %d over max substitutions, %d under min real) in %.1fs",
        counts[WRITTEN],
        counts["rows_total"],
        counts[SKIPPED_UNALIGNED],
        counts[SKIPPED_PRUNED],
        counts[SKIPPED_MAX_SUBSTITUTIONS],
        counts[SKIPPED_MIN_REAL],
        dt,
    )

    summary = {
        "nextclade_file": source,
        "maple_file": _source_name(config.maple_file, "stdout"),
        "mask_bed_file": config.mask_bed_file or None,
        "mask_intervals": len(mask_index) if mask_index is not None else 0,
        "rename_or_prune_file": config.rename_or_prune_file or None,
        "max_substitutions": int(config.max_substitutions),
        "min_real": int(config.min_real),
        "ref_len": int(config.ref_len),
        "counts": counts,
        "runtime_seconds": float(dt),
    }
    if config.summary_json:
        summary_path = Path(config.summary_json)
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        write_json(summary_path, summary)
    return summary
