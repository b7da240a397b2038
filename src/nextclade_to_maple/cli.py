from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .pipeline import ConvertConfig, nextclade_to_maple


def _setup_logging(verbosity: int, *, logfile: Optional[Path] = None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)

    if logfile is not None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(fh)


def _path_exists(p: str) -> str:
    if p != "-" and not Path(p).exists():
        raise argparse.ArgumentTypeError(f"Path does not exist: {p}")
    return p


def _non_negative_int(s: str) -> int:
    try:
        v = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a non-negative integer, got {s!r}") from None
    if v < 0:
        raise argparse.ArgumentTypeError(f"Expected a non-negative integer, got {s!r}")
    return v


def _handle_error(err: Exception) -> int:
    msg = f"{err.__class__.__name__}: {err}"
    sys.stderr.write(msg + "\n")
    return 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="nextclade-to-maple",
        description=(
            "Convert Nextclade TSV (nextclade run --output-tsv) to MAPLE format, "
            "optionally renaming/pruning samples and masking regions from a BED file."
        ),
    )
    p.add_argument("--version", action="version", version=f"nextclade-to-maple {__version__}")

    p.add_argument(
        "-i",
        "--input",
        default="",
        type=_path_exists,
        help="Path to the Nextclade TSV file, optionally .gz (default: stdin).",
    )
    p.add_argument(
        "-o",
        "--output",
        default="",
        help="Path to the MAPLE file, .gz to compress (default: stdout).",
    )
    p.add_argument(
        "-r",
        "--ref-len",
        "--ref_len",
        dest="ref_len",
        type=_non_negative_int,
        default=0,
        help="Length of the reference sequence (default: unknown, no Ns after end of alignment).",
    )
    p.add_argument(
        "--max-substitutions",
        "--max_substitutions",
        dest="max_substitutions",
        type=_non_negative_int,
        default=0,
        help="Maximum number of substitutions to retain a sample in output (default: 0 = unlimited).",
    )
    p.add_argument(
        "--min-real",
        "--min_real",
        dest="min_real",
        type=_non_negative_int,
        default=0,
        help="Minimum number of real (non-N aligned) bases to retain a sample in output.",
    )
    p.add_argument(
        "--rename-or-prune",
        "--rename_or_prune",
        dest="rename_or_prune",
        default="",
        type=_path_exists,
        help=(
            "Two-column tab-separated file mapping old names to new names. "
            "Samples whose names are not in the file are dropped."
        ),
    )
    p.add_argument(
        "--mask-bed",
        "--mask_bed",
        dest="mask_bed",
        default="",
        type=_path_exists,
        help="BED file (3+ columns, one chromosome) with regions to exclude from the output.",
    )
    p.add_argument(
        "--summary-json",
        default=None,
        help="Write run counts (samples written/skipped by reason) to this JSON file.",
    )
    p.add_argument("--progress", action="store_true", help="Show a progress bar on stderr.")
    p.add_argument("--log-file", default=None, help="Also write log messages to this file.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")
    return p


def config_from_args(args: argparse.Namespace) -> ConvertConfig:
    return ConvertConfig(
        nextclade_file=args.input,
        maple_file=args.output,
        mask_bed_file=args.mask_bed,
        rename_or_prune_file=args.rename_or_prune,
        max_substitutions=int(args.max_substitutions),
        min_real=int(args.min_real),
        ref_len=int(args.ref_len),
        progress=bool(args.progress),
        summary_json=args.summary_json,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose, logfile=Path(args.log_file) if args.log_file else None)

    logger = logging.getLogger("nextclade_to_maple")
    logger.info("nextclade-to-maple %s", __version__)

    try:
        nextclade_to_maple(config_from_args(args))
    except (ValueError, OSError) as e:
        return _handle_error(e)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
