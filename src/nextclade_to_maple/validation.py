from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = (
    "seqName",
    "alignmentStart",
    "alignmentEnd",
    "substitutions",
    "deletions",
    "missing",
    "nonACGTNs",
)


class ConfigurationError(ValueError):
    """Raised for malformed inputs that make the whole run invalid."""


def missing_columns(fieldnames: Iterable[str], required: Iterable[str] = REQUIRED_COLUMNS) -> List[str]:
    present = set(fieldnames)
    return [c for c in required if c not in present]


def check_required_columns(fieldnames: Optional[Iterable[str]], source: str) -> None:
    """Ensure a Nextclade TSV header has every column the converter reads."""
    if fieldnames is None:
        return
    absent = missing_columns(fieldnames)
    if absent:
        raise ConfigurationError(
            f"Required column(s) {', '.join(absent)} not found in header of {source}. "
            "Is this a Nextclade TSV (nextclade run --output-tsv)?"
        )


def get_column(row: Mapping[str, Optional[str]], column: str, *, line: int) -> str:
    """Return a field of a parsed TSV row, failing on short rows."""
    value = row.get(column)
    if value is None:
        raise ConfigurationError(f"Line {line}: required column {column} is missing a value")
    return value


def parse_count(value: str, column: str, *, line: int) -> int:
    """Parse a non-negative decimal integer field."""
    if not (value.isascii() and value.isdigit()):
        raise ConfigurationError(f"Line {line}: error parsing {column}: {value!r}")
    return int(value)
