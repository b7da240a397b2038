from __future__ import annotations

from dataclasses import dataclass

UNKNOWN = "n"
DELETION = "-"


@dataclass(frozen=True)
class MapleDiff:
    """A single difference from the reference.

    Coordinates are 0-based half-open in internal representation; MAPLE output
    is 1-based.

    Attributes
    ----------
    start:
        0-based reference position of the first affected base.
    length:
        Number of reference bases covered (>= 1).
    symbol:
        Lowercase base (``a/c/g/t`` or an IUPAC ambiguity code), ``n`` for an
        unknown run, or ``-`` for a deletion.
    """

    start: int
    length: int
    symbol: str

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def is_run(self) -> bool:
        """True for symbols written with an explicit length (``n`` and ``-``)."""
        return self.symbol in (UNKNOWN, DELETION)


@dataclass(frozen=True)
class SampleRecord:
    """Fields of one Nextclade row needed for conversion (positions 1-based)."""

    name: str
    alignment_start: int
    alignment_end: int
    substitutions: str
    deletions: str
    missing: str
    non_acgtns: str
