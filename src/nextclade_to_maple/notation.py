"""Parsers for the positional notations of Nextclade TSV diff columns.

Each column has its own compact, comma-separated notation (1-based positions):

- ``substitutions``: ``C241T,T670G``
- ``deletions``: ``123-125,2000``
- ``missing``: ``8-216,7201``
- ``nonACGTNs``: ``Y:4321,R:12846-12847``

The parsers are kept separate because Nextclade documents and versions the
columns independently. Every parser returns 0-based :class:`MapleDiff` records
and raises :class:`NotationError` on malformed tokens; an empty column yields
no diffs.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Tuple

from .models import DELETION, UNKNOWN, MapleDiff
from .validation import ConfigurationError

logger = logging.getLogger(__name__)

_ACGT = frozenset("ACGTacgt")


class NotationError(ConfigurationError):
    """Raised when a Nextclade diff token cannot be parsed."""


def _tokens(column: str) -> Iterator[str]:
    for token in column.split(","):
        if token:
            yield token


def parse_base(base: str, description: str) -> str:
    """Validate a single A/C/G/T base (any case) and return it lowercased."""
    if len(base) != 1 or base not in _ACGT:
        raise NotationError(f"Expected [ACGT] base {description}, but got {base!r}")
    return base.lower()


def parse_position(s: str, description: str) -> int:
    """Parse a 1-based position and return it 0-based."""
    if not (s.isascii() and s.isdigit()):
        raise NotationError(f"Expected {description}, but got {s!r}")
    pos = int(s)
    if pos < 1:
        raise NotationError(f"Expected 1-based {description}, but got {s!r}")
    return pos - 1


def parse_range(token: str, what: str) -> Tuple[int, int]:
    """Parse ``<start>-<end>`` or ``<pos>`` (1-based inclusive) into (start0, length)."""
    start_s, dash, end_s = token.partition("-")
    if not dash:
        return parse_position(token, f"single position in {what}"), 1
    start = parse_position(start_s, f"start of {what}")
    end = parse_position(end_s, f"end of {what}")
    if end < start:
        raise NotationError(f"End of {what} precedes start in {token!r}")
    return start, end - start + 1


def substitutions_to_diffs(subs: str) -> List[MapleDiff]:
    """Parse the substitutions column, e.g. ``"C241T,T670G,C897A"``."""
    diffs: List[MapleDiff] = []
    for sub in _tokens(subs):
        parse_base(sub[0], f"at start of substitution {sub!r}")
        start = parse_position(sub[1:-1], f"position between ref and alt bases in substitution {sub!r}")
        alt = parse_base(sub[-1], f"at end of substitution {sub!r}")
        diffs.append(MapleDiff(start=start, length=1, symbol=alt))
    return diffs


def deletions_to_diffs(deletions: str) -> List[MapleDiff]:
    """Parse the deletions column, e.g. ``"123-125,234-236,2000"``."""
    diffs: List[MapleDiff] = []
    for token in _tokens(deletions):
        start, length = parse_range(token, "deletion")
        diffs.append(MapleDiff(start=start, length=length, symbol=DELETION))
    return diffs


def missing_to_diffs(missing: str) -> List[MapleDiff]:
    """Parse the missing column, e.g. ``"8-216,7201,26975-27040"``."""
    diffs: List[MapleDiff] = []
    for token in _tokens(missing):
        start, length = parse_range(token, "missing")
        diffs.append(MapleDiff(start=start, length=length, symbol=UNKNOWN))
    return diffs


def non_acgtns_to_diffs(non_acgtns: str) -> List[MapleDiff]:
    """Parse the nonACGTNs column, e.g. ``"Y:4321,Y:12846-12847,R:20055"``."""
    diffs: List[MapleDiff] = []
    for token in _tokens(non_acgtns):
        base, colon, positions = token.partition(":")
        if not colon:
            raise NotationError(
                f"Expected nonACGTNs to contain a base and a numeric position after ':', but got {token!r}"
            )
        if len(base) != 1:
            raise NotationError(f"Expected a single ambiguity base before ':' in nonACGTNs, but got {token!r}")
        start, length = parse_range(positions, "range in nonACGTNs")
        diffs.append(MapleDiff(start=start, length=length, symbol=base.lower()))
    return diffs
