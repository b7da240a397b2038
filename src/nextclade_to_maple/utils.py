from __future__ import annotations

import gzip
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, TextIO

logger = logging.getLogger(__name__)

STDIO_PATH = "-"


def open_textmaybe_gzip(path: str | Path, mode: str = "rt") -> TextIO:
    p = str(path)
    if p.endswith(".gz"):
        return gzip.open(p, mode, encoding="utf-8", newline="")  # type: ignore[return-value]
    return open(p, mode, encoding="utf-8", newline="")


def is_stdio(path: Optional[str | Path]) -> bool:
    return path is None or str(path) in ("", STDIO_PATH)


@contextmanager
def open_input(path: Optional[str | Path]) -> Iterator[TextIO]:
    """Open a text input path, or stdin for an empty path or ``-``."""
    if is_stdio(path):
        yield sys.stdin
        return
    fh = open_textmaybe_gzip(path, "rt")  # type: ignore[arg-type]
    try:
        yield fh
    finally:
        fh.close()


@contextmanager
def open_output(path: Optional[str | Path]) -> Iterator[TextIO]:
    """Open a text output path, or stdout for an empty path or ``-``.

    stdout is flushed but never closed.
    """
    if is_stdio(path):
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return
    p = Path(path)  # type: ignore[arg-type]
    p.parent.mkdir(parents=True, exist_ok=True)
    fh = open_textmaybe_gzip(p, "wt")
    try:
        yield fh
    finally:
        fh.close()


def write_json(path: str | Path, obj: Any) -> None:
    with open(path, "wt", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True)
