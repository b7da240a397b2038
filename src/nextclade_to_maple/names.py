from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

from .utils import open_textmaybe_gzip
from .validation import ConfigurationError

logger = logging.getLogger(__name__)


def load_rename_table(path: Optional[str | Path]) -> Optional[Dict[str, str]]:
    """Load a two-column ``old_name<TAB>new_name`` file (no header).

    Returns None for an empty path, meaning every name passes through unchanged.
    Extra columns are ignored; later rows win for repeated old names.
    """
    if not path:
        return None
    table: Dict[str, str] = {}
    with open_textmaybe_gzip(path, "rt") as fh:
        for lineno, row in enumerate(csv.reader(fh, delimiter="\t"), start=1):
            if not row:
                continue
            if len(row) < 2:
                raise ConfigurationError(
                    f"Line {lineno} of {path}: expected old and new name separated by a tab, got {row!r}"
                )
            table[row[0]] = row[1]
    logger.info("Loaded %d names from rename/prune table %s", len(table), path)
    return table


def resolve_name(rename_table: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """Rename if a table is given, or prune (None) when the name is not in it."""
    if rename_table is None:
        return name
    return rename_table.get(name)
