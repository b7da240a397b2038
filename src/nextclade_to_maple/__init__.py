"""nextclade-to-maple: convert Nextclade alignment TSV into MAPLE diff format.

Public API is intentionally small; most users should use the CLI:

    nextclade-to-maple -i nextclade.tsv -o samples.maple --ref-len 29903

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"
