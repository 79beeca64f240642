"""Text rendering of index listings.

Three contracts:

- Full: one line per record with digest, image reference, platform and
  creation time, column-aligned.
- Quiet: index digests only, each followed by a newline.
- Quiet-exact: a single record's quiet output without its trailing newline,
  which is the bare digest.

Rendering is pure and returns the complete text, so callers can emit it in
one write after every fallible step has succeeded.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from lazyindex.registry.models import IndexRecord

COLUMN_GAP = "  "


class OutputMode(Enum):
    """How a listing is rendered."""

    FULL = "full"
    QUIET = "quiet"


def render_full(records: Sequence[IndexRecord]) -> str:
    if not records:
        return ""

    rows = [
        (r.index_digest, r.image_ref, str(r.platform), r.created_at)
        for r in records
    ]
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]

    lines = []
    for row in rows:
        cells = [cell.ljust(width) for cell, width in zip(row, widths)]
        lines.append(COLUMN_GAP.join(cells).rstrip())
    return "\n".join(lines) + "\n"


def render_quiet(records: Sequence[IndexRecord]) -> str:
    return "".join(r.index_digest + "\n" for r in records)


def render(records: Sequence[IndexRecord], mode: OutputMode = OutputMode.FULL) -> str:
    """Render ``records`` in ``mode``. An empty result renders as ``""``."""
    if mode is OutputMode.QUIET:
        return render_quiet(records)
    return render_full(records)


def render_exact(records: Sequence[IndexRecord]) -> str:
    """Return the bare digest of a single-record result.

    Raises:
        ValueError: If ``records`` does not hold exactly one record.
    """
    if len(records) != 1:
        raise ValueError(f"expected exactly one index, got {len(records)}")
    return render_quiet(records).rstrip("\n")
