#!/usr/bin/env python3
# conch/ui/static/table.py
from __future__ import annotations

from typing import List, Sequence

from conch.ui.utils import strip_ansi


def _calculate_column_widths(rows: Sequence[Sequence[str]]) -> List[int]:
    """Compute visual widths ignoring ANSI sequences."""
    column_widths: List[int] = []
    for row in rows:
        for col_idx, cell in enumerate(row):
            cell_length = len(strip_ansi(str(cell)))
            if col_idx >= len(column_widths):
                column_widths.append(cell_length)
            else:
                column_widths[col_idx] = max(
                    column_widths[col_idx], cell_length)
    return column_widths


def format_columns(
    rows: Sequence[Sequence[object]],
    *,
    indent: int = 2,
    gap: int = 4,
) -> str:
    """
    Return borderless, left-aligned columns (ANSI-safe width calculation).

    The last column is never padded so lines carry no trailing blanks.

    Example:
        format_columns([["add", "add words"], ["clear", "clear words"]])
        ->  '  add      add words\\n  clear    clear words'
    """
    str_rows: List[List[str]] = [[str(cell) for cell in row] for row in rows]
    widths = _calculate_column_widths(str_rows)
    lead = " " * indent

    lines: List[str] = []
    for row in str_rows:
        parts = []
        for i, cell in enumerate(row):
            if i == len(row) - 1:
                parts.append(cell)
                continue
            right = " " * (widths[i] - len(strip_ansi(cell)) + gap)
            parts.append(f"{cell}{right}")
        lines.append((lead + "".join(parts)).rstrip())
    return "\n".join(lines)
