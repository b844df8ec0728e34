"""
Line wrapper: balance label text over a requested number of rows.
Greedy heuristic, never splits inside a word, keeps word order.
"""

from __future__ import annotations


def balance_lines(text: str, num_rows: int) -> list[str]:
    """
    Split text into exactly max(1, num_rows) lines.

    Words are added to the current line until the next word would push it past
    the running target (remaining length / remaining rows); the last row takes
    whatever is left. With more rows than words the trailing rows are empty.
    """
    rows = max(1, int(num_rows))
    remaining = text.split()
    lines: list[str] = []
    for row in range(rows):
        rows_left = rows - row
        if rows_left == 1:
            lines.append(" ".join(remaining))
            remaining = []
            break
        target = len(" ".join(remaining)) / rows_left
        line: list[str] = []
        while remaining:
            candidate = " ".join(line + [remaining[0]])
            if line and len(candidate) > target:
                break
            line.append(remaining.pop(0))
        lines.append(" ".join(line))
    return lines


def wrap_text(text: str, num_rows: int) -> str:
    """Newline-joined balanced lines with empty trailing rows dropped (for measuring and drawing)."""
    lines = balance_lines(text, num_rows)
    while len(lines) > 1 and not lines[-1]:
        lines.pop()
    return "\n".join(lines)
