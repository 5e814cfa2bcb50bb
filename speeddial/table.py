"""Bordered key/value table for ``sd list``."""

from __future__ import annotations

from rich.console import Console

from speeddial.config import DEFAULT_FALLBACK_WIDTH

KEY_TITLE = "Key"
VALUE_TITLE = "Value"
OVERFLOW = "..."
PADDING = 5
# Four cell paddings plus three "|" borders.
BORDER_OVERHEAD = 4 * PADDING + 3
ELLIPSED_NOTE = 'Note: some values have been ellipsed. Add "-l" to see values in full.'


def detect_width(fallback: int = DEFAULT_FALLBACK_WIDTH) -> int:
    """Width of the attached terminal, or *fallback* when stdout is not one."""
    console = Console()
    if console.is_terminal:
        return console.width
    return fallback


def _ellipsize(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - len(OVERFLOW)] + OVERFLOW


def _row(key: str, value: str, key_width: int, value_width: int) -> str:
    pad = " " * PADDING
    return (
        f"|{pad}{key:<{key_width}}{pad}"
        f"|{pad}{value:<{value_width}}{pad}|"
    )


def render_table(
    mapping: dict[str, str], full_width: bool = False, terminal_width: int = DEFAULT_FALLBACK_WIDTH
) -> str:
    """Render *mapping* as a bordered two-column table sorted by key.

    Unless *full_width* is set, the value column shrinks so the table fits
    *terminal_width*; values that no longer fit are cut and suffixed with
    ``...`` and a note is appended. *mapping* itself is never modified.
    """
    key_width = max([len(KEY_TITLE)] + [len(k) for k in mapping])
    value_width = max([len(VALUE_TITLE)] + [len(v) for v in mapping.values()])

    rows = {key: mapping[key] for key in sorted(mapping)}
    ellipsed = False
    if not full_width and key_width + value_width + BORDER_OVERHEAD > terminal_width:
        value_width = max(
            terminal_width - key_width - BORDER_OVERHEAD,
            len(OVERFLOW) + 1,
            len(VALUE_TITLE),
        )
        for key, value in rows.items():
            shortened = _ellipsize(value, value_width)
            if shortened != value:
                rows[key] = shortened
                ellipsed = True

    rule = "-" * (key_width + value_width + BORDER_OVERHEAD)
    lines = [rule, _row(KEY_TITLE, VALUE_TITLE, key_width, value_width), rule]
    lines.extend(_row(k, v, key_width, value_width) for k, v in rows.items())
    lines.append(rule)
    if ellipsed:
        lines.append(ELLIPSED_NOTE)
    return "\n".join(lines) + "\n"
