"""Text formatting for benchmark comparisons.

Provides :func:`format_report`, the machine-readable rendering of a
:class:`~benchdiff.compare.ComparisonReport`, and the shared helpers (value
and percentage formatting, aligned tables) used by the terminal and
Markdown renderers.
"""

from __future__ import annotations

from benchdiff.compare import ComparisonReport, ComparisonRow

PLACEHOLDER = "-"
EMPTY_REPORT = "no common benchmarks"
TSV_HEADER = ("name", "metric", "before", "after", "delta")


def format_value(value: float | None) -> str:
    """Format a metric value: integers without a fraction, else shortest repr.

    Examples: ``1200.0 -> '1200'``, ``3.25 -> '3.25'``, ``None -> '-'``.
    """
    if value is None:
        return PLACEHOLDER
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_pct(value: float, precision: int = 2) -> str:
    """Format a percentage with sign: ``'+20.00%'``, ``'-3.50%'``."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{precision}f}%"


def format_delta(row: ComparisonRow, precision: int = 2) -> str:
    """The signed percentage of a row, or its status tag when undefined."""
    delta = row.delta_percent
    if delta is None:
        return row.status
    return format_pct(delta, precision)


def format_report(report: ComparisonReport) -> bytes:
    """Render a report as tab-separated UTF-8 bytes.

    The first line is a header, followed by one line per row in report
    order: name, metric, before, after, and the signed delta or status tag.
    Absent values are written as ``-``.  A report without rows renders to
    a single ``no common benchmarks`` line.  Equal reports always render
    to identical bytes.
    """
    if not report.rows:
        return (EMPTY_REPORT + "\n").encode("utf-8")

    lines = ["\t".join(TSV_HEADER)]
    for row in report.rows:
        fields = (
            row.name,
            row.metric,
            format_value(row.before),
            format_value(row.after),
            format_delta(row),
        )
        lines.append("\t".join(fields))
    return ("\n".join(lines) + "\n").encode("utf-8")


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    max_col_width: dict[int, int] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content. Truncates columns that
    exceed *max_col_width* (with ``'...'`` suffix). Right-aligns columns
    marked ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'``, ``'r'``, or ``'c'``.
        max_col_width: Column index to max width mapping.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    alignments = list(alignments or [])
    while len(alignments) < ncols:
        alignments.append("l")

    proc_headers = list(headers)
    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    for ci, max_w in (max_col_width or {}).items():
        if ci < ncols:
            proc_headers[ci] = truncate(proc_headers[ci], max_w)
            for row in proc_rows:
                row[ci] = truncate(row[ci], max_w)

    widths = [len(h) for h in proc_headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_cell(text: str, width: int, align: str) -> str:
        if align == "r":
            return text.rjust(width)
        if align == "c":
            return text.center(width)
        return text.ljust(width)

    lines: list[str] = []
    for cells in [proc_headers, *proc_rows]:
        line = "  ".join(_format_cell(cells[i], widths[i], alignments[i]) for i in range(ncols))
        lines.append((prefix + line).rstrip())
    return "\n".join(lines)


def format_section_header(title: str, width: int = 80) -> str:
    """Format a section header: ``'─── Title ──...'``."""
    prefix = "─── "
    suffix_len = width - len(prefix) - len(title) - 1
    suffix = " " + "─" * max(0, suffix_len)
    return prefix + title + suffix


def truncate(text: str, max_len: int, suffix: str = "...") -> str:
    """Truncate text to *max_len*, adding *suffix* if truncated."""
    if len(text) <= max_len:
        return text
    if max_len <= len(suffix):
        return suffix[:max_len]
    return text[: max_len - len(suffix)] + suffix
