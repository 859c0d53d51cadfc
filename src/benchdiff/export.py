"""Export comparison reports to CSV and Markdown formats.

CSV format: one row per benchmark metric, with the raw before/after values
and the delta as a plain number, for loading into pandas or a spreadsheet.

Markdown format: a summary plus a results table suitable for pull request
comments and GitHub issues.
"""

from __future__ import annotations

import csv
import io

from benchdiff.compare import ComparisonReport
from benchdiff.formatting import EMPTY_REPORT, format_delta, format_value


def export_csv(report: ComparisonReport, *, threshold: float = 0.0) -> str:
    """Export a report as CSV.

    Columns:
        benchmark, metric, before, after, delta_pct, status, verdict
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["benchmark", "metric", "before", "after", "delta_pct", "status", "verdict"])
    for row in report.rows:
        delta = row.delta_percent
        writer.writerow(
            [
                row.name,
                row.metric,
                "" if row.before is None else format_value(row.before),
                "" if row.after is None else format_value(row.after),
                "" if delta is None else f"{delta:.4f}",
                row.status,
                row.verdict(threshold) or "",
            ]
        )
    return output.getvalue()


def export_markdown(report: ComparisonReport, *, threshold: float = 0.0) -> str:
    """Export a report as a Markdown summary and table."""
    if not report.rows:
        return f"*{EMPTY_REPORT}*"

    counts = report.counts(threshold)
    lines: list[str] = []
    lines.append("## Benchmark comparison")
    lines.append("")
    lines.append(
        f"**{counts['regressed']}** regressed, **{counts['improved']}** improved, "
        f"**{counts['unchanged']}** unchanged (threshold {threshold:g}%)"
    )
    if counts["added"] or counts["removed"]:
        lines.append(f"{counts['added']} added, {counts['removed']} removed")
    lines.append("")

    lines.append("| Benchmark | Metric | Before | After | Delta | |")
    lines.append("|---|---|---:|---:|---:|---|")
    markers = {"improved": ":white_check_mark:", "regressed": ":x:"}
    for row in report.rows:
        marker = markers.get(row.verdict(threshold) or "", "")
        lines.append(
            f"| `{row.name}` | {row.metric} | {format_value(row.before)} | "
            f"{format_value(row.after)} | {format_delta(row, 1)} | {marker} |"
        )

    lines.append("")
    lines.append("*Generated by benchdiff*")
    return "\n".join(lines)
