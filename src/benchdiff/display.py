"""Terminal display formatting for benchmark runs and comparisons.

Produces aligned tables and summaries for humans.  For machine-readable
output use :func:`benchdiff.formatting.format_report`.
"""

from __future__ import annotations

from benchdiff.compare import ComparisonReport
from benchdiff.formatting import (
    EMPTY_REPORT,
    format_delta,
    format_pct,
    format_section_header,
    format_table,
    format_value,
)
from benchdiff.parser import BenchmarkRun
from benchdiff.store import RunSummary, StoredRun

_VERDICT_MARKERS = {
    "improved": "✓ better",
    "regressed": "✗ worse",
    "unchanged": "~",
}


# ---------------------------------------------------------------------------
# Single run display
# ---------------------------------------------------------------------------


def format_run(run: BenchmarkRun) -> str:
    """Format a parsed run as a table of benchmark, metric and value."""
    rows: list[list[str]] = []
    for name in run.names:
        metrics = run.measurements[name].metrics
        for metric in sorted(metrics):
            rows.append([name, format_value(metrics[metric]), metric])
    return format_table(
        ["Benchmark", "Value", "Unit"],
        rows,
        alignments=["l", "r", "l"],
        indent=0,
    )


def format_stored_run(stored: StoredRun) -> str:
    """Format a stored run's header followed by its raw content."""
    lines = [
        f"Run #{stored.id}",
        f"Commit:  {stored.commit}",
        f"Created: {stored.created.strftime('%a, %d %b %Y %H:%M')}",
        "",
        stored.content,
    ]
    return "\n".join(lines)


def format_run_listing(runs: list[RunSummary]) -> str:
    """Format stored run summaries, newest first."""
    if not runs:
        return "No benchmarks."
    rows = [[f"#{r.id}", r.created.strftime("%a, %d %b %H:%M"), r.commit] for r in runs]
    return format_table(["ID", "Created", "Commit"], rows, alignments=["r", "l", "l"], indent=0)


# ---------------------------------------------------------------------------
# Comparison display
# ---------------------------------------------------------------------------


def format_report_table(report: ComparisonReport, *, threshold: float = 0.0) -> str:
    """Format a comparison report as an aligned table with a summary.

    Args:
        report: The comparison to display.
        threshold: Changes within this many percent are shown as unchanged.
    """
    if not report.rows:
        return EMPTY_REPORT

    rows: list[list[str]] = []
    for row in report.rows:
        verdict = row.verdict(threshold)
        rows.append(
            [
                row.name,
                row.metric,
                format_value(row.before),
                format_value(row.after),
                format_delta(row),
                _VERDICT_MARKERS.get(verdict or "", ""),
            ]
        )

    lines = [
        format_table(
            ["Benchmark", "Metric", "Before", "After", "Delta", ""],
            rows,
            alignments=["l", "l", "r", "r", "r", "l"],
            max_col_width={0: 60},
            indent=0,
        ),
        "",
        format_comparison_summary(report, threshold=threshold),
    ]
    return "\n".join(lines)


def format_comparison_summary(report: ComparisonReport, *, threshold: float = 0.0) -> str:
    """Format the aggregate counts and the largest changes of a report."""
    counts = report.counts(threshold)
    lines = [
        format_section_header("Summary", width=60),
        f"  Metrics compared:  {len(report.common)}",
        f"    Improved:        {counts['improved']}",
        f"    Regressed:       {counts['regressed']}",
        f"    Unchanged:       {counts['unchanged']} (within {threshold:g}%)",
    ]
    if counts["added"] or counts["removed"]:
        lines.append(f"  Added:             {counts['added']}")
        lines.append(f"  Removed:           {counts['removed']}")
    if counts["before-zero"]:
        lines.append(f"  Zero baseline:     {counts['before-zero']}")

    regressions = report.regressions(threshold)[:5]
    if regressions:
        lines.append("")
        lines.append("  Largest regressions:")
        for r in regressions:
            label = f"{r.name} {r.metric}"
            lines.append(f"    {label:<45s} {format_pct(r.delta_percent or 0.0, 1):>9s}")

    improvements = report.improvements(threshold)[:5]
    if improvements:
        lines.append("")
        lines.append("  Largest improvements:")
        for r in improvements:
            label = f"{r.name} {r.metric}"
            lines.append(f"    {label:<45s} {format_pct(r.delta_percent or 0.0, 1):>9s}")

    return "\n".join(lines)
