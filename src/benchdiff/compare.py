"""Benchmark comparison analysis.

Aligns two parsed runs by benchmark name and metric key, producing one
:class:`ComparisonRow` per (name, metric) pair in the union of both runs,
with a percentage delta relative to the left (earlier) run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from benchdiff.errors import ComparisonError
from benchdiff.logging import get_logger
from benchdiff.parser import BenchmarkRun

log = get_logger("compare")

LOWER_IS_BETTER = "lower"
HIGHER_IS_BETTER = "higher"

STATUS_CHANGED = "changed"
STATUS_ADDED = "added"
STATUS_REMOVED = "removed"
STATUS_BEFORE_ZERO = "before-zero"

# Units not listed here are treated as costs (lower is better).
DEFAULT_DIRECTIONS: dict[str, str] = {
    "ns/op": LOWER_IS_BETTER,
    "B/op": LOWER_IS_BETTER,
    "allocs/op": LOWER_IS_BETTER,
    "MB/s": HIGHER_IS_BETTER,
}


def direction_for(metric: str, overrides: Mapping[str, str] | None = None) -> str:
    """Return whether lower or higher values of *metric* are better.

    *overrides* take precedence over :data:`DEFAULT_DIRECTIONS`.
    """
    if overrides and metric in overrides:
        return overrides[metric]
    return DEFAULT_DIRECTIONS.get(metric, LOWER_IS_BETTER)


# ---------------------------------------------------------------------------
# Per-metric comparison result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonRow:
    """Comparison of one metric of one benchmark between two runs."""

    name: str
    metric: str
    before: float | None
    after: float | None
    direction: str = LOWER_IS_BETTER

    @property
    def status(self) -> str:
        """One of ``changed``, ``added``, ``removed`` or ``before-zero``."""
        if self.before is None:
            return STATUS_ADDED
        if self.after is None:
            return STATUS_REMOVED
        if self.before == 0 and self.after != 0:
            return STATUS_BEFORE_ZERO
        return STATUS_CHANGED

    @property
    def delta_percent(self) -> float | None:
        """Percentage change from before to after, None when undefined."""
        if self.status != STATUS_CHANGED:
            return None
        assert self.before is not None and self.after is not None
        if self.before == 0:
            # Both sides are zero.
            return 0.0
        return (self.after - self.before) / self.before * 100

    def verdict(self, threshold: float = 0.0) -> str | None:
        """Classify the change as ``improved``, ``regressed`` or ``unchanged``.

        Changes whose magnitude does not exceed *threshold* percent are
        unchanged.  Rows without a delta have no verdict.
        """
        delta = self.delta_percent
        if delta is None:
            return None
        if abs(delta) <= threshold:
            return "unchanged"
        better = delta < 0 if self.direction == LOWER_IS_BETTER else delta > 0
        return "improved" if better else "regressed"


# ---------------------------------------------------------------------------
# Aggregate comparison
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComparisonReport:
    """All rows of one comparison, sorted by benchmark name then metric."""

    rows: tuple[ComparisonRow, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def common(self) -> list[ComparisonRow]:
        """Rows with a value on both sides."""
        return [r for r in self.rows if r.before is not None and r.after is not None]

    @property
    def added(self) -> list[ComparisonRow]:
        return [r for r in self.rows if r.status == STATUS_ADDED]

    @property
    def removed(self) -> list[ComparisonRow]:
        return [r for r in self.rows if r.status == STATUS_REMOVED]

    def regressions(self, threshold: float = 0.0) -> list[ComparisonRow]:
        """Rows that got worse by more than *threshold* percent, worst first."""
        rows = [r for r in self.rows if r.verdict(threshold) == "regressed"]
        return sorted(rows, key=lambda r: abs(r.delta_percent or 0.0), reverse=True)

    def improvements(self, threshold: float = 0.0) -> list[ComparisonRow]:
        """Rows that got better by more than *threshold* percent, best first."""
        rows = [r for r in self.rows if r.verdict(threshold) == "improved"]
        return sorted(rows, key=lambda r: abs(r.delta_percent or 0.0), reverse=True)

    def counts(self, threshold: float = 0.0) -> dict[str, int]:
        """Number of rows per verdict or, for rows without a delta, per status."""
        result = {
            "improved": 0,
            "regressed": 0,
            "unchanged": 0,
            STATUS_ADDED: 0,
            STATUS_REMOVED: 0,
            STATUS_BEFORE_ZERO: 0,
        }
        for r in self.rows:
            result[r.verdict(threshold) or r.status] += 1
        return result


# ---------------------------------------------------------------------------
# Comparison logic
# ---------------------------------------------------------------------------


def compare(
    left: BenchmarkRun,
    right: BenchmarkRun,
    *,
    directions: Mapping[str, str] | None = None,
    allow_disjoint: bool = False,
) -> ComparisonReport:
    """Compare two benchmark runs metric by metric.

    Args:
        left: The baseline (earlier) run; deltas are relative to it.
        right: The run being evaluated.
        directions: Metric -> ``lower``/``higher`` overrides for verdicts.
        allow_disjoint: Report added/removed rows instead of failing when
            the runs share no benchmark name.

    Returns:
        ComparisonReport covering the union of benchmarks and metrics.

    Raises:
        ComparisonError: If neither run has measurements, or if the runs
            share no benchmark and *allow_disjoint* is False.
    """
    left_names = set(left.measurements)
    right_names = set(right.measurements)
    names = left_names | right_names
    if not names:
        raise ComparisonError("nothing to compare")
    if not left_names & right_names and not allow_disjoint:
        raise ComparisonError("no common benchmarks")

    rows: list[ComparisonRow] = []
    for name in sorted(names):
        before = left.measurements[name].metrics if name in left_names else {}
        after = right.measurements[name].metrics if name in right_names else {}
        for metric in sorted(set(before) | set(after)):
            rows.append(
                ComparisonRow(
                    name=name,
                    metric=metric,
                    before=before.get(metric),
                    after=after.get(metric),
                    direction=direction_for(metric, directions),
                )
            )

    log.debug(
        "Compared %d benchmarks (%d common) into %d rows",
        len(names),
        len(left_names & right_names),
        len(rows),
    )
    return ComparisonReport(tuple(rows))
