"""Parse raw benchmark text into structured measurements.

The accepted input is the line-oriented output of Go's ``testing`` package::

    goos: linux
    BenchmarkEncode-8     1000000    1052 ns/op    256 B/op    3 allocs/op
    PASS

Only lines whose first whitespace-delimited token starts with ``Benchmark``
are considered.  Parsing is lenient per line and strict on the aggregate:
malformed candidate lines and unparseable value tokens are skipped, but an
input that yields no measurement at all is rejected with
:class:`~benchdiff.errors.ParseError`.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from benchdiff.errors import InvalidInput, ParseError
from benchdiff.logging import get_logger

log = get_logger("parser")

BENCHMARK_PREFIX = "Benchmark"
RATE_SEPARATOR = "/"


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Measurement:
    """One benchmark case and its metrics (unit label -> value)."""

    name: str
    metrics: Mapping[str, float]

    def __post_init__(self) -> None:
        if not self.metrics:
            raise ValueError(f"measurement {self.name!r} has no metrics")
        metrics = {unit: float(value) for unit, value in self.metrics.items()}
        object.__setattr__(self, "metrics", MappingProxyType(metrics))


@dataclass(frozen=True)
class BenchmarkRun:
    """All measurements parsed from one content blob, keyed by name."""

    measurements: Mapping[str, Measurement] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "measurements", MappingProxyType(dict(self.measurements)))

    def __len__(self) -> int:
        return len(self.measurements)

    def __contains__(self, name: object) -> bool:
        return name in self.measurements

    @property
    def names(self) -> list[str]:
        """Benchmark names in lexicographic order."""
        return sorted(self.measurements)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, float]]) -> BenchmarkRun:
        """Build a run from ``{name: {unit: value}}``."""
        return cls({name: Measurement(name, metrics) for name, metrics in data.items()})


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_value(token: str) -> float | None:
    """Parse a numeric token, returning None for anything non-finite."""
    try:
        value = float(token)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _has_iteration_count(rest: list[str]) -> bool:
    """Decide whether the first token after the name is an iteration count.

    ``go test`` always prints one, but hand-trimmed output may drop it.  An
    integer followed by either a number or an odd number of tokens is taken
    to be the count.
    """
    if not rest or not rest[0].isdigit():
        return False
    if len(rest) % 2 == 1:
        return True
    return len(rest) > 1 and _parse_value(rest[1]) is not None


def parse_line(line: str) -> Measurement | None:
    """Parse a single line, returning None if it holds no measurement.

    Token 0 is the benchmark name (kept verbatim, including any ``-N``
    parallelism suffix), token 1 is the optional iteration count and is not
    kept.  The remaining tokens are ``(value, unit)`` pairs.  A pair whose
    value is not a number is dropped without discarding the rest of the
    line, and a trailing unpaired token is ignored.  When the iteration
    count is absent only rate units (those containing ``/``, such as
    ``ns/op`` or ``MB/s``) are accepted, so log text like
    ``BenchmarkFoo 2 of 5 done`` yields nothing.
    """
    tokens = line.split()
    if not tokens or not tokens[0].startswith(BENCHMARK_PREFIX):
        return None

    name = tokens[0]
    pairs = tokens[1:]
    counted = _has_iteration_count(pairs)
    if counted:
        pairs = pairs[1:]
    if len(pairs) < 2:
        log.debug("Skipping short benchmark line: %r", line)
        return None

    metrics: dict[str, float] = {}
    for i in range(0, len(pairs) - 1, 2):
        raw_value, unit = pairs[i], pairs[i + 1]
        if not counted and RATE_SEPARATOR not in unit:
            log.debug("Skipping unit %r without an iteration count in %s", unit, name)
            continue
        value = _parse_value(raw_value)
        if value is None:
            log.debug("Skipping non-numeric value %r (%s) in %s", raw_value, unit, name)
            continue
        metrics[unit] = value

    if not metrics:
        log.debug("Skipping benchmark line with no usable metrics: %r", line)
        return None
    return Measurement(name, metrics)


def parse(raw_text: str) -> BenchmarkRun:
    """Parse raw benchmark output into a :class:`BenchmarkRun`.

    When a benchmark name appears on more than one line, the later line
    replaces the earlier measurement entirely.

    Raises:
        ParseError: If the input contains no benchmark measurements.
    """
    measurements: dict[str, Measurement] = {}
    for line in raw_text.splitlines():
        measurement = parse_line(line)
        if measurement is None:
            continue
        if measurement.name in measurements:
            log.debug("Benchmark %s repeated, keeping the later line", measurement.name)
        measurements[measurement.name] = measurement

    if not measurements:
        raise ParseError("no benchmark measurements found")

    log.debug("Parsed %d benchmark measurements", len(measurements))
    return BenchmarkRun(measurements)


def read_benchmark_file(path: Path) -> str:
    """Read *path* as UTF-8 text.

    Raises:
        InvalidInput: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInput(f"{path} is not valid UTF-8 text (byte {exc.start})") from exc
    except OSError as exc:
        raise InvalidInput(f"cannot read {path}: {exc.strerror or exc}") from exc


def parse_file(path: Path) -> BenchmarkRun:
    """Read *path* as UTF-8 and parse it."""
    return parse(read_benchmark_file(path))
