"""Filesystem storage for uploaded benchmark runs.

Layout::

    <root>/
      runs/
        1.json       StoredRun (id, commit, created, content)
        2.json
        ...

Ids are positive integers allocated in increasing order.  Each run is
written once with exclusive creation, so concurrent writers never
overwrite each other's runs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from benchdiff.errors import CorruptRun, NotFound
from benchdiff.logging import get_logger

log = get_logger("store")

_MAX_CREATE_ATTEMPTS = 100


# ---------------------------------------------------------------------------
# Stored entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunSummary:
    """Listing entry for a stored run (no content)."""

    id: int
    commit: str
    created: datetime


@dataclass(frozen=True)
class StoredRun:
    """A stored benchmark upload."""

    id: int
    content: str
    commit: str
    created: datetime

    @property
    def summary(self) -> RunSummary:
        return RunSummary(id=self.id, commit=self.commit, created=self.created)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "commit": self.commit,
            "created": self.created.isoformat(),
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredRun:
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            id=int(data["id"]),
            content=data["content"],
            commit=data["commit"],
            created=_as_utc(datetime.fromisoformat(data["created"])),
        )


def _as_utc(moment: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# ---------------------------------------------------------------------------
# Local store
# ---------------------------------------------------------------------------


class LocalStore:
    """Benchmark runs stored as one JSON document per run under *root*."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.runs_dir = self.root / "runs"

    def _path(self, run_id: int) -> Path:
        return self.runs_dir / f"{run_id}.json"

    def _existing_ids(self) -> list[int]:
        if not self.runs_dir.is_dir():
            return []
        ids: list[int] = []
        for path in self.runs_dir.glob("*.json"):
            if path.stem.isdigit():
                ids.append(int(path.stem))
        return ids

    def create_run(self, content: str, commit: str) -> int:
        """Store a new run and return its id."""
        self.runs_dir.mkdir(parents=True, exist_ok=True)
        created = datetime.now(timezone.utc)
        next_id = max(self._existing_ids(), default=0) + 1

        for _ in range(_MAX_CREATE_ATTEMPTS):
            run = StoredRun(id=next_id, content=content, commit=commit, created=created)
            try:
                with open(self._path(next_id), "x", encoding="utf-8") as f:
                    f.write(json.dumps(run.to_dict(), indent=2) + "\n")
            except FileExistsError:
                next_id += 1
                continue
            log.info("Stored benchmark run #%d for commit %s", next_id, commit)
            return next_id

        raise RuntimeError(f"could not allocate a run id in {self.runs_dir}")

    def find_run(self, run_id: int) -> StoredRun:
        """Load a stored run.

        Raises:
            NotFound: If no run with *run_id* exists.
            CorruptRun: If the run file is not a valid stored run.
        """
        path = self._path(run_id)
        if run_id <= 0 or not path.exists():
            raise NotFound(f"benchmark {run_id} not found")
        try:
            return StoredRun.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (ValueError, KeyError, TypeError) as exc:
            # ValueError covers JSONDecodeError, UnicodeDecodeError and bad timestamps.
            raise CorruptRun(f"benchmark {run_id} is corrupt: {exc}") from exc

    def list_runs(self, before: datetime, limit: int) -> list[RunSummary]:
        """Return up to *limit* runs created strictly before *before*, newest first."""
        cutoff = _as_utc(before)
        summaries: list[RunSummary] = []
        for run_id in self._existing_ids():
            try:
                run = self.find_run(run_id)
            except CorruptRun as exc:
                log.warning("Skipping %s: %s", self._path(run_id).name, exc)
                continue
            if run.created < cutoff:
                summaries.append(run.summary)
        summaries.sort(key=lambda s: (s.created, s.id), reverse=True)
        return summaries[: max(limit, 0)]
