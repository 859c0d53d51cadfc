"""Transport-independent benchmark operations.

Each function here backs one user-facing operation (upload, show, list,
compare) and classifies failures with :mod:`benchdiff.errors`; mapping
those to exit codes or HTTP statuses is the caller's job.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

from benchdiff.compare import ComparisonReport, compare
from benchdiff.errors import InvalidInput, NotFound, Unauthorized
from benchdiff.formatting import format_report
from benchdiff.logging import get_logger
from benchdiff.parser import parse
from benchdiff.store import LocalStore, RunSummary, StoredRun
from benchdiff.verify import AcceptAllVerifier, Verifier

log = get_logger("service")

# Uploads shorter than this are dummy content.
MIN_CONTENT_LENGTH = 10
DEFAULT_LIST_LIMIT = 100


def submit_run(
    store: LocalStore,
    content: str,
    commit: str,
    *,
    signature: str = "",
    secret: str = "",
    verifier: Verifier | None = None,
) -> int:
    """Validate, verify and store an uploaded run.

    The signature is checked against the content with surrounding
    whitespace stripped.

    Returns:
        The id of the stored run.

    Raises:
        InvalidInput: If content or commit is empty, or content is too short.
        Unauthorized: If the verifier rejects the signature.
    """
    content = content.strip()
    if not content:
        raise InvalidInput("content is required")

    commit = commit.strip()
    if not commit:
        raise InvalidInput("commit is required")

    verifier = verifier or AcceptAllVerifier()
    if not verifier.verify(signature, content, secret):
        log.warning("Rejected upload for commit %s: bad signature", commit)
        raise Unauthorized("invalid signature")

    if len(content.encode("utf-8")) < MIN_CONTENT_LENGTH:
        raise InvalidInput("content too short")

    return store.create_run(content, commit)


def show_run(store: LocalStore, run_id: int) -> StoredRun:
    """Fetch a stored run; non-positive ids are never found."""
    if run_id <= 0:
        raise NotFound("benchmark not found")
    return store.find_run(run_id)


def list_runs(
    store: LocalStore,
    *,
    before: datetime | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[RunSummary]:
    """List stored runs older than *before* (default: now), newest first."""
    return store.list_runs(before or datetime.now(timezone.utc), limit)


def compare_runs(
    store: LocalStore,
    a_id: int,
    b_id: int,
    *,
    directions: Mapping[str, str] | None = None,
    allow_disjoint: bool = False,
) -> ComparisonReport:
    """Compare stored run *a_id* (baseline) with *b_id*.

    Raises:
        NotFound: If either run does not exist.
        ParseError: If either run's content holds no measurements.
        ComparisonError: If the runs cannot be compared.
    """
    run_a = show_run(store, a_id)
    run_b = show_run(store, b_id)
    log.debug("Comparing run #%d (%s) with #%d (%s)", a_id, run_a.commit, b_id, run_b.commit)
    return compare(
        parse(run_a.content),
        parse(run_b.content),
        directions=directions,
        allow_disjoint=allow_disjoint,
    )


def compare_runs_report(
    store: LocalStore,
    a_id: int,
    b_id: int,
    *,
    directions: Mapping[str, str] | None = None,
    allow_disjoint: bool = False,
) -> bytes:
    """Compare two stored runs and render the result with :func:`format_report`."""
    report = compare_runs(
        store,
        a_id,
        b_id,
        directions=directions,
        allow_disjoint=allow_disjoint,
    )
    return format_report(report)
