"""Error taxonomy for benchdiff.

Every error carries a ``kind`` tag so callers at the transport boundary can
branch on the kind (not-found / bad input / internal) without matching on
message text.  None of these are retried: they are deterministic functions
of their input.
"""

from __future__ import annotations


class BenchdiffError(Exception):
    """Base class for all benchdiff errors."""

    kind = "error"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ParseError(BenchdiffError):
    """Raw benchmark text yielded no usable measurements."""

    kind = "parse"


class ComparisonError(BenchdiffError):
    """Two runs cannot be compared."""

    kind = "comparison"


class NotFound(BenchdiffError):
    """A stored entity does not exist."""

    kind = "not-found"


class InvalidInput(BenchdiffError):
    """A submission was rejected before reaching storage."""

    kind = "invalid-input"


class Unauthorized(BenchdiffError):
    """The verifier rejected a submission's signature."""

    kind = "unauthorized"


class RemoteError(BenchdiffError):
    """A remote benchdiff server failed or could not be reached."""

    kind = "remote"


class CorruptRun(BenchdiffError):
    """A stored run exists but its file cannot be decoded."""

    kind = "corrupt-run"
