"""Tests for benchdiff.service — upload, show, list and compare operations."""

from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from bench_helpers import GO_OUTPUT_NEW, GO_OUTPUT_OLD

from benchdiff.errors import ComparisonError, InvalidInput, NotFound, ParseError, Unauthorized
from benchdiff.service import (
    compare_runs,
    compare_runs_report,
    list_runs,
    show_run,
    submit_run,
)
from benchdiff.store import LocalStore
from benchdiff.verify import HmacVerifier, Verifier


class _RejectAll(Verifier):
    def verify(self, signature: str, content: str | bytes, secret: str) -> bool:
        return False


class ServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = LocalStore(Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()


class TestSubmitRun(ServiceTestCase):
    def test_stores_stripped_content(self) -> None:
        run_id = submit_run(self.store, "\n\n" + GO_OUTPUT_OLD + "\n\n", "  abc123 \n")
        stored = self.store.find_run(run_id)
        self.assertEqual(stored.content, GO_OUTPUT_OLD.strip())
        self.assertEqual(stored.commit, "abc123")

    def test_empty_content(self) -> None:
        with self.assertRaises(InvalidInput) as cm:
            submit_run(self.store, "   \n", "abc")
        self.assertEqual(cm.exception.reason, "content is required")

    def test_missing_commit(self) -> None:
        with self.assertRaises(InvalidInput) as cm:
            submit_run(self.store, GO_OUTPUT_OLD, "  ")
        self.assertEqual(cm.exception.reason, "commit is required")

    def test_dummy_content(self) -> None:
        with self.assertRaises(InvalidInput) as cm:
            submit_run(self.store, "tiny", "abc")
        self.assertEqual(cm.exception.reason, "content too short")

    def test_rejected_signature(self) -> None:
        with self.assertRaises(Unauthorized):
            submit_run(self.store, GO_OUTPUT_OLD, "abc", verifier=_RejectAll())
        self.assertEqual(list_runs(self.store), [])

    def test_signature_checked_before_length(self) -> None:
        """A bad signature is reported even when the content is also too short."""
        with self.assertRaises(Unauthorized):
            submit_run(self.store, "tiny", "abc", verifier=_RejectAll())

    def test_hmac_signature_over_stripped_content(self) -> None:
        """Surrounding whitespace does not change the expected signature."""
        sig = HmacVerifier.sign(GO_OUTPUT_OLD.strip(), "s3cret")
        run_id = submit_run(
            self.store,
            GO_OUTPUT_OLD,
            "abc",
            signature=sig,
            secret="s3cret",
            verifier=HmacVerifier(),
        )
        self.assertEqual(run_id, 1)


class TestShowAndList(ServiceTestCase):
    def test_show(self) -> None:
        run_id = submit_run(self.store, GO_OUTPUT_OLD, "abc")
        self.assertEqual(show_run(self.store, run_id).commit, "abc")

    def test_show_invalid_id(self) -> None:
        with self.assertRaises(NotFound):
            show_run(self.store, 0)
        with self.assertRaises(NotFound):
            show_run(self.store, 99)

    def test_list_default_before_now(self) -> None:
        """Runs come back newest first and the limit caps the result."""
        submit_run(self.store, GO_OUTPUT_OLD, "a")
        submit_run(self.store, GO_OUTPUT_NEW, "b")
        later = datetime.now(timezone.utc) + timedelta(seconds=1)
        runs = list_runs(self.store, before=later)
        self.assertEqual([r.commit for r in runs], ["b", "a"])
        self.assertEqual(len(list_runs(self.store, before=later, limit=1)), 1)


class TestCompareRuns(ServiceTestCase):
    def test_compare(self) -> None:
        a = submit_run(self.store, GO_OUTPUT_OLD, "a")
        b = submit_run(self.store, GO_OUTPUT_NEW, "b")
        report = compare_runs(self.store, a, b)
        self.assertEqual(len(report.regressions(5.0)), 2)

    def test_compare_report_bytes(self) -> None:
        a = submit_run(self.store, GO_OUTPUT_OLD, "a")
        b = submit_run(self.store, GO_OUTPUT_NEW, "b")
        data = compare_runs_report(self.store, a, b)
        self.assertTrue(data.startswith(b"name\tmetric\tbefore\tafter\tdelta\n"))
        self.assertIn(b"BenchmarkDecode-8\tns/op\t2000\t2500\t+25.00%\n", data)

    def test_missing_run_propagates_not_found(self) -> None:
        a = submit_run(self.store, GO_OUTPUT_OLD, "a")
        with self.assertRaises(NotFound):
            compare_runs(self.store, a, 99)

    def test_unparseable_content(self) -> None:
        """Stored content that yields no measurements surfaces as a ParseError."""
        a = submit_run(self.store, GO_OUTPUT_OLD, "a")
        b = submit_run(self.store, "just some log output, no benchmarks", "b")
        with self.assertRaises(ParseError):
            compare_runs(self.store, a, b)

    def test_disjoint_runs(self) -> None:
        a = submit_run(self.store, "BenchmarkFoo 100 5 ns/op", "a")
        b = submit_run(self.store, "BenchmarkBar 100 5 ns/op", "b")
        with self.assertRaises(ComparisonError):
            compare_runs(self.store, a, b)
        report = compare_runs(self.store, a, b, allow_disjoint=True)
        self.assertEqual(len(report), 2)


if __name__ == "__main__":
    unittest.main()
