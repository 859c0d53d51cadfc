"""Command-line interface for benchdiff.

Subcommands:
    benchdiff parse      Show the measurements parsed from a file
    benchdiff compare    Compare two benchmark output files
    benchdiff upload     Store a benchmark run for a commit
    benchdiff show       Print a stored run
    benchdiff list       List stored runs
    benchdiff diff       Compare two stored runs
    benchdiff remote     Upload to, fetch from, or compare on a server
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import click

from benchdiff import __version__
from benchdiff.compare import ComparisonReport
from benchdiff.config import Config, resolve_config
from benchdiff.errors import BenchdiffError
from benchdiff.logging import attach_log_file, setup_logging
from benchdiff.store import LocalStore

# Exit code per error kind; anything unlisted exits with 1.
EXIT_CODES: dict[str, int] = {
    "not-found": 2,
    "unauthorized": 3,
    "remote": 4,
}

_FORMATS = ["tsv", "table", "markdown", "csv"]


def _fail(exc: Exception) -> NoReturn:
    """Report *exc* on stderr and exit with the code for its kind."""
    click.echo(f"Error: {exc}", err=True)
    code = EXIT_CODES.get(exc.kind, 1) if isinstance(exc, BenchdiffError) else 1
    raise SystemExit(code) from exc


def _config(ctx: click.Context) -> Config:
    config: Config = ctx.obj
    return config


def _emit_report(report: ComparisonReport, fmt: str, threshold: float) -> None:
    if fmt == "tsv":
        from benchdiff.formatting import format_report

        click.echo(format_report(report), nl=False)
    elif fmt == "table":
        from benchdiff.display import format_report_table

        click.echo(format_report_table(report, threshold=threshold))
    elif fmt == "csv":
        from benchdiff.export import export_csv

        click.echo(export_csv(report, threshold=threshold), nl=False)
    else:
        from benchdiff.export import export_markdown

        click.echo(export_markdown(report, threshold=threshold))


def _check_regressions(report: ComparisonReport, threshold: float, fail: bool) -> None:
    regressions = report.regressions(threshold)
    if fail and regressions:
        click.echo(
            f"{len(regressions)} metric(s) regressed by more than {threshold:g}%",
            err=True,
        )
        raise SystemExit(1)


def _report_options(func):  # type: ignore[no-untyped-def]
    """Options shared by the commands that print a comparison."""
    func = click.option(
        "--fail-on-regression",
        is_flag=True,
        default=False,
        help="Exit with status 1 if any metric regressed beyond the threshold.",
    )(func)
    func = click.option(
        "--allow-disjoint/--no-allow-disjoint",
        default=None,
        help="Report runs that share no benchmark as added/removed instead of failing.",
    )(func)
    func = click.option(
        "--threshold",
        type=float,
        default=None,
        help="Percent change below which a metric counts as unchanged (default: 5).",
    )(func)
    func = click.option(
        "--format",
        "fmt",
        type=click.Choice(_FORMATS),
        default="table",
        show_default=True,
        help="Output format.",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./benchdiff.yaml if present).",
)
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding stored runs (default: .benchdiff).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write debug logs to this file (default: log_file from config).",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    store_dir: Path | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """benchdiff: store benchmark output per commit and compare runs."""
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        config = resolve_config(
            config_path, cli_overrides={"store_dir": store_dir, "log_file": log_file}
        )
        if config.log_file is not None:
            attach_log_file(config.log_file)
    except (OSError, ValueError) as exc:
        _fail(exc)
    ctx.obj = config


# ---------------------------------------------------------------------------
# File commands
# ---------------------------------------------------------------------------


@main.command("parse")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def parse_cmd(path: Path) -> None:
    """Show the measurements parsed from benchmark output in PATH."""
    from benchdiff.display import format_run
    from benchdiff.parser import parse_file

    try:
        run = parse_file(path)
    except BenchdiffError as exc:
        _fail(exc)
    click.echo(format_run(run))


@main.command("compare")
@click.argument("old", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("new", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_report_options
@click.pass_context
def compare_cmd(
    ctx: click.Context,
    old: Path,
    new: Path,
    fmt: str,
    threshold: float | None,
    allow_disjoint: bool | None,
    fail_on_regression: bool,
) -> None:
    """Compare benchmark output files OLD (baseline) and NEW.

    \b
    Examples:
        go test -bench . > old.txt   # on main
        go test -bench . > new.txt   # on your branch
        benchdiff compare old.txt new.txt
        benchdiff compare old.txt new.txt --format tsv
    """
    from benchdiff.compare import compare
    from benchdiff.parser import parse_file

    config = _config(ctx)
    threshold = config.threshold if threshold is None else threshold
    try:
        report = compare(
            parse_file(old),
            parse_file(new),
            directions=config.directions,
            allow_disjoint=config.allow_disjoint if allow_disjoint is None else allow_disjoint,
        )
    except BenchdiffError as exc:
        _fail(exc)
    _emit_report(report, fmt, threshold)
    _check_regressions(report, threshold, fail_on_regression)


# ---------------------------------------------------------------------------
# Local store commands
# ---------------------------------------------------------------------------


@main.command("upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--commit", required=True, help="Commit the benchmark was run on.")
@click.option("--signature", default="", help="HMAC-SHA256 signature of the content.")
@click.pass_context
def upload_cmd(ctx: click.Context, path: Path, commit: str, signature: str) -> None:
    """Store the benchmark output in PATH for COMMIT and print its id."""
    from benchdiff.parser import read_benchmark_file
    from benchdiff.service import submit_run
    from benchdiff.verify import verifier_for

    config = _config(ctx)
    try:
        run_id = submit_run(
            LocalStore(config.store_dir),
            read_benchmark_file(path),
            commit,
            signature=signature,
            secret=config.secret,
            verifier=verifier_for(config.secret),
        )
    except BenchdiffError as exc:
        _fail(exc)
    click.echo(run_id)


@main.command("show")
@click.argument("run_id", type=int)
@click.option("--parsed", is_flag=True, help="Show parsed measurements instead of raw text.")
@click.pass_context
def show_cmd(ctx: click.Context, run_id: int, parsed: bool) -> None:
    """Print the stored run RUN_ID."""
    from benchdiff.display import format_run, format_stored_run
    from benchdiff.parser import parse
    from benchdiff.service import show_run

    try:
        stored = show_run(LocalStore(_config(ctx).store_dir), run_id)
        click.echo(format_run(parse(stored.content)) if parsed else format_stored_run(stored))
    except BenchdiffError as exc:
        _fail(exc)


@main.command("list")
@click.option("--limit", type=int, default=100, show_default=True, help="Maximum runs to show.")
@click.pass_context
def list_cmd(ctx: click.Context, limit: int) -> None:
    """List stored runs, newest first."""
    from benchdiff.display import format_run_listing
    from benchdiff.service import list_runs

    runs = list_runs(LocalStore(_config(ctx).store_dir), limit=limit)
    click.echo(format_run_listing(runs))


@main.command("diff")
@click.argument("a_id", type=int)
@click.argument("b_id", type=int)
@_report_options
@click.pass_context
def diff_cmd(
    ctx: click.Context,
    a_id: int,
    b_id: int,
    fmt: str,
    threshold: float | None,
    allow_disjoint: bool | None,
    fail_on_regression: bool,
) -> None:
    """Compare stored runs A_ID (baseline) and B_ID."""
    from benchdiff.service import compare_runs

    config = _config(ctx)
    threshold = config.threshold if threshold is None else threshold
    try:
        report = compare_runs(
            LocalStore(config.store_dir),
            a_id,
            b_id,
            directions=config.directions,
            allow_disjoint=config.allow_disjoint if allow_disjoint is None else allow_disjoint,
        )
    except BenchdiffError as exc:
        _fail(exc)
    _emit_report(report, fmt, threshold)
    _check_regressions(report, threshold, fail_on_regression)


# ---------------------------------------------------------------------------
# Remote commands
# ---------------------------------------------------------------------------


def _remote_client(ctx: click.Context):  # type: ignore[no-untyped-def]
    from benchdiff.remote import RemoteClient

    config = _config(ctx)
    try:
        return RemoteClient(
            ctx.meta.get("benchdiff.remote_url") or config.remote_url,
            timeout=config.timeout,
            secret=config.secret,
        )
    except ValueError as exc:
        _fail(exc)


@main.group()
@click.option("--url", default=None, help="Server base URL (default: remote_url from config).")
@click.pass_context
def remote(ctx: click.Context, url: str | None) -> None:
    """Talk to a remote benchdiff server."""
    ctx.meta["benchdiff.remote_url"] = url


@remote.command("upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--commit", required=True, help="Commit the benchmark was run on.")
@click.pass_context
def remote_upload(ctx: click.Context, path: Path, commit: str) -> None:
    """Upload the benchmark output in PATH and print the server's id."""
    from benchdiff.parser import read_benchmark_file

    client = _remote_client(ctx)
    try:
        click.echo(client.upload(read_benchmark_file(path), commit))
    except BenchdiffError as exc:
        _fail(exc)


@remote.command("fetch")
@click.argument("run_id", type=int)
@click.pass_context
def remote_fetch(ctx: click.Context, run_id: int) -> None:
    """Print the raw content of remote run RUN_ID."""
    client = _remote_client(ctx)
    try:
        click.echo(client.fetch(run_id))
    except BenchdiffError as exc:
        _fail(exc)


@remote.command("compare")
@click.argument("a_id", type=int)
@click.argument("b_id", type=int)
@click.pass_context
def remote_compare(ctx: click.Context, a_id: int, b_id: int) -> None:
    """Print the server's comparison of runs A_ID and B_ID."""
    client = _remote_client(ctx)
    try:
        click.echo(client.compare(a_id, b_id), nl=False)
    except BenchdiffError as exc:
        _fail(exc)
