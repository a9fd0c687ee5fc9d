"""ski_results.build_report

CLI entrypoint: join two-heat timing data with the competitor roster and
publish the HTML results report.

Modes (--mode):
  local    — write skiers_data.html into --output-dir (default)
  publish  — upload skiers_data.html to a GCS bucket

Usage (local):
    python -m ski_results.build_report \\
        data/results.db data/competitors.db

Usage (publish):
    python -m ski_results.build_report --mode publish \\
        --config config/report.yml \\
        data/results.db data/competitors.db race-results-bucket

Exit status is 0 on success and 1 on any failure in either mode.
"""

from __future__ import annotations

import sqlite3
import sys
import uuid
from datetime import datetime
from pathlib import Path

import click

from ski_results.config import ConfigValidationError, ReportConfig, load_report_config
from ski_results.join import group_by_category, join_results
from ski_results.publish import GcsPublisher, LocalPublisher, NullPublisher, Publisher
from ski_results.render import render_report
from ski_results.shared import (
    PublishError,
    RunCounters,
    SourceError,
    build_run_summary,
    write_run_report,
)
from ski_results.sources import load_competitors, load_heat, open_source


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------

def _validate_args(
    mode: str,
    heats_db: Path | None,
    competitors_db: Path | None,
    bucket: str | None,
    run_id: str,
) -> None:
    required: dict[str, object] = {
        "HEATS_DB": heats_db,
        "COMPETITORS_DB": competitors_db,
    }
    if mode == "publish":
        required["BUCKET"] = bucket
    missing = [k for k, v in required.items() if not v]
    if missing:
        click.echo(
            f"[{run_id}] FATAL: {mode} mode requires: {', '.join(missing)}",
            err=True,
        )
        sys.exit(1)


def _load_config(config_path: Path | None, run_id: str) -> ReportConfig:
    try:
        return load_report_config(config_path)
    except (ConfigValidationError, OSError) as exc:
        click.echo(f"[{run_id}] FATAL: invalid config {config_path}: {exc}", err=True)
        sys.exit(1)


def _select_publisher(
    mode: str,
    bucket: str | None,
    output_dir: Path,
    config: ReportConfig,
    dry_run: bool,
) -> Publisher:
    if dry_run:
        return NullPublisher()
    if mode == "publish":
        return GcsPublisher(bucket_name=bucket, storage_config=config.storage)  # type: ignore[arg-type]
    return LocalPublisher(output_dir=output_dir)


def _close_source(conn: sqlite3.Connection | None, source: str, run_id: str) -> None:
    if conn is None:
        return
    try:
        conn.close()
    except sqlite3.Error as exc:
        click.echo(f"[{run_id}] Error closing the {source} database connection: {exc}", err=True)
        return
    click.echo(f"[{run_id}] {source.capitalize()} database connection closed.")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def _run_report(
    run_id: str,
    mode: str,
    heats_db: Path,
    competitors_db: Path,
    config: ReportConfig,
    publisher: Publisher,
    counters: RunCounters,
    dry_run: bool,
) -> bool:
    """Load, join, render and publish. Returns False on a fatal failure.

    Nothing is rendered unless the roster and both heats loaded. Both
    connections are closed whatever the outcome.
    """
    heats_conn = None
    competitors_conn = None
    try:
        heats_conn = open_source(heats_db, "heats")
        click.echo(f"[{run_id}] Connected to the heats database at {heats_db.resolve()}")
        competitors_conn = open_source(competitors_db, "competitors")
        click.echo(f"[{run_id}] Connected to the competitors database at {competitors_db.resolve()}")

        competitors = load_competitors(competitors_conn, config.competitors_table)
        heat1 = load_heat(heats_conn, config.heat1_table, counters)
        heat2 = load_heat(heats_conn, config.heat2_table, counters)
        counters.competitors_read = len(competitors)
        counters.heat1_rows_read = len(heat1)
        counters.heat2_rows_read = len(heat2)

        records = join_results(competitors, heat1, heat2, counters)
        groups = group_by_category(records)
        counters.categories = len(groups)
        document = render_report(groups, title=config.title)

        if mode == "publish":
            click.echo(document)
        location = publisher.publish(document, config.output_name)
        if dry_run:
            click.echo(f"[{run_id}] [dry-run] Rendered {len(document)} chars; nothing published.")
        elif mode == "publish":
            click.echo(f"[{run_id}] Upload result: {location} ({len(document.encode('utf-8'))} bytes)")
        else:
            click.echo(f"[{run_id}] HTML file generated successfully: {location}")
        return True
    except SourceError as exc:
        click.echo(f"[{run_id}] FATAL: {exc}", err=True)
        return False
    except PublishError as exc:
        click.echo(f"[{run_id}] FATAL: {exc}", err=True)
        return False
    finally:
        _close_source(heats_conn, "heats", run_id)
        _close_source(competitors_conn, "competitors", run_id)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.command()
@click.option(
    "--mode",
    default="local",
    type=click.Choice(["local", "publish"]),
    show_default=True,
    help="Write the report to disk or upload it to a GCS bucket",
)
@click.argument("heats_db", required=False, type=click.Path(path_type=Path))
@click.argument("competitors_db", required=False, type=click.Path(path_type=Path))
@click.argument("bucket", required=False)
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="YAML report config")
@click.option(
    "--output-dir",
    default=".",
    type=click.Path(path_type=Path),
    show_default=True,
    help="[local] Directory the report is written into",
)
@click.option("--dry-run", is_flag=True, default=False, help="Join and render only; publish nothing")
@click.option("--run-id", default=None, help="Override UUID for log correlation")
@click.option(
    "--report-dir",
    default="./artifacts/reports",
    type=click.Path(file_okay=False, path_type=Path),
    show_default=True,
    help="Directory for the JSON run report",
)
def main(
    mode: str,
    heats_db: Path | None,
    competitors_db: Path | None,
    bucket: str | None,
    config_path: Path | None,
    output_dir: Path,
    dry_run: bool,
    run_id: str | None,
    report_dir: Path,
) -> None:
    """Build the ski race results report from HEATS_DB and COMPETITORS_DB."""
    run_id = run_id or str(uuid.uuid4())
    started_at = datetime.utcnow().isoformat()

    _validate_args(mode, heats_db, competitors_db, bucket, run_id)
    config = _load_config(config_path, run_id)

    click.echo(f"[{run_id}] Starting {mode} run (dry_run={dry_run})")
    if mode == "publish" and not config.storage.use_ambient_credentials:
        click.echo(f"[{run_id}] Using service account key {config.storage.credentials_file}")

    counters = RunCounters()
    publisher = _select_publisher(mode, bucket, output_dir, config, dry_run)
    ok = _run_report(
        run_id, mode,
        heats_db,  # type: ignore[arg-type]
        competitors_db,  # type: ignore[arg-type]
        config, publisher, counters, dry_run,
    )

    click.echo(build_run_summary(counters, dry_run=dry_run))
    try:
        report_path = write_run_report(
            run_id, started_at, mode, dry_run,
            {
                "heats_db": str(heats_db),
                "competitors_db": str(competitors_db),
                "bucket": bucket,
                "config_path": str(config_path) if config_path else None,
                "config_hash": config.config_hash,
            },
            counters,
            report_dir=report_dir,
        )
    except OSError as exc:
        # The report may already be published; the run still fails.
        click.echo(f"[{run_id}] FATAL: error writing run report to {report_dir}: {exc}", err=True)
        sys.exit(1)
    click.echo(f"[{run_id}] Run report: {report_path}")

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
