"""ski_results.shared

Record types, run counters, exceptions and run-report writing shared by
the source reader, joiner and CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class SourceError(Exception):
    """Raised when a results or roster database cannot be opened or queried."""

    def __init__(self, source: str, detail: str, table: str | None = None) -> None:
        self.source = source
        self.table = table
        self.detail = detail
        where = f"{source} database" if table is None else f"{source} table {table}"
        super().__init__(f"{where}: {detail}")


class PublishError(Exception):
    """Raised when the rendered report cannot be written or uploaded."""


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Competitor:
    bib: int
    last_name: str
    first_name: str
    category: str


@dataclass(frozen=True)
class HeatResult:
    """One competitor's outcome in one heat. status/time_ms are None when absent."""

    bib: int
    status: int | None
    time_ms: int | None

    @classmethod
    def absent(cls, bib: int) -> HeatResult:
        return cls(bib=bib, status=None, time_ms=None)

    @property
    def is_absent(self) -> bool:
        return self.status is None and self.time_ms is None


@dataclass(frozen=True)
class JoinedRecord:
    bib: int
    last_name: str
    first_name: str
    category: str
    heat1: HeatResult
    heat2: HeatResult
    total: str


# ---------------------------------------------------------------------------
# RunCounters
# ---------------------------------------------------------------------------

@dataclass
class RunCounters:
    competitors_read: int = 0
    heat1_rows_read: int = 0
    heat2_rows_read: int = 0
    heat_rows_skipped: int = 0
    records_joined: int = 0
    heat1_missing: int = 0
    heat2_missing: int = 0
    duplicate_heat_bibs: int = 0
    totals_computed: int = 0
    categories: int = 0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "competitors_read": self.competitors_read,
            "heat1_rows_read": self.heat1_rows_read,
            "heat2_rows_read": self.heat2_rows_read,
            "heat_rows_skipped": self.heat_rows_skipped,
            "records_joined": self.records_joined,
            "heat1_missing": self.heat1_missing,
            "heat2_missing": self.heat2_missing,
            "duplicate_heat_bibs": self.duplicate_heat_bibs,
            "totals_computed": self.totals_computed,
            "categories": self.categories,
            "warnings": self.warnings,
        }


def build_run_summary(counters: RunCounters, dry_run: bool = False) -> str:
    lines = [
        "=" * 60,
        "Ski Results Report Run",
        f"  dry_run: {dry_run}",
        "=" * 60,
        f"  competitors read:    {counters.competitors_read}",
        f"  heat1 rows read:     {counters.heat1_rows_read}",
        f"  heat2 rows read:     {counters.heat2_rows_read}",
        f"    → skipped (bad):   {counters.heat_rows_skipped}",
        f"  records joined:      {counters.records_joined}",
        f"    → no heat1 row:    {counters.heat1_missing}",
        f"    → no heat2 row:    {counters.heat2_missing}",
        f"    → total computed:  {counters.totals_computed}",
        f"  categories:          {counters.categories}",
        f"Duplicate heat bibs:   {counters.duplicate_heat_bibs}",
    ]
    if counters.warnings:
        lines.append(f"\nWarnings ({len(counters.warnings)}):")
        for w in counters.warnings[:20]:
            lines.append(f"  {w}")
        if len(counters.warnings) > 20:
            lines.append(f"  ... and {len(counters.warnings) - 20} more")
    lines.append("=" * 60)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Report writer
# ---------------------------------------------------------------------------

def write_run_report(
    run_id: str,
    started_at: str,
    mode: str,
    dry_run: bool,
    source_paths: dict[str, str | None],
    counters: RunCounters,
    report_dir: Path = Path("./artifacts/reports"),
) -> Path:
    """Write the run's metadata and counters as JSON to <report_dir>/<run_id>.json.

    report_dir is created if missing; OSError propagates when it cannot be
    created or written, and the caller decides what that means for the run.
    """
    report = {
        "run_id": run_id,
        "mode": mode,
        "started_at": started_at,
        "finished_at": datetime.utcnow().isoformat(),
        "dry_run": dry_run,
        **source_paths,
        "counters": counters.to_dict(),
    }
    report_path = report_dir / f"{run_id}.json"
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(json.dumps(report, indent=2, default=str))
    return report_path
