"""ski_results.sources

Read-only access to the timing software's SQLite databases.

The heats database holds one table per heat (C_NUM, C_STATUS, C_TIME);
the competitors database holds the roster (C_NUM, C_LAST_NAME,
C_FIRST_NAME, C_CATEGORY). Connections are opened with ``mode=ro`` so a
mistyped path fails instead of creating an empty database.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from ski_results.shared import Competitor, HeatResult, RunCounters, SourceError

log = logging.getLogger(__name__)


def open_source(db_path: Path, source: str) -> sqlite3.Connection:
    """Open db_path read-only; raise SourceError if it cannot be opened."""
    resolved = db_path.resolve()
    try:
        conn = sqlite3.connect(f"{resolved.as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as exc:
        raise SourceError(source, f"cannot open {resolved}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    log.debug("Opened %s database at %s", source, resolved)
    return conn


def _fetch_all(
    conn: sqlite3.Connection,
    source: str,
    table: str,
    columns: tuple[str, ...],
) -> list[sqlite3.Row]:
    sql = f"SELECT {', '.join(columns)} FROM {table}"
    try:
        return conn.execute(sql).fetchall()
    except sqlite3.Error as exc:
        raise SourceError(source, str(exc), table=table) from exc


def _opt_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def load_competitors(
    conn: sqlite3.Connection,
    table: str = "TCOMPETITORS",
) -> list[Competitor]:
    """Return the roster in table order.

    NULL name or category cells become empty strings. A row whose bib is
    not an integer raises SourceError, since no record can be keyed on it.
    """
    rows = _fetch_all(
        conn, "competitors", table,
        ("C_NUM", "C_LAST_NAME", "C_FIRST_NAME", "C_CATEGORY"),
    )
    competitors: list[Competitor] = []
    for row in rows:
        try:
            bib = int(row["C_NUM"])
        except (TypeError, ValueError) as exc:
            raise SourceError(
                "competitors", f"bad row {dict(row)}: {exc}", table=table
            ) from exc
        competitors.append(
            Competitor(
                bib=bib,
                last_name=_text(row["C_LAST_NAME"]),
                first_name=_text(row["C_FIRST_NAME"]),
                category=_text(row["C_CATEGORY"]),
            )
        )
    return competitors


def load_heat(
    conn: sqlite3.Connection,
    table: str,
    counters: RunCounters | None = None,
) -> list[HeatResult]:
    """Return every timing row of one heat table in table order.

    Rows with a non-integer bib, status or time are skipped and counted
    in heat_rows_skipped.
    """
    if counters is None:
        counters = RunCounters()
    rows = _fetch_all(conn, "heats", table, ("C_NUM", "C_STATUS", "C_TIME"))
    results: list[HeatResult] = []
    for row in rows:
        try:
            result = HeatResult(
                bib=int(row["C_NUM"]),
                status=_opt_int(row["C_STATUS"]),
                time_ms=_opt_int(row["C_TIME"]),
            )
        except (TypeError, ValueError) as exc:
            counters.heat_rows_skipped += 1
            msg = f"{table}: skipped bad row {dict(row)}: {exc}"
            counters.warnings.append(msg)
            log.warning(msg)
            continue
        results.append(result)
    return results
