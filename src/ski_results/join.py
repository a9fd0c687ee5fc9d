"""ski_results.join

Left-join of both heats onto the competitor roster, and grouping of the
joined rows by category.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ski_results.display import is_finished, total_time
from ski_results.shared import Competitor, HeatResult, JoinedRecord, RunCounters

log = logging.getLogger(__name__)


def index_heat(
    rows: Iterable[HeatResult],
    heat_label: str,
    counters: RunCounters,
) -> dict[int, HeatResult]:
    """Index heat rows by bib, keeping the first row seen for each bib.

    Later rows for the same bib are counted and reported as warnings.
    """
    by_bib: dict[int, HeatResult] = {}
    for row in rows:
        if row.bib in by_bib:
            counters.duplicate_heat_bibs += 1
            msg = f"{heat_label}: duplicate row for bib {row.bib} ignored (first row kept)"
            counters.warnings.append(msg)
            log.warning(msg)
            continue
        by_bib[row.bib] = row
    return by_bib


def join_results(
    competitors: Sequence[Competitor],
    heat1: Iterable[HeatResult],
    heat2: Iterable[HeatResult],
    counters: RunCounters | None = None,
) -> list[JoinedRecord]:
    """Return exactly one JoinedRecord per competitor, in roster order.

    A competitor with no row in a heat gets HeatResult.absent(). Heat rows
    whose bib is not on the roster are not reported.
    """
    if counters is None:
        counters = RunCounters()

    heat1_by_bib = index_heat(heat1, "heat1", counters)
    heat2_by_bib = index_heat(heat2, "heat2", counters)

    records: list[JoinedRecord] = []
    for competitor in competitors:
        h1 = heat1_by_bib.get(competitor.bib)
        if h1 is None:
            counters.heat1_missing += 1
            h1 = HeatResult.absent(competitor.bib)
        h2 = heat2_by_bib.get(competitor.bib)
        if h2 is None:
            counters.heat2_missing += 1
            h2 = HeatResult.absent(competitor.bib)

        if is_finished(h1.status, h1.time_ms) and is_finished(h2.status, h2.time_ms):
            counters.totals_computed += 1

        records.append(
            JoinedRecord(
                bib=competitor.bib,
                last_name=competitor.last_name,
                first_name=competitor.first_name,
                category=competitor.category,
                heat1=h1,
                heat2=h2,
                total=total_time(h1.status, h1.time_ms, h2.status, h2.time_ms),
            )
        )

    counters.records_joined += len(records)
    return records


def group_by_category(records: Iterable[JoinedRecord]) -> dict[str, list[JoinedRecord]]:
    """Group records by raw category value.

    Groups appear in first-seen order and members keep their input order.
    Category values are used as-is: "Junior" and "junior " are distinct.
    """
    groups: dict[str, list[JoinedRecord]] = {}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    return groups
