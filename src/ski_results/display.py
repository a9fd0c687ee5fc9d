"""Display helpers for heat times and statuses.

All functions are pure and accept None where a value may be absent.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ABSENT = "-"

STATUS_FINISHED = 0
STATUS_DNS = 1
STATUS_DNF = 2
STATUS_DSQ = 3

STATUS_LABELS = {
    STATUS_DNS: "DNS",
    STATUS_DNF: "DNF",
    STATUS_DSQ: "DSQ",
}

_MS_PER_MINUTE = 60000
_HUNDREDTHS = Decimal("0.01")


# ---------------------------------------------------------------------------
# Time formatting
# ---------------------------------------------------------------------------

def format_time(time_ms: int | None) -> str:
    """Render milliseconds as ``m:ss.hh``; None renders as ``-``.

    Minutes are not padded. Seconds always carry two decimals and are
    zero-padded to five characters. Ties round away from zero on the
    float value of the seconds, so ``1005`` ms renders as ``0:01.00``.
    """
    if time_ms is None:
        return ABSENT
    minutes = time_ms // _MS_PER_MINUTE
    seconds = Decimal((time_ms % _MS_PER_MINUTE) / 1000).quantize(
        _HUNDREDTHS, rounding=ROUND_HALF_UP
    )
    return f"{minutes}:{seconds:0>5}"


# ---------------------------------------------------------------------------
# Status resolution
# ---------------------------------------------------------------------------

def status_display(status: int | None, time_ms: int | None) -> str:
    """Return DNS/DNF/DSQ for those codes, otherwise the formatted time.

    Unknown codes fall through to time formatting, same as finished.
    """
    label = STATUS_LABELS.get(status)  # type: ignore[arg-type]
    if label is not None:
        return label
    return format_time(time_ms)


def is_finished(status: int | None, time_ms: int | None) -> bool:
    return status == STATUS_FINISHED and time_ms is not None


def total_time(
    heat1_status: int | None,
    heat1_time_ms: int | None,
    heat2_status: int | None,
    heat2_time_ms: int | None,
) -> str:
    """Formatted sum of both heats, or ``-`` unless both are finished."""
    if is_finished(heat1_status, heat1_time_ms) and is_finished(heat2_status, heat2_time_ms):
        return format_time(heat1_time_ms + heat2_time_ms)  # type: ignore[operator]
    return ABSENT
