"""ski_results.render

Renders category-grouped results into one static HTML document.

Names and categories are autoescaped by Jinja2, so a roster entry such as
``O'Brien <Jr>`` renders as text rather than markup.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ski_results.config import DEFAULT_TITLE
from ski_results.display import format_time, status_display
from ski_results.shared import JoinedRecord

TEMPLATE_DIR = Path(__file__).parent / "templates"
REPORT_TEMPLATE = "report.html.j2"

COLUMNS = (
    "Bib Number",
    "Last Name",
    "First Name",
    "Heat1 Time",
    "Heat2 Time",
    "Total Time",
)


def build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("j2",)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["status_display"] = status_display
    env.filters["format_time"] = format_time
    return env


def render_report(
    groups: Mapping[str, Sequence[JoinedRecord]],
    title: str = DEFAULT_TITLE,
    env: Environment | None = None,
) -> str:
    """Return the HTML document: one heading and table per group, in group order."""
    env = env or build_environment()
    template = env.get_template(REPORT_TEMPLATE)
    return template.render(title=title, groups=groups, columns=COLUMNS)
