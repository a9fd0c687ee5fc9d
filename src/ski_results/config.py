"""ski_results.config

YAML configuration for report runs.

Every key is optional; an absent file or empty document yields the
defaults that match the timing software's schema::

    title: Skiers Data
    output_name: skiers_data.html
    tables:
      heat1: TTIMEINFOS_HEAT1
      heat2: TTIMEINFOS_HEAT2
      competitors: TCOMPETITORS
    storage:
      project: my-gcp-project          # optional
      credentials_file: sa-key.json    # omit to use ambient credentials

Usage:
    from pathlib import Path
    from ski_results.config import load_report_config

    config = load_report_config(Path("config/report.yml"))
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TITLE = "Skiers Data"
DEFAULT_OUTPUT_NAME = "skiers_data.html"

DEFAULT_TABLES = {
    "heat1": "TTIMEINFOS_HEAT1",
    "heat2": "TTIMEINFOS_HEAT2",
    "competitors": "TCOMPETITORS",
}

VALID_TOP_LEVEL_KEYS = frozenset({"title", "output_name", "tables", "storage"})
VALID_STORAGE_KEYS = frozenset({"project", "credentials_file"})

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigValidationError(ValueError):
    """Raised when a YAML report config fails validation."""


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StorageConfig:
    """Object-store client settings.

    With no credentials_file the client resolves Application Default
    Credentials from the environment.
    """

    project: str | None = None
    credentials_file: Path | None = None

    @property
    def use_ambient_credentials(self) -> bool:
        return self.credentials_file is None


@dataclass(frozen=True)
class ReportConfig:
    title: str = DEFAULT_TITLE
    output_name: str = DEFAULT_OUTPUT_NAME
    heat1_table: str = DEFAULT_TABLES["heat1"]
    heat2_table: str = DEFAULT_TABLES["heat2"]
    competitors_table: str = DEFAULT_TABLES["competitors"]
    storage: StorageConfig = field(default_factory=StorageConfig)
    config_hash: str | None = None


# ---------------------------------------------------------------------------
# Loader + validator
# ---------------------------------------------------------------------------

def load_report_config(yaml_path: Path | None) -> ReportConfig:
    """Load and validate a ReportConfig; None returns the defaults.

    Raises:
        ConfigValidationError: If the YAML is malformed, a key is unknown
            or a value is invalid.
        FileNotFoundError: If the YAML file does not exist.
    """
    if yaml_path is None:
        return ReportConfig()

    raw = yaml_path.read_text(encoding="utf-8")
    try:
        data: dict[str, Any] = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"invalid YAML: {exc}") from exc
    validate_report_config(data)

    tables = {**DEFAULT_TABLES, **(data.get("tables") or {})}
    storage = data.get("storage") or {}
    credentials_file = storage.get("credentials_file")
    return ReportConfig(
        title=str(data.get("title", DEFAULT_TITLE)),
        output_name=str(data.get("output_name", DEFAULT_OUTPUT_NAME)),
        heat1_table=tables["heat1"],
        heat2_table=tables["heat2"],
        competitors_table=tables["competitors"],
        storage=StorageConfig(
            project=storage.get("project"),
            credentials_file=Path(credentials_file) if credentials_file else None,
        ),
        config_hash=hashlib.sha256(raw.encode("utf-8")).hexdigest(),
    )


def validate_report_config(data: dict[str, Any]) -> None:
    """Raise ConfigValidationError if data does not match the config schema."""
    if not isinstance(data, dict):
        raise ConfigValidationError("YAML root must be a mapping.")

    unknown = set(data.keys()) - VALID_TOP_LEVEL_KEYS
    if unknown:
        raise ConfigValidationError(f"Unknown config keys: {sorted(unknown)}")

    output_name = data.get("output_name")
    if output_name is not None:
        if not isinstance(output_name, str) or not output_name.strip():
            raise ConfigValidationError("'output_name' must be a non-empty string.")
        if "/" in output_name or "\\" in output_name:
            raise ConfigValidationError(
                f"'output_name' {output_name!r} must be a bare file name."
            )

    tables = data.get("tables") or {}
    if not isinstance(tables, dict):
        raise ConfigValidationError("'tables' must be a mapping.")
    unknown_tables = set(tables.keys()) - set(DEFAULT_TABLES)
    if unknown_tables:
        raise ConfigValidationError(
            f"Unknown table keys: {sorted(unknown_tables)}. "
            f"Must be among {sorted(DEFAULT_TABLES)}."
        )
    for key, name in tables.items():
        # Table names are interpolated into SELECT statements.
        if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
            raise ConfigValidationError(f"Table '{key}' name {name!r} is not a valid identifier.")

    storage = data.get("storage") or {}
    if not isinstance(storage, dict):
        raise ConfigValidationError("'storage' must be a mapping.")
    unknown_storage = set(storage.keys()) - VALID_STORAGE_KEYS
    if unknown_storage:
        raise ConfigValidationError(f"Unknown storage keys: {sorted(unknown_storage)}")
