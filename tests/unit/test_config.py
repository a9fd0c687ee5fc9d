"""Unit tests for ski_results.config."""

from pathlib import Path

import pytest

from ski_results.config import (
    DEFAULT_OUTPUT_NAME,
    DEFAULT_TITLE,
    ConfigValidationError,
    ReportConfig,
    load_report_config,
    validate_report_config,
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "report.yml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadReportConfig:
    def test_none_gives_defaults(self):
        cfg = load_report_config(None)
        assert cfg == ReportConfig()
        assert cfg.title == DEFAULT_TITLE
        assert cfg.output_name == DEFAULT_OUTPUT_NAME
        assert cfg.heat1_table == "TTIMEINFOS_HEAT1"
        assert cfg.heat2_table == "TTIMEINFOS_HEAT2"
        assert cfg.competitors_table == "TCOMPETITORS"
        assert cfg.storage.use_ambient_credentials

    def test_empty_document_gives_defaults(self, tmp_path):
        cfg = load_report_config(_write(tmp_path, ""))
        assert cfg.title == DEFAULT_TITLE
        assert cfg.config_hash is not None

    def test_full_document(self, tmp_path):
        cfg = load_report_config(_write(tmp_path, """
title: Club Giant Slalom
output_name: gs_results.html
tables:
  heat1: RUN_ONE
  competitors: ROSTER
storage:
  project: race-project
  credentials_file: keys/sa.json
"""))
        assert cfg.title == "Club Giant Slalom"
        assert cfg.output_name == "gs_results.html"
        assert cfg.heat1_table == "RUN_ONE"
        assert cfg.heat2_table == "TTIMEINFOS_HEAT2"
        assert cfg.competitors_table == "ROSTER"
        assert cfg.storage.project == "race-project"
        assert cfg.storage.credentials_file == Path("keys/sa.json")
        assert not cfg.storage.use_ambient_credentials

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_report_config(tmp_path / "nope.yml")

    def test_malformed_yaml_raises_validation_error(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="invalid YAML"):
            load_report_config(_write(tmp_path, "title: [unclosed\n"))


class TestValidateReportConfig:
    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigValidationError, match="mapping"):
            validate_report_config(["title"])  # type: ignore[arg-type]

    def test_unknown_key(self):
        with pytest.raises(ConfigValidationError, match="Unknown config keys"):
            validate_report_config({"titel": "x"})

    def test_unknown_table_key(self):
        with pytest.raises(ConfigValidationError, match="Unknown table keys"):
            validate_report_config({"tables": {"heat3": "T3"}})

    @pytest.mark.parametrize("name", ["T; DROP TABLE x", "1ABC", "", 5])
    def test_table_name_must_be_identifier(self, name):
        with pytest.raises(ConfigValidationError, match="not a valid identifier"):
            validate_report_config({"tables": {"heat1": name}})

    def test_output_name_must_be_bare(self):
        with pytest.raises(ConfigValidationError, match="bare file name"):
            validate_report_config({"output_name": "../out.html"})

    def test_unknown_storage_key(self):
        with pytest.raises(ConfigValidationError, match="Unknown storage keys"):
            validate_report_config({"storage": {"token": "abc"}})

    def test_valid(self):
        validate_report_config({
            "title": "x",
            "tables": {"heat2": "H2"},
            "storage": {"project": "p"},
        })
