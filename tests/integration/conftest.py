"""Integration test fixtures.

Builds heats and competitors SQLite databases in tmp_path with the same
tables the timing software exports.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

HEAT_DDL = "CREATE TABLE {table} (C_NUM INTEGER, C_STATUS INTEGER, C_TIME INTEGER)"
COMPETITORS_DDL = """
CREATE TABLE TCOMPETITORS (
    C_NUM        INTEGER,
    C_LAST_NAME  TEXT,
    C_FIRST_NAME TEXT,
    C_CATEGORY   TEXT
)
"""

COMPETITORS = [
    (12, "Doe", "Jane", "Junior"),
    (7, "Berg", "Anna", "Senior"),
    (3, "Lind", "Erik", "Junior"),
    (21, "Nyström", "Åsa", "Senior"),
]
HEAT1 = [
    (12, 0, 65000),
    (7, 0, 61230),
    (3, 2, None),
]
HEAT2 = [
    (12, 0, 70000),
    (7, 1, None),
    (3, 0, 72000),
]


def build_heats_db(path: Path, heat1=HEAT1, heat2=HEAT2, tables=("TTIMEINFOS_HEAT1", "TTIMEINFOS_HEAT2")) -> Path:
    conn = sqlite3.connect(path)
    try:
        for table, rows in zip(tables, (heat1, heat2)):
            conn.execute(HEAT_DDL.format(table=table))
            conn.executemany(f"INSERT INTO {table} VALUES (?, ?, ?)", rows)
        conn.commit()
    finally:
        conn.close()
    return path


def build_competitors_db(path: Path, competitors=COMPETITORS) -> Path:
    conn = sqlite3.connect(path)
    try:
        conn.execute(COMPETITORS_DDL)
        conn.executemany("INSERT INTO TCOMPETITORS VALUES (?, ?, ?, ?)", competitors)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture()
def race_dbs(tmp_path):
    """Return (heats_db, competitors_db) paths populated with the sample race."""
    return (
        build_heats_db(tmp_path / "results.db"),
        build_competitors_db(tmp_path / "competitors.db"),
    )


@pytest.fixture()
def heats_db_factory(tmp_path):
    """Return a builder: heats_db_factory(name, heat1=..., heat2=..., tables=...) -> Path."""
    def _build(name="heats.db", **kwargs):
        return build_heats_db(tmp_path / name, **kwargs)
    return _build


@pytest.fixture()
def competitors_db_factory(tmp_path):
    """Return a builder: competitors_db_factory(name, competitors=...) -> Path."""
    def _build(name="competitors.db", **kwargs):
        return build_competitors_db(tmp_path / name, **kwargs)
    return _build
