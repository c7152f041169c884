"""Catalog database construction and seed loading."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from ..parsers import parse_board_record, parse_component_record

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS boards (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    manufacturer TEXT,
    record TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS components (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    manufacturer TEXT,
    category TEXT,
    record TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_boards_name ON boards(name);
CREATE INDEX IF NOT EXISTS idx_components_name ON components(name);
"""


def load_seed(seed_file: Path) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Read board and component records from a JSON seed file.

    Every record is parsed once so a malformed catalog fails here rather
    than at check time.

    Returns:
        Tuple of (board records, component records)
    """
    if not seed_file.exists():
        raise FileNotFoundError(f"Catalog seed file not found: {seed_file}")

    with open(seed_file, encoding="utf-8") as f:
        data = json.load(f)

    boards = data.get("boards", [])
    components = data.get("components", [])
    for record in boards:
        parse_board_record(record)
    for record in components:
        parse_component_record(record)
    return boards, components


def insert_records(
    conn: sqlite3.Connection,
    boards: list[dict[str, Any]],
    components: list[dict[str, Any]],
) -> None:
    """Insert (or replace) catalog records, storing the raw record as JSON.

    The indexed id and name columns come from the parsed record, so they match
    the stripped references that lookups query with.
    """
    board_rows = []
    for r in boards:
        board = parse_board_record(r)
        board_rows.append((board.id, board.name, board.manufacturer or None, json.dumps(r)))
    component_rows = []
    for r in components:
        component = parse_component_record(r)
        component_rows.append((
            component.id,
            component.name,
            component.manufacturer or None,
            component.category or None,
            json.dumps(r),
        ))

    conn.executemany(
        "INSERT OR REPLACE INTO boards (id, name, manufacturer, record) VALUES (?, ?, ?, ?)",
        board_rows,
    )
    conn.executemany(
        "INSERT OR REPLACE INTO components (id, name, manufacturer, category, record) VALUES (?, ?, ?, ?, ?)",
        component_rows,
    )
    conn.commit()


def build_database(seed_file: Path, db_path: Path) -> None:
    """Build the catalog database from the seed file.

    Args:
        seed_file: JSON file with "boards" and "components" arrays
        db_path: Output database path
    """
    boards, components = load_seed(seed_file)
    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(SCHEMA)
        insert_records(conn, boards, components)
    except sqlite3.Error as e:
        # A half-built file would be opened as an empty catalog next time
        conn.close()
        db_path.unlink(missing_ok=True)
        logger.error(f"Catalog build failed: {e}")
        raise RuntimeError(f"Failed to build catalog from {seed_file}: {e}") from e
    finally:
        conn.close()
    logger.info(f"Catalog built at {db_path}: {len(boards)} boards, {len(components)} components")
