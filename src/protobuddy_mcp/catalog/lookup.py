"""Board and component lookup functions for the catalog database."""

import sqlite3

from ..models import Board, Component
from .result import row_to_board, row_to_component


def escape_like(value: str) -> str:
    """Escape SQL LIKE wildcards (%, _) in user input.

    Uses backslash as the escape character, which must be specified
    in the LIKE clause with ESCAPE '\\'.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _find_row(conn: sqlite3.Connection, table: str, ref: str) -> sqlite3.Row | None:
    """Exact id match first, then the shortest name containing ``ref``.

    SQLite LIKE is case-insensitive for ASCII, which gives the fuzzy name match.
    """
    ref = ref.strip()
    if not ref:
        return None

    row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", [ref]).fetchone()
    if row:
        return row

    return conn.execute(
        f"SELECT * FROM {table} WHERE name LIKE ? ESCAPE '\\' ORDER BY length(name), name LIMIT 1",
        [f"%{escape_like(ref)}%"],
    ).fetchone()


def get_board(conn: sqlite3.Connection, ref: str) -> Board | None:
    """Get a board by id or name fragment (e.g. "uno-r3", "Arduino Uno").

    Returns:
        Board or None if not found
    """
    row = _find_row(conn, "boards", ref)
    return row_to_board(row) if row else None


def get_component(conn: sqlite3.Connection, ref: str) -> Component | None:
    """Get a component by id or name fragment (e.g. "dht22", "ultrasonic").

    Returns:
        Component or None if not found
    """
    row = _find_row(conn, "components", ref)
    return row_to_component(row) if row else None
