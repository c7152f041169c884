"""Row transformation for catalog lookups."""

import json
import sqlite3

from ..models import Board, Component
from ..parsers import parse_board_record, parse_component_record


def row_to_board(row: sqlite3.Row) -> Board:
    """Convert a ``boards`` row to a Board."""
    return parse_board_record(json.loads(row["record"]))


def row_to_component(row: sqlite3.Row) -> Component:
    """Convert a ``components`` row to a Component."""
    return parse_component_record(json.loads(row["record"]))
