"""In-memory catalog with the same lookup semantics as the database."""

from pathlib import Path
from typing import Iterable, TypeVar

from ..models import Board, Component
from ..parsers import parse_board_record, parse_component_record
from .connection import load_seed

T = TypeVar("T", Board, Component)


def _match(records: dict[str, T], ref: str) -> T | None:
    ref = ref.strip()
    if not ref:
        return None
    if ref in records:
        return records[ref]
    needle = ref.lower()
    matches = [r for r in records.values() if needle in r.name.lower()]
    if not matches:
        return None
    return min(matches, key=lambda r: (len(r.name), r.name))


class InMemoryCatalog:
    """Catalog repository over plain dicts. Useful for tests and embedding."""

    def __init__(self, boards: Iterable[Board] = (), components: Iterable[Component] = ()):
        self._boards = {b.id: b for b in boards}
        self._components = {c.id: c for c in components}

    @classmethod
    def from_seed(cls, seed_file: Path) -> "InMemoryCatalog":
        boards, components = load_seed(seed_file)
        return cls(
            [parse_board_record(r) for r in boards],
            [parse_component_record(r) for r in components],
        )

    def add_board(self, board: Board) -> None:
        self._boards[board.id] = board

    def add_component(self, component: Component) -> None:
        self._components[component.id] = component

    async def get_board(self, ref: str) -> Board | None:
        return _match(self._boards, ref)

    async def get_component(self, ref: str) -> Component | None:
        return _match(self._components, ref)
