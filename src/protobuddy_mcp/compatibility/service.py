"""Compatibility service: catalog lookup, rule evaluation and result caching."""

import asyncio
import json
import logging
from typing import Sequence

from ..cache import CacheBackend, ResultCache
from ..catalog import CatalogRepository, NotFoundError
from ..config import BULK_BATCH_SIZE, CACHE_TTL_SECONDS
from ..models import Board, CompatibilityCheck, Component
from .aggregator import aggregate, failed_check
from .keys import compatibility_key
from .rules import RULES, Rule

logger = logging.getLogger(__name__)


def evaluate(board: Board, component: Component, rules: Sequence[Rule] = RULES) -> CompatibilityCheck:
    """Run every rule against the pair and aggregate the outcomes.

    Rules are pure, so they can run in any order; the aggregator restores
    the declared order before merging.
    """
    return aggregate(rule(board, component) for rule in rules)


class CompatibilityService:
    """Checks boards against components.

    Dependencies are explicit: a catalog repository to resolve references and
    an optional cache backend for computed results. The cache is read-through
    but not single-flight; concurrent misses for the same pair each recompute.
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        cache: CacheBackend | None = None,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        batch_size: int = BULK_BATCH_SIZE,
        rules: Sequence[Rule] = RULES,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._catalog = catalog
        self._cache = ResultCache(cache)
        self._ttl = ttl_seconds
        self._batch_size = batch_size
        self._rules = tuple(rules)

    async def _resolve(self, board_ref: str, component_ref: str) -> tuple[Board, Component]:
        """Look up board and component concurrently.

        Raises:
            NotFoundError: If either reference does not resolve.
        """
        board, component = await asyncio.gather(
            self._catalog.get_board(board_ref),
            self._catalog.get_component(component_ref),
        )
        if board is None:
            raise NotFoundError("board", board_ref)
        if component is None:
            raise NotFoundError("component", component_ref)
        return board, component

    async def _cached(self, key: str) -> CompatibilityCheck | None:
        payload = await self._cache.get(key)
        if payload is None:
            return None
        try:
            return CompatibilityCheck.from_json(payload)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    async def check_compatibility(self, board_ref: str, component_ref: str) -> CompatibilityCheck:
        """Check whether a component can be driven by a board.

        Args:
            board_ref: Board id or name fragment (e.g. "uno-r3", "Arduino Uno")
            component_ref: Component id or name fragment (e.g. "dht22")

        Returns:
            CompatibilityCheck with score, sorted issues and suggestions

        Raises:
            NotFoundError: If the board or component does not exist.
        """
        board, component = await self._resolve(board_ref, component_ref)
        key = compatibility_key(board.id, component.id)

        cached = await self._cached(key)
        if cached is not None:
            logger.info(
                f"Compatibility check {board.id}/{component.id} (cached): "
                f"compatible={cached.compatible}, issues={len(cached.issues)}"
            )
            return cached

        result = evaluate(board, component, self._rules)
        await self._cache.set(key, result.to_json(), self._ttl)

        logger.info(
            f"Compatibility check {board.id}/{component.id}: "
            f"compatible={result.compatible}, issues={len(result.issues)}, score={result.score}"
        )
        return result

    async def calculate_score(self, board_ref: str, component_ref: str) -> int:
        """Score only. Any failure scores 0 so ranking callers never see an error."""
        try:
            result = await self.check_compatibility(board_ref, component_ref)
        except Exception as e:
            logger.warning(f"Failed to calculate compatibility score for {board_ref}/{component_ref}: {e}")
            return 0
        return result.score

    async def get_bulk_compatibility(
        self,
        board_ref: str,
        component_refs: Sequence[str],
    ) -> dict[str, CompatibilityCheck]:
        """Check many components against one board.

        References are processed in batches; checks within a batch run
        concurrently. A failing reference gets a failed_check() result
        instead of aborting the batch.

        Returns:
            Dict mapping each component reference to its result.
        """
        results: dict[str, CompatibilityCheck] = {}
        for start in range(0, len(component_refs), self._batch_size):
            batch = component_refs[start:start + self._batch_size]
            outcomes = await asyncio.gather(
                *[self.check_compatibility(board_ref, ref) for ref in batch],
                return_exceptions=True,
            )
            for ref, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.warning(f"Compatibility check failed for {ref}: {type(outcome).__name__}: {outcome}")
                    results[ref] = failed_check()
                else:
                    results[ref] = outcome
        return results

    async def rank_components(
        self,
        board_ref: str,
        component_refs: Sequence[str],
    ) -> list[tuple[str, CompatibilityCheck]]:
        """Bulk check, then order best first: compatible before incompatible, higher score first.

        Ties keep the input order.
        """
        results = await self.get_bulk_compatibility(board_ref, component_refs)
        return sorted(results.items(), key=lambda item: (not item[1].compatible, -item[1].score))

    async def invalidate(self, board_ref: str, component_ref: str) -> bool:
        """Drop the cached result for a pair so the next check recomputes.

        Returns:
            True if the cache accepted the delete.

        Raises:
            NotFoundError: If the board or component does not exist.
        """
        board, component = await self._resolve(board_ref, component_ref)
        return await self._cache.delete(compatibility_key(board.id, component.id))
