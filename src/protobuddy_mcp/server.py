"""ProtoBuddy MCP Server - check hardware components against development boards."""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .cache import MemoryCacheBackend
from .catalog import NotFoundError, close_catalog, get_catalog
from .compatibility import CompatibilityService
from .config import CACHE_MAX_SIZE, CACHE_TTL_SECONDS, HTTP_PORT, LOG_LEVEL, MAX_BULK_COMPONENTS

logger = logging.getLogger(__name__)

# Global state
_service: CompatibilityService | None = None
_cache: MemoryCacheBackend | None = None


@asynccontextmanager
async def lifespan(app):
    """Open the catalog and build the service on startup."""
    global _service, _cache

    catalog = get_catalog()
    stats = catalog.get_stats()
    logger.info(f"Catalog ready: {stats['boards']} boards, {stats['components']} components")

    _cache = MemoryCacheBackend(max_size=CACHE_MAX_SIZE)
    _service = CompatibilityService(catalog, _cache, ttl_seconds=CACHE_TTL_SECONDS)

    yield

    await _cache.close()
    _service = None
    _cache = None
    close_catalog()


mcp = FastMCP(
    name="protobuddy",
    instructions="Hardware compatibility checks for makers. Use check_compatibility for a single board/component question, rank_components to order candidate parts for a board, and bulk_compatibility for raw per-part results. Boards and components may be referenced by id or by part of their name.",
    lifespan=lifespan,
)


def _parse_list_param(value: list[str] | str | None) -> list[str] | None:
    """Parse a list parameter that may come as a JSON string from some MCP clients."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
            if isinstance(parsed, list):
                return [str(v) for v in parsed]
        except json.JSONDecodeError:
            logger.debug(f"Failed to parse list parameter as JSON: {value[:100]!r}")
    return None


def _get_service() -> CompatibilityService:
    if not _service:
        raise RuntimeError("Service not initialized")
    return _service


def _validate_components(components: list[str] | str | None) -> list[str] | dict[str, Any]:
    refs = _parse_list_param(components)
    if not refs:
        return {"error": "components must be a non-empty list of component ids or names"}
    if len(refs) > MAX_BULK_COMPONENTS:
        return {"error": f"Too many components (max {MAX_BULK_COMPONENTS})"}
    return refs


# Tools

@mcp.tool(
    annotations=ToolAnnotations(
        title="Check Compatibility",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def check_compatibility(board: str, component: str) -> dict:
    """Check whether a component can be safely driven by a board.

    Evaluates voltage, current, protocol, pin budget, library and physical
    constraints.

    Args:
        board: Board id or name (e.g., "arduino-uno-r3", "ESP32")
        component: Component id or name (e.g., "dht22", "HC-SR04")

    Returns:
        compatible, score (0-100), issues sorted by severity, and suggestions
    """
    service = _get_service()
    try:
        result = await service.check_compatibility(board, component)
    except NotFoundError as e:
        return {"error": str(e), "hint": "Use an exact id or a distinctive part of the name"}
    return result.to_dict()


@mcp.tool(
    annotations=ToolAnnotations(
        title="Compatibility Score",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def compatibility_score(board: str, component: str) -> dict:
    """Get only the 0-100 compatibility score for a board/component pair.

    Unknown boards or components score 0.
    """
    service = _get_service()
    return {"board": board, "component": component, "score": await service.calculate_score(board, component)}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Bulk Compatibility",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def bulk_compatibility(board: str, components: list[str] | str) -> dict:
    """Check many components against one board.

    A component that cannot be checked gets compatible=false and score 0;
    the other results are unaffected.

    Args:
        board: Board id or name
        components: Component ids or names (max 200)

    Returns:
        results: mapping of each component reference to its check
    """
    service = _get_service()
    refs = _validate_components(components)
    if isinstance(refs, dict):
        return refs
    results = await service.get_bulk_compatibility(board, refs)
    return {"board": board, "results": {ref: check.to_dict() for ref, check in results.items()}}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Rank Components",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def rank_components(board: str, components: list[str] | str, limit: int = 10) -> dict:
    """Rank candidate components for a board, best match first.

    Args:
        board: Board id or name
        components: Candidate component ids or names (max 200)
        limit: Number of ranked results to return (default 10)
    """
    service = _get_service()
    refs = _validate_components(components)
    if isinstance(refs, dict):
        return refs
    ranked = await service.rank_components(board, refs)
    effective_limit = max(1, limit)
    return {
        "board": board,
        "ranked": [
            {"component": ref, "score": check.score, "compatible": check.compatible, "issues": len(check.issues)}
            for ref, check in ranked[:effective_limit]
        ],
        "total": len(ranked),
    }


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "protobuddy-mcp",
        "version": __version__,
        "cache": _cache.stats() if _cache else None,
    })


def create_app():
    """Create the ASGI application."""
    app = mcp.http_app(
        path="/mcp",
        transport="streamable-http",
        stateless_http=True,
    )
    app.routes.append(Route("/health", health))
    return app


app = create_app()


def main():
    """Run the server."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "protobuddy_mcp.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
