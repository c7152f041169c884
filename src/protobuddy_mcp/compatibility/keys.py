"""Cache key derivation."""

COMPATIBILITY_PREFIX = "compat"


def _clean(value: str, label: str) -> str:
    cleaned = value.strip() if value else ""
    if not cleaned:
        raise ValueError(f"{label} must be a non-empty identifier")
    return cleaned


def compatibility_key(board_id: str, component_id: str) -> str:
    """Key for a cached CompatibilityCheck, e.g. ``compat:uno-r3:dht22``."""
    return f"{COMPATIBILITY_PREFIX}:{_clean(board_id, 'board_id')}:{_clean(component_id, 'component_id')}"
