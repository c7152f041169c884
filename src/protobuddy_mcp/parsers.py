"""Parsers that turn catalog records into model objects.

Catalog records are the JSON documents the catalog collaborator publishes
(camelCase keys, nested ``specifications``). Missing optional sections become
empty tuples or None so the rules can treat them as "no requirement".
"""

from typing import Any

from .models import (
    BOARD_TYPES,
    PIN_TYPES,
    PROTOCOL_TYPES,
    Board,
    BoardPin,
    Component,
    ComponentPin,
    Dimensions,
    ProtocolRequirement,
)

# Lowercase name -> canonical protocol spelling
_PROTOCOL_LOOKUP = {p.lower(): p for p in PROTOCOL_TYPES}
_PROTOCOL_ALIASES = {
    "1-wire": "OneWire",
    "one-wire": "OneWire",
    "onewire": "OneWire",
    "i²c": "I2C",
    "iic": "I2C",
    "twi": "I2C",
    "serial": "UART",
    "analog": "ADC",
}

# Detail keys read by the rules; everything else is kept as extra metadata
_KNOWN_DETAIL_KEYS = frozenset({"address", "speed", "pins", "notes"})


def _to_float(value: Any) -> float | None:
    """Convert a numeric field, treating None/empty/unparseable as missing."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def _section(data: dict[str, Any] | None, *path: str) -> dict[str, Any]:
    """Walk nested dicts, returning {} as soon as a level is missing."""
    current: Any = data or {}
    for key in path:
        if not isinstance(current, dict):
            return {}
        current = current.get(key) or {}
    return current if isinstance(current, dict) else {}


def normalize_protocol(name: str, record_id: str = "") -> str:
    """Map a protocol name onto its canonical spelling (case-insensitive)."""
    key = str(name).strip().lower()
    canonical = _PROTOCOL_LOOKUP.get(key) or _PROTOCOL_ALIASES.get(key)
    if canonical is None:
        where = f" in {record_id}" if record_id else ""
        raise ValueError(f"Unknown protocol type {name!r}{where}")
    return canonical


def parse_protocol(data: dict[str, Any] | str, record_id: str = "") -> ProtocolRequirement:
    if isinstance(data, str):
        data = {"type": data}
    details = data.get("details") or {}
    if not isinstance(details, dict):
        details = {}
    address = details.get("address")
    pins = details.get("pins") or []
    return ProtocolRequirement(
        type=normalize_protocol(data.get("type", ""), record_id),  # type: ignore[arg-type]
        address=str(address) if address not in (None, "") else None,
        speed=details.get("speed"),
        pins=tuple(str(p) for p in pins),
        notes=details.get("notes"),
        extra={k: v for k, v in details.items() if k not in _KNOWN_DETAIL_KEYS},
    )


def parse_component_pin(data: dict[str, Any], record_id: str = "") -> ComponentPin:
    pin_type = str(data.get("type", "")).strip().lower()
    if pin_type not in PIN_TYPES:
        raise ValueError(f"Unknown pin type {data.get('type')!r} in {record_id or 'component'}")
    return ComponentPin(
        number=_to_int(data.get("number")) or 0,
        name=str(data.get("name", "")),
        type=pin_type,  # type: ignore[arg-type]
        function=str(data.get("function", "")),
        voltage=_to_float(data.get("voltage")),
        notes=data.get("notes"),
    )


def parse_board_pin(data: dict[str, Any]) -> BoardPin:
    return BoardPin(
        number=_to_int(data.get("number")) or 0,
        name=str(data.get("name", "")),
        functions=tuple(str(f) for f in data.get("functions") or []),
        digital_pin=_to_int(data.get("digitalPin")),
        analog_pin=_to_int(data.get("analogPin")),
        voltage=_to_float(data.get("voltage")),
        current_max=_to_float(data.get("currentMax")),
    )


def parse_board_record(data: dict[str, Any]) -> Board:
    """Build a Board from a catalog record.

    Raises:
        ValueError: If the record has no id, or names an unknown protocol.
    """
    board_id = str(data.get("id") or "").strip()
    if not board_id:
        raise ValueError("Board record has no id")

    voltage = _section(data, "specifications", "voltage")
    output = _section(data, "specifications", "current", "output")

    protocols: list[str] = []
    for entry in data.get("supportedProtocols") or []:
        name = entry.get("type", "") if isinstance(entry, dict) else entry
        canonical = normalize_protocol(name, board_id)
        if canonical not in protocols:
            protocols.append(canonical)

    board_type = data.get("type") or "microcontroller"
    if board_type not in BOARD_TYPES:
        raise ValueError(f"Unknown board type {board_type!r} in {board_id}")

    return Board(
        id=board_id,
        name=str(data.get("name") or board_id),
        io_voltage=_to_float(voltage.get("io")),
        operating_voltage=_to_float(voltage.get("operating")),
        current_per_pin=_to_float(output.get("perPin")),
        current_total=_to_float(output.get("total")),
        supported_protocols=tuple(protocols),  # type: ignore[arg-type]
        pins=tuple(parse_board_pin(p) for p in data.get("pins") or []),
        manufacturer=str(data.get("manufacturer") or ""),
        type=board_type,
    )


def parse_dimensions(data: dict[str, Any] | None) -> Dimensions | None:
    if not data:
        return None
    length = _to_float(data.get("length"))
    width = _to_float(data.get("width"))
    if length is None or width is None:
        return None
    return Dimensions(length=length, width=width, height=_to_float(data.get("height")))


def parse_component_record(data: dict[str, Any]) -> Component:
    """Build a Component from a catalog record.

    Raises:
        ValueError: If the record has no id, or names an unknown protocol or pin type.
    """
    component_id = str(data.get("id") or "").strip()
    if not component_id:
        raise ValueError("Component record has no id")

    specs = data.get("specifications") or {}
    voltage = _section(specs, "voltage", "operating")
    current = _section(specs, "current", "operating")
    libraries = _section(data, "compatibility").get("requiredLibraries") or []

    return Component(
        id=component_id,
        name=str(data.get("name") or component_id),
        voltage_min=_to_float(voltage.get("min")),
        voltage_max=_to_float(voltage.get("max")),
        current_max=_to_float(current.get("max")),
        current_typical=_to_float(current.get("typical")),
        protocols=tuple(parse_protocol(p, component_id) for p in specs.get("communication") or []),
        pins=tuple(parse_component_pin(p, component_id) for p in specs.get("pins") or []),
        dimensions=parse_dimensions(specs.get("dimensions")),
        required_libraries=tuple(str(lib) for lib in libraries),
        manufacturer=str(data.get("manufacturer") or ""),
        category=str(data.get("category") or ""),
    )
