"""Data model for boards, components and compatibility results."""

import json
from dataclasses import dataclass, field
from typing import Any, Literal

ProtocolType = Literal["I2C", "SPI", "UART", "PWM", "GPIO", "ADC", "OneWire", "CAN"]
PinType = Literal["power", "ground", "digital", "analog", "communication", "nc"]
BoardType = Literal["microcontroller", "sbc", "dev-board"]
IssueKind = Literal["voltage", "current", "protocol", "pins", "library", "physical", "error"]
Severity = Literal["error", "warning", "info"]

PROTOCOL_TYPES: tuple[str, ...] = ("I2C", "SPI", "UART", "PWM", "GPIO", "ADC", "OneWire", "CAN")
PIN_TYPES: tuple[str, ...] = ("power", "ground", "digital", "analog", "communication", "nc")
BOARD_TYPES: tuple[str, ...] = ("microcontroller", "sbc", "dev-board")

# Lower rank sorts first
SEVERITY_RANK: dict[str, int] = {"error": 0, "warning": 1, "info": 2}


@dataclass(frozen=True)
class ProtocolRequirement:
    """A communication protocol a component needs, with optional bus metadata.

    Fields the rules read are typed; anything else the catalog carries for the
    protocol (frequency, pulse width, ...) is kept verbatim in ``extra``.
    """

    type: ProtocolType
    address: str | None = None
    speed: str | None = None
    pins: tuple[str, ...] = ()
    notes: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ComponentPin:
    number: int
    name: str
    type: PinType
    function: str = ""
    voltage: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class BoardPin:
    number: int
    name: str
    functions: tuple[str, ...] = ()
    digital_pin: int | None = None
    analog_pin: int | None = None
    voltage: float | None = None
    current_max: float | None = None

    def has_function(self, *names: str) -> bool:
        """True if any declared function equals one of ``names`` (case-insensitive)."""
        wanted = {n.lower() for n in names}
        return any(f.lower() in wanted for f in self.functions)

    @property
    def is_gpio(self) -> bool:
        return self.has_function("GPIO", "digital")

    @property
    def is_analog(self) -> bool:
        return self.analog_pin is not None or self.has_function("analog", "ADC")

    @property
    def is_serial(self) -> bool:
        return any("uart" in f.lower() or "serial" in f.lower() for f in self.functions)


@dataclass(frozen=True)
class Dimensions:
    """Physical size in millimetres."""

    length: float
    width: float
    height: float | None = None


@dataclass(frozen=True)
class Board:
    """A development board as published by the catalog."""

    id: str
    name: str
    io_voltage: float | None
    operating_voltage: float | None
    current_per_pin: float | None  # mA
    current_total: float | None  # mA
    supported_protocols: tuple[ProtocolType, ...] = ()
    pins: tuple[BoardPin, ...] = ()
    manufacturer: str = ""
    type: BoardType = "microcontroller"

    def supports(self, protocol: str) -> bool:
        return protocol in self.supported_protocols

    @property
    def gpio_pin_count(self) -> int:
        return sum(1 for p in self.pins if p.is_gpio)

    @property
    def analog_pin_count(self) -> int:
        return sum(1 for p in self.pins if p.is_analog)

    @property
    def serial_pin_count(self) -> int:
        return sum(1 for p in self.pins if p.is_serial)


@dataclass(frozen=True)
class Component:
    """A sensor, actuator or interface chip as published by the catalog."""

    id: str
    name: str
    voltage_min: float | None
    voltage_max: float | None
    current_max: float | None  # mA
    current_typical: float | None = None
    protocols: tuple[ProtocolRequirement, ...] = ()
    pins: tuple[ComponentPin, ...] = ()
    dimensions: Dimensions | None = None
    required_libraries: tuple[str, ...] = ()
    manufacturer: str = ""
    category: str = ""

    @property
    def pin_count(self) -> int:
        return len(self.pins)

    @property
    def analog_pins_needed(self) -> int:
        return sum(1 for p in self.pins if p.type == "analog")


@dataclass(frozen=True)
class CompatibilityIssue:
    kind: IssueKind
    severity: Severity
    message: str
    solution: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "severity": self.severity,
            "message": self.message,
            "solution": self.solution,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompatibilityIssue":
        return cls(
            kind=data["kind"],
            severity=data["severity"],
            message=data["message"],
            solution=data.get("solution"),
        )


@dataclass(frozen=True)
class RuleOutcome:
    """What a single rule found: issues, suggestions and the score penalty.

    ``blocking`` is False for rules that only advise (library, physical).
    """

    rule: IssueKind
    issues: tuple[CompatibilityIssue, ...] = ()
    suggestions: tuple[str, ...] = ()
    penalty: int = 0
    blocking: bool = True

    @property
    def compatible(self) -> bool:
        if not self.blocking:
            return True
        return not any(i.severity == "error" for i in self.issues)


@dataclass(frozen=True)
class CompatibilityCheck:
    """Final verdict for one (board, component) pair."""

    compatible: bool
    issues: tuple[CompatibilityIssue, ...]
    suggestions: tuple[str, ...]
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "compatible": self.compatible,
            "issues": [i.to_dict() for i in self.issues],
            "suggestions": list(self.suggestions),
            "score": self.score,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompatibilityCheck":
        return cls(
            compatible=bool(data["compatible"]),
            issues=tuple(CompatibilityIssue.from_dict(i) for i in data.get("issues", [])),
            suggestions=tuple(data.get("suggestions", [])),
            score=int(data["score"]),
        )

    @classmethod
    def from_json(cls, payload: str) -> "CompatibilityCheck":
        return cls.from_dict(json.loads(payload))
