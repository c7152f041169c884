"""Compatibility rules.

Each rule is a pure function ``(Board, Component) -> RuleOutcome``. Rules never
raise on missing optional data; an absent requirement is compatible for that
dimension.
"""

import math
from typing import Callable

from ..models import Board, Component, CompatibilityIssue, ProtocolRequirement, RuleOutcome

Rule = Callable[[Board, Component], RuleOutcome]

# Voltage
VOLTAGE_ERROR_DELTA = 1.5  # Volts between board IO and component minimum
VOLTAGE_ERROR_PENALTY = 50
VOLTAGE_WARNING_PENALTY = 20
LEVEL_SHIFT_MAX_VOLTAGE = 3.6
FIVE_VOLT_MIN_VOLTAGE = 4.5

# Current
CURRENT_ERROR_PENALTY = 40
CURRENT_WARNING_PENALTY = 10
CURRENT_BUDGET_PENALTY = 5
CURRENT_WARNING_RATIO = 0.8
CURRENT_BUDGET_RATIO = 0.5

# Protocols
PROTOCOL_ERROR_PENALTY = 30
UART_WARNING_PENALTY = 10

# Pins
PIN_ERROR_PENALTY = 30
PIN_WARNING_PENALTY = 5
PIN_WARNING_RATIO = 0.8
ANALOG_ERROR_PENALTY = 25

# Libraries
LIBRARY_WARNING_PENALTY = 5
KNOWN_LIBRARIES = (
    "Arduino", "Wire", "SPI", "SoftwareSerial", "Servo",
    "LiquidCrystal", "DHT", "OneWire", "Adafruit_Sensor",
)

# Physical
LARGE_COMPONENT_MM = 50
PHYSICAL_INFO_PENALTY = 2

PROTOCOL_SOLUTIONS = {
    "I2C": "Use software I2C or an I2C-capable board",
    "SPI": "Use bit-banged SPI or choose a board with SPI support",
    "UART": "Use SoftwareSerial library or a board with multiple UARTs",
    "OneWire": "OneWire can be implemented on any digital pin",
    "CAN": "Use a CAN transceiver shield or CAN-capable board",
}
DEFAULT_PROTOCOL_SOLUTION = "Check if software implementation is available"


def _voltage_range(vmin: float | None, vmax: float | None) -> str:
    if vmin is None:
        return f"at most {vmax}V"
    if vmax is None:
        return f"at least {vmin}V"
    return f"{vmin}-{vmax}V"


def check_voltage(board: Board, component: Component) -> RuleOutcome:
    """Board IO voltage must fall inside the component's operating range."""
    vb = board.io_voltage
    vmin, vmax = component.voltage_min, component.voltage_max
    if vb is None or (vmin is None and vmax is None):
        return RuleOutcome(rule="voltage")

    low = vmin if vmin is not None else -math.inf
    high = vmax if vmax is not None else math.inf
    if low <= vb <= high:
        return RuleOutcome(rule="voltage")

    # With no declared minimum the nearest bound is the maximum
    reference = vmin if vmin is not None else vmax
    is_error = abs(vb - reference) > VOLTAGE_ERROR_DELTA
    issue = CompatibilityIssue(
        kind="voltage",
        severity="error" if is_error else "warning",
        message=f"Voltage mismatch: Board operates at {vb}V, component requires {_voltage_range(vmin, vmax)}",
        solution=(
            "Consider using a level shifter or voltage divider"
            if vb > high
            else "Component may work but check datasheet for tolerance"
        ),
    )

    suggestions: list[str] = []
    if vb == 5 and high <= LEVEL_SHIFT_MAX_VOLTAGE:
        suggestions.append("Use a 3.3V level shifter for safe operation")
    elif vb == 3.3 and low >= FIVE_VOLT_MIN_VOLTAGE:
        suggestions.append("This component requires 5V and may not work reliably at 3.3V")

    return RuleOutcome(
        rule="voltage",
        issues=(issue,),
        suggestions=tuple(suggestions),
        penalty=VOLTAGE_ERROR_PENALTY if is_error else VOLTAGE_WARNING_PENALTY,
    )


def check_current(board: Board, component: Component) -> RuleOutcome:
    """Component draw against the per-pin limit and the total board budget.

    The two checks are independent and their penalties add up.
    """
    per_pin = board.current_per_pin
    total = board.current_total
    draw = component.current_max

    issues: list[CompatibilityIssue] = []
    suggestions: list[str] = []
    penalty = 0

    if draw is None:
        return RuleOutcome(rule="current")

    if per_pin is not None and draw > per_pin:
        issues.append(CompatibilityIssue(
            kind="current",
            severity="error",
            message=f"Current requirement too high: Component needs {draw:g}mA, board can supply {per_pin:g}mA per pin",
            solution="Use an external driver or power supply",
        ))
        suggestions.append("Consider using a MOSFET or relay driver for high-current components")
        penalty = CURRENT_ERROR_PENALTY
    elif per_pin is not None and draw > per_pin * CURRENT_WARNING_RATIO:
        issues.append(CompatibilityIssue(
            kind="current",
            severity="warning",
            message=f"High current usage: Component uses {draw:g}mA, close to board limit of {per_pin:g}mA",
            solution="Monitor temperature and consider external power",
        ))
        penalty = CURRENT_WARNING_PENALTY

    if total is not None and draw > total * CURRENT_BUDGET_RATIO:
        issues.append(CompatibilityIssue(
            kind="current",
            severity="warning",
            message=f"Component uses significant portion of total current budget ({draw:g}mA of {total:g}mA)",
            solution="Consider power management and other connected components",
        ))
        penalty += CURRENT_BUDGET_PENALTY

    return RuleOutcome(rule="current", issues=tuple(issues), suggestions=tuple(suggestions), penalty=penalty)


def _protocol_solution(protocol: str) -> str:
    return PROTOCOL_SOLUTIONS.get(protocol, DEFAULT_PROTOCOL_SOLUTION)


def _check_supported_protocol(
    board: Board,
    requirement: ProtocolRequirement,
) -> tuple[list[CompatibilityIssue], list[str], int]:
    """Secondary checks for a protocol the board does support."""
    issues: list[CompatibilityIssue] = []
    suggestions: list[str] = []
    penalty = 0

    if requirement.type == "I2C":
        if requirement.address:
            suggestions.append(
                f"I2C address: {requirement.address} - ensure no conflicts with other components"
            )
    elif requirement.type == "SPI":
        suggestions.append("SPI component will need a dedicated CS (Chip Select) pin")
    elif requirement.type == "UART":
        if board.serial_pin_count == 0:
            issues.append(CompatibilityIssue(
                kind="protocol",
                severity="warning",
                message="No dedicated UART pins found - may need to use software serial",
                solution="Use SoftwareSerial library for additional UART functionality",
            ))
            penalty = UART_WARNING_PENALTY

    return issues, suggestions, penalty


def check_protocols(board: Board, component: Component) -> RuleOutcome:
    """Every protocol the component needs must be available on the board."""
    if not component.protocols:
        return RuleOutcome(rule="protocol")

    issues: list[CompatibilityIssue] = []
    suggestions: list[str] = []
    penalty = 0

    for requirement in component.protocols:
        if requirement.type == "GPIO":
            continue
        if not board.supports(requirement.type):
            issues.append(CompatibilityIssue(
                kind="protocol",
                severity="error",
                message=f"Protocol not supported: Component requires {requirement.type}, board doesn't support it",
                solution=_protocol_solution(requirement.type),
            ))
            penalty += PROTOCOL_ERROR_PENALTY
            continue

        extra_issues, extra_suggestions, extra_penalty = _check_supported_protocol(board, requirement)
        issues.extend(extra_issues)
        suggestions.extend(extra_suggestions)
        penalty += extra_penalty

    return RuleOutcome(rule="protocol", issues=tuple(issues), suggestions=tuple(suggestions), penalty=penalty)


def check_pins(board: Board, component: Component) -> RuleOutcome:
    """Pin budget: total pins against GPIO pins, analog pins against ADC inputs."""
    issues: list[CompatibilityIssue] = []
    penalty = 0

    required = component.pin_count
    available = board.gpio_pin_count

    if required > available:
        issues.append(CompatibilityIssue(
            kind="pins",
            severity="error",
            message=f"Insufficient pins: Component needs {required} pins, board has {available} available",
            solution="Use a pin expander or choose a board with more pins",
        ))
        penalty = PIN_ERROR_PENALTY
    elif required > available * PIN_WARNING_RATIO:
        issues.append(CompatibilityIssue(
            kind="pins",
            severity="warning",
            message=f"High pin usage: Component uses {required} of {available} available pins",
            solution="Consider pin usage for future expansion",
        ))
        penalty = PIN_WARNING_PENALTY

    analog_needed = component.analog_pins_needed
    analog_available = board.analog_pin_count
    if analog_needed > analog_available:
        issues.append(CompatibilityIssue(
            kind="pins",
            severity="error",
            message=f"Insufficient analog pins: Need {analog_needed}, have {analog_available}",
            solution="Use an external ADC or choose a board with more analog pins",
        ))
        penalty += ANALOG_ERROR_PENALTY

    return RuleOutcome(rule="pins", issues=tuple(issues), penalty=penalty)


def is_library_available(library: str) -> bool:
    """Case-insensitive substring match against widely available libraries."""
    lowered = library.lower()
    return any(known.lower() in lowered for known in KNOWN_LIBRARIES)


def check_libraries(board: Board, component: Component) -> RuleOutcome:
    """Flag libraries that are not commonly installed. Never blocks."""
    issues = tuple(
        CompatibilityIssue(
            kind="library",
            severity="warning",
            message=f"Library may not be available: {library}",
            solution="Check Arduino Library Manager or install manually",
        )
        for library in component.required_libraries
        if not is_library_available(library)
    )
    return RuleOutcome(
        rule="library",
        issues=issues,
        penalty=LIBRARY_WARNING_PENALTY * len(issues),
        blocking=False,
    )


def check_physical(board: Board, component: Component) -> RuleOutcome:
    # Board outline is not modelled, so only the component footprint is checked
    dims = component.dimensions
    if dims is None or (dims.length <= LARGE_COMPONENT_MM and dims.width <= LARGE_COMPONENT_MM):
        return RuleOutcome(rule="physical", blocking=False)

    issue = CompatibilityIssue(
        kind="physical",
        severity="info",
        message=f"Large component: {dims.length:g}x{dims.width:g}mm - ensure adequate space",
        solution="Verify board has sufficient space and consider mounting",
    )
    return RuleOutcome(rule="physical", issues=(issue,), penalty=PHYSICAL_INFO_PENALTY, blocking=False)


# Declared order; also the tiebreak order for issues of equal severity
RULES: tuple[Rule, ...] = (
    check_voltage,
    check_current,
    check_protocols,
    check_pins,
    check_libraries,
    check_physical,
)

RULE_ORDER: tuple[str, ...] = ("voltage", "current", "protocol", "pins", "library", "physical")
