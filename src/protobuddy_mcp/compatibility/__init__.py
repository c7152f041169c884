"""Compatibility engine: rules, aggregation and the orchestrating service."""

from .aggregator import aggregate, failed_check
from .keys import compatibility_key
from .rules import (
    RULES,
    RULE_ORDER,
    check_current,
    check_libraries,
    check_physical,
    check_pins,
    check_protocols,
    check_voltage,
)
from .service import CompatibilityService, evaluate

__all__ = [
    "CompatibilityService",
    "evaluate",
    "aggregate",
    "failed_check",
    "compatibility_key",
    "RULES",
    "RULE_ORDER",
    "check_voltage",
    "check_current",
    "check_protocols",
    "check_pins",
    "check_libraries",
    "check_physical",
]
