"""Invariant checks over randomly generated board/component pairs."""

import itertools
import random

import pytest

from protobuddy_mcp.compatibility import RULES, evaluate
from protobuddy_mcp.models import (
    PROTOCOL_TYPES,
    SEVERITY_RANK,
    CompatibilityCheck,
    Dimensions,
    ProtocolRequirement,
)

from factories import analog_pins, digital_pins, make_board, make_component, pin

SEEDS = range(40)
LIBRARIES = ["Wire", "NewPing", "Servo", "FastLED", "TinyGPSPlus", "OneWire"]


def _maybe(rng, value):
    return value if rng.random() > 0.2 else None


def random_pair(seed):
    rng = random.Random(seed)
    board = make_board(
        io_voltage=_maybe(rng, rng.choice([1.8, 3.3, 5.0, 12.0])),
        current_per_pin=_maybe(rng, float(rng.choice([8, 12, 20, 40]))),
        current_total=_maybe(rng, float(rng.choice([50, 120, 200, 500]))),
        supported_protocols=tuple(rng.sample(PROTOCOL_TYPES, rng.randint(0, len(PROTOCOL_TYPES)))),
        pins=digital_pins(rng.randint(0, 30), serial=rng.randint(0, 2)) + analog_pins(rng.randint(0, 8)),
    )
    vmin = rng.choice([None, 1.8, 3.0, 3.3, 4.5, 5.0])
    vmax = rng.choice([None, 3.6, 5.0, 5.5, 6.0])
    if vmin is not None and vmax is not None and vmin > vmax:
        vmin, vmax = vmax, vmin
    component = make_component(
        voltage_min=vmin,
        voltage_max=vmax,
        current_max=_maybe(rng, round(rng.uniform(0, 300), 1)),
        protocols=tuple(
            ProtocolRequirement(type=t, address=rng.choice([None, "0x3C"]))
            for t in rng.sample(PROTOCOL_TYPES, rng.randint(0, 3))
        ),
        pins=tuple(pin(i, rng.choice(["digital", "analog", "power", "ground", "nc"])) for i in range(rng.randint(0, 24))),
        dimensions=rng.choice([None, Dimensions(20, 10), Dimensions(80, 36, 12)]),
        required_libraries=tuple(rng.sample(LIBRARIES, rng.randint(0, 3))),
    )
    return board, component


@pytest.mark.parametrize("seed", SEEDS)
class TestInvariants:
    def test_score_in_range(self, seed):
        result = evaluate(*random_pair(seed))
        assert 0 <= result.score <= 100

    def test_compatible_iff_no_error(self, seed):
        result = evaluate(*random_pair(seed))
        assert result.compatible == all(i.severity != "error" for i in result.issues)

    def test_issues_sorted_by_severity(self, seed):
        result = evaluate(*random_pair(seed))
        ranks = [SEVERITY_RANK[i.severity] for i in result.issues]
        assert ranks == sorted(ranks)

    def test_suggestions_unique(self, seed):
        result = evaluate(*random_pair(seed))
        assert len(result.suggestions) == len(set(result.suggestions))

    def test_rule_order_irrelevant(self, seed):
        board, component = random_pair(seed)
        expected = evaluate(board, component)
        rng = random.Random(seed)
        for _ in range(5):
            rules = list(RULES)
            rng.shuffle(rules)
            assert evaluate(board, component, rules) == expected

    def test_deterministic(self, seed):
        board, component = random_pair(seed)
        assert evaluate(board, component).to_json() == evaluate(board, component).to_json()

    def test_serialized_form_decodes_equal(self, seed):
        result = evaluate(*random_pair(seed))
        assert CompatibilityCheck.from_json(result.to_json()) == result


def test_every_permutation_small_case():
    board = make_board(io_voltage=3.3, current_total=40.0)
    component = make_component(
        voltage_min=4.5,
        voltage_max=5.5,
        current_max=25.0,
        protocols=(ProtocolRequirement(type="OneWire"), ProtocolRequirement(type="I2C", address="0x3C")),
        pins=tuple(pin(i) for i in range(12)),
        dimensions=Dimensions(80, 36),
        required_libraries=("NewPing",),
    )
    expected = evaluate(board, component)
    for rules in itertools.permutations(RULES):
        assert evaluate(board, component, rules) == expected
