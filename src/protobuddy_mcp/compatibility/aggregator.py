"""Merge rule outcomes into a single CompatibilityCheck."""

from typing import Iterable

from ..models import SEVERITY_RANK, CompatibilityCheck, CompatibilityIssue, RuleOutcome
from .rules import RULE_ORDER

MAX_SCORE = 100
MIN_SCORE = 0


def _rule_rank(outcome: RuleOutcome) -> int:
    try:
        return RULE_ORDER.index(outcome.rule)
    except ValueError:
        return len(RULE_ORDER)


def aggregate(outcomes: Iterable[RuleOutcome]) -> CompatibilityCheck:
    """Combine outcomes regardless of the order the rules ran in.

    Outcomes are first put back into declared rule order, so the issue
    tiebreak and the first-seen order of suggestions are deterministic.
    """
    ordered = sorted(outcomes, key=_rule_rank)

    issues: list[CompatibilityIssue] = []
    suggestions: dict[str, None] = {}
    penalty = 0
    for outcome in ordered:
        issues.extend(outcome.issues)
        for suggestion in outcome.suggestions:
            suggestions.setdefault(suggestion, None)
        penalty += outcome.penalty

    # sorted() is stable, so equal severities keep rule order
    issues.sort(key=lambda i: SEVERITY_RANK[i.severity])

    return CompatibilityCheck(
        compatible=not any(i.severity == "error" for i in issues),
        issues=tuple(issues),
        suggestions=tuple(suggestions),
        score=max(MIN_SCORE, min(MAX_SCORE, MAX_SCORE - penalty)),
    )


def failed_check() -> CompatibilityCheck:
    """Stand-in result for a pair whose evaluation raised."""
    return CompatibilityCheck(
        compatible=False,
        issues=(
            CompatibilityIssue(
                kind="error",
                severity="error",
                message="Compatibility check failed",
                solution="Please try again or contact support",
            ),
        ),
        suggestions=(),
        score=0,
    )
