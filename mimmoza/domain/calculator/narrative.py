"""Table-driven narrative generation.

Each project scorer declares its opportunity and risk messages as rules on
named metrics; the rules are evaluated after scoring, independently of the
numeric computation.
"""

from __future__ import annotations

import operator
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
}


class Bucket(str, Enum):
    OPPORTUNITY = "opportunity"
    RISK = "risk"


@dataclass(frozen=True)
class NarrativeRule:
    """Emit ``message`` into ``bucket`` when ``metric <comparator> threshold``."""

    bucket: Bucket
    metric: str
    comparator: str
    threshold: Any
    message: str

    def __post_init__(self) -> None:
        if self.comparator not in COMPARATORS:
            raise ValueError(f"Unknown comparator: {self.comparator!r}")

    def matches(self, metrics: Mapping[str, Any]) -> bool:
        value = metrics.get(self.metric)
        if value is None:
            return False
        return COMPARATORS[self.comparator](value, self.threshold)


def opportunity(metric: str, comparator: str, threshold: Any, message: str) -> NarrativeRule:
    return NarrativeRule(Bucket.OPPORTUNITY, metric, comparator, threshold, message)


def risk(metric: str, comparator: str, threshold: Any, message: str) -> NarrativeRule:
    return NarrativeRule(Bucket.RISK, metric, comparator, threshold, message)


@dataclass
class Narrative:
    opportunities: list[str] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def evaluate_rules(
    rules: Iterable[NarrativeRule],
    metrics: Mapping[str, Any],
    recommendations: Iterable[str] = (),
) -> Narrative:
    """Evaluate rules in declaration order.

    A rule whose metric is missing (None) never fires.
    """
    narrative = Narrative(recommendations=list(recommendations))
    for rule in rules:
        if not rule.matches(metrics):
            continue
        if rule.bucket is Bucket.OPPORTUNITY:
            narrative.opportunities.append(rule.message)
        else:
            narrative.risks.append(rule.message)
    return narrative
