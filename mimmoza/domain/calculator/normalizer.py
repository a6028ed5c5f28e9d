"""Range normalization and weighted aggregation.

Raw metrics are mapped onto 0-100 sub-scores, then combined with weights.
Items with a non-positive weight are dropped from a weighted mean and the
remaining weights are renormalized, so scorers can leave out a term whose
data is missing without rebalancing by hand.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

WeightedItem = Union[Mapping[str, Any], Sequence[float]]


def to_number(value: Any) -> float | None:
    """Coerce a provider value to a finite float.

    Numbers pass through, numeric strings are parsed; booleans, None,
    NaN/inf and anything unparsable give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        x = float(value)
    elif isinstance(value, str):
        try:
            x = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return x if math.isfinite(x) else None


def clamp(n: Any, min_value: float = 0.0, max_value: float = 100.0) -> float:
    """Bound ``n`` to [min_value, max_value]; non-finite input maps to ``min_value``."""
    x = to_number(n)
    if x is None:
        return min_value
    return max(min_value, min(max_value, x))


def score_from_range(
    value: Any,
    min_value: float,
    max_value: float,
    higher_is_better: bool = True,
) -> float:
    """Map ``value`` linearly from [min_value, max_value] onto [0, 100].

    Args:
        value: Raw metric (None / non-finite gives 0)
        min_value: Value scoring 0 (100 when inverted)
        max_value: Value scoring 100 (0 when inverted)
        higher_is_better: False for metrics where lower is better
            (vacancy, unemployment, distance)

    Returns:
        Score clamped to 0-100
    """
    x = to_number(value)
    if x is None:
        return 0.0
    if max_value == min_value:
        return 0.0

    t = (x - min_value) / (max_value - min_value)
    p = clamp(t * 100.0, 0.0, 100.0)
    return p if higher_is_better else 100.0 - p


def _unpack(item: WeightedItem) -> tuple[Any, Any]:
    if isinstance(item, Mapping):
        return item.get("score"), item.get("weight")
    score, weight = item
    return score, weight


def weighted_mean(items: Iterable[WeightedItem]) -> float:
    """Weighted mean of 0-100 scores.

    Items are ``(score, weight)`` pairs or mappings with ``score`` and
    ``weight`` keys. Scores are clamped to 0-100; items whose weight is not
    a positive finite number are skipped.

    Returns:
        Mean in 0-100, or 0 when no item carries weight
    """
    wsum = 0.0
    ssum = 0.0
    for item in items:
        raw_score, raw_weight = _unpack(item)
        w = to_number(raw_weight) or 0.0
        if w <= 0:
            continue
        wsum += w
        ssum += clamp(raw_score, 0.0, 100.0) * w

    if wsum <= 0:
        return 0.0
    return clamp(ssum / wsum, 0.0, 100.0)


def round_score(n: Any, decimals: int = 0) -> float:
    """Round half up (72.5 -> 73); non-finite input gives 0."""
    x = to_number(n)
    if x is None:
        return 0.0
    f = 10 ** decimals
    return math.floor(x * f + 0.5) / f


@dataclass(frozen=True)
class BellCurve:
    """Piecewise-linear curve peaking between two floor anchors.

    ``floor`` up to ``low``, rising to ``top`` at ``peak``, back down to
    ``floor`` at ``high`` and flat beyond.
    """

    low: float
    peak: float
    high: float
    floor: float
    top: float = 100.0

    def __call__(self, value: float) -> float:
        span = self.top - self.floor
        if value <= self.low:
            return self.floor
        if value <= self.peak:
            return self.floor + (value - self.low) / (self.peak - self.low) * span
        if value <= self.high:
            return self.top - (value - self.peak) / (self.high - self.peak) * span
        return self.floor


def saturation_score(value: float, low: float, high: float) -> float:
    """Supply-saturation curve: 100 up to ``low``, 0 from ``high``, linear between."""
    if value <= low:
        return 100.0
    if value >= high:
        return 0.0
    return clamp(100.0 - (value - low) / (high - low) * 100.0, 0.0, 100.0)


@dataclass(frozen=True)
class StepCurve:
    """Discrete scores: the first ``(upper_bound, score)`` with value <= bound wins."""

    steps: tuple[tuple[float, float], ...]
    above: float

    def __call__(self, value: float) -> float:
        for upper, score in self.steps:
            if value <= upper:
                return score
        return self.above
