"""Three-state sub-scores.

A sub-score is either computed from data, assumed (a neutral value used
because an optional block is absent) or unavailable. The distinction is kept
until the component is built, where it collapses to a plain number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mimmoza.core.scoring_constants import NEUTRAL_SCORE


class SubScoreState(str, Enum):
    COMPUTED = "computed"
    ASSUMED = "assumed"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class SubScore:
    state: SubScoreState
    value: float | None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def computed(cls, value: float, **details: Any) -> "SubScore":
        return cls(SubScoreState.COMPUTED, value, details)

    @classmethod
    def assumed(cls, value: float = NEUTRAL_SCORE, **details: Any) -> "SubScore":
        return cls(SubScoreState.ASSUMED, value, details)

    @classmethod
    def unavailable(cls, **details: Any) -> "SubScore":
        return cls(SubScoreState.UNAVAILABLE, None, details)

    @property
    def is_available(self) -> bool:
        return self.state is not SubScoreState.UNAVAILABLE

    @property
    def score(self) -> float:
        """Plain score; an unavailable sub-score counts as 0."""
        return self.value if self.value is not None else 0.0
