"""SmartScore aggregation shared by every project-type scorer."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from mimmoza.domain.calculator.normalizer import clamp, round_score, weighted_mean
from mimmoza.domain.models.smartscore import (
    DEFAULT_THRESHOLDS,
    ProjectNature,
    ScoreComponent,
    SmartScoreMeta,
    SmartScoreResult,
    Verdict,
    VerdictThresholds,
)
from mimmoza.domain.models.subscore import SubScore

BASE_VERSION = "smartscore-base-v1"


def compute_verdict(score: float, thresholds: VerdictThresholds | None = None) -> Verdict:
    """Classify a 0-100 score on the verdict ladder.

    Args:
        score: Overall score (clamped to 0-100 first)
        thresholds: Ladder to use (defaults to 75 / 60 / 45)

    Returns:
        Highest verdict whose threshold the score meets, else NO_GO
    """
    t = thresholds or DEFAULT_THRESHOLDS
    s = clamp(score, 0, 100)
    if s >= t.go:
        return Verdict.GO
    if s >= t.go_with_reserves:
        return Verdict.GO_AVEC_RESERVES
    if s >= t.deepen:
        return Verdict.A_APPROFONDIR
    return Verdict.NO_GO


def normalize_components(components: Iterable[ScoreComponent] | None) -> list[ScoreComponent]:
    """Clamp weights to 0-1 and scores to 0-100; missing values become 0."""
    return [
        c.model_copy(update={
            "weight": clamp(c.weight if c.weight is not None else 0.0, 0.0, 1.0),
            "score": clamp(c.score if c.score is not None else 0.0, 0.0, 100.0),
        })
        for c in (components or [])
    ]


def compute_smart_score(
    project_nature: ProjectNature | str,
    components: Sequence[ScoreComponent],
    *,
    thresholds: VerdictThresholds | None = None,
    version: str | None = None,
    opportunities: Sequence[str] | None = None,
    risks: Sequence[str] | None = None,
    recommendations: Sequence[str] | None = None,
) -> SmartScoreResult:
    """Aggregate components into a SmartScore.

    Args:
        project_nature: Project type being scored
        components: Weighted sub-scores
        thresholds: Verdict ladder override
        version: Scorer version stamped into ``meta``
        opportunities: Opportunity messages (empty by default)
        risks: Risk messages (empty by default)
        recommendations: Recommendation messages (empty by default)

    Returns:
        Immutable SmartScoreResult
    """
    normalized = normalize_components(components)
    score = weighted_mean((c.score, c.weight) for c in normalized)
    final_score = int(round_score(score, 0))

    return SmartScoreResult(
        project_nature=ProjectNature(project_nature),
        score=final_score,
        verdict=compute_verdict(final_score, thresholds),
        components=normalized,
        opportunities=list(opportunities or []),
        risks=list(risks or []),
        recommendations=list(recommendations or []),
        meta=SmartScoreMeta(
            version=version or BASE_VERSION,
            computed_at=datetime.now(timezone.utc).isoformat(),
        ),
    )


def component_from(sub: SubScore, key: str, label: str, weight: float) -> ScoreComponent:
    """Collapse a three-state sub-score into a component.

    The state is kept in ``details`` so consumers can tell an assumed
    neutral score from a computed one.
    """
    return ScoreComponent(
        key=key,
        label=label,
        weight=weight,
        score=sub.score,
        details={**sub.details, "state": sub.state.value},
    )
