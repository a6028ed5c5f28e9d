"""Market study scoring service.

Reads the verdict ladder from settings and dispatches to the project-type
SmartScore engine.
"""

from __future__ import annotations

from typing import Any

from mimmoza.core.logging import get_logger, review_context
from mimmoza.core.settings import AppSettings, get_settings
from mimmoza.domain.models.smartscore import ProjectNature, SmartScoreResult, VerdictThresholds
from mimmoza.domain.scorers import get_scorer

log = get_logger(__name__)


class MarketStudyScorer:
    """Scores market studies with the configured verdict thresholds."""

    def __init__(self, settings: AppSettings | None = None):
        settings = settings or get_settings()
        self.thresholds = VerdictThresholds(
            go=settings.verdict_go,
            go_with_reserves=settings.verdict_go_with_reserves,
            deepen=settings.verdict_deepen,
        )

    def score(self, project_nature: ProjectNature | str, payload: Any) -> SmartScoreResult:
        """Score one study.

        Raises:
            UnknownProjectNatureError: If no engine handles ``project_nature``
        """
        nature = project_nature.value if isinstance(project_nature, ProjectNature) else project_nature
        with review_context(project_nature=nature):
            scorer = get_scorer(project_nature)
            result = scorer(payload, thresholds=self.thresholds)

            assumed = [
                c.key.value for c in result.components
                if c.details.get("state") != "computed"
            ]
            log.info(
                "smartscore_computed",
                score=result.score,
                verdict=result.verdict.value,
                version=result.meta.version,
                assumed_components=assumed,
            )
        return result


def score_market_study(project_nature: ProjectNature | str, payload: Any) -> SmartScoreResult:
    """Score a market study with settings-driven thresholds."""
    return MarketStudyScorer().score(project_nature, payload)
