"""Project-type SmartScore engines and their dispatcher."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mimmoza.core.exceptions import UnknownProjectNatureError
from mimmoza.domain.models.smartscore import ProjectNature, SmartScoreResult, VerdictThresholds

from .bureaux import compute_bureaux_smart_score
from .commerce import compute_commerce_smart_score
from .ehpad import compute_ehpad_smart_score
from .etudiant import compute_etudiant_smart_score
from .hotel import compute_hotel_smart_score
from .logement import compute_logement_smart_score
from .senior import compute_senior_smart_score

Scorer = Callable[..., SmartScoreResult]

SCORERS: dict[ProjectNature, Scorer] = {
    ProjectNature.LOGEMENT: compute_logement_smart_score,
    ProjectNature.RESIDENCE_ETUDIANTE: compute_etudiant_smart_score,
    ProjectNature.RESIDENCE_SENIOR: compute_senior_smart_score,
    ProjectNature.EHPAD: compute_ehpad_smart_score,
    ProjectNature.BUREAUX: compute_bureaux_smart_score,
    ProjectNature.COMMERCE: compute_commerce_smart_score,
    ProjectNature.HOTEL: compute_hotel_smart_score,
}


def get_scorer(project_nature: ProjectNature | str) -> Scorer:
    """Engine for a project nature.

    Raises:
        UnknownProjectNatureError: If no engine handles ``project_nature``
    """
    try:
        nature = ProjectNature(project_nature)
    except ValueError:
        raise UnknownProjectNatureError(project_nature) from None
    return SCORERS[nature]


def compute_project_smart_score(
    project_nature: ProjectNature | str,
    payload: Any,
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    """Dispatch ``payload`` to the engine registered for ``project_nature``."""
    return get_scorer(project_nature)(payload, thresholds=thresholds)


__all__ = [
    "SCORERS",
    "compute_bureaux_smart_score",
    "compute_commerce_smart_score",
    "compute_ehpad_smart_score",
    "compute_etudiant_smart_score",
    "compute_hotel_smart_score",
    "compute_logement_smart_score",
    "compute_project_smart_score",
    "compute_senior_smart_score",
    "get_scorer",
]
