"""SmartScore data models.

A SmartScore is the weighted aggregation of a few 0-100 components into one
score and a verdict tier, together with narrative text for the study.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from mimmoza.core.exceptions import InvalidParameterError
from mimmoza.core.scoring_constants import DEFAULT_VERDICT_THRESHOLDS


class ProjectNature(str, Enum):
    """Project types with a dedicated SmartScore engine."""

    LOGEMENT = "logement"
    RESIDENCE_ETUDIANTE = "residence_etudiante"
    RESIDENCE_SENIOR = "residence_senior"
    EHPAD = "ehpad"
    BUREAUX = "bureaux"
    COMMERCE = "commerce"
    HOTEL = "hotel"


class Verdict(str, Enum):
    GO = "GO"
    GO_AVEC_RESERVES = "GO_AVEC_RESERVES"
    A_APPROFONDIR = "A_APPROFONDIR"
    NO_GO = "NO_GO"


class ComponentKey(str, Enum):
    DEMOGRAPHIE = "demographie"
    MARCHE = "marche"
    CONCURRENCE = "concurrence"
    ACCESSIBILITE = "accessibilite"
    SERVICES = "services"
    SANTE = "sante"
    TOURISME = "tourisme"
    EMPLOI = "emploi"
    SOLVABILITE = "solvabilite"


class ZoneType(str, Enum):
    URBAIN = "urbain"
    PERIURBAIN = "periurbain"
    RURAL = "rural"


class VerdictThresholds(BaseModel):
    """Verdict ladder: a score meeting ``go`` is GO, and so on down to NO_GO."""

    go: float = Field(default=DEFAULT_VERDICT_THRESHOLDS["go"])
    go_with_reserves: float = Field(default=DEFAULT_VERDICT_THRESHOLDS["go_with_reserves"])
    deepen: float = Field(default=DEFAULT_VERDICT_THRESHOLDS["deepen"])

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="after")
    def check_ordering(self) -> "VerdictThresholds":
        if not (self.go > self.go_with_reserves > self.deepen):
            raise InvalidParameterError(
                "thresholds",
                (self.go, self.go_with_reserves, self.deepen),
                "expected go > go_with_reserves > deepen",
            )
        return self


DEFAULT_THRESHOLDS = VerdictThresholds()


class ScoreComponent(BaseModel):
    """One weighted sub-score of a SmartScore.

    Values are not range-checked here: ``normalize_components`` clamps them
    before aggregation.
    """

    key: ComponentKey
    label: str
    weight: float | None = Field(default=0.0, description="Weight 0..1")
    score: float | None = Field(default=0.0, description="Score 0..100")
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "frozen": True,
    }


class SmartScoreMeta(BaseModel):
    version: str = "smartscore-base-v1"
    computed_at: str = Field(..., description="ISO-8601 UTC timestamp")

    model_config = {
        "frozen": True,
    }


class SmartScoreResult(BaseModel):
    """Complete SmartScore for one project study."""

    project_nature: ProjectNature
    score: int = Field(..., ge=0, le=100)
    verdict: Verdict
    components: list[ScoreComponent] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    meta: SmartScoreMeta

    model_config = {
        "frozen": True,
    }

    def component(self, key: ComponentKey | str) -> ScoreComponent | None:
        """Return the component with the given key, if any."""
        wanted = ComponentKey(key)
        return next((c for c in self.components if c.key == wanted), None)
