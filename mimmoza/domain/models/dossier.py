"""Bank dossier analysis models.

The dossier SmartScore is a 100-point grid split into five pillars
(documentation, guarantees, borrower identification, project data and
financial profile).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"


class Niveau(str, Enum):
    FAIBLE = "Faible"
    MODERE = "Modéré"
    ELEVE = "Élevé"
    CRITIQUE = "Critique"


class PillarResult(BaseModel):
    key: str
    label: str
    points: int = Field(..., ge=0)
    max: int = Field(..., gt=0)
    reasons: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def ratio(self) -> float:
        """Share of the pillar's points obtained (0-1)."""
        return self.points / self.max


class ScoreDrivers(BaseModel):
    up: list[str] = Field(default_factory=list)
    down: list[str] = Field(default_factory=list)


class DossierScoreBreakdown(BaseModel):
    score: int = Field(..., ge=0, le=100)
    grade: Grade
    pillars: list[PillarResult]
    drivers: ScoreDrivers
    recommendations: list[str] = Field(default_factory=list)

    def pillar(self, key: str) -> PillarResult | None:
        return next((p for p in self.pillars if p.key == key), None)


class DossierAnalysis(BaseModel):
    score: int = Field(..., ge=0, le=100)
    niveau: Niveau
    label: Grade
    alertes: list[str] = Field(default_factory=list)
    calculated_at: str = Field(..., alias="calculatedAt")
    garantie_ratio: int | None = Field(None, alias="garantieRatio")
    smartscore: DossierScoreBreakdown

    model_config = {
        "populate_by_name": True,
    }
