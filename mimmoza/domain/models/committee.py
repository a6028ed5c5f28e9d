"""Credit committee data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ScoredValue(BaseModel):
    """A nullable 0-100 score with the explanation shown to the committee."""

    score: int | None = Field(None, ge=0, le=100)
    reason: str = ""

    model_config = {
        "frozen": True,
    }


class ConfidenceAdjustment(BaseModel):
    label: str
    delta: int


class ConfidenceResult(BaseModel):
    """Data reliability (not project quality), 0-100."""

    confidence: int = Field(..., ge=0, le=100)
    breakdown: list[ConfidenceAdjustment] = Field(default_factory=list)


class RiskLevel(str, Enum):
    FAIBLE = "faible"
    MODERE = "modere"
    ELEVE = "eleve"
    INDISPONIBLE = "indisponible"


class RiskDetail(BaseModel):
    label: str
    impact: float
    detail: str | None = None


class CommitteeDecision(str, Enum):
    GO = "GO"
    GO_AVEC_RESERVES = "GO_AVEC_RESERVES"
    NO_GO = "NO_GO"


class CommitteeData(BaseModel):
    """Committee record as stored on an operation.

    ``risk_score_is_fallback`` lets the producer state explicitly that
    ``risk_score`` is a neutral placeholder instead of relying on the
    value-50 heuristic.
    """

    decision: CommitteeDecision | None = None
    confidence: float | None = None
    total_score: float | None = Field(None, alias="totalScore")
    risk_score: float | None = Field(None, alias="riskScore")
    risk_details: list[RiskDetail] = Field(default_factory=list, alias="riskDetails")
    risk_score_is_fallback: bool | None = Field(None, alias="riskScoreIsFallback")
    markdown: str | None = None

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
    }


class CommitteeView(BaseModel):
    """Scores displayed on the committee overview."""

    risk: ScoredValue
    risk_level: RiskLevel
    market: ScoredValue
    committee: ScoredValue
    confidence: int | None = None
    confidence_breakdown: list[ConfidenceAdjustment] = Field(default_factory=list)
    risk_score_overridden: bool = False
