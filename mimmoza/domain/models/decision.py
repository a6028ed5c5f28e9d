"""Committee decision data models.

``CommitteeReport`` is the consolidated view of a dossier presented to the
credit committee (credit KPIs, market study digest, SmartScore pillars and
missing items). The decision engine turns it into an acceptance
probability, a risk/return matrix, stress scenarios, three decision
postures and the written presentation.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ReportRecord(BaseModel):
    """Base for report blocks: wire names accepted, unknown keys ignored."""

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class ReportKpis(ReportRecord):
    ltv: float | None = Field(None, description="Loan-to-Value in %")
    dscr: float | None = None
    loyer_annuel: float | None = Field(None, alias="loyerAnnuel", description="Annual rent in €")
    cout_total: float | None = Field(None, alias="coutTotal", description="Total cost in €")
    marge_brute: float | None = Field(None, alias="margeBrute", description="Gross margin in %")
    taux_endettement: float | None = Field(None, alias="tauxEndettement")

    @field_validator("*", mode="before")
    @classmethod
    def drop_non_finite(cls, v: Any) -> Any:
        """NaN and infinities count as missing."""
        if isinstance(v, float) and not math.isfinite(v):
            return None
        return v


class ReportDvf(ReportRecord):
    prix_m2_median: float | None = Field(None, alias="prixM2Median")
    nb_transactions: float | None = Field(None, alias="nbTransactions")
    evolution: float | None = Field(None, description="Price trend in %")


class ReportInsee(ReportRecord):
    population: float | None = None
    revenu_median: float | None = Field(None, alias="revenuMedian")
    taux_chomage: float | None = Field(None, alias="tauxChomage")
    densite_population: float | None = Field(None, alias="densitePopulation")


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class MarketInsight(ReportRecord):
    label: str
    value: str | float
    sentiment: Sentiment = Sentiment.NEUTRAL


class ReportMarketStudy(ReportRecord):
    commune: str | None = None
    departement: str | None = None
    dvf: ReportDvf = Field(default_factory=ReportDvf)
    insee: ReportInsee = Field(default_factory=ReportInsee)
    insights: list[MarketInsight] = Field(default_factory=list)


class ReportPillar(ReportRecord):
    id: str
    label: str
    score: float


class ReportSmartScore(ReportRecord):
    score: float
    verdict: str = ""
    pillars: list[ReportPillar] = Field(default_factory=list)


class CommitteeReport(ReportRecord):
    """Dossier digest presented to the credit committee."""

    programme_nom: str = Field("", alias="programmeNom")
    adresse: str | None = None
    market_study: ReportMarketStudy | None = Field(None, alias="marketStudy")
    smartscore: ReportSmartScore | None = None
    kpis: ReportKpis = Field(default_factory=ReportKpis)
    missing: list[str] = Field(default_factory=list)


# --- Engine outputs ---

class WireModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class AcceptanceDriver(WireModel):
    label: str
    detail: str | None = None
    impact: int


class AcceptanceProbability(WireModel):
    """Likelihood (0-100) that the committee accepts the dossier as is."""

    score: int = Field(..., ge=0, le=100)
    drivers: list[AcceptanceDriver] = Field(default_factory=list)


class DominantRisk(str, Enum):
    DSCR_DEFICIT = "dscr_deficit"
    LTV_CRITICAL = "ltv_critical"
    LIQUIDITY_LOW = "liquidity_low"
    GUARANTEES_MISSING = "guarantees_missing"
    DATA_MISSING = "data_missing"
    NONE = "none"


class RiskReturnMatrix(WireModel):
    risk_score: int = Field(..., ge=0, le=100, alias="riskScore", description="0 = low risk")
    return_score: int = Field(..., ge=0, le=100, alias="returnScore", description="0 = low return")
    quadrant: str
    dominant_risk: DominantRisk = Field(..., alias="dominantRisk")
    dominant_risk_label: str = Field(..., alias="dominantRiskLabel")
    commentary: str = ""


class StressTestKey(str, Enum):
    BASE = "base"
    RENT_10 = "rent_-10"
    RENT_20 = "rent_-20"
    VALUE_10 = "value_-10"
    RATE_1 = "rate_+1"


class StressTestCase(WireModel):
    key: StressTestKey
    label: str
    dscr: float | None = None
    ltv: float | None = None
    yield_pct: float | None = Field(None, alias="yieldPct")
    acceptance_score: int | None = Field(None, alias="acceptanceScore")
    notes: list[str] = Field(default_factory=list)


class StressTestSummary(WireModel):
    worst_case_key: StressTestKey = Field(StressTestKey.BASE, alias="worstCaseKey")
    worst_dscr: float | None = Field(None, alias="worstDscr")
    worst_acceptance: int | None = Field(None, alias="worstAcceptance")
    key_findings: list[str] = Field(default_factory=list, alias="keyFindings")


class StressTestPack(WireModel):
    base: StressTestCase
    cases: list[StressTestCase]
    summary: StressTestSummary


class ScenarioKey(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    OPPORTUNISTIC = "opportunistic"


class DecisionScenario(WireModel):
    """One committee posture and the decision it leads to."""

    key: ScenarioKey
    label: str
    decision: str
    confidence: int = Field(..., ge=0, le=100)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    targets: list[str] = Field(default_factory=list)


class PresentationSection(WireModel):
    title: str
    paragraphs: list[str]


class CommitteePresentation(WireModel):
    executive_summary: str = Field(..., alias="executiveSummary")
    sections: list[PresentationSection]
    decision_line: str = Field(..., alias="decisionLine")
    conditions: list[str] = Field(default_factory=list)


class CommitteeDecisionPack(WireModel):
    """Everything the committee page shows besides the headline scores."""

    presentation: CommitteePresentation
    scenarios: list[DecisionScenario]
    acceptance: AcceptanceProbability
    risk_return: RiskReturnMatrix = Field(..., alias="riskReturn")
    stress_tests: StressTestPack = Field(..., alias="stressTests")
