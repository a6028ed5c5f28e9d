"""Data models for mimmoza."""

from .bank_score import BankBlockKey, BankDecision, BankScoreBlock, BankSmartScore
from .committee import (
    CommitteeData,
    CommitteeDecision,
    CommitteeView,
    ConfidenceAdjustment,
    ConfidenceResult,
    RiskDetail,
    RiskLevel,
    ScoredValue,
)
from .decision import (
    AcceptanceDriver,
    AcceptanceProbability,
    CommitteeDecisionPack,
    CommitteePresentation,
    CommitteeReport,
    DecisionScenario,
    DominantRisk,
    RiskReturnMatrix,
    ScenarioKey,
    StressTestCase,
    StressTestKey,
    StressTestPack,
)
from .dossier import DossierAnalysis, DossierScoreBreakdown, Grade, Niveau, PillarResult
from .inputs import (
    BureauxSmartScoreInput,
    CommerceSmartScoreInput,
    EhpadSmartScoreInput,
    EtudiantSmartScoreInput,
    HotelSmartScoreInput,
    LogementSmartScoreInput,
    SeniorSmartScoreInput,
)
from .ratios import RatioHealth, RatioInputs, RatiosResult
from .review import CreditReview
from .smartscore import (
    DEFAULT_THRESHOLDS,
    ComponentKey,
    ProjectNature,
    ScoreComponent,
    SmartScoreMeta,
    SmartScoreResult,
    Verdict,
    VerdictThresholds,
    ZoneType,
)
from .subscore import SubScore, SubScoreState

__all__ = [
    "AcceptanceDriver",
    "AcceptanceProbability",
    "BankBlockKey",
    "BankDecision",
    "BankScoreBlock",
    "BankSmartScore",
    "BureauxSmartScoreInput",
    "CommerceSmartScoreInput",
    "CommitteeData",
    "CommitteeDecision",
    "CommitteeDecisionPack",
    "CommitteePresentation",
    "CommitteeReport",
    "CommitteeView",
    "ComponentKey",
    "ConfidenceAdjustment",
    "ConfidenceResult",
    "CreditReview",
    "DecisionScenario",
    "DEFAULT_THRESHOLDS",
    "DominantRisk",
    "DossierAnalysis",
    "DossierScoreBreakdown",
    "EhpadSmartScoreInput",
    "EtudiantSmartScoreInput",
    "Grade",
    "HotelSmartScoreInput",
    "LogementSmartScoreInput",
    "Niveau",
    "PillarResult",
    "ProjectNature",
    "RatioHealth",
    "RatioInputs",
    "RatiosResult",
    "RiskDetail",
    "RiskLevel",
    "RiskReturnMatrix",
    "ScenarioKey",
    "ScoreComponent",
    "ScoredValue",
    "SeniorSmartScoreInput",
    "SmartScoreMeta",
    "SmartScoreResult",
    "StressTestCase",
    "StressTestKey",
    "StressTestPack",
    "SubScore",
    "SubScoreState",
    "Verdict",
    "VerdictThresholds",
    "ZoneType",
]
