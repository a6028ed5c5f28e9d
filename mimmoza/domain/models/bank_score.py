"""Bank SmartScore data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field


class BankDecision(str, Enum):
    GO = "GO"
    GO_CONDITIONS = "GO_CONDITIONS"
    NO_GO = "NO_GO"


class BankBlockKey(str, Enum):
    FINANCIER = "financier"
    RISQUES = "risques"
    MARCHE = "marche"
    SPONSOR = "sponsor"


class BankScoreBlock(BaseModel):
    """One block of the bank SmartScore; ``score`` is None when unscored."""

    model_config = {"frozen": True}

    key: BankBlockKey
    weight: float = Field(..., ge=0, le=1)
    score: float | None = Field(None, ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    flags: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def available(self) -> bool:
        return self.score is not None


class BankSmartScore(BaseModel):
    """Bank SmartScore of a financial snapshot."""

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    version: str = "smartscore.banque.v1"
    score: int = Field(..., ge=0, le=100)
    decision: BankDecision
    confidence_pct: float = Field(..., ge=0, le=100, alias="confidencePct")
    completeness_pct: float = Field(..., ge=0, le=100, alias="completenessPct")
    blocks: list[BankScoreBlock]
    global_flags: list[str] = Field(default_factory=list, alias="globalFlags")
    summary: str
