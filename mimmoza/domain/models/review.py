"""Credit committee review bundle."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .dossier import DossierAnalysis
from .ratios import RatioHealth, RatiosResult


class CreditReview(BaseModel):
    """Ratios, ratio health and dossier analysis for one credit request."""

    dossier_id: str | None = Field(None, alias="dossierId")
    ratios: RatiosResult
    ratio_health: dict[str, RatioHealth] = Field(default_factory=dict, alias="ratioHealth")
    cout_credit: float = Field(default=0.0, alias="coutCredit", description="Total interest over the term in €")
    analysis: DossierAnalysis

    model_config = {
        "populate_by_name": True,
    }

    @property
    def critical_ratios(self) -> list[str]:
        return [key for key, health in self.ratio_health.items() if health is RatioHealth.CRITIQUE]
