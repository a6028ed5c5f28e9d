"""Credit ratio data models.

Callers send loan data under two naming conventions (French bank-dossier
fields and English analysis-page fields). They are resolved once into
``RatioInputs``; results go back out under the wire names the UI reads.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field

from mimmoza.core.scoring_constants import DEFAULT_RATE_PCT


class RatioInputs(BaseModel):
    """Canonical, fully-resolved inputs of the ratio engine."""

    montant_pret: float = Field(default=0.0, description="Loan amount in €")
    duree_mois: float = Field(default=0.0, description="Loan term in months")
    annual_rate_pct: float = Field(default=DEFAULT_RATE_PCT, description="Annual interest rate %")

    acquisition: float = Field(default=0.0, description="Purchase price in €")
    travaux: float = Field(default=0.0, description="Works cost in €")
    frais: float = Field(default=0.0, description="Fees in €")

    valeur_bien: float = Field(default=0.0, description="Resolved property value in €")

    revenus_mensuels: float = Field(default=0.0, description="Net monthly income in €")
    charges_existantes: float = Field(default=0.0, description="Existing monthly debt service in €")
    loyers_mensuels: float = Field(default=0.0, description="Expected monthly rent in €")

    @computed_field
    @property
    def cout_total(self) -> float:
        """Total project cost (acquisition + works + fees)."""
        return self.acquisition + self.travaux + self.frais


class RatiosResult(BaseModel):
    """Monthly payment and credit ratios.

    A ratio is None when its denominator is missing or non-positive.
    """

    mensualite: float = Field(default=0.0, description="Monthly payment in €")
    cout_total: float = Field(default=0.0, alias="coutTotal", description="Total project cost in €")
    ltv: float | None = Field(None, description="Loan-to-Value")
    ltc: float | None = Field(None, description="Loan-to-Cost")
    dsti: float | None = Field(None, description="Debt Service to Income")
    dscr: float | None = Field(None, description="Debt Service Coverage Ratio")
    annual_rate_pct: float = Field(..., alias="annualRatePct")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @computed_field
    @property
    def cost(self) -> float:
        """Alias of ``cout_total`` read by the analysis page."""
        return self.cout_total


class RatioHealth(str, Enum):
    BON = "bon"
    VIGILANCE = "vigilance"
    CRITIQUE = "critique"
    INDISPONIBLE = "indisponible"
