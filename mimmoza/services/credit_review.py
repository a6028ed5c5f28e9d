"""Credit dossier review service.

Runs the ratio engine on the dossier's origination and financial blocks,
bands each ratio and attaches the five-pillar dossier analysis.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mimmoza.core.financial import build_amortization_schedule
from mimmoza.core.logging import get_logger, review_context
from mimmoza.core.settings import AppSettings, get_settings
from mimmoza.domain.calculator.dossier import compute_dossier_analysis
from mimmoza.domain.calculator.lookup import get_path
from mimmoza.domain.calculator.ratios import assess_ratio, ratios_from_inputs, resolve_ratio_inputs
from mimmoza.domain.models.review import CreditReview

log = get_logger(__name__)

RATIO_KEYS = ("ltv", "ltc", "dsti", "dscr")


def ratio_params_from_dossier(dossier: Mapping[str, Any]) -> dict[str, Any]:
    """Map a stored dossier onto the ratio engine's bank-dossier shape."""
    return {
        "montantPret": get_path(dossier, "origination.montantDemande"),
        "duree": get_path(dossier, "origination.duree"),
        "annualRatePct": get_path(dossier, "origination.tauxAnnuelPct"),
        "budget": dossier.get("budget"),
        "revenus": dossier.get("revenus"),
        "garanties": dossier.get("garanties"),
        "bien": dossier.get("bien"),
    }


class CreditReviewer:
    """Reviews credit dossiers using the configured default rate."""

    def __init__(self, settings: AppSettings | None = None):
        settings = settings or get_settings()
        self.default_rate_pct = settings.default_rate_pct

    def review(self, dossier: Mapping[str, Any] | None) -> CreditReview:
        dossier = dossier or {}
        dossier_id = dossier.get("id")
        dossier_id = str(dossier_id) if dossier_id is not None else None

        with review_context(dossier_id=dossier_id):
            inputs = resolve_ratio_inputs(
                ratio_params_from_dossier(dossier),
                default_rate_pct=self.default_rate_pct,
            )
            ratios = ratios_from_inputs(inputs)
            health = {key: assess_ratio(key, getattr(ratios, key)) for key in RATIO_KEYS}
            schedule = build_amortization_schedule(inputs.montant_pret, inputs.duree_mois, inputs.annual_rate_pct)
            analysis = compute_dossier_analysis(dossier)

            review = CreditReview(
                dossier_id=dossier_id,
                ratios=ratios,
                ratio_health=health,
                cout_credit=schedule["cout_credit"],
                analysis=analysis,
            )
            log.info(
                "credit_dossier_reviewed",
                score=analysis.score,
                grade=analysis.label.value,
                niveau=analysis.niveau.value,
                alerts=len(analysis.alertes),
                critical_ratios=review.critical_ratios,
                annual_rate_pct=ratios.annual_rate_pct,
            )
        return review


def review_credit_dossier(dossier: Mapping[str, Any] | None) -> CreditReview:
    """Review a credit dossier with settings-driven defaults."""
    return CreditReviewer().review(dossier)
