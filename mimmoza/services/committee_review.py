"""Committee review service.

Assembles the four headline figures of the credit committee page (terrain
risk, market, weighted committee score, data confidence), the decision
pack read below them and the bank SmartScore of the financial snapshot.
"""

from __future__ import annotations

from typing import Any

from mimmoza.core.logging import get_logger, review_context
from mimmoza.domain.calculator.bank_score import compute_bank_smart_score
from mimmoza.domain.calculator.committee import (
    classify_risk_level,
    compute_committee_score,
    compute_confidence,
    compute_market_score,
    compute_risk_score_from_geo,
    resolve_risk_score,
)
from mimmoza.domain.calculator.committee_decision import (
    build_acceptance_probability,
    build_committee_presentation,
    build_decision_scenarios,
    build_risk_return_matrix,
    build_stress_tests,
)
from mimmoza.domain.calculator.lookup import is_finite_number
from mimmoza.domain.calculator.normalizer import clamp, round_score
from mimmoza.domain.models.bank_score import BankSmartScore
from mimmoza.domain.models.committee import CommitteeData, CommitteeView, ScoredValue
from mimmoza.domain.models.decision import CommitteeDecisionPack, CommitteeReport

log = get_logger(__name__)


class CommitteeReviewer:
    """Builds committee views, decision packs and bank SmartScores."""

    def review(self, committee: CommitteeData | dict[str, Any] | None, operation: Any) -> CommitteeView:
        """Build the committee overview.

        Args:
            committee: Stored committee record (may be empty)
            operation: Operation snapshot with ``risks`` and market blocks

        Returns:
            CommitteeView with the resolved risk, market, committee and
            confidence figures
        """
        data = committee if isinstance(committee, CommitteeData) else CommitteeData.model_validate(committee or {})

        geo = compute_risk_score_from_geo(operation)
        risk_score, overridden = resolve_risk_score(
            data.risk_score, operation, is_fallback=data.risk_score_is_fallback
        )
        if overridden:
            log.info(
                "risk_score_sentinel_overridden",
                committee_risk_score=data.risk_score,
                geo_risk_score=geo.score,
                explicit_flag=data.risk_score_is_fallback,
            )

        if risk_score is None:
            risk = ScoredValue(score=None, reason=geo.reason)
        else:
            reason = geo.reason if (overridden or data.risk_score is None) else "Score de risque issu du comité."
            risk = ScoredValue(score=int(round_score(clamp(risk_score))), reason=reason)

        market = compute_market_score(operation)
        committee_score = compute_committee_score(risk.score, market.score)

        computed = compute_confidence(operation)
        if is_finite_number(data.confidence):
            confidence = int(round_score(clamp(data.confidence)))
        else:
            confidence = computed.confidence

        view = CommitteeView(
            risk=risk,
            risk_level=classify_risk_level(risk.score),
            market=market,
            committee=committee_score,
            confidence=confidence,
            confidence_breakdown=computed.breakdown,
            risk_score_overridden=overridden,
        )
        log.debug(
            "committee_view_built",
            risk=risk.score,
            market=market.score,
            committee=committee_score.score,
            confidence=confidence,
        )
        return view

    def decision_pack(self, report: CommitteeReport | dict[str, Any]) -> CommitteeDecisionPack:
        """Build the committee decision pack: presentation, decision
        scenarios, acceptance probability, risk/return matrix and stress tests.
        """
        report = report if isinstance(report, CommitteeReport) else CommitteeReport.model_validate(report)

        with review_context(programme=report.programme_nom or None):
            pack = CommitteeDecisionPack(
                presentation=build_committee_presentation(report),
                scenarios=build_decision_scenarios(report),
                acceptance=build_acceptance_probability(report),
                risk_return=build_risk_return_matrix(report),
                stress_tests=build_stress_tests(report),
            )
            log.info(
                "committee_decision_pack_built",
                acceptance=pack.acceptance.score,
                dominant_risk=pack.risk_return.dominant_risk.value,
                quadrant=pack.risk_return.quadrant,
                worst_case=pack.stress_tests.summary.worst_case_key.value,
                conservative_decision=pack.scenarios[0].decision,
                missing=len(report.missing),
            )
        return pack

    def bank_score(self, snapshot: Any, dossier_id: str | None = None) -> BankSmartScore:
        """Bank SmartScore of a financial snapshot."""
        with review_context(dossier_id=dossier_id):
            result = compute_bank_smart_score(snapshot)
            log.info(
                "bank_smartscore_computed",
                score=result.score,
                decision=result.decision.value,
                confidence_pct=result.confidence_pct,
                flags=result.global_flags,
            )
        return result


def build_committee_view(committee: CommitteeData | dict[str, Any] | None, operation: Any) -> CommitteeView:
    """Build the committee overview for ``operation``."""
    return CommitteeReviewer().review(committee, operation)


def build_committee_decision_pack(report: CommitteeReport | dict[str, Any]) -> CommitteeDecisionPack:
    """Build the committee decision pack for a dossier report."""
    return CommitteeReviewer().decision_pack(report)


def score_bank_snapshot(snapshot: Any, dossier_id: str | None = None) -> BankSmartScore:
    """Compute the bank SmartScore of a financial snapshot."""
    return CommitteeReviewer().bank_score(snapshot, dossier_id=dossier_id)
