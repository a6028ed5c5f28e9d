"""Unit tests for mimmoza.services."""

import pytest
import structlog

from mimmoza.core.exceptions import UnknownProjectNatureError
from mimmoza.core.settings import AppSettings
from mimmoza.domain.models import (
    BankDecision,
    CommitteeReport,
    DominantRisk,
    ProjectNature,
    RatioHealth,
    RiskLevel,
    Verdict,
)
from mimmoza.services import (
    CreditReviewer,
    MarketStudyScorer,
    build_committee_decision_pack,
    build_committee_view,
    review_credit_dossier,
    score_bank_snapshot,
    score_market_study,
)
from mimmoza.services import committee_review, credit_review, market_study


class TestMarketStudyScorer:
    """Tests for the settings-driven market study service."""

    def test_default_ladder(self, logement_payload):
        result = score_market_study("logement", logement_payload)
        assert result.score == 71
        assert result.verdict == Verdict.GO_AVEC_RESERVES

    def test_ladder_from_settings(self, logement_payload):
        settings = AppSettings(verdict_go=70, verdict_go_with_reserves=55, verdict_deepen=40)
        result = MarketStudyScorer(settings).score("logement", logement_payload)
        assert result.verdict == Verdict.GO

    def test_ladder_from_environment(self, monkeypatch, logement_payload):
        monkeypatch.setenv("MIMMOZA_VERDICT_GO", "71")
        assert score_market_study("logement", logement_payload).verdict == Verdict.GO

    def test_unknown_nature(self):
        with pytest.raises(UnknownProjectNatureError):
            score_market_study("entrepot", {})


class TestCommitteeView:
    """Tests for build_committee_view."""

    def test_sentinel_overridden(self, clean_operation):
        view = build_committee_view({"riskScore": 50}, clean_operation)
        assert view.risk.score == 90
        assert view.risk_score_overridden is True
        assert view.risk_level is RiskLevel.FAIBLE
        assert view.market.score == 70
        assert view.committee.score == 78
        assert view.confidence == 100

    def test_explicit_flag_and_confidence(self, clean_operation):
        view = build_committee_view(
            {"riskScore": 50, "riskScoreIsFallback": False, "confidence": 62.4},
            clean_operation,
        )
        assert view.risk.score == 50
        assert view.risk_level is RiskLevel.MODERE
        assert view.committee.score == 62
        assert view.confidence == 62
        assert view.confidence_breakdown == []

    def test_nothing_available(self):
        view = build_committee_view(None, {})
        assert view.risk.score is None
        assert view.risk_level is RiskLevel.INDISPONIBLE
        assert view.committee.score is None
        assert view.confidence == 50


class TestCreditReview:
    """Tests for review_credit_dossier."""

    def test_complete_dossier(self, complete_dossier):
        review = review_credit_dossier(complete_dossier)
        assert review.dossier_id == "DOS-2026-001"
        assert review.ratios.ltv == 0.625
        assert review.ratio_health == {
            "ltv": RatioHealth.BON,
            "ltc": RatioHealth.VIGILANCE,
            "dsti": RatioHealth.INDISPONIBLE,
            "dscr": RatioHealth.CRITIQUE,
        }
        assert review.critical_ratios == ["dscr"]
        assert review.cout_credit > 0
        assert review.analysis.score == 100

    def test_rate_from_settings(self, complete_dossier):
        review = CreditReviewer(AppSettings(default_rate_pct=0)).review(complete_dossier)
        assert review.ratios.annual_rate_pct == 0
        assert review.ratios.mensualite == 1_000_000 / 24
        assert review.cout_credit == 0

    def test_dossier_rate_wins(self, complete_dossier):
        complete_dossier["origination"]["tauxAnnuelPct"] = 5.0
        assert review_credit_dossier(complete_dossier).ratios.annual_rate_pct == 5.0

    def test_empty_dossier(self):
        review = review_credit_dossier({})
        assert review.dossier_id is None
        assert review.ratios.mensualite == 0
        assert all(h is RatioHealth.INDISPONIBLE for h in review.ratio_health.values())
        assert review.analysis.score == 0


class _RecordingLog:
    """Stands in for a service's module logger and keeps the bound context."""

    def __init__(self):
        self.events = []

    def _record(self, event, **fields):
        self.events.append((event, structlog.contextvars.get_contextvars(), fields))

    info = debug = _record


class TestReviewContextBinding:
    """Service events carry the nature or dossier they were logged for."""

    def test_market_study_binds_nature(self, monkeypatch, logement_payload):
        recorder = _RecordingLog()
        monkeypatch.setattr(market_study, "log", recorder)

        score_market_study(ProjectNature.LOGEMENT, logement_payload)

        event, context, fields = recorder.events[-1]
        assert event == "smartscore_computed"
        assert context == {"project_nature": "logement"}
        assert fields["score"] == 71

    def test_credit_review_binds_dossier(self, monkeypatch, complete_dossier):
        recorder = _RecordingLog()
        monkeypatch.setattr(credit_review, "log", recorder)

        review_credit_dossier(complete_dossier)

        event, context, _ = recorder.events[-1]
        assert event == "credit_dossier_reviewed"
        assert context == {"dossier_id": "DOS-2026-001"}
        assert structlog.contextvars.get_contextvars() == {}


class TestCommitteeDecisionPack:
    """Tests for build_committee_decision_pack."""

    def test_pack_from_wire_report(self, monkeypatch):
        recorder = _RecordingLog()
        monkeypatch.setattr(committee_review, "log", recorder)

        pack = build_committee_decision_pack({
            "programmeNom": "Les Tilleuls",
            "kpis": {"dscr": 0.9, "ltv": 85},
            "missing": ["Bilan"],
        })

        assert pack.acceptance.score == 17
        assert pack.risk_return.dominant_risk is DominantRisk.DSCR_DEFICIT
        assert pack.scenarios[0].decision == "NO GO"
        assert pack.presentation.decision_line.startswith("DECISION : NO GO")
        assert len(pack.stress_tests.cases) == 4

        event, context, fields = recorder.events[-1]
        assert event == "committee_decision_pack_built"
        assert context == {"programme": "Les Tilleuls"}
        assert fields["dominant_risk"] == "dscr_deficit"

    def test_wire_output(self):
        dumped = build_committee_decision_pack(CommitteeReport()).model_dump(by_alias=True)
        assert set(dumped) == {"presentation", "scenarios", "acceptance", "riskReturn", "stressTests"}
        assert dumped["stressTests"]["summary"]["worstCaseKey"] == "base"


class TestBankScoreService:
    """Tests for score_bank_snapshot."""

    def test_bank_score(self, monkeypatch):
        recorder = _RecordingLog()
        monkeypatch.setattr(committee_review, "log", recorder)

        result = score_bank_snapshot(
            {"creditMetrics": {"ltcPct": 50}, "profitability": {"grossMarginPct": 20}},
            dossier_id="DOS-7",
        )

        assert result.score == 100
        assert result.decision is BankDecision.GO_CONDITIONS
        event, context, fields = recorder.events[-1]
        assert event == "bank_smartscore_computed"
        assert context == {"dossier_id": "DOS-7"}
        assert fields["decision"] == "GO_CONDITIONS"
