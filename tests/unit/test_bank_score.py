"""Unit tests for mimmoza.domain.calculator.bank_score module."""

import pytest

from mimmoza.domain.calculator.bank_score import (
    compute_bank_smart_score,
    decide_bank,
    extract_study_score,
)
from mimmoza.domain.models import BankBlockKey, BankDecision


def _blocks(result):
    return {b.key: b for b in result.blocks}


def _financier(**fields):
    snapshot = {}
    if "ltc" in fields:
        snapshot["creditMetrics"] = {"ltcPct": fields["ltc"]}
    profitability = {}
    if "marge" in fields:
        profitability["grossMarginPct"] = fields["marge"]
    if "irr" in fields:
        profitability["irrPct"] = fields["irr"]
    if profitability:
        snapshot["profitability"] = profitability
    if "duration" in fields:
        snapshot["programme"] = {"calendar": {"durationMonths": fields["duration"]}}
    return _blocks(compute_bank_smart_score(snapshot))[BankBlockKey.FINANCIER]


@pytest.fixture
def full_snapshot():
    """Complete snapshot: both studies present, low LTC, good margin."""
    return {
        "completeness": {"percent": 90},
        "risks": {"available": True, "payload": {"summary": "Score risque : 80/100"}},
        "market": {"available": True, "payload": {"data": {"globalScore": "70"}}},
        "creditMetrics": {"ltcPct": 60},
        "profitability": {"grossMarginPct": 20, "irrPct": 16},
        "programme": {"calendar": {"durationMonths": 18}},
        "project": {"sponsor": {"experienceScore": 80}},
    }


class TestBankSmartScore:
    """Tests for compute_bank_smart_score."""

    def test_full_snapshot(self, full_snapshot):
        result = compute_bank_smart_score(full_snapshot)
        blocks = _blocks(result)

        assert blocks[BankBlockKey.FINANCIER].score == 100
        assert blocks[BankBlockKey.RISQUES].score == 80
        assert blocks[BankBlockKey.MARCHE].score == 70
        assert blocks[BankBlockKey.SPONSOR].score == 80
        assert result.score == 87
        assert result.confidence_pct == 90
        assert result.completeness_pct == 90
        assert result.decision is BankDecision.GO
        assert result.global_flags == []
        assert result.summary == "GO, score 87/100 (confiance 90%)."
        assert result.version == "smartscore.banque.v1"

    def test_blocking_flag_forces_no_go(self, full_snapshot):
        full_snapshot["creditMetrics"]["ltcPct"] = 80
        result = compute_bank_smart_score(full_snapshot)
        assert result.score >= 55
        assert result.global_flags == ["LTC_TOO_HIGH"]
        assert result.decision is BankDecision.NO_GO
        assert result.summary.startswith("NO GO, score ")

    def test_empty_snapshot(self):
        result = compute_bank_smart_score({})
        assert result.score == 0
        assert result.confidence_pct == 0
        assert result.decision is BankDecision.NO_GO
        assert all(not b.available for b in result.blocks)
        assert result.summary == "NO GO, score 0/100 (confiance 0%)."

    def test_confidence_penalties(self):
        result = compute_bank_smart_score({"completeness": {"percent": 80}})
        assert result.completeness_pct == 80
        assert result.confidence_pct == 55

        result = compute_bank_smart_score({"completeness": {"percent": 80}, "risks": {"available": True}})
        assert result.confidence_pct == 70

    def test_weights_renormalized_over_scored_blocks(self):
        result = compute_bank_smart_score({
            "creditMetrics": {"ltcPct": 50},
            "project": {"sponsor": {"experienceScore": 45}},
        })
        # (100 x 0.45 + 45 x 0.10) / 0.55
        assert result.score == 90

    def test_wire_names(self, full_snapshot):
        dumped = compute_bank_smart_score(full_snapshot).model_dump(by_alias=True)
        assert dumped["confidencePct"] == 90
        assert dumped["globalFlags"] == []
        assert dumped["blocks"][0]["available"] is True


class TestFinancierBlock:
    """Tests for the LTC and margin ladders, IRR bonus and duration penalty."""

    @pytest.mark.parametrize(
        "ltc,score,flags",
        [
            (50, 100, []),
            (55, 100, []),
            (65, 80, []),
            (70, 55, []),
            (85, 30, ["LTC_TOO_HIGH"]),
            (90, 10, ["LTC_TOO_HIGH"]),
        ],
    )
    def test_ltc_ladder(self, ltc, score, flags):
        block = _financier(ltc=ltc)
        assert block.score == score
        assert block.flags == flags

    @pytest.mark.parametrize(
        "marge,score,flags",
        [
            (20, 100, []),
            (12, 75, []),
            (8, 50, []),
            (5, 30, ["MARGIN_LOW"]),
            (4, 10, ["MARGIN_TOO_LOW"]),
        ],
    )
    def test_margin_ladder(self, marge, score, flags):
        block = _financier(marge=marge)
        assert block.score == score
        assert block.flags == flags

    def test_average_of_ltc_and_margin(self):
        block = _financier(ltc=70, marge=12)
        assert block.score == 65
        assert block.reasons == ["LTC 70.0% : tendu", "Marge 12.0% : acceptable"]

    @pytest.mark.parametrize("irr,score", [(15, 65), (10, 60), (9, 55)])
    def test_irr_bonus(self, irr, score):
        assert _financier(ltc=70, irr=irr).score == score

    @pytest.mark.parametrize(
        "duration,score,flags",
        [(37, 80, ["DURATION_TOO_LONG"]), (30, 90, []), (24, 100, [])],
    )
    def test_duration_penalty(self, duration, score, flags):
        block = _financier(ltc=50, duration=duration)
        assert block.score == score
        assert block.flags == flags

    def test_bonus_and_penalty_need_a_score(self):
        block = _financier(irr=20, duration=40)
        assert block.score is None
        assert block.flags == []
        assert block.reasons == ["Données financières insuffisantes pour scorer."]


class TestStudyBlocks:
    """Tests for the risk and market blocks."""

    def test_absent_studies(self):
        blocks = _blocks(compute_bank_smart_score({}))
        assert blocks[BankBlockKey.RISQUES].reasons == ["Étude de risques absente."]
        assert blocks[BankBlockKey.MARCHE].reasons == ["Étude de marché absente."]

    def test_present_without_score_falls_back(self):
        blocks = _blocks(compute_bank_smart_score({"market": {"available": True, "payload": {"foo": 1}}}))
        assert blocks[BankBlockKey.MARCHE].score == 55
        assert blocks[BankBlockKey.MARCHE].reasons == [
            "Étude de marché présente mais score non détecté (fallback prudent).",
        ]

    def test_score_clamped(self):
        blocks = _blocks(compute_bank_smart_score({"risks": {"available": True, "payload": {"score": 140}}}))
        assert blocks[BankBlockKey.RISQUES].score == 100
        assert blocks[BankBlockKey.RISQUES].reasons == ["Score risques : 100/100"]


class TestExtractStudyScore:
    """Tests for score extraction from schema-less payloads."""

    @pytest.mark.parametrize(
        "payload,expected",
        [
            ({"score": 42}, 42),
            ({"globalScore": None, "marketScore": "61,5"}, 61.5),
            ({"riskScore": "1 0"}, 10),
            ({"summary": "Score marché : 40/100"}, 40),
            ({"summary": "score: 7 / 100"}, 7),
            ({"summary": "Score risques:15/100, zone inondable"}, 15),
            ({"data": {"smartscore": 33}}, 33),
            ({"data": {"summary": "Score risque : 25/100"}}, 25),
        ],
    )
    def test_found(self, payload, expected):
        assert extract_study_score(payload) == expected

    @pytest.mark.parametrize(
        "payload",
        [None, "Score : 40/100", {"score": "n/a"}, {"summary": "pas de score"}, {"data": "x"}],
    )
    def test_not_found(self, payload):
        assert extract_study_score(payload) is None

    def test_direct_keys_win_over_summary(self):
        assert extract_study_score({"summary": "Score : 10/100", "riskScore": 60}) == 60


class TestSponsorBlock:
    """Tests for the sponsor block."""

    def test_experience(self):
        block = _blocks(compute_bank_smart_score({"project": {"sponsor": {"experienceScore": 70}}}))[
            BankBlockKey.SPONSOR
        ]
        assert block.score == 70
        assert block.reasons == ["Expérience sponsor : 70/100"]

    def test_declared_defaults(self):
        snapshot = {"project": {"sponsor": {"experienceScore": 70, "trackRecord": {"defaults": 2}}}}
        result = compute_bank_smart_score(snapshot)
        block = _blocks(result)[BankBlockKey.SPONSOR]
        assert block.score == 50
        assert block.flags == ["SPONSOR_DEFAULT_HISTORY"]
        assert block.reasons[-1] == "Historique défauts déclaré : 2"
        # not a blocking flag
        assert result.global_flags == ["SPONSOR_DEFAULT_HISTORY"]
        assert result.decision is BankDecision.NO_GO

    def test_missing_sponsor(self):
        block = _blocks(compute_bank_smart_score({}))[BankBlockKey.SPONSOR]
        assert block.score is None
        assert block.reasons == ["Données sponsor absentes."]


class TestDecideBank:
    """Tests for the bank decision rule."""

    @pytest.mark.parametrize(
        "score,confidence,flags,expected",
        [
            (70, 60, [], BankDecision.GO),
            (70, 59, [], BankDecision.GO_CONDITIONS),
            (55, 100, [], BankDecision.GO_CONDITIONS),
            (54, 100, [], BankDecision.NO_GO),
            (90, 100, ["MARGIN_LOW"], BankDecision.GO),
            (90, 100, ["MARGIN_TOO_LOW"], BankDecision.NO_GO),
            (90, 100, ["DURATION_TOO_LONG"], BankDecision.NO_GO),
        ],
    )
    def test_decision(self, score, confidence, flags, expected):
        assert decide_bank(score, confidence, flags) is expected
