"""Unit tests for mimmoza.domain.models Pydantic models."""

import pytest
from pydantic import ValidationError

from mimmoza.core.exceptions import InvalidParameterError
from mimmoza.domain.models import (
    CommitteeData,
    EtudiantSmartScoreInput,
    PillarResult,
    RatiosResult,
    ScoredValue,
    SubScore,
    SubScoreState,
    VerdictThresholds,
)


class TestVerdictThresholds:
    """Tests for VerdictThresholds validation."""

    def test_defaults(self):
        t = VerdictThresholds()
        assert (t.go, t.go_with_reserves, t.deepen) == (75, 60, 45)

    def test_ordering_enforced(self):
        with pytest.raises(InvalidParameterError):
            VerdictThresholds(go=60, go_with_reserves=60, deepen=45)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            VerdictThresholds().go = 90


class TestScoredValue:
    """Tests for ScoredValue model."""

    def test_nullable_score(self):
        assert ScoredValue(reason="n/a").score is None

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ScoredValue(score=120)


class TestCommitteeData:
    """Tests for CommitteeData parsing."""

    def test_wire_names(self):
        data = CommitteeData.model_validate({
            "decision": "GO_AVEC_RESERVES",
            "riskScore": 50,
            "totalScore": 68,
            "riskScoreIsFallback": True,
            "riskDetails": [{"label": "Inondation", "impact": -35}],
        })
        assert data.risk_score == 50
        assert data.total_score == 68
        assert data.risk_score_is_fallback is True
        assert data.risk_details[0].label == "Inondation"

    def test_unknown_fields_kept(self):
        data = CommitteeData.model_validate({"memo": "RAS"})
        assert data.model_extra == {"memo": "RAS"}


class TestSubScore:
    """Tests for the three-state sub-score."""

    def test_states(self):
        assert SubScore.computed(72).state is SubScoreState.COMPUTED
        assert SubScore.assumed().value == 50
        unavailable = SubScore.unavailable()
        assert not unavailable.is_available
        assert unavailable.score == 0


class TestInputs:
    """Tests for project-type input models."""

    def test_extra_blocks_allowed(self):
        data = EtudiantSmartScoreInput.model_validate({"mesr": {"students_total": 1}, "crous": {"places": 10}})
        assert data.mesr == {"students_total": 1}

    def test_coerce_keeps_instance(self):
        data = EtudiantSmartScoreInput()
        assert EtudiantSmartScoreInput.coerce(data) is data
        assert EtudiantSmartScoreInput.coerce(None).campuses is None


class TestResults:
    """Tests for result models."""

    def test_pillar_ratio(self):
        pillar = PillarResult(key="garanties", label="Garanties", points=20, max=25)
        assert pillar.ratio == 0.8

    def test_ratios_result_by_name_or_alias(self):
        a = RatiosResult(cout_total=10, annual_rate_pct=3.5)
        b = RatiosResult(coutTotal=10, annualRatePct=3.5)
        assert a == b
        assert a.cost == 10
