"""Unit tests for mimmoza.domain.calculator.smartscore module."""

import pytest
from pydantic import ValidationError

from mimmoza.domain.calculator.smartscore import (
    BASE_VERSION,
    component_from,
    compute_smart_score,
    compute_verdict,
    normalize_components,
)
from mimmoza.domain.models import (
    ScoreComponent,
    SubScore,
    Verdict,
    VerdictThresholds,
)


class TestComputeVerdict:
    """Tests for the verdict ladder."""

    @pytest.mark.parametrize(
        "score, expected",
        [
            (100, Verdict.GO),
            (75, Verdict.GO),
            (74.9, Verdict.GO_AVEC_RESERVES),
            (60, Verdict.GO_AVEC_RESERVES),
            (59, Verdict.A_APPROFONDIR),
            (45, Verdict.A_APPROFONDIR),
            (44, Verdict.NO_GO),
            (-20, Verdict.NO_GO),
        ],
    )
    def test_default_ladder(self, score, expected):
        assert compute_verdict(score) == expected

    def test_string_value(self):
        assert compute_verdict(74.9) == "GO_AVEC_RESERVES"

    def test_custom_thresholds(self):
        thresholds = VerdictThresholds(go=80, go_with_reserves=70, deepen=50)
        assert compute_verdict(75, thresholds) == Verdict.GO_AVEC_RESERVES


class TestNormalizeComponents:
    """Tests for component clamping."""

    def test_clamps_weight_and_score(self):
        comps = normalize_components([
            ScoreComponent(key="marche", label="M", weight=1.5, score=130),
            ScoreComponent(key="services", label="S", weight=-1, score=None),
        ])
        assert comps[0].weight == 1 and comps[0].score == 100
        assert comps[1].weight == 0 and comps[1].score == 0

    def test_none_gives_empty(self):
        assert normalize_components(None) == []


class TestComputeSmartScore:
    """Tests for compute_smart_score aggregation."""

    def test_weighted_integer_score(self):
        result = compute_smart_score("logement", [
            ScoreComponent(key="demographie", label="D", weight=0.5, score=80),
            ScoreComponent(key="marche", label="M", weight=0.5, score=65),
        ])
        assert result.score == 73  # 72.5 rounds half up
        assert result.verdict == Verdict.GO_AVEC_RESERVES

    def test_zero_weight_component_ignored(self):
        result = compute_smart_score("bureaux", [
            ScoreComponent(key="emploi", label="E", weight=0, score=100),
            ScoreComponent(key="services", label="S", weight=0.2, score=40),
        ])
        assert result.score == 40

    def test_defaults(self):
        result = compute_smart_score("hotel", [])
        assert result.score == 0
        assert result.verdict == Verdict.NO_GO
        assert result.opportunities == []
        assert result.risks == []
        assert result.recommendations == []
        assert result.meta.version == BASE_VERSION
        assert result.meta.computed_at.endswith("+00:00")

    def test_result_is_frozen(self):
        result = compute_smart_score("hotel", [])
        with pytest.raises(ValidationError):
            result.score = 99

    def test_components_are_frozen(self):
        result = compute_smart_score("hotel", [
            ScoreComponent(key="marche", label="Marché", weight=1, score=40),
        ])
        with pytest.raises(ValidationError):
            result.components[0].score = 100
        assert result.score == 40

    def test_component_lookup(self):
        result = compute_smart_score("ehpad", [
            ScoreComponent(key="sante", label="Accès santé", weight=1, score=55),
        ])
        assert result.component("sante").score == 55
        assert result.component("marche") is None


class TestComponentFrom:
    """Tests for SubScore collapsing."""

    def test_states_recorded(self):
        assert component_from(SubScore.computed(64), "marche", "M", 0.2).details["state"] == "computed"
        assumed = component_from(SubScore.assumed(), "services", "S", 0.1)
        assert assumed.score == 50
        assert assumed.details["state"] == "assumed"

    def test_unavailable_is_zero(self):
        comp = component_from(SubScore.unavailable(available=False), "sante", "S", 0.15)
        assert comp.score == 0
        assert comp.details == {"available": False, "state": "unavailable"}
