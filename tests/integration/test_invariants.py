"""Invariant tests for the scoring engines.

Rules that must hold for any input, however incomplete or malformed.
"""

import math
import random
from typing import Any

import pytest

from mimmoza.domain.calculator.committee import (
    compute_committee_score,
    compute_confidence,
    compute_risk_score_from_geo,
)
from mimmoza.domain.calculator.normalizer import score_from_range, weighted_mean
from mimmoza.domain.calculator.ratios import compute_ratios
from mimmoza.domain.calculator.smartscore import compute_verdict
from mimmoza.domain.models import ProjectNature
from mimmoza.domain.scorers import compute_project_smart_score

WEIRD_VALUES = [None, 0, -1, 1e12, math.nan, math.inf, "12", "abc", True]


def _random_value(rng: random.Random) -> Any:
    if rng.random() < 0.3:
        return rng.choice(WEIRD_VALUES)
    return rng.uniform(-50, 200000)


def _random_record(rng: random.Random, keys: list[str]) -> dict[str, Any]:
    return {k: _random_value(rng) for k in keys if rng.random() < 0.8}


INSEE_KEYS = [
    "population", "densite", "evolution_pop_5ans", "pct_30_44", "pct_plus_65", "pct_plus_75",
    "pct_plus_85", "evolution_75_plus_5ans", "revenu_median", "taux_chomage", "pct_proprietaires",
]


@pytest.fixture
def random_payloads():
    """50 random, partially malformed payloads."""
    rng = random.Random(42)
    payloads = []
    for _ in range(50):
        payloads.append({
            "insee": _random_record(rng, INSEE_KEYS),
            "prices": _random_record(rng, ["median_eur_m2", "evolution_1an"]),
            "transactions": _random_record(rng, ["count"]),
            "bpe": _random_record(rng, ["nb_commerces", "nb_sante", "nb_services", "nb_enseignement"]),
            "ehpad": {
                "count": _random_value(rng),
                "analyse_concurrence": _random_record(rng, ["densite_lits_1000_seniors", "capacite_totale"]),
            },
            "mesr": _random_record(rng, ["students_total", "students_evolution"]),
            "campuses": [{"distance_km": _random_value(rng)}],
            "access": _random_record(rng, ["gare_distance_km", "tc_score", "parking_score"]),
            "tourisme": _random_record(rng, ["nuites", "saisonnalite_index"]),
        })
    return payloads


class TestScoreInvariants:
    """Rules that must be mathematically true."""

    @pytest.mark.parametrize("nature", list(ProjectNature))
    def test_scores_in_range(self, nature, random_payloads):
        for payload in random_payloads:
            result = compute_project_smart_score(nature, payload)
            assert 0 <= result.score <= 100
            for c in result.components:
                assert 0 <= c.score <= 100
                assert 0 <= c.weight <= 1

    @pytest.mark.parametrize("nature", list(ProjectNature))
    def test_verdict_matches_score(self, nature, random_payloads):
        for payload in random_payloads[:10]:
            result = compute_project_smart_score(nature, payload)
            assert result.verdict == compute_verdict(result.score)

    @pytest.mark.parametrize("nature", list(ProjectNature))
    def test_deterministic(self, nature, random_payloads):
        payload = random_payloads[0]
        a = compute_project_smart_score(nature, payload)
        b = compute_project_smart_score(nature, payload)
        assert a.model_dump(exclude={"meta"}) == b.model_dump(exclude={"meta"})

    def test_weights_sum_to_one(self):
        for nature in ProjectNature:
            result = compute_project_smart_score(nature, {})
            assert sum(c.weight for c in result.components) == pytest.approx(1.0)

    def test_range_mapping_bounded(self):
        rng = random.Random(7)
        for _ in range(200):
            lo, hi = sorted(rng.uniform(-100, 100) for _ in range(2))
            assert 0 <= score_from_range(_random_value(rng), lo, hi, rng.random() < 0.5) <= 100

    def test_weighted_mean_bounded(self):
        rng = random.Random(11)
        for _ in range(200):
            items = [(_random_value(rng), _random_value(rng)) for _ in range(4)]
            assert 0 <= weighted_mean(items) <= 100


class TestCreditInvariants:
    """Ratios are None or positive, never NaN."""

    def test_ratios_never_nan(self):
        rng = random.Random(3)
        for _ in range(100):
            result = compute_ratios({
                "montantPret": _random_value(rng),
                "duree": rng.choice([None, 0, -12, 12, 84, 240, "300", math.nan]),
                "annualRatePct": rng.choice([None, 0, 3.5, math.nan, "4"]),
                "budget": _random_record(rng, ["coutAcquisition", "coutTravaux", "frais"]),
                "revenus": _random_record(rng, ["revenusMensuels", "loyersMensuels", "chargesExistantes"]),
                "bien": _random_record(rng, ["valeurEstimee"]),
            })
            assert math.isfinite(result.mensualite)
            for ratio in (result.ltv, result.ltc, result.dsti, result.dscr):
                assert ratio is None or math.isfinite(ratio)


class TestCommitteeInvariants:
    """Committee figures stay within 0-100 or are None."""

    def test_geo_score_bounded(self):
        for nb in range(0, 30):
            for flood in (True, False):
                for seismic in (True, False):
                    op = {"risks": {"geo": {"nbRisques": nb, "hasInondation": flood, "hasSismique": seismic}}}
                    score = compute_risk_score_from_geo(op).score
                    assert 0 <= score <= 100

    def test_committee_between_parts(self):
        for risk in range(0, 101, 10):
            for market in range(0, 101, 10):
                score = compute_committee_score(risk, market).score
                assert min(risk, market) <= score <= max(risk, market)

    def test_penalties_add_up(self):
        op = {"missing": [{"severity": "blocker"}, {"severity": "warn"}]}
        result = compute_confidence(op)
        assert result.confidence == 35
        assert 100 + sum(b.delta for b in result.breakdown) == result.confidence
