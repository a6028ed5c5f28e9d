"""Résidence services seniors SmartScore."""

from __future__ import annotations

from typing import Any

from mimmoza.domain.calculator.lookup import number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import (
    StepCurve,
    round_score,
    score_from_range,
    weighted_mean,
)
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.models.inputs import SeniorSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-senior-v1"

WEIGHTS = {
    "demographie": 0.35,
    "solvabilite": 0.20,
    "concurrence": 0.20,
    "services": 0.15,
    "accessibilite": 0.10,
}

# Existing senior residences in the catchment
SUPPLY_BY_COUNT = StepCurve(steps=((0, 100), (2, 75), (5, 45), (10, 15)), above=5)

RULES = (
    opportunity("demographie", ">=", 70, "Vieillissement favorable et demande potentielle."),
    opportunity("offre", ">=", 70, "Offre seniors limitée, opportunité de positionnement."),
    risk("solvabilite", "<", 45, "Solvabilité locale potentiellement insuffisante pour une offre premium."),
    risk("services", "<", 45, "Services / santé insuffisants pour une résidence seniors attractive."),
)

RECOMMENDATIONS = (
    "Positionner l’offre (services, animation, sécurité) selon solvabilité locale.",
    "Optimiser proximité commerces + santé (pharmacie, médecins).",
    "Étudier un mix produit (T1/T2) adapté aux seniors autonomes.",
)


def _demographie(insee: Any) -> SubScore:
    pct65 = number_at(insee, "pct_plus_65")
    pct75 = number_at(insee, "pct_plus_75")
    evol75 = number_at(insee, "evolution_75_plus_5ans")
    pop = number_at(insee, "population")

    score = weighted_mean([
        (score_from_range(pct75, 6, 15), 0.45),
        (score_from_range(pct65, 12, 25), 0.20),
        (score_from_range(evol75, -5, 15), 0.20),
        (score_from_range(pop, 5000, 80000), 0.15),
    ])
    return SubScore.computed(round_score(score), pct65=pct65, pct75=pct75, evol75=evol75, pop=pop)


def _solvabilite(insee: Any) -> SubScore:
    rev = number_at(insee, "revenu_median")
    prop = number_at(insee, "pct_proprietaires", "pct_proprietaire")

    score = weighted_mean([
        (score_from_range(rev, 18000, 42000), 0.7),
        (score_from_range(prop, 40, 70), 0.3),
    ])
    return SubScore.computed(round_score(score), rev=rev, prop=prop)


def _offre(competition: Any) -> SubScore:
    count = number_at(competition, "count", "residences_count") or 0.0
    return SubScore.computed(SUPPLY_BY_COUNT(count), count=count)


def _services(bpe: Any) -> SubScore:
    if bpe is None:
        return SubScore.assumed(available=False)

    commerces = number_at(bpe, "nb_commerces")
    sante = number_at(bpe, "nb_sante")
    serv = number_at(bpe, "nb_services")

    score = weighted_mean([
        (score_from_range(commerces, 8, 70), 0.35),
        (score_from_range(sante, 3, 40), 0.45),
        (score_from_range(serv, 8, 80), 0.20),
    ])
    return SubScore.computed(round_score(score), commerces=commerces, sante=sante, serv=serv)


def compute_senior_smart_score(
    payload: SeniorSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    """Score a senior residence; accessibility is the services/solvency average."""
    data = SeniorSmartScoreInput.coerce(payload)

    demog = _demographie(data.insee)
    solv = _solvabilite(data.insee)
    offre = _offre(data.competition)
    serv = _services(data.bpe)
    access = SubScore.computed(round_score((serv.score + solv.score) / 2))

    components = [
        component_from(demog, "demographie", "Démographie seniors", WEIGHTS["demographie"]),
        component_from(solv, "solvabilite", "Solvabilité", WEIGHTS["solvabilite"]),
        component_from(offre, "concurrence", "Offre existante", WEIGHTS["concurrence"]),
        component_from(serv, "services", "Services & cadre de vie", WEIGHTS["services"]),
        component_from(access, "accessibilite", "Accessibilité (proxy)", WEIGHTS["accessibilite"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "demographie": demog.score,
            "offre": offre.score,
            "solvabilite": solv.score,
            "services": serv.score,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.RESIDENCE_SENIOR,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
