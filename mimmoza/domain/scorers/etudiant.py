"""Résidence étudiante SmartScore.

Student demand comes from MESR enrolment figures; supply is the ratio of
existing student units to enrolled students.
"""

from __future__ import annotations

from typing import Any

from mimmoza.domain.calculator.lookup import first_present, number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import (
    StepCurve,
    clamp,
    round_score,
    saturation_score,
    score_from_range,
    to_number,
    weighted_mean,
)
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.models.inputs import EtudiantSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-etudiant-v1"

WEIGHTS = {
    "demographie": 0.35,
    "concurrence": 0.25,
    "accessibilite": 0.20,
    "services": 0.10,
    "marche": 0.10,
}

# Units per 100 students: under-equipped up to 3, saturated from 15
EQUIPMENT_RATE_LOW = 3
EQUIPMENT_RATE_HIGH = 15

RESIDENCES_BY_COUNT = StepCurve(steps=((2, 85), (5, 60), (10, 35)), above=15)

# Campus distance: each km costs 8 points
CAMPUS_KM_PENALTY = 8

RULES = (
    opportunity("demande", ">=", 70, "Demande étudiante structurée et dynamique."),
    opportunity("offre", ">=", 70, "Sous-équipement potentiel en logements étudiants."),
    risk("acces", "<", 45, "Accessibilité campus insuffisante (distance/transport)."),
    risk("offre", "<", 30, "Marché potentiellement saturé en résidences étudiantes."),
)

RECOMMENDATIONS = (
    "Cibler proximité campus et mobilité (TC) comme critère n°1.",
    "Positionner l’offre (T1/T2, services inclus) selon concurrence locale.",
    "Sécuriser partenariats écoles/gestionnaires pour remplissage.",
)


def _students(mesr: Any) -> float | None:
    return number_at(mesr, "students_total", "etudiants_total")


def _demande(mesr: Any) -> SubScore:
    students = _students(mesr)
    evol = number_at(mesr, "students_evolution", "evolution_etudiants")

    score = weighted_mean([
        (score_from_range(students, 2000, 40000), 0.7),
        (score_from_range(evol, -5, 12), 0.3),
    ])
    return SubScore.computed(round_score(score), students=students, evol=evol)


def _acces_campus(campuses: list[dict[str, Any] | None] | None) -> SubScore:
    if not campuses:
        return SubScore.unavailable(available=False)

    distances = [
        d for d in (to_number(c.get("distance_km")) for c in campuses if isinstance(c, dict))
        if d is not None
    ]
    if not distances:
        return SubScore.unavailable(best_distance_km=None)

    best = min(distances)
    return SubScore.computed(
        round_score(clamp(100 - best * CAMPUS_KM_PENALTY)),
        best_distance_km=best,
    )


def _offre(competition: Any, mesr: Any) -> SubScore:
    units = number_at(competition, "units_total", "logements_total")
    res_count = number_at(competition, "residences_count", "count")
    students = _students(mesr)

    ratio = None
    if units is not None and students is not None and students > 0:
        ratio = units / students * 100

    s_ratio = saturation_score(ratio, EQUIPMENT_RATE_LOW, EQUIPMENT_RATE_HIGH) if ratio is not None else 50
    s_count = RESIDENCES_BY_COUNT(res_count) if res_count is not None else 50

    score = weighted_mean([
        (s_ratio, 0.65),
        (s_count, 0.35),
    ])
    return SubScore.computed(round_score(score), units=units, resCount=res_count, ratio_pct=ratio)


def _services(bpe: Any) -> SubScore:
    if bpe is None:
        return SubScore.assumed(available=False)

    commerces = number_at(bpe, "nb_commerces")
    transport = number_at(bpe, "nb_transport", "transport_score")
    loisirs = number_at(bpe, "nb_sport_culture")

    score = weighted_mean([
        (score_from_range(commerces, 10, 80), 0.45),
        (score_from_range(transport, 10, 80) if transport is not None else 50, 0.25),
        (score_from_range(loisirs, 3, 40), 0.30),
    ])
    return SubScore.computed(round_score(score), commerces=commerces, transport=transport, loisirs=loisirs)


def _marche(prices: Any) -> SubScore:
    raw = first_present(prices, "median_eur_m2")
    if raw is None:
        return SubScore.assumed(median_eur_m2=None)
    return SubScore.computed(
        round_score(score_from_range(raw, 1800, 4500)),
        median_eur_m2=to_number(raw),
    )


def compute_etudiant_smart_score(
    payload: EtudiantSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    """Score a student residence.

    Campus access scores 0 when no campus distance is known.
    """
    data = EtudiantSmartScoreInput.coerce(payload)

    demande = _demande(data.mesr)
    offre = _offre(data.competition, data.mesr)
    acces = _acces_campus(data.campuses)
    serv = _services(data.bpe)
    marche = _marche(data.prices)

    components = [
        component_from(demande, "demographie", "Demande étudiante", WEIGHTS["demographie"]),
        component_from(offre, "concurrence", "Offre existante", WEIGHTS["concurrence"]),
        component_from(acces, "accessibilite", "Accessibilité campus", WEIGHTS["accessibilite"]),
        component_from(serv, "services", "Services & vie étudiante", WEIGHTS["services"]),
        component_from(marche, "marche", "Marché immobilier (proxy)", WEIGHTS["marche"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "demande": demande.score,
            "offre": offre.score,
            "acces": acces.score,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.RESIDENCE_ETUDIANTE,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
