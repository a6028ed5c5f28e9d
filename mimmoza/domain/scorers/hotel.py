"""Hôtel SmartScore.

Tourism demand dominates. A strongly seasonal destination scores low on
the ``marche`` component.
"""

from __future__ import annotations

from typing import Any

from mimmoza.domain.calculator.lookup import first_number, number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import round_score, score_from_range, weighted_mean
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.models.inputs import HotelSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-hotel-v1"

WEIGHTS = {
    "tourisme": 0.35,
    "concurrence": 0.25,
    "accessibilite": 0.20,
    "emploi": 0.10,
    "marche": 0.10,
}

RULES = (
    opportunity("tourisme", ">=", 70, "Attractivité touristique favorable."),
    opportunity("acces", ">=", 70, "Bonne accessibilité (gare/aéroport/TC)."),
    risk("saisonnalite", "<", 40, "Risque de forte saisonnalité (taux d’occupation variable)."),
    risk("offre", "<", 35, "Marché concurrentiel et offre hôtelière déjà dense."),
)

RECOMMENDATIONS = (
    "Définir le mix clientèle (affaires/loisir) et la gamme (éco/mid/premium).",
    "Valider la saisonnalité via données locales (événements, flux).",
    "Benchmark concurrence (prix, étoiles, avis) si possible.",
)


def _attractivite_touristique(tourisme: Any) -> SubScore:
    nuites = number_at(tourisme, "nuites", "nuitees")
    evol = number_at(tourisme, "evolution_pct")

    score = weighted_mean([
        (score_from_range(nuites, 20000, 400000), 0.75),
        (score_from_range(evol, -10, 10) if evol is not None else 50, 0.25),
    ])
    return SubScore.computed(round_score(score), nuites=nuites, evol=evol)


def _offre_hoteliere(offre: Any) -> SubScore:
    hotels = number_at(offre, "hotels_count")
    chambres = number_at(offre, "chambres_total")

    score = weighted_mean([
        (score_from_range(hotels, 0, 40) if hotels is not None else 50, 0.45),
        (score_from_range(chambres, 0, 1500) if chambres is not None else 50, 0.55),
    ])
    return SubScore.computed(round_score(score), hotels=hotels, chambres=chambres)


def _accessibilite(access: Any) -> SubScore:
    gare = number_at(access, "gare_distance_km")
    aeroport = number_at(access, "aeroport_distance_km")
    tc = number_at(access, "tc_score")

    score = weighted_mean([
        (score_from_range(gare, 0, 20, False) if gare is not None else 50, 0.40),
        (score_from_range(aeroport, 0, 50, False) if aeroport is not None else 50, 0.30),
        (tc if tc is not None else 50, 0.30),
    ])
    return SubScore.computed(round_score(score), gare=gare, aeroport=aeroport, tc=tc)


def _economie(economie: Any, insee: Any) -> SubScore:
    emplois = number_at(economie, "emplois")
    pop = number_at(insee, "population")
    rev = number_at(insee, "revenu_median")

    score = weighted_mean([
        (score_from_range(first_number(emplois, pop), 8000, 180000), 0.6),
        (score_from_range(rev, 18000, 42000), 0.4),
    ])
    return SubScore.computed(round_score(score), emplois=emplois, pop=pop, rev=rev)


def _saisonnalite(tourisme: Any) -> SubScore:
    saison = number_at(tourisme, "saisonnalite_index")
    if saison is None:
        return SubScore.assumed(saisonnalite_index=None)
    return SubScore.computed(
        round_score(score_from_range(saison, 20, 80, False)),
        saisonnalite_index=saison,
    )


def compute_hotel_smart_score(
    payload: HotelSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    data = HotelSmartScoreInput.coerce(payload)

    tour = _attractivite_touristique(data.tourisme)
    offre = _offre_hoteliere(data.offre)
    acces = _accessibilite(data.access)
    eco = _economie(data.economie, data.insee)
    saison = _saisonnalite(data.tourisme)

    components = [
        component_from(tour, "tourisme", "Attractivité touristique", WEIGHTS["tourisme"]),
        component_from(offre, "concurrence", "Offre hôtelière", WEIGHTS["concurrence"]),
        component_from(acces, "accessibilite", "Accessibilité", WEIGHTS["accessibilite"]),
        component_from(eco, "emploi", "Activité économique", WEIGHTS["emploi"]),
        component_from(saison, "marche", "Saisonnalité", WEIGHTS["marche"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "tourisme": tour.score,
            "acces": acces.score,
            "saisonnalite": saison.score,
            "offre": offre.score,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.HOTEL,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
