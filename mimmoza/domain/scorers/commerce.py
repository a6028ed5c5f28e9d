"""Commerce (retail) SmartScore.

Catchment, footfall, existing supply and purchasing power. Neighbouring
shops are scored on a bell: too few means no flow, too many means
saturation.
"""

from __future__ import annotations

from typing import Any

from mimmoza.domain.calculator.lookup import coalesce, get_path, number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import (
    BellCurve,
    clamp,
    round_score,
    score_from_range,
    to_number,
    weighted_mean,
)
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.models.inputs import CommerceSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-commerce-v1"

WEIGHTS = {
    "demographie": 0.35,
    "accessibilite": 0.25,
    "concurrence": 0.20,
    "solvabilite": 0.10,
    "services": 0.10,
}

NEIGHBOUR_SHOPS_CURVE = BellCurve(low=20, peak=60, high=140, floor=50)

RULES = (
    opportunity("chalandise", ">=", 70, "Zone de chalandise favorable."),
    opportunity("flux", ">=", 70, "Accessibilité/flux favorables (parking/TC/centralité)."),
    risk("offre", "<", 40, "Risque de saturation concurrentielle ou vacance commerciale élevée."),
    risk("pouvoir_achat", "<", 45, "Pouvoir d’achat local limité pour certains concepts."),
)

RECOMMENDATIONS = (
    "Définir clairement la typologie (alimentaire / services / restauration) et la zone de flux.",
    "Valider la visibilité, le stationnement et l’accessibilité avant engagement.",
    "Bench concurrentiel terrain (enseignes, vacance, loyers) si possible.",
)


def _chalandise(insee: Any) -> SubScore:
    pop = number_at(insee, "population")
    dens = number_at(insee, "densite")
    evol5 = number_at(insee, "evolution_pop_5ans")

    score = weighted_mean([
        (score_from_range(pop, 3000, 120000), 0.55),
        (score_from_range(dens, 200, 12000) if dens is not None else 50, 0.25),
        (score_from_range(evol5, -5, 10), 0.20),
    ])
    return SubScore.computed(round_score(score), pop=pop, dens=dens, evol5=evol5)


def _flux_access(access: Any, bpe: Any) -> SubScore:
    parking = number_at(access, "parking_score")
    tc = number_at(access, "tc_score")
    commerces = number_at(bpe, "nb_commerces")

    score = weighted_mean([
        (parking if parking is not None else 50, 0.35),
        (tc if tc is not None else 50, 0.25),
        (score_from_range(commerces, 10, 120) if commerces is not None else 50, 0.40),
    ])
    return SubScore.computed(round_score(score), parking=parking, tc=tc, commerces=commerces)


def _offre_concurrence(concurrence: Any, bpe: Any) -> SubScore:
    nb = to_number(coalesce(get_path(concurrence, "commerces_count"), get_path(bpe, "nb_commerces")))
    vac = number_at(concurrence, "vacance_pct")

    score = weighted_mean([
        (NEIGHBOUR_SHOPS_CURVE(nb) if nb is not None else 50, 0.55),
        (score_from_range(vac, 4, 15, False) if vac is not None else 50, 0.45),
    ])
    return SubScore.computed(round_score(score), nb=nb, vac=vac)


def _pouvoir_achat(insee: Any) -> SubScore:
    rev = number_at(insee, "revenu_median")
    return SubScore.computed(round_score(score_from_range(rev, 18000, 42000)), revenu_median=rev)


def compute_commerce_smart_score(
    payload: CommerceSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    """Score a retail project."""
    data = CommerceSmartScoreInput.coerce(payload)

    chal = _chalandise(data.insee)
    flux = _flux_access(data.access, data.bpe)
    offre = _offre_concurrence(data.concurrence, data.bpe)
    pa = _pouvoir_achat(data.insee)
    attractivite = SubScore.computed(round_score(clamp((flux.score + chal.score) / 2)))

    components = [
        component_from(chal, "demographie", "Chalandise", WEIGHTS["demographie"]),
        component_from(flux, "accessibilite", "Flux & accessibilité", WEIGHTS["accessibilite"]),
        component_from(offre, "concurrence", "Offre existante", WEIGHTS["concurrence"]),
        component_from(pa, "solvabilite", "Pouvoir d’achat", WEIGHTS["solvabilite"]),
        component_from(attractivite, "services", "Attractivité zone (proxy)", WEIGHTS["services"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "chalandise": chal.score,
            "flux": flux.score,
            "offre": offre.score,
            "pouvoir_achat": pa.score,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.COMMERCE,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
