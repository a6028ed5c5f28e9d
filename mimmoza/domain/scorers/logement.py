"""Logement (housing programme) SmartScore.

Demographics, DVF market, competition and services. There is no building
permit pipeline yet, so competition and territorial dynamics are proxies
built from the market and demographic sub-scores.
"""

from __future__ import annotations

from typing import Any

from mimmoza.domain.calculator.lookup import number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import (
    BellCurve,
    clamp,
    round_score,
    score_from_range,
    weighted_mean,
)
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.calculator.territory import infer_zone_type
from mimmoza.domain.models.inputs import LogementSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
    ZoneType,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-logement-v1"

WEIGHTS = {
    "demographie": 0.30,
    "marche": 0.25,
    "concurrence": 0.20,
    "services": 0.15,
    "accessibilite": 0.10,
}

# Median price: too cheap signals weak demand, too expensive hurts solvency
PRICE_CURVE = BellCurve(low=1800, peak=3500, high=7000, floor=40)

RURAL_SERVICES_BONUS = 10

RULES = (
    opportunity("evolution_pop_5ans", ">", 2, "Croissance démographique favorable à l’absorption."),
    opportunity("services", ">=", 70, "Bon niveau d’équipements pour soutenir la demande."),
    risk("marche", "<", 45, "Marché peu liquide ou dynamique DVF faible."),
    risk("zone", "==", ZoneType.RURAL, "Risque de demande plus diffuse (commercialisation plus longue)."),
)

RECOMMENDATIONS = (
    "Affiner la typologie produit (T2/T3/T4) selon structure des ménages.",
    "Caler le positionnement prix sur les comparables DVF récents.",
    "Vérifier pipeline offre future (permis, programmes) pour éviter saturation.",
)


def _demographie(insee: Any) -> SubScore:
    pop = number_at(insee, "population")
    evol5 = number_at(insee, "evolution_pop_5ans")
    dens = number_at(insee, "densite")
    pct25_39 = number_at(insee, "pct_25_39")
    pct30_44 = number_at(insee, "pct_30_44")

    s_pop = score_from_range(pop, 5000, 80000)
    s_evol = score_from_range(evol5, -5, 10)
    s_jeunes = score_from_range(pct30_44 if pct30_44 is not None else pct25_39, 10, 25)
    s_dens = score_from_range(dens, 100, 8000) if dens is not None else 50

    score = weighted_mean([
        (s_evol, 0.35),
        (s_jeunes, 0.30),
        (s_pop, 0.25),
        (s_dens, 0.10),
    ])
    return SubScore.computed(
        round_score(score),
        pop=pop, evol5=evol5, dens=dens, pct30_44=pct30_44, pct25_39=pct25_39,
    )


def _marche(prices: Any, transactions: Any) -> SubScore:
    med = number_at(prices, "median_eur_m2")
    evol1 = number_at(prices, "evolution_1an")
    tx_count = number_at(transactions, "count")

    s_tx = score_from_range(tx_count, 50, 400)
    s_evol = score_from_range(evol1, -10, 8)
    s_price = PRICE_CURVE(med) if med is not None else 50

    score = weighted_mean([
        (s_tx, 0.40),
        (s_evol, 0.35),
        (s_price, 0.25),
    ])
    return SubScore.computed(
        round_score(score),
        median_eur_m2=med, evolution_1an=evol1, transactions=tx_count,
    )


def _services(bpe: Any, zone: ZoneType) -> SubScore:
    if bpe is None:
        return SubScore.assumed(available=False)

    commerces = number_at(bpe, "nb_commerces")
    sante = number_at(bpe, "nb_sante")
    enseign = number_at(bpe, "nb_enseignement")
    serv = number_at(bpe, "nb_services")

    s = clamp(
        score_from_range(commerces, 5, 60) * 0.30
        + score_from_range(sante, 3, 40) * 0.30
        + score_from_range(enseign, 2, 20) * 0.20
        + score_from_range(serv, 5, 80) * 0.20
    )

    # Rural areas are expected to have fewer equipments
    adj = RURAL_SERVICES_BONUS if zone is ZoneType.RURAL else 0

    return SubScore.computed(
        round_score(clamp(s + adj)),
        commerces=commerces, sante=sante, enseign=enseign, services=serv,
    )


def compute_logement_smart_score(
    payload: LogementSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    """Score a housing programme.

    Args:
        payload: INSEE, DVF prices/transactions and optional BPE records
        thresholds: Verdict ladder override

    Returns:
        SmartScoreResult for ``logement``
    """
    data = LogementSmartScoreInput.coerce(payload)
    zone = infer_zone_type(data.insee, data.zone_type_hint)

    demog = _demographie(data.insee)
    marche = _marche(data.prices, data.transactions)
    services = _services(data.bpe, zone)

    concurrence = SubScore.computed(round_score(weighted_mean([
        (marche.score, 0.6),
        (demog.score, 0.4),
    ])))
    dynamique = SubScore.computed(round_score((demog.score + marche.score) / 2), zone=zone.value)

    components = [
        component_from(demog, "demographie", "Démographie & ménages", WEIGHTS["demographie"]),
        component_from(marche, "marche", "Marché immobilier (DVF)", WEIGHTS["marche"]),
        component_from(concurrence, "concurrence", "Offre & concurrence (proxy)", WEIGHTS["concurrence"]),
        component_from(services, "services", "Services & équipements", WEIGHTS["services"]),
        component_from(dynamique, "accessibilite", "Dynamique territoriale (proxy)", WEIGHTS["accessibilite"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "evolution_pop_5ans": number_at(data.insee, "evolution_pop_5ans"),
            "services": services.score,
            "marche": marche.score,
            "zone": zone,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.LOGEMENT,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
