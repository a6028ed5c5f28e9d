"""Bureaux (office) SmartScore."""

from __future__ import annotations

from typing import Any

from mimmoza.domain.calculator.lookup import coalesce, get_path, number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import round_score, score_from_range, to_number, weighted_mean
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.models.inputs import BureauxSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-bureaux-v1"

WEIGHTS = {
    "emploi": 0.30,
    "accessibilite": 0.25,
    "concurrence": 0.20,
    "marche": 0.15,
    "services": 0.10,
}

RULES = (
    opportunity("emploi", ">=", 70, "Bassin d’emploi porteur."),
    opportunity("acces", ">=", 70, "Accessibilité favorable pour bureaux."),
    risk("offre", "<", 40, "Risque de vacance tertiaire / marché moins dynamique."),
    risk("services", "<", 45, "Manque de services de proximité pour salariés."),
)

RECOMMENDATIONS = (
    "Prioriser proximité TC/gare + accès routiers.",
    "Positionner l’offre (flex/coworking) si marché traditionnel saturé.",
    "Valider la demande via typologie entreprises locales (SIRENE) si disponible.",
)


def _bassin_emploi(insee: Any, emploi: Any) -> SubScore:
    actifs = to_number(coalesce(get_path(emploi, "actifs"), get_path(insee, "population_active")))
    pop = number_at(insee, "population")
    chom = number_at(insee, "taux_chomage")

    score = weighted_mean([
        (score_from_range(actifs if actifs is not None else pop, 8000, 120000), 0.75),
        (score_from_range(chom, 4, 14, False) if chom is not None else 50, 0.25),
    ])
    return SubScore.computed(round_score(score), actifs=actifs, pop=pop, chom=chom)


def _accessibilite(access: Any) -> SubScore:
    gare = number_at(access, "gare_distance_km")
    autoroute = number_at(access, "autoroute_distance_km")
    tc = number_at(access, "tc_score")

    score = weighted_mean([
        (score_from_range(gare, 0, 15, False) if gare is not None else 50, 0.40),
        (score_from_range(autoroute, 0, 12, False) if autoroute is not None else 50, 0.30),
        (tc if tc is not None else 50, 0.30),
    ])
    return SubScore.computed(round_score(score), gare=gare, autoroute=autoroute, tc=tc)


def _offre_tertiaire(offre: Any) -> SubScore:
    vac = number_at(offre, "vacance_pct")
    count = number_at(offre, "bureaux_count")

    score = weighted_mean([
        (score_from_range(vac, 4, 12, False) if vac is not None else 50, 0.65),
        (score_from_range(count, 0, 150) if count is not None else 50, 0.35),
    ])
    return SubScore.computed(round_score(score), vac=vac, count=count)


def _services(bpe: Any) -> SubScore:
    if bpe is None:
        return SubScore.assumed(available=False)

    serv = number_at(bpe, "nb_services")
    commerces = number_at(bpe, "nb_commerces")
    score = weighted_mean([
        (score_from_range(serv, 10, 100), 0.55),
        (score_from_range(commerces, 10, 80), 0.45),
    ])
    return SubScore.computed(round_score(score), serv=serv, commerces=commerces)


def compute_bureaux_smart_score(
    payload: BureauxSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    data = BureauxSmartScoreInput.coerce(payload)

    emploi = _bassin_emploi(data.insee, data.emploi)
    acces = _accessibilite(data.access)
    offre = _offre_tertiaire(data.offre)
    serv = _services(data.bpe)
    dynamique = SubScore.computed(round_score((emploi.score + acces.score) / 2))

    components = [
        component_from(emploi, "emploi", "Bassin d’emploi", WEIGHTS["emploi"]),
        component_from(acces, "accessibilite", "Accessibilité", WEIGHTS["accessibilite"]),
        component_from(offre, "concurrence", "Offre tertiaire (vacance)", WEIGHTS["concurrence"]),
        component_from(dynamique, "marche", "Dynamique économique (proxy)", WEIGHTS["marche"]),
        component_from(serv, "services", "Services (restauration/commerces)", WEIGHTS["services"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "emploi": emploi.score,
            "acces": acces.score,
            "offre": offre.score,
            "services": serv.score,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.BUREAUX,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
