"""EHPAD (care home) SmartScore.

Weighted on dependency demographics (40%), bed supply (30%), health access
(15%), solvency (10%) and environment (5%). Bed supply is read from the
FINESS competition analysis; health access from the nearest-services
record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mimmoza.domain.calculator.lookup import first_present, number_at
from mimmoza.domain.calculator.narrative import evaluate_rules, opportunity, risk
from mimmoza.domain.calculator.normalizer import (
    StepCurve,
    clamp,
    round_score,
    saturation_score,
    score_from_range,
    weighted_mean,
)
from mimmoza.domain.calculator.smartscore import component_from, compute_smart_score
from mimmoza.domain.calculator.territory import infer_zone_type
from mimmoza.domain.models.inputs import EhpadSmartScoreInput
from mimmoza.domain.models.smartscore import (
    ProjectNature,
    SmartScoreResult,
    VerdictThresholds,
    ZoneType,
)
from mimmoza.domain.models.subscore import SubScore

VERSION = "smartscore-ehpad-v1"

WEIGHTS = {
    "demographie": 0.40,
    "concurrence": 0.30,
    "sante": 0.15,
    "solvabilite": 0.10,
    "services": 0.05,
}

# Beds per 1000 seniors: under-equipped up to 70, saturated from 130
BED_DENSITY_LOW = 70
BED_DENSITY_HIGH = 130

# Used instead of density when FINESS gives no density
DENSITY_FALLBACK_BY_COUNT = StepCurve(steps=((0, 100), (3, 70), (6, 40), (10, 20)), above=10)
COMPETITION_BY_COUNT = StepCurve(steps=((0, 100), (3, 70), (6, 45), (12, 20)), above=10)

# Known capacity penalty: 800 beds -> 25 points, capped
CAPACITY_PENALTY_BEDS = 800
CAPACITY_PENALTY_MAX = 25

# Nearest-service aliases, distance-decay range (km) and presence bonus
HEALTH_SERVICES = {
    "hopital": (("hopital_proche", "hospital_proche", "hopital"), 30, 80),
    "medecin": (("medecin_proche", "medecins_proches"), 10, 70),
    "pharmacie": (("pharmacie_proche",), 10, 70),
}
URGENCES_KEYS = ("urgences_proches", "urgences")
URGENCES_NEAR_KM = 20

ENVIRONMENT_BASE = {
    ZoneType.URBAIN: 70,
    ZoneType.PERIURBAIN: 65,
    ZoneType.RURAL: 55,
}

RULES = (
    opportunity("pct_plus_75", ">=", 12, "Forte proportion de seniors (75+), demande structurelle potentielle."),
    opportunity("densite_lits", "<", 80, "Zone sous-équipée en lits (densité < 80 lits/1000 seniors)."),
    opportunity("count", "<=", 2, "Concurrence directe limitée dans le rayon d’analyse."),
    risk("densite_lits", ">", 120, "Zone potentiellement sur-équipée (densité élevée de lits)."),
    risk("count", ">=", 8, "Concurrence forte (nombre d’établissements élevé)."),
    risk("sante", "<", 45, "Accès santé perfectible (hôpital/médecins/pharmacie éloignés ou manquants)."),
)

RECOMMENDATIONS = (
    "Valider l’opportunité via une analyse ARS (autorisations, besoins territoriaux) avant engagement.",
    "Positionner l’offre (gamme, unités spécialisées, accueil Alzheimer) pour différenciation.",
    "Sécuriser l’accessibilité (urgence, hôpital, pharmacie) et les partenariats médicaux de proximité.",
)


def _demographie(insee: Any) -> SubScore:
    pop = number_at(insee, "population")
    pct75 = number_at(insee, "pct_plus_75")
    pct85 = number_at(insee, "pct_plus_85")
    evol75_5 = number_at(insee, "evolution_75_plus_5ans")

    score = weighted_mean([
        (score_from_range(pct75, 6, 14), 0.45),
        (score_from_range(pct85, 1, 4), 0.25),
        (score_from_range(evol75_5, -5, 15), 0.20),
        (score_from_range(pop, 5000, 50000), 0.10),
    ])
    return SubScore.computed(
        round_score(score),
        pct75=pct75, pct85=pct85, evol75_5=evol75_5, population=pop,
    )


def _offre_lits(ehpad: Any) -> SubScore:
    count = number_at(ehpad, "count") or 0.0
    dens = number_at(ehpad, "analyse_concurrence.densite_lits_1000_seniors")
    cap_tot = number_at(ehpad, "analyse_concurrence.capacite_totale")

    if dens is not None:
        s_dens = saturation_score(dens, BED_DENSITY_LOW, BED_DENSITY_HIGH)
    else:
        s_dens = DENSITY_FALLBACK_BY_COUNT(count)
    s_count = COMPETITION_BY_COUNT(count)

    cap_penalty = 0.0
    if cap_tot is not None and cap_tot > 0:
        cap_penalty = clamp(cap_tot / CAPACITY_PENALTY_BEDS * CAPACITY_PENALTY_MAX, 0, CAPACITY_PENALTY_MAX)

    # The capacity penalty applies to the blended score
    base = weighted_mean([
        (s_dens, 0.65),
        (s_count, 0.35),
    ])
    return SubScore.computed(
        round_score(clamp(base - cap_penalty)),
        count=count,
        densite_lits_1000_seniors=dens,
        capacite_totale=cap_tot,
        capPenalty=cap_penalty,
    )


def _distance_km(service: Any) -> float | None:
    if not isinstance(service, Mapping):
        return None
    km = number_at(service, "distance_km")
    if km is not None:
        return km
    meters = number_at(service, "distance_m")
    return meters / 1000 if meters is not None else None


def _sante_access(services: Any) -> SubScore:
    if services is None:
        return SubScore.unavailable(available=False)

    terms = []
    present: dict[str, bool] = {}
    for name, (aliases, range_km, presence_bonus) in HEALTH_SERVICES.items():
        service = first_present(services, *aliases)
        present[name] = service is not None
        if service is None:
            terms.append(0.0)
            continue
        # A missing distance scores as 0 km
        decay = clamp(100 - score_from_range(_distance_km(service), 0, range_km))
        terms.append(max(decay, presence_bonus))

    urgences = first_present(services, *URGENCES_KEYS)
    urg_km = _distance_km(urgences)
    if urgences is None:
        s_urg = 0.0
    elif urg_km is None:
        s_urg = 50.0
    else:
        s_urg = 80.0 if urg_km <= URGENCES_NEAR_KM else 40.0

    score = weighted_mean([
        (terms[0], 0.40),
        (terms[1], 0.25),
        (terms[2], 0.20),
        (s_urg, 0.15),
    ])
    return SubScore.computed(
        round_score(score),
        has_hospital=present["hopital"],
        has_medecin=present["medecin"],
        has_pharmacie=present["pharmacie"],
        has_urgences=urgences is not None,
    )


def _solvabilite(insee: Any) -> SubScore:
    revenu = number_at(insee, "revenu_median")
    pauvrete = number_at(insee, "pct_sous_seuil_pauvrete", "taux_pauvrete")
    chomage = number_at(insee, "taux_chomage")

    score = weighted_mean([
        (score_from_range(revenu, 18000, 40000), 0.55),
        (score_from_range(pauvrete, 8, 25, False) if pauvrete is not None else 50, 0.25),
        (score_from_range(chomage, 4, 14, False) if chomage is not None else 50, 0.20),
    ])
    return SubScore.computed(round_score(score), revenu=revenu, pauvrete=pauvrete, chomage=chomage)


def _environnement(insee: Any, zone: ZoneType) -> SubScore:
    dens = number_at(insee, "densite")

    adj = 0
    if dens is not None:
        if dens > 6000:
            adj -= 5  # nuisances
        if dens < 100:
            adj -= 5  # isolation

    return SubScore.computed(
        round_score(clamp(ENVIRONMENT_BASE[zone] + adj)),
        zone=zone.value, densite=dens,
    )


def compute_ehpad_smart_score(
    payload: EhpadSmartScoreInput | dict[str, Any],
    *,
    thresholds: VerdictThresholds | None = None,
) -> SmartScoreResult:
    """Score an EHPAD project.

    Args:
        payload: INSEE record, FINESS ``ehpad`` record and ``servicesSante``
        thresholds: Verdict ladder override

    Returns:
        SmartScoreResult for ``ehpad``
    """
    data = EhpadSmartScoreInput.coerce(payload)
    zone = infer_zone_type(data.insee, data.zone_type_hint)

    demog = _demographie(data.insee)
    offre = _offre_lits(data.ehpad)
    sante = _sante_access(data.services_sante)
    solv = _solvabilite(data.insee)
    env = _environnement(data.insee, zone)

    components = [
        component_from(demog, "demographie", "Démographie & dépendance", WEIGHTS["demographie"]),
        component_from(offre, "concurrence", "Offre & lits", WEIGHTS["concurrence"]),
        component_from(sante, "sante", "Accès santé", WEIGHTS["sante"]),
        component_from(solv, "solvabilite", "Solvabilité", WEIGHTS["solvabilite"]),
        component_from(env, "services", "Environnement", WEIGHTS["services"]),
    ]

    narrative = evaluate_rules(
        RULES,
        {
            "pct_plus_75": number_at(data.insee, "pct_plus_75"),
            "densite_lits": offre.details["densite_lits_1000_seniors"],
            "count": offre.details["count"],
            "sante": sante.score,
        },
        RECOMMENDATIONS,
    )

    return compute_smart_score(
        ProjectNature.EHPAD,
        components,
        thresholds=thresholds,
        version=VERSION,
        opportunities=narrative.opportunities,
        risks=narrative.risks,
        recommendations=narrative.recommendations,
    )
