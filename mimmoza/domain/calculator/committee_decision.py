"""Credit committee decision engine.

Works on a ``CommitteeReport`` and produces what the committee reads after
the headline scores: acceptance probability, risk/return matrix, stress
tests, three decision postures and the written presentation. Every
function is deterministic and tolerates missing KPIs: a missing figure
neither helps nor hurts.

Generated text is French without accents, as it is also printed in the
committee PDF.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mimmoza.core.scoring_constants import (
    ACCEPTANCE_BASE,
    ACCEPTANCE_DSCR_LADDER,
    ACCEPTANCE_LTV_LADDER,
    ACCEPTANCE_MARKET_LADDER,
    ACCEPTANCE_MISSING_PENALTY,
    ACCEPTANCE_MISSING_PENALTY_CAP,
    ACCEPTANCE_SMARTSCORE_LADDER,
    STRESS_RATE_DSCR_FACTOR,
    STRESS_RENT_FACTORS,
    STRESS_VALUE_FACTOR,
)
from mimmoza.domain.calculator.normalizer import clamp, round_score, to_number
from mimmoza.domain.models.decision import (
    AcceptanceDriver,
    AcceptanceProbability,
    CommitteePresentation,
    CommitteeReport,
    DecisionScenario,
    DominantRisk,
    PresentationSection,
    RiskReturnMatrix,
    ScenarioKey,
    Sentiment,
    StressTestCase,
    StressTestKey,
    StressTestPack,
    StressTestSummary,
)

Ladder = Sequence[tuple[float, int, str]]

WEAK_PILLAR_BELOW = 40
STRONG_PILLAR_FROM = 70
LOW_LIQUIDITY_TRANSACTIONS = 20


def _at_least(value: float, ladder: Ladder) -> tuple[int, str]:
    for bound, impact, qualifier in ladder:
        if value >= bound:
            return impact, qualifier
    raise ValueError(f"ladder has no catch-all row for {value}")


def _at_most(value: float, ladder: Ladder) -> tuple[int, str]:
    for bound, impact, qualifier in ladder:
        if value <= bound:
            return impact, qualifier
    raise ValueError(f"ladder has no catch-all row for {value}")


def _positive(value: Any) -> float | None:
    x = to_number(value)
    return x if x is not None and x > 0 else None


def _yield_pct(loyer: float | None, cout: float | None) -> float | None:
    """Gross yield in %, None (never 0) when either side is unknown."""
    if loyer is None or cout is None:
        return None
    return loyer / cout * 100


def _round2(x: float | None) -> float | None:
    return round_score(x, 2) if x is not None else None


def _missing_penalty(count: int) -> int:
    return min(count * ACCEPTANCE_MISSING_PENALTY, ACCEPTANCE_MISSING_PENALTY_CAP)


def report_yield_pct(report: CommitteeReport) -> float | None:
    return _yield_pct(_positive(report.kpis.loyer_annuel), _positive(report.kpis.cout_total))


def market_insight_score(report: CommitteeReport) -> int | None:
    """Market score from the study insights.

    ``(positives - 0.7 x negatives) / total x 100 + 50``, clamped to
    0-100; None without a market study or without insights.
    """
    if report.market_study is None:
        return None
    insights = report.market_study.insights
    if not insights:
        return None
    pos = sum(1 for i in insights if i.sentiment is Sentiment.POSITIVE)
    neg = sum(1 for i in insights if i.sentiment is Sentiment.NEGATIVE)
    return int(clamp(round_score((pos - neg * 0.7) / len(insights) * 100 + 50)))


def weak_pillars(report: CommitteeReport) -> list[str]:
    if report.smartscore is None:
        return []
    return [p.label for p in report.smartscore.pillars if p.score < WEAK_PILLAR_BELOW]


def strong_pillars(report: CommitteeReport) -> list[str]:
    if report.smartscore is None:
        return []
    return [p.label for p in report.smartscore.pillars if p.score >= STRONG_PILLAR_FROM]


def _smartscore(report: CommitteeReport) -> float | None:
    return report.smartscore.score if report.smartscore is not None else None


# --- Acceptance probability ---

def compute_acceptance_score(
    dscr: float | None,
    ltv: float | None,
    smartscore: float | None,
    market_score: float | None,
    missing_count: int,
) -> int:
    """Committee acceptance probability (0-100).

    Starts at 50 and adds the DSCR, LTV, SmartScore and market impacts of
    the acceptance ladders, then takes 3 points per missing item (at most
    20). Missing figures are skipped.
    """
    score = ACCEPTANCE_BASE
    if dscr is not None:
        score += _at_least(dscr, ACCEPTANCE_DSCR_LADDER)[0]
    if ltv is not None:
        score += _at_most(ltv, ACCEPTANCE_LTV_LADDER)[0]
    if smartscore is not None:
        score += _at_least(smartscore, ACCEPTANCE_SMARTSCORE_LADDER)[0]
    if market_score is not None:
        score += _at_least(market_score, ACCEPTANCE_MARKET_LADDER)[0]
    if missing_count > 0:
        score -= _missing_penalty(missing_count)
    return int(clamp(round_score(score)))


def build_acceptance_probability(report: CommitteeReport) -> AcceptanceProbability:
    """Acceptance score with the drivers behind it, largest impact first.

    Gross margin and yield appear as drivers for the committee's reading
    but do not move the score.
    """
    kpis = report.kpis
    score = _smartscore(report)
    market = market_insight_score(report)
    yield_pct = report_yield_pct(report)

    drivers: list[AcceptanceDriver] = []

    if kpis.dscr is not None:
        impact, qualifier = _at_least(kpis.dscr, ACCEPTANCE_DSCR_LADDER)
        drivers.append(AcceptanceDriver(label="DSCR", detail=f"{kpis.dscr:.2f}, {qualifier}", impact=impact))
    if kpis.ltv is not None:
        impact, qualifier = _at_most(kpis.ltv, ACCEPTANCE_LTV_LADDER)
        drivers.append(AcceptanceDriver(label="LTV", detail=f"{kpis.ltv:g}%, {qualifier}", impact=impact))
    if score is not None:
        impact, qualifier = _at_least(score, ACCEPTANCE_SMARTSCORE_LADDER)
        drivers.append(AcceptanceDriver(label="SmartScore", detail=f"{score:g}/100, {qualifier}", impact=impact))
    if market is not None:
        impact, qualifier = _at_least(market, ACCEPTANCE_MARKET_LADDER)
        drivers.append(AcceptanceDriver(label="Marche", detail=f"Score {market}/100, {qualifier}", impact=impact))

    marge = kpis.marge_brute
    if marge is not None:
        if marge > 15:
            drivers.append(AcceptanceDriver(label="Marge brute", detail=f"{marge:g}%, confortable", impact=5))
        elif marge < 5:
            drivers.append(AcceptanceDriver(label="Marge brute", detail=f"{marge:g}%, serree", impact=-5))

    if yield_pct is not None:
        if yield_pct >= 7:
            drivers.append(AcceptanceDriver(label="Rendement brut", detail=f"{yield_pct:.1f}%, attractif", impact=4))
        elif yield_pct < 4:
            drivers.append(AcceptanceDriver(label="Rendement brut", detail=f"{yield_pct:.1f}%, faible", impact=-4))

    if report.missing:
        drivers.append(AcceptanceDriver(
            label="Donnees manquantes",
            detail=f"{len(report.missing)} element(s)",
            impact=-_missing_penalty(len(report.missing)),
        ))

    drivers.sort(key=lambda d: abs(d.impact), reverse=True)

    return AcceptanceProbability(
        score=compute_acceptance_score(kpis.dscr, kpis.ltv, score, market, len(report.missing)),
        drivers=drivers,
    )


# --- Risk / return matrix ---

def resolve_dominant_risk(report: CommitteeReport) -> tuple[DominantRisk, str]:
    """First risk of the waterfall: DSCR < 1, LTV > 80%, thin DVF market,
    weak guarantees pillar, more than two missing items."""
    dscr = report.kpis.dscr
    ltv = report.kpis.ltv
    nb_tx = report.market_study.dvf.nb_transactions if report.market_study is not None else None

    if dscr is not None and dscr < 1:
        return DominantRisk.DSCR_DEFICIT, f"Deficit de couverture de dette (DSCR {dscr:.2f})"
    if ltv is not None and ltv > 80:
        return DominantRisk.LTV_CRITICAL, f"Exposition bancaire critique (LTV {ltv:g}%)"
    if nb_tx is not None and nb_tx < LOW_LIQUIDITY_TRANSACTIONS:
        return DominantRisk.LIQUIDITY_LOW, f"Marche peu liquide ({nb_tx:g} transactions DVF)"
    if any("garantie" in p.lower() or "surete" in p.lower() for p in weak_pillars(report)):
        return DominantRisk.GUARANTEES_MISSING, "Garanties insuffisantes ou absentes"
    if len(report.missing) > 2:
        return DominantRisk.DATA_MISSING, f"Donnees manquantes significatives ({len(report.missing)} elements)"
    return DominantRisk.NONE, "Aucun risque dominant identifie"


def _risk_score(report: CommitteeReport, market: int | None, yield_stress: float | None) -> int:
    kpis = report.kpis
    score = _smartscore(report)
    risk = 50

    if kpis.ltv is not None:
        ltv = kpis.ltv
        if ltv > 80:
            risk += 20
        elif ltv > 70:
            risk += 10
        elif ltv > 60:
            risk += 3
        elif ltv <= 40:
            risk -= 15
        elif ltv <= 50:
            risk -= 10
        else:
            risk -= 3

    if kpis.dscr is not None:
        dscr = kpis.dscr
        if dscr < 1:
            risk += 20
        elif dscr < 1.2:
            risk += 5
        elif dscr >= 1.5:
            risk -= 12
        else:
            risk -= 5

    if score is not None:
        if score < 30:
            risk += 10
        elif score >= 70:
            risk -= 10

    if market is not None and market < 30:
        risk += 8

    if len(report.missing) > 3:
        risk += 8
    elif report.missing:
        risk += 3

    if yield_stress is not None and yield_stress < 4:
        risk += 5

    return int(clamp(risk))


def _return_score(report: CommitteeReport, market: int | None, yield_pct: float | None) -> int:
    kpis = report.kpis
    ret = 40

    if yield_pct is not None:
        if yield_pct >= 8:
            ret += 25
        elif yield_pct >= 6:
            ret += 18
        elif yield_pct >= 4:
            ret += 8
        else:
            ret -= 5

    if kpis.marge_brute is not None:
        marge = kpis.marge_brute
        if marge >= 20:
            ret += 18
        elif marge >= 10:
            ret += 10
        elif marge >= 5:
            ret += 3
        else:
            ret -= 5

    if kpis.dscr is not None and kpis.dscr >= 1.5:
        ret += 5

    if market is not None:
        if market >= 70:
            ret += 8
        elif market < 30:
            ret -= 5

    return int(clamp(ret))


def _quadrant(risk: int, ret: int) -> str:
    if risk <= 40:
        return "Optimal, Rendement eleve / Risque faible" if ret >= 60 else "Prudent, Risque faible / Rendement modere"
    if risk > 60:
        return "Vigilance, Rendement eleve / Risque eleve" if ret >= 60 else "Defavorable, Risque eleve / Rendement faible"
    return "Zone intermediaire, Attention requise"


def build_risk_return_matrix(report: CommitteeReport) -> RiskReturnMatrix:
    """Position the dossier on the risk (0 = low) / return (0 = low) grid.

    The commentary holds at most five sentences.
    """
    kpis = report.kpis
    market = market_insight_score(report)
    loyer = _positive(kpis.loyer_annuel)
    cout = _positive(kpis.cout_total)
    yield_pct = _yield_pct(loyer, cout)
    yield_stress = _yield_pct(loyer * STRESS_RENT_FACTORS["rent_-10"] if loyer is not None else None, cout)

    dominant, dominant_label = resolve_dominant_risk(report)
    risk = _risk_score(report, market, yield_stress)
    ret = _return_score(report, market, yield_pct)

    parts: list[str] = []
    if risk <= 40 and ret >= 60:
        parts.append("Le dossier se positionne dans le cadran optimal avec un bon equilibre rendement/risque.")
    elif risk > 60 and ret < 60:
        parts.append(
            "Le profil risque/rendement est defavorable : le niveau de risque n'est pas compense "
            "par un rendement suffisant."
        )
    elif risk > 60:
        parts.append(
            "Le rendement est attractif mais le niveau de risque appelle a la vigilance "
            "et a des conditions renforcees."
        )
    else:
        parts.append(
            "Le profil risque/rendement se situe dans une zone intermediaire qui appelle a un examen attentif."
        )

    if kpis.ltv is not None and kpis.ltv > 70:
        parts.append(f"Le LTV de {kpis.ltv:g}% pese sur le score de risque.")
    if yield_pct is not None and yield_pct >= 7:
        parts.append(f"Le rendement brut de {yield_pct:.1f}% est un atout majeur.")
    if yield_stress is not None and yield_pct is not None and yield_stress < 4 <= yield_pct:
        parts.append(
            f"En stress loyers -10%, le rendement tombe a {yield_stress:.1f}%, sous le seuil de confort."
        )
    if kpis.marge_brute is not None and kpis.marge_brute < 5:
        parts.append("La marge serree limite le potentiel de rendement.")

    if risk > 70 and ret < 50 and len(parts) < 5:
        parts.append(
            f"Le couple rendement/risque est defavorable : le risque eleve (score {risk}/100) "
            f"n'est pas compense par un rendement suffisant (score {ret}/100), "
            "rendant l'operation difficilement justifiable en l'etat."
        )

    if kpis.dscr is not None and kpis.dscr < 1.2 and len(parts) < 5:
        stressed = round_score(kpis.dscr * STRESS_RATE_DSCR_FACTOR, 2)
        if stressed < 1:
            parts.append(
                f"En stress taux +1% (DSCR estime a {stressed:.2f}), la couverture de dette passe sous 1, "
                "le dossier ne resisterait pas a une hausse de taux."
            )
        else:
            parts.append(
                f"En stress taux +1% (DSCR estime a {stressed:.2f}), la couverture reste positive "
                "mais avec une marge tres reduite."
            )

    return RiskReturnMatrix(
        risk_score=risk,
        return_score=ret,
        quadrant=_quadrant(risk, ret),
        dominant_risk=dominant,
        dominant_risk_label=dominant_label,
        commentary=" ".join(parts[:5]),
    )


# --- Stress tests ---

def _stress_notes(dscr: float | None, ltv: float | None, yield_pct: float | None, acceptance: int) -> list[str]:
    notes = []
    if dscr is not None and dscr < 1:
        notes.append("Déficit de couverture")
    if ltv is not None and ltv > 80:
        notes.append("LTV > 80%")
    if yield_pct is not None and yield_pct < 4:
        notes.append("Rendement faible")
    if acceptance < 30:
        notes.append("Acceptation très improbable")
    return notes


def build_stress_tests(report: CommitteeReport) -> StressTestPack:
    """Base case plus four stresses: rents -10% and -20%, asset value -10%
    and rate +1%.

    Rent stresses scale DSCR and yield; the value stress raises LTV by
    1/0.9; the rate stress is approximated as DSCR -10%. SmartScore, market
    and missing items are kept, so acceptance only moves with DSCR and LTV.
    """
    kpis = report.kpis
    score = _smartscore(report)
    market = market_insight_score(report)
    missing = len(report.missing)
    loyer = _positive(kpis.loyer_annuel)
    cout = _positive(kpis.cout_total)
    base_dscr = kpis.dscr
    base_ltv = kpis.ltv
    base_yield = _yield_pct(loyer, cout)

    def case(
        key: StressTestKey,
        label: str,
        dscr: float | None,
        ltv: float | None,
        yield_pct: float | None,
    ) -> StressTestCase:
        acceptance = compute_acceptance_score(dscr, ltv, score, market, missing)
        return StressTestCase(
            key=key,
            label=label,
            dscr=dscr,
            ltv=ltv,
            yield_pct=_round2(yield_pct),
            acceptance_score=acceptance,
            notes=_stress_notes(dscr, ltv, yield_pct, acceptance),
        )

    def scaled(value: float | None, factor: float) -> float | None:
        return _round2(value * factor) if value is not None else None

    def rent_case(key: StressTestKey, label: str) -> StressTestCase:
        factor = STRESS_RENT_FACTORS[key.value]
        stressed_loyer = loyer * factor if loyer is not None else None
        return case(key, label, scaled(base_dscr, factor), base_ltv, _yield_pct(stressed_loyer, cout))

    base = case(StressTestKey.BASE, "Scénario de base", base_dscr, base_ltv, base_yield)
    cases = [
        rent_case(StressTestKey.RENT_10, "Loyers -10%"),
        rent_case(StressTestKey.RENT_20, "Loyers -20%"),
        case(
            StressTestKey.VALUE_10,
            "Valeur du bien -10%",
            base_dscr,
            _round2(base_ltv / STRESS_VALUE_FACTOR) if base_ltv is not None else None,
            base_yield,
        ),
        case(StressTestKey.RATE_1, "Taux d'intérêt +1%", scaled(base_dscr, STRESS_RATE_DSCR_FACTOR), base_ltv, base_yield),
    ]

    all_cases = [base, *cases]
    worst = min(all_cases, key=lambda c: c.acceptance_score)
    with_dscr = [c for c in all_cases if c.dscr is not None]
    worst_dscr = min(with_dscr, key=lambda c: c.dscr).dscr if with_dscr else None

    findings: list[str] = []
    if worst.key is not StressTestKey.BASE:
        findings.append(
            f'Le scenario le plus defavorable est "{worst.label}" avec une probabilite '
            f"d'acceptation de {worst.acceptance_score}%."
        )

    breaches = [c for c in cases if c.dscr is not None and c.dscr < 1]
    if breaches:
        if len(breaches) == len(cases):
            findings.append("Le DSCR passe sous 1 dans tous les scenarios de stress, resilience insuffisante.")
        else:
            labels = ", ".join(c.label for c in breaches)
            findings.append(f"Le DSCR passe sous 1 dans {len(breaches)} scenario(s) ({labels}).")
    elif base_dscr is not None and base_dscr >= 1:
        findings.append("Le DSCR reste au-dessus de 1 dans tous les scenarios, bonne resilience.")

    ltv_breaches = [c for c in cases if c.ltv is not None and c.ltv > 80]
    if ltv_breaches:
        labels = ", ".join(c.label for c in ltv_breaches)
        findings.append(f'Le LTV depasse 80% en scenario "{labels}", exposition bancaire critique.')

    return StressTestPack(
        base=base,
        cases=cases,
        summary=StressTestSummary(
            worst_case_key=worst.key,
            worst_dscr=worst_dscr,
            worst_acceptance=worst.acceptance_score,
            key_findings=findings[:3],
        ),
    )


# --- Decision scenarios ---

def _common_pros_cons(report: CommitteeReport) -> tuple[list[str], list[str]]:
    kpis = report.kpis
    dscr, ltv = kpis.dscr, kpis.ltv
    score = _smartscore(report) or 0
    market = market_insight_score(report)
    pros: list[str] = []
    cons: list[str] = []

    if dscr is not None and dscr >= 1.2:
        pros.append(f"Couverture de dette satisfaisante (DSCR {dscr:.2f})")
    if ltv is not None and ltv <= 50:
        pros.append(f"Levier contenu (LTV {ltv:g}%)")
    if market is not None and market >= 60:
        pros.append(f"Marche porteur (score {market}/100)")
    if score >= 65:
        pros.append(f"SmartScore solide ({score:g}/100)")
    pros.extend(f"Pilier fort : {p}" for p in strong_pillars(report)[:2])

    if dscr is not None and dscr < 1:
        cons.append(f"DSCR insuffisant ({dscr:.2f})")
    if ltv is not None and ltv > 70:
        cons.append(f"LTV eleve ({ltv:g}%)")
    if market is not None and market < 40:
        cons.append(f"Marche defavorable ({market}/100)")
    if report.missing:
        cons.append(f"{len(report.missing)} donnee(s) manquante(s)")
    cons.extend(f"Pilier faible : {p}" for p in weak_pillars(report)[:2])

    return pros, cons


def _conservative(report: CommitteeReport, pros: list[str], cons: list[str]) -> DecisionScenario:
    dscr, ltv = report.kpis.dscr, report.kpis.ltv
    missing = report.missing
    score = _smartscore(report) or 0
    conditions: list[str] = []
    targets: list[str] = []

    no_go = (dscr is not None and dscr < 1) or len(missing) >= 3
    strict = not no_go and (bool(missing) or (ltv is not None and ltv > 60))

    if no_go:
        decision = "NO GO"
        confidence = 85 if dscr is not None and dscr < 0.8 else 70
        targets.append("Restructurer le plan de financement")
        if dscr is not None and dscr < 1:
            targets.append("Amener le DSCR au-dessus de 1.0")
        if len(missing) >= 3:
            targets.append("Completer les donnees manquantes")
    elif strict:
        decision = "GO sous conditions strictes"
        confidence = 55
        conditions.extend(missing[:5])
        if ltv is not None and ltv > 60:
            conditions.append("Reduire le LTV sous 60%")
        targets.append("Levee integrale des conditions avant engagement")
    elif score < 70:
        decision = "GO sous conditions"
        confidence = 60
        conditions.append("Suivi trimestriel renforce")
    else:
        decision = "GO"
        confidence = 75

    return DecisionScenario(
        key=ScenarioKey.CONSERVATIVE,
        label="Conservateur",
        decision=decision,
        confidence=confidence,
        pros=pros or ["Aucun point favorable majeur identifie"],
        cons=cons or ["Aucun point defavorable majeur"],
        conditions=conditions,
        targets=targets,
    )


def _balanced(report: CommitteeReport, pros: list[str], cons: list[str]) -> DecisionScenario:
    dscr, ltv = report.kpis.dscr, report.kpis.ltv
    missing = report.missing
    conditions: list[str] = []
    targets: list[str] = []

    go_full = ltv is not None and ltv < 50 and not missing and (dscr is None or dscr >= 1.2)
    no_go = dscr is not None and dscr < 1 and len(missing) >= 3

    if go_full:
        decision, confidence = "GO", 80
    elif no_go:
        decision, confidence = "NO GO", 75
        targets.append("Revoir le plan de financement")
    else:
        decision, confidence = "GO sous conditions", 65
        conditions.extend(missing[:4])
        if ltv is not None and ltv > 70:
            conditions.append("Renforcer les garanties")
        if dscr is not None and dscr < 1.2:
            conditions.append("Suivi DSCR semestriel")

    return DecisionScenario(
        key=ScenarioKey.BALANCED,
        label="Equilibre",
        decision=decision,
        confidence=confidence,
        pros=pros or ["Aucun point favorable majeur"],
        cons=cons or ["Aucun point defavorable majeur"],
        conditions=conditions,
        targets=targets,
    )


def _opportunistic(report: CommitteeReport, pros: list[str], cons: list[str]) -> DecisionScenario:
    dscr, ltv = report.kpis.dscr, report.kpis.ltv
    market = market_insight_score(report)
    yield_pct = report_yield_pct(report)
    conditions: list[str] = []

    if ltv is not None and ltv < 50 and (market is None or market > 50):
        decision, confidence = "GO patrimonial", 75
        if dscr is not None and dscr < 1:
            conditions.append("Reserve de couverture temporaire du service de la dette")
    else:
        decision, confidence = "GO sous conditions", 60
        conditions.extend(report.missing[:3])
        if ltv is not None and ltv >= 50:
            conditions.append("Renforcer l'apport pour reduire le LTV")

    targets = ["Valorisation patrimoniale long terme"]
    if yield_pct is not None and yield_pct >= 6:
        targets.append("Capitaliser sur le rendement locatif")

    return DecisionScenario(
        key=ScenarioKey.OPPORTUNISTIC,
        label="Opportuniste",
        decision=decision,
        confidence=confidence,
        pros=pros or ["Aucun point favorable majeur"],
        cons=cons or ["Aucun point defavorable majeur"],
        conditions=conditions,
        targets=targets,
    )


def build_decision_scenarios(report: CommitteeReport) -> list[DecisionScenario]:
    """Conservative, balanced and opportunistic postures, in that order.

    The conservative posture comes first: it is the one retained as the
    dominant decision.
    """
    pros, cons = _common_pros_cons(report)
    return [
        _conservative(report, pros, cons),
        _balanced(report, pros, cons),
        _opportunistic(report, pros, cons),
    ]


# --- Presentation ---

def _market_paragraphs(report: CommitteeReport) -> list[str]:
    study = report.market_study
    paras: list[str] = []
    if study is None:
        return paras

    dvf, insee = study.dvf, study.insee
    if dvf.prix_m2_median is not None and dvf.nb_transactions is not None:
        nb = dvf.nb_transactions
        if nb >= 50:
            liquidity = "un marche liquide"
        elif nb >= 20:
            liquidity = "un volume correct"
        else:
            liquidity = "un marche etroit"
        paras.append(
            f"L'analyse DVF fait ressortir un prix median de {int(round_score(dvf.prix_m2_median))} EUR/m2 "
            f"sur {liquidity} ({nb:g} transactions)."
        )

    evo = dvf.evolution
    if evo is not None:
        if evo > 5:
            paras.append(f"La tendance est haussiere (+{evo:.1f}%), confortant la valorisation.")
        elif evo > 0:
            paras.append(f"Les prix montrent une legere progression (+{evo:.1f}%).")
        elif evo > -5:
            paras.append(f"Les prix sont en leger recul ({evo:.1f}%).")
        else:
            paras.append(f"Les prix reculent significativement ({evo:.1f}%), facteur de risque sur la sortie.")

    if insee.revenu_median is not None:
        if insee.revenu_median > 25000:
            paras.append("Le bassin de population est solvable (revenu median eleve).")
        elif insee.revenu_median < 19000:
            paras.append("Le revenu median modeste peut limiter la demande.")
    if insee.taux_chomage is not None and insee.taux_chomage > 12:
        paras.append(f"Le taux de chomage local de {insee.taux_chomage:.1f}% est preoccupant.")
    if study.commune:
        paras.append(f"Commune : {study.commune}.")
    return paras


def _financial_paragraphs(report: CommitteeReport) -> list[str]:
    kpis = report.kpis
    yield_pct = report_yield_pct(report)
    paras: list[str] = []

    if kpis.cout_total is not None and kpis.loyer_annuel is not None:
        paras.append(
            f"L'operation represente un cout total de {int(round_score(kpis.cout_total / 1000))}k EUR."
        )
    if kpis.ltv is not None:
        ltv = kpis.ltv
        if ltv <= 50:
            paras.append(f"Le LTV de {ltv:g}% traduit une structure prudente avec un levier contenu.")
        elif ltv <= 70:
            paras.append(f"Le LTV de {ltv:g}% reste dans les standards bancaires.")
        else:
            paras.append(f"Le LTV de {ltv:g}% est eleve et necessite des garanties renforcees.")
    if kpis.dscr is not None:
        dscr = kpis.dscr
        if dscr >= 1.3:
            paras.append(f"Le DSCR de {dscr:.2f} offre une couverture confortable.")
        elif dscr >= 1.0:
            paras.append(f"Le DSCR de {dscr:.2f} est juste suffisant pour couvrir la dette.")
        else:
            paras.append(f"Le DSCR de {dscr:.2f} ne couvre pas le service de la dette, risque de defaut.")
    if yield_pct is not None:
        if yield_pct >= 7:
            paras.append(f"Le rendement brut implicite de {yield_pct:.1f}% est attractif.")
        elif yield_pct >= 4:
            paras.append(f"Le rendement brut de {yield_pct:.1f}% est dans la norme.")
        else:
            paras.append(f"Le rendement brut de {yield_pct:.1f}% est faible.")
    if kpis.marge_brute is not None:
        marge = kpis.marge_brute
        if marge > 15:
            paras.append(f"La marge brute de {marge:g}% offre un coussin confortable.")
        elif marge > 5:
            paras.append(f"La marge brute de {marge:g}% laisse peu de place aux imprevus.")
        else:
            paras.append(f"La marge de {marge:g}% est tres serree, risque en cas d'aleas.")
    return paras


def _risk_paragraphs(report: CommitteeReport, weak: list[str]) -> list[str]:
    dscr, ltv = report.kpis.dscr, report.kpis.ltv
    missing = report.missing
    paras: list[str] = []

    if weak:
        paras.append(f"Les piliers faibles identifies sont : {', '.join(weak)}.")
    if missing:
        listed = f" : {', '.join(missing)}" if len(missing) <= 5 else ""
        paras.append(f"{len(missing)} donnee(s) manquante(s) identifiee(s){listed}.")
    if dscr is not None and dscr < 1:
        paras.append("Le deficit de couverture de la dette constitue un risque structurel majeur.")
    if ltv is not None and ltv > 80:
        paras.append("L'exposition bancaire est tres elevee (LTV > 80%).")
    return paras


def _decision_line(report: CommitteeReport) -> str:
    dscr, ltv = report.kpis.dscr, report.kpis.ltv
    missing = report.missing
    score = _smartscore(report)

    if dscr is not None and dscr < 1:
        return "DECISION : NO GO en l'etat, le DSCR est inferieur a 1, les revenus ne couvrent pas la dette."
    if len(missing) >= 3 and ltv is not None and ltv > 70:
        return "DECISION : Reserve, donnees manquantes et levier eleve."
    if missing:
        return "DECISION : GO sous conditions, levee des donnees manquantes requise."
    if score is not None and score >= 65:
        return f"DECISION : GO, SmartScore {score:g}/100, fondamentaux reunis."
    if score is not None and score >= 40:
        return f"DECISION : GO sous conditions, SmartScore {score:g}/100, suivi renforce recommande."
    return "DECISION : Reserve, le dossier necessite des complements significatifs."


def build_committee_presentation(report: CommitteeReport) -> CommitteePresentation:
    """Written presentation: executive summary, market, financial, risk and
    strength sections, decision line and conditions precedent."""
    kpis = report.kpis
    weak = weak_pillars(report)
    strong = strong_pillars(report)

    summary = [f'Le dossier "{report.programme_nom}" est presente en comite de credit pour analyse et decision.']
    if report.adresse:
        summary.append(f"Le bien est situe {report.adresse}.")
    if report.smartscore is not None:
        summary.append(f"Le SmartScore s'etablit a {report.smartscore.score:g}/100 ({report.smartscore.verdict}).")
    if kpis.dscr is not None:
        summary.append(f"Le DSCR previsionnel est de {kpis.dscr:.2f}.")
    if kpis.ltv is not None:
        summary.append(f"Le ratio LTV se situe a {kpis.ltv:g}%.")

    sections = [
        PresentationSection(
            title="Contexte de marché",
            paragraphs=_market_paragraphs(report)
            or ["Les donnees de marche disponibles sont insuffisantes pour une analyse approfondie."],
        ),
        PresentationSection(
            title="Analyse financière",
            paragraphs=_financial_paragraphs(report)
            or ["Donnees financieres insuffisantes pour une analyse complete."],
        ),
        PresentationSection(
            title="Risques et points d'attention",
            paragraphs=_risk_paragraphs(report, weak) or ["Aucun risque majeur identifie a ce stade."],
        ),
    ]
    if strong:
        sections.append(PresentationSection(
            title="Points forts",
            paragraphs=[f"Les piliers solides du dossier sont : {', '.join(strong)}."],
        ))

    conditions = [f"Fournir : {m}" for m in report.missing[:8]]
    if kpis.dscr is not None and 1.0 <= kpis.dscr < 1.2:
        conditions.append("Suivi trimestriel du DSCR")
    if kpis.ltv is not None and kpis.ltv > 70:
        conditions.append("Renforcer les garanties ou reduire le LTV")
    if weak:
        conditions.append(f"Documenter / renforcer les piliers faibles ({', '.join(weak)})")

    return CommitteePresentation(
        executive_summary=" ".join(summary),
        sections=sections,
        decision_line=_decision_line(report),
        conditions=conditions,
    )
