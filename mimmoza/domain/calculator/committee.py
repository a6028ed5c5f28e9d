"""Credit committee aggregation.

Derives a terrain risk score from Géorisques flags, reads the market study
score, blends both into the committee score and measures how reliable the
underlying data is (confidence). Confidence is about data coverage, never
about project quality.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mimmoza.core.scoring_constants import (
    COMMITTEE_WEIGHTS,
    CONFIDENCE_BASE,
    CONFIDENCE_PENALTIES,
    GEO_BASE_SCORE,
    GEO_CLEAN_SCORE,
    GEO_FLOOD_PENALTY,
    GEO_PER_RISK_PENALTY,
    GEO_RISK_PENALTY_CAP,
    GEO_SEISMIC_PENALTY,
    MARKET_RECORD_PATHS,
    RISK_LEVEL_BANDS,
    RISK_SCORE_FALLBACK_SENTINEL,
)
from mimmoza.domain.calculator.lookup import first_present, get_path, is_finite_number
from mimmoza.domain.calculator.normalizer import clamp, round_score
from mimmoza.domain.models.committee import (
    ConfidenceAdjustment,
    ConfidenceResult,
    RiskLevel,
    ScoredValue,
)


def _score_0_100(x: float) -> int:
    return int(clamp(round_score(x), 0, 100))


def _coverage_ok(record: Any) -> bool:
    """A record is covered unless it says otherwise (missing coverage = ok)."""
    coverage = get_path(record, "coverage")
    if coverage is None:
        return True
    return str(coverage).lower() == "ok"


def _geo_record(operation: Any) -> Mapping[str, Any] | None:
    geo = get_path(operation, "risks.geo")
    return geo if isinstance(geo, Mapping) else None


def market_record(operation: Any) -> Mapping[str, Any] | None:
    """Market study attached to an operation, whatever alias the producer used."""
    market = first_present(operation, *MARKET_RECORD_PATHS)
    return market if isinstance(market, Mapping) else None


def compute_risk_score_from_geo(operation: Any) -> ScoredValue:
    """Terrain risk pre-filter from Géorisques flags (higher = safer).

    Args:
        operation: Operation record with ``risks.geo``
            ({coverage, nbRisques, hasInondation, hasSismique})

    Returns:
        90 when nothing is flagged; otherwise 85 minus 35 for flood, 10 for
        seismic and 5 per hazard (capped at 30). None when the data is
        missing or not fully covered.
    """
    geo = _geo_record(operation)
    if geo is None:
        return ScoredValue(score=None, reason="Aucune donnée Géorisques disponible.")

    coverage = str(geo.get("coverage", "ok") or "").lower()
    if coverage and coverage != "ok":
        return ScoredValue(score=None, reason=f"Couverture Géorisques insuffisante ({coverage}).")

    nb = geo.get("nbRisques")
    if not is_finite_number(nb):
        return ScoredValue(score=None, reason="Nombre de risques inconnu.")

    flood = bool(geo.get("hasInondation"))
    seismic = bool(geo.get("hasSismique"))

    if nb == 0 and not flood and not seismic:
        return ScoredValue(
            score=GEO_CLEAN_SCORE,
            reason="0 risque détecté (Inondation: Non, Sismique: Non).",
        )

    score = GEO_BASE_SCORE
    if flood:
        score -= GEO_FLOOD_PENALTY
    if seismic:
        score -= GEO_SEISMIC_PENALTY
    score -= min(GEO_RISK_PENALTY_CAP, nb * GEO_PER_RISK_PENALTY)

    return ScoredValue(
        score=_score_0_100(score),
        reason="Score calculé via pénalités (inondation/sismique/nb risques).",
    )


def compute_market_score(operation: Any) -> ScoredValue:
    """Market viability score from the attached market study.

    ``scores.global`` is preferred over a flat ``score``.
    """
    market = market_record(operation)

    global_score = get_path(market, "scores.global")
    if is_finite_number(global_score):
        return ScoredValue(score=_score_0_100(global_score), reason="Score marché global (market.scores.global).")

    flat_score = get_path(market, "score")
    if is_finite_number(flat_score):
        return ScoredValue(score=_score_0_100(flat_score), reason="Score marché (market.score).")

    return ScoredValue(score=None, reason="Score marché indisponible (pas de scores.global/score).")


def compute_committee_score(risk_score: float | None, market_score: float | None) -> ScoredValue:
    """Blend market (60%) and terrain risk (40%).

    Weights are renormalized over the parts that are available; with
    neither part the committee score is None, not 0.
    """
    parts: list[tuple[str, float, float]] = []
    if is_finite_number(market_score):
        parts.append(("Marché", market_score, COMMITTEE_WEIGHTS["market"]))
    if is_finite_number(risk_score):
        parts.append(("Risque terrain", risk_score, COMMITTEE_WEIGHTS["risk"]))

    if not parts:
        return ScoredValue(score=None, reason="Risque et marché indisponibles.")

    sum_w = sum(w for _, _, w in parts)
    value = sum(v * w for _, v, w in parts) / sum_w

    expl = " + ".join(f"{label}: {v:g}×{w:g}" for label, v, w in parts)
    return ScoredValue(
        score=_score_0_100(value),
        reason=f"Score = moyenne pondérée: {expl} (renormalisé si données manquantes).",
    )


def _transport_insufficient(transport: Any) -> bool:
    if not isinstance(transport, Mapping) or not _coverage_ok(transport):
        return True
    stops = transport.get("stops")
    return (
        isinstance(stops, list)
        and len(stops) == 0
        and transport.get("nearest_stop_m") is None
        and not transport.get("has_metro_train")
        and not transport.get("has_tram")
    )


def compute_confidence(operation: Any) -> ConfidenceResult:
    """Reliability of the data behind the committee scores.

    Starts at 100 and subtracts 10 for each incomplete source (Géorisques,
    DVF, INSEE, BPE, transport), 10 if a blocking item is missing and 5 if a
    non-blocking one is.
    """
    breakdown: list[ConfidenceAdjustment] = []
    confidence = CONFIDENCE_BASE

    def apply(condition: bool, label: str, delta: int) -> None:
        nonlocal confidence
        if not condition:
            return
        confidence += delta
        breakdown.append(ConfidenceAdjustment(label=label, delta=delta))

    geo = get_path(operation, "risks.geo")
    market = market_record(operation)

    apply(geo is None or not _coverage_ok(geo), "Géorisques incomplet", CONFIDENCE_PENALTIES["geo"])

    for key, label in (("dvf", "DVF incomplet"), ("insee", "INSEE incomplet"), ("bpe", "BPE incomplet")):
        source = first_present(market, key, f"core.{key}")
        apply(source is None or not _coverage_ok(source), label, CONFIDENCE_PENALTIES[key])

    # An empty transport record lowers confidence; it does not mean poor service
    transport = first_present(market, "transport", "core.transport")
    apply(_transport_insufficient(transport), "Transport insuffisant", CONFIDENCE_PENALTIES["transport"])

    missing = get_path(operation, "missing")
    missing = missing if isinstance(missing, list) else []
    blockers = sum(1 for m in missing if get_path(m, "severity") == "blocker")
    warns = sum(1 for m in missing if get_path(m, "severity") == "warn")
    apply(blockers > 0, f"{blockers} donnée(s) bloquante(s)", CONFIDENCE_PENALTIES["blocker"])
    apply(warns > 0, f"{warns} donnée(s) manquante(s)", CONFIDENCE_PENALTIES["warn"])

    return ConfidenceResult(confidence=_score_0_100(confidence), breakdown=breakdown)


def geo_looks_clean(operation: Any) -> bool:
    """Zero hazards counted, no flood, no seismic flag."""
    geo = _geo_record(operation)
    if geo is None:
        return False
    nb = geo.get("nbRisques")
    return is_finite_number(nb) and nb == 0 and not geo.get("hasInondation") and not geo.get("hasSismique")


def resolve_risk_score(
    committee_risk_score: float | None,
    operation: Any,
    is_fallback: bool | None = None,
) -> tuple[float | None, bool]:
    """Pick the terrain risk score shown to the committee.

    A numeric committee score wins, except when it is a neutral fallback:
    either flagged explicitly through ``is_fallback``, or (when no flag is
    given) equal to exactly 50 while Géorisques looks clean. In that case the
    geo-derived score is used. Without a committee score the geo score is
    used.

    Returns:
        Tuple of (risk score, whether the committee score was overridden)
    """
    geo_score = compute_risk_score_from_geo(operation).score

    if not is_finite_number(committee_risk_score):
        return geo_score, False

    if is_fallback is None:
        is_fallback = committee_risk_score == RISK_SCORE_FALLBACK_SENTINEL and geo_looks_clean(operation)
        if is_fallback:
            return geo_score, True
        return committee_risk_score, False

    if is_fallback and geo_score is not None:
        return geo_score, True
    return committee_risk_score, False


def classify_risk_level(score: float | None) -> RiskLevel:
    """>= 70 faible, 40-69 modéré, < 40 élevé."""
    if score is None:
        return RiskLevel.INDISPONIBLE
    if score >= RISK_LEVEL_BANDS["faible"]:
        return RiskLevel.FAIBLE
    if score >= RISK_LEVEL_BANDS["modere"]:
        return RiskLevel.MODERE
    return RiskLevel.ELEVE
