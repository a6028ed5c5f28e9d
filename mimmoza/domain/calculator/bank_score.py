"""Bank SmartScore (v1) of a financial snapshot.

Four blocks are scored independently and combined by a weighted mean over
the blocks that could be scored:

* financier: LTC and gross margin ladders, IRR bonus, duration penalty
* risques / marche: score read from the study payload, 55 when the study is
  present but carries no readable score
* sponsor: declared experience, minus 20 after a declared default

Blocking flags (LTC too high, margin too low, duration too long) force a
NO GO whatever the score.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from mimmoza.core.scoring_constants import (
    BANK_BLOCK_WEIGHTS,
    BANK_BLOCKING_FLAGS,
    BANK_FALLBACK_STUDY_SCORE,
)
from mimmoza.domain.calculator.lookup import coalesce, get_path
from mimmoza.domain.calculator.normalizer import clamp, round_score, to_number
from mimmoza.domain.models.bank_score import (
    BankBlockKey,
    BankDecision,
    BankScoreBlock,
    BankSmartScore,
)

_SUMMARY_SCORE = re.compile(
    r"Score(?:\s+(?:risque|risques|march[eé]))?\s*:\s*([0-9]{1,3})\s*/\s*100",
    re.IGNORECASE,
)

_SUMMARY_LABELS = {
    "GO": "GO",
    "GO_CONDITIONS": "GO sous conditions",
    "NO_GO": "NO GO",
}


def _payload_number(value: Any) -> float | None:
    """Number from a study payload; "1 234,5" style strings accepted."""
    if isinstance(value, str):
        value = re.sub(r"\s", "", value).replace(",", ".", 1)
    return to_number(value)


def _summary_score(summary: Any) -> float | None:
    if not isinstance(summary, str):
        return None
    match = _SUMMARY_SCORE.search(summary)
    return float(match.group(1)) if match else None


def extract_study_score(payload: Any) -> float | None:
    """Find a 0-100 score in a schema-less study payload.

    Looks at ``score``, ``globalScore``, ``marketScore``, ``riskScore``,
    then a ``summary`` such as "Score risque : 15/100", then the same under
    ``data`` (with ``smartscore`` instead of the market and risk keys).
    """
    if not isinstance(payload, Mapping):
        return None

    for key in ("score", "globalScore", "marketScore", "riskScore"):
        x = _payload_number(payload.get(key))
        if x is not None:
            return x

    x = _summary_score(payload.get("summary"))
    if x is not None:
        return x

    data = payload.get("data")
    if isinstance(data, Mapping):
        for key in ("score", "globalScore", "smartscore"):
            x = _payload_number(data.get(key))
            if x is not None:
                return x
        return _summary_score(data.get("summary"))

    return None


def _score_ltc(ltc: float, flags: list[str], reasons: list[str]) -> float:
    if ltc <= 55:
        reasons.append(f"LTC {ltc:.1f}% : très solide")
        return 100
    if ltc <= 65:
        reasons.append(f"LTC {ltc:.1f}% : correct")
        return 80
    if ltc <= 75:
        reasons.append(f"LTC {ltc:.1f}% : tendu")
        return 55
    flags.append("LTC_TOO_HIGH")
    if ltc <= 85:
        reasons.append(f"LTC {ltc:.1f}% : élevé")
        return 30
    reasons.append(f"LTC {ltc:.1f}% : critique")
    return 10


def _score_margin(marge: float, flags: list[str], reasons: list[str]) -> float:
    if marge >= 18:
        reasons.append(f"Marge {marge:.1f}% : confortable")
        return 100
    if marge >= 12:
        reasons.append(f"Marge {marge:.1f}% : acceptable")
        return 75
    if marge >= 8:
        reasons.append(f"Marge {marge:.1f}% : faible")
        return 50
    if marge >= 5:
        reasons.append(f"Marge {marge:.1f}% : très faible")
        flags.append("MARGIN_LOW")
        return 30
    reasons.append(f"Marge {marge:.1f}% : insuffisante")
    flags.append("MARGIN_TOO_LOW")
    return 10


def _irr_bonus(irr: float | None, reasons: list[str]) -> float:
    if irr is None:
        return 0
    if irr >= 15:
        reasons.append(f"TRI {irr:.1f}% : bonus")
        return 10
    if irr >= 10:
        reasons.append(f"TRI {irr:.1f}% : léger bonus")
        return 5
    return 0


def _duration_penalty(months: float | None, flags: list[str], reasons: list[str]) -> float:
    if months is None:
        return 0
    if months > 36:
        reasons.append(f"Durée {months:g} mois : très longue")
        flags.append("DURATION_TOO_LONG")
        return 20
    if months > 24:
        reasons.append(f"Durée {months:g} mois : longue")
        return 10
    return 0


def _financier_block(snapshot: Any) -> BankScoreBlock:
    reasons: list[str] = []
    flags: list[str] = []

    ltc = to_number(get_path(snapshot, "creditMetrics.ltcPct"))
    marge = to_number(get_path(snapshot, "profitability.grossMarginPct"))
    irr = to_number(get_path(snapshot, "profitability.irrPct"))
    duration = to_number(get_path(snapshot, "programme.calendar.durationMonths"))

    parts = []
    if ltc is not None:
        parts.append(_score_ltc(ltc, flags, reasons))
    if marge is not None:
        parts.append(_score_margin(marge, flags, reasons))

    score = None
    if parts:
        base = sum(parts) / len(parts)
        score = clamp(base + _irr_bonus(irr, reasons) - _duration_penalty(duration, flags, reasons))
    else:
        reasons.append("Données financières insuffisantes pour scorer.")

    return BankScoreBlock(
        key=BankBlockKey.FINANCIER,
        weight=BANK_BLOCK_WEIGHTS["financier"],
        score=score,
        reasons=reasons,
        flags=flags,
    )


def _study_block(
    snapshot: Any,
    key: BankBlockKey,
    section: str,
    absent: str,
    present: str,
    label: str,
) -> BankScoreBlock:
    reasons: list[str] = []
    score = None
    if not get_path(snapshot, (section, "available")):
        reasons.append(absent)
    else:
        found = extract_study_score(get_path(snapshot, (section, "payload")))
        if found is not None:
            score = clamp(found)
            reasons.append(f"{label} : {int(round_score(score))}/100")
        else:
            score = BANK_FALLBACK_STUDY_SCORE
            reasons.append(present)

    return BankScoreBlock(key=key, weight=BANK_BLOCK_WEIGHTS[key.value], score=score, reasons=reasons)


def _sponsor_block(snapshot: Any) -> BankScoreBlock:
    reasons: list[str] = []
    flags: list[str] = []

    experience = to_number(get_path(snapshot, "project.sponsor.experienceScore"))
    score = None
    if experience is None:
        reasons.append("Données sponsor absentes.")
    else:
        score = clamp(experience)
        reasons.append(f"Expérience sponsor : {int(round_score(score))}/100")

    defaults = to_number(get_path(snapshot, "project.sponsor.trackRecord.defaults"))
    if defaults is not None and defaults > 0:
        flags.append("SPONSOR_DEFAULT_HISTORY")
        reasons.append(f"Historique défauts déclaré : {defaults:g}")
        if score is not None:
            score = clamp(score - 20)

    return BankScoreBlock(
        key=BankBlockKey.SPONSOR,
        weight=BANK_BLOCK_WEIGHTS["sponsor"],
        score=score,
        reasons=reasons,
        flags=flags,
    )


def decide_bank(score: float, confidence_pct: float, flags: list[str]) -> BankDecision:
    """Blocking flag: NO GO; >= 70 with confidence >= 60: GO; >= 55: GO with conditions."""
    if any(flag in BANK_BLOCKING_FLAGS for flag in flags):
        return BankDecision.NO_GO
    if score >= 70 and confidence_pct >= 60:
        return BankDecision.GO
    if score >= 55:
        return BankDecision.GO_CONDITIONS
    return BankDecision.NO_GO


def compute_bank_smart_score(snapshot: Any) -> BankSmartScore:
    """Score a financial snapshot (camelCase mapping, as stored by the bank space).

    Confidence starts from the completeness percentage and loses 15 points
    without a risk study and 10 without a market study.
    """
    completeness = clamp(coalesce(get_path(snapshot, "completeness.percent"), 0))
    confidence = completeness
    if not get_path(snapshot, "risks.available"):
        confidence -= 15
    if not get_path(snapshot, "market.available"):
        confidence -= 10
    confidence = clamp(confidence)

    blocks = [
        _financier_block(snapshot),
        _study_block(
            snapshot,
            BankBlockKey.RISQUES,
            "risks",
            "Étude de risques absente.",
            "Étude de risques présente mais score non détecté (fallback prudent).",
            "Score risques",
        ),
        _study_block(
            snapshot,
            BankBlockKey.MARCHE,
            "market",
            "Étude de marché absente.",
            "Étude de marché présente mais score non détecté (fallback prudent).",
            "Score marché",
        ),
        _sponsor_block(snapshot),
    ]

    scored = [b for b in blocks if b.score is not None]
    total_weight = sum(b.weight for b in scored)
    raw = sum(b.score * b.weight for b in scored) / total_weight if total_weight > 0 else 0.0
    score = int(clamp(round_score(raw)))

    flags = list(dict.fromkeys(flag for b in blocks for flag in b.flags))
    decision = decide_bank(score, confidence, flags)

    return BankSmartScore(
        score=score,
        decision=decision,
        confidence_pct=confidence,
        completeness_pct=completeness,
        blocks=blocks,
        global_flags=flags,
        summary=f"{_SUMMARY_LABELS[decision.value]}, score {score}/100 (confiance {confidence:g}%).",
    )
