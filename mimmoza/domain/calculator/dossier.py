"""Bank dossier analysis.

Scores a credit dossier on a 100-point grid of five pillars and derives the
alert list and risk level shown on the analysis and committee pages.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from mimmoza.domain.calculator.lookup import get_path, is_finite_number
from mimmoza.domain.calculator.normalizer import round_score
from mimmoza.domain.models.dossier import (
    DossierAnalysis,
    DossierScoreBreakdown,
    Grade,
    Niveau,
    PillarResult,
    ScoreDrivers,
)

PRET_TYPE_LABELS = {
    "promotion": "Promotion immobilière",
    "logement": "Logement",
    "marchand": "Marchand de biens",
    "investissement": "Investissement locatif",
    "rehabilitation": "Réhabilitation",
    "autre": "Autre",
}

# (minimum score, grade)
GRADE_LADDER = ((85, Grade.A), (70, Grade.B), (55, Grade.C), (40, Grade.D))
NIVEAU_LADDER = ((80, Niveau.FAIBLE), (60, Niveau.MODERE), (40, Niveau.ELEVE))

MAX_RECOMMENDATIONS = 5
LARGE_LOAN_EUR = 500_000
SHORT_TERM_MONTHS = 12


def _positive(value: Any) -> float:
    return value if is_finite_number(value) and value > 0 else 0.0


def _mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _m_eur(montant: float) -> str:
    return f"{montant / 1e6:.2f} M€"


def compute_garantie_ratio(dossier: Any) -> int | None:
    """Guarantee coverage as a percentage of the requested loan (120 = 120%).

    None when either amount is missing or non-positive.
    """
    montant = _positive(get_path(dossier, "origination.montantDemande"))
    couverture = _positive(get_path(dossier, "garanties.couvertureTotale"))
    if montant <= 0 or couverture <= 0:
        return None
    return int(round_score(couverture / montant * 100))


def _documentation_pillar(dossier: Any, up: list[str], down: list[str]) -> PillarResult:
    items = _list(get_path(dossier, "documents.items"))
    total = len(items)
    valides = sum(1 for d in items if get_path(d, "statut") in ("valide", "recu"))
    refuses = sum(1 for d in items if get_path(d, "statut") == "refuse")
    reasons: list[str] = []
    actions: list[str] = []
    pts = 0

    if total == 0:
        reasons.append("Aucun document fourni")
        actions.append("Ajouter les pièces justificatives requises (Kbis, bilans, permis…)")
        down.append("Dossier documentaire vide")
    else:
        completude = int(round_score(valides / total * 100))
        pts = int(round_score(valides / total * 25))
        if completude == 100:
            reasons.append(f"{total} document(s), tous validés ou reçus")
            up.append("Dossier documentaire complet")
        else:
            reasons.append(f"Complétude {completude}% ({valides}/{total} validés/reçus)")
            if refuses > 0:
                reasons.append(f"{refuses} document(s) refusé(s)")
                actions.append("Corriger et retransmettre les documents refusés")
                down.append(f"{refuses} document(s) refusé(s)")
            if total - valides - refuses > 0:
                actions.append("Compléter les documents en attente")

    return PillarResult(key="documentation", label="Documentation", points=pts, max=25, reasons=reasons, actions=actions)


def _garanties_pillar(dossier: Any, up: list[str], down: list[str]) -> PillarResult:
    ratio = compute_garantie_ratio(dossier)
    nb_gar = len(_list(get_path(dossier, "garanties.items")))
    reasons: list[str] = []
    actions: list[str] = []

    if nb_gar == 0:
        pts = 0
        reasons.append("Aucune garantie enregistrée")
        actions.append("Constituer au minimum une sûreté réelle (hypothèque) ou personnelle (caution)")
        down.append("Absence totale de garanties")
    elif ratio is None:
        pts = 5
        reasons.append(f"{nb_gar} garantie(s) mais montant du prêt non renseigné, ratio incalculable")
        actions.append("Renseigner le montant du prêt pour calculer le ratio de couverture")
    else:
        reasons.append(f"Ratio garanties/prêt : {ratio}%")
        if ratio >= 120:
            pts = 25
            reasons.append("Couverture excellente (≥ 120%)")
            up.append(f"Ratio de couverture solide ({ratio}%)")
        elif ratio >= 100:
            pts = 20
            reasons.append("Couverture suffisante (≥ 100%)")
            up.append("Garanties couvrant le prêt")
        elif ratio >= 70:
            pts = 13
            reasons.append("Couverture partielle (70–99%)")
            actions.append("Renforcer les garanties pour atteindre 100% de couverture")
            down.append(f"Ratio de couverture insuffisant ({ratio}%)")
        elif ratio >= 50:
            pts = 8
            reasons.append("Couverture faible (50–69%)")
            actions.append("Garanties complémentaires nécessaires, risque élevé en cas de défaut")
            down.append(f"Couverture très faible ({ratio}%)")
        else:
            pts = 3
            reasons.append(f"Couverture critique ({ratio}% < 50%)")
            actions.append("Exiger des garanties complémentaires avant tout engagement")
            down.append(f"Couverture critique ({ratio}%)")

    return PillarResult(key="garanties", label="Garanties & Sûretés", points=pts, max=25, reasons=reasons, actions=actions)


def _emprunteur_pillar(dossier: Any, up: list[str], down: list[str]) -> PillarResult:
    emp = _mapping(get_path(dossier, "emprunteur")) or {}
    emp_type = emp.get("type")
    reasons: list[str] = []
    actions: list[str] = []
    pts = 0

    if not emp_type:
        reasons.append("Emprunteur non renseigné")
        actions.append("Saisir les données d'identification de l'emprunteur")
        down.append("Identification emprunteur manquante")
    elif emp_type == "personne_physique":
        reasons.append("Personne physique")
        if emp.get("prenom") and emp.get("nom"):
            pts += 8
            reasons.append("Identité complète")
        else:
            actions.append("Compléter prénom et nom")
        if emp.get("email") or emp.get("telephone"):
            pts += 6
            reasons.append("Coordonnées renseignées")
        else:
            actions.append("Ajouter email ou téléphone")
        if emp.get("dateNaissance") and emp.get("adresse"):
            pts += 6
            reasons.append("Informations complémentaires fournies")
            up.append("Emprunteur bien identifié")
        else:
            actions.append("Compléter date de naissance et adresse")
    elif emp_type == "personne_morale":
        reasons.append("Personne morale")
        if emp.get("raisonSociale"):
            pts += 5
            reasons.append("Raison sociale renseignée")
        else:
            actions.append("Saisir la raison sociale")
        if emp.get("sirenSiret"):
            pts += 5
            reasons.append("SIREN/SIRET fourni")
        else:
            actions.append("Fournir le numéro SIREN/SIRET")
            down.append("SIREN/SIRET manquant")
        if emp.get("formeJuridique"):
            pts += 5
            reasons.append(f"Forme juridique : {emp['formeJuridique']}")
        else:
            actions.append("Préciser la forme juridique")
        if emp.get("email") or emp.get("telephone"):
            pts += 5
            reasons.append("Coordonnées disponibles")
            up.append("Société bien identifiée")
        else:
            actions.append("Ajouter des coordonnées de contact")

    return PillarResult(key="emprunteur", label="Identification emprunteur", points=pts, max=20, reasons=reasons, actions=actions)


def _projet_pillar(dossier: Any, up: list[str], down: list[str]) -> PillarResult:
    orig = _mapping(get_path(dossier, "origination"))
    reasons: list[str] = []
    actions: list[str] = []
    pts = 0

    if orig is None:
        reasons.append("Aucune donnée de projet")
        actions.append("Renseigner les informations du projet (montant, durée, type de prêt)")
        down.append("Données projet absentes")
    else:
        montant = _positive(orig.get("montantDemande"))
        duree = _positive(orig.get("duree"))
        if montant > 0:
            pts += 4
            reasons.append(f"Montant : {_m_eur(montant)}")
        else:
            actions.append("Renseigner le montant du prêt")

        if duree > 0:
            pts += 4
            reasons.append(f"Durée : {duree:g} mois")
        else:
            actions.append("Renseigner la durée du prêt")

        type_pret = orig.get("typePret")
        if type_pret and type_pret != "autre":
            pts += 4
            reasons.append(f"Type : {PRET_TYPE_LABELS.get(type_pret, type_pret)}")
        else:
            pts += 1
            reasons.append("Type de prêt non qualifié")
            actions.append("Préciser le type de prêt")

        if orig.get("adresseProjet"):
            pts += 3
            reasons.append("Adresse projet renseignée")
        else:
            actions.append("Ajouter l'adresse du projet")

    return PillarResult(key="projet", label="Données projet", points=pts, max=15, reasons=reasons, actions=actions)


def _financier_pillar(dossier: Any, up: list[str], down: list[str]) -> PillarResult:
    montant = _positive(get_path(dossier, "origination.montantDemande"))
    duree = _positive(get_path(dossier, "origination.duree"))
    reasons: list[str] = []
    actions: list[str] = []
    pts = 15  # deductions only

    if montant > LARGE_LOAN_EUR and 0 < duree < SHORT_TERM_MONTHS:
        pts -= 8
        reasons.append(f"Montant élevé ({_m_eur(montant)}) avec durée courte ({duree:g} mois)")
        actions.append("Évaluer le risque de tension de trésorerie, envisager un allongement")
        down.append("Profil montant/durée à risque")
    elif montant > 0 and duree > 0:
        reasons.append("Profil montant/durée cohérent")
        up.append("Profil financier équilibré")

    if montant <= 0 and duree <= 0:
        pts = 0
        reasons.append("Données financières absentes")
        actions.append("Renseigner montant et durée")
    elif montant <= 0 or duree <= 0:
        pts = max(0, pts - 5)
        reasons.append("Données financières incomplètes")

    return PillarResult(key="financier", label="Profil financier", points=max(0, pts), max=15, reasons=reasons, actions=actions)


def _ladder(score: float, ladder: tuple, fallback: Any) -> Any:
    for minimum, value in ladder:
        if score >= minimum:
            return value
    return fallback


def compute_dossier_pillars(dossier: Any) -> DossierScoreBreakdown:
    """Score a dossier on the five-pillar grid.

    Args:
        dossier: Bank dossier record (documents, garanties, emprunteur,
            origination)

    Returns:
        Breakdown with total score, A-E grade, drivers and up to five
        recommendations taken from the weakest pillars first
    """
    up: list[str] = []
    down: list[str] = []
    pillars = [
        _documentation_pillar(dossier, up, down),
        _garanties_pillar(dossier, up, down),
        _emprunteur_pillar(dossier, up, down),
        _projet_pillar(dossier, up, down),
        _financier_pillar(dossier, up, down),
    ]

    score = sum(p.points for p in pillars)

    recommendations: list[str] = []
    for pillar in sorted(pillars, key=lambda p: p.ratio):
        for action in pillar.actions:
            if action not in recommendations:
                recommendations.append(action)
    recommendations = recommendations[:MAX_RECOMMENDATIONS]

    return DossierScoreBreakdown(
        score=score,
        grade=_ladder(score, GRADE_LADDER, Grade.E),
        pillars=pillars,
        drivers=ScoreDrivers(up=up, down=down),
        recommendations=recommendations,
    )


def compute_dossier_analysis(dossier: Any) -> DossierAnalysis:
    """Full dossier analysis: pillar score, alerts, risk level and guarantee ratio."""
    ss = compute_dossier_pillars(dossier)
    ratio = compute_garantie_ratio(dossier)
    alertes: list[str] = []

    doc = ss.pillar("documentation")
    if doc.points == 0:
        alertes.append("Aucun document fourni, dossier incomplet")
    elif doc.points < doc.max:
        alertes.extend(r for r in doc.reasons if "Complétude" in r or "refusé" in r)

    gar = ss.pillar("garanties")
    if gar.points == 0:
        alertes.append("Aucune garantie enregistrée, risque de perte totale")
    elif ratio is not None and ratio < 100:
        alertes.append(f"Ratio garanties/prêt insuffisant : {ratio}% (< 100%)")

    emp = ss.pillar("emprunteur")
    if emp.points == 0:
        alertes.append("Données emprunteur manquantes, identification incomplète")
    elif emp.points < emp.max * 0.6:
        alertes.extend(emp.actions)

    if ss.pillar("projet").points == 0:
        alertes.append("Données projet absentes")

    fin = ss.pillar("financier")
    if fin.points < fin.max * 0.5:
        alertes.extend(
            r for r in fin.reasons
            if "élevé" in r or "absentes" in r or "incomplètes" in r
        )

    return DossierAnalysis(
        score=ss.score,
        niveau=_ladder(ss.score, NIVEAU_LADDER, Niveau.CRITIQUE),
        label=ss.grade,
        alertes=alertes,
        calculated_at=datetime.now(timezone.utc).isoformat(),
        garantie_ratio=ratio,
        smartscore=ss,
    )
