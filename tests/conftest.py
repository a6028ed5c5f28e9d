"""Pytest fixtures for mimmoza tests."""

import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mimmoza.core.settings import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; re-read them for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def logement_payload():
    """Growing urban commune with a liquid DVF market and no BPE record."""
    return {
        "insee": {
            "population": 60000,
            "pct_30_44": 22,
            "densite": 4000,
            "evolution_pop_5ans": 5,
        },
        "prices": {"median_eur_m2": 3000, "evolution_1an": 5},
        "transactions": {"count": 300},
    }


@pytest.fixture
def clean_operation():
    """Operation with complete data and no Géorisques hazard."""
    return {
        "risks": {
            "geo": {"coverage": "ok", "nbRisques": 0, "hasInondation": False, "hasSismique": False},
        },
        "market": {
            "scores": {"global": 70},
            "dvf": {"coverage": "ok"},
            "insee": {"coverage": "ok"},
            "core": {"bpe": {"coverage": "ok"}},
            "transport": {"coverage": "ok", "stops": [{"name": "Gare"}]},
        },
        "missing": [],
    }


@pytest.fixture
def complete_dossier():
    """Fully documented promotion dossier, 130% guarantee coverage."""
    return {
        "id": "DOS-2026-001",
        "documents": {
            "items": [
                {"nom": "Kbis", "statut": "valide"},
                {"nom": "Bilans", "statut": "valide"},
                {"nom": "Permis", "statut": "recu"},
                {"nom": "Budget", "statut": "valide"},
            ],
        },
        "garanties": {
            "items": [{"type": "hypotheque", "montant": 1_300_000}],
            "couvertureTotale": 1_300_000,
        },
        "emprunteur": {
            "type": "personne_morale",
            "raisonSociale": "SCCV Les Tilleuls",
            "sirenSiret": "123456789",
            "formeJuridique": "SCCV",
            "email": "contact@tilleuls.fr",
        },
        "origination": {
            "montantDemande": 1_000_000,
            "duree": 24,
            "typePret": "promotion",
            "adresseProjet": "12 rue des Tilleuls, Lyon",
        },
        "budget": {"coutAcquisition": 900_000, "coutTravaux": 300_000, "frais": 50_000},
        "revenus": {"loyersMensuels": 6000},
        "bien": {"valeurEstimee": 1_600_000},
    }
