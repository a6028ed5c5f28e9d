"""Unit tests for the project-type SmartScore engines."""

import pytest
from pydantic import ValidationError

from mimmoza.core.exceptions import InvalidParameterError, UnknownProjectNatureError
from mimmoza.domain.models import LogementSmartScoreInput, ProjectNature, Verdict, VerdictThresholds
from mimmoza.domain.scorers import (
    SCORERS,
    compute_bureaux_smart_score,
    compute_commerce_smart_score,
    compute_ehpad_smart_score,
    compute_etudiant_smart_score,
    compute_hotel_smart_score,
    compute_logement_smart_score,
    compute_project_smart_score,
    compute_senior_smart_score,
)

MEDIAN_BPE = {"nb_commerces": 32.5, "nb_sante": 21.5, "nb_enseignement": 11, "nb_services": 42.5}


def _score(result, key):
    return result.component(key).score


class TestLogementScorer:
    """Tests for compute_logement_smart_score."""

    def test_growing_urban_commune(self, logement_payload):
        result = compute_logement_smart_score(logement_payload)
        assert result.score == 71
        assert result.verdict == Verdict.GO_AVEC_RESERVES
        assert "Croissance démographique favorable à l’absorption." in result.opportunities
        assert result.risks == []
        assert len(result.recommendations) == 3
        assert result.meta.version == "smartscore-logement-v1"

    def test_sub_scores(self, logement_payload):
        result = compute_logement_smart_score(logement_payload)
        assert _score(result, "demographie") == 71
        assert _score(result, "marche") == 78
        assert _score(result, "concurrence") == 75
        assert _score(result, "accessibilite") == 75

    def test_missing_bpe_is_neutral(self, logement_payload):
        services = compute_logement_smart_score(logement_payload).component("services")
        assert services.score == 50
        assert services.details["state"] == "assumed"

    def test_rural_services_bonus(self):
        rural = compute_logement_smart_score({"insee": {"densite": 200}, "bpe": MEDIAN_BPE})
        periurbain = compute_logement_smart_score({"insee": {"densite": 1000}, "bpe": MEDIAN_BPE})
        assert _score(rural, "services") == 60
        assert _score(periurbain, "services") == 50
        assert "Risque de demande plus diffuse (commercialisation plus longue)." in rural.risks

    def test_unknown_zone_hint_ignored(self):
        data = LogementSmartScoreInput.model_validate({"zoneTypeHint": "banlieue"})
        assert data.zone_type_hint is None

    def test_zone_hint_overrides_density(self):
        result = compute_logement_smart_score({"insee": {"densite": 5000}, "zoneTypeHint": "rural", "bpe": MEDIAN_BPE})
        assert _score(result, "services") == 60

    def test_empty_payload(self):
        result = compute_logement_smart_score({})
        assert 0 <= result.score <= 100
        assert result.verdict == Verdict.NO_GO

    def test_custom_thresholds(self, logement_payload):
        thresholds = VerdictThresholds(go=70, go_with_reserves=60, deepen=40)
        assert compute_logement_smart_score(logement_payload, thresholds=thresholds).verdict == Verdict.GO


class TestEhpadScorer:
    """Tests for compute_ehpad_smart_score."""

    def test_missing_health_services_unavailable(self):
        result = compute_ehpad_smart_score({})
        sante = result.component("sante")
        assert sante.score == 0
        assert sante.details["state"] == "unavailable"
        assert "Accès santé perfectible (hôpital/médecins/pharmacie éloignés ou manquants)." in result.risks

    def test_no_competitor_is_an_opportunity(self):
        result = compute_ehpad_smart_score({})
        assert "Concurrence directe limitée dans le rayon d’analyse." in result.opportunities

    def test_bed_supply_with_capacity_penalty(self):
        result = compute_ehpad_smart_score({
            "ehpad": {
                "count": 4,
                "analyse_concurrence": {"densite_lits_1000_seniors": 100, "capacite_totale": 400},
            },
        })
        # 0.65 x 50 + 0.35 x 45 = 48.25, minus 12.5
        assert _score(result, "concurrence") == 36

    def test_health_access(self):
        result = compute_ehpad_smart_score({
            "servicesSante": {
                "hopital_proche": {"distance_km": 3},
                "medecin_proche": {"distance_m": 500},
                "pharmacie_proche": {},
                "urgences_proches": {"distance_km": 25},
            },
        })
        assert _score(result, "sante") == 86
        assert result.component("sante").details["has_urgences"] is True

    def test_environment_density_adjustments(self):
        rural = compute_ehpad_smart_score({"insee": {"densite": 50}})
        dense = compute_ehpad_smart_score({"insee": {"densite": 8000}})
        assert _score(rural, "services") == 50
        assert _score(dense, "services") == 65

    def test_narrative_thresholds(self):
        result = compute_ehpad_smart_score({
            "insee": {"pct_plus_75": 13},
            "ehpad": {"count": 9, "analyse_concurrence": {"densite_lits_1000_seniors": 125}},
        })
        assert "Forte proportion de seniors (75+), demande structurelle potentielle." in result.opportunities
        assert "Zone potentiellement sur-équipée (densité élevée de lits)." in result.risks
        assert "Concurrence forte (nombre d’établissements élevé)." in result.risks


class TestSeniorScorer:
    """Tests for compute_senior_smart_score."""

    def test_empty_payload(self):
        result = compute_senior_smart_score({})
        assert _score(result, "concurrence") == 100
        assert _score(result, "services") == 50
        assert _score(result, "accessibilite") == 25
        assert result.score == 30
        assert result.opportunities == ["Offre seniors limitée, opportunité de positionnement."]
        assert result.risks == ["Solvabilité locale potentiellement insuffisante pour une offre premium."]

    @pytest.mark.parametrize("count, expected", [(0, 100), (2, 75), (5, 45), (7, 15), (12, 5)])
    def test_supply_steps(self, count, expected):
        result = compute_senior_smart_score({"competition": {"residences_count": count}})
        assert _score(result, "concurrence") == expected

    def test_services_scored_from_bpe_only(self):
        result = compute_senior_smart_score({"services": {"nb_sante": 40}})
        assert _score(result, "services") == 50
        assert result.component("services").details["state"] == "assumed"


class TestEtudiantScorer:
    """Tests for compute_etudiant_smart_score."""

    def test_no_campus(self):
        result = compute_etudiant_smart_score({})
        assert _score(result, "accessibilite") == 0
        assert "Accessibilité campus insuffisante (distance/transport)." in result.risks

    def test_nearest_campus(self):
        result = compute_etudiant_smart_score({
            "campuses": [{"distance_km": 5}, {"distance_km": 2}, {"name": "IUT"}],
        })
        assert _score(result, "accessibilite") == 84
        assert result.component("accessibilite").details["best_distance_km"] == 2

    def test_empty_campus_entries_skipped(self):
        result = compute_etudiant_smart_score({"campuses": [None, {"distance_km": 2}]})
        assert _score(result, "accessibilite") == 84

    def test_under_equipped_market(self):
        result = compute_etudiant_smart_score({
            "mesr": {"students_total": 20000},
            "competition": {"units_total": 900, "residences_count": 3},
        })
        assert _score(result, "concurrence") == 78
        assert "Sous-équipement potentiel en logements étudiants." in result.opportunities

    def test_market_proxy(self):
        assert _score(compute_etudiant_smart_score({}), "marche") == 50
        assert _score(compute_etudiant_smart_score({"prices": {"median_eur_m2": 4500}}), "marche") == 100

    def test_campuses_must_be_a_list(self):
        with pytest.raises(ValidationError):
            compute_etudiant_smart_score({"campuses": "Campus Nord"})


class TestBureauxScorer:
    """Tests for compute_bureaux_smart_score."""

    def test_strong_office_location(self):
        result = compute_bureaux_smart_score({
            "insee": {"taux_chomage": 4},
            "emploi": {"actifs": 120000},
            "access": {"gare_distance_km": 0, "autoroute_distance_km": 0, "tc_score": 100},
            "offre": {"vacance_pct": 12, "bureaux_count": 0},
        })
        assert _score(result, "emploi") == 100
        assert _score(result, "accessibilite") == 100
        assert _score(result, "concurrence") == 0
        assert _score(result, "marche") == 100
        assert result.opportunities == ["Bassin d’emploi porteur.", "Accessibilité favorable pour bureaux."]
        assert result.risks == ["Risque de vacance tertiaire / marché moins dynamique."]

    def test_active_population_stops_at_first_present_key(self):
        result = compute_bureaux_smart_score({
            "emploi": {"actifs": "n/a"},
            "insee": {"population_active": 120000, "population": 8000, "taux_chomage": 4},
        })
        assert _score(result, "emploi") == 25
        assert result.component("emploi").details["actifs"] is None

    def test_missing_blocks_are_neutral(self):
        result = compute_bureaux_smart_score({})
        assert _score(result, "accessibilite") == 50
        assert _score(result, "services") == 50


class TestCommerceScorer:
    """Tests for compute_commerce_smart_score."""

    def test_neighbour_shops_bell(self):
        optimum = compute_commerce_smart_score({"bpe": {"nb_commerces": 60}})
        sparse = compute_commerce_smart_score({"concurrence": {"commerces_count": 20}})
        assert _score(optimum, "concurrence") == 78
        assert _score(sparse, "concurrence") == 50

    def test_shop_count_stops_at_first_present_key(self):
        result = compute_commerce_smart_score({
            "concurrence": {"commerces_count": "n/a"},
            "bpe": {"nb_commerces": 60},
        })
        assert _score(result, "concurrence") == 50
        assert result.component("concurrence").details["nb"] is None

    def test_low_purchasing_power(self):
        result = compute_commerce_smart_score({"insee": {"revenu_median": 18000}})
        assert _score(result, "solvabilite") == 0
        assert "Pouvoir d’achat local limité pour certains concepts." in result.risks


class TestHotelScorer:
    """Tests for compute_hotel_smart_score."""

    def test_seasonality(self):
        neutral = compute_hotel_smart_score({})
        seasonal = compute_hotel_smart_score({"tourisme": {"saisonnalite_index": 80}})
        assert _score(neutral, "marche") == 50
        assert neutral.component("marche").details["state"] == "assumed"
        assert _score(seasonal, "marche") == 0
        assert "Risque de forte saisonnalité (taux d’occupation variable)." in seasonal.risks

    def test_jobs_preferred_over_population(self):
        result = compute_hotel_smart_score({
            "economie": {"emplois": 180000},
            "insee": {"population": 8000, "revenu_median": 42000},
        })
        assert _score(result, "emploi") == 100


class TestDispatcher:
    """Tests for compute_project_smart_score."""

    def test_every_nature_registered(self):
        assert set(SCORERS) == set(ProjectNature)

    @pytest.mark.parametrize("nature", list(ProjectNature))
    def test_dispatch(self, nature):
        result = compute_project_smart_score(nature.value, {})
        assert result.project_nature == nature
        assert result.meta.version.startswith("smartscore-")

    def test_same_result_as_direct_call(self, logement_payload):
        assert (
            compute_project_smart_score("logement", logement_payload).score
            == compute_logement_smart_score(logement_payload).score
        )

    def test_unknown_nature(self):
        with pytest.raises(UnknownProjectNatureError):
            compute_project_smart_score("parking", {})

    def test_unknown_nature_is_a_parameter_error(self):
        with pytest.raises(InvalidParameterError):
            compute_project_smart_score("", {})
