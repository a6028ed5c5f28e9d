"""Unit tests for mimmoza.domain.calculator.narrative module."""

import pytest

from mimmoza.domain.calculator.narrative import NarrativeRule, Bucket, evaluate_rules, opportunity, risk


class TestNarrativeRules:
    """Tests for table-driven narrative generation."""

    RULES = (
        opportunity("demande", ">=", 70, "Demande forte."),
        risk("acces", "<", 45, "Accès faible."),
        risk("zone", "==", "rural", "Zone rurale."),
    )

    def test_rules_fire_in_order(self):
        narrative = evaluate_rules(self.RULES, {"demande": 70, "acces": 20, "zone": "rural"}, ["Reco"])
        assert narrative.opportunities == ["Demande forte."]
        assert narrative.risks == ["Accès faible.", "Zone rurale."]
        assert narrative.recommendations == ["Reco"]

    def test_missing_metric_never_fires(self):
        narrative = evaluate_rules(self.RULES, {"demande": None})
        assert narrative.opportunities == []
        assert narrative.risks == []

    def test_thresholds_are_strict_where_declared(self):
        narrative = evaluate_rules(self.RULES, {"acces": 45})
        assert narrative.risks == []

    def test_unknown_comparator(self):
        with pytest.raises(ValueError):
            NarrativeRule(Bucket.RISK, "x", "!=", 1, "msg")
