"""
Scientific Validation Tests
===========================
Tests for parameter range checks and disclaimer generation.

Run with: python -m pytest tests/test_validation.py -v
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from impact_core.validation import (
    DisclaimerLevel,
    DisclaimerCategory,
    ImpactLevel,
    ModelCategory,
    ModelLimitation,
    ScientificDisclaimer,
    ScientificValidator,
    SCIENTIFIC_REFERENCES,
    get_relevant_references,
    validate_impact_parameters,
    validate_orbital_parameters,
    validate_deflection_parameters,
)


NOW = datetime(2024, 6, 1)


class TestParameterValidation:
    """Test range checks."""

    def setup_method(self):
        self.validator = ScientificValidator()

    def test_in_range(self):
        """Values inside the range carry no disclaimer."""
        result = self.validator.validate_parameter("impact", "velocity", 20000)
        assert result.is_valid
        assert result.disclaimer is None

        print("[PASS] In-range parameter")

    def test_boundaries_inclusive(self):
        """Range endpoints are valid."""
        assert self.validator.validate_parameter(ModelCategory.IMPACT, "velocity", 11000).is_valid
        assert self.validator.validate_parameter(ModelCategory.IMPACT, "velocity", 72000).is_valid

        print("[PASS] Inclusive boundaries")

    def test_caution_when_slightly_outside(self):
        """Within a factor of ten outside the range: CAUTION."""
        result = self.validator.validate_parameter("impact", "velocity", 5000)

        assert not result.is_valid
        assert result.disclaimer.level == DisclaimerLevel.CAUTION
        assert result.disclaimer.category == DisclaimerCategory.VALIDITY
        assert "velocity" in result.disclaimer.message
        assert len(result.disclaimer.references) > 0

        print("[PASS] CAUTION outside range")

    def test_critical_when_far_outside(self):
        """Below a tenth of the minimum or above ten times the maximum: CRITICAL."""
        low = self.validator.validate_parameter("impact", "velocity", 500)
        high = self.validator.validate_parameter("impact", "velocity", 1e6)

        assert low.disclaimer.level == DisclaimerLevel.CRITICAL
        assert high.disclaimer.level == DisclaimerLevel.CRITICAL

        print("[PASS] CRITICAL far outside range")

    def test_unknown_parameter(self):
        """Unknown parameters are invalid with a WARNING."""
        result = self.validator.validate_parameter("deflection", "sail_color", 1.0)

        assert not result.is_valid
        assert result.disclaimer.level == DisclaimerLevel.WARNING
        assert "sail_color" in result.disclaimer.message

        print("[PASS] Unknown parameter")

    def test_unknown_category(self):
        """Unknown model categories raise ValueError."""
        try:
            self.validator.validate_parameter("geology", "energy", 1.0)
            assert False, "Should have raised ValueError"
        except ValueError:
            pass

        print("[PASS] Unknown category rejected")


class TestDisclaimerGeneration:
    """Test model, data quality and accuracy disclaimers."""

    def setup_method(self):
        self.validator = ScientificValidator()

    def test_level_priority(self):
        """INFO < WARNING < CAUTION < CRITICAL."""
        levels = [DisclaimerLevel.INFO, DisclaimerLevel.WARNING,
                  DisclaimerLevel.CAUTION, DisclaimerLevel.CRITICAL]
        priorities = [lv.priority for lv in levels]
        assert priorities == sorted(priorities)
        assert len(set(priorities)) == 4

        print("[PASS] Level priority")

    def test_model_disclaimer_levels(self):
        """Impact WARNING, orbital INFO, deflection CAUTION."""
        limitation = ModelLimitation("Atmosphere", "No atmospheric entry", ImpactLevel.MEDIUM)

        impact = self.validator.generate_model_disclaimer("impact", [limitation])
        orbital = self.validator.generate_model_disclaimer(ModelCategory.ORBITAL, [])
        deflection = self.validator.generate_model_disclaimer("deflection", [])

        assert impact.level == DisclaimerLevel.WARNING
        assert orbital.level == DisclaimerLevel.INFO
        assert deflection.level == DisclaimerLevel.CAUTION
        assert impact.category == DisclaimerCategory.ASSUMPTION
        assert impact.limitations == [limitation]
        assert impact.references == get_relevant_references("impact")

        print("[PASS] Model disclaimer levels")

    def test_data_quality_levels(self):
        """HIGH -> CRITICAL, MEDIUM -> CAUTION, LOW -> INFO."""
        expected = {
            ImpactLevel.HIGH: DisclaimerLevel.CRITICAL,
            ImpactLevel.MEDIUM: DisclaimerLevel.CAUTION,
            ImpactLevel.LOW: DisclaimerLevel.INFO,
        }
        for uncertainty, level in expected.items():
            d = self.validator.generate_data_quality_disclaimer("MPC", uncertainty, now=NOW)
            assert d.level == level, uncertainty
            assert d.category == DisclaimerCategory.DATA_QUALITY

        high = self.validator.generate_data_quality_disclaimer("MPC", "HIGH", now=NOW)
        assert high.limitations[0].mitigation is not None

        print("[PASS] Data quality levels")

    def test_stale_data_adds_limitation(self):
        """Data older than a year adds a currency limitation."""
        fresh = self.validator.generate_data_quality_disclaimer(
            "JPL", "LOW", last_updated=NOW - timedelta(days=30), now=NOW)
        stale = self.validator.generate_data_quality_disclaimer(
            "JPL", "LOW", last_updated=NOW - timedelta(days=400), now=NOW)

        assert [lim.aspect for lim in fresh.limitations] == ["Data quality"]
        assert [lim.aspect for lim in stale.limitations] == ["Data quality", "Data currency"]

        print("[PASS] Stale data limitation")

    def test_accuracy_thresholds(self):
        """Above 50% CRITICAL, above 20% CAUTION, else INFO."""
        assert self.validator.generate_accuracy_disclaimer("Crater", 60).level == \
            DisclaimerLevel.CRITICAL
        assert self.validator.generate_accuracy_disclaimer("Crater", 50).level == \
            DisclaimerLevel.CAUTION
        assert self.validator.generate_accuracy_disclaimer("Crater", 30).level == \
            DisclaimerLevel.CAUTION
        assert self.validator.generate_accuracy_disclaimer("Crater", 20).level == \
            DisclaimerLevel.INFO

        d = self.validator.generate_accuracy_disclaimer("Blast", 10, uncertainty_propagation=True)
        assert "±10%" in d.message
        assert d.limitations[0].mitigation == "Uncertainty propagation included in results"

        print("[PASS] Accuracy thresholds")


class TestCombineAndFormat:
    """Test merging and rendering."""

    def setup_method(self):
        self.validator = ScientificValidator()

    def test_combine_empty(self):
        """No disclaimers gives an INFO statement."""
        combined = self.validator.combine_disclaimers([])
        assert combined.level == DisclaimerLevel.INFO

        print("[PASS] Combine empty")

    def test_combine_single(self):
        """A single disclaimer passes through unchanged."""
        d = self.validator.generate_accuracy_disclaimer("Crater", 30)
        assert self.validator.combine_disclaimers([d]) is d

        print("[PASS] Combine single")

    def test_combine_many(self):
        """Highest level wins; limitations and references deduplicated."""
        a = self.validator.generate_accuracy_disclaimer("Crater", 30)
        b = self.validator.generate_accuracy_disclaimer("Blast", 60)
        c = self.validator.generate_data_quality_disclaimer("MPC", "LOW", now=NOW)
        combined = self.validator.combine_disclaimers([a, b, c])

        assert combined.level == DisclaimerLevel.CRITICAL
        assert combined.category == DisclaimerCategory.LIMITATION
        assert "3 issues" in combined.message

        aspects = [lim.aspect for lim in combined.limitations]
        assert aspects == ["Calculation accuracy", "Data quality"]
        assert combined.limitations[0] is a.limitations[0]

        titles = [ref.title for ref in combined.references]
        assert len(titles) == len(set(titles))
        assert len(combined.recommendations) == len(set(combined.recommendations))

        print("[PASS] Combine many")

    def test_format_markdown(self):
        """Markdown starts with the bold level and lists every section."""
        d = self.validator.generate_data_quality_disclaimer("MPC", "HIGH", now=NOW)
        text = self.validator.format_disclaimer(d)

        assert text.startswith("**CRITICAL**: ")
        assert "**Scientific Basis**:" in text
        assert "**Limitations**:" in text
        assert "*Mitigation:" in text
        assert "**Recommendations**:" in text
        assert "**References**:" in text

        print("[PASS] Markdown formatting")

    def test_format_minimal(self):
        """Empty sections are omitted."""
        d = ScientificDisclaimer(DisclaimerLevel.INFO, DisclaimerCategory.ACCURACY,
                                 "All good", "Standard models")
        text = self.validator.format_disclaimer(d)

        assert text.startswith("**INFO**: All good")
        assert "**Limitations**" not in text
        assert "**References**" not in text

        print("[PASS] Minimal formatting")

    def test_reference_format(self):
        """References render authors, year, title, journal and DOI."""
        text = SCIENTIFIC_REFERENCES['holsapple2007'].format()
        assert text.startswith("Holsapple, K. A., & Housen, K. R. (2007).")
        assert "*Icarus*" in text
        assert "DOI: 10.1016/j.icarus.2006.10.031" in text

        print("[PASS] Reference formatting")


class TestModuleValidators:
    """Test the keyword-argument convenience validators."""

    def test_impact_parameters(self):
        """Only out-of-range parameters produce disclaimers."""
        assert validate_impact_parameters(energy=1e15, velocity=20000, angle=45, diameter=50) == []

        disclaimers = validate_impact_parameters(energy=1e15, velocity=5000)
        assert len(disclaimers) == 1
        assert disclaimers[0].level == DisclaimerLevel.CAUTION

        print("[PASS] Impact parameter validation")

    def test_orbital_parameters(self):
        """Hyperbolic eccentricity is flagged."""
        disclaimers = validate_orbital_parameters(semi_major_axis=1.5, eccentricity=1.2)
        assert len(disclaimers) == 1
        assert "eccentricity" in disclaimers[0].message

        print("[PASS] Orbital parameter validation")

    def test_deflection_parameters(self):
        """Omitted parameters are skipped."""
        assert validate_deflection_parameters() == []
        disclaimers = validate_deflection_parameters(delta_v=0.01, lead_time=100,
                                                     asteroid_mass=1e10)
        assert len(disclaimers) == 1
        assert disclaimers[0].level == DisclaimerLevel.CAUTION

        print("[PASS] Deflection parameter validation")
