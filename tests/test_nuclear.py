"""
Nuclear Deflection Tests
========================
Tests for the standoff nuclear deflection calculator.

Run with: python -m pytest tests/test_nuclear.py -v
"""

import sys
import math
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from impact_core.errors import UnknownSpecificationKey
from impact_core.quantity import Quantity
from impact_core.nuclear import (
    NuclearDeviceType,
    DetonationTiming,
    TargetComposition,
    MEGATON_TO_JOULES,
    get_device_specification,
    get_composition_properties,
    calculate_nuclear_deflection,
    create_strategic_device,
    create_optimal_standoff_geometry,
    create_nuclear_target,
)


TARGET_MASS = 1e10    # kg
TARGET_RADIUS = 100.0  # m


def make_target():
    return create_nuclear_target(TARGET_MASS, TARGET_RADIUS)


def device_with_yield(yield_mt):
    return create_strategic_device().with_yield_mt(
        Quantity(yield_mt, yield_mt * 0.1, "Mt TNT", "Test yield"))


class TestPresets:
    """Test device and composition presets."""

    def test_device_presets(self):
        """Preset yields."""
        assert get_device_specification(NuclearDeviceType.TACTICAL).yield_mt.value == 0.01
        assert get_device_specification("strategic").yield_mt.value == 1.0
        assert get_device_specification("strategic").yield_mt.uncertainty == 0.1
        assert get_device_specification("thermonuclear").yield_mt.value == 10.0

        print("[PASS] Device presets")

    def test_unknown_device(self):
        """Unknown preset keys raise UnknownSpecificationKey."""
        with pytest.raises(UnknownSpecificationKey):
            get_device_specification("antimatter")

        print("[PASS] Unknown device rejected")

    def test_unknown_composition(self):
        """Unknown compositions raise in both lookups."""
        with pytest.raises(UnknownSpecificationKey):
            get_composition_properties("cheese")
        with pytest.raises(UnknownSpecificationKey):
            create_nuclear_target(TARGET_MASS, TARGET_RADIUS, "cheese")

        print("[PASS] Unknown composition rejected")

    def test_target_uncertainties(self):
        """Convenience target carries +-20% mass and +-10% radius."""
        target = create_nuclear_target(TARGET_MASS, TARGET_RADIUS, TargetComposition.METALLIC)

        assert abs(target.mass.relative_uncertainty - 0.2) < 1e-12
        assert abs(target.radius.relative_uncertainty - 0.1) < 1e-12
        assert target.density.value == 7800

        print("[PASS] Target construction")

    def test_with_methods_copy(self):
        """with_<field> returns a modified copy and leaves the preset alone."""
        preset = create_strategic_device()
        modified = preset.with_yield_mt(Quantity(2.0, 0.2, "Mt TNT"))

        assert modified.yield_mt.value == 2.0
        assert preset.yield_mt.value == 1.0
        assert modified.mass == preset.mass

        print("[PASS] with_methods copy")


class TestNuclearDeflection:
    """Test the deflection calculation."""

    def test_strategic_baseline(self):
        """1 Mt against a 1e10 kg target gives a positive, valid result."""
        result = calculate_nuclear_deflection(
            create_strategic_device(), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )

        assert result.delta_v.value > 0
        assert result.delta_v.unit == "m/s"
        assert result.delta_v.uncertainty > 0
        assert result.within_validity_range
        assert result.warnings == ()
        assert len(result.references) > 0
        assert abs(result.total_energy_deposited.value - MEGATON_TO_JOULES) < 1.0

        print(f"[PASS] Strategic baseline: dv = {result.delta_v}")

    def test_delta_v_increases_with_yield(self):
        """Larger yield gives larger delta-v, all else fixed."""
        target = make_target()
        geometry = create_optimal_standoff_geometry(TARGET_RADIUS)
        yields = [0.01, 0.1, 1.0, 10.0]
        delta_vs = [
            calculate_nuclear_deflection(device_with_yield(y), target, geometry).delta_v.value
            for y in yields
        ]

        for lower, higher in zip(delta_vs, delta_vs[1:]):
            assert higher > lower

        print(f"[PASS] Delta-v monotonic in yield: {delta_vs}")

    def test_momentum_components(self):
        """Total momentum is the sum of the three mechanisms."""
        result = calculate_nuclear_deflection(
            create_strategic_device(), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )
        dep = result.momentum_deposition
        total = dep.xray_momentum.value + dep.neutron_momentum.value + dep.debris_momentum.value

        assert abs(dep.total_momentum.value - total) / total < 1e-9
        assert abs(result.delta_v.value - total / TARGET_MASS) / result.delta_v.value < 1e-9

        print("[PASS] Momentum components")

    def test_optimal_standoff_reported(self):
        """Optimal standoff is 3 R at 1 Mt."""
        result = calculate_nuclear_deflection(
            create_strategic_device(), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )
        assert abs(result.optimal_standoff_distance.value - 3 * TARGET_RADIUS) < 1e-6

        print("[PASS] Optimal standoff")

    def test_to_dict(self):
        """Results serialize to plain dictionaries."""
        result = calculate_nuclear_deflection(
            create_strategic_device(), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )
        d = result.to_dict()

        assert d['delta_v']['unit'] == "m/s"
        assert 'total_momentum' in d['momentum_deposition']
        assert d['within_validity_range'] is True

        print("[PASS] to_dict")


class TestNuclearWarnings:
    """Test validity warnings."""

    def test_huge_yield_invalidates(self):
        """Yields above 100 Mt flag fragmentation and leave the range."""
        result = calculate_nuclear_deflection(
            device_with_yield(200.0), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )
        assert not result.within_validity_range
        assert any("Very large nuclear yield" in w for w in result.warnings)

        print("[PASS] Huge yield invalidates")

    def test_tiny_yield_warns(self):
        """Yields below 1 kt warn but stay in range."""
        result = calculate_nuclear_deflection(
            device_with_yield(0.0005), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )
        assert result.within_validity_range
        assert any("Very small nuclear yield" in w for w in result.warnings)

        print("[PASS] Tiny yield warns")

    def test_standoff_inside_radius(self):
        """Standoff below the target radius warns."""
        geometry = create_optimal_standoff_geometry(TARGET_RADIUS).with_standoff_distance(
            Quantity(50.0, 5.0, "m"))
        result = calculate_nuclear_deflection(create_strategic_device(), make_target(), geometry)

        assert any("less than target radius" in w for w in result.warnings)

        print("[PASS] Standoff inside radius warns")

    def test_large_standoff(self):
        """Standoff beyond 10 R warns."""
        geometry = create_optimal_standoff_geometry(TARGET_RADIUS).with_standoff_distance(
            Quantity(2000.0, 100.0, "m"))
        result = calculate_nuclear_deflection(create_strategic_device(), make_target(), geometry)

        assert any("Large standoff distance" in w for w in result.warnings)

        print("[PASS] Large standoff warns")

    def test_contact_detonation(self):
        """Zero standoff warns and still returns finite results."""
        geometry = create_optimal_standoff_geometry(TARGET_RADIUS).with_standoff_distance(
            Quantity(0.0, 0.0, "m")).with_timing(DetonationTiming.CONTACT)
        result = calculate_nuclear_deflection(create_strategic_device(), make_target(), geometry)
        baseline = calculate_nuclear_deflection(
            create_strategic_device(), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )

        assert math.isfinite(result.surface_temperature.value)
        assert result.surface_temperature.value > baseline.surface_temperature.value
        assert result.delta_v.value == baseline.delta_v.value
        assert any("less than target radius" in w for w in result.warnings)

        print(f"[PASS] Contact detonation: T = {result.surface_temperature}")


class TestResultImmutability:
    """Test that result bundles are frozen values."""

    def test_result_fields_frozen(self):
        """Assigning to a result field raises FrozenInstanceError."""
        result = calculate_nuclear_deflection(
            create_strategic_device(), make_target(),
            create_optimal_standoff_geometry(TARGET_RADIUS),
        )

        with pytest.raises(FrozenInstanceError):
            result.delta_v = None
        with pytest.raises(FrozenInstanceError):
            result.momentum_deposition.total_momentum = None
        assert isinstance(result.warnings, tuple)
        assert isinstance(result.references, tuple)

        print("[PASS] Nuclear result is frozen")
