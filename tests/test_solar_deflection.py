"""
Solar Deflection Tests
======================
Tests for radiation pressure deflection: sails, mirrors and surface
treatments.

Run with: python -m pytest tests/test_solar_deflection.py -v
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from impact_core.errors import UnknownSpecificationKey
from impact_core.quantity import Quantity, SPEED_OF_LIGHT
from impact_core.solar_deflection import (
    SolarDeflectionMethod,
    SailType,
    SolarDistance,
    get_sail_specification,
    get_solar_environment,
    calculate_solar_flux,
    calculate_radiation_force,
    calculate_solar_deflection,
    create_sail,
    create_flat_solar_sail,
    create_solar_environment,
    create_solar_target,
    create_typical_mission,
)


TARGET = create_solar_target(1e10, 100.0, 0.15)
MISSION = create_typical_mission(5)


def sail_force(area, distance_au=1.0, method=SolarDeflectionMethod.SOLAR_SAIL):
    force, _, _ = calculate_radiation_force(
        method, create_flat_solar_sail(area), TARGET, create_solar_environment(distance_au))
    return force


class TestPresets:
    """Test sail and environment lookups."""

    def test_sail_presets(self):
        """Flat and parabolic reflectivities."""
        assert get_sail_specification("flat").reflectivity.value == 0.88
        assert get_sail_specification(SailType.PARABOLIC).reflectivity.value == 0.95

        print("[PASS] Sail presets")

    def test_environment_presets(self):
        """Distance keys use their string labels."""
        assert get_solar_environment("1_AU").solar_distance.value == 1.0
        assert get_solar_environment(SolarDistance.TWO_AU).solar_distance.value == 2.0

        print("[PASS] Environment presets")

    def test_unknown_keys(self):
        """Unknown keys raise UnknownSpecificationKey."""
        with pytest.raises(UnknownSpecificationKey):
            get_sail_specification("inflatable")
        with pytest.raises(UnknownSpecificationKey):
            get_solar_environment("3_AU")
        with pytest.raises(UnknownSpecificationKey):
            calculate_solar_deflection("laser_ablation", create_flat_solar_sail(1000.0),
                                       TARGET, create_solar_environment(1.0), MISSION)

        print("[PASS] Unknown keys rejected")

    def test_sail_construction(self):
        """Sail area +-10%, areal density 10 g/m²."""
        sail = create_sail("heliogyro", 5000.0)
        assert abs(sail.sail_area.relative_uncertainty - 0.1) < 1e-12
        assert sail.sail_mass.value == 50.0
        assert sail.sail_type == SailType.HELIOGYRO

        print("[PASS] Sail construction")


class TestRadiationForce:
    """Test the radiation pressure model."""

    def test_flux_inverse_square(self):
        """S = S0 / d²."""
        near = calculate_solar_flux(create_solar_environment(1.0))
        far = calculate_solar_flux(create_solar_environment(2.0))

        assert near.value == 1361.0
        assert abs(near.value / far.value - 4.0) < 1e-12

        print("[PASS] Solar flux inverse square")

    def test_sail_force_value(self):
        """Flat sail at 1 AU: F = 2 S A R / c."""
        force = sail_force(10000.0)
        expected = 2 * 1361.0 * 10000.0 * 0.88 / SPEED_OF_LIGHT.value

        assert abs(force.value - expected) / expected < 1e-12
        assert force.unit == "N"

        print(f"[PASS] Sail force: {force}")

    def test_force_linear_in_area(self):
        """Doubling the sail area doubles the force."""
        ratio = sail_force(20000.0).value / sail_force(10000.0).value
        assert abs(ratio - 2.0) < 1e-12

        print("[PASS] Force linear in area")

    def test_force_decreases_with_distance(self):
        """Force falls with distance from the Sun."""
        forces = [sail_force(10000.0, d).value for d in (0.8, 1.0, 1.5, 2.0, 3.0)]
        for nearer, farther in zip(forces, forces[1:]):
            assert farther < nearer
        assert abs(forces[1] / forces[3] - 4.0) < 1e-12

        print("[PASS] Force decreases with distance")

    def test_concentration_capped(self):
        """Mirror concentration saturates at ten times the target disc."""
        huge = sail_force(1e6, method=SolarDeflectionMethod.CONCENTRATED_SUNLIGHT)
        larger = sail_force(2e6, method=SolarDeflectionMethod.CONCENTRATED_SUNLIGHT)
        assert huge.value == larger.value

        print("[PASS] Concentration capped")

    def test_surface_methods_ignore_sail_area(self):
        """Surface treatments scale with the target cross-section, not the sail."""
        for method in (SolarDeflectionMethod.SURFACE_MODIFICATION,
                       SolarDeflectionMethod.ALBEDO_MODIFICATION):
            assert sail_force(1000.0, method=method).value == \
                sail_force(50000.0, method=method).value

        print("[PASS] Surface methods independent of sail area")


class TestSolarDeflection:
    """Test the full mission calculation."""

    def test_baseline(self):
        """Flat sail, 1 AU, 5 years: valid and warning-free."""
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(1.0), MISSION,
        )

        assert result.delta_v.value > 0
        assert result.within_validity_range
        assert result.warnings == ()
        assert len(result.references) > 0

        print(f"[PASS] Solar sail baseline: dv = {result.delta_v}")

    def test_no_fuel_for_any_method(self):
        """Radiation pressure needs no propellant."""
        for method in SolarDeflectionMethod:
            result = calculate_solar_deflection(
                method, create_flat_solar_sail(10000.0),
                TARGET, create_solar_environment(1.0), MISSION,
            )
            assert result.fuel_consumption.value == 0.0, method
            assert result.fuel_consumption.uncertainty == 0.0, method

        print("[PASS] Zero fuel for all methods")

    def test_system_mass_and_power(self):
        """System mass is 1.5x the sail; power follows the method."""
        result = calculate_solar_deflection(
            "albedo_modification", create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(1.0), MISSION,
        )
        assert abs(result.total_system_mass.value - 150.0) < 1e-9
        assert result.power_requirement.value == 2000

        print("[PASS] System mass and power")

    def test_seasonal_band(self):
        """Maximum > average > minimum deflection."""
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(1.0), MISSION,
        )
        seasonal = result.seasonal_variations
        assert seasonal.max_deflection.value > seasonal.average_deflection.value
        assert seasonal.average_deflection.value > seasonal.min_deflection.value

        print("[PASS] Seasonal band ordering")

    def test_huge_sail_invalidates(self):
        """Sails above 1e5 m² leave the validity range."""
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(200000.0),
            TARGET, create_solar_environment(1.0), MISSION,
        )
        assert not result.within_validity_range
        assert any("Very large sail area" in w for w in result.warnings)

        print("[PASS] Huge sail invalidates")

    def test_mission_beyond_lifetime(self):
        """Missions outlasting the sail invalidate."""
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(1.0), create_typical_mission(12),
        )
        assert not result.within_validity_range
        assert any("exceeds sail operational lifetime" in w for w in result.warnings)

        print("[PASS] Mission beyond sail lifetime")

    def test_far_from_sun_warns(self):
        """Beyond 5 AU the push is weak."""
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(6.0), MISSION,
        )
        assert any("Large solar distance" in w for w in result.warnings)

        print("[PASS] Far from Sun warns")

    def test_to_dict(self):
        """Results serialize with nested sections."""
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(1.0), MISSION,
        )
        d = result.to_dict()
        assert 'radiation_pressure_force' in d['force_result']
        assert d['fuel_consumption']['value'] == 0.0

        print("[PASS] to_dict")

    def test_zero_mission_duration(self):
        """A zero-length mission invalidates with a zero delta-v rate."""
        mission = MISSION.with_mission_duration(Quantity(0.0, 0.0, "s"))
        result = calculate_solar_deflection(
            SolarDeflectionMethod.SOLAR_SAIL, create_flat_solar_sail(10000.0),
            TARGET, create_solar_environment(1.0), mission,
        )

        assert not result.within_validity_range
        assert any("must be positive" in w for w in result.warnings)
        assert result.delta_v.value == 0.0
        assert result.delta_v_rate.value == 0.0

        print("[PASS] Zero mission duration")
