"""
Kinetic Impactor Tests
======================
Tests for kinetic impactor momentum transfer and the spacecraft grid search.

Run with: python -m pytest tests/test_kinetic.py -v
"""

import sys
import math
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from impact_core.errors import UnknownSpecificationKey
from impact_core.quantity import Quantity, relative, GRAVITATIONAL_CONSTANT
from impact_core.nuclear import TargetComposition
from impact_core.kinetic import (
    ImpactorMaterial,
    get_material_properties,
    get_momentum_transfer_parameters,
    calculate_kinetic_deflection,
    optimize_spacecraft,
    create_typical_spacecraft,
    create_head_on_geometry,
    create_dart_like_impactor,
)


DIMORPHOS_RADIUS = 80.0              # m
DIMORPHOS_MASS = relative(4.3e9, 0.2, "kg", "DART mission estimate")
ROCKY = get_material_properties("rocky")
HEAD_ON = create_head_on_geometry(DIMORPHOS_RADIUS)


def run(impactor=None, target=ROCKY, geometry=HEAD_ON):
    return calculate_kinetic_deflection(
        impactor or create_dart_like_impactor(), target, geometry, DIMORPHOS_MASS)


class TestPresets:
    """Test material and momentum transfer lookups."""

    def test_material_presets(self):
        """Every composition has physical material properties."""
        for composition in TargetComposition:
            material = get_material_properties(composition)
            assert material.composition == composition
            assert material.density.unit == "kg/m³"
            assert material.strength.value > 0
            assert 0 <= material.porosity.value <= 1
            assert material.grain_size.value > 0

        print("[PASS] Material presets")

    def test_beta_ordering(self):
        """Porous carbonaceous targets enhance momentum the most."""
        beta = {c: get_momentum_transfer_parameters(c).beta.value for c in TargetComposition}
        assert beta[TargetComposition.CARBONACEOUS] > beta[TargetComposition.ROCKY]
        assert beta[TargetComposition.ROCKY] > beta[TargetComposition.METALLIC]
        assert all(b > 1 for b in beta.values())

        print("[PASS] Beta ordering")

    def test_unknown_composition(self):
        """Unknown keys raise UnknownSpecificationKey."""
        with pytest.raises(UnknownSpecificationKey):
            get_material_properties("mixed")
        with pytest.raises(UnknownSpecificationKey):
            get_momentum_transfer_parameters("icy")

        print("[PASS] Unknown composition rejected")

    def test_typical_spacecraft(self):
        """Aluminium bus with ±10% mass and ±5% velocity."""
        spacecraft = create_typical_spacecraft(1000.0, 10000.0)
        assert spacecraft.mass.value == 1000.0
        assert abs(spacecraft.mass.relative_uncertainty - 0.1) < 1e-12
        assert abs(spacecraft.velocity.relative_uncertainty - 0.05) < 1e-12
        assert spacecraft.diameter.value > 0
        assert spacecraft.material == ImpactorMaterial.ALUMINUM

        print("[PASS] Typical spacecraft")


class TestKineticDeflection:
    """Test the momentum transfer calculation."""

    def test_dart_baseline(self):
        """DART into Dimorphos: beta 2 doubles the impactor momentum."""
        result = run()
        momentum = 610 * 6140

        assert abs(result.direct_momentum.value - momentum) / momentum < 1e-12
        assert abs(result.ejecta_momentum.value - momentum) / momentum < 1e-12
        assert abs(result.total_momentum.value - 2 * momentum) / momentum < 1e-12
        assert abs(result.momentum_transfer_efficiency.value - 2.0) < 1e-9
        assert abs(result.delta_v.value - 2 * momentum / 4.3e9) < 1e-12
        assert result.delta_v.unit == "m/s"
        assert result.within_validity_range
        assert result.warnings == ()
        assert len(result.references) == 3
        assert "Holsapple" in result.references[0]

        print(f"[PASS] DART baseline: dv = {result.delta_v}")

    def test_crater_size(self):
        """D = 0.02 (E / rho g)^(1/3.4) on the target's self-gravity."""
        result = run()
        energy = 0.5 * 610 * 6140 ** 2
        gravity = GRAVITATIONAL_CONSTANT.value * 2700 * (4 / 3) * math.pi * DIMORPHOS_RADIUS
        expected = 0.02 * (energy / (2700 * gravity)) ** (1 / 3.4)

        assert abs(result.impact_energy.value - energy) / energy < 1e-12
        assert abs(result.crater.diameter.value - expected) / expected < 1e-9
        assert 1 < result.crater.diameter.value < 40
        assert abs(result.crater.depth.value - expected / 7) / expected < 1e-9
        assert result.crater.ejecta_mass.value > 0
        assert result.crater.ejecta_velocity.value > 0

        print(f"[PASS] Crater diameter: {result.crater.diameter}")

    def test_efficiency_follows_composition(self):
        """Effective beta tracks the composition's enhancement factor."""
        for composition in TargetComposition:
            result = run(target=get_material_properties(composition))
            beta = get_momentum_transfer_parameters(composition).beta.value
            assert abs(result.momentum_transfer_efficiency.value - beta) < 1e-9, composition

        print("[PASS] Efficiency follows composition")

    def test_uncertainties_propagated(self):
        """Every headline number carries an uncertainty."""
        result = run()
        assert result.direct_momentum.uncertainty > 0
        assert result.delta_v.uncertainty > 0
        assert result.impact_energy.uncertainty > 0
        assert result.total_momentum.uncertainty >= result.direct_momentum.uncertainty

        print("[PASS] Uncertainties propagated")

    def test_specific_energy(self):
        """Impact energy per unit target mass."""
        result = run()
        expected = result.impact_energy.value / 4.3e9
        assert abs(result.specific_energy.value - expected) / expected < 1e-9

        print("[PASS] Specific energy")

    def test_to_dict(self):
        """Results serialize with the crater nested."""
        d = run().to_dict()
        assert 'diameter' in d['crater']
        assert d['delta_v']['unit'] == "m/s"

        print("[PASS] to_dict")


class TestKineticWarnings:
    """Test validity warnings and degenerate inputs."""

    def test_oblique_impact(self):
        """Beyond 60° the direct momentum drops and a warning is raised."""
        oblique = HEAD_ON.with_impact_angle(Quantity(1.2, 0.1, "rad"))
        result = run(geometry=oblique)
        head_on = run()

        assert result.direct_momentum.value < head_on.direct_momentum.value
        assert any("quite oblique" in w for w in result.warnings)
        assert result.within_validity_range

        print("[PASS] Oblique impact warns")

    def test_slow_impactor_invalidates(self):
        """Speeds below 1 km/s leave the calibrated range."""
        result = run(impactor=create_typical_spacecraft(610.0, 500.0))
        assert not result.within_validity_range
        assert any("velocity" in w and "below validated range" in w for w in result.warnings)

        print("[PASS] Slow impactor invalidates")

    def test_heavy_impactor_invalidates(self):
        """Masses above 1e6 kg leave the calibrated range."""
        result = run(impactor=create_typical_spacecraft(2e6, 10000.0))
        assert not result.within_validity_range
        assert any("above validated range" in w for w in result.warnings)

        print("[PASS] Heavy impactor invalidates")

    def test_porous_target_warns(self):
        """Porosity above 50% warns without invalidating."""
        porous = ROCKY.with_porosity(Quantity(0.6, 0.1, "1"))
        result = run(target=porous)
        assert any("High target porosity" in w for w in result.warnings)
        assert result.within_validity_range

        print("[PASS] Porous target warns")

    def test_stationary_impactor(self):
        """Zero velocity gives zero momentum and no crater instead of an error."""
        result = run(impactor=create_typical_spacecraft(1000.0, 0.0))

        assert result.delta_v.value == 0.0
        assert result.momentum_transfer_efficiency.value == 0.0
        assert result.crater.diameter.value == 0.0
        assert result.crater.ejecta_velocity.value == 0.0
        assert not result.within_validity_range

        print("[PASS] Stationary impactor")

    def test_result_frozen(self):
        """Assigning to a result field raises FrozenInstanceError."""
        result = run()
        with pytest.raises(FrozenInstanceError):
            result.delta_v = None
        with pytest.raises(FrozenInstanceError):
            result.crater.diameter = None

        print("[PASS] Kinetic result frozen")


class TestSpacecraftOptimization:
    """Test the mass/velocity grid search."""

    def test_optimum_at_largest_impactor(self):
        """Delta-v grows with mass and speed, so the grid corner wins."""
        result = optimize_spacecraft(ROCKY, HEAD_ON, DIMORPHOS_MASS,
                                     max_mass=2000.0, max_velocity=20000.0)

        assert abs(result.optimal_mass.value - 2000.0) < 1e-6
        assert abs(result.optimal_velocity.value - 20000.0) < 1e-6
        assert result.optimal_mass.unit == "kg"
        assert result.max_delta_v.value > run().delta_v.value
        assert result.max_delta_v.unit == "m/s"

        print(f"[PASS] Optimum: {result.optimal_mass} at {result.optimal_velocity}")

    def test_mission_estimates(self):
        """Launch energy, duration and cost follow the optimum."""
        result = optimize_spacecraft(ROCKY, HEAD_ON, DIMORPHOS_MASS,
                                     max_mass=2000.0, max_velocity=20000.0)

        assert abs(result.launch_energy.value - 0.5 * 2000.0 * 20000.0 ** 2) / 4e11 < 1e-9
        assert result.launch_energy.unit == "J"
        assert result.mission_duration.unit == "s"
        assert result.mission_duration.value > 0
        assert abs(result.cost_estimate.value - 520e6) < 1.0
        assert result.cost_estimate.unit == "USD"

        print("[PASS] Mission estimates")
