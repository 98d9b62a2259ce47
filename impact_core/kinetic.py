"""
Kinetic Impactor Deflection
===========================
Momentum delivered to an asteroid by a spacecraft striking it at high speed,
following Holsapple & Housen (2012) and the DART results (Cheng et al. 2023).

Key principle: the target receives the impactor's own momentum plus the
recoil of the crater ejecta. The enhancement factor beta folds both into one
number, so the total momentum is beta times the impactor momentum:

    p_direct = m v cos(angle)
    p_ejecta = (beta - 1) m v
    dv       = (p_direct + p_ejecta) / M_target

The crater is sized with a simplified gravity-regime law on the target's
self-gravity, D = 0.02 (E / rho g)^(1/3.4).

Presets:
- Target materials and beta parameters: rocky, metallic, carbonaceous
- Impactors: typical spacecraft, DART-like
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

import numpy as np

from .nuclear import TargetComposition
from .propagation import derive_quantity, combine_independent, Operation
from .quantity import Quantity, relative, GRAVITATIONAL_CONSTANT, SECONDS_PER_YEAR
from .records import BundleMixin, ValidityCheck, resolve_key, with_methods

logger = logging.getLogger(__name__)

CRATER_SCALING_FACTOR = 0.02
CRATER_SCALING_EXPONENT = 1 / 3.4
DEPTH_TO_DIAMETER = 1 / 7
EJECTA_VELOCITY_FACTOR = 0.1
MAX_OBLIQUE_ANGLE = math.pi / 3     # rad
MAX_POROSITY = 0.5

SPACECRAFT_DENSITY = 2700.0         # kg/m³, aluminium bus
BASE_MISSION_COST = 500e6           # USD
COST_PER_KG = 10000.0               # USD/kg
OPTIMIZATION_STEPS = 20
MIN_OPTIMIZATION_MASS = 100.0       # kg
MIN_OPTIMIZATION_VELOCITY = 5000.0  # m/s

REFERENCES = [
    "Holsapple, K.A. & Housen, K.R. (2012). Momentum transfer in asteroid impacts",
    "Cheng, A.F. et al. (2023). DART mission results and momentum transfer efficiency",
    "Holsapple, K.A. & Housen, K.R. (2007). A crater and its ejecta: An interpretation of Deep Impact",
]


class ImpactorMaterial(Enum):
    ALUMINUM = "aluminum"
    STEEL = "steel"
    TUNGSTEN = "tungsten"
    COMPOSITE = "composite"


class ImpactLocation(Enum):
    CENTER = "center"
    EDGE = "edge"
    RANDOM = "random"


# =============================================================================
# SPECIFICATIONS
# =============================================================================

@with_methods
@dataclass(frozen=True)
class KineticTargetMaterial:
    """
    Target material properties for momentum transfer.

    Attributes:
        density: Bulk density (kg/m³)
        strength: Compressive strength (Pa)
        porosity: Void fraction (0-1)
        composition: Material class
        grain_size: Characteristic grain size (m)
    """
    density: Quantity
    strength: Quantity
    porosity: Quantity
    composition: TargetComposition
    grain_size: Quantity


@with_methods
@dataclass(frozen=True)
class MomentumTransferParameters:
    """
    Holsapple & Housen (2012) ejecta scaling for one composition.

    Attributes:
        beta: Momentum enhancement factor
        mu: Ejecta scaling exponent
        k: Ejecta scaling constant
        min_velocity, max_velocity: Calibrated impact speeds (m/s)
        min_mass, max_mass: Calibrated impactor masses (kg)
    """
    beta: Quantity
    mu: Quantity
    k: Quantity
    min_velocity: float
    max_velocity: float
    min_mass: float
    max_mass: float


@with_methods
@dataclass(frozen=True)
class KineticImpactor:
    """
    Impactor spacecraft.

    Attributes:
        mass: kg
        velocity: Speed relative to the target (m/s)
        diameter: m
        density: kg/m³
        material: Structural material
    """
    mass: Quantity
    velocity: Quantity
    diameter: Quantity
    density: Quantity
    material: ImpactorMaterial


@with_methods
@dataclass(frozen=True)
class KineticGeometry:
    """
    Impact geometry.

    Attributes:
        impact_angle: From the target velocity vector (rad), 0 is head-on
        target_radius: m
        impact_location: Aim point on the target
    """
    impact_angle: Quantity
    target_radius: Quantity
    impact_location: ImpactLocation


_B_C = "Britt & Consolmagno 2003"
_H_H_2012 = "Holsapple & Housen 2012"

MATERIAL_PROPERTIES: Dict[TargetComposition, KineticTargetMaterial] = {
    TargetComposition.ROCKY: KineticTargetMaterial(
        density=Quantity(2700, 300, "kg/m³", _B_C),
        strength=Quantity(1e7, 5e6, "Pa", "Holsapple & Housen 2007"),
        porosity=Quantity(0.2, 0.1, "1", _B_C),
        composition=TargetComposition.ROCKY,
        grain_size=Quantity(0.001, 0.0005, "m", "Estimated"),
    ),
    TargetComposition.METALLIC: KineticTargetMaterial(
        density=Quantity(7800, 500, "kg/m³", _B_C),
        strength=Quantity(5e8, 1e8, "Pa", "Engineering estimates"),
        porosity=Quantity(0.1, 0.05, "1", _B_C),
        composition=TargetComposition.METALLIC,
        grain_size=Quantity(0.01, 0.005, "m", "Estimated"),
    ),
    TargetComposition.CARBONACEOUS: KineticTargetMaterial(
        density=Quantity(1400, 200, "kg/m³", _B_C),
        strength=Quantity(1e6, 5e5, "Pa", "Holsapple & Housen 2007"),
        porosity=Quantity(0.3, 0.1, "1", _B_C),
        composition=TargetComposition.CARBONACEOUS,
        grain_size=Quantity(0.0001, 0.00005, "m", "Estimated"),
    ),
}

TRANSFER_PARAMETERS: Dict[TargetComposition, MomentumTransferParameters] = {
    TargetComposition.ROCKY: MomentumTransferParameters(
        beta=Quantity(2.0, 0.5, "1", _H_H_2012),
        mu=Quantity(0.4, 0.1, "1", _H_H_2012),
        k=Quantity(0.2, 0.05, "1", _H_H_2012),
        min_velocity=1000, max_velocity=50000, min_mass=1, max_mass=1e6,
    ),
    TargetComposition.METALLIC: MomentumTransferParameters(
        beta=Quantity(1.5, 0.3, "1", _H_H_2012),
        mu=Quantity(0.3, 0.1, "1", _H_H_2012),
        k=Quantity(0.15, 0.04, "1", _H_H_2012),
        min_velocity=1000, max_velocity=50000, min_mass=1, max_mass=1e6,
    ),
    TargetComposition.CARBONACEOUS: MomentumTransferParameters(
        beta=Quantity(3.0, 0.8, "1", _H_H_2012),
        mu=Quantity(0.5, 0.15, "1", _H_H_2012),
        k=Quantity(0.3, 0.08, "1", _H_H_2012),
        min_velocity=1000, max_velocity=50000, min_mass=1, max_mass=1e6,
    ),
}


def get_material_properties(composition: Union[TargetComposition, str]) -> KineticTargetMaterial:
    """Preset material. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(TargetComposition, composition, "asteroid composition")
    return MATERIAL_PROPERTIES[key]


def get_momentum_transfer_parameters(
        composition: Union[TargetComposition, str]) -> MomentumTransferParameters:
    key = resolve_key(TargetComposition, composition, "asteroid composition")
    return TRANSFER_PARAMETERS[key]


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class KineticCrater(BundleMixin):
    diameter: Quantity
    depth: Quantity
    ejecta_mass: Quantity
    ejecta_velocity: Quantity


@dataclass(frozen=True)
class KineticImpactResult(BundleMixin):
    """
    Result of a kinetic impactor calculation.

    Attributes:
        direct_momentum: Impactor momentum along the impact direction (kg·m/s)
        ejecta_momentum: Extra momentum carried off by ejecta (kg·m/s)
        total_momentum: Sum of both (kg·m/s)
        momentum_transfer_efficiency: Total over direct momentum (effective beta)
        delta_v: Target velocity change (m/s)
        crater: Crater diameter, depth and ejecta
        impact_energy: Impactor kinetic energy (J)
        specific_energy: Impact energy per target mass (J/kg)
    """
    direct_momentum: Quantity
    ejecta_momentum: Quantity
    total_momentum: Quantity
    momentum_transfer_efficiency: Quantity
    delta_v: Quantity
    crater: KineticCrater
    impact_energy: Quantity
    specific_energy: Quantity
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SpacecraftOptimization(BundleMixin):
    """Best impactor found on the mass/velocity grid, with mission estimates."""
    optimal_mass: Quantity
    optimal_velocity: Quantity
    max_delta_v: Quantity
    launch_energy: Quantity
    mission_duration: Quantity
    cost_estimate: Quantity


# =============================================================================
# PHYSICS
# =============================================================================

def calculate_impactor_energy(impactor: KineticImpactor) -> Quantity:
    """KE = 0.5 m v²."""
    return derive_quantity(
        {'mass': impactor.mass, 'velocity': impactor.velocity},
        lambda x: 0.5 * x['mass'] * x['velocity'] ** 2,
        "J", "Calculated from kinetic energy formula", "Impact kinetic energy",
    )


def calculate_direct_momentum(impactor: KineticImpactor, geometry: KineticGeometry) -> Quantity:
    """Impactor momentum projected on the impact direction, m v cos(angle)."""
    return derive_quantity(
        {'mass': impactor.mass, 'velocity': impactor.velocity, 'angle': geometry.impact_angle},
        lambda x: x['mass'] * x['velocity'] * math.cos(x['angle']),
        "kg·m/s", "Calculated from impactor momentum", "Direct momentum transfer",
    )


def _surface_gravity(density: float, radius: float) -> float:
    return GRAVITATIONAL_CONSTANT.value * density * (4 / 3) * math.pi * radius


def calculate_crater_dimensions(target: KineticTargetMaterial, geometry: KineticGeometry,
                                energy: Quantity) -> KineticCrater:
    """
    Crater on the target's self-gravity.

    Depth is D / 7. Ejecta mass is a bowl of volume pi D³ / 12 at the
    target density; ejecta leave at a tenth of sqrt(E / m_ejecta), zero
    when no crater forms.
    """
    diameter = derive_quantity(
        {'energy': energy, 'density': target.density, 'radius': geometry.target_radius},
        lambda x: CRATER_SCALING_FACTOR * (
            x['energy'] / (x['density'] * _surface_gravity(x['density'], x['radius']))
        ) ** CRATER_SCALING_EXPONENT,
        "m", "Calculated from crater scaling laws", "Crater diameter",
    )
    depth = derive_quantity(
        {'diameter': diameter},
        lambda x: x['diameter'] * DEPTH_TO_DIAMETER,
        "m", "Estimated from diameter", "Crater depth",
    )
    ejecta_mass = derive_quantity(
        {'diameter': diameter, 'density': target.density},
        lambda x: math.pi / 12 * x['diameter'] ** 3 * x['density'],
        "kg", "Calculated from crater volume", "Ejecta mass",
    )
    ejecta_velocity = derive_quantity(
        {'energy': energy, 'ejecta_mass': ejecta_mass},
        lambda x: (math.sqrt(x['energy'] / x['ejecta_mass']) * EJECTA_VELOCITY_FACTOR
                   if x['ejecta_mass'] > 0 else 0.0),
        "m/s", "Estimated from energy scaling", "Average ejecta velocity",
    )
    return KineticCrater(diameter, depth, ejecta_mass, ejecta_velocity)


def calculate_ejecta_momentum(impactor: KineticImpactor,
                              params: MomentumTransferParameters) -> Quantity:
    """(beta - 1) m v, with the impactor momentum taken at ±10%."""
    momentum = relative(impactor.mass.value * impactor.velocity.value, 0.1, "kg·m/s", "Calculated")
    return derive_quantity(
        {'beta': params.beta, 'momentum': momentum},
        lambda x: (x['beta'] - 1) * x['momentum'],
        "kg·m/s", "Calculated from momentum enhancement factor", "Ejecta momentum enhancement",
    )


def _validate(impactor: KineticImpactor, target: KineticTargetMaterial,
              geometry: KineticGeometry, params: MomentumTransferParameters) -> ValidityCheck:
    check = ValidityCheck(logger)

    velocity = impactor.velocity.value
    if velocity < params.min_velocity:
        check.warn(f"Impact velocity {velocity:g} m/s is below validated range "
                   f"({params.min_velocity:g} m/s)", invalidates=True)
    if velocity > params.max_velocity:
        check.warn(f"Impact velocity {velocity:g} m/s is above validated range "
                   f"({params.max_velocity:g} m/s)", invalidates=True)

    mass = impactor.mass.value
    if mass < params.min_mass:
        check.warn(f"Impactor mass {mass:g} kg is below validated range "
                   f"({params.min_mass:g} kg)", invalidates=True)
    if mass > params.max_mass:
        check.warn(f"Impactor mass {mass:g} kg is above validated range "
                   f"({params.max_mass:g} kg)", invalidates=True)

    if geometry.impact_angle.value > MAX_OBLIQUE_ANGLE:
        check.warn(f"Impact angle {math.degrees(geometry.impact_angle.value):.1f}° is quite "
                   f"oblique - momentum transfer efficiency may be reduced")

    if target.porosity.value > MAX_POROSITY:
        check.warn(f"High target porosity ({target.porosity.value * 100:.1f}%) may affect "
                   f"momentum transfer efficiency")

    return check


def calculate_kinetic_deflection(
    impactor: KineticImpactor,
    target: KineticTargetMaterial,
    geometry: KineticGeometry,
    target_mass: Quantity,
) -> KineticImpactResult:
    """
    Calculate kinetic impactor deflection.

    Args:
        impactor: Impactor spacecraft
        target: Target material (selects the beta parameters)
        geometry: Impact geometry
        target_mass: Target asteroid mass (kg)

    Returns:
        KineticImpactResult
    """
    logger.debug("Kinetic impact: %.3g kg at %.3g m/s into %.3g kg target",
                 impactor.mass.value, impactor.velocity.value, target_mass.value)

    params = TRANSFER_PARAMETERS[target.composition]
    check = _validate(impactor, target, geometry, params)

    energy = calculate_impactor_energy(impactor)
    direct = calculate_direct_momentum(impactor, geometry)
    crater = calculate_crater_dimensions(target, geometry, energy)
    ejecta = calculate_ejecta_momentum(impactor, params)

    total = combine_independent([direct, ejecta], Operation.ADD)
    total = Quantity(total.value, total.uncertainty, "kg·m/s",
                     "Combined momentum transfers", "Total momentum transfer")

    delta_v = derive_quantity(
        {'momentum': total, 'mass': target_mass},
        lambda x: x['momentum'] / x['mass'],
        "m/s", "Calculated from momentum conservation", "Velocity change",
    )
    efficiency = derive_quantity(
        {'total': total, 'direct': direct},
        lambda x: x['total'] / x['direct'] if x['direct'] != 0 else 0.0,
        "1", "Calculated as total/direct momentum ratio", "Momentum transfer efficiency",
    )
    specific_energy = derive_quantity(
        {'energy': energy, 'mass': target_mass},
        lambda x: x['energy'] / x['mass'],
        "J/kg", "Calculated as energy per unit mass", "Specific energy",
    )

    return KineticImpactResult(
        direct_momentum=direct,
        ejecta_momentum=ejecta,
        total_momentum=total,
        momentum_transfer_efficiency=efficiency,
        delta_v=delta_v,
        crater=crater,
        impact_energy=energy,
        specific_energy=specific_energy,
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        references=tuple(REFERENCES),
    )


def optimize_spacecraft(
    target: KineticTargetMaterial,
    geometry: KineticGeometry,
    target_mass: Quantity,
    max_mass: float,
    max_velocity: float,
) -> SpacecraftOptimization:
    """
    Grid search over impactor mass and velocity for the largest delta-v.

    Masses span 100 kg to `max_mass` and velocities 5 km/s to
    `max_velocity`, 20 steps each.
    """
    best = None
    for mass in np.linspace(MIN_OPTIMIZATION_MASS, max_mass, OPTIMIZATION_STEPS):
        for velocity in np.linspace(MIN_OPTIMIZATION_VELOCITY, max_velocity, OPTIMIZATION_STEPS):
            impactor = create_typical_spacecraft(float(mass), float(velocity))
            result = calculate_kinetic_deflection(impactor, target, geometry, target_mass)
            if best is None or result.delta_v.value > best[1].delta_v.value:
                best = (impactor, result)

    impactor, result = best
    logger.info("Optimal impactor: %.0f kg at %.0f m/s, dv = %.3g m/s",
                impactor.mass.value, impactor.velocity.value, result.delta_v.value)

    launch_energy = derive_quantity(
        {'mass': impactor.mass, 'velocity': impactor.velocity},
        lambda x: 0.5 * x['mass'] * x['velocity'] ** 2,
        "J", "Calculated from kinetic energy", "Launch energy required",
    )
    return SpacecraftOptimization(
        optimal_mass=impactor.mass,
        optimal_velocity=impactor.velocity,
        max_delta_v=result.delta_v,
        launch_energy=launch_energy,
        mission_duration=Quantity(SECONDS_PER_YEAR, 30 * 86400, "s",
                                  "Estimated mission duration", "Direct trajectory"),
        cost_estimate=Quantity(BASE_MISSION_COST + impactor.mass.value * COST_PER_KG, 200e6,
                               "USD", "Rough cost estimate", "Mission cost"),
    )


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def create_typical_spacecraft(mass: float, velocity: float) -> KineticImpactor:
    """Aluminium impactor with ±10% mass and ±5% velocity."""
    return KineticImpactor(
        mass=relative(mass, 0.1, "kg", "Mission specification"),
        velocity=relative(velocity, 0.05, "m/s", "Mission specification"),
        diameter=Quantity((mass / SPACECRAFT_DENSITY) ** (1 / 3) * 2, 0.1, "m",
                          "Estimated from mass"),
        density=Quantity(SPACECRAFT_DENSITY, 100, "kg/m³", "Typical spacecraft density"),
        material=ImpactorMaterial.ALUMINUM,
    )


def create_head_on_geometry(target_radius: float) -> KineticGeometry:
    return KineticGeometry(
        impact_angle=Quantity(0.0, 0.1, "rad", "Head-on impact"),
        target_radius=relative(target_radius, 0.1, "m", "Target specification"),
        impact_location=ImpactLocation.CENTER,
    )


def create_dart_like_impactor() -> KineticImpactor:
    """DART: 610 kg at 6.14 km/s."""
    return KineticImpactor(
        mass=Quantity(610, 30, "kg", "DART mission specification"),
        velocity=Quantity(6140, 100, "m/s", "DART impact velocity"),
        diameter=Quantity(1.2, 0.1, "m", "DART spacecraft dimensions"),
        density=Quantity(508, 50, "kg/m³", "DART bulk density"),
        material=ImpactorMaterial.ALUMINUM,
    )
