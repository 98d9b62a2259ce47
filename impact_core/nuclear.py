"""
Nuclear Deflection
==================
Momentum delivered to an asteroid by a standoff nuclear detonation, following
Ahrens & Harris (1992).

The yield is split into X-ray, neutron, gamma and debris fractions. X-rays
and neutrons heat and vaporize a thin surface layer whose blow-off carries
momentum; device debris adds a small direct impulse. The target Δv is the
total momentum over the target mass.

Presets:
- Devices: tactical (10 kt), strategic (1 Mt), thermonuclear (10 Mt)
- Target compositions: rocky, metallic, carbonaceous
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from .propagation import derive_quantity, add, combine_independent, Operation
from .quantity import Quantity, relative, GRAVITATIONAL_CONSTANT, STEFAN_BOLTZMANN
from .records import BundleMixin, ValidityCheck, resolve_key, with_methods

logger = logging.getLogger(__name__)

MEGATON_TO_JOULES = 4.184e15
SURFACE_EMISSIVITY = 0.9
THERMAL_FRACTION = 0.3
STRESS_WAVE_FRACTION = 0.1
MINIMUM_STANDOFF = 1.0           # m, floor for the thermal flux of contact bursts

REFERENCES = [
    "Ahrens, T.J. & Harris, A.W. (1992). Deflection and fragmentation of near-Earth asteroids",
    "Glasstone, S. & Dolan, P.J. (1977). The Effects of Nuclear Weapons",
    "Solem, J.C. (2000). Nuclear explosive propulsion for interplanetary travel",
    "Wie, B. (2008). Dynamics and Control of Gravity Tractor Spacecraft",
]


class DeviceKind(Enum):
    FISSION = "fission"
    FUSION = "fusion"
    HYBRID = "hybrid"


class NuclearDeviceType(Enum):
    """Device presets."""
    TACTICAL = "tactical"
    STRATEGIC = "strategic"
    THERMONUCLEAR = "thermonuclear"


class TargetComposition(Enum):
    """Target material presets."""
    ROCKY = "rocky"
    METALLIC = "metallic"
    CARBONACEOUS = "carbonaceous"


class DetonationTiming(Enum):
    CONTACT = "contact"
    PROXIMITY = "proximity"
    STANDOFF = "standoff"
    SUBSURFACE = "subsurface"


# =============================================================================
# SPECIFICATIONS
# =============================================================================

@with_methods
@dataclass(frozen=True)
class NuclearDevice:
    """
    Nuclear device properties.

    Attributes:
        yield_mt: Yield in megatons TNT
        mass: Device mass (kg)
        xray_fraction: Fraction of energy released as X-rays
        neutron_fraction: Fraction released as neutrons
        gamma_fraction: Fraction released as gamma rays
        debris_fraction: Fraction carried by device debris
        kind: Fission, fusion or hybrid
    """
    yield_mt: Quantity
    mass: Quantity
    xray_fraction: Quantity
    neutron_fraction: Quantity
    gamma_fraction: Quantity
    debris_fraction: Quantity
    kind: DeviceKind


@with_methods
@dataclass(frozen=True)
class CompositionProperties:
    """Material properties shared by all targets of one composition."""
    density: Quantity
    albedo: Quantity
    thermal_inertia: Quantity
    vaporization_energy: Quantity
    vaporization_temperature: Quantity


@with_methods
@dataclass(frozen=True)
class NuclearTarget:
    """
    Target asteroid properties.

    Attributes:
        mass: Target mass (kg)
        radius: Mean radius (m)
        density: Bulk density (kg/m³)
        composition: Material class
        albedo: Geometric albedo
        thermal_inertia: J m⁻² K⁻¹ s⁻¹/²
        vaporization_energy: Specific vaporization energy (J/kg)
        vaporization_temperature: Vaporization temperature (K)
    """
    mass: Quantity
    radius: Quantity
    density: Quantity
    composition: TargetComposition
    albedo: Quantity
    thermal_inertia: Quantity
    vaporization_energy: Quantity
    vaporization_temperature: Quantity


@with_methods
@dataclass(frozen=True)
class NuclearGeometry:
    """
    Detonation geometry.

    Attributes:
        standoff_distance: Distance from detonation point to surface (m)
        burst_height: Height above surface, negative when buried (m)
        aspect_angle: Angle relative to the target velocity vector (rad)
        timing: Detonation mode
    """
    standoff_distance: Quantity
    burst_height: Quantity
    aspect_angle: Quantity
    timing: DetonationTiming


_A_H = "Ahrens & Harris 1992"

DEVICE_SPECIFICATIONS: Dict[NuclearDeviceType, NuclearDevice] = {
    NuclearDeviceType.TACTICAL: NuclearDevice(
        yield_mt=Quantity(0.01, 0.002, "Mt TNT", "Tactical nuclear device"),
        mass=Quantity(100, 20, "kg", "Estimated device mass"),
        xray_fraction=Quantity(0.75, 0.05, "1", _A_H),
        neutron_fraction=Quantity(0.05, 0.01, "1", _A_H),
        gamma_fraction=Quantity(0.15, 0.02, "1", _A_H),
        debris_fraction=Quantity(0.05, 0.01, "1", _A_H),
        kind=DeviceKind.FISSION,
    ),
    NuclearDeviceType.STRATEGIC: NuclearDevice(
        yield_mt=Quantity(1.0, 0.1, "Mt TNT", "Strategic nuclear warhead"),
        mass=Quantity(300, 50, "kg", "Estimated device mass"),
        xray_fraction=Quantity(0.7, 0.05, "1", _A_H),
        neutron_fraction=Quantity(0.08, 0.02, "1", _A_H),
        gamma_fraction=Quantity(0.17, 0.03, "1", _A_H),
        debris_fraction=Quantity(0.05, 0.01, "1", _A_H),
        kind=DeviceKind.FUSION,
    ),
    NuclearDeviceType.THERMONUCLEAR: NuclearDevice(
        yield_mt=Quantity(10.0, 1.0, "Mt TNT", "Large thermonuclear device"),
        mass=Quantity(1000, 200, "kg", "Estimated device mass"),
        xray_fraction=Quantity(0.65, 0.05, "1", _A_H),
        neutron_fraction=Quantity(0.1, 0.02, "1", _A_H),
        gamma_fraction=Quantity(0.2, 0.03, "1", _A_H),
        debris_fraction=Quantity(0.05, 0.01, "1", _A_H),
        kind=DeviceKind.FUSION,
    ),
}

_INERTIA = "J m⁻² K⁻¹ s⁻¹/²"

COMPOSITION_PROPERTIES: Dict[TargetComposition, CompositionProperties] = {
    TargetComposition.ROCKY: CompositionProperties(
        density=Quantity(2700, 300, "kg/m³", "Typical rocky asteroid"),
        albedo=Quantity(0.15, 0.05, "1", "S-type asteroid albedo"),
        thermal_inertia=Quantity(50, 20, _INERTIA, "Rocky material"),
        vaporization_energy=Quantity(8e6, 2e6, "J/kg", "Silicate vaporization energy"),
        vaporization_temperature=Quantity(2500, 200, "K", "Silicate vaporization temperature"),
    ),
    TargetComposition.METALLIC: CompositionProperties(
        density=Quantity(7800, 500, "kg/m³", "Iron-nickel asteroid"),
        albedo=Quantity(0.25, 0.05, "1", "M-type asteroid albedo"),
        thermal_inertia=Quantity(200, 50, _INERTIA, "Metallic material"),
        vaporization_energy=Quantity(6e6, 1e6, "J/kg", "Iron vaporization energy"),
        vaporization_temperature=Quantity(3000, 200, "K", "Iron vaporization temperature"),
    ),
    TargetComposition.CARBONACEOUS: CompositionProperties(
        density=Quantity(1400, 200, "kg/m³", "C-type asteroid"),
        albedo=Quantity(0.05, 0.02, "1", "C-type asteroid albedo"),
        thermal_inertia=Quantity(20, 10, _INERTIA, "Carbonaceous material"),
        vaporization_energy=Quantity(4e6, 1e6, "J/kg", "Carbonaceous vaporization energy"),
        vaporization_temperature=Quantity(2000, 200, "K", "Carbonaceous vaporization temperature"),
    ),
}


def get_device_specification(device_type: Union[NuclearDeviceType, str]) -> NuclearDevice:
    """Preset device. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(NuclearDeviceType, device_type, "nuclear device type")
    return DEVICE_SPECIFICATIONS[key]


def get_composition_properties(composition: Union[TargetComposition, str]) -> CompositionProperties:
    """Preset material. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(TargetComposition, composition, "target composition")
    return COMPOSITION_PROPERTIES[key]


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class MomentumDeposition(BundleMixin):
    """Momentum delivered by each mechanism."""
    xray_momentum: Quantity
    xray_penetration_depth: Quantity
    xray_heated_mass: Quantity
    neutron_momentum: Quantity
    neutron_penetration_depth: Quantity
    neutron_heated_mass: Quantity
    debris_momentum: Quantity
    total_momentum: Quantity
    vaporized_mass: Quantity
    ablation_velocity: Quantity


@dataclass(frozen=True)
class NuclearDeflectionResult(BundleMixin):
    """
    Result of a nuclear deflection calculation.

    Attributes:
        momentum_deposition: Per-mechanism momentum breakdown
        momentum_transfer_efficiency: Momentum per photon-equivalent momentum
        delta_v: Target velocity change (m/s)
        total_energy_deposited: Device energy release (J)
        specific_energy_deposition: Energy per target mass (J/kg)
        surface_temperature: Peak surface temperature (K)
        thermal_penetration_depth: Thermal skin depth (m)
        fracture_radius: Radius of structural damage (m)
        spallation_mass: Mass ejected by stress waves (kg)
        optimal_standoff_distance: Closed-form optimum standoff (m)
        momentum_coupling_coefficient: Momentum per areal energy (s/m)
    """
    momentum_deposition: MomentumDeposition
    momentum_transfer_efficiency: Quantity
    delta_v: Quantity
    total_energy_deposited: Quantity
    specific_energy_deposition: Quantity
    surface_temperature: Quantity
    thermal_penetration_depth: Quantity
    fracture_radius: Quantity
    spallation_mass: Quantity
    optimal_standoff_distance: Quantity
    momentum_coupling_coefficient: Quantity
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()


# =============================================================================
# PHYSICS
# =============================================================================

def _escape_velocity(mass: float, radius: float) -> float:
    return math.sqrt(2 * GRAVITATIONAL_CONSTANT.value * mass / radius)


def calculate_total_energy(device: NuclearDevice) -> Quantity:
    """Yield converted from megatons TNT to joules."""
    return Quantity(
        value=device.yield_mt.value * MEGATON_TO_JOULES,
        uncertainty=device.yield_mt.uncertainty * MEGATON_TO_JOULES,
        unit="J",
        source="Converted from TNT equivalent",
        description="Total nuclear energy release",
    )


def optimize_standoff_distance(device: NuclearDevice, target: NuclearTarget) -> Quantity:
    """Closed-form optimum standoff: 3 R (Y / 1 Mt)^0.3."""
    return derive_quantity(
        {'radius': target.radius, 'yield_mt': device.yield_mt},
        lambda x: 3.0 * x['radius'] * (x['yield_mt'] / 1.0) ** 0.3,
        "m", "Optimized for maximum momentum transfer", "Optimal standoff distance",
    )


def _ablation_inputs(target: NuclearTarget,
                     energy: Quantity, fraction: Quantity) -> Dict[str, Quantity]:
    return {
        'energy': energy,
        'fraction': fraction,
        'density': target.density,
        'radius': target.radius,
        'mass': target.mass,
        'vaporization_energy': target.vaporization_energy,
    }


def _xray_vaporized(x: Dict[str, float]) -> float:
    depth = 0.1 / x['density']
    heated = 4 * math.pi * x['radius'] ** 2 * depth * x['density']
    fraction = min(1.0, x['energy'] * x['fraction'] / (heated * x['vaporization_energy']))
    return heated * fraction


def _neutron_vaporized(x: Dict[str, float]) -> float:
    depth = 1.0 / x['density']
    heated = 4 * math.pi * x['radius'] ** 2 * depth * x['density'] * 0.1
    fraction = min(0.1, x['energy'] * x['fraction'] / (heated * x['vaporization_energy']))
    return heated * fraction


def calculate_momentum_deposition(device: NuclearDevice, target: NuclearTarget,
                                  energy: Quantity) -> MomentumDeposition:
    """
    Momentum from X-ray ablation, neutron ablation and debris impact.

    X-rays deposit in ~0.1 kg/m² of surface material, neutrons in ~1 kg/m²
    with 10% heating efficiency. Blow-off velocity scales with the escape
    velocity (x5 for X-rays, x0.5 for neutrons). Only 0.01% of the debris
    momentum reaches the target.
    """
    xray_in = _ablation_inputs(target, energy, device.xray_fraction)
    neutron_in = _ablation_inputs(target, energy, device.neutron_fraction)

    xray_depth = derive_quantity(
        {'density': target.density}, lambda x: 0.1 / x['density'],
        "m", "Estimated X-ray penetration", "X-ray penetration depth",
    )
    xray_heated = derive_quantity(
        {'density': target.density, 'radius': target.radius},
        lambda x: 4 * math.pi * x['radius'] ** 2 * 0.1,
        "kg", "Mass heated by X-rays", "X-ray heated mass",
    )
    xray_vaporized = derive_quantity(
        xray_in, _xray_vaporized, "kg", "Vaporized by X-ray heating", "X-ray vaporized mass",
    )
    xray_momentum = derive_quantity(
        xray_in,
        lambda x: _xray_vaporized(x) * _escape_velocity(x['mass'], x['radius']) * 5,
        "kg·m/s", "X-ray ablation momentum", "Momentum from X-ray ablation",
    )

    neutron_depth = derive_quantity(
        {'density': target.density}, lambda x: 1.0 / x['density'],
        "m", "Estimated neutron penetration", "Neutron penetration depth",
    )
    neutron_heated = derive_quantity(
        {'density': target.density, 'radius': target.radius},
        lambda x: 4 * math.pi * x['radius'] ** 2 * 1.0 * 0.1,
        "kg", "Mass heated by neutrons", "Neutron heated mass",
    )
    neutron_vaporized = derive_quantity(
        neutron_in, _neutron_vaporized, "kg", "Vaporized by neutron heating", "Neutron vaporized mass",
    )
    neutron_momentum = derive_quantity(
        neutron_in,
        lambda x: _neutron_vaporized(x) * _escape_velocity(x['mass'], x['radius']) * 0.5,
        "kg·m/s", "Neutron ablation momentum", "Momentum from neutron ablation",
    )

    debris_momentum = derive_quantity(
        {'energy': energy, 'fraction': device.debris_fraction, 'device_mass': device.mass},
        lambda x: x['device_mass'] * math.sqrt(2 * x['energy'] * x['fraction'] / x['device_mass']) * 1e-4,
        "kg·m/s", "Debris impact momentum", "Momentum from debris impact",
    )

    total = combine_independent([xray_momentum, neutron_momentum, debris_momentum], Operation.ADD)
    total = Quantity(total.value, total.uncertainty, "kg·m/s",
                     "Combined momentum from all mechanisms", "Total momentum transfer")

    vaporized = add(xray_vaporized, neutron_vaporized)
    vaporized = Quantity(vaporized.value, vaporized.uncertainty, "kg",
                         "Combined vaporized mass", "Total vaporized mass")

    if vaporized.value > 0:
        ablation_velocity = derive_quantity(
            {'momentum': total, 'vaporized': vaporized},
            lambda x: x['momentum'] / x['vaporized'],
            "m/s", "Calculated from momentum and mass", "Average ablation velocity",
        )
    else:
        ablation_velocity = Quantity(0.0, 0.0, "m/s", "Calculated from momentum and mass",
                                     "Average ablation velocity")

    return MomentumDeposition(
        xray_momentum=xray_momentum,
        xray_penetration_depth=xray_depth,
        xray_heated_mass=xray_heated,
        neutron_momentum=neutron_momentum,
        neutron_penetration_depth=neutron_depth,
        neutron_heated_mass=neutron_heated,
        debris_momentum=debris_momentum,
        total_momentum=total,
        vaporized_mass=vaporized,
        ablation_velocity=ablation_velocity,
    )


def _validate(device: NuclearDevice, target: NuclearTarget,
              geometry: NuclearGeometry) -> ValidityCheck:
    check = ValidityCheck(logger)

    total_fraction = (device.xray_fraction.value + device.neutron_fraction.value
                      + device.gamma_fraction.value + device.debris_fraction.value)
    if abs(total_fraction - 1.0) > 0.1:
        check.warn(f"Energy fractions sum to {total_fraction:.2f}, should be close to 1.0")

    standoff = geometry.standoff_distance.value
    if standoff < target.radius.value:
        check.warn(f"Standoff distance ({standoff:.1f}m) is less than target radius "
                   f"- may cause fragmentation")
    if standoff > target.radius.value * 10:
        check.warn(f"Large standoff distance ({standoff:.1f}m) may reduce momentum "
                   f"transfer efficiency")

    if device.yield_mt.value < 0.001:
        check.warn(f"Very small nuclear yield ({device.yield_mt.value} Mt) may be "
                   f"ineffective for deflection")
    if device.yield_mt.value > 100:
        check.warn(f"Very large nuclear yield ({device.yield_mt.value} Mt) may cause "
                   f"fragmentation instead of deflection", invalidates=True)

    return check


def calculate_nuclear_deflection(
    device: NuclearDevice,
    target: NuclearTarget,
    geometry: NuclearGeometry,
) -> NuclearDeflectionResult:
    """
    Calculate nuclear deflection effectiveness.

    Args:
        device: Nuclear device properties
        target: Target asteroid properties
        geometry: Detonation geometry

    Returns:
        NuclearDeflectionResult
    """
    logger.debug("Nuclear deflection: %.3g Mt against %.3g kg target",
                 device.yield_mt.value, target.mass.value)

    check = _validate(device, target, geometry)

    energy = calculate_total_energy(device)
    optimal_standoff = optimize_standoff_distance(device, target)
    deposition = calculate_momentum_deposition(device, target, energy)
    momentum = deposition.total_momentum

    delta_v = derive_quantity(
        {'momentum': momentum, 'mass': target.mass},
        lambda x: x['momentum'] / x['mass'],
        "m/s", "Calculated from momentum conservation", "Velocity change from nuclear deflection",
    )

    efficiency = derive_quantity(
        {'momentum': momentum, 'energy': energy, 'distance': geometry.standoff_distance},
        lambda x: (x['momentum'] / (x['energy'] / 3e8)) * (1 / (1 + x['distance'] / 1000)),
        "1", "Nuclear momentum transfer efficiency", "Efficiency of momentum transfer",
    )

    specific_energy = derive_quantity(
        {'energy': energy, 'mass': target.mass},
        lambda x: x['energy'] / x['mass'],
        "J/kg", "Calculated specific energy", "Energy per unit mass",
    )

    # Stefan-Boltzmann: T^4 = flux / (sigma * emissivity)
    standoff = max(geometry.standoff_distance.value, MINIMUM_STANDOFF)
    flux = energy.value * THERMAL_FRACTION / (4 * math.pi * standoff ** 2)
    temperature = (flux / (STEFAN_BOLTZMANN.value * SURFACE_EMISSIVITY)) ** 0.25
    surface_temperature = relative(temperature, 0.2, "K", "Calculated from thermal flux",
                                   "Peak surface temperature")

    # 1 s heating duration
    diffusivity = target.thermal_inertia.value / (target.density.value * 1000)
    thermal_depth = relative(math.sqrt(diffusivity * 1.0), 0.3, "m",
                             "Thermal diffusion calculation", "Thermal penetration depth")

    stress_energy = energy.value * STRESS_WAVE_FRACTION
    radius = (stress_energy / (4 * math.pi * target.density.value * 1e6)) ** (1 / 3)
    fracture_radius = relative(radius, 0.5, "m", "Stress wave propagation estimate",
                               "Fracture radius")

    spallation_volume = (4 / 3) * math.pi * radius ** 3 * 0.1
    spallation_mass = derive_quantity(
        {'density': target.density},
        lambda x: spallation_volume * x['density'],
        "kg", "Spallation volume estimate", "Mass ejected by spallation",
    )

    coupling = derive_quantity(
        {'momentum': momentum, 'energy': energy, 'radius': target.radius},
        lambda x: x['momentum'] / (x['energy'] / (2 * math.pi * x['radius'] ** 2)),
        "s/m", "Momentum per unit energy per unit area", "Momentum coupling coefficient",
    )

    return NuclearDeflectionResult(
        momentum_deposition=deposition,
        momentum_transfer_efficiency=efficiency,
        delta_v=delta_v,
        total_energy_deposited=energy,
        specific_energy_deposition=specific_energy,
        surface_temperature=surface_temperature,
        thermal_penetration_depth=thermal_depth,
        fracture_radius=fracture_radius,
        spallation_mass=spallation_mass,
        optimal_standoff_distance=optimal_standoff,
        momentum_coupling_coefficient=coupling,
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        references=tuple(REFERENCES),
    )


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def create_strategic_device() -> NuclearDevice:
    return get_device_specification(NuclearDeviceType.STRATEGIC)


def create_optimal_standoff_geometry(target_radius: float) -> NuclearGeometry:
    """Standoff and burst height at 3 R ± 0.5 R, head-on approach."""
    return NuclearGeometry(
        standoff_distance=Quantity(target_radius * 3, target_radius * 0.5, "m", "Optimal standoff"),
        burst_height=Quantity(target_radius * 3, target_radius * 0.5, "m", "Above surface"),
        aspect_angle=Quantity(0.0, 0.1, "rad", "Head-on approach"),
        timing=DetonationTiming.STANDOFF,
    )


def create_nuclear_target(
    mass: float,
    radius: float,
    composition: Union[TargetComposition, str] = TargetComposition.ROCKY,
) -> NuclearTarget:
    """Target with ±20% mass, ±10% radius and composition-preset material properties."""
    key = resolve_key(TargetComposition, composition, "target composition")
    props = COMPOSITION_PROPERTIES[key]
    return NuclearTarget(
        mass=relative(mass, 0.2, "kg", "Target specification"),
        radius=relative(radius, 0.1, "m", "Target specification"),
        density=props.density,
        composition=key,
        albedo=props.albedo,
        thermal_inertia=props.thermal_inertia,
        vaporization_energy=props.vaporization_energy,
        vaporization_temperature=props.vaporization_temperature,
    )
