"""
Solar Radiation Pressure Deflection
===================================
Deflection by sunlight: a solar sail towing the asteroid, a painted or
coated surface, mirrors concentrating sunlight on the surface, or an albedo
change (McInnes 1999, Vulpetti 2014).

Solar flux at the working distance is derived from the solar constant,
S = S0 / d² with d in AU, so every force falls off with heliocentric
distance. Radiation pressure uses no propellant.

Methods:
- solar_sail:             F = 2 S A R / c
- surface_modification:   F = S A_t 0.5 / c
- concentrated_sunlight:  F = S A_t min(10, A_s / A_t) R / c
- albedo_modification:    F = S A_t 0.3 / c
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from .propagation import derive_quantity
from .quantity import Quantity, relative, SECONDS_PER_YEAR, SPEED_OF_LIGHT
from .records import (
    BundleMixin, OrbitalElementChanges, ValidityCheck, resolve_key, scaled, with_methods,
)

logger = logging.getLogger(__name__)

SYSTEM_MASS_OVERHEAD = 1.5
COST_PER_KG = 50000.0             # USD, rough estimate for space systems
MAX_CONCENTRATION = 10.0

REFERENCES = [
    "McInnes, C.R. (1999). Solar Sailing: Technology, Dynamics and Mission Applications",
    "Wie, B. (2008). Solar radiation pressure effects on asteroids",
    "Dachwald, B. et al. (2006). Parametric model and optimal control of solar sails",
    "Vulpetti, G. et al. (2014). Solar Sails: A Novel Approach to Interplanetary Travel",
]


class SolarDeflectionMethod(Enum):
    SOLAR_SAIL = "solar_sail"
    SURFACE_MODIFICATION = "surface_modification"
    CONCENTRATED_SUNLIGHT = "concentrated_sunlight"
    ALBEDO_MODIFICATION = "albedo_modification"


class SailType(Enum):
    FLAT = "flat"
    PARABOLIC = "parabolic"
    HELIOGYRO = "heliogyro"
    SPINNING = "spinning"


class SolarDistance(Enum):
    """Standard environment presets."""
    ONE_AU = "1_AU"
    ONE_AND_HALF_AU = "1.5_AU"
    TWO_AU = "2_AU"


# =============================================================================
# SPECIFICATIONS
# =============================================================================

@with_methods
@dataclass(frozen=True)
class SailSpecification:
    """Sail-type dependent optical and lifetime properties."""
    sail_efficiency: Quantity
    reflectivity: Quantity
    absorptivity: Quantity
    transmissivity: Quantity
    deployment_time: Quantity
    operational_lifetime: Quantity
    sail_type: SailType


@with_methods
@dataclass(frozen=True)
class SolarSail:
    """
    Solar sail (or mirror) properties.

    Attributes:
        sail_area: Effective area (m²)
        sail_mass: Sail mass including support structure (kg)
        reflectivity: Fraction of light reflected
        absorptivity: Fraction of light absorbed
        transmissivity: Fraction of light transmitted
        sail_efficiency: Overall sail efficiency
        deployment_time: s
        operational_lifetime: s
        sail_type: Sail construction
    """
    sail_area: Quantity
    sail_mass: Quantity
    reflectivity: Quantity
    absorptivity: Quantity
    transmissivity: Quantity
    sail_efficiency: Quantity
    deployment_time: Quantity
    operational_lifetime: Quantity
    sail_type: SailType


@with_methods
@dataclass(frozen=True)
class SolarTarget:
    """Target asteroid for solar deflection."""
    mass: Quantity
    radius: Quantity
    cross_sectional_area: Quantity
    albedo: Quantity
    thermal_inertia: Quantity
    rotation_period: Quantity
    obliquity: Quantity
    surface_roughness: Quantity


@with_methods
@dataclass(frozen=True)
class SolarEnvironment:
    """
    Solar environment at the working distance.

    Attributes:
        solar_distance: Heliocentric distance (AU)
        solar_constant: Irradiance at 1 AU (W/m²)
        seasonal_variation: Fractional flux variation over the orbit
        solar_activity: Activity factor
        medium_density: Interplanetary dust density (kg/m³)
        drag_coefficient: Dust drag coefficient
    """
    solar_distance: Quantity
    solar_constant: Quantity
    seasonal_variation: Quantity
    solar_activity: Quantity
    medium_density: Quantity
    drag_coefficient: Quantity


@with_methods
@dataclass(frozen=True)
class SolarMission:
    mission_duration: Quantity
    deployment_distance: Quantity
    operating_distance: Quantity
    orientation_accuracy: Quantity
    communication_delay: Quantity
    station_keeping_capability: bool = True
    autonomous_operation: bool = True


def _years(n: float) -> float:
    return n * SECONDS_PER_YEAR


SAIL_SPECIFICATIONS: Dict[SailType, SailSpecification] = {
    SailType.FLAT: SailSpecification(
        sail_efficiency=Quantity(0.85, 0.05, "1", "Flat sail efficiency"),
        reflectivity=Quantity(0.88, 0.02, "1", "Aluminized polyimide"),
        absorptivity=Quantity(0.1, 0.02, "1", "Typical absorption"),
        transmissivity=Quantity(0.02, 0.01, "1", "Minimal transmission"),
        deployment_time=Quantity(3600, 600, "s", "1 hour deployment"),
        operational_lifetime=Quantity(_years(10), _years(2), "s", "10 year lifetime"),
        sail_type=SailType.FLAT,
    ),
    SailType.PARABOLIC: SailSpecification(
        sail_efficiency=Quantity(0.92, 0.03, "1", "Parabolic concentrator efficiency"),
        reflectivity=Quantity(0.95, 0.02, "1", "High-quality reflector"),
        absorptivity=Quantity(0.04, 0.01, "1", "Low absorption"),
        transmissivity=Quantity(0.01, 0.005, "1", "Minimal transmission"),
        deployment_time=Quantity(7200, 1200, "s", "2 hour deployment"),
        operational_lifetime=Quantity(_years(15), _years(3), "s", "15 year lifetime"),
        sail_type=SailType.PARABOLIC,
    ),
    SailType.HELIOGYRO: SailSpecification(
        sail_efficiency=Quantity(0.8, 0.08, "1", "Heliogyro efficiency"),
        reflectivity=Quantity(0.85, 0.03, "1", "Spinning blade reflectivity"),
        absorptivity=Quantity(0.12, 0.03, "1", "Higher absorption due to geometry"),
        transmissivity=Quantity(0.03, 0.01, "1", "Some transmission"),
        deployment_time=Quantity(1800, 300, "s", "30 minute spin-up"),
        operational_lifetime=Quantity(_years(8), _years(2), "s", "8 year lifetime"),
        sail_type=SailType.HELIOGYRO,
    ),
    SailType.SPINNING: SailSpecification(
        sail_efficiency=Quantity(0.75, 0.1, "1", "Spinning disk efficiency"),
        reflectivity=Quantity(0.82, 0.04, "1", "Spinning surface reflectivity"),
        absorptivity=Quantity(0.15, 0.04, "1", "Moderate absorption"),
        transmissivity=Quantity(0.03, 0.01, "1", "Some transmission"),
        deployment_time=Quantity(900, 180, "s", "15 minute deployment"),
        operational_lifetime=Quantity(_years(5), _years(1), "s", "5 year lifetime"),
        sail_type=SailType.SPINNING,
    ),
}

_SOLAR_CONSTANT = Quantity(1361, 5, "W/m²", "Standard solar constant")
_ACTIVITY = Quantity(1.0, 0.1, "1", "Average solar activity")
_MEDIUM_DENSITY = Quantity(1e-20, 5e-21, "kg/m³", "Interplanetary dust density")
_DRAG = Quantity(2.0, 0.2, "1", "Typical drag coefficient")

SOLAR_ENVIRONMENTS: Dict[SolarDistance, SolarEnvironment] = {
    SolarDistance.ONE_AU: SolarEnvironment(
        solar_distance=Quantity(1.0, 0.017, "AU", "Earth orbit (±1.7% eccentricity)"),
        solar_constant=_SOLAR_CONSTANT,
        seasonal_variation=Quantity(0.034, 0.005, "1", "±3.4% seasonal variation"),
        solar_activity=_ACTIVITY,
        medium_density=_MEDIUM_DENSITY,
        drag_coefficient=_DRAG,
    ),
    SolarDistance.ONE_AND_HALF_AU: SolarEnvironment(
        solar_distance=Quantity(1.5, 0.1, "AU", "Mars-like orbit"),
        solar_constant=_SOLAR_CONSTANT,
        seasonal_variation=Quantity(0.05, 0.01, "1", "±5% seasonal variation"),
        solar_activity=_ACTIVITY,
        medium_density=_MEDIUM_DENSITY,
        drag_coefficient=_DRAG,
    ),
    SolarDistance.TWO_AU: SolarEnvironment(
        solar_distance=Quantity(2.0, 0.2, "AU", "Asteroid belt"),
        solar_constant=_SOLAR_CONSTANT,
        seasonal_variation=Quantity(0.1, 0.02, "1", "±10% seasonal variation"),
        solar_activity=_ACTIVITY,
        medium_density=_MEDIUM_DENSITY,
        drag_coefficient=_DRAG,
    ),
}

METHOD_POWER: Dict[SolarDeflectionMethod, Tuple[float, float]] = {
    SolarDeflectionMethod.SOLAR_SAIL: (100, 20),
    SolarDeflectionMethod.SURFACE_MODIFICATION: (1000, 200),
    SolarDeflectionMethod.CONCENTRATED_SUNLIGHT: (500, 100),
    SolarDeflectionMethod.ALBEDO_MODIFICATION: (2000, 400),
}


def get_sail_specification(sail_type: Union[SailType, str]) -> SailSpecification:
    """Preset sail. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(SailType, sail_type, "solar sail type")
    return SAIL_SPECIFICATIONS[key]


def get_solar_environment(distance: Union[SolarDistance, str]) -> SolarEnvironment:
    """Preset environment. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(SolarDistance, distance, "solar distance")
    return SOLAR_ENVIRONMENTS[key]


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class SolarForceResult(BundleMixin):
    """Radiation pressure force, its components and efficiency factors."""
    radiation_pressure_force: Quantity
    photon_momentum_flux: Quantity
    radial_force: Quantity
    tangential_force: Quantity
    normal_force: Quantity
    radial_acceleration: Quantity
    tangential_acceleration: Quantity
    normal_acceleration: Quantity
    geometric_efficiency: Quantity
    optical_efficiency: Quantity
    overall_efficiency: Quantity


@dataclass(frozen=True)
class SeasonalVariations(BundleMixin):
    max_deflection: Quantity
    min_deflection: Quantity
    average_deflection: Quantity


@dataclass(frozen=True)
class SolarDeflectionResult(BundleMixin):
    """
    Result of a solar deflection calculation.

    Attributes:
        force_result: Forces, accelerations and efficiencies
        delta_v: Total velocity change (m/s)
        delta_v_rate: Velocity change per year (m/s)
        orbital_element_changes: First-order element changes
        required_sail_area: m²
        total_system_mass: Sail plus support systems (kg)
        power_requirement: W
        deflection_efficiency: m/kg
        cost_effectiveness: m per USD
        mission_feasibility: 0-1 score
        seasonal_variations: Deflection band over the orbit
        fuel_consumption: Always zero
    """
    force_result: SolarForceResult
    delta_v: Quantity
    delta_v_rate: Quantity
    orbital_element_changes: OrbitalElementChanges
    required_sail_area: Quantity
    total_system_mass: Quantity
    power_requirement: Quantity
    deflection_efficiency: Quantity
    cost_effectiveness: Quantity
    mission_feasibility: Quantity
    seasonal_variations: SeasonalVariations
    fuel_consumption: Quantity
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()


# =============================================================================
# PHYSICS
# =============================================================================

def _flux(x: Dict[str, float]) -> float:
    return x['solar_constant'] / x['distance'] ** 2


def _environment_inputs(environment: SolarEnvironment) -> Dict[str, Quantity]:
    return {
        'solar_constant': environment.solar_constant,
        'distance': environment.solar_distance,
        'c': SPEED_OF_LIGHT,
    }


def calculate_solar_flux(environment: SolarEnvironment) -> Quantity:
    """S = S0 / d², d in AU."""
    return derive_quantity(
        {'solar_constant': environment.solar_constant, 'distance': environment.solar_distance},
        _flux, "W/m²", "Calculated from distance", "Solar flux",
    )


def calculate_photon_momentum_flux(environment: SolarEnvironment) -> Quantity:
    return derive_quantity(
        _environment_inputs(environment),
        lambda x: _flux(x) / x['c'],
        "N/m²", "Calculated from solar flux and speed of light", "Photon momentum flux",
    )


def calculate_radiation_force(
    method: SolarDeflectionMethod,
    sail: SolarSail,
    target: SolarTarget,
    environment: SolarEnvironment,
) -> Tuple[Quantity, Quantity, Quantity]:
    """
    Radiation pressure force for one method, assuming optimal orientation.

    Returns:
        (force, geometric efficiency, optical efficiency)
    """
    inputs = _environment_inputs(environment)

    if method == SolarDeflectionMethod.SOLAR_SAIL:
        inputs.update(area=sail.sail_area, reflectivity=sail.reflectivity)
        force = derive_quantity(
            inputs,
            lambda x: 2 * _flux(x) * x['area'] * x['reflectivity'] / x['c'],
            "N", "Solar sail radiation pressure force", "Solar sail force",
        )
        geometric = Quantity(1.0, 0.1, "1", "Geometric efficiency for optimal orientation",
                             "Geometric efficiency")
        optical = sail.reflectivity

    elif method == SolarDeflectionMethod.SURFACE_MODIFICATION:
        # 50% albedo increase over the modified surface
        inputs.update(area=target.cross_sectional_area)
        force = derive_quantity(
            inputs,
            lambda x: _flux(x) * x['area'] * 0.5 / x['c'],
            "N", "Surface modification radiation pressure force", "Surface modification force",
        )
        geometric = Quantity(0.5, 0.2, "1", "Geometric efficiency for surface modification",
                             "Geometric efficiency")
        optical = Quantity(0.5, 0.2, "1", "Optical efficiency for surface modification",
                           "Optical efficiency")

    elif method == SolarDeflectionMethod.CONCENTRATED_SUNLIGHT:
        inputs.update(mirror_area=sail.sail_area, target_area=target.cross_sectional_area,
                      reflectivity=sail.reflectivity)
        force = derive_quantity(
            inputs,
            lambda x: (_flux(x) * x['target_area']
                       * min(MAX_CONCENTRATION, x['mirror_area'] / x['target_area'])
                       * x['reflectivity'] / x['c']),
            "N", "Concentrated sunlight radiation pressure force", "Concentrated sunlight force",
        )
        geometric = Quantity(0.8, 0.1, "1", "Geometric efficiency for concentrated sunlight",
                             "Geometric efficiency")
        optical = sail.reflectivity

    elif method == SolarDeflectionMethod.ALBEDO_MODIFICATION:
        # 30% albedo change, Yarkovsky-like
        inputs.update(area=target.cross_sectional_area)
        force = derive_quantity(
            inputs,
            lambda x: _flux(x) * x['area'] * 0.3 / x['c'],
            "N", "Albedo modification radiation pressure force", "Albedo modification force",
        )
        geometric = Quantity(0.3, 0.1, "1", "Geometric efficiency for albedo modification",
                             "Geometric efficiency")
        optical = Quantity(0.3, 0.1, "1", "Optical efficiency for albedo modification",
                           "Optical efficiency")

    else:
        raise ValueError(f"Unknown solar deflection method: {method}")

    return force, geometric, optical


def calculate_forces(method: SolarDeflectionMethod, sail: SolarSail, target: SolarTarget,
                     environment: SolarEnvironment) -> SolarForceResult:
    force, geometric, optical = calculate_radiation_force(method, sail, target, environment)

    # Mostly radial, away from the Sun
    radial = scaled(force, 0.9, "N", "Radial component of solar force", "Radial force")
    tangential = scaled(force, 0.1, "N", "Tangential component of solar force", "Tangential force")
    normal = scaled(force, 0.01, "N", "Normal component of solar force", "Normal force")

    def accel(component: Quantity, label: str) -> Quantity:
        return derive_quantity(
            {'force': component, 'mass': target.mass},
            lambda x: x['force'] / x['mass'],
            "m/s²", f"{label} acceleration on asteroid", f"{label} acceleration",
        )

    overall = derive_quantity(
        {'geometric': geometric, 'optical': optical, 'sail': sail.sail_efficiency},
        lambda x: x['geometric'] * x['optical'] * x['sail'],
        "1", "Combined efficiency factors", "Overall system efficiency",
    )

    return SolarForceResult(
        radiation_pressure_force=force,
        photon_momentum_flux=calculate_photon_momentum_flux(environment),
        radial_force=radial,
        tangential_force=tangential,
        normal_force=normal,
        radial_acceleration=accel(radial, "Radial"),
        tangential_acceleration=accel(tangential, "Tangential"),
        normal_acceleration=accel(normal, "Normal"),
        geometric_efficiency=geometric,
        optical_efficiency=optical,
        overall_efficiency=overall,
    )


def calculate_orbital_element_changes(delta_v: Quantity,
                                      forces: SolarForceResult) -> OrbitalElementChanges:
    """Semi-major axis from Δv; eccentricity from the radial and tilt from the normal push."""
    from_dv = "Estimated from velocity change"
    return OrbitalElementChanges(
        semi_major_axis=scaled(delta_v, 1e8, "m", from_dv, "Semi-major axis change"),
        eccentricity=scaled(forces.radial_acceleration, 1e-6, "1",
                            "Estimated from radial acceleration", "Eccentricity change"),
        inclination=scaled(forces.normal_acceleration, 1e-8, "rad",
                           "Estimated from normal acceleration", "Inclination change"),
        argument_of_periapsis=scaled(delta_v, 1e-7, "rad", from_dv, "Argument of periapsis change"),
        longitude_of_ascending_node=scaled(forces.normal_acceleration, 1e-9, "rad",
                                           "Estimated from normal acceleration",
                                           "Longitude of ascending node change"),
        mean_anomaly=scaled(delta_v, 1e-6, "rad", from_dv, "Mean anomaly change"),
    )


def calculate_seasonal_variations(force: Quantity, environment: SolarEnvironment,
                                  mission: SolarMission) -> SeasonalVariations:
    base = force.value * mission.mission_duration.value * 1000
    variation = environment.seasonal_variation.value
    return SeasonalVariations(
        max_deflection=Quantity(base * (1 + variation), abs(base * variation * 0.5), "m",
                                "Maximum deflection at perihelion", "Maximum deflection"),
        min_deflection=Quantity(base * (1 - variation), abs(base * variation * 0.5), "m",
                                "Minimum deflection at aphelion", "Minimum deflection"),
        average_deflection=Quantity(base, abs(base * variation * 0.3), "m",
                                    "Average deflection over orbit", "Average deflection"),
    )


def _feasibility(sail: SolarSail, mission: SolarMission, power: Quantity) -> Quantity:
    score = 1.0
    if sail.sail_area.value > 10000:
        score *= 0.7
    if mission.mission_duration.value / SECONDS_PER_YEAR > 10:
        score *= 0.8
    if power.value > 5000:
        score *= 0.6
    return Quantity(score, 0.2, "1", "Mission feasibility assessment", "Feasibility score")


def _validate(method: SolarDeflectionMethod, sail: SolarSail, target: SolarTarget,
              environment: SolarEnvironment, mission: SolarMission) -> ValidityCheck:
    check = ValidityCheck(logger)

    optical = sail.reflectivity.value + sail.absorptivity.value + sail.transmissivity.value
    if abs(optical - 1.0) > 0.1:
        check.warn(f"Optical properties sum to {optical:.2f}, should be close to 1.0")

    if sail.sail_area.value > 100000:
        check.warn(f"Very large sail area ({sail.sail_area.value:.0f} m²) may be "
                   f"impractical to deploy", invalidates=True)

    if environment.solar_distance.value > 5:
        check.warn(f"Large solar distance ({environment.solar_distance.value:.1f} AU) "
                   f"reduces solar radiation pressure significantly")

    years = mission.mission_duration.value / SECONDS_PER_YEAR
    if years <= 0:
        check.warn(f"Mission duration ({years:.1f} years) must be positive",
                   invalidates=True)
    if years > sail.operational_lifetime.value / SECONDS_PER_YEAR:
        check.warn(f"Mission duration ({years:.1f} years) exceeds sail operational lifetime",
                   invalidates=True)

    if (method in (SolarDeflectionMethod.SURFACE_MODIFICATION,
                   SolarDeflectionMethod.ALBEDO_MODIFICATION)
            and target.radius.value > 1000):
        check.warn(f"Large target radius ({target.radius.value:.0f} m) makes surface "
                   f"modification challenging")

    return check


def calculate_solar_deflection(
    method: Union[SolarDeflectionMethod, str],
    sail: SolarSail,
    target: SolarTarget,
    environment: SolarEnvironment,
    mission: SolarMission,
) -> SolarDeflectionResult:
    """
    Calculate solar radiation pressure deflection.

    Args:
        method: Deflection method
        sail: Sail or mirror properties (mass also sizes the system)
        target: Target asteroid
        environment: Solar environment
        mission: Mission parameters

    Returns:
        SolarDeflectionResult
    """
    method = resolve_key(SolarDeflectionMethod, method, "solar deflection method")
    logger.debug("Solar deflection (%s): %.3g m² at %.2f AU", method.value,
                 sail.sail_area.value, environment.solar_distance.value)

    check = _validate(method, sail, target, environment, mission)

    forces = calculate_forces(method, sail, target, environment)

    total_acceleration = Quantity(
        math.sqrt(forces.radial_acceleration.value ** 2
                  + forces.tangential_acceleration.value ** 2
                  + forces.normal_acceleration.value ** 2),
        math.sqrt(forces.radial_acceleration.uncertainty ** 2
                  + forces.tangential_acceleration.uncertainty ** 2
                  + forces.normal_acceleration.uncertainty ** 2),
        "m/s²", "Total acceleration magnitude", "Total acceleration",
    )
    delta_v = derive_quantity(
        {'acceleration': total_acceleration, 'time': mission.mission_duration},
        lambda x: x['acceleration'] * x['time'],
        "m/s", "Calculated from acceleration and time", "Total velocity change",
    )
    years = mission.mission_duration.value / SECONDS_PER_YEAR
    if years > 0:
        delta_v_rate = scaled(delta_v, 1 / years, "m/s", "Velocity change per year", "Delta-V rate")
    else:
        delta_v_rate = Quantity(0.0, 0.0, "m/s", "Velocity change per year", "Delta-V rate")

    total_mass = scaled(sail.sail_mass, SYSTEM_MASS_OVERHEAD, "kg",
                        "Sail mass plus support systems", "Total system mass")
    power_value, power_sigma = METHOD_POWER[method]
    power = Quantity(power_value, power_sigma, "W",
                     f"{method.value.replace('_', ' ').capitalize()} power requirement",
                     "Power requirement")

    deflection_efficiency = scaled(delta_v, 1000 / total_mass.value, "m/kg",
                                   "Deflection per unit system mass", "Deflection efficiency")
    cost_effectiveness = scaled(delta_v, 1000 / (total_mass.value * COST_PER_KG), "m/$",
                                "Deflection per dollar spent", "Cost effectiveness")

    return SolarDeflectionResult(
        force_result=forces,
        delta_v=delta_v,
        delta_v_rate=delta_v_rate,
        orbital_element_changes=calculate_orbital_element_changes(delta_v, forces),
        required_sail_area=sail.sail_area,
        total_system_mass=total_mass,
        power_requirement=power,
        deflection_efficiency=deflection_efficiency,
        cost_effectiveness=cost_effectiveness,
        mission_feasibility=_feasibility(sail, mission, power),
        seasonal_variations=calculate_seasonal_variations(
            forces.radiation_pressure_force, environment, mission
        ),
        fuel_consumption=Quantity(0.0, 0.0, "kg", "Radiation pressure (no propellant)",
                                  "Fuel consumption"),
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        references=tuple(REFERENCES),
    )


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def create_sail(sail_type: Union[SailType, str], area: float) -> SolarSail:
    """Sail of a preset type with ±10% area and a 10 g/m² areal density."""
    spec = get_sail_specification(sail_type)
    return SolarSail(
        sail_area=relative(area, 0.1, "m²", "Specified sail area"),
        sail_mass=Quantity(area * 0.01, area * 0.002, "kg", "10 g/m² sail density"),
        reflectivity=spec.reflectivity,
        absorptivity=spec.absorptivity,
        transmissivity=spec.transmissivity,
        sail_efficiency=spec.sail_efficiency,
        deployment_time=spec.deployment_time,
        operational_lifetime=spec.operational_lifetime,
        sail_type=spec.sail_type,
    )


def create_flat_solar_sail(area: float) -> SolarSail:
    return create_sail(SailType.FLAT, area)


def create_solar_environment(distance_au: float) -> SolarEnvironment:
    return SolarEnvironment(
        solar_distance=relative(distance_au, 0.05, "AU", "Specified distance"),
        solar_constant=_SOLAR_CONSTANT,
        seasonal_variation=Quantity(0.05, 0.01, "1", "Typical seasonal variation"),
        solar_activity=_ACTIVITY,
        medium_density=_MEDIUM_DENSITY,
        drag_coefficient=_DRAG,
    )


def create_solar_target(mass: float, radius: float, albedo: float) -> SolarTarget:
    """Target whose cross-section is the disc of its radius (±20%)."""
    area = math.pi * radius ** 2
    return SolarTarget(
        mass=relative(mass, 0.2, "kg", "Target specification"),
        radius=relative(radius, 0.1, "m", "Target specification"),
        cross_sectional_area=relative(area, 0.2, "m²", "Calculated"),
        albedo=relative(albedo, 0.3, "1", "Specified albedo"),
        thermal_inertia=Quantity(50, 20, "J m⁻² K⁻¹ s⁻¹/²", "Typical thermal inertia"),
        rotation_period=Quantity(24 * 3600, 12 * 3600, "s", "Estimated rotation period"),
        obliquity=Quantity(0.1, 0.05, "rad", "Estimated obliquity"),
        surface_roughness=Quantity(0.5, 0.2, "1", "Moderate surface roughness"),
    )


def create_typical_mission(duration_years: float) -> SolarMission:
    return SolarMission(
        mission_duration=Quantity(_years(duration_years), _years(0.5), "s",
                                  f"{duration_years} year mission"),
        deployment_distance=Quantity(1000, 200, "m", "1 km deployment distance"),
        operating_distance=Quantity(500, 100, "m", "500 m operating distance"),
        orientation_accuracy=Quantity(0.01, 0.002, "rad", "±0.01 rad pointing accuracy"),
        communication_delay=Quantity(1200, 300, "s", "20 minute delay"),
        station_keeping_capability=True,
        autonomous_operation=True,
    )
