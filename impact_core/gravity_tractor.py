"""
Gravity Tractor Deflection
==========================
Slow towing of an asteroid by the mutual gravity of a hovering spacecraft
(Lu & Love 2005, Wie 2008).

The spacecraft holds station at an operating distance from the asteroid's
centre. The gravitational pull F = G m M / r² accelerates the asteroid for
the whole mission; the spacecraft's thrusters only cancel the pull on
itself.

Propulsion presets: ion, chemical, nuclear (electric), solar_sail.
A solar sail burns no propellant, so its fuel consumption is exactly zero.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .propagation import derive_quantity
from .quantity import (
    Quantity, relative, GRAVITATIONAL_CONSTANT, SECONDS_PER_YEAR, SPEED_OF_LIGHT,
    STANDARD_GRAVITY,
)
from .records import (
    BundleMixin, OrbitalElementChanges, ValidityCheck, resolve_key, scaled, with_methods,
)

logger = logging.getLogger(__name__)

G0 = STANDARD_GRAVITY.value
SOLAR_CONSTANT_1AU = 1361.0       # W/m²
TRACTOR_SAIL_AREA = 1000.0        # m²
TRACTOR_SAIL_EFFICIENCY = 0.9
PROPULSION_EFFICIENCY = 0.5
STATION_KEEPING_DUTY = 0.1

REFERENCES = [
    "Lu, E.T. & Love, S.G. (2005). Gravitational tractor for towing asteroids",
    "Wie, B. (2008). Dynamics and Control of Gravity Tractor Spacecraft",
    "Mazanek, D.D. et al. (2015). Asteroid Redirect Mission concept development summary",
    "Scheeres, D.J. (2012). Orbital mechanics about asteroids and comets",
]


class PropulsionType(Enum):
    ION = "ion"
    CHEMICAL = "chemical"
    NUCLEAR = "nuclear"
    SOLAR_SAIL = "solar_sail"


class OperatingPosition(Enum):
    LEADING = "leading"
    TRAILING = "trailing"
    ABOVE = "above"
    BELOW = "below"


class CoordinateSystem(Enum):
    ASTEROID_FIXED = "asteroid_fixed"
    INERTIAL = "inertial"
    ORBITAL = "orbital"


# =============================================================================
# SPECIFICATIONS
# =============================================================================

@with_methods
@dataclass(frozen=True)
class PropulsionSpecification:
    """Propulsion-dependent part of a spacecraft specification."""
    thrust_power: Quantity
    specific_impulse: Quantity
    operational_lifetime: Quantity
    propulsion: PropulsionType


@with_methods
@dataclass(frozen=True)
class TractorSpacecraft:
    """
    Gravity tractor spacecraft.

    Attributes:
        mass: Total spacecraft mass (kg)
        thrust_power: Available thrust power (W)
        specific_impulse: Isp (s), infinite for a solar sail
        fuel_mass: Available propellant (kg)
        dry_mass: Mass without propellant (kg)
        propulsion: Propulsion type
        operational_lifetime: Mission duration capability (s)
    """
    mass: Quantity
    thrust_power: Quantity
    specific_impulse: Quantity
    fuel_mass: Quantity
    dry_mass: Quantity
    propulsion: PropulsionType
    operational_lifetime: Quantity


@with_methods
@dataclass(frozen=True)
class TractorTarget:
    """
    Target asteroid for a gravity tractor.

    Attributes:
        mass: kg
        radius: m
        density: kg/m³
        rotation_period: s
        obliquity: Axial tilt (rad)
        surface_gravity: m/s²
        escape_velocity: m/s
    """
    mass: Quantity
    radius: Quantity
    density: Quantity
    rotation_period: Quantity
    obliquity: Quantity
    surface_gravity: Quantity
    escape_velocity: Quantity


@with_methods
@dataclass(frozen=True)
class TractorGeometry:
    """
    Station-keeping geometry.

    Attributes:
        operating_distance: Distance from the asteroid centre (m)
        station_keeping_altitude: Altitude above the surface (m)
        approach_angle: Angle relative to the velocity vector (rad)
        position: Where the spacecraft hovers
        coordinate_system: Frame the geometry is expressed in
    """
    operating_distance: Quantity
    station_keeping_altitude: Quantity
    approach_angle: Quantity
    position: OperatingPosition = OperatingPosition.LEADING
    coordinate_system: CoordinateSystem = CoordinateSystem.ASTEROID_FIXED


@with_methods
@dataclass(frozen=True)
class LaunchWindow:
    earliest: date
    latest: date
    duration: Quantity


@with_methods
@dataclass(frozen=True)
class TractorMission:
    """
    Mission parameters.

    Attributes:
        mission_duration: Towing time (s)
        operating_efficiency: Fraction of the time the tractor is effective
        station_keeping_delta_v: Station-keeping Δv budget (m/s)
        communication_delay: One-way light time (s)
        solar_distance: Heliocentric distance (AU)
        launch_window: Launch opportunity
    """
    mission_duration: Quantity
    operating_efficiency: Quantity
    station_keeping_delta_v: Quantity
    communication_delay: Quantity
    solar_distance: Quantity
    launch_window: Optional[LaunchWindow] = None


def _years(n: float) -> float:
    return n * SECONDS_PER_YEAR


PROPULSION_SPECIFICATIONS: Dict[PropulsionType, PropulsionSpecification] = {
    PropulsionType.ION: PropulsionSpecification(
        thrust_power=Quantity(10000, 2000, "W", "Typical ion propulsion power"),
        specific_impulse=Quantity(3000, 500, "s", "Ion propulsion Isp"),
        operational_lifetime=Quantity(_years(10), _years(2), "s", "10 year mission"),
        propulsion=PropulsionType.ION,
    ),
    PropulsionType.CHEMICAL: PropulsionSpecification(
        thrust_power=Quantity(50000, 10000, "W", "Chemical propulsion power"),
        specific_impulse=Quantity(450, 50, "s", "Chemical propulsion Isp"),
        operational_lifetime=Quantity(_years(2), _years(0.5), "s", "2 year mission"),
        propulsion=PropulsionType.CHEMICAL,
    ),
    PropulsionType.NUCLEAR: PropulsionSpecification(
        thrust_power=Quantity(100000, 20000, "W", "Nuclear electric propulsion power"),
        specific_impulse=Quantity(5000, 1000, "s", "Nuclear electric Isp"),
        operational_lifetime=Quantity(_years(15), _years(3), "s", "15 year mission"),
        propulsion=PropulsionType.NUCLEAR,
    ),
    PropulsionType.SOLAR_SAIL: PropulsionSpecification(
        thrust_power=Quantity(0, 0, "W", "Solar sail (no power required)"),
        specific_impulse=Quantity(math.inf, 0, "s", "Solar sail (no propellant)"),
        operational_lifetime=Quantity(_years(20), _years(5), "s", "20 year mission"),
        propulsion=PropulsionType.SOLAR_SAIL,
    ),
}


def get_propulsion_specification(propulsion: Union[PropulsionType, str]) -> PropulsionSpecification:
    """Preset propulsion. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(PropulsionType, propulsion, "propulsion type")
    return PROPULSION_SPECIFICATIONS[key]


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class ForceComponents(BundleMixin):
    radial: Quantity
    tangential: Quantity
    normal: Quantity


@dataclass(frozen=True)
class TractorForceResult(BundleMixin):
    """Forces acting during station keeping."""
    gravitational_force: Quantity
    thrust_force: Quantity
    net_force: Quantity
    force_direction: ForceComponents
    acceleration_on_asteroid: Quantity
    equivalent_mass_ratio: Quantity


@dataclass(frozen=True)
class StationKeeping(BundleMixin):
    delta_v_per_year: Quantity
    fuel_per_year: Quantity
    thrust_duty_cycle: Quantity


@dataclass(frozen=True)
class GravityTractorResult(BundleMixin):
    """
    Result of a gravity tractor calculation.

    Attributes:
        force_result: Forces and asteroid acceleration
        delta_v: Total asteroid velocity change (m/s)
        delta_v_rate: Velocity change per year (m/s)
        orbital_element_changes: First-order element changes
        fuel_consumption: Propellant burnt over the mission (kg)
        power_requirement: Thrust power (W)
        mission_efficiency: Fuel utilization
        optimal_operating_distance: Closed-form optimum distance (m)
        station_keeping_requirements: Δv, fuel and duty cycle for hovering
        minimum_mission_duration: s
        maximum_deflection: Deflection at Earth encounter (m)
        cost_effectiveness: Deflection per spacecraft mass (m/kg)
    """
    force_result: TractorForceResult
    delta_v: Quantity
    delta_v_rate: Quantity
    orbital_element_changes: OrbitalElementChanges
    fuel_consumption: Quantity
    power_requirement: Quantity
    mission_efficiency: Quantity
    optimal_operating_distance: Quantity
    station_keeping_requirements: StationKeeping
    minimum_mission_duration: Quantity
    maximum_deflection: Quantity
    cost_effectiveness: Quantity
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()


# =============================================================================
# PHYSICS
# =============================================================================

def calculate_optimal_operating_distance(spacecraft: TractorSpacecraft,
                                         target: TractorTarget) -> Quantity:
    """3 R (1 + (m / M)^0.2): a weak mass-ratio correction to three radii."""
    return derive_quantity(
        {'radius': target.radius, 'mass': target.mass, 'spacecraft_mass': spacecraft.mass},
        lambda x: 3 * x['radius'] * (1 + (x['spacecraft_mass'] / x['mass']) ** 0.2),
        "m", "Optimized for force vs station keeping balance", "Optimal operating distance",
    )


def calculate_gravitational_force(spacecraft_mass: Quantity, asteroid_mass: Quantity,
                                  distance: Quantity) -> Quantity:
    """F = G m1 m2 / r², including the uncertainty on G."""
    return derive_quantity(
        {'G': GRAVITATIONAL_CONSTANT, 'm1': spacecraft_mass, 'm2': asteroid_mass, 'r': distance},
        lambda x: x['G'] * x['m1'] * x['m2'] / x['r'] ** 2,
        "N", "Calculated from Newton's law of gravitation", "Gravitational force",
    )


def calculate_thrust_force(spacecraft: TractorSpacecraft) -> Quantity:
    """Thrust 2 eta P / (Isp g0), or the fixed radiation-pressure thrust of a sail."""
    is_sail = spacecraft.propulsion == PropulsionType.SOLAR_SAIL

    def thrust(x):
        if is_sail:
            return (2 * SOLAR_CONSTANT_1AU * TRACTOR_SAIL_AREA * TRACTOR_SAIL_EFFICIENCY
                    / SPEED_OF_LIGHT.value)
        return 2 * PROPULSION_EFFICIENCY * x['power'] / (x['isp'] * G0)

    return derive_quantity(
        {'power': spacecraft.thrust_power, 'isp': spacecraft.specific_impulse},
        thrust, "N", "Calculated from propulsion system parameters", "Thrust force",
    )


def calculate_forces(spacecraft: TractorSpacecraft, target: TractorTarget,
                     geometry: TractorGeometry) -> TractorForceResult:
    gravitational = calculate_gravitational_force(
        spacecraft.mass, target.mass, geometry.operating_distance
    )
    thrust = calculate_thrust_force(spacecraft)

    # Force is mostly radial; ~10% tangential from orbital motion, ~1% normal
    components = ForceComponents(
        radial=gravitational,
        tangential=scaled(gravitational, 0.1, "N", "Tangential component from orbital motion",
                          "Tangential force"),
        normal=scaled(gravitational, 0.01, "N", "Normal component from geometry",
                      "Normal force"),
    )

    acceleration = derive_quantity(
        {'force': gravitational, 'mass': target.mass},
        lambda x: x['force'] / x['mass'],
        "m/s²", "Gravitational acceleration from spacecraft", "Acceleration on asteroid",
    )
    mass_ratio = derive_quantity(
        {'spacecraft_mass': spacecraft.mass, 'mass': target.mass},
        lambda x: x['spacecraft_mass'] / x['mass'],
        "1", "Spacecraft to asteroid mass ratio", "Equivalent mass ratio",
    )

    return TractorForceResult(
        gravitational_force=gravitational,
        thrust_force=thrust,
        net_force=gravitational,
        force_direction=components,
        acceleration_on_asteroid=acceleration,
        equivalent_mass_ratio=mass_ratio,
    )


def calculate_orbital_element_changes(delta_v: Quantity) -> OrbitalElementChanges:
    """Rough first-order scaling: 1 m/s of Δv moves a by ~100,000 km."""
    src = "Estimated from velocity change"
    return OrbitalElementChanges(
        semi_major_axis=scaled(delta_v, 1e8, "m", src, "Semi-major axis change"),
        eccentricity=scaled(delta_v, 1e-6, "1", src, "Eccentricity change"),
        inclination=scaled(delta_v, 1e-8, "rad", src, "Inclination change"),
        argument_of_periapsis=scaled(delta_v, 1e-7, "rad", src, "Argument of periapsis change"),
        longitude_of_ascending_node=scaled(delta_v, 1e-8, "rad", src,
                                           "Longitude of ascending node change"),
        mean_anomaly=scaled(delta_v, 1e-6, "rad", src, "Mean anomaly change"),
    )


def calculate_station_keeping(spacecraft: TractorSpacecraft, target: TractorTarget,
                              geometry: TractorGeometry) -> StationKeeping:
    """
    Station-keeping budget.

    Perturbations are taken as 10% of the local gravity, corrected at 1%
    efficiency over a year.
    """
    delta_v_per_year = derive_quantity(
        {'surface_gravity': target.surface_gravity, 'distance': geometry.operating_distance,
         'radius': target.radius},
        lambda x: (x['surface_gravity'] * (x['radius'] / x['distance']) ** 2
                   * 0.1 * SECONDS_PER_YEAR * 0.01),
        "m/s", "Station keeping velocity requirement per year", "Station keeping ΔV per year",
    )

    fuel_per_year = derive_quantity(
        {'delta_v': delta_v_per_year, 'mass': spacecraft.mass, 'isp': spacecraft.specific_impulse},
        lambda x: x['delta_v'] * x['mass'] / (x['isp'] * G0),
        "kg", "Fuel required for station keeping per year", "Fuel per year",
    )

    duty_cycle = Quantity(STATION_KEEPING_DUTY, 0.02, "1", "Fraction of time spent thrusting",
                          "Thrust duty cycle")

    return StationKeeping(delta_v_per_year, fuel_per_year, duty_cycle)


def _validate(spacecraft: TractorSpacecraft, target: TractorTarget,
              geometry: TractorGeometry, mission: TractorMission) -> ValidityCheck:
    check = ValidityCheck(logger)

    mass_ratio = spacecraft.mass.value / target.mass.value
    if mass_ratio < 1e-7:
        check.warn(f"Very small spacecraft-to-asteroid mass ratio ({mass_ratio:.2e}) "
                   f"may be ineffective")
    if mass_ratio > 1e-6:
        check.warn(f"Large spacecraft-to-asteroid mass ratio ({mass_ratio:.2e}) "
                   f"- consider other deflection methods")

    distance = geometry.operating_distance.value
    if distance < target.radius.value * 2:
        check.warn(f"Operating distance ({distance:.0f}m) is very close to asteroid surface")
    if distance > target.radius.value * 20:
        check.warn(f"Large operating distance ({distance:.0f}m) reduces gravitational "
                   f"force significantly")

    years = mission.mission_duration.value / SECONDS_PER_YEAR
    if years <= 0:
        check.warn(f"Mission duration ({years:.1f} years) must be positive",
                   invalidates=True)
    elif years < 1:
        check.warn(f"Short mission duration ({years:.1f} years) may not provide "
                   f"sufficient deflection")
    if years > 20:
        check.warn(f"Very long mission duration ({years:.1f} years) may exceed "
                   f"spacecraft lifetime", invalidates=True)

    if spacecraft.fuel_mass.value < spacecraft.dry_mass.value * 0.1:
        check.warn("Low fuel mass ratio may limit mission effectiveness")

    if spacecraft.propulsion == PropulsionType.CHEMICAL and years > 3:
        check.warn("Chemical propulsion may not be suitable for missions longer than 3 years")

    return check


def calculate_gravity_tractor_deflection(
    spacecraft: TractorSpacecraft,
    target: TractorTarget,
    geometry: TractorGeometry,
    mission: TractorMission,
) -> GravityTractorResult:
    """
    Calculate gravity tractor deflection effectiveness.

    The force is evaluated at the geometry's operating distance. The
    closed-form optimum distance is reported alongside for comparison.

    Args:
        spacecraft: Tractor spacecraft
        target: Target asteroid
        geometry: Station-keeping geometry
        mission: Mission parameters

    Returns:
        GravityTractorResult
    """
    logger.debug("Gravity tractor: %.3g kg spacecraft at %.3g m from %.3g kg target",
                 spacecraft.mass.value, geometry.operating_distance.value, target.mass.value)

    check = _validate(spacecraft, target, geometry, mission)

    optimal_distance = calculate_optimal_operating_distance(spacecraft, target)
    forces = calculate_forces(spacecraft, target, geometry)

    delta_v = derive_quantity(
        {'acceleration': forces.acceleration_on_asteroid, 'time': mission.mission_duration,
         'efficiency': mission.operating_efficiency},
        lambda x: x['acceleration'] * x['time'] * x['efficiency'],
        "m/s", "Calculated from acceleration and time", "Total velocity change",
    )
    years = mission.mission_duration.value / SECONDS_PER_YEAR
    if years > 0:
        delta_v_rate = scaled(delta_v, 1 / years, "m/s", "Velocity change per year", "Delta-V rate")
    else:
        delta_v_rate = Quantity(0.0, 0.0, "m/s", "Velocity change per year", "Delta-V rate")

    orbital = calculate_orbital_element_changes(delta_v)

    if spacecraft.propulsion == PropulsionType.SOLAR_SAIL:
        fuel = Quantity(0.0, 0.0, "kg", "Solar sail (no propellant)", "Fuel consumption")
    else:
        # Mass flow thrust / (Isp g0) at the station-keeping duty cycle
        fuel = derive_quantity(
            {'thrust': forces.thrust_force, 'isp': spacecraft.specific_impulse,
             'time': mission.mission_duration},
            lambda x: x['thrust'] / (x['isp'] * G0) * x['time'] * STATION_KEEPING_DUTY,
            "kg", "Calculated from thrust and specific impulse", "Fuel consumption",
        )

    efficiency = Quantity(
        min(1.0, spacecraft.fuel_mass.value / (fuel.value + spacecraft.dry_mass.value)),
        0.1, "1", "Fuel utilization efficiency", "Mission efficiency",
    )

    station_keeping = calculate_station_keeping(spacecraft, target, geometry)

    minimum_duration = Quantity(SECONDS_PER_YEAR, 30 * 86400, "s",
                                "Minimum time for effective deflection", "Minimum mission duration")
    time_to_encounter = Quantity(_years(10), _years(2), "s", "Time to Earth encounter")
    maximum_deflection = derive_quantity(
        {'delta_v': delta_v, 'time_to_encounter': time_to_encounter},
        lambda x: x['delta_v'] * x['time_to_encounter'] * 0.001,
        "m", "Maximum deflection at Earth encounter", "Maximum deflection",
    )
    cost_effectiveness = derive_quantity(
        {'deflection': maximum_deflection, 'mass': spacecraft.mass},
        lambda x: x['deflection'] / x['mass'],
        "m/kg", "Deflection per unit spacecraft mass", "Cost effectiveness",
    )

    return GravityTractorResult(
        force_result=forces,
        delta_v=delta_v,
        delta_v_rate=delta_v_rate,
        orbital_element_changes=orbital,
        fuel_consumption=fuel,
        power_requirement=spacecraft.thrust_power,
        mission_efficiency=efficiency,
        optimal_operating_distance=optimal_distance,
        station_keeping_requirements=station_keeping,
        minimum_mission_duration=minimum_duration,
        maximum_deflection=maximum_deflection,
        cost_effectiveness=cost_effectiveness,
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        references=tuple(REFERENCES),
    )


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def create_target_from_basic_properties(mass: float, radius: float,
                                        density: Optional[float] = None) -> TractorTarget:
    """
    Target from mass and radius.

    Density defaults to mass over the spherical volume. Surface gravity and
    escape velocity are derived with 20% uncertainty.
    """
    if density is None:
        density = mass / ((4 / 3) * math.pi * radius ** 3)
    g_const = GRAVITATIONAL_CONSTANT.value
    surface_gravity = g_const * mass / radius ** 2
    escape_velocity = math.sqrt(2 * g_const * mass / radius)

    return TractorTarget(
        mass=relative(mass, 0.2, "kg", "Target specification"),
        radius=relative(radius, 0.1, "m", "Target specification"),
        density=relative(density, 0.3, "kg/m³", "Calculated or specified"),
        rotation_period=Quantity(24 * 3600, 12 * 3600, "s", "Estimated rotation period"),
        obliquity=Quantity(0.1, 0.05, "rad", "Estimated obliquity"),
        surface_gravity=relative(surface_gravity, 0.2, "m/s²", "Calculated"),
        escape_velocity=relative(escape_velocity, 0.2, "m/s", "Calculated"),
    )


def create_spacecraft(propulsion: Union[PropulsionType, str], mass: float) -> TractorSpacecraft:
    """Spacecraft of the given propulsion with a 30% fuel / 70% dry split."""
    spec = get_propulsion_specification(propulsion)
    return TractorSpacecraft(
        mass=relative(mass, 0.1, "kg", "Spacecraft specification"),
        thrust_power=spec.thrust_power,
        specific_impulse=spec.specific_impulse,
        fuel_mass=Quantity(mass * 0.3, mass * 0.05, "kg", "30% fuel fraction"),
        dry_mass=Quantity(mass * 0.7, mass * 0.05, "kg", "70% dry mass"),
        propulsion=spec.propulsion,
        operational_lifetime=spec.operational_lifetime,
    )


def create_ion_spacecraft(mass: float) -> TractorSpacecraft:
    return create_spacecraft(PropulsionType.ION, mass)


def create_optimal_geometry(target_radius: float) -> TractorGeometry:
    """Hover at three radii, leading the asteroid."""
    return TractorGeometry(
        operating_distance=Quantity(target_radius * 3, target_radius * 0.5, "m", "3 radii distance"),
        station_keeping_altitude=Quantity(target_radius * 2, target_radius * 0.3, "m",
                                          "2 radii altitude"),
        approach_angle=Quantity(0.0, 0.1, "rad", "Optimal approach angle"),
        position=OperatingPosition.LEADING,
        coordinate_system=CoordinateSystem.ASTEROID_FIXED,
    )


def create_typical_mission(duration_years: float) -> TractorMission:
    return TractorMission(
        mission_duration=Quantity(_years(duration_years), _years(0.5), "s",
                                  f"{duration_years} year mission"),
        operating_efficiency=Quantity(0.8, 0.1, "1", "80% efficiency"),
        station_keeping_delta_v=Quantity(100, 20, "m/s", "Station keeping budget"),
        communication_delay=Quantity(1200, 300, "s", "20 minute delay"),
        solar_distance=Quantity(1.5, 0.5, "AU", "1.5 AU from Sun"),
        launch_window=LaunchWindow(
            earliest=date(2030, 1, 1),
            latest=date(2035, 12, 31),
            duration=Quantity(_years(2), _years(0.5), "s", "2 year window"),
        ),
    )
