"""
Blast Effects
=============
Glasstone & Dolan (1977) nuclear-effects scaling applied to impact energy:
fireball, airblast overpressure radii and thermal radiation radii.

Key principle: the impact energy is expressed as a TNT-equivalent yield W
in kilotons, and every range scales as a power of W with atmospheric and
burst-altitude corrections.

    overpressure radius  R = K * W^(1/3) km   (K = 2.2 / 1.0 / 0.7 for 1 / 5 / 10 psi)
    thermal radius       R = K * W^0.41 km    (K = 1.9 / 1.2 / 0.8 for 1st / 2nd / 3rd degree)
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .propagation import derive_quantity
from .quantity import Quantity, STEFAN_BOLTZMANN
from .records import BundleMixin, ValidityCheck, resolve_key

logger = logging.getLogger(__name__)

JOULES_PER_KILOTON = 4.184e12
SEA_LEVEL_DENSITY = 1.225        # kg/m³
SEA_LEVEL_PRESSURE = 101325.0    # Pa
WIND_SPEED_1PSI = 70.0           # m/s behind a 1 psi shock
THERMAL_FRACTION = 0.35

OVERPRESSURE_SCALING = {1: 2.2, 5: 1.0, 10: 0.7}         # psi -> K (km)
THERMAL_SCALING = {1: (1.9, 1), 2: (1.2, 4), 3: (0.8, 10)}  # degree -> (K km, cal/cm²)

REFERENCES = [
    "Glasstone, S. & Dolan, P.J. (1977). The Effects of Nuclear Weapons",
    "Collins, G.S. et al. (2005). Earth Impact Effects Program",
]

LIMITATIONS = [
    "Scaling laws derived from nuclear weapons tests",
    "Assumes spherical symmetry and homogeneous atmosphere",
    "Does not account for terrain effects or meteorological conditions",
    "Thermal effects assume clear atmospheric conditions",
    "Overpressure scaling assumes ideal gas behavior",
]


class AtmosphereType(Enum):
    STANDARD = "standard"
    HIGH_ALTITUDE = "high_altitude"


@dataclass(frozen=True)
class AtmosphericConditions:
    """
    Ambient atmosphere at the burst.

    Attributes:
        pressure: Pa
        density: kg/m³
        temperature: K
        humidity: Relative humidity 0-1
        description: Free text
    """
    pressure: Quantity
    density: Quantity
    temperature: Quantity
    humidity: Quantity
    description: str = ""


ATMOSPHERES: Dict[AtmosphereType, AtmosphericConditions] = {
    AtmosphereType.STANDARD: AtmosphericConditions(
        pressure=Quantity(101325, 0, "Pa", "ISO 2533", "Standard atmospheric pressure"),
        density=Quantity(1.225, 0.01, "kg/m³", "ISO 2533", "Standard atmospheric density at sea level"),
        temperature=Quantity(288.15, 0, "K", "ISO 2533", "Standard atmospheric temperature"),
        humidity=Quantity(0.0, 0.0, "1", "Assumed", "Dry air"),
        description="Standard atmosphere (sea level, 15°C, dry air)",
    ),
    AtmosphereType.HIGH_ALTITUDE: AtmosphericConditions(
        pressure=Quantity(26500, 1000, "Pa", "US Standard Atmosphere", "Pressure at 10 km altitude"),
        density=Quantity(0.414, 0.02, "kg/m³", "US Standard Atmosphere", "Density at 10 km altitude"),
        temperature=Quantity(223.15, 2, "K", "US Standard Atmosphere", "Temperature at 10 km altitude"),
        humidity=Quantity(0.0, 0.0, "1", "Assumed", "Dry air at altitude"),
        description="High altitude atmosphere (10 km, typical airburst altitude)",
    ),
}


def get_atmospheric_conditions(atmosphere: Union[AtmosphereType, str]) -> AtmosphericConditions:
    """Preset atmosphere. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(AtmosphereType, atmosphere, "atmospheric condition")
    return ATMOSPHERES[key]


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class FireballEffects(BundleMixin):
    radius: Quantity
    duration: Quantity
    temperature: Quantity
    luminosity: Quantity


@dataclass(frozen=True)
class AirblastEffects(BundleMixin):
    """Overpressure radii (m); dynamic pressure and arrival time at the 1 psi radius."""
    overpressure_1psi: Quantity
    overpressure_5psi: Quantity
    overpressure_10psi: Quantity
    dynamic_pressure: Quantity
    arrival_time: Quantity


@dataclass(frozen=True)
class ThermalEffects(BundleMixin):
    """Burn radii (m); fluence at the 1st degree radius."""
    radius_first_degree: Quantity
    radius_second_degree: Quantity
    radius_third_degree: Quantity
    thermal_fluence: Quantity
    pulse_width: Quantity


@dataclass(frozen=True)
class BlastResult(BundleMixin):
    tnt_equivalent: Quantity
    fireball: FireballEffects
    airblast: AirblastEffects
    thermal: ThermalEffects
    atmospheric_conditions: str
    scaling_method: str = "Glasstone & Dolan (1977) nuclear effects scaling"
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()


# =============================================================================
# CALCULATIONS
# =============================================================================

def calculate_tnt_equivalent(energy: Quantity) -> Quantity:
    """W = E / 4.184e12 J/kt."""
    return derive_quantity(
        {'energy': energy},
        lambda x: x['energy'] / JOULES_PER_KILOTON,
        "kt TNT", "Calculated from impact energy", "TNT equivalent yield",
    )


def calculate_fireball(tnt: Quantity, burst_altitude: Quantity,
                       atmosphere: AtmosphericConditions) -> FireballEffects:
    inputs = {'yield': tnt, 'density': atmosphere.density}
    if burst_altitude.value > 0:
        inputs['altitude'] = burst_altitude

    def radius_model(x):
        r = 0.28 * x['yield'] ** 0.4 * 1000
        r *= (SEA_LEVEL_DENSITY / x['density']) ** 0.2
        if x.get('altitude', 0) > 0:
            r *= (1 + x['altitude'] / 10000) ** 0.1
        return r

    radius = derive_quantity(inputs, radius_model, "m",
                             "Glasstone & Dolan (1977) scaling", "Fireball radius")
    duration = derive_quantity(
        {'yield': tnt}, lambda x: 0.44 * x['yield'] ** 0.4,
        "s", "Glasstone & Dolan (1977) scaling", "Fireball duration",
    )
    temperature = Quantity(3500, 500, "K", "Glasstone & Dolan (1977)", "Peak fireball temperature")
    luminosity = derive_quantity(
        {'radius': radius, 'temperature': temperature, 'sigma': STEFAN_BOLTZMANN},
        lambda x: x['sigma'] * 4 * math.pi * x['radius'] ** 2 * x['temperature'] ** 4,
        "W", "Calculated from Stefan-Boltzmann law", "Fireball luminosity",
    )
    return FireballEffects(radius=radius, duration=duration, temperature=temperature,
                           luminosity=luminosity)


def calculate_overpressure_radius(tnt: Quantity, burst_altitude: Quantity,
                                  atmosphere: AtmosphericConditions, psi: int) -> Quantity:
    """Range at which the peak overpressure falls to `psi` (1, 5 or 10)."""
    k = OVERPRESSURE_SCALING[psi]
    altitude_correction = 1.0
    if burst_altitude.value > 0:
        altitude_correction = 1 + 0.1 * math.log(1 + burst_altitude.value / 1000)

    return derive_quantity(
        {'yield': tnt, 'pressure': atmosphere.pressure},
        lambda x: (k * x['yield'] ** (1 / 3) * 1000
                   * (SEA_LEVEL_PRESSURE / x['pressure']) ** (1 / 3)
                   * altitude_correction),
        "m", "Glasstone & Dolan (1977) scaling", f"Overpressure radius for {psi} psi",
    )


def calculate_airblast(tnt: Quantity, burst_altitude: Quantity,
                       atmosphere: AtmosphericConditions) -> AirblastEffects:
    radii = {psi: calculate_overpressure_radius(tnt, burst_altitude, atmosphere, psi)
             for psi in OVERPRESSURE_SCALING}

    dynamic_pressure = derive_quantity(
        {'density': atmosphere.density},
        lambda x: 0.5 * x['density'] * WIND_SPEED_1PSI ** 2,
        "Pa", "Calculated from shock wave theory", "Dynamic pressure at 1 psi overpressure radius",
    )
    # Shock runs ahead of sound early on; 1.2 c is the average front speed
    arrival_time = derive_quantity(
        {'radius': radii[1], 'temperature': atmosphere.temperature},
        lambda x: x['radius'] / (1.2 * math.sqrt(1.4 * 287 * x['temperature'])),
        "s", "Calculated from blast wave propagation", "Arrival time at 1 psi overpressure radius",
    )
    return AirblastEffects(
        overpressure_1psi=radii[1],
        overpressure_5psi=radii[5],
        overpressure_10psi=radii[10],
        dynamic_pressure=dynamic_pressure,
        arrival_time=arrival_time,
    )


def calculate_thermal_radius(tnt: Quantity, burst_altitude: Quantity,
                             atmosphere: AtmosphericConditions, degree: int) -> Quantity:
    k, fluence = THERMAL_SCALING[degree]
    return derive_quantity(
        {'yield': tnt, 'humidity': atmosphere.humidity},
        lambda x: (k * x['yield'] ** 0.41 * 1000
                   * math.sqrt(math.exp(-0.1 * x['humidity'] - burst_altitude.value / 50000))),
        "m", "Glasstone & Dolan (1977) thermal scaling",
        f"Thermal radiation radius for {fluence} cal/cm² fluence",
    )


def calculate_thermal(tnt: Quantity, burst_altitude: Quantity,
                      atmosphere: AtmosphericConditions) -> ThermalEffects:
    radii = {d: calculate_thermal_radius(tnt, burst_altitude, atmosphere, d)
             for d in THERMAL_SCALING}

    fluence = derive_quantity(
        {'yield': tnt, 'radius': radii[1]},
        lambda x: (x['yield'] * JOULES_PER_KILOTON * THERMAL_FRACTION
                   / (4 * math.pi * x['radius'] ** 2)),
        "J/m²", "Calculated from thermal energy distribution",
        "Thermal fluence at 1st degree burn radius",
    )
    pulse_width = derive_quantity(
        {'yield': tnt}, lambda x: max(0.2, 0.44 * x['yield'] ** 0.44),
        "s", "Glasstone & Dolan (1977) scaling", "Thermal pulse width",
    )
    return ThermalEffects(
        radius_first_degree=radii[1],
        radius_second_degree=radii[2],
        radius_third_degree=radii[3],
        thermal_fluence=fluence,
        pulse_width=pulse_width,
    )


def _validate(tnt: Quantity, burst_altitude: Quantity) -> ValidityCheck:
    check = ValidityCheck(logger)

    if tnt.value < 0.001:
        check.warn(f"TNT equivalent ({tnt.value:.6f} kt) is below validated range (>0.001 kt)",
                   invalidates=True)
    if tnt.value > 20000:
        check.warn(f"TNT equivalent ({tnt.value:.0f} kt) is above validated range (<20,000 kt)",
                   invalidates=True)
    if burst_altitude.value > 50000:
        check.warn(f"Burst altitude ({burst_altitude.value:.0f} m) is very high - atmospheric "
                   f"effects may be underestimated")

    return check


def calculate_blast_effects(
    energy: Quantity,
    burst_altitude: Optional[Quantity] = None,
    atmosphere: Union[AtmosphericConditions, AtmosphereType, str] = AtmosphereType.STANDARD,
) -> BlastResult:
    """
    Fireball, airblast and thermal effects of an impact.

    Args:
        energy: Impact energy (J)
        burst_altitude: Height of burst (m), 0 or None for a surface burst
        atmosphere: Conditions or preset key

    Returns:
        BlastResult
    """
    if burst_altitude is None:
        burst_altitude = Quantity(0.0, 0.0, "m", "Surface burst")
    if not isinstance(atmosphere, AtmosphericConditions):
        atmosphere = get_atmospheric_conditions(atmosphere)

    tnt = calculate_tnt_equivalent(energy)
    logger.debug("Blast effects: %.3g kt TNT at %.0f m", tnt.value, burst_altitude.value)

    check = _validate(tnt, burst_altitude)

    return BlastResult(
        tnt_equivalent=tnt,
        fireball=calculate_fireball(tnt, burst_altitude, atmosphere),
        airblast=calculate_airblast(tnt, burst_altitude, atmosphere),
        thermal=calculate_thermal(tnt, burst_altitude, atmosphere),
        atmospheric_conditions=atmosphere.description,
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        limitations=tuple(LIMITATIONS),
        references=tuple(REFERENCES),
    )


def validate_against_known_events() -> List[Dict]:
    """Compare the 1 psi radius with the observed damage radii of Chelyabinsk and Tunguska."""
    known = [
        {
            'name': "Chelyabinsk (2013)",
            'energy': Quantity(5e14, 1e14, "J", "Brown et al. (2013)", "Estimated impact energy"),
            'altitude': Quantity(23000, 2000, "m", "Brown et al. (2013)", "Airburst altitude"),
            'observed': {'energy': 5e14, 'blast_radius': 100000.0, 'thermal_radius': 50000.0},
        },
        {
            'name': "Tunguska (1908)",
            'energy': Quantity(1.2e16, 5e15, "J", "Boslough & Crawford (2008)",
                               "Estimated impact energy"),
            'altitude': Quantity(8000, 2000, "m", "Boslough & Crawford (2008)",
                                 "Estimated airburst altitude"),
            'observed': {'energy': 1.2e16, 'blast_radius': 2000000.0, 'thermal_radius': 500000.0},
        },
    ]

    comparisons = []
    for event in known:
        calculated = calculate_blast_effects(event['energy'], event['altitude'],
                                             AtmosphereType.HIGH_ALTITUDE)
        ratio = calculated.airblast.overpressure_1psi.value / event['observed']['blast_radius']
        if 0.5 < ratio < 2.0:
            agreement = "Good"
        elif 0.2 < ratio < 5.0:
            agreement = "Fair"
        else:
            agreement = "Poor"
        comparisons.append({
            'name': event['name'],
            'observed': event['observed'],
            'calculated': calculated,
            'agreement': agreement,
        })
    return comparisons
