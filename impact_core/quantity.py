"""
Quantity With Uncertainty
=========================
Immutable value/uncertainty/unit record used throughout the package, plus the
database of physical constants (CODATA 2018, IAU 2012) it is seeded from.

Key principle: every derived number carries a one-sigma uncertainty and the
source it came from. A bare float never leaves a calculator.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Tuple

from .errors import InvalidUncertainty, UnknownSpecificationKey


@dataclass(frozen=True)
class Quantity:
    """
    A value with its standard (1-sigma) uncertainty and provenance.

    Attributes:
        value: Central value
        uncertainty: Standard uncertainty, must be >= 0
        unit: Unit symbol (see units.UNIT_DEFINITIONS)
        source: Where the value came from (paper, preset, calculation)
        description: Optional human-readable description
    """
    value: float
    uncertainty: float
    unit: str
    source: str = ""
    description: str = ""

    def __post_init__(self):
        if self.uncertainty < 0:
            raise InvalidUncertainty(
                f"Uncertainty must be non-negative, got {self.uncertainty} "
                f"for {self.description or self.unit}"
            )

    @property
    def relative_uncertainty(self) -> float:
        """Relative uncertainty as fraction (0 for a zero value)."""
        if self.value == 0:
            return 0.0
        return abs(self.uncertainty / self.value)

    @property
    def relative_uncertainty_percent(self) -> float:
        """Relative uncertainty as percentage."""
        return self.relative_uncertainty * 100

    @property
    def is_exact(self) -> bool:
        return self.uncertainty == 0

    def rebind(self, new_unit: str, factor: float) -> 'Quantity':
        """
        Return a copy expressed in another unit.

        Value and uncertainty are both multiplied by `factor`; source and
        description are preserved.

        Args:
            new_unit: Unit symbol of the new copy
            factor: Multiplicative factor from the current unit to new_unit

        Returns:
            New Quantity
        """
        return Quantity(
            value=self.value * factor,
            uncertainty=self.uncertainty * abs(factor),
            unit=new_unit,
            source=self.source,
            description=self.description,
        )

    # Alias kept for readability at call sites that think in units
    with_unit = rebind

    def confidence_interval(self, confidence: float = 0.95) -> Tuple[float, float]:
        """
        Normal coverage interval for the value.

        Args:
            confidence: Two-sided confidence level (0-1)

        Returns:
            (lower, upper) bounds
        """
        from scipy import stats
        k = stats.norm.ppf((1 + confidence) / 2)
        return self.value - k * self.uncertainty, self.value + k * self.uncertainty

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['relative_uncertainty'] = self.relative_uncertainty
        return d

    def __str__(self) -> str:
        if self.uncertainty == 0:
            return f"{self.value} {self.unit} (exact)"
        return f"{self.value} ± {self.uncertainty} {self.unit}"


def exact(value: float, unit: str, source: str = "", description: str = "") -> Quantity:
    """Shorthand for a Quantity with zero uncertainty."""
    return Quantity(value, 0.0, unit, source, description)


def relative(value: float, fraction: float, unit: str,
             source: str = "", description: str = "") -> Quantity:
    """Shorthand for a Quantity whose uncertainty is a fraction of its value."""
    return Quantity(value, abs(value) * fraction, unit, source, description)


# =============================================================================
# PHYSICAL CONSTANTS (CODATA 2018 / IAU 2012)
# =============================================================================

SPEED_OF_LIGHT = Quantity(
    299792458.0, 0.0, "m/s", "CODATA 2018", "Speed of light in vacuum"
)
GRAVITATIONAL_CONSTANT = Quantity(
    6.67430e-11, 1.5e-15, "m³/(kg·s²)", "CODATA 2018", "Newtonian constant of gravitation"
)
ASTRONOMICAL_UNIT = Quantity(
    149597870.7, 0.0, "km", "IAU 2012 Resolution B2", "Astronomical unit"
)
EARTH_MASS = Quantity(
    5.9722e24, 6e20, "kg", "IAU 2015 Resolution B3", "Mass of Earth"
)
EARTH_RADIUS_EQUATORIAL = Quantity(
    6378137.0, 0.0, "m", "WGS 84", "Earth equatorial radius"
)
EARTH_RADIUS_POLAR = Quantity(
    6356752.314245, 0.0, "m", "WGS 84", "Earth polar radius"
)
EARTH_RADIUS_MEAN = Quantity(
    6371008.8, 0.0, "m", "IUGG", "Earth mean radius"
)
SOLAR_MASS = Quantity(
    1.9884e30, 2e26, "kg", "IAU 2015 Resolution B3", "Mass of the Sun"
)
SOLAR_RADIUS = Quantity(
    695700.0, 0.0, "km", "IAU 2015 Resolution B3", "Nominal solar radius"
)
STEFAN_BOLTZMANN = Quantity(
    5.670374419e-8, 0.0, "W/(m²·K⁴)", "CODATA 2018", "Stefan-Boltzmann constant"
)
BOLTZMANN = Quantity(
    1.380649e-23, 0.0, "J/K", "CODATA 2018", "Boltzmann constant"
)
STANDARD_GRAVITY = Quantity(
    9.80665, 0.0, "m/s²", "CGPM 1901", "Standard acceleration of gravity"
)
STANDARD_ATMOSPHERE = Quantity(
    101325.0, 0.0, "Pa", "CGPM 1954", "Standard atmosphere"
)
ELECTRON_VOLT = Quantity(
    1.602176634e-19, 0.0, "J", "CODATA 2018", "Electron volt"
)
ATOMIC_MASS_UNIT = Quantity(
    1.66053906660e-27, 5e-37, "kg", "CODATA 2018", "Atomic mass unit"
)

# Derived
EARTH_ORBITAL_VELOCITY = Quantity(
    29.78, 0.01, "km/s", "Derived from orbital mechanics", "Mean orbital velocity of Earth"
)
EARTH_ESCAPE_VELOCITY = Quantity(
    11.18, 0.001, "km/s", "Derived from Earth mass and radius", "Escape velocity at Earth surface"
)
SOLAR_ESCAPE_VELOCITY_AT_EARTH = Quantity(
    42.1, 0.1, "km/s", "Derived from solar mass and 1 AU", "Solar escape velocity at Earth orbit"
)
MEGATON_TNT = Quantity(
    4.184e15, 0.0, "J", "Convention", "Energy of one megaton of TNT"
)

SECONDS_PER_YEAR = 365.25 * 24 * 3600

PHYSICAL_CONSTANTS: Dict[str, Quantity] = {
    'speed_of_light': SPEED_OF_LIGHT,
    'gravitational_constant': GRAVITATIONAL_CONSTANT,
    'astronomical_unit': ASTRONOMICAL_UNIT,
    'earth_mass': EARTH_MASS,
    'earth_radius_equatorial': EARTH_RADIUS_EQUATORIAL,
    'earth_radius_polar': EARTH_RADIUS_POLAR,
    'earth_radius_mean': EARTH_RADIUS_MEAN,
    'solar_mass': SOLAR_MASS,
    'solar_radius': SOLAR_RADIUS,
    'stefan_boltzmann': STEFAN_BOLTZMANN,
    'boltzmann': BOLTZMANN,
    'standard_gravity': STANDARD_GRAVITY,
    'standard_atmosphere': STANDARD_ATMOSPHERE,
    'electron_volt': ELECTRON_VOLT,
    'atomic_mass_unit': ATOMIC_MASS_UNIT,
    'earth_orbital_velocity': EARTH_ORBITAL_VELOCITY,
    'earth_escape_velocity': EARTH_ESCAPE_VELOCITY,
    'solar_escape_velocity_at_earth': SOLAR_ESCAPE_VELOCITY_AT_EARTH,
    'megaton_tnt': MEGATON_TNT,
}


def get_constant(name: str) -> Quantity:
    """
    Look up a physical constant by name.

    Raises:
        UnknownSpecificationKey: If the name is not in the database
    """
    try:
        return PHYSICAL_CONSTANTS[name]
    except KeyError:
        raise UnknownSpecificationKey(
            f"Unknown physical constant: {name}. "
            f"Available: {', '.join(sorted(PHYSICAL_CONSTANTS))}"
        ) from None
