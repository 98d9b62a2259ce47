"""
Unit Converter
==============
Registry of unit definitions grouped by physical dimension, with
dimension-checked conversion of plain values and Quantities.

Key principle: a conversion between incompatible dimensions (length to mass)
is a programming error and raises immediately.

Usage:
    from impact_core.units import convert, convert_quantity
    convert(1.0, "AU", "km")            # 149597870.7
    convert_quantity(q, "km/s")
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .errors import UnknownUnit, DimensionMismatch
from .quantity import Quantity


class Dimension(Enum):
    """Physical dimension of a unit."""
    LENGTH = "LENGTH"
    TIME = "TIME"
    MASS = "MASS"
    ENERGY = "ENERGY"
    VELOCITY = "VELOCITY"
    ACCELERATION = "ACCELERATION"
    FORCE = "FORCE"
    PRESSURE = "PRESSURE"
    TEMPERATURE = "TEMPERATURE"
    ANGLE = "ANGLE"
    DIMENSIONLESS = "DIMENSIONLESS"


@dataclass(frozen=True)
class UnitDefinition:
    """
    A unit and its factor to the base unit of its dimension.

    Attributes:
        name: Long name (e.g., 'kilometer')
        symbol: Symbol used as registry key (e.g., 'km')
        dimension: Physical dimension
        to_base: Multiply by this to get the base unit
        base_unit: Symbol of the dimension's base unit
        description: Optional note
    """
    name: str
    symbol: str
    dimension: Dimension
    to_base: float
    base_unit: str
    description: str = ""


def _defs(dimension: Dimension, base: str, entries) -> Dict[str, UnitDefinition]:
    return {
        symbol: UnitDefinition(name, symbol, dimension, factor, base, desc)
        for symbol, name, factor, desc in entries
    }


UNIT_DEFINITIONS: Dict[str, UnitDefinition] = {}

UNIT_DEFINITIONS.update(_defs(Dimension.LENGTH, "m", [
    ("m", "meter", 1.0, "SI base unit of length"),
    ("km", "kilometer", 1e3, ""),
    ("cm", "centimeter", 1e-2, ""),
    ("mm", "millimeter", 1e-3, ""),
    ("AU", "astronomical unit", 149597870700.0, "IAU 2012 Resolution B2"),
    ("ly", "light-year", 9.4607304725808e15, "Julian year at c"),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.TIME, "s", [
    ("s", "second", 1.0, "SI base unit of time"),
    ("min", "minute", 60.0, ""),
    ("h", "hour", 3600.0, ""),
    ("day", "day", 86400.0, ""),
    ("year", "Julian year", 31557600.0, "365.25 days"),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.MASS, "kg", [
    ("kg", "kilogram", 1.0, "SI base unit of mass"),
    ("g", "gram", 1e-3, ""),
    ("t", "tonne", 1e3, ""),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.ENERGY, "J", [
    ("J", "joule", 1.0, "SI unit of energy"),
    ("kJ", "kilojoule", 1e3, ""),
    ("MJ", "megajoule", 1e6, ""),
    ("GJ", "gigajoule", 1e9, ""),
    ("TJ", "terajoule", 1e12, ""),
    ("kt TNT", "kiloton TNT", 4.184e12, "TNT equivalent"),
    ("Mt TNT", "megaton TNT", 4.184e15, "TNT equivalent"),
    ("eV", "electron volt", 1.602176634e-19, "CODATA 2018"),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.VELOCITY, "m/s", [
    ("m/s", "meter per second", 1.0, ""),
    ("km/s", "kilometer per second", 1e3, ""),
    ("km/h", "kilometer per hour", 1000.0 / 3600.0, ""),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.ACCELERATION, "m/s²", [
    ("m/s²", "meter per second squared", 1.0, ""),
    ("km/s²", "kilometer per second squared", 1e3, ""),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.FORCE, "N", [
    ("N", "newton", 1.0, ""),
    ("kN", "kilonewton", 1e3, ""),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.PRESSURE, "Pa", [
    ("Pa", "pascal", 1.0, ""),
    ("kPa", "kilopascal", 1e3, ""),
    ("MPa", "megapascal", 1e6, ""),
    ("GPa", "gigapascal", 1e9, ""),
    ("atm", "standard atmosphere", 101325.0, ""),
    ("psi", "pound per square inch", 6894.757, ""),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.TEMPERATURE, "K", [
    ("K", "kelvin", 1.0, "Absolute temperature only"),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.ANGLE, "rad", [
    ("rad", "radian", 1.0, ""),
    ("deg", "degree", math.pi / 180, ""),
    ("arcmin", "arcminute", math.pi / 10800, ""),
    ("arcsec", "arcsecond", math.pi / 648000, ""),
]))

UNIT_DEFINITIONS.update(_defs(Dimension.DIMENSIONLESS, "1", [
    ("1", "dimensionless", 1.0, ""),
]))


# =============================================================================
# CONVERSION
# =============================================================================

def validate_unit(unit: str) -> UnitDefinition:
    """
    Resolve a unit symbol to its definition.

    Raises:
        UnknownUnit: If the symbol is not registered
    """
    definition = UNIT_DEFINITIONS.get(unit)
    if definition is None:
        raise UnknownUnit(f"Unknown unit: {unit}")
    return definition


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a value between two units of the same dimension.

    Args:
        value: Value in from_unit
        from_unit: Source unit symbol
        to_unit: Target unit symbol

    Returns:
        Value expressed in to_unit

    Raises:
        UnknownUnit: If either unit is not registered
        DimensionMismatch: If the units have different dimensions
    """
    from_def = validate_unit(from_unit)
    to_def = validate_unit(to_unit)

    if from_def.dimension != to_def.dimension:
        raise DimensionMismatch(
            f"Cannot convert {from_def.dimension.value} ({from_unit}) to "
            f"{to_def.dimension.value} ({to_unit}): incompatible dimensions"
        )

    return value * from_def.to_base / to_def.to_base


def get_conversion_factor(from_unit: str, to_unit: str) -> float:
    """Factor f such that value_in_to_unit = f * value_in_from_unit."""
    return convert(1.0, from_unit, to_unit)


def convert_quantity(quantity: Quantity, to_unit: str) -> Quantity:
    """
    Convert a Quantity, scaling value and uncertainty by the same factor.

    Raises:
        UnknownUnit: If either unit is not registered
        DimensionMismatch: If the units have different dimensions
    """
    factor = get_conversion_factor(quantity.unit, to_unit)
    return quantity.rebind(to_unit, factor)


def are_compatible(unit_a: str, unit_b: str) -> bool:
    """True if both units are registered and share a dimension. Never raises."""
    def_a = UNIT_DEFINITIONS.get(unit_a)
    def_b = UNIT_DEFINITIONS.get(unit_b)
    if def_a is None or def_b is None:
        return False
    return def_a.dimension == def_b.dimension


def get_units_of_type(dimension: Dimension) -> List[UnitDefinition]:
    """All registered units of one dimension."""
    return [d for d in UNIT_DEFINITIONS.values() if d.dimension == dimension]


def get_supported_units() -> List[str]:
    return list(UNIT_DEFINITIONS.keys())


def get_unit_info(unit: str) -> Optional[UnitDefinition]:
    return UNIT_DEFINITIONS.get(unit)


def format_value(value: float, unit: str, precision: int = 3) -> str:
    """
    Format a value with its unit symbol to a number of significant figures.

    Raises:
        UnknownUnit: If the unit is not registered
    """
    definition = validate_unit(unit)
    return f"{value:.{precision}g} {definition.symbol}"


def format_quantity(quantity: Quantity, precision: int = 3) -> str:
    """Format a Quantity as 'value ± uncertainty unit' with fixed precision."""
    definition = validate_unit(quantity.unit)
    if quantity.uncertainty == 0:
        return f"{quantity.value:.{precision}g} {definition.symbol} (exact)"
    return (f"{quantity.value:.{precision}g} ± {quantity.uncertainty:.{precision}g} "
            f"{definition.symbol}")


# =============================================================================
# CONVENIENCE CONVERSIONS
# =============================================================================

def meters_to_kilometers(m: float) -> float:
    return convert(m, "m", "km")


def kilometers_to_meters(km: float) -> float:
    return convert(km, "km", "m")


def meters_to_au(m: float) -> float:
    return convert(m, "m", "AU")


def au_to_meters(au: float) -> float:
    return convert(au, "AU", "m")


def au_to_kilometers(au: float) -> float:
    return convert(au, "AU", "km")


def seconds_to_years(s: float) -> float:
    return convert(s, "s", "year")


def years_to_seconds(years: float) -> float:
    return convert(years, "year", "s")


def days_to_seconds(days: float) -> float:
    return convert(days, "day", "s")


def joules_to_megatons_tnt(j: float) -> float:
    return convert(j, "J", "Mt TNT")


def megatons_tnt_to_joules(mt: float) -> float:
    return convert(mt, "Mt TNT", "J")


def joules_to_kilotons_tnt(j: float) -> float:
    return convert(j, "J", "kt TNT")


def kilotons_tnt_to_joules(kt: float) -> float:
    return convert(kt, "kt TNT", "J")


def ms_to_kms(ms: float) -> float:
    return convert(ms, "m/s", "km/s")


def kms_to_ms(kms: float) -> float:
    return convert(kms, "km/s", "m/s")


def degrees_to_radians(deg: float) -> float:
    return convert(deg, "deg", "rad")


def radians_to_degrees(rad: float) -> float:
    return convert(rad, "rad", "deg")
