"""
Specification and Result Records
================================
Shared plumbing for the calculators: copy-with-override methods for frozen
specification dataclasses, the validity/warning accumulator, serialization
of result bundles, and the orbital-element change record every deflection
method reports.
"""

import logging
from dataclasses import dataclass, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import UnknownSpecificationKey
from .quantity import Quantity


def with_methods(cls):
    """
    Class decorator adding a `with_<field>(value)` copy method per field.

    Each method returns a new instance with that single field replaced, so a
    specification is always fully populated:

        device = preset.with_yield_mt(Quantity(2.0, 0.2, "Mt TNT"))
    """
    for f in fields(cls):
        def make(name):
            def method(self, value):
                return replace(self, **{name: value})
            method.__name__ = f"with_{name}"
            method.__doc__ = f"Copy with `{name}` replaced."
            return method
        setattr(cls, f"with_{f.name}", make(f.name))
    return cls


def resolve_key(enum_cls, key, label: str):
    """
    Resolve a preset key given as an enum member or its string value.

    Raises:
        UnknownSpecificationKey: If the string matches no member
    """
    if isinstance(key, enum_cls):
        return key
    try:
        return enum_cls(key)
    except ValueError:
        available = ', '.join(m.value for m in enum_cls)
        raise UnknownSpecificationKey(
            f"Unknown {label}: {key}. Available: {available}"
        ) from None


def _serialize(value: Any) -> Any:
    if isinstance(value, Quantity):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value):
        return {f.name: _serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


class BundleMixin:
    """Gives a dataclass of Quantities a nested `to_dict()`."""

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


class ValidityCheck:
    """
    Accumulates range-check warnings for one calculation.

    A warning never aborts the calculation. It is logged at WARNING level and
    optionally marks the result as outside its validity range.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.warnings: List[str] = []
        self.within_validity_range = True

    def warn(self, message: str, invalidates: bool = False) -> None:
        self.warnings.append(message)
        self.logger.warning(message)
        if invalidates:
            self.within_validity_range = False

    def extend(self, other: 'ValidityCheck') -> None:
        for message in other.warnings:
            self.warnings.append(message)
        self.within_validity_range = self.within_validity_range and other.within_validity_range


def scaled(q: Quantity, factor: float, unit: str, source: str, description: str) -> Quantity:
    """Quantity proportional to `q`: value and uncertainty times `factor`."""
    return Quantity(q.value * factor, q.uncertainty * abs(factor), unit, source, description)


@dataclass(frozen=True)
class OrbitalElementChanges(BundleMixin):
    """
    First-order change of the six Keplerian elements after a deflection.

    Attributes:
        semi_major_axis: Change in a (m)
        eccentricity: Change in e (dimensionless)
        inclination: Change in i (rad)
        argument_of_periapsis: Change in omega (rad)
        longitude_of_ascending_node: Change in Omega (rad)
        mean_anomaly: Change in M (rad)
    """
    semi_major_axis: Quantity
    eccentricity: Quantity
    inclination: Quantity
    argument_of_periapsis: Quantity
    longitude_of_ascending_node: Quantity
    mean_anomaly: Quantity
