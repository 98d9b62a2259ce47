"""
Error Kinds
===========
Exceptions raised for programmer and configuration mistakes.

Physical-range violations are NOT errors. A parameter outside its validated
range produces a warning string and a False validity flag on the result, but
the calculation completes. The exceptions below abort a calculation.

All kinds derive from ValueError so existing `except ValueError` handlers
keep working.
"""


class ImpactCoreError(ValueError):
    """Base class for all impact_core errors."""


class InvalidUncertainty(ImpactCoreError):
    """A Quantity was constructed with a negative uncertainty."""


class UnknownUnit(ImpactCoreError):
    """A unit symbol is not present in the unit registry."""


class DimensionMismatch(ImpactCoreError):
    """A conversion was requested between units of different dimensions."""


class MissingPartialDerivative(ImpactCoreError):
    """Linear propagation was given a variable without a partial derivative."""


class UnknownCorrelationVariable(ImpactCoreError):
    """A correlation coefficient names a variable that was not declared."""


class InsufficientSamples(ImpactCoreError):
    """Monte Carlo propagation was requested with too few trials."""


class UnknownSpecificationKey(ImpactCoreError):
    """An unrecognized preset key (device, propulsion, sail, composition...)."""
