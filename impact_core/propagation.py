"""
Uncertainty Propagation Engine
==============================
Computes the uncertainty of a derived output from the uncertainties of its
inputs.

Key principle: Every metric must have error bars. A deflection Δv without an
uncertainty is not a result.

Propagation Methods:
- Linear (caller supplies partial derivatives)
- Nonlinear (partial derivatives by one-sided finite difference)
- Monte Carlo (sampling from declared input distributions)
- Independent combination (textbook closed forms for + - * / ** sqrt)

Variance law used by the linear and nonlinear methods:

    u_c^2 = sum_i (df/dx_i)^2 * u(x_i)^2
           + 2 * sum_{pairs} (df/dx_a)(df/dx_b) * u(x_a) * u(x_b) * r(a, b)

The combined uncertainty is sqrt(|u_c^2|). Strong negative correlations can
drive the sum below zero; the absolute value is taken rather than clipping.
"""

import logging
import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Any, Optional, List, Mapping, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import PropagationConfig, DEFAULT_PROPAGATION_CONFIG
from .errors import (
    MissingPartialDerivative,
    UnknownCorrelationVariable,
    InsufficientSamples,
)
from .quantity import Quantity

logger = logging.getLogger(__name__)

ModelFunction = Callable[[Dict[str, float]], float]


class DistributionType(Enum):
    """Sampling distribution of a propagation input."""
    NORMAL = "normal"
    UNIFORM = "uniform"          # Half-width sigma*sqrt(3)
    TRIANGULAR = "triangular"    # Sum of two uniforms, half-width sigma*sqrt(6)


class Operation(Enum):
    """Operations supported by combine_independent."""
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"


@dataclass(frozen=True)
class SamplingVariable:
    """
    A named propagation input.

    Attributes:
        name: Variable name passed to the model function
        quantity: Nominal value and standard uncertainty
        distribution: Distribution used by Monte Carlo sampling
    """
    name: str
    quantity: Quantity
    distribution: DistributionType = DistributionType.NORMAL

    @property
    def value(self) -> float:
        return self.quantity.value

    @property
    def uncertainty(self) -> float:
        return self.quantity.uncertainty


@dataclass(frozen=True)
class CorrelationCoefficient:
    """Pearson correlation between two named inputs."""
    variable_a: str
    variable_b: str
    coefficient: float

    def __post_init__(self):
        if not -1.0 <= self.coefficient <= 1.0:
            raise ValueError(
                f"Correlation coefficient must be in [-1, 1], got {self.coefficient} "
                f"for ({self.variable_a}, {self.variable_b})"
            )


@dataclass(frozen=True)
class Contribution:
    """
    Share of the output uncertainty attributed to one input.

    Attributes:
        variable: Input name
        contribution: Absolute contribution, in output units
        relative_contribution: Percentage of the total
    """
    variable: str
    contribution: float
    relative_contribution: float


@dataclass(frozen=True)
class PropagationResult:
    """
    Result of an uncertainty propagation.

    Attributes:
        value: Nominal (linear/nonlinear) or mean (Monte Carlo) output
        uncertainty: Standard uncertainty of the output
        relative_uncertainty: |uncertainty / value|, 0 for a zero value
        contributions: Per-input uncertainty budget
        method: 'linear', 'nonlinear' or 'monte_carlo'
        samples: Number of Monte Carlo trials (None otherwise)
        percentiles: Monte Carlo output percentiles (None otherwise)
    """
    value: float
    uncertainty: float
    relative_uncertainty: float
    contributions: Tuple[Contribution, ...] = ()
    method: str = "linear"
    samples: Optional[int] = None
    percentiles: Optional[Dict[float, float]] = None

    def to_quantity(self, unit: str, source: str = "", description: str = "") -> Quantity:
        """Convert the result into a Quantity for use in a later stage."""
        return Quantity(
            value=float(self.value),
            uncertainty=float(self.uncertainty),
            unit=unit,
            source=source or f"Uncertainty propagation ({self.method})",
            description=description,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'uncertainty': self.uncertainty,
            'relative_uncertainty': self.relative_uncertainty,
            'method': self.method,
            'samples': self.samples,
            'percentiles': self.percentiles,
            'contributions': [
                {
                    'variable': c.variable,
                    'contribution': c.contribution,
                    'relative_contribution': c.relative_contribution,
                }
                for c in self.contributions
            ],
        }


VariableInput = Union[Sequence[SamplingVariable], Mapping[str, Quantity]]


def make_variables(
    quantities: Mapping[str, Quantity],
    distribution: DistributionType = DistributionType.NORMAL,
) -> List[SamplingVariable]:
    """Wrap a {name: Quantity} mapping as sampling variables."""
    return [SamplingVariable(name, q, distribution) for name, q in quantities.items()]


def _as_variables(variables: VariableInput) -> List[SamplingVariable]:
    if isinstance(variables, Mapping):
        return make_variables(variables)
    return list(variables)


def _check_correlations(
    variables: List[SamplingVariable],
    correlations: Sequence[CorrelationCoefficient],
) -> None:
    names = {v.name for v in variables}
    for corr in correlations:
        for name in (corr.variable_a, corr.variable_b):
            if name not in names:
                raise UnknownCorrelationVariable(
                    f"Correlation references unknown variable '{name}'. "
                    f"Declared: {', '.join(sorted(names))}"
                )


def _relative(value: float, uncertainty: float) -> float:
    if value == 0:
        return 0.0
    return abs(uncertainty / value)


def _linear_statistics(
    variables: List[SamplingVariable],
    derivatives: Mapping[str, float],
    correlations: Sequence[CorrelationCoefficient],
) -> Tuple[float, List[Contribution]]:
    """Combined uncertainty and per-input contributions from sensitivities."""
    sigma = {v.name: v.uncertainty for v in variables}

    variance = sum((derivatives[v.name] * v.uncertainty) ** 2 for v in variables)
    for corr in correlations:
        a, b = corr.variable_a, corr.variable_b
        variance += (2 * derivatives[a] * derivatives[b] * corr.coefficient
                     * sigma[a] * sigma[b])

    uncertainty = math.sqrt(abs(variance))

    contributions = []
    for v in variables:
        c = math.sqrt((derivatives[v.name] * v.uncertainty) ** 2)
        rel = c / uncertainty * 100 if uncertainty > 0 else 0.0
        contributions.append(Contribution(v.name, c, rel))

    return uncertainty, contributions


# =============================================================================
# LINEAR AND NONLINEAR PROPAGATION
# =============================================================================

def propagate_linear(
    variables: VariableInput,
    partial_derivatives: Mapping[str, float],
    correlations: Sequence[CorrelationCoefficient] = (),
) -> PropagationResult:
    """
    Propagate uncertainty through a linear model f = sum_i d_i * x_i.

    Args:
        variables: Inputs (SamplingVariables or {name: Quantity})
        partial_derivatives: {name: df/dx_i} for every input
        correlations: Optional pairwise correlations between inputs

    Returns:
        PropagationResult with method 'linear'

    Raises:
        ValueError: If no variables are given
        MissingPartialDerivative: If an input has no derivative
        UnknownCorrelationVariable: If a correlation names an undeclared input
    """
    variables = _as_variables(variables)
    if not variables:
        raise ValueError("At least one variable is required for propagation")

    for v in variables:
        if v.name not in partial_derivatives:
            raise MissingPartialDerivative(f"No partial derivative supplied for '{v.name}'")
    _check_correlations(variables, correlations)

    value = sum(partial_derivatives[v.name] * v.value for v in variables)
    uncertainty, contributions = _linear_statistics(variables, partial_derivatives, correlations)

    return PropagationResult(
        value=value,
        uncertainty=uncertainty,
        relative_uncertainty=_relative(value, uncertainty),
        contributions=tuple(contributions),
        method="linear",
    )


def propagate_nonlinear(
    variables: VariableInput,
    func: ModelFunction,
    correlations: Sequence[CorrelationCoefficient] = (),
    step_size: Optional[float] = None,
    config: Optional[PropagationConfig] = None,
) -> PropagationResult:
    """
    Propagate uncertainty through an arbitrary scalar model.

    Sensitivities are estimated with a one-sided forward difference,
    h = max(step, |x_i| * step). The reported value is the model evaluated at
    the nominal inputs, not a linear reconstruction. Near kinks or zero
    crossings of the model the estimate can be unstable; results are not
    filtered.

    Args:
        variables: Inputs (SamplingVariables or {name: Quantity})
        func: Model taking {name: value} and returning a float
        correlations: Optional pairwise correlations between inputs
        step_size: Relative finite-difference step (config default 1e-8)
        config: Numerical settings

    Returns:
        PropagationResult with method 'nonlinear'
    """
    config = config or DEFAULT_PROPAGATION_CONFIG
    step = step_size if step_size is not None else config.step_size

    variables = _as_variables(variables)
    if not variables:
        raise ValueError("At least one variable is required for propagation")
    _check_correlations(variables, correlations)

    nominal = {v.name: v.value for v in variables}
    f0 = func(dict(nominal))

    derivatives = {}
    for v in variables:
        h = max(step, abs(v.value) * step)
        perturbed = dict(nominal)
        perturbed[v.name] = v.value + h
        derivatives[v.name] = (func(perturbed) - f0) / h

    uncertainty, contributions = _linear_statistics(variables, derivatives, correlations)

    return PropagationResult(
        value=f0,
        uncertainty=uncertainty,
        relative_uncertainty=_relative(f0, uncertainty),
        contributions=tuple(contributions),
        method="nonlinear",
    )


def derive_quantity(
    variables: VariableInput,
    func: ModelFunction,
    unit: str,
    source: str = "",
    description: str = "",
    correlations: Sequence[CorrelationCoefficient] = (),
) -> Quantity:
    """
    Run nonlinear propagation and return the output as a Quantity.

    Used by the calculators to chain derivation stages: the Quantity produced
    here becomes an input of the next stage.
    """
    result = propagate_nonlinear(variables, func, correlations)
    return result.to_quantity(unit, source, description)


# =============================================================================
# MONTE CARLO ENGINE
# =============================================================================

def _draw(
    variable: SamplingVariable,
    n: int,
    rng: np.random.Generator,
) -> np.ndarray:
    mean, sigma = variable.value, variable.uncertainty

    if variable.distribution == DistributionType.NORMAL:
        # Box-Muller; 1 - U keeps the log argument in (0, 1]
        u1 = 1.0 - rng.random(n)
        u2 = rng.random(n)
        z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
        return mean + sigma * z

    if variable.distribution == DistributionType.UNIFORM:
        u = rng.random(n)
        return mean + (u - 0.5) * 2.0 * sigma * np.sqrt(3.0)

    if variable.distribution == DistributionType.TRIANGULAR:
        u1 = rng.random(n)
        u2 = rng.random(n)
        return mean + (u1 + u2 - 1.0) * sigma * np.sqrt(6.0)

    raise ValueError(f"Unknown distribution: {variable.distribution}")


def _apply_correlations(
    draws: Dict[str, np.ndarray],
    variables: List[SamplingVariable],
    correlations: Sequence[CorrelationCoefficient],
    threshold: float,
) -> Dict[str, np.ndarray]:
    """
    Pairwise correlation nudge: x_b += rho * (x_a - mean_a) * (sigma_b / sigma_a).

    Approximation, not a covariance transform. Uses the un-nudged draws of a.
    """
    by_name = {v.name: v for v in variables}
    raw = {name: arr.copy() for name, arr in draws.items()}
    nudged = {name: arr.copy() for name, arr in draws.items()}

    for corr in correlations:
        if abs(corr.coefficient) <= threshold:
            continue
        a, b = by_name[corr.variable_a], by_name[corr.variable_b]
        if a.uncertainty == 0:
            continue
        nudged[b.name] += (corr.coefficient * (raw[a.name] - a.value)
                           * (b.uncertainty / a.uncertainty))

    return nudged


def _sample_contributions(
    draws: Dict[str, np.ndarray],
    outputs: np.ndarray,
    variables: List[SamplingVariable],
    limit: int,
) -> List[Contribution]:
    """Correlation-scaled share of each input, from the first `limit` trials."""
    out = outputs[:limit]
    finite = np.isfinite(out)
    out = out[finite]

    raw = {}
    if len(out) >= 2:
        s_out = float(np.std(out, ddof=1))
        for v in variables:
            x = draws[v.name][:limit][finite]
            s_in = float(np.std(x, ddof=1))
            if s_in > 0 and s_out > 0:
                r = float(np.corrcoef(x, out)[0, 1])
            else:
                r = 0.0
            raw[v.name] = abs(r) * s_in * (s_out / (s_in or 1.0))
    else:
        raw = {v.name: 0.0 for v in variables}

    total = sum(raw.values())
    return [
        Contribution(name, c, c / total * 100 if total > 0 else 0.0)
        for name, c in raw.items()
    ]


def monte_carlo(
    variables: VariableInput,
    func: ModelFunction,
    samples: Optional[int] = None,
    correlations: Sequence[CorrelationCoefficient] = (),
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    config: Optional[PropagationConfig] = None,
) -> PropagationResult:
    """
    Monte Carlo uncertainty propagation for arbitrary functions.

    Samples every input from its declared distribution, evaluates the model
    per trial and reports the sample mean and (N-1) standard deviation.

    Args:
        variables: Inputs (SamplingVariables or {name: Quantity})
        func: Model taking {name: value} and returning a float
        samples: Number of trials (config default 10000)
        correlations: Optional pairwise correlations between inputs
        rng: Random generator to draw from. Takes precedence over seed.
        seed: Seed for a fresh generator when rng is not given
        config: Numerical settings

    Returns:
        PropagationResult with method 'monte_carlo', samples and percentiles

    Raises:
        InsufficientSamples: If fewer than config.min_samples trials are requested
    """
    config = config or DEFAULT_PROPAGATION_CONFIG
    n = samples if samples is not None else config.default_samples

    if n < config.min_samples:
        raise InsufficientSamples(
            f"Monte Carlo requires at least {config.min_samples} samples, got {n}"
        )

    variables = _as_variables(variables)
    if not variables:
        raise ValueError("At least one variable is required for propagation")
    _check_correlations(variables, correlations)

    if rng is None:
        rng = np.random.default_rng(seed)

    logger.debug("Monte Carlo propagation: %d variables, %d samples", len(variables), n)

    draws = {v.name: _draw(v, n, rng) for v in variables}
    draws = _apply_correlations(draws, variables, correlations, config.correlation_threshold)

    outputs = np.empty(n)
    for i in range(n):
        outputs[i] = func({name: float(arr[i]) for name, arr in draws.items()})

    n_bad = int(np.count_nonzero(~np.isfinite(outputs)))
    if n_bad:
        warnings.warn(
            f"Monte Carlo: {n_bad}/{n} trials produced non-finite output. "
            f"Results may be unreliable."
        )

    mean = float(np.mean(outputs))
    std = float(np.std(outputs, ddof=1))

    percentile_levels = [0.5, 2.5, 5.0, 16.0, 25.0, 50.0, 75.0, 84.0, 95.0, 97.5, 99.5]
    percentiles = {p: float(np.percentile(outputs, p)) for p in percentile_levels}

    contributions = _sample_contributions(
        draws, outputs, variables, config.contribution_sample_limit
    )

    return PropagationResult(
        value=mean,
        uncertainty=std,
        relative_uncertainty=_relative(mean, std),
        contributions=tuple(contributions),
        method="monte_carlo",
        samples=n,
        percentiles=percentiles,
    )


# =============================================================================
# INDEPENDENT COMBINATION
# =============================================================================

def combine_independent(
    values: Sequence[Quantity],
    operation: Union[Operation, str],
) -> Quantity:
    """
    Combine independent quantities with the textbook closed forms.

    add/subtract: root-sum-square of absolute uncertainties.
    multiply/divide: |result| * root-sum-square of relative uncertainties.

    Args:
        values: Quantities, the first one supplies the result unit
        operation: Operation or its string value

    Returns:
        Combined Quantity (the input itself when only one is given)
    """
    operation = Operation(operation)
    values = list(values)

    if not values:
        raise ValueError("At least one value is required for combination")
    if len(values) == 1:
        return values[0]

    first, rest = values[0], values[1:]

    if operation in (Operation.ADD, Operation.SUBTRACT):
        if operation == Operation.ADD:
            result = first.value + sum(q.value for q in rest)
        else:
            result = first.value - sum(q.value for q in rest)
        uncertainty = math.sqrt(sum(q.uncertainty ** 2 for q in values))
    else:
        result = first.value
        for q in rest:
            if operation == Operation.MULTIPLY:
                result *= q.value
            else:
                result /= q.value
        uncertainty = abs(result) * math.sqrt(sum(q.relative_uncertainty ** 2 for q in values))

    return Quantity(
        value=result,
        uncertainty=uncertainty,
        unit=first.unit,
        source=f"Combined from {len(values)} values",
        description=f"Result of {operation.value} operation",
    )


def add(a: Quantity, b: Quantity) -> Quantity:
    return combine_independent([a, b], Operation.ADD)


def subtract(a: Quantity, b: Quantity) -> Quantity:
    return combine_independent([a, b], Operation.SUBTRACT)


def multiply(a: Quantity, b: Quantity) -> Quantity:
    return combine_independent([a, b], Operation.MULTIPLY)


def divide(a: Quantity, b: Quantity) -> Quantity:
    return combine_independent([a, b], Operation.DIVIDE)


def power(q: Quantity, exponent: float) -> Quantity:
    """q ** n with u = |q^n * n * rel(q)|."""
    value = q.value ** exponent
    return Quantity(
        value=value,
        uncertainty=abs(value * exponent * q.relative_uncertainty),
        unit=q.unit,
        source=q.source,
        description=f"{q.description or 'value'} raised to {exponent}",
    )


def sqrt(q: Quantity) -> Quantity:
    """Square root with u = sigma / (2 sqrt(v)), 0 for a zero value."""
    if q.value < 0:
        raise ValueError(f"Cannot take square root of negative value {q.value}")

    root = math.sqrt(q.value)
    uncertainty = q.uncertainty / (2 * root) if root > 0 else 0.0
    return Quantity(
        value=root,
        uncertainty=uncertainty,
        unit=q.unit,
        source=q.source,
        description=f"Square root of {q.description or 'value'}",
    )


def contributions_to_dataframe(result: PropagationResult) -> pd.DataFrame:
    """Uncertainty budget as a table, largest contributor first."""
    df = pd.DataFrame(
        [
            {
                'variable': c.variable,
                'contribution': c.contribution,
                'relative_contribution_pct': c.relative_contribution,
            }
            for c in result.contributions
        ],
        columns=['variable', 'contribution', 'relative_contribution_pct'],
    )
    return df.sort_values('contribution', ascending=False).reset_index(drop=True)
