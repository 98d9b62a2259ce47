"""
Uncertainty Propagation Tests
=============================
Tests for linear, nonlinear and Monte Carlo propagation and for the
independent-combination shortcuts.

Run with: python -m pytest tests/test_propagation.py -v
"""

import sys
import math
import warnings
from dataclasses import FrozenInstanceError
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from impact_core.errors import (
    MissingPartialDerivative,
    UnknownCorrelationVariable,
    InsufficientSamples,
)
from impact_core.quantity import Quantity
from impact_core.propagation import (
    DistributionType,
    Operation,
    SamplingVariable,
    CorrelationCoefficient,
    propagate_linear,
    propagate_nonlinear,
    derive_quantity,
    monte_carlo,
    combine_independent,
    add,
    multiply,
    divide,
    power,
    sqrt,
    contributions_to_dataframe,
)


X = Quantity(10.0, 1.0, "m", "test", "x")
Y = Quantity(5.0, 0.5, "m", "test", "y")
INPUTS = {'x': X, 'y': Y}


def model_sum(v):
    return v['x'] + v['y']


class TestLinearPropagation:
    """Test propagation with caller-supplied derivatives."""

    def test_sum(self):
        """x + y on (10 +- 1, 5 +- 0.5) gives 15 +- 1.118."""
        result = propagate_linear(INPUTS, {'x': 1.0, 'y': 1.0})

        assert result.value == 15.0
        assert abs(result.uncertainty - math.sqrt(1.25)) < 1e-9
        assert result.method == "linear"

        print(f"[PASS] Linear sum: {result.value} ± {result.uncertainty:.4f}")

    def test_weighted_sum(self):
        """2x + 3y gives 35 +- 2.5."""
        result = propagate_linear(INPUTS, {'x': 2.0, 'y': 3.0})

        assert result.value == 35.0
        assert abs(result.uncertainty - 2.5) < 1e-9

        print("[PASS] Linear weighted sum")

    def test_contributions(self):
        """Contributions are |d_i * u_i| and percentages of the total."""
        result = propagate_linear(INPUTS, {'x': 2.0, 'y': 3.0})
        by_name = {c.variable: c for c in result.contributions}

        assert abs(by_name['x'].contribution - 2.0) < 1e-12
        assert abs(by_name['y'].contribution - 1.5) < 1e-12
        assert abs(by_name['x'].relative_contribution - 80.0) < 1e-9

        print("[PASS] Linear contributions")

    def test_result_frozen(self):
        """Results and their contribution budget cannot be modified."""
        result = propagate_linear(INPUTS, {'x': 2.0, 'y': 3.0})

        assert isinstance(result.contributions, tuple)
        with pytest.raises(FrozenInstanceError):
            result.value = 0.0
        with pytest.raises(FrozenInstanceError):
            result.contributions[0].contribution = 0.0

        print("[PASS] Propagation result frozen")

    def test_full_positive_correlation(self):
        """Fully correlated inputs add uncertainties linearly."""
        result = propagate_linear(
            INPUTS, {'x': 1.0, 'y': 1.0},
            correlations=[CorrelationCoefficient('x', 'y', 1.0)],
        )
        assert abs(result.uncertainty - 1.5) < 1e-9

        print("[PASS] Correlated linear propagation")

    def test_missing_derivative(self):
        """Every input needs a derivative."""
        with pytest.raises(MissingPartialDerivative):
            propagate_linear(INPUTS, {'x': 1.0})

        print("[PASS] Missing derivative rejected")

    def test_unknown_correlation_variable(self):
        """Correlations may only name declared inputs."""
        with pytest.raises(UnknownCorrelationVariable):
            propagate_linear(INPUTS, {'x': 1.0, 'y': 1.0},
                             correlations=[CorrelationCoefficient('x', 'z', 0.5)])

        print("[PASS] Unknown correlation variable rejected")

    def test_correlation_out_of_range(self):
        """|rho| > 1 is rejected at construction."""
        with pytest.raises(ValueError):
            CorrelationCoefficient('x', 'y', 1.5)

        print("[PASS] Correlation coefficient range enforced")

    def test_no_variables(self):
        """An empty input set is an error."""
        with pytest.raises(ValueError):
            propagate_linear({}, {})

        print("[PASS] Empty inputs rejected")


class TestNonlinearPropagation:
    """Test finite-difference propagation."""

    def test_matches_linear_for_linear_model(self):
        """Finite differences reproduce the linear result."""
        result = propagate_nonlinear(INPUTS, lambda v: 2 * v['x'] + 3 * v['y'])

        assert abs(result.value - 35.0) < 1e-12
        assert abs(result.uncertainty - 2.5) < 1e-5
        assert result.method == "nonlinear"

        print("[PASS] Nonlinear on linear model")

    def test_product(self):
        """x * y: relative uncertainties add in quadrature."""
        result = propagate_nonlinear(INPUTS, lambda v: v['x'] * v['y'])
        expected = 50.0 * math.sqrt(0.1 ** 2 + 0.1 ** 2)

        assert abs(result.value - 50.0) < 1e-12
        assert abs(result.uncertainty - expected) / expected < 1e-5

        print("[PASS] Nonlinear product")

    def test_value_is_model_at_nominal(self):
        """Reported value is f(nominal), not a linearization."""
        result = propagate_nonlinear({'x': X}, lambda v: v['x'] ** 2)
        assert result.value == 100.0
        assert abs(result.uncertainty - 20.0) < 1e-4

        print("[PASS] Nonlinear value at nominal")

    def test_exact_inputs(self):
        """Zero input uncertainty gives zero output uncertainty."""
        result = propagate_nonlinear({'a': Quantity(3.0, 0.0, "1")}, lambda v: v['a'] ** 3)
        assert result.uncertainty == 0.0
        assert result.relative_uncertainty == 0.0

        print("[PASS] Exact inputs")

    def test_derive_quantity(self):
        """derive_quantity wraps the result as a Quantity."""
        q = derive_quantity(INPUTS, model_sum, "m", "sum", "Total length")

        assert isinstance(q, Quantity)
        assert q.unit == "m"
        assert q.description == "Total length"
        assert abs(q.uncertainty - math.sqrt(1.25)) < 1e-5

        print("[PASS] derive_quantity")


class TestMonteCarlo:
    """Test sampling-based propagation."""

    def test_convergence(self):
        """Seeded sum converges to 15 +- 1.118."""
        result = monte_carlo(INPUTS, model_sum, samples=20000, seed=42)

        assert abs(result.value - 15.0) < 0.05
        assert abs(result.uncertainty - math.sqrt(1.25)) < 0.03
        assert result.samples == 20000
        assert result.method == "monte_carlo"

        print(f"[PASS] MC convergence: {result.value:.3f} ± {result.uncertainty:.3f}")

    def test_seed_reproducible(self):
        """Identical seed gives identical results."""
        a = monte_carlo(INPUTS, model_sum, samples=1000, seed=7)
        b = monte_carlo(INPUTS, model_sum, samples=1000, seed=7)

        assert a.value == b.value
        assert a.uncertainty == b.uncertainty
        assert a.percentiles == b.percentiles

        print("[PASS] MC seed reproducibility")

    def test_explicit_generator(self):
        """Generators with the same seed give the same draws."""
        a = monte_carlo(INPUTS, model_sum, samples=1000, rng=np.random.default_rng(3))
        b = monte_carlo(INPUTS, model_sum, samples=1000, rng=np.random.default_rng(3))
        assert a.value == b.value

        print("[PASS] MC explicit generator")

    def test_insufficient_samples(self):
        """Fewer than 100 trials is refused."""
        with pytest.raises(InsufficientSamples):
            monte_carlo(INPUTS, model_sum, samples=99, seed=1)

        print("[PASS] MC minimum samples enforced")

    def test_uniform_and_triangular(self):
        """Non-normal distributions keep the declared standard deviation."""
        for dist in (DistributionType.UNIFORM, DistributionType.TRIANGULAR):
            variables = [SamplingVariable('x', X, dist)]
            result = monte_carlo(variables, lambda v: v['x'], samples=20000, seed=11)
            assert abs(result.value - 10.0) < 0.05, dist
            assert abs(result.uncertainty - 1.0) < 0.05, dist

        print("[PASS] MC uniform and triangular")

    def test_percentiles(self):
        """Median sits near the mean for a symmetric output."""
        result = monte_carlo(INPUTS, model_sum, samples=5000, seed=5)

        assert 50.0 in result.percentiles
        assert abs(result.percentiles[50.0] - 15.0) < 0.1
        assert result.percentiles[2.5] < result.percentiles[97.5]

        print("[PASS] MC percentiles")

    def test_contributions(self):
        """The larger input uncertainty dominates the budget."""
        result = monte_carlo(INPUTS, model_sum, samples=5000, seed=9)
        by_name = {c.variable: c.relative_contribution for c in result.contributions}

        assert by_name['x'] > by_name['y']
        assert abs(sum(by_name.values()) - 100.0) < 1e-6

        df = contributions_to_dataframe(result)
        assert list(df['variable']) == ['x', 'y']

        print("[PASS] MC contributions")

    def test_correlation_nudge_widens_sum(self):
        """Positive correlation between summands increases the spread."""
        independent = monte_carlo(INPUTS, model_sum, samples=10000, seed=21)
        correlated = monte_carlo(
            INPUTS, model_sum, samples=10000, seed=21,
            correlations=[CorrelationCoefficient('x', 'y', 0.9)],
        )
        assert correlated.uncertainty > independent.uncertainty

        print("[PASS] MC correlation nudge")

    def test_non_finite_outputs_warn(self):
        """Non-finite trial outputs are reported with a warning."""
        def model(v):
            return math.inf if v['x'] > 11.0 else v['x']

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            monte_carlo(INPUTS, model, samples=1000, seed=1)

        assert any("non-finite" in str(w.message) for w in caught)

        print("[PASS] MC non-finite warning")


class TestIndependentCombination:
    """Test closed-form combination of independent quantities."""

    def test_add(self):
        """Absolute uncertainties in quadrature."""
        q = add(X, Y)
        assert q.value == 15.0
        assert abs(q.uncertainty - math.sqrt(1.25)) < 1e-12

        print("[PASS] add")

    def test_subtract_string_operation(self):
        """Operation may be given by its string value."""
        q = combine_independent([X, Y], "subtract")
        assert q.value == 5.0
        assert abs(q.uncertainty - math.sqrt(1.25)) < 1e-12

        print("[PASS] subtract")

    def test_multiply_divide(self):
        """Relative uncertainties in quadrature."""
        rel = math.sqrt(0.1 ** 2 + 0.1 ** 2)
        product = multiply(X, Y)
        quotient = divide(X, Y)

        assert product.value == 50.0
        assert abs(product.uncertainty - 50.0 * rel) < 1e-12
        assert quotient.value == 2.0
        assert abs(quotient.uncertainty - 2.0 * rel) < 1e-12

        print("[PASS] multiply/divide")

    def test_three_terms(self):
        """More than two terms."""
        q = combine_independent([X, Y, Y], Operation.ADD)
        assert q.value == 20.0
        assert abs(q.uncertainty - math.sqrt(1.5)) < 1e-12

        print("[PASS] three-term combination")

    def test_single_value(self):
        """A single value passes through unchanged."""
        assert combine_independent([X], Operation.MULTIPLY) is X

        print("[PASS] single value")

    def test_power_and_sqrt(self):
        """Scaling-derivative shortcuts."""
        squared = power(X, 2)
        assert squared.value == 100.0
        assert abs(squared.uncertainty - 20.0) < 1e-12

        root = sqrt(Quantity(16.0, 2.0, "m²"))
        assert root.value == 4.0
        assert abs(root.uncertainty - 0.25) < 1e-12

        with pytest.raises(ValueError):
            sqrt(Quantity(-1.0, 0.1, "m²"))

        print("[PASS] power and sqrt")
