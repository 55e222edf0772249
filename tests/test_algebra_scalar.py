"""Unit tests for `algebra.scalar`."""

from __future__ import annotations

import math
import warnings

import numpy as np
import pytest

from taylorkit.algebra import scalar


@pytest.mark.parametrize(
    "name, x, expected",
    [
        ("log", 0.0, -np.inf),
        ("log10", 0.0, -np.inf),
        ("log1p", -1.0, -np.inf),
        ("atanh", 1.0, np.inf),
        ("exp", 1000.0, np.inf),
    ],
)
def test_plain_kernels_return_ieee_values(name, x, expected) -> None:
    """Tests that domain edges give signed infinities without warnings."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert getattr(scalar, name)(x) == expected


@pytest.mark.parametrize("name, x", [("sqrt", -1.0), ("log", -1.0), ("asin", 2.0), ("acosh", 0.5)])
def test_plain_kernels_return_nan_outside_domain(name, x) -> None:
    """Tests that invalid operands give NaN instead of raising."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert math.isnan(getattr(scalar, name)(x))


def test_kernels_accept_python_and_numpy_numbers() -> None:
    """Tests dispatch on int, float and NumPy scalars."""
    assert scalar.exp(0) == 1.0
    assert scalar.sin(np.float32(0.0)) == 0.0
    assert scalar.cbrt(np.int64(-27)) == pytest.approx(-3.0)
    assert scalar.zero_like(3) == 0.0
    assert scalar.one_like(np.float64(3.0)) == 1.0


def test_kernels_dispatch_to_field_methods(field) -> None:
    """Tests that non-numbers are evaluated through their own methods."""
    x = field(np.array([0.5]))[0]
    assert float(scalar.asin(x)) == pytest.approx(math.asin(0.5))
    assert float(scalar.zero_like(x)) == 0.0
    assert float(scalar.one_like(x)) == 1.0
    assert float(scalar.atan2(x, x * 0 - 1.0)) == pytest.approx(math.atan2(0.5, -1.0))


@pytest.mark.parametrize(
    "x, y, expected",
    [(5.3, 2.0, math.remainder(5.3, 2.0)), (-7.0, 2.0, 1.0), (3.0, 2.0, -1.0)],
)
def test_remainder_rounds_to_nearest(x, y, expected) -> None:
    """Tests the IEEE remainder, including ties to even."""
    assert scalar.remainder(x, y) == pytest.approx(expected)


@pytest.mark.parametrize("x, y", [(1.0, 0.0), (np.inf, 1.0), (np.nan, 1.0), (1.0, np.nan)])
def test_remainder_special_cases_are_nan(x, y) -> None:
    """Tests operands for which the IEEE remainder is NaN."""
    assert math.isnan(scalar.remainder(x, y))


def test_remainder_by_infinity_returns_dividend() -> None:
    """Tests that a finite value modulo infinity is itself."""
    assert scalar.remainder(2.5, np.inf) == 2.5


def test_ieee_semantics_silences_numpy_warnings() -> None:
    """Tests that decorated functions do not emit floating point warnings."""

    @scalar.ieee_semantics
    def divide(a, b):
        return np.float64(a) / np.float64(b)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert divide(1.0, 0.0) == np.inf
    assert divide.__name__ == "divide"
