"""Scalar kernels shared by the plain and generic code paths.

Each kernel is a :func:`functools.singledispatch` function. Plain real
numbers are evaluated with NumPy ufuncs, so domain edge cases produce the
IEEE results (``log(0) == -inf``, ``sqrt(-1)`` is NaN...) instead of the
exceptions raised by :mod:`math`. Any other argument is treated as a
:class:`~taylorkit.field.CalculusFieldElement` and the method with the
same name is called on it.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Callable
from functools import singledispatch, wraps
from typing import Any, TypeVar

import numpy as np

__all__ = [
    "ieee_semantics",
    "zero_like",
    "one_like",
    "remainder",
    "atan2",
    "exp",
    "expm1",
    "log",
    "log1p",
    "log10",
    "sqrt",
    "cbrt",
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "sinh",
    "cosh",
    "tanh",
    "asinh",
    "acosh",
    "atanh",
]

F = TypeVar("F", bound=Callable[..., Any])


def ieee_semantics(function: F) -> F:
    """Runs ``function`` with NumPy floating point warnings silenced.

    Divisions by zero, overflows and invalid operations are contractual
    outputs of the derivative recipes (signed infinities and NaN), not
    conditions worth a warning.
    """
    @wraps(function)
    def wrapped(*args: Any, **kwargs: Any) -> Any:
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return function(*args, **kwargs)

    return wrapped  # type: ignore[return-value]


def _unary(name: str, ufunc: np.ufunc) -> Callable[[Any], Any]:
    """Builds a unary kernel dispatching between ``ufunc`` and ``x.<name>()``."""

    @singledispatch
    def kernel(x: Any) -> Any:
        return getattr(x, name)()

    @kernel.register(numbers.Real)
    def _(x: numbers.Real) -> np.float64:
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return ufunc(np.float64(x))

    kernel.__name__ = name
    kernel.__qualname__ = name
    kernel.__doc__ = f"Returns ``{name}(x)`` for a plain number or a field element."
    return kernel


exp = _unary("exp", np.exp)
expm1 = _unary("expm1", np.expm1)
log = _unary("log", np.log)
log1p = _unary("log1p", np.log1p)
log10 = _unary("log10", np.log10)
sqrt = _unary("sqrt", np.sqrt)
cbrt = _unary("cbrt", np.cbrt)
sin = _unary("sin", np.sin)
cos = _unary("cos", np.cos)
tan = _unary("tan", np.tan)
asin = _unary("asin", np.arcsin)
acos = _unary("acos", np.arccos)
atan = _unary("atan", np.arctan)
sinh = _unary("sinh", np.sinh)
cosh = _unary("cosh", np.cosh)
tanh = _unary("tanh", np.tanh)
asinh = _unary("asinh", np.arcsinh)
acosh = _unary("acosh", np.arccosh)
atanh = _unary("atanh", np.arctanh)


@singledispatch
def zero_like(x: Any) -> Any:
    """Returns the additive identity matching the type of ``x``."""
    return x.zero()


@zero_like.register(numbers.Real)
def _(x: numbers.Real) -> np.float64:
    return np.float64(0.0)


@singledispatch
def one_like(x: Any) -> Any:
    """Returns the multiplicative identity matching the type of ``x``."""
    return x.one()


@one_like.register(numbers.Real)
def _(x: numbers.Real) -> np.float64:
    return np.float64(1.0)


@singledispatch
def atan2(y: Any, x: Any) -> Any:
    """Returns the two-argument arctangent of ``y / x``."""
    return y.atan2(x)


@atan2.register(numbers.Real)
def _(y: numbers.Real, x: Any) -> np.float64:
    return np.arctan2(np.float64(y), np.float64(x))


@singledispatch
def remainder(x: Any, y: Any) -> Any:
    """Returns the IEEE 754 remainder ``x - n * y`` with ``n`` the nearest integer to ``x / y``."""
    return x.remainder(y)


@remainder.register(numbers.Real)
def _(x: numbers.Real, y: Any) -> np.float64:
    xf = float(x)
    yf = float(y)
    # math.remainder raises where IEEE 754 returns NaN
    if math.isnan(xf) or math.isnan(yf) or math.isinf(xf) or yf == 0.0:
        return np.float64(np.nan)
    return np.float64(math.remainder(xf, yf))
