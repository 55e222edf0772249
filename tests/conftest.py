"""Pytest configuration with shared derivative structure fixtures."""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor, TimeoutError

import numpy as np
import pytest

from taylorkit.compiler import registry
from taylorkit.utils.thread_safety import AtomicReference

__all__ = ["RealElement"]


def _value(other):
    return other.value if isinstance(other, RealElement) else np.float64(other)


class RealElement:
    """Field element wrapping a plain float, used to exercise the generic code path."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = np.float64(value)

    def __repr__(self):
        return f"RealElement({float(self.value)!r})"

    def __float__(self):
        return float(self.value)

    def _apply(self, function, *args):
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return RealElement(function(self.value, *(_value(a) for a in args)))

    def __add__(self, other):
        return self._apply(np.add, other)

    def __radd__(self, other):
        return RealElement(_value(other))._apply(np.add, self)

    def __sub__(self, other):
        return self._apply(np.subtract, other)

    def __rsub__(self, other):
        return RealElement(_value(other))._apply(np.subtract, self)

    def __mul__(self, other):
        return self._apply(np.multiply, other)

    def __rmul__(self, other):
        return RealElement(_value(other))._apply(np.multiply, self)

    def __truediv__(self, other):
        return self._apply(np.divide, other)

    def __rtruediv__(self, other):
        return RealElement(_value(other))._apply(np.divide, self)

    def __pow__(self, other):
        return self._apply(np.power, other)

    def __neg__(self):
        return self._apply(np.negative)

    def zero(self):
        return RealElement(0.0)

    def one(self):
        return RealElement(1.0)

    def remainder(self, other):
        x, y = float(self.value), float(_value(other))
        if math.isnan(x) or math.isnan(y) or math.isinf(x) or y == 0.0:
            return RealElement(np.nan)
        return RealElement(math.remainder(x, y))

    def atan2(self, x):
        return self._apply(np.arctan2, x)

    def exp(self):
        return self._apply(np.exp)

    def expm1(self):
        return self._apply(np.expm1)

    def log(self):
        return self._apply(np.log)

    def log1p(self):
        return self._apply(np.log1p)

    def log10(self):
        return self._apply(np.log10)

    def sqrt(self):
        return self._apply(np.sqrt)

    def cbrt(self):
        return self._apply(np.cbrt)

    def sin(self):
        return self._apply(np.sin)

    def cos(self):
        return self._apply(np.cos)

    def tan(self):
        return self._apply(np.tan)

    def asin(self):
        return self._apply(np.arcsin)

    def acos(self):
        return self._apply(np.arccos)

    def atan(self):
        return self._apply(np.arctan)

    def sinh(self):
        return self._apply(np.sinh)

    def cosh(self):
        return self._apply(np.cosh)

    def tanh(self):
        return self._apply(np.tanh)

    def asinh(self):
        return self._apply(np.arcsinh)

    def acosh(self):
        return self._apply(np.arccosh)

    def atanh(self):
        return self._apply(np.arctanh)


@pytest.fixture(scope="session")
def threads_ok():
    """Return a callable that checks thread-spawning capability.

    The returned function has signature `check(n=2, timeout=1.0) -> bool` and
    returns True if at least `n` threads can be started and joined within `timeout`.
    """
    def _can_spawn(n: int = 2, timeout: float = 1.0) -> bool:
        try:
            with ThreadPoolExecutor(max_workers=n) as ex:
                futs = [ex.submit(lambda: None) for _ in range(n)]
                for f in futs:
                    f.result(timeout=timeout)
            return True
        except (RuntimeError, MemoryError, OSError, TimeoutError):
            return False
    return _can_spawn


@pytest.fixture(scope="session")
def extra_threads_ok(threads_ok):
    """Convenience: True iff we can start >= 2 threads (common case)."""
    return threads_ok(2)


@pytest.fixture
def fresh_registry(monkeypatch):
    """Replaces the compiler registry by an empty one for the duration of a test."""
    reference = AtomicReference(None)
    monkeypatch.setattr(registry, "_compilers", reference)
    return reference


@pytest.fixture(scope="session")
def variable():
    """Return a callable building the structure of free parameter `index` at `value`."""
    def _variable(compiler, index, value, field=False):
        ds = np.zeros(compiler.size)
        ds[0] = value
        if compiler.order > 0:
            orders = [0] * compiler.free_parameters
            orders[index] = 1
            ds[compiler.get_partial_derivative_index(*orders)] = 1.0
        return to_field(ds) if field else ds
    return _variable


@pytest.fixture(scope="session")
def field():
    """Return a callable converting a float buffer into a RealElement buffer."""
    return to_field


def to_field(array):
    """Converts a float buffer into an object buffer of RealElement."""
    out = np.empty(len(array), dtype=object)
    for i, v in enumerate(array):
        out[i] = RealElement(v)
    return out

