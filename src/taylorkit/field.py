"""Capability protocol for generic derivative structure elements.

Every routine of :mod:`taylorkit.algebra` works on plain floating point
buffers and on ``dtype=object`` buffers whose entries implement
:class:`CalculusFieldElement`. The engine never builds elements from
scratch: new values are always obtained by calling operations on an
element it was given, which keeps it agnostic of the concrete type
(multiprecision numbers, interval types, nested derivative structures...).
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

__all__ = ["CalculusFieldElement"]

T = TypeVar("T", bound="CalculusFieldElement")


@runtime_checkable
class CalculusFieldElement(Protocol):
    """Protocol a generic element type must satisfy.

    Arithmetic goes through the usual operators, with plain ``int`` and
    ``float`` operands accepted on both sides. ``float(element)`` must
    return the real value, which the engine uses for branch decisions
    (signs, zero tests, rounding of remainder quotients).
    """

    def __add__(self: T, other: T | float) -> T: ...
    def __radd__(self: T, other: float) -> T: ...
    def __sub__(self: T, other: T | float) -> T: ...
    def __rsub__(self: T, other: float) -> T: ...
    def __mul__(self: T, other: T | float) -> T: ...
    def __rmul__(self: T, other: float) -> T: ...
    def __truediv__(self: T, other: T | float) -> T: ...
    def __rtruediv__(self: T, other: float) -> T: ...
    def __neg__(self: T) -> T: ...
    def __pow__(self: T, other: T | float) -> T: ...
    def __float__(self) -> float: ...

    def zero(self: T) -> T:
        """Returns the additive identity of the element's type."""
        ...

    def one(self: T) -> T:
        """Returns the multiplicative identity of the element's type."""
        ...

    def remainder(self: T, other: T) -> T:
        """Returns the IEEE remainder of ``self / other``."""
        ...

    def exp(self: T) -> T: ...
    def expm1(self: T) -> T: ...
    def log(self: T) -> T: ...
    def log1p(self: T) -> T: ...
    def log10(self: T) -> T: ...
    def sqrt(self: T) -> T: ...
    def cbrt(self: T) -> T: ...
    def sin(self: T) -> T: ...
    def cos(self: T) -> T: ...
    def tan(self: T) -> T: ...
    def asin(self: T) -> T: ...
    def acos(self: T) -> T: ...
    def atan(self: T) -> T: ...
    def atan2(self: T, x: T) -> T: ...
    def sinh(self: T) -> T: ...
    def cosh(self: T) -> T: ...
    def tanh(self: T) -> T: ...
    def asinh(self: T) -> T: ...
    def acosh(self: T) -> T: ...
    def atanh(self: T) -> T: ...
