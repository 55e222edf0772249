"""Arithmetic on derivative structures.

All functions take the compiler as first argument and ``(array, offset)``
pairs for their operands, and write into ``result[result_offset:]``.
Buffers are one-dimensional NumPy arrays of floating dtype, or of object
dtype holding :class:`~taylorkit.field.CalculusFieldElement` instances.
"""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from taylorkit.algebra import scalar
from taylorkit.errors import InvalidSignatureError
from taylorkit.utils.validate import as_buffer, new_buffer_like, validate_buffer

if TYPE_CHECKING:
    from taylorkit.compiler.ds_compiler import DSCompiler

__all__ = [
    "add",
    "subtract",
    "multiply",
    "divide",
    "remainder",
    "linear_combination",
    "compose",
]

# Veltkamp splitter for binary64: 2^27 + 1
_SPLITTER = 134217729.0


@scalar.ieee_semantics
def add(
    compiler: DSCompiler,
    lhs: np.ndarray, lhs_offset: int,
    rhs: np.ndarray, rhs_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``lhs + rhs`` slot by slot. ``result`` may alias an input."""
    size = compiler.size
    a = validate_buffer(lhs, lhs_offset, size, "lhs")
    b = validate_buffer(rhs, rhs_offset, size, "rhs")
    out = validate_buffer(result, result_offset, size, "result")
    out[:] = a + b


@scalar.ieee_semantics
def subtract(
    compiler: DSCompiler,
    lhs: np.ndarray, lhs_offset: int,
    rhs: np.ndarray, rhs_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``lhs - rhs`` slot by slot. ``result`` may alias an input."""
    size = compiler.size
    a = validate_buffer(lhs, lhs_offset, size, "lhs")
    b = validate_buffer(rhs, rhs_offset, size, "rhs")
    out = validate_buffer(result, result_offset, size, "result")
    out[:] = a - b


@scalar.ieee_semantics
def multiply(
    compiler: DSCompiler,
    lhs: np.ndarray, lhs_offset: int,
    rhs: np.ndarray, rhs_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``lhs * rhs`` with the generalized Leibniz rule.

    Slot ``i`` of the result is the sum of ``c * lhs[l] * rhs[r]`` over the
    ``(c, l, r)`` terms of row ``i`` of the multiplication table.
    ``result`` must not alias ``lhs`` or ``rhs``.
    """
    size = compiler.size
    a = validate_buffer(lhs, lhs_offset, size, "lhs")
    b = validate_buffer(rhs, rhs_offset, size, "rhs")
    out = validate_buffer(result, result_offset, size, "result")
    kernel = compiler.multiplication_kernel
    terms = kernel.coefficients * a[kernel.left] * b[kernel.right]
    out[:] = np.add.reduceat(terms, kernel.starts)


def divide(
    compiler: DSCompiler,
    lhs: np.ndarray, lhs_offset: int,
    rhs: np.ndarray, rhs_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``lhs / rhs`` as ``lhs * rhs**-1``.

    ``result`` must not alias ``lhs`` or ``rhs``.
    """
    reciprocal = new_buffer_like(rhs, compiler.size)
    compiler.pow(rhs, rhs_offset, -1, reciprocal, 0)
    multiply(compiler, lhs, lhs_offset, reciprocal, 0, result, result_offset)


@scalar.ieee_semantics
def remainder(
    compiler: DSCompiler,
    lhs: np.ndarray, lhs_offset: int,
    rhs: np.ndarray, rhs_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes the IEEE remainder of ``lhs / rhs``.

    The value slot is ``lhs - k * rhs`` with ``k`` the integer nearest to
    ``lhs / rhs``, evaluated exactly through the IEEE remainder. The other
    slots use the same frozen ``k``: ``lhs[i] - k * rhs[i]``. This linear
    propagation ignores the dependency of ``k`` on the operands, which is
    locally constant wherever the remainder is differentiable.
    ``result`` may alias an input.
    """
    size = compiler.size
    a = validate_buffer(lhs, lhs_offset, size, "lhs")
    b = validate_buffer(rhs, rhs_offset, size, "rhs")
    out = validate_buffer(result, result_offset, size, "result")

    rem = scalar.remainder(a[0], b[0])
    k = float(np.rint((float(a[0]) - float(rem)) / np.float64(float(b[0]))))
    derivatives = a[1:] - b[1:] * k
    out[0] = rem
    out[1:] = derivatives


def _split(a: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Splits ``a`` in two halves of 26 significant bits each."""
    c = _SPLITTER * a
    high = c - (c - a)
    return high, a - high


def _two_product(a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Returns ``a * b`` and its exact rounding error (Dekker)."""
    product = a * b
    a_high, a_low = _split(a)
    b_high, b_low = _split(b)
    error = a_low * b_low - (((product - a_high * b_high) - a_low * b_high) - a_high * b_low)
    return product, error


def _two_sum(a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Returns ``a + b`` and its exact rounding error (Knuth)."""
    s = a + b
    bb = s - a
    return s, (a - (s - bb)) + (b - bb)


def _accurate_dot(scales: Sequence[float], columns: Sequence[np.ndarray]) -> np.ndarray:
    """Computes ``sum(scale * column)`` as if in twice the working precision.

    This is the Dot2 algorithm of Ogita, Rump and Oishi. Where the error
    terms overflow, the naive sum is returned instead.
    """
    with np.errstate(over="ignore", invalid="ignore"):
        total, correction = _two_product(np.float64(scales[0]), columns[0])
        naive = scales[0] * columns[0]
        for a, c in zip(scales[1:], columns[1:]):
            product, product_error = _two_product(np.float64(a), c)
            total, sum_error = _two_sum(total, product)
            correction = correction + (product_error + sum_error)
            naive = naive + a * c
        accurate = total + correction
    return np.where(np.isfinite(accurate), accurate, naive)


def linear_combination(
    compiler: DSCompiler,
    terms: Sequence[tuple[Any, np.ndarray, int]],
    result: np.ndarray,
    result_offset: int,
) -> None:
    """Computes ``a1 * c1 + a2 * c2 + ...`` slot by slot.

    With plain scale factors and floating buffers the sum is computed with
    compensated products and sums, which limits cancellation errors. Field
    elements and object buffers are combined with their own arithmetic.
    ``result`` may alias any of the inputs.

    Args:
        compiler: Compiler of the structures.
        terms: Sequence of ``(scale, array, offset)`` triples; the usual
            forms have 2, 3 or 4 terms.
        result: Output buffer.
        result_offset: Offset of the result in ``result``.

    Raises:
        ValueError: If ``terms`` is empty.
    """
    if not terms:
        raise ValueError("linear_combination needs at least one term.")
    size = compiler.size
    scales = [a for a, _, _ in terms]
    columns = [
        validate_buffer(c, offset, size, f"c{k + 1}")
        for k, (_, c, offset) in enumerate(terms)
    ]
    out = validate_buffer(result, result_offset, size, "result")

    plain = all(isinstance(a, numbers.Real) for a in scales) and all(
        c.dtype != object for c in columns
    )
    if plain:
        out[:] = _accurate_dot(scales, columns)
        return

    combined = columns[0] * scales[0]
    for a, c in zip(scales[1:], columns[1:]):
        combined = combined + c * a
    out[:] = combined


@scalar.ieee_semantics
def compose(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    f: Sequence[Any] | np.ndarray,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``f(operand)`` with the multivariate chain rule.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the inner structure ``g``.
        operand_offset: Offset of ``g`` in ``operand``.
        f: Values of the outer function and its derivatives at ``g[0]``:
            ``f[k]`` is the k-th derivative, not divided by ``k!``. At least
            ``order + 1`` entries are needed, plain or field elements.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.

    Raises:
        InvalidSignatureError: If ``f`` has fewer than ``order + 1`` entries.
    """
    size = compiler.size
    g = validate_buffer(operand, operand_offset, size, "operand")
    out = validate_buffer(result, result_offset, size, "result")
    f = as_buffer(f, operand)
    if f.shape[0] < compiler.order + 1:
        raise InvalidSignatureError(
            f"compose needs {compiler.order + 1} outer derivatives; got {f.shape[0]}."
        )

    kernel = compiler.composition_kernel
    extended = new_buffer_like(operand, size + 1)
    extended[:size] = g
    extended[kernel.padding] = scalar.one_like(g[0])

    terms = kernel.coefficients * f[kernel.derivatives]
    for column in kernel.slots.T:
        terms = terms * extended[column]
    out[:] = np.add.reduceat(terms, kernel.starts)
