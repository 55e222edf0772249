"""Powers and roots of derivative structures.

Each recipe builds the vector ``f`` of the outer function's derivatives at
the operand value, then delegates to :func:`taylorkit.algebra.arithmetic.compose`.
The result buffer must never alias an operand.
"""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any

import numpy as np

from taylorkit.algebra import scalar
from taylorkit.algebra.arithmetic import compose, multiply
from taylorkit.utils.validate import new_buffer_like, validate_buffer

if TYPE_CHECKING:
    from taylorkit.compiler.ds_compiler import DSCompiler

__all__ = [
    "power",
    "power_structure",
    "scalar_power",
    "root_n",
]


@scalar.ieee_semantics
def scalar_power(
    compiler: DSCompiler,
    a: float,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``a ** operand`` for a plain base ``a``.

    The outer derivatives are ``[a^x, ln(a) a^x, ln(a)^2 a^x, ...]``. A zero
    base needs special care: ``0^x`` is 0 with zero derivatives for
    ``x > 0``, NaN everywhere for ``x < 0``, and for ``x == 0`` the value is
    1 with derivatives alternating between ``-inf`` and ``+inf``.
    """
    x = validate_buffer(operand, operand_offset, compiler.size, "operand")[0]
    zero = scalar.zero_like(x)
    function = [zero] * (compiler.order + 1)
    if a == 0:
        if float(x) == 0:
            function[0] = zero + 1
            infinity = zero + np.inf
            for i in range(1, len(function)):
                infinity = -infinity
                function[i] = infinity
        elif float(x) < 0:
            function = [zero + np.nan] * len(function)
    else:
        function[0] = (zero + a) ** x
        ln_a = np.log(np.float64(a))
        for i in range(1, len(function)):
            function[i] = function[i - 1] * ln_a

    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def power(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    p: Any,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``operand ** p`` for a constant exponent.

    Integer exponents (any :class:`numbers.Integral`) use an exact integer
    power path; real numbers and field elements use the real power path.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the base structure.
        operand_offset: Offset of the base in ``operand``.
        p: Exponent.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.

    Raises:
        TypeError: If ``p`` is a field element but ``operand`` holds floats.
    """
    if not isinstance(p, numbers.Real) and getattr(operand, "dtype", None) != object:
        raise TypeError(
            f"a {type(p).__name__} exponent needs an object buffer of field elements; "
            f"got operand of dtype {operand.dtype}."
        )
    if isinstance(p, numbers.Integral) and not isinstance(p, bool):
        _integer_power(compiler, operand, operand_offset, int(p), result, result_offset)
    else:
        _real_power(compiler, operand, operand_offset, p, result, result_offset)


def _fill_constant(compiler: DSCompiler, like: Any, value: Any,
                   result: np.ndarray, result_offset: int) -> None:
    """Stores a constant structure: ``value`` followed by zero derivatives."""
    out = validate_buffer(result, result_offset, compiler.size, "result")
    zero = scalar.zero_like(like)
    out[0] = value
    for i in range(1, compiler.size):
        out[i] = zero


def _real_power(compiler, operand, operand_offset, p, result, result_offset):
    x = validate_buffer(operand, operand_offset, compiler.size, "operand")[0]
    order = compiler.order

    if float(p) == 0:
        # x^0 = 1 for all x
        _fill_constant(compiler, x, scalar.one_like(x), result, result_offset)
        return

    if float(x) == 0:
        # 0^p = 0 for all p
        _fill_constant(compiler, x, scalar.zero_like(x), result, result_offset)
        return

    # [x^p, p x^(p-1), p(p-1) x^(p-2), ...]
    function = [None] * (order + 1)
    xk = x ** (p - order)
    for i in range(order, 0, -1):
        function[i] = xk
        xk = xk * x
    function[0] = xk
    coefficient = p
    for i in range(1, order + 1):
        function[i] = function[i] * coefficient
        coefficient = coefficient * (p - i)

    compose(compiler, operand, operand_offset, function, result, result_offset)


def _integer_power(compiler, operand, operand_offset, n, result, result_offset):
    x = validate_buffer(operand, operand_offset, compiler.size, "operand")[0]
    order = compiler.order

    if n == 0:
        # x^0 = 1 for all x
        _fill_constant(compiler, x, scalar.one_like(x), result, result_offset)
        return

    # [x^n, n x^(n-1), n(n-1) x^(n-2), ...]
    zero = scalar.zero_like(x)
    function = [zero] * (order + 1)
    if n > 0:
        # derivatives beyond n vanish
        max_order = min(order, n)
        xk = x ** (n - max_order)
        for i in range(max_order, 0, -1):
            function[i] = xk
            xk = xk * x
        function[0] = xk
    else:
        inverse = 1.0 / x
        xk = inverse ** (-n)
        for i in range(order + 1):
            function[i] = xk
            xk = xk * inverse

    coefficient = n
    for i in range(1, order + 1):
        function[i] = function[i] * coefficient
        coefficient *= n - i

    compose(compiler, operand, operand_offset, function, result, result_offset)


def power_structure(
    compiler: DSCompiler,
    x: np.ndarray, x_offset: int,
    y: np.ndarray, y_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``x ** y`` for two structures, as ``exp(y * log(x))``.

    ``result`` must not alias ``x`` or ``y``.
    """
    size = compiler.size
    log_x = new_buffer_like(x, size)
    compiler.log(x, x_offset, log_x, 0)
    y_log_x = new_buffer_like(x, size)
    multiply(compiler, log_x, 0, y, y_offset, y_log_x, 0)
    compiler.exp(y_log_x, 0, result, result_offset)


@scalar.ieee_semantics
def root_n(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    n: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes the ``n``-th root of a structure.

    Square and cubic roots go through ``sqrt`` and ``cbrt``; the latter
    keeps the sign of negative operands.
    """
    x = validate_buffer(operand, operand_offset, compiler.size, "operand")[0]
    order = compiler.order

    # [x^(1/n), (1/n) x^((1/n)-1), (1-n)/n^2 x^((1/n)-2), ...]
    function = [None] * (order + 1)
    if n == 2:
        function[0] = scalar.sqrt(x)
        xk = 0.5 / function[0]
    elif n == 3:
        function[0] = scalar.cbrt(x)
        xk = 1.0 / (3.0 * function[0] * function[0])
    else:
        function[0] = x ** (1.0 / n)
        xk = 1.0 / (n * function[0] ** (n - 1))
    n_reciprocal = 1.0 / n
    x_reciprocal = 1.0 / x
    for i in range(1, order + 1):
        function[i] = xk
        xk = xk * (x_reciprocal * (n_reciprocal - i))

    compose(compiler, operand, operand_offset, function, result, result_offset)
