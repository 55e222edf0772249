"""Elementary functions of derivative structures.

Every function evaluates the derivatives of a univariate outer function
at the operand value, up to the compiler order, and hands them to
:func:`taylorkit.algebra.arithmetic.compose`. The circular and hyperbolic
functions have periodic derivative cycles. The derivatives of ``tan``,
``tanh`` and of the inverse functions are polynomials (in the function
value, or in the operand scaled by a power of ``1 +/- x^2``) whose
coefficients follow a simple recurrence; by parity, the coefficients of
two consecutive polynomials fit in the same array.

All functions require the result buffers to be disjoint from the operand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from taylorkit.algebra import scalar
from taylorkit.algebra.arithmetic import add, compose, divide, multiply, subtract
from taylorkit.algebra.powers import root_n
from taylorkit.utils.validate import new_buffer_like, validate_buffer

if TYPE_CHECKING:
    from taylorkit.compiler.ds_compiler import DSCompiler

__all__ = [
    "exp",
    "expm1",
    "log",
    "log1p",
    "log10",
    "sin",
    "cos",
    "sin_cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "atan2",
    "sinh",
    "cosh",
    "sinh_cosh",
    "tanh",
    "asinh",
    "acosh",
    "atanh",
]


def _value(compiler: DSCompiler, operand: np.ndarray, operand_offset: int) -> Any:
    """Returns the value slot of the operand after checking its window."""
    return validate_buffer(operand, operand_offset, compiler.size, "operand")[0]


@scalar.ieee_semantics
def exp(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``exp(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = [scalar.exp(x)] * (compiler.order + 1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def expm1(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``exp(operand) - 1``, accurately for small operands.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = [scalar.exp(x)] * (compiler.order + 1)
    function[0] = scalar.expm1(x)
    compose(compiler, operand, operand_offset, function, result, result_offset)


def _log_chain(function: list, inverse: Any, first: Any) -> None:
    """Fills ``function[1:]`` with ``first * (-1)^(i-1) (i-1)! inverse^(i-1)``."""
    xk = first
    for i in range(1, len(function)):
        function[i] = xk
        xk = xk * (inverse * -i)


@scalar.ieee_semantics
def log(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes the natural logarithm of ``operand``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = [scalar.log(x)] * (compiler.order + 1)
    if compiler.order > 0:
        inverse = 1.0 / x
        _log_chain(function, inverse, inverse)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def log1p(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``log(1 + operand)``, accurately for small operands.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = [scalar.log1p(x)] * (compiler.order + 1)
    if compiler.order > 0:
        inverse = 1.0 / (x + 1.0)
        _log_chain(function, inverse, inverse)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def log10(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes the base 10 logarithm of ``operand``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = [scalar.log10(x)] * (compiler.order + 1)
    if compiler.order > 0:
        inverse = 1.0 / x
        _log_chain(function, inverse, inverse / np.log(10.0))
    compose(compiler, operand, operand_offset, function, result, result_offset)


def _cycle(first: Any, second: Any, order: int, sign: int) -> list:
    """Builds ``[f, f', f'', ...]`` for functions with ``f'' = sign * f``."""
    function = [first] * (order + 1)
    if order > 0:
        function[1] = second
        for i in range(2, order + 1):
            function[i] = function[i - 2] if sign > 0 else -function[i - 2]
    return function


@scalar.ieee_semantics
def sin(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``sin(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = _cycle(scalar.sin(x), scalar.cos(x), compiler.order, -1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def cos(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``cos(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = _cycle(scalar.cos(x), -scalar.sin(x), compiler.order, -1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def sin_cos(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    sin_result: np.ndarray, sin_offset: int,
    cos_result: np.ndarray, cos_offset: int,
) -> None:
    """Computes ``sin(operand)`` and ``cos(operand)`` together.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        sin_result: Output buffer for ``sin``.
        sin_offset: Offset of the ``sin`` structure in ``sin_result``.
        cos_result: Output buffer for ``cos``.
        cos_offset: Offset of the ``cos`` structure in ``cos_result``.
    """
    x = _value(compiler, operand, operand_offset)
    s = scalar.sin(x)
    c = scalar.cos(x)
    compose(compiler, operand, operand_offset,
            _cycle(s, c, compiler.order, -1), sin_result, sin_offset)
    compose(compiler, operand, operand_offset,
            _cycle(c, -s, compiler.order, -1), cos_result, cos_offset)


@scalar.ieee_semantics
def sinh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``sinh(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = _cycle(scalar.sinh(x), scalar.cosh(x), compiler.order, 1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def cosh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``cosh(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = _cycle(scalar.cosh(x), scalar.sinh(x), compiler.order, 1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def sinh_cosh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    sinh_result: np.ndarray, sinh_offset: int,
    cosh_result: np.ndarray, cosh_offset: int,
) -> None:
    """Computes ``sinh(operand)`` and ``cosh(operand)`` together.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        sinh_result: Output buffer for ``sinh``.
        sinh_offset: Offset of the ``sinh`` structure in ``sinh_result``.
        cosh_result: Output buffer for ``cosh``.
        cosh_offset: Offset of the ``cosh`` structure in ``cosh_result``.
    """
    x = _value(compiler, operand, operand_offset)
    sh = scalar.sinh(x)
    ch = scalar.cosh(x)
    compose(compiler, operand, operand_offset,
            _cycle(sh, ch, compiler.order, 1), sinh_result, sinh_offset)
    compose(compiler, operand, operand_offset,
            _cycle(ch, sh, compiler.order, 1), cosh_result, cosh_offset)


def _tangent_derivatives(t: Any, order: int, sign: int) -> list:
    """Derivatives of ``tan`` (``sign=1``) or ``tanh`` (``sign=-1``) given their value ``t``.

    The n-th derivative is ``P_n(t)`` with ``P_0(t) = t`` and
    ``P_n(t) = (1 + sign t^2) P_(n-1)'(t)``, a polynomial of degree n+1
    with the parity of n+1.
    """
    function = [t] * (order + 1)
    if order == 0:
        return function
    zero = scalar.zero_like(t)
    p = [0.0] * (order + 2)
    p[1] = 1.0
    t2 = t * t
    for n in range(1, order + 1):
        # update and evaluate P_n(t)
        v = zero
        p[n + 1] = sign * n * p[n]
        for k in range(n + 1, -1, -2):
            v = v * t2 + p[k]
            if k > 2:
                p[k - 2] = (k - 1) * p[k - 1] + sign * (k - 3) * p[k - 3]
            elif k == 2:
                p[0] = p[1]
        if n % 2 == 0:
            v = v * t
        function[n] = v
    return function


@scalar.ieee_semantics
def tan(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``tan(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = _tangent_derivatives(scalar.tan(x), compiler.order, 1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def tanh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``tanh(operand)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    function = _tangent_derivatives(scalar.tanh(x), compiler.order, -1)
    compose(compiler, operand, operand_offset, function, result, result_offset)


def _inverse_derivatives(x, value, order, first, leading, update, zero_rule, coeff, f):
    """Derivatives shaped ``coeff * f^(n-1) * P_n(x)`` for the inverse functions.

    Args:
        x: Operand value.
        value: Function value at ``x``.
        order: Derivation order.
        first: Constant polynomial ``P_1``.
        leading: ``leading(n, p)`` returns the new leading coefficient of ``P_n``.
        update: ``update(n, k, p)`` returns coefficient ``k - 2`` of ``P_n``.
        zero_rule: ``zero_rule(p)`` returns the constant coefficient of ``P_n``.
        coeff: Scale of the first derivative.
        f: Ratio between the scales of consecutive derivatives.

    Returns:
        The list ``[value, d1, ..., d_order]``.
    """
    function = [value] * (order + 1)
    if order == 0:
        return function
    zero = scalar.zero_like(x)
    p = [0.0] * order
    p[0] = float(first)
    x2 = x * x
    function[1] = coeff * p[0]
    for n in range(2, order + 1):
        # update and evaluate P_n(x)
        v = zero
        p[n - 1] = leading(n, p)
        for k in range(n - 1, -1, -2):
            v = v * x2 + p[k]
            if k > 2:
                p[k - 2] = update(n, k, p)
            elif k == 2:
                p[0] = zero_rule(p)
        if n % 2 == 0:
            v = v * x
        coeff = coeff * f
        function[n] = coeff * v
    return function


@scalar.ieee_semantics
def acos(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``acos(operand)``.

    The n-th derivative is ``P_n(x) / (1 - x^2)^((2n-1)/2)`` with
    ``P_1 = -1`` and ``P_n = (1 - x^2) P_(n-1)' + (2n - 3) x P_(n-1)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    f = 1.0 / (1 - x * x)
    function = _inverse_derivatives(
        x, scalar.acos(x), compiler.order, -1,
        leading=lambda n, p: (n - 1) * p[n - 2],
        update=lambda n, k, p: (k - 1) * p[k - 1] + (2 * n - k) * p[k - 3],
        zero_rule=lambda p: p[1],
        coeff=scalar.sqrt(f), f=f,
    )
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def asin(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``asin(operand)``.

    The n-th derivative is ``P_n(x) / (1 - x^2)^((2n-1)/2)`` with
    ``P_1 = 1`` and ``P_n = (1 - x^2) P_(n-1)' + (2n - 3) x P_(n-1)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    f = 1.0 / (1 - x * x)
    function = _inverse_derivatives(
        x, scalar.asin(x), compiler.order, 1,
        leading=lambda n, p: (n - 1) * p[n - 2],
        update=lambda n, k, p: (k - 1) * p[k - 1] + (2 * n - k) * p[k - 3],
        zero_rule=lambda p: p[1],
        coeff=scalar.sqrt(f), f=f,
    )
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def atan(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``atan(operand)``.

    The n-th derivative is ``Q_n(x) / (1 + x^2)^n`` with ``Q_1 = 1`` and
    ``Q_n = (1 + x^2) Q_(n-1)' - 2 (n - 1) x Q_(n-1)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    f = 1.0 / (x * x + 1)
    function = _inverse_derivatives(
        x, scalar.atan(x), compiler.order, 1,
        leading=lambda n, p: -n * p[n - 2],
        update=lambda n, k, p: (k - 1) * p[k - 1] + (k - 1 - 2 * n) * p[k - 3],
        zero_rule=lambda p: p[1],
        coeff=f, f=f,
    )
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def asinh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``asinh(operand)``.

    The n-th derivative is ``P_n(x) / (x^2 + 1)^((2n-1)/2)`` with
    ``P_1 = 1`` and ``P_n = (x^2 + 1) P_(n-1)' - (2n - 3) x P_(n-1)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    f = 1.0 / (x * x + 1)
    function = _inverse_derivatives(
        x, scalar.asinh(x), compiler.order, 1,
        leading=lambda n, p: (1 - n) * p[n - 2],
        update=lambda n, k, p: (k - 1) * p[k - 1] + (k - 2 * n) * p[k - 3],
        zero_rule=lambda p: p[1],
        coeff=scalar.sqrt(f), f=f,
    )
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def acosh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``acosh(operand)``.

    The n-th derivative is ``P_n(x) / (x^2 - 1)^((2n-1)/2)`` with
    ``P_1 = 1`` and ``P_n = (x^2 - 1) P_(n-1)' - (2n - 3) x P_(n-1)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    f = 1.0 / (x * x - 1)
    function = _inverse_derivatives(
        x, scalar.acosh(x), compiler.order, 1,
        leading=lambda n, p: (1 - n) * p[n - 2],
        update=lambda n, k, p: (1 - k) * p[k - 1] + (k - 2 * n) * p[k - 3],
        zero_rule=lambda p: -p[1],
        coeff=scalar.sqrt(f), f=f,
    )
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def atanh(
    compiler: DSCompiler,
    operand: np.ndarray, operand_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes ``atanh(operand)``.

    The n-th derivative is ``Q_n(x) / (1 - x^2)^n`` with ``Q_1 = 1`` and
    ``Q_n = (1 - x^2) Q_(n-1)' + 2 (n - 1) x Q_(n-1)``.

    Args:
        compiler: Compiler of the structures.
        operand: Buffer holding the argument structure.
        operand_offset: Offset of the argument in ``operand``.
        result: Output buffer; it must not alias ``operand``.
        result_offset: Offset of the result in ``result``.
    """
    x = _value(compiler, operand, operand_offset)
    f = 1.0 / (1 - x * x)
    function = _inverse_derivatives(
        x, scalar.atanh(x), compiler.order, 1,
        leading=lambda n, p: n * p[n - 2],
        update=lambda n, k, p: (k - 1) * p[k - 1] + (2 * n - k + 1) * p[k - 3],
        zero_rule=lambda p: p[1],
        coeff=f, f=f,
    )
    compose(compiler, operand, operand_offset, function, result, result_offset)


@scalar.ieee_semantics
def atan2(
    compiler: DSCompiler,
    y: np.ndarray, y_offset: int,
    x: np.ndarray, x_offset: int,
    result: np.ndarray, result_offset: int,
) -> None:
    """Computes the two-argument arctangent ``atan2(y, x)``.

    With ``r = sqrt(x^2 + y^2)``, the derivatives come from
    ``2 atan(y / (r + x))`` when ``x >= 0`` and from
    ``+/-pi - 2 atan(y / (r - x))`` otherwise, so no division by a
    vanishing denominator occurs away from the origin. The value slot is
    then replaced by the plain two-argument arctangent, which handles signed
    zeros and infinities exactly.

    Args:
        compiler: Compiler of the structures.
        y: Buffer holding the ordinate structure.
        y_offset: Offset of the ordinate in ``y``.
        x: Buffer holding the abscissa structure.
        x_offset: Offset of the abscissa in ``x``.
        result: Output buffer; it may alias neither ``y`` nor ``x``.
        result_offset: Offset of the result in ``result``.
    """
    size = compiler.size
    y0 = validate_buffer(y, y_offset, size, "y")[0]
    x0 = validate_buffer(x, x_offset, size, "x")[0]
    out = validate_buffer(result, result_offset, size, "result")

    tmp1 = new_buffer_like(x, size)
    tmp2 = new_buffer_like(x, size)
    multiply(compiler, x, x_offset, x, x_offset, tmp1, 0)      # x^2
    multiply(compiler, y, y_offset, y, y_offset, tmp2, 0)      # y^2
    add(compiler, tmp1, 0, tmp2, 0, tmp2, 0)                   # x^2 + y^2
    root_n(compiler, tmp2, 0, 2, tmp1, 0)                      # r
    if float(x0) >= 0:
        add(compiler, tmp1, 0, x, x_offset, tmp2, 0)           # r + x
        divide(compiler, y, y_offset, tmp2, 0, tmp1, 0)        # y / (r + x)
        atan(compiler, tmp1, 0, tmp2, 0)
        out[:] = tmp2 * 2
    else:
        subtract(compiler, tmp1, 0, x, x_offset, tmp2, 0)      # r - x
        divide(compiler, y, y_offset, tmp2, 0, tmp1, 0)        # y / (r - x)
        atan(compiler, tmp1, 0, tmp2, 0)
        pi = -np.pi if float(tmp2[0]) <= 0 else np.pi
        derivatives = tmp2[1:] * -2
        out[0] = tmp2[0] * -2 + pi
        out[1:] = derivatives

    out[0] = scalar.atan2(y0, x0)
