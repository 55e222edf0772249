"""Evaluation of the Taylor expansion held by a derivative structure."""

from __future__ import annotations

import math
import numbers
from typing import TYPE_CHECKING, Any

import numpy as np

from taylorkit.algebra import scalar
from taylorkit.errors import InvalidSignatureError
from taylorkit.utils.validate import validate_buffer

if TYPE_CHECKING:
    from taylorkit.compiler.ds_compiler import DSCompiler

__all__ = ["taylor"]


@scalar.ieee_semantics
def taylor(compiler: DSCompiler, ds: np.ndarray, ds_offset: int, *delta: Any) -> Any:
    """Evaluates the Taylor expansion of a structure at a displaced point.

    Computes ``sum_i ds[i] * prod_k delta[k]^n_k / n_k!`` where ``n_k`` are
    the derivation orders of slot ``i``. Slots are accumulated from the
    last to the first, so the smallest terms are summed first and the
    rounding is deterministic.

    Args:
        compiler: Compiler of the structure.
        ds: Buffer holding the structure.
        ds_offset: Offset of the structure in ``ds``.
        *delta: Displacement along each free parameter; a single sequence
            is accepted as well.

    Returns:
        The value of the truncated Taylor series at the displaced point.

    Raises:
        InvalidSignatureError: If the number of displacements does not
            match the number of free parameters.
    """
    if len(delta) == 1 and isinstance(delta[0], (list, tuple, np.ndarray)):
        delta = tuple(delta[0])
    if len(delta) != compiler.free_parameters:
        raise InvalidSignatureError(
            f"expected {compiler.free_parameters} displacements; got {len(delta)}."
        )
    values = validate_buffer(ds, ds_offset, compiler.size, "ds")
    # numpy scalars overflow to inf where Python floats raise
    delta = tuple(np.float64(d) if isinstance(d, numbers.Real) else d for d in delta)

    value = scalar.zero_like(values[0])
    for i in range(compiler.size - 1, -1, -1):
        orders = compiler.get_partial_derivative_orders(i)
        term = values[i]
        for k, n in enumerate(orders):
            if n > 0:
                term = term * (delta[k] ** n / math.factorial(n))
        value = value + term
    return value
