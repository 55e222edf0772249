"""Provides :class:`DSCompiler`, the compiled rules of one signature.

A compiler does not own any derivative array. Every operation takes
``(array, offset)`` pairs, so callers may pack many independent structures
contiguously in one buffer and work on slices without copying. For
example, with three parameters ``x``, ``y`` and ``z``::

    >>> import numpy as np
    >>> from taylorkit import get_compiler
    >>> compiler = get_compiler(3, 2)
    >>> size = compiler.size
    >>> packed = np.zeros(4 * size)
    >>> packed[size] = 1.5                                  # value of the 2nd structure
    >>> packed[size + compiler.get_partial_derivative_index(0, 1, 0)] = 1.0
    >>> product = np.zeros(size)
    >>> compiler.multiply(packed, size, packed, size, product, 0)
    >>> float(product[0])
    2.25

Only the value slot (index 0) and the inverse pair
:meth:`DSCompiler.get_partial_derivative_index` /
:meth:`DSCompiler.get_partial_derivative_orders` are part of the stable
layout. With a single parameter, slots are sorted by increasing
derivation order; with order 1, by increasing parameter index.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from taylorkit.algebra import arithmetic, elementary, powers
from taylorkit.algebra import taylor as taylor_evaluation
from taylorkit.compiler.tables import IndexTables, partial_derivative_index
from taylorkit.errors import InvalidSignatureError
from taylorkit.utils.limits import INDEX_DTYPE
from taylorkit.utils.validate import validate_orders

__all__ = ["DSCompiler"]


def _frozen(values) -> np.ndarray:
    """Returns a read-only index array."""
    array = np.asarray(values, dtype=INDEX_DTYPE)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class MultiplicationKernel:
    """Flattened multiplication table.

    Term ``t`` contributes ``coefficients[t] * lhs[left[t]] * rhs[right[t]]``;
    the terms of result slot ``i`` start at ``starts[i]``.
    """

    coefficients: np.ndarray
    left: np.ndarray
    right: np.ndarray
    starts: np.ndarray

    @classmethod
    def from_rows(cls, rows) -> MultiplicationKernel:
        """Flattens the rows of a multiplication table, one row per result slot."""
        terms = [term for row in rows for term in row]
        starts = np.cumsum([0] + [len(row) for row in rows[:-1]])
        return cls(
            coefficients=_frozen([t[0] for t in terms]),
            left=_frozen([t[1] for t in terms]),
            right=_frozen([t[2] for t in terms]),
            starts=_frozen(starts),
        )


@dataclass(frozen=True)
class CompositionKernel:
    """Flattened composition table.

    Term ``t`` contributes ``coefficients[t] * f[derivatives[t]]`` times the
    operand slots listed in row ``t`` of ``slots``. Rows are right-padded
    with ``padding``, which callers point at a unit value.
    """

    coefficients: np.ndarray
    derivatives: np.ndarray
    slots: np.ndarray
    starts: np.ndarray
    padding: int

    @classmethod
    def from_rows(cls, rows, padding: int) -> CompositionKernel:
        """Flattens the rows of a composition table, padding slot lists to equal width."""
        terms = [term for row in rows for term in row]
        width = max(1, max(len(t) - 2 for t in terms))
        slots = np.full((len(terms), width), padding, dtype=INDEX_DTYPE)
        for t, term in enumerate(terms):
            slots[t, :len(term) - 2] = term[2:]
        slots.flags.writeable = False
        starts = np.cumsum([0] + [len(row) for row in rows[:-1]])
        return cls(
            coefficients=_frozen([t[0] for t in terms]),
            derivatives=_frozen([t[1] for t in terms]),
            slots=slots,
            starts=_frozen(starts),
            padding=padding,
        )


class DSCompiler:
    """Compiled computation rules for derivative structures of one signature.

    Instances are obtained through :func:`taylorkit.get_compiler` and are
    immutable. All operations are pure functions of the caller's buffers:
    the compiler never keeps a reference to them, so one compiler can be
    used concurrently from any number of threads on disjoint buffers.

    ``add``, ``subtract``, ``remainder`` and ``linear_combination`` accept a
    result window overlapping an input. All other operations require the
    result window to be disjoint from their inputs.

    Args:
        tables: Index tables of the signature.
    """

    def __init__(self, tables: IndexTables):
        self._tables = tables
        self._multiplication = MultiplicationKernel.from_rows(tables.multiplication)
        self._composition = CompositionKernel.from_rows(tables.composition, tables.size)

    def __repr__(self) -> str:
        return f"DSCompiler(parameters={self.free_parameters}, order={self.order})"

    @property
    def tables(self) -> IndexTables:
        """The raw index tables."""
        return self._tables

    @property
    def free_parameters(self) -> int:
        """Number of free parameters."""
        return self._tables.parameters

    @property
    def order(self) -> int:
        """Derivation order."""
        return self._tables.order

    @property
    def size(self) -> int:
        """Number of slots, including the value stored at index 0."""
        return self._tables.size

    def get_size(self) -> int:
        """Returns the number of slots, including the value stored at index 0."""
        return self.size

    @property
    def sizes(self) -> tuple[tuple[int, ...], ...]:
        """``sizes[p][o]`` for all smaller signatures."""
        return self._tables.sizes

    @property
    def lower_indirection(self) -> tuple[int, ...]:
        """Slots of the ``(parameters, order - 1)`` elements in this structure."""
        return self._tables.lower

    @property
    def multiplication_kernel(self) -> MultiplicationKernel:
        """Flattened Leibniz table used by :meth:`multiply`."""
        return self._multiplication

    @property
    def composition_kernel(self) -> CompositionKernel:
        """Flattened Faa di Bruno table used by :meth:`compose`."""
        return self._composition

    def get_partial_derivative_index(self, *orders: int) -> int:
        """Returns the slot of the partial derivative with the given orders.

        This is the inverse of :meth:`get_partial_derivative_orders`.

        Args:
            *orders: Derivation order with respect to each free parameter.

        Returns:
            The slot index; 0 when all orders are 0.

        Raises:
            InvalidSignatureError: If the number of orders does not match
                :attr:`free_parameters`.
            OrderExceededError: If the orders sum to more than :attr:`order`.
        """
        if len(orders) == 1 and isinstance(orders[0], (tuple, list, np.ndarray)):
            orders = tuple(orders[0])
        orders = validate_orders(orders, self.free_parameters, self.order)
        tables = self._tables
        return partial_derivative_index(tables.parameters, tables.order, tables.sizes, orders)

    def get_partial_derivative_orders(self, index: int) -> tuple[int, ...]:
        """Returns the per-parameter derivation orders stored in slot ``index``.

        This is the inverse of :meth:`get_partial_derivative_index`.
        """
        if index < 0:
            raise IndexError(f"slot index must be non-negative; got {index}.")
        return self._tables.derivatives[index]

    def check_compatibility(self, other: DSCompiler) -> None:
        """Checks that ``other`` has the same signature.

        Raises:
            InvalidSignatureError: If parameters or order differ.
        """
        if self.free_parameters != other.free_parameters:
            raise InvalidSignatureError(
                f"free parameters mismatch: {self.free_parameters} != {other.free_parameters}."
            )
        if self.order != other.order:
            raise InvalidSignatureError(f"order mismatch: {self.order} != {other.order}.")

    # arithmetic
    add = arithmetic.add
    subtract = arithmetic.subtract
    multiply = arithmetic.multiply
    divide = arithmetic.divide
    remainder = arithmetic.remainder
    linear_combination = arithmetic.linear_combination
    compose = arithmetic.compose

    # powers and roots
    pow = powers.power
    pow_structure = powers.power_structure
    scalar_pow = powers.scalar_power
    root_n = powers.root_n

    # elementary functions
    exp = elementary.exp
    expm1 = elementary.expm1
    log = elementary.log
    log1p = elementary.log1p
    log10 = elementary.log10
    sin = elementary.sin
    cos = elementary.cos
    sin_cos = elementary.sin_cos
    tan = elementary.tan
    asin = elementary.asin
    acos = elementary.acos
    atan = elementary.atan
    atan2 = elementary.atan2
    sinh = elementary.sinh
    cosh = elementary.cosh
    sinh_cosh = elementary.sinh_cosh
    tanh = elementary.tanh
    asinh = elementary.asinh
    acosh = elementary.acosh
    atanh = elementary.atanh

    taylor = taylor_evaluation.taylor
