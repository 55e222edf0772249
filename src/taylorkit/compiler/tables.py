"""Index tables for derivative structures.

The tables implement the doubly recursive multivariate automatic
differentiation rules of D. Kalman ("Doubly Recursive Multivariate
Automatic Differentiation", Mathematics Magazine 75(3), 2002) in unrolled
form. A structure with ``p`` parameters and order ``o`` is split into a
*value part*, which is a ``(p - 1, o)`` structure that does not depend on
the last parameter, and a *derivative part*, which is a ``(p, o - 1)``
structure holding the derivatives with respect to the last parameter.
Every table of ``(p, o)`` is therefore computed from the tables of
``(p - 1, o)`` and ``(p, o - 1)`` only, which lets the registry fill a
rectangular grid of signatures diagonal by diagonal.

The builders here are pure functions over plain tuples. Flattening into
NumPy kernels happens in :class:`taylorkit.compiler.ds_compiler.DSCompiler`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from taylorkit.errors import CompilationError, OrderExceededError
from taylorkit.logger import taylorkit_logger
from taylorkit.utils.limits import INDEX_MAX, resolve_max_table_terms

__all__ = [
    "IndexTables",
    "build_tables",
    "compile_sizes",
    "compile_derivatives_indirection",
    "compile_lower_indirection",
    "compile_multiplication_indirection",
    "compile_composition_indirection",
    "partial_derivative_index",
    "convert_index",
]

Sizes = tuple[tuple[int, ...], ...]
Orders = tuple[int, ...]
Term = tuple[int, ...]
Row = tuple[Term, ...]


@dataclass(frozen=True)
class IndexTables:
    """Immutable index tables of one ``(parameters, order)`` signature.

    Attributes:
        parameters: Number of free parameters.
        order: Derivation order.
        sizes: ``sizes[p][o]`` is the number of slots of a ``(p, o)`` structure,
            for every ``p <= parameters`` and ``o <= order``.
        derivatives: Entry ``i`` is the tuple of per-parameter derivation
            orders stored in slot ``i``.
        lower: Entry ``i`` is the slot of the full structure holding slot ``i``
            of the ``(parameters, order - 1)`` structure.
        multiplication: Row ``i`` lists the ``(coefficient, left, right)``
            terms whose sum gives slot ``i`` of a product.
        composition: Row ``i`` lists the ``(coefficient, k, slot, ...)`` terms
            whose sum gives slot ``i`` of ``f(g)``; each term stands for
            ``coefficient * f^(k)(g) * g[slot] * ...``.
    """

    parameters: int
    order: int
    sizes: Sizes
    derivatives: tuple[Orders, ...]
    lower: tuple[int, ...]
    multiplication: tuple[Row, ...]
    composition: tuple[Row, ...]

    @property
    def size(self) -> int:
        """Number of slots of a structure with this signature."""
        return self.sizes[self.parameters][self.order]


def compile_sizes(parameters: int, order: int, value: IndexTables | None) -> Sizes:
    """Computes the sizes table.

    ``sizes[p][k] = sizes[p][k - 1] + sizes[p - 1][k]``: the partials of
    order at most ``k`` in ``p`` variables are those of order at most
    ``k - 1`` plus those of exactly order ``k`` that involve the last
    variable.

    Args:
        parameters: Number of free parameters.
        order: Derivation order.
        value: Tables of the ``(parameters - 1, order)`` signature, ``None``
            when ``parameters == 0``.

    Returns:
        The ``(parameters + 1) x (order + 1)`` sizes table.

    Raises:
        CompilationError: If a size does not fit the index range.
    """
    if parameters == 0:
        return ((1,) * (order + 1),)

    previous = value.sizes[parameters - 1]
    last = [1]
    for k in range(order):
        last.append(last[k] + previous[k + 1])
    if last[-1] > INDEX_MAX:
        raise CompilationError(
            f"a ({parameters}, {order}) structure needs {last[-1]} slots, "
            "more than the index range allows."
        )
    return value.sizes[:parameters] + (tuple(last),)


def compile_derivatives_indirection(
    parameters: int,
    order: int,
    value: IndexTables | None,
    derivative: IndexTables | None,
) -> tuple[Orders, ...]:
    """Computes the slot to derivation-orders table.

    The value part reuses the ``(parameters - 1, order)`` orders with a zero
    appended for the last parameter; the derivative part reuses the
    ``(parameters, order - 1)`` orders with the last parameter's order
    incremented.
    """
    if parameters == 0 or order == 0:
        return ((0,) * parameters,)

    value_part = tuple(orders + (0,) for orders in value.derivatives)
    derivative_part = tuple(
        orders[:-1] + (orders[-1] + 1,) for orders in derivative.derivatives
    )
    return value_part + derivative_part


def compile_lower_indirection(
    parameters: int,
    order: int,
    value: IndexTables | None,
    derivative: IndexTables | None,
) -> tuple[int, ...]:
    """Computes the lower derivatives table.

    It lists the slots of every element except the derivatives of maximal
    order, in the order of the ``(parameters, order - 1)`` structure.
    """
    if parameters == 0 or order <= 1:
        return (0,)

    shift = value.size
    return value.lower + tuple(shift + i for i in derivative.lower)


def compile_multiplication_indirection(
    parameters: int,
    order: int,
    value: IndexTables | None,
    derivative: IndexTables | None,
    lower: Sequence[int],
) -> tuple[Row, ...]:
    """Computes the multiplication table (generalized Leibniz rule).

    Rows of the value part are those of ``(parameters - 1, order)``. A row
    of the derivative part comes from differentiating the corresponding
    ``(parameters, order - 1)`` row once more with respect to the last
    parameter: ``d(u v) = du v + u dv``.
    """
    if parameters == 0 or order == 0:
        return (((1, 0, 0),),)

    shift = len(value.multiplication)
    rows = list(value.multiplication)
    for d_row in derivative.multiplication:
        terms = []
        for coefficient, left, right in d_row:
            terms.append((coefficient, lower[left], shift + right))
            terms.append((coefficient, shift + left, lower[right]))
        rows.append(_combine(terms))
    return tuple(rows)


def compile_composition_indirection(
    parameters: int,
    order: int,
    value: IndexTables | None,
    derivative: IndexTables | None,
    sizes: Sizes,
    derivatives: Sequence[Orders],
) -> tuple[Row, ...]:
    """Computes the composition table (multivariate chain rule).

    Rows of the value part are those of ``(parameters - 1, order)``. A row of
    the derivative part is obtained by differentiating every term
    ``c * f^(k)(g) * g_l1 * ... * g_lm`` of the ``(parameters, order - 1)``
    row with respect to the last parameter: once the outer factor, which
    gives ``c * f^(k+1)(g) * g_l1 * ... * g_lm * g_last``, and once each inner
    factor ``g_lj``, whose slot is replaced by the slot with one more
    derivative on the last parameter. Terms with equal ``k`` and equal slot
    multisets are merged.

    Raises:
        CompilationError: As soon as the rows built so far hold more terms
            than :func:`taylorkit.utils.limits.resolve_max_table_terms`.
    """
    if parameters == 0 or order == 0:
        return (((1, 0),),)

    unit = (0,) * (parameters - 1) + (1,)
    first = partial_derivative_index(parameters, order, sizes, unit)

    limit = resolve_max_table_terms()
    rows = list(value.composition)
    n_terms = sum(len(row) for row in rows)
    for d_row in derivative.composition:
        if n_terms > limit:
            _term_limit_exceeded(parameters, order, n_terms, limit)
        terms = []
        for coefficient, k, *slots in d_row:
            # slot numbers differ between order - 1 and order
            converted = [
                convert_index(s, derivative.derivatives, parameters, order, sizes)
                for s in slots
            ]
            terms.append((coefficient, k + 1, *sorted(converted + [first])))
            for j in range(len(converted)):
                bumped = list(converted)
                orders = derivatives[bumped[j]]
                bumped[j] = partial_derivative_index(
                    parameters, order, sizes, orders[:-1] + (orders[-1] + 1,)
                )
                terms.append((coefficient, k, *sorted(bumped)))
        rows.append(_combine(terms))
        n_terms += len(rows[-1])
    if n_terms > limit:
        _term_limit_exceeded(parameters, order, n_terms, limit)
    return tuple(rows)


def _term_limit_exceeded(parameters: int, order: int, n_terms: int, limit: int) -> None:
    taylorkit_logger.warning(
        "Composition table of (%d, %d) would hold at least %d terms (limit %d).",
        parameters, order, n_terms, limit,
    )
    raise CompilationError(
        f"the ({parameters}, {order}) composition table needs at least {n_terms} terms, "
        f"more than the limit of {limit}; see TAYLORKIT_MAX_TABLE_TERMS."
    )


def _combine(terms: Iterable[Term]) -> Row:
    """Merges terms sharing the same indices by summing their coefficients.

    The first occurrence of each index combination keeps its position.
    """
    merged: dict[Term, int] = {}
    for coefficient, *indices in terms:
        key = tuple(indices)
        merged[key] = merged.get(key, 0) + coefficient
    return tuple((coefficient,) + key for key, coefficient in merged.items())


def partial_derivative_index(
    parameters: int,
    order: int,
    sizes: Sizes,
    orders: Sequence[int],
) -> int:
    """Returns the slot holding the partial derivative with the given orders.

    The recursive descent through value and derivative parts is done
    iteratively: every derivative taken with respect to parameter ``i``
    skips the value part of the current sub-structure.

    Args:
        parameters: Number of free parameters.
        order: Derivation order.
        sizes: Sizes table of the signature.
        orders: Derivation order with respect to each parameter.

    Returns:
        The slot index.

    Raises:
        OrderExceededError: If the orders sum to more than ``order``.
    """
    index = 0
    m = order
    total = 0
    for i in range(parameters - 1, -1, -1):
        derivative_order = orders[i]
        total += derivative_order
        if total > order:
            raise OrderExceededError(
                f"derivation orders {tuple(orders)} exceed the order {order}."
            )
        while derivative_order > 0:
            derivative_order -= 1
            index += sizes[i][m]
            m -= 1
    return index


def convert_index(
    index: int,
    src_derivatives: Sequence[Orders],
    dest_parameters: int,
    dest_order: int,
    dest_sizes: Sizes,
) -> int:
    """Maps a slot of one structure to the slot with the same orders in another."""
    orders = tuple(src_derivatives[index][:dest_parameters])
    orders += (0,) * (dest_parameters - len(orders))
    return partial_derivative_index(dest_parameters, dest_order, dest_sizes, orders)


def build_tables(
    parameters: int,
    order: int,
    value: IndexTables | None,
    derivative: IndexTables | None,
) -> IndexTables:
    """Builds all index tables of a signature from its two neighbours.

    Args:
        parameters: Number of free parameters.
        order: Derivation order.
        value: Tables of ``(parameters - 1, order)``, or ``None`` if
            ``parameters == 0``.
        derivative: Tables of ``(parameters, order - 1)``, or ``None`` if
            ``order == 0``.

    Returns:
        The tables of ``(parameters, order)``.

    Raises:
        CompilationError: If the tables exceed the index range or the
            configured term limit.
    """
    sizes = compile_sizes(parameters, order, value)
    derivatives = compile_derivatives_indirection(parameters, order, value, derivative)
    lower = compile_lower_indirection(parameters, order, value, derivative)
    multiplication = compile_multiplication_indirection(
        parameters, order, value, derivative, lower
    )
    composition = compile_composition_indirection(
        parameters, order, value, derivative, sizes, derivatives
    )

    largest = max(term[0] for row in composition for term in row)
    if largest > INDEX_MAX:
        taylorkit_logger.warning(
            "Composition coefficient %d of (%d, %d) overflows the index range.",
            largest, parameters, order,
        )
        raise CompilationError(
            f"the ({parameters}, {order}) composition table has a coefficient "
            "too large for the index range."
        )

    return IndexTables(
        parameters=parameters,
        order=order,
        sizes=sizes,
        derivatives=derivatives,
        lower=lower,
        multiplication=multiplication,
        composition=composition,
    )
