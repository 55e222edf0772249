"""Process-wide registry of compiled derivative structure rules.

Compilers are stored in a rectangular grid indexed by ``[parameters][order]``.
The grid is an immutable tuple of tuples published through an atomic
reference: readers never lock and never see a partially built grid. When
a signature is missing, the whole rectangle ``[0..p] x [0..o]`` is filled
in increasing diagonal ``p' + o'``, so both neighbours of each cell exist
before it is built, and the new grid replaces the old one with
compare-and-set. A builder that loses the race keeps its own, identical,
compiler and drops its grid.
"""

from __future__ import annotations

from taylorkit.compiler.ds_compiler import DSCompiler
from taylorkit.compiler.tables import build_tables
from taylorkit.logger import taylorkit_logger
from taylorkit.utils.thread_safety import AtomicReference
from taylorkit.utils.validate import validate_signature

__all__ = ["get_compiler", "compiled_signatures"]

Grid = tuple[tuple[DSCompiler | None, ...], ...]

_compilers = AtomicReference(None)


def get_compiler(parameters: int, order: int) -> DSCompiler:
    """Returns the compiler for a number of free parameters and an order.

    Args:
        parameters: Number of free parameters (>= 0).
        order: Derivation order (>= 0).

    Returns:
        The cached compiler; repeated calls return the same rules.

    Raises:
        InvalidSignatureError: If ``parameters`` or ``order`` is negative.
        CompilationError: If the tables cannot be built; the registry is
            left unchanged.
    """
    parameters, order = validate_signature(parameters, order)

    cache: Grid | None = _compilers.get()
    if (
        cache is not None
        and len(cache) > parameters
        and len(cache[parameters]) > order
        and cache[parameters][order] is not None
    ):
        return cache[parameters][order]

    max_parameters = max(parameters, len(cache) - 1 if cache else 0)
    max_order = max(order, len(cache[0]) - 1 if cache else 0)
    grid: list[list[DSCompiler | None]] = [
        [None] * (max_order + 1) for _ in range(max_parameters + 1)
    ]
    if cache is not None:
        # keep the compilers already built
        for p, row in enumerate(cache):
            grid[p][:len(row)] = row

    for diagonal in range(parameters + order + 1):
        for o in range(max(0, diagonal - parameters), min(order, diagonal) + 1):
            p = diagonal - o
            if grid[p][o] is None:
                value = grid[p - 1][o].tables if p > 0 else None
                derivative = grid[p][o - 1].tables if o > 0 else None
                grid[p][o] = DSCompiler(build_tables(p, o, value, derivative))
                taylorkit_logger.debug(
                    "Compiled derivative structure rules for (%d, %d): %d slots.",
                    p, o, grid[p][o].size,
                )

    new_cache = tuple(tuple(row) for row in grid)
    if not _compilers.compare_and_set(cache, new_cache):
        taylorkit_logger.debug(
            "Discarded concurrent build of (%d, %d); another thread published first.",
            parameters, order,
        )
    return new_cache[parameters][order]


def compiled_signatures() -> list[tuple[int, int]]:
    """Lists the ``(parameters, order)`` signatures currently cached."""
    cache: Grid | None = _compilers.get()
    if cache is None:
        return []
    return [
        (p, o)
        for p, row in enumerate(cache)
        for o, compiler in enumerate(row)
        if compiler is not None
    ]
