"""Exceptions raised by TaylorKit."""

from __future__ import annotations

__all__ = [
    "TaylorKitError",
    "InvalidSignatureError",
    "OrderExceededError",
    "CompilationError",
]


class TaylorKitError(Exception):
    """Base class for all TaylorKit errors."""


class InvalidSignatureError(TaylorKitError, ValueError):
    """Raises when a signature, buffer or argument does not match a compiler.

    This covers negative parameter counts or orders, order tuples of the
    wrong length, buffers too short for ``offset + size`` and compilers
    that are combined although their signatures differ.
    """


class OrderExceededError(TaylorKitError, ValueError):
    """Raises when a partial derivative order tuple exceeds the compiler order."""


class CompilationError(TaylorKitError, RuntimeError):
    """Raises when index tables cannot be built for a signature.

    Table construction failures are fatal: the shared registry is left
    untouched and the build is not retried.
    """
