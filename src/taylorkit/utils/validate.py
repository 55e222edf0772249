"""Validation utilities for derivative structure signatures and buffers."""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from typing import Any

import numpy as np

from taylorkit.errors import InvalidSignatureError, OrderExceededError

__all__ = [
    "validate_signature",
    "validate_orders",
    "validate_buffer",
    "new_buffer_like",
    "as_buffer",
]


def validate_signature(parameters: int, order: int) -> tuple[int, int]:
    """Validates a ``(parameters, order)`` signature.

    Args:
        parameters: Number of free parameters.
        order: Derivation order.

    Returns:
        The signature as a pair of Python integers.

    Raises:
        InvalidSignatureError: If either value is negative or not an integer.
    """
    if not isinstance(parameters, numbers.Integral) or not isinstance(order, numbers.Integral):
        raise InvalidSignatureError(
            f"parameters and order must be integers; got ({parameters!r}, {order!r})."
        )
    if parameters < 0 or order < 0:
        raise InvalidSignatureError(
            f"parameters and order must be non-negative; got ({parameters}, {order})."
        )
    return int(parameters), int(order)


def validate_orders(orders: Sequence[int], parameters: int, order: int) -> tuple[int, ...]:
    """Validates a tuple of per-parameter derivation orders.

    Args:
        orders: Derivation order with respect to each free parameter.
        parameters: Number of free parameters of the compiler.
        order: Derivation order of the compiler.

    Returns:
        The orders as a tuple of Python integers.

    Raises:
        InvalidSignatureError: If the number of orders differs from ``parameters``.
        OrderExceededError: If an order is negative or the orders sum to more
            than ``order``.
    """
    orders = tuple(int(o) for o in orders)
    if len(orders) != parameters:
        raise InvalidSignatureError(
            f"expected {parameters} derivation orders; got {len(orders)}."
        )
    if any(o < 0 for o in orders):
        raise OrderExceededError(f"derivation orders must be non-negative; got {orders}.")
    if sum(orders) > order:
        raise OrderExceededError(
            f"derivation orders {orders} sum to {sum(orders)}, more than the order {order}."
        )
    return orders


def validate_buffer(array: Any, offset: int, size: int, name: str = "array") -> np.ndarray:
    """Checks that ``array`` holds a derivative structure at ``offset``.

    Args:
        array: One-dimensional NumPy buffer (floating or object dtype).
        offset: Index of the structure's first slot.
        size: Number of slots of the structure.
        name: Argument name used in error messages.

    Returns:
        The window ``array[offset:offset + size]`` (a view, never a copy).

    Raises:
        TypeError: If ``array`` is not a one-dimensional NumPy array of
            floating or object dtype.
        InvalidSignatureError: If the window does not fit inside ``array``.
    """
    if not isinstance(array, np.ndarray) or array.ndim != 1:
        raise TypeError(f"{name} must be a one-dimensional numpy array.")
    if array.dtype.kind not in "fO":
        raise TypeError(f"{name} must have a floating or object dtype; got {array.dtype}.")
    if offset < 0 or offset + size > array.shape[0]:
        raise InvalidSignatureError(
            f"{name} of length {array.shape[0]} cannot hold {size} slots at offset {offset}."
        )
    return array[offset:offset + size]


def new_buffer_like(like: np.ndarray, size: int) -> np.ndarray:
    """Allocates a scratch buffer of ``size`` slots with the same representation as ``like``."""
    if like.dtype == object:
        return np.empty(size, dtype=object)
    return np.zeros(size, dtype=like.dtype)


def as_buffer(values: Sequence[Any], like: np.ndarray) -> np.ndarray:
    """Packs scalar ``values`` into a buffer of the same representation as ``like``.

    Object buffers are filled element by element so that field elements are
    never unpacked by NumPy's sequence detection.
    """
    if isinstance(values, np.ndarray):
        return values
    buffer = new_buffer_like(like, len(values))
    for i, v in enumerate(values):
        buffer[i] = v
    return buffer
