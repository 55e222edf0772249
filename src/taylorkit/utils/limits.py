"""Size limits applied while compiling index tables."""

from __future__ import annotations

import contextvars
import os
from contextlib import contextmanager
from typing import Iterator

import numpy as np

__all__ = [
    "DEFAULT_MAX_TABLE_TERMS",
    "INDEX_DTYPE",
    "INDEX_MAX",
    "set_default_max_table_terms",
    "max_table_terms",
    "resolve_max_table_terms",
]

INDEX_DTYPE = np.int64
INDEX_MAX = int(np.iinfo(INDEX_DTYPE).max)

DEFAULT_MAX_TABLE_TERMS = 5_000_000

_max_terms_var: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "taylorkit_max_table_terms", default=None
)
_DEFAULT_MAX_TERMS: int | None = None


def _int_env(name: str) -> int | None:
    """Reads a positive integer from an environment variable, or None if unset/invalid.

    Args:
        name: Environment variable name.

    Returns:
        Positive integer value, or None.
    """
    v = os.getenv(name)
    if not v:
        return None
    try:
        i = int(v)
        return i if i > 0 else None
    except ValueError:
        return None


def set_default_max_table_terms(n: int | None) -> None:
    """Sets the module-wide default for the composition table term limit.

    Args:
        n: Maximum number of composition terms per signature, or ``None``
            to fall back to the environment / built-in default.

    Returns:
        None
    """
    global _DEFAULT_MAX_TERMS
    if n is not None and int(n) < 1:
        raise ValueError("max table terms must be a positive integer.")
    _DEFAULT_MAX_TERMS = None if n is None else int(n)


@contextmanager
def max_table_terms(n: int | None) -> Iterator[int | None]:
    """Temporarily sets the composition table term limit.

    Args:
        n: Maximum number of composition terms, or ``None`` for the default.

    Yields:
        int | None: The previous setting (restored on exit).
    """
    if n is not None and int(n) < 1:
        raise ValueError("max table terms must be a positive integer.")
    prev = _max_terms_var.get()
    token = _max_terms_var.set(None if n is None else int(n))
    try:
        yield prev
    finally:
        _max_terms_var.reset(token)


def resolve_max_table_terms() -> int:
    """Resolves the active term limit.

    Precedence is the context manager, then the module default, then the
    ``TAYLORKIT_MAX_TABLE_TERMS`` environment variable and finally
    :data:`DEFAULT_MAX_TABLE_TERMS`.

    Returns:
        The maximum number of composition terms allowed for one signature.
    """
    ctx = _max_terms_var.get()
    if ctx is not None:
        return ctx
    if _DEFAULT_MAX_TERMS is not None:
        return _DEFAULT_MAX_TERMS
    env = _int_env("TAYLORKIT_MAX_TABLE_TERMS")
    return env if env is not None else DEFAULT_MAX_TABLE_TERMS
