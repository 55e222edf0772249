"""Utility functions for TaylorKit package."""

from .limits import (
    max_table_terms,
    resolve_max_table_terms,
    set_default_max_table_terms,
)
from .validate import (
    validate_buffer,
    validate_orders,
    validate_signature,
)

__all__ = [
    "max_table_terms",
    "resolve_max_table_terms",
    "set_default_max_table_terms",
    "validate_buffer",
    "validate_orders",
    "validate_signature",
]
