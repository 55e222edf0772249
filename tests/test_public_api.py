"""Unit tests for public API."""

from __future__ import annotations

import numpy as np

import taylorkit
from taylorkit import (
    CalculusFieldElement,
    CompilationError,
    DSCompiler,
    InvalidSignatureError,
    OrderExceededError,
    TaylorKitError,
    get_compiler,
)


def test_public_all_contains_entry_points():
    """Test that __all__ exposes the compiler and the error hierarchy."""
    expected = {
        "CalculusFieldElement",
        "CompilationError",
        "DSCompiler",
        "InvalidSignatureError",
        "OrderExceededError",
        "TaylorKitError",
        "get_compiler",
    }
    assert expected.issubset(set(taylorkit.__all__))


def test_errors_share_a_base_class():
    """Test that every error derives from TaylorKitError."""
    for cls in (InvalidSignatureError, OrderExceededError, CompilationError):
        assert issubclass(cls, TaylorKitError)


def test_get_compiler_returns_a_compiler():
    """Test that the top-level factory builds DSCompiler instances."""
    compiler = get_compiler(2, 1)
    assert isinstance(compiler, DSCompiler)
    assert repr(compiler) == "DSCompiler(parameters=2, order=1)"


def test_field_protocol_is_runtime_checkable(field):
    """Test that field elements are recognized and plain floats are not."""
    assert isinstance(field(np.array([1.0]))[0], CalculusFieldElement)
    assert not isinstance(1.0, CalculusFieldElement)
    assert not isinstance(np.float64(1.0), CalculusFieldElement)
