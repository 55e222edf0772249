"""Tests for taylorkit.utils.validate."""

import numpy as np
import pytest

from taylorkit.errors import InvalidSignatureError, OrderExceededError
from taylorkit.utils.validate import (
    as_buffer,
    new_buffer_like,
    validate_buffer,
    validate_orders,
    validate_signature,
)


def test_validate_signature_normalizes_integers():
    """Tests that NumPy integers come back as Python integers."""
    p, o = validate_signature(np.int64(3), np.int8(2))
    assert (p, o) == (3, 2)
    assert type(p) is int and type(o) is int


@pytest.mark.parametrize("signature", [(-1, 1), (1, -1), (1.0, 1), (1, 2.5)])
def test_validate_signature_rejects_bad_values(signature):
    """Tests that negative or non-integer signatures are rejected."""
    with pytest.raises(InvalidSignatureError):
        validate_signature(*signature)


def test_validate_orders_checks_length_and_total():
    """Tests the length, sign and total order checks."""
    assert validate_orders([1, 0, 1], 3, 2) == (1, 0, 1)
    with pytest.raises(InvalidSignatureError):
        validate_orders([1, 0], 3, 2)
    with pytest.raises(OrderExceededError):
        validate_orders([2, 0, 1], 3, 2)
    with pytest.raises(OrderExceededError):
        validate_orders([-1, 0, 1], 3, 2)


def test_validate_buffer_returns_a_view():
    """Tests that the returned window shares memory with the buffer."""
    buffer = np.zeros(10)
    window = validate_buffer(buffer, 4, 3)
    window[:] = 1.0
    np.testing.assert_array_equal(buffer[4:7], 1.0)
    assert np.shares_memory(window, buffer)


def test_validate_buffer_accepts_object_dtype():
    """Tests that object buffers are valid."""
    buffer = np.empty(3, dtype=object)
    assert validate_buffer(buffer, 0, 3).dtype == object


def test_validate_buffer_error_messages_name_the_argument():
    """Tests that errors mention the offending argument."""
    with pytest.raises(InvalidSignatureError, match="rhs"):
        validate_buffer(np.zeros(2), 1, 2, "rhs")
    with pytest.raises(TypeError, match="lhs"):
        validate_buffer(np.zeros(2, dtype=np.int32), 0, 2, "lhs")
    with pytest.raises(TypeError, match="result"):
        validate_buffer(np.zeros((2, 2)), 0, 2, "result")


def test_new_buffer_like_keeps_representation():
    """Tests that scratch buffers follow the dtype of their model."""
    plain = new_buffer_like(np.zeros(1, dtype=np.float32), 4)
    assert plain.dtype == np.float32
    np.testing.assert_array_equal(plain, 0.0)
    generic = new_buffer_like(np.empty(1, dtype=object), 4)
    assert generic.dtype == object
    assert generic.shape == (4,)


def test_as_buffer_keeps_elements_intact(field):
    """Tests that field elements are stored as they are."""
    elements = list(field(np.array([1.0, 2.0])))
    packed = as_buffer(elements, np.empty(1, dtype=object))
    assert packed[0] is elements[0]
    assert packed[1] is elements[1]
    floats = as_buffer([1, 2, 3], np.zeros(1))
    assert floats.dtype == np.float64
    np.testing.assert_array_equal(floats, [1.0, 2.0, 3.0])
