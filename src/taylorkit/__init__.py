"""Multivariate automatic differentiation on flat derivative arrays."""

from importlib.metadata import PackageNotFoundError, version

from taylorkit.compiler.ds_compiler import DSCompiler
from taylorkit.compiler.registry import get_compiler
from taylorkit.errors import (
    CompilationError,
    InvalidSignatureError,
    OrderExceededError,
    TaylorKitError,
)
from taylorkit.field import CalculusFieldElement

try:
    __version__ = version("taylorkit")
except PackageNotFoundError:
    pass

__all__ = [
    "CalculusFieldElement",
    "CompilationError",
    "DSCompiler",
    "InvalidSignatureError",
    "OrderExceededError",
    "TaylorKitError",
    "get_compiler",
]
