"""Compilation of derivative structure index tables."""

from taylorkit.compiler.ds_compiler import DSCompiler
from taylorkit.compiler.registry import compiled_signatures, get_compiler
from taylorkit.compiler.tables import IndexTables, build_tables

__all__ = [
    "DSCompiler",
    "IndexTables",
    "build_tables",
    "compiled_signatures",
    "get_compiler",
]
