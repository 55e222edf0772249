"""Array algebra on derivative structures.

The functions of this package operate on caller-owned buffers and take the
:class:`~taylorkit.compiler.ds_compiler.DSCompiler` of the structures as
first argument. They are also available as methods of the compiler.
"""
