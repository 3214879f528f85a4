"""Typed documents: value model, query compiler and formatter."""

from .compiler import CompilerConfig, compile_query, is_blank_query, native_regex_in_arrays
from .formatter import format_document, indent, render_document
from .values import Document, Value, document, to_python, to_value

__all__ = [
    "CompilerConfig",
    "Document",
    "Value",
    "compile_query",
    "document",
    "format_document",
    "indent",
    "is_blank_query",
    "native_regex_in_arrays",
    "render_document",
    "to_python",
    "to_value",
]
