"""codoc: Go documentation metadata, extracted once and queried at runtime."""

from __future__ import annotations

from . import errors
from .extract import extract, extract_all, from_path, register_path
from .filters import FilterChain, exported, filter_funcs, filter_structs, with_doc
from .model import Field, Function, Package, Struct
from .registry import MAIN_PACKAGE, Registry

__all__ = [
    "MAIN_PACKAGE",
    "Field",
    "FilterChain",
    "Function",
    "Package",
    "Registry",
    "Struct",
    "errors",
    "exported",
    "extract",
    "extract_all",
    "filter_funcs",
    "filter_structs",
    "from_path",
    "register_path",
    "with_doc",
]
