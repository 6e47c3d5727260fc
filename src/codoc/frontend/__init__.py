"""Front ends turning a location into a documented-declaration view."""

from __future__ import annotations

from .base import DeclField, DeclFunc, DeclPackage, DeclType, FrontEnd, PackageIdentity
from .goscan import GoFrontEnd
from .memory import MemoryFrontEnd

__all__ = [
    "DeclField",
    "DeclFunc",
    "DeclPackage",
    "DeclType",
    "FrontEnd",
    "GoFrontEnd",
    "MemoryFrontEnd",
    "PackageIdentity",
]
