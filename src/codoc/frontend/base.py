from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class PackageIdentity:
    id: str  # canonical import path
    name: str  # package clause name
    dir: str = ""
    files: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeclFunc:
    name: str
    doc: str = ""
    params: list[str] = field(default_factory=list)  # "" for unnamed
    results: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DeclField:
    names: list[str]  # empty for embedded fields
    doc: str = ""
    comment: str = ""


@dataclass(frozen=True)
class DeclType:
    name: str
    doc: str = ""
    is_struct: bool = False
    fields: list[DeclField] = field(default_factory=list)
    funcs: list[DeclFunc] = field(default_factory=list)  # constructors, not methods
    methods: list[DeclFunc] = field(default_factory=list)


@dataclass(frozen=True)
class DeclPackage:
    name: str
    doc: str = ""
    funcs: list[DeclFunc] = field(default_factory=list)
    types: list[DeclType] = field(default_factory=list)


class FrontEnd(Protocol):
    def resolve(self, location: str) -> list[PackageIdentity]:
        """Return every distinct package found at `location`."""
        ...

    def declarations(self, identity: PackageIdentity) -> DeclPackage:
        """Return the documented declarations of a resolved package."""
        ...
