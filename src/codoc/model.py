"""Documentation model: packages, functions, structs and fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import LoadError


def _names(values: Any) -> list[str]:
    return [v for v in values if isinstance(v, str) and v]


def _by_name(entities: dict[str, Any]) -> dict[str, Any]:
    # Entities are addressed by their own name, whatever key they came in under.
    return {e.name: e for e in entities.values()}


@dataclass(frozen=True)
class Function:
    name: str
    doc: str = ""
    args: list[str] = field(default_factory=list)
    results: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        object.__setattr__(self, "doc", (self.doc or "").strip())
        # Anonymous parameters and results carry no name worth keeping.
        object.__setattr__(self, "args", _names(self.args))
        object.__setattr__(self, "results", _names(self.results))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "doc": self.doc,
            "args": list(self.args),
            "results": list(self.results),
        }

    @classmethod
    def from_dict(cls, obj: Any) -> "Function":
        obj = _mapping(obj, "function")
        return cls(
            name=str(obj.get("name") or ""),
            doc=str(obj.get("doc") or ""),
            args=list(obj.get("args") or []),
            results=list(obj.get("results") or []),
        )


@dataclass(frozen=True)
class Field:
    name: str
    doc: str = ""
    comment: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "doc", (self.doc or "").strip())
        object.__setattr__(self, "comment", (self.comment or "").strip())

    @property
    def documented(self) -> bool:
        return bool(self.doc or self.comment)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "doc": self.doc, "comment": self.comment}

    @classmethod
    def from_dict(cls, obj: Any) -> "Field":
        obj = _mapping(obj, "field")
        return cls(
            name=str(obj.get("name") or ""),
            doc=str(obj.get("doc") or ""),
            comment=str(obj.get("comment") or ""),
        )


@dataclass(frozen=True)
class Struct:
    name: str
    doc: str = ""
    fields: dict[str, Field] = field(default_factory=dict)
    methods: dict[str, Function] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "doc", (self.doc or "").strip())
        # A field without doc or comment has nothing to show.
        object.__setattr__(
            self,
            "fields",
            {f.name: f for f in self.fields.values() if f.documented},
        )
        object.__setattr__(self, "methods", _by_name(self.methods))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "doc": self.doc,
            "fields": {k: f.to_dict() for k, f in self.fields.items()},
            "methods": {k: m.to_dict() for k, m in self.methods.items()},
        }

    @classmethod
    def from_dict(cls, obj: Any) -> "Struct":
        obj = _mapping(obj, "struct")
        fields = _mapping(obj.get("fields") or {}, "struct fields")
        methods = _mapping(obj.get("methods") or {}, "struct methods")
        return cls(
            name=str(obj.get("name") or ""),
            doc=str(obj.get("doc") or ""),
            fields={str(k): Field.from_dict(v) for k, v in fields.items()},
            methods={str(k): Function.from_dict(v) for k, v in methods.items()},
        )


@dataclass(frozen=True)
class Package:
    """A documented package.

    `id` is the globally unique identifier (a Go import path) and `name` the
    package clause name. Functions include constructor-style functions that
    go/doc groups under a type; methods live on their Struct.
    """

    id: str
    name: str
    doc: str = ""
    functions: dict[str, Function] = field(default_factory=dict)
    structs: dict[str, Struct] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "doc", (self.doc or "").strip())
        object.__setattr__(self, "functions", _by_name(self.functions))
        object.__setattr__(self, "structs", _by_name(self.structs))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "doc": self.doc,
            "functions": {k: f.to_dict() for k, f in self.functions.items()},
            "structs": {k: s.to_dict() for k, s in self.structs.items()},
        }

    @classmethod
    def from_dict(cls, obj: Any) -> "Package":
        obj = _mapping(obj, "package")
        pkg_id = obj.get("id")
        name = obj.get("name")
        if not isinstance(pkg_id, str) or not pkg_id:
            raise LoadError("package: missing id")
        if not isinstance(name, str):
            raise LoadError(f"package {pkg_id}: missing name")
        functions = _mapping(obj.get("functions") or {}, "package functions")
        structs = _mapping(obj.get("structs") or {}, "package structs")
        return cls(
            id=pkg_id,
            name=name,
            doc=str(obj.get("doc") or ""),
            functions={str(k): Function.from_dict(v) for k, v in functions.items()},
            structs={str(k): Struct.from_dict(v) for k, v in structs.items()},
        )


def _mapping(obj: Any, what: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise LoadError(f"{what}: expected mapping, got {type(obj).__name__}")
    return obj
