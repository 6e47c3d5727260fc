"""Filters deciding which functions and structs survive extraction.

Options are plain values. Each carries zero or more predicates and a
`FilterChain` is built by appending the predicates of every option, in order:

    chain = FilterChain.from_options(exported(), with_doc())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .model import Function, Struct

FuncPredicate = Callable[[Function], bool]
StructPredicate = Callable[[Struct], bool]


@dataclass(frozen=True)
class Option:
    funcs: tuple[FuncPredicate, ...] = ()
    structs: tuple[StructPredicate, ...] = ()


@dataclass(frozen=True)
class FilterChain:
    funcs: tuple[FuncPredicate, ...] = ()
    structs: tuple[StructPredicate, ...] = ()

    @classmethod
    def from_options(cls, *opts: Option) -> "FilterChain":
        return cls().add(*opts)

    def add(self, *opts: Option) -> "FilterChain":
        """Return a new chain with the predicates of `opts` appended."""
        funcs = list(self.funcs)
        structs = list(self.structs)
        for opt in opts:
            funcs.extend(opt.funcs)
            structs.extend(opt.structs)
        return FilterChain(funcs=tuple(funcs), structs=tuple(structs))

    def accepts_func(self, fn: Function) -> bool:
        return all(pred(fn) for pred in self.funcs)

    def accepts_struct(self, st: Struct) -> bool:
        return all(pred(st) for pred in self.structs)


def filter_funcs(pred: FuncPredicate) -> Option:
    """Keep only functions (and methods) for which `pred` returns True."""
    return Option(funcs=(pred,))


def filter_structs(pred: StructPredicate) -> Option:
    """Keep only structs for which `pred` returns True."""
    return Option(structs=(pred,))


def is_exported(name: str) -> bool:
    # Go exports identifiers whose first rune is an upper-case letter.
    return name[:1].isupper()


def exported() -> Option:
    """Keep only exported functions and structs."""
    return Option(
        funcs=(lambda fn: is_exported(fn.name),),
        structs=(lambda st: is_exported(st.name),),
    )


def with_doc() -> Option:
    """Keep only functions and structs that carry documentation."""
    return Option(
        funcs=(lambda fn: bool(fn.doc.strip()),),
        structs=(lambda st: bool(st.doc.strip()),),
    )
