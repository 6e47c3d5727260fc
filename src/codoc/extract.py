"""Build documentation models from a front end's declaration view."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from .errors import CodocError, ResolutionError
from .filters import FilterChain, Option
from .frontend.base import DeclFunc, DeclType, FrontEnd
from .model import Field, Function, Package, Struct

if TYPE_CHECKING:
    from .registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractResult:
    location: str
    package: Package | None = None
    error: CodocError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract(location: str, chain: FilterChain | None = None, *, frontend: FrontEnd | None = None) -> Package:
    """Extract the documentation of the single package found at `location`.

    Raises ResolutionError when `location` holds zero or several packages and
    ParseError when its source is malformed; both carry `location`.
    """
    if chain is None:
        chain = FilterChain()
    if frontend is None:
        from .frontend.goscan import GoFrontEnd

        frontend = GoFrontEnd()

    try:
        return _extract(location, chain, frontend)
    except CodocError as e:
        if e.location is None:
            e.location = location
        raise


def _extract(location: str, chain: FilterChain, frontend: FrontEnd) -> Package:
    candidates = frontend.resolve(location)
    if not candidates:
        raise ResolutionError(f"no packages in {location!r}", location=location)
    if len({c.id for c in candidates}) > 1:
        raise ResolutionError(f"multiple packages in {location!r}", location=location)
    identity = candidates[0]

    decl = frontend.declarations(identity)

    funcs: dict[str, Function] = {}
    for d in decl.funcs:
        _add_func(funcs, _function(d), chain, pkg=identity.id)

    structs: dict[str, Struct] = {}
    for typ in decl.types:
        if not typ.is_struct:
            continue
        st = _struct(typ, funcs, chain, pkg=identity.id)
        if chain.accepts_struct(st):
            if st.name in structs:
                logger.warning("%s: duplicate struct %s, keeping the last one", identity.id, st.name)
            structs[st.name] = st

    return Package(
        id=identity.id,
        name=identity.name or decl.name,
        doc=decl.doc,
        functions=funcs,
        structs=structs,
    )


def _function(d: DeclFunc) -> Function:
    return Function(name=d.name, doc=d.doc, args=d.params, results=d.results)


def _add_func(funcs: dict[str, Function], fn: Function, chain: FilterChain, *, pkg: str) -> None:
    if not chain.accepts_func(fn):
        return
    if fn.name in funcs:
        logger.warning("%s: duplicate function %s, keeping the last one", pkg, fn.name)
    funcs[fn.name] = fn


def _struct(typ: DeclType, funcs: dict[str, Function], chain: FilterChain, *, pkg: str) -> Struct:
    # Constructors grouped under the type are package-level functions.
    for d in typ.funcs:
        _add_func(funcs, _function(d), chain, pkg=pkg)

    methods: dict[str, Function] = {}
    for d in typ.methods:
        _add_func(methods, _function(d), chain, pkg=f"{pkg}.{typ.name}")

    fields: dict[str, Field] = {}
    for f in typ.fields:
        for name in f.names:
            fd = Field(name=name, doc=f.doc, comment=f.comment)
            if fd.documented:
                fields[name] = fd

    return Struct(name=typ.name, doc=typ.doc, fields=fields, methods=methods)


def from_path(location: str, *opts: Option, frontend: FrontEnd | None = None) -> Package:
    """Extract a package, keeping only entities accepted by all `opts`."""
    return extract(location, FilterChain.from_options(*opts), frontend=frontend)


def register_path(
    registry: "Registry",
    location: str,
    *opts: Option,
    frontend: FrontEnd | None = None,
) -> str:
    """Extract a package and register it; return its registry id."""
    pkg = from_path(location, *opts, frontend=frontend)
    return registry.register(pkg)


def extract_all(
    locations: Iterable[str],
    chain: FilterChain | None = None,
    *,
    frontend: FrontEnd | None = None,
    max_workers: int | None = None,
) -> list[ExtractResult]:
    """Extract several packages in parallel.

    Results come back in input order. A location that fails yields a result
    carrying its error; the others are unaffected.
    """
    locations = list(locations)
    if frontend is None:
        from .frontend.goscan import GoFrontEnd

        frontend = GoFrontEnd()

    def one(location: str) -> ExtractResult:
        try:
            pkg = extract(location, chain, frontend=frontend)
        except CodocError as e:
            logger.debug("extraction failed for %s: %s", location, e)
            return ExtractResult(location=location, error=e)
        return ExtractResult(location=location, package=pkg)

    if not locations:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(one, locations))
