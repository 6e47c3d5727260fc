from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..errors import ResolutionError
from .base import DeclPackage, PackageIdentity


class MemoryFrontEnd:
    """Front end serving declaration views that are already in memory.

    `packages` maps a location to a `(PackageIdentity, DeclPackage)` pair.
    `extra_candidates` adds identities to a location's resolution result,
    which makes it ambiguous.
    """

    def __init__(
        self,
        packages: Mapping[str, tuple[PackageIdentity, DeclPackage]] | None = None,
        *,
        extra_candidates: Mapping[str, Sequence[PackageIdentity]] | None = None,
    ) -> None:
        self._by_location = dict(packages or {})
        self._extra = {k: list(v) for k, v in (extra_candidates or {}).items()}
        self._by_id = {ident.id: decl for ident, decl in self._by_location.values()}

    def resolve(self, location: str) -> list[PackageIdentity]:
        out: list[PackageIdentity] = []
        entry = self._by_location.get(location)
        if entry is not None:
            out.append(entry[0])
        out.extend(self._extra.get(location, []))
        return out

    def declarations(self, identity: PackageIdentity) -> DeclPackage:
        decl = self._by_id.get(identity.id)
        if decl is None:
            raise ResolutionError(f"no declarations for package {identity.id!r}")
        return decl
