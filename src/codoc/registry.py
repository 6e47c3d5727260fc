"""In-memory registry of documented packages."""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager

from .model import Function, Package, Struct

logger = logging.getLogger(__name__)

# Packages named "main" are program entry points; they all register under
# this id regardless of their import path.
MAIN_PACKAGE = "main"


class _RWLock:
    """Many readers or one writer; waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


def effective_id(pkg: Package) -> str:
    """Return the id a package is registered under."""
    if pkg.name == MAIN_PACKAGE:
        return MAIN_PACKAGE
    return pkg.id


class Registry:
    """Thread-safe store of packages with flattened function/struct indexes.

    Functions and structs are addressed as `<pkgID>.<name>`; methods as
    `<pkgID>.<struct>.<method>`, resolved by `get_function` through the
    owning struct. All returned values are copies.
    """

    def __init__(self) -> None:
        self._lock = _RWLock()
        self._pkgs: dict[str, Package] = {}
        self._funcs: dict[str, Function] = {}
        self._structs: dict[str, Struct] = {}

    def register(self, pkg: Package) -> str:
        """Add or replace a package; return the id it is registered under."""
        pkg_id = effective_id(pkg)
        pkg = copy.deepcopy(pkg)
        prefix = pkg_id + "."

        with self._lock.write():
            old = self._pkgs.get(pkg_id)
            if old is not None:
                # Flattened keys are built from entity names, so drop by name.
                keep = {fn.name for fn in pkg.functions.values()}
                for fn in old.functions.values():
                    if fn.name not in keep:
                        self._funcs.pop(prefix + fn.name, None)
                keep = {st.name for st in pkg.structs.values()}
                for st in old.structs.values():
                    if st.name not in keep:
                        self._structs.pop(prefix + st.name, None)

            self._pkgs[pkg_id] = pkg
            for fn in pkg.functions.values():
                self._funcs[prefix + fn.name] = fn
            for st in pkg.structs.values():
                self._structs[prefix + st.name] = st

        logger.debug(
            "registered %s as %s (%d functions, %d structs)",
            pkg.id,
            pkg_id,
            len(pkg.functions),
            len(pkg.structs),
        )
        return pkg_id

    def get_package(self, id: str) -> Package | None:
        with self._lock.read():
            pkg = self._pkgs.get(id)
            return copy.deepcopy(pkg) if pkg is not None else None

    def get_struct(self, id: str) -> Struct | None:
        with self._lock.read():
            st = self._structs.get(id)
            return copy.deepcopy(st) if st is not None else None

    def get_function(self, id: str) -> Function | None:
        """Look up a function, falling back to `<struct id>.<method>`."""
        with self._lock.read():
            fn = self._funcs.get(id)
            if fn is None:
                struct_id, sep, method = id.rpartition(".")
                if not sep:
                    return None
                st = self._structs.get(struct_id)
                if st is None:
                    return None
                fn = st.methods.get(method)
                if fn is None:
                    return None
            return copy.deepcopy(fn)

    def package_ids(self) -> list[str]:
        with self._lock.read():
            return sorted(self._pkgs)

    def __contains__(self, id: object) -> bool:
        with self._lock.read():
            return id in self._pkgs

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._pkgs)
