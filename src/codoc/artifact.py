"""MessagePack artifacts holding extracted packages."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import msgpack

from .errors import LoadError
from .model import Package

if TYPE_CHECKING:
    from .registry import Registry

FORMAT_VERSION = 1


def encode_packages(packages: Iterable[Package]) -> bytes:
    payload = {
        "format": FORMAT_VERSION,
        "packages": [p.to_dict() for p in packages],
    }
    return msgpack.packb(payload, use_bin_type=True)


def decode_packages(payload: bytes) -> list[Package]:
    try:
        obj = msgpack.unpackb(payload, raw=False)
    except Exception as e:  # noqa: BLE001 - boundary decoding error
        raise LoadError(str(e)) from e

    if not isinstance(obj, dict) or "packages" not in obj:
        raise LoadError("invalid artifact envelope")
    if obj.get("format") != FORMAT_VERSION:
        raise LoadError(f"unsupported artifact format: {obj.get('format')!r}")

    items = obj["packages"]
    if not isinstance(items, list):
        raise LoadError("invalid artifact envelope: packages is not a list")
    return [Package.from_dict(item) for item in items]


def write_artifact(path: str | Path, packages: Iterable[Package]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_packages(packages))
    return path


def read_artifact(path: str | Path) -> list[Package]:
    path = Path(path)
    if not path.exists():
        raise LoadError(f"artifact not found at {path}")
    return decode_packages(path.read_bytes())


def load_artifact(path: str | Path, registry: "Registry") -> list[str]:
    """Register every package of an artifact; return their registry ids."""
    return [registry.register(pkg) for pkg in read_artifact(path)]
