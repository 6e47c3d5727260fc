from __future__ import annotations

import os
from pathlib import Path


def go_binary() -> str:
    """Return the Go toolchain binary to run.

    Override with `CODOC_GO`.
    """
    return os.environ.get("CODOC_GO") or "go"


def default_cache_dir() -> Path:
    """Return the directory holding the compiled scanner.

    Override with `CODOC_CACHE_DIR`.
    """
    override = os.environ.get("CODOC_CACHE_DIR")
    if override:
        return Path(override)

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.path.expanduser("~")
        return Path(base) / "codoc"
    return Path(os.path.expanduser("~/.cache/codoc"))
