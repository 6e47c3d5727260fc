"""Generate a Python module that registers extracted packages."""

from __future__ import annotations

import datetime
import pprint
from pathlib import Path
from typing import Iterable

from .model import Package


def generate_module(packages: Iterable[Package], *, module_doc: str | None = None) -> str:
    """Return the source of a module exposing `PACKAGES` and `register()`."""
    now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)

    lines: list[str] = []
    lines.append(f"# generated @ {now.isoformat()} by codoc")
    if module_doc:
        lines.append(repr(module_doc.strip()))
    lines.append("")
    lines.append("from __future__ import annotations")
    lines.append("")
    lines.append("from codoc import Package, Registry")
    lines.append("")
    lines.append("PACKAGES = [")
    for pkg in packages:
        body = pprint.pformat(pkg.to_dict(), indent=1, width=96, sort_dicts=True)
        body = "\n".join("        " + line if i else line for i, line in enumerate(body.splitlines()))
        lines.append(f"    Package.from_dict({body}),")
    lines.append("]")
    lines.append("")
    lines.append("")
    lines.append("def register(registry: Registry) -> None:")
    lines.append("    for pkg in PACKAGES:")
    lines.append("        registry.register(pkg)")
    lines.append("")
    return "\n".join(lines)


def write_module(
    packages: Iterable[Package],
    out_file: str | Path,
    *,
    module_doc: str | None = None,
) -> Path:
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(generate_module(packages, module_doc=module_doc), encoding="utf-8")
    return out_file
