from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys

from .frontend.goscan import GoFrontEnd
from .model import Package

logger = logging.getLogger("codoc")


def _add_extract_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("paths", nargs="+", help="Go package directories or import paths.")
    p.add_argument(
        "-e",
        "--exported",
        action="store_true",
        help="Only register exported functions and structs.",
    )
    p.add_argument(
        "--with-doc",
        action="store_true",
        help="Only register functions and structs that carry documentation.",
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="codoc")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print codoc version.")

    p_gen = sub.add_parser("gen", help="Generate a Python module registering package docs.")
    _add_extract_args(p_gen)
    p_gen.add_argument("--out", default="", help="Output file, leave empty to write to stdout.")
    p_gen.add_argument("--module-doc", default=None, help="Docstring of the generated module.")

    p_pack = sub.add_parser("pack", help="Write package docs as a MessagePack artifact.")
    _add_extract_args(p_pack)
    p_pack.add_argument("--out", required=True, help="Output artifact file.")

    p_show = sub.add_parser("show", help="Look up a package, struct or function in an artifact.")
    p_show.add_argument("--artifact", required=True, help="Artifact file written by `codoc pack`.")
    p_show.add_argument("id", help="Package id, <pkg>.<name> or <pkg>.<struct>.<method>.")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    if args.cmd == "version":
        try:
            print(importlib.metadata.version("codoc"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return

    if args.cmd in {"gen", "pack"}:
        pkgs = _extract(args)

        if args.cmd == "gen":
            from .codegen import generate_module, write_module

            if args.out in {"", "-"}:
                sys.stdout.write(generate_module(pkgs, module_doc=args.module_doc))
            else:
                write_module(pkgs, args.out, module_doc=args.module_doc)
            return

        from .artifact import write_artifact

        path = write_artifact(args.out, pkgs)
        logger.info("wrote %d packages to %s", len(pkgs), path)
        return

    if args.cmd == "show":
        from .artifact import load_artifact
        from .errors import LoadError
        from .registry import Registry

        registry = Registry()
        try:
            load_artifact(args.artifact, registry)
        except LoadError as e:
            raise SystemExit(f"cannot load artifact: {e}") from None

        found = (
            registry.get_package(args.id)
            or registry.get_struct(args.id)
            or registry.get_function(args.id)
        )
        if found is None:
            logger.error("%s: not found", args.id)
            raise SystemExit(1)
        print(json.dumps(found.to_dict(), indent=2, sort_keys=True))
        return


def _extract(args: argparse.Namespace) -> list[Package]:
    from .extract import extract_all
    from .filters import FilterChain, exported, with_doc

    opts = []
    if args.exported:
        opts.append(exported())
    if args.with_doc:
        opts.append(with_doc())

    results = extract_all(args.paths, FilterChain.from_options(*opts), frontend=GoFrontEnd())

    failed = False
    pkgs: list[Package] = []
    for r in results:
        if r.package is None:
            logger.error("could not get docs for %r: %s", r.location, r.error)
            failed = True
            continue
        logger.info("got docs for %s", r.package.name)
        pkgs.append(r.package)
    if failed:
        raise SystemExit(1)
    return pkgs
