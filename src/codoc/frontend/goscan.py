from __future__ import annotations

import hashlib
import json
import logging
import os
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Any

from ..errors import ParseError, ResolutionError, ScannerError
from ..lock import leaf_lock
from ..paths import default_cache_dir, go_binary
from .base import DeclField, DeclFunc, DeclPackage, DeclType, PackageIdentity

logger = logging.getLogger(__name__)


class GoFrontEnd:
    """Front end backed by the Go toolchain.

    Packages are resolved with `go list -json`; declarations come from a small
    scanner program (go/parser + go/doc) compiled once into the cache dir.
    """

    def __init__(
        self,
        *,
        go: str | None = None,
        cache_dir: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._go = go or go_binary()
        self._cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()
        self._env = {**os.environ, **env} if env else None
        self._scanner: Path | None = None
        self._scanner_mu = threading.Lock()

    def resolve(self, location: str) -> list[PackageIdentity]:
        p = Path(location)
        if p.is_dir():
            cwd: Path | None = p.resolve()
            pattern = "."
        else:
            cwd = None
            pattern = location

        listed = self._go_list_json(pattern, cwd=cwd)

        seen: set[str] = set()
        out: list[PackageIdentity] = []
        for item in listed:
            if not isinstance(item, dict):
                continue
            import_path = item.get("ImportPath")
            if not isinstance(import_path, str) or import_path in seen:
                continue
            files = [
                f
                for f in [*(item.get("GoFiles") or []), *(item.get("CgoFiles") or [])]
                if isinstance(f, str)
            ]
            err = item.get("Error")
            if err:
                msg = err.get("Err") if isinstance(err, dict) else str(err)
                if not files:
                    raise ResolutionError(f"no packages in {location!r}: {msg}", location=location)
                raise ParseError(f"package {import_path} contains errors: {msg}", location=location)
            name = item.get("Name")
            if not isinstance(name, str) or not name:
                continue
            seen.add(import_path)
            out.append(
                PackageIdentity(
                    id=import_path,
                    name=name,
                    dir=str(item.get("Dir") or ""),
                    files=tuple(files),
                )
            )
        logger.debug("resolved %s to %s", location, [i.id for i in out])
        return out

    def declarations(self, identity: PackageIdentity) -> DeclPackage:
        where = identity.dir or identity.id
        scanner = self._scanner_binary()
        proc = subprocess.run(
            [str(scanner), "--dir", identity.dir, "--import-path", identity.id, *identity.files],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=self._env,
            check=False,
        )
        if proc.returncode != 0:
            raise ScannerError(f"go scan failed for {identity.id}\n{proc.stderr}", location=where)

        try:
            obj = json.loads(proc.stdout)
        except Exception as e:  # noqa: BLE001 - boundary parse
            raise ScannerError(
                f"failed to parse go scan output for {identity.id}: {e}\n{proc.stdout}", location=where
            ) from e
        if not isinstance(obj, dict):
            raise ScannerError(f"go scan output for {identity.id} is not an object", location=where)

        err = obj.get("error")
        if isinstance(err, dict):
            msg = str(err.get("message", ""))
            if err.get("kind") == "parse":
                raise ParseError(msg, location=where)
            raise ResolutionError(msg, location=where)

        return _decl_package(obj)

    def _go_list_json(self, pattern: str, *, cwd: Path | None) -> list[Any]:
        try:
            proc = subprocess.run(
                [self._go, "list", "-e", "-json", pattern],
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=self._env,
                check=False,
            )
        except FileNotFoundError as e:
            raise ScannerError(f"go toolchain not found: {self._go}") from e

        items = _decode_json_stream(proc.stdout)
        if proc.returncode != 0 and not items:
            raise ResolutionError(f"go list failed for {pattern}\n{proc.stderr}", location=pattern)
        return items

    def _scanner_binary(self) -> Path:
        with self._scanner_mu:
            if self._scanner is not None and self._scanner.exists():
                return self._scanner

            source = _scanner_go_source()
            digest = hashlib.sha256(source.encode("utf-8")).hexdigest()[:16]
            leaf = self._cache_dir / "scanner" / digest
            exe = leaf / ("codoc-scan.exe" if os.name == "nt" else "codoc-scan")
            with leaf_lock(leaf / ".lock"):
                if not exe.exists():
                    self._build_scanner(source, exe)
            self._scanner = exe
            return exe

    def _build_scanner(self, source: str, exe: Path) -> None:
        logger.debug("building go scanner into %s", exe)
        with tempfile.TemporaryDirectory(prefix="codoc-goscan-") as td:
            scan_dir = Path(td)
            (scan_dir / "go.mod").write_text(
                "\n".join(["module codoc.goscan", "", "go 1.21", ""]),
                encoding="utf-8",
            )
            (scan_dir / "main.go").write_text(source, encoding="utf-8")

            tmp_exe = exe.with_name(exe.name + ".tmp")
            try:
                proc = subprocess.run(
                    [self._go, "build", "-o", str(tmp_exe), "."],
                    cwd=str(scan_dir),
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    env=self._env,
                    check=False,
                )
            except FileNotFoundError as e:
                raise ScannerError(f"go toolchain not found: {self._go}") from e
            if proc.returncode != 0:
                raise ScannerError(f"go scanner build failed\n{proc.stdout}")
            os.replace(tmp_exe, exe)


def _decode_json_stream(text: str) -> list[Any]:
    # `go list -json` prints concatenated objects, not a JSON array.
    dec = json.JSONDecoder()
    out: list[Any] = []
    i = 0
    n = len(text)
    while True:
        while i < n and text[i].isspace():
            i += 1
        if i >= n:
            return out
        try:
            obj, i = dec.raw_decode(text, i)
        except ValueError as e:
            raise ScannerError(f"failed to parse go list output: {e}") from e
        out.append(obj)


def _str_list(v: Any) -> list[str]:
    if not isinstance(v, list):
        return []
    return [x for x in v if isinstance(x, str)]


def _decl_func(item: Any) -> DeclFunc | None:
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    if not isinstance(name, str) or not name:
        return None
    return DeclFunc(
        name=name,
        doc=str(item.get("doc") or ""),
        params=_str_list(item.get("params")),
        results=_str_list(item.get("results")),
    )


def _decl_funcs(items: Any) -> list[DeclFunc]:
    if not isinstance(items, list):
        return []
    return [f for f in (_decl_func(x) for x in items) if f is not None]


def _decl_package(obj: dict[str, Any]) -> DeclPackage:
    types: list[DeclType] = []
    for t in obj.get("types") or []:
        if not isinstance(t, dict):
            continue
        name = t.get("name")
        if not isinstance(name, str) or not name:
            continue
        fields: list[DeclField] = []
        for f in t.get("fields") or []:
            if not isinstance(f, dict):
                continue
            fields.append(
                DeclField(
                    names=_str_list(f.get("names")),
                    doc=str(f.get("doc") or ""),
                    comment=str(f.get("comment") or ""),
                )
            )
        types.append(
            DeclType(
                name=name,
                doc=str(t.get("doc") or ""),
                is_struct=bool(t.get("struct")),
                fields=fields,
                funcs=_decl_funcs(t.get("funcs")),
                methods=_decl_funcs(t.get("methods")),
            )
        )

    return DeclPackage(
        name=str(obj.get("name") or ""),
        doc=str(obj.get("doc") or ""),
        funcs=_decl_funcs(obj.get("funcs")),
        types=types,
    )


def _scanner_go_source() -> str:
    # Keep this file stdlib-only so building it doesn't need network access.
    return r'''
package main

import (
	"encoding/json"
	"flag"
	"fmt"
	"go/ast"
	"go/doc"
	"go/parser"
	"go/token"
	"os"
	"path/filepath"
	"sort"
)

type outFunc struct {
	Name    string   `json:"name"`
	Doc     string   `json:"doc"`
	Params  []string `json:"params"`
	Results []string `json:"results"`
}

type outField struct {
	Names   []string `json:"names"`
	Doc     string   `json:"doc"`
	Comment string   `json:"comment"`
}

type outType struct {
	Name    string     `json:"name"`
	Doc     string     `json:"doc"`
	Struct  bool       `json:"struct"`
	Fields  []outField `json:"fields"`
	Funcs   []outFunc  `json:"funcs"`
	Methods []outFunc  `json:"methods"`
}

type outError struct {
	Kind    string `json:"kind"`
	Message string `json:"message"`
}

type outPkg struct {
	Name  string    `json:"name"`
	Doc   string    `json:"doc"`
	Funcs []outFunc `json:"funcs"`
	Types []outType `json:"types"`
	Error *outError `json:"error,omitempty"`
}

func main() {
	var dir, importPath string
	flag.StringVar(&dir, "dir", "", "package directory")
	flag.StringVar(&importPath, "import-path", "", "package import path")
	flag.Parse()

	if dir == "" {
		fmt.Fprintln(os.Stderr, "missing --dir")
		os.Exit(2)
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	if err := enc.Encode(scan(dir, importPath, flag.Args())); err != nil {
		fmt.Fprintln(os.Stderr, err.Error())
		os.Exit(1)
	}
}

func fail(kind, msg string) outPkg {
	return outPkg{Error: &outError{Kind: kind, Message: msg}}
}

func scan(dir, importPath string, files []string) outPkg {
	fset := token.NewFileSet()
	parsed := make([]*ast.File, 0, len(files))
	names := map[string]bool{}
	for _, name := range files {
		af, err := parser.ParseFile(fset, filepath.Join(dir, name), nil, parser.ParseComments)
		if err != nil {
			return fail("parse", err.Error())
		}
		names[af.Name.Name] = true
		parsed = append(parsed, af)
	}
	if len(parsed) == 0 {
		return fail("resolution", fmt.Sprintf("no packages in %q", dir))
	}
	if len(names) > 1 {
		found := make([]string, 0, len(names))
		for n := range names {
			found = append(found, n)
		}
		sort.Strings(found)
		return fail("resolution", fmt.Sprintf("multiple packages in %q: %v", dir, found))
	}

	pkg, err := doc.NewFromFiles(fset, parsed, importPath, doc.AllDecls)
	if err != nil {
		return fail("parse", err.Error())
	}

	out := outPkg{
		Name:  pkg.Name,
		Doc:   pkg.Doc,
		Funcs: funcs(pkg.Funcs),
		Types: make([]outType, 0, len(pkg.Types)),
	}
	for _, typ := range pkg.Types {
		ot := outType{
			Name:    typ.Name,
			Doc:     typ.Doc,
			Funcs:   funcs(typ.Funcs),
			Methods: funcs(typ.Methods),
		}
		if st := structOf(typ); st != nil {
			ot.Struct = true
			ot.Fields = fields(st)
		}
		out.Types = append(out.Types, ot)
	}
	return out
}

func structOf(typ *doc.Type) *ast.StructType {
	if typ.Decl == nil {
		return nil
	}
	for _, spec := range typ.Decl.Specs {
		ts, ok := spec.(*ast.TypeSpec)
		if !ok || ts.Name == nil || ts.Name.Name != typ.Name {
			continue
		}
		st, _ := ts.Type.(*ast.StructType)
		return st
	}
	return nil
}

func fields(st *ast.StructType) []outField {
	out := []outField{}
	if st.Fields == nil {
		return out
	}
	for _, f := range st.Fields.List {
		names := make([]string, 0, len(f.Names))
		for _, n := range f.Names {
			names = append(names, n.Name)
		}
		out = append(out, outField{
			Names:   names,
			Doc:     f.Doc.Text(),
			Comment: f.Comment.Text(),
		})
	}
	return out
}

func funcs(fns []*doc.Func) []outFunc {
	out := make([]outFunc, 0, len(fns))
	for _, fn := range fns {
		out = append(out, outFunc{
			Name:    fn.Name,
			Doc:     fn.Doc,
			Params:  fieldNames(fn.Decl.Type.Params),
			Results: fieldNames(fn.Decl.Type.Results),
		})
	}
	return out
}

func fieldNames(fl *ast.FieldList) []string {
	out := []string{}
	if fl == nil {
		return out
	}
	for _, f := range fl.List {
		for _, n := range f.Names {
			out = append(out, n.Name)
		}
	}
	return out
}
'''
