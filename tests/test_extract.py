from __future__ import annotations

import pytest


def _frontend():
    from codoc.frontend import (
        DeclField,
        DeclFunc,
        DeclPackage,
        DeclType,
        MemoryFrontEnd,
        PackageIdentity,
    )

    ident = PackageIdentity(id="example.com/testpkg", name="testpkg", dir="/src/testpkg")
    decl = DeclPackage(
        name="testpkg",
        doc="Package testpkg is for tests.\n",
        funcs=[
            DeclFunc(name="ExportedFunc", doc="ExportedFunc is an exported function\n"),
            DeclFunc(name="unexportedFunc", doc="unexportedFunc is an unexported function\n"),
            DeclFunc(name="Undocumented", params=["a", "", "b"], results=["", ""]),
        ],
        types=[
            DeclType(
                name="ExportedType",
                doc="ExportedType is an exported struct\n",
                is_struct=True,
                fields=[
                    DeclField(names=["A", "B"], doc="A and B share a doc.\n"),
                    DeclField(names=["C"], comment="trailing\n"),
                    DeclField(names=["D"]),
                    DeclField(names=[], doc="embedded\n"),
                ],
                funcs=[DeclFunc(name="NewExportedType", doc="NewExportedType makes one.", results=["t"])],
                methods=[
                    DeclFunc(name="Run", doc="Run runs.", params=["ctx"], results=["err"]),
                    DeclFunc(name="reset", doc="reset resets."),
                ],
            ),
            DeclType(name="unexportedType", doc="unexportedType is an unexported struct\n", is_struct=True),
            DeclType(
                name="Kind",
                doc="Kind is not a struct.",
                is_struct=False,
                funcs=[DeclFunc(name="ParseKind", doc="ParseKind parses.")],
                methods=[DeclFunc(name="String", doc="String formats.")],
            ),
        ],
    )
    return MemoryFrontEnd({"./testpkg": (ident, decl)})


def test_extract_all_declarations():
    from codoc.extract import extract

    pkg = extract("./testpkg", frontend=_frontend())
    assert pkg.id == "example.com/testpkg"
    assert pkg.name == "testpkg"
    assert pkg.doc == "Package testpkg is for tests."
    assert set(pkg.functions) == {"ExportedFunc", "unexportedFunc", "Undocumented", "NewExportedType"}
    assert set(pkg.structs) == {"ExportedType", "unexportedType"}

    fn = pkg.functions["Undocumented"]
    assert fn.args == ["a", "b"]
    assert fn.results == []
    assert pkg.functions["ExportedFunc"].doc == "ExportedFunc is an exported function"


def test_non_struct_types_are_skipped_entirely():
    from codoc.extract import extract

    pkg = extract("./testpkg", frontend=_frontend())
    assert "Kind" not in pkg.structs
    assert "ParseKind" not in pkg.functions
    assert "String" not in pkg.functions


def test_struct_methods_and_fields():
    from codoc.extract import extract

    st = extract("./testpkg", frontend=_frontend()).structs["ExportedType"]
    assert st.doc == "ExportedType is an exported struct"
    assert set(st.methods) == {"Run", "reset"}
    assert st.methods["Run"].args == ["ctx"]
    assert st.methods["Run"].results == ["err"]

    assert set(st.fields) == {"A", "B", "C"}
    assert st.fields["A"].name == "A"
    assert st.fields["B"].doc == "A and B share a doc."
    assert st.fields["C"].doc == ""
    assert st.fields["C"].comment == "trailing"


def test_exported_filter_applies_to_funcs_methods_and_structs():
    from codoc.extract import from_path
    from codoc.filters import exported

    pkg = from_path("./testpkg", exported(), frontend=_frontend())
    assert set(pkg.functions) == {"ExportedFunc", "Undocumented", "NewExportedType"}
    assert set(pkg.structs) == {"ExportedType"}
    assert set(pkg.structs["ExportedType"].methods) == {"Run"}


def test_with_doc_filter():
    from codoc.extract import from_path
    from codoc.filters import exported, with_doc

    pkg = from_path("./testpkg", exported(), with_doc(), frontend=_frontend())
    assert set(pkg.functions) == {"ExportedFunc", "NewExportedType"}


def test_custom_struct_filter_does_not_drop_constructors():
    from codoc.extract import from_path
    from codoc.filters import filter_structs

    pkg = from_path("./testpkg", filter_structs(lambda st: False), frontend=_frontend())
    assert pkg.structs == {}
    assert "NewExportedType" in pkg.functions


def test_duplicate_function_last_wins(caplog):
    from codoc.extract import extract
    from codoc.frontend import DeclFunc, DeclPackage, MemoryFrontEnd, PackageIdentity

    fe = MemoryFrontEnd(
        {
            "p": (
                PackageIdentity(id="example.com/p", name="p"),
                DeclPackage(name="p", funcs=[DeclFunc(name="F", doc="one"), DeclFunc(name="F", doc="two")]),
            )
        }
    )
    with caplog.at_level("WARNING", logger="codoc.extract"):
        pkg = extract("p", frontend=fe)
    assert pkg.functions["F"].doc == "two"
    assert "duplicate function F" in caplog.text


def test_missing_package_raises_resolution_error():
    from codoc.errors import ResolutionError
    from codoc.extract import extract

    with pytest.raises(ResolutionError, match="no packages") as exc:
        extract("/non/existent/path", frontend=_frontend())
    assert exc.value.location == "/non/existent/path"


def test_multiple_packages_raise_resolution_error():
    from codoc.errors import ResolutionError
    from codoc.extract import extract
    from codoc.frontend import DeclPackage, MemoryFrontEnd, PackageIdentity

    fe = MemoryFrontEnd(
        {"dir": (PackageIdentity(id="example.com/a", name="a"), DeclPackage(name="a"))},
        extra_candidates={"dir": [PackageIdentity(id="example.com/b", name="b")]},
    )
    with pytest.raises(ResolutionError, match="multiple packages"):
        extract("dir", frontend=fe)


def test_parse_error_propagates_with_location():
    from codoc.errors import ParseError
    from codoc.extract import extract
    from codoc.frontend import PackageIdentity

    class BrokenFrontEnd:
        def resolve(self, location):
            return [PackageIdentity(id="example.com/broken", name="broken")]

        def declarations(self, identity):
            raise ParseError("broken.go:3:1: expected declaration")

    with pytest.raises(ParseError, match="expected declaration") as exc:
        extract("./broken", frontend=BrokenFrontEnd())
    assert exc.value.location == "./broken"


def test_register_path():
    from codoc.extract import register_path
    from codoc.filters import exported
    from codoc.registry import Registry

    reg = Registry()
    pkg_id = register_path(reg, "./testpkg", exported(), frontend=_frontend())
    assert pkg_id == "example.com/testpkg"
    assert reg.get_function("example.com/testpkg.ExportedFunc") is not None
    assert reg.get_function("example.com/testpkg.NewExportedType") is not None
    assert reg.get_function("example.com/testpkg.ExportedType.Run") is not None
    assert reg.get_function("example.com/testpkg.ExportedType.reset") is None


def test_register_path_failure_registers_nothing():
    from codoc.errors import ResolutionError
    from codoc.extract import register_path
    from codoc.registry import Registry

    reg = Registry()
    with pytest.raises(ResolutionError):
        register_path(reg, "/non/existent/path", frontend=_frontend())
    assert len(reg) == 0


def test_extract_all_isolates_failures():
    from codoc.errors import ResolutionError
    from codoc.extract import extract_all

    results = extract_all(["./testpkg", "/missing", "./testpkg"], frontend=_frontend(), max_workers=3)
    assert [r.location for r in results] == ["./testpkg", "/missing", "./testpkg"]
    assert results[0].ok and results[2].ok
    assert results[0].package == results[2].package
    assert not results[1].ok
    assert results[1].package is None
    assert isinstance(results[1].error, ResolutionError)


def test_extract_all_empty():
    from codoc.extract import extract_all

    assert extract_all([], frontend=_frontend()) == []


def test_scanner_error_gets_location():
    from codoc.errors import ScannerError
    from codoc.extract import extract
    from codoc.frontend import PackageIdentity

    class CrashingFrontEnd:
        def resolve(self, location):
            return [PackageIdentity(id="example.com/crash", name="crash")]

        def declarations(self, identity):
            raise ScannerError("go scan failed for example.com/crash")

    with pytest.raises(ScannerError) as exc:
        extract("./crash", frontend=CrashingFrontEnd())
    assert exc.value.location == "./crash"
