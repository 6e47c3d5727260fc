from __future__ import annotations

import importlib.util


def _load_module(path):
    spec = importlib.util.spec_from_file_location("codoc_generated", path)
    assert spec is not None and spec.loader is not None
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_generated_module_registers_packages(tmp_path):
    from codoc.codegen import write_module
    from codoc.model import Field, Function, Package, Struct
    from codoc.registry import Registry

    pkg = Package(
        id="example.com/gen",
        name="gen",
        doc='Package gen has "quotes"\nand newlines.',
        functions={"Make": Function(name="Make", doc="Make makes.", args=["n"], results=["out", "err"])},
        structs={
            "Thing": Struct(
                name="Thing",
                doc="Thing is a thing.",
                fields={"ID": Field(name="ID", comment="identifier")},
                methods={"Close": Function(name="Close", doc="Close closes.", results=["err"])},
            )
        },
    )
    out = write_module([pkg], tmp_path / "docs_gen.py", module_doc="Registered docs.")

    txt = out.read_text(encoding="utf-8")
    assert txt.startswith("# generated @ ")
    assert "by codoc" in txt.splitlines()[0]
    assert "def register(registry: Registry) -> None:" in txt

    mod = _load_module(out)
    assert mod.__doc__ == "Registered docs."
    assert mod.PACKAGES == [pkg]

    reg = Registry()
    mod.register(reg)
    assert reg.get_package("example.com/gen") == pkg
    assert reg.get_function("example.com/gen.Thing.Close").results == ["err"]


def test_generated_module_without_packages(tmp_path):
    from codoc.codegen import write_module

    mod = _load_module(write_module([], tmp_path / "empty_gen.py"))
    assert mod.PACKAGES == []
    assert mod.__doc__ is None
