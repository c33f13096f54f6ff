from __future__ import annotations

import pytest


def test_render_program_is_deterministic():
    from goreflect.probe.program import render_program

    a = render_program("sample/iface", ["Fooer", "Barer"])
    b = render_program("sample/iface", ["Fooer", "Barer"])
    assert a == b
    assert a.encode("utf-8") == b.encode("utf-8")


def test_render_program_keeps_symbol_order():
    from goreflect.probe.program import render_program

    src = render_program("sample/iface", ["Fooer", "Barer"])
    fooer = '{"Fooer", reflect.TypeOf((*pkg_.Fooer)(nil)).Elem()},'
    barer = '{"Barer", reflect.TypeOf((*pkg_.Barer)(nil)).Elem()},'
    assert src.count("reflect.TypeOf((*pkg_.") == 2
    assert src.index(fooer) < src.index(barer)

    reversed_src = render_program("sample/iface", ["Barer", "Fooer"])
    assert reversed_src.index(barer) < reversed_src.index(fooer)


def test_render_program_imports_target_under_fixed_alias():
    from goreflect.probe.program import render_program

    src = render_program("example.com/mod/v2/iface", ["Store"])
    assert src.startswith("package main\n")
    assert '    pkg_ "example.com/mod/v2/iface"' in src
    assert 'path.Base("example.com/mod/v2/iface")' in src
    assert 'fmt.Println("\\nENCODED_PKG")' in src
    assert "func main() {" in src
    assert "func typeValue(t reflect.Type)" in src


@pytest.mark.parametrize(
    "import_path, symbols",
    [
        ("sample/iface", []),
        ("", ["Fooer"]),
        ("sample/iface", ["Foo er"]),
        ("sample/iface", ["pkg.Fooer"]),
        ("sample/iface", ["Fooer", "1Barer"]),
    ],
)
def test_render_program_rejects_unrenderable_input(import_path, symbols):
    from goreflect.errors import RenderError
    from goreflect.probe.program import render_program

    with pytest.raises(RenderError):
        render_program(import_path, symbols)


def test_render_program_does_not_check_symbol_existence():
    from goreflect.probe.program import render_program

    src = render_program("sample/iface", ["DoesNotExist"])
    assert "(*pkg_.DoesNotExist)(nil)" in src
