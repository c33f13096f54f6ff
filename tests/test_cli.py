from __future__ import annotations

import json
from pathlib import Path

import pytest


def test_cli_reflect_exec_only_prints_json(make_probe, capsys):
    from goreflect.cli import main
    from goreflect.model import Interface, Method, Package, Parameter, PredeclaredType
    from goreflect.protocol import encode_package

    pkg = Package(
        name="iface",
        interfaces=(Interface(name="Fooer", methods=(Method(name="Len", results=(Parameter(PredeclaredType("int")),)),)),),
    )
    probe = make_probe(b"ENCODED_PKG\n" + encode_package(pkg))

    main(["reflect", "sample/iface", "Fooer", "--exec-only", str(probe)])

    out = json.loads(capsys.readouterr().out)
    assert out == pkg.to_wire()
    assert Package.from_wire(out) == pkg


def test_cli_reflect_writes_out_file(make_probe, tmp_path: Path):
    from goreflect.cli import main
    from goreflect.model import Package
    from goreflect.protocol import encode_package

    probe = make_probe(b"ENCODED_PKG\n" + encode_package(Package(name="iface")))
    out_file = tmp_path / "pkg.json"

    main(["reflect", "sample/iface", "Fooer", "--exec-only", str(probe), "--out", str(out_file)])

    assert json.loads(out_file.read_text(encoding="utf-8")) == {"name": "iface", "interfaces": []}


def test_cli_prog_only_prints_program(capsys, tmp_path: Path):
    from goreflect.cli import main
    from goreflect.probe.program import render_program

    main(["reflect", "sample/iface", "Fooer, Barer", "--prog-only", "--workdir", str(tmp_path)])

    assert capsys.readouterr().out == render_program("sample/iface", ["Fooer", "Barer"])
    assert list(tmp_path.iterdir()) == []


def test_cli_reports_errors_with_exit_status(make_probe, capsys):
    from goreflect.cli import main

    probe = make_probe(b"", exit_code=4)
    with pytest.raises(SystemExit) as ei:
        main(["reflect", "sample/iface", "Fooer", "--exec-only", str(probe)])
    assert ei.value.code == 1
    assert "ExecError" in capsys.readouterr().err


def test_cli_version(capsys):
    from goreflect.cli import main

    main(["version"])
    assert capsys.readouterr().out.strip()


def test_cli_unknown_toolchain_env_exits_with_status(monkeypatch, tmp_path: Path, capsys):
    from goreflect.cli import main

    monkeypatch.setenv("GOREFLECT_TOOLCHAIN", "bazel")
    with pytest.raises(SystemExit) as ei:
        main(["reflect", "sample/iface", "Fooer", "--workdir", str(tmp_path)])
    assert ei.value.code == 1
    err = capsys.readouterr().err
    assert "ToolchainQueryError" in err
    assert "unknown toolchain 'bazel'" in err
    assert list(tmp_path.iterdir()) == []
