from __future__ import annotations

import sys

import goreflect


def main() -> None:
    # Run from inside a Go module that can import the target package, e.g.
    #   python examples/describe_interfaces.py io Reader,Writer
    # Requires the Go toolchain on PATH.
    import_path = sys.argv[1] if len(sys.argv) > 1 else "io"
    symbols = sys.argv[2].split(",") if len(sys.argv) > 2 else ["Reader", "Writer"]

    pkg = goreflect.reflect(import_path, symbols)
    pm = {path: path.rsplit("/", 1)[-1] for path in pkg.imports()}
    print(f"package {pkg.name}")
    for intf in pkg.interfaces:
        print(f"\ntype {intf.name} interface {{")
        for m in intf.methods:
            print(f"    {m.name}{m.signature(pm, import_path)}")
        print("}")


if __name__ == "__main__":
    main()
