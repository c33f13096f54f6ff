from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="goreflect")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log probe workspace and toolchain activity.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print goreflect version.")

    p_reflect = sub.add_parser(
        "reflect",
        help="Describe Go interfaces by building and running a reflection probe.",
    )
    p_reflect.add_argument("import_path", help="Go import path of the package holding the interfaces.")
    p_reflect.add_argument("symbols", help="Comma-separated interface names, e.g. Fooer,Barer.")
    p_reflect.add_argument(
        "--prog-only",
        action="store_true",
        help="Only generate the probe program; write it to stdout and exit.",
    )
    p_reflect.add_argument(
        "--exec-only",
        default=None,
        help="Run this pre-built probe program instead of building one.",
    )
    p_reflect.add_argument(
        "--toolchain",
        choices=["go", "gb"],
        default=None,
        help="Toolchain used to build the probe (default: GOREFLECT_TOOLCHAIN or go).",
    )
    p_reflect.add_argument(
        "--workdir",
        default=None,
        help="Directory to create the probe workspace in (default: GOREFLECT_WORKDIR or .).",
    )
    p_reflect.add_argument("--out", default=None, help="Write the package description JSON here instead of stdout.")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.cmd == "version":
        try:
            print(importlib.metadata.version("goreflect"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return

    if args.cmd == "reflect":
        from .errors import GoReflectError
        from .pipeline import reflect
        from .paths import default_workspace_root
        from .probe.toolchain import get_toolchain

        symbols = [s.strip() for s in args.symbols.split(",") if s.strip()]
        toolchain = None
        try:
            if args.toolchain is not None:
                toolchain = get_toolchain(args.toolchain, cwd=args.workdir or default_workspace_root())
            pkg = reflect(
                args.import_path,
                symbols,
                exec_only=args.exec_only,
                prog_only=args.prog_only,
                toolchain=toolchain,
                workspace_root=args.workdir,
            )
        except GoReflectError as e:
            print(f"goreflect: {type(e).__name__}: {e}", file=sys.stderr)
            raise SystemExit(1) from e

        if pkg is None:
            # --prog-only already wrote the program.
            return

        text = json.dumps(pkg.to_wire(), indent=2) + "\n"
        if args.out:
            Path(args.out).write_text(text, encoding="utf-8")
        else:
            sys.stdout.write(text)
        return
