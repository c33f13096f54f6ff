from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Protocol

from ..errors import BuildError, ToolchainQueryError

logger = logging.getLogger(__name__)


class Toolchain(Protocol):
    """External toolchain used to build probe programs.

    `query` and `build` both block until the underlying command exits.
    """

    project_dir_key: str
    bin_suffix_key: str

    def query(self, key: str) -> str: ...

    def build(self, source_dir: Path) -> None: ...


def _missing_hint(prog: str) -> str:
    if prog == "go":
        return (
            "Go toolchain not found (`go` is missing from PATH). "
            "Install Go and ensure `go` is available on PATH, "
            "or pass a pre-built probe with `exec_only`."
        )
    return f"command not found: {prog} (install it or put it on PATH)"


def _query(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    prog = cmd[0]
    logger.debug("querying toolchain: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=None,
            check=False,
        )
    except FileNotFoundError as e:
        raise ToolchainQueryError(_missing_hint(prog)) from e
    except OSError as e:
        raise ToolchainQueryError(f"failed to run {prog}: {e}") from e

    if proc.returncode != 0:
        raise ToolchainQueryError(f"command failed (exit {proc.returncode}): {' '.join(cmd)}")
    return (proc.stdout or b"").decode("utf-8", errors="replace").strip("\n")


def _build(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> None:
    prog = cmd[0]
    logger.debug("building probe: %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        # stdout/stderr pass through so compiler errors are visible to the user.
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except FileNotFoundError as e:
        raise BuildError(_missing_hint(prog)) from e
    except OSError as e:
        raise BuildError(f"failed to run {prog}: {e}") from e

    if proc.returncode != 0:
        raise BuildError(f"command failed (exit {proc.returncode}): {' '.join(cmd)}")


class GoToolchain:
    """The standard `go` command.

    The probe is installed into `<GOPATH>/bin` under the workspace directory
    name, so it must live inside the caller's Go module for the target import
    to resolve.
    """

    project_dir_key = "GOPATH"
    bin_suffix_key = "GOEXE"

    def __init__(self, *, cwd: str | Path = ".", env: dict[str, str] | None = None) -> None:
        self.cwd = Path(cwd)
        self.env = env

    def query(self, key: str) -> str:
        value = _query(["go", "env", key], cwd=self.cwd, env=self.env)
        if key == "GOPATH":
            # GOPATH may list several roots; `go install` writes to the first.
            value = value.split(os.pathsep)[0]
        return value

    def build(self, source_dir: Path) -> None:
        source_dir = Path(source_dir).resolve()
        env = dict(self.env if self.env is not None else os.environ)
        env["GOBIN"] = str(Path(self.query("GOPATH")) / "bin")
        _build(
            ["go", "install", f"./{source_dir.name}"],
            cwd=source_dir.parent,
            env=env,
        )


class GbToolchain:
    """The `gb` project-based build tool."""

    project_dir_key = "GB_PROJECT_DIR"
    bin_suffix_key = "GB_BIN_SUFFIX"

    def __init__(self, *, cwd: str | Path = ".", env: dict[str, str] | None = None) -> None:
        self.cwd = Path(cwd)
        self.env = env

    def query(self, key: str) -> str:
        return _query(["gb", "info", key], cwd=self.cwd, env=self.env)

    def build(self, source_dir: Path) -> None:
        _build(["gb", "build", str(source_dir)], cwd=self.cwd, env=self.env)


TOOLCHAINS: dict[str, type[GoToolchain] | type[GbToolchain]] = {
    "go": GoToolchain,
    "gb": GbToolchain,
}


def get_toolchain(name: str, *, cwd: str | Path = ".") -> Toolchain:
    try:
        cls = TOOLCHAINS[name]
    except KeyError:
        raise ToolchainQueryError(f"unknown toolchain {name!r} (expected one of: {', '.join(sorted(TOOLCHAINS))})") from None
    return cls(cwd=cwd)
