from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_goreflect_env(monkeypatch):
    # Keep the developer's shell configuration out of the tests.
    monkeypatch.delenv("GOREFLECT_WORKDIR", raising=False)
    monkeypatch.delenv("GOREFLECT_TOOLCHAIN", raising=False)


def _write_stub_probe(path: Path, stdout: bytes, exit_code: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "\n".join(
            [
                f"#!{sys.executable}",
                "import sys",
                f"sys.stdout.buffer.write({stdout!r})",
                "sys.stdout.flush()",
                f"sys.exit({exit_code})",
                "",
            ]
        ),
        encoding="utf-8",
    )
    path.chmod(0o755)
    return path


@pytest.fixture
def make_probe(tmp_path: Path):
    """Write an executable stand-in for a built probe program."""
    if os.name == "nt":
        pytest.skip("stub probes rely on #! scripts")

    def _make(stdout: bytes, *, exit_code: int = 0, path: Path | None = None) -> Path:
        return _write_stub_probe(path or tmp_path / "probe", stdout, exit_code)

    return _make


class FakeToolchain:
    project_dir_key = "FAKE_PROJECT_DIR"
    bin_suffix_key = "FAKE_BIN_SUFFIX"

    def __init__(
        self,
        project_dir: Path,
        *,
        probe_stdout: bytes = b"",
        probe_exit_code: int = 0,
        bin_suffix: str = "",
        fail_query: str | None = None,
        fail_build: bool = False,
    ) -> None:
        self.project_dir = project_dir
        self.probe_stdout = probe_stdout
        self.probe_exit_code = probe_exit_code
        self.bin_suffix = bin_suffix
        self.fail_query = fail_query
        self.fail_build = fail_build
        self.calls: list[tuple[str, str]] = []
        self.sources: list[str] = []
        self.workspaces: list[Path] = []
        self.built: list[Path] = []

    def query(self, key: str) -> str:
        from goreflect.errors import ToolchainQueryError

        self.calls.append(("query", key))
        if key == self.fail_query:
            raise ToolchainQueryError(f"cannot query {key}")
        return {
            self.project_dir_key: str(self.project_dir),
            self.bin_suffix_key: self.bin_suffix,
        }[key]

    def build(self, source_dir: Path) -> None:
        from goreflect.errors import BuildError

        self.calls.append(("build", str(source_dir)))
        self.workspaces.append(source_dir)
        self.sources.append((source_dir / "prog.go").read_text(encoding="utf-8"))
        if self.fail_build:
            raise BuildError("command failed (exit 2): fake build")
        out = self.project_dir / "bin" / f"{source_dir.name}{self.bin_suffix}"
        self.built.append(_write_stub_probe(out, self.probe_stdout, self.probe_exit_code))


@pytest.fixture
def fake_toolchain(tmp_path: Path):
    if os.name == "nt":
        pytest.skip("stub probes rely on #! scripts")

    def _make(**kwargs) -> FakeToolchain:  # noqa: ANN003
        return FakeToolchain(tmp_path / "project", **kwargs)

    return _make


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root
