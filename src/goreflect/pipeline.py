"""Public entry point: reflect on Go interfaces through a probe program."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from .model import Package
from .probe.build import build_probe
from .probe.execute import run_probe
from .probe.program import render_program
from .probe.toolchain import Toolchain, get_toolchain
from .probe.workspace import probe_workspace
from .protocol import decode_output

logger = logging.getLogger(__name__)


def reflect(
    import_path: str,
    symbols: Sequence[str],
    *,
    exec_only: str | Path | None = None,
    prog_only: bool = False,
    toolchain: Toolchain | None = None,
    workspace_root: str | Path | None = None,
    out: TextIO | None = None,
) -> Package | None:
    """Describe the interfaces `symbols` of the Go package `import_path`.

    - `exec_only`: run this pre-built probe instead of synthesizing and
      building one. No workspace is created and the toolchain is not used.
    - `prog_only`: write the probe source to `out` (default stdout) and
      return None without building or running anything.

    In build mode the probe is built by `toolchain` (default: selected by
    `GOREFLECT_TOOLCHAIN`) inside a temporary workspace under
    `workspace_root` (default: `GOREFLECT_WORKDIR` or the current directory).
    """
    if exec_only is not None:
        return decode_output(run_probe(exec_only))

    source = render_program(import_path, symbols)
    if prog_only:
        (out if out is not None else sys.stdout).write(source)
        return None

    from .paths import default_toolchain_name, default_workspace_root

    root = Path(workspace_root) if workspace_root is not None else default_workspace_root()
    if toolchain is None:
        toolchain = get_toolchain(default_toolchain_name(), cwd=root)

    with probe_workspace(root) as workspace:
        prog_path = build_probe(workspace=workspace, source=source, toolchain=toolchain)
        try:
            stdout = run_probe(prog_path)
        finally:
            _remove_probe_binary(prog_path)

    return decode_output(stdout)


def _remove_probe_binary(prog_path: Path) -> None:
    try:
        prog_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("failed to remove probe binary %s: %s", prog_path, e)
