from __future__ import annotations

import logging
from pathlib import Path

from ..errors import WriteError
from .program import PROGRAM_FILENAME
from .toolchain import Toolchain

logger = logging.getLogger(__name__)


def write_program(workspace: Path, source: str) -> Path:
    path = workspace / PROGRAM_FILENAME
    try:
        path.write_text(source, encoding="utf-8")
        path.chmod(0o600)
    except OSError as e:
        raise WriteError(f"failed to write probe source {path}: {e}") from e
    return path


def probe_binary_path(*, project_dir: str, bin_suffix: str, workspace: Path) -> Path:
    """Where the toolchain puts the executable built from `workspace`."""
    return Path(project_dir) / "bin" / f"{workspace.name}{bin_suffix}"


def build_probe(*, workspace: Path, source: str, toolchain: Toolchain) -> Path:
    """Write `source` into `workspace`, build it and return the executable path."""
    write_program(workspace, source)

    project_dir = toolchain.query(toolchain.project_dir_key)
    bin_suffix = toolchain.query(toolchain.bin_suffix_key)
    prog_path = probe_binary_path(project_dir=project_dir, bin_suffix=bin_suffix, workspace=workspace)

    toolchain.build(workspace)
    logger.debug("built probe %s", prog_path)
    return prog_path
