from __future__ import annotations

import os
from pathlib import Path

DEFAULT_TOOLCHAIN = "go"


def default_workspace_root() -> Path:
    """Return the directory probe workspaces are created in.

    Defaults to the current directory so the probe builds inside the caller's
    Go module. Override with `GOREFLECT_WORKDIR`.
    """
    override = os.environ.get("GOREFLECT_WORKDIR")
    if override:
        return Path(override)
    return Path(".")


def default_toolchain_name() -> str:
    """Return the toolchain name to build probes with.

    Override with `GOREFLECT_TOOLCHAIN` (`go` or `gb`).
    """
    return os.environ.get("GOREFLECT_TOOLCHAIN") or DEFAULT_TOOLCHAIN
