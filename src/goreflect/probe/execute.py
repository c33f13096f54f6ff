from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ..errors import ExecError

logger = logging.getLogger(__name__)


def run_probe(prog_path: str | Path) -> bytes:
    """Run the probe and return everything it wrote to stdout.

    stderr is left attached to ours. There is no timeout; a probe that never
    exits blocks the caller.
    """
    logger.debug("running probe %s", prog_path)
    try:
        proc = subprocess.run(
            [str(prog_path)],
            stdout=subprocess.PIPE,
            stderr=None,
            check=False,
        )
    except OSError as e:
        raise ExecError(f"failed to run probe {prog_path}: {e}") from e

    if proc.returncode != 0:
        # Not retried: the target package's init code may already have run.
        raise ExecError(f"probe {prog_path} exited with status {proc.returncode}")
    return proc.stdout or b""
