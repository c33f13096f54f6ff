from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..errors import WorkspaceError

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "goreflect_probe_"


@contextmanager
def probe_workspace(root: str | Path) -> Iterator[Path]:
    """Create a uniquely named workspace under `root`, removed on every exit path.

    A removal failure is raised only when the body succeeded; otherwise the
    body's error propagates and the removal failure is logged.
    """
    root = Path(root)
    try:
        workspace = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=str(root)))
    except OSError as e:
        raise WorkspaceError(f"failed to create probe workspace in {root}: {e}") from e
    logger.debug("created probe workspace %s", workspace)

    completed = False
    try:
        yield workspace
        completed = True
    finally:
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            if completed:
                raise WorkspaceError(f"failed to remove probe workspace {workspace}: {e}") from e
            logger.warning("failed to remove probe workspace %s: %s", workspace, e)
        else:
            logger.debug("removed probe workspace %s", workspace)
