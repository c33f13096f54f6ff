"""Domain-specific errors for goreflect."""

from __future__ import annotations


class GoReflectError(Exception):
    """Base error for goreflect."""


class WorkspaceError(GoReflectError):
    """Raised when the probe workspace cannot be created or removed."""


class RenderError(GoReflectError):
    """Raised when the probe program cannot be rendered."""


class WriteError(GoReflectError):
    """Raised when the probe source cannot be written to the workspace."""


class ToolchainQueryError(GoReflectError):
    """Raised when the toolchain cannot report a configuration value."""


class BuildError(GoReflectError):
    """Raised when building the probe program fails."""


class ExecError(GoReflectError):
    """Raised when the probe program cannot be started or exits non-zero."""


class ProtocolError(GoReflectError):
    """Raised when probe output never contains the sentinel line."""


class DecodeError(GoReflectError):
    """Raised when the payload after the sentinel cannot be decoded."""
