"""Probe program synthesis, build and execution."""

from __future__ import annotations

from .build import build_probe
from .execute import run_probe
from .program import render_program
from .toolchain import GbToolchain, GoToolchain, Toolchain, get_toolchain
from .workspace import probe_workspace

__all__ = [
    "GbToolchain",
    "GoToolchain",
    "Toolchain",
    "build_probe",
    "get_toolchain",
    "probe_workspace",
    "render_program",
    "run_probe",
]
