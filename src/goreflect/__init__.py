"""goreflect: describe Go interfaces by building and running a reflection probe."""

from __future__ import annotations

from . import errors, model
from .model import Package
from .protocol import decode_output, encode_package
from .pipeline import reflect

__all__ = [
    "Package",
    "decode_output",
    "encode_package",
    "errors",
    "model",
    "reflect",
]
