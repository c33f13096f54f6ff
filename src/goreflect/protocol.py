"""Probe stdout protocol: free-form lines, a sentinel line, then a MessagePack Package."""

from __future__ import annotations

import io

import msgpack

from .errors import DecodeError, ProtocolError
from .model import Package

SENTINEL = "ENCODED_PKG"
_SENTINEL_LINE = (SENTINEL + "\n").encode("ascii")


def encode_package(pkg: Package) -> bytes:
    return msgpack.packb(pkg.to_wire(), use_bin_type=True)


def decode_package(payload: bytes) -> Package:
    try:
        obj = msgpack.unpackb(payload, raw=False)
    except Exception as e:  # noqa: BLE001 - boundary decoding error
        raise DecodeError(f"malformed package payload: {e}") from e
    try:
        return Package.from_wire(obj)
    except RecursionError as e:
        raise DecodeError("package payload nested too deeply") from e


def decode_output(stdout: bytes) -> Package:
    """Decode captured probe stdout.

    Lines before the sentinel are diagnostic noise and are skipped. Reaching
    the end of the stream without seeing the sentinel is a ProtocolError;
    anything wrong with the bytes after it is a DecodeError.
    """
    buf = io.BytesIO(stdout)
    for line in iter(buf.readline, b""):
        if line == _SENTINEL_LINE:
            return decode_package(buf.read())
    raise ProtocolError(f"probe output ended before the {SENTINEL} line ({len(stdout)} bytes read)")
