"""Byte and hex plumbing shared by the codec and the hash-to-curve pipeline."""
from __future__ import annotations

import re
from typing import Union

from blssig.errors import InvalidParameterError

Hex = Union[bytes, bytearray, str]

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def ensure_bytes(data: Hex) -> bytes:
    """Returns `data` as bytes, decoding it first if it is a hex string.

    Raises:
        InvalidParameterError: If `data` is neither bytes nor a valid,
            even-length hex string.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        if len(data) % 2:
            raise InvalidParameterError("Received invalid unpadded hex")
        if not _HEX_RE.fullmatch(data):
            raise InvalidParameterError("Invalid hex string: only 0-9, a-f and A-F are allowed")
        return bytes.fromhex(data)
    raise InvalidParameterError(f"Expected hex string or bytes, got {type(data).__name__}")


def bytes_to_hex(data: bytes) -> str:
    return bytes(data).hex()


def os2ip(data: bytes) -> int:
    return int.from_bytes(data, "big")


def i2osp(value: int, length: int) -> bytes:
    """Encodes a non-negative integer as exactly `length` big-endian bytes."""
    if value < 0 or value >= 1 << (8 * length):
        raise InvalidParameterError(f"Bad I2OSP call: value={value} length={length}")
    return value.to_bytes(length, "big")


def strxor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


__all__ = ["Hex", "ensure_bytes", "bytes_to_hex", "os2ip", "i2osp", "strxor"]
