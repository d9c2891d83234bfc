"""Serialization of G1 and G2 points (ZCash BLS12-381 encoding).

The three most significant bits of the first byte carry flags:
  - 0x80: compression flag, set on compressed encodings.
  - 0x40: infinity flag, set for the point at infinity.
  - 0x20: sign flag on compressed encodings, set when y is the
    lexicographically larger of its two candidate roots.

Encodings:
  - G1 compressed, 48 bytes: x with flags.
  - G1 uncompressed, 96 bytes: x || y.
  - G2 signature, 96 bytes: x.c1 with flags || x.c0.
  - G2 signature uncompressed and G2 point, 192 bytes: x.c1 || x.c0 || y.c1 || y.c0.

Compressed G2 point encoding is not supported; the signature encoding is the
compressed G2 form. Every decoded point goes through `assert_validity`, and
every encoder validates its input first.
"""
from __future__ import annotations

from typing import Tuple

from py_ecc.optimized_bls12_381 import FQ, FQ2, b, b2, field_modulus as P

from blssig.errors import InvalidParameterError, InvalidPointError, NonResidueError
from blssig.fields import fq2_values, fq_value, is_greater_root_fq, sqrt_fq, sqrt_fq2
from blssig.points import PointG1, PointG2
from blssig.utils import Hex, ensure_bytes, i2osp, os2ip

FIELD_ELEMENT_LENGTH = 48
G1_COMPRESSED_LENGTH = 48
G1_UNCOMPRESSED_LENGTH = 96
G2_SIGNATURE_LENGTH = 96
G2_UNCOMPRESSED_LENGTH = 192

POW_2_381 = 2 ** 381
POW_2_382 = 2 ** 382
POW_2_383 = 2 ** 383

_COMPRESSION_FLAG = 0x80
_INFINITY_FLAG = 0x40


def _flags(z: int) -> Tuple[int, int, int]:
    """Splits a 384-bit header word into (compression, infinity, sign) flags."""
    c_flag = (z % (POW_2_383 * 2)) // POW_2_383
    b_flag = (z % POW_2_383) // POW_2_382
    a_flag = (z % POW_2_382) // POW_2_381
    return c_flag, b_flag, a_flag


def _field_int(value: int, what: str) -> int:
    if value >= P:
        raise InvalidPointError(f"{what} is not a canonical field element")
    return value


def _split(data: bytes, parts: int) -> Tuple[int, ...]:
    n = FIELD_ELEMENT_LENGTH
    return tuple(os2ip(data[i * n:(i + 1) * n]) for i in range(parts))


# --- G1 ---

def g1_from_bytes(data: Hex) -> PointG1:
    """Decodes a compressed (48-byte) or uncompressed (96-byte) G1 point.

    Raises:
        InvalidParameterError: If the length is wrong or the compression flag
            disagrees with the length.
        NonResidueError: If x^3 + b has no square root.
        InvalidPointError: If the result is off-curve or outside the subgroup.
    """
    data = ensure_bytes(data)
    if len(data) == G1_COMPRESSED_LENGTH:
        z = os2ip(data)
        c_flag, b_flag, a_flag = _flags(z)
        if not c_flag:
            raise InvalidParameterError("Compression bit is not set.")
        if b_flag:
            return PointG1.ZERO
        x = FQ(_field_int(z % POW_2_381, "G1 x-coordinate"))
        try:
            y = sqrt_fq(x ** 3 + b)
        except NonResidueError as e:
            raise NonResidueError("Invalid compressed G1 point") from e
        if int(is_greater_root_fq(y)) != a_flag:
            y = -y
        point = PointG1(x, y)
    elif len(data) == G1_UNCOMPRESSED_LENGTH:
        if data[0] & _COMPRESSION_FLAG:
            raise InvalidParameterError("Compression bit is set on an uncompressed point.")
        if data[0] & _INFINITY_FLAG:
            return PointG1.ZERO
        x, y = _split(data, 2)
        point = PointG1(FQ(_field_int(x, "G1 x-coordinate")), FQ(_field_int(y, "G1 y-coordinate")))
    else:
        raise InvalidParameterError(f"Invalid point G1, expected 48/96 bytes, got {len(data)}")
    return point.assert_validity()


def g1_to_bytes(point: PointG1, compressed: bool = False) -> bytes:
    """Encodes a G1 point as 48 compressed or 96 uncompressed bytes."""
    point.assert_validity()
    if compressed:
        if point.is_zero():
            return i2osp(POW_2_383 + POW_2_382, G1_COMPRESSED_LENGTH)
        x, y = point.to_affine()
        flag = int(is_greater_root_fq(y))
        return i2osp(fq_value(x) + flag * POW_2_381 + POW_2_383, G1_COMPRESSED_LENGTH)
    if point.is_zero():
        return bytes([_INFINITY_FLAG]) + bytes(G1_UNCOMPRESSED_LENGTH - 1)
    x, y = point.to_affine()
    return i2osp(fq_value(x), FIELD_ELEMENT_LENGTH) + i2osp(fq_value(y), FIELD_ELEMENT_LENGTH)


# --- G2 ---

def _g2_sign_flag(y: FQ2) -> int:
    y0, y1 = fq2_values(y)
    return (y1 * 2) // P if y1 > 0 else (y0 * 2) // P


def _g2_uncompressed(data: bytes) -> PointG2:
    if data[0] & _COMPRESSION_FLAG:
        raise InvalidParameterError("Compression bit is set on an uncompressed point.")
    if data[0] & _INFINITY_FLAG:
        return PointG2.ZERO
    x1, x0, y1, y0 = (_field_int(v, "G2 coordinate") for v in _split(data, 4))
    return PointG2(FQ2([x0, x1]), FQ2([y0, y1])).assert_validity()


def _g2_uncompressed_bytes(point: PointG2) -> bytes:
    if point.is_zero():
        return bytes([_INFINITY_FLAG]) + bytes(G2_UNCOMPRESSED_LENGTH - 1)
    x, y = point.to_affine()
    x0, x1 = fq2_values(x)
    y0, y1 = fq2_values(y)
    return b"".join(i2osp(v, FIELD_ELEMENT_LENGTH) for v in (x1, x0, y1, y0))


def g2_from_signature(data: Hex) -> PointG2:
    """Decodes a signature: 96 bytes compressed or 192 bytes uncompressed.

    For the compressed form y is recovered from y^2 = x^3 + 4(1 + i); the
    sign flag selects between y and -y by comparing y.c1, or y.c0 when
    y.c1 is zero.

    Raises:
        InvalidParameterError: If the length is wrong or flags are malformed.
        NonResidueError: If x^3 + b2 has no square root.
        InvalidPointError: If the result is off-curve or outside the subgroup.
    """
    data = ensure_bytes(data)
    if len(data) == G2_UNCOMPRESSED_LENGTH:
        return _g2_uncompressed(data)
    if len(data) != G2_SIGNATURE_LENGTH:
        raise InvalidParameterError("Invalid compressed signature length, must be 96 or 192")

    z1, z2 = _split(data, 2)
    c_flag, b_flag, a_flag = _flags(z1)
    if not c_flag:
        raise InvalidParameterError("Compression bit is not set.")
    if b_flag:
        return PointG2.ZERO
    x1 = _field_int(z1 % POW_2_381, "G2 x-coordinate")
    x0 = _field_int(z2, "G2 x-coordinate")
    x = FQ2([x0, x1])
    try:
        y = sqrt_fq2(x ** 3 + b2)
    except NonResidueError as e:
        raise NonResidueError("Failed to find a square root") from e
    if _g2_sign_flag(y) != a_flag:
        y = -y
    return PointG2(x, y).assert_validity()


def g2_to_signature(point: PointG2, compressed: bool = True) -> bytes:
    """Encodes a G2 point in the signature format (96 or 192 bytes)."""
    point.assert_validity()
    if not compressed:
        return _g2_uncompressed_bytes(point)
    if point.is_zero():
        return i2osp(POW_2_383 + POW_2_382, FIELD_ELEMENT_LENGTH) + bytes(FIELD_ELEMENT_LENGTH)
    x, y = point.to_affine()
    x0, x1 = fq2_values(x)
    z1 = x1 + _g2_sign_flag(y) * POW_2_381 + POW_2_383
    return i2osp(z1, FIELD_ELEMENT_LENGTH) + i2osp(x0, FIELD_ELEMENT_LENGTH)


def g2_from_bytes(data: Hex) -> PointG2:
    """Decodes a 192-byte uncompressed G2 point.

    Raises:
        InvalidParameterError: For 96-byte input (compressed points are not
            supported) or any other wrong length.
        InvalidPointError: If the result is off-curve or outside the subgroup.
    """
    data = ensure_bytes(data)
    if len(data) == G2_SIGNATURE_LENGTH:
        raise InvalidParameterError("Compressed format not supported yet.")
    if len(data) != G2_UNCOMPRESSED_LENGTH:
        raise InvalidParameterError("Invalid uncompressed point G2, expected 192 bytes")
    return _g2_uncompressed(data)


def g2_to_bytes(point: PointG2, compressed: bool = False) -> bytes:
    point.assert_validity()
    if compressed:
        raise InvalidParameterError("Point compression has not yet been implemented")
    return _g2_uncompressed_bytes(point)


__all__ = [
    "G1_COMPRESSED_LENGTH",
    "G1_UNCOMPRESSED_LENGTH",
    "G2_SIGNATURE_LENGTH",
    "G2_UNCOMPRESSED_LENGTH",
    "g1_from_bytes",
    "g1_to_bytes",
    "g2_from_signature",
    "g2_to_signature",
    "g2_from_bytes",
    "g2_to_bytes",
]
