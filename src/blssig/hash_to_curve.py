"""Hashing of arbitrary messages to G2 (RFC 9380, BLS12381G2_XMD:SHA-256_SSWU_RO_).

The pipeline is:
  1. expand_message_xmd: message + DST -> 256 pseudorandom bytes.
  2. hash_to_field: bytes -> two FQ2 elements (u0, u1).
  3. map_to_curve: each u -> a point on the 3-isogenous curve E2' via the
     simplified SWU map, then -> E2 via the isogeny.
  4. clear_cofactor: (Q0 + Q1) -> the prime-order subgroup, using psi.

The hash primitive is pluggable and may be asynchronous. The expansion is
therefore written as a generator that yields the byte strings to hash and
receives their digests; `_drive` and `_drive_async` feed it from a
synchronous or asynchronous hash function respectively.
"""
from __future__ import annotations

import inspect
import math
from typing import Any, Callable, Generator, List, Optional, Sequence, Tuple, Union

from py_ecc.optimized_bls12_381 import FQ2, field_modulus as P
from py_ecc.optimized_bls12_381.optimized_swu import iso_map_G2

from blssig.config import get_settings, resolve_dst
from blssig.errors import ConfigurationError, InvalidParameterError, MathError
from blssig.fields import is_square_fq2, sgn0_fq2, sqrt_fq2
from blssig.points import PointG2
from blssig.utils import Hex, ensure_bytes, i2osp, os2ip, strxor

SHA256_DIGEST_SIZE = 32
SHA256_BLOCK_SIZE = 64
# Bytes per field element: ceil((ceil(log2(p)) + 128) / 8)
HASH_TO_FIELD_L = 64
MAX_DST_BYTES = 255
OVERSIZE_DST_PREFIX = b"H2C-OVERSIZE-DST-"

# E2': y^2 = x^3 + A'x + B', isogenous to E2, with SWU constant Z = -(2 + i).
_SWU_A = FQ2([0, 240])
_SWU_B = FQ2([1012, 1012])
_SWU_Z = FQ2([P - 2, P - 1])
_MINUS_B_OVER_A = -_SWU_B / _SWU_A
_X1_EXCEPTIONAL = _SWU_B / (_SWU_Z * _SWU_A)

HashSteps = Generator[bytes, bytes, Any]


# --- Driving the hash primitive ---

def _check_digest(digest: Any) -> bytes:
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != SHA256_DIGEST_SIZE:
        raise ConfigurationError(f"hash_function must return {SHA256_DIGEST_SIZE} bytes")
    return bytes(digest)


def _drive(steps: HashSteps, hash_function: Callable[[bytes], Any]) -> Any:
    try:
        request = next(steps)
        while True:
            digest = hash_function(request)
            if inspect.isawaitable(digest):
                if inspect.iscoroutine(digest):
                    digest.close()
                raise ConfigurationError("hash_function is asynchronous; use the *_async API")
            request = steps.send(_check_digest(digest))
    except StopIteration as stop:
        return stop.value


async def _drive_async(steps: HashSteps, hash_function: Callable[[bytes], Any]) -> Any:
    try:
        request = next(steps)
        while True:
            digest = hash_function(request)
            if inspect.isawaitable(digest):
                digest = await digest
            request = steps.send(_check_digest(digest))
    except StopIteration as stop:
        return stop.value


# --- expand_message_xmd ---

def _xmd_steps(msg: bytes, dst: bytes, len_in_bytes: int) -> HashSteps:
    ell = math.ceil(len_in_bytes / SHA256_DIGEST_SIZE)
    if ell > 255 or len_in_bytes > 0xFFFF:
        raise MathError("Invalid xmd length")
    if not 0 < len(dst) <= MAX_DST_BYTES:
        raise InvalidParameterError(f"DST length must be between 1 and {MAX_DST_BYTES} bytes (got {len(dst)}).")
    dst_prime = dst + i2osp(len(dst), 1)
    z_pad = i2osp(0, SHA256_BLOCK_SIZE)
    l_i_b_str = i2osp(len_in_bytes, 2)

    b_0 = yield z_pad + msg + l_i_b_str + i2osp(0, 1) + dst_prime
    blocks = [(yield b_0 + i2osp(1, 1) + dst_prime)]
    for i in range(2, ell + 1):
        blocks.append((yield strxor(b_0, blocks[-1]) + i2osp(i, 1) + dst_prime))
    return b"".join(blocks)[:len_in_bytes]


def _dst_bytes_steps(dst: str) -> HashSteps:
    raw = dst.encode("utf-8")
    if len(raw) > MAX_DST_BYTES:
        raw = yield OVERSIZE_DST_PREFIX + raw
    return raw


def expand_message_xmd(
    msg: Hex,
    dst: Union[bytes, str],
    len_in_bytes: int,
    hash_function: Optional[Callable[[bytes], Any]] = None,
) -> bytes:
    """Expands a message into `len_in_bytes` uniformly random bytes.

    Args:
        msg: The message, as bytes or hex.
        dst: Domain separation tag of 1 to 255 bytes; a str is UTF-8 encoded.
        len_in_bytes: Output length; at most 255 hash blocks.
        hash_function: Overrides the configured hash primitive.

    Raises:
        MathError: If the output needs more than 255 hash blocks.
        InvalidParameterError: If the DST length is out of range.
    """
    dst_bytes = dst.encode("utf-8") if isinstance(dst, str) else bytes(dst)
    steps = _xmd_steps(ensure_bytes(msg), dst_bytes, len_in_bytes)
    return _drive(steps, hash_function or get_settings().hash_function)


# --- hash_to_field ---

def _hash_to_field_steps(msg: bytes, degree: int, count: int, dst: str, modulus: int) -> HashSteps:
    dst_bytes = yield from _dst_bytes_steps(dst)
    len_in_bytes = count * degree * HASH_TO_FIELD_L
    pseudo_random_bytes = yield from _xmd_steps(msg, dst_bytes, len_in_bytes)
    u: List[List[int]] = []
    for i in range(count):
        e = []
        for j in range(degree):
            offset = HASH_TO_FIELD_L * (j + i * degree)
            tv = pseudo_random_bytes[offset:offset + HASH_TO_FIELD_L]
            e.append(os2ip(tv) % modulus)
        u.append(e)
    return u


def hash_to_field(
    msg: Hex,
    degree: int,
    count: int = 2,
    dst: Optional[str] = None,
    modulus: int = P,
) -> List[List[int]]:
    """Hashes a message to `count` tuples of `degree` integers modulo `modulus`.

    With count=2 this is the random-oracle variant used by hash_to_g2.
    """
    steps = _hash_to_field_steps(ensure_bytes(msg), degree, count, resolve_dst(dst), modulus)
    return _drive(steps, get_settings().hash_function)


# --- map_to_curve ---

def map_to_curve_simple_swu(u: FQ2) -> Tuple[FQ2, FQ2]:
    """Simplified SWU map from FQ2 to E2': y^2 = x^3 + 240i * x + 1012(1 + i).

    Returns affine coordinates on E2'. The sign of y follows sgn0(u).
    """
    z_u2 = _SWU_Z * u * u
    tv1 = z_u2 * z_u2 + z_u2
    if tv1 == FQ2.zero():
        x1 = _X1_EXCEPTIONAL
    else:
        x1 = _MINUS_B_OVER_A * (FQ2.one() + FQ2.one() / tv1)
    gx1 = x1 ** 3 + _SWU_A * x1 + _SWU_B
    if is_square_fq2(gx1):
        x, y = x1, sqrt_fq2(gx1)
    else:
        # g(Z u^2 x1) = Z^3 u^6 g(x1) is square whenever g(x1) is not.
        x = z_u2 * x1
        y = sqrt_fq2(x ** 3 + _SWU_A * x + _SWU_B)
    if sgn0_fq2(u) != sgn0_fq2(y):
        y = -y
    return x, y


def map_to_curve_g2(u: FQ2) -> PointG2:
    """Maps a field element to E2 (not yet in the prime-order subgroup)."""
    x, y = map_to_curve_simple_swu(u)
    return PointG2.from_tuple(iso_map_G2(x, y, FQ2.one()))


def _to_g2(u: Sequence[Sequence[int]]) -> PointG2:
    q0 = map_to_curve_g2(FQ2(u[0]))
    q1 = map_to_curve_g2(FQ2(u[1]))
    return (q0 + q1).clear_cofactor()


def hash_to_g2(message: Hex, dst: Optional[str] = None) -> PointG2:
    """Hashes a message to a point in the prime-order subgroup of G2.

    Args:
        message: The message, as bytes or hex.
        dst: Domain separation tag; defaults to the context's tag.

    Returns:
        The hashed PointG2.
    """
    return _to_g2(hash_to_field(message, 2, dst=dst))


async def hash_to_g2_async(message: Hex, dst: Optional[str] = None) -> PointG2:
    """`hash_to_g2` for hash primitives that may be asynchronous."""
    steps = _hash_to_field_steps(ensure_bytes(message), 2, 2, resolve_dst(dst), P)
    u = await _drive_async(steps, get_settings().hash_function)
    return _to_g2(u)


__all__ = [
    "expand_message_xmd",
    "hash_to_field",
    "map_to_curve_simple_swu",
    "map_to_curve_g2",
    "hash_to_g2",
    "hash_to_g2_async",
]
