"""Private key normalization and generation."""
from __future__ import annotations

import inspect
import logging
from typing import Union

from py_ecc.optimized_bls12_381 import curve_order

from blssig.config import get_settings
from blssig.errors import ConfigurationError, InvalidParameterError, InvalidPrivateKeyError, MathError
from blssig.utils import ensure_bytes, os2ip

logger = logging.getLogger(__name__)

PRIVATE_KEY_LENGTH = 32
_MAX_ATTEMPTS = 32

PrivateKeyInput = Union[bytes, bytearray, str, int]


def normalize_private_key(key: PrivateKeyInput) -> int:
    """Converts any accepted private key representation to an integer.

    Accepted forms are 32 raw bytes, a 64-character hex string, or a
    positive int. The value is reduced modulo the group order r.

    Args:
        key: The private key.

    Returns:
        The key as an integer k with 0 < k < r.

    Raises:
        InvalidPrivateKeyError: If the representation is not accepted or the
            key reduces to zero.
    """
    if isinstance(key, (bytes, bytearray)) and len(key) == PRIVATE_KEY_LENGTH:
        value = os2ip(bytes(key))
    elif isinstance(key, str) and len(key) == 2 * PRIVATE_KEY_LENGTH:
        try:
            value = os2ip(ensure_bytes(key))
        except InvalidParameterError as e:
            raise InvalidPrivateKeyError("Expected valid private key") from e
    elif isinstance(key, int) and not isinstance(key, bool) and key > 0:
        value = key
    else:
        raise InvalidPrivateKeyError("Expected valid private key")

    value %= curve_order
    if value < 1:
        raise InvalidPrivateKeyError("Private key must be 0 < key < CURVE.r")
    return value


def _accept(candidate: bytes) -> bool:
    return 1 < os2ip(candidate) < curve_order


def random_private_key() -> bytes:
    """Draws a 32-byte private key from the configured random source.

    Raises:
        ConfigurationError: If the random source is asynchronous.
        MathError: If no valid key was found in 32 attempts.
    """
    random_bytes = get_settings().random_bytes
    for _ in range(_MAX_ATTEMPTS):
        candidate = random_bytes(PRIVATE_KEY_LENGTH)
        if inspect.isawaitable(candidate):
            if inspect.iscoroutine(candidate):
                candidate.close()
            raise ConfigurationError("random_bytes provider is asynchronous; use random_private_key_async")
        if _accept(candidate):
            return bytes(candidate)
    raise MathError(f"Valid private key was not found in {_MAX_ATTEMPTS} iterations. PRNG is broken")


async def random_private_key_async() -> bytes:
    random_bytes = get_settings().random_bytes
    for _ in range(_MAX_ATTEMPTS):
        candidate = random_bytes(PRIVATE_KEY_LENGTH)
        if inspect.isawaitable(candidate):
            candidate = await candidate
        if _accept(candidate):
            return bytes(candidate)
    raise MathError(f"Valid private key was not found in {_MAX_ATTEMPTS} iterations. PRNG is broken")


__all__ = [
    "PRIVATE_KEY_LENGTH",
    "PrivateKeyInput",
    "normalize_private_key",
    "random_private_key",
    "random_private_key_async",
]
