"""Batch verification of an aggregate signature over many (message, key) pairs.

Checks prod_m e(sum{P_i : m_i = m}, H(m)) * e(-G1, S) == 1. Public keys that
signed the same message are summed first, so the cost is one Miller loop per
distinct message plus one, followed by a single final exponentiation.
Messages are grouped by the value of their hashed point.

Untrusted input never raises past the argument-shape checks: any failure
while decoding, hashing or pairing makes the batch "not verified".
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence

from blssig.errors import InvalidParameterError
from blssig.pairing import final_product_is_one, pairing
from blssig.points import PointG1, PointG2
from blssig.signatures import (
    MessageInput,
    PublicKeyInput,
    SignatureInput,
    to_message_point,
    to_message_point_async,
    to_public_key_point,
    to_signature_point,
)

logger = logging.getLogger(__name__)


def _check_shapes(messages: Sequence[MessageInput], public_keys: Sequence[PublicKeyInput]) -> None:
    if not messages:
        raise InvalidParameterError("Expected non-empty messages array")
    if len(public_keys) != len(messages):
        raise InvalidParameterError("Pubkey count should equal msg count")


def _verify_hashed(
    signature: SignatureInput,
    message_points: List[PointG2],
    public_keys: Sequence[PublicKeyInput],
) -> bool:
    start = time.perf_counter()
    sig = to_signature_point(signature)
    groups: Dict[PointG2, PointG1] = {}
    for message, key in zip(message_points, public_keys):
        groups[message] = groups.get(message, PointG1.ZERO) + to_public_key_point(key)

    paired = [pairing(group_key, message, with_final_exponent=False) for message, group_key in groups.items()]
    paired.append(pairing(PointG1.BASE.negate(), sig, with_final_exponent=False))
    result = final_product_is_one(paired)
    logger.debug(
        "Batch verification of %d signers over %d distinct messages: %s (%.3f s)",
        len(message_points), len(groups), result, time.perf_counter() - start,
    )
    return result


def verify_batch(
    signature: SignatureInput,
    messages: Sequence[MessageInput],
    public_keys: Sequence[PublicKeyInput],
    *,
    dst: Optional[str] = None,
) -> bool:
    """Verifies an aggregate signature against per-signer messages and keys.

    Args:
        signature: The aggregate signature (bytes, hex, or PointG2).
        messages: One message per signer (bytes, hex, or hashed PointG2).
        public_keys: One public key per signer (bytes, hex, or PointG1).
        dst: Domain separation tag; defaults to the context's tag.

    Returns:
        True if the batch verifies. False if it does not, or if any input
        fails to decode or validate.

    Raises:
        InvalidParameterError: If `messages` is empty or the two sequences
            differ in length.
    """
    _check_shapes(messages, public_keys)
    try:
        message_points = [to_message_point(m, dst) for m in messages]
        return _verify_hashed(signature, message_points, public_keys)
    except Exception as e:
        logger.debug("Batch verification rejected input: %s", e)
        return False


async def verify_batch_async(
    signature: SignatureInput,
    messages: Sequence[MessageInput],
    public_keys: Sequence[PublicKeyInput],
    *,
    dst: Optional[str] = None,
) -> bool:
    """`verify_batch` with the messages hashed concurrently."""
    _check_shapes(messages, public_keys)
    try:
        message_points = list(await asyncio.gather(*(to_message_point_async(m, dst) for m in messages)))
        return _verify_hashed(signature, message_points, public_keys)
    except Exception as e:
        logger.debug("Batch verification rejected input: %s", e)
        return False


__all__ = ["verify_batch", "verify_batch_async"]
