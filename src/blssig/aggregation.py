"""Aggregation of public keys and signatures.

BLS keys and signatures aggregate by point addition: if S_i = sk_i * H(m)
then sum(S_i) verifies against sum(P_i) for the shared message m. The
aggregate is returned in the representation of the first input.
"""
from __future__ import annotations

from typing import Optional, Sequence, Union

from eth_typing import BLSPubkey, BLSSignature

from blssig.codec import g1_to_bytes, g2_to_signature
from blssig.errors import InvalidParameterError
from blssig.points import PointG1, PointG2
from blssig.signatures import (
    MessageInput,
    PublicKeyInput,
    SignatureInput,
    to_public_key_point,
    to_signature_point,
    verify,
)
from blssig.utils import bytes_to_hex


def aggregate_public_keys(public_keys: Sequence[PublicKeyInput]) -> Union[PointG1, BLSPubkey, str]:
    """Adds public keys together.

    Args:
        public_keys: A non-empty sequence of PointG1, bytes or hex keys.

    Returns:
        The aggregate as a PointG1, 48 compressed bytes, or hex, following
        the first element.

    Raises:
        InvalidParameterError: If `public_keys` is empty.
        InvalidPointError: If a key or the aggregate is invalid.
    """
    if not public_keys:
        raise InvalidParameterError("Expected non-empty array")
    agg = PointG1.ZERO
    for key in public_keys:
        agg = agg + to_public_key_point(key)
    agg.assert_validity()
    first = public_keys[0]
    if isinstance(first, PointG1):
        return agg
    raw = g1_to_bytes(agg, compressed=True)
    return bytes_to_hex(raw) if isinstance(first, str) else BLSPubkey(raw)


def aggregate_signatures(signatures: Sequence[SignatureInput]) -> Union[PointG2, BLSSignature, str]:
    """Adds signatures together.

    Args:
        signatures: A non-empty sequence of PointG2, bytes or hex signatures.

    Returns:
        The aggregate as a PointG2, 96 signature bytes, or hex, following
        the first element.

    Raises:
        InvalidParameterError: If `signatures` is empty.
        InvalidPointError: If a signature or the aggregate is invalid.
    """
    if not signatures:
        raise InvalidParameterError("Expected non-empty array")
    agg = PointG2.ZERO
    for sig in signatures:
        agg = agg + to_signature_point(sig)
    agg.assert_validity()
    first = signatures[0]
    if isinstance(first, PointG2):
        return agg
    raw = g2_to_signature(agg)
    return bytes_to_hex(raw) if isinstance(first, str) else BLSSignature(raw)


def verify_fast_aggregate(
    signature: SignatureInput,
    message: MessageInput,
    public_keys: Sequence[PublicKeyInput],
    *,
    dst: Optional[str] = None,
) -> bool:
    """Verifies an aggregate signature in which every signer signed `message`.

    Only two Miller loops are needed regardless of the number of signers.
    """
    if not public_keys:
        raise InvalidParameterError("Expected non-empty array")
    agg = PointG1.ZERO
    for key in public_keys:
        agg = agg + to_public_key_point(key)
    return verify(signature, message, agg.assert_validity(), dst=dst)


__all__ = ["aggregate_public_keys", "aggregate_signatures", "verify_fast_aggregate"]
