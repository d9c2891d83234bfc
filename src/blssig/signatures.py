"""Implements the BLS signature scheme over BLS12-381 (minimal-pubkey-size).

Public keys live in G1 (48 bytes compressed) and signatures in G2 (96 bytes
compressed). Messages are hashed to G2 with the configured domain
separation tag, unless the caller passes an already-hashed PointG2.

Inputs may be raw bytes, hex strings, or point objects; outputs mirror the
representation of the input that determines them:
  - derive_public_key: hex in, hex out; bytes or int in, bytes out.
  - sign: PointG2 message in, PointG2 out; otherwise the signature encoding
    as hex or bytes, following the message.

Verification checks e(-P, H(m)) * e(G1, S) == 1 with a single final
exponentiation shared by both Miller loops.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from eth_typing import BLSPubkey, BLSSignature

from blssig.codec import g1_from_bytes, g1_to_bytes, g2_from_signature, g2_to_signature
from blssig.hash_to_curve import hash_to_g2, hash_to_g2_async
from blssig.keys import (
    PrivateKeyInput,
    normalize_private_key,
    random_private_key,
)
from blssig.pairing import final_product_is_one, pairing
from blssig.points import PointG1, PointG2
from blssig.utils import bytes_to_hex

logger = logging.getLogger(__name__)

PublicKeyInput = Union[PointG1, bytes, bytearray, str]
SignatureInput = Union[PointG2, bytes, bytearray, str]
MessageInput = Union[PointG2, bytes, bytearray, str]


# --- Normalization ---

def to_public_key_point(public_key: PublicKeyInput) -> PointG1:
    return public_key if isinstance(public_key, PointG1) else g1_from_bytes(public_key)


def to_signature_point(signature: SignatureInput) -> PointG2:
    return signature if isinstance(signature, PointG2) else g2_from_signature(signature)


def to_message_point(message: MessageInput, dst: Optional[str] = None) -> PointG2:
    return message if isinstance(message, PointG2) else hash_to_g2(message, dst)


async def to_message_point_async(message: MessageInput, dst: Optional[str] = None) -> PointG2:
    return message if isinstance(message, PointG2) else await hash_to_g2_async(message, dst)


# --- Keys ---

def derive_public_key(private_key: PrivateKeyInput) -> Union[BLSPubkey, str]:
    """Derives the compressed G1 public key for a private key.

    Args:
        private_key: 32 bytes, 64 hex characters, or a positive int.

    Returns:
        48 compressed bytes, or their hex when the key was given as hex.

    Raises:
        InvalidPrivateKeyError: If the key is malformed or zero modulo r.
    """
    raw = g1_to_bytes(PointG1.from_private_key(private_key), compressed=True)
    if isinstance(private_key, str):
        return bytes_to_hex(raw)
    return BLSPubkey(raw)


def generate_keypair() -> Tuple[bytes, BLSPubkey]:
    """Generates a random private key and its compressed public key."""
    private_key = random_private_key()
    return private_key, BLSPubkey(derive_public_key(private_key))


# --- Signing ---

def _sign_point(message_point: PointG2, private_key: PrivateKeyInput, message: MessageInput) -> Union[PointG2, BLSSignature, str]:
    message_point.assert_validity()
    signature_point = message_point.multiply(normalize_private_key(private_key))
    if isinstance(message, PointG2):
        return signature_point
    raw = g2_to_signature(signature_point)
    return bytes_to_hex(raw) if isinstance(message, str) else BLSSignature(raw)


def sign(
    message: MessageInput,
    private_key: PrivateKeyInput,
    *,
    dst: Optional[str] = None,
) -> Union[PointG2, BLSSignature, str]:
    """Signs a message.

    Args:
        message: Bytes or hex to hash, or an already hashed PointG2.
        private_key: The signer's private key.
        dst: Domain separation tag; defaults to the context's tag.

    Returns:
        A PointG2 if `message` was a point, otherwise the 96-byte signature
        encoding as bytes or hex following `message`.

    Raises:
        InvalidPrivateKeyError: If the key is malformed or zero modulo r.
        InvalidPointError: If a supplied message point is invalid.
    """
    return _sign_point(to_message_point(message, dst), private_key, message)


async def sign_async(
    message: MessageInput,
    private_key: PrivateKeyInput,
    *,
    dst: Optional[str] = None,
) -> Union[PointG2, BLSSignature, str]:
    return _sign_point(await to_message_point_async(message, dst), private_key, message)


# --- Verification ---

def _verify_points(signature: PointG2, message: PointG2, public_key: PointG1) -> bool:
    if public_key.is_zero() or message.is_zero() or signature.is_zero():
        logger.debug("Rejecting verification involving the point at infinity")
        return False
    e_p_hm = pairing(public_key.negate(), message, with_final_exponent=False)
    e_g_s = pairing(PointG1.BASE, signature, with_final_exponent=False)
    return final_product_is_one((e_g_s, e_p_hm))


def verify(
    signature: SignatureInput,
    message: MessageInput,
    public_key: PublicKeyInput,
    *,
    dst: Optional[str] = None,
) -> bool:
    """Verifies a signature against a message and public key.

    Args:
        signature: 96/192-byte signature, its hex, or a PointG2.
        message: Bytes or hex to hash, or an already hashed PointG2.
        public_key: 48/96-byte public key, its hex, or a PointG1.
        dst: Domain separation tag; defaults to the context's tag.

    Returns:
        True if e(-P, H(m)) * e(G, S) == 1. False when the public key,
        message, or signature is the point at infinity.

    Raises:
        InvalidParameterError: If an encoding is malformed.
        InvalidPointError: If a decoded point is invalid.
    """
    public_key_point = to_public_key_point(public_key)
    message_point = to_message_point(message, dst)
    signature_point = to_signature_point(signature)
    return _verify_points(signature_point, message_point, public_key_point)


async def verify_async(
    signature: SignatureInput,
    message: MessageInput,
    public_key: PublicKeyInput,
    *,
    dst: Optional[str] = None,
) -> bool:
    public_key_point = to_public_key_point(public_key)
    message_point = await to_message_point_async(message, dst)
    signature_point = to_signature_point(signature)
    return _verify_points(signature_point, message_point, public_key_point)


__all__ = [
    "PublicKeyInput",
    "SignatureInput",
    "MessageInput",
    "to_public_key_point",
    "to_signature_point",
    "to_message_point",
    "to_message_point_async",
    "derive_public_key",
    "generate_keypair",
    "sign",
    "sign_async",
    "verify",
    "verify_async",
]
