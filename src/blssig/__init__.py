"""BLS signatures over the BLS12-381 curve.

This package implements the minimal-pubkey-size BLS signature scheme:
public keys in G1, signatures in G2, messages hashed to G2 with the
BLS_SIG_BLS12381G2_XMD:SHA-256_SSWU_RO_NUL_ ciphersuite. Field arithmetic,
the curve group law and the Miller loop come from py_ecc.

Available Modules:
  - signatures: key derivation, signing and verification.
  - aggregation: aggregation of public keys and signatures.
  - batch: single multi-pairing verification of an aggregate signature.
  - codec: point serialization in compressed and uncompressed forms.
  - hash_to_curve: expand_message_xmd, hash_to_field and hash_to_g2.
  - points: PointG1 / PointG2 with subgroup checks and caches.
  - config: domain separation tag and pluggable hash/random providers.
"""
from .aggregation import aggregate_public_keys, aggregate_signatures, verify_fast_aggregate
from .batch import verify_batch, verify_batch_async
from .codec import (
    g1_from_bytes,
    g1_to_bytes,
    g2_from_bytes,
    g2_from_signature,
    g2_to_bytes,
    g2_to_signature,
)
from .config import (
    DEFAULT_DST,
    Settings,
    configure,
    get_dst_label,
    get_settings,
    set_dst_label,
    settings_context,
)
from .errors import (
    BLSError,
    ConfigurationError,
    InvalidParameterError,
    InvalidPointError,
    InvalidPrivateKeyError,
    MathError,
    NonResidueError,
)
from .hash_to_curve import expand_message_xmd, hash_to_field, hash_to_g2, hash_to_g2_async
from .keys import normalize_private_key, random_private_key, random_private_key_async
from .pairing import pairing
from .points import PointG1, PointG2
from .signatures import (
    derive_public_key,
    generate_keypair,
    sign,
    sign_async,
    verify,
    verify_async,
)

__all__ = [
    # from .signatures
    "derive_public_key",
    "generate_keypair",
    "sign",
    "sign_async",
    "verify",
    "verify_async",
    # from .aggregation
    "aggregate_public_keys",
    "aggregate_signatures",
    "verify_fast_aggregate",
    # from .batch
    "verify_batch",
    "verify_batch_async",
    # from .codec
    "g1_from_bytes",
    "g1_to_bytes",
    "g2_from_bytes",
    "g2_from_signature",
    "g2_to_bytes",
    "g2_to_signature",
    # from .hash_to_curve
    "expand_message_xmd",
    "hash_to_field",
    "hash_to_g2",
    "hash_to_g2_async",
    # from .keys
    "normalize_private_key",
    "random_private_key",
    "random_private_key_async",
    # from .points / .pairing
    "PointG1",
    "PointG2",
    "pairing",
    # from .config
    "DEFAULT_DST",
    "Settings",
    "configure",
    "get_dst_label",
    "get_settings",
    "set_dst_label",
    "settings_context",
    # from .errors
    "BLSError",
    "ConfigurationError",
    "InvalidParameterError",
    "InvalidPointError",
    "InvalidPrivateKeyError",
    "MathError",
    "NonResidueError",
]
