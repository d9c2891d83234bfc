import asyncio

import pytest
from py_ecc.bls import G2Basic

from blssig import (
    InvalidParameterError,
    InvalidPointError,
    InvalidPrivateKeyError,
    PointG1,
    PointG2,
    derive_public_key,
    generate_keypair,
    g1_from_bytes,
    g2_from_signature,
    hash_to_g2,
    settings_context,
    sign,
    sign_async,
    verify,
    verify_async,
)

from .conftest import PRIVATE_KEY_1, PRIVATE_KEY_2
from .test_points import g2_point_outside_subgroup


@pytest.fixture(scope="module")
def signed(messages):
    """Signature of msg1 by the first key, in bytes form."""
    return sign(messages["msg1"], PRIVATE_KEY_1)


class TestDerivePublicKey:

    def test_matches_py_ecc(self, private_keys):
        for sk in private_keys:
            assert derive_public_key(sk) == G2Basic.SkToPk(sk)

    def test_output_follows_input(self):
        raw_key = PRIVATE_KEY_1.to_bytes(32, "big")
        as_bytes = derive_public_key(raw_key)
        assert isinstance(as_bytes, bytes) and len(as_bytes) == 48
        assert derive_public_key(raw_key.hex()) == as_bytes.hex()
        assert derive_public_key(PRIVATE_KEY_1) == as_bytes

    def test_invalid_key(self):
        with pytest.raises(InvalidPrivateKeyError):
            derive_public_key(0)

    def test_generate_keypair(self):
        sk, pk = generate_keypair()
        assert derive_public_key(sk) == pk
        assert g1_from_bytes(pk) == PointG1.from_private_key(sk)


class TestSign:

    def test_matches_py_ecc(self, messages, signed):
        assert signed == G2Basic.Sign(PRIVATE_KEY_1, messages["msg1"])
        assert len(signed) == 96

    def test_hex_message_gives_hex_signature(self, messages, signed):
        assert sign(messages["msg1"].hex(), PRIVATE_KEY_1) == signed.hex()

    def test_point_message_gives_point(self, messages, signed):
        sig = sign(hash_to_g2(messages["msg1"]), PRIVATE_KEY_1)
        assert isinstance(sig, PointG2)
        assert sig == g2_from_signature(signed)

    def test_invalid_message_point(self):
        with pytest.raises(InvalidPointError):
            sign(g2_point_outside_subgroup(), PRIVATE_KEY_1)

    def test_invalid_key(self, messages):
        with pytest.raises(InvalidPrivateKeyError):
            sign(messages["msg1"], b"short")

    def test_async(self, messages, signed):
        assert asyncio.run(sign_async(messages["msg1"], PRIVATE_KEY_1)) == signed


class TestVerify:

    def test_valid(self, messages, public_keys, signed):
        assert verify(signed, messages["msg1"], public_keys[0])

    def test_py_ecc_accepts(self, messages, public_keys, signed):
        assert G2Basic.Verify(public_keys[0], messages["msg1"], signed)

    def test_wrong_message(self, messages, public_keys, signed):
        assert not verify(signed, messages["msg2"], public_keys[0])

    def test_wrong_key(self, messages, public_keys, signed):
        assert not verify(signed, messages["msg1"], public_keys[1])

    def test_point_and_hex_inputs(self, messages, public_keys, signed):
        assert verify(
            g2_from_signature(signed),
            hash_to_g2(messages["msg1"]),
            g1_from_bytes(public_keys[0]),
        )
        assert verify(signed.hex(), messages["msg1"].hex(), public_keys[0].hex())

    def test_domain_separation(self, messages):
        pk = derive_public_key(PRIVATE_KEY_2)
        sig = sign(messages["msg2"], PRIVATE_KEY_2, dst="APP_TAG")
        with settings_context(dst="APP_TAG"):
            assert verify(sig, messages["msg2"], pk)
        assert not verify(sig, messages["msg2"], pk)

    def test_identity_inputs_fail(self, messages, public_keys, signed):
        assert not verify(PointG2.ZERO, messages["msg1"], public_keys[0])
        assert not verify(signed, messages["msg1"], PointG1.ZERO)
        assert not verify(signed, PointG2.ZERO, public_keys[0])
        assert not asyncio.run(verify_async(signed, PointG2.ZERO, public_keys[0]))

    def test_malformed_inputs_raise(self, messages, public_keys, signed):
        with pytest.raises(InvalidParameterError):
            verify(signed[:95], messages["msg1"], public_keys[0])
        with pytest.raises(InvalidParameterError):
            verify(signed, messages["msg1"], public_keys[0][:47])

    def test_async(self, messages, public_keys, signed):
        assert asyncio.run(verify_async(signed, messages["msg1"], public_keys[0]))
