# tests/conftest.py
import contextvars

import pytest

from blssig import derive_public_key

# Fixed keys keep the suite deterministic; all lie in (0, r).
PRIVATE_KEY_1 = 0x67d53f170b908cabb9eb326c3c337762d59289a8fec79f7bc9254b584b73265c
PRIVATE_KEY_2 = 0x0a3c1f1c6e2c2e4c7a9b8f5d3e1c0b9a8f7e6d5c4b3a29180706050403020101
PRIVATE_KEY_3 = 0x1f2e3d4c5b6a79887766554433221100ffeeddccbbaa99887766554433221100


@pytest.fixture(scope="module")
def messages():
    """A fixed set of messages used across tests."""
    return {
        "msg1": b"Hello, world!",
        "msg2": b"This is a test message.",
        "msg3": b"Another message for aggregation.",
    }


@pytest.fixture(scope="module")
def private_keys():
    return [PRIVATE_KEY_1, PRIVATE_KEY_2, PRIVATE_KEY_3]


@pytest.fixture(scope="module")
def public_keys(private_keys):
    return [derive_public_key(sk) for sk in private_keys]


@pytest.fixture
def isolated_context():
    """Runs a callable in a copy of the current context so settings changes do not leak."""
    def run(fn, *args, **kwargs):
        return contextvars.copy_context().run(fn, *args, **kwargs)
    return run
