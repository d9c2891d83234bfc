"""Walks through key generation, signing, aggregation and batch verification.

Run after `pip install -e .`:

    python examples/multisig_demo.py
"""
import logging

import blssig


def generate_and_display_keys(count: int = 3):
    """
    Generates `count` key pairs and prints them as hex.
    """
    print("=" * 70)
    print("PART 1: Key generation")
    print("=" * 70)

    key_pairs = [blssig.generate_keypair() for _ in range(count)]
    for i, (sk, pk) in enumerate(key_pairs, start=1):
        print(f"--- KEY PAIR {i} ---")
        print(f"    private key: {sk.hex()}")
        print(f"    public key:  {pk.hex()}")
    return key_pairs


def run_multisig_demo(key_pairs):
    """
    Aggregates signatures over one shared message and over distinct messages.
    """
    print("\n\n" + "=" * 70)
    print("PART 2: Aggregate signatures")
    print("=" * 70)

    sks = [sk for sk, _ in key_pairs]
    pks = [pk for _, pk in key_pairs]

    # --- Scenario A: everyone signs the same message ---
    print("\n--- Scenario A: one message, many signers ---")
    msg_same = b"All parties agree to transfer 100 tokens to Dave."
    print(f"    shared message: \"{msg_same.decode()}\"")

    print("\n    1. Each party signs...")
    sigs_same = [blssig.sign(msg_same, sk) for sk in sks]

    print("    2. Aggregating the signatures...")
    sig_agg_same = blssig.aggregate_signatures(sigs_same)

    print("    3. Verifying against all public keys...")
    is_valid_a = blssig.verify_fast_aggregate(sig_agg_same, msg_same, pks)
    print(f"       result: {'verified' if is_valid_a else 'FAILED'}")
    assert is_valid_a, "Scenario A positive check failed"

    print("\n    4. Verifying with one public key missing...")
    is_invalid_a = blssig.verify_fast_aggregate(sig_agg_same, msg_same, pks[:-1])
    print(f"       result: {'rejected' if not is_invalid_a else 'NOT rejected'}")
    assert not is_invalid_a, "Scenario A negative check failed"

    # --- Scenario B: each party signs its own message ---
    print("\n--- Scenario B: distinct messages ---")
    msgs_distinct = [f"Party {i} authorizes payment of {10 * i} tokens.".encode() for i in range(1, len(sks) + 1)]

    print("\n    1. Signing each message...")
    sigs_distinct = [blssig.sign(m, sk) for m, sk in zip(msgs_distinct, sks)]

    print("    2. Aggregating the signatures...")
    sig_agg_distinct = blssig.aggregate_signatures(sigs_distinct)

    print("    3. Batch verifying...")
    is_valid_b = blssig.verify_batch(sig_agg_distinct, msgs_distinct, pks)
    print(f"       result: {'verified' if is_valid_b else 'FAILED'}")
    assert is_valid_b, "Scenario B positive check failed"

    print("\n    4. Batch verifying with a tampered message...")
    tampered_msgs = list(msgs_distinct)
    tampered_msgs[0] = b"Party 1 authorizes payment of 999 tokens."
    is_invalid_b = blssig.verify_batch(sig_agg_distinct, tampered_msgs, pks)
    print(f"       result: {'rejected' if not is_invalid_b else 'NOT rejected'}")
    assert not is_invalid_b, "Scenario B negative check failed"

    print("\n" + "=" * 70)
    print("All aggregate signature checks passed.")
    print("=" * 70)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_multisig_demo(generate_and_display_keys())
