"""Pairing e: G1 x G2 -> FQ12 built on py_ecc's Miller loop.

The Miller loop runs against the cached twisted form of the G2 argument, so
repeated pairings with the same G2 point skip the lift. `pairing` can stop
before the final exponentiation; callers that multiply several partial
pairings then exponentiate once through `final_product_is_one`.
"""
from __future__ import annotations

from typing import Iterable

from py_ecc.optimized_bls12_381 import FQ12, final_exponentiate
from py_ecc.optimized_bls12_381.optimized_pairing import cast_point_to_fq12, miller_loop

from blssig.errors import InvalidPointError
from blssig.points import PointG1, PointG2


def pairing(p: PointG1, q: PointG2, with_final_exponent: bool = True) -> FQ12:
    """Computes e(p, q), optionally without the final exponentiation.

    Args:
        p: A point in G1.
        q: A point in G2.
        with_final_exponent: When False, return the raw Miller loop value.

    Returns:
        An FQ12 element.

    Raises:
        InvalidPointError: If either point is the identity or fails the
            validity checks.
    """
    if p.is_zero() or q.is_zero():
        raise InvalidPointError("No pairings at point of Infinity")
    p.assert_validity()
    q.assert_validity()
    x, y = p.to_affine()
    looped = miller_loop(q.pairing_precomputes(), cast_point_to_fq12((x, y, x.one())), False)
    return final_exponentiate(looped) if with_final_exponent else looped


def final_product_is_one(partials: Iterable[FQ12]) -> bool:
    """Multiplies partial pairings, exponentiates once, compares to one."""
    product = FQ12.one()
    for value in partials:
        product = product * value
    return final_exponentiate(product) == FQ12.one()


__all__ = ["pairing", "final_product_is_one"]
