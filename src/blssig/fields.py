"""Square roots and sign helpers over py_ecc's BLS12-381 field types.

py_ecc supplies the field arithmetic; the helpers here add the pieces the
signature layer needs on top of it: modular square roots in FQ and FQ2
(failing loudly on non-residues), the RFC 9380 `sgn0` sign convention, and
conversions between field elements and plain integers.
"""
from __future__ import annotations

from typing import Tuple, Union

from py_ecc.optimized_bls12_381 import FQ, FQ2, field_modulus as P

from blssig.errors import NonResidueError

FieldElement = Union[FQ, FQ2]

_SQRT_EXP = (P + 1) // 4
_LEGENDRE_EXP = (P - 1) // 2
_TWO_INV = pow(2, P - 2, P)


def fq_value(z: FQ) -> int:
    return int(getattr(z, "n", z))


def fq2_values(z: FQ2) -> Tuple[int, int]:
    """Extracts the (c0, c1) integer coefficients of z = c0 + c1*i."""
    a, b = z.coeffs
    return int(getattr(a, "n", a)), int(getattr(b, "n", b))


def field_values(z: FieldElement) -> Tuple[int, ...]:
    """Integer coordinates of a field element, used for hashing and comparison."""
    if isinstance(z, FQ2):
        return fq2_values(z)
    return (fq_value(z),)


def conjugate(z: FQ2) -> FQ2:
    """Frobenius map on FQ2: (c0 + c1*i)^p = c0 - c1*i."""
    c0, c1 = fq2_values(z)
    return FQ2([c0, (-c1) % P])


def _is_square_int(n: int) -> bool:
    return n == 0 or pow(n, _LEGENDRE_EXP, P) == 1


def _sqrt_int(n: int) -> int:
    n %= P
    if not _is_square_int(n):
        raise NonResidueError("Not a quadratic residue")
    # p = 3 (mod 4)
    return pow(n, _SQRT_EXP, P)


def sqrt_fq(value: FQ) -> FQ:
    """Computes a square root in FQ.

    Raises:
        NonResidueError: If `value` is a quadratic non-residue.
    """
    return FQ(_sqrt_int(fq_value(value)))


def sqrt_fq2(value: FQ2) -> FQ2:
    """Computes a square root in FQ2 = FQ[i]/(i^2 + 1) by the complex method.

    For v = a + b*i with b != 0, a root x + y*i satisfies
    x^2 = (a +- sqrt(a^2 + b^2)) / 2 and y = b / (2x).

    Raises:
        NonResidueError: If `value` is a quadratic non-residue.
    """
    a, b = fq2_values(value)
    if a == 0 and b == 0:
        return FQ2.zero()
    if b == 0:
        if _is_square_int(a):
            return FQ2([_sqrt_int(a), 0])
        # -1 is a non-residue, so -a is a residue here.
        return FQ2([0, _sqrt_int(-a)])

    s = _sqrt_int(a * a + b * b)
    half = (a + s) * _TWO_INV % P
    if not _is_square_int(half):
        half = (a - s) * _TWO_INV % P
    x = _sqrt_int(half)
    y = b * pow(2 * x, P - 2, P) % P
    root = FQ2([x, y])
    if root * root != value:
        raise NonResidueError("Not a quadratic residue")
    return root


def is_square_fq2(value: FQ2) -> bool:
    """Euler's criterion in FQ2, via the norm map down to FQ."""
    a, b = fq2_values(value)
    return _is_square_int((a * a + b * b) % P)


def sgn0_fq2(z: FQ2) -> int:
    """The RFC 9380 sign of an FQ2 element."""
    c0, c1 = fq2_values(z)
    sign_0 = c0 % 2
    zero_0 = c0 == 0
    sign_1 = c1 % 2
    return int(sign_0 or (zero_0 and sign_1))


def is_greater_root_fq(y: FQ) -> bool:
    """True when y is the lexicographically larger of {y, -y}."""
    return (fq_value(y) * 2) // P == 1


__all__ = [
    "FieldElement",
    "fq_value",
    "fq2_values",
    "field_values",
    "conjugate",
    "sqrt_fq",
    "sqrt_fq2",
    "is_square_fq2",
    "sgn0_fq2",
    "is_greater_root_fq",
]
