"""Points of the two BLS12-381 groups and their validity checks.

`ProjectivePoint` wraps py_ecc's homogeneous (x, y, z) tuples with the
operations the signature layer needs, parameterized by the coordinate field:
`PointG1` over FQ (curve y^2 = x^3 + 4) and `PointG2` over FQ2 (the sextic
twist y^2 = x^3 + 4(1 + i)). The point at infinity is (1, 1, 0).

Points are immutable values. Two caches may be attached to a point and are
built at most once under a lock:
  - a fixed-base table for fast scalar multiplication by secrets, and
  - for G2 points, the twisted coordinates consumed by the Miller loop.

Subgroup membership is tested with curve endomorphisms rather than by
multiplying with the group order:
  - G1 uses sigma(x, y) = (beta * x, y) with beta a cube root of unity.
  - G2 uses psi, the untwist-Frobenius-twist map, which acts on the
    subgroup as multiplication by the curve seed.
"""
from __future__ import annotations

import logging
import threading
from typing import ClassVar, List, Optional, Tuple, Type, TypeVar

from py_ecc.optimized_bls12_381 import (
    FQ,
    FQ2,
    G1,
    G2,
    Z1,
    Z2,
    add,
    b,
    b2,
    curve_order,
    double,
    eq,
    field_modulus as P,
    is_inf,
    multiply,
    neg,
    normalize,
)
from py_ecc.optimized_bls12_381.optimized_curve import twist

from blssig.errors import InvalidParameterError, InvalidPointError
from blssig.fields import FieldElement, conjugate, field_values
from blssig.keys import PrivateKeyInput, normalize_private_key

logger = logging.getLogger(__name__)

# Absolute value of the BLS12-381 seed; the seed itself is negative.
CURVE_X = 0xd201000000010000
G1_COFACTOR = 0x396c8c005555e1568c00aaab0000aaab

# Cube root of unity in FQ used by sigma.
_BETA = FQ(0x1a0111ea397fe699ec02408663d4de85aa0d857d89759ad4897d29650fb85f9b409427eb4f49fffd8bfd00000000aaac)
_G1_TORSION_C1 = 0x396c8c005555e1560000000055555555

# psi(x, y) = (conj(x) * xi^-((p-1)/3), conj(y) * xi^-((p-1)/2)), xi = 1 + i
_XI = FQ2([1, 1])
_PSI_X = FQ2.one() / (_XI ** ((P - 1) // 3))
_PSI_Y = FQ2.one() / (_XI ** ((P - 1) // 2))

DEFAULT_WINDOW = 4

_CACHE_LOCK = threading.RLock()

Pt = Tuple[FieldElement, FieldElement, FieldElement]
T = TypeVar("T", bound="ProjectivePoint")


class ProjectivePoint:
    """A point on a short Weierstrass curve y^2 = x^3 + b in projective form.

    Subclasses fix `field` (the coordinate field class) and `curve_b` (the
    curve coefficient in that field), and provide the subgroup test.
    """

    field: ClassVar[type]
    curve_b: ClassVar[FieldElement]
    BASE: ClassVar["ProjectivePoint"]
    ZERO: ClassVar["ProjectivePoint"]

    def __init__(self, x: FieldElement, y: FieldElement, z: Optional[FieldElement] = None) -> None:
        field = self.field
        if z is None:
            z = field.one()
        for coord in (x, y, z):
            if not isinstance(coord, field):
                raise InvalidParameterError(
                    f"{type(self).__name__} coordinates must be {field.__name__} elements, "
                    f"got {type(coord).__name__}"
                )
        self._pt: Pt = (x, y, z)
        self._multiply_precomputes: Optional[Tuple[int, List[List[Pt]]]] = None

    # --- Construction and coordinates ---

    @classmethod
    def from_tuple(cls: Type[T], pt: Pt) -> T:
        return cls(*pt)

    @classmethod
    def from_private_key(cls: Type[T], private_key: PrivateKeyInput) -> T:
        """Multiplies the group's base point by a normalized private key."""
        return cls.BASE.multiply_precomputed(normalize_private_key(private_key))

    @property
    def x(self) -> FieldElement:
        return self._pt[0]

    @property
    def y(self) -> FieldElement:
        return self._pt[1]

    @property
    def z(self) -> FieldElement:
        return self._pt[2]

    @property
    def pt(self) -> Pt:
        """The underlying py_ecc (x, y, z) tuple."""
        return self._pt

    def is_zero(self) -> bool:
        return is_inf(self._pt)

    def to_affine(self) -> Tuple[FieldElement, FieldElement]:
        if self.is_zero():
            raise InvalidPointError("The point at infinity has no affine coordinates")
        return normalize(self._pt)

    def affine_values(self) -> Tuple[int, ...]:
        """Integer affine coordinates, empty for the point at infinity."""
        if self.is_zero():
            return ()
        x, y = self.to_affine()
        return field_values(x) + field_values(y)

    # --- Group law ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectivePoint) or type(other) is not type(self):
            return NotImplemented
        return eq(self._pt, other._pt)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.affine_values()))

    def __repr__(self) -> str:
        if self.is_zero():
            return f"{type(self).__name__}(ZERO)"
        return f"{type(self).__name__}(affine={self.affine_values()})"

    def _check_same(self, other: "ProjectivePoint") -> None:
        if type(other) is not type(self):
            raise InvalidParameterError(
                f"Cannot combine {type(self).__name__} with {type(other).__name__}"
            )

    def add(self: T, other: T) -> T:
        self._check_same(other)
        return self.from_tuple(add(self._pt, other._pt))

    def subtract(self: T, other: T) -> T:
        self._check_same(other)
        return self.from_tuple(add(self._pt, neg(other._pt)))

    def negate(self: T) -> T:
        return self.from_tuple(neg(self._pt))

    def double(self: T) -> T:
        return self.from_tuple(double(self._pt))

    __add__ = add
    __sub__ = subtract
    __neg__ = negate

    @staticmethod
    def _check_scalar(n: int, allow_zero: bool) -> int:
        if not isinstance(n, int) or isinstance(n, bool):
            raise InvalidParameterError(f"Expected int scalar, got {type(n).__name__}")
        if n < 0 or (not allow_zero and not 0 < n < curve_order):
            raise InvalidParameterError("Expected valid scalar: 0 < scalar < curve.r")
        return n

    def multiply(self: T, n: int) -> T:
        """Scalar multiplication by 0 < n < r."""
        return self.multiply_unsafe(self._check_scalar(n, allow_zero=False))

    def multiply_unsafe(self: T, n: int) -> T:
        """Scalar multiplication by any non-negative integer, including the cofactor."""
        self._check_scalar(n, allow_zero=True)
        return self.from_tuple(multiply(self._pt, n))

    # --- Fixed-base precomputation ---

    def _build_multiply_table(self, window: int) -> List[List[Pt]]:
        rows = -(-curve_order.bit_length() // window)
        table: List[List[Pt]] = []
        base = self._pt
        for _ in range(rows):
            row = [base]
            for _ in range((1 << window) - 2):
                row.append(add(row[-1], base))
            table.append(row)
            for _ in range(window):
                base = double(base)
        return table

    def _multiply_table(self, window: Optional[int] = None) -> Tuple[int, List[List[Pt]]]:
        """Returns the cached (window, table) pair, building it if needed.

        With `window` None any cached table is accepted.
        """
        cached = self._multiply_precomputes
        if cached is not None and window in (None, cached[0]):
            return cached
        with _CACHE_LOCK:
            cached = self._multiply_precomputes
            if cached is None or window not in (None, cached[0]):
                window = window or DEFAULT_WINDOW
                logger.debug("Building %s fixed-base table with window %d", type(self).__name__, window)
                cached = (window, self._build_multiply_table(window))
                self._multiply_precomputes = cached
            return cached

    def precompute(self: T, window: int = DEFAULT_WINDOW) -> T:
        """Builds (once) the windowed table used by `multiply_precomputed`."""
        if not isinstance(window, int) or isinstance(window, bool) or not 1 <= window <= 8:
            raise InvalidParameterError("Window size must be between 1 and 8")
        self._multiply_table(window)
        return self

    def clear_multiply_precomputes(self) -> None:
        with _CACHE_LOCK:
            self._multiply_precomputes = None

    def multiply_precomputed(self: T, n: int) -> T:
        """Scalar multiplication by 0 < n < r using the fixed-base table."""
        n = self._check_scalar(n, allow_zero=False)
        window, table = self._multiply_table()
        mask = (1 << window) - 1
        acc = self.ZERO.pt
        for row in table:
            if not n:
                break
            digit = n & mask
            if digit:
                acc = add(acc, row[digit - 1])
            n >>= window
        return self.from_tuple(acc)

    # --- Validity ---

    def is_on_curve(self) -> bool:
        """Checks y^2 * z - x^3 == b * z^3."""
        x, y, z = self._pt
        left = y * y * z - x * x * x
        right = self.curve_b * z * z * z
        return left == right

    def is_torsion_free(self) -> bool:
        raise NotImplementedError

    def assert_validity(self: T) -> T:
        """Returns self if it is the identity or a valid subgroup point.

        Raises:
            InvalidPointError: If the point is not on the curve or not in the
                prime-order subgroup.
        """
        if self.is_zero():
            return self
        name = type(self).__name__
        if not self.is_on_curve():
            raise InvalidPointError(f"Invalid {name} point: not on curve")
        if not self.is_torsion_free():
            raise InvalidPointError(f"Invalid {name} point: must be of prime-order subgroup")
        return self

    def multiply_by_seed(self: T) -> T:
        """Multiplies by the (negative) curve seed x = -0xd201000000010000."""
        return self.multiply_unsafe(CURVE_X).negate()

    def clear_cofactor(self: T) -> T:
        raise NotImplementedError


class PointG1(ProjectivePoint):
    field = FQ
    curve_b = b

    def sigma(self) -> "PointG1":
        """The endomorphism (x, y) -> (beta * x, y)."""
        x, y, z = self._pt
        return PointG1(x * _BETA, y, z)

    def is_torsion_free(self) -> bool:
        if self.is_zero():
            return True
        s = self.sigma()
        q = s.double()
        s2 = s.sigma()
        left = (q - self - s2).multiply_unsafe(_G1_TORSION_C1)
        return (left - s2).is_zero()

    def clear_cofactor(self) -> "PointG1":
        return self.multiply_unsafe(G1_COFACTOR)


class PointG2(ProjectivePoint):
    field = FQ2
    curve_b = b2

    def __init__(self, x: FQ2, y: FQ2, z: Optional[FQ2] = None) -> None:
        super().__init__(x, y, z)
        self._pairing_precomputes: Optional[Pt] = None

    def psi(self) -> "PointG2":
        """The untwist-Frobenius-twist endomorphism."""
        x, y, z = self._pt
        return PointG2(conjugate(x) * _PSI_X, conjugate(y) * _PSI_Y, conjugate(z))

    def psi2(self) -> "PointG2":
        return self.psi().psi()

    def is_torsion_free(self) -> bool:
        """Checks x * psi^3(P) - psi^2(P) + P == O, with x the curve seed."""
        if self.is_zero():
            return True
        psi2 = self.psi2()
        psi3 = psi2.psi()
        return (psi3.multiply_by_seed() - psi2 + self).is_zero()

    def clear_cofactor(self) -> "PointG2":
        """Multiplies by the effective G2 cofactor using psi.

        Equivalent to [x^2 - x - 1]P + [x - 1]psi(P) + psi^2(2P).
        """
        t1 = self.multiply_by_seed()
        t2 = self.psi()
        t3 = self.double().psi2()
        t3 = t3 - t2
        t2 = t1 + t2
        t2 = t2.multiply_by_seed()
        t3 = t3 + t2
        t3 = t3 - t1
        return t3 - self

    def pairing_precomputes(self) -> Pt:
        """The point lifted through the twist into FQ12, cached per point."""
        cached = self._pairing_precomputes
        if cached is not None:
            return cached
        if self.is_zero():
            raise InvalidPointError("No pairings at point of Infinity")
        with _CACHE_LOCK:
            if self._pairing_precomputes is None:
                x, y = self.to_affine()
                logger.debug("Computing pairing precomputes for %r", self)
                self._pairing_precomputes = twist((x, y, FQ2.one()))
            return self._pairing_precomputes

    def clear_pairing_precomputes(self) -> None:
        with _CACHE_LOCK:
            self._pairing_precomputes = None


PointG1.BASE = PointG1(*G1)
PointG1.ZERO = PointG1(*Z1)
PointG2.BASE = PointG2(*G2)
PointG2.ZERO = PointG2(*Z2)


__all__ = [
    "CURVE_X",
    "G1_COFACTOR",
    "DEFAULT_WINDOW",
    "ProjectivePoint",
    "PointG1",
    "PointG2",
]
