import pytest
from py_ecc.optimized_bls12_381 import FQ, FQ2, field_modulus as P

from blssig.errors import NonResidueError
from blssig.fields import (
    conjugate,
    fq2_values,
    is_greater_root_fq,
    is_square_fq2,
    sgn0_fq2,
    sqrt_fq,
    sqrt_fq2,
)


class TestSqrt:

    def test_sqrt_fq_of_square(self):
        x = FQ(123456789)
        root = sqrt_fq(x * x)
        assert root == x or root == -x

    def test_sqrt_fq_non_residue(self):
        # p = 3 (mod 4), so -1 is not a square.
        with pytest.raises(NonResidueError):
            sqrt_fq(FQ(-1))

    @pytest.mark.parametrize("coeffs", [(3, 5), (0, 7), (11, 0), (P - 1, 2), (1, P - 1)])
    def test_sqrt_fq2_of_square(self, coeffs):
        x = FQ2(list(coeffs))
        root = sqrt_fq2(x * x)
        assert root * root == x * x
        assert root == x or root == -x

    def test_sqrt_fq2_of_base_field_non_residue(self):
        # Every FQ element is a square in FQ2; -1 = i^2.
        root = sqrt_fq2(FQ2([P - 1, 0]))
        assert root * root == FQ2([P - 1, 0])

    def test_sqrt_fq2_zero(self):
        assert sqrt_fq2(FQ2.zero()) == FQ2.zero()

    def test_sqrt_fq2_non_residue(self):
        # 1 + i has norm 2, a non-residue since p = 3 (mod 8).
        xi = FQ2([1, 1])
        assert not is_square_fq2(xi)
        with pytest.raises(NonResidueError):
            sqrt_fq2(xi)

    def test_is_square_fq2(self):
        assert is_square_fq2(FQ2([3, 5]) ** 2)


class TestSigns:

    def test_sgn0_uses_c0_first(self):
        assert sgn0_fq2(FQ2([1, 0])) == 1
        assert sgn0_fq2(FQ2([2, 1])) == 0

    def test_sgn0_falls_back_to_c1_when_c0_is_zero(self):
        assert sgn0_fq2(FQ2([0, 1])) == 1
        assert sgn0_fq2(FQ2([0, 2])) == 0
        assert sgn0_fq2(FQ2.zero()) == 0

    def test_greater_root(self):
        assert not is_greater_root_fq(FQ(1))
        assert is_greater_root_fq(FQ(-1))
        y = FQ(987654321)
        assert is_greater_root_fq(y) != is_greater_root_fq(-y)

    def test_conjugate(self):
        z = FQ2([7, 9])
        assert fq2_values(conjugate(z)) == (7, P - 9)
        assert conjugate(conjugate(z)) == z
        # Frobenius is multiplicative.
        w = FQ2([2, 13])
        assert conjugate(z * w) == conjugate(z) * conjugate(w)
