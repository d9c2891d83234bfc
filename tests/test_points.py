import threading

import pytest
from py_ecc.optimized_bls12_381 import FQ, FQ2, G1, G2, curve_order, eq, is_inf, multiply

from blssig.errors import InvalidParameterError, InvalidPointError, NonResidueError
from blssig.fields import sqrt_fq
from blssig.hash_to_curve import map_to_curve_g2
from blssig.points import DEFAULT_WINDOW, PointG1, PointG2


def g1_point_outside_subgroup() -> PointG1:
    """Returns the first on-curve point with small x; its order is not r."""
    x = 1
    while True:
        try:
            y = sqrt_fq(FQ(x) ** 3 + FQ(4))
            return PointG1(FQ(x), y)
        except NonResidueError:
            x += 1


def g2_point_outside_subgroup() -> PointG2:
    return map_to_curve_g2(FQ2([1, 2]))


@pytest.fixture(scope="module")
def g1_outside():
    return g1_point_outside_subgroup()


@pytest.fixture(scope="module")
def g2_outside():
    return g2_point_outside_subgroup()


class TestGroupLaw:

    def test_base_and_zero(self):
        assert PointG1.BASE.pt == G1
        assert PointG2.BASE.pt == G2
        assert PointG1.ZERO.is_zero()
        assert PointG2.ZERO.is_zero()
        assert not PointG1.BASE.is_zero()

    def test_add_subtract_negate(self):
        p = PointG1.BASE
        assert p + p == p.double()
        assert (p + p) - p == p
        assert (p - p).is_zero()
        assert -(-p) == p
        assert p + PointG1.ZERO == p

    def test_mixing_groups_is_rejected(self):
        with pytest.raises(InvalidParameterError):
            PointG1.BASE.add(PointG2.BASE)

    def test_coordinates_must_match_field(self):
        with pytest.raises(InvalidParameterError):
            PointG1(FQ2.one(), FQ2.one())
        with pytest.raises(InvalidParameterError):
            PointG2(FQ(1), FQ(2))

    def test_points_are_immutable(self):
        with pytest.raises(AttributeError):
            PointG1.BASE.x = FQ(1)

    def test_equality_is_projective(self):
        """Scaled projective coordinates describe the same point and hash alike."""
        x, y, z = PointG1.BASE.pt
        k = FQ(7)
        scaled = PointG1(x * k, y * k, z * k)
        assert scaled == PointG1.BASE
        assert hash(scaled) == hash(PointG1.BASE)
        assert len({scaled, PointG1.BASE}) == 1
        assert PointG1.BASE != PointG2.BASE

    def test_multiply_matches_py_ecc(self):
        n = 0x1234567890abcdef
        assert eq(PointG1.BASE.multiply(n).pt, multiply(G1, n))
        assert eq(PointG2.BASE.multiply(n).pt, multiply(G2, n))

    def test_multiply_scalar_range(self):
        with pytest.raises(InvalidParameterError):
            PointG1.BASE.multiply(0)
        with pytest.raises(InvalidParameterError):
            PointG1.BASE.multiply(curve_order)
        with pytest.raises(InvalidParameterError):
            PointG1.BASE.multiply(True)
        assert PointG1.BASE.multiply_unsafe(curve_order).is_zero()
        assert PointG1.BASE.multiply_unsafe(0).is_zero()
        with pytest.raises(InvalidParameterError):
            PointG1.BASE.multiply_unsafe(-1)

    def test_to_affine_of_zero_fails(self):
        with pytest.raises(InvalidPointError):
            PointG1.ZERO.to_affine()
        assert PointG1.ZERO.affine_values() == ()


class TestFixedBasePrecomputation:

    @pytest.mark.parametrize("n", [1, 2, 15, 16, 0xdeadbeef, curve_order - 1])
    def test_g1_precomputed_matches_multiply(self, n):
        assert PointG1.BASE.multiply_precomputed(n) == PointG1.BASE.multiply(n)

    def test_g2_precomputed_matches_multiply(self):
        n = 0x73eda753299d7d483339d80809a1d80553bda402fffe5bfefffffffe
        assert PointG2.BASE.multiply_precomputed(n) == PointG2.BASE.multiply(n)

    def test_window_sizes(self):
        point = PointG1.BASE.double()
        n = 0xabcdef0123456789
        expected = point.multiply(n)
        for window in (1, 3, 8):
            assert point.precompute(window).multiply_precomputed(n) == expected
        point.clear_multiply_precomputes()
        assert point.multiply_precomputed(n) == expected

    def test_clear_rebuilds_table(self):
        point = PointG1.BASE.double().double()
        n = 0x5eed
        expected = point.multiply(n)
        point.precompute(2)
        point.clear_multiply_precomputes()
        assert point._multiply_precomputes is None
        assert point.multiply_precomputed(n) == expected
        assert point._multiply_precomputes[0] == DEFAULT_WINDOW

    def test_clear_while_multiplying(self):
        point = PointG1.BASE.double().double().double()
        n = 0xfeedface
        expected = point.multiply(n)
        errors = []
        results = []
        done = threading.Event()

        def worker():
            try:
                for _ in range(3):
                    results.append(point.multiply_precomputed(n))
            except Exception as e:
                errors.append(e)

        def clearer():
            while not done.is_set():
                point.clear_multiply_precomputes()

        workers = [threading.Thread(target=worker) for _ in range(2)]
        cleaner = threading.Thread(target=clearer)
        cleaner.start()
        for t in workers:
            t.start()
        for t in workers:
            t.join()
        done.set()
        cleaner.join()
        assert errors == []
        assert results == [expected] * 6

    def test_invalid_window(self):
        with pytest.raises(InvalidParameterError):
            PointG1.BASE.double().precompute(0)

    def test_from_private_key(self):
        assert PointG1.from_private_key(5) == PointG1.BASE.multiply(5)
        assert PointG2.from_private_key(5) == PointG2.BASE.multiply(5)


class TestValidity:

    def test_generators_are_valid(self):
        assert PointG1.BASE.is_on_curve()
        assert PointG1.BASE.is_torsion_free()
        assert PointG2.BASE.is_on_curve()
        assert PointG2.BASE.is_torsion_free()
        PointG1.BASE.assert_validity()
        PointG2.BASE.assert_validity()

    def test_zero_is_valid(self):
        assert PointG1.ZERO.assert_validity() is PointG1.ZERO
        assert PointG2.ZERO.assert_validity() is PointG2.ZERO

    def test_off_curve_point_is_rejected(self):
        point = PointG1(FQ(1), FQ(1))
        assert not point.is_on_curve()
        with pytest.raises(InvalidPointError, match="not on curve"):
            point.assert_validity()

    def test_g1_torsion_check_agrees_with_order_check(self, g1_outside):
        assert g1_outside.is_on_curve()
        assert not is_inf(multiply(g1_outside.pt, curve_order))
        assert not g1_outside.is_torsion_free()
        with pytest.raises(InvalidPointError, match="prime-order subgroup"):
            g1_outside.assert_validity()

    def test_g1_clear_cofactor(self, g1_outside):
        cleared = g1_outside.clear_cofactor()
        assert cleared.is_torsion_free()
        assert is_inf(multiply(cleared.pt, curve_order))

    def test_g2_torsion_check(self, g2_outside):
        assert g2_outside.is_on_curve()
        assert not g2_outside.is_torsion_free()
        with pytest.raises(InvalidPointError, match="prime-order subgroup"):
            g2_outside.assert_validity()

    def test_g2_clear_cofactor(self, g2_outside):
        cleared = g2_outside.clear_cofactor()
        assert cleared.is_on_curve()
        assert cleared.is_torsion_free()
        assert is_inf(multiply(cleared.pt, curve_order))

    def test_multiples_of_generators_are_torsion_free(self):
        assert PointG1.BASE.multiply(0xc0ffee).is_torsion_free()
        assert PointG2.BASE.multiply(0xc0ffee).is_torsion_free()


class TestEndomorphisms:

    def test_psi_acts_as_seed_multiplication_on_g2(self):
        assert PointG2.BASE.psi() == PointG2.BASE.multiply_by_seed()

    def test_psi2_is_psi_twice(self):
        p = PointG2.BASE.double()
        assert p.psi2() == p.psi().psi()
        assert p.psi2().is_on_curve()

    def test_sigma_preserves_subgroup(self):
        s = PointG1.BASE.sigma()
        assert s.is_on_curve()
        assert s.is_torsion_free()
        assert s != PointG1.BASE
        # sigma has order three.
        assert s.sigma().sigma() == PointG1.BASE


class TestPairingPrecomputes:

    def test_cached_once(self):
        point = PointG2.BASE.double()
        first = point.pairing_precomputes()
        assert point.pairing_precomputes() is first

    def test_clear(self):
        point = PointG2.BASE.double()
        first = point.pairing_precomputes()
        point.clear_pairing_precomputes()
        second = point.pairing_precomputes()
        assert second is not first
        assert second == first

    def test_zero_has_no_precomputes(self):
        with pytest.raises(InvalidPointError):
            PointG2.ZERO.pairing_precomputes()
