import math
import os
import sys

import numpy as np
import pytest

# Make src importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from transform.AffineMatrix import AffineMatrix


def approx_matrix(m: AffineMatrix, expected, abs_tol=1e-12) -> bool:
    return np.allclose(m.m, np.array(expected, dtype=float), atol=abs_tol, rtol=0)


@pytest.fixture
def sample():
    # Some non-trivial affine transform
    return AffineMatrix.from_values([2, 3, 5, -1, 4, 7])


def test_identity_and_diagonal():
    assert AffineMatrix().is_identity()
    assert AffineMatrix.identity().m.tolist() == [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    assert AffineMatrix.diagonal(3).m.tolist() == [[3, 0, 0], [0, 3, 0], [0, 0, 3]]
    assert not AffineMatrix.diagonal(2).is_identity()


def test_from_values_fills_identity_pattern():
    assert AffineMatrix.from_values([2, 3]).m.tolist() == [[2, 3, 0], [0, 1, 0], [0, 0, 1]]
    assert AffineMatrix.from_values([1, 0, 0, 4]).m.tolist() == [[1, 0, 0], [4, 1, 0], [0, 0, 1]]
    assert AffineMatrix.from_values([1, 2, 3, 4, 5, 6]).m.tolist() == [[1, 2, 3], [4, 5, 6], [0, 0, 1]]
    assert AffineMatrix.from_values(range(1, 10)).m.tolist() == [[1, 2, 3], [4, 5, 6], [7, 8, 9]]


def test_from_values_respects_count():
    # Only the first two values are taken, the rest is identity
    m = AffineMatrix.from_values([5, 6, 7, 8], 2)
    assert m.m.tolist() == [[5, 6, 0], [0, 1, 0], [0, 0, 1]]
    # More than 9 values are ignored
    m = AffineMatrix.from_values(list(range(12)), 12)
    assert m.m.tolist() == [[0, 1, 2], [3, 4, 5], [6, 7, 8]]


def test_from_values_two_elements_is_xskew():
    t = math.tan(math.pi * 30 / 180.0)
    assert AffineMatrix.from_values([1, t], 2) == AffineMatrix().xskew(30)


def test_elementary_factories():
    assert AffineMatrix.translation(3, 4).m.tolist() == [[1, 0, 3], [0, 1, 4], [0, 0, 1]]
    assert AffineMatrix.scaling(2, 5).m.tolist() == [[2, 0, 0], [0, 5, 0], [0, 0, 1]]
    assert AffineMatrix.scaling(2).m.tolist() == [[2, 0, 0], [0, 2, 0], [0, 0, 1]]
    assert approx_matrix(AffineMatrix.rotation(90), [[0, -1, 0], [1, 0, 0], [0, 0, 1]])


def test_identity_is_neutral(sample):
    assert sample.copy().right_compose(AffineMatrix()) == sample
    assert AffineMatrix().right_compose(sample) == sample
    assert sample.copy().left_compose(AffineMatrix()) == sample
    assert AffineMatrix().left_compose(sample) == sample


def test_translations_add_up():
    assert AffineMatrix().translate(2, 0).translate(3, 0) == AffineMatrix().translate(5, 0)


def test_full_turn_is_identity(sample):
    assert approx_matrix(AffineMatrix().rotate(360), np.eye(3))
    assert approx_matrix(sample.copy().rotate(360), sample.m)


def test_translation_apply_and_check():
    m = AffineMatrix().translate(7, -2)
    assert m.apply((0, 0)) == (7, -2)
    assert m * (1, 1) == (8, -1)
    assert m.is_pure_translation() == (True, 7, -2)


def test_pure_translation_offsets_written_even_if_false():
    # Documented behavior: offsets always come from the last column
    m = AffineMatrix().scale(2, 2).translate(4, 5)
    ok, tx, ty = m.is_pure_translation()
    assert not ok
    assert (tx, ty) == (4, 5)


def test_pure_translation_checks_third_row():
    m = AffineMatrix.from_values([1, 0, 1, 0, 1, 2, 0, 0, 2])
    assert m.is_pure_translation() == (False, 1, 2)
    assert AffineMatrix().is_pure_translation() == (True, 0, 0)


def test_noop_fast_paths():
    m = AffineMatrix.from_values([1, 2, 3, 4, 5, 6])
    before = m.m.copy()
    m.translate(0, 0).scale(1, 1).xskew(0).yskew(0)
    assert np.array_equal(m.m, before)


def test_operations_apply_in_call_order():
    # Translate first, then scale
    m = AffineMatrix().translate(5, 0).scale(2, 2)
    assert m.apply((0, 0)) == (10, 0)

    # Scale first, then translate
    m = AffineMatrix().scale(2, 2).translate(5, 0)
    assert m.apply((0, 0)) == (5, 0)


def test_right_and_left_compose():
    t = AffineMatrix.translation(5, 0)
    s = AffineMatrix.scaling(2)

    # right_compose appends: existing first, then the argument
    m = t.copy().right_compose(s)
    assert m.apply((1, 1)) == (12, 2)

    # left_compose prepends: the argument first, then the existing one
    m = t.copy().left_compose(s)
    assert m.apply((1, 1)) == (7, 2)

    assert t.copy().left_compose(s) == t @ s
    assert t.copy().right_compose(s) == s @ t


def test_rotate_anticlockwise():
    x, y = AffineMatrix().rotate(90).apply((1, 0))
    assert x == pytest.approx(0, abs=1e-12)
    assert y == pytest.approx(1)


def test_skew():
    x, y = AffineMatrix().xskew(45).apply((0, 2))
    assert (x, y) == (pytest.approx(2), 2)
    x, y = AffineMatrix().yskew(45).apply((2, 0))
    assert (x, y) == (2, pytest.approx(2))


def test_flip():
    # Mirror at y=3
    m = AffineMatrix().flip(True, 3)
    assert m.apply((1, 1)) == (1, 5)
    assert m.apply((4, 3)) == (4, 3)

    # Mirror at x=-1
    m = AffineMatrix().flip(False, -1)
    assert m.apply((1, 7)) == (-3, 7)
    assert m.apply((-1, 2)) == (-1, 2)


def test_transpose():
    m = AffineMatrix.from_values(range(1, 10)).transpose()
    assert m.m.tolist() == [[1, 4, 7], [2, 5, 8], [3, 6, 9]]
    assert m.transpose().m.tolist() == [[1, 2, 3], [4, 5, 6], [7, 8, 9]]


def test_equality_ignores_third_row():
    a = AffineMatrix.from_values([1, 2, 3, 4, 5, 6])
    b = AffineMatrix.from_values([1, 2, 3, 4, 5, 6, 9, 9, 9])
    c = AffineMatrix.from_values([1, 2, 3, 4, 5, 7])
    assert a == b
    assert a != c
    assert not (a != b)
    assert a != "matrix"


def test_is_identity_ignores_third_row():
    assert AffineMatrix.from_values([1, 0, 0, 0, 1, 0, 5, 5, 5]).is_identity()
    assert not AffineMatrix.translation(0, 1).is_identity()


def test_copy_is_independent(sample):
    c = sample.copy()
    c.translate(1, 1)
    assert c != sample


def test_matmul_does_not_mutate():
    a = AffineMatrix.translation(1, 2)
    b = AffineMatrix.scaling(3)
    prod = a @ b
    assert prod.m.tolist() == [[3, 0, 1], [0, 3, 2], [0, 0, 1]]
    assert a == AffineMatrix.translation(1, 2)
    assert b == AffineMatrix.scaling(3)


def test_not_hashable():
    with pytest.raises(TypeError):
        hash(AffineMatrix())
