# tests/test_geometry.py
"""
BAR AXES AND FORCE TRANSPORT
============================

- horizontal bars: local y is horizontal (z × x), local z = x × y
- vertical bars: local y is global Y
- web rotation turns y towards z about the bar axis
- rotating to local and back is the identity (orthonormal matrix)
- a force moved by r picks up the moment r × F
"""

import numpy as np
import pytest

from barfem.geometry import ORIGIN, Transformation, move_force


def test_bar_along_global_x_has_global_axes():
    T = Transformation.for_bar([0, 0, 0], [4.0, 0, 0])
    np.testing.assert_allclose(T.matrix, np.eye(3), atol=1e-15)


def test_vertical_bar_uses_global_y():
    T = Transformation.for_bar([1.0, 1.0, 0.0], [1.0, 1.0, 3.0])
    np.testing.assert_allclose(T.matrix, [[0, 0, 1], [0, 1, 0], [-1, 0, 0]], atol=1e-15)


def test_web_rotation_turns_y_towards_z():
    T = Transformation.for_bar([0, 0, 0], [4.0, 0, 0], web_rotation=90.0)
    np.testing.assert_allclose(T.matrix, [[1, 0, 0], [0, 0, 1], [0, -1, 0]], atol=1e-15)


def test_local_and_global_vectors_are_inverse_rotations():
    T = Transformation.for_bar([0.5, -1.0, 2.0], [3.0, 2.0, 4.5], web_rotation=25.0)

    np.testing.assert_allclose(T.matrix @ T.matrix.T, np.eye(3), atol=1e-14)

    v = np.array([1.5, -2.0, 0.7])
    np.testing.assert_allclose(T.local_to_global_vector(T.global_to_local_vector(v)), v, rtol=1e-12)
    # the local x axis maps back to the bar direction
    direction = np.array([2.5, 3.0, 2.5]) / np.linalg.norm([2.5, 3.0, 2.5])
    np.testing.assert_allclose(T.local_to_global_vector([1.0, 0.0, 0.0]), direction, rtol=1e-12)


def test_six_vector_rotation_rotates_both_halves():
    T = Transformation.for_bar([0, 0, 0], [0, 2.0, 0])
    six = np.array([0.0, 10.0, 0.0, 0.0, 5.0, 0.0])
    # bar along global Y: local x = global Y, local y = -global X, local z = global Z
    np.testing.assert_allclose(T.global_to_local(six), [10.0, 0.0, 0.0, 5.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(T.local_to_global(T.global_to_local(six)), six, atol=1e-12)


def test_move_force_adds_lever_arm_moment():
    P, L = 2000.0, 3.0
    moved = move_force(np.array([0.0, P, 0.0, 0.0, 0.0, 0.0]), (L, 0.0, 0.0), ORIGIN)

    assert moved[1] == P
    assert moved[5] == pytest.approx(P * L)
    # moving back removes it again
    np.testing.assert_allclose(move_force(moved, ORIGIN, (L, 0.0, 0.0)), [0, P, 0, 0, 0, 0], atol=1e-9)
