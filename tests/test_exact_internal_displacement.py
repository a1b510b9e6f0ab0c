# tests/test_exact_internal_displacement.py
"""
LOAD-ONLY INTERNAL DISPLACEMENT: comparison with closed forms
=============================================================

internal_displacement_at(load, xi) is the deflection of a bar with both ends
clamped under its own member load. For uniform bars the exact answers are
textbook formulas:

    beam, uniform load w:          v(x) = w x² (L-x)² / (24 EI)
    beam, point load P at a:       v(x) = P b² x² (3aL - 3ax - bx) / (6 EI L³),  x <= a
    truss, uniform axial load w:   u(x) = w x (L-x) / (2 EA)
    truss, axial point load P:     u(x) = P b x / (L EA)        x <= a
                                          P a (L-x) / (L EA)    x >= a
    shaft, point torque T:         same two-segment form with T / GJ

with b = L - a. Each is checked at 10 evenly spaced points.
"""

import numpy as np
import pytest

from barfem.helpers import BeamDirection, EulerBernoulliBeamHelper, ShaftHelper, TrussHelper
from barfem.loads import ConcentratedLoad, CoordinationSystem, PartialNonUniformLoad, UniformLoad
from barfem.model import BarElement, Dof, Node, UniformMaterial, UniformSection

L = 5.0
E = 210e9
G = 81e9
A = 0.012
IY = 2.0e-5
IZ = 3.5e-5
J = 1.5e-5

LOCAL = CoordinationSystem.LOCAL


def make_bar(length: float = L) -> BarElement:
    """Uniform steel bar along global X (local axes = global axes)."""
    return BarElement(
        nodes=[Node(0.0, 0.0, 0.0), Node(length, 0.0, 0.0)],
        section=UniformSection(A=A, Iy=IY, Iz=IZ, J=J),
        material=UniformMaterial(E=E, G=G, rho=7850.0),
    )


def sample_points(length: float = L):
    xs = np.linspace(0.0, length, 10)
    return xs, 2.0 * xs / length - 1.0


def point_load_two_segment(x, a, magnitude, rigidity, length=L):
    b = length - a
    return np.where(x <= a, magnitude * b * x / (length * rigidity),
                    magnitude * a * (length - x) / (length * rigidity))


# =============================================================================
# Beams
# =============================================================================

@pytest.mark.parametrize("direction, dof, load_dir, inertia", [
    (BeamDirection.Z, Dof.DY, [0.0, 1.0, 0.0], IZ),
    (BeamDirection.Y, Dof.DZ, [0.0, 0.0, 1.0], IY),
])
@pytest.mark.parametrize("w", [1500.0, -2200.0])
def test_beam_uniform_load_matches_closed_form(direction, dof, load_dir, inertia, w):
    """Clamped beam under uniform load, both bending planes, both signs."""
    helper = EulerBernoulliBeamHelper(make_bar(), direction)
    load = UniformLoad(direction=load_dir, magnitude=w, coordination_system=LOCAL)

    xs, xis = sample_points()
    actual = np.array([helper.internal_displacement_at(load, xi)[dof] for xi in xis])
    expected = w * xs ** 2 * (L - xs) ** 2 / (24.0 * E * inertia)

    np.testing.assert_allclose(actual, expected, rtol=1e-6, atol=1e-12)

    interior = actual[1:-1]
    assert np.all(np.sign(interior) == np.sign(w)), "deflection must follow the load"
    print(f"✓ {direction.name} beam UDL deflection matches w x²(L-x)²/24EI (w={w})")


def test_beam_uniform_load_rotations_follow_sign_convention():
    """rz = +dv/dx for Z bending, ry = -dw/dx for Y bending."""
    w = 1000.0
    xi = -0.5
    x = (xi + 1.0) * L / 2.0
    slope_z = w * (2 * x * (L - x) ** 2 - 2 * x ** 2 * (L - x)) / (24.0 * E * IZ)
    slope_y = w * (2 * x * (L - x) ** 2 - 2 * x ** 2 * (L - x)) / (24.0 * E * IY)

    z = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Z)
    y = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Y)

    rz = z.internal_displacement_at(UniformLoad([0, 1, 0], w, coordination_system=LOCAL), xi)[Dof.RZ]
    ry = y.internal_displacement_at(UniformLoad([0, 0, 1], w, coordination_system=LOCAL), xi)[Dof.RY]

    assert rz == pytest.approx(slope_z, rel=1e-6)
    assert ry == pytest.approx(-slope_y, rel=1e-6)


@pytest.mark.parametrize("xt", [1.8, 3.1])
def test_beam_concentrated_load_matches_closed_form(xt):
    """Clamped beam with point load P at a = xt, both sides of the load."""
    P = 4000.0
    a, b = xt, L - xt
    helper = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Z)
    load = ConcentratedLoad(force=[0, P, 0, 0, 0, 0], iso_location=2 * xt / L - 1,
                            coordination_system=LOCAL)

    xs, xis = sample_points()
    actual = np.array([helper.internal_displacement_at(load, xi)[Dof.DY] for xi in xis])

    before = P * b ** 2 * xs ** 2 * (3 * a * L - 3 * a * xs - b * xs) / (6.0 * E * IZ * L ** 3)
    r = L - xs
    after = P * a ** 2 * r ** 2 * (3 * b * L - 3 * b * r - a * r) / (6.0 * E * IZ * L ** 3)
    expected = np.where(xs <= a, before, after)

    np.testing.assert_allclose(actual, expected, rtol=1e-6, atol=1e-12)
    assert np.all(actual[1:-1] > 0.0)
    print(f"✓ Beam point-load deflection matches closed form (xt={xt})")


def test_beam_partial_load_vanishes_outside_at_clamped_end():
    """A load on the second half leaves v(0) = v(L) = 0 and deflects the whole bar."""
    helper = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Z)
    load = PartialNonUniformLoad([0, 1, 0], 0.0, 1.0, severity=[1000.0, 500.0],
                                 coordination_system=LOCAL)

    assert helper.internal_displacement_at(load, -1.0)[Dof.DY] == 0.0
    assert helper.internal_displacement_at(load, 1.0)[Dof.DY] == pytest.approx(0.0, abs=1e-12)
    assert helper.internal_displacement_at(load, -0.5)[Dof.DY] > 0.0


def test_beam_partial_full_span_equals_uniform():
    """A constant severity over [-1, 1] is the uniform load."""
    helper = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Y)
    uniform = UniformLoad([0, 0, -1], 800.0, coordination_system=LOCAL)
    partial = PartialNonUniformLoad([0, 0, -1], -1.0, 1.0, severity=[800.0], coordination_system=LOCAL)

    for xi in (-0.6, 0.1, 0.9):
        np.testing.assert_allclose(
            helper.internal_displacement_at(partial, xi),
            helper.internal_displacement_at(uniform, xi),
            rtol=1e-9, atol=1e-15,
        )


# =============================================================================
# Truss and shaft
# =============================================================================

def test_truss_uniform_axial_load_matches_closed_form():
    w = 3000.0
    helper = TrussHelper(make_bar())
    load = UniformLoad([1.0, 0.0, 0.0], w, coordination_system=LOCAL)

    xs, xis = sample_points()
    actual = np.array([helper.internal_displacement_at(load, xi)[Dof.DX] for xi in xis])
    expected = w * xs * (L - xs) / (2.0 * E * A)

    np.testing.assert_allclose(actual, expected, rtol=1e-6, atol=1e-12)
    print("✓ Truss UDL displacement matches w x(L-x)/2EA")


def test_truss_concentrated_axial_load_is_piecewise_linear():
    P = 25000.0
    xt = 2.2
    helper = TrussHelper(make_bar())
    load = ConcentratedLoad([P, 0, 0, 0, 0, 0], iso_location=2 * xt / L - 1, coordination_system=LOCAL)

    xs, xis = sample_points()
    actual = np.array([helper.internal_displacement_at(load, xi)[Dof.DX] for xi in xis])
    expected = point_load_two_segment(xs, xt, P, E * A)

    np.testing.assert_allclose(actual, expected, rtol=1e-6, atol=1e-12)

    # continuous at xt
    at = helper.internal_displacement_at(load, 2 * xt / L - 1)[Dof.DX]
    assert at == pytest.approx(P * (L - xt) * xt / (L * E * A), rel=1e-6)
    print("✓ Truss point load: two-segment closed form, continuous at xt")


def test_shaft_concentrated_torque_matches_closed_form():
    T = 1200.0
    xt = 3.4
    helper = ShaftHelper(make_bar())
    load = ConcentratedLoad([0, 0, 0, T, 0, 0], iso_location=2 * xt / L - 1, coordination_system=LOCAL)

    xs, xis = sample_points()
    actual = np.array([helper.internal_displacement_at(load, xi)[Dof.RX] for xi in xis])
    expected = point_load_two_segment(xs, xt, T, G * J)

    np.testing.assert_allclose(actual, expected, rtol=1e-6, atol=1e-12)
    print("✓ Shaft torque: two-segment closed form from end reactions")


def test_shaft_ignores_line_forces():
    helper = ShaftHelper(make_bar())
    load = UniformLoad([0.0, 1.0, 1.0], 1000.0, coordination_system=LOCAL)
    np.testing.assert_array_equal(helper.equivalent_nodal_loads(load), np.zeros((2, 6)))
    np.testing.assert_array_equal(helper.internal_displacement_at(load, 0.3), np.zeros(6))


# =============================================================================
# Internal force of the clamped bar
# =============================================================================

def test_clamped_beam_uniform_load_internal_forces():
    """M(x) = w(L²/12 - Lx/2 + x²/2) for Z; the Y plane mirrors the moment sign, not the shear."""
    w = 1000.0
    z = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Z)
    y = EulerBernoulliBeamHelper(make_bar(), BeamDirection.Y)

    for xi in (-0.8, -0.25, 0.0, 0.6):
        x = (xi + 1.0) * L / 2.0
        moment = w * (L ** 2 / 12.0 - L * x / 2.0 + x ** 2 / 2.0)
        shear = w * (L / 2.0 - x)

        fz = z.internal_force_at(UniformLoad([0, 1, 0], w, coordination_system=LOCAL), xi)
        fy = y.internal_force_at(UniformLoad([0, 0, 1], w, coordination_system=LOCAL), xi)

        assert fz[Dof.RZ] == pytest.approx(moment, rel=1e-9, abs=1e-9)
        assert fz[Dof.DY] == pytest.approx(shear, rel=1e-9, abs=1e-9)
        assert fy[Dof.RY] == pytest.approx(-moment, rel=1e-9, abs=1e-9)
        assert fy[Dof.DZ] == pytest.approx(shear, rel=1e-9, abs=1e-9)
    print("✓ Clamped-beam UDL moment/shear, Y plane mirrored")


def test_internal_force_jumps_across_concentrated_load():
    """Truss axial force drops by P across the load point."""
    P = 10000.0
    helper = TrussHelper(make_bar())
    load = ConcentratedLoad([P, 0, 0, 0, 0, 0], iso_location=0.0, coordination_system=LOCAL)

    before = helper.internal_force_at(load, -0.01)[Dof.DX]
    after = helper.internal_force_at(load, 0.01)[Dof.DX]

    assert before == pytest.approx(P / 2.0)
    assert after == pytest.approx(-P / 2.0)
