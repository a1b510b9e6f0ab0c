# tests/test_post.py
"""
POST-PROCESSING TESTS: total internal fields along a solved bar
===============================================================

A SINGLE element is enough for the exact answer once the load-only
(clamped-bar) field is added to the shape-function interpolation of the
solved end rotations:

    simply supported, UDL w, span L:
        nodal part at midspan   wL⁴/96EI   (end slopes wL³/24EI)
        load-only part          wL⁴/384EI
        total                   5wL⁴/384EI
        moment                  wL²/8  (Mz = EI v'' < 0 for a +y sag)
"""

import numpy as np
import pytest

from barfem import (
    DEFAULT_CASE,
    BarElement,
    ConcentratedLoad,
    Constraint,
    Dof,
    Model,
    NodalLoad,
    Node,
    UniformLoad,
    UniformMaterial,
    UniformSection,
    analyse,
    element_internal_displacement_at,
    element_internal_force_at,
    element_local_displacements,
)

L = 6.0
E = 200e9
G = 77e9
IY = 3.0e-6
IZ = 5.0e-6

SECTION = UniformSection(A=0.008, Iy=IY, Iz=IZ, J=2.0e-6)
MATERIAL = UniformMaterial(E=E, G=G)


def single_span(*loads, start=(0.0, 0.0, 0.0), end=(L, 0.0, 0.0), pin="111100", roller="011000"):
    """One bar, pinned (dx, dy, dz, rx) at the start, roller (dy, dz) at the end."""
    a = Node(*start, constraints=Constraint.from_string(pin))
    b = Node(*end, constraints=Constraint.from_string(roller))
    bar = BarElement([a, b], SECTION, MATERIAL, loads=list(loads))
    return Model(nodes=[a, b], elements=[bar]), bar


def test_single_element_simply_supported_udl_midspan():
    w = 1000.0
    model, bar = single_span(UniformLoad([0.0, 1.0, 0.0], w))
    result = analyse(model)

    u = element_internal_displacement_at(result, bar, DEFAULT_CASE, 0.0)
    f = element_internal_force_at(result, bar, DEFAULT_CASE, 0.0)

    assert u[Dof.DY] == pytest.approx(5 * w * L ** 4 / (384 * E * IZ), rel=1e-9)
    assert f[Dof.RZ] == pytest.approx(-w * L ** 2 / 8, rel=1e-9)
    assert f[Dof.DY] == pytest.approx(0.0, abs=1e-6)
    print(f"✓ One element, total δ_mid = 5wL⁴/384EI, M_mid = {f[Dof.RZ]:.1f} N·m")


def test_single_element_simply_supported_udl_other_plane():
    """Same span loaded along +z: the My sign is mirrored, the deflection is not."""
    w = 1000.0
    model, bar = single_span(UniformLoad([0.0, 0.0, 1.0], w))
    result = analyse(model)

    u = element_internal_displacement_at(result, bar, DEFAULT_CASE, 0.0)
    f = element_internal_force_at(result, bar, DEFAULT_CASE, 0.0)

    assert u[Dof.DZ] == pytest.approx(5 * w * L ** 4 / (384 * E * IY), rel=1e-9)
    assert f[Dof.RY] == pytest.approx(w * L ** 2 / 8, rel=1e-9)


def test_deflected_shape_along_span():
    """v(x) = w x (L³ - 2Lx² + x³) / 24EI at interior points, zero at the supports."""
    w = 1500.0
    model, bar = single_span(UniformLoad([0.0, 1.0, 0.0], w))
    result = analyse(model)

    for xi in (-1.0, -0.6, -0.1, 0.35, 0.8, 1.0):
        x = (xi + 1.0) * L / 2.0
        expected = w * x * (L ** 3 - 2 * L * x ** 2 + x ** 3) / (24 * E * IZ)
        actual = element_internal_displacement_at(result, bar, DEFAULT_CASE, xi)[Dof.DY]
        assert actual == pytest.approx(expected, rel=1e-9, abs=1e-12)


def test_moment_diagram_of_simple_span():
    """M(x) = -w x (L - x) / 2 and V(x) = w (L/2 - x) away from the ends."""
    w = 1200.0
    model, bar = single_span(UniformLoad([0.0, 1.0, 0.0], w))
    result = analyse(model)

    for xi in (-0.9, -0.3, 0.4, 0.95):
        x = (xi + 1.0) * L / 2.0
        f = element_internal_force_at(result, bar, DEFAULT_CASE, xi)
        assert f[Dof.RZ] == pytest.approx(-w * x * (L - x) / 2, rel=1e-9)
        assert f[Dof.DY] == pytest.approx(w * (L / 2 - x), rel=1e-9, abs=1e-6)


def test_midspan_point_load_on_simple_span():
    """PL³/48EI under the load, PL/4 moment."""
    P = 5000.0
    model, bar = single_span(ConcentratedLoad([0.0, P, 0.0, 0.0, 0.0, 0.0], iso_location=0.0))
    result = analyse(model)

    u = element_internal_displacement_at(result, bar, DEFAULT_CASE, 0.0)
    assert u[Dof.DY] == pytest.approx(P * L ** 3 / (48 * E * IZ), rel=1e-9)

    f = element_internal_force_at(result, bar, DEFAULT_CASE, -0.5)
    assert f[Dof.RZ] == pytest.approx(-P * (L / 4) / 2, rel=1e-9)


def test_rotated_bar_local_displacements():
    """A bar along global Y: global -x displacement is local +y."""
    w = 800.0
    # axis is global Y now: pin fixes ry (torsion), roller fixes the transverse dx, dz
    model, bar = single_span(UniformLoad([-1.0, 0.0, 0.0], w), end=(0.0, L, 0.0),
                             pin="111010", roller="101000")
    result = analyse(model)

    local = element_local_displacements(result, bar, DEFAULT_CASE)
    assert local.shape == (2, 6)

    u = element_internal_displacement_at(result, bar, DEFAULT_CASE, 0.0)
    assert u[Dof.DY] == pytest.approx(5 * w * L ** 4 / (384 * E * IZ), rel=1e-9)


def test_nodal_only_fields_when_no_member_loads():
    """Axial tip load: uniform strain, Fx = P everywhere."""
    P = 20000.0
    model, bar = single_span()
    model.nodes[1].loads.append(NodalLoad([P, 0.0, 0.0, 0.0, 0.0, 0.0]))
    result = analyse(model)

    for xi in (-0.5, 0.0, 0.5):
        f = element_internal_force_at(result, bar, DEFAULT_CASE, xi)
        assert f[Dof.DX] == pytest.approx(P, rel=1e-9)
        np.testing.assert_allclose(np.delete(f, Dof.DX), 0.0, atol=1e-9)

    quarter = element_internal_displacement_at(result, bar, DEFAULT_CASE, -0.5)[Dof.DX]
    assert quarter == pytest.approx(P * (L / 4) / (E * 0.008), rel=1e-9)
