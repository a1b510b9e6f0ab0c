# tests/test_invariants.py
"""
PHYSICAL INVARIANTS OF THE ASSEMBLED SYSTEM
===========================================

Checks that hold for ANY correct bar model, independent of closed forms:

- K is symmetric (Maxwell's reciprocal theorem)
- K annihilates rigid-body motions (a structure moved as a block has no
  internal forces)
- forces and moments of reactions + applied loads sum to zero
"""

import numpy as np

from barfem import (
    DEFAULT_CASE,
    FIXED,
    BarElement,
    Model,
    NodalLoad,
    Node,
    UniformLoad,
    UniformMaterial,
    UniformSection,
    analyse,
)
from barfem.assembly import assemble_model_K

SECTION = UniformSection(A=0.01, Iy=6.0e-6, Iz=8.0e-6, J=4.0e-6)
MATERIAL = UniformMaterial.from_young_poisson(210e9, 0.3)


def space_frame():
    """Two fixed columns and a skewed, web-rotated beam between them."""
    a = Node(0.0, 0.0, 0.0, constraints=FIXED)
    b = Node(0.5, 0.0, 3.0)
    c = Node(4.0, 2.0, 3.5)
    d = Node(4.0, 2.0, 0.0, constraints=FIXED)
    elements = [
        BarElement([a, b], SECTION, MATERIAL),
        BarElement([b, c], SECTION, MATERIAL, web_rotation=30.0,
                   loads=[UniformLoad([0.0, 0.0, -1.0], 4000.0)]),
        BarElement([c, d], SECTION, MATERIAL),
    ]
    b.loads.append(NodalLoad([1500.0, -800.0, 0.0, 0.0, 0.0, 200.0]))
    return Model(nodes=[a, b, c, d], elements=elements)


def test_stiffness_matrix_symmetry():
    """K[i, j] = K[j, i]."""
    K = assemble_model_K(space_frame()).toarray()
    scale = np.abs(K).max()
    np.testing.assert_allclose(K, K.T, rtol=0, atol=1e-10 * scale,
                               err_msg="Stiffness matrix is not symmetric!")
    print("✓ Stiffness matrix is symmetric (physics is preserved)")


def test_rigid_body_modes_have_no_forces():
    """K · (translation or small rotation of the whole model) = 0."""
    model = space_frame()
    K = assemble_model_K(model).toarray()
    scale = np.abs(K).max()

    for axis in range(3):
        u = np.zeros(K.shape[0])
        u[axis::6] = 1.0
        np.testing.assert_allclose(K @ u, 0.0, atol=1e-8 * scale)

    # rotation about global z: u = θ × r, rz = θ
    u = np.zeros(K.shape[0])
    for i, node in enumerate(model.nodes):
        u[6 * i + 0] = -node.y
        u[6 * i + 1] = node.x
        u[6 * i + 5] = 1.0
    np.testing.assert_allclose(K @ u, 0.0, atol=1e-8 * scale)
    print("✓ Rigid-body motions produce no forces")


def test_equilibrium_forces_and_moments():
    """ΣF = 0 and ΣM about the origin = 0 for reactions + loads."""
    model = space_frame()
    result = analyse(model)

    R = result.support_reactions(DEFAULT_CASE).reshape(-1, 6)
    P = result.loads[DEFAULT_CASE].reshape(-1, 6)
    total = R + P

    force = total[:, :3].sum(axis=0)
    moment = total[:, 3:].sum(axis=0)
    for node, f in zip(model.nodes, total):
        moment += np.cross(node.location, f[:3])

    np.testing.assert_allclose(force, 0.0, atol=1e-6)
    np.testing.assert_allclose(moment, 0.0, atol=1e-5)
    print(f"✓ Equilibrium: |ΣF| = {np.linalg.norm(force):.1e}, |ΣM| = {np.linalg.norm(moment):.1e}")
