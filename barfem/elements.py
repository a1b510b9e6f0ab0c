# barfem/elements.py
"""
BAR ELEMENT MATRICES: local stiffness/mass, transformation, equivalent loads
============================================================================

Combines the helpers of one bar into 12×12 element matrices and 12-vectors.

DOF order (local and global):

    [dx0, dy0, dz0, rx0, ry0, rz0,  dx1, dy1, dz1, rx1, ry1, rz1]

Each helper only fills its own rows/columns (e.g. BEAM_Z fills dy and rz),
so a FRAME bar gets the usual 3D frame stiffness:

    dx   EA/L
    rx   GJ/L
    dy/rz  12EI_z/L³, 6EI_z/L², 4EI_z/L, 2EI_z/L
    dz/ry  same with I_y, rotation coupling signs mirrored

Global matrices follow from the rotation T (global → local):

    k_global = Tᵀ k_local T
"""

from typing import List, Optional

import numpy as np

from .config import SolverConfig
from .helpers import BarHelper, helpers_for
from .kernel.linalg import MatrixPool
from .model import BarElement

DOF_PER_NODE = 6


def bar_helpers(element: BarElement, pool: Optional[MatrixPool] = None,
                config: Optional[SolverConfig] = None) -> List[BarHelper]:
    """Helpers for every behaviour of ``element`` (sharing one scratch pool)."""
    return helpers_for(element, pool=pool, config=config)


def _element_indices(helper: BarHelper) -> List[int]:
    return [DOF_PER_NODE * node + int(dof) for node, dof in helper.columns]


def _scatter(helpers: List[BarHelper], matrix_of) -> np.ndarray:
    k = np.zeros((2 * DOF_PER_NODE, 2 * DOF_PER_NODE), dtype=float)
    for helper in helpers:
        idx = _element_indices(helper)
        k[np.ix_(idx, idx)] += matrix_of(helper)
    return k


def bar_local_stiffness(element: BarElement, helpers: Optional[List[BarHelper]] = None) -> np.ndarray:
    """12×12 stiffness of ``element`` in its local axes."""
    helpers = helpers if helpers is not None else bar_helpers(element)
    return _scatter(helpers, lambda h: h.stiffness_matrix())


def bar_global_stiffness(element: BarElement, helpers: Optional[List[BarHelper]] = None) -> np.ndarray:
    """12×12 stiffness of ``element`` in global axes."""
    k_local = bar_local_stiffness(element, helpers)
    T = element.transformation().element_matrix(2)
    return T.T @ k_local @ T


def bar_local_mass(element: BarElement, helpers: Optional[List[BarHelper]] = None) -> np.ndarray:
    """
    12×12 consistent mass of ``element`` in its local axes.

    Translational mass comes from the truss and beam helpers (rho·A), rotary
    inertia about the bar axis from the shaft helper (rho·J).
    """
    helpers = helpers if helpers is not None else bar_helpers(element)
    return _scatter(helpers, lambda h: h.mass_matrix())


def bar_equivalent_nodal_loads(element: BarElement, load, helpers: Optional[List[BarHelper]] = None,
                               global_axes: bool = True) -> np.ndarray:
    """
    Equivalent nodal loads of one elemental load, summed over the helpers.

    Returns:
    --------
    np.ndarray (2, 6)
        [start 6-vector, end 6-vector], global axes unless ``global_axes`` is False
    """
    helpers = helpers if helpers is not None else bar_helpers(element)

    local = np.zeros((2, DOF_PER_NODE), dtype=float)
    for helper in helpers:
        local += helper.equivalent_nodal_loads(load)

    if not global_axes:
        return local

    T = element.transformation()
    return np.vstack([T.local_to_global(local[0]), T.local_to_global(local[1])])
