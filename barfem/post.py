# barfem/post.py
"""
POST-PROCESSING: internal displacement and force along a solved bar
===================================================================

The field at any point of a bar is the sum of two contributions:

    total(xi) = Σ helpers [ from_nodal_values(u_local, xi)       (end displacements)
                          + Σ loads  internal_*_at(load, xi) ]  (clamped-bar load effect)

The first term is the shape-function interpolation of the solved end
displacements; the second is the field of the member loads on a bar with
both ends clamped. Both are returned in the bar's local axes.

Sign conventions (local axes):
- Fx > 0 tension, Mx > 0 twist about +x
- Mz = EI_z · v''  (v = local y deflection), Fy = -dMz/dx
- My = -EI_y · w'' (w = local z deflection), Fz = dMy/dx
so a simply supported bar sagging towards +y has Mz < 0 at midspan.

Example:
--------
    result = analyse(model)
    mid = element_internal_displacement_at(result, beam, DEFAULT_CASE, 0.0)
    moment = element_internal_force_at(result, beam, DEFAULT_CASE, 0.0)[Dof.RZ]
"""

from typing import List, Optional

import numpy as np

from .elements import bar_helpers
from .helpers import BarHelper
from .kernel.linalg import MatrixPool
from .model import BarElement, LoadCase
from .solve import StaticLinearAnalysisResult


def element_local_displacements(result: StaticLinearAnalysisResult, element: BarElement,
                                case: LoadCase) -> np.ndarray:
    """
    End displacements of ``element`` in its local axes.

    Returns:
    --------
    np.ndarray (2, 6)
        [start 6-vector, end 6-vector]
    """
    T = element.transformation()
    return np.vstack([
        T.global_to_local(result.node_displacement(node, case)) for node in element.nodes
    ])


def _case_loads(element: BarElement, case: LoadCase) -> list:
    return [load for load in element.loads if load.case == case]


def element_internal_displacement_at(result: StaticLinearAnalysisResult, element: BarElement,
                                     case: LoadCase, xi: float,
                                     helpers: Optional[List[BarHelper]] = None) -> np.ndarray:
    """Total local displacement 6-vector [dx, dy, dz, rx, ry, rz] at ``xi``."""
    helpers = helpers if helpers is not None else bar_helpers(element, MatrixPool(), result.config)
    local = element_local_displacements(result, element, case)
    loads = _case_loads(element, case)

    total = np.zeros(6)
    for helper in helpers:
        total += helper.internal_displacement_from_nodal_values(local, xi)
        for load in loads:
            total += helper.internal_displacement_at(load, xi)
    return total


def element_internal_force_at(result: StaticLinearAnalysisResult, element: BarElement,
                              case: LoadCase, xi: float,
                              helpers: Optional[List[BarHelper]] = None) -> np.ndarray:
    """Total local internal force 6-vector [Fx, Fy, Fz, Mx, My, Mz] at ``xi``."""
    helpers = helpers if helpers is not None else bar_helpers(element, MatrixPool(), result.config)
    local = element_local_displacements(result, element, case)
    loads = _case_loads(element, case)

    total = np.zeros(6)
    for helper in helpers:
        total += helper.internal_force_from_nodal_values(local, xi)
        for load in loads:
            total += helper.internal_force_at(load, xi)
    return total
