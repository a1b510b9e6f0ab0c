# barfem/helpers/beam.py
"""
EULER-BERNOULLI BEAM HELPER
===========================

Bending of a bar in one plane, as a function of the iso coordinate xi.

    BeamDirection.Z   bending in the local x-y plane   DOFs (dy, rz)   E·Iz
    BeamDirection.Y   bending in the local x-z plane   DOFs (dz, ry)   E·Iy

SHAPE FUNCTIONS:
----------------
With both ends rigidly connected the four functions are the cubic Hermite
polynomials; in xi:

    N0 = (1 - xi)² (2 + xi) / 4        value 1 at the start
    M0 = J (1 - xi)² (1 + xi) / 4      slope 1 at the start
    N1 = (1 + xi)² (2 - xi) / 4        value 1 at the end
    M1 = -J (1 + xi)² (1 - xi) / 4     slope 1 at the end

A released end DOF swaps its condition for the matching free-end one:
M = 0 (v'' = 0) for a released rotation, V = 0 (v''' = 0) for a released
translation. The released column is zero. A fixed-pinned beam gets the
propped-cantilever functions (3EI/L³), and a beam pinned at both ends has
linear shape functions and no bending stiffness.

SIGN CONVENTION (Y vs Z):
-------------------------
For Z bending the rotation is rz = +dv/dx and Mz = +EI·v''.
For Y bending the rotation is ry = -dw/dx and My = -EI·w'', because a
positive ry rotates the local x axis away from +z. The rotation columns of
the Y helper are built with slope -1 so that ry = 1 is a unit DOF; every
rotation read back from the shape matrix is negated again.
"""

from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from numpy.polynomial import Polynomial

from ..errors import UnsupportedConfigurationError
from ..kernel.linalg import polynomial_from_conditions
from ..model import BarElement, Dof
from .base import NODE_ISO, BarHelper


class BeamDirection(Enum):
    Y = "y"
    Z = "z"


_COMPONENTS = {
    BeamDirection.Z: (Dof.DY, Dof.RZ),
    BeamDirection.Y: (Dof.DZ, Dof.RY),
}

_ROTATION_SIGN = {
    BeamDirection.Z: 1.0,
    BeamDirection.Y: -1.0,
}


def beam_shape_functions(fixed: List[bool], jacobian: float, rotation_sign: float = 1.0) -> List[Optional[Polynomial]]:
    """
    Beam shape functions for a given set of connected end DOFs.

    Every function is a cubic fixed by four end conditions. A connected DOF
    contributes its value/slope condition; a released rotation makes that end
    moment-free (second derivative 0) and a released translation makes it
    shear-free (third derivative 0). This is the static condensation of the
    released DOFs out of the Hermite element.

    Parameters:
    -----------
    fixed : list of 4 bool
        Whether [d0, r0, d1, r1] is connected
    jacobian : float
        L/2, converts a unit slope in x to a slope in xi
    rotation_sign : float
        +1 for rz = dv/dx, -1 for ry = -dw/dx

    Returns:
    --------
    List of 4 Polynomials in xi (None for released DOFs)

    Raises:
    -------
    UnsupportedConfigurationError
        If the conditions do not define unique polynomials.

    Examples:
    ---------
    >>> N = beam_shape_functions([True] * 4, jacobian=1.0)
    >>> round(N[0](-1.0), 12), round(N[0](1.0), 12)
    (1.0, 0.0)
    """
    # (xi, derivative order) of each DOF's condition when connected / released
    connected: List[Tuple[float, int]] = [
        (NODE_ISO[0], 0), (NODE_ISO[0], 1),
        (NODE_ISO[1], 0), (NODE_ISO[1], 1),
    ]
    released: List[Tuple[float, int]] = [
        (NODE_ISO[0], 3), (NODE_ISO[0], 2),
        (NODE_ISO[1], 3), (NODE_ISO[1], 2),
    ]
    active = [i for i in range(4) if fixed[i]]
    if not active:
        return [None] * 4

    functions: List[Optional[Polynomial]] = [None] * 4
    for i in active:
        conditions = []
        for j in range(4):
            if not fixed[j]:
                xi, order = released[j]
                conditions.append((xi, order, 0.0))
                continue
            xi, order = connected[j]
            if j != i:
                target = 0.0
            elif order == 0:
                target = 1.0
            else:
                target = rotation_sign * jacobian
            conditions.append((xi, order, target))

        try:
            poly = polynomial_from_conditions(conditions)
        except np.linalg.LinAlgError as e:
            raise UnsupportedConfigurationError(
                f"Cannot build beam shape functions for connected DOFs {fixed}"
            ) from e
        # drop round-off in the coefficients a release zeroes out
        functions[i] = poly.trim(1e-12 * np.abs(poly.coef).max())

    return functions


class EulerBernoulliBeamHelper(BarHelper):
    """
    Bending helper for one plane of a bar.

    Parameters:
    -----------
    element : BarElement
    direction : BeamDirection
        Y (bending about local y) or Z (bending about local z)
    pool, config :
        See BarHelper

    Examples:
    ---------
    >>> helper = EulerBernoulliBeamHelper(element, BeamDirection.Z)
    >>> k = helper.stiffness_matrix()          # 4x4, [dy0, rz0, dy1, rz1]
    >>> f = helper.equivalent_nodal_loads(UniformLoad([0, -1, 0], 1000.0))
    """

    b_order = 2

    def __init__(self, element: BarElement, direction: BeamDirection, pool=None, config=None):
        super().__init__(element, pool=pool, config=config)
        self.direction = direction
        self.components = _COMPONENTS[direction]
        self.rotation_sign = _ROTATION_SIGN[direction]

    def build_shape_functions(self) -> List[Optional[Polynomial]]:
        translation, rotation = self.components
        fixed = []
        for release in self.element.release_conditions:
            fixed.append(release.is_fixed(translation))
            fixed.append(release.is_fixed(rotation))
        return beam_shape_functions(fixed, self.jacobian(), self.rotation_sign)

    def rigidity(self, xi: float) -> float:
        section = self.element.section.properties_at(xi)
        material = self.element.material.properties_at(xi)
        inertia = section.Iz if self.direction is BeamDirection.Z else section.Iy
        return material.E * inertia

    def mass_per_length(self, xi: float) -> float:
        section = self.element.section.properties_at(xi)
        material = self.element.material.properties_at(xi)
        return material.rho * section.A
