# barfem/helpers/base.py
"""
BAR HELPER: SHARED ELEMENT MACHINERY
====================================

PURPOSE:
--------
A helper wraps one bar element for ONE behaviour (axial, torsion, or bending
in one plane) and answers every element-level question the solver and the
post-processor ask:

    shape_matrix_at(xi)                    N and its xi-derivatives
    strain_displacement_matrix_at(xi)      B (curvature / strain / twist row)
    stiffness_matrix()                     ∫ Bᵀ D B J dξ
    mass_matrix()                          ∫ Nᵀ m N J dξ
    equivalent_nodal_loads(load)           work-equivalent end forces
    internal_force_at(load, xi)            load-only internal force
    internal_displacement_at(load, xi)     load-only deflection
    internal_*_from_nodal_values(u, xi)    contribution of nodal displacements

ENGINEERING CONTEXT:
--------------------
Everything is done in the iso coordinate xi ∈ [-1, 1]:

    x = (xi + 1) · L/2          dx/dxi = J = L/2

so a k-th derivative in x is the k-th derivative in xi divided by J^k.

The total internal field along a loaded bar is the sum of two parts:

1. The "fixed-end" part: the bar with both ends clamped, carrying only its
   own member loads. Its end reactions are -equivalent_nodal_loads, and the
   internal force anywhere follows from a free body of the piece [0, x].
2. The nodal part: the solved end displacements interpolated with the shape
   functions.

Column layout:
--------------
Columns of the shape matrix are the helper's element DOFs, node by node:

    beam:         [d0, r0, d1, r1]   (translation, rotation per node)
    truss/shaft:  [d0, d1]

``components`` names the Dof each column carries within a node's 6-vector.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numpy.polynomial import Polynomial

from ..config import CONFIG, SolverConfig
from ..errors import NotSupportedError, OutOfRangeError, UnsupportedConfigurationError
from ..geometry import ORIGIN, move_force
from ..kernel.integration import integrate_1d
from ..kernel.linalg import MatrixPool, interpolating_polynomial, nth_integral_at
from ..loads import CoordinationSystem, LoadKind
from ..model import BarElement, Dof


NODE_ISO = (-1.0, 1.0)

# shape matrix rows: value, 1st, 2nd and 3rd derivative in xi
SHAPE_ROWS = 4


def chebyshev_points(a: float, b: float, count: int) -> np.ndarray:
    """Interior Chebyshev nodes of [a, b]; well suited to polynomial fitting."""
    k = np.arange(1, count + 1)
    return (a + b) / 2.0 + (b - a) / 2.0 * np.cos((2 * k - 1) * np.pi / (2 * count))


class BarHelper:
    """
    Base class for the bar-family helpers.

    Subclasses define:
        components     Dofs carried per node, e.g. (Dof.DY, Dof.RZ)
        rotation_sign  +1, or -1 where rotation = -d(value)/dx
        b_order        derivative order of B (2 for bending, 1 otherwise)
        shape_functions()  one Polynomial (or None if released) per column
        rigidity(xi)       EI, EA or GJ
        mass_per_length(xi)

    Parameters:
    -----------
    element : BarElement
        Two-node bar
    pool : MatrixPool, optional
        Scratch arena for per-point arrays; one is created if omitted
    config : SolverConfig, optional
        Quadrature and sampling settings (default: global CONFIG)
    """

    components: Tuple[Dof, ...] = ()
    rotation_sign = 1.0
    b_order = 1

    def __init__(self, element: BarElement, pool: Optional[MatrixPool] = None,
                 config: Optional[SolverConfig] = None):
        if len(element.nodes) != 2:
            raise UnsupportedConfigurationError(
                f"Bar elements must have exactly 2 nodes, got {len(element.nodes)}"
            )

        self.element = element
        self.pool = pool if pool is not None else MatrixPool()
        self.config = config if config is not None else CONFIG
        self.length = element.length
        self._shape_functions: Optional[List[Optional[Polynomial]]] = None

        self._load_handlers: Dict[LoadKind, Tuple[Callable, Callable]] = {
            LoadKind.DISTRIBUTED: (self._distributed_equivalent, self._distributed_free_body),
            LoadKind.CONCENTRATED: (self._concentrated_equivalent, self._concentrated_free_body),
        }

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    @property
    def dofs_per_node(self) -> int:
        return len(self.components)

    @property
    def columns(self) -> List[Tuple[int, Dof]]:
        """(node position, Dof) of every shape-matrix column."""
        return [(node, dof) for node in range(2) for dof in self.components]

    @property
    def shape_functions(self) -> List[Optional[Polynomial]]:
        if self._shape_functions is None:
            self._shape_functions = self.build_shape_functions()
        return self._shape_functions

    def build_shape_functions(self) -> List[Optional[Polynomial]]:
        raise NotImplementedError

    @property
    def n_order(self) -> int:
        """Highest polynomial degree among the shape functions."""
        degrees = [f.degree() for f in self.shape_functions if f is not None]
        return max(degrees) if degrees else 0

    @property
    def property_order(self) -> int:
        return self.element.section.max_function_order + self.element.material.max_function_order

    def rigidity(self, xi: float) -> float:
        raise NotImplementedError

    def mass_per_length(self, xi: float) -> float:
        raise NotImplementedError

    def jacobian(self, xi: float = 0.0) -> float:
        """dx/dxi; constant for a straight two-node bar."""
        return self.length / 2.0

    def iso_to_local(self, xi: float) -> float:
        return (xi + 1.0) * self.length / 2.0

    def local_to_iso(self, x: float) -> float:
        return 2.0 * x / self.length - 1.0

    def check_iso(self, xi: float) -> None:
        if not -1.0 <= xi <= 1.0:
            raise OutOfRangeError(f"Iso coordinate must lie in [-1, 1], got {xi}")

    # -------------------------------------------------------------------------
    # Shape and strain-displacement matrices
    # -------------------------------------------------------------------------

    def shape_matrix_at(self, xi: float) -> np.ndarray:
        """
        Shape functions and their xi-derivatives at xi.

        Returns:
        --------
        np.ndarray (4, n_columns)
            Row k holds d^k N / dxi^k; released columns are zero.
        """
        self.check_iso(xi)
        functions = self.shape_functions
        N = self.pool.allocate(SHAPE_ROWS, len(functions))

        for col, f in enumerate(functions):
            if f is None:
                continue
            for k in range(SHAPE_ROWS):
                N[k, col] = f.deriv(k)(xi) if k else f(xi)

        return N

    def strain_displacement_matrix_at(self, xi: float) -> np.ndarray:
        """B row: d^b N / dx^b with b = b_order."""
        N = self.shape_matrix_at(xi)
        return N[self.b_order] / self.jacobian(xi) ** self.b_order

    # -------------------------------------------------------------------------
    # Element matrices
    # -------------------------------------------------------------------------

    def stiffness_matrix(self) -> np.ndarray:
        """k = ∫ Bᵀ D B J dξ over [-1, 1], in the helper's column layout."""
        n = len(self.columns)
        degree = 2 * max(self.n_order - self.b_order, 0) + self.property_order
        points = degree // 2 + 1 + self.config.extra_gauss_points

        def integrand(xi):
            with self.pool.scope():
                B = self.strain_displacement_matrix_at(xi)
                return self.rigidity(xi) * np.outer(B, B) * self.jacobian(xi)

        return integrate_1d(integrand, -1.0, 1.0, points, shape=(n, n))

    def mass_matrix(self) -> np.ndarray:
        """Consistent mass m = ∫ Nᵀ m N J dξ over [-1, 1]."""
        n = len(self.columns)
        degree = 2 * self.n_order + self.property_order
        points = degree // 2 + 1 + self.config.extra_gauss_points

        def integrand(xi):
            with self.pool.scope():
                N = self.shape_matrix_at(xi)[0]
                return self.mass_per_length(xi) * np.outer(N, N) * self.jacobian(xi)

        return integrate_1d(integrand, -1.0, 1.0, points, shape=(n, n))

    # -------------------------------------------------------------------------
    # Load handling
    # -------------------------------------------------------------------------

    def _handlers(self, load) -> Tuple[Callable, Callable]:
        try:
            return self._load_handlers[getattr(load, "kind", None)]
        except KeyError:
            raise NotSupportedError(
                f"{type(self).__name__} cannot process load of type {type(load).__name__}"
            ) from None

    def _local_direction(self, load) -> np.ndarray:
        d = np.asarray(load.direction, dtype=float)
        norm = np.linalg.norm(d)
        if norm == 0.0:
            return np.zeros(3)
        d = d / norm
        if load.coordination_system is CoordinationSystem.GLOBAL:
            d = self.element.transformation().global_to_local_vector(d)
        return d

    def _local_force(self, load) -> np.ndarray:
        if load.coordination_system is CoordinationSystem.GLOBAL:
            return self.element.transformation().global_to_local(load.force)
        return np.asarray(load.force, dtype=float)

    def _scatter_columns(self, values: Sequence[float]) -> np.ndarray:
        """Column values → (2, 6) per-node 6-vectors."""
        out = np.zeros((2, 6))
        for (node, dof), v in zip(self.columns, values):
            out[node, dof] += v
        return out

    def equivalent_nodal_loads(self, load) -> np.ndarray:
        """
        Work-equivalent nodal forces of an elemental load, local axes.

        Returns:
        --------
        np.ndarray (2, 6)
            [start 6-vector, end 6-vector]; only this helper's components
            are non-zero.

        Raises:
        -------
        NotSupportedError
            If the load kind is not distributed or concentrated.
        """
        equivalent, _ = self._handlers(load)
        return equivalent(load)

    def _distributed_equivalent(self, load) -> np.ndarray:
        translation = self.components[0]
        if translation > Dof.DZ:
            # no distributed moments: torsion gets nothing from a line force
            return np.zeros((2, 6))

        q = self._local_direction(load)[translation]
        if q == 0.0:
            return np.zeros((2, 6))

        a, b = load.iso_span()
        n = len(self.columns)
        points = (self.n_order + load.degree) // 2 + 1 + self.config.extra_gauss_points

        def integrand(xi):
            with self.pool.scope():
                N = self.shape_matrix_at(xi)
                return N[0] * (self.jacobian(xi) * load.magnitude_at(xi))

        weights = integrate_1d(integrand, a, b, points, shape=n)
        return self._scatter_columns(weights * q)

    def _concentrated_equivalent(self, load) -> np.ndarray:
        xi = load.iso_location
        force = self._local_force(load)

        with self.pool.scope():
            N = self.shape_matrix_at(xi)
            values = force[self.components[0]] * N[0]
            if len(self.components) > 1:
                slope = N[1] / self.jacobian(xi)
                values = values + self.rotation_sign * force[self.components[1]] * slope
            return self._scatter_columns(values)

    # -------------------------------------------------------------------------
    # Load-only internal fields
    # -------------------------------------------------------------------------

    def _pick(self, six: np.ndarray) -> np.ndarray:
        out = np.zeros(6)
        for c in self.components:
            out[c] = six[c]
        return out

    def internal_force_at(self, load, xi: float) -> np.ndarray:
        """
        Internal force at xi caused by ``load`` with both bar ends clamped.

        Free body of [0, x]: the clamped-end reactions of the nodes strictly
        before xi plus the part of the load strictly before xi, all moved to
        the section; the internal force is the negative of that sum.

        Returns:
        --------
        np.ndarray (6,)
            Local [Fx, Fy, Fz, Mx, My, Mz]; only this helper's components set.
        """
        self.check_iso(xi)
        _, free_body = self._handlers(load)

        equivalent = self.equivalent_nodal_loads(load)
        ends = np.zeros(6)
        for node_xi, f in zip(NODE_ISO, equivalent):
            if node_xi < xi:
                ends += move_force(-f, (self.iso_to_local(node_xi), 0.0, 0.0), ORIGIN)

        total = free_body(load, xi, ends)
        return -self._pick(total)

    def _distributed_free_body(self, load, xi: float, ends: np.ndarray) -> np.ndarray:
        x = self.iso_to_local(xi)
        q = self._local_direction(load)
        a, b = load.iso_span()
        upper = min(max(xi, a), b)
        points = load.degree // 2 + 3 + self.config.extra_gauss_points

        def integrand(s):
            w = load.magnitude_at(self.local_to_iso(s)) * q
            return np.concatenate([w, np.cross((s, 0.0, 0.0), w)])

        body = integrate_1d(integrand, self.iso_to_local(a), self.iso_to_local(upper), points, shape=6)
        return move_force(ends + body, ORIGIN, (x, 0.0, 0.0))

    def _concentrated_free_body(self, load, xi: float, ends: np.ndarray) -> np.ndarray:
        x = self.iso_to_local(xi)
        total = move_force(ends, ORIGIN, (x, 0.0, 0.0))
        if load.iso_location < xi:
            at = self.iso_to_local(load.iso_location)
            total += move_force(self._local_force(load), (at, 0.0, 0.0), (x, 0.0, 0.0))
        return total

    def field_rate(self, load, x: float) -> float:
        """Curvature, strain or twist rate at local x from the load-only force."""
        xi = self.local_to_iso(x)
        force = self.internal_force_at(load, xi)
        return self.rotation_sign * force[self.components[-1]] / self.rigidity(xi)

    def _breakpoints(self, load) -> List[float]:
        if load.kind is LoadKind.DISTRIBUTED:
            inner = [self.iso_to_local(v) for v in load.iso_span()]
        else:
            inner = [self.iso_to_local(load.iso_location)]
        points = {0.0, self.length}
        points.update(min(max(p, 0.0), self.length) for p in inner)
        return sorted(points)

    def _integrated_rate(self, load, x: float) -> Tuple[float, float]:
        """Field rate integrated from the bar origin to x with zero constants: (value, slope)."""
        samples = (load.degree + self.b_order + 1 + 2 * self.property_order
                   + self.config.extra_curvature_samples)

        value = 0.0
        slope = 0.0
        points = self._breakpoints(load)
        for lo, hi in zip(points[:-1], points[1:]):
            if lo >= x:
                break
            top = min(hi, x)
            ts = chebyshev_points(lo, hi, samples)
            rate = interpolating_polynomial(ts, [self.field_rate(load, t) for t in ts])

            if self.b_order == 2:
                value += slope * (top - lo) + nth_integral_at(rate, 2, top, lower=lo)
                slope += nth_integral_at(rate, 1, top, lower=lo)
            else:
                value += nth_integral_at(rate, 1, top, lower=lo)

        return value, slope

    def _rigid_correction(self, load) -> Tuple[float, float]:
        """
        Rigid motion a + b·x restoring the connected end conditions.

        Needed when the start of a beam is not clamped: the integral from the
        origin then assumes a zero start value/slope the bar does not have.
        """
        start = self.shape_functions[:self.dofs_per_node]
        if self.b_order != 2 or all(f is not None for f in start):
            return 0.0, 0.0

        rows, rhs = [], []
        for (node, dof), f in zip(self.columns, self.shape_functions):
            if f is None:
                continue
            x = self.iso_to_local(NODE_ISO[node])
            value, slope = self._integrated_rate(load, x)
            if dof == self.components[0]:
                rows.append((1.0, x))
                rhs.append(-value)
            else:
                rows.append((0.0, 1.0))
                rhs.append(-slope)

        if not rows:
            return 0.0, 0.0
        a, b = np.linalg.lstsq(np.array(rows), np.array(rhs), rcond=None)[0]
        return float(a), float(b)

    def internal_displacement_at(self, load, xi: float) -> np.ndarray:
        """
        Load-only displacement at xi, relative to the connected end DOFs.

        The field rate is sampled at Chebyshev points on each smooth segment
        (split at load span ends / the concentrated load), fitted with an
        interpolating polynomial and integrated from the bar origin with zero
        constants: twice for bending, once for axial/torsion. Value and slope
        are carried across segment boundaries. A beam with a released start
        gets a rigid correction so that its connected ends stay put.

        Returns:
        --------
        np.ndarray (6,)
            Local [Dx, Dy, Dz, Rx, Ry, Rz]; only this helper's components set.
        """
        self.check_iso(xi)
        self._handlers(load)

        x = self.iso_to_local(xi)
        value, slope = self._integrated_rate(load, x)
        a, b = self._rigid_correction(load)
        value += a + b * x
        slope += b

        out = np.zeros(6)
        out[self.components[0]] = value
        if len(self.components) > 1:
            out[self.components[1]] = self.rotation_sign * slope
        return out

    # -------------------------------------------------------------------------
    # Fields from solved nodal values
    # -------------------------------------------------------------------------

    def _column_values(self, displacements: np.ndarray) -> np.ndarray:
        d = np.asarray(displacements, dtype=float).reshape(2, 6)
        return np.array([d[node, dof] for node, dof in self.columns])

    def internal_displacement_from_nodal_values(self, displacements, xi: float) -> np.ndarray:
        """
        Displacement at xi interpolated from local nodal displacements.

        Parameters:
        -----------
        displacements : array (2, 6) or (12,)
            Local [start 6-vector, end 6-vector]
        """
        self.check_iso(xi)
        u = self._column_values(displacements)
        out = np.zeros(6)
        if not np.any(u):
            return out

        with self.pool.scope():
            f = self.shape_matrix_at(xi) @ u

        out[self.components[0]] = f[0]
        if len(self.components) > 1:
            out[self.components[1]] = self.rotation_sign * f[1] / self.jacobian(xi)
        return out

    def internal_force_from_nodal_values(self, displacements, xi: float) -> np.ndarray:
        """Internal force at xi from local nodal displacements (D · B · u)."""
        self.check_iso(xi)
        u = self._column_values(displacements)
        out = np.zeros(6)
        if not np.any(u):
            return out

        J = self.jacobian(xi)
        with self.pool.scope():
            f = self.shape_matrix_at(xi) @ u

        D = self.rigidity(xi)
        out[self.components[-1]] = self.rotation_sign * D * f[self.b_order] / J ** self.b_order
        if self.b_order == 2:
            out[self.components[0]] = -D * f[3] / J ** 3
        return out


class LinearBarHelper(BarHelper):
    """Two-node helper with linear shape functions (axial or torsional DOF)."""

    b_order = 1

    def build_shape_functions(self) -> List[Optional[Polynomial]]:
        dof = self.components[0]
        for end, release in zip(("start", "end"), self.element.release_conditions):
            if not release.is_fixed(dof):
                raise UnsupportedConfigurationError(
                    f"{type(self).__name__} does not support a released {dof.name} at the {end} "
                    f"of element {self.element.label or id(self.element)}"
                )
        return [Polynomial([0.5, -0.5]), Polynomial([0.5, 0.5])]
