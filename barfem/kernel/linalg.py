# barfem/kernel/linalg.py
"""
LINEAR ALGEBRA PRIMITIVES
=========================

PURPOSE:
--------
Small building blocks shared by the element helpers and the solver:

- MatrixPool:        scratch arena for the small dense arrays used in hot
                     loops (shape matrices, nodal vectors at Gauss points)
- SparseCholesky:    one-time factorization of the free-free stiffness block,
                     reused for every load case
- Polynomial tools:  interpolation through samples, n-th derivative and
                     n-th integral evaluation, polynomials from conditions

Dense work is plain numpy. Sparse matrices are scipy compressed-column
(CSC) matrices, so matrix-vector and transpose-matrix-vector products are
just ``K @ u`` and ``K.T @ u``.

WHY BANDED CHOLESKY?
--------------------
A bar model numbered along its members has a narrow profile once the DOFs
are reordered with reverse Cuthill-McKee. The permuted matrix is stored in
LAPACK upper-banded form and factored with ``cholesky_banded``; the factor
is kept and every later solve is two banded triangular sweeps.
"""

from collections import defaultdict
from contextlib import contextmanager
from math import factorial
from typing import Dict, List, Sequence, Tuple

import numpy as np
from numpy.polynomial import Polynomial
from scipy import sparse
from scipy.linalg import LinAlgError, cho_solve_banded, cholesky_banded
from scipy.sparse.csgraph import reverse_cuthill_mckee

from ..errors import InvalidArgumentError, MechanismError


# =============================================================================
# Scratch arena
# =============================================================================

class MatrixPool:
    """
    Reusable scratch buffers for small dense matrices.

    Arrays handed out by ``allocate`` are zero-filled. Inside ``scope()`` every
    allocation is returned to the pool when the block exits, so callers must
    not keep references to scoped arrays afterwards.

    Examples:
    ---------
    >>> pool = MatrixPool()
    >>> with pool.scope():
    ...     n = pool.allocate(4, 4)
    ...     u = pool.allocate(4, 1)
    """

    def __init__(self):
        self._free: Dict[Tuple[int, ...], List[np.ndarray]] = defaultdict(list)
        self._scopes: List[List[np.ndarray]] = []
        self.created = 0
        self.reused = 0

    def allocate(self, rows: int, cols: int = None) -> np.ndarray:
        shape = (rows,) if cols is None else (rows, cols)
        bucket = self._free[shape]

        if bucket:
            buf = bucket.pop()
            buf.fill(0.0)
            self.reused += 1
        else:
            buf = np.zeros(shape, dtype=float)
            self.created += 1

        if self._scopes:
            self._scopes[-1].append(buf)

        return buf

    def free(self, *arrays: np.ndarray) -> None:
        for arr in arrays:
            self._free[arr.shape].append(arr)

    @contextmanager
    def scope(self):
        self._scopes.append([])
        try:
            yield self
        finally:
            self.free(*self._scopes.pop())


# =============================================================================
# Sparse Cholesky
# =============================================================================

class SparseCholesky:
    """
    Cholesky factorization of a sparse symmetric positive definite matrix.

    Symbolic phase: reverse Cuthill-McKee ordering to shrink the bandwidth.
    Numeric phase: banded Cholesky of the permuted matrix.

    Parameters:
    -----------
    matrix : scipy.sparse matrix
        Square, symmetric (to 1e-10 of its largest entry). The upper
        triangle is factored.
    reorder : bool
        Apply reverse Cuthill-McKee before factoring.
    pivot_ratio_limit : float
        Upper bound on (max pivot / min pivot)^2, a cheap stand-in for the
        condition number of the factored matrix.

    Raises:
    -------
    InvalidArgumentError
        If the matrix is not square or not symmetric.
    MechanismError
        If the matrix is not positive definite or is ill-conditioned.
    """

    def __init__(self, matrix, reorder: bool = True, pivot_ratio_limit: float = 1e14):
        A = sparse.csc_matrix(matrix, dtype=float)
        n = A.shape[0]

        if A.shape != (n, n):
            raise InvalidArgumentError(f"Cholesky needs a square matrix, got {A.shape}")

        self.size = n
        self.bandwidth = 0

        if n == 0:
            self._perm = np.zeros(0, dtype=int)
            self._factor = np.zeros((1, 0), dtype=float)
            return

        if abs(A - A.T).max() > 1e-10 * abs(A).max():
            raise InvalidArgumentError("Cholesky needs a symmetric matrix")

        if reorder:
            perm = np.asarray(reverse_cuthill_mckee(A.tocsr(), symmetric_mode=True), dtype=int)
        else:
            perm = np.arange(n, dtype=int)

        Ap = A[perm, :][:, perm].tocoo()

        upper = Ap.row <= Ap.col
        rows = Ap.row[upper]
        cols = Ap.col[upper]
        vals = Ap.data[upper]

        u = int((cols - rows).max()) if len(rows) else 0

        # LAPACK upper-banded storage: ab[u + i - j, j] = a[i, j]
        ab = np.zeros((u + 1, n), dtype=float)
        np.add.at(ab, (u + rows - cols, cols), vals)

        try:
            factor = cholesky_banded(ab, lower=False)
        except LinAlgError as e:
            raise MechanismError(
                f"Stiffness matrix is not positive definite ({e}). Check supports."
            ) from e

        pivots = np.abs(factor[u])
        ratio = (pivots.max() / pivots.min()) ** 2
        if not np.isfinite(ratio) or ratio > pivot_ratio_limit:
            raise MechanismError(
                f"Unstable system (pivot ratio={ratio:.2e}). Check supports. "
                f"Need ratio < {pivot_ratio_limit:.0e}."
            )

        self._perm = perm
        self._factor = factor
        self.bandwidth = u

    def solve(self, rhs: Sequence[float]) -> np.ndarray:
        b = np.asarray(rhs, dtype=float)

        if b.shape[0] != self.size:
            raise InvalidArgumentError(
                f"Right-hand side has length {b.shape[0]}, expected {self.size}"
            )

        if self.size == 0:
            return np.zeros(0, dtype=float)

        y = cho_solve_banded((self._factor, False), b[self._perm])

        x = np.empty_like(y)
        x[self._perm] = y
        return x


# =============================================================================
# Polynomials
# =============================================================================

def interpolating_polynomial(xs: Sequence[float], ys: Sequence[float]) -> Polynomial:
    """
    Least-degree polynomial through the points (xs[i], ys[i]).

    The fit is done in a scaled window so that the Vandermonde system stays
    well conditioned; evaluation, derivatives and integrals handle the
    domain mapping.
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)

    if len(xs) == 0 or len(xs) != len(ys):
        raise InvalidArgumentError("Need matching, non-empty sample arrays")

    if len(xs) == 1:
        return Polynomial([ys[0]])

    return Polynomial.fit(xs, ys, deg=len(xs) - 1)


def nth_derivative_at(poly: Polynomial, n: int, x: float) -> float:
    return float(poly.deriv(n)(x)) if n > 0 else float(poly(x))


def nth_integral_at(poly: Polynomial, n: int, x: float, lower: float = 0.0) -> float:
    """
    Evaluate the n-th repeated integral of ``poly`` at ``x``.

    Every integration constant is zero at ``lower``, i.e. the integral and
    all its lower-order integrals vanish there.
    """
    if n == 0:
        return float(poly(x))
    return float(poly.integ(n, lbnd=lower)(x))


def _monomial_derivative(power: int, order: int, x: float) -> float:
    if power < order:
        return 0.0
    return factorial(power) / factorial(power - order) * x ** (power - order)


def polynomial_from_conditions(conditions: Sequence[Tuple[float, int, float]]) -> Polynomial:
    """
    Polynomial of degree len(conditions) - 1 satisfying value/derivative conditions.

    Parameters:
    -----------
    conditions : sequence of (x, derivative_order, value)
        e.g. [(-1, 0, 1.0), (-1, 1, 0.0), (1, 0, 0.0), (1, 1, 0.0)]
        gives the first cubic Hermite function.

    Raises:
    -------
    numpy.linalg.LinAlgError
        If the conditions do not determine a unique polynomial.
    """
    count = len(conditions)
    lhs = np.array([
        [_monomial_derivative(p, order, x) for p in range(count)]
        for x, order, _ in conditions
    ], dtype=float)
    rhs = np.array([value for _, _, value in conditions], dtype=float)

    return Polynomial(np.linalg.solve(lhs, rhs))
