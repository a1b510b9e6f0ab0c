# barfem/kernel/solve.py
"""Partitioned linear solve with a reusable factorization and settlement support."""

import logging
from typing import Tuple

import numpy as np
from scipy import sparse

from ..errors import InvalidArgumentError, MechanismError
from .linalg import SparseCholesky

logger = logging.getLogger(__name__)

__all__ = ['PartitionedSystem', 'MechanismError']


class PartitionedSystem:
    """
    Solve K·u = p with the DOFs split into free (f) and fixed (s) sets.

        | Kff  Kfs | |uf|   |pf|
        | Ksf  Kss | |us| = |ps|

    Kff is factored once at construction (Unfactored → Factored); every
    ``solve`` call reuses the factor. The blocks are never mutated afterwards,
    so concurrent solves are safe.

    Args:
        kff: Free-free block (nf x nf), symmetric positive definite
        kfs: Free-fixed block (nf x ns)
        kss: Fixed-fixed block (ns x ns)
        reorder: Apply bandwidth-reducing reordering before factoring
        pivot_ratio_limit: Ill-conditioning threshold passed to SparseCholesky

    Raises:
        InvalidArgumentError: If the block shapes disagree or Kff is not symmetric
        MechanismError: If Kff is not positive definite (structure unstable)
    """

    def __init__(self, kff, kfs, kss, reorder: bool = True, pivot_ratio_limit: float = 1e14):
        self.kff = sparse.csc_matrix(kff)
        self.kfs = sparse.csc_matrix(kfs)
        self.kss = sparse.csc_matrix(kss)

        nf, ns = self.kfs.shape
        if self.kff.shape != (nf, nf) or self.kss.shape != (ns, ns):
            raise InvalidArgumentError(
                f"Inconsistent block shapes: Kff {self.kff.shape}, "
                f"Kfs {self.kfs.shape}, Kss {self.kss.shape}"
            )

        self.cholesky = SparseCholesky(self.kff, reorder=reorder, pivot_ratio_limit=pivot_ratio_limit)

        logger.info(
            "Factored Kff: %d free DOFs, %d fixed DOFs, bandwidth %d",
            nf, ns, self.cholesky.bandwidth,
        )

    @property
    def free_count(self) -> int:
        return self.kfs.shape[0]

    @property
    def fixed_count(self) -> int:
        return self.kfs.shape[1]

    def solve(self, pf: np.ndarray, us: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Solve for free displacements and fixed-DOF forces.

        Args:
            pf: Loads on the free DOFs (nf,)
            us: Prescribed displacements of the fixed DOFs (ns,)

        Returns:
            uf: Displacements of the free DOFs (nf,)
            ps: Forces on the fixed DOFs (ns,), i.e. Ksf·uf + Kss·us
        """
        pf = np.asarray(pf, dtype=float)
        us = np.asarray(us, dtype=float)

        if np.any(us != 0):
            # uf = Kff^-1 (pf - Kfs us)
            uf = self.cholesky.solve(pf - self.kfs @ us)
            ps = self.kfs.T @ uf + self.kss @ us
        else:
            uf = self.cholesky.solve(pf)
            ps = self.kfs.T @ uf

        return uf, np.asarray(ps, dtype=float)
