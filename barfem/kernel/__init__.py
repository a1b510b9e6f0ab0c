# barfem/kernel - Numerical core: DOF maps, integration, sparse assembly and solve
"""
KERNEL: THE NUMERICAL FOUNDATION
================================

This package contains the pieces that know nothing about bars, loads or
sections:

- dof.py          (node, component) → global index; free/fixed partition
- linalg.py       scratch arena, sparse Cholesky, polynomial utilities
- integration.py  Gauss-Legendre quadrature
- assemble.py     sparse scatter-add, stiffness partitioning
- solve.py        factor-once partitioned solve (with settlements)

The element helpers and the analysis result are built on top of these.
"""

from .dof import DOFManager, DofPartition
from .integration import GaussianIntegrator, integrate_1d
from .linalg import MatrixPool, SparseCholesky
from .solve import PartitionedSystem, MechanismError

__all__ = [
    'DOFManager', 'DofPartition', 'GaussianIntegrator', 'integrate_1d',
    'MatrixPool', 'SparseCholesky', 'PartitionedSystem', 'MechanismError',
]
