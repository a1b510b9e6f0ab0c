# barfem - Linear static FEM analysis of 3D bar structures
"""
BARFEM: Linear Static Analysis of 3D Bar Models
===============================================

This package provides:
- a bar model (nodes, constraints, sections, materials, releases, loads)
- element helpers for beams (two bending planes), trusses and shafts
- sparse assembly, a one-time Cholesky factorization and per-load-case solves
- post-processing of internal displacements and forces along each bar

ARCHITECTURE:
-------------
    kernel/         Numerical core (DOF maps, quadrature, sparse Cholesky, solve)
    helpers/        Per-behaviour element helpers (beam Y/Z, truss, shaft)
    model.py        Nodes, constraints, sections, materials, bars, model
    loads.py        Nodal and elemental loads
    geometry.py     Local/global rotation, static transport of forces
    elements.py     12x12 bar matrices and equivalent nodal loads
    assembly.py     Global stiffness of a model
    solve.py        analyse() and StaticLinearAnalysisResult
    post.py         Total internal displacement/force along a bar
    config.py       SolverConfig and the global CONFIG
    errors.py       Exception hierarchy
"""

from .config import CONFIG, SolverConfig
from .errors import (
    InvalidArgumentError,
    MechanismError,
    NotSupportedError,
    OutOfRangeError,
    UnsupportedConfigurationError,
)
from .kernel import DOFManager, DofPartition, PartitionedSystem, SparseCholesky
from .loads import (
    ConcentratedLoad,
    CoordinationSystem,
    LoadKind,
    NodalLoad,
    PartialNonUniformLoad,
    UniformLoad,
)
from .model import (
    DEFAULT_CASE,
    FIXED,
    MOVEMENT_FIXED,
    RELEASED,
    ROTATION_FIXED,
    BarBehaviour,
    BarElement,
    Constraint,
    Dof,
    DofConstraint,
    LoadCase,
    MaterialProperties,
    Model,
    Node,
    SectionProperties,
    TaperedSection,
    UniformMaterial,
    UniformSection,
)
from .post import (
    element_internal_displacement_at,
    element_internal_force_at,
    element_local_displacements,
)
from .solve import StaticLinearAnalysisResult, analyse

__version__ = "0.1.0"
