# barfem/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SolverConfig:
    """Global solver configuration."""

    # Numerical integration
    extra_gauss_points: int = 0          # added on top of the exact-order rule
    extra_curvature_samples: int = 0     # added to load-deflection fitting samples

    # Factorization
    reorder: bool = True                 # reverse Cuthill-McKee before Cholesky
    pivot_ratio_limit: float = 1e14      # (max pivot / min pivot)^2 before MechanismError

    # Batch solving
    max_workers: Optional[int] = None    # None or 1 -> sequential
    show_progress: bool = False


# Global config instance
CONFIG = SolverConfig()
