# barfem/helpers - Element helpers for the bar family
"""
Element helpers: one object per bar per behaviour.

    BarBehaviour.BEAM_Z  → EulerBernoulliBeamHelper(element, BeamDirection.Z)
    BarBehaviour.BEAM_Y  → EulerBernoulliBeamHelper(element, BeamDirection.Y)
    BarBehaviour.TRUSS   → TrussHelper(element)
    BarBehaviour.SHAFT   → ShaftHelper(element)

Helpers of the same element share one scratch pool.
"""

from typing import List, Optional

from ..config import SolverConfig
from ..kernel.linalg import MatrixPool
from ..model import BarBehaviour, BarElement
from .base import BarHelper, LinearBarHelper
from .beam import BeamDirection, EulerBernoulliBeamHelper, beam_shape_functions
from .shaft import ShaftHelper
from .truss import TrussHelper

__all__ = [
    'BarHelper', 'LinearBarHelper', 'BeamDirection', 'EulerBernoulliBeamHelper',
    'beam_shape_functions', 'ShaftHelper', 'TrussHelper', 'helpers_for',
]


_FACTORIES = (
    (BarBehaviour.TRUSS, lambda e, pool, config: TrussHelper(e, pool=pool, config=config)),
    (BarBehaviour.SHAFT, lambda e, pool, config: ShaftHelper(e, pool=pool, config=config)),
    (BarBehaviour.BEAM_Y, lambda e, pool, config: EulerBernoulliBeamHelper(e, BeamDirection.Y, pool=pool, config=config)),
    (BarBehaviour.BEAM_Z, lambda e, pool, config: EulerBernoulliBeamHelper(e, BeamDirection.Z, pool=pool, config=config)),
)


def helpers_for(element: BarElement, pool: Optional[MatrixPool] = None,
                config: Optional[SolverConfig] = None) -> List[BarHelper]:
    """Helpers for every behaviour flag set on ``element``."""
    pool = pool if pool is not None else MatrixPool()
    return [
        factory(element, pool, config)
        for flag, factory in _FACTORIES
        if flag in element.behaviour
    ]
