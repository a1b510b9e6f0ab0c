# loads.py - Nodal and elemental load definitions

"""
Load variants applied to nodes and bars.

Elemental loads form a closed set dispatched on ``kind``:

    DISTRIBUTED    UniformLoad, PartialNonUniformLoad
    CONCENTRATED   ConcentratedLoad

Distributed loads share one interface (``iso_span``, ``magnitude_at``,
``degree``, ``direction``), so every element helper handles them with a
single integration routine.

Sign convention:
- ``direction`` is a vector (normalised by the helpers); the load per unit
  length is ``magnitude_at(xi) * direction / |direction|``
- Forces are 6-vectors [Fx, Fy, Fz, Mx, My, Mz]
- CoordinationSystem.GLOBAL vectors are rotated into the bar's local axes
  before use
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Sequence, Tuple, Union

import numpy as np
from numpy.polynomial import Polynomial

from .errors import InvalidArgumentError
from .model import DEFAULT_CASE, LoadCase


class CoordinationSystem(Enum):
    GLOBAL = "global"
    LOCAL = "local"


class LoadKind(Enum):
    DISTRIBUTED = "distributed"
    CONCENTRATED = "concentrated"


def _six(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.shape != (6,):
        raise InvalidArgumentError(f"Expected a 6-vector [Fx, Fy, Fz, Mx, My, Mz], got shape {arr.shape}")
    return arr


@dataclass(eq=False)
class NodalLoad:
    """External force/moment applied directly at a node, global axes."""
    force: np.ndarray
    case: LoadCase = DEFAULT_CASE

    def __post_init__(self):
        self.force = _six(self.force)


@dataclass(eq=False)
class UniformLoad:
    """
    Constant distributed load over the whole bar.

    Parameters:
    -----------
    direction : (3,) vector
        Direction of the load (only its orientation matters)
    magnitude : float
        Load per unit length (N/m)

    Examples:
    ---------
    >>> UniformLoad(direction=[0, -1, 0], magnitude=1000.0)   # 1 kN/m along -Y
    """
    kind: ClassVar[LoadKind] = LoadKind.DISTRIBUTED

    direction: np.ndarray
    magnitude: float
    case: LoadCase = DEFAULT_CASE
    coordination_system: CoordinationSystem = CoordinationSystem.GLOBAL

    def __post_init__(self):
        self.direction = np.asarray(self.direction, dtype=float)

    @property
    def degree(self) -> int:
        return 0

    def iso_span(self) -> Tuple[float, float]:
        return -1.0, 1.0

    def magnitude_at(self, xi: float) -> float:
        return self.magnitude


@dataclass(eq=False)
class PartialNonUniformLoad:
    """
    Distributed load over [start_xi, end_xi] whose intensity is a polynomial in xi.

    Parameters:
    -----------
    direction : (3,) vector
    start_xi, end_xi : float
        Loaded span in iso coordinates; clipped to [-1, 1]
    severity : Polynomial or coefficient sequence
        Intensity (N/m) as a function of xi, lowest power first

    Examples:
    ---------
    >>> # triangular load rising from 0 at xi=-1 to 2 kN/m at xi=1
    >>> PartialNonUniformLoad([0, 0, -1], -1.0, 1.0, severity=[1000.0, 1000.0])
    """
    kind: ClassVar[LoadKind] = LoadKind.DISTRIBUTED

    direction: np.ndarray
    start_xi: float
    end_xi: float
    severity: Union[Polynomial, Sequence[float]]
    case: LoadCase = DEFAULT_CASE
    coordination_system: CoordinationSystem = CoordinationSystem.GLOBAL

    def __post_init__(self):
        self.direction = np.asarray(self.direction, dtype=float)
        if not isinstance(self.severity, Polynomial):
            self.severity = Polynomial(np.asarray(self.severity, dtype=float))
        if self.end_xi < self.start_xi:
            raise InvalidArgumentError(
                f"Load span must be increasing, got [{self.start_xi}, {self.end_xi}]"
            )

    @property
    def degree(self) -> int:
        return self.severity.degree()

    def iso_span(self) -> Tuple[float, float]:
        # a span entirely outside the bar collapses to a point
        start = min(max(self.start_xi, -1.0), 1.0)
        end = min(max(self.end_xi, -1.0), 1.0)
        return start, end

    def magnitude_at(self, xi: float) -> float:
        return float(self.severity(xi))


@dataclass(eq=False)
class ConcentratedLoad:
    """
    Point force/moment at an iso location along the bar.

    Parameters:
    -----------
    force : (6,) vector
        [Fx, Fy, Fz, Mx, My, Mz]
    iso_location : float
        Position in [-1, 1]
    """
    kind: ClassVar[LoadKind] = LoadKind.CONCENTRATED

    force: np.ndarray
    iso_location: float
    case: LoadCase = DEFAULT_CASE
    coordination_system: CoordinationSystem = CoordinationSystem.GLOBAL

    def __post_init__(self):
        self.force = _six(self.force)

    @property
    def degree(self) -> int:
        return 0


ElementalLoad = Union[UniformLoad, PartialNonUniformLoad, ConcentratedLoad]
