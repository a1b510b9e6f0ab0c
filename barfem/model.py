# barfem/model.py
"""
MODEL DEFINITIONS: Nodes, Constraints, Sections, Materials, Bars
================================================================

PURPOSE:
--------
The data structures the analysis consumes:

- Dof / DofConstraint / Constraint:  per-DOF fixity of nodes and bar ends
- LoadCase:                          identifier grouping loads and results
- Node:                              3D point with constraints, nodal loads
                                     and prescribed settlements
- Section / Material providers:      properties evaluated at an iso coordinate
- BarElement:                        two-node bar with behaviour flags and
                                     end releases
- Model:                             ordered nodes + elements

ENGINEERING CONTEXT:
--------------------
Each node has 6 DOFs (dx, dy, dz, rx, ry, rz). A bar element can combine
four independent behaviours:

    TRUSS   axial       (dx)            EA
    SHAFT   torsion     (rx)            GJ
    BEAM_Z  bending in the local x-y plane (dy, rz)   E·Iz
    BEAM_Y  bending in the local x-z plane (dz, ry)   E·Iy

Force and displacement 6-vectors use the same layout as the DOFs:
[Fx, Fy, Fz, Mx, My, Mz] and [dx, dy, dz, rx, ry, rz].
"""

from dataclasses import dataclass, field
from enum import Enum, Flag, IntEnum
from typing import TYPE_CHECKING, Dict, List

import numpy as np

from .errors import InvalidArgumentError
from .geometry import Transformation

if TYPE_CHECKING:
    from .loads import ElementalLoad, NodalLoad


class Dof(IntEnum):
    """Component index within a node's 6-vector."""
    DX = 0
    DY = 1
    DZ = 2
    RX = 3
    RY = 4
    RZ = 5


class DofConstraint(Enum):
    RELEASED = 0
    FIXED = 1


@dataclass(frozen=True)
class Constraint:
    """
    Fixity of the six DOFs of a node (or of one end of a bar).

    Examples:
    ---------
    >>> Constraint.from_string("111000") == MOVEMENT_FIXED
    True
    >>> FIXED[Dof.RZ]
    <DofConstraint.FIXED: 1>
    """
    dx: DofConstraint = DofConstraint.RELEASED
    dy: DofConstraint = DofConstraint.RELEASED
    dz: DofConstraint = DofConstraint.RELEASED
    rx: DofConstraint = DofConstraint.RELEASED
    ry: DofConstraint = DofConstraint.RELEASED
    rz: DofConstraint = DofConstraint.RELEASED

    @property
    def components(self):
        return (self.dx, self.dy, self.dz, self.rx, self.ry, self.rz)

    def __getitem__(self, dof: int) -> DofConstraint:
        return self.components[int(dof)]

    def is_fixed(self, dof: int) -> bool:
        return self[dof] is DofConstraint.FIXED

    @classmethod
    def from_string(cls, flags: str) -> "Constraint":
        """Six characters, '1' = fixed, '0' = released, in dx..rz order."""
        if len(flags) != 6 or set(flags) - {"0", "1"}:
            raise InvalidArgumentError(f"Constraint string must be six 0/1 characters, got {flags!r}")
        return cls(*(DofConstraint.FIXED if c == "1" else DofConstraint.RELEASED for c in flags))


FIXED = Constraint.from_string("111111")
RELEASED = Constraint.from_string("000000")
MOVEMENT_FIXED = Constraint.from_string("111000")
ROTATION_FIXED = Constraint.from_string("000111")


@dataclass(frozen=True)
class LoadCase:
    """
    Identifier grouping loads and results.

    Two LoadCase objects with the same name and nature are the same case.
    """
    name: str = "default"
    nature: str = "other"


DEFAULT_CASE = LoadCase()


@dataclass(eq=False)
class Node:
    """
    A node (joint) in 3D space.

    Parameters:
    -----------
    x, y, z : float
        Global coordinates (m)
    constraints : Constraint
        Support fixity; RELEASED for a free joint
    loads : List[NodalLoad]
        External loads, each tagged with its load case
    settlements : np.ndarray
        Prescribed displacement of constrained DOFs (6,), applied only in
        the analysis' settlement load case
    label : str
        Optional name used in messages

    Notes:
    ------
    Nodes compare by identity, so two nodes at the same position are still
    distinct joints.
    """
    x: float
    y: float
    z: float
    constraints: Constraint = RELEASED
    loads: List["NodalLoad"] = field(default_factory=list)
    settlements: np.ndarray = field(default_factory=lambda: np.zeros(6))
    label: str = ""

    @property
    def location(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


# =============================================================================
# Sections and materials
# =============================================================================

@dataclass(frozen=True)
class SectionProperties:
    """Geometric properties of a cross-section: A (m²), Iy, Iz, J (m⁴)."""
    A: float = 0.0
    Iy: float = 0.0
    Iz: float = 0.0
    J: float = 0.0


@dataclass(frozen=True)
class MaterialProperties:
    """Young's modulus E, shear modulus G (Pa) and mass density rho (kg/m³)."""
    E: float = 0.0
    G: float = 0.0
    rho: float = 0.0


@dataclass(frozen=True)
class UniformSection:
    """Cross-section constant along the bar."""
    A: float = 0.0
    Iy: float = 0.0
    Iz: float = 0.0
    J: float = 0.0

    max_function_order = 0

    def properties_at(self, xi: float) -> SectionProperties:
        return SectionProperties(self.A, self.Iy, self.Iz, self.J)


@dataclass(frozen=True)
class TaperedSection:
    """Each property varies linearly from the start (xi=-1) to the end (xi=1)."""
    start: SectionProperties
    end: SectionProperties

    max_function_order = 1

    def properties_at(self, xi: float) -> SectionProperties:
        t = (xi + 1.0) / 2.0
        s, e = self.start, self.end
        return SectionProperties(
            A=s.A + (e.A - s.A) * t,
            Iy=s.Iy + (e.Iy - s.Iy) * t,
            Iz=s.Iz + (e.Iz - s.Iz) * t,
            J=s.J + (e.J - s.J) * t,
        )


@dataclass(frozen=True)
class UniformMaterial:
    """Isotropic material constant along the bar."""
    E: float = 0.0
    G: float = 0.0
    rho: float = 0.0

    max_function_order = 0

    def properties_at(self, xi: float) -> MaterialProperties:
        return MaterialProperties(self.E, self.G, self.rho)

    @classmethod
    def from_young_poisson(cls, E: float, nu: float, rho: float = 0.0) -> "UniformMaterial":
        return cls(E=E, G=E / (2.0 * (1.0 + nu)), rho=rho)

    @classmethod
    def from_shear_poisson(cls, G: float, nu: float, rho: float = 0.0) -> "UniformMaterial":
        return cls(E=G * 2.0 * (1.0 + nu), G=G, rho=rho)


# =============================================================================
# Bar element and model
# =============================================================================

class BarBehaviour(Flag):
    """Which element helpers contribute to a bar."""
    BEAM_Y = 1
    BEAM_Z = 2
    TRUSS = 4
    SHAFT = 8
    BEAM = BEAM_Y | BEAM_Z
    FRAME = BEAM_Y | BEAM_Z | TRUSS | SHAFT


@dataclass(eq=False)
class BarElement:
    """
    A bar connecting (exactly) two nodes.

    Parameters:
    -----------
    nodes : List[Node]
        [start, end]; the local x axis points from start to end
    section, material :
        Providers exposing ``properties_at(xi)`` and ``max_function_order``
    behaviour : BarBehaviour
        Helpers that contribute stiffness and loads (default: full frame)
    start_release, end_release : Constraint
        FIXED = rigidly connected; a RELEASED transverse translation or
        rotation disconnects that bending DOF at that end
    web_rotation : float
        Rotation of the local y-z axes about local x (degrees)
    loads : List[ElementalLoad]
        Distributed / concentrated loads, each tagged with its load case
    """
    nodes: List[Node]
    section: object
    material: object
    behaviour: BarBehaviour = BarBehaviour.FRAME
    start_release: Constraint = FIXED
    end_release: Constraint = FIXED
    web_rotation: float = 0.0
    loads: List["ElementalLoad"] = field(default_factory=list)
    label: str = ""

    @property
    def start(self) -> Node:
        return self.nodes[0]

    @property
    def end(self) -> Node:
        return self.nodes[-1]

    @property
    def length(self) -> float:
        L = float(np.linalg.norm(self.end.location - self.start.location))
        if L <= 0.0:
            raise InvalidArgumentError(f"Element {self.label or id(self)} has zero length.")
        return L

    @property
    def release_conditions(self) -> List[Constraint]:
        return [self.start_release, self.end_release]

    def transformation(self) -> Transformation:
        return Transformation.for_bar(self.start.location, self.end.location, self.web_rotation)

    def iso_to_local(self, xi: float) -> float:
        return (xi + 1.0) * self.length / 2.0

    def local_to_iso(self, x: float) -> float:
        return 2.0 * x / self.length - 1.0


@dataclass(eq=False)
class Model:
    """Ordered nodes and elements of a structure."""
    nodes: List[Node] = field(default_factory=list)
    elements: List[BarElement] = field(default_factory=list)

    def node_index(self, node: Node) -> int:
        """Position of ``node``; a linear scan, use node_indices() for bulk lookups."""
        for i, n in enumerate(self.nodes):
            if n is node:
                return i
        raise InvalidArgumentError(f"Node {node.label or node.location} is not part of the model")

    def node_indices(self) -> Dict[int, int]:
        """Map id(node) → position, for bulk lookups."""
        return {id(n): i for i, n in enumerate(self.nodes)}
