# barfem/geometry.py
"""
Local/global rotation for 3D bars, and static transport of 6-vector forces.

Local axes of a bar:
- x: from start node to end node
- y: horizontal, z × x normalised (global Y for vertical bars)
- z: x × y
then y and z are rotated about x by the web rotation.
"""

from typing import Sequence

import numpy as np

ORIGIN = np.zeros(3)

_VERTICAL_TOL = 1e-9


def move_force(force: np.ndarray, source: Sequence[float], target: Sequence[float]) -> np.ndarray:
    """
    Transport a force/moment 6-vector from ``source`` to ``target``.

    The force part is unchanged; the moment picks up r × F with r = source - target.

    Examples:
    ---------
    >>> move_force(np.array([0, 2.0, 0, 0, 0, 0]), [3.0, 0, 0], [0, 0, 0])
    array([0., 2., 0., 0., 0., 6.])
    """
    f = np.array(force, dtype=float)
    r = np.asarray(source, dtype=float) - np.asarray(target, dtype=float)
    f[3:] += np.cross(r, f[:3])
    return f


class Transformation:
    """
    Rotation between the global axes and a bar's local axes.

    ``matrix`` rows are the local unit axes expressed in global coordinates,
    so ``local = matrix @ global`` and ``global = matrix.T @ local``.
    """

    def __init__(self, matrix: np.ndarray):
        self.matrix = np.asarray(matrix, dtype=float)

    @classmethod
    def for_bar(cls, start: Sequence[float], end: Sequence[float], web_rotation: float = 0.0) -> "Transformation":
        d = np.asarray(end, dtype=float) - np.asarray(start, dtype=float)
        L = float(np.linalg.norm(d))
        if L <= 0.0:
            raise ValueError("Bar has zero length.")

        x = d / L

        if abs(abs(x[2]) - 1.0) < _VERTICAL_TOL:
            y = np.array([0.0, 1.0, 0.0])
        else:
            y = np.cross([0.0, 0.0, 1.0], x)
            y /= np.linalg.norm(y)

        z = np.cross(x, y)

        if web_rotation:
            t = np.radians(web_rotation)
            y, z = np.cos(t) * y + np.sin(t) * z, -np.sin(t) * y + np.cos(t) * z

        return cls(np.vstack([x, y, z]))

    def global_to_local_vector(self, v: Sequence[float]) -> np.ndarray:
        return self.matrix @ np.asarray(v, dtype=float)

    def local_to_global_vector(self, v: Sequence[float]) -> np.ndarray:
        return self.matrix.T @ np.asarray(v, dtype=float)

    def global_to_local(self, six: Sequence[float]) -> np.ndarray:
        """Rotate a force or displacement 6-vector (both halves) to local axes."""
        s = np.asarray(six, dtype=float)
        return np.concatenate([self.matrix @ s[:3], self.matrix @ s[3:]])

    def local_to_global(self, six: Sequence[float]) -> np.ndarray:
        s = np.asarray(six, dtype=float)
        return np.concatenate([self.matrix.T @ s[:3], self.matrix.T @ s[3:]])

    def element_matrix(self, n_nodes: int = 2) -> np.ndarray:
        """Block-diagonal rotation for a (6·n_nodes) element vector, global → local."""
        return np.kron(np.eye(2 * n_nodes), self.matrix)
