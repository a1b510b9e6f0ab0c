# barfem/helpers/truss.py
"""Axial (truss) helper: u along local x, stiffness EA, N = [(1-xi)/2, (1+xi)/2]."""

from ..model import Dof
from .base import LinearBarHelper


class TrussHelper(LinearBarHelper):
    """
    Axial behaviour of a bar.

    k = EA/L · [[1, -1], [-1, 1]] for a uniform bar; Fx > 0 is tension.
    """

    components = (Dof.DX,)

    def rigidity(self, xi: float) -> float:
        section = self.element.section.properties_at(xi)
        material = self.element.material.properties_at(xi)
        return material.E * section.A

    def mass_per_length(self, xi: float) -> float:
        section = self.element.section.properties_at(xi)
        material = self.element.material.properties_at(xi)
        return material.rho * section.A
