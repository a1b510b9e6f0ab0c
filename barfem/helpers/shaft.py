# barfem/helpers/shaft.py
"""Torsion (shaft) helper: twist rx along local x, stiffness GJ."""

from ..model import Dof
from .base import LinearBarHelper


class ShaftHelper(LinearBarHelper):
    """
    Torsional behaviour of a bar (Saint-Venant, no warping).

    Line forces carry no torque, so only concentrated loads with an Mx
    component produce equivalent nodal torques. The rotary inertia per unit
    length is rho·J.
    """

    components = (Dof.RX,)

    def rigidity(self, xi: float) -> float:
        section = self.element.section.properties_at(xi)
        material = self.element.material.properties_at(xi)
        return material.G * section.J

    def mass_per_length(self, xi: float) -> float:
        section = self.element.section.properties_at(xi)
        material = self.element.material.properties_at(xi)
        return material.rho * section.J
