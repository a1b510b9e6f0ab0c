# barfem/assembly.py
# global K assembly for a Model

import logging
from typing import Optional

from scipy import sparse

from .config import CONFIG, SolverConfig
from .elements import bar_global_stiffness, bar_helpers
from .errors import InvalidArgumentError
from .kernel.assemble import assemble_global_K
from .kernel.dof import DOFManager
from .kernel.linalg import MatrixPool
from .model import Model

logger = logging.getLogger(__name__)


def assemble_model_K(model: Model, config: Optional[SolverConfig] = None) -> sparse.csc_matrix:
    """
    Global stiffness of ``model`` (6 DOF per node), as a CSC matrix.

    Each bar contributes its 12×12 global stiffness on the DOFs of its two
    nodes; contributions to shared DOFs are summed.
    """
    config = config if config is not None else CONFIG
    dof = DOFManager()
    index = model.node_indices()
    pool = MatrixPool()

    contributions = []
    for e in model.elements:
        try:
            node_ids = [index[id(n)] for n in e.nodes]
        except KeyError:
            raise InvalidArgumentError(f"Element {e.label or id(e)} references a node outside the model") from None
        ke = bar_global_stiffness(e, bar_helpers(e, pool=pool, config=config))
        contributions.append((dof.element_dof_map(node_ids), ke))

    K = assemble_global_K(dof.ndof(len(model.nodes)), contributions)
    logger.debug("Assembled K: %d DOFs, %d elements, nnz=%d", K.shape[0], len(model.elements), K.nnz)
    return K
