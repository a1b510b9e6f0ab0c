# barfem/kernel/assemble.py
"""
ASSEMBLY: Sparse Global Matrix Assembly and Partitioning
========================================================

PURPOSE:
--------
Scatter-add of element contributions into global matrices, and the split
of the assembled stiffness into the blocks the partitioned solve needs.

The key insight: assembly doesn't care about element TYPE.
It just needs:
- Total number of DOFs
- For each element: its DOF map and its stiffness matrix

The global matrix is collected as COO triplets and summed into a
compressed-column (CSC) matrix, so duplicate (i, j) entries coming from
neighbouring elements are added together.

USAGE:
------
    contributions = []
    for element in elements:
        dof_map = dof.element_dof_map([ni, nj])
        ke = bar_global_stiffness(element)
        contributions.append((dof_map, ke))

    K = assemble_global_K(ndof, contributions)
    Kff, Kfs, Kss = partition_stiffness(K, partition)
"""

from typing import List, Tuple

import numpy as np
from scipy import sparse

from .dof import DofPartition


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> sparse.csc_matrix:
    """
    Assemble the global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    for each element:
        for each (local_i, local_j) in element ke:
            rows += dof_map[local_i]; cols += dof_map[local_j]; vals += ke[i, j]
    K = csc(coo(vals, (rows, cols)))        # duplicates are summed

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system (6 × n_nodes)

    contributions : List[Tuple[List[int], np.ndarray]]
        List of (dof_map, ke) tuples, one per element:
        - dof_map: global DOF indices of the element's DOFs
        - ke: element stiffness in global coordinates,
          shape (len(dof_map), len(dof_map))

    Returns:
    --------
    scipy.sparse.csc_matrix
        Global stiffness matrix K, shape (ndof, ndof)
    """
    rows, cols, vals = [], [], []

    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)

        # Sanity check: ke must match dof_map size
        assert ke.shape == (n_element_dofs, n_element_dofs), \
            f"Element ke shape {ke.shape} doesn't match dof_map length {n_element_dofs}"

        idx = np.asarray(dof_map, dtype=int)
        rows.append(np.repeat(idx, n_element_dofs))
        cols.append(np.tile(idx, n_element_dofs))
        vals.append(np.asarray(ke, dtype=float).ravel())

    if not rows:
        return sparse.csc_matrix((ndof, ndof), dtype=float)

    K = sparse.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(ndof, ndof),
    ).tocsc()
    K.eliminate_zeros()
    return K


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble a global load vector from element contributions.

    Same scatter-add logic as assemble_global_K, for vectors.

    Parameters:
    -----------
    contributions : List[Tuple[List[int], np.ndarray]]
        (dof_map, fe) tuples; fe has shape (len(dof_map),)
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n_element_dofs = len(dof_map)

        assert fe.shape == (n_element_dofs,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n_element_dofs}"

        np.add.at(F, np.asarray(dof_map, dtype=int), fe)

    return F


def partition_stiffness(
    K: sparse.spmatrix,
    partition: DofPartition
) -> Tuple[sparse.csc_matrix, sparse.csc_matrix, sparse.csc_matrix]:
    """
    Split K into the free-free, free-fixed and fixed-fixed blocks.

        K = | Kff  Kfs |     rows/cols ordered by the partition maps
            | Ksf  Kss |

    Returns:
    --------
    (Kff, Kfs, Kss) as CSC matrices. Kfs has shape (nf, ns).
    """
    K = sparse.csc_matrix(K)
    free = partition.reversed_released_map
    fixed = partition.reversed_fixed_map

    Kff = K[free, :][:, free].tocsc()
    Kfs = K[free, :][:, fixed].tocsc()
    Kss = K[fixed, :][:, fixed].tocsc()

    return Kff, Kfs, Kss
