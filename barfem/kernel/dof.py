# barfem/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Indexing and Free/Fixed Partition
================================================================

PURPOSE:
--------
This module handles two mappings:

1. (node_index, component) → global DOF index

       3D Frame:  6 DOF/node (dx, dy, dz, rx, ry, rz)
       global_idx = 6 * node_index + component

2. global DOF index → position inside the FREE or the FIXED partition

   Every global DOF is either released (solved for displacement) or fixed
   (solved for reaction). The partition maps are a bijection between
   {0 .. 6N-1} and {free 0 .. nf-1} ∪ {fixed 0 .. ns-1}:

       released_map[g] = position of g among the free DOFs   (-1 if fixed)
       fixed_map[g]    = position of g among the fixed DOFs  (-1 if free)
       reversed_released_map[k] = global index of the k-th free DOF
       reversed_fixed_map[k]    = global index of the k-th fixed DOF

USAGE:
------
    dof = DOFManager()                       # 6 DOF per node
    global_idx = dof.idx(node_id=2, local_dof=4)   # → 16 (node 2, ry)

    partition = DofPartition.from_constraints([n.constraints for n in nodes])
    free = partition.reversed_released_map
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np


@dataclass
class DOFManager:
    """
    Manages degree-of-freedom indexing for structural analysis.

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (6 for a 3D frame: dx, dy, dz, rx, ry, rz)

    Examples:
    ---------
    >>> dof = DOFManager()
    >>> dof.idx(1, 0)  # Node 1, DOF 0 (dx)
    6
    >>> dof.ndof(4)    # Total DOFs for 4 nodes
    24
    """
    dof_per_node: int = 6

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Get the global DOF index for a node's local DOF.

        Parameters:
        -----------
        node_id : int
            The node index (0-indexed position in the model's node list)
        local_dof : int
            The component within the node: 0=dx, 1=dy, 2=dz, 3=rx, 4=ry, 5=rz

        Returns:
        --------
        int
            Global DOF index in the system matrices
        """
        return self.dof_per_node * node_id + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total DOFs for a system with n_nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        Get all global DOF indices for a single node.

        Examples:
        ---------
        >>> DOFManager().node_dofs(1)
        [6, 7, 8, 9, 10, 11]
        """
        base = self.dof_per_node * node_id
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: List[int]) -> List[int]:
        """
        Get the DOF map for an element connecting multiple nodes.

        Returns the indices needed to scatter/gather element matrices
        into/from the global matrices, node by node.

        Examples:
        ---------
        >>> DOFManager().element_dof_map([0, 2])
        [0, 1, 2, 3, 4, 5, 12, 13, 14, 15, 16, 17]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result


@dataclass
class DofPartition:
    """
    Free/fixed split of the global DOFs.

    Built once per constraint topology. Read-only afterwards, so it can be
    shared between threads solving different load cases.
    """
    released_map: np.ndarray
    fixed_map: np.ndarray
    reversed_released_map: np.ndarray
    reversed_fixed_map: np.ndarray

    @property
    def free_count(self) -> int:
        return len(self.reversed_released_map)

    @property
    def fixed_count(self) -> int:
        return len(self.reversed_fixed_map)

    @property
    def ndof(self) -> int:
        return len(self.released_map)

    @classmethod
    def from_fixed_mask(cls, fixed: Sequence[bool]) -> "DofPartition":
        """
        Build the partition from a per-DOF boolean mask (True = fixed).

        Free and fixed positions are assigned in increasing global order,
        so both partitions are contiguous and zero-based.
        """
        fixed = np.asarray(fixed, dtype=bool)
        ndof = len(fixed)

        released_map = np.full(ndof, -1, dtype=int)
        fixed_map = np.full(ndof, -1, dtype=int)

        free_idx = np.flatnonzero(~fixed)
        fixed_idx = np.flatnonzero(fixed)

        released_map[free_idx] = np.arange(len(free_idx))
        fixed_map[fixed_idx] = np.arange(len(fixed_idx))

        return cls(
            released_map=released_map,
            fixed_map=fixed_map,
            reversed_released_map=free_idx,
            reversed_fixed_map=fixed_idx,
        )

    @classmethod
    def from_constraints(cls, constraints: Sequence, dof_manager: DOFManager = None) -> "DofPartition":
        """
        Build the partition from one Constraint per node.

        Parameters:
        -----------
        constraints : sequence of Constraint
            ``constraints[i].is_fixed(component)`` for node i
        """
        dof = dof_manager or DOFManager()
        mask = np.zeros(dof.ndof(len(constraints)), dtype=bool)

        for node_id, cns in enumerate(constraints):
            for component in range(dof.dof_per_node):
                mask[dof.idx(node_id, component)] = cns.is_fixed(component)

        return cls.from_fixed_mask(mask)

    def is_consistent(self) -> bool:
        """
        Check the bijection invariant: every global DOF lands in exactly one
        partition, exactly once, with no gap.
        """
        n = self.ndof
        covered = np.zeros(n, dtype=int)
        covered[self.reversed_released_map] += 1
        covered[self.reversed_fixed_map] += 1

        if not np.all(covered == 1):
            return False

        free_ok = np.array_equal(
            self.released_map[self.reversed_released_map], np.arange(self.free_count)
        )
        fixed_ok = np.array_equal(
            self.fixed_map[self.reversed_fixed_map], np.arange(self.fixed_count)
        )
        return bool(free_ok and fixed_ok)
