# barfem/solve.py
"""
STATIC LINEAR ANALYSIS: per-load-case solve on a shared factorization
=====================================================================

PURPOSE:
--------
``analyse(model)`` does the expensive, load-independent work once:

    1. free/fixed partition of the 6N DOFs from the node constraints
    2. sparse global stiffness K
    3. blocks Kff, Kfs, Kss and the Cholesky factor of Kff

and returns a StaticLinearAnalysisResult. Each load case is then solved on
demand by reusing the factor:

    p  = nodal loads + equivalent nodal loads of member loads (global axes)
    pf, ps_applied = p split by the partition
    us = prescribed settlements (settlement case only, fixed DOFs only)
    uf, ps = system.solve(pf, us)

The stored full vectors are:

    displacements[case]   u  (uf on free DOFs, us on fixed DOFs)
    forces[case]          K·u (pf on free DOFs, ps on fixed DOFs)
    loads[case]           p

so the support reaction at a fixed DOF is ``forces - loads``.

THREAD SAFETY:
--------------
The partition, the blocks and the factor are read-only after ``analyse``.
Member loads are collected per call into a local dict, and every call uses
its own scratch pool, so different load cases can be solved concurrently.
``add_analysis_result_if_not_exists`` holds a per-case lock, so a case is
computed once even when requested from several threads.

USAGE:
------
    result = analyse(model)
    result.add_analysis_results([dead, live], max_workers=4)
    tip = result.node_displacement(model.nodes[-1], live)
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional

import numpy as np
from tqdm import tqdm

from .assembly import assemble_model_K
from .config import CONFIG, SolverConfig
from .elements import bar_equivalent_nodal_loads, bar_helpers
from .errors import InvalidArgumentError
from .kernel.assemble import assemble_global_F, partition_stiffness
from .kernel.dof import DOFManager, DofPartition
from .kernel.linalg import MatrixPool
from .kernel.solve import PartitionedSystem
from .model import LoadCase, Model, Node

logger = logging.getLogger(__name__)


class StaticLinearAnalysisResult:
    """
    Results of a linear static analysis, computed lazily per load case.

    Parameters:
    -----------
    model : Model
    partition : DofPartition
        Free/fixed split matching ``system``
    system : PartitionedSystem
        Factored stiffness blocks
    settlements_case : LoadCase, optional
        The one case in which node settlements are applied
    config : SolverConfig, optional
    """

    def __init__(self, model: Model, partition: DofPartition, system: PartitionedSystem,
                 settlements_case: Optional[LoadCase] = None, config: Optional[SolverConfig] = None):
        self.model = model
        self.partition = partition
        self.system = system
        self.settlements_case = settlements_case
        self.config = config if config is not None else CONFIG

        self.displacements: Dict[LoadCase, np.ndarray] = {}
        self.forces: Dict[LoadCase, np.ndarray] = {}
        self.loads: Dict[LoadCase, np.ndarray] = {}

        self._dof = DOFManager()
        self._index = model.node_indices()
        self._store_lock = threading.Lock()
        self._case_locks: Dict[LoadCase, threading.RLock] = {}

    def _lock_for(self, case: LoadCase) -> threading.RLock:
        with self._store_lock:
            return self._case_locks.setdefault(case, threading.RLock())

    # -------------------------------------------------------------------------
    # Load vectors
    # -------------------------------------------------------------------------

    def member_loads(self, case: LoadCase, pool: Optional[MatrixPool] = None) -> Dict[int, np.ndarray]:
        """
        Equivalent nodal loads of every member load in ``case``, global axes.

        Returns:
        --------
        Dict[int, np.ndarray]
            node index → summed 6-vector (only nodes that receive a load)
        """
        pool = pool if pool is not None else MatrixPool()
        member: Dict[int, np.ndarray] = {}

        for e in self.model.elements:
            case_loads = [load for load in e.loads if load.case == case]
            if not case_loads:
                continue

            helpers = bar_helpers(e, pool=pool, config=self.config)
            for load in case_loads:
                f = bar_equivalent_nodal_loads(e, load, helpers)
                for node, fn in zip(e.nodes, f):
                    i = self._index[id(node)]
                    member[i] = member.get(i, np.zeros(6)) + fn

        return member

    def load_vector(self, case: LoadCase, member: Optional[Dict[int, np.ndarray]] = None) -> np.ndarray:
        """Full 6N load vector: explicit nodal loads + member loads of ``case``."""
        if member is None:
            member = self.member_loads(case)

        contributions = [
            (self._dof.node_dofs(i), f) for i, f in member.items()
        ]
        for i, node in enumerate(self.model.nodes):
            for load in node.loads:
                if load.case == case:
                    contributions.append((self._dof.node_dofs(i), load.force))

        return assemble_global_F(self._dof.ndof(len(self.model.nodes)), contributions)

    def prescribed_displacements(self, case: LoadCase) -> np.ndarray:
        """Full 6N vector of settlements; zero unless ``case`` is the settlement case."""
        u = np.zeros(self._dof.ndof(len(self.model.nodes)), dtype=float)
        if self.settlements_case is None or case != self.settlements_case:
            return u
        for i, node in enumerate(self.model.nodes):
            u[self._dof.node_dofs(i)] = node.settlements
        return u

    # -------------------------------------------------------------------------
    # Solving
    # -------------------------------------------------------------------------

    def add_analysis_result(self, case: LoadCase) -> None:
        """
        Solve ``case`` and store (or overwrite) its result.

        Nothing is stored if any step raises.
        """
        t0 = time.perf_counter()

        p = self.load_vector(case, self.member_loads(case, MatrixPool()))
        t1 = time.perf_counter()

        free = self.partition.reversed_released_map
        fixed = self.partition.reversed_fixed_map

        pf = p[free]
        us = self.prescribed_displacements(case)[fixed]

        uf, ps = self.system.solve(pf, us)
        t2 = time.perf_counter()

        u = np.zeros_like(p)
        f = np.zeros_like(p)
        u[free] = uf
        u[fixed] = us
        f[free] = pf
        f[fixed] = ps

        with self._store_lock:
            self.displacements[case] = u
            self.forces[case] = f
            self.loads[case] = p

        logger.debug(
            "Case %s: loads %.2f ms, solve %.2f ms, settlement=%s",
            case.name, (t1 - t0) * 1e3, (t2 - t1) * 1e3, bool(np.any(us != 0)),
        )

    def add_analysis_result_if_not_exists(self, case: LoadCase) -> bool:
        """
        Solve ``case`` unless a result is already stored.

        Returns:
        --------
        bool
            True if the case was computed by this call
        """
        with self._lock_for(case):
            if case in self.displacements:
                return False
            self.add_analysis_result(case)
            return True

    def add_analysis_results(self, cases: Iterable[LoadCase], max_workers: Optional[int] = None,
                             show_progress: Optional[bool] = None) -> None:
        """
        Ensure results for several load cases, optionally on a thread pool.

        Parameters:
        -----------
        cases : iterable of LoadCase
        max_workers : int, optional
            Threads to use; None or 1 solves sequentially (default: config)
        show_progress : bool, optional
            Show a tqdm progress bar (default: config)
        """
        cases = list(dict.fromkeys(cases))
        workers = max_workers if max_workers is not None else self.config.max_workers
        show_progress = show_progress if show_progress is not None else self.config.show_progress

        if workers is None or workers <= 1:
            iterator = tqdm(cases, desc="Solving load cases") if show_progress else cases
            for case in iterator:
                self.add_analysis_result_if_not_exists(case)
            return

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.add_analysis_result_if_not_exists, c) for c in cases]
            done = as_completed(futures)
            iterator = tqdm(done, total=len(futures), desc="Solving load cases") if show_progress else done
            for future in iterator:
                future.result()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def support_reactions(self, case: LoadCase) -> np.ndarray:
        """
        Full 6N vector of support reactions (zero on free DOFs).

        At a fixed DOF the solved force K·u also contains the load applied
        directly on that DOF, which is subtracted here.
        """
        self.add_analysis_result_if_not_exists(case)
        reactions = np.zeros_like(self.forces[case])
        fixed = self.partition.reversed_fixed_map
        reactions[fixed] = self.forces[case][fixed] - self.loads[case][fixed]
        return reactions

    def _node_dofs(self, node: Node) -> List[int]:
        try:
            return self._dof.node_dofs(self._index[id(node)])
        except KeyError:
            raise InvalidArgumentError(f"Node {node.label or node.location} is not part of the model") from None

    def node_displacement(self, node: Node, case: LoadCase) -> np.ndarray:
        """Displacement 6-vector [dx, dy, dz, rx, ry, rz] of ``node`` in ``case``."""
        self.add_analysis_result_if_not_exists(case)
        return self.displacements[case][self._node_dofs(node)]

    def node_force(self, node: Node, case: LoadCase) -> np.ndarray:
        """Force 6-vector K·u at ``node`` in ``case``."""
        self.add_analysis_result_if_not_exists(case)
        return self.forces[case][self._node_dofs(node)]


def analyse(model: Model, settlements_case: Optional[LoadCase] = None,
            config: Optional[SolverConfig] = None) -> StaticLinearAnalysisResult:
    """
    Partition, assemble and factor ``model``; load cases are solved on demand.

    Raises:
    -------
    MechanismError
        If the free-free stiffness is singular or ill-conditioned
        (insufficient supports, disconnected parts, unrestrained rotations)
    """
    config = config if config is not None else CONFIG
    t0 = time.perf_counter()

    dof = DOFManager()
    partition = DofPartition.from_constraints([n.constraints for n in model.nodes], dof)
    K = assemble_model_K(model, config)
    t1 = time.perf_counter()

    kff, kfs, kss = partition_stiffness(K, partition)
    system = PartitionedSystem(kff, kfs, kss, reorder=config.reorder,
                               pivot_ratio_limit=config.pivot_ratio_limit)
    t2 = time.perf_counter()

    logger.debug("analyse: assembly %.2f ms, factorization %.2f ms", (t1 - t0) * 1e3, (t2 - t1) * 1e3)
    return StaticLinearAnalysisResult(model, partition, system, settlements_case, config)
