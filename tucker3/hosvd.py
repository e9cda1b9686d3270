"""
Title:
Authors:
- Lee Sael (sael@ajou.ac.kr) Ajou University
- Sang Suk Lee, Ajou University
- HeaWon Moon, Ajou University

This software may be used only for research evaluation purposes.
For other purposes (e.g., commercial), please contact the authors.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import tensorly as tl

# local imports
from tucker3.exceptions import DecompositionError, ShapeMismatchError
from tucker3.svd import SymmetricEigenSolver, get_solver
from tucker3.tensor_edit import matricize

logger = logging.getLogger(__name__)

MODE_NAMES = ("lateral", "frontal", "horizontal")


def _check_ranks(data, ranks):
    shape = tl.shape(data)
    if len(shape) != 3:
        raise ShapeMismatchError(f"HOSVD expects a 3-tensor, got shape {shape}")
    ranks = tuple(int(r) for r in ranks)
    if len(ranks) != 3:
        raise ShapeMismatchError(f"expected three ranks, got {ranks}")
    for mode, (r, n) in enumerate(zip(ranks, shape)):
        if not 1 <= r <= n:
            raise ShapeMismatchError(f"rank for mode {mode} ({r}) is out of valid range [1, {n}]")
    return ranks


def _run_modes(fn, workers):
    """Evaluate ``fn(mode)`` for the three modes, on a thread pool when workers > 1."""
    if workers > 1:
        with ThreadPoolExecutor(max_workers=min(workers, 3)) as pool:
            return list(pool.map(fn, range(3)))
    return [fn(mode) for mode in range(3)]


def _leading_vectors(u, rank, mode, what):
    if u.shape[1] < rank:
        raise DecompositionError(
            f"{what} for mode {mode} returned {u.shape[1]} directions, {rank} requested")
    return np.ascontiguousarray(u[:, :rank])


def mode_singular_values(data, mode, solver=None):
    """Singular values of the mode-`mode` unfolding, largest first."""
    solver = solver or get_solver()
    _, s, ok = solver.solve(tl.tensor(matricize(data, mode), dtype=np.float64))
    if not ok:
        raise DecompositionError(f"SVD of the {MODE_NAMES[mode]} matricization did not converge")
    return s


def compute_bases(data, ranks, solver=None, workers=1):
    """
    Higher-order SVD: the leading left singular vectors of every mode unfolding.

    Parameters
    ----------
    data : ndarray
        tensor of shape ``(I1, I2, I3)``
    ranks : sequence of int
        ``(J1, J2, J3)`` with ``1 <= J_k <= I_k``
    solver : SVDSolver, optional
        defaults to the configured solver
    workers : int
        the three SVDs are independent and run concurrently when > 1

    Returns
    -------
    list of ndarray
        float64 bases of shapes ``(I_k, J_k)``
    """
    ranks = _check_ranks(data, ranks)
    solver = solver or get_solver()

    def basis(mode):
        unfolding = tl.tensor(matricize(data, mode), dtype=np.float64)
        logger.debug(f"SVD of {MODE_NAMES[mode]} matricization {unfolding.shape}")
        u, _, ok = solver.solve(unfolding, n_components=ranks[mode])
        if not ok:
            raise DecompositionError(
                f"SVD of the {MODE_NAMES[mode]} matricization {unfolding.shape} did not converge")
        return _leading_vectors(u, ranks[mode], mode, "SVD")

    return _run_modes(basis, workers)


def compute_bases_via_eigendecomposition(data, ranks, eigensolver=None, workers=1):
    """
    Same bases as :func:`compute_bases`, obtained from the eigenvectors of each
    mode's covariance matrix ``A_(k) A_(k)^T``. Cheaper when the unfoldings are
    very wide, less accurate for small singular values.
    """
    ranks = _check_ranks(data, ranks)
    eigensolver = eigensolver or SymmetricEigenSolver()

    def basis(mode):
        unfolding = tl.tensor(matricize(data, mode), dtype=np.float64)
        covariance = tl.dot(unfolding, tl.transpose(unfolding))
        logger.debug(f"eigendecomposition of {MODE_NAMES[mode]} covariance {covariance.shape}")
        u, _, ok = eigensolver.solve(covariance, n_components=ranks[mode])
        if not ok:
            raise DecompositionError(
                f"eigendecomposition of the {MODE_NAMES[mode]} covariance {covariance.shape} did not converge")
        return _leading_vectors(u, ranks[mode], mode, "eigendecomposition")

    return _run_modes(basis, workers)
