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

import numpy as np
from sklearn.utils.extmath import randomized_svd

from tucker3.config import settings

logger = logging.getLogger(__name__)


class SVDSolver:
    """
    Solver contract used by the HOSVD engine.

    ``solve(matrix, n_components=None)`` returns ``(u, s, ok)``: a matrix whose
    columns are left singular vectors sorted by decreasing singular value, the
    singular values, and a success flag. On failure ``u`` and ``s`` are None.
    Solvers always work in float64.
    """

    def solve(self, matrix, n_components=None):
        raise NotImplementedError


def _finite(*arrays):
    return all(np.all(np.isfinite(a)) for a in arrays)


class LapackSVD(SVDSolver):
    """Dense SVD via ``numpy.linalg.svd``. Returns every left singular vector."""

    def solve(self, matrix, n_components=None):
        matrix = np.asarray(matrix, dtype=np.float64)
        rows, cols = matrix.shape
        try:
            # only need the complete I x I basis when the unfolding is taller than wide
            u, s, _ = np.linalg.svd(matrix, full_matrices=cols < rows)
        except np.linalg.LinAlgError as e:
            logger.warning(f"LAPACK SVD failed on {matrix.shape} matrix: {e}")
            return None, None, False
        if not _finite(u, s):
            logger.warning(f"LAPACK SVD produced non-finite values on {matrix.shape} matrix")
            return None, None, False
        return u, s, True


class RandomizedSVD(SVDSolver):
    """Truncated SVD via scikit-learn's ``randomized_svd``."""

    def __init__(self, n_oversamples=10, n_iter="auto", random_state=None):
        self.n_oversamples = n_oversamples
        self.n_iter = n_iter
        self.random_state = settings.RANDOM_STATE if random_state is None else random_state

    def solve(self, matrix, n_components=None):
        matrix = np.asarray(matrix, dtype=np.float64)
        if n_components is None:
            n_components = min(matrix.shape)
        try:
            u, s, _ = randomized_svd(matrix, min(n_components, min(matrix.shape)),
                                     n_oversamples=self.n_oversamples,
                                     n_iter=self.n_iter, random_state=self.random_state)
        except (np.linalg.LinAlgError, ValueError) as e:
            logger.warning(f"randomized SVD failed on {matrix.shape} matrix: {e}")
            return None, None, False
        if not _finite(u, s):
            logger.warning(f"randomized SVD produced non-finite values on {matrix.shape} matrix")
            return None, None, False
        if n_components > u.shape[1]:
            # tall unfolding: complete the basis with an orthonormal complement of span(u)
            q, _ = np.linalg.qr(u, mode='complete')
            u = np.hstack([u, q[:, u.shape[1]:]])
        return u, s, True


class SymmetricEigenSolver(SVDSolver):
    """
    Eigendecomposition of a symmetric (covariance) matrix via ``numpy.linalg.eigh``.

    For ``C = A A^T`` the eigenvectors are the left singular vectors of ``A`` and
    the square roots of the eigenvalues its singular values, so the result obeys
    the same ``(u, s, ok)`` contract, sorted by decreasing eigenvalue.
    """

    def solve(self, matrix, n_components=None):
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"eigendecomposition needs a square matrix, got {matrix.shape}")
        try:
            eigvals, eigvecs = np.linalg.eigh(matrix)
        except np.linalg.LinAlgError as e:
            logger.warning(f"eigendecomposition failed on {matrix.shape} matrix: {e}")
            return None, None, False
        if not _finite(eigvals, eigvecs):
            logger.warning(f"eigendecomposition produced non-finite values on {matrix.shape} matrix")
            return None, None, False
        order = np.argsort(eigvals)[::-1]
        eigvals = eigvals[order]
        eigvecs = eigvecs[:, order]
        return eigvecs, np.sqrt(np.clip(eigvals, 0, None)), True


def get_solver(name=None):
    name = (name or settings.SVD_SOLVER).lower()
    if name == "lapack":
        return LapackSVD()
    if name == "randomized":
        return RandomizedSVD()
    raise ValueError(f"unknown SVD solver {name!r}, expected 'lapack' or 'randomized'")
