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
import math

import numpy as np
import tensorly as tl
from tensorly.tucker_tensor import TuckerTensor

# local imports
from tucker3.config import settings
from tucker3.contraction import derive_core, reconstruct
from tucker3.exceptions import ShapeMismatchError
from tucker3.hosvd import compute_bases, compute_bases_via_eigendecomposition
from tucker3.tensor_edit import reconstruction_error

logger = logging.getLogger(__name__)


def _integral(value, name):
    try:
        i = int(value)
    except (OverflowError, TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if i != value:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return i


def _subsampling_factor(factor):
    f = _integral(factor, "subsampling factor")
    if f < 1:
        raise ValueError(f"subsampling factor must be a positive integer, got {factor!r}")
    return f


class Tucker3Tensor:
    """
    Tucker3 model of a ``I1 x I2 x I3`` tensor: a ``J1 x J2 x J3`` core and the
    bases ``u1 (I1 x J1)``, ``u2 (I2 x J2)``, ``u3 (I3 x J3)``.

    See: Tucker, "Some mathematical notes on three-mode factor analysis",
    Psychometrika 31(3), 1966.

    The instance owns its arrays: everything passed in or handed out is copied.
    Shapes are fixed at construction and every setter or editor rejects a
    mismatch before touching any field.
    """

    def __init__(self, core, u1, u2, u3, dtype=None):
        self._dtype = np.dtype(settings.DTYPE if dtype is None else dtype)
        core, u1, u2, u3 = [tl.tensor(a, dtype=self._dtype) for a in (core, u1, u2, u3)]
        if tl.ndim(core) != 3:
            raise ShapeMismatchError(f"core must be a 3-tensor, got shape {core.shape}")
        for k, u in enumerate((u1, u2, u3)):
            if tl.ndim(u) != 2 or u.shape[1] != core.shape[k]:
                raise ShapeMismatchError(
                    f"basis u{k + 1} of shape {u.shape} does not match core extent {core.shape[k]} in mode {k}")
        self._core = core
        self._u = [u1, u2, u3]

    @classmethod
    def zeros(cls, ranks, shape, dtype=None):
        """Zero-initialised model with core ``ranks`` over a tensor of ``shape``."""
        ranks = tuple(int(r) for r in ranks)
        shape = tuple(int(n) for n in shape)
        if len(ranks) != 3 or len(shape) != 3:
            raise ShapeMismatchError(f"ranks {ranks} and shape {shape} must both have three entries")
        return cls(np.zeros(ranks), *[np.zeros((n, r)) for n, r in zip(shape, ranks)], dtype=dtype)

    def __repr__(self):
        return f"Tucker3Tensor(ranks={self.ranks}, shape={self.shape}, dtype={self.dtype})"

    @property
    def ranks(self):
        return tuple(self._core.shape)

    @property
    def shape(self):
        return tuple(u.shape[0] for u in self._u)

    @property
    def dtype(self):
        return self._dtype

    # accessors hand out copies
    @property
    def core(self):
        return self._core.copy()

    @core.setter
    def core(self, core):
        self._core = self._checked(core, self.ranks, "core")

    @property
    def u1(self):
        return self._u[0].copy()

    @u1.setter
    def u1(self, u):
        self._set_basis(0, u)

    @property
    def u2(self):
        return self._u[1].copy()

    @u2.setter
    def u2(self, u):
        self._set_basis(1, u)

    @property
    def u3(self):
        return self._u[2].copy()

    @u3.setter
    def u3(self, u):
        self._set_basis(2, u)

    @property
    def factors(self):
        return [u.copy() for u in self._u]

    def _checked(self, array, shape, name):
        array = tl.tensor(array, dtype=self._dtype)
        if tuple(array.shape) != tuple(shape):
            raise ShapeMismatchError(f"{name} must have shape {tuple(shape)}, got {tuple(array.shape)}")
        return array

    def _set_basis(self, mode, u):
        self._u[mode] = self._checked(u, (self.shape[mode], self.ranks[mode]), f"u{mode + 1}")

    def _assign(self, core, factors):
        # narrowing from float64 happens here, after all checks have passed
        self._core = tl.tensor(core, dtype=self._dtype)
        self._u = [tl.tensor(u, dtype=self._dtype) for u in factors]

    def copy(self):
        return Tucker3Tensor(self._core, *self._u, dtype=self._dtype)

    def allclose(self, other, rtol=1e-5, atol=1e-8):
        if self.ranks != other.ranks or self.shape != other.shape:
            return False
        pairs = zip([self._core] + self._u, [other._core] + other._u)
        return all(np.allclose(a, b, rtol=rtol, atol=atol) for a, b in pairs)

    def to_tensorly(self):
        return TuckerTensor((self.core, self.factors))

    def _check_data(self, data):
        data = tl.tensor(data)
        if tuple(tl.shape(data)) != self.shape:
            raise ShapeMismatchError(f"data of shape {tuple(tl.shape(data))} does not match {self.shape}")
        return data

    ######################################
    # decomposition and reconstruction
    ######################################

    def hosvd(self, data, solver=None, workers=None):
        """Overwrite the bases with the truncated HOSVD bases of `data`."""
        data = self._check_data(data)
        workers = workers or settings.WORKERS
        factors = compute_bases(data, self.ranks, solver=solver, workers=workers)
        self._u = [tl.tensor(u, dtype=self._dtype) for u in factors]

    def hosvd_on_eigs(self, data, eigensolver=None, workers=None):
        """HOSVD bases from the eigenvectors of each mode's covariance matrix."""
        data = self._check_data(data)
        workers = workers or settings.WORKERS
        factors = compute_bases_via_eigendecomposition(data, self.ranks, eigensolver=eigensolver,
                                                       workers=workers)
        self._u = [tl.tensor(u, dtype=self._dtype) for u in factors]

    def derive_core(self, data, workers=None, deadline=None, cancel_event=None):
        """Recompute the core of `data` against the current bases."""
        data = self._check_data(data)
        self._core = derive_core(data, *self._u, dtype=self._dtype,
                                 workers=workers or settings.WORKERS,
                                 deadline=settings.DEADLINE if deadline is None else deadline,
                                 cancel_event=cancel_event)

    def decompose(self, data, solver=None, method="svd", workers=None, deadline=None, cancel_event=None):
        """
        HOSVD followed by core derivation. Both results are computed in float64
        and stored only once both succeed.

        Parameters
        ----------
        data : ndarray
            tensor of shape ``self.shape``
        solver : SVDSolver, optional
            for ``method="svd"`` an SVD solver, for ``method="eig"`` an eigensolver
        method : {"svd", "eig"}
        workers, deadline, cancel_event :
            see :func:`tucker3.contraction.derive_core`
        """
        data = self._check_data(data)
        workers = workers or settings.WORKERS
        deadline = settings.DEADLINE if deadline is None else deadline
        logger.info(f"Decomposing tensor of shape {self.shape} to ranks {self.ranks} ({method})")
        if method == "svd":
            factors = compute_bases(data, self.ranks, solver=solver, workers=workers)
        elif method == "eig":
            factors = compute_bases_via_eigendecomposition(data, self.ranks, eigensolver=solver,
                                                           workers=workers)
        else:
            raise ValueError(f"unknown decomposition method {method!r}, expected 'svd' or 'eig'")
        # the core is derived against the stored (narrowed) bases
        factors = [tl.tensor(u, dtype=self._dtype) for u in factors]
        core = derive_core(data, *factors, workers=workers, deadline=deadline, cancel_event=cancel_event)
        self._assign(core, factors)

    def reconstruction(self, out=None, workers=None, deadline=None, cancel_event=None):
        """Expand core and bases to a full ``I1 x I2 x I3`` tensor, written to `out` if given."""
        if out is not None and tuple(out.shape) != self.shape:
            raise ShapeMismatchError(f"output of shape {tuple(out.shape)} does not match {self.shape}")
        logger.info(f"Reconstructing tensor of shape {self.shape} from ranks {self.ranks}")
        data = reconstruct(self._core, *self._u, dtype=self._dtype,
                           workers=workers or settings.WORKERS,
                           deadline=settings.DEADLINE if deadline is None else deadline,
                           cancel_event=cancel_event)
        if out is None:
            return data
        out[...] = data
        return out

    def reconstruction_error(self, data, relative=False):
        data = self._check_data(data)
        return reconstruction_error(data, self.reconstruction(), relative=relative)

    ######################################
    # rank / structure editors
    ######################################

    def progressive_rank_reduction(self, other):
        """
        Keep the first ``J_k`` columns of each basis of `other` and the leading
        ``J1 x J2 x J3`` block of its core. `other` has ranks ``K_k >= J_k``
        over the same tensor shape.
        """
        if other.shape != self.shape:
            raise ShapeMismatchError(f"rank reduction needs equal shapes, got {other.shape} and {self.shape}")
        if any(j > k for j, k in zip(self.ranks, other.ranks)):
            raise ShapeMismatchError(f"cannot reduce ranks {other.ranks} to larger ranks {self.ranks}")
        j1, j2, j3 = self.ranks
        logger.info(f"Reducing ranks {other.ranks} -> {self.ranks}")
        factors = [u[:, :j] for u, j in zip(other._u, self.ranks)]
        self._assign(other._core[:j1, :j2, :j3], factors)

    def _check_subsampling(self, other, factor):
        factor = _subsampling_factor(factor)
        if other.ranks != self.ranks:
            raise ShapeMismatchError(f"subsampling needs equal ranks, got {other.ranks} and {self.ranks}")
        expected = tuple(math.ceil(k / factor) for k in other.shape)
        if self.shape != expected:
            raise ShapeMismatchError(
                f"subsampling {other.shape} by {factor} gives {expected}, destination has {self.shape}")
        return factor

    def subsampling(self, other, factor):
        """Row ``i`` of each basis becomes row ``i * factor`` of `other`'s basis."""
        factor = self._check_subsampling(other, factor)
        logger.info(f"Subsampling {other.shape} -> {self.shape} (factor {factor})")
        self._assign(other._core, [u[::factor] for u in other._u])

    def subsampling_on_average(self, other, factor):
        """
        Like :meth:`subsampling`, but row ``i`` is the mean of source rows
        ``i * factor`` up to ``min((i + 1) * factor, K)``. The last window is
        shorter when `factor` does not divide the extent.
        """
        factor = self._check_subsampling(other, factor)
        logger.info(f"Subsampling on average {other.shape} -> {self.shape} (factor {factor})")
        factors = []
        for u in other._u:
            starts = np.arange(0, u.shape[0], factor)
            counts = np.diff(np.append(starts, u.shape[0]))
            sums = np.add.reduceat(u.astype(np.float64), starts, axis=0)
            factors.append(sums / counts[:, None])
        self._assign(other._core, factors)

    def region_of_interest(self, other, start_index1, end_index1, start_index2, end_index2,
                           start_index3, end_index3):
        """Copy rows ``[start_k, end_k)`` of every basis of `other`; the core is kept."""
        indices = (start_index1, end_index1, start_index2, end_index2, start_index3, end_index3)
        indices = [_integral(i, "region bound") for i in indices]
        bounds = list(zip(indices[0::2], indices[1::2]))
        if other.ranks != self.ranks:
            raise ShapeMismatchError(f"region of interest needs equal ranks, got {other.ranks} and {self.ranks}")
        for mode, ((start, end), extent) in enumerate(zip(bounds, other.shape)):
            if not 0 <= start < end <= extent:
                raise ShapeMismatchError(
                    f"region [{start}, {end}) in mode {mode} is not inside [0, {extent})")
            if end - start != self.shape[mode]:
                raise ShapeMismatchError(
                    f"region [{start}, {end}) in mode {mode} has {end - start} rows, destination has {self.shape[mode]}")
        logger.info(f"Region of interest {bounds} of {other.shape}")
        self._assign(other._core, [u[start:end] for u, (start, end) in zip(other._u, bounds)])
