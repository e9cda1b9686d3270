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
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
import tensorly as tl

# local imports
from tucker3.exceptions import ContractionCancelled, DeadlineExceeded, ShapeMismatchError
from tucker3.tensor_edit import mode_dot_F, multi_mode_dot_F

logger = logging.getLogger(__name__)

SLABS_PER_WORKER = 4


class _Budget:
    def __init__(self, deadline=None, cancel_event=None):
        self.deadline = deadline
        self.cancel_event = cancel_event
        self.expires = None if deadline is None else time.monotonic() + deadline

    def check(self, what):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ContractionCancelled(f"{what} cancelled")
        if self.expires is not None and time.monotonic() >= self.expires:
            raise DeadlineExceeded(f"{what} exceeded its {self.deadline}s deadline")


def _as_double(*arrays):
    return [tl.tensor(a, dtype=np.float64) for a in arrays]


def _last_mode_product(tensor, matrix, workers, budget, what):
    """
    ``tensor x_3 matrix`` with the output split into disjoint slabs along mode 3.
    Each slab only reads the shared inputs and writes its own cells.
    """
    out = np.empty(tensor.shape[:2] + (matrix.shape[0],), dtype=np.float64)
    n_slabs = min(matrix.shape[0], max(workers, 1) * SLABS_PER_WORKER)
    slabs = [s for s in np.array_split(np.arange(matrix.shape[0]), n_slabs) if len(s)]

    def slab(rows):
        budget.check(what)
        out[:, :, rows[0]:rows[-1] + 1] = mode_dot_F(tensor, matrix[rows[0]:rows[-1] + 1], 2)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(slab, rows) for rows in slabs]
            try:
                for f in as_completed(futures):
                    f.result()
            except BaseException:
                for f in futures:
                    f.cancel()
                raise
    else:
        for rows in slabs:
            slab(rows)
    logger.debug(f"{what}: {len(slabs)} slabs on {workers} worker(s)")
    return out


def derive_core(data, u1, u2, u3, dtype=None, workers=1, deadline=None, cancel_event=None):
    """
    Core tensor of ``data`` against the bases ``u1, u2, u3``:

    ``core[j1,j2,j3] = sum_{i1,i2,i3} u1[i1,j1] u2[i2,j2] u3[i3,j3] data[i1,i2,i3]``

    Accumulated in float64 and narrowed to `dtype` (if given) on return.

    Parameters
    ----------
    data : ndarray
        tensor of shape ``(I1, I2, I3)``
    u1, u2, u3 : ndarray
        bases of shapes ``(I_k, J_k)``
    dtype : numpy dtype, optional
    workers : int
        threads sharing the output slabs
    deadline : float, optional
        budget in seconds, checked before every slab
    cancel_event : threading.Event, optional

    Returns
    -------
    ndarray
        core of shape ``(J1, J2, J3)``
    """
    data, u1, u2, u3 = _as_double(data, u1, u2, u3)
    expected = (u1.shape[0], u2.shape[0], u3.shape[0])
    if tl.ndim(data) != 3 or tuple(data.shape) != expected:
        raise ShapeMismatchError(
            f"data of shape {tuple(data.shape)} does not match basis rows {expected}")

    budget = _Budget(deadline, cancel_event)
    budget.check("core derivation")
    partial = multi_mode_dot_F(data, [u1, u2], modes=[0, 1], transpose=True)
    core = _last_mode_product(partial, tl.transpose(u3), workers, budget, "core derivation")
    return core if dtype is None else core.astype(dtype)


def reconstruct(core, u1, u2, u3, dtype=None, workers=1, deadline=None, cancel_event=None):
    """
    Inverse multilinear expansion

    ``data[i1,i2,i3] = sum_{j1,j2,j3} u1[i1,j1] u2[i2,j2] u3[i3,j3] core[j1,j2,j3]``

    with the same precision, concurrency and deadline handling as :func:`derive_core`.
    """
    core, u1, u2, u3 = _as_double(core, u1, u2, u3)
    expected = (u1.shape[1], u2.shape[1], u3.shape[1])
    if tl.ndim(core) != 3 or tuple(core.shape) != expected:
        raise ShapeMismatchError(
            f"core of shape {tuple(core.shape)} does not match basis columns {expected}")

    budget = _Budget(deadline, cancel_event)
    budget.check("reconstruction")
    partial = multi_mode_dot_F(core, [u1, u2], modes=[0, 1])
    data = _last_mode_product(partial, u3, workers, budget, "reconstruction")
    return data if dtype is None else data.astype(dtype)
