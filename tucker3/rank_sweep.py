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
import os
import time

import numpy as np
import tensorly as tl
import matplotlib.pyplot as plt

# local imports
from tucker3.config import settings
from tucker3.tucker3_tensor import Tucker3Tensor

logger = logging.getLogger(__name__)

OUT_PATH = 'out/'
SHAPE = (32, 32, 32)
TRUE_RANK = (6, 6, 6)
NOISE = 0.01
RANKS = [(r, r, r) for r in range(1, 11)]


def random_low_rank_tensor(shape, ranks, noise=0.0, random_state=None):
    """Dense tensor of multilinear rank `ranks`, plus optional gaussian noise."""
    data = tl.random.random_tucker(shape, list(ranks), full=True, random_state=random_state)
    data = np.asarray(data, dtype=np.float64)
    if noise > 0:
        rng = np.random.default_rng(random_state)
        data = data + noise * tl.norm(data) / np.sqrt(data.size) * rng.standard_normal(shape)
    return data


def rank_sweep(data, ranks, dtype=None, solver=None):
    """
    Decompose `data` once at the largest requested rank and derive every
    other rank by progressive rank reduction.

    Returns the relative reconstruction error and the time spent per rank.
    """
    full_rank = tuple(max(r[k] for r in ranks) for k in range(3))
    full = Tucker3Tensor.zeros(full_rank, data.shape, dtype=dtype)
    start = time.time()
    full.decompose(data, solver=solver)
    decompose_time = time.time() - start
    logger.info(f"full rank {full_rank} decomposition took {decompose_time:.3f}s")

    errors = []
    times = []
    for rank in ranks:
        start = time.time()
        reduced = Tucker3Tensor.zeros(rank, data.shape, dtype=full.dtype)
        reduced.progressive_rank_reduction(full)
        error = reduced.reconstruction_error(data, relative=True)
        end = time.time()
        logger.info(f"Tucker3 {rank} Err/Time:\t{error}\t{end - start}")
        errors.append(error)
        times.append(end - start)
    return errors, times


def save_rank_sweep(ranks, errors, times, out_path=OUT_PATH, name='tucker3_rank'):
    """Write the sweep as a tab separated table and an error/time figure."""
    os.makedirs(out_path, exist_ok=True)
    labels = [r[0] for r in ranks]
    table = os.path.join(out_path, f'{name}_out.txt')
    figure = os.path.join(out_path, f'{name}test.pdf')
    np.savetxt(table, np.column_stack((labels, errors, times)), delimiter='\t', fmt='%10.5f')

    fig, ax1 = plt.subplots()
    ax1.plot(labels, errors, 'bo-', label='error')
    ax1.set_xlabel("Tucker Rank [x,x,x]")
    ax1.set_ylabel("Normalized Reconstruction Error")
    ax1.tick_params(axis='y')

    ax2 = ax1.twinx()  # second axes that shares the same x-axis
    ax2.set_ylabel("Reduction Time")
    ax2.plot(labels, times, 'r^--', label='time')
    ax2.tick_params(axis='y')

    fig.tight_layout()  # otherwise the right y-label is slightly clipped
    fig.legend()
    fig.savefig(figure, format="pdf", bbox_inches="tight")
    plt.close(fig)
    return table, figure


def main():
    logging.basicConfig(level=settings.LOG_LEVEL)
    data = random_low_rank_tensor(SHAPE, TRUE_RANK, noise=NOISE, random_state=settings.RANDOM_STATE)
    errors, times = rank_sweep(data, RANKS)
    table, figure = save_rank_sweep(RANKS, errors, times)
    print(f'rank sweep written to {table} and {figure}')


if __name__ == "__main__":
    main()
