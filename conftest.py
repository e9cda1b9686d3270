"""
Title:
Authors:
- Lee Sael (sael@ajou.ac.kr) Ajou University
- Sang Suk Lee, Ajou University
- HeaWon Moon, Ajou University

This software may be used only for research evaluation purposes.
For other purposes (e.g., commercial), please contact the authors.
"""
import numpy as np
import pytest

from tucker3.tucker3_tensor import Tucker3Tensor


def random_model(ranks, shape, seed=0, dtype=np.float64):
    rng = np.random.default_rng(seed)
    core = rng.standard_normal(ranks)
    factors = [rng.standard_normal((n, r)) for n, r in zip(shape, ranks)]
    return Tucker3Tensor(core, *factors, dtype=dtype)


def snapshot(model):
    return [model.core] + model.factors


def unchanged(model, before):
    return all(np.array_equal(a, b) for a, b in zip(snapshot(model), before))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
