"""
Title:
Authors:
- Lee Sael (sael@ajou.ac.kr) Ajou University
- Sang Suk Lee, Ajou University
- HeaWon Moon, Ajou University

This software may be used only for research evaluation purposes.
For other purposes (e.g., commercial), please contact the authors.
"""
import threading

import numpy as np
import pytest
import tensorly as tl

from tucker3.contraction import derive_core, reconstruct
from tucker3.exceptions import ContractionCancelled, DeadlineExceeded, ShapeMismatchError

SHAPE = (5, 6, 7)
RANKS = (2, 3, 4)


@pytest.fixture
def operands(rng):
    data = rng.standard_normal(SHAPE)
    factors = [rng.standard_normal((n, r)) for n, r in zip(SHAPE, RANKS)]
    core = rng.standard_normal(RANKS)
    return data, core, factors


@pytest.mark.parametrize("workers", [1, 2, 3])
def test_derive_core_matches_contraction_formula(operands, workers):
    data, _, (u1, u2, u3) = operands
    expected = np.einsum('abc,ai,bj,ck->ijk', data, u1, u2, u3)
    core = derive_core(data, u1, u2, u3, workers=workers)
    assert core.shape == RANKS
    assert core.dtype == np.float64
    assert np.allclose(core, expected)


@pytest.mark.parametrize("workers", [1, 4])
def test_reconstruct_matches_tensorly(operands, workers):
    _, core, factors = operands
    expected = tl.tucker_to_tensor((core, factors))
    data = reconstruct(core, *factors, workers=workers)
    assert data.shape == SHAPE
    assert np.allclose(data, expected)


def test_more_workers_than_slabs(operands):
    data, _, (u1, u2, u3) = operands
    expected = derive_core(data, u1, u2, u3)
    assert np.allclose(derive_core(data, u1, u2, u3, workers=16), expected)


def test_narrowing_to_storage_dtype(operands):
    data, core, factors = operands
    narrowed = derive_core(data, *factors, dtype=np.float32)
    assert narrowed.dtype == np.float32
    assert np.array_equal(narrowed, derive_core(data, *factors).astype(np.float32))
    assert reconstruct(core, *factors, dtype=np.float32).dtype == np.float32


def test_float32_inputs_accumulate_in_double(operands):
    data, _, factors = operands
    core = derive_core(data.astype(np.float32), *[u.astype(np.float32) for u in factors])
    assert core.dtype == np.float64


def test_derive_core_shape_mismatch(operands):
    data, _, (u1, u2, u3) = operands
    with pytest.raises(ShapeMismatchError):
        derive_core(data[:4], u1, u2, u3)


def test_reconstruct_shape_mismatch(operands):
    _, core, (u1, u2, u3) = operands
    with pytest.raises(ShapeMismatchError):
        reconstruct(core[:1], u1, u2, u3)


def test_deadline_exceeded(operands):
    data, core, factors = operands
    with pytest.raises(DeadlineExceeded):
        derive_core(data, *factors, deadline=0)
    with pytest.raises(DeadlineExceeded):
        reconstruct(core, *factors, deadline=0, workers=2)


def test_generous_deadline(operands):
    data, _, factors = operands
    assert derive_core(data, *factors, deadline=60).shape == RANKS


def test_cancelled(operands):
    data, core, factors = operands
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(ContractionCancelled):
        derive_core(data, *factors, cancel_event=cancel)
    with pytest.raises(ContractionCancelled):
        reconstruct(core, *factors, cancel_event=cancel, workers=3)
