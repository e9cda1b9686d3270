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
from pydantic import ValidationError

from tucker3.config import Settings, settings
from tucker3.svd import RandomizedSVD, get_solver
from tucker3.tucker3_tensor import Tucker3Tensor


def test_settings_default_values(monkeypatch):
    for name in ("DTYPE", "WORKERS", "DEADLINE", "SVD_SOLVER", "RANDOM_STATE", "LOG_LEVEL"):
        monkeypatch.delenv(f"TUCKER3_{name}", raising=False)
    s = Settings()
    assert s.DTYPE == "float32"
    assert s.WORKERS == 1
    assert s.DEADLINE is None
    assert s.SVD_SOLVER == "lapack"
    assert s.LOG_LEVEL == "INFO"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("TUCKER3_DTYPE", "Float64")
    monkeypatch.setenv("TUCKER3_WORKERS", "4")
    monkeypatch.setenv("TUCKER3_DEADLINE", "2.5")
    monkeypatch.setenv("tucker3_svd_solver", "randomized")
    monkeypatch.setenv("TUCKER3_LOG_LEVEL", "debug")
    s = Settings()
    assert s.DTYPE == "float64"
    assert s.WORKERS == 4
    assert s.DEADLINE == 2.5
    assert s.SVD_SOLVER == "randomized"
    assert s.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("name, value", [
    ("TUCKER3_DTYPE", "int32"),
    ("TUCKER3_WORKERS", "0"),
    ("TUCKER3_SVD_SOLVER", "qr"),
])
def test_invalid_settings(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings()


def test_defaults_are_read_at_call_time(monkeypatch):
    monkeypatch.setattr(settings, "DTYPE", "float64")
    monkeypatch.setattr(settings, "SVD_SOLVER", "randomized")
    assert Tucker3Tensor.zeros((1, 1, 1), (2, 2, 2)).dtype == np.float64
    assert isinstance(get_solver(), RandomizedSVD)
