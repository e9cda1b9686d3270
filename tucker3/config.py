"""
Title:
Authors:
- Lee Sael (sael@ajou.ac.kr) Ajou University
- Sang Suk Lee, Ajou University
- HeaWon Moon, Ajou University

This software may be used only for research evaluation purposes.
For other purposes (e.g., commercial), please contact the authors.
"""
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_DTYPES = ("float16", "float32", "float64")
SVD_SOLVERS = ("lapack", "randomized")


class Settings(BaseSettings):
    DTYPE: str = "float32"
    WORKERS: int = 1
    DEADLINE: Optional[float] = None   # seconds, per contraction
    SVD_SOLVER: str = "lapack"
    RANDOM_STATE: int = 0
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TUCKER3_", case_sensitive=False)

    @field_validator("DTYPE")
    def validate_dtype(cls, v):
        v = v.strip().lower()
        if v not in STORAGE_DTYPES:
            raise ValueError(f"DTYPE must be one of {STORAGE_DTYPES}, got {v!r}")
        return v

    @field_validator("WORKERS")
    def validate_workers(cls, v):
        if v < 1:
            raise ValueError(f"WORKERS must be at least 1, got {v}")
        return v

    @field_validator("SVD_SOLVER")
    def validate_solver(cls, v):
        v = v.strip().lower()
        if v not in SVD_SOLVERS:
            raise ValueError(f"SVD_SOLVER must be one of {SVD_SOLVERS}, got {v!r}")
        return v

    @field_validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        return v.strip().upper()


settings = Settings()
