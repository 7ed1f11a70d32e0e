# qbell/settings.py
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime settings for qbell.
    """

    # --- Experiments ---
    TRIALS: int = 1000
    SEED: int | None = None  # None = fresh OS entropy every run

    # --- Simulation ---
    BACKEND: str = "statevector"  # "statevector" | "stim" | "qiskit"
    WORKERS: int = 1
    DRIFT_TOLERANCE: float = 1e-9
    FATAL_DRIFT_TOLERANCE: float = 1e-6

    # --- Logging ---
    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="QBELL_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
