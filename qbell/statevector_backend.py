# qbell/statevector_backend.py
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from qbell.measurement import measure
from qbell.quantum_backend import Gate, QuantumBackend, QuantumState, RandomSource
from qbell.statevector import DRIFT_TOLERANCE, FATAL_DRIFT_TOLERANCE, StateVector, apply_gate


class StateVectorState(QuantumState):
    """Dense numpy state-vector backend."""

    def __init__(
        self,
        n_qubits: int,
        rng: RandomSource,
        *,
        drift_tolerance: float = DRIFT_TOLERANCE,
        fatal_tolerance: float = FATAL_DRIFT_TOLERANCE,
    ):
        self.sv = StateVector(n_qubits, drift_tolerance=drift_tolerance, fatal_tolerance=fatal_tolerance)
        self.n = n_qubits
        self.rng = rng

    # ---------- public API ----------

    def prepare(self, bits: Sequence[int]) -> None:
        self.sv.set_basis(bits)

    def apply_gate(self, gate: Gate) -> None:
        apply_gate(self.sv, gate)

    def measure(self, qubits: Sequence[int]) -> Tuple[int, ...]:
        bits, _ = measure(self.sv, qubits, self.rng)
        return bits

    def probabilities(self) -> np.ndarray:
        return self.sv.probabilities()


class StateVectorBackend(QuantumBackend):
    """Factory for numpy state vectors; the reference engine."""

    name = "statevector"

    def __init__(
        self,
        *,
        drift_tolerance: float = DRIFT_TOLERANCE,
        fatal_tolerance: float = FATAL_DRIFT_TOLERANCE,
    ):
        self.drift_tolerance = drift_tolerance
        self.fatal_tolerance = fatal_tolerance

    def generate_state(self, n_qubits: int, rng: RandomSource) -> QuantumState:
        return StateVectorState(
            n_qubits,
            rng,
            drift_tolerance=self.drift_tolerance,
            fatal_tolerance=self.fatal_tolerance,
        )
